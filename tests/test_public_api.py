from __future__ import annotations

import buildrules
import pytest

from buildrules.errors import ConfigurationError


def test_public_api_exposes_version_and_about() -> None:
    assert isinstance(buildrules.__version__, str)
    text = buildrules.about(print_output=False)
    assert "Build order" in text
    assert "private dependencies stop after one hop" in text


def test_public_api_all_contains_core_exports() -> None:
    exported = set(buildrules.__all__)
    assert "resolve_target" in exported
    assert "export_build" in exported
    assert "ModuleCatalog" in exported
    assert "about" in exported
    assert "__version__" in exported


def test_compile_rules_rejects_target_without_modules_with_actionable_message() -> None:
    with pytest.raises(ConfigurationError, match="at least one module"):
        buildrules.compile_rules(
            "class EmptyTarget(TargetRules):\n"
            "    type = TargetType.Game\n"
            "    extra_module_names = []\n"
        )


def test_rules_markers_mirror_model_enums() -> None:
    from buildrules import rules_markers

    assert rules_markers.EngineIncludeOrderVersion is buildrules.IncludeOrderVersion
    assert rules_markers.ModuleRules.pch_usage is buildrules.PCHUsageMode.DEFAULT
    assert "TargetRules" in rules_markers.__all__
