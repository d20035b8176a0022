import pytest

from buildrules.errors import ConfigurationError
from buildrules.rules_model import (
    BuildSettingsVersion,
    CompileUnit,
    IncludeOrderVersion,
    LinkType,
    ModuleDescriptor,
    PCHUsageMode,
    ResolvedBuild,
    TargetDescriptor,
    TargetType,
    coerce_enum,
)


def test_target_descriptor_defaults_to_latest_policies():
    target = TargetDescriptor("Tactics", TargetType.GAME, ("Tactics",))
    assert target.default_build_settings is BuildSettingsVersion.V6
    assert target.include_order_version is IncludeOrderVersion.UNREAL5_7
    assert target.link_type is LinkType.MONOLITHIC


def test_target_descriptor_coerces_string_kind_and_versions():
    target = TargetDescriptor(
        "Tool",
        "program",
        ["Core"],
        default_build_settings="V4",
        include_order_version="Unreal5_3",
    )
    assert target.target_type is TargetType.PROGRAM
    assert target.default_build_settings is BuildSettingsVersion.V4
    assert target.include_order_version is IncludeOrderVersion.UNREAL5_3
    assert target.extra_module_names == ("Core",)


def test_target_descriptor_rejects_empty_roots():
    with pytest.raises(ConfigurationError, match="at least one module"):
        TargetDescriptor("Tactics", TargetType.GAME, ())


def test_target_descriptor_rejects_unknown_kind():
    with pytest.raises(ConfigurationError, match="Unsupported target type"):
        TargetDescriptor("Tactics", "arcade", ("Tactics",))


def test_target_descriptor_collapses_duplicate_roots():
    target = TargetDescriptor("Tactics", TargetType.GAME, ("Tactics", "Extra", "Tactics"))
    assert target.extra_module_names == ("Tactics", "Extra")


def test_editor_targets_link_modular():
    assert TargetType.EDITOR.link_type is LinkType.MODULAR
    assert TargetType.EDITOR.entry_point == "editor"
    assert TargetType.CLIENT.entry_point == "game"
    assert TargetType.SERVER.entry_point == "server"


def test_module_descriptor_normalizes_lists_to_tuples():
    module = ModuleDescriptor(
        "Engine",
        public_dependency_module_names=["Core", "Core", "CoreUObject"],
        public_include_paths=["Engine/Public"],
    )
    assert module.public_dependency_module_names == ("Core", "CoreUObject")
    assert module.public_include_paths == ("Engine/Public",)
    assert module.pch_usage is PCHUsageMode.DEFAULT
    assert module.dependencies == ("Core", "CoreUObject")


def test_module_descriptor_rejects_empty_name():
    with pytest.raises(ConfigurationError, match="non-empty"):
        ModuleDescriptor("  ")


def test_module_descriptor_rejects_public_private_overlap():
    with pytest.raises(ConfigurationError, match="both a public and a private"):
        ModuleDescriptor(
            "Game",
            public_dependency_module_names=("Core", "Engine"),
            private_dependency_module_names=("Engine",),
        )


def test_module_descriptor_rejects_string_instead_of_list():
    with pytest.raises(ConfigurationError, match="must be a list"):
        ModuleDescriptor("Game", public_dependency_module_names="Core")


def test_module_descriptor_equality_ignores_source_path():
    assert ModuleDescriptor("Core", source_path="a.json") == ModuleDescriptor(
        "Core", source_path="b.json"
    )


def test_build_settings_version_deltas():
    assert BuildSettingsVersion.V1.default_pch_usage is PCHUsageMode.USE_SHARED_PCHS
    assert BuildSettingsVersion.V1.legacy_public_include_paths is True
    assert BuildSettingsVersion.V2.default_pch_usage is PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCHS
    assert BuildSettingsVersion.V2.legacy_public_include_paths is False
    assert BuildSettingsVersion.V3.cpp_standard == "c++17"
    assert BuildSettingsVersion.V4.cpp_standard == "c++20"
    assert BuildSettingsVersion.LATEST is BuildSettingsVersion.V6


def test_include_order_definitions_enable_newer_deprecations_only():
    definitions = IncludeOrderVersion.UNREAL5_5.definitions()
    assert len(definitions) == 8
    assert "UE_ENABLE_INCLUDE_ORDER_DEPRECATED_IN_5_5=0" in definitions
    assert "UE_ENABLE_INCLUDE_ORDER_DEPRECATED_IN_5_6=1" in definitions
    assert "UE_ENABLE_INCLUDE_ORDER_DEPRECATED_IN_5_7=1" in definitions
    assert all(d.endswith("=0") for d in IncludeOrderVersion.LATEST.definitions())


def test_coerce_enum_accepts_member_names_in_any_casing():
    assert coerce_enum(PCHUsageMode, "UseExplicitOrSharedPCHs", "pch") is (
        PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCHS
    )
    assert coerce_enum(PCHUsageMode, "no_pchs", "pch") is PCHUsageMode.NO_PCHS
    assert coerce_enum(IncludeOrderVersion, "latest", "order") is IncludeOrderVersion.UNREAL5_7


def test_resolved_build_unit_lookup():
    unit = CompileUnit("Core", ("Core/Public",), PCHUsageMode.NO_PCHS)
    build = ResolvedBuild(
        target_name="Tool",
        target_type=TargetType.PROGRAM,
        link_type=LinkType.MONOLITHIC,
        entry_point="program",
        cpp_standard="c++20",
        definitions=(),
        units=(unit,),
    )
    assert build.build_order == ["Core"]
    assert build.unit("Core") is unit
    with pytest.raises(KeyError, match="Ghost"):
        build.unit("Ghost")
