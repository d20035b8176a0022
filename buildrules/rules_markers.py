"""Public marker classes for authoring target and module declaration files.

Declaration files (``*.Target.py``, ``*.Build.py``) are parsed from source with
``ast`` and are never executed. Importing these names only keeps editors and
linters happy:

    from buildrules.rules_markers import *

    class Tactics(ModuleRules):
        pch_usage = PCHUsageMode.UseExplicitOrSharedPCHs
        public_dependency_module_names = ["Core", "Engine"]
"""

from typing import List

from buildrules.rules_model import (
    BuildSettingsVersion,
    IncludeOrderVersion,
    PCHUsageMode,
    TargetType,
)

EngineIncludeOrderVersion = IncludeOrderVersion


class TargetRules:
    """Base marker for a target declaration.

    Recognized fields: ``type`` (or ``target_type``), ``default_build_settings``,
    ``include_order_version``, ``extra_module_names``.
    """

    type: TargetType = TargetType.GAME
    default_build_settings: BuildSettingsVersion = BuildSettingsVersion.LATEST
    include_order_version: IncludeOrderVersion = IncludeOrderVersion.LATEST
    extra_module_names: List[str] = []


class ModuleRules:
    """Base marker for a module declaration.

    Recognized fields: ``pch_usage``, ``public_dependency_module_names``,
    ``private_dependency_module_names``, ``public_include_paths``.
    """

    pch_usage: PCHUsageMode = PCHUsageMode.DEFAULT
    public_dependency_module_names: List[str] = []
    private_dependency_module_names: List[str] = []
    public_include_paths: List[str] = []


__all__ = [
    "BuildSettingsVersion",
    "EngineIncludeOrderVersion",
    "IncludeOrderVersion",
    "ModuleRules",
    "PCHUsageMode",
    "TargetRules",
    "TargetType",
]
