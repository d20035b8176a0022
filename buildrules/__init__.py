"""Public Python API for buildrules.

The package exposes a small stable surface for loading target/module
declarations, resolving their dependency graph and exporting the result.
Marker classes for declaration files live in ``buildrules.rules_markers``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from buildrules.catalog import ModuleCatalog
from buildrules.errors import (
    BuildRulesError,
    ConfigurationError,
    CyclicDependencyError,
    DeclarationSyntaxError,
    DuplicateModuleError,
    ManifestError,
    UnresolvedDependencyError,
)
from buildrules.exporter import (
    build_to_dict,
    export_build,
    format_build,
    load_project,
    resolve_project,
)
from buildrules.manifest import load_manifest
from buildrules.resolver import DependencyResolver, resolve_target
from buildrules.rules_compiler import RulesCompiler, compile_rules
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
)

try:
    __version__: str = version("buildrules")
except PackageNotFoundError:  # pragma: no cover - editable local fallback
    __version__ = "0.1.0"


def about(*, print_output: bool = True) -> str:
    """Return and optionally print the resolution contract.

    Args:
        print_output: Whether to print the returned summary.

    Returns:
        Human-readable summary string.

    Side Effects:
        Prints to stdout when ``print_output`` is True.

    Example:
        >>> from buildrules import about
        >>> text = about(print_output=False)
        >>> "Build order" in text
        True
    """
    settings = ", ".join(v.value for v in BuildSettingsVersion)
    include_orders = ", ".join(v.value for v in IncludeOrderVersion)
    text = (
        f"buildrules {__version__}\n"
        f"Target types: {', '.join(t.value for t in TargetType)}.\n"
        f"Build settings versions: {settings} (latest: {BuildSettingsVersion.LATEST.value}).\n"
        f"Include order versions: {include_orders} (latest: {IncludeOrderVersion.LATEST.value}).\n"
        "Build order: every module follows all of its dependencies; ties keep declaration order.\n"
        "Include paths: public dependencies propagate transitively; private dependencies stop after one hop."
    )
    if print_output:
        print(text)
    return text


__all__ = [
    "__version__",
    "about",
    "BuildRulesError",
    "BuildSettingsVersion",
    "CompileUnit",
    "ConfigurationError",
    "CyclicDependencyError",
    "DeclarationSyntaxError",
    "DependencyResolver",
    "DuplicateModuleError",
    "IncludeOrderVersion",
    "LinkType",
    "ManifestError",
    "ModuleCatalog",
    "ModuleDescriptor",
    "PCHUsageMode",
    "ResolvedBuild",
    "RulesCompiler",
    "TargetDescriptor",
    "TargetType",
    "UnresolvedDependencyError",
    "build_to_dict",
    "compile_rules",
    "export_build",
    "format_build",
    "load_manifest",
    "load_project",
    "resolve_project",
    "resolve_target",
]
