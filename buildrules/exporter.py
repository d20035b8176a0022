import json
import logging
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from buildrules.catalog import ModuleCatalog
from buildrules.errors import ConfigurationError
from buildrules.manifest import load_manifest
from buildrules.resolver import DependencyResolver
from buildrules.rules_compiler import RulesCompiler
from buildrules.rules_model import (
    CompileUnit,
    ModuleDescriptor,
    ResolvedBuild,
    TargetDescriptor,
)

logger = logging.getLogger(__name__)

TARGET_SUFFIX = ".Target.py"
MODULE_SUFFIX = ".Build.py"
RESOLVED_BUILD_FILENAME = "resolved_build.json"


@dataclass(frozen=True)
class ProjectRules:
    targets: List[TargetDescriptor]
    catalog: ModuleCatalog
    project_module_names: List[str] = field(default_factory=list)

    def target(self, name: Optional[str] = None) -> TargetDescriptor:
        """Select a target by name; the name may be omitted when only one exists."""
        if name is None:
            if len(self.targets) == 1:
                return self.targets[0]
            if not self.targets:
                raise ConfigurationError("Project declares no targets.")
            names = ", ".join(t.name for t in self.targets)
            raise ConfigurationError(
                f"Project declares several targets ({names}); choose one explicitly."
            )
        for target in self.targets:
            if target.name == name:
                return target
        names = ", ".join(t.name for t in self.targets) or "none"
        raise ConfigurationError(f"Unknown target '{name}'. Declared targets: {names}.")


def discover_declarations(source_dir: str | Path) -> List[Path]:
    """Return every ``*.Target.py`` and ``*.Build.py`` under ``source_dir``, sorted."""
    root = Path(source_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Source directory not found: {root}")
    found = [
        path
        for path in root.rglob("*.py")
        if path.is_file() and path.name.endswith((TARGET_SUFFIX, MODULE_SUFFIX))
    ]
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


def _add_targets(targets: List[TargetDescriptor], new: Iterable[TargetDescriptor]) -> None:
    for target in new:
        for existing in targets:
            if existing.name == target.name:
                origins = [o for o in (existing.source_path, target.source_path) if o]
                where = f" Declared in: {', '.join(origins)}." if origins else ""
                raise ConfigurationError(
                    f"Target '{target.name}' is declared more than once.{where}"
                )
        targets.append(target)


def load_project(
    source_dir: str | Path,
    manifests: Sequence[str | Path] = (),
) -> ProjectRules:
    """Load manifest modules first, then every declaration file of the project."""
    catalog = ModuleCatalog()
    targets: List[TargetDescriptor] = []
    project_module_names: List[str] = []

    for manifest_path in manifests:
        declarations = load_manifest(manifest_path)
        _add_targets(targets, declarations.targets)
        for module in declarations.modules:
            catalog.register(module)

    compiler = RulesCompiler()
    paths = discover_declarations(source_dir)
    for path in paths:
        declarations = compiler.compile_file(path)
        _add_targets(targets, declarations.targets)
        for module in declarations.modules:
            catalog.register(module)
            project_module_names.append(module.name)

    logger.info(
        "Loaded %d declaration files from %s (%d modules, %d targets)",
        len(paths),
        source_dir,
        len(catalog),
        len(targets),
    )
    return ProjectRules(
        targets=targets,
        catalog=catalog,
        project_module_names=project_module_names,
    )


def resolve_project(project: ProjectRules, target_name: Optional[str] = None) -> ResolvedBuild:
    target = project.target(target_name)
    resolver = DependencyResolver(project.catalog)
    build = resolver.resolve(target)

    reachable: Set[str] = set(build.build_order)
    for name in project.project_module_names:
        if name in reachable:
            continue
        module = project.catalog.get(name)
        warnings.warn(
            f"Module '{name}' ({module.source_path}) is ignored because target "
            f"'{target.name}' does not depend on it.",
            stacklevel=2,
        )
    return build


def export_build(
    source_dir: str | Path,
    output_dir: str | Path,
    *,
    manifests: Sequence[str | Path] = (),
    target_name: Optional[str] = None,
) -> ResolvedBuild:
    """Resolve a project and write ``resolved_build.json`` to ``output_dir``."""
    project = load_project(source_dir, manifests)
    build = resolve_project(project, target_name)

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / RESOLVED_BUILD_FILENAME
    out_path.write_text(
        json.dumps(build_to_dict(build), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    logger.info("Wrote %s", out_path)
    return build


def build_to_dict(build: ResolvedBuild) -> Dict[str, Any]:
    """Serialize a :class:`ResolvedBuild` into the resolved-build JSON payload."""
    return {
        "target": {
            "name": build.target_name,
            "type": build.target_type.value,
            "link_type": build.link_type.value,
            "entry_point": build.entry_point,
            "cpp_standard": build.cpp_standard,
            "definitions": list(build.definitions),
        },
        "build_order": build.build_order,
        "units": [unit_to_dict(unit) for unit in build.units],
    }


def unit_to_dict(unit: CompileUnit) -> Dict[str, Any]:
    return {
        "name": unit.name,
        "include_paths": list(unit.include_paths),
        "pch_usage": unit.pch_usage.value,
        "public_dependencies": list(unit.public_dependencies),
        "private_dependencies": list(unit.private_dependencies),
    }


def module_to_dict(module: ModuleDescriptor) -> Dict[str, Any]:
    """Serialize a module in the manifest format."""
    return {
        "name": module.name,
        "pch_usage": module.pch_usage.value,
        "public_dependency_module_names": list(module.public_dependency_module_names),
        "private_dependency_module_names": list(module.private_dependency_module_names),
        "public_include_paths": list(module.public_include_paths),
    }


def target_to_dict(target: TargetDescriptor) -> Dict[str, Any]:
    """Serialize a target in the manifest format."""
    return {
        "name": target.name,
        "type": target.target_type.value,
        "default_build_settings": target.default_build_settings.value,
        "include_order_version": target.include_order_version.value,
        "extra_module_names": list(target.extra_module_names),
    }


def project_to_manifest(
    targets: Iterable[TargetDescriptor], modules: Iterable[ModuleDescriptor]
) -> Dict[str, Any]:
    return {
        "modules": [module_to_dict(module) for module in modules],
        "targets": [target_to_dict(target) for target in targets],
    }


def format_build(build: ResolvedBuild) -> str:
    """Render a resolved build as a human-readable report."""
    lines = [
        f"Target {build.target_name} ({build.target_type.value}, "
        f"{build.link_type.value}, entry={build.entry_point}, {build.cpp_standard})",
        "Definitions:",
    ]
    lines.extend(f"  {definition}" for definition in build.definitions)
    lines.append("Build order:")
    for index, unit in enumerate(build.units, start=1):
        lines.append(f"  {index}. {unit.name} [{unit.pch_usage.value}]")
        for path in unit.include_paths:
            lines.append(f"       -I {path}")
    return "\n".join(lines)
