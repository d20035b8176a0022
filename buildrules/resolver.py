"""Module dependency resolution.

Turns a target and an explicit :class:`~buildrules.catalog.ModuleCatalog` into
a :class:`~buildrules.rules_model.ResolvedBuild`: the modules reachable from the
target's roots, in an order where every module follows its dependencies, each
with the include paths it compiles against.

Include propagation follows two rules:

- a public dependency exposes its own include paths and, transitively, those
  of its own public dependencies;
- a private dependency exposes only its own include paths, one hop, and never
  what it depends on.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from buildrules.catalog import ModuleCatalog
from buildrules.errors import CyclicDependencyError, UnresolvedDependencyError
from buildrules.rules_model import (
    BuildSettingsVersion,
    CompileUnit,
    ModuleDescriptor,
    PCHUsageMode,
    ResolvedBuild,
    TargetDescriptor,
)

logger = logging.getLogger(__name__)

_IN_PROGRESS = 1
_DONE = 2


def _dedupe(paths: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(paths))


class DependencyResolver:
    def __init__(self, catalog: ModuleCatalog) -> None:
        self.catalog = catalog

    def resolve(self, target: TargetDescriptor) -> ResolvedBuild:
        """Validate the graph reachable from ``target`` and emit its compile units."""
        logger.debug(
            "Resolving target '%s' from roots %s", target.name, list(target.extra_module_names)
        )
        self.check_references(target.extra_module_names, root_owner=f"target '{target.name}'")
        order = self.build_order(target.extra_module_names)
        units = self.compile_units(order, target.default_build_settings)
        build = ResolvedBuild(
            target_name=target.name,
            target_type=target.target_type,
            link_type=target.link_type,
            entry_point=target.target_type.entry_point,
            cpp_standard=target.default_build_settings.cpp_standard,
            definitions=target.include_order_version.definitions(),
            units=units,
        )
        logger.debug("Target '%s' build order: %s", target.name, build.build_order)
        return build

    def check_references(self, roots: Sequence[str], *, root_owner: str = "the build") -> None:
        """Fail on the first root or dependency name missing from the catalog.

        Names are checked breadth-first from ``roots`` in declaration order.
        """
        for name in roots:
            if name not in self.catalog:
                raise UnresolvedDependencyError(name, root_owner)
        seen = set(roots)
        queue = list(roots)
        while queue:
            module = self.catalog.get(queue.pop(0))
            for dep in module.dependencies:
                if dep not in self.catalog:
                    raise UnresolvedDependencyError(dep, f"module '{module.name}'")
                if dep not in seen:
                    seen.add(dep)
                    queue.append(dep)

    def build_order(self, roots: Sequence[str]) -> List[str]:
        """Return reachable module names so that dependencies come first.

        Roots are visited in the given order and dependencies in declaration
        order (public, then private); the result is the DFS post-order.
        """
        state: Dict[str, int] = {}
        order: List[str] = []

        for root in roots:
            if state.get(root) == _DONE:
                continue
            state[root] = _IN_PROGRESS
            path: List[str] = [root]
            frames: List[Tuple[str, Iterator[str]]] = [
                (root, iter(self.catalog.get(root).dependencies))
            ]
            while frames:
                name, deps = frames[-1]
                dep = next(deps, None)
                if dep is None:
                    frames.pop()
                    path.pop()
                    state[name] = _DONE
                    order.append(name)
                    continue
                mark = state.get(dep)
                if mark == _DONE:
                    continue
                if mark == _IN_PROGRESS:
                    start = path.index(dep)
                    raise CyclicDependencyError(path[start:] + [dep])
                module = self.catalog.get(dep, referenced_by=f"module '{name}'")
                state[dep] = _IN_PROGRESS
                path.append(dep)
                frames.append((dep, iter(module.dependencies)))
        return order

    def compile_units(
        self,
        order: Sequence[str],
        build_settings: BuildSettingsVersion = BuildSettingsVersion.LATEST,
    ) -> Tuple[CompileUnit, ...]:
        """Compute effective include paths for modules already in build order."""
        exported: Dict[str, Tuple[str, ...]] = {}
        units: List[CompileUnit] = []
        for name in order:
            module = self.catalog.get(name)
            own = self._own_include_paths(module, build_settings)

            public_paths: List[str] = list(own)
            for dep in module.public_dependency_module_names:
                public_paths.extend(exported[dep])
            exported[name] = _dedupe(public_paths)

            effective: List[str] = list(exported[name])
            for dep in module.private_dependency_module_names:
                effective.extend(
                    self._own_include_paths(self.catalog.get(dep), build_settings)
                )

            pch_usage = module.pch_usage
            if pch_usage is PCHUsageMode.DEFAULT:
                pch_usage = build_settings.default_pch_usage

            unit = CompileUnit(
                name=name,
                include_paths=_dedupe(effective),
                pch_usage=pch_usage,
                public_dependencies=module.public_dependency_module_names,
                private_dependencies=module.private_dependency_module_names,
            )
            logger.debug("Compile unit %s: %d include paths", name, len(unit.include_paths))
            units.append(unit)
        return tuple(units)

    def _own_include_paths(
        self, module: ModuleDescriptor, build_settings: BuildSettingsVersion
    ) -> Tuple[str, ...]:
        paths = module.public_include_paths
        if build_settings.legacy_public_include_paths:
            legacy = f"{module.name}/Public"
            if legacy not in paths:
                paths = (legacy,) + paths
        return paths


def resolve_target(target: TargetDescriptor, catalog: ModuleCatalog) -> ResolvedBuild:
    """Resolve ``target`` against ``catalog``."""
    return DependencyResolver(catalog).resolve(target)
