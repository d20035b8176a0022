from typing import Dict, Iterable, Iterator, List, Optional

from buildrules.errors import DuplicateModuleError, UnresolvedDependencyError
from buildrules.rules_model import ModuleDescriptor


class ModuleCatalog:
    """
    Holds every module descriptor loaded for one build, keyed by name.

    Registration order is preserved and is the order reported by iteration.
    """

    def __init__(self, modules: Optional[Iterable[ModuleDescriptor]] = None):
        self._modules: Dict[str, ModuleDescriptor] = {}
        for module in modules or ():
            self.register(module)

    @classmethod
    def from_modules(cls, modules: Iterable[ModuleDescriptor]) -> "ModuleCatalog":
        return cls(modules)

    def register(self, module: ModuleDescriptor) -> None:
        existing = self._modules.get(module.name)
        if existing is not None:
            raise DuplicateModuleError(
                module.name, origins=(existing.source_path, module.source_path)
            )
        self._modules[module.name] = module

    def get(self, name: str, *, referenced_by: Optional[str] = None) -> ModuleDescriptor:
        try:
            return self._modules[name]
        except KeyError as exc:
            raise UnresolvedDependencyError(name, referenced_by) from exc

    def names(self) -> List[str]:
        return list(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)
