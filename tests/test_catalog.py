import pytest

from buildrules.catalog import ModuleCatalog
from buildrules.errors import DuplicateModuleError, UnresolvedDependencyError
from buildrules.rules_model import ModuleDescriptor


def test_catalog_preserves_registration_order():
    catalog = ModuleCatalog.from_modules(
        [ModuleDescriptor("Engine"), ModuleDescriptor("Core"), ModuleDescriptor("Game")]
    )
    assert catalog.names() == ["Engine", "Core", "Game"]
    assert [module.name for module in catalog] == ["Engine", "Core", "Game"]
    assert len(catalog) == 3
    assert "Core" in catalog
    assert "Ghost" not in catalog


def test_catalog_rejects_duplicate_names_with_both_origins():
    catalog = ModuleCatalog([ModuleDescriptor("Tactics", source_path="A/Tactics.Build.py")])
    with pytest.raises(DuplicateModuleError, match="declared more than once") as excinfo:
        catalog.register(ModuleDescriptor("Tactics", source_path="B/Tactics.Build.py"))
    assert excinfo.value.name == "Tactics"
    assert excinfo.value.origins == ("A/Tactics.Build.py", "B/Tactics.Build.py")
    assert "A/Tactics.Build.py" in str(excinfo.value)


def test_catalog_get_reports_referencing_module():
    catalog = ModuleCatalog()
    with pytest.raises(UnresolvedDependencyError, match="referenced by module 'Game'") as excinfo:
        catalog.get("Engine", referenced_by="module 'Game'")
    assert excinfo.value.name == "Engine"
