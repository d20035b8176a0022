from pathlib import Path

from buildrules.exporter import load_project, resolve_project
from buildrules.rules_model import PCHUsageMode, TargetType

EXAMPLE_DIR = Path(__file__).resolve().parents[1] / "examples" / "tactics"


def resolve_example():
    project = load_project(EXAMPLE_DIR / "Source", [EXAMPLE_DIR / "engine_modules.json"])
    return resolve_project(project)


def test_tactics_example_resolves_with_tactics_last():
    build = resolve_example()

    assert build.target_name == "Tactics"
    assert build.target_type is TargetType.GAME
    assert build.build_order[0] == "Core"
    assert build.build_order[-1] == "Tactics"
    assert len(build.build_order) == 14


def test_tactics_example_sees_engine_public_headers():
    tactics = resolve_example().unit("Tactics")

    assert tactics.pch_usage is PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCHS
    assert tactics.include_paths[:2] == ("Tactics", "Tactics/Core")
    assert "Runtime/Engine/Public" in tactics.include_paths
    assert "Runtime/UMG/Public" in tactics.include_paths
    # AIModule only uses NavigationSystem privately, but Tactics depends on it directly.
    assert "Runtime/NavigationSystem/Public" in tactics.include_paths


def test_engine_private_dependency_is_not_exported():
    build = resolve_example()

    engine = build.unit("Engine")
    core_uobject = build.unit("CoreUObject")
    assert "Runtime/Slate/Public" in engine.include_paths
    assert "Runtime/Slate/Public" not in core_uobject.include_paths
    assert build.build_order.index("Slate") < build.build_order.index("Engine")
