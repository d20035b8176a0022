import json
import textwrap

from buildrules.cli import main


def make_source(root):
    source = root / "Source"
    (source / "Game").mkdir(parents=True)
    (source / "Game.Target.py").write_text(
        textwrap.dedent(
            """
            class GameTarget(TargetRules):
                type = TargetType.Game
                extra_module_names = ["Game"]
            """
        ),
        encoding="utf-8",
    )
    (source / "Game" / "Game.Build.py").write_text(
        textwrap.dedent(
            """
            class Game(ModuleRules):
                public_dependency_module_names = ["Core"]
                public_include_paths = ["Game"]
            """
        ),
        encoding="utf-8",
    )
    manifest = root / "engine.json"
    manifest.write_text(
        json.dumps({"modules": [{"name": "Core", "public_include_paths": ["Core/Public"]}]}),
        encoding="utf-8",
    )
    return source, manifest


def test_about_prints_version(capsys):
    assert main(["about"]) == 0
    assert capsys.readouterr().out.startswith("buildrules ")


def test_resolve_prints_text_report(tmp_path, capsys):
    source, manifest = make_source(tmp_path)

    assert main(["resolve", str(source), "--manifest", str(manifest)]) == 0

    out = capsys.readouterr().out
    assert "1. Core" in out
    assert "2. Game" in out


def test_resolve_prints_json(tmp_path, capsys):
    source, manifest = make_source(tmp_path)

    assert main(["resolve", str(source), "--manifest", str(manifest), "--format", "json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["build_order"] == ["Core", "Game"]
    assert payload["units"][1]["include_paths"] == ["Game", "Core/Public"]


def test_resolve_writes_output_folder(tmp_path, capsys):
    source, manifest = make_source(tmp_path)
    out_dir = tmp_path / "build"

    code = main(
        ["resolve", str(source), "--manifest", str(manifest), "--output", str(out_dir)]
    )

    assert code == 0
    assert (out_dir / "resolved_build.json").exists()
    assert "Resolved 2 modules for target Game" in capsys.readouterr().out


def test_resolve_reports_configuration_errors(tmp_path, capsys):
    source, _ = make_source(tmp_path)

    assert main(["resolve", str(source)]) == 1

    err = capsys.readouterr().err
    assert err.startswith("error: Module 'Core' referenced by module 'Game' is not declared.")


def test_dump_manifest_prints_project_declarations(tmp_path, capsys):
    source, _ = make_source(tmp_path)

    assert main(["dump-manifest", str(source)]) == 0

    manifest = json.loads(capsys.readouterr().out)
    assert manifest["modules"][0]["name"] == "Game"
    assert manifest["targets"][0]["type"] == "game"


def test_resolve_reports_missing_manifest(tmp_path, capsys):
    source, _ = make_source(tmp_path)

    code = main(["resolve", str(source), "--manifest", str(tmp_path / "nope.json")])

    assert code == 1
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "nope.json" in err


def test_resolve_reports_missing_source_dir(tmp_path, capsys):
    assert main(["resolve", str(tmp_path / "missing")]) == 1
    assert "error: Source directory not found" in capsys.readouterr().err
