from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib.resources import files
from pathlib import Path
from typing import Any

import jsonschema

from buildrules.errors import ConfigurationError, ManifestError
from buildrules.rules_model import DeclarationSet, ModuleDescriptor, TargetDescriptor

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def manifest_schema() -> dict[str, Any]:
    schema_text = (files("buildrules") / "schemas" / "manifest.schema.json").read_text(
        encoding="utf-8"
    )
    return json.loads(schema_text)


def validate_manifest(data: Any, *, source: str = "manifest") -> None:
    """Validate manifest JSON against the bundled schema.

    Raises ManifestError describing the first violation, ordered by location.
    """
    validator = jsonschema.Draft202012Validator(manifest_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        first = errors[0]
        raise ManifestError(f"{source}: {first.json_path}: {first.message}")


def parse_manifest(data: Any, *, source_path: str | None = None) -> DeclarationSet:
    source = source_path or "manifest"
    validate_manifest(data, source=source)

    try:
        modules = tuple(
            ModuleDescriptor(
                name=entry["name"],
                pch_usage=entry.get("pch_usage", "default"),
                public_dependency_module_names=tuple(
                    entry.get("public_dependency_module_names", ())
                ),
                private_dependency_module_names=tuple(
                    entry.get("private_dependency_module_names", ())
                ),
                public_include_paths=tuple(entry.get("public_include_paths", ())),
                source_path=source_path,
            )
            for entry in data.get("modules", [])
        )
        targets = tuple(
            TargetDescriptor(
                name=entry["name"],
                target_type=entry["type"],
                extra_module_names=tuple(entry["extra_module_names"]),
                default_build_settings=entry.get("default_build_settings", "v6"),
                include_order_version=entry.get("include_order_version", "unreal5_7"),
                source_path=source_path,
            )
            for entry in data.get("targets", [])
        )
    except ConfigurationError as exc:
        raise ManifestError(f"{source}: {exc}") from exc
    return DeclarationSet(targets=targets, modules=modules)


def load_manifest(path: str | Path) -> DeclarationSet:
    manifest_path = Path(path)
    if not manifest_path.exists():
        raise FileNotFoundError(f"Manifest not found: {manifest_path}")
    # Accept UTF-8 with BOM (common on Windows editors).
    text = manifest_path.read_text(encoding="utf-8-sig")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"{manifest_path}: invalid JSON: {exc}") from exc
    declarations = parse_manifest(data, source_path=str(manifest_path))
    logger.info(
        "Loaded manifest %s (%d modules, %d targets)",
        manifest_path,
        len(declarations.modules),
        len(declarations.targets),
    )
    return declarations
