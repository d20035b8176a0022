import ast
import warnings
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, Type

from buildrules.errors import (
    ConfigurationError,
    DeclarationSyntaxError,
    format_rules_diagnostic,
    rules_node_context,
    rules_source_context,
)
from buildrules.rules_model import (
    BuildSettingsVersion,
    DeclarationSet,
    IncludeOrderVersion,
    ModuleDescriptor,
    PCHUsageMode,
    TargetDescriptor,
    TargetType,
    coerce_enum,
)


TARGET_BASE = "TargetRules"
MODULE_BASE = "ModuleRules"

_TARGET_FIELDS: Dict[str, str] = {
    "type": "target_type",
    "target_type": "target_type",
    "default_build_settings": "default_build_settings",
    "include_order_version": "include_order_version",
    "extra_module_names": "extra_module_names",
}
_MODULE_FIELDS: Dict[str, str] = {
    "pch_usage": "pch_usage",
    "public_dependency_module_names": "public_dependency_module_names",
    "private_dependency_module_names": "private_dependency_module_names",
    "public_include_paths": "public_include_paths",
}
_LIST_FIELDS = {
    "extra_module_names",
    "public_dependency_module_names",
    "private_dependency_module_names",
    "public_include_paths",
}
_ENUM_FIELDS: Dict[str, tuple] = {
    "target_type": (TargetType, {"TargetType"}, "target type"),
    "default_build_settings": (
        BuildSettingsVersion,
        {"BuildSettingsVersion"},
        "build settings version",
    ),
    "include_order_version": (
        IncludeOrderVersion,
        {"IncludeOrderVersion", "EngineIncludeOrderVersion"},
        "include order version",
    ),
    "pch_usage": (PCHUsageMode, {"PCHUsageMode"}, "PCH usage mode"),
}


class RulesCompiler:
    def compile(self, source: str, source_path: str | Path | None = None) -> DeclarationSet:
        """Compile declaration source into target and module descriptors.

        The source is parsed, never executed. Only imports, docstrings and
        ``class X(TargetRules)`` / ``class X(ModuleRules)`` definitions are
        accepted at top level.
        """
        path_label = str(source_path) if source_path is not None else None
        with rules_source_context(source, path_label):
            try:
                module = ast.parse(source)
            except SyntaxError as exc:
                raise DeclarationSyntaxError(_format_syntax_error(exc, source)) from exc

            targets: List[TargetDescriptor] = []
            modules: List[ModuleDescriptor] = []
            for index, node in enumerate(module.body):
                with rules_node_context(node):
                    if isinstance(node, (ast.Import, ast.ImportFrom)):
                        continue
                    if index == 0 and _is_docstring(node):
                        continue
                    if not isinstance(node, ast.ClassDef):
                        raise DeclarationSyntaxError(
                            f"Unsupported top-level statement '{type(node).__name__}'. "
                            f"Only imports and {TARGET_BASE}/{MODULE_BASE} classes are allowed."
                        )
                    base = _rules_base(node)
                    if base == TARGET_BASE:
                        targets.append(self._compile_target(node, path_label))
                    else:
                        modules.append(self._compile_module(node, path_label))

        return DeclarationSet(targets=tuple(targets), modules=tuple(modules))

    def compile_file(self, path: str | Path) -> DeclarationSet:
        rules_path = Path(path)
        # Accept UTF-8 with BOM (common on Windows editors).
        source = rules_path.read_text(encoding="utf-8-sig")
        return self.compile(source, source_path=rules_path)

    def _compile_target(self, node: ast.ClassDef, path_label: Optional[str]) -> TargetDescriptor:
        values = self._collect_fields(node, _TARGET_FIELDS)
        name = node.name
        if name.endswith("Target") and len(name) > len("Target"):
            name = name[: -len("Target")]
        if "target_type" not in values:
            raise DeclarationSyntaxError(f"Target '{name}' must set 'type'.")
        try:
            return TargetDescriptor(
                name=name,
                target_type=values["target_type"],
                extra_module_names=tuple(values.get("extra_module_names", ())),
                default_build_settings=values.get(
                    "default_build_settings", BuildSettingsVersion.LATEST
                ),
                include_order_version=values.get(
                    "include_order_version", IncludeOrderVersion.LATEST
                ),
                source_path=path_label,
            )
        except ConfigurationError as exc:
            raise DeclarationSyntaxError(str(exc)) from exc

    def _compile_module(self, node: ast.ClassDef, path_label: Optional[str]) -> ModuleDescriptor:
        values = self._collect_fields(node, _MODULE_FIELDS)
        try:
            return ModuleDescriptor(
                name=node.name,
                pch_usage=values.get("pch_usage", PCHUsageMode.DEFAULT),
                public_dependency_module_names=tuple(
                    values.get("public_dependency_module_names", ())
                ),
                private_dependency_module_names=tuple(
                    values.get("private_dependency_module_names", ())
                ),
                public_include_paths=tuple(values.get("public_include_paths", ())),
                source_path=path_label,
            )
        except ConfigurationError as exc:
            raise DeclarationSyntaxError(str(exc)) from exc

    def _collect_fields(self, node: ast.ClassDef, fields: Dict[str, str]) -> Dict[str, object]:
        values: Dict[str, object] = {}
        assigned: Set[str] = set()
        for index, stmt in enumerate(node.body):
            with rules_node_context(stmt):
                if isinstance(stmt, ast.Pass):
                    continue
                if index == 0 and _is_docstring(stmt):
                    continue

                if isinstance(stmt, ast.AugAssign):
                    field_name = _field_for_target(stmt.target, fields, node.name)
                    if field_name not in _LIST_FIELDS or not isinstance(stmt.op, ast.Add):
                        raise DeclarationSyntaxError(
                            f"Only '+=' on list fields is supported, not on '{field_name}'."
                        )
                    existing = values.get(field_name, [])
                    values[field_name] = list(existing) + _expect_string_list(
                        stmt.value, field_name
                    )
                    assigned.add(field_name)
                    continue

                if isinstance(stmt, ast.Assign):
                    if len(stmt.targets) != 1:
                        raise DeclarationSyntaxError("Chained assignment is not supported.")
                    target = stmt.targets[0]
                    value_node = stmt.value
                elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
                    target = stmt.target
                    value_node = stmt.value
                else:
                    raise DeclarationSyntaxError(
                        f"Unsupported statement '{type(stmt).__name__}' in class '{node.name}'."
                    )

                field_name = _field_for_target(target, fields, node.name)
                if field_name in assigned:
                    warnings.warn(
                        format_rules_diagnostic(
                            f"Field '{field_name}' of '{node.name}' is assigned more than once; "
                            "the last assignment wins.",
                            node=stmt,
                        ),
                        stacklevel=2,
                    )
                assigned.add(field_name)
                values[field_name] = _parse_field_value(field_name, value_node)
        return values


def _is_docstring(node: ast.stmt) -> bool:
    return (
        isinstance(node, ast.Expr)
        and isinstance(node.value, ast.Constant)
        and isinstance(node.value.value, str)
    )


def _base_name(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _rules_base(node: ast.ClassDef) -> str:
    if node.decorator_list:
        raise DeclarationSyntaxError(
            f"Decorators are not allowed on rules class '{node.name}'.",
            node=node.decorator_list[0],
        )
    if node.keywords:
        raise DeclarationSyntaxError(
            f"Class keywords are not allowed on rules class '{node.name}'.",
            node=node.keywords[0],
        )
    names = [_base_name(base) for base in node.bases]
    if len(names) == 1 and names[0] in (TARGET_BASE, MODULE_BASE):
        return names[0]
    raise DeclarationSyntaxError(
        f"Class '{node.name}' must derive from exactly one of {TARGET_BASE} or {MODULE_BASE}."
    )


def _field_for_target(target: ast.expr, fields: Dict[str, str], owner: str) -> str:
    if isinstance(target, ast.Name):
        attr = target.id
    else:
        raise DeclarationSyntaxError(f"Unsupported assignment target in class '{owner}'.")
    field_name = fields.get(attr)
    if field_name is None:
        allowed = ", ".join(sorted(fields))
        raise DeclarationSyntaxError(
            f"Unknown field '{attr}' in class '{owner}'. Expected one of: {allowed}."
        )
    return field_name


def _parse_field_value(field_name: str, node: ast.expr) -> object:
    if field_name in _LIST_FIELDS:
        return _expect_string_list(node, field_name)
    enum_cls, qualifiers, label = _ENUM_FIELDS[field_name]
    return _parse_enum_member(node, enum_cls, qualifiers, label)


def _parse_enum_member(
    node: ast.expr,
    enum_cls: Type[Enum],
    qualifiers: Set[str],
    label: str,
) -> Enum:
    if isinstance(node, ast.Attribute):
        owner = _base_name(node.value)
        if owner not in qualifiers:
            expected = " or ".join(sorted(qualifiers))
            raise DeclarationSyntaxError(f"Expected {label} as {expected}.<member>.")
        raw = node.attr
    else:
        raw = _expect_string(node, label)
    try:
        return coerce_enum(enum_cls, raw, label)
    except ConfigurationError as exc:
        raise DeclarationSyntaxError(str(exc)) from exc


def _format_syntax_error(exc: SyntaxError, source: str) -> str:
    line = exc.lineno or 0
    col = exc.offset or 0
    snippet = (exc.text or "").strip()
    if not snippet and line > 0:
        lines = source.splitlines()
        if line <= len(lines):
            snippet = lines[line - 1].strip()
    message = f"Invalid Python syntax: {exc.msg}"
    if line > 0:
        message += f"\nLocation: line {line}, column {col if col > 0 else 1}"
    if snippet:
        message += f"\nCode: {snippet}"
    return message


def _eval_static_expr(node: ast.AST):
    if isinstance(node, ast.Constant):
        value = node.value
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        raise DeclarationSyntaxError("Unsupported constant value in declaration.")

    if isinstance(node, ast.List):
        return [_eval_static_expr(item) for item in node.elts]

    if isinstance(node, ast.Tuple):
        return [_eval_static_expr(item) for item in node.elts]

    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Add):
        left = _eval_static_expr(node.left)
        right = _eval_static_expr(node.right)
        if isinstance(left, list) and isinstance(right, list):
            return left + right
        if isinstance(left, str) and isinstance(right, str):
            return left + right
        raise DeclarationSyntaxError(
            "Unsupported '+' operands in declaration. Use two lists or two strings."
        )

    raise DeclarationSyntaxError(
        f"Unsupported expression '{type(node).__name__}' in declaration; "
        "values must be literals."
    )


def _expect_string(node: ast.AST, label: str) -> str:
    value = _eval_static_expr(node)
    if isinstance(value, str):
        return value
    raise DeclarationSyntaxError(f"Expected {label} string.")


def _expect_string_list(node: ast.AST, label: str) -> List[str]:
    value = _eval_static_expr(node)
    if not isinstance(value, list):
        raise DeclarationSyntaxError(f"Expected {label} list.")
    out: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise DeclarationSyntaxError(f"Expected {label} list[str].")
        out.append(item)
    return out


def compile_rules(source: str, source_path: str | Path | None = None) -> DeclarationSet:
    """Compile declaration source into a :class:`DeclarationSet`."""
    return RulesCompiler().compile(source, source_path=source_path)
