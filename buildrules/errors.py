import ast
import contextvars
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class DeclarationLocation:
    """Where the compiler currently is: the declaration file and the statement."""

    source: Optional[str] = None
    path: Optional[str] = None
    node: Optional[ast.AST] = None

    def code(self) -> Optional[str]:
        if self.source is None or self.node is None:
            return None
        segment = ast.get_source_segment(self.source, self.node)
        if segment is None:
            lines = self.source.splitlines()
            line = getattr(self.node, "lineno", 0)
            segment = lines[line - 1] if 0 < line <= len(lines) else None
        return segment.strip() if segment else None

    def details(self) -> List[str]:
        out: List[str] = []
        if self.path is not None:
            out.append(f"File: {self.path}")
        line = getattr(self.node, "lineno", None)
        if line is not None:
            col = getattr(self.node, "col_offset", 0) or 0
            out.append(f"Location: line {line}, column {col + 1}")
            code = self.code()
            if code:
                out.append(f"Code: {code}")
        return out


_LOCATION: contextvars.ContextVar[DeclarationLocation] = contextvars.ContextVar(
    "buildrules_declaration_location", default=DeclarationLocation()
)


def _format_with_context(message: str, *, node: Optional[ast.AST] = None) -> str:
    location = _LOCATION.get()
    if node is not None:
        location = replace(location, node=node)
    details = location.details()
    return "\n".join([message, *details])


def format_rules_diagnostic(message: str, *, node: Optional[ast.AST] = None) -> str:
    """Attach best-effort source context to a warning/info diagnostic string."""
    return _format_with_context(message, node=node)


@contextmanager
def _located(location: DeclarationLocation) -> Iterator[DeclarationLocation]:
    token = _LOCATION.set(location)
    try:
        yield location
    finally:
        _LOCATION.reset(token)


def rules_source_context(source: str, path: Optional[str] = None):
    """Attribute diagnostics raised inside the block to ``source`` (read from ``path``)."""
    return _located(DeclarationLocation(source=source, path=path))


def rules_node_context(node: Optional[ast.AST]):
    """Attribute diagnostics raised inside the block to ``node`` of the current file."""
    return _located(replace(_LOCATION.get(), node=node))


class BuildRulesError(Exception):
    """Base build-rules error."""


class ConfigurationError(BuildRulesError):
    """Raised when a target or module declaration is malformed."""


class DeclarationSyntaxError(ConfigurationError):
    """Raised when declaration source violates the rules-file grammar."""

    def __init__(self, message: str, *, node: Optional[ast.AST] = None):
        super().__init__(_format_with_context(message, node=node))


class ManifestError(ConfigurationError):
    """Raised when a JSON manifest cannot be parsed or fails schema validation."""


class UnresolvedDependencyError(ConfigurationError):
    """Raised when a referenced module name is missing from the catalog."""

    def __init__(self, name: str, referenced_by: Optional[str] = None):
        self.name = name
        self.referenced_by = referenced_by
        if referenced_by is None:
            message = f"Module '{name}' is not declared."
        else:
            message = f"Module '{name}' referenced by {referenced_by} is not declared."
        super().__init__(message)


class CyclicDependencyError(ConfigurationError):
    """Raised when the module dependency graph contains a cycle."""

    def __init__(self, cycle: Sequence[str]):
        self.cycle: Tuple[str, ...] = tuple(cycle)
        super().__init__(f"Dependency cycle detected: {' -> '.join(self.cycle)}")


class DuplicateModuleError(ConfigurationError):
    """Raised when two module descriptors share the same name."""

    def __init__(self, name: str, origins: Sequence[Optional[str]] = ()):
        self.name = name
        self.origins: Tuple[Optional[str], ...] = tuple(origins)
        message = f"Module '{name}' is declared more than once."
        known = [origin for origin in self.origins if origin]
        if known:
            message += f" Declared in: {', '.join(known)}."
        super().__init__(message)
