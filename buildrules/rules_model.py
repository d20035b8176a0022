from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Type, TypeVar

from buildrules.errors import ConfigurationError

E = TypeVar("E", bound=Enum)


class LinkType(Enum):
    MONOLITHIC = "monolithic"
    MODULAR = "modular"


class TargetType(Enum):
    GAME = "game"
    EDITOR = "editor"
    SERVER = "server"
    CLIENT = "client"
    PROGRAM = "program"

    @property
    def link_type(self) -> LinkType:
        if self is TargetType.EDITOR:
            return LinkType.MODULAR
        return LinkType.MONOLITHIC

    @property
    def entry_point(self) -> str:
        if self in (TargetType.GAME, TargetType.CLIENT):
            return "game"
        return self.value


class PCHUsageMode(Enum):
    DEFAULT = "default"
    NO_PCHS = "no_pchs"
    USE_SHARED_PCHS = "use_shared_pchs"
    USE_EXPLICIT_OR_SHARED_PCHS = "use_explicit_or_shared_pchs"
    MANUAL = "manual"


class BuildSettingsVersion(Enum):
    """Pinned default compiler/build policy.

    V1: shared PCHs by default, legacy public include paths, C++17.
    V2: explicit-or-shared PCHs by default, no legacy include paths.
    V3: same as V2.
    V4: switches the language standard to C++20.
    V5, V6: same as V4.
    """

    V1 = "v1"
    V2 = "v2"
    V3 = "v3"
    V4 = "v4"
    V5 = "v5"
    V6 = "v6"
    LATEST = "v6"

    @property
    def ordinal(self) -> int:
        return int(self.value[1:])

    @property
    def default_pch_usage(self) -> PCHUsageMode:
        if self.ordinal < 2:
            return PCHUsageMode.USE_SHARED_PCHS
        return PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCHS

    @property
    def legacy_public_include_paths(self) -> bool:
        return self.ordinal < 2

    @property
    def cpp_standard(self) -> str:
        if self.ordinal < 4:
            return "c++17"
        return "c++20"


INCLUDE_ORDER_DEFINE_PREFIX = "UE_ENABLE_INCLUDE_ORDER_DEPRECATED_IN_"


class IncludeOrderVersion(Enum):
    """Pinned header-include ordering policy.

    Every version newer than the selected one keeps its legacy transitive
    includes enabled through a ``UE_ENABLE_INCLUDE_ORDER_DEPRECATED_IN_5_N``
    definition set to 1; the selected version and older ones are set to 0.
    """

    UNREAL5_0 = "unreal5_0"
    UNREAL5_1 = "unreal5_1"
    UNREAL5_2 = "unreal5_2"
    UNREAL5_3 = "unreal5_3"
    UNREAL5_4 = "unreal5_4"
    UNREAL5_5 = "unreal5_5"
    UNREAL5_6 = "unreal5_6"
    UNREAL5_7 = "unreal5_7"
    OLDEST = "unreal5_0"
    LATEST = "unreal5_7"

    @property
    def minor(self) -> int:
        return int(self.value.rsplit("_", 1)[1])

    def definitions(self) -> Tuple[str, ...]:
        out: List[str] = []
        for version in IncludeOrderVersion:
            enabled = 1 if version.minor > self.minor else 0
            out.append(f"{INCLUDE_ORDER_DEFINE_PREFIX}5_{version.minor}={enabled}")
        return tuple(out)


def coerce_enum(enum_cls: Type[E], value: object, label: str) -> E:
    """Accept an enum member, its string value, or its member name."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_cls:
            if member.value == normalized:
                return member
        squashed = normalized.replace("_", "")
        for name, member in enum_cls.__members__.items():
            if name.lower().replace("_", "") == squashed:
                return member
    allowed = ", ".join(member.value for member in enum_cls)
    raise ConfigurationError(f"Unsupported {label} {value!r}. Expected one of: {allowed}.")


def _name_tuple(values: Iterable[object], label: str, owner: str) -> Tuple[str, ...]:
    if isinstance(values, str) or not hasattr(values, "__iter__"):
        raise ConfigurationError(f"{owner}: {label} must be a list of names, got {values!r}.")
    out: List[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"{owner}: {label} entries must be non-empty strings, got {value!r}.")
        name = value.strip()
        if name not in out:
            out.append(name)
    return tuple(out)


@dataclass(frozen=True)
class TargetDescriptor:
    name: str
    target_type: TargetType
    extra_module_names: Tuple[str, ...]
    default_build_settings: BuildSettingsVersion = BuildSettingsVersion.LATEST
    include_order_version: IncludeOrderVersion = IncludeOrderVersion.LATEST
    source_path: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError("Target name must be a non-empty string.")
        owner = f"Target '{self.name}'"
        object.__setattr__(
            self, "target_type", coerce_enum(TargetType, self.target_type, "target type")
        )
        object.__setattr__(
            self,
            "default_build_settings",
            coerce_enum(BuildSettingsVersion, self.default_build_settings, "build settings version"),
        )
        object.__setattr__(
            self,
            "include_order_version",
            coerce_enum(IncludeOrderVersion, self.include_order_version, "include order version"),
        )
        roots = _name_tuple(self.extra_module_names, "extra_module_names", owner)
        if not roots:
            raise ConfigurationError(f"{owner} must list at least one module in extra_module_names.")
        object.__setattr__(self, "extra_module_names", roots)

    @property
    def link_type(self) -> LinkType:
        return self.target_type.link_type


@dataclass(frozen=True)
class ModuleDescriptor:
    name: str
    pch_usage: PCHUsageMode = PCHUsageMode.DEFAULT
    public_dependency_module_names: Tuple[str, ...] = ()
    private_dependency_module_names: Tuple[str, ...] = ()
    public_include_paths: Tuple[str, ...] = ()
    source_path: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError("Module name must be a non-empty string.")
        object.__setattr__(self, "name", self.name.strip())
        owner = f"Module '{self.name}'"
        object.__setattr__(
            self, "pch_usage", coerce_enum(PCHUsageMode, self.pch_usage, "PCH usage mode")
        )
        public = _name_tuple(
            self.public_dependency_module_names, "public_dependency_module_names", owner
        )
        private = _name_tuple(
            self.private_dependency_module_names, "private_dependency_module_names", owner
        )
        overlap = [name for name in public if name in private]
        if overlap:
            raise ConfigurationError(
                f"{owner} lists {', '.join(repr(n) for n in overlap)} as both a public "
                "and a private dependency."
            )
        object.__setattr__(self, "public_dependency_module_names", public)
        object.__setattr__(self, "private_dependency_module_names", private)
        object.__setattr__(
            self,
            "public_include_paths",
            _name_tuple(self.public_include_paths, "public_include_paths", owner),
        )

    @property
    def dependencies(self) -> Tuple[str, ...]:
        """All dependency names, public first, in declaration order."""
        return self.public_dependency_module_names + self.private_dependency_module_names


@dataclass(frozen=True)
class CompileUnit:
    name: str
    include_paths: Tuple[str, ...]
    pch_usage: PCHUsageMode
    public_dependencies: Tuple[str, ...] = ()
    private_dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedBuild:
    target_name: str
    target_type: TargetType
    link_type: LinkType
    entry_point: str
    cpp_standard: str
    definitions: Tuple[str, ...]
    units: Tuple[CompileUnit, ...]

    @property
    def build_order(self) -> List[str]:
        return [unit.name for unit in self.units]

    def unit(self, name: str) -> CompileUnit:
        for unit in self.units:
            if unit.name == name:
                return unit
        raise KeyError(f"Module '{name}' is not part of the resolved build.")


@dataclass(frozen=True)
class DeclarationSet:
    targets: Tuple[TargetDescriptor, ...] = ()
    modules: Tuple[ModuleDescriptor, ...] = ()
