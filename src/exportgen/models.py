"""Core typed dataclasses for artifacts, export sets and installations."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Literal

from .errors import PlanError

ArtifactType = Literal[
    "static_library",
    "shared_library",
    "module_library",
    "executable",
    "unknown_library",
]
Platform = Literal["linux", "darwin", "windows"]
InstallKind = Literal["archive", "library", "runtime", "framework", "bundle"]

INSTALL_KINDS: tuple[InstallKind, ...] = ("archive", "library", "runtime", "framework", "bundle")

ARTIFACT_TYPE_KEYWORD: dict[ArtifactType, str] = {
    "static_library": "STATIC",
    "shared_library": "SHARED",
    "module_library": "MODULE",
    "unknown_library": "UNKNOWN",
}

NOCONFIG = "noconfig"

_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:[/\\]")

PropertyMap = dict[str, str]


def is_full_path(path: str) -> bool:
    """Return True for destinations that do not depend on the install prefix."""
    if path.startswith(("/", "~", "\\\\")):
        return True
    return bool(_WINDOWS_DRIVE.match(path))


def config_label(config: str) -> str:
    """Lower-cased label used in per-configuration file names."""
    return config.lower() if config else NOCONFIG


def config_suffix(config: str) -> str:
    """Property-name suffix, e.g. ``_RELEASE`` or ``_NOCONFIG``."""
    return "_" + (config.upper() if config else NOCONFIG.upper())


def _matches_config(configurations: tuple[str, ...], config: str) -> bool:
    if not configurations:
        return True
    wanted = config.upper()
    return any(candidate.upper() == wanted for candidate in configurations)


@dataclass(frozen=True, slots=True)
class TargetRef:
    """Link item naming another build artifact in the registry arena."""

    name: str

    def __str__(self) -> str:
        return self.name


LinkItem = TargetRef | str


@dataclass(frozen=True, slots=True, eq=False)
class Artifact:
    """One buildable unit eligible for export.

    Artifacts compare by identity so that two export entries for the same
    object are detected even when another artifact shares its fields.
    """

    name: str
    type: ArtifactType
    output_name: str | None = None
    prefix: str | None = None
    suffix: str | None = None
    import_prefix: str | None = None
    import_suffix: str | None = None
    version: str | None = None
    soversion: str | None = None
    config_postfix: Mapping[str, str] = field(default_factory=dict)
    framework: bool = False
    bundle: bool = False
    macosx_bundle: bool = False
    bundle_extension: str | None = None
    properties: Mapping[str, str] = field(default_factory=dict)
    link_libraries: tuple[LinkItem, ...] = ()
    link_interface: tuple[LinkItem, ...] | None = None
    link_interface_config: Mapping[str, tuple[LinkItem, ...]] = field(default_factory=dict)
    link_languages: tuple[str, ...] = ()
    link_interface_multiplicity: int | None = None
    no_soname: bool = False
    enable_exports: bool = False

    @property
    def is_library(self) -> bool:
        return self.type != "executable"

    def output_base(self, config: str) -> str:
        """Output name with the configuration postfix applied."""
        base = self.output_name or self.name
        return base + self.config_postfix.get(config.upper(), "")

    def get_property(self, name: str) -> str | None:
        return self.properties.get(name)

    def link_interface_for(self, config: str) -> tuple[LinkItem, ...]:
        """Link items consumers must link, with per-config overrides."""
        override = self.link_interface_config.get(config.upper())
        if override is not None:
            return override
        if self.link_interface is not None:
            return self.link_interface
        return self.link_libraries

    def is_framework_on(self, platform: Platform) -> bool:
        return platform == "darwin" and self.type == "shared_library" and self.framework

    def is_cf_bundle_on(self, platform: Platform) -> bool:
        return platform == "darwin" and self.type == "module_library" and self.bundle

    def is_app_bundle_on(self, platform: Platform) -> bool:
        return platform == "darwin" and self.type == "executable" and self.macosx_bundle


@dataclass(frozen=True, slots=True)
class InstallRule:
    """Installer descriptor for one kind of file produced by an artifact."""

    destination: str
    configurations: tuple[str, ...] = ()
    import_library: bool = False

    def installs_for_config(self, config: str) -> bool:
        return _matches_config(self.configurations, config)


@dataclass(frozen=True, slots=True)
class TargetExport:
    """An artifact entry in an export set with its per-kind install rules."""

    artifact: Artifact
    archive: InstallRule | None = None
    library: InstallRule | None = None
    runtime: InstallRule | None = None
    framework: InstallRule | None = None
    bundle: InstallRule | None = None

    def rules(self) -> tuple[InstallRule | None, ...]:
        """Rules in the fixed order archive, library, runtime, framework, bundle."""
        return tuple(getattr(self, kind) for kind in INSTALL_KINDS)

    def installs_for_any(self, configs: tuple[str, ...]) -> bool:
        return any(
            rule is not None and rule.installs_for_config(config)
            for rule in self.rules()
            for config in configs
        )


@dataclass(frozen=True, slots=True)
class ExportSet:
    name: str
    exports: tuple[TargetExport, ...] = ()

    def contains(self, artifact_name: str) -> bool:
        return any(entry.artifact.name == artifact_name for entry in self.exports)


@dataclass(frozen=True, slots=True)
class Installation:
    """One placement of an export set's descriptors under a destination."""

    export_set: str
    destination: str
    namespace: str = ""
    file_name: str | None = None
    configurations: tuple[str, ...] = ()

    @property
    def descriptor_name(self) -> str:
        return self.file_name or f"{self.export_set}.cmake"

    @property
    def file_base(self) -> str:
        name = self.descriptor_name
        dot = name.rfind(".")
        return name if dot <= 0 else name[:dot]

    @property
    def file_ext(self) -> str:
        name = self.descriptor_name
        dot = name.rfind(".")
        return "" if dot <= 0 else name[dot:]

    @property
    def is_absolute(self) -> bool:
        return is_full_path(self.destination)

    def installs_for_config(self, config: str) -> bool:
        return _matches_config(self.configurations, config)

    def exported_name(self, artifact_name: str) -> str:
        return self.namespace + artifact_name


@dataclass(frozen=True, slots=True)
class ExportRegistry:
    """Read-only snapshot of every known artifact, export set and installation."""

    artifacts: Mapping[str, Artifact] = field(default_factory=dict)
    export_sets: Mapping[str, ExportSet] = field(default_factory=dict)
    installations: tuple[Installation, ...] = ()

    @classmethod
    def build(
        cls,
        *,
        export_sets: tuple[ExportSet, ...],
        installations: tuple[Installation, ...],
        artifacts: tuple[Artifact, ...] = (),
    ) -> ExportRegistry:
        arena: dict[str, Artifact] = {artifact.name: artifact for artifact in artifacts}
        sets: dict[str, ExportSet] = {}
        for export_set in export_sets:
            if export_set.name in sets:
                raise PlanError(
                    "Export set is declared more than once.",
                    context={"export_set": export_set.name},
                )
            sets[export_set.name] = export_set
            for entry in export_set.exports:
                known = arena.setdefault(entry.artifact.name, entry.artifact)
                if known is not entry.artifact:
                    raise PlanError(
                        "Two different artifacts share one name.",
                        hint="Artifact names must be unique across the build.",
                        context={"export_set": export_set.name, "artifact": entry.artifact.name},
                    )
        for installation in installations:
            if installation.export_set not in sets:
                raise PlanError(
                    "Installation references an unknown export set.",
                    context={
                        "export_set": installation.export_set,
                        "destination": installation.destination,
                    },
                )
        return cls(artifacts=arena, export_sets=sets, installations=installations)

    def all_sets(self) -> Iterator[tuple[str, ExportSet, tuple[Installation, ...]]]:
        for name, export_set in self.export_sets.items():
            yield name, export_set, self.installations_for(name)

    def installations_for(self, export_set: str) -> tuple[Installation, ...]:
        return tuple(item for item in self.installations if item.export_set == export_set)

    def export_set_for(self, installation: Installation) -> ExportSet:
        return self.export_sets[installation.export_set]

    def artifact(self, name: str) -> Artifact | None:
        return self.artifacts.get(name)


@dataclass(slots=True)
class MissingTargets:
    """Namespaced cross-set references whose existence is checked by consumers."""

    entries: list[str] = field(default_factory=list)

    def add(self, name: str) -> None:
        self.entries.append(name)

    def extend(self, other: MissingTargets) -> None:
        self.entries.extend(other.entries)

    def unique(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)


@dataclass(frozen=True, slots=True)
class GeneratorSettings:
    """Build-wide settings shared by every generation pass."""

    configurations: tuple[str, ...] = ("",)
    platform: Platform = "linux"
