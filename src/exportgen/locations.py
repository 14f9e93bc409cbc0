"""Installed file names and per-configuration import locations.

``LocationResolver`` turns one install rule into an ``IMPORTED_LOCATION`` or
``IMPORTED_IMPLIB`` property. Relative destinations are expressed against
``${_IMPORT_PREFIX}``, which the descriptor computes from its own location
at consumption time; the preamble doing so is emitted lazily, once per
configuration pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

from .errors import PrefixConflictError
from .models import (
    Artifact,
    ArtifactType,
    Installation,
    InstallRule,
    Platform,
    PropertyMap,
    is_full_path,
)

NameKind = Literal["normal", "real", "implib"]

IMPORT_PREFIX_VAR = "_IMPORT_PREFIX"
IMPORT_PREFIX_REF = "${" + IMPORT_PREFIX_VAR + "}/"

DEFAULT_BUNDLE_EXTENSION = "bundle"

# (prefix, suffix) per platform and artifact type
LIBRARY_AFFIXES: dict[Platform, dict[ArtifactType, tuple[str, str]]] = {
    "linux": {
        "static_library": ("lib", ".a"),
        "shared_library": ("lib", ".so"),
        "module_library": ("lib", ".so"),
        "unknown_library": ("", ""),
        "executable": ("", ""),
    },
    "darwin": {
        "static_library": ("lib", ".a"),
        "shared_library": ("lib", ".dylib"),
        "module_library": ("lib", ".so"),
        "unknown_library": ("", ""),
        "executable": ("", ""),
    },
    "windows": {
        "static_library": ("", ".lib"),
        "shared_library": ("", ".dll"),
        "module_library": ("", ".dll"),
        "unknown_library": ("", ""),
        "executable": ("", ".exe"),
    },
}

IMPORT_AFFIXES: dict[Platform, tuple[str, str]] = {
    "linux": ("lib", ".so"),
    "darwin": ("lib", ".dylib"),
    "windows": ("", ".lib"),
}

_PATH_SEPARATORS = re.compile(r"[/\\]")


@dataclass(frozen=True, slots=True)
class InstalledNames:
    name: str
    real_name: str
    import_name: str
    so_name: str | None = None


def installed_names(artifact: Artifact, config: str, platform: Platform) -> InstalledNames:
    """Compute the file names an artifact installs for *config* on *platform*."""
    base = artifact.output_base(config)
    if (
        artifact.is_framework_on(platform)
        or artifact.is_cf_bundle_on(platform)
        or artifact.is_app_bundle_on(platform)
    ):
        return InstalledNames(name=base, real_name=base, import_name=base, so_name=base)

    default_prefix, default_suffix = LIBRARY_AFFIXES[platform][artifact.type]
    prefix = default_prefix if artifact.prefix is None else artifact.prefix
    suffix = default_suffix if artifact.suffix is None else artifact.suffix
    import_prefix, import_suffix = IMPORT_AFFIXES[platform]
    if artifact.import_prefix is not None:
        import_prefix = artifact.import_prefix
    if artifact.import_suffix is not None:
        import_suffix = artifact.import_suffix

    name = prefix + base + suffix
    import_name = import_prefix + base + import_suffix

    if artifact.type == "executable":
        real_name = name
        if artifact.version and platform != "windows":
            real_name = f"{name}-{artifact.version}"
        return InstalledNames(name=name, real_name=real_name, import_name=import_name)

    if artifact.type != "shared_library" or platform == "windows":
        return InstalledNames(name=name, real_name=name, import_name=import_name)

    soversion = artifact.soversion or artifact.version
    if platform == "darwin":
        so_name = f"{prefix}{base}.{soversion}{suffix}" if soversion else name
        real_name = f"{prefix}{base}.{artifact.version}{suffix}" if artifact.version else so_name
    else:
        so_name = f"{name}.{soversion}" if soversion else name
        real_name = f"{name}.{artifact.version}" if artifact.version else so_name
    return InstalledNames(name=name, real_name=real_name, import_name=import_name, so_name=so_name)


def install_filename(
    artifact: Artifact,
    config: str,
    platform: Platform,
    kind: NameKind = "normal",
) -> str:
    names = installed_names(artifact, config, platform)
    if kind == "implib":
        return names.import_name
    if kind == "real":
        return names.real_name
    return names.name


def path_components(destination: str) -> list[str]:
    return [part for part in _PATH_SEPARATORS.split(destination) if part and part != "."]


def import_prefix_lines(destination: str) -> list[str]:
    """Lines computing ``_IMPORT_PREFIX`` for a descriptor under *destination*."""
    lines = [
        "# Compute the installation prefix relative to this file.",
        f'get_filename_component({IMPORT_PREFIX_VAR} "${{CMAKE_CURRENT_LIST_FILE}}" PATH)',
    ]
    for _ in path_components(destination):
        lines.append(
            f'get_filename_component({IMPORT_PREFIX_VAR} "${{{IMPORT_PREFIX_VAR}}}" PATH)'
        )
    lines.append("")
    return lines


@dataclass(slots=True)
class ImportPrefixState:
    """Whether the prefix preamble was emitted in the current pass."""

    prefix: str = ""
    emitted: bool = False

    def reset(self) -> None:
        self.prefix = ""
        self.emitted = False


@dataclass(slots=True)
class LocationResolver:
    installation: Installation
    platform: Platform = "linux"
    state: ImportPrefixState = field(default_factory=ImportPrefixState)

    def begin_pass(self) -> None:
        self.state.reset()

    def set_location(
        self,
        *,
        config: str,
        suffix: str,
        rule: InstallRule | None,
        artifact: Artifact,
        properties: PropertyMap,
        imported_locations: set[str],
        out: list[str],
    ) -> None:
        """Store the installed location of *artifact* for one rule.

        Rules that are absent or do not cover *config* are ignored. The prefix
        preamble, when first needed, is appended to *out*.
        """
        if rule is None or not rule.installs_for_config(config):
            return

        value = self._prefix_for(rule, artifact, out) + rule.destination + "/"

        if rule.import_library:
            prop = "IMPORTED_IMPLIB" + suffix
            value += install_filename(artifact, config, self.platform, "implib")
        else:
            prop = "IMPORTED_LOCATION" + suffix
            value += self._location_path(artifact, config)

        properties[prop] = value
        imported_locations.add(prop)

    def _location_path(self, artifact: Artifact, config: str) -> str:
        name = install_filename(artifact, config, self.platform)
        if artifact.is_framework_on(self.platform):
            return f"{name}.framework/{name}"
        if artifact.is_cf_bundle_on(self.platform):
            extension = artifact.bundle_extension or DEFAULT_BUNDLE_EXTENSION
            return f"{name}.{extension}/{name}"
        if artifact.is_app_bundle_on(self.platform):
            return f"{name}.app/Contents/MacOS/{name}"
        return install_filename(artifact, config, self.platform, "real")

    def _prefix_for(self, rule: InstallRule, artifact: Artifact, out: list[str]) -> str:
        if is_full_path(rule.destination):
            return ""
        if self.installation.is_absolute:
            raise PrefixConflictError(
                export_set=self.installation.export_set,
                export_destination=self.installation.destination,
                artifact=artifact.name,
                artifact_destination=rule.destination,
            )
        if not self.state.emitted:
            out.extend(import_prefix_lines(self.installation.destination))
            self.state.prefix = IMPORT_PREFIX_REF
            self.state.emitted = True
        return self.state.prefix
