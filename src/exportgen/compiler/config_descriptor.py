"""Per-configuration import descriptor generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from exportgen.compiler import fragments
from exportgen.dependencies import DependencyResolver
from exportgen.errors import MissingDependencyError, PrefixConflictError, StreamOpenError
from exportgen.locations import LocationResolver, installed_names
from exportgen.models import (
    NOCONFIG,
    Artifact,
    ExportRegistry,
    Installation,
    LinkItem,
    MissingTargets,
    Platform,
    PropertyMap,
    TargetRef,
    config_label,
    config_suffix,
)
from exportgen.observability import StructuredLogger
from exportgen.results import ConfigEmission
from exportgen.sink import FileSink, LocalFileSink


@dataclass(slots=True)
class ConfigDescriptorGenerator:
    """Writes ``<base>-<config><ext>`` for one installation."""

    installation: Installation
    registry: ExportRegistry
    staging_dir: Path
    platform: Platform = "linux"
    sink: FileSink = field(default_factory=LocalFileSink)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    locations: LocationResolver = field(init=False, repr=False)
    resolver: DependencyResolver = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.locations = LocationResolver(installation=self.installation, platform=self.platform)
        self.resolver = DependencyResolver(registry=self.registry, installation=self.installation)

    def file_path(self, config: str) -> Path:
        name = (
            f"{self.installation.file_base}-{config_label(config)}{self.installation.file_ext}"
        )
        return self.staging_dir / name

    def generate(self, config: str, missing: MissingTargets) -> ConfigEmission:
        """Generate the descriptor for *config*.

        Cross-set references are added to *missing* only once the file has
        been written.
        """
        emission = ConfigEmission(configuration=config)
        if not self.installation.installs_for_config(config):
            emission.skipped = True
            self._log("config_skip", config, "Installation does not apply to configuration.")
            return emission

        path = self.file_path(config)
        pending = MissingTargets()
        try:
            body = self._render_body(config, pending, emission)
        except PrefixConflictError as exc:
            emission.errors.append(exc)
            self._log(
                "config_error",
                config,
                exc.message,
                level="error",
                artifact=exc.context.get("artifact"),
            )
            return emission

        lines = [
            *fragments.header(config or None),
            *body,
            *fragments.footer(),
        ]
        try:
            self.sink.write(path, fragments.render(lines))
        except OSError as exc:
            error = StreamOpenError(
                path=str(path),
                reason=exc.strerror or str(exc),
                export_set=self.installation.export_set,
            )
            emission.errors.append(error)
            self._log("config_error", config, error.message, level="error")
            return emission

        emission.path = path
        missing.extend(pending)
        self._log(
            "config_write",
            config,
            "Wrote configuration descriptor.",
            extra={"path": str(path), "targets": sorted(emission.locations)},
        )
        return emission

    def _render_body(
        self,
        config: str,
        missing: MissingTargets,
        emission: ConfigEmission,
    ) -> list[str]:
        suffix = config_suffix(config)
        config_name = config.upper() if config else NOCONFIG.upper()
        export_set = self.registry.export_set_for(self.installation)
        self.locations.begin_pass()

        lines: list[str] = []
        for entry in export_set.exports:
            artifact = entry.artifact
            properties: PropertyMap = {}
            imported_locations: set[str] = set()
            for rule in entry.rules():
                self.locations.set_location(
                    config=config,
                    suffix=suffix,
                    rule=rule,
                    artifact=artifact,
                    properties=properties,
                    imported_locations=imported_locations,
                    out=lines,
                )
            if not properties:
                self._log(
                    "artifact_skip",
                    config,
                    "No install rule covers this configuration.",
                    artifact=artifact.name,
                )
                continue

            self._set_detail_properties(config, suffix, artifact, properties, missing, emission)
            self._set_link_interface(config, suffix, artifact, properties, missing, emission)

            name = self.installation.exported_name(artifact.name)
            lines.extend(fragments.import_properties(name, config_name, properties))
            lines.extend(fragments.file_checks(name, properties, imported_locations))
            emission.locations[name] = [properties[key] for key in sorted(imported_locations)]

        if self.locations.state.emitted:
            lines.extend(fragments.import_prefix_cleanup())
        return lines

    def _set_detail_properties(
        self,
        config: str,
        suffix: str,
        artifact: Artifact,
        properties: PropertyMap,
        missing: MissingTargets,
        emission: ConfigEmission,
    ) -> None:
        if artifact.type == "shared_library":
            if self.platform != "windows":
                if artifact.no_soname:
                    properties["IMPORTED_NO_SONAME" + suffix] = "TRUE"
                else:
                    so_name = installed_names(artifact, config, self.platform).so_name
                    if so_name:
                        properties["IMPORTED_SONAME" + suffix] = so_name
            dependent = self._dependent_libraries(artifact, config)
            if dependent:
                self._set_resolved(
                    "IMPORTED_LINK_DEPENDENT_LIBRARIES" + suffix,
                    artifact,
                    dependent,
                    properties,
                    missing,
                    emission,
                )
        elif artifact.type == "static_library":
            if artifact.link_languages:
                properties["IMPORTED_LINK_INTERFACE_LANGUAGES" + suffix] = ";".join(
                    artifact.link_languages
                )
            if artifact.link_interface_multiplicity is not None:
                properties["IMPORTED_LINK_INTERFACE_MULTIPLICITY" + suffix] = str(
                    artifact.link_interface_multiplicity
                )

    def _dependent_libraries(self, artifact: Artifact, config: str) -> tuple[LinkItem, ...]:
        """Shared libraries linked privately: needed at runtime, not for linking."""
        interface = set(artifact.link_interface_for(config))
        dependent: list[LinkItem] = []
        for item in artifact.link_libraries:
            if not isinstance(item, TargetRef) or item in interface:
                continue
            dependency = self.registry.artifact(item.name)
            if dependency is not None and dependency.type == "shared_library":
                dependent.append(item)
        return tuple(dependent)

    def _set_link_interface(
        self,
        config: str,
        suffix: str,
        artifact: Artifact,
        properties: PropertyMap,
        missing: MissingTargets,
        emission: ConfigEmission,
    ) -> None:
        if not artifact.is_library and not artifact.enable_exports:
            return
        items = artifact.link_interface_for(config)
        if items:
            self._set_resolved(
                "IMPORTED_LINK_INTERFACE_LIBRARIES" + suffix,
                artifact,
                items,
                properties,
                missing,
                emission,
            )

    def _set_resolved(
        self,
        prop: str,
        artifact: Artifact,
        items: tuple[LinkItem, ...],
        properties: PropertyMap,
        missing: MissingTargets,
        emission: ConfigEmission,
    ) -> None:
        try:
            properties[prop] = self.resolver.resolve_link_items(artifact, items, missing)
        except MissingDependencyError as exc:
            emission.errors.append(exc)
            self._log(
                "dependency_error",
                emission.configuration,
                exc.message,
                level="error",
                artifact=artifact.name,
                extra={"property": prop},
            )

    def _log(
        self,
        operation: str,
        config: str,
        message: str,
        *,
        level: str = "info",
        artifact: str | None = None,
        extra: dict[str, object] | None = None,
    ) -> None:
        self.logger.log(
            operation=operation,
            export_set=self.installation.export_set,
            configuration=config,
            artifact=artifact,
            message=message,
            level=level,
            extra=extra,
        )
