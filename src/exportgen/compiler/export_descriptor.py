"""Main import descriptor generation for one installation of an export set."""

from __future__ import annotations

import hashlib
import warnings
from dataclasses import dataclass, field
from pathlib import Path

from exportgen.compiler import fragments
from exportgen.compiler.config_descriptor import ConfigDescriptorGenerator
from exportgen.dependencies import DependencyResolver
from exportgen.errors import DuplicateArtifactError, MissingDependencyError, StreamOpenError
from exportgen.expressions import ExpressionEvaluator, InterfaceExpressionEvaluator
from exportgen.interface import (
    EVALUATED_PROPERTIES,
    POSITION_INDEPENDENT_CODE,
    InterfacePropertyPopulator,
)
from exportgen.locations import path_components
from exportgen.models import (
    Artifact,
    ExportRegistry,
    ExportSet,
    GeneratorSettings,
    Installation,
    MissingTargets,
    PropertyMap,
)
from exportgen.observability import StructuredLogger
from exportgen.results import ExportResult
from exportgen.sink import FileSink, LocalFileSink


@dataclass(slots=True)
class ExportDescriptorGenerator:
    """Generates the main and per-configuration descriptors of installations.

    Installations are independent: a failing one is reported in its
    ``ExportResult`` and never prevents the others from being generated.
    """

    registry: ExportRegistry
    output_dir: Path
    settings: GeneratorSettings = field(default_factory=GeneratorSettings)
    evaluator: ExpressionEvaluator = field(default_factory=InterfaceExpressionEvaluator)
    sink: FileSink = field(default_factory=LocalFileSink)
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def staging_dir(self, installation: Installation) -> Path:
        """Directory holding the descriptors before they are installed.

        Destinations that could leave ``output_dir`` (absolute ones and those
        walking up with ``..``) are staged under a digest of the destination.
        """
        components = path_components(installation.destination)
        if installation.is_absolute or ".." in components:
            digest = hashlib.sha256(installation.destination.encode("utf-8")).hexdigest()
            return self.output_dir / digest[:32]
        return self.output_dir.joinpath(*components)

    def generate_all(
        self,
        installations: tuple[Installation, ...] | None = None,
        *,
        fail_fast: bool = False,
    ) -> list[ExportResult]:
        selected = self.registry.installations if installations is None else installations
        results: list[ExportResult] = []
        for installation in selected:
            result = self.generate(installation)
            results.append(result)
            if fail_fast and not result.ok:
                break
        return results

    def generate(self, installation: Installation) -> ExportResult:
        export_set = self.registry.export_set_for(installation)
        result = ExportResult(
            export_set=installation.export_set,
            destination=installation.destination,
            namespace=installation.namespace,
        )
        self._log("export_start", installation, "Starting export generation.")

        try:
            artifacts = self._collect_artifacts(export_set)
        except DuplicateArtifactError as exc:
            result.errors.append(exc)
            self._log(
                "export_error",
                installation,
                exc.message,
                level="error",
                artifact=exc.context["artifact"],
            )
            return result

        self._warn_uninstalled(export_set, installation)

        staging = self.staging_dir(installation)
        resolver = DependencyResolver(registry=self.registry, installation=installation)
        populator = InterfacePropertyPopulator(resolver=resolver, evaluator=self.evaluator)
        missing = MissingTargets()

        result.expected_targets = tuple(
            installation.exported_name(artifact.name) for artifact in artifacts
        )
        lines = [
            *fragments.header(main=True),
            *fragments.expected_targets(result.expected_targets),
        ]
        for artifact in artifacts:
            name = installation.exported_name(artifact.name)
            lines.extend(fragments.import_target(name, artifact, self.settings.platform))
            properties = self._interface_properties(
                populator, installation, artifact, missing, result
            )
            lines.extend(fragments.interface_properties(name, properties))

        glob = f"{installation.file_base}-*{installation.file_ext}"
        lines.extend(fragments.config_loader(glob))
        lines.extend([*fragments.FILE_CHECK_LOOP, ""])

        config_generator = ConfigDescriptorGenerator(
            installation=installation,
            registry=self.registry,
            staging_dir=staging,
            platform=self.settings.platform,
            sink=self.sink,
            logger=self.logger,
        )
        for config in self.settings.configurations:
            emission = config_generator.generate(config, missing)
            result.errors.extend(emission.errors)
            if emission.path is not None:
                result.config_files[config] = emission.path

        result.missing_targets = missing.unique()
        lines.extend(fragments.missing_targets_check(result.missing_targets))
        lines.extend(fragments.footer(main=True))

        main_path = staging / installation.descriptor_name
        try:
            self.sink.write(main_path, fragments.render(lines))
        except OSError as exc:
            error = StreamOpenError(
                path=str(main_path),
                reason=exc.strerror or str(exc),
                export_set=installation.export_set,
            )
            result.errors.append(error)
            self._log("export_error", installation, error.message, level="error")
        else:
            result.main_file = main_path

        self._log(
            "export_done",
            installation,
            "Finished export generation." if result.ok else "Export generation failed.",
            level="info" if result.ok else "error",
            extra={
                "main_file": str(result.main_file) if result.main_file else None,
                "configurations": sorted(result.config_files),
                "missing_targets": list(result.missing_targets),
                "errors": len(result.errors),
            },
        )
        return result

    def _collect_artifacts(self, export_set: ExportSet) -> list[Artifact]:
        seen: set[Artifact] = set()
        artifacts: list[Artifact] = []
        for entry in export_set.exports:
            if entry.artifact in seen:
                raise DuplicateArtifactError(
                    export_set=export_set.name,
                    artifact=entry.artifact.name,
                )
            seen.add(entry.artifact)
            artifacts.append(entry.artifact)
        return artifacts

    def _interface_properties(
        self,
        populator: InterfacePropertyPopulator,
        installation: Installation,
        artifact: Artifact,
        missing: MissingTargets,
        result: ExportResult,
    ) -> PropertyMap:
        properties: PropertyMap = {}
        for prop in EVALUATED_PROPERTIES:
            try:
                populator.populate(prop, artifact, properties, missing)
            except MissingDependencyError as exc:
                self._record_dependency_error(installation, artifact, result, exc)
        populator.populate_verbatim(POSITION_INDEPENDENT_CODE, artifact, properties)
        try:
            populator.populate_compatible(artifact, properties, missing)
        except MissingDependencyError as exc:
            self._record_dependency_error(installation, artifact, result, exc)
        return properties

    def _record_dependency_error(
        self,
        installation: Installation,
        artifact: Artifact,
        result: ExportResult,
        exc: MissingDependencyError,
    ) -> None:
        result.errors.append(exc)
        self._log(
            "dependency_error",
            installation,
            exc.message,
            level="error",
            artifact=artifact.name,
        )

    def _warn_uninstalled(self, export_set: ExportSet, installation: Installation) -> None:
        configs = tuple(
            config
            for config in self.settings.configurations
            if installation.installs_for_config(config)
        )
        for entry in export_set.exports:
            if configs and not entry.installs_for_any(configs):
                warnings.warn(
                    (
                        f'Export set "{export_set.name}" includes target '
                        f'"{entry.artifact.name}" which no install rule covers for any '
                        "enabled configuration."
                    ),
                    RuntimeWarning,
                    stacklevel=3,
                )

    def _log(
        self,
        operation: str,
        installation: Installation,
        message: str,
        *,
        level: str = "info",
        artifact: str | None = None,
        extra: dict[str, object] | None = None,
    ) -> None:
        self.logger.log(
            operation=operation,
            export_set=installation.export_set,
            configuration=None,
            artifact=artifact,
            message=message,
            level=level,
            extra=extra,
        )
