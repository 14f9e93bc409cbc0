"""Install plan parser.

An install plan is the JSON hand-off from the installation-planning step:
the artifacts of the build, the export sets, their installations, and the
build-wide settings (platform and configurations).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast, get_args

from .errors import PlanError
from .models import (
    INSTALL_KINDS,
    Artifact,
    ArtifactType,
    ExportRegistry,
    ExportSet,
    GeneratorSettings,
    Installation,
    InstallRule,
    LinkItem,
    Platform,
    TargetExport,
    TargetRef,
)

PLAN_VERSION = 1


@dataclass(frozen=True, slots=True)
class InstallPlan:
    registry: ExportRegistry
    settings: GeneratorSettings


def parse_plan(raw: str) -> InstallPlan:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PlanError("Invalid install plan JSON.", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise PlanError("Invalid install plan payload type.")

    version = payload.get("version", PLAN_VERSION)
    if version != PLAN_VERSION:
        raise PlanError(
            "Unsupported install plan version.",
            context={"version": str(version), "supported": str(PLAN_VERSION)},
        )

    settings = _parse_settings(payload)
    names = set(_optional_dict(payload, "artifacts"))
    artifacts = {
        name: _parse_artifact(name, item, names)
        for name, item in _optional_dict(payload, "artifacts").items()
    }
    export_sets = tuple(
        _parse_export_set(name, entries, artifacts)
        for name, entries in _required_dict(payload, "export_sets").items()
    )
    installations_raw = payload.get("installations", [])
    if not isinstance(installations_raw, list):
        raise PlanError("Invalid install plan `installations` value.")
    installations = tuple(_parse_installation(item) for item in installations_raw)

    registry = ExportRegistry.build(
        export_sets=export_sets,
        installations=installations,
        artifacts=tuple(artifacts.values()),
    )
    return InstallPlan(registry=registry, settings=settings)


def read_plan(path: str | Path) -> InstallPlan:
    plan_path = Path(path)
    try:
        raw = plan_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise PlanError(
            "Install plan does not exist.",
            context={"path": str(plan_path)},
        ) from exc
    return parse_plan(raw)


def _parse_settings(payload: dict[str, Any]) -> GeneratorSettings:
    platform = payload.get("platform", "linux")
    if platform not in get_args(Platform):
        raise PlanError(
            "Unsupported platform in install plan.",
            hint=f"Use one of: {', '.join(get_args(Platform))}.",
            context={"platform": str(platform)},
        )
    configurations = _str_list(payload.get("configurations", [""]), "configurations")
    return GeneratorSettings(
        configurations=tuple(configurations) or ("",),
        platform=cast(Platform, platform),
    )


def _parse_artifact(name: str, item: Any, names: set[str]) -> Artifact:
    if not isinstance(item, dict):
        raise PlanError("Invalid artifact entry in install plan.", context={"artifact": name})
    artifact_type = _required_str(item, "type")
    if artifact_type not in get_args(ArtifactType):
        raise PlanError(
            "Unsupported artifact type.",
            context={"artifact": name, "type": artifact_type},
        )

    def _links(value: Any, key: str) -> tuple[LinkItem, ...]:
        return tuple(
            TargetRef(entry) if entry in names else entry for entry in _str_list(value, key)
        )

    link_interface = item.get("link_interface")
    multiplicity = item.get("link_interface_multiplicity")
    if multiplicity is not None and not isinstance(multiplicity, int):
        raise PlanError(
            "Invalid artifact `link_interface_multiplicity` value.",
            context={"artifact": name},
        )
    return Artifact(
        name=name,
        type=cast(ArtifactType, artifact_type),
        output_name=_optional_str(item, "output_name"),
        prefix=_optional_str(item, "prefix"),
        suffix=_optional_str(item, "suffix"),
        import_prefix=_optional_str(item, "import_prefix"),
        import_suffix=_optional_str(item, "import_suffix"),
        version=_optional_str(item, "version"),
        soversion=_optional_str(item, "soversion"),
        config_postfix={
            config.upper(): postfix
            for config, postfix in _str_dict(item, "config_postfix").items()
        },
        framework=bool(item.get("framework", False)),
        bundle=bool(item.get("bundle", False)),
        macosx_bundle=bool(item.get("macosx_bundle", False)),
        bundle_extension=_optional_str(item, "bundle_extension"),
        properties=_str_dict(item, "properties"),
        link_libraries=_links(item.get("link_libraries", []), "link_libraries"),
        link_interface=(
            None if link_interface is None else _links(link_interface, "link_interface")
        ),
        link_interface_config={
            config.upper(): _links(value, "link_interface_config")
            for config, value in _optional_dict(item, "link_interface_config").items()
        },
        link_languages=tuple(_str_list(item.get("link_languages", []), "link_languages")),
        link_interface_multiplicity=multiplicity,
        no_soname=bool(item.get("no_soname", False)),
        enable_exports=bool(item.get("enable_exports", False)),
    )


def _parse_export_set(name: str, entries: Any, artifacts: dict[str, Artifact]) -> ExportSet:
    if not isinstance(entries, list):
        raise PlanError("Invalid export set entry list.", context={"export_set": name})
    exports: list[TargetExport] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise PlanError("Invalid export set entry.", context={"export_set": name})
        artifact_name = _required_str(entry, "artifact")
        artifact = artifacts.get(artifact_name)
        if artifact is None:
            raise PlanError(
                "Export set references an unknown artifact.",
                hint="Declare the artifact under `artifacts`.",
                context={"export_set": name, "artifact": artifact_name},
            )
        rules = {
            kind: _parse_rule(entry.get(kind), name, artifact_name) for kind in INSTALL_KINDS
        }
        exports.append(TargetExport(artifact=artifact, **rules))
    return ExportSet(name=name, exports=tuple(exports))


def _parse_rule(item: Any, export_set: str, artifact: str) -> InstallRule | None:
    if item is None:
        return None
    if not isinstance(item, dict):
        raise PlanError(
            "Invalid install rule.",
            context={"export_set": export_set, "artifact": artifact},
        )
    return InstallRule(
        destination=_required_str(item, "destination"),
        configurations=tuple(_str_list(item.get("configurations", []), "configurations")),
        import_library=bool(item.get("import_library", False)),
    )


def _parse_installation(item: Any) -> Installation:
    if not isinstance(item, dict):
        raise PlanError("Invalid installation entry in install plan.")
    return Installation(
        export_set=_required_str(item, "export_set"),
        destination=_required_str(item, "destination"),
        namespace=_optional_str(item, "namespace") or "",
        file_name=_optional_str(item, "file_name"),
        configurations=tuple(_str_list(item.get("configurations", []), "configurations")),
    )


def _required_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise PlanError(f"Invalid install plan `{key}` value.")
    return value


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise PlanError(f"Invalid install plan `{key}` value.")
    return value


def _required_dict(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise PlanError(f"Invalid install plan `{key}` value.")
    return value


def _optional_dict(payload: dict[str, Any], key: str) -> dict[str, Any]:
    if payload.get(key) is None:
        return {}
    return _required_dict(payload, key)


def _str_dict(payload: dict[str, Any], key: str) -> dict[str, str]:
    value = _optional_dict(payload, key)
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
        raise PlanError(f"Invalid install plan `{key}` mapping.")
    return dict(value)


def _str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise PlanError(f"Invalid install plan `{key}` list.")
    return list(value)
