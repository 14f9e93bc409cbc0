"""Tests for install plan parsing."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from exportgen.errors import PlanError
from exportgen.models import TargetRef
from exportgen.plan import parse_plan, read_plan


def _plan(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "version": 1,
        "platform": "linux",
        "configurations": ["Debug", "Release"],
        "artifacts": {
            "base": {"type": "static_library", "link_languages": ["C"]},
            "core": {
                "type": "shared_library",
                "version": "2.1",
                "soversion": "2",
                "config_postfix": {"Debug": "d"},
                "link_libraries": ["base", "pthread"],
                "properties": {"INTERFACE_INCLUDE_DIRECTORIES": "$<INSTALL_INTERFACE:include>"},
            },
        },
        "export_sets": {
            "CoreTargets": [
                {"artifact": "base", "archive": {"destination": "lib"}},
                {
                    "artifact": "core",
                    "library": {"destination": "lib", "configurations": ["Release"]},
                    "runtime": {"destination": "bin"},
                },
            ],
        },
        "installations": [
            {"export_set": "CoreTargets", "destination": "lib/cmake/Core", "namespace": "Core::"},
        ],
    }
    payload.update(overrides)
    return payload


def test_parse_plan_builds_registry_and_settings() -> None:
    plan = parse_plan(json.dumps(_plan()))

    assert plan.settings.configurations == ("Debug", "Release")
    assert plan.settings.platform == "linux"
    core = plan.registry.artifacts["core"]
    assert core.link_libraries == (TargetRef("base"), "pthread")
    assert core.link_interface is None
    assert core.output_base("debug") == "cored"
    export_set = plan.registry.export_sets["CoreTargets"]
    assert export_set.exports[1].library is not None
    assert export_set.exports[1].library.configurations == ("Release",)
    assert export_set.exports[1].archive is None
    assert plan.registry.installations[0].namespace == "Core::"


def test_defaults_apply_when_optional_sections_are_missing() -> None:
    payload = _plan()
    del payload["configurations"]
    del payload["platform"]
    del payload["installations"]

    plan = parse_plan(json.dumps(payload))

    assert plan.settings.configurations == ("",)
    assert plan.settings.platform == "linux"
    assert plan.registry.installations == ()


@pytest.mark.parametrize(
    ("overrides", "fragment"),
    [
        ({"version": 2}, "Unsupported install plan version."),
        ({"platform": "beos"}, "Unsupported platform"),
        ({"export_sets": []}, "`export_sets`"),
        ({"artifacts": {"x": {"type": "object_library"}}}, "Unsupported artifact type."),
        ({"installations": [{"export_set": "Nope", "destination": "lib"}]}, "unknown export set"),
    ],
)
def test_invalid_plans_raise_plan_error(overrides: dict[str, Any], fragment: str) -> None:
    with pytest.raises(PlanError) as excinfo:
        parse_plan(json.dumps(_plan(**overrides)))

    assert fragment in excinfo.value.message
    assert excinfo.value.code == "E_PLAN"


def test_unknown_artifact_in_export_set_is_rejected() -> None:
    payload = _plan(export_sets={"Broken": [{"artifact": "ghost"}]})

    with pytest.raises(PlanError) as excinfo:
        parse_plan(json.dumps(payload))

    assert excinfo.value.context == {"export_set": "Broken", "artifact": "ghost"}


def test_invalid_json_is_reported() -> None:
    with pytest.raises(PlanError, match="Invalid install plan JSON"):
        parse_plan("{not json")


def test_read_plan_missing_file(tmp_path: Path) -> None:
    with pytest.raises(PlanError) as excinfo:
        read_plan(tmp_path / "absent.json")

    assert excinfo.value.context["path"].endswith("absent.json")
