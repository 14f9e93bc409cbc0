"""Tests for the core model helpers and the error model."""

from __future__ import annotations

import pytest

from exportgen.errors import ErrorCode, ExportError, MissingDependencyError, PlanError
from exportgen.models import (
    Artifact,
    ExportRegistry,
    ExportSet,
    Installation,
    InstallRule,
    MissingTargets,
    TargetExport,
    TargetRef,
    config_label,
    config_suffix,
    is_full_path,
)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/usr/lib", True),
        ("C:/Program Files", True),
        ("c:\\lib", True),
        ("\\\\server\\share", True),
        ("lib/cmake", False),
        ("./lib", False),
        ("", False),
    ],
)
def test_is_full_path(path: str, expected: bool) -> None:
    assert is_full_path(path) is expected


def test_configuration_labels() -> None:
    assert config_label("RelWithDebInfo") == "relwithdebinfo"
    assert config_label("") == "noconfig"
    assert config_suffix("Debug") == "_DEBUG"
    assert config_suffix("") == "_NOCONFIG"


def test_installation_file_name_parts() -> None:
    default = Installation(export_set="CoreTargets", destination="lib/cmake")
    custom = Installation(export_set="Core", destination="lib", file_name="core.targets.cmake")
    no_ext = Installation(export_set="Core", destination="lib", file_name="Targets")

    assert (default.file_base, default.file_ext) == ("CoreTargets", ".cmake")
    assert (custom.file_base, custom.file_ext) == ("core.targets", ".cmake")
    assert (no_ext.file_base, no_ext.file_ext) == ("Targets", "")


def test_configuration_filters_are_case_insensitive() -> None:
    rule = InstallRule("lib", configurations=("Release",))
    assert rule.installs_for_config("RELEASE")
    assert not rule.installs_for_config("Debug")
    assert InstallRule("lib").installs_for_config("")


def test_link_interface_overrides() -> None:
    artifact = Artifact(
        name="core",
        type="shared_library",
        link_libraries=(TargetRef("a"), "b"),
        link_interface=("b",),
        link_interface_config={"DEBUG": (TargetRef("a"),)},
    )
    assert artifact.link_interface_for("Debug") == (TargetRef("a"),)
    assert artifact.link_interface_for("Release") == ("b",)
    assert Artifact(name="x", type="static_library", link_libraries=("m",)).link_interface_for(
        ""
    ) == ("m",)


def test_rules_follow_fixed_kind_order() -> None:
    entry = TargetExport(
        Artifact(name="core", type="shared_library"),
        runtime=InstallRule("bin"),
        archive=InstallRule("lib"),
    )
    assert [rule.destination if rule else None for rule in entry.rules()] == [
        "lib",
        None,
        "bin",
        None,
        None,
    ]


def test_missing_targets_unique_keeps_first_order() -> None:
    missing = MissingTargets()
    for name in ("B::b", "A::a", "B::b"):
        missing.add(name)
    assert missing.unique() == ("B::b", "A::a")
    assert len(missing) == 3


# ── Registry validation ─────────────────────────────────────────────


def test_registry_rejects_repeated_export_set() -> None:
    with pytest.raises(PlanError, match="declared more than once"):
        ExportRegistry.build(export_sets=(ExportSet("A"), ExportSet("A")), installations=())


def test_registry_rejects_two_artifacts_with_one_name() -> None:
    first = Artifact(name="core", type="static_library")
    second = Artifact(name="core", type="static_library")
    with pytest.raises(PlanError) as excinfo:
        ExportRegistry.build(
            export_sets=(
                ExportSet("A", (TargetExport(first),)),
                ExportSet("B", (TargetExport(second),)),
            ),
            installations=(),
        )
    assert excinfo.value.context["artifact"] == "core"


def test_registry_lookups(registry: ExportRegistry) -> None:
    assert registry.artifact("base") is not None
    assert registry.artifact("ghost") is None
    assert [name for name, _, _ in registry.all_sets()] == ["BaseTargets", "CoreTargets"]


# ── Errors ──────────────────────────────────────────────────────────


def test_error_string_includes_hint_and_context() -> None:
    error = ExportError(
        "Something broke.",
        code=ErrorCode.PLAN,
        hint="Fix it.",
        context={"export_set": "Core", "artifact": ""},
    )
    assert str(error) == "Something broke.\nHint: Fix it.\n  export_set: Core"
    assert error.to_dict() == {
        "code": "E_PLAN",
        "message": "Something broke.",
        "context": {"export_set": "Core", "artifact": ""},
        "hint": "Fix it.",
    }


def test_dependency_error_messages() -> None:
    none = MissingDependencyError(export_set="S", depender="a", dependee="b", occurrences=0)
    many = MissingDependencyError(export_set="S", depender="a", dependee="b", occurrences=3)

    assert none.message == (
        'install(EXPORT "S" ...) includes target "a" which requires target "b" '
        "that is not in the export set."
    )
    assert many.message.endswith("that is not in this export set, but 3 times in others.")
