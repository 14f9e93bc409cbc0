"""Tests for cross export set dependency resolution."""

from __future__ import annotations

import pytest

from exportgen.dependencies import DependencyResolver
from exportgen.errors import MissingDependencyError
from exportgen.models import (
    Artifact,
    ExportRegistry,
    ExportSet,
    Installation,
    InstallRule,
    MissingTargets,
    TargetExport,
    TargetRef,
)


def _registry(*installations: Installation, extra: tuple[Artifact, ...] = ()) -> ExportRegistry:
    app = Artifact(name="app", type="executable")
    util = Artifact(name="util", type="static_library")
    return ExportRegistry.build(
        export_sets=(
            ExportSet("AppTargets", (TargetExport(app, runtime=InstallRule("bin")),)),
            ExportSet("UtilTargets", (TargetExport(util, archive=InstallRule("lib")),)),
        ),
        installations=(
            Installation(export_set="AppTargets", destination="lib/cmake/App", namespace="App::"),
            *installations,
        ),
        artifacts=extra,
    )


def _resolver(registry: ExportRegistry) -> DependencyResolver:
    return DependencyResolver(registry=registry, installation=registry.installations[0])


def test_dependency_in_one_other_set_is_namespaced_and_deferred() -> None:
    registry = _registry(
        Installation(export_set="UtilTargets", destination="lib/cmake/Util", namespace="Util::"),
    )
    resolver = _resolver(registry)
    missing = MissingTargets()

    resolved = resolver.resolve_target(registry.artifacts["app"], "util", missing)

    assert resolved == "Util::util"
    assert missing.unique() == ("Util::util",)


def test_installations_sharing_a_namespace_count_once() -> None:
    registry = _registry(
        Installation(export_set="UtilTargets", destination="lib/cmake/Util", namespace="Util::"),
        Installation(export_set="UtilTargets", destination="/opt/util/cmake", namespace="Util::"),
    )
    resolver = _resolver(registry)

    assert resolver.find_namespaces("util") == ["Util::"]


def test_distinct_namespaces_are_ambiguous() -> None:
    registry = _registry(
        Installation(export_set="UtilTargets", destination="lib/cmake/Util", namespace="Util::"),
        Installation(export_set="UtilTargets", destination="share/util", namespace="Other::"),
    )
    resolver = _resolver(registry)
    missing = MissingTargets()

    with pytest.raises(MissingDependencyError) as excinfo:
        resolver.resolve_target(registry.artifacts["app"], "util", missing)

    assert excinfo.value.occurrences == 2
    assert "but 2 times in others" in excinfo.value.message
    assert len(missing) == 0


def test_dependency_exported_nowhere_is_reported() -> None:
    helper = Artifact(name="helper", type="static_library")
    registry = _registry(extra=(helper,))
    resolver = _resolver(registry)

    with pytest.raises(MissingDependencyError) as excinfo:
        resolver.resolve_target(registry.artifacts["app"], "helper", MissingTargets())

    assert excinfo.value.code == "E_DEPENDENCY"
    assert excinfo.value.occurrences == 0
    assert excinfo.value.message.endswith("that is not in the export set.")
    assert excinfo.value.context["export_set"] == "AppTargets"


def test_uninstalled_export_set_contributes_no_namespace() -> None:
    registry = _registry()
    resolver = _resolver(registry)

    assert resolver.find_namespaces("util") == []


def test_same_set_dependency_uses_own_namespace() -> None:
    registry = _registry()
    resolver = _resolver(registry)
    missing = MissingTargets()

    assert resolver.resolve_target(registry.artifacts["app"], "app", missing) == "App::app"
    assert len(missing) == 0


def test_link_items_keep_plain_libraries_and_roll_back_on_failure() -> None:
    helper = Artifact(name="helper", type="static_library")
    registry = _registry(
        Installation(export_set="UtilTargets", destination="lib/cmake/Util", namespace="Util::"),
        extra=(helper,),
    )
    resolver = _resolver(registry)
    app = registry.artifacts["app"]
    missing = MissingTargets()

    assert resolver.resolve_link_items(app, (TargetRef("util"), "pthread"), missing) == (
        "Util::util;pthread"
    )
    with pytest.raises(MissingDependencyError):
        resolver.resolve_link_items(app, (TargetRef("util"), TargetRef("helper")), missing)

    assert missing.entries == ["Util::util"]
