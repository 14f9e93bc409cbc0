"""Shared test fixtures."""

from __future__ import annotations

import pytest

from exportgen import (
    Artifact,
    ExportRegistry,
    ExportSet,
    InMemorySink,
    Installation,
    InstallRule,
    TargetExport,
    TargetRef,
)


@pytest.fixture
def sink() -> InMemorySink:
    """Provide an in-memory sink for tests that inspect generated text."""
    return InMemorySink()


@pytest.fixture
def base_artifact() -> Artifact:
    return Artifact(
        name="base",
        type="static_library",
        link_languages=("CXX",),
        properties={"COMPATIBLE_INTERFACE_STRING": "ABI"},
    )


@pytest.fixture
def core_artifact() -> Artifact:
    return Artifact(
        name="core",
        type="shared_library",
        version="1.2.3",
        soversion="1",
        properties={
            "INTERFACE_INCLUDE_DIRECTORIES": (
                "$<BUILD_INTERFACE:/src/core/include>;$<INSTALL_INTERFACE:include>"
            ),
            "INTERFACE_COMPILE_DEFINITIONS": "CORE_SHARED;$<$<CONFIG:Debug>:CORE_DEBUG>",
            "INTERFACE_POSITION_INDEPENDENT_CODE": "ON",
        },
        link_libraries=(TargetRef("base"), "m"),
        link_interface=(TargetRef("base"), "m"),
    )


@pytest.fixture
def registry(base_artifact: Artifact, core_artifact: Artifact) -> ExportRegistry:
    """Two export sets: ``Core::core`` links ``Base::base`` from another set."""
    return ExportRegistry.build(
        export_sets=(
            ExportSet(
                name="BaseTargets",
                exports=(TargetExport(artifact=base_artifact, archive=InstallRule("lib")),),
            ),
            ExportSet(
                name="CoreTargets",
                exports=(TargetExport(artifact=core_artifact, library=InstallRule("lib")),),
            ),
        ),
        installations=(
            Installation(export_set="BaseTargets", destination="lib/cmake/Base", namespace="Base::"),
            Installation(export_set="CoreTargets", destination="lib/cmake", namespace="Core::"),
        ),
    )


@pytest.fixture
def core_installation(registry: ExportRegistry) -> Installation:
    return registry.installations_for("CoreTargets")[0]
