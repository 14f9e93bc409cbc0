"""Tests for structured logs and generation manifests."""

from __future__ import annotations

import json
from pathlib import Path

import cbor2

from exportgen.compiler import ExportDescriptorGenerator
from exportgen.errors import StreamOpenError
from exportgen.models import ExportRegistry, GeneratorSettings, Installation
from exportgen.observability import StructuredLogger
from exportgen.results import ExportResult, write_manifest
from exportgen.sink import InMemorySink


def test_generation_logs_each_stage(
    registry: ExportRegistry, core_installation: Installation, sink: InMemorySink
) -> None:
    logger = StructuredLogger()
    generator = ExportDescriptorGenerator(
        registry=registry,
        output_dir=Path("/out"),
        settings=GeneratorSettings(configurations=("Debug", "Release")),
        sink=sink,
        logger=logger,
    )

    generator.generate(core_installation)

    records = logger.records_for_export_set("CoreTargets")
    assert [record["operation"] for record in records] == [
        "export_start",
        "config_write",
        "config_write",
        "export_done",
    ]
    assert [record["configuration"] for record in records[1:3]] == ["Debug", "Release"]
    assert records[-1]["extra"]["missing_targets"] == ["Base::base"]
    assert all(record["level"] == "info" for record in logger.records)


def test_logger_writes_json_lines(tmp_path: Path) -> None:
    logger = StructuredLogger()
    logger.log(
        operation="config_error",
        export_set="Core",
        configuration="Debug",
        artifact="core",
        message="boom",
        level="error",
    )

    path = logger.to_json_lines(tmp_path / "logs" / "run.jsonl")

    record = json.loads(path.read_text(encoding="utf-8"))
    assert record["level"] == "error"
    assert "extra" not in record
    assert logger.records == [record]


def test_result_serializations_agree(tmp_path: Path) -> None:
    result = ExportResult(
        export_set="Core",
        destination="lib/cmake",
        namespace="Core::",
        main_file=Path("/out/lib/cmake/Core.cmake"),
        config_files={"Release": Path("/out/lib/cmake/Core-release.cmake")},
        expected_targets=("Core::core",),
        errors=[StreamOpenError(path="/out/x", reason="Disk full", export_set="Core")],
    )

    from_json = json.loads(result.to_json(tmp_path / "result.json"))
    from_cbor = cbor2.loads(result.to_cbor())

    assert from_json == from_cbor
    assert from_json["ok"] is False
    assert from_json["errors"][0]["code"] == "E_STREAM_OPEN"
    assert (tmp_path / "result.json").is_file()
    assert result.to_cbor() == result.to_cbor()


def test_manifest_formats(tmp_path: Path) -> None:
    results = [ExportResult(export_set="A", destination="lib/cmake")]

    json_path = write_manifest(results, tmp_path / "m" / "manifest.json")
    cbor_path = write_manifest(results, tmp_path / "m" / "manifest.cbor", fmt="cbor")

    assert json.loads(json_path.read_text(encoding="utf-8")) == cbor2.loads(
        cbor_path.read_bytes()
    )
