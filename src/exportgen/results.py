"""Generation results and their manifest export."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import cbor2

from .errors import ExportError


@dataclass(slots=True)
class ConfigEmission:
    """Outcome of one configuration pass."""

    configuration: str
    path: Path | None = None
    skipped: bool = False
    locations: dict[str, list[str]] = field(default_factory=dict)
    errors: list[ExportError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class ExportResult:
    """Outcome of generating the descriptors of one installation."""

    export_set: str
    destination: str
    namespace: str = ""
    main_file: Path | None = None
    config_files: dict[str, Path] = field(default_factory=dict)
    expected_targets: tuple[str, ...] = ()
    missing_targets: tuple[str, ...] = ()
    errors: list[ExportError] = field(default_factory=list)
    schema_version: int = 1

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "export_set": self.export_set,
            "destination": self.destination,
            "namespace": self.namespace,
            "ok": self.ok,
            "main_file": str(self.main_file) if self.main_file is not None else None,
            "config_files": {
                config: str(path) for config, path in sorted(self.config_files.items())
            },
            "expected_targets": list(self.expected_targets),
            "missing_targets": list(self.missing_targets),
            "errors": [error.to_dict() for error in self.errors],
        }


def manifest_payload(results: list[ExportResult]) -> list[dict[str, object]]:
    return [result._payload() for result in results]


def write_manifest(
    results: list[ExportResult],
    path: str | Path,
    *,
    fmt: str = "json",
) -> Path:
    """Write the manifest of several installations as JSON or canonical CBOR."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"installations": manifest_payload(results)}
    if fmt == "cbor":
        output_path.write_bytes(cbor2.dumps(payload, canonical=True))
    else:
        output_path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return output_path
