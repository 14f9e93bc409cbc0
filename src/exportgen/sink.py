"""Destinations for generated descriptor files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


class FileSink(Protocol):
    def write(self, path: Path, content: str) -> None:
        """Store *content* at *path*, raising ``OSError`` on failure."""


class LocalFileSink:
    """Writes to the local filesystem, leaving unchanged files untouched."""

    def write(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.is_file() and path.read_text(encoding="utf-8") == content:
            return
        path.write_text(content, encoding="utf-8")


@dataclass(slots=True)
class InMemorySink:
    """Keeps generated files in memory; paths in ``fail_paths`` refuse writes."""

    files: dict[Path, str] = field(default_factory=dict)
    fail_paths: set[Path] = field(default_factory=set)

    def write(self, path: Path, content: str) -> None:
        if path in self.fail_paths:
            raise PermissionError(13, "Permission denied", str(path))
        self.files[path] = content

    def read(self, path: Path) -> str:
        return self.files[path]
