"""Typed export error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across generation stages."""

    DUPLICATE_ARTIFACT = "E_DUPLICATE_ARTIFACT"
    STREAM_OPEN = "E_STREAM_OPEN"
    DEPENDENCY = "E_DEPENDENCY"
    PREFIX_CONFLICT = "E_PREFIX_CONFLICT"
    PLAN = "E_PLAN"


class ExportError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class DuplicateArtifactError(ExportError):
    def __init__(self, *, export_set: str, artifact: str) -> None:
        super().__init__(
            f'install(EXPORT "{export_set}" ...) includes target "{artifact}" '
            "more than once in the export set.",
            code=ErrorCode.DUPLICATE_ARTIFACT,
            hint="Remove the repeated entry from the export set.",
            context={"export_set": export_set, "artifact": artifact},
        )


class StreamOpenError(ExportError):
    def __init__(self, *, path: str, reason: str, export_set: str = "") -> None:
        super().__init__(
            f'cannot write to file "{path}": {reason}',
            code=ErrorCode.STREAM_OPEN,
            context={"export_set": export_set, "path": path},
        )


class MissingDependencyError(ExportError):
    """A link dependency resolves to zero or several owning namespaces."""

    occurrences: int

    def __init__(
        self,
        *,
        export_set: str,
        depender: str,
        dependee: str,
        occurrences: int,
    ) -> None:
        message = (
            f'install(EXPORT "{export_set}" ...) includes target "{depender}" '
            f'which requires target "{dependee}" '
        )
        if occurrences == 0:
            message += "that is not in the export set."
            hint = f'Add "{dependee}" to an installed export set.'
        else:
            message += f"that is not in this export set, but {occurrences} times in others."
            hint = "Give the installations exporting it a single namespace."
        super().__init__(
            message,
            code=ErrorCode.DEPENDENCY,
            hint=hint,
            context={"export_set": export_set, "artifact": depender, "dependency": dependee},
        )
        self.occurrences = occurrences


class PrefixConflictError(ExportError):
    def __init__(
        self,
        *,
        export_set: str,
        export_destination: str,
        artifact: str,
        artifact_destination: str,
    ) -> None:
        super().__init__(
            f'install(EXPORT "{export_set}") given absolute DESTINATION '
            f'"{export_destination}" but the export references an installation of '
            f'target "{artifact}" which has relative DESTINATION "{artifact_destination}".',
            code=ErrorCode.PREFIX_CONFLICT,
            hint="Install the export to a relative destination or the target to an absolute one.",
            context={
                "export_set": export_set,
                "artifact": artifact,
                "destination": artifact_destination,
            },
        )


class PlanError(ExportError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.PLAN, hint=hint, context=context)


__all__ = [
    "DuplicateArtifactError",
    "ErrorCode",
    "ExportError",
    "MissingDependencyError",
    "PlanError",
    "PrefixConflictError",
    "StreamOpenError",
]
