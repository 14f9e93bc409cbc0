"""Public package entrypoint for the export descriptor generator."""

from .compiler import ConfigDescriptorGenerator, ExportDescriptorGenerator
from .dependencies import DependencyResolver
from .errors import (
    DuplicateArtifactError,
    ErrorCode,
    ExportError,
    MissingDependencyError,
    PlanError,
    PrefixConflictError,
    StreamOpenError,
)
from .expressions import ExpressionContext, ExpressionEvaluator, InterfaceExpressionEvaluator
from .interface import InterfacePropertyPopulator
from .locations import ImportPrefixState, LocationResolver
from .models import (
    Artifact,
    ExportRegistry,
    ExportSet,
    GeneratorSettings,
    Installation,
    InstallRule,
    MissingTargets,
    TargetExport,
    TargetRef,
)
from .observability import StructuredLogger
from .plan import InstallPlan, parse_plan, read_plan
from .results import ConfigEmission, ExportResult
from .sink import FileSink, InMemorySink, LocalFileSink

__all__ = [
    "Artifact",
    "ConfigDescriptorGenerator",
    "ConfigEmission",
    "DependencyResolver",
    "DuplicateArtifactError",
    "ErrorCode",
    "ExportDescriptorGenerator",
    "ExportError",
    "ExportRegistry",
    "ExportResult",
    "ExportSet",
    "ExpressionContext",
    "ExpressionEvaluator",
    "FileSink",
    "GeneratorSettings",
    "ImportPrefixState",
    "InMemorySink",
    "InstallPlan",
    "InstallRule",
    "Installation",
    "InterfaceExpressionEvaluator",
    "InterfacePropertyPopulator",
    "LocalFileSink",
    "LocationResolver",
    "MissingDependencyError",
    "MissingTargets",
    "PlanError",
    "PrefixConflictError",
    "StreamOpenError",
    "StructuredLogger",
    "TargetExport",
    "TargetRef",
    "parse_plan",
    "read_plan",
]
