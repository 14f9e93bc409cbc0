"""Install-time usage requirements derived from build-time properties."""

from __future__ import annotations

from dataclasses import dataclass, field

from .dependencies import DependencyResolver
from .expressions import (
    ExpressionContext,
    ExpressionEvaluator,
    GenexNode,
    InterfaceExpressionEvaluator,
    rewrite_genex,
)
from .models import Artifact, MissingTargets, PropertyMap, TargetRef

INCLUDE_DIRECTORIES = "INTERFACE_INCLUDE_DIRECTORIES"
COMPILE_DEFINITIONS = "INTERFACE_COMPILE_DEFINITIONS"
POSITION_INDEPENDENT_CODE = "INTERFACE_POSITION_INDEPENDENT_CODE"
COMPATIBLE_BOOL = "COMPATIBLE_INTERFACE_BOOL"
COMPATIBLE_STRING = "COMPATIBLE_INTERFACE_STRING"

EVALUATED_PROPERTIES = (INCLUDE_DIRECTORIES, COMPILE_DEFINITIONS)

_TARGET_EXPRESSIONS = ("TARGET_NAME", "TARGET_PROPERTY")


@dataclass(slots=True)
class InterfacePropertyPopulator:
    resolver: DependencyResolver
    evaluator: ExpressionEvaluator = field(default_factory=InterfaceExpressionEvaluator)

    def populate(
        self,
        prop: str,
        artifact: Artifact,
        properties: PropertyMap,
        missing: MissingTargets,
        *,
        context: ExpressionContext = ExpressionContext.INSTALL_INTERFACE,
    ) -> None:
        """Evaluate *prop* for *context* and store it when non-empty."""
        raw = artifact.get_property(prop)
        if not raw:
            return
        value = self.evaluator.evaluate(raw, context, artifact)
        pending = MissingTargets()
        if context is ExpressionContext.INSTALL_INTERFACE:
            value = self.resolve_targets(artifact, value, pending)
        if value:
            properties[prop] = value
            missing.extend(pending)

    def populate_verbatim(self, prop: str, artifact: Artifact, properties: PropertyMap) -> None:
        raw = artifact.get_property(prop)
        if raw:
            properties[prop] = raw

    def populate_compatible(
        self,
        artifact: Artifact,
        properties: PropertyMap,
        missing: MissingTargets,
    ) -> None:
        """Copy the compatibility lists and the interface values they name.

        Names come from the artifact itself and from everything it links,
        directly or transitively.
        """
        self.populate_verbatim(COMPATIBLE_BOOL, artifact, properties)
        self.populate_verbatim(COMPATIBLE_STRING, artifact, properties)

        names: set[str] = set()
        for source in (artifact, *self.link_closure(artifact)):
            for prop in (COMPATIBLE_BOOL, COMPATIBLE_STRING):
                names.update(item for item in (source.get_property(prop) or "").split(";") if item)

        for name in sorted(names):
            self.populate("INTERFACE_" + name, artifact, properties, missing)

    def link_closure(self, artifact: Artifact) -> list[Artifact]:
        """Artifacts reachable through link implementation then interfaces."""
        closure: list[Artifact] = []
        seen: set[str] = {artifact.name}
        pending = list(artifact.link_libraries)
        while pending:
            item = pending.pop(0)
            if not isinstance(item, TargetRef) or item.name in seen:
                continue
            seen.add(item.name)
            dependency = self.resolver.registry.artifact(item.name)
            if dependency is None:
                continue
            closure.append(dependency)
            pending.extend(dependency.link_interface_for(""))
        return closure

    def resolve_targets(self, artifact: Artifact, value: str, missing: MissingTargets) -> str:
        """Rewrite target names inside target expressions to exported names.

        Names that are not build artifacts (imported targets such as
        ``ZLIB::ZLIB``) are left as written.
        """

        def _rewrite(node: GenexNode) -> str:
            if node.name in _TARGET_EXPRESSIONS:
                target, sep, rest = node.argument.partition(",")
                names_target = bool(sep) or node.name == "TARGET_NAME"
                if names_target and self.resolver.registry.artifact(target) is not None:
                    resolved = self.resolver.resolve_target(artifact, target, missing)
                    return f"$<{node.name}:{resolved}{sep}{rest}>"
            return "$<" + rewrite_genex(node.content, _rewrite) + ">"

        return rewrite_genex(value, _rewrite)
