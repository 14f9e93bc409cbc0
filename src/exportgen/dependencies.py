"""Resolution of link dependencies across export sets."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import MissingDependencyError
from .models import (
    Artifact,
    ExportRegistry,
    ExportSet,
    Installation,
    LinkItem,
    MissingTargets,
    TargetRef,
)


@dataclass(frozen=True, slots=True)
class DependencyResolver:
    """Maps artifact names to the names consumers of *installation* will see."""

    registry: ExportRegistry
    installation: Installation

    @property
    def export_set(self) -> ExportSet:
        return self.registry.export_set_for(self.installation)

    def find_namespaces(self, name: str) -> list[str]:
        """Distinct namespaces of every installation exporting *name*."""
        namespaces: list[str] = []
        for _, export_set, installations in self.registry.all_sets():
            if not export_set.contains(name):
                continue
            for installation in installations:
                if installation.namespace not in namespaces:
                    namespaces.append(installation.namespace)
        return namespaces

    def resolve_missing(self, depender: Artifact, name: str, missing: MissingTargets) -> str:
        """Namespaced name of *name*, exported by some other set.

        The result is recorded in *missing*: its descriptor is only checked
        for existence when the consumer loads this one.
        """
        namespaces = self.find_namespaces(name)
        if len(namespaces) != 1:
            raise MissingDependencyError(
                export_set=self.installation.export_set,
                depender=depender.name,
                dependee=name,
                occurrences=len(namespaces),
            )
        missing_target = namespaces[0] + name
        missing.add(missing_target)
        return missing_target

    def resolve_target(self, depender: Artifact, name: str, missing: MissingTargets) -> str:
        if self.export_set.contains(name):
            return self.installation.exported_name(name)
        return self.resolve_missing(depender, name, missing)

    def resolve_link_item(
        self,
        depender: Artifact,
        item: LinkItem,
        missing: MissingTargets,
    ) -> str:
        if isinstance(item, TargetRef):
            return self.resolve_target(depender, item.name, missing)
        return item

    def resolve_link_items(
        self,
        depender: Artifact,
        items: tuple[LinkItem, ...],
        missing: MissingTargets,
    ) -> str:
        """Semicolon-separated link list with every target reference rewritten.

        *missing* is only extended when every item resolves.
        """
        pending = MissingTargets()
        resolved = ";".join(self.resolve_link_item(depender, item, pending) for item in items)
        missing.extend(pending)
        return resolved
