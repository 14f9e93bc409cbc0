"""Generator-expression preprocessing for build and install interfaces.

Only the interface markers are understood here: ``$<BUILD_INTERFACE:...>``
and ``$<INSTALL_INTERFACE:...>`` are kept or dropped according to the
requested context. Every other expression is copied through unchanged so the
consumer can evaluate it against its own configuration.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import Artifact


class ExpressionContext(StrEnum):
    BUILD_INTERFACE = "BuildInterface"
    INSTALL_INTERFACE = "InstallInterface"


class ExpressionEvaluator(Protocol):
    def evaluate(self, expression: str, context: ExpressionContext, artifact: Artifact) -> str:
        """Return *expression* preprocessed for *context*."""


@dataclass(frozen=True, slots=True)
class GenexNode:
    """One top-level ``$<...>`` occurrence: its span and inner text."""

    start: int
    end: int
    content: str

    @property
    def name(self) -> str:
        return self.content.split(":", 1)[0]

    @property
    def argument(self) -> str:
        parts = self.content.split(":", 1)
        return parts[1] if len(parts) == 2 else ""


def iter_genex(text: str) -> Iterator[GenexNode]:
    """Yield top-level generator expressions, honoring nesting."""
    index = 0
    while True:
        start = text.find("$<", index)
        if start < 0:
            return
        depth = 0
        cursor = start
        while cursor < len(text):
            if text.startswith("$<", cursor):
                depth += 1
                cursor += 2
                continue
            if text[cursor] == ">":
                depth -= 1
                if depth == 0:
                    break
            cursor += 1
        if depth != 0:
            # Unterminated expression, leave the remainder untouched.
            return
        yield GenexNode(start=start, end=cursor + 1, content=text[start + 2 : cursor])
        index = cursor + 1


def rewrite_genex(text: str, rewrite: Callable[[GenexNode], str | None]) -> str:
    """Replace each top-level expression by ``rewrite(node)``; None keeps it."""
    out: list[str] = []
    last = 0
    for node in iter_genex(text):
        out.append(text[last : node.start])
        replacement = rewrite(node)
        out.append(text[node.start : node.end] if replacement is None else replacement)
        last = node.end
    out.append(text[last:])
    return "".join(out)


def strip_empty_elements(value: str) -> str:
    return ";".join(item for item in value.split(";") if item)


class InterfaceExpressionEvaluator:
    """Default evaluator handling the build/install interface markers."""

    def evaluate(self, expression: str, context: ExpressionContext, artifact: Artifact) -> str:
        keep = (
            "INSTALL_INTERFACE"
            if context is ExpressionContext.INSTALL_INTERFACE
            else "BUILD_INTERFACE"
        )
        drop = "BUILD_INTERFACE" if keep == "INSTALL_INTERFACE" else "INSTALL_INTERFACE"

        def _rewrite(node: GenexNode) -> str:
            if node.name == drop:
                return ""
            if node.name == keep:
                return self.evaluate(node.argument, context, artifact)
            return "$<" + rewrite_genex(node.content, _rewrite) + ">"

        return strip_empty_elements(rewrite_genex(expression, _rewrite))
