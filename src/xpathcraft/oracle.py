from __future__ import annotations

import logging
from typing import Any

from .errors import OracleSyntaxError, ValidationFailure
from .tree import Node, Scope, TreeAdapter

SHADOW_SEPARATOR = " >> "

logger = logging.getLogger("xpathcraft.oracle")


class EvaluationOracle:
    """Resolves XPath expressions against a tree and checks them against a target."""

    def __init__(self, adapter: TreeAdapter) -> None:
        self.adapter = adapter

    def evaluate(self, expression: str, scope: Scope | None = None) -> list[Node]:
        segments = split_composite(expression)
        if not segments:
            raise OracleSyntaxError(expression, "empty expression")
        current = self.adapter.evaluate(segments[0], scope)
        for segment in segments[1:]:
            descended: list[Node] = []
            for host in current:
                inner_scope = self.adapter.shadow_root(host)
                if inner_scope is None:
                    continue
                for match in self.adapter.evaluate(segment, inner_scope):
                    if not any(self.adapter.same_node(match, seen) for seen in descended):
                        descended.append(match)
            current = descended
        return current

    def resolve_unique(self, expression: str, target: Node, scope: Scope | None = None) -> Node:
        matches = self.evaluate(expression, scope)
        if len(matches) != 1 or not self.adapter.same_node(matches[0], target):
            raise ValidationFailure(expression, len(matches))
        return matches[0]

    def matches(self, expression: str | None, target: Node, scope: Scope | None = None) -> bool:
        if not expression:
            return False
        try:
            self.resolve_unique(expression, target, scope)
        except OracleSyntaxError as exc:
            logger.debug("Rejected malformed expression %s: %s", expression, exc.reason)
            return False
        except ValidationFailure as exc:
            logger.debug("Expression %s matched %s node(s)", expression, exc.match_count)
            return False
        return True

    def count(self, expression: str, scope: Scope | None = None) -> int:
        try:
            return len(self.evaluate(expression, scope))
        except OracleSyntaxError:
            return 0

    def is_unique(self, expression: str, scope: Scope | None = None) -> bool:
        return self.count(expression, scope) == 1

    def evaluate_safely(self, expression: str, scope: Scope | None = None) -> list[Node]:
        try:
            return self.evaluate(expression, scope)
        except OracleSyntaxError as exc:
            logger.debug("Rejected malformed expression %s: %s", expression, exc.reason)
            return []

    def first(self, expression: str, scope: Scope | None = None) -> Any | None:
        found = self.evaluate_safely(expression, scope)
        return found[0] if found else None


def split_composite(expression: str) -> list[str]:
    """Split on the shadow separator, ignoring separators inside string literals."""
    segments: list[str] = []
    buffer: list[str] = []
    quote: str | None = None
    index = 0
    size = len(expression)
    while index < size:
        char = expression[index]
        if quote:
            buffer.append(char)
            if char == quote:
                quote = None
            index += 1
            continue
        if char in ("'", '"'):
            quote = char
            buffer.append(char)
            index += 1
            continue
        if expression.startswith(SHADOW_SEPARATOR, index):
            segments.append("".join(buffer).strip())
            buffer = []
            index += len(SHADOW_SEPARATOR)
            continue
        buffer.append(char)
        index += 1
    segments.append("".join(buffer).strip())
    return [segment for segment in segments if segment]


def join_composite(segments: list[str]) -> str:
    return SHADOW_SEPARATOR.join(segment for segment in segments if segment)
