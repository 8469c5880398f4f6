from __future__ import annotations

import logging
from typing import Iterable, Protocol

from .models import GenerationContext
from .tree import Node, Scope

logger = logging.getLogger("xpathcraft.strategies")


class LocatorStrategy(Protocol):
    name: str
    priority: int

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool: ...

    def generate(self, node: Node, ctx: GenerationContext) -> str | None: ...

    def get_score(self, node: Node, ctx: GenerationContext) -> int: ...


class BaseStrategy:
    """Shared plumbing: the default score and first-valid formulation search."""

    name = "base"
    priority = 0

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool:
        raise NotImplementedError

    def generate(self, node: Node, ctx: GenerationContext) -> str | None:
        raise NotImplementedError

    def get_score(self, node: Node, ctx: GenerationContext) -> int:
        return self.priority

    def first_valid(
        self,
        expressions: Iterable[str | None],
        node: Node,
        ctx: GenerationContext,
        scope: Scope | None = None,
    ) -> str | None:
        for expression in unique_expressions(expressions):
            if ctx.oracle.matches(expression, node, scope):
                logger.debug("%s strategy accepted %s", self.name, expression)
                return expression
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


def unique_expressions(expressions: Iterable[str | None]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for expression in expressions:
        if not expression or expression in seen:
            continue
        seen.add(expression)
        ordered.append(expression)
    return ordered


def is_unique_expression(ctx: GenerationContext, expression: str, scope: Scope | None = None) -> bool:
    return ctx.oracle.is_unique(expression, scope)
