from __future__ import annotations

import logging
from typing import Any, Iterable

from .anchor_strategy import AnchorStrategy
from .attribute_strategy import AttributeStrategy
from .config import DEFAULT_CONFIG, SynthesisConfig
from .container_strategy import ContainerContextStrategy
from .models import Candidate, FeatureSnapshot, GenerationContext, RankedResult
from .relative_strategy import RelativeStrategy
from .selector_rules import has_random_classes
from .shadow_strategy import ShadowDomStrategy
from .strategy_base import LocatorStrategy
from .svg_strategy import SvgStrategy
from .text_strategy import TextStrategy
from .tree import Node, attr, tag_of

logger = logging.getLogger("xpathcraft.strategies")

FORM_TAGS = {"input", "select", "textarea", "button"}
CONTAINER_TAGS = {"div", "span", "section", "article", "header", "footer", "nav"}
TEXT_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6", "p", "label"}

MAX_ALTERNATIVES = 2


def default_strategies() -> list[LocatorStrategy]:
    return [
        TextStrategy(),
        AttributeStrategy(),
        AnchorStrategy(),
        ContainerContextStrategy(),
        ShadowDomStrategy(),
        SvgStrategy(),
        RelativeStrategy(),
    ]


class StrategyManager:
    """Runs the strategy registry against one node and ranks what comes back."""

    def __init__(
        self,
        adapter: Any,
        oracle: Any,
        analyzer: Any,
        config: SynthesisConfig = DEFAULT_CONFIG,
        strategies: Iterable[LocatorStrategy] | None = None,
    ) -> None:
        self.adapter = adapter
        self.oracle = oracle
        self.analyzer = analyzer
        self.config = config
        self._strategies: list[LocatorStrategy] = []
        for strategy in default_strategies() if strategies is None else strategies:
            self.register_strategy(strategy)

    @property
    def strategies(self) -> list[LocatorStrategy]:
        return list(self._strategies)

    def register_strategy(self, strategy: LocatorStrategy) -> None:
        for required in ("name", "priority", "is_applicable", "generate", "get_score"):
            if not hasattr(strategy, required):
                raise TypeError(f"Strategy {strategy!r} is missing {required!r}")
        self._strategies.append(strategy)
        # list.sort is stable, so registration order breaks priority ties.
        self._strategies.sort(key=lambda item: item.priority, reverse=True)

    def unregister_strategy(self, name: str) -> None:
        self._strategies = [strategy for strategy in self._strategies if strategy.name != name]

    def build_context(self, node: Node, snapshot: FeatureSnapshot) -> GenerationContext:
        return GenerationContext(
            snapshot=snapshot,
            framework=snapshot.framework.type,
            in_shadow_scope=snapshot.context.in_shadow_scope,
            element_type=element_type(self.adapter, node),
            oracle=self.oracle,
            adapter=self.adapter,
            analyzer=self.analyzer,
            config=self.config,
        )

    def generate(self, node: Node, snapshot: FeatureSnapshot) -> RankedResult:
        ctx = self.build_context(node, snapshot)
        penalize_attribute = has_random_classes(snapshot.basic.class_name)
        candidates: list[Candidate] = []
        applicable: list[str] = []
        failures: dict[str, str] = {}

        for strategy in self._strategies:
            try:
                if not strategy.is_applicable(node, ctx):
                    continue
                applicable.append(strategy.name)
                expression = strategy.generate(node, ctx)
                if not expression:
                    continue
                score = int(strategy.get_score(node, ctx))
            except Exception as exc:
                logger.warning("Strategy %s failed: %s", strategy.name, exc)
                failures[strategy.name] = str(exc)
                continue
            if penalize_attribute and strategy.name == "attribute":
                score -= self.config.scoring.random_class_penalty
            candidates.append(Candidate(strategy.name, expression, score, strategy.priority))

        ranked = sorted(candidates, key=lambda item: item.score, reverse=True)
        distinct = distinct_expressions(ranked)
        logger.debug("Ranked %s candidate(s) from %s applicable strategies", len(ranked), len(applicable))
        return RankedResult(
            primary=distinct[0] if distinct else None,
            alternatives=distinct[1 : 1 + MAX_ALTERNATIVES],
            candidates=ranked,
            applicable=applicable,
            failures=failures,
            context=ctx,
        )

    def stats(self) -> dict[str, Any]:
        return {
            "total_strategies": len(self._strategies),
            "strategies": [{"name": item.name, "priority": item.priority} for item in self._strategies],
        }


def element_type(adapter: Any, node: Node) -> str:
    tag = tag_of(adapter, node)
    if tag in FORM_TAGS:
        return f"form-{tag}"
    if tag == "a" and attr(adapter, node, "href"):
        return "link"
    role = attr(adapter, node, "role")
    if role:
        return f"role-{role}"
    if tag in CONTAINER_TAGS:
        return "container"
    if tag in TEXT_TAGS:
        return "text"
    return "other"


def distinct_expressions(ranked: list[Candidate]) -> list[Candidate]:
    """Keeps the first (best-scored) candidate for each expression."""
    seen: set[str] = set()
    distinct: list[Candidate] = []
    for candidate in ranked:
        if candidate.expression in seen:
            continue
        seen.add(candidate.expression)
        distinct.append(candidate)
    return distinct
