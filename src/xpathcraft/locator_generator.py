from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Iterable

from .cache import Clock, TtlCache, element_fingerprint
from .config import DEFAULT_CONFIG, SynthesisConfig
from .element_analyzer import ElementAnalyzer
from .errors import (
    AllStrategiesFailed,
    FallbackFailed,
    LocatorSynthesisError,
    NoApplicableStrategy,
    OracleSyntaxError,
)
from .models import (
    Candidate,
    ElementInfo,
    FeatureSnapshot,
    GenerationResult,
    RankedResult,
    ValidationReport,
)
from .oracle import EvaluationOracle, join_composite
from .selector_rules import valid_id, xpath_literal
from .shadow_strategy import shadow_host_chain
from .strategy_base import LocatorStrategy
from .strategy_manager import StrategyManager
from .tree import Node, TreeAdapter, attr, element_index, tag_of, visible_text

logger = logging.getLogger("xpathcraft.generator")

Sink = Callable[[str], Awaitable[Any]]

INVALID_ELEMENT_MESSAGE = "Invalid element"
NOT_FOUND_MESSAGE = "Target element not found"
NO_LOCATOR_MESSAGE = "Could not extract a valid XPath, the element may lack unique identifiers"

FALLBACK_STRATEGY = "fallback"


class LocatorGenerator:
    """Entry point: turns a node into a ranked, validated locator result."""

    def __init__(
        self,
        adapter: TreeAdapter,
        config: SynthesisConfig = DEFAULT_CONFIG,
        clock: Clock | None = None,
        strategies: Iterable[LocatorStrategy] | None = None,
    ) -> None:
        self.adapter = adapter
        self.config = config
        self.oracle = EvaluationOracle(adapter)
        self.analyzer = ElementAnalyzer(adapter, self.oracle, config, clock)
        self.manager = StrategyManager(adapter, self.oracle, self.analyzer, config, strategies)
        self.cache = TtlCache(config.result_ttl_seconds, clock)

    def generate_locator(self, node: Node | None) -> GenerationResult:
        """Never raises: every error, adapter errors included, becomes a failed result."""
        if node is None:
            return self._failure(None, INVALID_ELEMENT_MESSAGE)

        snapshot: FeatureSnapshot | None = None
        try:
            if not self.adapter.tag(node):
                return self._failure(None, INVALID_ELEMENT_MESSAGE)
            key = element_fingerprint(self.adapter, node)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return cached
            snapshot = self.analyzer.analyze(node)
            ranked = self._rank(node, snapshot)
            result = GenerationResult(
                success=True,
                primary=ranked.primary,
                alternatives=tuple(ranked.alternatives),
                element=self.element_info(node),
                snapshot=snapshot,
                timestamp=time.time(),
            )
        except (NoApplicableStrategy, AllStrategiesFailed) as exc:
            logger.info("%s; falling back to a positional path", exc)
            return self._fallback_result(node, snapshot)
        except LocatorSynthesisError as exc:
            logger.warning("Locator generation failed: %s", exc)
            return self._failure(node, str(exc), snapshot)
        except Exception as exc:
            logger.exception("Unexpected error while generating a locator")
            return self._failure(node, f"XPath extraction failed: {exc}", snapshot)

        self.cache.put(key, result)
        self.cache.evict_expired()
        return result

    def generate_locator_at(self, x: float, y: float) -> GenerationResult:
        try:
            node = self.adapter.node_from_point(x, y)
        except Exception as exc:
            logger.warning("Point lookup at (%s, %s) failed: %s", x, y, exc)
            node = None
        if node is None:
            return self._failure(None, NOT_FOUND_MESSAGE)
        return self.generate_locator(node)

    async def generate_and_deliver(self, node: Node | None, sink: Sink) -> tuple[GenerationResult, bool]:
        """Generate synchronously, then hand the primary expression to ``sink``."""
        result = self.generate_locator(node)
        if not result.success or result.primary is None:
            return result, False
        try:
            await sink(result.primary.expression)
        except Exception as exc:
            logger.warning("Delivering %s failed: %s", result.primary.expression, exc)
            return result, False
        return result, True

    def validate(self, expression: str, target: Node) -> ValidationReport:
        try:
            matches = self.oracle.evaluate(expression)
        except OracleSyntaxError as exc:
            return ValidationReport(
                valid=False,
                unique=False,
                correct=False,
                match_count=0,
                message=f"XPath syntax error: {exc.reason}",
            )
        correct = bool(matches) and self.adapter.same_node(matches[0], target)
        return ValidationReport(
            valid=True,
            unique=len(matches) == 1,
            correct=correct,
            match_count=len(matches),
            message="Validation succeeded" if correct else "XPath does not match the target element",
        )

    def fallback_expression(self, node: Node) -> tuple[str, bool]:
        """Positional path anchored at the nearest trustworthy id, else absolute.

        Returns the expression and whether it is provisional (did not validate).
        """
        adapter = self.adapter
        segments: list[str] = []
        anchored: str | None = None
        current = node
        while current is not None:
            id_value = valid_id(attr(adapter, current, "id"))
            if anchored is None and id_value:
                anchored = "/".join([f"//*[@id={xpath_literal(id_value)}]", *segments])
            segments.insert(0, f"{tag_of(adapter, current)}[{element_index(adapter, current)}]")
            current = adapter.parent(current)
        if not segments:
            raise FallbackFailed("Could not build a positional path for the target")

        hosts = shadow_host_chain(adapter, node)
        root_prefix = "./" if hosts else "/"
        absolute = join_composite([*hosts, root_prefix + "/".join(segments)])
        options = [join_composite([*hosts, anchored])] if anchored else []
        options.append(absolute)
        for expression in options:
            if self.oracle.matches(expression, node):
                return expression, False
        logger.warning("Fallback path %s did not validate; returning it as provisional", absolute)
        return absolute, True

    def element_info(self, node: Node) -> ElementInfo:
        return ElementInfo(
            tag=tag_of(self.adapter, node),
            text=visible_text(self.adapter, node),
            id=attr(self.adapter, node, "id"),
            class_name=attr(self.adapter, node, "class"),
        )

    def clear_cache(self) -> None:
        self.cache.clear()
        self.analyzer.clear_cache()

    def evict_expired(self) -> int:
        return self.cache.evict_expired() + self.analyzer.cache.evict_expired()

    def stats(self) -> dict[str, Any]:
        return {
            "cache_size": len(self.cache),
            "feature_cache_size": len(self.analyzer.cache),
            "strategy_stats": self.manager.stats(),
        }

    def _rank(self, node: Node, snapshot: FeatureSnapshot) -> RankedResult:
        ranked = self.manager.generate(node, snapshot)
        if ranked.primary is not None:
            return ranked
        if not ranked.applicable:
            raise NoApplicableStrategy("No strategy applies to the target")
        raise AllStrategiesFailed(f"Strategies {', '.join(ranked.applicable)} produced no valid expression")

    def _fallback_result(self, node: Node, snapshot: FeatureSnapshot | None) -> GenerationResult:
        try:
            expression, provisional = self.fallback_expression(node)
            element = self.element_info(node)
        except FallbackFailed as exc:
            logger.warning("Fallback failed: %s", exc)
            return self._failure(node, NO_LOCATOR_MESSAGE, snapshot)
        except Exception as exc:
            logger.exception("Unexpected error while building the fallback path")
            return self._failure(node, f"XPath extraction failed: {exc}", snapshot)
        primary = Candidate(
            strategy=FALLBACK_STRATEGY,
            expression=expression,
            score=self.config.scoring.fallback_score,
            priority=0,
            provisional=provisional,
        )
        return GenerationResult(
            success=True,
            primary=primary,
            alternatives=(),
            element=element,
            snapshot=snapshot,
            timestamp=time.time(),
        )

    def _failure(
        self,
        node: Node | None,
        message: str,
        snapshot: FeatureSnapshot | None = None,
    ) -> GenerationResult:
        return GenerationResult(
            success=False,
            primary=None,
            alternatives=(),
            element=self._element_info_or_none(node),
            snapshot=snapshot,
            timestamp=time.time(),
            error=message,
        )

    def _element_info_or_none(self, node: Node | None) -> ElementInfo | None:
        if node is None:
            return None
        try:
            return self.element_info(node) if self.adapter.tag(node) else None
        except Exception as exc:
            logger.debug("Element details unavailable: %s", exc)
            return None
