from __future__ import annotations

from dataclasses import dataclass

from .anchor_strategy import anchor_expression, anchor_paths, find_anchors
from .container_strategy import container_expression, container_text_paths, find_containers
from .models import GenerationContext
from .selector_rules import normalize_space, split_classes, xpath_literal
from .strategy_base import BaseStrategy
from .tree import Node, attr, index_in, tag_of

BUTTON_INPUT_TYPES = {"button", "submit", "reset"}
BUTTON_CLASSES = {"btn", "button"}


@dataclass(frozen=True, slots=True)
class DuplicateText:
    count: int
    others: tuple[Node, ...]

    @property
    def has_duplicates(self) -> bool:
        return self.count > 1


class TextStrategy(BaseStrategy):
    """Locates nodes by their own visible text."""

    name = "text"
    priority = 110

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool:
        if not ctx.snapshot.basic.is_visible:
            return False
        length = len(ctx.snapshot.text.direct)
        return 0 < length <= ctx.config.max_text_length

    def generate(self, node: Node, ctx: GenerationContext) -> str | None:
        text = ctx.snapshot.text.direct.strip()
        if not text:
            return None
        duplicates = detect_duplicate_text(ctx, node, text)
        if duplicates.has_duplicates:
            return self.disambiguate(node, ctx, text)
        return self.first_valid(self.formulations(node, ctx, text), node, ctx)

    def formulations(self, node: Node, ctx: GenerationContext, text: str) -> list[str]:
        adapter = ctx.adapter
        tag = tag_of(adapter, node)
        literal = xpath_literal(text)
        normalized = xpath_literal(normalize_space(text))
        expressions: list[str] = []
        if is_button_like(ctx, node):
            expressions.extend(
                [
                    f"//button[text()={literal}]",
                    f"//input[@type='button' and @value={literal}]",
                    f"//input[@type='submit' and @value={literal}]",
                    f"//*[@role='button' and text()={literal}]",
                ]
            )
        expressions.extend(
            [
                f"//{tag}[text()={literal}]",
                f"//{tag}[contains(text(), {literal})]",
                f"//{tag}[normalize-space(text())={normalized}]",
                f"//*[text()={literal}]",
                f"//*[contains(text(), {literal})]",
            ]
        )
        return expressions

    def disambiguate(self, node: Node, ctx: GenerationContext, text: str) -> str | None:
        for expression in (
            container_scoped_expression(ctx, node, text),
            anchor_scoped_expression(ctx, node, text),
            indexed_text_expression(ctx, node, text),
        ):
            if expression and ctx.oracle.matches(expression, node):
                return expression
        return None

    def get_score(self, node: Node, ctx: GenerationContext) -> int:
        policy = ctx.policy
        text = ctx.snapshot.text.direct
        score = self.priority + policy.text_base_bonus
        for limit, bonus in policy.text_length_bonuses:
            if len(text) <= limit:
                score += bonus
                break
        if is_button_like(ctx, node):
            score += policy.text_button_bonus
        if is_link(ctx, node):
            score += policy.text_link_bonus
        if len(text) <= policy.text_unique_short_limit and not detect_duplicate_text(ctx, node, text).has_duplicates:
            score += policy.text_unique_short_bonus
        return score


def detect_duplicate_text(ctx: GenerationContext, node: Node, text: str) -> DuplicateText:
    literal = xpath_literal(text)
    matches = ctx.oracle.evaluate_safely(f"//*[text()={literal} or contains(text(), {literal})]")
    others = tuple(match for match in matches if not ctx.adapter.same_node(match, node))
    return DuplicateText(count=len(others) + 1, others=others)


def container_scoped_expression(ctx: GenerationContext, node: Node, text: str) -> str | None:
    tag = tag_of(ctx.adapter, node)
    for container in find_containers(ctx, node):
        container_xpath = container_expression(ctx, container)
        if not container_xpath:
            continue
        expression = container_text_paths(container_xpath, tag, text)[0]
        if ctx.oracle.matches(expression, node):
            return expression
    return None


def anchor_scoped_expression(ctx: GenerationContext, node: Node, text: str) -> str | None:
    tag = tag_of(ctx.adapter, node)
    literal = xpath_literal(text)
    for anchor in find_anchors(ctx, node):
        anchor_xpath = anchor_expression(ctx, anchor.node)
        if not anchor_xpath:
            continue
        for path in anchor_paths(anchor_xpath, anchor.relationship, tag):
            expression = f"{path}[text()={literal}]"
            if ctx.oracle.matches(expression, node):
                return expression
    return None


def indexed_text_expression(ctx: GenerationContext, node: Node, text: str) -> str | None:
    tag = tag_of(ctx.adapter, node)
    base = f"//{tag}[text()={xpath_literal(text)}]"
    position = index_in(ctx.adapter, node, ctx.oracle.evaluate_safely(base))
    if position < 0:
        return None
    return f"({base})[{position + 1}]"


def is_button_like(ctx: GenerationContext, node: Node) -> bool:
    adapter = ctx.adapter
    tag = tag_of(adapter, node)
    input_type = (attr(adapter, node, "type") or "").lower()
    classes = set(split_classes(attr(adapter, node, "class")))
    return (
        tag == "button"
        or (tag == "input" and input_type in BUTTON_INPUT_TYPES)
        or attr(adapter, node, "role") == "button"
        or bool(classes & BUTTON_CLASSES)
    )


def is_link(ctx: GenerationContext, node: Node) -> bool:
    return tag_of(ctx.adapter, node) == "a" and bool(attr(ctx.adapter, node, "href"))
