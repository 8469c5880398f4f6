from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .models import GenerationContext
from .selector_rules import filtered_classes, valid_id, xpath_literal
from .strategy_base import BaseStrategy, is_unique_expression
from .tree import Node, attr, index_in, is_body, sibling_nodes, tag_of, visible_text

Relationship = Literal["preceding-sibling", "following-sibling", "ancestor", "descendant"]

_ANCHOR_SKIP_ATTRS = {"style", "class", "id"}


@dataclass(frozen=True, slots=True)
class Anchor:
    node: Node
    relationship: Relationship
    distance: int
    score: int
    kind: str


class AnchorStrategy(BaseStrategy):
    """Locates the target relative to a nearby, independently unique node."""

    name = "anchor"
    priority = 95

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool:
        return bool(find_anchors(ctx, node))

    def generate(self, node: Node, ctx: GenerationContext) -> str | None:
        tag = tag_of(ctx.adapter, node)
        text = ctx.snapshot.text.direct
        for anchor in find_anchors(ctx, node):
            anchor_xpath = anchor_expression(ctx, anchor.node)
            if not anchor_xpath:
                continue
            found = self.first_valid(anchor_paths(anchor_xpath, anchor.relationship, tag, text), node, ctx)
            if found:
                return found
        return None

    def get_score(self, node: Node, ctx: GenerationContext) -> int:
        policy = ctx.policy
        anchors = find_anchors(ctx, node)
        score = self.priority
        if anchors:
            score += min(len(anchors) * policy.anchor_count_bonus, policy.anchor_count_cap)
            score += min(anchors[0].score // 2, policy.anchor_best_cap)
        return score


def find_anchors(ctx: GenerationContext, node: Node) -> list[Anchor]:
    """Sibling, ancestor and child anchors ordered by uniqueness score."""
    anchors = [
        *_sibling_anchors(ctx, node),
        *_ancestor_anchors(ctx, node),
        *_child_anchors(ctx, node),
    ]
    return sorted(anchors, key=lambda anchor: anchor.score, reverse=True)


def uniqueness_score(ctx: GenerationContext, node: Node) -> int:
    adapter = ctx.adapter
    text_limit = ctx.config.anchor_text_length
    score = 0
    id_value = valid_id(attr(adapter, node, "id"))
    if id_value and is_unique_expression(ctx, f"//*[@id={xpath_literal(id_value)}]"):
        score += 50
    text = visible_text(adapter, node)
    if text and len(text) <= text_limit and is_unique_expression(ctx, f"//*[text()={xpath_literal(text)}]"):
        score += 40
    for name, value in adapter.attributes(node):
        if name in _ANCHOR_SKIP_ATTRS:
            continue
        if is_unique_expression(ctx, f"//*[@{name}={xpath_literal(value)}]"):
            score += 30
            break
    for token in filtered_classes(attr(adapter, node, "class")):
        if is_unique_expression(ctx, f"//*[contains(@class, {xpath_literal(token)})]"):
            score += 25
            break
    return score


def anchor_expression(ctx: GenerationContext, node: Node) -> str | None:
    adapter = ctx.adapter
    tag = tag_of(adapter, node)
    id_value = valid_id(attr(adapter, node, "id"))
    if id_value:
        return f"//*[@id={xpath_literal(id_value)}]"
    text = visible_text(adapter, node)
    if text and len(text) <= ctx.config.anchor_text_length:
        expression = f"//{tag}[text()={xpath_literal(text)}]"
        if is_unique_expression(ctx, expression):
            return expression
    for name, value in adapter.attributes(node):
        if name in _ANCHOR_SKIP_ATTRS:
            continue
        expression = f"//{tag}[@{name}={xpath_literal(value)}]"
        if is_unique_expression(ctx, expression):
            return expression
    return None


def anchor_paths(anchor_xpath: str, relationship: Relationship, tag: str, text: str = "") -> list[str]:
    if relationship == "preceding-sibling":
        paths = [
            f"{anchor_xpath}/following-sibling::{tag}",
            f"{anchor_xpath}/following-sibling::*[self::{tag}]",
        ]
    elif relationship == "following-sibling":
        paths = [
            f"{anchor_xpath}/preceding-sibling::{tag}",
            f"{anchor_xpath}/preceding-sibling::*[self::{tag}]",
        ]
    elif relationship == "ancestor":
        paths = [
            f"{anchor_xpath}//{tag}",
            f"{anchor_xpath}/descendant::{tag}",
        ]
    else:
        paths = [
            f"{anchor_xpath}/parent::*//{tag}",
            f"{anchor_xpath}/..//{tag}",
            f"{anchor_xpath}/parent::{tag}",
        ]
    if text:
        literal = xpath_literal(text)
        paths.extend([f"{path}[text()={literal}]" for path in paths])
    return paths


def _sibling_anchors(ctx: GenerationContext, node: Node) -> list[Anchor]:
    adapter = ctx.adapter
    siblings = sibling_nodes(adapter, node)
    position = index_in(adapter, node, siblings)
    anchors: list[Anchor] = []
    for index, sibling in enumerate(siblings):
        if index == position:
            continue
        score = uniqueness_score(ctx, sibling)
        if score > 0:
            anchors.append(
                Anchor(
                    node=sibling,
                    relationship="preceding-sibling" if index < position else "following-sibling",
                    distance=abs(index - position),
                    score=score,
                    kind="sibling",
                )
            )
    return anchors


def _ancestor_anchors(ctx: GenerationContext, node: Node) -> list[Anchor]:
    adapter = ctx.adapter
    anchors: list[Anchor] = []
    current = adapter.parent(node)
    level = 1
    while current is not None and not is_body(adapter, current) and level <= ctx.config.anchor_max_ancestor_depth:
        score = uniqueness_score(ctx, current)
        if score > 0:
            anchors.append(Anchor(current, "ancestor", level, score - level * 5, "parent"))
        current = adapter.parent(current)
        level += 1
    return anchors


def _child_anchors(ctx: GenerationContext, node: Node) -> list[Anchor]:
    anchors: list[Anchor] = []
    for child in ctx.adapter.children(node):
        score = uniqueness_score(ctx, child)
        if score > 0:
            anchors.append(Anchor(child, "descendant", 1, score - 10, "child"))
    return anchors
