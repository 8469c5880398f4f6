from __future__ import annotations

from .models import GenerationContext
from .selector_rules import filtered_classes, is_framework_attribute, valid_id, xpath_literal
from .strategy_base import BaseStrategy, is_unique_expression
from .tree import (
    Node,
    ancestors_below_body,
    attr,
    depth_below_body,
    index_in,
    is_body,
    sibling_nodes,
    tag_of,
    visible_text,
)

_RELATIVE_SKIP_ATTRS = {"style", "class", "id"}


class RelativeStrategy(BaseStrategy):
    """Paths relative to ancestors, siblings and sibling position."""

    name = "relative"
    priority = 60

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool:
        return ctx.adapter.parent(node) is not None

    def generate(self, node: Node, ctx: GenerationContext) -> str | None:
        expressions = [
            *self.parent_paths(node, ctx),
            *self.sibling_paths(node, ctx),
            *self.index_paths(node, ctx),
        ]
        return self.first_valid(expressions, node, ctx)

    def parent_paths(self, node: Node, ctx: GenerationContext) -> list[str]:
        adapter = ctx.adapter
        tag = tag_of(adapter, node)
        paths: list[str] = []
        for ancestor in ancestors_below_body(adapter, node):
            parent_tag = tag_of(adapter, ancestor)
            id_value = valid_id(attr(adapter, ancestor, "id"))
            if id_value:
                literal = xpath_literal(id_value)
                paths.extend([f"//*[@id={literal}]//{tag}", f"//*[@id={literal}]/{tag}"])
            for token in filtered_classes(attr(adapter, ancestor, "class"))[:2]:
                literal = xpath_literal(token)
                paths.extend(
                    [
                        f"//{parent_tag}[@class={literal}]//{tag}",
                        f"//{parent_tag}[contains(@class, {literal})]/{tag}",
                    ]
                )
            for name, value in unique_attributes(ctx, ancestor)[:2]:
                paths.append(f"//{parent_tag}[@{name}={xpath_literal(value)}]//{tag}")
        return paths

    def sibling_paths(self, node: Node, ctx: GenerationContext) -> list[str]:
        adapter = ctx.adapter
        tag = tag_of(adapter, node)
        siblings = sibling_nodes(adapter, node)
        position = index_in(adapter, node, siblings)
        paths: list[str] = []
        for index, sibling in enumerate(siblings):
            if index == position:
                continue
            id_value = valid_id(attr(adapter, sibling, "id"))
            if id_value:
                axis = "following-sibling" if position > index else "preceding-sibling"
                paths.append(f"//*[@id={xpath_literal(id_value)}]/{axis}::{tag}")
            text = visible_text(adapter, sibling)
            if text and len(text) <= ctx.config.anchor_text_length:
                literal = xpath_literal(text)
                sibling_tag = tag_of(adapter, sibling)
                paths.extend(
                    [
                        f"//{sibling_tag}[text()={literal}]/following-sibling::{tag}",
                        f"//{sibling_tag}[text()={literal}]/preceding-sibling::{tag}",
                    ]
                )
        return paths

    def index_paths(self, node: Node, ctx: GenerationContext) -> list[str]:
        adapter = ctx.adapter
        parent = adapter.parent(node)
        if parent is None:
            return []
        tag = tag_of(adapter, node)
        siblings = adapter.children(parent)
        same_tag = [sibling for sibling in siblings if tag_of(adapter, sibling) == tag]
        all_index = index_in(adapter, node, siblings) + 1
        same_tag_index = index_in(adapter, node, same_tag) + 1
        paths: list[str] = []
        parent_xpath = parent_expression(ctx, parent)
        if parent_xpath:
            paths.append(f"{parent_xpath}/*[{all_index}]")
            if len(same_tag) > 1:
                paths.append(f"{parent_xpath}/{tag}[{same_tag_index}]")
        if len(same_tag) > 1:
            paths.append(f"//{tag}[{same_tag_index}]")
        return paths

    def get_score(self, node: Node, ctx: GenerationContext) -> int:
        policy = ctx.policy
        adapter = ctx.adapter
        score = self.priority
        if any(attr(adapter, ancestor, "id") for ancestor in ancestors_below_body(adapter, node)):
            score += policy.relative_ancestor_id_bonus
        score += max(0, policy.relative_depth_ceiling - depth_below_body(adapter, node))
        return score


def parent_expression(ctx: GenerationContext, parent: Node) -> str | None:
    adapter = ctx.adapter
    if is_body(adapter, parent):
        return None
    id_value = valid_id(attr(adapter, parent, "id"))
    if id_value:
        return f"//*[@id={xpath_literal(id_value)}]"
    tag = tag_of(adapter, parent)
    for token in filtered_classes(attr(adapter, parent, "class")):
        expression = f"//{tag}[@class={xpath_literal(token)}]"
        if is_unique_expression(ctx, expression):
            return expression
    return None


def unique_attributes(ctx: GenerationContext, node: Node) -> list[tuple[str, str]]:
    found: list[tuple[str, str]] = []
    for name, value in ctx.adapter.attributes(node):
        if name in _RELATIVE_SKIP_ATTRS or not value or is_framework_attribute(name, value):
            continue
        if is_unique_expression(ctx, f"//*[@{name}={xpath_literal(value)}]"):
            found.append((name, value))
    return found
