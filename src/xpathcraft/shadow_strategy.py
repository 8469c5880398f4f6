from __future__ import annotations

from .models import GenerationContext
from .oracle import join_composite
from .selector_rules import filtered_classes, is_valid_id, valid_id, xpath_literal
from .strategy_base import BaseStrategy, unique_expressions
from .tree import Node, TreeAdapter, attr, element_index, tag_of


class ShadowDomStrategy(BaseStrategy):
    """Builds composite expressions that pierce open shadow scopes host by host."""

    name = "shadow-dom"
    priority = 90

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool:
        return ctx.in_shadow_scope

    def generate(self, node: Node, ctx: GenerationContext) -> str | None:
        adapter = ctx.adapter
        scope = adapter.shadow_scope_of(node)
        if scope is None:
            return None
        hosts = shadow_host_chain(adapter, node)
        if not hosts:
            return None
        for inner in unique_expressions(self.inner_segments(node, ctx)):
            if not ctx.oracle.matches(inner, node, scope):
                continue
            expression = join_composite([*hosts, inner])
            if ctx.oracle.matches(expression, node):
                return expression
        return None

    def inner_segments(self, node: Node, ctx: GenerationContext) -> list[str]:
        adapter = ctx.adapter
        tag = tag_of(adapter, node)
        segments: list[str] = []
        text = ctx.snapshot.text.direct
        if text and len(text) <= ctx.config.max_text_length:
            segments.append(f"//{tag}[text()={xpath_literal(text)}]")
        id_value = valid_id(attr(adapter, node, "id"))
        if id_value:
            segments.append(f"//*[@id={xpath_literal(id_value)}]")
        name = attr(adapter, node, "name")
        if name:
            segments.append(f"//*[@name={xpath_literal(name)}]")
        classes = filtered_classes(attr(adapter, node, "class"))
        if classes:
            segments.append(f"//*[contains(@class, {xpath_literal(classes[0])})]")
        segments.append(f"//{tag}[{element_index(adapter, node)}]")
        return segments

    def get_score(self, node: Node, ctx: GenerationContext) -> int:
        policy = ctx.policy
        score = self.priority + policy.shadow_base_bonus
        if is_valid_id(attr(ctx.adapter, node, "id")):
            score += policy.shadow_id_bonus
        if attr(ctx.adapter, node, "name"):
            score += policy.shadow_name_bonus
        text = ctx.snapshot.text.direct
        if text and len(text) <= policy.shadow_short_text_limit:
            score += policy.shadow_short_text_bonus
        return score


def shadow_host_chain(adapter: TreeAdapter, node: Node) -> list[str]:
    """Host expressions from the outermost document down to the node's own scope."""
    chain: list[str] = []
    current = node
    while True:
        scope = adapter.shadow_scope_of(current)
        if scope is None:
            break
        host = adapter.shadow_host(scope)
        if host is None:
            break
        chain.insert(0, host_expression(adapter, host))
        current = host
    return chain


def host_expression(adapter: TreeAdapter, host: Node) -> str:
    id_value = valid_id(attr(adapter, host, "id"))
    if id_value:
        return f"//*[@id={xpath_literal(id_value)}]"
    classes = filtered_classes(attr(adapter, host, "class"))
    if classes:
        return f"//*[contains(@class, {xpath_literal(classes[0])})]"
    return f"//{tag_of(adapter, host)}[{element_index(adapter, host)}]"
