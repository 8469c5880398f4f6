from __future__ import annotations

from .models import GenerationContext
from .selector_rules import filtered_classes, valid_id, xpath_literal
from .strategy_base import BaseStrategy, is_unique_expression
from .tree import Node, ancestors_below_body, attr, tag_of

SEMANTIC_CONTAINER_TAGS = {
    "main",
    "section",
    "article",
    "aside",
    "nav",
    "header",
    "footer",
    "form",
    "fieldset",
    "table",
    "tbody",
    "thead",
    "tfoot",
    "ul",
    "ol",
    "dl",
    "figure",
    "blockquote",
    "details",
}

SEMANTIC_CONTAINER_ROLES = {
    "main",
    "navigation",
    "banner",
    "contentinfo",
    "complementary",
    "region",
    "article",
    "section",
    "form",
    "search",
    "dialog",
    "tabpanel",
    "group",
    "list",
    "listbox",
    "menu",
    "menubar",
}

CONTAINER_CLASS_KEYWORDS = (
    "container",
    "wrapper",
    "content",
    "main",
    "section",
    "panel",
    "card",
    "box",
    "widget",
    "module",
    "component",
)

_IDENTITY_SKIP_ATTRS = {"style", "class", "id"}


class ContainerContextStrategy(BaseStrategy):
    """Scopes a text match under the nearest identifiable or semantic container."""

    name = "container-context"
    priority = 90

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool:
        return ctx.snapshot.basic.is_visible and ctx.snapshot.text.has_text and bool(find_containers(ctx, node))

    def generate(self, node: Node, ctx: GenerationContext) -> str | None:
        text = ctx.snapshot.text.direct
        if not text:
            return None
        tag = tag_of(ctx.adapter, node)
        for container in find_containers(ctx, node):
            container_xpath = container_expression(ctx, container)
            if not container_xpath:
                continue
            found = self.first_valid(container_text_paths(container_xpath, tag, text), node, ctx)
            if found:
                return found
        return None

    def get_score(self, node: Node, ctx: GenerationContext) -> int:
        policy = ctx.policy
        containers = find_containers(ctx, node)
        score = self.priority
        if containers:
            score += len(containers) * policy.container_per_container_bonus
            if any(attr(ctx.adapter, container, "id") for container in containers):
                score += policy.container_id_bonus
        return score


def container_text_paths(container_xpath: str, tag: str, text: str) -> list[str]:
    literal = xpath_literal(text)
    return [
        f"{container_xpath}//{tag}[text()={literal}]",
        f"{container_xpath}//*[text()={literal}]",
        f"{container_xpath}//{tag}[contains(text(), {literal})]",
        f"{container_xpath}//*[contains(text(), {literal})]",
    ]


def find_containers(ctx: GenerationContext, node: Node) -> list[Node]:
    """Ancestors below body that are uniquely identifiable or semantic, nearest first."""
    containers: list[Node] = []
    for ancestor in ancestors_below_body(ctx.adapter, node):
        if has_unique_identifier(ctx, ancestor) or is_semantic_container(ctx, ancestor):
            containers.append(ancestor)
    return containers


def has_unique_identifier(ctx: GenerationContext, node: Node) -> bool:
    adapter = ctx.adapter
    id_value = valid_id(attr(adapter, node, "id"))
    if id_value and is_unique_expression(ctx, f"//*[@id={xpath_literal(id_value)}]"):
        return True
    for token in filtered_classes(attr(adapter, node, "class")):
        if is_unique_expression(ctx, f"//*[contains(@class, {xpath_literal(token)})]"):
            return True
    for name, value in adapter.attributes(node):
        if name in _IDENTITY_SKIP_ATTRS:
            continue
        if is_unique_expression(ctx, f"//*[@{name}={xpath_literal(value)}]"):
            return True
    return False


def is_semantic_container(ctx: GenerationContext, node: Node) -> bool:
    adapter = ctx.adapter
    if tag_of(adapter, node) in SEMANTIC_CONTAINER_TAGS:
        return True
    role = attr(adapter, node, "role")
    if role and role in SEMANTIC_CONTAINER_ROLES:
        return True
    classes = (attr(adapter, node, "class") or "").lower()
    return any(keyword in classes for keyword in CONTAINER_CLASS_KEYWORDS)


def container_expression(ctx: GenerationContext, node: Node) -> str | None:
    adapter = ctx.adapter
    tag = tag_of(adapter, node)
    id_value = valid_id(attr(adapter, node, "id"))
    if id_value:
        return f"//*[@id={xpath_literal(id_value)}]"
    for token in filtered_classes(attr(adapter, node, "class")):
        expression = f"//{tag}[contains(@class, {xpath_literal(token)})]"
        if is_unique_expression(ctx, expression):
            return expression
    for name, value in adapter.attributes(node):
        if name in _IDENTITY_SKIP_ATTRS:
            continue
        expression = f"//{tag}[@{name}={xpath_literal(value)}]"
        if is_unique_expression(ctx, expression):
            return expression
    return None
