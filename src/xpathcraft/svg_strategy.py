from __future__ import annotations

from dataclasses import dataclass

from .models import GenerationContext, SvgInfo
from .selector_rules import filtered_classes, xpath_literal
from .strategy_base import BaseStrategy, unique_expressions
from .tree import Node, TreeAdapter, attr, element_index, index_in, tag_of

_LABEL_DATA_HINTS = ("label", "title", "tooltip")


@dataclass(frozen=True, slots=True)
class LabelledParent:
    node: Node
    attribute: str
    value: str


class SvgStrategy(BaseStrategy):
    """Locates inline SVG icons by their labels, shape and surrounding labels."""

    name = "svg"
    priority = 85

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool:
        return ctx.snapshot.basic.is_svg and ctx.snapshot.basic.svg is not None

    def generate(self, node: Node, ctx: GenerationContext) -> str | None:
        info = ctx.snapshot.basic.svg
        if info is None:
            return None
        suffix = "" if info.is_root else descendant_suffix(ctx.adapter, info.svg_element, node)
        if suffix is None:
            return None
        expressions = [f"{expression}{suffix}" for expression in self.formulations(ctx, info)]
        found = self.first_valid(expressions, node, ctx)
        if found:
            return found
        positional = [f"{expression}{suffix}" for expression in self.positional(ctx, info)]
        return self.first_valid(positional, node, ctx)

    def formulations(self, ctx: GenerationContext, info: SvgInfo) -> list[str]:
        adapter = ctx.adapter
        svg = info.svg_element
        expressions: list[str] = []
        if info.has_aria_label:
            literal = xpath_literal(info.aria_label)
            expressions.extend([f"//svg[@aria-label={literal}]", f"//*[name()='svg'][@aria-label={literal}]"])
        if info.has_title:
            literal = xpath_literal(info.title_text)
            expressions.extend(
                [
                    f"//svg[title[text()={literal}]]",
                    f"//*[name()='svg'][*[name()='title'][text()={literal}]]",
                ]
            )
        if info.has_desc:
            literal = xpath_literal(info.desc_text)
            expressions.extend(
                [
                    f"//svg[desc[text()={literal}]]",
                    f"//*[name()='svg'][*[name()='desc'][text()={literal}]]",
                ]
            )
        labelled = find_labelled_parent(adapter, svg, ctx.config.svg_label_search_depth)
        if labelled is not None:
            parent_tag = tag_of(adapter, labelled.node)
            literal = xpath_literal(labelled.value)
            expressions.extend(
                [
                    f"//{parent_tag}[@{labelled.attribute}={literal}]//svg",
                    f"//{parent_tag}[@{labelled.attribute}={literal}]//*[name()='svg']",
                ]
            )
        for token in filtered_classes(attr(adapter, svg, "class"))[:2]:
            literal = xpath_literal(token)
            expressions.extend(
                [
                    f"//svg[contains(@class, {literal})]",
                    f"//*[name()='svg'][contains(@class, {literal})]",
                ]
            )
        if info.view_box:
            literal = xpath_literal(info.view_box)
            expressions.extend(
                [
                    f"//svg[@{info.view_box_attr}={literal}]",
                    f"//*[name()='svg'][@{info.view_box_attr}={literal}]",
                ]
            )
        if info.path_count > 0:
            expressions.extend(
                [
                    f"//svg[count(.//path)={info.path_count}]",
                    f"//*[name()='svg'][count(.//*[name()='path'])={info.path_count}]",
                ]
            )
        if info.use_count > 0 and info.use_href:
            literal = xpath_literal(info.use_href)
            expressions.extend(
                [
                    f"//svg[.//use[@href={literal}]]",
                    f"//*[name()='svg'][.//*[name()='use'][@href={literal}]]",
                ]
            )
        return unique_expressions(expressions)

    def positional(self, ctx: GenerationContext, info: SvgInfo) -> list[str]:
        adapter = ctx.adapter
        svg = info.svg_element
        expressions = [f"//svg[{element_index(adapter, svg)}]"]
        for base in ("//svg", "//*[name()='svg']"):
            position = index_in(adapter, svg, ctx.oracle.evaluate_safely(base))
            if position >= 0:
                expressions.append(f"({base})[{position + 1}]")
        return expressions

    def get_score(self, node: Node, ctx: GenerationContext) -> int:
        info = ctx.snapshot.basic.svg
        if info is None:
            return 0
        policy = ctx.policy
        score = self.priority
        if info.has_aria_label:
            score += policy.svg_aria_label_bonus
        if info.has_title:
            score += policy.svg_title_bonus
        if info.has_desc:
            score += policy.svg_desc_bonus
        if find_labelled_parent(ctx.adapter, info.svg_element, ctx.config.svg_label_search_depth) is not None:
            score += policy.svg_labelled_parent_bonus
        if info.view_box:
            score += policy.svg_view_box_bonus
        if attr(ctx.adapter, info.svg_element, "class"):
            score += policy.svg_class_bonus
        return score


def find_labelled_parent(adapter: TreeAdapter, svg: Node, max_depth: int = 3) -> LabelledParent | None:
    current = adapter.parent(svg)
    depth = 0
    while current is not None and depth < max_depth:
        for name in ("aria-label", "title"):
            value = (attr(adapter, current, name) or "").strip()
            if value:
                return LabelledParent(current, name, value)
        for name, value in adapter.attributes(current):
            if name.startswith("data-") and any(hint in name for hint in _LABEL_DATA_HINTS) and value.strip():
                return LabelledParent(current, name, value.strip())
        current = adapter.parent(current)
        depth += 1
    return None


def descendant_suffix(adapter: TreeAdapter, svg: Node, node: Node) -> str | None:
    """Name-agnostic child path from the svg root down to a node inside it."""
    segments: list[str] = []
    current = node
    while current is not None and not adapter.same_node(current, svg):
        segments.insert(0, f"*[name()={xpath_literal(adapter.tag(current) or '')}][{element_index(adapter, current)}]")
        current = adapter.parent(current)
    if current is None:
        return None
    return "/" + "/".join(segments)
