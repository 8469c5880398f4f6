from __future__ import annotations

from .models import GenerationContext
from .selector_rules import filtered_classes, is_stable_data_attribute, is_valid_id, xpath_literal
from .strategy_base import BaseStrategy
from .tree import Node, attr, tag_of


class AttributeStrategy(BaseStrategy):
    """Locates nodes by their trusted attributes."""

    name = "attribute"
    priority = 100

    def is_applicable(self, node: Node, ctx: GenerationContext) -> bool:
        return ctx.snapshot.attributes.stable_count > 0

    def generate(self, node: Node, ctx: GenerationContext) -> str | None:
        return self.first_valid(self.formulations(node, ctx), node, ctx)

    def formulations(self, node: Node, ctx: GenerationContext) -> list[str]:
        tag = tag_of(ctx.adapter, node)
        stable = ctx.snapshot.attributes.stable
        high = [item for item in stable if item.priority == "high"]
        medium = [item for item in stable if item.priority == "medium"]
        low = [item for item in stable if item.priority == "low"]
        expressions: list[str] = []

        id_attr = next((item for item in high if item.name == "id"), None)
        if id_attr and is_valid_id(id_attr.value):
            literal = xpath_literal(id_attr.value)
            expressions.extend([f"//*[@id={literal}]", f"//{tag}[@id={literal}]"])

        name_attr = next((item for item in high if item.name == "name"), None)
        if name_attr:
            literal = xpath_literal(name_attr.value)
            expressions.extend([f"//*[@name={literal}]", f"//{tag}[@name={literal}]"])

        for item in high:
            if item.name in ("id", "name"):
                continue
            literal = xpath_literal(item.value)
            expressions.extend([f"//*[@{item.name}={literal}]", f"//{tag}[@{item.name}={literal}]"])

        for item in medium[:2]:
            expressions.append(f"//*[@{item.name}={xpath_literal(item.value)}]")

        classes = filtered_classes(ctx.snapshot.basic.class_name)
        for token in classes[:2]:
            literal = xpath_literal(token)
            expressions.extend([f"//*[@class={literal}]", f"//*[contains(@class, {literal})]"])
        if len(classes) > 1:
            expressions.append(f"//*[@class={xpath_literal(' '.join(classes[:2]))}]")

        data_attrs = [
            item for item in low if item.name.startswith("data-") and is_stable_data_attribute(item.name, item.value)
        ]
        for item in data_attrs[:2]:
            expressions.append(f"//*[@{item.name}={xpath_literal(item.value)}]")
        return expressions

    def get_score(self, node: Node, ctx: GenerationContext) -> int:
        policy = ctx.policy
        score = self.priority
        if is_valid_id(ctx.snapshot.basic.id):
            score += policy.attribute_id_bonus
        if attr(ctx.adapter, node, "name"):
            score += policy.attribute_name_bonus
        classes = filtered_classes(ctx.snapshot.basic.class_name)
        if classes:
            score += min(len(classes) * policy.attribute_class_bonus, policy.attribute_class_bonus_cap)
        return score
