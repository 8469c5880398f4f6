from __future__ import annotations

import logging

from .cache import Clock, TtlCache, element_fingerprint
from .config import DEFAULT_CONFIG, SynthesisConfig
from .errors import InvalidElement
from .models import (
    AccessibilityInfo,
    AttributeTiers,
    BasicInfo,
    ContextInfo,
    FeatureSnapshot,
    FrameworkInfo,
    NodeSummary,
    PositionInfo,
    SvgInfo,
    TextInfo,
    UniquenessInfo,
)
from .oracle import EvaluationOracle
from .selector_rules import (
    PRIORITY_ATTRS,
    is_framework_attribute,
    is_random_generated_value,
    is_stable_data_attribute,
    is_valid_id,
    normalize_space,
    stable_attributes,
    xpath_literal,
)
from .tree import (
    Node,
    TreeAdapter,
    attr,
    ancestors,
    closest,
    count_descendants,
    depth_below_body,
    first_descendant,
    index_in,
    is_visible,
    tag_of,
    visible_text,
)

logger = logging.getLogger("xpathcraft.analyzer")

INTERACTIVE_TAGS = {"a", "button", "input", "select", "textarea"}
INTERACTIVE_ROLES = {"button", "link", "tab", "menuitem"}
FOCUSABLE_TAGS = {"button", "input", "select", "textarea"}

REACT_EXPANDO_PREFIXES = ("__reactFiber", "__reactInternalInstance", "__reactProps", "_reactInternal")
VUE_EXPANDO_KEYS = {"__vue__", "_vnode", "__vue_app__", "__vueParentComponent"}
ANGULAR_EXPANDO_KEYS = {"ng", "ngModel", "__ngContext__"}
ANGULAR_MARKER_ATTRS = ("ng-app", "ng-version")


class ElementAnalyzer:
    """Extracts the feature snapshot every strategy reads from."""

    def __init__(
        self,
        adapter: TreeAdapter,
        oracle: EvaluationOracle | None = None,
        config: SynthesisConfig = DEFAULT_CONFIG,
        clock: Clock | None = None,
    ) -> None:
        self.adapter = adapter
        self.oracle = oracle or EvaluationOracle(adapter)
        self.config = config
        self.cache = TtlCache(config.feature_ttl_seconds, clock)

    def analyze(self, node: Node | None) -> FeatureSnapshot:
        if node is None or not self.adapter.tag(node):
            raise InvalidElement("Invalid element: node is missing or has no tag")

        key = element_fingerprint(self.adapter, node)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        snapshot = FeatureSnapshot(
            basic=self.basic_info(node),
            attributes=self.attribute_tiers(node),
            text=self.text_info(node),
            position=self.position_info(node),
            context=self.context_info(node),
            accessibility=self.accessibility_info(node),
            framework=self.framework_info(node),
            uniqueness=self.uniqueness_info(node),
        )
        self.cache.put(key, snapshot)
        evicted = self.cache.evict_expired()
        if evicted:
            logger.debug("Evicted %s expired feature snapshot(s)", evicted)
        return snapshot

    def clear_cache(self) -> None:
        self.cache.clear()

    def basic_info(self, node: Node) -> BasicInfo:
        adapter = self.adapter
        tag = tag_of(adapter, node)
        svg = self.svg_info(node)
        return BasicInfo(
            tag=tag,
            id=attr(adapter, node, "id") or None,
            class_name=attr(adapter, node, "class") or None,
            type=attr(adapter, node, "type") or None,
            role=attr(adapter, node, "role") or None,
            is_visible=is_visible(adapter, node),
            is_interactive=self.is_interactive(node),
            is_svg=svg is not None,
            svg=svg,
        )

    def attribute_tiers(self, node: Node) -> AttributeTiers:
        pairs = self.adapter.attributes(node)
        priority: list[tuple[str, str]] = []
        data: list[tuple[str, str]] = []
        aria: list[tuple[str, str]] = []
        framework: list[tuple[str, str]] = []
        for name, value in pairs:
            if is_framework_attribute(name, value):
                framework.append((name, value))
            elif name in PRIORITY_ATTRS:
                priority.append((name, value))
            elif name.startswith("data-") and is_stable_data_attribute(name, value):
                data.append((name, value))
            elif name.startswith("aria-") and not is_random_generated_value(value):
                aria.append((name, value))
        return AttributeTiers(
            all=dict(pairs),
            priority=tuple(priority),
            data=tuple(data),
            aria=tuple(aria),
            framework=tuple(framework),
            stable=tuple(stable_attributes(pairs)),
        )

    def text_info(self, node: Node) -> TextInfo:
        return TextInfo(
            direct=visible_text(self.adapter, node),
            full=self.adapter.text_content(node).strip(),
            inner=self.adapter.inner_text(node).strip(),
        )

    def position_info(self, node: Node) -> PositionInfo:
        adapter = self.adapter
        parent = adapter.parent(node)
        sibling_index = 0
        same_tag_index = 0
        has_siblings = False
        if parent is not None:
            siblings = adapter.children(parent)
            tag = tag_of(adapter, node)
            sibling_index = index_in(adapter, node, siblings)
            same_tag_index = index_in(
                adapter,
                node,
                [sibling for sibling in siblings if tag_of(adapter, sibling) == tag],
            )
            has_siblings = len(siblings) > 1
        return PositionInfo(
            rect=adapter.bounding_box(node),
            sibling_index=sibling_index,
            same_tag_index=same_tag_index,
            depth=depth_below_body(adapter, node),
            has_parent=parent is not None,
            has_siblings=has_siblings,
        )

    def context_info(self, node: Node) -> ContextInfo:
        adapter = self.adapter
        parent = adapter.parent(node)
        return ContextInfo(
            parent=self._summary(parent) if parent is not None else None,
            children=tuple(self._summary(child) for child in adapter.children(node)),
            in_form=closest(adapter, node, "form") is not None,
            in_table=closest(adapter, node, "table") is not None,
            in_list=any(closest(adapter, node, tag) is not None for tag in ("ul", "ol", "dl")),
            in_shadow_scope=adapter.shadow_scope_of(node) is not None,
        )

    def accessibility_info(self, node: Node) -> AccessibilityInfo:
        adapter = self.adapter
        return AccessibilityInfo(
            has_aria_label=bool(attr(adapter, node, "aria-label")),
            has_aria_describedby=bool(attr(adapter, node, "aria-describedby")),
            has_title=bool(attr(adapter, node, "title")),
            has_alt=bool(attr(adapter, node, "alt")),
            role=attr(adapter, node, "role"),
            tab_index=self.tab_index(node),
            is_labelled=self.has_associated_label(node),
        )

    def framework_info(self, node: Node) -> FrameworkInfo:
        names = tuple(name for name, value in self.adapter.attributes(node) if is_framework_attribute(name, value))
        return FrameworkInfo(type=self.framework_type(node), attributes=names)

    def uniqueness_info(self, node: Node) -> UniquenessInfo:
        adapter = self.adapter
        scope = adapter.shadow_scope_of(node)
        unique: list[str] = []
        id_value = attr(adapter, node, "id")
        if id_value and is_valid_id(id_value):
            if self.oracle.count(f"//*[@id={xpath_literal(id_value)}]", scope) == 1:
                unique.append("id")
        for name, value in adapter.attributes(node):
            if name == "id" or is_framework_attribute(name, value):
                continue
            # Names XPath cannot address count as zero matches and are skipped.
            if self.oracle.count(f"//*[@{name}={xpath_literal(value)}]", scope) == 1:
                unique.append(name)
        return UniquenessInfo(unique_attributes=tuple(unique))

    def svg_info(self, node: Node) -> SvgInfo | None:
        adapter = self.adapter
        svg = closest(adapter, node, "svg")
        if svg is None:
            return None
        view_box_attr = "viewBox"
        view_box = attr(adapter, svg, "viewBox")
        if view_box is None and attr(adapter, svg, "viewbox") is not None:
            view_box_attr = "viewbox"
            view_box = attr(adapter, svg, "viewbox")
        title = first_descendant(adapter, svg, "title")
        desc = first_descendant(adapter, svg, "desc")
        use = first_descendant(adapter, svg, "use")
        use_href = None
        if use is not None:
            use_href = attr(adapter, use, "href") or attr(adapter, use, "xlink:href")
        return SvgInfo(
            is_root=svg is node or adapter.same_node(svg, node),
            svg_element=svg,
            view_box=view_box,
            view_box_attr=view_box_attr,
            width=attr(adapter, svg, "width"),
            height=attr(adapter, svg, "height"),
            title_text=normalize_space(adapter.text_content(title)) if title is not None else "",
            desc_text=normalize_space(adapter.text_content(desc)) if desc is not None else "",
            path_count=count_descendants(adapter, svg, "path"),
            use_count=count_descendants(adapter, svg, "use"),
            use_href=use_href,
            aria_label=attr(adapter, svg, "aria-label") or "",
        )

    def framework_type(self, node: Node) -> str:
        keys = set(self.adapter.expando_keys(node))
        if any(key.startswith(REACT_EXPANDO_PREFIXES) for key in keys):
            return "react"
        if keys & VUE_EXPANDO_KEYS:
            return "vue"
        if keys & ANGULAR_EXPANDO_KEYS:
            return "angular"
        if any(attr(self.adapter, node, name) is not None for name in ANGULAR_MARKER_ATTRS):
            return "angular"
        return "vanilla"

    def is_interactive(self, node: Node) -> bool:
        adapter = self.adapter
        return (
            tag_of(adapter, node) in INTERACTIVE_TAGS
            or attr(adapter, node, "role") in INTERACTIVE_ROLES
            or attr(adapter, node, "onclick") is not None
            or self.tab_index(node) >= 0
        )

    def tab_index(self, node: Node) -> int:
        raw = attr(self.adapter, node, "tabindex")
        if raw is not None:
            try:
                return int(raw.strip())
            except ValueError:
                pass
        tag = tag_of(self.adapter, node)
        if tag in FOCUSABLE_TAGS or (tag == "a" and attr(self.adapter, node, "href") is not None):
            return 0
        return -1

    def has_associated_label(self, node: Node) -> bool:
        adapter = self.adapter
        id_value = attr(adapter, node, "id")
        if id_value:
            scope = adapter.shadow_scope_of(node)
            if self.oracle.count(f"//label[@for={xpath_literal(id_value)}]", scope) > 0:
                return True
        return any(tag_of(adapter, ancestor) == "label" for ancestor in ancestors(adapter, node))

    def _summary(self, node: Node) -> NodeSummary:
        return NodeSummary(
            tag=tag_of(self.adapter, node),
            id=attr(self.adapter, node, "id") or None,
            class_name=attr(self.adapter, node, "class") or None,
        )
