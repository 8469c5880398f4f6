from __future__ import annotations

from typing import Any, Iterator, Protocol, Sequence

from .models import ComputedStyle, Rect

Node = Any
Scope = Any


class TreeAdapter(Protocol):
    """Capability surface the synthesis engine needs from a live tree."""

    def root(self) -> Node: ...

    def tag(self, node: Node) -> str | None: ...

    def attributes(self, node: Node) -> list[tuple[str, str]]: ...

    def parent(self, node: Node) -> Node | None: ...

    def children(self, node: Node) -> list[Node]: ...

    def direct_text(self, node: Node) -> list[str]: ...

    def text_content(self, node: Node) -> str: ...

    def inner_text(self, node: Node) -> str: ...

    def compute_style(self, node: Node) -> ComputedStyle: ...

    def bounding_box(self, node: Node) -> Rect: ...

    def shadow_scope_of(self, node: Node) -> Scope | None: ...

    def shadow_host(self, scope: Scope) -> Node | None: ...

    def shadow_root(self, host: Node) -> Scope | None: ...

    def evaluate(self, expression: str, scope: Scope | None = None) -> list[Node]: ...

    def same_node(self, left: Node, right: Node) -> bool: ...

    def node_from_point(self, x: float, y: float) -> Node | None: ...

    def expando_keys(self, node: Node) -> list[str]: ...


def tag_of(adapter: TreeAdapter, node: Node) -> str:
    return (adapter.tag(node) or "").lower()


def attr(adapter: TreeAdapter, node: Node, name: str) -> str | None:
    for key, value in adapter.attributes(node):
        if key == name:
            return value
    return None


def class_name(adapter: TreeAdapter, node: Node) -> str | None:
    return attr(adapter, node, "class") or None


def visible_text(adapter: TreeAdapter, node: Node) -> str:
    if node is None or not is_visible(adapter, node):
        return ""
    pieces = [piece.strip() for piece in adapter.direct_text(node)]
    return " ".join(piece for piece in pieces if piece).strip()


def is_visible(adapter: TreeAdapter, node: Node) -> bool:
    if adapter.compute_style(node).hides_content:
        return False
    return not adapter.bounding_box(node).is_empty


def ancestors(adapter: TreeAdapter, node: Node) -> Iterator[Node]:
    current = adapter.parent(node)
    while current is not None:
        yield current
        current = adapter.parent(current)


def closest(adapter: TreeAdapter, node: Node, tag: str) -> Node | None:
    if tag_of(adapter, node) == tag:
        return node
    for ancestor in ancestors(adapter, node):
        if tag_of(adapter, ancestor) == tag:
            return ancestor
    return None


def is_body(adapter: TreeAdapter, node: Node) -> bool:
    return tag_of(adapter, node) == "body"


def ancestors_below_body(adapter: TreeAdapter, node: Node) -> Iterator[Node]:
    for ancestor in ancestors(adapter, node):
        if is_body(adapter, ancestor):
            return
        yield ancestor


def index_in(adapter: TreeAdapter, node: Node, nodes: Sequence[Node]) -> int:
    for position, item in enumerate(nodes):
        if adapter.same_node(item, node):
            return position
    return -1


def sibling_nodes(adapter: TreeAdapter, node: Node) -> list[Node]:
    parent = adapter.parent(node)
    if parent is None:
        return []
    return adapter.children(parent)


def element_index(adapter: TreeAdapter, node: Node) -> int:
    """1-based position among same-tag siblings, shadow root children included."""
    siblings = sibling_nodes(adapter, node)
    if not siblings:
        scope = adapter.shadow_scope_of(node)
        if scope is None:
            return 1
        siblings = adapter.children(scope)
    tag = tag_of(adapter, node)
    same_tag = [child for child in siblings if tag_of(adapter, child) == tag]
    return max(index_in(adapter, node, same_tag), 0) + 1


def depth_below_body(adapter: TreeAdapter, node: Node) -> int:
    if is_body(adapter, node):
        return 0
    return 1 + sum(1 for _ in ancestors_below_body(adapter, node))


def first_descendant(adapter: TreeAdapter, node: Node, tag: str) -> Node | None:
    for child in adapter.children(node):
        if tag_of(adapter, child) == tag:
            return child
        found = first_descendant(adapter, child, tag)
        if found is not None:
            return found
    return None


def count_descendants(adapter: TreeAdapter, node: Node, tag: str) -> int:
    total = 0
    for child in adapter.children(node):
        if tag_of(adapter, child) == tag:
            total += 1
        total += count_descendants(adapter, child, tag)
    return total
