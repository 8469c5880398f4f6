from __future__ import annotations

from typing import Any

from playwright.sync_api import ElementHandle, JSHandle, Page
from playwright.sync_api import Error as PlaywrightError

from .errors import OracleSyntaxError
from .models import ComputedStyle, Rect

_ROOT_SCRIPT = "() => document.documentElement"
_TAG_SCRIPT = "(el) => (el && el.tagName) ? el.tagName.toLowerCase() : null"
_ATTRIBUTES_SCRIPT = "(el) => Array.from(el.attributes || []).map((attr) => [attr.name, attr.value])"
_PARENT_SCRIPT = "(el) => el.parentElement"
_CHILDREN_SCRIPT = "(el) => Array.from(el.children || [])"
_DIRECT_TEXT_SCRIPT = """
(el) => Array.from(el.childNodes)
  .filter((node) => node.nodeType === Node.TEXT_NODE)
  .map((node) => node.textContent || '')
"""
_TEXT_CONTENT_SCRIPT = "(el) => el.textContent || ''"
_INNER_TEXT_SCRIPT = "(el) => el.innerText || ''"
_STYLE_SCRIPT = """
(el) => {
  const style = window.getComputedStyle(el);
  return { display: style.display, visibility: style.visibility, opacity: style.opacity };
}
"""
_BOX_SCRIPT = """
(el) => {
  const rect = el.getBoundingClientRect();
  const width = typeof el.offsetWidth === 'number' ? el.offsetWidth : rect.width;
  const height = typeof el.offsetHeight === 'number' ? el.offsetHeight : rect.height;
  return { x: rect.x, y: rect.y, width, height };
}
"""
_IN_SHADOW_SCRIPT = "(el) => el.getRootNode() instanceof ShadowRoot"
_SHADOW_SCOPE_SCRIPT = "(el) => el.getRootNode()"
_SHADOW_HOST_SCRIPT = "(root) => root.host"
_HAS_SHADOW_ROOT_SCRIPT = "(el) => !!el.shadowRoot"
_SHADOW_ROOT_SCRIPT = "(el) => el.shadowRoot"
_EVALUATE_SCRIPT = """
([expression, scope]) => {
  const result = document.evaluate(
    expression,
    scope || document,
    null,
    XPathResult.ORDERED_NODE_SNAPSHOT_TYPE,
    null
  );
  const nodes = [];
  for (let i = 0; i < result.snapshotLength; i++) {
    const item = result.snapshotItem(i);
    if (item && item.nodeType === Node.ELEMENT_NODE) {
      nodes.push(item);
    }
  }
  return nodes;
}
"""
_SAME_NODE_SCRIPT = "(left, right) => left === right"
_NODE_FROM_POINT_SCRIPT = "([x, y]) => document.elementFromPoint(x, y)"
_EXPANDO_SCRIPT = "(el) => Object.keys(el)"

_SYNTAX_MARKERS = ("valid XPath", "SyntaxError", "XPath")


class PlaywrightTreeAdapter:
    """Live page adapter over a synchronous Playwright ``Page``."""

    def __init__(self, page: Page) -> None:
        self.page = page

    def root(self) -> ElementHandle | None:
        return self.page.evaluate_handle(_ROOT_SCRIPT).as_element()

    def tag(self, node: ElementHandle | None) -> str | None:
        if node is None:
            return None
        return node.evaluate(_TAG_SCRIPT)

    def attributes(self, node: ElementHandle) -> list[tuple[str, str]]:
        pairs = node.evaluate(_ATTRIBUTES_SCRIPT) or []
        return [(str(name), str(value)) for name, value in pairs]

    def parent(self, node: ElementHandle) -> ElementHandle | None:
        return node.evaluate_handle(_PARENT_SCRIPT).as_element()

    def children(self, node: ElementHandle) -> list[ElementHandle]:
        return _handles_from_array(node.evaluate_handle(_CHILDREN_SCRIPT))

    def direct_text(self, node: ElementHandle) -> list[str]:
        return [str(item) for item in node.evaluate(_DIRECT_TEXT_SCRIPT) or []]

    def text_content(self, node: ElementHandle) -> str:
        return str(node.evaluate(_TEXT_CONTENT_SCRIPT) or "")

    def inner_text(self, node: ElementHandle) -> str:
        return str(node.evaluate(_INNER_TEXT_SCRIPT) or "")

    def compute_style(self, node: ElementHandle) -> ComputedStyle:
        payload: dict[str, Any] = node.evaluate(_STYLE_SCRIPT) or {}
        return ComputedStyle(
            display=str(payload.get("display") or "block"),
            visibility=str(payload.get("visibility") or "visible"),
            opacity=str(payload.get("opacity") or "1"),
        )

    def bounding_box(self, node: ElementHandle) -> Rect:
        payload: dict[str, Any] = node.evaluate(_BOX_SCRIPT) or {}
        return Rect(
            x=float(payload.get("x", 0.0) or 0.0),
            y=float(payload.get("y", 0.0) or 0.0),
            width=float(payload.get("width", 0.0) or 0.0),
            height=float(payload.get("height", 0.0) or 0.0),
        )

    def shadow_scope_of(self, node: ElementHandle) -> JSHandle | None:
        if not node.evaluate(_IN_SHADOW_SCRIPT):
            return None
        return node.evaluate_handle(_SHADOW_SCOPE_SCRIPT)

    def shadow_host(self, scope: JSHandle) -> ElementHandle | None:
        return scope.evaluate_handle(_SHADOW_HOST_SCRIPT).as_element()

    def shadow_root(self, host: ElementHandle) -> JSHandle | None:
        if not host.evaluate(_HAS_SHADOW_ROOT_SCRIPT):
            return None
        return host.evaluate_handle(_SHADOW_ROOT_SCRIPT)

    def evaluate(self, expression: str, scope: JSHandle | None = None) -> list[ElementHandle]:
        try:
            handle = self.page.evaluate_handle(_EVALUATE_SCRIPT, [expression, scope])
        except PlaywrightError as exc:
            message = str(exc.message or exc)
            if any(marker in message for marker in _SYNTAX_MARKERS):
                raise OracleSyntaxError(expression, message) from exc
            raise
        return _handles_from_array(handle)

    def same_node(self, left: ElementHandle, right: ElementHandle) -> bool:
        if left is right:
            return True
        return bool(left.evaluate(_SAME_NODE_SCRIPT, right))

    def node_from_point(self, x: float, y: float) -> ElementHandle | None:
        return self.page.evaluate_handle(_NODE_FROM_POINT_SCRIPT, [x, y]).as_element()

    def expando_keys(self, node: ElementHandle) -> list[str]:
        return [str(key) for key in node.evaluate(_EXPANDO_SCRIPT) or []]


def _handles_from_array(handle: JSHandle) -> list[ElementHandle]:
    properties = handle.get_properties()
    ordered = sorted(
        ((int(key), value) for key, value in properties.items() if str(key).isdigit()),
        key=lambda item: item[0],
    )
    elements: list[ElementHandle] = []
    for _index, value in ordered:
        element = value.as_element()
        if element is not None:
            elements.append(element)
    return elements
