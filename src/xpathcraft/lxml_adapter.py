from __future__ import annotations

import re
from typing import Any

from lxml import etree
from lxml import html as lxml_html

from .errors import OracleSyntaxError
from .models import ComputedStyle, Rect

SHADOW_ROOT_TAG = "shadow-root"

# Elements a browser never lays out.
NON_RENDERED_TAGS = {
    "head",
    "meta",
    "link",
    "script",
    "style",
    "title",
    "desc",
    "template",
    "noscript",
}

_STYLE_DECLARATION = re.compile(r"\s*([a-zA-Z-]+)\s*:\s*([^;]+)")
_ZERO_LENGTH = re.compile(r"^0(\.0+)?(px|em|rem|%)?$")


class LxmlTreeAdapter:
    """In-memory tree backed by lxml, evaluated with libxml2's XPath 1.0 engine.

    Declarative shadow roots (``<template shadowrootmode="open">``) are moved
    into detached documents so that document-scope expressions cannot see
    into them, mirroring how a browser scopes XPath evaluation.
    """

    def __init__(self, root: Any) -> None:
        self._root = root
        self._host_by_scope: dict[Any, Any] = {}
        self._scope_by_host: dict[Any, Any] = {}
        self._attach_declarative_shadow_roots()

    @classmethod
    def from_html(cls, markup: str | bytes) -> LxmlTreeAdapter:
        """Pass bytes to let lxml take the encoding from an XML declaration or meta charset."""
        return cls(lxml_html.document_fromstring(markup))

    @classmethod
    def from_xml(cls, markup: str | bytes) -> LxmlTreeAdapter:
        return cls(etree.fromstring(markup))

    def root(self) -> Any:
        return self._root

    def first(self, expression: str, scope: Any | None = None) -> Any | None:
        matches = self.evaluate(expression, scope)
        return matches[0] if matches else None

    def tag(self, node: Any) -> str | None:
        if node is None or not isinstance(getattr(node, "tag", None), str):
            return None
        return etree.QName(node).localname

    def attributes(self, node: Any) -> list[tuple[str, str]]:
        return [(_local_name(name), str(value)) for name, value in node.attrib.items()]

    def parent(self, node: Any) -> Any | None:
        parent = node.getparent()
        if parent is None or parent in self._host_by_scope:
            return None
        return parent

    def children(self, node: Any) -> list[Any]:
        return [child for child in node if isinstance(child.tag, str)]

    def direct_text(self, node: Any) -> list[str]:
        pieces = [node.text] + [child.tail for child in node]
        return [piece for piece in pieces if piece]

    def text_content(self, node: Any) -> str:
        return str(node.xpath("string()"))

    def inner_text(self, node: Any) -> str:
        if self._is_hidden(node):
            return ""
        pieces: list[str] = []
        if node.text:
            pieces.append(node.text)
        for child in node:
            if isinstance(child.tag, str):
                pieces.append(self.inner_text(child))
            if child.tail:
                pieces.append(child.tail)
        return " ".join(" ".join(pieces).split())

    def compute_style(self, node: Any) -> ComputedStyle:
        declarations = _parse_style(node.get("style"))
        display = declarations.get("display", "block")
        if node.get("hidden") is not None or self.tag(node) in NON_RENDERED_TAGS:
            display = "none"
        visibility = declarations.get("visibility")
        if visibility is None:
            visibility = "visible"
            for ancestor in node.iterancestors():
                inherited = _parse_style(ancestor.get("style")).get("visibility")
                if inherited:
                    visibility = inherited
                    break
        return ComputedStyle(
            display=display,
            visibility=visibility,
            opacity=declarations.get("opacity", "1"),
        )

    def bounding_box(self, node: Any) -> Rect:
        current = node
        while current is not None:
            if current in self._host_by_scope:
                current = self._host_by_scope[current]
                continue
            if self.compute_style(current).display == "none":
                return Rect()
            current = current.getparent()
        declarations = _parse_style(node.get("style"))
        for dimension in ("width", "height"):
            if _ZERO_LENGTH.match(declarations.get(dimension, "auto")):
                return Rect()
        return Rect(0.0, 0.0, 1.0, 1.0)

    def shadow_scope_of(self, node: Any) -> Any | None:
        root = node.getroottree().getroot()
        return root if root in self._host_by_scope else None

    def shadow_host(self, scope: Any) -> Any | None:
        return self._host_by_scope.get(scope)

    def shadow_root(self, host: Any) -> Any | None:
        return self._scope_by_host.get(host)

    def evaluate(self, expression: str, scope: Any | None = None) -> list[Any]:
        context = self._root if scope is None else scope
        try:
            result = context.xpath(expression)
        except etree.XPathError as exc:
            raise OracleSyntaxError(expression, str(exc)) from exc
        if not isinstance(result, list):
            return []
        return [
            item
            for item in result
            if isinstance(item, etree._Element)
            and isinstance(item.tag, str)
            and item not in self._host_by_scope
        ]

    def same_node(self, left: Any, right: Any) -> bool:
        return left is right

    def node_from_point(self, x: float, y: float) -> Any | None:
        # No layout engine behind an lxml tree.
        return None

    def expando_keys(self, node: Any) -> list[str]:
        return []

    def _is_hidden(self, node: Any) -> bool:
        return self.compute_style(node).hides_content

    def _attach_declarative_shadow_roots(self) -> None:
        templates = [
            element
            for element in self._root.iter("template")
            if element.get("shadowrootmode") is not None or element.get("shadowroot") is not None
        ]
        for template in templates:
            host = template.getparent()
            if host is None:
                continue
            scope = etree.Element(SHADOW_ROOT_TAG)
            scope.text = template.text
            for child in list(template):
                scope.append(child)
            _remove_keeping_tail(template)
            self._host_by_scope[scope] = host
            self._scope_by_host[host] = scope


def _local_name(name: str) -> str:
    if name.startswith("{"):
        return name.split("}", 1)[1]
    return name


def _parse_style(raw: str | None) -> dict[str, str]:
    if not raw:
        return {}
    declarations: dict[str, str] = {}
    for chunk in raw.split(";"):
        match = _STYLE_DECLARATION.match(chunk)
        if match:
            declarations[match.group(1).strip().lower()] = match.group(2).strip().lower()
    return declarations


def _remove_keeping_tail(element: Any) -> None:
    parent = element.getparent()
    tail = element.tail
    previous = element.getprevious()
    parent.remove(element)
    if not tail:
        return
    if previous is not None:
        previous.tail = (previous.tail or "") + tail
    else:
        parent.text = (parent.text or "") + tail
