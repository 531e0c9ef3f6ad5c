# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Immutable document tree built from MPX web pages.

BeautifulSoup does the markup parsing; the soup is converted once into
plain Element/Text nodes so that the rest of the package works on a
small, predictable model:

  Element(name, attrs, children)   tag name lower-cased, attrs as str->str
  Text(value)                      trimmed text leaf, never empty

Formatting whitespace between tags is dropped so child positions match
what the page shows. Entities are decoded by the parser, which means
``&nbsp;`` arrives as U+00A0 (NBSP) and is kept as real content.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .errors import StructureError

logger = logging.getLogger(__name__)

# Decoded form of the &nbsp; entity
NBSP = "\xa0"

# ASCII whitespace only; NBSP must survive trimming
_FORMATTING_WS = " \t\r\n\f"

_ROW_GROUPS = ("thead", "tbody", "tfoot")


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Element:
    name: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: tuple["Element | Text", ...] = ()

    @property
    def id(self) -> str | None:
        return self.attrs.get("id")

    def get(self, attr: str) -> str | None:
        return self.attrs.get(attr)


Node = Element | Text


def parse_document(markup: str | bytes) -> Element:
    """Parse page markup into a tree rooted at a '#document' element."""
    soup = BeautifulSoup(markup, "html.parser")
    root = Element(name="#document", children=_convert_children(soup))
    logger.debug("Parsed document with %d top-level nodes", len(root.children))
    return root


def _convert_children(tag: Tag) -> tuple[Node, ...]:
    nodes: list[Node] = []
    for child in tag.children:
        if isinstance(child, Tag):
            nodes.append(Element(
                name=child.name.lower(),
                attrs=_convert_attrs(child.attrs),
                children=_convert_children(child),
            ))
        elif isinstance(child, PreformattedString):
            # comments, doctype, CDATA, processing instructions
            continue
        elif isinstance(child, NavigableString):
            text = str(child).strip(_FORMATTING_WS)
            if text:
                nodes.append(Text(text))
    return tuple(nodes)


def _convert_attrs(attrs: dict) -> dict[str, str]:
    result = {}
    for key, value in attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(value)
        elif value is None:
            value = ""
        result[key] = value
    return result


# ---------------------------------------------------------------------------
# Traversal helpers
# ---------------------------------------------------------------------------

def elements(node: Node) -> list[Element]:
    """Direct element children of *node* (text leaves skipped)."""
    if not isinstance(node, Element):
        return []
    return [c for c in node.children if isinstance(c, Element)]


def child(node: Node, name: str) -> Element | None:
    """First direct child element called *name*."""
    for c in elements(node):
        if c.name == name:
            return c
    return None


def find(node: Node, name: str, id: str | None = None) -> Element | None:
    """Depth-first search of the descendants of *node*.

    Matches on tag name and, when given, the ``id`` attribute.
    """
    for c in elements(node):
        if c.name == name and (id is None or c.id == id):
            return c
        found = find(c, name, id)
        if found is not None:
            return found
    return None


def first_text(node: Node) -> str | None:
    """Text of the first text leaf under *node*, depth-first."""
    if isinstance(node, Text):
        return node.value
    for c in node.children:
        text = first_text(c)
        if text is not None:
            return text
    return None


def table_rows(table: Element) -> Iterator[Element]:
    """Yield the ``tr`` rows of a table in document order.

    Rows wrapped in thead/tbody/tfoot are yielded in place.
    """
    for c in elements(table):
        if c.name == "tr":
            yield c
        elif c.name in _ROW_GROUPS:
            for row in elements(c):
                if row.name == "tr":
                    yield row


def is_header_cell(node: Element | None) -> bool:
    return node is not None and node.name == "th"


@dataclass(frozen=True)
class RowLayout:
    """Column contract for one kind of table row.

    ``roles`` names each column in order; ``None`` marks a column that is
    present on the page but not read.
    """
    name: str
    roles: tuple[str | None, ...]

    def index(self, role: str) -> int:
        return self.roles.index(role)

    def get(self, row: Element, role: str) -> Element | None:
        """Cell for *role*, or None when the row is too short."""
        cells = elements(row)
        idx = self.index(role)
        return cells[idx] if idx < len(cells) else None

    def cell(self, row: Element, role: str) -> Element:
        """Cell for *role*; a short row is a StructureError."""
        found = self.get(row, role)
        if found is None:
            raise StructureError(
                f"{self.name} row has no {role} cell "
                f"(column {self.index(role)}, row has {len(elements(row))})"
            )
        return found
