"""HTML fragment parsing with source offsets for every element."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

_START_TAG = re.compile(r"""<[a-zA-Z][^\s/>]*(?:[^>"']|"[^"]*"|'[^']*')*>""")


@dataclass
class Node:
    """Element or text node of a parsed fragment.

    ``start_offset``/``end_offset`` index into the exact buffer the node was
    parsed from. For elements the span covers the start tag, which for void
    elements such as ``img`` is the whole element. Text nodes carry no span.
    """

    name: Optional[str]
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)
    start_offset: Optional[int] = None
    end_offset: Optional[int] = None
    text: Optional[str] = None


class _OffsetIndex:
    """Converts the parser's (line, column) positions to absolute offsets."""

    def __init__(self, html: str) -> None:
        self.html = html
        self.line_starts = [0] + [match.end() for match in re.finditer("\n", html)]

    def offset(self, line: int, column: int) -> int:
        return self.line_starts[line - 1] + column

    def tag_end(self, start: int) -> int:
        match = _START_TAG.match(self.html, start)
        if match:
            return match.end()
        close = self.html.find(">", start)
        return close + 1 if close != -1 else len(self.html)


def _element_node(element: Tag, index: _OffsetIndex) -> Node:
    node = Node(name=element.name, attrs=_flatten_attrs(element.attrs))
    if element.sourceline is not None and element.sourcepos is not None:
        node.start_offset = index.offset(element.sourceline, element.sourcepos)
        node.end_offset = index.tag_end(node.start_offset)
    return node


def _convert(root: Tag, index: _OffsetIndex) -> Node:
    top = _element_node(root, index)
    stack = [(root, top)]
    while stack:
        element, node = stack.pop()
        for child in element.children:
            if isinstance(child, Tag):
                child_node = _element_node(child, index)
                node.children.append(child_node)
                stack.append((child, child_node))
            elif isinstance(child, NavigableString) and not isinstance(
                child, PreformattedString
            ):
                node.children.append(Node(name=None, text=str(child)))
    return top


def _flatten_attrs(attrs: Dict[str, object]) -> Dict[str, str]:
    flattened: Dict[str, str] = {}
    for key, value in attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        flattened[key] = "" if value is None else str(value)
    return flattened


def parse_fragment(html: str) -> Node:
    """Parse an HTML fragment into a tree whose root spans the whole buffer."""
    soup = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
    index = _OffsetIndex(html)
    root = _convert(soup, index)
    root.name = None
    root.start_offset = 0
    root.end_offset = len(html)
    return root


def iter_nodes(root: Node) -> Iterator[Node]:
    """Walk the tree depth-first in document order, parents before children."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
