"""
Single-pass tree walk that feeds a visitor.
"""

from __future__ import annotations

from typing import List, Protocol, Set, Tuple, Union

import structlog
from bs4 import NavigableString, PageElement, Tag
from bs4.element import PreformattedString

logger = structlog.get_logger(__name__)


class DomVisitor(Protocol):
    """Capabilities a walker needs from whatever consumes the tree."""

    def visit_start(self, tag: Tag) -> bool:
        """Called on entering an element. Return False to skip its subtree."""
        ...

    def visit_text(self, text: NavigableString) -> None: ...

    def visit_end(self, tag: Tag) -> None:
        """Called on leaving an element whose ``visit_start`` returned True."""
        ...


_Frame = Tuple[Union[PageElement, Tag], bool]


class DomWalker:
    """
    Walks a tree in document order without recursion.

    Comments, doctypes, CDATA and processing instructions are ignored. An
    element reached twice (a corrupted tree) is skipped the second time.
    """

    def __init__(self, visitor: DomVisitor) -> None:
        self.visitor = visitor

    def walk(self, root: Tag) -> None:
        seen: Set[int] = set()
        stack: List[_Frame] = [(root, False)]
        while stack:
            node, closing = stack.pop()
            if closing:
                self.visitor.visit_end(node)  # type: ignore[arg-type]
                continue

            if isinstance(node, Tag):
                if id(node) in seen:
                    logger.debug("Skipping element visited twice", tag=node.name)
                    continue
                seen.add(id(node))
                if not self.visitor.visit_start(node):
                    continue
                stack.append((node, True))
                for child in reversed(list(node.children)):
                    stack.append((child, False))
            elif isinstance(node, PreformattedString):
                continue
            elif isinstance(node, NavigableString):
                self.visitor.visit_text(node)
