"""
Intermediate document model.

A flat, document-ordered list of content nodes built once by the converter.
Nodes themselves are immutable; whether a node ends up in the output is kept
in the ``included`` side table, which the classifier and the filters flip.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple, Union


@dataclass(slots=True, frozen=True)
class TextNode:
    """A run of inline text between two block boundaries."""

    text: str
    html: str
    tag_name: str
    block_id: int
    source_ids: Tuple[int, ...]
    link_chars: int = 0


@dataclass(slots=True, frozen=True)
class ImageNode:
    src: str
    source_ids: Tuple[int, ...]
    width: int = 0
    height: int = 0
    alt: str = ""

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(slots=True, frozen=True)
class EmbedNode:
    src: str
    kind: str
    source_ids: Tuple[int, ...]


ModelNode = Union[TextNode, ImageNode, EmbedNode]


@dataclass
class ContentModel:
    """Ordered model nodes plus the mutable inclusion flags."""

    nodes: List[ModelNode] = field(default_factory=list)
    included: List[bool] = field(default_factory=list)
    hidden_ids: Set[int] = field(default_factory=set)
    lead_image: Optional[int] = None
    text_direction: str = ""

    def add(self, node: ModelNode) -> int:
        self.nodes.append(node)
        self.included.append(False)
        return len(self.nodes) - 1

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[ModelNode]:
        return iter(self.nodes)

    def is_included(self, index: int) -> bool:
        return self.included[index]

    def set_included(self, index: int, value: bool = True) -> None:
        self.included[index] = value

    def included_indices(self) -> List[int]:
        return [i for i, flag in enumerate(self.included) if flag]

    def text_indices(self) -> List[int]:
        return [i for i, node in enumerate(self.nodes) if isinstance(node, TextNode)]

    def image_indices(self) -> List[int]:
        return [i for i, node in enumerate(self.nodes) if isinstance(node, ImageNode)]

    def content_images(self) -> List[ImageNode]:
        """Images that survived classification and filtering, in document order."""
        return [node for node, flag in zip(self.nodes, self.included) if flag and isinstance(node, ImageNode)]

    def has_text_between(self, start: int, end: int) -> bool:
        """Whether any text node lies strictly between indices ``start`` and ``end``."""
        return any(isinstance(node, TextNode) for node in self.nodes[start + 1 : end])

    def content_span(self) -> Optional[Tuple[int, int]]:
        """First and last included index, or None when nothing is included."""
        indices = self.included_indices()
        if not indices:
            return None
        return indices[0], indices[-1]
