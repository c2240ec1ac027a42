"""
Lookup keys for an externally owned BeautifulSoup tree.

The tree belongs to the caller. Everything downstream refers to its elements
through the integer ids handed out here, assigned in document order, so the
model never holds on to ``Tag`` objects itself.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from bs4 import BeautifulSoup, Tag


class SourceTree:
    """Document-order index over the elements of a parsed tree."""

    def __init__(self, root: Tag) -> None:
        if not isinstance(root, Tag):
            raise TypeError(f"SourceTree expects a bs4 Tag, got {type(root).__name__}")
        self.root = root
        self._tags: List[Tag] = []
        self._ids: Dict[int, int] = {}
        self._parents: List[int] = []
        self._depths: List[int] = []
        self._ends: List[int] = []
        self._index(root)

    @classmethod
    def from_html(cls, html: str) -> SourceTree:
        return cls(BeautifulSoup(html, "html.parser"))

    def _index(self, root: Tag) -> None:
        # Iterative pre-order walk; ``_ends[i]`` is the last id inside element i,
        # which turns containment into a range check.
        stack: List[tuple[Tag, int, bool]] = [(root, -1, False)]
        while stack:
            tag, parent_id, closing = stack.pop()
            if closing:
                self._ends[self._ids[id(tag)]] = len(self._tags) - 1
                continue
            if id(tag) in self._ids:
                continue
            node_id = len(self._tags)
            self._ids[id(tag)] = node_id
            self._tags.append(tag)
            self._parents.append(parent_id)
            self._depths.append(0 if parent_id < 0 else self._depths[parent_id] + 1)
            self._ends.append(node_id)
            stack.append((tag, parent_id, True))
            children = [child for child in tag.children if isinstance(child, Tag)]
            for child in reversed(children):
                stack.append((child, node_id, False))

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self._tags)))

    def id_of(self, tag: Tag) -> Optional[int]:
        return self._ids.get(id(tag))

    def tag(self, node_id: int) -> Tag:
        return self._tags[node_id]

    def tag_name(self, node_id: int) -> str:
        return (self._tags[node_id].name or "").lower()

    def parent(self, node_id: int) -> Optional[int]:
        parent_id = self._parents[node_id]
        return None if parent_id < 0 else parent_id

    def depth(self, node_id: int) -> int:
        return self._depths[node_id]

    def ancestors(self, node_id: int, include_self: bool = False) -> Iterator[int]:
        """Yield ancestor ids from the nearest outwards."""
        current: Optional[int] = node_id if include_self else self.parent(node_id)
        while current is not None:
            yield current
            current = self.parent(current)

    def contains(self, ancestor_id: int, node_id: int) -> bool:
        """True when ``node_id`` is ``ancestor_id`` or lies inside it."""
        return ancestor_id <= node_id <= self._ends[ancestor_id]

    def nearest_common_ancestor(self, node_ids: Iterable[int]) -> Optional[int]:
        ids = list(node_ids)
        if not ids:
            return None
        lowest, highest = min(ids), max(ids)
        for candidate in self.ancestors(lowest, include_self=True):
            if self.contains(candidate, highest):
                return candidate
        return None

    def find_all(self, name: str) -> List[int]:
        name = name.lower()
        return [node_id for node_id in self if self.tag_name(node_id) == name]
