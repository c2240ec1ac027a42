"""
Pulls excluded nodes that are structurally tied to the article back into it.
"""

from __future__ import annotations

from typing import List, Optional, Set

import structlog

from ..config.config import FilterSettings
from ..document.model import ContentModel, ModelNode, TextNode
from ..document.source import SourceTree

logger = structlog.get_logger(__name__)

# An ancestor this high up ties everything to everything.
ROOT_TAGS = frozenset({"html", "body", "[document]"})


def anchor_id(node: ModelNode) -> int:
    """Source element that stands for ``node`` in tree queries."""
    if isinstance(node, TextNode):
        return node.block_id
    return node.source_ids[0]


class RelevantElements:
    """
    Includes images, embeds and structural text blocks enclosed by content.

    Only ever switches ``included`` on. Decisions are taken against the
    inclusion state from before the filter ran, so the outcome does not depend
    on the order nodes are visited in.
    """

    def __init__(self, tree: SourceTree, settings: Optional[FilterSettings] = None) -> None:
        self.tree = tree
        self.settings = settings or FilterSettings()
        self._structural: Set[str] = {tag.lower() for tag in self.settings.structural_tags}

    def process(self, model: ContentModel) -> int:
        snapshot = list(model.included)
        added: List[int] = []
        previous_text: Optional[int] = None
        previous_included: Optional[int] = None

        for index, node in enumerate(model.nodes):
            if not snapshot[index] and self._is_candidate(node):
                if self._follows_content(model, index, previous_text, snapshot) or self._is_enclosed(
                    model, index, previous_included, snapshot
                ):
                    added.append(index)
            if isinstance(node, TextNode):
                previous_text = index
            if snapshot[index]:
                previous_included = index

        for index in added:
            model.set_included(index)
        if added:
            logger.debug("Relevant elements included", count=len(added), indices=added)
        return len(added)

    def _is_candidate(self, node: ModelNode) -> bool:
        if isinstance(node, TextNode):
            return node.tag_name in self._structural
        return True

    def _shares_inner_ancestor(self, first: int, second: int) -> Optional[int]:
        ancestor = self.tree.nearest_common_ancestor([first, second])
        if ancestor is None or self.tree.tag_name(ancestor) in ROOT_TAGS:
            return None
        return ancestor

    def _follows_content(
        self, model: ContentModel, index: int, previous_text: Optional[int], snapshot: List[bool]
    ) -> bool:
        """Media right after included text, inside the same container."""
        node = model.nodes[index]
        if isinstance(node, TextNode) or previous_text is None or not snapshot[previous_text]:
            return False
        return self._shares_inner_ancestor(anchor_id(model.nodes[previous_text]), anchor_id(node)) is not None

    def _is_enclosed(
        self, model: ContentModel, index: int, previous_included: Optional[int], snapshot: List[bool]
    ) -> bool:
        """
        Node sits between two included nodes whose common container holds it.

        Media with no text at all between the two included neighbours is
        enclosed even when that container is ``<body>``.
        """
        if previous_included is None:
            return False
        following = next((k for k in range(index + 1, len(model)) if snapshot[k]), None)
        if following is None:
            return False
        if not isinstance(model.nodes[index], TextNode) and not model.has_text_between(previous_included, following):
            return True
        ancestor = self._shares_inner_ancestor(
            anchor_id(model.nodes[previous_included]), anchor_id(model.nodes[following])
        )
        return ancestor is not None and self.tree.contains(ancestor, anchor_id(model.nodes[index]))
