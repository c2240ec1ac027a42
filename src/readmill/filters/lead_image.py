"""
Chooses the single image that represents the article.
"""

from __future__ import annotations

from typing import List, Optional

import structlog

from ..config.config import FilterSettings
from ..document.model import ContentModel, ImageNode

logger = structlog.get_logger(__name__)


class LeadImageFinder:
    """
    Picks the lead image among images inside or next to the content region.

    An image is next to the region when no text node separates it from the
    first or last included node. The largest declared area wins, then the
    earliest image. Finding nothing is a valid outcome.
    """

    def __init__(self, settings: Optional[FilterSettings] = None) -> None:
        self.settings = settings or FilterSettings()

    def candidates(self, model: ContentModel) -> List[int]:
        span = model.content_span()
        if span is None:
            return []
        first, last = span

        found: List[int] = []
        for index in model.image_indices():
            if first <= index <= last:
                found.append(index)
            elif index < first and not model.has_text_between(index, first):
                found.append(index)
            elif index > last and not model.has_text_between(last, index):
                found.append(index)

        minimum = self.settings.min_lead_image_area
        if minimum:
            found = [i for i in found if _area(model, i) >= minimum]
        return found

    def process(self, model: ContentModel) -> Optional[int]:
        found = self.candidates(model)
        if not found:
            model.lead_image = None
            return None

        lead = max(found, key=lambda index: (_area(model, index), -index))
        model.set_included(lead)
        model.lead_image = lead
        logger.debug("Lead image selected", index=lead, candidates=len(found))
        return lead


def _area(model: ContentModel, index: int) -> int:
    node = model.nodes[index]
    return node.area if isinstance(node, ImageNode) else 0
