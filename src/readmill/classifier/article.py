"""
Article classifier: decides which text blocks form the article body.

Scoring follows the readability family of heuristics: longer text scores
higher, link-heavy text lower, and structural hints (ancestor tags, class and
id keywords) push a block towards content or boilerplate. Blocks are then
smoothed and reduced to the single best contiguous region.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

import structlog

from ..config.config import ClassifierSettings
from ..document.model import ContentModel
from ..document.text_view import TextBlock, view_word_count

logger = structlog.get_logger(__name__)

_NON_WORD = re.compile(r"[\W_]+", re.UNICODE)


def normalize_title(text: str) -> str:
    """Case-folded words of ``text`` joined by single spaces."""
    return " ".join(_NON_WORD.sub(" ", text.casefold()).split())


@dataclass(frozen=True)
class Classification:
    """Scores and labels for one text view, aligned with its blocks."""

    scores: Tuple[float, ...]
    labels: Tuple[bool, ...]
    word_count: int
    region: Optional[Tuple[int, int]] = None

    @property
    def content_indices(self) -> List[int]:
        return [i for i, label in enumerate(self.labels) if label]


class ArticleClassifier:
    """
    Labels text blocks as content or boilerplate.

    Instances hold configuration only; ``classify`` is a pure function of its
    arguments, so running it twice over the same blocks and titles gives the
    same labels and word count.
    """

    def __init__(self, settings: Optional[ClassifierSettings] = None) -> None:
        self.settings = settings or ClassifierSettings()
        self.logger = logger.bind(component="ArticleClassifier")
        self._positive: FrozenSet[str] = frozenset(k.lower() for k in self.settings.positive_keywords)
        self._negative: FrozenSet[str] = frozenset(k.lower() for k in self.settings.negative_keywords)

    def classify(self, blocks: Sequence[TextBlock], candidate_titles: Iterable[str] = ()) -> Classification:
        titles: Set[str] = {title for title in map(normalize_title, candidate_titles) if title}
        scores = tuple(self.score_block(block, titles) for block in blocks)

        threshold = self.settings.content_threshold
        initial = [score >= threshold for score in scores]
        smoothed = self._smooth(scores, initial)
        region = self._select_region(scores, smoothed)

        labels = tuple(region is not None and region[0] <= i <= region[1] for i in range(len(blocks)))
        word_count = view_word_count(blocks, labels)

        self.logger.debug(
            "Blocks classified",
            blocks=len(blocks),
            above_threshold=sum(initial),
            content_blocks=sum(labels),
            region=region,
            word_count=word_count,
        )
        return Classification(scores=scores, labels=labels, word_count=word_count, region=region)

    def apply_to_model(self, blocks: Sequence[TextBlock], classification: Classification, model: ContentModel) -> None:
        """Copy block labels onto the model nodes each block came from."""
        for block, label in zip(blocks, classification.labels):
            for index in block.model_indices:
                model.set_included(index, label)

    # --- scoring ---

    def score_block(self, block: TextBlock, titles: Set[str] | FrozenSet[str] = frozenset()) -> float:
        s = self.settings

        length_score = min(block.word_count * s.word_weight, s.word_cap)
        score = length_score * max(0.0, 1.0 - s.link_penalty * block.link_density)

        if block.word_count and block.avg_sentence_length >= s.min_sentence_words:
            score += s.sentence_bonus

        score += sum(s.tag_weights.get(tag, 0.0) for tag in block.tag_signature)
        score += self._keyword_score(block.attribute_tokens)

        if titles and normalize_title(block.text) in titles:
            score -= s.title_penalty

        return score

    def _keyword_score(self, tokens: FrozenSet[str]) -> float:
        positive = {keyword for keyword in self._positive if _matches(keyword, tokens)}
        negative = {keyword for keyword in self._negative if _matches(keyword, tokens)}
        weight, cap = self.settings.keyword_weight, self.settings.keyword_cap
        return min(len(positive) * weight, cap) - min(len(negative) * weight, cap)

    # --- labelling ---

    def _smooth(self, scores: Sequence[float], labels: Sequence[bool]) -> List[bool]:
        """Bridge single non-content blocks sitting between two content blocks."""
        smoothed = list(labels)
        for i in range(1, len(labels) - 1):
            if labels[i] or not (labels[i - 1] and labels[i + 1]):
                continue
            if scores[i] > self.settings.bridge_floor:
                smoothed[i] = True
        return smoothed

    @staticmethod
    def _select_region(scores: Sequence[float], labels: Sequence[bool]) -> Optional[Tuple[int, int]]:
        """Contiguous run of content labels with the highest total score; earliest wins ties."""
        best: Optional[Tuple[int, int]] = None
        best_total = 0.0
        start: Optional[int] = None
        for i, label in enumerate(list(labels) + [False]):
            if label and start is None:
                start = i
            elif not label and start is not None:
                total = sum(scores[start:i])
                if best is None or total > best_total:
                    best, best_total = (start, i - 1), total
                start = None
        return best


def _matches(keyword: str, tokens: FrozenSet[str]) -> bool:
    if keyword in tokens:
        return True
    if len(keyword) < 3:
        return False
    return any(token.startswith(keyword) for token in tokens)
