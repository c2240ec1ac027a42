"""
Title resolution.

Candidates are gathered once per document in priority order: the title from
structured metadata, the document title cleaned up by readability-style
heuristics, then the raw document title when it is a plain string.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional

import structlog
from bs4 import Tag

from .document.text_view import count_words
from .protocols import MarkupProvider

logger = structlog.get_logger(__name__)

# Hierarchical separators between a page title and its site or section name.
_SEPARATOR = r"\s+(?:\||-|–|—|::|/|»|\\)\s+"
_BEFORE_LAST_SEPARATOR = re.compile(rf"^(.*){_SEPARATOR}")
_AFTER_FIRST_SEPARATOR = re.compile(rf"^.*?{_SEPARATOR}(.*)$")
_HAS_SEPARATOR = re.compile(_SEPARATOR)


class CandidateTitleList:
    """Append-only list of title candidates, highest priority first."""

    def __init__(self) -> None:
        self._titles: List[str] = []

    def append(self, title: str) -> None:
        self._titles.append(title)

    def __iter__(self) -> Iterator[str]:
        return iter(self._titles)

    def __len__(self) -> int:
        return len(self._titles)

    def __getitem__(self, index: int) -> str:
        return self._titles[index]

    def __repr__(self) -> str:
        return f"CandidateTitleList({self._titles!r})"

    def first(self) -> str:
        return next((title for title in self._titles if title.strip()), "")


def _heading_texts(root: Tag, *names: str) -> List[str]:
    return [" ".join(heading.get_text(" ").split()) for heading in root.find_all(list(names))]


def get_document_title(title: str, root: Optional[Tag] = None) -> str:
    """
    Derive an article title from the document title.

    Site names are cut off at hierarchical separators (``Story | Site``),
    ``Section: Story`` titles keep the story part unless a heading repeats the
    whole title, and unusable titles fall back to the page's only ``<h1>``.
    A shortened title of four words or fewer reverts to the original.
    """
    original = " ".join(title.split())
    current = original
    shortened = False

    if _HAS_SEPARATOR.search(original):
        match = _BEFORE_LAST_SEPARATOR.match(original)
        current = match.group(1) if match else original
        if count_words(current) < 3:
            match = _AFTER_FIRST_SEPARATOR.match(original)
            current = match.group(1) if match else original
        shortened = True
    elif ": " in original:
        headings = _heading_texts(root, "h1", "h2") if root is not None else []
        if original not in headings:
            current = original.rsplit(":", 1)[1]
            if count_words(current) < 3:
                current = original.split(":", 1)[1]
            elif count_words(original.split(":", 1)[0]) > 5:
                current = original
            shortened = True
    elif root is not None and (len(original) < 15 or len(original) > 150):
        h1s = _heading_texts(root, "h1")
        if len(h1s) == 1 and h1s[0]:
            current = h1s[0]

    current = current.strip()
    if shortened and count_words(current) <= 4:
        current = original
    return current


class TitleResolver:
    """
    Builds the candidate list on first use and answers with its best entry.
    """

    def __init__(self, markup: MarkupProvider, root: Optional[Tag] = None) -> None:
        self.markup = markup
        self.root = root
        self._candidates: Optional[CandidateTitleList] = None

    @property
    def candidates(self) -> CandidateTitleList:
        if self._candidates is None:
            self._candidates = self._build()
        return self._candidates

    def resolve(self) -> str:
        return self.candidates.first()

    def _build(self) -> CandidateTitleList:
        candidates = CandidateTitleList()

        meta_title = self.markup.get_title().strip()
        if meta_title:
            candidates.append(meta_title)

        document_title = self.markup.get_document_title()
        heuristic = get_document_title(document_title.text, self.root)
        if heuristic:
            candidates.append(heuristic)
        if document_title.is_plain_string and document_title.text:
            candidates.append(document_title.text)

        logger.debug("Title candidates built", candidates=len(candidates))
        return candidates
