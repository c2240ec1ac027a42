"""
Converts a BeautifulSoup tree into the intermediate content model.
"""

from __future__ import annotations

import html
import re
from typing import List, Optional, Set, Tuple
from urllib.parse import urljoin

import structlog
from bs4 import NavigableString, Tag

from ..config.config import ConverterSettings
from .model import ContentModel, EmbedNode, ImageNode, TextNode
from .source import SourceTree
from .walker import DomWalker

logger = structlog.get_logger(__name__)

# Elements that do not break a run of text. Anything else is a block boundary.
INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "big", "cite", "code", "data", "del", "dfn", "em", "font",
        "i", "ins", "kbd", "label", "mark", "nobr", "q", "s", "samp", "small", "span", "strike",
        "strong", "sub", "sup", "time", "tt", "u", "var", "wbr",
    }
)

# Inline elements whose markup survives into the sanitized html run.
FORMATTING_TAGS = frozenset(
    {"b", "strong", "i", "em", "u", "s", "strike", "del", "ins", "mark", "small", "sub", "sup", "code", "kbd",
     "samp", "var", "q", "cite", "abbr", "dfn", "tt", "big"}
)

EMBED_TAGS = frozenset({"iframe", "video", "embed", "object"})

TEXT_DIRECTIONS = ("ltr", "rtl", "auto")

_WHITESPACE = re.compile(r"\s+")
_HIDDEN_STYLE = re.compile(r"(?:^|;)\s*(?:display\s*:\s*none|visibility\s*:\s*hidden)", re.IGNORECASE)
_ZERO_SIZE_STYLE = re.compile(r"(?:^|;)\s*(width|height)\s*:\s*0(?:px|em|rem|%)?\s*(?:;|$)", re.IGNORECASE)
_UNSAFE_SCHEME = re.compile(r"^\s*(?:javascript|vbscript|data)\s*:", re.IGNORECASE)


def attribute(tag: Tag, name: str) -> str:
    """Attribute value as a single string (bs4 returns lists for class/rel)."""
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def parse_dimension(value: str) -> Optional[int]:
    """Declared pixel size, or None when undeclared or not a plain length."""
    value = value.strip().lower()
    if not value:
        return None
    if value.endswith("px"):
        value = value[:-2].strip()
    try:
        return max(0, int(float(value)))
    except ValueError:
        return None


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


class DocumentConverter:
    """
    Visitor that turns walked elements into model nodes.

    Adjacent inline text is merged into one ``TextNode``; every element not in
    ``INLINE_TAGS`` closes the current run. Hidden elements are recorded in
    ``model.hidden_ids`` and their subtree is dropped.
    """

    def __init__(
        self,
        tree: SourceTree,
        settings: Optional[ConverterSettings] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self.tree = tree
        self.settings = settings or ConverterSettings()
        self.base_url = base_url
        self.model = ContentModel()
        self.logger = logger.bind(component="DocumentConverter")

        self._skip_tags: Set[str] = {name.lower() for name in self.settings.skip_tags}
        self._root_id: Optional[int] = None
        self._blocks: List[int] = []
        self._inline: List[int] = []
        self._open_formats: List[Tuple[str, str]] = []
        self._link_depth = 0
        self._pre_depth = 0
        self._reset_run()

    # --- public API ---

    def convert(self, root: Tag) -> ContentModel:
        self._root_id = self.tree.id_of(root)
        if self._root_id is None:
            raise ValueError("Walk root does not belong to the source tree")
        self.model.text_direction = self._find_text_direction(self._root_id)
        DomWalker(self).walk(root)
        self._flush()
        self.logger.debug(
            "Document converted",
            nodes=len(self.model),
            hidden=len(self.model.hidden_ids),
        )
        return self.model

    @property
    def hidden_elements(self) -> List[Tag]:
        """Tags skipped as invisible, in document order."""
        return [self.tree.tag(node_id) for node_id in sorted(self.model.hidden_ids)]

    # --- visitor protocol ---

    def visit_start(self, tag: Tag) -> bool:
        node_id = self.tree.id_of(tag)
        if node_id is None:
            self.logger.debug("Skipping element outside the source tree", tag=tag.name)
            return False

        name = (tag.name or "").lower()
        if name in self._skip_tags:
            return False
        if self.is_hidden(tag):
            self.model.hidden_ids.add(node_id)
            return False

        if name == "img":
            self._flush()
            self._add_image(tag, node_id)
            return False
        if name in EMBED_TAGS:
            self._flush()
            self._add_embed(tag, name, node_id)
            return False
        if name == "br":
            self._text_parts.append("\n" if self._pre_depth else " ")
            self._html_parts.append("<br>")
            return False

        if name not in INLINE_TAGS:
            self._flush()
            self._blocks.append(node_id)
            if name == "pre":
                self._pre_depth += 1
            return True

        self._inline.append(node_id)
        if name == "a":
            href = attribute(tag, "href").strip()
            if href and self.base_url:
                href = urljoin(self.base_url, href)
            if href and not _UNSAFE_SCHEME.match(href):
                markup = f'<a href="{html.escape(href, quote=True)}">'
            else:
                markup = "<a>"
            self._open_formats.append(("a", markup))
            self._html_parts.append(markup)
            self._link_depth += 1
        elif name in FORMATTING_TAGS:
            markup = f"<{name}>"
            self._open_formats.append((name, markup))
            self._html_parts.append(markup)
        return True

    def visit_text(self, text: NavigableString) -> None:
        value = str(text) if self._pre_depth else _WHITESPACE.sub(" ", str(text))
        if not value:
            return
        self._text_parts.append(value)
        self._html_parts.append(html.escape(value, quote=False))
        if value.strip():
            self._run_sources.update(self._inline)
            if self._link_depth:
                self._link_chars += len(value.strip())

    def visit_end(self, tag: Tag) -> None:
        name = (tag.name or "").lower()
        if name not in INLINE_TAGS:
            self._flush()
            if self._blocks:
                self._blocks.pop()
            if name == "pre":
                self._pre_depth = max(0, self._pre_depth - 1)
            return

        if self._inline:
            self._inline.pop()
        if name == "a" or name in FORMATTING_TAGS:
            markup = None
            if self._open_formats and self._open_formats[-1][0] == name:
                markup = self._open_formats.pop()[1]
            if markup is not None and self._html_parts and self._html_parts[-1] == markup:
                # Nothing was emitted since the element opened.
                self._html_parts.pop()
            else:
                self._html_parts.append(f"</{name}>")
            if name == "a":
                self._link_depth = max(0, self._link_depth - 1)

    # --- visibility ---

    def is_hidden(self, tag: Tag) -> bool:
        if tag.has_attr("hidden"):
            return True
        if attribute(tag, "aria-hidden").strip().lower() == "true":
            return True
        if (tag.name or "").lower() == "input" and attribute(tag, "type").strip().lower() == "hidden":
            return True
        style = attribute(tag, "style")
        if style and (_HIDDEN_STYLE.search(style) or _ZERO_SIZE_STYLE.search(style)):
            return True
        for dimension in ("width", "height"):
            if tag.has_attr(dimension) and parse_dimension(attribute(tag, dimension)) == 0:
                return True
        return False

    # --- node construction ---

    def _reset_run(self) -> None:
        self._text_parts: List[str] = []
        # Formatting still open from the previous run is reopened in the next one.
        self._html_parts: List[str] = [markup for _, markup in self._open_formats]
        self._run_sources: Set[int] = set()
        self._link_chars = 0

    def _flush(self) -> None:
        raw = "".join(self._text_parts)
        text = normalize_whitespace(raw)
        if not text:
            self._reset_run()
            return

        block_id = self._blocks[-1] if self._blocks else self._root_id
        if block_id is None:
            raise RuntimeError("Text run flushed outside of convert()")
        parts = list(self._html_parts)
        for name, markup in reversed(self._open_formats):
            if parts and parts[-1] == markup:
                parts.pop()
            else:
                parts.append(f"</{name}>")
        fragment = "".join(parts)
        if self._pre_depth:
            # Preformatted runs keep their line breaks and indentation.
            text = raw.strip("\r\n")
            fragment = fragment.strip("\r\n")
        else:
            fragment = fragment.strip()
        sources = tuple(sorted(self._run_sources | {block_id}))
        self.model.add(
            TextNode(
                text=text,
                html=fragment,
                tag_name=self.tree.tag_name(block_id),
                block_id=block_id,
                source_ids=sources,
                link_chars=min(self._link_chars, len(text)),
            )
        )
        self._reset_run()

    def _add_image(self, tag: Tag, node_id: int) -> None:
        src = attribute(tag, "src").strip()
        if self.settings.use_data_src and (not src or src.startswith("data:")):
            src = attribute(tag, "data-src").strip() or src
        if not src:
            self.logger.debug("Skipping image without a source", node_id=node_id)
            return
        if self.base_url:
            src = urljoin(self.base_url, src)
        self.model.add(
            ImageNode(
                src=src,
                source_ids=(node_id,),
                width=parse_dimension(attribute(tag, "width")) or 0,
                height=parse_dimension(attribute(tag, "height")) or 0,
                alt=normalize_whitespace(attribute(tag, "alt")),
            )
        )

    def _add_embed(self, tag: Tag, name: str, node_id: int) -> None:
        src = attribute(tag, "data" if name == "object" else "src").strip()
        if not src and name == "video":
            source = tag.find("source")
            if isinstance(source, Tag):
                src = attribute(source, "src").strip()
        if not src:
            self.logger.debug("Skipping embed without a source", tag=name, node_id=node_id)
            return
        if self.base_url:
            src = urljoin(self.base_url, src)
        self.model.add(EmbedNode(src=src, kind=name, source_ids=(node_id,)))

    def _find_text_direction(self, root_id: int) -> str:
        # A walk from the document node has <html> and <body> below it, not above.
        candidates = list(self.tree.ancestors(root_id, include_self=True))
        candidates += self.tree.find_all("body")[:1] + self.tree.find_all("html")[:1]
        for node_id in candidates:
            direction = attribute(self.tree.tag(node_id), "dir").strip().lower()
            if direction in TEXT_DIRECTIONS:
                return direction
        return ""
