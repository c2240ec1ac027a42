"""
Content extraction facade.

Runs the phases in order (markup parsing, document construction, article
processing, formatting) over one parsed page and exposes the results.
"""

from __future__ import annotations

import time
import uuid
from typing import Dict, List, Optional, Union

import structlog
from bs4 import BeautifulSoup, Tag

from .classifier import ArticleClassifier
from .config import Config
from .config import settings as default_settings
from .document import ContentModel, DocumentConverter, SourceTree, TextNode, create_text_view
from .filters import LeadImageFinder, RelevantElements
from .metadata import MarkupParser
from .models import PHASES, StatisticsInfo, TimingInfo, TimingRecorder
from .observability import histogram, increment
from .output import OutputGenerator
from .protocols import MarkupProvider
from .title import CandidateTitleList, TitleResolver

logger = structlog.get_logger(__name__)


def find_article_root(tree: SourceTree) -> Optional[Tag]:
    """
    The element that most likely wraps the article, if the markup says so.

    A single ``<article>`` wins. Several of them usually mean a listing page,
    so schema.org items typed as Article or Post are tried next, taking their
    nearest common ancestor since articles are often split across wrappers.
    """
    articles = tree.find_all("article")
    if len(articles) == 1:
        return tree.tag(articles[0])

    items: List[int] = []
    for node_id in tree:
        tag = tree.tag(node_id)
        if not tag.has_attr("itemscope"):
            continue
        item_type = tag.get("itemtype")
        item_type = " ".join(item_type) if isinstance(item_type, list) else str(item_type or "")
        if "Article" in item_type or "Post" in item_type:
            items.append(node_id)
    if items:
        ancestor = tree.nearest_common_ancestor(items)
        if ancestor is not None:
            return tree.tag(ancestor)
    return None


class ContentExtractor:
    """
    Extracts title, content and images from one parsed document.

    ``root`` is a BeautifulSoup document (or any ``Tag``), or an HTML string
    parsed with ``html.parser``. The tree is only read, never modified.
    Input quality problems never raise: a page without an article yields
    empty content and no images.
    """

    def __init__(
        self,
        root: Union[Tag, str],
        *,
        url: Optional[str] = None,
        settings: Optional[Config] = None,
        markup: Optional[MarkupProvider] = None,
    ) -> None:
        if isinstance(root, str):
            root = BeautifulSoup(root, "html.parser")
        if not isinstance(root, Tag):
            raise TypeError(f"ContentExtractor expects a bs4 Tag or an HTML string, got {type(root).__name__}")

        self.root = root
        self.url = url
        self.settings: Config = settings if settings is not None else default_settings
        self.logger = logger.bind(component="ContentExtractor", url=url)

        self._timing = TimingRecorder()
        self._statistics = StatisticsInfo()
        self._image_urls: List[str] = []
        self._text_direction = ""
        self._hidden: List[Tag] = []
        self._model: Optional[ContentModel] = None
        self._tree: Optional[SourceTree] = None

        start = time.perf_counter()
        if markup is None:
            parser = MarkupParser(root, base_url=url or "")
            parser.data  # parse now so the phase is timed
            markup = parser
        self.markup = markup
        self._timing.record("markup_parsing_time", time.perf_counter() - start)

        self._titles = TitleResolver(self.markup, root)

    # --- public API ---

    def extract_title(self) -> str:
        return self._titles.resolve()

    @property
    def candidate_titles(self) -> CandidateTitleList:
        return self._titles.candidates

    @property
    def metadata(self) -> Dict[str, str]:
        """Page-level values parsed from markup; empty for a custom ``MarkupProvider``."""
        if isinstance(self.markup, MarkupParser):
            return self.markup.data.summary()
        return {}

    def extract_content(self, text_only: bool = False) -> str:
        with structlog.contextvars.bound_contextvars(extraction_id=uuid.uuid4().hex[:12]):
            return self._extract_content(text_only)

    def _extract_content(self, text_only: bool) -> str:
        self._timing.clear("document_construction_time", "article_processing_time", "formatting_time")

        now = time.perf_counter()
        model = self._create_model()
        self._timing.record("document_construction_time", time.perf_counter() - now)

        now = time.perf_counter()
        self._process_document(model)
        self._image_urls = [image.src for image in model.content_images()]
        self._timing.record("article_processing_time", time.perf_counter() - now)

        now = time.perf_counter()
        output = OutputGenerator(self.settings.output).generate(model, text_only=text_only)
        self._timing.record("formatting_time", time.perf_counter() - now)

        self._model = model
        self._report(model)
        return output

    @property
    def image_urls(self) -> List[str]:
        return list(self._image_urls)

    @property
    def text_direction(self) -> str:
        return self._text_direction or "auto"

    @property
    def timing_info(self) -> TimingInfo:
        return self._timing.snapshot()

    @property
    def statistics_info(self) -> StatisticsInfo:
        return self._statistics

    @property
    def hidden_elements(self) -> List[Tag]:
        """Elements the last conversion skipped as invisible."""
        return list(self._hidden)

    @property
    def model(self) -> Optional[ContentModel]:
        """Model produced by the last ``extract_content`` call."""
        return self._model

    def get_image_urls(self) -> List[str]:
        return self.image_urls

    def get_text_direction(self) -> str:
        return self.text_direction

    def get_timing_info(self) -> TimingInfo:
        return self.timing_info

    def get_statistics_info(self) -> StatisticsInfo:
        return self.statistics_info

    # --- phases ---

    @property
    def tree(self) -> SourceTree:
        if self._tree is None:
            self._tree = SourceTree(self.root)
        return self._tree

    def _create_model(self) -> ContentModel:
        tree = self.tree
        converter_settings = self.settings.converter

        walk_root: Optional[Tag] = None
        if converter_settings.prefer_article_root:
            walk_root = find_article_root(tree)

        model = self._convert(tree, walk_root if walk_root is not None else self.root)
        if walk_root is not None and not any(isinstance(node, TextNode) for node in model):
            self.logger.debug("Article element held no text, walking the whole document")
            model = self._convert(tree, self.root)
        self._text_direction = model.text_direction
        return model

    def _convert(self, tree: SourceTree, walk_root: Tag) -> ContentModel:
        converter = DocumentConverter(tree, self.settings.converter, base_url=self.url)
        model = converter.convert(walk_root)
        self._hidden = converter.hidden_elements
        return model

    def _process_document(self, model: ContentModel) -> None:
        blocks = create_text_view(self.tree, model, self.settings.converter.signature_depth)
        classifier = ArticleClassifier(self.settings.classifier)
        classification = classifier.classify(blocks, self._titles.candidates)
        classifier.apply_to_model(blocks, classification, model)
        self._statistics = StatisticsInfo(word_count=classification.word_count)

        RelevantElements(self.tree, self.settings.filters).process(model)
        LeadImageFinder(self.settings.filters).process(model)

    def _report(self, model: ContentModel) -> None:
        timing = self._timing.snapshot()
        self.logger.debug(
            "Extraction timing",
            markup_parsing_time=timing.markup_parsing_time,
            document_construction_time=timing.document_construction_time,
            article_processing_time=timing.article_processing_time,
            formatting_time=timing.formatting_time,
            **{f"other_{name}": value for name, value in timing.other_times.items()},
        )
        self.logger.info(
            "Content extracted",
            nodes=len(model),
            included=len(model.included_indices()),
            images=len(self._image_urls),
            word_count=self._statistics.word_count,
        )

        if not self.settings.monitoring.metrics_enabled:
            return
        outcome = "content" if model.included_indices() else "empty"
        increment("extractions", labels={"outcome": outcome})
        histogram("content_words", self._statistics.word_count)
        for phase in PHASES:
            histogram("phase_duration_seconds", getattr(timing, phase), labels={"phase": phase})
