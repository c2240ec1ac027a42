"""
Shared test configuration for readmill.

Provides sample documents, tree fixtures and isolation for the global
logging and configuration state the CLI touches.
"""

import logging
from typing import Callable, Generator

import pytest
import structlog
from bs4 import BeautifulSoup

from readmill.config import Config, LazyConfig
from readmill.document import SourceTree

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Sample documents
# ============================================================================

ARTICLE_PARAGRAPH = (
    "The city council approved the new transit plan on Tuesday after a long public debate. "
    "Supporters said the additional bus lines would cut commuting times for thousands of residents. "
    "Opponents argued that the budget estimates were far too optimistic for a project of this size. "
    "Construction of the first routes is expected to begin early next spring."
)

NEWS_PAGE = f"""
<html>
<head></head>
<body>
<nav><a href="/">Home</a> <a href="/about">About</a> <a href="/contact">Contact</a></nav>
<article>
<h1>Title</h1>
<p>{ARTICLE_PARAGRAPH}</p>
</article>
<aside>Buy cheap gadgets now. Great deals today.</aside>
</body>
</html>
"""

LEAD_IMAGE_PAGE = f"""
<html>
<head><title>Transit plan approved after debate | City News</title></head>
<body>
<div class="sidebar"><img src="/banner.jpg" width="728" height="90"></div>
<article>
<h1>Transit plan approved after debate</h1>
<img src="/lead.jpg" width="600" height="400" alt="Council meeting">
<p>{ARTICLE_PARAGRAPH}</p>
<img src="/small.jpg" width="50" height="50">
</article>
</body>
</html>
"""


@pytest.fixture
def article_paragraph() -> str:
    return ARTICLE_PARAGRAPH


@pytest.fixture
def news_page() -> str:
    """Article flanked by navigation and an advert aside."""
    return NEWS_PAGE


@pytest.fixture
def lead_image_page() -> str:
    """Article with a large leading image and a thumbnail after the text."""
    return LEAD_IMAGE_PAGE


@pytest.fixture
def make_soup() -> Callable[[str], BeautifulSoup]:
    def _make(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    return _make


@pytest.fixture
def make_tree() -> Callable[[str], SourceTree]:
    return SourceTree.from_html


@pytest.fixture
def default_config() -> Config:
    return Config()


# ============================================================================
# Global state isolation
# ============================================================================


@pytest.fixture
def isolated_logging() -> Generator[None, None, None]:
    """Restore root logging handlers and structlog defaults after a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def reset_lazy_config() -> Generator[None, None, None]:
    """Make sure the global settings proxy never leaks between tests."""
    LazyConfig.reset()
    yield
    LazyConfig.reset()
