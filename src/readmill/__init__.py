"""
readmill - reader view extraction for parsed HTML documents.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .errors import ConfigurationError, ReadmillError
from .extractor import ContentExtractor
from .models import StatisticsInfo, TimingInfo

__all__ = [
    "__version__",
    "ConfigurationError",
    "ContentExtractor",
    "ReadmillError",
    "StatisticsInfo",
    "TimingInfo",
]
