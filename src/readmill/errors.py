"""
Exceptions raised by readmill.

Input-quality problems (malformed markup, missing attributes, empty pages)
never raise; they degrade to empty results. Only misuse and configuration
problems surface as exceptions.
"""

from __future__ import annotations


class ReadmillError(Exception):
    """Base class for all readmill errors."""


class ConfigurationError(ReadmillError, ValueError):
    """Raised when a configuration file or value cannot be used."""
