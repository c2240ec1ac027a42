"""
Structured metadata (OpenGraph, Schema.org, Twitter Cards) read from page markup.
"""

from .markup import MarkupData, MarkupParser, OpenGraphParser, SchemaOrgParser, TwitterCardParser

__all__ = ["MarkupData", "MarkupParser", "OpenGraphParser", "SchemaOrgParser", "TwitterCardParser"]
