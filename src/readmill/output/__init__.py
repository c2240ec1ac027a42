"""HTML and plain text rendering of extracted content."""

from .generator import OutputGenerator

__all__ = ["OutputGenerator"]
