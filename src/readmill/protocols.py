"""
Interfaces readmill expects from its collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(slots=True, frozen=True)
class DocumentTitle:
    """The document's ``<title>``: its text, and whether it was a single plain string."""

    text: str = ""
    is_plain_string: bool = False


@runtime_checkable
class MarkupProvider(Protocol):
    """Supplies metadata titles parsed from page markup."""

    def get_title(self) -> str:
        """Title from structured metadata, or an empty string."""
        ...

    def get_document_title(self) -> DocumentTitle:
        """The raw document title."""
        ...
