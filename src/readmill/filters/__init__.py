"""Refinement passes run after classification."""

from .lead_image import LeadImageFinder
from .relevant_elements import RelevantElements

__all__ = ["LeadImageFinder", "RelevantElements"]
