"""
Intermediate document model and the passes that build and project it.
"""

from .converter import DocumentConverter
from .model import ContentModel, EmbedNode, ImageNode, ModelNode, TextNode
from .source import SourceTree
from .text_view import TextBlock, count_words, create_text_view
from .walker import DomVisitor, DomWalker

__all__ = [
    "ContentModel",
    "DocumentConverter",
    "DomVisitor",
    "DomWalker",
    "EmbedNode",
    "ImageNode",
    "ModelNode",
    "SourceTree",
    "TextBlock",
    "TextNode",
    "count_words",
    "create_text_view",
]
