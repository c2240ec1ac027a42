"""Content classification over the text view."""

from .article import ArticleClassifier, Classification, normalize_title

__all__ = ["ArticleClassifier", "Classification", "normalize_title"]
