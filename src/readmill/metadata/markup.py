"""
Markup Parser - OpenGraph, Schema.org and Twitter Cards

Reads structured metadata from the page head and body. The title it finds
outranks anything the heuristics derive from the document itself.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import structlog
from bs4 import NavigableString, Tag

from ..protocols import DocumentTitle

logger = structlog.get_logger(__name__)

_ARTICLE_TYPES = ("Article", "Posting", "Post", "Report", "WebPage")


@dataclass
class MarkupData:
    """Metadata found in page markup."""

    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    og_site_name: Optional[str] = None
    og_type: Optional[str] = None
    og_url: Optional[str] = None

    schema_type: Optional[str] = None
    schema_title: Optional[str] = None
    schema_description: Optional[str] = None
    schema_author: Optional[str] = None
    schema_image: Optional[str] = None

    twitter_title: Optional[str] = None

    canonical_url: Optional[str] = None
    meta_description: Optional[str] = None
    meta_author: Optional[str] = None

    raw_json_ld: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def title(self) -> str:
        return _first(self.og_title, self.schema_title, self.twitter_title)

    @property
    def description(self) -> str:
        return _first(self.og_description, self.schema_description, self.meta_description)

    @property
    def author(self) -> str:
        return _first(self.schema_author, self.meta_author)

    @property
    def image(self) -> str:
        return _first(self.og_image, self.schema_image)

    @property
    def site_name(self) -> str:
        return _first(self.og_site_name)

    @property
    def url(self) -> str:
        return _first(self.canonical_url, self.og_url)

    def summary(self) -> Dict[str, str]:
        """Non-empty page-level values under their generic names."""
        values = {
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "image": self.image,
            "site_name": self.site_name,
            "url": self.url,
        }
        return {key: value for key, value in values.items() if value}


def _first(*candidates: Optional[str]) -> str:
    for candidate in candidates:
        if candidate and candidate.strip():
            return " ".join(candidate.split())
    return ""


class OpenGraphParser:
    """Parser for OpenGraph metadata."""

    @staticmethod
    def parse(soup: Tag, base_url: str = "") -> Dict[str, str]:
        og_data: Dict[str, str] = {}
        for tag in soup.find_all("meta", property=re.compile(r"^og:")):
            property_name = str(tag.get("property", ""))
            content = str(tag.get("content", "")).strip()
            if not property_name or not content:
                continue
            clean_name = property_name.replace("og:", "").replace(":", "_")
            if clean_name in ("image", "url") and base_url:
                content = urljoin(base_url, content)
            # First occurrence wins; later og:image entries are alternates.
            og_data.setdefault(f"og_{clean_name}", content)
        return og_data


class SchemaOrgParser:
    """Parser for Schema.org JSON-LD and microdata."""

    @staticmethod
    def parse_json_ld(soup: Tag) -> List[Dict[str, Any]]:
        json_ld_data: List[Dict[str, Any]] = []
        for script in soup.find_all("script", type="application/ld+json"):
            json_text = script.string
            if not json_text:
                continue
            try:
                data = json.loads(str(json_text).strip())
            except json.JSONDecodeError as e:
                logger.debug("Invalid JSON-LD skipped", error=str(e))
                continue

            items = data if isinstance(data, list) else [data]
            for item in items:
                if not isinstance(item, dict):
                    continue
                graph = item.get("@graph")
                if isinstance(graph, list):
                    json_ld_data.extend(entry for entry in graph if isinstance(entry, dict))
                else:
                    json_ld_data.append(item)
        return json_ld_data

    @staticmethod
    def parse_microdata(soup: Tag) -> Dict[str, str]:
        """Headline of the first itemscope typed as an article."""
        found: Dict[str, str] = {}
        for item in soup.find_all(attrs={"itemscope": True}):
            item_type = str(item.get("itemtype", ""))
            if not any(kind in item_type for kind in _ARTICLE_TYPES):
                continue
            for prop in ("headline", "name"):
                element = item.find(attrs={"itemprop": prop})
                if not isinstance(element, Tag):
                    continue
                value = element.get("content") if element.name == "meta" else element.get_text(" ", strip=True)
                if value:
                    found.setdefault("schema_type", item_type.rsplit("/", 1)[-1])
                    found["schema_title"] = str(value)
                    return found
        return found

    @staticmethod
    def extract_schema_fields(json_ld_data: List[Dict[str, Any]]) -> Dict[str, str]:
        schema_fields: Dict[str, str] = {}
        field_mappings = {
            "headline": "schema_title",
            "name": "schema_title",
            "description": "schema_description",
            "author": "schema_author",
            "image": "schema_image",
        }

        for item in json_ld_data:
            schema_type = item.get("@type", "")
            types = schema_type if isinstance(schema_type, list) else [schema_type]
            if not any(isinstance(t, str) and any(kind in t for kind in _ARTICLE_TYPES) for t in types):
                continue
            schema_fields.setdefault("schema_type", str(types[0]))

            for json_key, schema_key in field_mappings.items():
                if schema_key in schema_fields:
                    continue
                value = _scalar(item.get(json_key))
                if value:
                    schema_fields[schema_key] = value
        return schema_fields


class TwitterCardParser:
    """Parser for Twitter Card metadata."""

    @staticmethod
    def parse(soup: Tag) -> Dict[str, str]:
        twitter_data: Dict[str, str] = {}
        for tag in soup.find_all("meta", attrs={"name": re.compile(r"^twitter:")}):
            name = str(tag.get("name", ""))
            content = str(tag.get("content", "")).strip()
            if name and content:
                twitter_data.setdefault(f"twitter_{name.replace('twitter:', '').replace(':', '_')}", content)
        return twitter_data


def _scalar(value: Any) -> Optional[str]:
    """Flatten a JSON-LD value (string, object with name/url, or list) to a string."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("name") or value.get("url") or value.get("@id")
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class MarkupParser:
    """
    Structured metadata accessor for one document.

    Parsing happens on first use; ``get_title`` and ``get_document_title``
    satisfy :class:`readmill.protocols.MarkupProvider`.
    """

    def __init__(self, soup: Tag, base_url: str = "") -> None:
        self.soup = soup
        self.base_url = base_url
        self._data: Optional[MarkupData] = None

    @property
    def data(self) -> MarkupData:
        if self._data is None:
            self._data = self.parse()
        return self._data

    def parse(self) -> MarkupData:
        result: Dict[str, Any] = {}
        result.update(OpenGraphParser.parse(self.soup, self.base_url))

        json_ld = SchemaOrgParser.parse_json_ld(self.soup)
        result.update(SchemaOrgParser.extract_schema_fields(json_ld))
        for key, value in SchemaOrgParser.parse_microdata(self.soup).items():
            result.setdefault(key, value)

        result.update(TwitterCardParser.parse(self.soup))
        result.update(self._parse_standard_meta())

        known = {f.name for f in fields(MarkupData)}
        data = MarkupData(**{key: value for key, value in result.items() if key in known})
        data.raw_json_ld = json_ld
        if data.schema_image and self.base_url:
            data.schema_image = urljoin(self.base_url, data.schema_image)
        logger.debug("Markup parsed", has_title=bool(data.title), json_ld_items=len(json_ld))
        return data

    def _parse_standard_meta(self) -> Dict[str, str]:
        meta_data: Dict[str, str] = {}
        for name in ("description", "author"):
            meta = self.soup.find("meta", attrs={"name": name})
            if isinstance(meta, Tag) and meta.get("content"):
                meta_data[f"meta_{name}"] = str(meta.get("content"))

        canonical = self.soup.find("link", rel="canonical")
        if isinstance(canonical, Tag) and canonical.get("href"):
            href = str(canonical.get("href"))
            meta_data["canonical_url"] = urljoin(self.base_url, href) if self.base_url else href
        return meta_data

    def get_title(self) -> str:
        return self.data.title

    def get_document_title(self) -> DocumentTitle:
        title_tag = self.soup.find("title")
        if not isinstance(title_tag, Tag):
            return DocumentTitle()
        children = list(title_tag.children)
        plain = len(children) == 1 and isinstance(children[0], NavigableString)
        return DocumentTitle(text=" ".join(title_tag.get_text().split()), is_plain_string=plain)
