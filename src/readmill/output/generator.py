"""
Renders the included part of the content model as HTML or plain text.
"""

from __future__ import annotations

import html
from typing import List, Optional

from ..config.config import OutputSettings
from ..document.model import ContentModel, EmbedNode, ImageNode, ModelNode, TextNode

# Source block tags that keep their own element in the output; everything else becomes <p>.
_KEPT_BLOCK_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre"})


def _render_text(node: TextNode) -> str:
    tag = node.tag_name if node.tag_name in _KEPT_BLOCK_TAGS else "p"
    return f"<{tag}>{node.html}</{tag}>"


def _render_image(node: ImageNode) -> str:
    attrs = [f'src="{html.escape(node.src, quote=True)}"']
    if node.alt:
        attrs.append(f'alt="{html.escape(node.alt, quote=True)}"')
    if node.width:
        attrs.append(f'width="{node.width}"')
    if node.height:
        attrs.append(f'height="{node.height}"')
    return f"<img {' '.join(attrs)}>"


def _render_embed(node: EmbedNode) -> str:
    src = html.escape(node.src, quote=True)
    if node.kind == "video":
        return f'<video src="{src}" controls></video>'
    return f'<iframe src="{src}"></iframe>'


class OutputGenerator:
    """Serializes included nodes in document order; excluded nodes are left out entirely."""

    def __init__(self, settings: Optional[OutputSettings] = None) -> None:
        self.settings = settings or OutputSettings()

    def generate(self, model: ContentModel, text_only: bool = False) -> str:
        if text_only:
            return self.generate_text(model)
        return self.generate_html(model)

    def generate_text(self, model: ContentModel) -> str:
        texts = [
            node.text for node, included in zip(model.nodes, model.included) if included and isinstance(node, TextNode)
        ]
        return self.settings.text_separator.join(texts)

    def generate_html(self, model: ContentModel) -> str:
        parts: List[str] = []
        for node, included in zip(model.nodes, model.included):
            if included:
                parts.append(self._render(node))
        return "\n".join(parts)

    @staticmethod
    def _render(node: ModelNode) -> str:
        if isinstance(node, TextNode):
            return _render_text(node)
        if isinstance(node, ImageNode):
            return _render_image(node)
        return _render_embed(node)
