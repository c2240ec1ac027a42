"""
Text-only projection of the content model used for scoring.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, List, Sequence, Tuple

from .model import ContentModel, TextNode
from .source import SourceTree

_WORD = re.compile(r"\w+", re.UNICODE)
_SENTENCE_END = re.compile(r"[.!?。！？]+(?:\s|$)")
_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def count_words(text: str) -> int:
    return len(_WORD.findall(text))


@dataclass(slots=True, frozen=True)
class TextBlock:
    """Features of one block of text, derived from one or more model nodes."""

    model_indices: Tuple[int, ...]
    text: str
    word_count: int
    link_density: float
    avg_sentence_length: float
    depth: int
    tag_name: str
    tag_signature: FrozenSet[str]
    attribute_tokens: FrozenSet[str]

    @property
    def is_heading(self) -> bool:
        return self.tag_name in {"h1", "h2", "h3", "h4", "h5", "h6"}


def _attribute_tokens(tree: SourceTree, node_id: int) -> List[str]:
    tag = tree.tag(node_id)
    tokens: List[str] = []
    for name in ("class", "id"):
        value = tag.get(name)
        if value is None:
            continue
        raw = " ".join(value) if isinstance(value, list) else str(value)
        tokens.extend(token for token in _TOKEN_SPLIT.split(raw.lower()) if token)
    return tokens


def _make_block(tree: SourceTree, model: ContentModel, indices: List[int], signature_depth: int) -> TextBlock:
    nodes: List[TextNode] = []
    for index in indices:
        node = model.nodes[index]
        if not isinstance(node, TextNode):
            raise TypeError(f"Model node {index} is not a text node")
        nodes.append(node)
    text = " ".join(node.text for node in nodes)
    link_chars = sum(node.link_chars for node in nodes)
    block_id = nodes[0].block_id

    words = count_words(text)
    sentences = max(1, len(_SENTENCE_END.findall(text)))
    chars = len(text)

    signature: List[str] = []
    tokens: List[str] = []
    for depth, ancestor in enumerate(tree.ancestors(block_id, include_self=True)):
        if depth > signature_depth:
            break
        signature.append(tree.tag_name(ancestor))
        tokens.extend(_attribute_tokens(tree, ancestor))

    return TextBlock(
        model_indices=tuple(indices),
        text=text,
        word_count=words,
        link_density=min(1.0, link_chars / chars) if chars else 0.0,
        avg_sentence_length=words / sentences,
        depth=tree.depth(block_id),
        tag_name=tree.tag_name(block_id),
        tag_signature=frozenset(signature),
        attribute_tokens=frozenset(tokens),
    )


def create_text_view(tree: SourceTree, model: ContentModel, signature_depth: int = 6) -> List[TextBlock]:
    """
    Project the model onto text blocks.

    Consecutive text nodes sharing an enclosing block (split only by an image
    or embed) become a single block. The model is not modified.
    """
    groups: List[List[int]] = []
    last_block = None
    for index, node in enumerate(model.nodes):
        if not isinstance(node, TextNode):
            continue
        if groups and node.block_id == last_block:
            groups[-1].append(index)
            continue
        groups.append([index])
        last_block = node.block_id
    return [_make_block(tree, model, group, signature_depth) for group in groups]


def view_word_count(blocks: Sequence[TextBlock], labels: Sequence[bool]) -> int:
    """Number of words in the blocks labelled as content."""
    return sum(block.word_count for block, label in zip(blocks, labels) if label)
