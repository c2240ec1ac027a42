"""
Tests for the content model and its text view.
"""

import dataclasses

import pytest

from readmill.document import (
    ContentModel,
    DocumentConverter,
    ImageNode,
    SourceTree,
    TextNode,
    count_words,
    create_text_view,
)
from readmill.document.text_view import _make_block, view_word_count

pytestmark = pytest.mark.unit


def build(html, signature_depth=6):
    tree = SourceTree.from_html(html)
    model = DocumentConverter(tree).convert(tree.root)
    return model, create_text_view(tree, model, signature_depth)


class TestContentModel:
    def setup_method(self):
        self.model = ContentModel()
        self.model.add(TextNode("intro", "intro", "p", 1, (1,)))
        self.model.add(ImageNode("a.jpg", (2,), width=10, height=10))
        self.model.add(TextNode("body", "body", "p", 3, (3,)))

    def test_nodes_start_excluded(self):
        assert self.model.included == [False, False, False]
        assert self.model.included_indices() == []
        assert self.model.content_span() is None

    def test_inclusion_flags(self):
        self.model.set_included(1)
        self.model.set_included(2)
        self.model.set_included(2, False)

        assert self.model.is_included(1)
        assert self.model.included_indices() == [1]
        assert self.model.content_span() == (1, 1)
        assert [image.src for image in self.model.content_images()] == ["a.jpg"]

    def test_index_helpers(self):
        assert self.model.text_indices() == [0, 2]
        assert self.model.image_indices() == [1]

    def test_text_between(self):
        assert self.model.has_text_between(0, 2) is False
        assert self.model.has_text_between(0, 3) is True
        assert self.model.has_text_between(1, 2) is False

    def test_nodes_are_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            self.model.nodes[0].text = "changed"  # type: ignore[misc]


class TestTextView:
    def test_runs_of_one_block_split_by_media_merge(self):
        model, blocks = build('<p>before <img src="x.jpg"> after</p>')

        assert len(blocks) == 1
        assert blocks[0].model_indices == (0, 2)
        assert blocks[0].text == "before after"

    def test_every_block_maps_to_model_nodes(self):
        model, blocks = build("<div>one<p>two</p>three</div>")

        assert [block.text for block in blocks] == ["one", "two", "three"]
        for block in blocks:
            assert block.model_indices
            assert all(isinstance(model.nodes[i], TextNode) for i in block.model_indices)

    def test_blocks_refuse_media_nodes(self):
        tree = SourceTree.from_html('<p>caption<img src="x.jpg"></p>')
        model = DocumentConverter(tree).convert(tree.root)

        with pytest.raises(TypeError):
            _make_block(tree, model, [0, 1], 6)

    def test_link_density(self):
        _, blocks = build('<p><a href="/a">abcd</a> efgh</p>')

        assert blocks[0].link_density == pytest.approx(4 / 9)

    def test_sentence_length(self):
        _, blocks = build("<p>One two three. Four five six.</p>")

        assert blocks[0].word_count == 6
        assert blocks[0].avg_sentence_length == pytest.approx(3.0)

    def test_structural_features(self):
        _, blocks = build('<div class="post-content" id="main"><p>Hello world.</p></div>')

        block = blocks[0]
        assert block.tag_name == "p"
        assert block.depth == 2
        assert block.tag_signature == frozenset({"p", "div", "[document]"})
        assert {"post", "content", "main"} <= block.attribute_tokens

    def test_signature_depth_bounds_ancestors(self):
        _, blocks = build("<section><div><p>Deep text.</p></div></section>", signature_depth=1)

        assert blocks[0].tag_signature == frozenset({"p", "div"})

    def test_headings(self):
        _, blocks = build("<h2>Subheading</h2><p>Body</p>")

        assert [block.is_heading for block in blocks] == [True, False]

    def test_view_does_not_touch_model(self):
        model, _ = build("<p>one</p><p>two</p>")

        assert model.included == [False, False]

    def test_view_word_count(self):
        _, blocks = build("<p>one two</p><p>three four five</p>")

        assert view_word_count(blocks, [True, True]) == 5
        assert view_word_count(blocks, [False, True]) == 3
        assert view_word_count(blocks, [False, False]) == 0


def test_count_words():
    assert count_words("Hello,   world!") == 2
    assert count_words("") == 0
