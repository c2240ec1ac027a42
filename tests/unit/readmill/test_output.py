"""
Tests for HTML and plain text rendering.
"""

import pytest

from readmill.config import OutputSettings
from readmill.document import ContentModel, EmbedNode, ImageNode, TextNode
from readmill.output import OutputGenerator

pytestmark = pytest.mark.unit


@pytest.fixture
def model():
    model = ContentModel()
    model.add(TextNode("Menu", '<a href="/">Menu</a>', "li", 1, (1,), link_chars=4))
    model.add(TextNode("Heading", "Heading", "h2", 2, (2,)))
    model.add(TextNode("Body text", "Body <b>text</b>", "div", 3, (3, 4)))
    model.add(ImageNode("https://example.com/a.jpg", (5,), width=10, height=20, alt='Say "cheese"'))
    model.add(EmbedNode("https://example.com/v.mp4", "video", (6,)))
    model.add(EmbedNode("https://player.example/1", "iframe", (7,)))
    model.add(TextNode("Quote", "Quote", "blockquote", 8, (8,)))
    for index in range(1, len(model)):
        model.set_included(index)
    return model


class TestOutputGenerator:
    def test_html(self, model):
        html = OutputGenerator().generate(model)

        assert html.split("\n") == [
            "<h2>Heading</h2>",
            "<p>Body <b>text</b></p>",
            '<img src="https://example.com/a.jpg" alt="Say &quot;cheese&quot;" width="10" height="20">',
            '<video src="https://example.com/v.mp4" controls></video>',
            '<iframe src="https://player.example/1"></iframe>',
            "<blockquote>Quote</blockquote>",
        ]

    def test_text_only(self, model):
        text = OutputGenerator().generate(model, text_only=True)

        assert text == "Heading\nBody text\nQuote"
        assert "<" not in text and ">" not in text

    def test_excluded_nodes_are_left_out(self, model):
        model.set_included(2, False)

        assert "Body" not in OutputGenerator().generate_html(model)
        assert "Body" not in OutputGenerator().generate_text(model)
        assert "Menu" not in OutputGenerator().generate_text(model)

    def test_custom_separator(self, model):
        generator = OutputGenerator(OutputSettings(text_separator="\n\n"))

        assert generator.generate_text(model) == "Heading\n\nBody text\n\nQuote"

    def test_empty_model(self):
        assert OutputGenerator().generate(ContentModel()) == ""
        assert OutputGenerator().generate(ContentModel(), text_only=True) == ""
