"""
Tests for the tree-to-model conversion.
"""

import pytest

from readmill.config import ConverterSettings
from readmill.document import DocumentConverter, EmbedNode, ImageNode, SourceTree, TextNode
from readmill.document.converter import parse_dimension

pytestmark = pytest.mark.unit


def convert(html, **kwargs):
    tree = SourceTree.from_html(html)
    converter = DocumentConverter(tree, **kwargs)
    model = converter.convert(tree.root)
    return tree, converter, model


def texts(model):
    return [node.text for node in model if isinstance(node, TextNode)]


class TestTextRuns:
    def test_inline_runs_merge_into_one_node(self):
        _, _, model = convert('<p>Hello <b>bold</b> and <a href="/x">link</a>.</p>')

        assert len(model) == 1
        node = model.nodes[0]
        assert node.text == "Hello bold and link."
        assert node.html == 'Hello <b>bold</b> and <a href="/x">link</a>.'
        assert node.tag_name == "p"
        assert node.link_chars == 4

    def test_block_elements_split_runs(self):
        tree, _, model = convert("<div>one<p>two</p>three</div>")

        assert texts(model) == ["one", "two", "three"]
        assert [node.tag_name for node in model] == ["div", "p", "div"]
        assert model.nodes[0].block_id == model.nodes[2].block_id == tree.find_all("div")[0]

    def test_source_ids_cover_inline_elements(self):
        tree, _, model = convert("<p>a <em>b</em></p>")

        node = model.nodes[0]
        assert set(node.source_ids) == {tree.find_all("p")[0], tree.find_all("em")[0]}

    def test_line_breaks(self):
        _, _, model = convert("<p>line one<br>line two</p>")

        assert model.nodes[0].text == "line one line two"
        assert model.nodes[0].html == "line one<br>line two"

    def test_formatting_is_closed_and_reopened_around_blocks(self):
        _, _, model = convert("<b>bold <p>inner</p> tail</b>")

        assert texts(model) == ["bold", "inner", "tail"]
        assert model.nodes[1].html == "<b>inner</b>"
        for node in model:
            assert node.html.count("<b>") == node.html.count("</b>")

    def test_formatting_closed_before_any_text_leaves_no_empty_pair(self):
        _, _, model = convert("<div><b><p>x</p></b>y</div>")

        assert texts(model) == ["x", "y"]
        assert model.nodes[1].html == "y"

    def test_empty_link_around_an_image_is_dropped(self):
        _, _, model = convert('<p>see <a href="/full"><img src="a.jpg"></a> below</p>')

        assert model.nodes[0].html == "see"
        assert isinstance(model.nodes[1], ImageNode)
        assert model.nodes[2].html == "below"

    def test_preformatted_text_keeps_line_breaks_and_indentation(self):
        _, _, model = convert("<article><p>Before   the   code.</p><pre>def f():\n    return  1\n</pre></article>")

        assert model.nodes[0].html == "Before the code."
        pre = model.nodes[1]
        assert pre.tag_name == "pre"
        assert pre.html == "def f():\n    return  1"
        assert pre.text == "def f():\n    return  1"

    def test_preformatted_markup_and_breaks(self):
        _, _, model = convert("<pre><code>a &lt; b\n  c</code><br>d</pre><p>after   text</p>")

        assert model.nodes[0].html == "<code>a &lt; b\n  c</code><br>d"
        assert model.nodes[0].text == "a < b\n  c\nd"
        assert model.nodes[1].text == "after text"

    def test_comments_and_whitespace_produce_nothing(self):
        _, _, model = convert("<div>\n  <p>a<!-- editor note -->b</p>\n</div>")

        assert texts(model) == ["ab"]

    def test_skipped_tags(self):
        _, _, model = convert(
            "<head><title>T</title></head><body><script>var x = 1;</script><p>text</p><style>p {}</style></body>"
        )

        assert texts(model) == ["text"]

    def test_custom_skip_tags(self):
        settings = ConverterSettings(skip_tags=["figure"])
        _, _, model = convert("<figure><p>caption</p></figure><p>body</p>", settings=settings)

        assert texts(model) == ["body"]


class TestLinks:
    def test_relative_links_resolve_against_base_url(self):
        _, _, model = convert('<p><a href="/x">go</a></p>', base_url="https://example.com/a/")

        assert model.nodes[0].html == '<a href="https://example.com/x">go</a>'

    def test_script_links_lose_their_href(self):
        _, _, model = convert('<p><a href="javascript:alert(1)">click</a></p>')

        assert model.nodes[0].html == "<a>click</a>"

    def test_markup_in_text_is_escaped(self):
        _, _, model = convert("<p>1 &lt; 2</p>")

        assert model.nodes[0].text == "1 < 2"
        assert model.nodes[0].html == "1 &lt; 2"


class TestHiddenElements:
    def test_hidden_subtrees_are_recorded_and_skipped(self):
        _, converter, model = convert(
            "<div><p>visible text</p>"
            '<div style="display: none"><p>secret</p></div>'
            "<p hidden>also secret</p>"
            '<span aria-hidden="true">icon</span>'
            "</div>"
        )

        assert texts(model) == ["visible text"]
        assert sorted(tag.name for tag in converter.hidden_elements) == ["div", "p", "span"]
        assert len(model.hidden_ids) == 3

    def test_hidden_inputs(self, make_soup):
        soup = make_soup('<input type="hidden" value="token"><input type="text">')
        converter = DocumentConverter(SourceTree(soup))

        hidden, visible = soup.find_all("input")
        assert converter.is_hidden(hidden)
        assert not converter.is_hidden(visible)

    def test_visibility_hidden_style(self):
        _, _, model = convert('<p style="color: red; visibility:hidden">gone</p><p>kept</p>')

        assert texts(model) == ["kept"]

    def test_zero_sized_images_are_hidden(self):
        tree, _, model = convert('<img src="pixel.gif" width="0" height="0"><img src="a.jpg" width="300px" height="200">')

        images = [node for node in model if isinstance(node, ImageNode)]
        assert [image.src for image in images] == ["a.jpg"]
        assert images[0].area == 60000
        assert tree.find_all("img")[0] in model.hidden_ids


class TestMedia:
    def test_lazy_images_use_data_src(self):
        _, _, model = convert('<img data-src="/lazy.jpg" alt=" A  photo ">', base_url="https://example.com/")

        image = model.nodes[0]
        assert isinstance(image, ImageNode)
        assert image.src == "https://example.com/lazy.jpg"
        assert image.alt == "A photo"
        assert image.width == 0

    def test_data_src_can_be_disabled(self):
        _, _, model = convert('<img data-src="/lazy.jpg">', settings=ConverterSettings(use_data_src=False))

        assert len(model) == 0

    def test_images_without_source_are_dropped(self):
        _, _, model = convert('<img alt="no source"><p>text</p>')

        assert texts(model) == ["text"]
        assert len(model) == 1

    def test_embeds(self):
        _, _, model = convert(
            '<iframe src="https://player.example/1"></iframe>'
            '<video><source src="clip.mp4"></video>'
            '<object data="movie.swf"></object>'
            "<embed>"
        )

        embeds = [node for node in model if isinstance(node, EmbedNode)]
        assert [(embed.kind, embed.src) for embed in embeds] == [
            ("iframe", "https://player.example/1"),
            ("video", "clip.mp4"),
            ("object", "movie.swf"),
        ]

    def test_images_break_text_runs(self):
        _, _, model = convert('<p>before <img src="x.jpg"> after</p>')

        assert [type(node).__name__ for node in model] == ["TextNode", "ImageNode", "TextNode"]
        assert model.nodes[0].block_id == model.nodes[2].block_id


class TestConverterMisc:
    def test_text_direction_from_document(self):
        _, _, model = convert('<html dir="rtl"><body><p>text</p></body></html>')

        assert model.text_direction == "rtl"

    def test_text_direction_from_ancestor_of_walk_root(self):
        tree = SourceTree.from_html('<body dir="ltr"><article><p>text</p></article></body>')
        article = tree.tag(tree.find_all("article")[0])

        model = DocumentConverter(tree).convert(article)

        assert model.text_direction == "ltr"

    def test_unknown_direction_is_ignored(self):
        _, _, model = convert('<html dir="sideways"><p>text</p></html>')

        assert model.text_direction == ""

    def test_root_outside_tree_is_rejected(self):
        tree = SourceTree.from_html("<p>one</p>")
        other = SourceTree.from_html("<p>two</p>")

        with pytest.raises(ValueError):
            DocumentConverter(tree).convert(other.root)

    @pytest.mark.parametrize(
        "value,expected",
        [("300", 300), ("300px", 300), (" 12.5 ", 12), ("0", 0), ("", None), ("50%", None), ("auto", None)],
    )
    def test_parse_dimension(self, value, expected):
        assert parse_dimension(value) == expected
