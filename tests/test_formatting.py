"""Tests for toolbar/hotkey formatting: marks and block types."""

from hypothesis import given, settings
from hypothesis import strategies as st

from inkwell.config import EditorConfig, editor_config_context
from inkwell.formatting import (
    BLOCK_BUTTONS,
    HOTKEYS,
    MARK_BUTTONS,
    is_block_active,
    is_mark_active,
    mark_for_hotkey,
    toggle_block,
    toggle_mark,
)
from inkwell.location import Point, Range
from inkwell.nodes import Document, Text, element, paragraph, text
from inkwell.query import string
from inkwell.transforms import insert_text


def _cursor(path: tuple[int, ...], offset: int) -> Range:
    return Range.collapsed(Point(path, offset))


def _types(doc: Document) -> list[str]:
    return [block.type for block in doc.children]


LINK_CONFIG = EditorConfig(inline_types=frozenset({"mention", "link"}))


def _link_heading() -> Document:
    """A paragraph, then a heading holding an inline link; selection ends inside the link."""
    return Document(
        (
            paragraph(text("a")),
            element("heading-one", text(), element("link", text("b")), text()),
        ),
        Range(Point((0, 0), 0), Point((1, 1, 0), 0)),
    )


class TestHotkeys:
    def test_table(self) -> None:
        assert dict(HOTKEYS) == {"mod+b": "bold", "mod+i": "italic", "mod+shift+c": "code"}

    def test_lookup_is_case_insensitive(self) -> None:
        assert mark_for_hotkey("mod+b") == "bold"
        assert mark_for_hotkey("Mod+Shift+C") == "code"
        assert mark_for_hotkey("mod+x") is None

    def test_buttons_cover_every_hotkey_mark(self) -> None:
        assert {fmt for fmt, _ in MARK_BUTTONS} == set(HOTKEYS.values())
        assert ("bulleted-list", "•") in BLOCK_BUTTONS


class TestMarkState:
    def test_active_from_leaf(self) -> None:
        doc = Document((paragraph(text("ab", bold=True)),), _cursor((0, 0), 1))
        assert is_mark_active(doc, "bold")
        assert not is_mark_active(doc, "italic")

    def test_active_from_pending(self) -> None:
        doc = Document((paragraph(text("ab")),), _cursor((0, 0), 1), {"code": True})
        assert is_mark_active(doc, "code")

    def test_no_selection(self) -> None:
        assert not is_mark_active(Document((paragraph(text("ab", bold=True)),)), "bold")


class TestToggleMark:
    def test_expanded_selection(self) -> None:
        doc = Document((paragraph(text("hello")),), Range(Point((0, 0), 0), Point((0, 0), 5)))
        bold = toggle_mark(doc, "bold")
        assert bold.children[0].children == (Text("hello", {"bold": True}),)
        assert toggle_mark(bold, "bold") == doc

    def test_collapsed_selection_marks_next_text(self) -> None:
        doc = Document((paragraph(text("ab")),), _cursor((0, 0), 2))
        doc = toggle_mark(doc, "italic")
        assert is_mark_active(doc, "italic")
        doc = insert_text(doc, "c")
        assert doc.children[0].children == (Text("ab"), Text("c", {"italic": True}))
        assert is_mark_active(doc, "italic")

    def test_collapsed_round_trip(self) -> None:
        doc = Document((paragraph(text("ab")),), _cursor((0, 0), 1))
        assert toggle_mark(toggle_mark(doc, "bold"), "bold") == doc

    @given(
        st.text(alphabet="ab c", max_size=8),
        st.booleans(),
        st.data(),
    )
    @settings(max_examples=200)
    def test_round_trip(self, value: str, bold: bool, data: st.DataObject) -> None:
        anchor = data.draw(st.integers(min_value=0, max_value=len(value)))
        focus = data.draw(st.integers(min_value=0, max_value=len(value)))
        marks = {"bold": True} if bold else {}
        doc = Document(
            (paragraph(Text(value, marks)),),
            Range(Point((0, 0), anchor), Point((0, 0), focus)),
        )
        assert toggle_mark(toggle_mark(doc, "bold"), "bold") == doc


class TestBlockState:
    def test_active_through_ancestors(self) -> None:
        doc = Document(
            (element("bulleted-list", element("list-item", text("a"))),),
            _cursor((0, 0, 0), 0),
        )
        assert is_block_active(doc, "bulleted-list")
        assert is_block_active(doc, "list-item")
        assert not is_block_active(doc, "paragraph")

    def test_hanging_block_not_active(self) -> None:
        doc = Document(
            (element("heading-one", text("a")), paragraph(text("b"))),
            Range(Point((0, 0), 0), Point((1, 0), 0)),
        )
        assert is_block_active(doc, "heading-one")
        assert not is_block_active(doc, "paragraph")

    def test_attribute_lookup(self) -> None:
        doc = Document((element("paragraph", text("a"), align="center"),), _cursor((0, 0), 0))
        assert is_block_active(doc, "center", attribute="align")

    def test_explicit_config(self) -> None:
        doc = _link_heading()
        assert not is_block_active(doc, "heading-one", config=LINK_CONFIG)

    def test_no_selection(self) -> None:
        assert not is_block_active(Document((paragraph(text("a")),)), "paragraph")


class TestToggleBlock:
    def test_heading_round_trip(self) -> None:
        doc = Document((paragraph(text("title")),), _cursor((0, 0), 2))
        heading = toggle_block(doc, "heading-one")
        assert _types(heading) == ["heading-one"]
        assert toggle_block(heading, "heading-one") == doc

    def test_bulleted_list_round_trip(self) -> None:
        doc = Document((paragraph(text("hello")),), _cursor((0, 0), 1))
        listed = toggle_block(doc, "bulleted-list")
        assert _types(listed) == ["bulleted-list"]
        assert [item.type for item in listed.children[0].children] == ["list-item"]
        assert listed.selection == _cursor((0, 0, 0), 1)
        assert toggle_block(listed, "bulleted-list") == doc

    def test_switch_list_kind(self) -> None:
        doc = Document(
            (element("bulleted-list", element("list-item", text("a"))),),
            _cursor((0, 0, 0), 1),
        )
        doc = toggle_block(doc, "numbered-list")
        assert _types(doc) == ["numbered-list"]
        assert doc.children[0].children[0].type == "list-item"

    def test_heading_inside_list_leaves_rest_of_list(self) -> None:
        doc = Document(
            (
                element(
                    "bulleted-list",
                    element("list-item", text("a")),
                    element("list-item", text("b")),
                ),
            ),
            _cursor((0, 1, 0), 1),
        )
        doc = toggle_block(doc, "heading-one")
        assert _types(doc) == ["bulleted-list", "heading-one"]
        assert [string(b) for b in doc.children] == ["a", "b"]

    def test_multiple_blocks_into_one_list(self) -> None:
        doc = Document(
            (paragraph(text("a")), paragraph(text("b"))),
            Range(Point((0, 0), 0), Point((1, 0), 1)),
        )
        doc = toggle_block(doc, "numbered-list")
        assert _types(doc) == ["numbered-list"]
        assert [string(item) for item in doc.children[0].children] == ["a", "b"]

    def test_explicit_config_matches_context_config(self) -> None:
        doc = _link_heading()
        with editor_config_context(LINK_CONFIG):
            expected = toggle_block(doc, "heading-one")
        result = toggle_block(doc, "heading-one", config=LINK_CONFIG)
        assert _types(result) == ["heading-one", "heading-one"]
        assert result == expected
