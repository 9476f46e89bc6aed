"""Tests for the Editor host: value ownership, notifications and key routing."""

import logging

import pytest

from inkwell.editor import Editor
from inkwell.location import Point, Range
from inkwell.mentions import collect_mentions
from inkwell.nodes import Document, paragraph, text
from inkwell.query import string
from inkwell.transforms import insert_nodes


def _editor(value: str = "", offset: int | None = None) -> Editor:
    at = len(value) if offset is None else offset
    return Editor(Document((paragraph(text(value)),), Range.collapsed(Point((0, 0), at))))


@pytest.fixture
def published() -> list[Document]:
    return []


class TestValue:
    def test_initial_value_is_normalized(self) -> None:
        editor = Editor(Document())
        assert editor.value.children == (paragraph(),)

    def test_set_value_normalizes(self) -> None:
        editor = _editor("a")
        editor.set_value(Document((paragraph(text("x"), text("y")),)))
        assert editor.value.children == (paragraph(text("xy")),)

    def test_type_text(self) -> None:
        editor = _editor("ab")
        editor.type_text("cd")
        assert string(editor.value) == "abcd"
        assert editor.value.selection == Range.collapsed(Point((0, 0), 4))


class TestSubscribe:
    def test_listener_sees_each_new_value(self, published: list[Document]) -> None:
        editor = _editor()
        editor.subscribe(published.append)
        editor.type_text("a")
        editor.type_text("b")
        assert [string(doc) for doc in published] == ["a", "ab"]
        assert published[-1] is editor.value

    def test_unsubscribe(self, published: list[Document]) -> None:
        editor = _editor()
        unsubscribe = editor.subscribe(published.append)
        editor.type_text("a")
        unsubscribe()
        unsubscribe()
        editor.type_text("b")
        assert len(published) == 1

    def test_unchanged_value_is_not_published(self, published: list[Document]) -> None:
        editor = _editor("a")
        editor.subscribe(published.append)
        editor.type_text("")
        editor.set_value(editor.value)
        assert published == []


class TestApply:
    def test_invalid_path_is_a_noop(self, caplog: pytest.LogCaptureFixture, published: list[Document]) -> None:
        editor = _editor("a")
        before = editor.value
        editor.subscribe(published.append)
        with caplog.at_level(logging.WARNING, logger="inkwell"):
            result = editor.apply(insert_nodes, paragraph(text("b")), at=(9,))
        assert result is before
        assert published == []
        assert any(r.name == "inkwell.editor" and "insert_nodes" in r.getMessage() for r in caplog.records)

    def test_passes_editor_config(self) -> None:
        seen = []

        def probe(doc: Document, *, config: object) -> Document:
            seen.append(config)
            return doc

        editor = _editor()
        editor.apply(probe)
        assert seen == [editor.config]


class TestMentionFlow:
    def test_typing_opens_overlay(self) -> None:
        editor = _editor("hello ")
        editor.type_text("@mar")
        assert editor.mention_state.is_open
        assert editor.mention_state.candidates == ("margie", "mark")

    def test_enter_commits_when_open(self, published: list[Document]) -> None:
        editor = _editor("hello ")
        editor.subscribe(published.append)
        editor.type_text("@mar")
        assert editor.handle_key("Enter")
        assert collect_mentions(editor.value) == ["margie"]
        assert string(editor.value) == "hello "
        assert len(published) == 2
        assert not editor.mention_state.is_open

    def test_arrow_keys_move_highlight(self) -> None:
        editor = _editor("@ma")
        assert editor.handle_key("ArrowDown")
        assert editor.mention_state.active == "mark"
        editor.handle_key("Enter")
        assert collect_mentions(editor.value) == ["mark"]

    def test_backspace_refines_query(self) -> None:
        editor = _editor("hello @mar")
        assert editor.handle_key("Backspace")
        assert editor.mention_state.query == "ma"
        assert len(editor.mention_state.candidates) == 4

    def test_select_candidate(self) -> None:
        editor = _editor("@ma")
        editor.select_candidate(3)
        assert collect_mentions(editor.value) == ["mattpilla"]


class TestHandleKey:
    def test_enter_splits_block_when_overlay_closed(self) -> None:
        editor = _editor("ab", offset=1)
        assert editor.handle_key("Enter")
        assert [string(block) for block in editor.value.children] == ["a", "b"]

    def test_backspace_and_delete(self) -> None:
        editor = _editor("abc", offset=1)
        editor.handle_key("Delete")
        assert string(editor.value) == "ac"
        editor.handle_key("Backspace")
        assert string(editor.value) == "c"

    def test_hotkey_toggles_pending_mark(self) -> None:
        editor = _editor("ab")
        assert editor.handle_key("mod+b")
        assert editor.value.marks == {"bold": True}
        editor.type_text("c")
        assert editor.value.children[0].children[-1] == text("c", bold=True)

    def test_hotkey_on_expanded_selection(self) -> None:
        editor = Editor(Document((paragraph(text("ab")),), Range(Point((0, 0), 0), Point((0, 0), 2))))
        editor.handle_key("mod+i")
        assert editor.value.children[0].children == (text("ab", italic=True),)

    def test_unknown_key(self) -> None:
        editor = _editor("ab")
        assert not editor.handle_key("a")
        assert string(editor.value) == "ab"
