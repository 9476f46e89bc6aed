"""Tests for primitive operations and position transforms."""

import pytest

from inkwell.errors import InvalidPathError, NodeTypeError
from inkwell.location import Point, Range
from inkwell.nodes import Document, Element, Text, paragraph, text
from inkwell.operations import (
    InsertNode,
    InsertText,
    MergeNode,
    MoveNode,
    RemoveNode,
    RemoveText,
    SetNode,
    SetSelection,
    SplitNode,
    apply_operation,
    extract_properties,
    transform_path,
    transform_point,
    transform_range,
    with_properties,
)
from inkwell.query import string


def _doc(*values: str, selection: Range | None = None) -> Document:
    return Document(tuple(paragraph(text(v)) for v in values), selection)


def _strings(doc: Document) -> list[str]:
    return [string(block) for block in doc.children]


class TestTransformPath:
    def test_insert_before_shifts(self) -> None:
        op = InsertNode((0, 0), Text("x"))
        assert transform_path((0, 0), op) == (0, 1)
        assert transform_path((0, 2), op) == (0, 3)

    def test_insert_elsewhere_is_ignored(self) -> None:
        op = InsertNode((0, 0), Text("x"))
        assert transform_path((0,), op) == (0,)
        assert transform_path((1, 0), op) == (1, 0)

    def test_remove(self) -> None:
        op = RemoveNode((0,), paragraph())
        assert transform_path((0, 1), op) is None
        assert transform_path((1, 2), op) == (0, 2)

    def test_merge(self) -> None:
        op = MergeNode((1,), 2)
        assert transform_path((1,), op) == (0,)
        assert transform_path((1, 0), op) == (0, 2)
        assert transform_path((2, 0), op) == (1, 0)

    def test_split_affinity(self) -> None:
        op = SplitNode((0, 0), 2)
        assert transform_path((0, 0), op, "forward") == (0, 1)
        assert transform_path((0, 0), op, "backward") == (0, 0)
        assert transform_path((0, 0), op, None) is None

    def test_split_element_moves_later_children(self) -> None:
        op = SplitNode((0,), 1)
        assert transform_path((0, 0), op) == (0, 0)
        assert transform_path((0, 2), op) == (1, 1)

    def test_move_node_and_descendants(self) -> None:
        op = MoveNode((0,), (2,))
        assert transform_path((0, 1), op) == (2, 1)
        assert transform_path((1,), op) == (0,)

    def test_root_is_stable(self) -> None:
        assert transform_path((), RemoveNode((0,), paragraph())) == ()


class TestTransformPoint:
    def test_insert_text_affinity(self) -> None:
        op = InsertText((0, 0), 1, "xy")
        assert transform_point(Point((0, 0), 1), op, "forward") == Point((0, 0), 3)
        assert transform_point(Point((0, 0), 1), op, "backward") == Point((0, 0), 1)
        assert transform_point(Point((0, 0), 0), op) == Point((0, 0), 0)

    def test_remove_text(self) -> None:
        op = RemoveText((0, 0), 1, "bcd")
        assert transform_point(Point((0, 0), 3), op) == Point((0, 0), 1)
        assert transform_point(Point((0, 0), 6), op) == Point((0, 0), 3)

    def test_merge_adds_previous_length(self) -> None:
        op = MergeNode((0, 1), 3)
        assert transform_point(Point((0, 1), 2), op) == Point((0, 0), 5)

    def test_split_text(self) -> None:
        op = SplitNode((0, 0), 2)
        assert transform_point(Point((0, 0), 3), op) == Point((0, 1), 1)
        assert transform_point(Point((0, 0), 2), op, "forward") == Point((0, 1), 0)
        assert transform_point(Point((0, 0), 2), op, "backward") == Point((0, 0), 2)

    def test_removed_node(self) -> None:
        assert transform_point(Point((0, 0), 1), RemoveNode((0,), paragraph())) is None

    def test_unchanged_point_is_same_object(self) -> None:
        point = Point((1, 0), 1)
        assert transform_point(point, InsertText((0, 0), 0, "x")) is point


class TestTransformRange:
    def test_inward_does_not_grow(self) -> None:
        rng = Range(Point((0, 0), 1), Point((0, 0), 3))
        assert transform_range(rng, InsertText((0, 0), 3, "zz"), "inward") == rng
        assert transform_range(rng, InsertText((0, 0), 1, "zz"), "inward") == Range(
            Point((0, 0), 3), Point((0, 0), 5)
        )

    def test_outward_grows(self) -> None:
        rng = Range(Point((0, 0), 1), Point((0, 0), 3))
        assert transform_range(rng, InsertText((0, 0), 3, "zz"), "outward") == Range(
            Point((0, 0), 1), Point((0, 0), 5)
        )

    def test_removed_edge(self) -> None:
        rng = Range(Point((0, 0), 0), Point((1, 0), 1))
        assert transform_range(rng, RemoveNode((1,), paragraph())) is None


class TestProperties:
    def test_extract(self) -> None:
        assert extract_properties(Text("a", {"bold": True})) == {"bold": True}
        assert extract_properties(Element("mention", (), {"username": "ben"})) == {
            "type": "mention",
            "username": "ben",
        }

    def test_with_properties_sets_and_deletes(self) -> None:
        node = Element("paragraph", (Text(),), {"align": "left"})
        updated = with_properties(node, {"type": "heading-one", "align": None, "id": 3})
        assert updated.type == "heading-one"
        assert dict(updated.attributes) == {"id": 3}
        assert dict(node.attributes) == {"align": "left"}

    def test_with_properties_on_text(self) -> None:
        updated = with_properties(Text("a", {"bold": True}), {"bold": None, "italic": True})
        assert dict(updated.marks) == {"italic": True}


class TestApplyOperation:
    def test_insert_and_remove_node(self) -> None:
        doc = _doc("a")
        doc = apply_operation(doc, InsertNode((1,), paragraph(text("b"))))
        assert _strings(doc) == ["a", "b"]
        doc = apply_operation(doc, RemoveNode((0,), doc.children[0]))
        assert _strings(doc) == ["b"]

    def test_text_operations_carry_selection(self) -> None:
        doc = _doc("abc", selection=Range.collapsed(Point((0, 0), 2)))
        doc = apply_operation(doc, InsertText((0, 0), 0, "xx"))
        assert string(doc) == "xxabc"
        assert doc.selection == Range.collapsed(Point((0, 0), 4))
        doc = apply_operation(doc, RemoveText((0, 0), 0, "xxa"))
        assert string(doc) == "bc"
        assert doc.selection == Range.collapsed(Point((0, 0), 1))

    def test_split_and_merge_text(self) -> None:
        doc = _doc("hello", selection=Range.collapsed(Point((0, 0), 4)))
        doc = apply_operation(doc, SplitNode((0, 0), 2, {"bold": True}))
        assert doc.children[0].children == (Text("he"), Text("llo", {"bold": True}))
        assert doc.selection == Range.collapsed(Point((0, 1), 2))
        doc = apply_operation(doc, MergeNode((0, 1), 2))
        assert doc.children[0].children == (Text("hello"),)
        assert doc.selection == Range.collapsed(Point((0, 0), 4))

    def test_split_element(self) -> None:
        doc = Document((paragraph(text("a"), text("b", bold=True)),))
        doc = apply_operation(doc, SplitNode((0,), 1, {"type": "paragraph"}))
        assert _strings(doc) == ["a", "b"]

    def test_merge_mismatched_variants(self) -> None:
        doc = Document((Element("paragraph", (Text("a"), Element("mention", (Text(),)))),))
        with pytest.raises(NodeTypeError):
            apply_operation(doc, MergeNode((0, 1), 1))

    def test_merge_without_previous(self) -> None:
        with pytest.raises(InvalidPathError):
            apply_operation(_doc("a"), MergeNode((0, 0), 0))

    def test_move_node(self) -> None:
        doc = apply_operation(_doc("a", "b", "c"), MoveNode((0,), (2,)))
        assert _strings(doc) == ["b", "c", "a"]

    def test_move_into_itself_raises(self) -> None:
        with pytest.raises(InvalidPathError):
            apply_operation(_doc("a"), MoveNode((0,), (0, 1)))

    def test_set_node(self) -> None:
        doc = apply_operation(_doc("a"), SetNode((0,), {"type": "paragraph"}, {"type": "heading-one"}))
        assert doc.children[0].type == "heading-one"

    def test_set_node_on_root_raises(self) -> None:
        with pytest.raises(NodeTypeError):
            apply_operation(_doc("a"), SetNode((), {}, {"type": "x"}))

    def test_insert_text_into_element_raises(self) -> None:
        with pytest.raises(NodeTypeError):
            apply_operation(_doc("a"), InsertText((0,), 0, "x"))

    def test_insert_text_offset_out_of_range(self) -> None:
        with pytest.raises(InvalidPathError):
            apply_operation(_doc("a"), InsertText((0, 0), 5, "x"))

    def test_invalid_path(self) -> None:
        with pytest.raises(InvalidPathError):
            apply_operation(_doc("a"), RemoveNode((3,), paragraph()))

    def test_original_document_untouched(self) -> None:
        doc = _doc("abc")
        apply_operation(doc, InsertText((0, 0), 0, "x"))
        assert string(doc) == "abc"


class TestSelectionOperation:
    def test_set_selection_clears_pending_marks(self) -> None:
        doc = Document((paragraph(text("ab")),), Range.collapsed(Point((0, 0), 0)), {"bold": True})
        moved = apply_operation(
            doc, SetSelection(doc.selection, Range.collapsed(Point((0, 0), 1)))
        )
        assert moved.marks is None
        assert moved.selection == Range.collapsed(Point((0, 0), 1))

    def test_same_selection_is_noop(self) -> None:
        doc = Document((paragraph(text("ab")),), Range.collapsed(Point((0, 0), 0)), {"bold": True})
        assert apply_operation(doc, SetSelection(doc.selection, doc.selection)) is doc

    def test_removed_selection_relocates_to_previous_text(self) -> None:
        doc = _doc("ab", "cd", selection=Range.collapsed(Point((1, 0), 1)))
        doc = apply_operation(doc, RemoveNode((1,), doc.children[1]))
        assert doc.selection == Range.collapsed(Point((0, 0), 2))

    def test_removed_selection_relocates_to_next_text(self) -> None:
        doc = _doc("ab", "cd", selection=Range.collapsed(Point((0, 0), 1)))
        doc = apply_operation(doc, RemoveNode((0,), doc.children[0]))
        assert doc.selection == Range.collapsed(Point((0, 0), 0))

    def test_removing_all_text_clears_selection(self) -> None:
        doc = _doc("ab", selection=Range.collapsed(Point((0, 0), 1)))
        doc = apply_operation(doc, RemoveNode((0,), doc.children[0]))
        assert doc.selection is None
