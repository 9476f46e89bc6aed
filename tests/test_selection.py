"""Tests for point/range utilities: boundaries, text, unhang, clamping, marks."""

from inkwell.location import Point, Range
from inkwell.nodes import Document, element, paragraph, text
from inkwell.selection import (
    clamp_point,
    clamp_range,
    forward_edges,
    leaf_marks,
    marks,
    point_after,
    point_before,
    positions,
    range_between,
    text_of,
    unhang,
)


def _doc(*blocks, selection=None, pending=None) -> Document:  # type: ignore[no-untyped-def]
    return Document(tuple(blocks), selection, pending)


def _two_paragraphs() -> Document:
    return _doc(paragraph(text("ab")), paragraph(text("cd")))


class TestPointBefore:
    def test_word(self) -> None:
        doc = _doc(paragraph(text("hello @mar")))
        assert point_before(doc, Point((0, 0), 10), "word") == Point((0, 0), 7)

    def test_offset(self) -> None:
        doc = _doc(paragraph(text("hello")))
        assert point_before(doc, Point((0, 0), 3)) == Point((0, 0), 2)

    def test_distance(self) -> None:
        doc = _doc(paragraph(text("hello")))
        assert point_before(doc, Point((0, 0), 5), distance=3) == Point((0, 0), 2)

    def test_document_start(self) -> None:
        doc = _doc(paragraph(text("hello")))
        assert point_before(doc, Point((0, 0), 0)) is None

    def test_crosses_into_previous_block(self) -> None:
        assert point_before(_two_paragraphs(), Point((1, 0), 0)) == Point((0, 0), 2)


class TestPointAfter:
    def test_character(self) -> None:
        doc = _doc(paragraph(text("hello")))
        assert point_after(doc, Point((0, 0), 3), "character") == Point((0, 0), 4)

    def test_character_keeps_combining_marks(self) -> None:
        doc = _doc(paragraph(text("e\u0301x")))
        assert point_after(doc, Point((0, 0), 0), "character") == Point((0, 0), 2)

    def test_word_skips_leading_spaces(self) -> None:
        doc = _doc(paragraph(text("one  two three")))
        assert point_after(doc, Point((0, 0), 3), "word") == Point((0, 0), 8)

    def test_crosses_into_next_block(self) -> None:
        assert point_after(_two_paragraphs(), Point((0, 0), 2)) == Point((1, 0), 0)

    def test_document_end(self) -> None:
        assert point_after(_two_paragraphs(), Point((1, 0), 2)) is None

    def test_void_inline_is_one_position(self) -> None:
        doc = _doc(paragraph(text("a"), element("mention", text(), username="margie"), text("b")))
        assert point_after(doc, Point((0, 1, 0), 0), "character") == Point((0, 2), 0)


class TestPositions:
    def test_offsets_span_leaves(self) -> None:
        doc = _doc(paragraph(text("ab", bold=True), text("c")))
        points = list(positions(doc))
        assert points[0] == Point((0, 0), 0)
        assert Point((0, 0), 2) in points
        assert Point((0, 1), 0) in points
        assert points[-1] == Point((0, 1), 1)

    def test_block_unit_yields_block_edges(self) -> None:
        points = list(positions(_two_paragraphs(), unit="block"))
        assert points == [
            Point((0, 0), 0),
            Point((0, 0), 2),
            Point((1, 0), 0),
            Point((1, 0), 2),
        ]


class TestRanges:
    def test_text_of_single_leaf(self) -> None:
        doc = _doc(paragraph(text("hello world")))
        assert text_of(doc, Range(Point((0, 0), 2), Point((0, 0), 7))) == "llo w"

    def test_text_of_backward_range(self) -> None:
        doc = _doc(paragraph(text("hello world")))
        assert text_of(doc, Range(Point((0, 0), 7), Point((0, 0), 2))) == "llo w"

    def test_text_of_across_blocks(self) -> None:
        rng = Range(Point((0, 0), 1), Point((1, 0), 1))
        assert text_of(_two_paragraphs(), rng) == "bc"

    def test_range_between(self) -> None:
        assert range_between(_two_paragraphs(), (0,), (1,)) == Range(
            Point((0, 0), 0), Point((1, 0), 2)
        )

    def test_forward_edges(self) -> None:
        a, b = Point((0, 0), 1), Point((1, 0), 0)
        assert forward_edges(Range(b, a)) == (a, b)


class TestUnhang:
    def test_pulls_end_back_into_previous_block(self) -> None:
        rng = Range(Point((0, 0), 0), Point((1, 0), 0))
        assert unhang(_two_paragraphs(), rng) == Range(Point((0, 0), 0), Point((0, 0), 2))

    def test_leaves_other_ranges_alone(self) -> None:
        rng = Range(Point((0, 0), 1), Point((1, 0), 0))
        assert unhang(_two_paragraphs(), rng) is rng

    def test_collapsed_range_untouched(self) -> None:
        rng = Range.collapsed(Point((1, 0), 0))
        assert unhang(_two_paragraphs(), rng) is rng


class TestClamp:
    def test_valid_point_is_returned_as_is(self) -> None:
        point = Point((0, 0), 1)
        assert clamp_point(_two_paragraphs(), point) is point

    def test_offset_clamped(self) -> None:
        assert clamp_point(_two_paragraphs(), Point((0, 0), 9)) == Point((0, 0), 2)

    def test_overshooting_path_snaps_to_end(self) -> None:
        assert clamp_point(_two_paragraphs(), Point((5, 0), 0)) == Point((1, 0), 2)

    def test_element_path_snaps_to_start(self) -> None:
        assert clamp_point(_two_paragraphs(), Point((1,), 0)) == Point((1, 0), 0)

    def test_empty_document(self) -> None:
        assert clamp_point(Document(), Point((0, 0), 0)) is None
        assert clamp_range(Document(), Range.collapsed(Point((0, 0), 0))) is None

    def test_clamp_range(self) -> None:
        doc = _two_paragraphs()
        valid = Range(Point((0, 0), 0), Point((1, 0), 1))
        assert clamp_range(doc, valid) is valid
        stale = Range(Point((0, 0), 0), Point((3, 0), 4))
        assert clamp_range(doc, stale) == Range(Point((0, 0), 0), Point((1, 0), 2))


class TestMarks:
    def _doc(self, offset: int, pending=None) -> Document:  # type: ignore[no-untyped-def]
        return _doc(
            paragraph(text("ab", bold=True), text("cd")),
            selection=Range.collapsed(Point((0, 1), offset)),
            pending=pending,
        )

    def test_leaf_marks_inside_text(self) -> None:
        assert leaf_marks(self._doc(1)) == {}

    def test_leaf_marks_at_offset_zero_uses_previous_text(self) -> None:
        assert leaf_marks(self._doc(0)) == {"bold": True}

    def test_leaf_marks_does_not_cross_blocks(self) -> None:
        doc = _doc(
            paragraph(text("ab", bold=True)),
            paragraph(text("cd")),
            selection=Range.collapsed(Point((1, 0), 0)),
        )
        assert leaf_marks(doc) == {}

    def test_pending_marks_win(self) -> None:
        assert marks(self._doc(1, pending={"italic": True})) == {"italic": True}

    def test_falls_back_to_leaf_marks(self) -> None:
        assert marks(self._doc(0)) == {"bold": True}

    def test_no_selection(self) -> None:
        doc = _doc(paragraph(text("ab")))
        assert marks(doc) is None
        assert leaf_marks(doc) is None
