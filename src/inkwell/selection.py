"""Point and range utilities over document snapshots.

Boundary queries (``point_before`` / ``point_after``) walk the document's
text as a reader sees it, block by block, with void inlines standing in as
single positions. Units:

- ``"offset"``: every string offset, text-node boundaries included
- ``"character"``: one character plus any combining marks after it
- ``"word"``: skip non-alphanumerics, then consume alphanumerics
- ``"line"`` / ``"block"``: the rest of the block's text

Word boundaries are a locale-agnostic alphanumeric split
(``str.isalnum``); no word-break tables are consulted.

Example:
    >>> doc = Document((paragraph(text("hello @mar")),), Range.collapsed(Point((0, 0), 10)))
    >>> point_before(doc, Point((0, 0), 10), unit="word")
    Point(path=(0, 0), offset=7)

Thread Safety:
    All functions are pure.

"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterator
from typing import Any, Literal

from inkwell.config import EditorConfig, resolve_config
from inkwell.errors import InvalidPathError
from inkwell.location import Path, Point, Range, has_previous, is_ancestor, is_before
from inkwell.nodes import Document, Element, Text
from inkwell.query import (
    Location,
    block_above,
    children_of,
    end,
    has_inlines,
    leaf,
    location_range,
    nodes,
    previous_text,
    start,
    texts,
    void_above,
)

type Unit = Literal["offset", "character", "word", "line", "block"]


# =============================================================================
# Distances
# =============================================================================


def _is_word_char(char: str) -> bool:
    return char.isalnum()


def _character_distance(text: str, reverse: bool) -> int:
    if reverse:
        i = len(text) - 1
        while i > 0 and unicodedata.combining(text[i]):
            i -= 1
        return len(text) - i
    i = 1
    while i < len(text) and unicodedata.combining(text[i]):
        i += 1
    return i


def _word_distance(text: str, reverse: bool) -> int:
    chars = reversed(text) if reverse else iter(text)
    distance = 0
    started = False
    for char in chars:
        if _is_word_char(char):
            started = True
        elif started:
            break
        distance += 1
    return distance


def _distance(text: str, unit: Unit, reverse: bool) -> int:
    if unit == "offset":
        return 1
    if unit == "character":
        return _character_distance(text, reverse)
    if unit == "word":
        return _word_distance(text, reverse)
    return len(text)


# =============================================================================
# Positions
# =============================================================================


def positions(
    doc: Document,
    *,
    at: Location | None = None,
    unit: Unit = "offset",
    reverse: bool = False,
    voids: bool = False,
    config: EditorConfig | None = None,
) -> Iterator[Point]:
    """Every point within ``at`` at ``unit`` granularity, in reading order.

    The first point yielded is always the starting edge itself. A void
    inline yields one position (its placeholder) and is never entered.

    """
    cfg = resolve_config(config)
    rng = location_range(doc, at if at is not None else ())
    start_point, end_point = rng.edges()
    first_point = end_point if reverse else start_point

    is_new_block = False
    block_text = ""
    distance = 0
    leaf_remaining = 0
    leaf_offset = 0

    for node, path in nodes(doc, at=rng, reverse=reverse, voids=voids, config=cfg):
        if isinstance(node, Element):
            if not voids and cfg.is_void(node):
                yield start(doc, path)
                continue
            if cfg.is_inline(node):
                continue
            if has_inlines(node, cfg):
                e = end_point if is_ancestor(path, end_point.path) else end(doc, path)
                s = start_point if is_ancestor(path, start_point.path) else start(doc, path)
                block_text = text_of(doc, Range(s, e), voids=voids, config=cfg)
                is_new_block = True

        if isinstance(node, Text):
            is_first = path == first_point.path
            if is_first:
                leaf_remaining = first_point.offset if reverse else len(node.text) - first_point.offset
                leaf_offset = first_point.offset
            else:
                leaf_remaining = len(node.text)
                leaf_offset = leaf_remaining if reverse else 0

            if is_first or is_new_block or unit == "offset":
                yield Point(path, leaf_offset)
                is_new_block = False

            while True:
                # Cross leaf boundaries with the distance left over from the
                # previous leaf before measuring a fresh one.
                if distance == 0:
                    if block_text == "":
                        break
                    distance = _distance(block_text, unit, reverse)
                    block_text = block_text[:-distance] if reverse else block_text[distance:]

                leaf_offset = leaf_offset - distance if reverse else leaf_offset + distance
                leaf_remaining -= distance
                if leaf_remaining < 0:
                    distance = -leaf_remaining
                    break
                distance = 0
                yield Point(path, leaf_offset)


def point_before(
    doc: Document,
    at: Location,
    unit: Unit = "offset",
    *,
    distance: int = 1,
    voids: bool = False,
    config: EditorConfig | None = None,
) -> Point | None:
    """The nearest point strictly before ``at``; None at the document start."""
    if not doc.children:
        return None
    rng = Range(start(doc, ()), start(doc, at))
    target = None
    for d, point in enumerate(positions(doc, at=rng, unit=unit, reverse=True, voids=voids, config=config)):
        if d > distance:
            break
        if d != 0:
            target = point
    return target


def point_after(
    doc: Document,
    at: Location,
    unit: Unit = "offset",
    *,
    distance: int = 1,
    voids: bool = False,
    config: EditorConfig | None = None,
) -> Point | None:
    """The nearest point strictly after ``at``; None at the document end."""
    if not doc.children:
        return None
    rng = Range(end(doc, at), end(doc, ()))
    target = None
    for d, point in enumerate(positions(doc, at=rng, unit=unit, voids=voids, config=config)):
        if d > distance:
            break
        if d != 0:
            target = point
    return target


# =============================================================================
# Ranges
# =============================================================================


def range_between(doc: Document, a: Location, b: Location | None = None) -> Range:
    """The range from the start of ``a`` to the end of ``b``.

    A missing ``b`` yields the range of ``a`` itself (collapsed for a point).
    """
    return location_range(doc, a, b)


def forward_edges(rng: Range) -> tuple[Point, Point]:
    """``(min, max)`` of a range by document order."""
    return rng.edges()


def text_of(
    doc: Document,
    rng: Range,
    *,
    voids: bool = False,
    config: EditorConfig | None = None,
) -> str:
    """All Text content inside ``rng``; void content is skipped."""
    start_point, end_point = rng.edges()
    parts: list[str] = []
    for node, path in texts(doc, at=rng, voids=voids, config=config):
        value = node.text
        if path == end_point.path:
            value = value[: end_point.offset]
        if path == start_point.path:
            value = value[start_point.offset :]
        parts.append(value)
    return "".join(parts)


def unhang(
    doc: Document,
    rng: Range,
    *,
    voids: bool = False,
    config: EditorConfig | None = None,
) -> Range:
    """Pull a range's end back out of a block it only touches at offset 0.

    A triple-click selection typically ends at the start of the next block;
    that block is not really selected and must not count for block queries.
    """
    start_point, end_point = rng.edges()
    if (
        start_point.offset != 0
        or end_point.offset != 0
        or rng.is_collapsed
        or has_previous(end_point.path)
    ):
        return rng

    end_block = block_above(doc, end_point, config)
    block_path: Path = end_block[1] if end_block else ()
    before = Range(start_point, end_point)
    skip = True
    for node, path in texts(doc, at=before, reverse=True, voids=voids, config=config):
        if skip:
            skip = False
            continue
        if node.text != "" or is_before(path, block_path):
            end_point = Point(path, len(node.text))
            break
    return Range(start_point, end_point)


# =============================================================================
# Clamping
# =============================================================================


def clamp_point(doc: Document, point: Point) -> Point | None:
    """The nearest valid point to ``point``; None for an empty document.

    Paths that overshoot a level snap to the end of the last child there;
    paths that stop at an element snap to its start; offsets are clamped
    into the text.
    """
    if not doc.children:
        return None
    node = doc
    path: list[int] = []
    for index in point.path:
        kids = children_of(node)
        if not kids:
            break
        if index >= len(kids):
            return end(doc, (*path, len(kids) - 1))
        if index < 0:
            return start(doc, (*path, 0))
        node = kids[index]
        path.append(index)
    if isinstance(node, Text):
        offset = min(max(point.offset, 0), len(node.text))
        if offset == point.offset and tuple(path) == point.path:
            return point
        return Point(tuple(path), offset)
    try:
        return start(doc, tuple(path))
    except InvalidPathError:
        return None


def clamp_range(doc: Document, rng: Range) -> Range | None:
    anchor = clamp_point(doc, rng.anchor)
    focus = clamp_point(doc, rng.focus)
    if anchor is None or focus is None:
        return None
    if anchor is rng.anchor and focus is rng.focus:
        return rng
    return Range(anchor, focus)


# =============================================================================
# Marks at the cursor
# =============================================================================


def leaf_marks(doc: Document, config: EditorConfig | None = None) -> dict[str, Any] | None:
    """Marks of the text the selection's focus sits in; None without a selection.

    At offset 0 of a collapsed selection (or the end edge of an expanded
    one) the marks come from the previous text in the same block, so
    typing continues the run the cursor just left. A markable void keeps
    its own marks.
    """
    sel = doc.selection
    if sel is None:
        return None
    cfg = resolve_config(config)
    focus = sel.focus
    node = leaf(doc, focus.path)
    if focus.offset == 0 and (sel.is_collapsed or focus == sel.end):
        void = void_above(doc, focus, config=cfg)
        if void is None or not cfg.is_markable_void(void[0]):
            prev = previous_text(doc, focus.path, config=cfg)
            block = block_above(doc, focus, cfg)
            if prev is not None and block is not None and is_ancestor(block[1], prev[1]):
                node = prev[0]
    return dict(node.marks)


def marks(doc: Document, config: EditorConfig | None = None) -> dict[str, Any] | None:
    """Marks the next typed text will carry: pending marks, else ``leaf_marks``."""
    if doc.selection is None:
        return None
    if doc.marks is not None:
        return dict(doc.marks)
    return leaf_marks(doc, config)


__all__ = [
    "Unit",
    "clamp_point",
    "clamp_range",
    "forward_edges",
    "leaf_marks",
    "marks",
    "point_after",
    "point_before",
    "positions",
    "range_between",
    "text_of",
    "unhang",
]
