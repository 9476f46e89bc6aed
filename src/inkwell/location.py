"""Positions inside an editable document.

A ``Path`` is a tuple of child indices from the document root to a node.
It is positional, not an identity: any structural change above it makes it
stale, so paths are recomputed through ``inkwell.operations.transform_path``
rather than cached across edits.

A ``Point`` is a path to a Text node plus a character offset into it, and a
``Range`` is an anchor/focus pair of points.

Thread Safety:
Point and Range are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass

type Path = tuple[int, ...]


# =============================================================================
# Path helpers
# =============================================================================


def compare(path: Path, another: Path) -> int:
    """Compare two paths in document order.

    Returns -1, 0 or 1. A path and its ancestors compare equal.
    """
    for a, b in zip(path, another):
        if a < b:
            return -1
        if a > b:
            return 1
    return 0


def is_before(path: Path, another: Path) -> bool:
    return compare(path, another) == -1


def is_after(path: Path, another: Path) -> bool:
    return compare(path, another) == 1


def is_ancestor(path: Path, another: Path) -> bool:
    """True if ``path`` is a strict ancestor of ``another``."""
    return len(path) < len(another) and another[: len(path)] == path


def is_descendant(path: Path, another: Path) -> bool:
    return is_ancestor(another, path)


def is_common(path: Path, another: Path) -> bool:
    """True if ``path`` is an ancestor of, or equal to, ``another``."""
    return len(path) <= len(another) and another[: len(path)] == path


def is_sibling(path: Path, another: Path) -> bool:
    if not path or len(path) != len(another):
        return False
    return path[:-1] == another[:-1] and path[-1] != another[-1]


def ends_before(path: Path, another: Path) -> bool:
    """True if ``path`` ends before ``another`` at the same depth.

    ``(0, 1)`` ends before ``(0, 2)`` and before ``(0, 2, 5)``.
    """
    if not path:
        return False
    i = len(path) - 1
    return len(another) > i and path[:i] == another[:i] and path[i] < another[i]


def ends_after(path: Path, another: Path) -> bool:
    if not path:
        return False
    i = len(path) - 1
    return len(another) > i and path[:i] == another[:i] and path[i] > another[i]


def common(path: Path, another: Path) -> Path:
    """Longest shared ancestor path."""
    result: list[int] = []
    for a, b in zip(path, another):
        if a != b:
            break
        result.append(a)
    return tuple(result)


def parent(path: Path) -> Path:
    if not path:
        msg = "Cannot get the parent path of the root path"
        raise ValueError(msg)
    return path[:-1]


def next_path(path: Path) -> Path:
    if not path:
        msg = "Cannot get the next path of the root path"
        raise ValueError(msg)
    return (*path[:-1], path[-1] + 1)


def previous_path(path: Path) -> Path:
    if not path or path[-1] <= 0:
        msg = f"Cannot get the previous path of {path!r}"
        raise ValueError(msg)
    return (*path[:-1], path[-1] - 1)


def has_previous(path: Path) -> bool:
    return bool(path) and path[-1] > 0


# =============================================================================
# Point / Range
# =============================================================================


@dataclass(frozen=True, slots=True, order=False)
class Point:
    """A cursor position: a Text node path and an offset into its string.

    Examples:
        >>> Point((0, 0), 5)
        Point(path=(0, 0), offset=5)
        >>> str(Point((0, 2), 1))
        '0.2:1'

    """

    path: Path
    offset: int = 0

    def __str__(self) -> str:
        return ".".join(map(str, self.path)) + f":{self.offset}"

    def compare(self, other: Point) -> int:
        result = compare(self.path, other.path)
        if result != 0:
            return result
        if self.offset < other.offset:
            return -1
        if self.offset > other.offset:
            return 1
        return 0

    def is_before(self, other: Point) -> bool:
        return self.compare(other) == -1

    def is_after(self, other: Point) -> bool:
        return self.compare(other) == 1


@dataclass(frozen=True, slots=True)
class Range:
    """A span between two points.

    The anchor may sit after the focus (a backward selection). Use
    ``edges()`` when document order matters.

    """

    anchor: Point
    focus: Point

    @classmethod
    def collapsed(cls, point: Point) -> Range:
        return cls(anchor=point, focus=point)

    @property
    def is_collapsed(self) -> bool:
        return self.anchor == self.focus

    @property
    def is_expanded(self) -> bool:
        return not self.is_collapsed

    @property
    def is_backward(self) -> bool:
        return self.anchor.is_after(self.focus)

    @property
    def is_forward(self) -> bool:
        return not self.is_backward

    def edges(self) -> tuple[Point, Point]:
        """Return ``(start, end)`` in document order."""
        if self.is_backward:
            return self.focus, self.anchor
        return self.anchor, self.focus

    @property
    def start(self) -> Point:
        return self.edges()[0]

    @property
    def end(self) -> Point:
        return self.edges()[1]

    def includes(self, point: Point) -> bool:
        start, end = self.edges()
        return not point.is_before(start) and not point.is_after(end)

    def intersection(self, other: Range) -> Range | None:
        """The overlap of two ranges, or None if they do not meet."""
        s1, e1 = self.edges()
        s2, e2 = other.edges()
        start = s2 if s1.is_before(s2) else s1
        end = e1 if e1.is_before(e2) else e2
        if end.is_before(start):
            return None
        return Range(start, end)

    def __str__(self) -> str:
        return f"{self.anchor}..{self.focus}"


__all__ = [
    "Path",
    "Point",
    "Range",
    "common",
    "compare",
    "ends_after",
    "ends_before",
    "has_previous",
    "is_after",
    "is_ancestor",
    "is_before",
    "is_common",
    "is_descendant",
    "is_sibling",
    "next_path",
    "parent",
    "previous_path",
]
