"""Tests for paths, points and ranges."""

import pytest

from inkwell.location import (
    Point,
    Range,
    common,
    compare,
    ends_after,
    ends_before,
    has_previous,
    is_after,
    is_ancestor,
    is_before,
    is_common,
    is_descendant,
    is_sibling,
    next_path,
    parent,
    previous_path,
)


class TestPathOrdering:
    def test_compare(self) -> None:
        assert compare((0, 1), (0, 2)) == -1
        assert compare((1,), (0, 5)) == 1
        assert compare((0, 1), (0, 1)) == 0

    def test_ancestors_compare_equal(self) -> None:
        assert compare((0,), (0, 3)) == 0
        assert not is_before((0,), (0, 3))
        assert not is_after((0,), (0, 3))

    def test_ancestry(self) -> None:
        assert is_ancestor((0,), (0, 1))
        assert not is_ancestor((0, 1), (0, 1))
        assert is_descendant((0, 1, 2), (0,))
        assert is_common((0, 1), (0, 1))
        assert is_common((), (4,))

    def test_siblings(self) -> None:
        assert is_sibling((0, 1), (0, 3))
        assert not is_sibling((0, 1), (1, 1))
        assert not is_sibling((0, 1), (0, 1))
        assert not is_sibling((), ())

    def test_ends_before_and_after(self) -> None:
        assert ends_before((0, 1), (0, 2))
        assert ends_before((0, 1), (0, 2, 5))
        assert not ends_before((0, 1), (0, 1, 5))
        assert ends_after((0, 3), (0, 2, 1))
        assert not ends_after((), (0,))

    def test_common(self) -> None:
        assert common((0, 1, 2), (0, 1, 5)) == (0, 1)
        assert common((1,), (2,)) == ()


class TestPathNavigation:
    def test_next_and_previous(self) -> None:
        assert next_path((0, 1)) == (0, 2)
        assert previous_path((0, 1)) == (0, 0)
        assert parent((0, 1)) == (0,)

    def test_has_previous(self) -> None:
        assert has_previous((0, 1))
        assert not has_previous((0, 0))
        assert not has_previous(())

    @pytest.mark.parametrize(
        "fn, path",
        [(next_path, ()), (previous_path, (0, 0)), (previous_path, ()), (parent, ())],
    )
    def test_invalid_navigation_raises(self, fn, path) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValueError):
            fn(path)


class TestPoint:
    def test_str(self) -> None:
        assert str(Point((0, 2), 1)) == "0.2:1"

    def test_ordering(self) -> None:
        a = Point((0, 0), 3)
        b = Point((0, 0), 5)
        c = Point((0, 1), 0)
        assert a.is_before(b)
        assert b.is_before(c)
        assert c.is_after(a)
        assert a.compare(Point((0, 0), 3)) == 0


class TestRange:
    def test_collapsed(self) -> None:
        rng = Range.collapsed(Point((0, 0), 2))
        assert rng.is_collapsed
        assert not rng.is_expanded
        assert rng.is_forward

    def test_backward_edges(self) -> None:
        anchor = Point((1, 0), 4)
        focus = Point((0, 0), 1)
        rng = Range(anchor, focus)
        assert rng.is_backward
        assert rng.edges() == (focus, anchor)
        assert rng.start == focus
        assert rng.end == anchor

    def test_includes(self) -> None:
        rng = Range(Point((0, 0), 1), Point((0, 2), 0))
        assert rng.includes(Point((0, 1), 5))
        assert rng.includes(Point((0, 0), 1))
        assert not rng.includes(Point((0, 0), 0))

    def test_intersection(self) -> None:
        a = Range(Point((0, 0), 0), Point((0, 0), 5))
        b = Range(Point((0, 0), 3), Point((1, 0), 2))
        assert a.intersection(b) == Range(Point((0, 0), 3), Point((0, 0), 5))

    def test_disjoint_intersection_is_none(self) -> None:
        a = Range(Point((0, 0), 0), Point((0, 0), 2))
        b = Range(Point((1, 0), 0), Point((1, 0), 2))
        assert a.intersection(b) is None

    def test_str(self) -> None:
        assert str(Range(Point((0, 0), 1), Point((0, 0), 3))) == "0.0:1..0.0:3"
