"""Read-only traversal of Inkwell documents.

Everything here is a pure function of a document snapshot. No function in
this module mutates anything; mutation belongs to ``inkwell.transforms``.

Locations:
    Functions accepting ``at`` take a ``Path``, a ``Point`` or a ``Range``.
    A path covers its whole subtree; a point covers its Text node; a range
    covers every node between its edges, ancestors included.

Matching:
    ``nodes()`` yields ``(node, path)`` pairs, optionally filtered by a
    predicate ``match(node, path) -> bool``. ``mode`` picks among nested
    matches: ``"all"`` yields every match, ``"highest"`` only the outermost,
    ``"lowest"`` only the innermost.

Example:
    >>> from inkwell.query import nodes, match_type
    >>> [path for _, path in nodes(doc, match=match_type("paragraph"))]
    [(0,), (2,)]

"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Literal

from inkwell.config import EditorConfig, resolve_config
from inkwell.errors import InvalidPathError
from inkwell.location import (
    Path,
    Point,
    Range,
    common,
    compare,
    is_after,
    is_ancestor,
    is_before,
)
from inkwell.nodes import Document, Element, Node, Text

type Location = Path | Point | Range
type Entry = tuple[Node, Path]
type Predicate = Callable[[Node, Path], bool]
type Mode = Literal["all", "highest", "lowest"]


# =============================================================================
# Node access
# =============================================================================


def children_of(node: Node) -> tuple[Node, ...]:
    if isinstance(node, Text):
        return ()
    return node.children


def get_node(root: Node, path: Path) -> Node:
    """Resolve ``path`` against ``root``.

    Raises:
        InvalidPathError: If the path does not resolve.

    """
    node = root
    for depth, index in enumerate(path):
        kids = children_of(node)
        if index < 0 or index >= len(kids):
            raise InvalidPathError(path, f"no child {index} at depth {depth}")
        node = kids[index]
    return node


def has_node(root: Node, path: Path) -> bool:
    try:
        get_node(root, path)
    except InvalidPathError:
        return False
    return True


def parent(root: Node, path: Path) -> Document | Element:
    if not path:
        raise InvalidPathError(path, "the root has no parent")
    node = get_node(root, path[:-1])
    if isinstance(node, Text):
        raise InvalidPathError(path, "parent is a text node")
    return node


def leaf(root: Node, path: Path) -> Text:
    node = get_node(root, path)
    if not isinstance(node, Text):
        raise InvalidPathError(path, "not a text node")
    return node


def first(root: Node, path: Path = ()) -> tuple[Text, Path]:
    """First Text node under ``path``."""
    node = get_node(root, path)
    while not isinstance(node, Text):
        if not node.children:
            raise InvalidPathError(path, "element has no children")
        node = node.children[0]
        path = (*path, 0)
    return node, path


def last(root: Node, path: Path = ()) -> tuple[Text, Path]:
    """Last Text node under ``path``."""
    node = get_node(root, path)
    while not isinstance(node, Text):
        if not node.children:
            raise InvalidPathError(path, "element has no children")
        index = len(node.children) - 1
        node = node.children[index]
        path = (*path, index)
    return node, path


def start(root: Node, at: Location) -> Point:
    """The start point of a location."""
    if isinstance(at, Point):
        return at
    if isinstance(at, Range):
        return at.edges()[0]
    _, path = first(root, at)
    return Point(path, 0)


def end(root: Node, at: Location) -> Point:
    """The end point of a location."""
    if isinstance(at, Point):
        return at
    if isinstance(at, Range):
        return at.edges()[1]
    node, path = last(root, at)
    return Point(path, len(node.text))


def location_range(root: Node, at: Location, to: Location | None = None) -> Range:
    """The range spanning ``at`` (through ``to`` when given)."""
    if isinstance(at, Range) and to is None:
        return at
    return Range(start(root, at), end(root, to if to is not None else at))


def location_path(root: Node, at: Location, edge: Literal["start", "end"] | None = None) -> Path:
    """The path a location refers to.

    For a range this is the common ancestor of its edges, unless ``edge``
    selects one of them.
    """
    if isinstance(at, Point):
        return at.path
    if isinstance(at, Range):
        if edge == "start":
            return at.edges()[0].path
        if edge == "end":
            return at.edges()[1].path
        return common(at.anchor.path, at.focus.path)
    if edge == "start":
        return first(root, at)[1]
    if edge == "end":
        return last(root, at)[1]
    return at


def is_start(root: Node, point: Point, at: Location) -> bool:
    return point == start(root, at)


def is_end(root: Node, point: Point, at: Location) -> bool:
    return point == end(root, at)


def is_edge(root: Node, point: Point, at: Location) -> bool:
    return is_start(root, point, at) or is_end(root, point, at)


# =============================================================================
# Classification
# =============================================================================


def is_root(node: object) -> bool:
    return isinstance(node, Document)


def is_block(node: object, config: EditorConfig | None = None) -> bool:
    return resolve_config(config).is_block(node)


def is_inline(node: object, config: EditorConfig | None = None) -> bool:
    return resolve_config(config).is_inline(node)


def is_void(node: object, config: EditorConfig | None = None) -> bool:
    return resolve_config(config).is_void(node)


def is_empty(node: Element, config: EditorConfig | None = None) -> bool:
    """True if the element holds nothing but one empty Text (and is not void)."""
    kids = node.children
    if not kids:
        return True
    return (
        len(kids) == 1
        and isinstance(kids[0], Text)
        and kids[0].text == ""
        and not resolve_config(config).is_void(node)
    )


def has_inlines(node: Document | Element, config: EditorConfig | None = None) -> bool:
    cfg = resolve_config(config)
    return any(isinstance(c, Text) or cfg.is_inline(c) for c in node.children)


def match_type(*types: str) -> Predicate:
    """Predicate matching elements whose tag is one of ``types``."""
    wanted = frozenset(types)

    def _match(node: Node, path: Path) -> bool:
        return isinstance(node, Element) and node.type in wanted

    return _match


def match_text(node: Node, path: Path) -> bool:
    return isinstance(node, Text)


def match_block(config: EditorConfig | None = None) -> Predicate:
    cfg = resolve_config(config)

    def _match(node: Node, path: Path) -> bool:
        return cfg.is_block(node)

    return _match


def string(node: Node) -> str:
    """Concatenated text content of a node."""
    if isinstance(node, Text):
        return node.text
    return "".join(string(child) for child in node.children)


# =============================================================================
# Traversal
# =============================================================================


def _walk(
    root: Node,
    from_: Path,
    to: Path | None,
    reverse: bool,
    skip: Callable[[Node], bool],
) -> Iterator[Entry]:
    def visit(node: Node, path: Path) -> Iterator[Entry]:
        yield node, path
        if isinstance(node, Text) or not node.children or skip(node):
            return
        kids = node.children
        if reverse:
            first_index = from_[len(path)] if is_ancestor(path, from_) else len(kids) - 1
            indices = range(min(first_index, len(kids) - 1), -1, -1)
        else:
            first_index = from_[len(path)] if is_ancestor(path, from_) else 0
            indices = range(first_index, len(kids))
        for i in indices:
            child_path = (*path, i)
            if to is not None and (is_before(child_path, to) if reverse else is_after(child_path, to)):
                return
            yield from visit(kids[i], child_path)

    yield from visit(root, ())


def nodes(
    root: Node,
    *,
    at: Location | None = None,
    match: Predicate | None = None,
    mode: Mode = "all",
    reverse: bool = False,
    voids: bool = False,
    config: EditorConfig | None = None,
) -> Iterator[Entry]:
    """Depth-first ``(node, path)`` pairs within ``at`` (whole tree by default).

    Void elements are yielded but not descended into unless ``voids`` is set.

    """
    cfg = resolve_config(config)
    if at is None:
        from_: Path = ()
        to: Path | None = None
    else:
        first_path = location_path(root, at, edge="start")
        last_path = location_path(root, at, edge="end")
        from_, to = (last_path, first_path) if reverse else (first_path, last_path)

    def skip(node: Node) -> bool:
        return not voids and cfg.is_void(node)

    entries = _walk(root, from_, to, reverse, skip)
    if match is None and mode == "all":
        yield from entries
        return

    hit: Entry | None = None
    for node, path in entries:
        is_lower = hit is not None and compare(path, hit[1]) == 0
        if mode == "highest" and is_lower:
            continue
        if match is not None and not match(node, path):
            continue
        if mode == "lowest" and is_lower:
            hit = (node, path)
            continue
        emit = hit if mode == "lowest" else (node, path)
        if emit is not None:
            yield emit
        hit = (node, path)

    if mode == "lowest" and hit is not None:
        yield hit


def find(root: Node, **kwargs) -> Entry | None:
    """First entry ``nodes()`` would yield, or None when nothing matches."""
    return next(nodes(root, **kwargs), None)


def match(root: Node, predicate: Predicate, *, config: EditorConfig | None = None) -> list[Entry]:
    """Every ``(node, path)`` pair satisfying ``predicate``, voids included.

    Example:
        >>> [path for _, path in match(doc, match_type("mention"))]
        [(0, 1), (0, 3)]

    """
    return list(nodes(root, match=predicate, voids=True, config=config))


def levels(
    root: Node,
    path: Path,
    *,
    match: Predicate | None = None,
    reverse: bool = False,
    voids: bool = False,
    config: EditorConfig | None = None,
) -> list[Entry]:
    """The node at ``path`` and all its ancestors, root first."""
    cfg = resolve_config(config)
    result: list[Entry] = []
    node: Node = root
    trail: list[Entry] = [(root, ())]
    for depth, index in enumerate(path):
        kids = children_of(node)
        if index < 0 or index >= len(kids):
            raise InvalidPathError(path, f"no child {index} at depth {depth}")
        node = kids[index]
        trail.append((node, path[: depth + 1]))
    for node, p in trail:
        if match is not None and not match(node, p):
            continue
        result.append((node, p))
        if not voids and cfg.is_void(node):
            break
    if reverse:
        result.reverse()
    return result


def above(
    root: Node,
    at: Location,
    *,
    match: Predicate | None = None,
    mode: Literal["highest", "lowest"] = "lowest",
    voids: bool = False,
    config: EditorConfig | None = None,
) -> Entry | None:
    """The closest (or outermost) matching ancestor of a location."""
    path = location_path(root, at)
    for node, p in levels(root, path, match=match, reverse=mode == "lowest", voids=voids, config=config):
        if isinstance(node, Text):
            continue
        if isinstance(at, Range):
            if is_ancestor(p, at.anchor.path) and is_ancestor(p, at.focus.path):
                return node, p
        elif p != path:
            return node, p
    return None


def block_above(root: Node, at: Location, config: EditorConfig | None = None) -> Entry | None:
    """The lowest block containing a location."""
    return above(root, at, match=match_block(config), config=config)


def void_above(
    root: Node,
    at: Location,
    *,
    mode: Literal["highest", "lowest"] = "lowest",
    config: EditorConfig | None = None,
) -> Entry | None:
    """The void element containing a location, if any."""
    cfg = resolve_config(config)
    return above(
        root,
        at,
        match=lambda n, p: cfg.is_void(n),
        mode=mode,
        voids=True,
        config=cfg,
    )


def texts(root: Node, *, at: Location | None = None, reverse: bool = False, voids: bool = False,
          config: EditorConfig | None = None) -> Iterator[tuple[Text, Path]]:
    for node, path in nodes(root, at=at, match=match_text, reverse=reverse, voids=voids, config=config):
        yield node, path  # type: ignore[misc]


def previous_text(
    root: Node, path: Path, *, voids: bool = False, config: EditorConfig | None = None
) -> tuple[Text, Path] | None:
    """The last Text node strictly before ``path`` in document order."""
    result = None
    for node, p in nodes(root, match=match_text, voids=voids, config=config):
        if compare(p, path) != -1:
            break
        result = (node, p)
    return result  # type: ignore[return-value]


def previous(
    root: Node,
    at: Location,
    *,
    match: Predicate | None = None,
    mode: Mode = "lowest",
    voids: bool = False,
    config: EditorConfig | None = None,
) -> Entry | None:
    """The last matching node that ends before ``at`` in document order.

    Without ``match``, a path location looks among its earlier siblings and
    any other location takes the nearest preceding node of any kind.
    """
    path = at if isinstance(at, tuple) else location_path(root, at, edge="start")
    if not path:
        raise InvalidPathError(path, "the root has no previous node")
    if match is None:
        if isinstance(at, tuple):
            def match(node: Node, p: Path) -> bool:
                return len(p) == len(path) and p[:-1] == path[:-1]
        else:
            def match(node: Node, p: Path) -> bool:
                return True

    result: Entry | None = None
    for node, p in nodes(root, match=match, mode=mode, voids=voids, config=config):
        if compare(p, path) == -1:
            result = (node, p)
    return result


def next_text(
    root: Node, path: Path, *, voids: bool = False, config: EditorConfig | None = None
) -> tuple[Text, Path] | None:
    """The first Text node strictly after ``path`` in document order."""
    for node, p in nodes(root, match=match_text, voids=voids, config=config):
        if compare(p, path) == 1:
            return node, p  # type: ignore[return-value]
    return None


__all__ = [
    "Entry",
    "Location",
    "Mode",
    "Predicate",
    "above",
    "block_above",
    "children_of",
    "end",
    "find",
    "first",
    "get_node",
    "has_inlines",
    "has_node",
    "is_block",
    "is_edge",
    "is_empty",
    "is_end",
    "is_inline",
    "is_root",
    "is_start",
    "is_void",
    "last",
    "leaf",
    "levels",
    "location_path",
    "location_range",
    "match",
    "match_block",
    "match_text",
    "match_type",
    "next_text",
    "nodes",
    "parent",
    "previous",
    "previous_text",
    "start",
    "string",
    "texts",
    "void_above",
]
