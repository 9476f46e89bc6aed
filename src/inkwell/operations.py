"""Primitive document operations.

Every edit to an Inkwell document reduces to a sequence of these nine
operations. Each one is a frozen dataclass, and ``apply_operation`` turns
``(document, operation)`` into a new document, carrying the selection
along with the structural change.

Positions held outside the document (paths, points, ranges) go stale when
an operation lands above them. ``transform_path``, ``transform_point`` and
``transform_range`` recompute them relative to the operation:

    >>> op = InsertNode(path=(0, 0), node=Text("x"))
    >>> transform_path((0, 0), op)
    (0, 1)

Affinity decides which side a position sticks to when the operation lands
exactly on it: ``"forward"`` follows the content after it, ``"backward"``
stays with the content before it.

Thread Safety:
    All functions are pure. Operations are frozen.

"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from inkwell.errors import InvalidPathError, NodeTypeError
from inkwell.location import (
    Path,
    Point,
    Range,
    common,
    compare,
    ends_before,
    has_previous,
    is_ancestor,
    is_sibling,
    previous_path,
)
from inkwell.nodes import Descendant, Document, Element, Node, Text
from inkwell.query import texts

type Affinity = Literal["forward", "backward"] | None
type RangeAffinity = Literal["forward", "backward", "inward", "outward"] | None


# =============================================================================
# Operations
# =============================================================================


@dataclass(frozen=True, slots=True)
class InsertNode:
    path: Path
    node: Descendant


@dataclass(frozen=True, slots=True)
class RemoveNode:
    path: Path
    node: Descendant


@dataclass(frozen=True, slots=True)
class InsertText:
    path: Path
    offset: int
    text: str


@dataclass(frozen=True, slots=True)
class RemoveText:
    path: Path
    offset: int
    text: str


@dataclass(frozen=True, slots=True)
class SplitNode:
    """Split the node at ``path``; the second half lands at the next path.

    ``position`` is a string offset for Text nodes and a child index for
    Elements. ``properties`` describe the new second half.

    """

    path: Path
    position: int
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MergeNode:
    """Merge the node at ``path`` into its previous sibling.

    ``position`` is the length (text or children) of the previous sibling
    before the merge.

    """

    path: Path
    position: int
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MoveNode:
    path: Path
    new_path: Path


@dataclass(frozen=True, slots=True)
class SetNode:
    """Shallow-merge ``new_properties`` onto the node at ``path``.

    For Elements the ``"type"`` key sets the tag and any other key sets an
    attribute; for Text nodes every key is a mark. A ``None`` value
    deletes the key.

    """

    path: Path
    properties: Mapping[str, Any]
    new_properties: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class SetSelection:
    selection: Range | None
    new_selection: Range | None


type Operation = (
    InsertNode
    | RemoveNode
    | InsertText
    | RemoveText
    | SplitNode
    | MergeNode
    | MoveNode
    | SetNode
    | SetSelection
)


# =============================================================================
# Node properties
# =============================================================================


def extract_properties(node: Descendant) -> dict[str, Any]:
    """Everything but the content: marks for Text, tag + attributes for Element."""
    if isinstance(node, Text):
        return dict(node.marks)
    return {"type": node.type, **node.attributes}


def with_properties(node: Descendant, properties: Mapping[str, Any]) -> Descendant:
    """Return ``node`` with ``properties`` shallow-merged; None deletes a key."""
    if isinstance(node, Text):
        marks = dict(node.marks)
        for key, value in properties.items():
            if value is None:
                marks.pop(key, None)
            else:
                marks[key] = value
        return dataclasses.replace(node, marks=marks)
    attributes = dict(node.attributes)
    new_type = node.type
    for key, value in properties.items():
        if key == "type":
            if value is not None:
                new_type = value
        elif value is None:
            attributes.pop(key, None)
        else:
            attributes[key] = value
    return dataclasses.replace(node, type=new_type, attributes=attributes)


def _from_properties(template: Descendant, properties: Mapping[str, Any], content: Any) -> Descendant:
    if isinstance(template, Text):
        return Text(content, dict(properties))
    props = dict(properties)
    tag = props.pop("type", template.type)
    return Element(tag, content, props)


# =============================================================================
# Path / point / range transforms
# =============================================================================


def transform_path(path: Path, op: Operation, affinity: Affinity = "forward") -> Path | None:
    """Recompute ``path`` after ``op``; None if the node it points at is gone."""
    if not path:
        return path
    p = list(path)
    match op:
        case InsertNode(path=op_path):
            if op_path == path or ends_before(op_path, path) or is_ancestor(op_path, path):
                p[len(op_path) - 1] += 1

        case RemoveNode(path=op_path):
            if op_path == path or is_ancestor(op_path, path):
                return None
            if ends_before(op_path, path):
                p[len(op_path) - 1] -= 1

        case MergeNode(path=op_path, position=position):
            if op_path == path or ends_before(op_path, path):
                p[len(op_path) - 1] -= 1
            elif is_ancestor(op_path, path):
                p[len(op_path) - 1] -= 1
                p[len(op_path)] += position

        case SplitNode(path=op_path, position=position):
            if op_path == path:
                if affinity == "forward":
                    p[-1] += 1
                elif affinity is None:
                    return None
            elif ends_before(op_path, path):
                p[len(op_path) - 1] += 1
            elif is_ancestor(op_path, path) and path[len(op_path)] >= position:
                p[len(op_path) - 1] += 1
                p[len(op_path)] -= position

        case MoveNode(path=op_path, new_path=new_path):
            if op_path == new_path:
                return path
            if is_ancestor(op_path, path) or op_path == path:
                copy = list(new_path)
                if ends_before(op_path, new_path) and len(op_path) < len(new_path):
                    copy[len(op_path) - 1] -= 1
                return (*copy, *path[len(op_path):])
            if is_sibling(op_path, new_path) and (is_ancestor(new_path, path) or new_path == path):
                if ends_before(op_path, path):
                    p[len(op_path) - 1] -= 1
                else:
                    p[len(op_path) - 1] += 1
            elif ends_before(new_path, path) or new_path == path or is_ancestor(new_path, path):
                if ends_before(op_path, path):
                    p[len(op_path) - 1] -= 1
                p[len(new_path) - 1] += 1
            elif ends_before(op_path, path):
                if new_path == path:
                    p[len(new_path) - 1] += 1
                p[len(op_path) - 1] -= 1

    return tuple(p)


def transform_point(point: Point, op: Operation, affinity: Affinity = "forward") -> Point | None:
    """Recompute ``point`` after ``op``; None if its Text node is gone."""
    path, offset = point.path, point.offset
    match op:
        case InsertText(path=op_path, offset=op_offset, text=text):
            if op_path == path and (op_offset < offset or (op_offset == offset and affinity == "forward")):
                offset += len(text)

        case RemoveText(path=op_path, offset=op_offset, text=text):
            if op_path == path and op_offset <= offset:
                offset -= min(offset - op_offset, len(text))

        case MergeNode(path=op_path, position=position):
            if op_path == path:
                offset += position
            new_path = transform_path(path, op)
            if new_path is None:
                return None
            path = new_path

        case SplitNode(path=op_path, position=position):
            if op_path == path:
                if position == offset and affinity is None:
                    return None
                if position < offset or (position == offset and affinity == "forward"):
                    offset -= position
                    path = (*path[:-1], path[-1] + 1)
            else:
                new_path = transform_path(path, op, affinity)
                if new_path is None:
                    return None
                path = new_path

        case SetSelection() | SetNode():
            return point

        case _:
            new_path = transform_path(path, op, affinity)
            if new_path is None:
                return None
            path = new_path

    if path == point.path and offset == point.offset:
        return point
    return Point(path, offset)


def transform_range(rng: Range, op: Operation, affinity: RangeAffinity = "inward") -> Range | None:
    """Recompute ``rng`` after ``op``.

    ``"inward"`` keeps the range from growing over content inserted at its
    edges; ``"outward"`` lets it grow.
    """
    if affinity == "inward":
        if rng.is_forward:
            anchor_aff: Affinity = "forward"
            focus_aff: Affinity = anchor_aff if rng.is_collapsed else "backward"
        else:
            anchor_aff = "backward"
            focus_aff = anchor_aff if rng.is_collapsed else "forward"
    elif affinity == "outward":
        if rng.is_forward:
            anchor_aff, focus_aff = "backward", "forward"
        else:
            anchor_aff, focus_aff = "forward", "backward"
    else:
        anchor_aff = focus_aff = affinity
    anchor = transform_point(rng.anchor, op, anchor_aff)
    focus = transform_point(rng.focus, op, focus_aff)
    if anchor is None or focus is None:
        return None
    return Range(anchor, focus)


# =============================================================================
# Applying operations
# =============================================================================


def _children(node: Node, path: Path) -> tuple[Node, ...]:
    if isinstance(node, Text):
        raise InvalidPathError(path, "text nodes have no children")
    return node.children


def _update(node: Node, path: Path, fn: Callable[[Node], Node], full: Path) -> Node:
    if not path:
        return fn(node)
    kids = list(_children(node, full))
    index = path[0]
    if index < 0 or index >= len(kids):
        raise InvalidPathError(full)
    kids[index] = _update(kids[index], path[1:], fn, full)
    return dataclasses.replace(node, children=tuple(kids))  # type: ignore[arg-type]


def _update_children(
    root: Document, path: Path, fn: Callable[[list[Node]], None]
) -> Document:
    def edit(node: Node) -> Node:
        kids = list(_children(node, path))
        fn(kids)
        return dataclasses.replace(node, children=tuple(kids))  # type: ignore[arg-type]

    return _update(root, path, edit, path)  # type: ignore[return-value]


def _get(root: Node, path: Path) -> Node:
    node = root
    for index in path:
        kids = _children(node, path)
        if index < 0 or index >= len(kids):
            raise InvalidPathError(path)
        node = kids[index]
    return node


def _text_at(root: Node, path: Path) -> Text:
    node = _get(root, path)
    if not isinstance(node, Text):
        raise NodeTypeError(f"Expected a text node at {list(path)}, got {type(node).__name__}")
    return node


def _apply_tree(doc: Document, op: Operation) -> Document:
    match op:
        case InsertNode(path=path, node=node):
            if not path:
                raise InvalidPathError(path, "cannot insert at the root path")
            index = path[-1]

            def insert(kids: list[Node]) -> None:
                if index < 0 or index > len(kids):
                    raise InvalidPathError(path, "insertion index out of range")
                kids.insert(index, node)

            return _update_children(doc, path[:-1], insert)

        case RemoveNode(path=path):
            if not path:
                raise InvalidPathError(path, "cannot remove the root")
            _get(doc, path)
            return _update_children(doc, path[:-1], lambda kids: kids.pop(path[-1]))

        case InsertText(path=path, offset=offset, text=value):
            current = _text_at(doc, path)
            if offset < 0 or offset > len(current.text):
                raise InvalidPathError(path, f"offset {offset} outside text")
            return _update(
                doc,
                path,
                lambda n: dataclasses.replace(n, text=n.text[:offset] + value + n.text[offset:]),
                path,
            )  # type: ignore[return-value]

        case RemoveText(path=path, offset=offset, text=value):
            _text_at(doc, path)
            return _update(
                doc,
                path,
                lambda n: dataclasses.replace(n, text=n.text[:offset] + n.text[offset + len(value):]),
                path,
            )  # type: ignore[return-value]

        case SplitNode(path=path, position=position, properties=properties):
            if not path:
                raise InvalidPathError(path, "cannot split the root")
            node = _get(doc, path)
            if isinstance(node, Text):
                first_half: Node = dataclasses.replace(node, text=node.text[:position])
                second_half: Node = _from_properties(node, properties, node.text[position:])
            elif isinstance(node, Element):
                first_half = dataclasses.replace(node, children=node.children[:position])
                second_half = _from_properties(node, properties, node.children[position:])
            else:
                raise NodeTypeError("Cannot split the document root")
            index = path[-1]

            def split(kids: list[Node]) -> None:
                kids[index : index + 1] = [first_half, second_half]

            return _update_children(doc, path[:-1], split)

        case MergeNode(path=path):
            if not has_previous(path):
                raise InvalidPathError(path, "no previous sibling to merge into")
            node = _get(doc, path)
            prev = _get(doc, previous_path(path))
            if isinstance(node, Text) and isinstance(prev, Text):
                merged: Node = dataclasses.replace(prev, text=prev.text + node.text)
            elif isinstance(node, Element) and isinstance(prev, Element):
                merged = dataclasses.replace(prev, children=prev.children + node.children)
            else:
                raise NodeTypeError(
                    f"Cannot merge {type(node).__name__} at {list(path)} into {type(prev).__name__}"
                )
            index = path[-1]

            def merge(kids: list[Node]) -> None:
                kids[index - 1 : index + 1] = [merged]

            return _update_children(doc, path[:-1], merge)

        case MoveNode(path=path, new_path=new_path):
            if path == new_path:
                return doc
            if is_ancestor(path, new_path):
                raise InvalidPathError(new_path, "cannot move a node into itself")
            node = _get(doc, path)
            removed = _update_children(doc, path[:-1], lambda kids: kids.pop(path[-1]))
            true_path = transform_path(path, op)
            assert true_path is not None
            target = true_path[-1]

            def place(kids: list[Node]) -> None:
                if target < 0 or target > len(kids):
                    raise InvalidPathError(new_path, "move target out of range")
                kids.insert(target, node)

            return _update_children(removed, true_path[:-1], place)

        case SetNode(path=path, new_properties=new_properties):
            if not path:
                raise NodeTypeError("Cannot set properties on the document root")
            return _update(doc, path, lambda n: with_properties(n, new_properties), path)  # type: ignore[return-value]

    return doc


def _relocate(doc: Document, removed: Path) -> Point | None:
    """Nearest surviving text point for a point whose node was removed."""
    prev: tuple[Text, Path] | None = None
    nxt: tuple[Text, Path] | None = None
    for node, p in texts(doc, voids=True):
        if compare(p, removed) == -1:
            prev = (node, p)
        else:
            nxt = (node, p)
            break
    prefer_next = False
    if prev is not None and nxt is not None:
        if nxt[1] == removed:
            prefer_next = not has_previous(nxt[1])
        else:
            prefer_next = len(common(prev[1], removed)) < len(common(nxt[1], removed))
    if prev is not None and not prefer_next:
        return Point(prev[1], len(prev[0].text))
    if nxt is not None:
        return Point(nxt[1], 0)
    return None


def apply_operation(doc: Document, op: Operation) -> Document:
    """Apply one operation, returning a new document.

    The selection is transformed through the operation. Pending marks are
    cleared when the selection changes.

    Raises:
        InvalidPathError: If the operation's path does not resolve.
        NodeTypeError: If the operation does not fit the node variant.

    """
    if isinstance(op, SetSelection):
        if op.new_selection == doc.selection:
            return doc
        return dataclasses.replace(doc, selection=op.new_selection, marks=None)

    new_doc = _apply_tree(doc, op)
    selection = doc.selection
    if selection is None:
        return new_doc

    points: list[Point | None] = []
    for point in (selection.anchor, selection.focus):
        result = transform_point(point, op)
        if result is None and isinstance(op, RemoveNode):
            result = _relocate(new_doc, op.path)
            if result is None:
                return dataclasses.replace(new_doc, selection=None)
        points.append(result)
    anchor, focus = points
    if anchor is None or focus is None:
        return dataclasses.replace(new_doc, selection=None)
    if anchor is selection.anchor and focus is selection.focus:
        return new_doc
    return dataclasses.replace(new_doc, selection=Range(anchor, focus))


__all__ = [
    "Affinity",
    "InsertNode",
    "InsertText",
    "MergeNode",
    "MoveNode",
    "Operation",
    "RangeAffinity",
    "RemoveNode",
    "RemoveText",
    "SetNode",
    "SetSelection",
    "SplitNode",
    "apply_operation",
    "extract_properties",
    "transform_path",
    "transform_point",
    "transform_range",
    "with_properties",
]
