"""Document serialization: JSON round-trip for Inkwell documents.

Uses the common JSON value shape for this kind of editor, so documents
can be exchanged with other rich-text tooling:

- Element: ``{"type": "paragraph", "children": [...], **attributes}``
- Text: ``{"text": "hello", **marks}``
- Document: ``{"children": [...], "selection": {...} | null}``
- Point: ``{"path": [0, 0], "offset": 3}``; Range: ``{"anchor": ..., "focus": ...}``

All output is deterministic (sorted keys) so it can be used as a cache key.

Example:
    from inkwell.serialization import to_json, from_json

    json_str = to_json(doc)
    restored = from_json(json_str)
    assert doc == restored

Thread Safety:
    All functions are pure, safe to call from any thread.

"""

from __future__ import annotations

import json
from typing import Any

from inkwell.errors import SerializationError
from inkwell.location import Point, Range
from inkwell.nodes import Descendant, Document, Element, Node, Text


def to_dict(node: Node) -> dict[str, Any]:
    """Convert a node to a JSON-compatible dict."""
    if isinstance(node, Text):
        return {**node.marks, "text": node.text}
    if isinstance(node, Element):
        return {
            **node.attributes,
            "type": node.type,
            "children": [to_dict(child) for child in node.children],
        }
    result: dict[str, Any] = {
        "children": [to_dict(child) for child in node.children],
        "selection": range_to_dict(node.selection) if node.selection is not None else None,
    }
    if node.marks is not None:
        result["marks"] = dict(node.marks)
    return result


def point_to_dict(point: Point) -> dict[str, Any]:
    return {"path": list(point.path), "offset": point.offset}


def range_to_dict(rng: Range) -> dict[str, Any]:
    return {"anchor": point_to_dict(rng.anchor), "focus": point_to_dict(rng.focus)}


def point_from_dict(data: Any) -> Point:
    try:
        path = tuple(int(i) for i in data["path"])
        return Point(path, int(data["offset"]))
    except (KeyError, TypeError, ValueError) as e:
        msg = f"Malformed point: {data!r}"
        raise SerializationError(msg) from e


def range_from_dict(data: Any) -> Range:
    if not isinstance(data, dict) or "anchor" not in data or "focus" not in data:
        msg = f"Malformed range: {data!r}"
        raise SerializationError(msg)
    return Range(point_from_dict(data["anchor"]), point_from_dict(data["focus"]))


def node_from_dict(data: Any) -> Descendant:
    """Reconstruct an Element or Text from a dict.

    Raises:
        SerializationError: If ``data`` is neither shape.

    """
    if not isinstance(data, dict):
        msg = f"Expected an object for a node, got {type(data).__name__}"
        raise SerializationError(msg)
    if "text" in data:
        value = data["text"]
        if not isinstance(value, str):
            msg = f"Text node 'text' must be a string, got {type(value).__name__}"
            raise SerializationError(msg)
        return Text(value, {k: v for k, v in data.items() if k != "text"})
    if "type" in data and "children" in data:
        tag = data["type"]
        children = data["children"]
        if not isinstance(tag, str) or not isinstance(children, list):
            msg = f"Malformed element: {data!r}"
            raise SerializationError(msg)
        attributes = {k: v for k, v in data.items() if k not in ("type", "children")}
        return Element(tag, tuple(node_from_dict(child) for child in children), attributes)
    msg = f"Node has neither 'text' nor 'type' and 'children': {sorted(data)}"
    raise SerializationError(msg)


def from_dict(data: Any) -> Document:
    """Reconstruct a Document from a dict (as produced by ``to_dict``).

    Raises:
        SerializationError: If the data does not describe a document.

    """
    if not isinstance(data, dict) or not isinstance(data.get("children"), list):
        msg = "Expected a document object with a 'children' list"
        raise SerializationError(msg)
    children = tuple(node_from_dict(child) for child in data["children"])
    for child in children:
        if not isinstance(child, Element):
            msg = "Document children must be elements"
            raise SerializationError(msg)
    raw_selection = data.get("selection")
    selection = range_from_dict(raw_selection) if raw_selection is not None else None
    raw_marks = data.get("marks")
    if raw_marks is not None and not isinstance(raw_marks, dict):
        msg = f"Malformed pending marks: {raw_marks!r}"
        raise SerializationError(msg)
    return Document(children, selection, raw_marks)  # type: ignore[arg-type]


def to_json(doc: Document, *, indent: int | None = None) -> str:
    """Serialize a Document to a JSON string (sorted keys)."""
    return json.dumps(to_dict(doc), sort_keys=True, indent=indent)


def from_json(data: str) -> Document:
    """Deserialize a Document from a JSON string.

    Raises:
        SerializationError: If the string is not valid JSON or not a document.

    """
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON: {e}"
        raise SerializationError(msg) from e
    return from_dict(raw)


__all__ = [
    "from_dict",
    "from_json",
    "node_from_dict",
    "point_from_dict",
    "point_to_dict",
    "range_from_dict",
    "range_to_dict",
    "to_dict",
    "to_json",
]
