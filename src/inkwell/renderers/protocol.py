"""Rendering surface protocols.

Inkwell produces no visual output itself. A host supplies two callbacks:
one turning an element plus its already-rendered children into output
(keyed on the element's type tag), and one turning a text leaf into output
(keyed on its marks). ``render`` drives them over a document.

Example:
    def render_element(element, path, children):
        tag = {"paragraph": "p", "list-item": "li"}.get(element.type, "div")
        return f"<{tag}>{''.join(children)}</{tag}>"

    def render_leaf(text, path, marks):
        return f"<strong>{text.text}</strong>" if marks.get("bold") else text.text

    html = "".join(render(doc, render_element, render_leaf))

"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from inkwell.location import Path
from inkwell.nodes import Descendant, Document, Element, Text


class ElementRenderer[R](Protocol):
    """Render one element given its path and its rendered children."""

    def __call__(self, element: Element, path: Path, children: Sequence[R]) -> R: ...


class LeafRenderer[R](Protocol):
    """Render one text leaf given its path and active marks."""

    def __call__(self, text: Text, path: Path, marks: Mapping[str, Any]) -> R: ...


def _render_node[R](
    node: Descendant,
    path: Path,
    render_element: ElementRenderer[R],
    render_leaf: LeafRenderer[R],
) -> R:
    if isinstance(node, Text):
        active = {key: value for key, value in node.marks.items() if value}
        return render_leaf(node, path, active)
    children = [
        _render_node(child, (*path, i), render_element, render_leaf)
        for i, child in enumerate(node.children)
    ]
    return render_element(node, path, children)


def render[R](
    doc: Document,
    render_element: ElementRenderer[R],
    render_leaf: LeafRenderer[R],
) -> list[R]:
    """Render each top-level block of ``doc``, in order."""
    return [
        _render_node(block, (i,), render_element, render_leaf)
        for i, block in enumerate(doc.children)
    ]


__all__ = ["ElementRenderer", "LeafRenderer", "render"]
