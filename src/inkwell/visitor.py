"""Tree visitor and transformer for Inkwell documents.

Provides a base visitor class that dispatches on the element type tag and
an immutable bottom-up ``transform`` for rewriting frozen trees.

Example: collect every mentioned username:

    class MentionCollector(BaseVisitor[None]):
        def __init__(self) -> None:
            self.usernames: list[str] = []

        def visit_mention(self, node: Element) -> None:
            self.usernames.append(node.get("username"))

    collector = MentionCollector()
    collector.visit(doc)

Example: demote every heading:

    def demote(node: Node) -> Node:
        if isinstance(node, Element) and node.type == "heading-one":
            return dataclasses.replace(node, type="heading-two")
        return node

    new_doc = transform(doc, demote)

Thread Safety:
    Visitors are NOT shared across threads by default (they may accumulate
    mutable state). Create a new visitor per thread. The transform function
    is pure and safe to call from any thread.

"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable

from inkwell.nodes import Document, Element, Node, Text

# Tags that would collide with the non-element visit methods
_RESERVED = frozenset({"default", "document", "element", "text"})


class BaseVisitor[T]:
    """Base tree visitor with type-tag dispatch.

    Elements dispatch to ``visit_<tag>``, with dashes in the tag replaced by
    underscores (``"list-item"`` -> ``visit_list_item``). Tags without a
    method fall through to ``visit_element`` and then ``visit_default``.
    Children are walked automatically after the ``visit_*`` call.

    Type parameter ``T`` is the return type of visit methods (use ``None``
    for side-effect-only visitors).

    """

    def visit(self, node: Node) -> T:
        """Dispatch to the appropriate ``visit_*`` method, then walk children."""
        result = self._dispatch(node)
        self._walk_children(node)
        return result

    def visit_default(self, node: Node) -> T:
        """Called for nodes without a more specific ``visit_*`` method."""
        return None  # type: ignore[return-value]

    def visit_document(self, node: Document) -> T:
        return self.visit_default(node)

    def visit_element(self, node: Element) -> T:
        return self.visit_default(node)

    # -- Block visitors --------------------------------------------------------

    def visit_paragraph(self, node: Element) -> T:
        return self.visit_element(node)

    def visit_heading_one(self, node: Element) -> T:
        return self.visit_element(node)

    def visit_heading_two(self, node: Element) -> T:
        return self.visit_element(node)

    def visit_bulleted_list(self, node: Element) -> T:
        return self.visit_element(node)

    def visit_numbered_list(self, node: Element) -> T:
        return self.visit_element(node)

    def visit_list_item(self, node: Element) -> T:
        return self.visit_element(node)

    # -- Inline visitors -------------------------------------------------------

    def visit_mention(self, node: Element) -> T:
        return self.visit_element(node)

    def visit_text(self, node: Text) -> T:
        return self.visit_default(node)

    # -- Internal dispatch -----------------------------------------------------

    def _dispatch(self, node: Node) -> T:
        match node:
            case Document():
                return self.visit_document(node)
            case Text():
                return self.visit_text(node)
            case Element(type=tag):
                name = tag.replace("-", "_")
                method = None if name in _RESERVED else getattr(self, "visit_" + name, None)
                if method is None:
                    return self.visit_element(node)
                return method(node)
            case _:
                return self.visit_default(node)

    def _walk_children(self, node: Node) -> None:
        match node:
            case Document(children=children) | Element(children=children):
                for child in children:
                    self.visit(child)
            case _:
                pass  # Text: no children


def transform(doc: Document, fn: Callable[[Node], Node | None]) -> Document:
    """Apply a function to every node in the tree, returning a new tree.

    The function ``fn`` is called bottom-up: children are transformed first,
    then the parent is transformed with its new children.

    Return ``None`` from ``fn`` to remove a node from the tree. The root
    Document cannot be removed; returning None for it raises TypeError.

    The result is not normalized; pass it through
    ``inkwell.normalize.normalize`` before editing it further.

    """
    result = _transform_node(doc, fn)
    if result is None or not isinstance(result, Document):
        msg = "transform fn must return a Document for the root (cannot remove root)"
        raise TypeError(msg)
    return result


def _transform_node(node: Node, fn: Callable[[Node], Node | None]) -> Node | None:
    return fn(_transform_children(node, fn))


def _transform_children(node: Node, fn: Callable[[Node], Node | None]) -> Node:
    if isinstance(node, Text):
        return node
    children = node.children
    new_children = tuple(
        result for c in children
        if (result := _transform_node(c, fn)) is not None
    )
    if new_children != children:
        return dataclasses.replace(node, children=new_children)  # type: ignore[arg-type]
    return node


__all__ = ["BaseVisitor", "transform"]
