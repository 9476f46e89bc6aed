"""Normalization: the invariant-restoring pass run after every transform.

Rules, checked per element in document order:

1. The document holds at least one block (an empty default block is added).
2. An element with no children gets one empty Text.
3. A void element holds exactly one empty Text.
4. Children are either all blocks or all inline/text; whichever kind the
   first child establishes, children of the other kind are removed. The
   document root always holds blocks; inline elements always hold inlines.
5. Inline elements are surrounded by Text nodes (an empty Text is added
   before an inline with no Text before it, and after a trailing inline).
6. Adjacent Text siblings with identical marks are merged; an empty Text
   next to another Text is dropped. A block's sole empty Text is never
   dropped since it anchors the cursor on an empty line. An empty Text
   bordering an inline is kept too, even when it trails a block that has
   non-text children: rule 5 needs it as the cursor position after the
   inline, so only empty Texts beside another Text are dropped.

Each violation is repaired by emitting a primitive operation, so anything
tracking positions (including the selection) follows the repair.

Example:
    >>> doc = Document((paragraph(text("a"), text("b")),))
    >>> normalize(doc).children[0].children
    (Text(text='ab', marks={}),)

"""

from __future__ import annotations

import dataclasses

from inkwell.config import EditorConfig, resolve_config
from inkwell.errors import NormalizationError
from inkwell.location import Path
from inkwell.nodes import Document, Element, Node, Text
from inkwell.operations import (
    InsertNode,
    MergeNode,
    Operation,
    RemoveNode,
    RemoveText,
    apply_operation,
)
from inkwell.selection import clamp_range
from inkwell.utils.logger import get_logger

logger = get_logger(__name__)


def _fix_void(node: Element, path: Path) -> Operation | None:
    kids = node.children
    if not kids:
        return InsertNode((*path, 0), Text())
    if len(kids) > 1:
        return RemoveNode((*path, len(kids) - 1), kids[-1])
    child = kids[0]
    if isinstance(child, Element):
        return RemoveNode((*path, 0), child)
    if child.text:
        return RemoveText((*path, 0), 0, child.text)
    return None


def _fix_node(node: Document | Element, path: Path, cfg: EditorConfig) -> Operation | None:
    if isinstance(node, Document):
        if not node.children:
            return InsertNode((0,), Element(cfg.default_block_type, (Text(),)))
        should_have_inlines = False
    else:
        if cfg.is_void(node):
            return _fix_void(node, path)
        if not node.children:
            return InsertNode((*path, 0), Text())
        head = node.children[0]
        should_have_inlines = cfg.is_inline(node) or isinstance(head, Text) or cfg.is_inline(head)

    kids = node.children
    for n, child in enumerate(kids):
        prev = kids[n - 1] if n > 0 else None
        is_inline_or_text = isinstance(child, Text) or cfg.is_inline(child)

        if is_inline_or_text != should_have_inlines:
            return RemoveNode((*path, n), child)

        if isinstance(child, Element):
            if cfg.is_inline(child):
                if not isinstance(prev, Text):
                    return InsertNode((*path, n), Text())
                if n == len(kids) - 1:
                    return InsertNode((*path, n + 1), Text())
        elif isinstance(prev, Text):
            if child.same_marks(prev):
                return MergeNode((*path, n), len(prev.text), dict(child.marks))
            if prev.text == "":
                return RemoveNode((*path, n - 1), prev)
            if child.text == "":
                return RemoveNode((*path, n), child)

    for n, child in enumerate(kids):
        if isinstance(child, Element):
            fix = _fix_node(child, (*path, n), cfg)
            if fix is not None:
                return fix
    return None


def next_fix(doc: Document, config: EditorConfig | None = None) -> Operation | None:
    """The first repair the document needs, or None if it is normalized."""
    return _fix_node(doc, (), resolve_config(config))


def count_nodes(node: Node) -> int:
    if isinstance(node, Text):
        return 1
    return 1 + sum(count_nodes(child) for child in node.children)


def iteration_budget(doc: Document, config: EditorConfig | None = None) -> int:
    return resolve_config(config).normalize_max_iterations * count_nodes(doc)


def normalize(doc: Document, config: EditorConfig | None = None) -> Document:
    """Return ``doc`` with every invariant restored.

    Idempotent: normalizing a normalized document returns it unchanged.

    Raises:
        NormalizationError: If the rules fail to converge.

    """
    cfg = resolve_config(config)
    budget = iteration_budget(doc, cfg)
    iterations = 0
    while (op := next_fix(doc, cfg)) is not None:
        iterations += 1
        if iterations > budget:
            raise NormalizationError(budget)
        doc = apply_operation(doc, op)
    if iterations:
        logger.debug("Normalized document in %d step(s)", iterations)
    return settle_selection(doc)


def settle_selection(doc: Document) -> Document:
    """Clamp a selection that no longer resolves to valid points."""
    if doc.selection is None:
        return doc
    clamped = clamp_range(doc, doc.selection)
    if clamped is doc.selection:
        return doc
    return dataclasses.replace(doc, selection=clamped)


def is_normalized(doc: Document, config: EditorConfig | None = None) -> bool:
    return next_fix(doc, config) is None


__all__ = [
    "count_nodes",
    "is_normalized",
    "iteration_budget",
    "next_fix",
    "normalize",
    "settle_selection",
]
