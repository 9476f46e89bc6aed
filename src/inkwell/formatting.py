"""Toolbar and hotkey formatting: block types and text marks.

Blocks:
    ``toggle_block`` retypes the selected blocks. List formats also wrap
    the blocks in a list container; toggling any format first unwraps the
    blocks from whatever list they are in, so retyping a list item never
    leaves a stale list behind.

Marks:
    ``toggle_mark`` flips a boolean mark on the selected text, or on the
    pending marks when the selection is collapsed.

Example:
    >>> doc = toggle_block(doc, "bulleted-list")
    >>> [n.type for n in doc.children]
    ['bulleted-list']
    >>> toggle_block(doc, "bulleted-list") == original
    True

"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from inkwell.config import EditorConfig, resolve_config
from inkwell.location import Path
from inkwell.nodes import Document, Element, Node
from inkwell.query import find
from inkwell.selection import marks, unhang
from inkwell.transforms import Draft

HOTKEYS: Mapping[str, str] = MappingProxyType(
    {
        "mod+b": "bold",
        "mod+i": "italic",
        "mod+shift+c": "code",
    }
)

LIST_TYPES: tuple[str, ...] = ("numbered-list", "bulleted-list")

# Toolbar layout: (format, label)
MARK_BUTTONS: tuple[tuple[str, str], ...] = (("bold", "B"), ("italic", "i"), ("code", "<>"))
BLOCK_BUTTONS: tuple[tuple[str, str], ...] = (
    ("heading-one", "h1"),
    ("heading-two", "h2"),
    ("numbered-list", "1."),
    ("bulleted-list", "•"),
)


def mark_for_hotkey(chord: str) -> str | None:
    """The mark a chord toggles, e.g. ``"mod+b"`` -> ``"bold"``."""
    return HOTKEYS.get(chord.lower())


def is_block_active(
    doc: Document,
    format: str,
    attribute: str = "type",
    config: EditorConfig | None = None,
) -> bool:
    """True if an element in the (unhung) selection has ``attribute == format``."""
    if doc.selection is None:
        return False
    cfg = resolve_config(config)

    def _match(node: Node, path: Path) -> bool:
        if not isinstance(node, Element):
            return False
        if attribute == "type":
            return node.type == format
        return node.get(attribute) == format

    at = unhang(doc, doc.selection, config=cfg)
    return find(doc, at=at, match=_match, config=cfg) is not None


def is_mark_active(doc: Document, format: str, config: EditorConfig | None = None) -> bool:
    current = marks(doc, config)
    return current is not None and current.get(format) is True


def toggle_mark(doc: Document, format: str, *, config: EditorConfig | None = None) -> Document:
    draft = Draft(doc, config)
    if is_mark_active(doc, format, draft.config):
        draft.remove_mark(format)
    else:
        draft.add_mark(format, True)
    return draft.commit()


def toggle_block(doc: Document, format: str, *, config: EditorConfig | None = None) -> Document:
    """Turn the selected blocks into ``format``, or back into paragraphs.

    Steps run on one draft and are normalized in between:

    1. Unwrap the blocks from any list container (split at the selection).
    2. Retype them: the default block if ``format`` was already active, the
       list item type for a list format, otherwise ``format``.
    3. For a list format that was not active, wrap them in a new list.
    """
    cfg = resolve_config(config)
    active = is_block_active(doc, format, config=cfg)
    is_list = format in cfg.list_types

    draft = Draft(doc, cfg)
    draft.unwrap_nodes(match=lambda n, p: cfg.is_list(n), split=True)
    draft.normalize()

    if active:
        new_type = cfg.default_block_type
    elif is_list:
        new_type = cfg.list_item_type
    else:
        new_type = format
    draft.set_nodes({"type": new_type})
    draft.normalize()

    if not active and is_list:
        draft.wrap_nodes(Element(format))
    return draft.commit()


__all__ = [
    "BLOCK_BUTTONS",
    "HOTKEYS",
    "LIST_TYPES",
    "MARK_BUTTONS",
    "is_block_active",
    "is_mark_active",
    "mark_for_hotkey",
    "toggle_block",
    "toggle_mark",
]
