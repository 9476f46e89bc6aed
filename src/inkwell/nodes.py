"""Typed document nodes for Inkwell.

All nodes are frozen dataclasses with slots for:
- Immutability: every committed edit produces a new tree; old snapshots
  stay valid and can be compared with ``==``
- Memory efficiency: __slots__ reduces memory footprint
- Pattern matching: Python 3.10+ match statements work naturally

Node Hierarchy:
Document (root: block children + selection + pending marks)
└── Element (type-tagged: paragraph, heading-one, bulleted-list, list-item, mention, ...)
    ├── Element
    └── Text (leaf: string + marks)

Whether an Element is a block, an inline, or a void is not a property of
the node class; it is looked up by type tag in ``EditorConfig``.

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads. The
``marks`` and ``attributes`` mappings are never mutated after construction;
transforms always build new ones.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from inkwell.location import Range


@dataclass(frozen=True, slots=True)
class Text:
    """A run of text sharing one set of marks.

    Example:
        >>> Text("rich", {"bold": True})
        Text(text='rich', marks={'bold': True})

    """

    text: str = ""
    marks: Mapping[str, Any] = field(default_factory=dict)

    def same_marks(self, other: Text) -> bool:
        """Loose equality: same marks, text ignored."""
        return dict(self.marks) == dict(other.marks)


@dataclass(frozen=True, slots=True)
class Element:
    """A type-tagged container node.

    ``attributes`` carries type-specific fields, e.g. ``{"username": "margie"}``
    for a mention.

    """

    type: str
    children: tuple[Descendant, ...] = ()
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)


@dataclass(frozen=True, slots=True)
class Document:
    """The root of an editable document.

    ``marks`` are pending marks toggled on a collapsed selection; they apply
    to the next inserted text and are cleared whenever the selection moves.

    """

    children: tuple[Element, ...] = ()
    selection: Range | None = None
    marks: Mapping[str, Any] | None = None


type Descendant = Element | Text
type Node = Document | Element | Text
type Ancestor = Document | Element


def text(value: str = "", **marks: Any) -> Text:
    """Build a Text node; keyword arguments become marks."""
    return Text(value, marks)


def element(type_: str, *children: Descendant, **attributes: Any) -> Element:
    """Build an Element; keyword arguments become attributes."""
    return Element(type_, tuple(children), attributes)


def paragraph(*children: Descendant) -> Element:
    return Element("paragraph", tuple(children) or (Text(),))


__all__ = [
    "Ancestor",
    "Descendant",
    "Document",
    "Element",
    "Node",
    "Text",
    "element",
    "paragraph",
    "text",
]
