"""
Inkwell: a rich-text document editing core for Python 3.12+

Immutable document trees (blocks, inlines, marked text), a transform engine
that applies every edit to a private draft and publishes a normalized
snapshot, toolbar formatting logic, and an @-mention autocomplete state
machine. Zero runtime dependencies.

Quick Start:
    >>> from inkwell import Editor, Document, Point, Range, collect_mentions, paragraph, text
    >>> doc = Document((paragraph(text("hello ")),), Range.collapsed(Point((0, 0), 6)))
    >>> editor = Editor(doc)
    >>> editor.type_text("@mar")
    >>> editor.mention_state.candidates
    ('margie', 'mark')
    >>> editor.handle_key("Enter")
    True
    >>> collect_mentions(editor.value)
    ['margie']

Functional API:
    >>> from inkwell import toggle_block, toggle_mark
    >>> doc = toggle_block(doc, "bulleted-list")
    >>> doc = toggle_mark(doc, "bold")
"""

from inkwell.config import (
    EditorConfig,
    editor_config_context,
    get_editor_config,
    reset_editor_config,
    set_editor_config,
)
from inkwell.editor import Editor
from inkwell.errors import (
    InkwellError,
    InvalidPathError,
    NodeTypeError,
    NormalizationError,
    SerializationError,
)
from inkwell.formatting import (
    HOTKEYS,
    LIST_TYPES,
    is_block_active,
    is_mark_active,
    mark_for_hotkey,
    toggle_block,
    toggle_mark,
)
from inkwell.location import Path, Point, Range
from inkwell.mentions import (
    USERNAMES,
    KeyResult,
    MentionAutocomplete,
    MentionState,
    collect_mentions,
    insert_mention,
    prefix_lookup,
)
from inkwell.nodes import Document, Element, Text, element, paragraph, text
from inkwell.normalize import normalize
from inkwell.operations import apply_operation
from inkwell.query import nodes, string
from inkwell.renderers.protocol import render
from inkwell.selection import marks, point_after, point_before, text_of, unhang
from inkwell.serialization import from_dict, from_json, to_dict, to_json
from inkwell.transforms import (
    Draft,
    add_mark,
    collapse,
    delete,
    delete_backward,
    delete_forward,
    deselect,
    insert_break,
    insert_nodes,
    insert_text,
    lift_nodes,
    merge_nodes,
    move,
    move_nodes,
    remove_mark,
    remove_nodes,
    select,
    set_nodes,
    set_selection,
    split_nodes,
    unwrap_nodes,
    wrap_nodes,
)
from inkwell.visitor import BaseVisitor, transform

__version__ = "0.1.0"

__all__ = [
    "HOTKEYS",
    "LIST_TYPES",
    "USERNAMES",
    "BaseVisitor",
    "Document",
    "Draft",
    "Editor",
    "EditorConfig",
    "Element",
    "InkwellError",
    "InvalidPathError",
    "KeyResult",
    "MentionAutocomplete",
    "MentionState",
    "NodeTypeError",
    "NormalizationError",
    "Path",
    "Point",
    "Range",
    "SerializationError",
    "Text",
    "__version__",
    "add_mark",
    "apply_operation",
    "collapse",
    "collect_mentions",
    "delete",
    "delete_backward",
    "delete_forward",
    "deselect",
    "editor_config_context",
    "element",
    "from_dict",
    "from_json",
    "get_editor_config",
    "insert_break",
    "insert_mention",
    "insert_nodes",
    "insert_text",
    "is_block_active",
    "is_mark_active",
    "lift_nodes",
    "mark_for_hotkey",
    "marks",
    "merge_nodes",
    "move",
    "move_nodes",
    "nodes",
    "normalize",
    "paragraph",
    "point_after",
    "point_before",
    "prefix_lookup",
    "remove_mark",
    "remove_nodes",
    "render",
    "reset_editor_config",
    "select",
    "set_editor_config",
    "set_nodes",
    "set_selection",
    "split_nodes",
    "string",
    "text",
    "text_of",
    "to_dict",
    "to_json",
    "toggle_block",
    "toggle_mark",
    "transform",
    "unhang",
    "unwrap_nodes",
    "wrap_nodes",
]
