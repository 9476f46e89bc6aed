"""ContextVar-based editor configuration for Inkwell.

The editor schema is capability composition: a frozen struct enumerating
which element type tags are inline, void or markable, which tags are list
containers, and so on. The transform engine consults it instead of asking
the nodes themselves.

Thread Safety:
    ContextVars are thread-local. Each thread has independent storage, so
    no locks are needed.

Usage:
    # Transforms read the active config when none is passed explicitly
    from inkwell.config import EditorConfig, editor_config_context

    with editor_config_context(EditorConfig(inline_types=frozenset({"mention", "link"}))):
        doc = insert_nodes(doc, link_node)

    # Or pass it per call
    doc = insert_nodes(doc, link_node, config=my_config)

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass

from inkwell.nodes import Element


@dataclass(frozen=True, slots=True)
class EditorConfig:
    """Immutable editor schema.

    Attributes:
        inline_types: Element tags that flow inside text (not blocks)
        void_types: Element tags without editable content of their own
        markable_void_types: Void tags whose marks follow the cursor
        list_types: Block tags that act as list containers
        list_item_type: Tag given to blocks wrapped in a list
        default_block_type: Tag a block reverts to when a format is toggled off
        mention_type: Tag used for mention inlines
        max_candidates: Cap on mention candidates shown in the overlay
        normalize_max_iterations: Upper bound on normalization fix-ups per
            node before giving up (guards against non-converging rules)

    """

    inline_types: frozenset[str] = frozenset({"mention"})
    void_types: frozenset[str] = frozenset({"mention"})
    markable_void_types: frozenset[str] = frozenset({"mention"})
    list_types: tuple[str, ...] = ("numbered-list", "bulleted-list")
    list_item_type: str = "list-item"
    default_block_type: str = "paragraph"
    mention_type: str = "mention"
    max_candidates: int = 10
    normalize_max_iterations: int = 42

    def is_inline(self, node: object) -> bool:
        return isinstance(node, Element) and node.type in self.inline_types

    def is_void(self, node: object) -> bool:
        return isinstance(node, Element) and node.type in self.void_types

    def is_markable_void(self, node: object) -> bool:
        return self.is_void(node) and node.type in self.markable_void_types  # type: ignore[attr-defined]

    def is_block(self, node: object) -> bool:
        return isinstance(node, Element) and node.type not in self.inline_types

    def is_list(self, node: object) -> bool:
        return isinstance(node, Element) and node.type in self.list_types

    @classmethod
    def from_dict(cls, config_dict: dict) -> "EditorConfig":
        """Create EditorConfig from dictionary.

        Only includes keys that are valid EditorConfig fields; unknown keys
        are silently ignored. Sequences for the ``*_types`` sets are
        converted to frozensets.

        Example:
            >>> config = EditorConfig.from_dict({
            ...     "inline_types": ["mention", "link"],
            ...     "unknown_key": "ignored",
            ... })
            >>> sorted(config.inline_types)
            ['link', 'mention']

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        for key in ("inline_types", "void_types", "markable_void_types"):
            if key in filtered:
                filtered[key] = frozenset(filtered[key])
        if "list_types" in filtered:
            filtered["list_types"] = tuple(filtered["list_types"])
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: EditorConfig = EditorConfig()

_editor_config: ContextVar[EditorConfig] = ContextVar(
    "editor_config",
    default=_DEFAULT_CONFIG,
)


def get_editor_config() -> EditorConfig:
    """Get current editor configuration (thread-local)."""
    return _editor_config.get()


def set_editor_config(config: EditorConfig) -> None:
    """Set editor configuration for current context."""
    _editor_config.set(config)


def reset_editor_config() -> None:
    """Reset to default configuration.

    Reuses the module-level _DEFAULT_CONFIG singleton, avoiding allocation.
    """
    _editor_config.set(_DEFAULT_CONFIG)


def resolve_config(config: EditorConfig | None) -> EditorConfig:
    """Return ``config`` or, when None, the context's active config."""
    return config if config is not None else _editor_config.get()


@contextmanager
def editor_config_context(config: EditorConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Properly restores the previous config even if an exception is raised.

    Example:
        >>> with editor_config_context(EditorConfig(max_candidates=5)):
        ...     get_editor_config().max_candidates
        5

    """
    previous = _editor_config.get()
    _editor_config.set(config)
    try:
        yield
    finally:
        _editor_config.set(previous)


__all__ = [
    "EditorConfig",
    "editor_config_context",
    "get_editor_config",
    "reset_editor_config",
    "resolve_config",
    "set_editor_config",
]
