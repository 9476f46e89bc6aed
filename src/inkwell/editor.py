"""The editor host: single owner of the current document value.

``Editor`` holds the latest committed document, runs transforms against
it one step at a time, publishes each new value to subscribers (the
``on_change`` channel), and re-evaluates the mention overlay against every
published value before anyone else sees it.

Example:
    >>> editor = Editor(doc)
    >>> unsubscribe = editor.subscribe(lambda value: saved.append(value))
    >>> editor.type_text("hello @mar")
    >>> editor.mention_state.candidates
    ('margie', 'mark')
    >>> editor.handle_key("Enter")
    True

Thread Safety:
    Not thread-safe. An Editor is driven from the one thread that receives
    input events; each call runs to completion before the next.

"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from inkwell.config import EditorConfig, resolve_config
from inkwell.errors import InvalidPathError
from inkwell.formatting import mark_for_hotkey, toggle_mark
from inkwell.mentions import Lookup, MentionAutocomplete, MentionState
from inkwell.nodes import Document
from inkwell.normalize import normalize
from inkwell.transforms import delete_backward, delete_forward, insert_break, insert_text
from inkwell.utils.logger import get_logger

logger = get_logger(__name__)

type Listener = Callable[[Document], None]

# Editing keys handled when the mention overlay does not consume them
_EDITING_KEYS: dict[str, Callable[..., Document]] = {
    "Enter": insert_break,
    "Backspace": delete_backward,
    "Delete": delete_forward,
}


class Editor:
    """Owns a document value and applies transforms to it atomically.

    Args:
        value: Initial document (normalized on the way in)
        config: Editor schema; defaults to the context's at construction
        lookup: Mention candidate lookup (defaults to the built-in universe)

    """

    def __init__(
        self,
        value: Document,
        *,
        config: EditorConfig | None = None,
        lookup: Lookup | None = None,
    ) -> None:
        self.config = resolve_config(config)
        self._value = normalize(value, self.config)
        self._listeners: list[Listener] = []
        self.mentions = MentionAutocomplete(lookup, config=self.config)
        self.mentions.on_change(self._value)

    @property
    def value(self) -> Document:
        return self._value

    @property
    def mention_state(self) -> MentionState:
        return self.mentions.state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every new document value.

        Returns:
            A function that removes the listener.

        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, doc: Document) -> bool:
        if doc == self._value:
            return False
        self._value = doc
        logger.debug("Publishing new value to %d listener(s)", len(self._listeners))
        self.mentions.on_change(doc)
        for listener in list(self._listeners):
            listener(doc)
        return True

    def apply(self, transform: Callable[..., Document], *args: Any, **kwargs: Any) -> Document:
        """Run ``transform(value, *args, **kwargs)`` and publish the result.

        The editor's config is passed as ``config=`` unless given. A path
        that no longer resolves turns the step into a no-op.
        """
        kwargs.setdefault("config", self.config)
        try:
            doc = transform(self._value, *args, **kwargs)
        except InvalidPathError as e:
            logger.warning("Ignored %s: %s", getattr(transform, "__name__", transform), e)
            return self._value
        self._publish(doc)
        return self._value

    def set_value(self, value: Document) -> Document:
        """Replace the document wholesale (e.g. from an external store)."""
        self._publish(normalize(value, self.config))
        return self._value

    def type_text(self, text: str) -> Document:
        return self.apply(insert_text, text)

    def select_candidate(self, index: int) -> Document:
        """Commit mention candidate ``index`` (a click on an overlay row)."""
        self._publish(self.mentions.select_candidate(self._value, index))
        return self._value

    def handle_key(self, key: str) -> bool:
        """Route a key: mention overlay first, then hotkeys, then editing keys.

        Returns:
            True if the key was handled (the host should suppress its
            default action).

        """
        result = self.mentions.on_key(self._value, key)
        if result.handled:
            self._publish(result.document)
            return True

        mark = mark_for_hotkey(key)
        if mark is not None:
            self.apply(toggle_mark, mark)
            return True

        edit = _EDITING_KEYS.get(key)
        if edit is not None:
            self.apply(edit)
            return True
        return False


__all__ = ["Editor", "Listener"]
