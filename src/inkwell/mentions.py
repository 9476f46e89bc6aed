"""@-mention autocomplete.

A purely reactive state machine re-evaluated against every committed
document. Typing ``@`` followed by a word, with the cursor at a token
boundary, opens the candidate overlay; the arrow keys move through the
candidates (wrapping around), Tab/Enter or a click commits one, Escape
closes the overlay.

The engine never measures anything on screen: it exposes ``target_range``
(the ``@query`` text) and leaves geometry to the host. ``version`` grows
with every evaluation so geometry computed for an older state can be
recognised and dropped.

Example:
    >>> engine = MentionAutocomplete()
    >>> state = engine.on_change(doc)  # doc text "hello @mar", cursor at end
    >>> state.query, state.candidates
    ('mar', ('margie', 'mark'))
    >>> doc = engine.on_key(doc, "Enter").document

"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import NamedTuple

from inkwell.config import EditorConfig, resolve_config
from inkwell.location import Point, Range
from inkwell.nodes import Document, Element, Text
from inkwell.selection import point_after, point_before, text_of
from inkwell.transforms import insert_nodes, move, select
from inkwell.utils.logger import get_logger
from inkwell.visitor import BaseVisitor

logger = get_logger(__name__)

type Lookup = Callable[[str], Sequence[str]]

USERNAMES: tuple[str, ...] = (
    "ben",
    "CJ",
    "cory.faller",
    "daniel.macdonald",
    "doug",
    "erinn",
    "henry",
    "Jason",
    "josh.barnett",
    "jritterbush",
    "margie",
    "mark",
    "matt.wade",
    "mattpilla",
    "Rob Bruhn",
    "ryanskurkis",
    "Stephanie Barker",
    "tim.deuchler",
    "travis",
)

_TRIGGER = re.compile(r"@(\w+)")
_BOUNDARY = re.compile(r"\s|$")


def prefix_lookup(universe: Iterable[str]) -> Lookup:
    """Case-insensitive prefix search over a fixed universe, in source order."""
    names = tuple(universe)

    def _lookup(query: str) -> list[str]:
        needle = query.lower()
        return [name for name in names if name.lower().startswith(needle)]

    return _lookup


@dataclass(frozen=True, slots=True)
class MentionState:
    """Overlay state.

    Attributes:
        target_range: The ``@query`` text being completed, or None
        query: The word after ``@``
        candidates: Matching identities, capped and in source order
        active_index: Highlighted candidate
        version: Number of documents evaluated so far

    """

    target_range: Range | None = None
    query: str = ""
    candidates: tuple[str, ...] = ()
    active_index: int = 0
    version: int = 0

    @property
    def is_open(self) -> bool:
        """Whether the overlay is shown: a trigger with at least one candidate."""
        return self.target_range is not None and bool(self.candidates)

    @property
    def active(self) -> str | None:
        if not self.is_open:
            return None
        return self.candidates[self.active_index]


class KeyResult(NamedTuple):
    """Outcome of a key event: the (possibly new) document, and whether the
    key was consumed by the overlay."""

    document: Document
    handled: bool


def find_trigger(doc: Document, config: EditorConfig | None = None) -> tuple[Range, str] | None:
    """The ``@word`` right before a collapsed cursor, as ``(range, word)``.

    The cursor must sit at a token boundary: the next character is
    whitespace or there is none.
    """
    sel = doc.selection
    if sel is None or not sel.is_collapsed:
        return None
    cfg = resolve_config(config)
    start_point = sel.start

    word_before = point_before(doc, start_point, "word", config=cfg)
    if word_before is None:
        return None
    before = point_before(doc, word_before, config=cfg)
    if before is None:
        return None
    before_range = Range(before, start_point)
    match = _TRIGGER.fullmatch(text_of(doc, before_range, config=cfg))
    if match is None:
        return None

    after = point_after(doc, start_point, config=cfg)
    after_text = text_of(doc, Range(start_point, after), config=cfg) if after is not None else ""
    if _BOUNDARY.match(after_text) is None:
        return None
    return before_range, match.group(1)


def mention(username: str, config: EditorConfig | None = None) -> Element:
    return Element(resolve_config(config).mention_type, (Text(),), {"username": username})


def insert_mention(doc: Document, username: str, *, config: EditorConfig | None = None) -> Document:
    """Insert a mention at the selection and step the cursor past it."""
    doc = insert_nodes(doc, mention(username, config), config=config)
    return move(doc, config=config)


class MentionAutocomplete:
    """The mention overlay's state machine.

    Args:
        lookup: ``query -> candidates``; defaults to a prefix search over
            ``USERNAMES``
        config: Editor schema (defaults to the context's)

    """

    def __init__(self, lookup: Lookup | None = None, *, config: EditorConfig | None = None) -> None:
        self.lookup = lookup if lookup is not None else prefix_lookup(USERNAMES)
        self.config = config
        self._state = MentionState()

    @property
    def state(self) -> MentionState:
        return self._state

    def reset(self) -> None:
        """Close the overlay without touching the document."""
        self._state = MentionState(version=self._state.version)

    def on_change(self, doc: Document) -> MentionState:
        """Re-evaluate the trigger against a newly committed document."""
        cfg = resolve_config(self.config)
        version = self._state.version + 1
        trigger = find_trigger(doc, cfg)
        if trigger is None:
            if self._state.target_range is not None:
                logger.debug("Mention trigger cleared")
            self._state = MentionState(version=version)
            return self._state

        target, query = trigger
        candidates = tuple(self.lookup(query))[: cfg.max_candidates]
        logger.debug("Mention trigger %r: %d candidate(s)", query, len(candidates))
        self._state = MentionState(target, query, candidates, 0, version)
        return self._state

    def on_key(self, doc: Document, key: str) -> KeyResult:
        """Feed a key to the overlay; keys are only consumed while it is open."""
        state = self._state
        if not state.is_open:
            return KeyResult(doc, False)
        count = len(state.candidates)
        match key:
            case "ArrowDown":
                self._state = dataclasses.replace(state, active_index=(state.active_index + 1) % count)
            case "ArrowUp":
                self._state = dataclasses.replace(state, active_index=(state.active_index - 1 + count) % count)
            case "Tab" | "Enter":
                return KeyResult(self.select_candidate(doc, state.active_index), True)
            case "Escape":
                self.reset()
            case _:
                return KeyResult(doc, False)
        return KeyResult(doc, True)

    def select_candidate(self, doc: Document, index: int) -> Document:
        """Replace the ``@query`` text with a mention of candidate ``index``.

        Raises:
            IndexError: If the overlay is closed or ``index`` is out of range.

        """
        state = self._state
        if not state.is_open:
            msg = "No mention candidates to select"
            raise IndexError(msg)
        username = state.candidates[index]
        assert state.target_range is not None
        doc = select(doc, state.target_range, config=self.config)
        doc = insert_mention(doc, username, config=self.config)
        self.reset()
        logger.debug("Inserted mention of %r", username)
        return doc


class MentionCollector(BaseVisitor[None]):
    """Collect the username of every mention, in document order."""

    def __init__(self) -> None:
        self.usernames: list[str] = []

    def visit_mention(self, node: Element) -> None:
        username = node.get("username")
        if username is not None:
            self.usernames.append(username)


def collect_mentions(doc: Document) -> list[str]:
    collector = MentionCollector()
    collector.visit(doc)
    return collector.usernames


def example_document() -> Document:
    """A paragraph introducing mentions, with two already in place."""
    return Document(
        (
            Element(
                "paragraph",
                (
                    Text(
                        "This rich text editor supports @-mentions. Try mentioning "
                        "anyone in the working group, like "
                    ),
                    mention("margie"),
                    Text(" or "),
                    mention("tim.deuchler"),
                    Text("!"),
                ),
            ),
        ),
        Range.collapsed(Point((0, 4), 1)),
    )


__all__ = [
    "USERNAMES",
    "KeyResult",
    "Lookup",
    "MentionAutocomplete",
    "MentionCollector",
    "MentionState",
    "collect_mentions",
    "example_document",
    "find_trigger",
    "insert_mention",
    "mention",
    "prefix_lookup",
]
