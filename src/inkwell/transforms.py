"""The transform engine: every document mutation Inkwell supports.

Each public function takes a ``Document`` and returns a new one. Work
happens on a private ``Draft``: operations are applied one by one to the
draft, path/point/range references held by the transform are carried
through each of them, and only once everything has been applied is the
result normalized and published. A failure part-way through raises out of
the draft and the caller's document is untouched.

Matching:
    Transforms that act on "the matched nodes" accept ``match(node, path)``
    and a ``mode`` (see ``inkwell.query.nodes``). Without a match, a
    ``Path`` location matches exactly that node and any other location
    matches the lowest block around it.

Example:
    >>> doc = Document((paragraph(text("hello")),), Range.collapsed(Point((0, 0), 5)))
    >>> doc = insert_text(doc, " world")
    >>> string(doc)
    'hello world'
    >>> doc = set_nodes(doc, {"type": "heading-one"})
    >>> doc.children[0].type
    'heading-one'

Thread Safety:
    Drafts are private to the call that creates them. Public functions are
    pure with respect to their inputs.

"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from inkwell.config import EditorConfig, resolve_config
from inkwell.errors import NodeTypeError, NormalizationError
from inkwell.location import (
    Path,
    Point,
    Range,
    common,
    is_after,
    is_ancestor,
    is_common,
    is_sibling,
    next_path,
)
from inkwell.nodes import Descendant, Document, Element, Node, Text
from inkwell.normalize import iteration_budget, next_fix, settle_selection
from inkwell.operations import (
    Affinity,
    InsertNode,
    InsertText,
    MergeNode,
    MoveNode,
    Operation,
    RangeAffinity,
    RemoveNode,
    RemoveText,
    SetNode,
    SetSelection,
    SplitNode,
    apply_operation,
    extract_properties,
    transform_path,
    transform_point,
    transform_range,
)
from inkwell.query import (
    Location,
    Mode,
    Predicate,
    block_above,
    end,
    find,
    get_node,
    has_node,
    is_edge,
    is_empty,
    is_end,
    is_start,
    leaf,
    levels,
    location_range,
    match_block,
    match_text,
    nodes,
    parent,
    start,
    void_above,
)
from inkwell.selection import (
    Unit,
    clamp_range,
    leaf_marks,
    marks,
    point_after,
    point_before,
    unhang,
)
from inkwell.utils.logger import get_logger

logger = get_logger(__name__)

type Edge = Literal["anchor", "focus", "start", "end"]


# =============================================================================
# References
# =============================================================================


class PathRef:
    """A path kept current across the operations applied to a draft."""

    __slots__ = ("_draft", "affinity", "current")

    def __init__(self, draft: Draft, current: Path | None, affinity: Affinity) -> None:
        self._draft = draft
        self.current = current
        self.affinity = affinity

    def transform(self, op: Operation) -> None:
        if self.current is not None:
            self.current = transform_path(self.current, op, self.affinity)

    def unref(self) -> Path | None:
        self._draft._refs.discard(self)
        return self.current


class PointRef:
    __slots__ = ("_draft", "affinity", "current")

    def __init__(self, draft: Draft, current: Point | None, affinity: Affinity) -> None:
        self._draft = draft
        self.current = current
        self.affinity = affinity

    def transform(self, op: Operation) -> None:
        if self.current is not None:
            self.current = transform_point(self.current, op, self.affinity)

    def unref(self) -> Point | None:
        self._draft._refs.discard(self)
        return self.current


class RangeRef:
    __slots__ = ("_draft", "affinity", "current")

    def __init__(self, draft: Draft, current: Range | None, affinity: RangeAffinity) -> None:
        self._draft = draft
        self.current = current
        self.affinity = affinity

    def transform(self, op: Operation) -> None:
        if self.current is not None:
            self.current = transform_range(self.current, op, self.affinity)

    def unref(self) -> Range | None:
        self._draft._refs.discard(self)
        return self.current


# =============================================================================
# Helpers
# =============================================================================


def _match_path(path: Path) -> Predicate:
    def _match(node: Node, p: Path) -> bool:
        return p == path

    return _match


def _match_children_of(path: Path) -> Predicate:
    def _match(node: Node, p: Path) -> bool:
        return len(p) == len(path) + 1 and p[:-1] == path

    return _match


def _has_single_child_nest(node: Node, cfg: EditorConfig) -> bool:
    if isinstance(node, Element):
        if cfg.is_void(node):
            return True
        if len(node.children) == 1:
            return _has_single_child_nest(node.children[0], cfg)
        return False
    return isinstance(node, Text)


# =============================================================================
# Draft
# =============================================================================


class Draft:
    """A private working copy of a document.

    Transforms are methods so they can call each other on one copy; the
    module-level functions wrap each in its own draft.

    Attributes:
        doc: The working document (replaced on every applied operation)
        config: The editor schema in effect for this draft
        operations: Every operation applied so far, normalization included

    """

    def __init__(self, doc: Document, config: EditorConfig | None = None) -> None:
        self.doc = doc
        self.config = resolve_config(config)
        self.operations: list[Operation] = []
        self._refs: set[PathRef | PointRef | RangeRef] = set()

    # -- refs ------------------------------------------------------------

    def path_ref(self, path: Path, affinity: Affinity = "forward") -> PathRef:
        ref = PathRef(self, path, affinity)
        self._refs.add(ref)
        return ref

    def point_ref(self, point: Point, affinity: Affinity = "forward") -> PointRef:
        ref = PointRef(self, point, affinity)
        self._refs.add(ref)
        return ref

    def range_ref(self, rng: Range, affinity: RangeAffinity = "inward") -> RangeRef:
        ref = RangeRef(self, rng, affinity)
        self._refs.add(ref)
        return ref

    # -- core ------------------------------------------------------------

    def apply(self, op: Operation) -> None:
        self.doc = apply_operation(self.doc, op)
        self.operations.append(op)
        for ref in list(self._refs):
            ref.transform(op)

    def normalize(self) -> None:
        """Apply normalization fixes until the draft is valid."""
        budget = iteration_budget(self.doc, self.config)
        iterations = 0
        while (op := next_fix(self.doc, self.config)) is not None:
            iterations += 1
            if iterations > budget:
                raise NormalizationError(budget)
            self.apply(op)

    def commit(self) -> Document:
        """Normalize and return the finished document."""
        self.normalize()
        self.doc = settle_selection(self.doc)
        if self.operations:
            logger.debug("Committed %d operation(s)", len(self.operations))
        return self.doc

    def _default_at(self, at: Location | None) -> Location | None:
        return self.doc.selection if at is None else at

    def _delete_range(self, rng: Range) -> Point | None:
        if rng.is_collapsed:
            return rng.anchor
        ref = self.point_ref(rng.end)
        self.delete(at=rng)
        return ref.unref()

    # -- selection -------------------------------------------------------

    def set_selection(self, rng: Range | None) -> None:
        self.apply(SetSelection(self.doc.selection, rng))

    def select(self, target: Location) -> None:
        """Select a location, clamped to the nearest valid points."""
        if isinstance(target, tuple) and not has_node(self.doc, target):
            target = Point(target, 0)
        if isinstance(target, tuple):
            rng: Range | None = location_range(self.doc, target)
        elif isinstance(target, Point):
            rng = Range.collapsed(target)
        else:
            rng = target
        rng = clamp_range(self.doc, rng) if rng is not None else None
        if rng is None:
            return
        self.set_selection(rng)

    def deselect(self) -> None:
        if self.doc.selection is not None:
            self.set_selection(None)

    def collapse(self, edge: Edge = "anchor") -> None:
        sel = self.doc.selection
        if sel is None:
            return
        if edge == "anchor":
            point = sel.anchor
        elif edge == "focus":
            point = sel.focus
        elif edge == "start":
            point = sel.start
        else:
            point = sel.end
        self.select(point)

    def move(self, distance: int = 1, *, unit: Unit = "character", edge: Edge | None = None) -> None:
        """Move the selection; a negative distance moves backward.

        With no ``edge`` both ends move (a collapsed selection stays
        collapsed); otherwise only the named edge moves.
        """
        sel = self.doc.selection
        if sel is None or distance == 0:
            return
        reverse = distance < 0
        step = point_before if reverse else point_after
        if edge == "start":
            edge = "focus" if sel.is_backward else "anchor"
        elif edge == "end":
            edge = "anchor" if sel.is_backward else "focus"

        anchor, focus = sel.anchor, sel.focus
        if edge in (None, "anchor"):
            anchor = step(self.doc, anchor, unit, distance=abs(distance), config=self.config) or anchor
        if edge in (None, "focus"):
            focus = step(self.doc, focus, unit, distance=abs(distance), config=self.config) or focus
        self.set_selection(Range(anchor, focus))

    # -- nodes -----------------------------------------------------------

    def insert_nodes(
        self,
        new_nodes: Descendant | Iterable[Descendant],
        *,
        at: Location | None = None,
        match: Predicate | None = None,
        select: bool | None = None,
        hanging: bool = False,
        voids: bool = False,
    ) -> None:
        cfg = self.config
        if isinstance(new_nodes, (Element, Text)):
            new_nodes = (new_nodes,)
        new_nodes = tuple(new_nodes)
        if not new_nodes:
            return
        node = new_nodes[0]

        if at is None:
            if self.doc.selection is not None:
                at = self.doc.selection
            elif self.doc.children:
                at = end(self.doc, ())
            else:
                at = (0,)
            if select is not False:
                select = True

        if isinstance(at, Range):
            if not hanging:
                at = unhang(self.doc, at, voids=voids, config=cfg)
            if at.is_collapsed:
                at = at.anchor
            else:
                at = self._delete_range(at)
                if at is None:
                    return

        if isinstance(at, Point):
            void = void_above(self.doc, at, mode="highest", config=cfg)
            if not voids and void is not None:
                # Never insert inside a void; go just past it instead.
                after = point_after(self.doc, void[1], config=cfg)
                at = after if after is not None else next_path(void[1])

        if isinstance(at, Point):
            if match is None:
                if isinstance(node, Text):
                    match = match_text
                elif cfg.is_inline(node):
                    match = lambda n, p: isinstance(n, Text) or cfg.is_inline(n)  # noqa: E731
                else:
                    match = match_block(cfg)
            entry = find(self.doc, at=at.path, match=match, mode="lowest", voids=voids, config=cfg)
            if entry is None:
                return
            match_ref = self.path_ref(entry[1])
            is_at_end = is_end(self.doc, at, entry[1])
            self.split_nodes(at=at, match=match, voids=voids)
            path = match_ref.unref()
            if path is None:
                return
            at = next_path(path) if is_at_end else path

        parent_path = at[:-1]
        if not voids and (
            cfg.is_void(get_node(self.doc, parent_path)) or void_above(self.doc, parent_path, config=cfg)
        ):
            return

        index = at[-1]
        for new_node in new_nodes:
            self.apply(InsertNode((*parent_path, index), new_node))
            index += 1

        if select:
            self.select(end(self.doc, (*parent_path, index - 1)))

    def remove_nodes(
        self,
        *,
        at: Location | None = None,
        match: Predicate | None = None,
        mode: Mode = "lowest",
        hanging: bool = False,
        voids: bool = False,
    ) -> None:
        at = self._default_at(at)
        if at is None:
            if match is None:
                return
            at = ()
        if match is None:
            match = _match_path(at) if isinstance(at, tuple) else match_block(self.config)
        if not hanging and isinstance(at, Range):
            at = unhang(self.doc, at, voids=voids, config=self.config)

        refs = [
            self.path_ref(p)
            for _, p in nodes(self.doc, at=at, match=match, mode=mode, voids=voids, config=self.config)
        ]
        for ref in refs:
            path = ref.unref()
            if path:
                self.apply(RemoveNode(path, get_node(self.doc, path)))  # type: ignore[arg-type]

    def set_nodes(
        self,
        props: Mapping[str, Any],
        *,
        at: Location | None = None,
        match: Predicate | None = None,
        mode: Mode = "lowest",
        hanging: bool = False,
        split: bool = False,
        voids: bool = False,
    ) -> None:
        cfg = self.config
        using_selection = at is None
        at = self._default_at(at)
        if at is None:
            return
        if match is None:
            match = _match_path(at) if isinstance(at, tuple) else match_block(cfg)
        if not hanging and isinstance(at, Range):
            at = unhang(self.doc, at, voids=voids, config=cfg)

        if split and isinstance(at, Range):
            if at.is_collapsed and leaf(self.doc, at.anchor.path).text:
                return
            range_ref = self.range_ref(at, affinity="inward")
            start_point, end_point = at.edges()
            split_mode: Mode = "lowest" if mode == "lowest" else "highest"
            end_at_end = is_end(self.doc, end_point, end_point.path)
            self.split_nodes(at=end_point, match=match, mode=split_mode, voids=voids, always=not end_at_end)
            start_at_start = is_start(self.doc, start_point, start_point.path)
            self.split_nodes(at=start_point, match=match, mode=split_mode, voids=voids, always=not start_at_start)
            at = range_ref.unref()
            if at is None:
                return
            if using_selection:
                self.select(at)

        entries = list(nodes(self.doc, at=at, match=match, mode=mode, voids=voids, config=cfg))
        for node, path in entries:
            if not path:
                continue
            current = extract_properties(node)  # type: ignore[arg-type]
            old: dict[str, Any] = {}
            new: dict[str, Any] = {}
            for key, value in props.items():
                if key in ("children", "text"):
                    continue
                if value != current.get(key):
                    old[key] = current.get(key)
                    new[key] = value
            if new:
                self.apply(SetNode(path, old, new))

    def split_nodes(
        self,
        *,
        at: Location | None = None,
        match: Predicate | None = None,
        mode: Mode = "lowest",
        always: bool = False,
        height: int = 0,
        voids: bool = False,
    ) -> None:
        """Split the matched ancestors of a point, lowest first.

        Edges of a node are not split unless ``always`` is set. A path
        location splits its parent before the node at that path.
        """
        cfg = self.config
        using_selection = at is None
        if match is None:
            match = match_block(cfg)
        at = self._default_at(at)
        if at is None:
            return
        if isinstance(at, Range):
            at = self._delete_range(at)
            if at is None:
                return

        if isinstance(at, tuple):
            path = at
            point = start(self.doc, path)
            match = _match_path(path[:-1])
            height = len(point.path) - len(path) + 1
            at = point
            always = True

        highest = find(self.doc, at=at, match=match, mode=mode, voids=voids, config=cfg)
        if highest is None:
            return
        highest_path = highest[1]

        void = void_above(self.doc, at, mode="highest", config=cfg)
        if not voids and void is not None:
            void_node, void_path = void
            if cfg.is_inline(void_node):
                after = point_after(self.doc, void_path, config=cfg)
                if after is None:
                    after_path = next_path(void_path)
                    self.apply(InsertNode(after_path, Text()))
                    after = Point(after_path, 0)
                at = after
            height = len(at.path) - len(void_path) + 1
            always = True

        after_ref = self.point_ref(at)
        before_ref = self.point_ref(at, affinity="backward")
        depth = len(at.path) - height
        lowest_path = at.path[:depth]
        position = at.offset if height == 0 else at.path[depth]

        for node, path in levels(self.doc, lowest_path, reverse=True, voids=voids, config=cfg):
            if len(path) < len(highest_path) or not path or (not voids and cfg.is_void(node)):
                break
            point = before_ref.current
            split = False
            at_end = point is not None and is_end(self.doc, point, path)
            if always or point is None or not is_edge(self.doc, point, path):
                split = True
                self.apply(SplitNode(path, position, extract_properties(node)))  # type: ignore[arg-type]
            position = path[-1] + (1 if split or at_end else 0)

        before_ref.unref()
        after_point = after_ref.unref()
        if using_selection:
            self.select(after_point if after_point is not None else end(self.doc, ()))

    def merge_nodes(
        self,
        *,
        at: Location | None = None,
        match: Predicate | None = None,
        mode: Mode = "lowest",
        hanging: bool = False,
        voids: bool = False,
    ) -> None:
        """Merge the matched node into the node before it.

        An empty previous block is removed instead, so the merged node
        keeps its own type. Ancestors left empty by moving the node next
        to its target are removed.
        """
        cfg = self.config
        using_selection = at is None
        at = self._default_at(at)
        if at is None:
            return
        if match is None:
            match = _match_children_of(at[:-1]) if isinstance(at, tuple) else match_block(cfg)
        if not hanging and isinstance(at, Range):
            at = unhang(self.doc, at, voids=voids, config=cfg)
        if isinstance(at, Range):
            if at.is_collapsed:
                at = at.anchor
            else:
                at = self._delete_range(at)
                if at is None:
                    return
                if using_selection:
                    self.select(at)

        current = find(self.doc, at=at, match=match, mode=mode, voids=voids, config=cfg)
        if current is None:
            return
        node, path = current
        if not path:
            return
        before = point_before(self.doc, start(self.doc, path), voids=voids, config=cfg)
        if before is None:
            return
        candidates = [
            (n, p) for n, p in levels(self.doc, before.path, voids=voids, config=cfg) if p and match(n, p)
        ]
        if not candidates:
            return
        prev_node, prev_path = candidates[-1]
        if prev_path == path or is_ancestor(prev_path, path):
            return

        new_path = next_path(prev_path)
        common_path = common(path, prev_path)
        is_previous_sibling = is_sibling(path, prev_path)

        empty_ref = None
        for n, p in levels(self.doc, path, voids=voids, config=cfg)[:-1]:
            if len(p) > len(common_path) and _has_single_child_nest(n, cfg):
                empty_ref = self.path_ref(p)
                break

        if isinstance(node, Text) and isinstance(prev_node, Text):
            position = len(prev_node.text)
            properties = dict(node.marks)
        elif isinstance(node, Element) and isinstance(prev_node, Element):
            position = len(prev_node.children)
            properties = extract_properties(node)
        else:
            raise NodeTypeError(
                f"Cannot merge {type(node).__name__} at {list(path)} "
                f"into {type(prev_node).__name__} at {list(prev_path)}"
            )

        if not is_previous_sibling:
            self.apply(MoveNode(path, new_path))
        if empty_ref is not None:
            empty_path = empty_ref.unref()
            if empty_path:
                self.apply(RemoveNode(empty_path, get_node(self.doc, empty_path)))  # type: ignore[arg-type]

        if (isinstance(prev_node, Element) and is_empty(prev_node, cfg)) or (
            isinstance(prev_node, Text) and prev_node.text == "" and prev_path[-1] != 0
        ):
            self.apply(RemoveNode(prev_path, get_node(self.doc, prev_path)))  # type: ignore[arg-type]
        else:
            self.apply(MergeNode(new_path, position, properties))

    def move_nodes(
        self,
        *,
        to: Path,
        at: Location | None = None,
        match: Predicate | None = None,
        mode: Mode = "lowest",
        voids: bool = False,
    ) -> None:
        """Move the matched nodes, in order, so the first lands at ``to``."""
        at = self._default_at(at)
        if at is None:
            return
        if match is None:
            match = _match_path(at) if isinstance(at, tuple) else match_block(self.config)
        to_ref = self.path_ref(to)
        refs = [
            self.path_ref(p)
            for _, p in nodes(self.doc, at=at, match=match, mode=mode, voids=voids, config=self.config)
        ]
        for ref in refs:
            path = ref.unref()
            new_path = to_ref.current
            if path is None or new_path is None:
                continue
            if path:
                self.apply(MoveNode(path, new_path))
            if to_ref.current is not None and is_sibling(new_path, path) and is_after(new_path, path):
                to_ref.current = next_path(to_ref.current)
        to_ref.unref()

    def lift_nodes(
        self,
        *,
        at: Location | None = None,
        match: Predicate | None = None,
        mode: Mode = "lowest",
        voids: bool = False,
    ) -> None:
        """Move the matched nodes up one level, splitting their parent if needed."""
        at = self._default_at(at)
        if at is None:
            return
        if match is None:
            match = _match_path(at) if isinstance(at, tuple) else match_block(self.config)
        refs = [
            self.path_ref(p)
            for _, p in nodes(self.doc, at=at, match=match, mode=mode, voids=voids, config=self.config)
        ]
        for ref in refs:
            path = ref.unref()
            if path is None or len(path) < 2:
                continue
            parent_path = path[:-1]
            parent_node = parent(self.doc, path)
            index = path[-1]
            length = len(parent_node.children)

            if length == 1:
                self.apply(MoveNode(path, next_path(parent_path)))
                self.apply(RemoveNode(parent_path, get_node(self.doc, parent_path)))  # type: ignore[arg-type]
            elif index == 0:
                self.apply(MoveNode(path, parent_path))
            elif index == length - 1:
                self.apply(MoveNode(path, next_path(parent_path)))
            else:
                self.apply(SplitNode(parent_path, index + 1, extract_properties(parent_node)))  # type: ignore[arg-type]
                self.apply(MoveNode(path, next_path(parent_path)))

    def wrap_nodes(
        self,
        wrapper: Element,
        *,
        at: Location | None = None,
        match: Predicate | None = None,
        mode: Mode = "lowest",
        split: bool = False,
        voids: bool = False,
    ) -> None:
        """Wrap the matched sibling run in a new element built from ``wrapper``."""
        cfg = self.config
        using_selection = at is None
        at = self._default_at(at)
        if at is None:
            return
        if match is None:
            if isinstance(at, tuple):
                match = _match_path(at)
            elif cfg.is_inline(wrapper):
                match = lambda n, p: isinstance(n, Text) or cfg.is_inline(n)  # noqa: E731
            else:
                match = match_block(cfg)

        if split and isinstance(at, Range):
            start_point, end_point = at.edges()
            range_ref = self.range_ref(at, affinity="inward")
            self.split_nodes(at=end_point, match=match, voids=voids)
            self.split_nodes(at=start_point, match=match, voids=voids)
            at = range_ref.unref()
            if at is None:
                return
            if using_selection:
                self.select(at)

        if cfg.is_inline(wrapper):
            roots = list(nodes(self.doc, at=at, match=match_block(cfg), mode="lowest", voids=voids, config=cfg))
        else:
            roots = [(self.doc, ())]

        for _, root_path in roots:
            scope: Location | None = at
            if isinstance(at, Range):
                scope = at.intersection(location_range(self.doc, root_path))
            if scope is None:
                continue
            matches = list(nodes(self.doc, at=scope, match=match, mode=mode, voids=voids, config=cfg))
            if not matches:
                continue
            first_path, last_path = matches[0][1], matches[-1][1]
            if not first_path and not last_path:
                continue
            common_path = first_path[:-1] if first_path == last_path else common(first_path, last_path)
            span = Range(start(self.doc, first_path), end(self.doc, last_path))
            depth = len(common_path) + 1
            wrapper_path = next_path(last_path[:depth])
            self.insert_nodes(
                dataclasses.replace(wrapper, children=()), at=wrapper_path, voids=voids
            )
            self.move_nodes(
                at=span,
                match=_match_children_of(common_path),
                to=(*wrapper_path, 0),
                voids=voids,
            )

    def unwrap_nodes(
        self,
        *,
        at: Location | None = None,
        match: Predicate | None = None,
        mode: Mode = "lowest",
        split: bool = False,
        voids: bool = False,
    ) -> None:
        """Promote the children of the matched nodes to their grandparent.

        With ``split`` only the children inside ``at`` are promoted; the
        rest stay wrapped on either side.
        """
        at = self._default_at(at)
        if at is None:
            return
        if match is None:
            match = _match_path(at) if isinstance(at, tuple) else match_block(self.config)
        if isinstance(at, tuple):
            at = location_range(self.doc, at)

        range_ref = self.range_ref(at) if isinstance(at, Range) else None
        matches = list(nodes(self.doc, at=at, match=match, mode=mode, voids=voids, config=self.config))
        refs = [self.path_ref(p) for _, p in matches]
        for ref in reversed(refs):
            path = ref.unref()
            if path is None:
                continue
            scope: Range | None = location_range(self.doc, path)
            if split and range_ref is not None and range_ref.current is not None:
                scope = range_ref.current.intersection(scope)  # type: ignore[arg-type]
            if scope is None:
                continue
            self.lift_nodes(at=scope, match=_match_children_of(path), voids=voids)
        if range_ref is not None:
            range_ref.unref()

    # -- text ------------------------------------------------------------

    def insert_text(self, value: str, *, at: Location | None = None, voids: bool = False) -> None:
        cfg = self.config
        if at is None and self.doc.selection is not None and self.doc.marks is not None:
            pending = dict(self.doc.marks)
            self.insert_nodes(Text(value, pending), voids=voids)
            self.doc = dataclasses.replace(self.doc, marks=None)
            return

        at = self._default_at(at)
        if at is None:
            return
        if isinstance(at, tuple):
            at = location_range(self.doc, at)
        if isinstance(at, Range):
            if at.is_collapsed:
                at = at.anchor
            else:
                start_point, end_point = at.edges()
                if not voids and void_above(self.doc, end_point, config=cfg) is not None:
                    return
                start_ref = self.point_ref(start_point)
                end_ref = self.point_ref(end_point)
                self.delete(at=at, voids=voids)
                at = start_ref.unref() or end_ref.unref()
                if at is None:
                    return
                self.set_selection(Range.collapsed(at))

        if not voids and void_above(self.doc, at, config=cfg) is not None:
            return
        if value:
            self.apply(InsertText(at.path, at.offset, value))

    def insert_break(self) -> None:
        self.split_nodes(always=True)

    def delete(
        self,
        *,
        at: Location | None = None,
        unit: Unit = "character",
        distance: int = 1,
        reverse: bool = False,
        hanging: bool = False,
        voids: bool = False,
    ) -> None:
        """Delete a location, or ``distance`` units around a point."""
        cfg = self.config
        at = self._default_at(at)
        if at is None:
            return
        if isinstance(at, Range) and at.is_collapsed:
            at = at.anchor

        if isinstance(at, Point):
            void = void_above(self.doc, at, mode="highest", config=cfg)
            if not voids and void is not None:
                at = void[1]
            else:
                step = point_before if reverse else point_after
                target = step(self.doc, at, unit, distance=distance, voids=voids, config=cfg)
                if target is None:
                    target = start(self.doc, ()) if reverse else end(self.doc, ())
                at = Range(at, target)
                hanging = True

        if isinstance(at, tuple):
            self.remove_nodes(at=at, voids=voids)
            return
        if at.is_collapsed:
            return
        if not hanging:
            at = unhang(self.doc, at, voids=voids, config=cfg)

        start_point, end_point = at.edges()
        start_block = block_above(self.doc, start_point, cfg)
        end_block = block_above(self.doc, end_point, cfg)
        across_blocks = (
            start_block is not None and end_block is not None and start_block[1] != end_block[1]
        )

        is_single_text = start_point.path == end_point.path
        start_void = None if voids else void_above(self.doc, start_point, mode="highest", config=cfg)
        end_void = None if voids else void_above(self.doc, end_point, mode="highest", config=cfg)

        # Step edges that sit inside voids out onto the neighbouring text of
        # the same block so the voids are removed whole.
        if start_void is not None:
            before = point_before(self.doc, start_point, config=cfg)
            if before is not None and start_block is not None and is_ancestor(start_block[1], before.path):
                start_point = before
        if end_void is not None:
            after = point_after(self.doc, end_point, config=cfg)
            if after is not None and end_block is not None and is_ancestor(end_block[1], after.path):
                end_point = after

        doomed: list[Path] = []
        last_path: Path | None = None
        for node, path in nodes(self.doc, at=at, voids=voids, config=cfg):
            if last_path is not None and is_common(last_path, path):
                continue
            if (not voids and cfg.is_void(node)) or (
                not is_common(path, start_point.path) and not is_common(path, end_point.path)
            ):
                doomed.append(path)
                last_path = path

        path_refs = [self.path_ref(p) for p in doomed]
        start_ref = self.point_ref(start_point)
        end_ref = self.point_ref(end_point)

        if not is_single_text and start_void is None:
            point = start_ref.current
            if point is not None:
                value = leaf(self.doc, point.path).text[start_point.offset :]
                if value:
                    self.apply(RemoveText(point.path, start_point.offset, value))

        for ref in reversed(path_refs):
            path = ref.unref()
            if path:
                self.apply(RemoveNode(path, get_node(self.doc, path)))  # type: ignore[arg-type]

        if end_void is None:
            point = end_ref.current
            if point is not None:
                offset = start_point.offset if is_single_text else 0
                value = leaf(self.doc, point.path).text[offset : end_point.offset]
                if value:
                    self.apply(RemoveText(point.path, offset, value))

        merge_at = end_ref.unref()
        start_ref.unref()
        if not is_single_text and across_blocks and merge_at is not None:
            self.merge_nodes(at=merge_at, hanging=True, voids=voids)

    # -- marks -----------------------------------------------------------

    def _markable_text(self) -> Predicate:
        cfg = self.config

        def _match(node: Node, path: Path) -> bool:
            if not isinstance(node, Text):
                return False
            holder = parent(self.doc, path)
            return not cfg.is_void(holder) or cfg.is_markable_void(holder)

        return _match

    def _set_pending(self, pending: Mapping[str, Any]) -> None:
        # Pending marks that only restate the cursor's marks are dropped.
        current = leaf_marks(self.doc, self.config)
        value = None if current is not None and dict(pending) == current else dict(pending)
        self.doc = dataclasses.replace(self.doc, marks=value)

    def add_mark(self, key: str, value: Any = True) -> None:
        sel = self.doc.selection
        if sel is None:
            return
        if sel.is_expanded:
            self.set_nodes({key: value}, match=self._markable_text(), split=True, voids=True)
        else:
            self._set_pending({**(marks(self.doc, self.config) or {}), key: value})

    def remove_mark(self, key: str) -> None:
        sel = self.doc.selection
        if sel is None:
            return
        if sel.is_expanded:
            self.set_nodes({key: None}, match=self._markable_text(), split=True, voids=True)
        else:
            pending = dict(marks(self.doc, self.config) or {})
            pending.pop(key, None)
            self._set_pending(pending)


# =============================================================================
# Public transforms
# =============================================================================


def insert_nodes(
    doc: Document,
    new_nodes: Descendant | Iterable[Descendant],
    *,
    at: Location | None = None,
    match: Predicate | None = None,
    select: bool | None = None,
    config: EditorConfig | None = None,
) -> Document:
    """Insert nodes at a location (default: the selection).

    A point in the middle of a Text splits it; an expanded range is deleted
    first. Inserting at the selection moves the cursor to the end of the
    inserted nodes.

    Raises:
        InvalidPathError: If ``at`` is a path that does not resolve.

    """
    draft = Draft(doc, config)
    draft.insert_nodes(new_nodes, at=at, match=match, select=select)
    return draft.commit()


def remove_nodes(
    doc: Document,
    match: Predicate | None = None,
    *,
    at: Location | None = None,
    mode: Mode = "lowest",
    config: EditorConfig | None = None,
) -> Document:
    """Remove the matched nodes.

    The scope is ``at``, else the selection, else (when a match is given)
    the whole document.
    """
    draft = Draft(doc, config)
    draft.remove_nodes(at=at, match=match, mode=mode)
    return draft.commit()


def set_nodes(
    doc: Document,
    props: Mapping[str, Any],
    match: Predicate | None = None,
    *,
    at: Location | None = None,
    mode: Mode = "lowest",
    split: bool = False,
    config: EditorConfig | None = None,
) -> Document:
    """Shallow-merge ``props`` onto the matched nodes; a None value unsets a key."""
    draft = Draft(doc, config)
    draft.set_nodes(props, at=at, match=match, mode=mode, split=split)
    return draft.commit()


def wrap_nodes(
    doc: Document,
    wrapper: Element,
    match: Predicate | None = None,
    *,
    at: Location | None = None,
    mode: Mode = "lowest",
    split: bool = False,
    config: EditorConfig | None = None,
) -> Document:
    draft = Draft(doc, config)
    draft.wrap_nodes(wrapper, at=at, match=match, mode=mode, split=split)
    return draft.commit()


def unwrap_nodes(
    doc: Document,
    match: Predicate | None = None,
    *,
    at: Location | None = None,
    mode: Mode = "lowest",
    split: bool = False,
    config: EditorConfig | None = None,
) -> Document:
    draft = Draft(doc, config)
    draft.unwrap_nodes(at=at, match=match, mode=mode, split=split)
    return draft.commit()


def lift_nodes(
    doc: Document,
    match: Predicate | None = None,
    *,
    at: Location | None = None,
    mode: Mode = "lowest",
    config: EditorConfig | None = None,
) -> Document:
    draft = Draft(doc, config)
    draft.lift_nodes(at=at, match=match, mode=mode)
    return draft.commit()


def split_nodes(
    doc: Document,
    match: Predicate | None = None,
    *,
    at: Location | None = None,
    always: bool = False,
    config: EditorConfig | None = None,
) -> Document:
    draft = Draft(doc, config)
    draft.split_nodes(at=at, match=match, always=always)
    return draft.commit()


def merge_nodes(
    doc: Document,
    match: Predicate | None = None,
    *,
    at: Location | None = None,
    config: EditorConfig | None = None,
) -> Document:
    draft = Draft(doc, config)
    draft.merge_nodes(at=at, match=match)
    return draft.commit()


def move_nodes(
    doc: Document,
    to: Path,
    match: Predicate | None = None,
    *,
    at: Location | None = None,
    config: EditorConfig | None = None,
) -> Document:
    draft = Draft(doc, config)
    draft.move_nodes(to=to, at=at, match=match)
    return draft.commit()


def select(doc: Document, target: Location, *, config: EditorConfig | None = None) -> Document:
    """Select a path, point or range, clamped to valid points."""
    draft = Draft(doc, config)
    draft.select(target)
    return draft.commit()


def set_selection(doc: Document, rng: Range | None, *, config: EditorConfig | None = None) -> Document:
    draft = Draft(doc, config)
    draft.set_selection(rng)
    return draft.commit()


def deselect(doc: Document, *, config: EditorConfig | None = None) -> Document:
    draft = Draft(doc, config)
    draft.deselect()
    return draft.commit()


def collapse(doc: Document, edge: Edge = "anchor", *, config: EditorConfig | None = None) -> Document:
    draft = Draft(doc, config)
    draft.collapse(edge)
    return draft.commit()


def move(
    doc: Document,
    distance: int = 1,
    *,
    unit: Unit = "character",
    edge: Edge | None = None,
    config: EditorConfig | None = None,
) -> Document:
    """Move the selection by ``distance`` units (negative moves backward)."""
    draft = Draft(doc, config)
    draft.move(distance, unit=unit, edge=edge)
    return draft.commit()


def add_mark(doc: Document, key: str, value: Any = True, *, config: EditorConfig | None = None) -> Document:
    """Set a mark on the selected text, or as a pending mark at a cursor."""
    draft = Draft(doc, config)
    draft.add_mark(key, value)
    return draft.commit()


def remove_mark(doc: Document, key: str, *, config: EditorConfig | None = None) -> Document:
    draft = Draft(doc, config)
    draft.remove_mark(key)
    return draft.commit()


def insert_text(
    doc: Document,
    value: str,
    *,
    at: Location | None = None,
    config: EditorConfig | None = None,
) -> Document:
    """Type text at a location (default: the selection).

    An expanded selection is deleted first. Pending marks are applied to
    the typed text and then cleared.
    """
    draft = Draft(doc, config)
    draft.insert_text(value, at=at)
    return draft.commit()


def insert_break(doc: Document, *, config: EditorConfig | None = None) -> Document:
    draft = Draft(doc, config)
    draft.insert_break()
    return draft.commit()


def delete(
    doc: Document,
    *,
    at: Location | None = None,
    unit: Unit = "character",
    distance: int = 1,
    reverse: bool = False,
    config: EditorConfig | None = None,
) -> Document:
    draft = Draft(doc, config)
    draft.delete(at=at, unit=unit, distance=distance, reverse=reverse)
    return draft.commit()


def delete_backward(doc: Document, unit: Unit = "character", *, config: EditorConfig | None = None) -> Document:
    draft = Draft(doc, config)
    sel = doc.selection
    if sel is not None and sel.is_collapsed:
        draft.delete(unit=unit, reverse=True)
    elif sel is not None:
        draft.delete()
    return draft.commit()


def delete_forward(doc: Document, unit: Unit = "character", *, config: EditorConfig | None = None) -> Document:
    draft = Draft(doc, config)
    sel = doc.selection
    if sel is not None and sel.is_collapsed:
        draft.delete(unit=unit)
    elif sel is not None:
        draft.delete()
    return draft.commit()


__all__ = [
    "Draft",
    "Edge",
    "PathRef",
    "PointRef",
    "RangeRef",
    "add_mark",
    "collapse",
    "delete",
    "delete_backward",
    "delete_forward",
    "deselect",
    "insert_break",
    "insert_nodes",
    "insert_text",
    "lift_nodes",
    "merge_nodes",
    "move",
    "move_nodes",
    "remove_mark",
    "remove_nodes",
    "select",
    "set_nodes",
    "set_selection",
    "split_nodes",
    "unwrap_nodes",
    "wrap_nodes",
]
