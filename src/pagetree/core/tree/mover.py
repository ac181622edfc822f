"""Relocate pages, with their subtrees, among siblings.

A move is computed as a ``MovePlan`` by ``plan_move``, a pure function over
the records it is given, and then written as one batch. The batch is not
atomic: readers may see a partially rewritten subtree, and a rejected batch
surfaces as ``PartialFailureError`` with no rollback.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from loguru import logger

from pagetree.config import TRASH_TYPE
from pagetree.core.tree.inserter import unique_slug
from pagetree.core.tree.paths import child_path, is_within, parent_path, rebase
from pagetree.errors import (
    CannotMoveParkedError,
    CyclicMoveError,
    InvalidPositionError,
    NotFoundError,
    PartialFailureError,
    PermissionDeniedError,
    SlugConflictError,
)
from pagetree.models.page import Page
from pagetree.permissions import can_edit
from pagetree.protocols import NodeStore, PermissionGuard


class Position(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    INSIDE = "inside"

    @classmethod
    def parse(cls, value: "str | Position") -> "Position":
        try:
            return cls(value)
        except ValueError:
            msg = f"Unknown move position {value!r}; expected one of {[p.value for p in cls]}"
            raise InvalidPositionError(msg) from None


@dataclass(frozen=True)
class MovePlan:
    """Records to rewrite for one move.

    ``page`` is the moved page as it will be stored. ``updates`` holds every
    changed record: the moved subtree plus rank-shifted siblings at the
    origin and the destination. An empty ``updates`` means the move is a no-op.
    """

    page: Page
    updates: tuple[Page, ...]

    @property
    def noop(self) -> bool:
        return not self.updates


def _by_rank(pages: Iterable[Page]) -> list[Page]:
    return sorted(pages, key=lambda p: (p.rank, p.path))


def plan_move(
    page: Page,
    target: Page,
    position: Position,
    *,
    destination_parent: Page,
    subtree: Sequence[Page],
    origin_siblings: Sequence[Page],
    destination_siblings: Sequence[Page],
    slug: str | None = None,
) -> MovePlan:
    """Compute the record changes for moving ``page`` relative to ``target``.

    Args:
        page: The page being moved.
        target: The page the position is relative to.
        position: before/after ``target``, or inside it as the last child.
        destination_parent: ``target`` for inside, else ``target``'s parent.
        subtree: ``page`` and all of its descendants.
        origin_siblings: Current children of ``page``'s parent.
        destination_siblings: Current children of ``destination_parent``.
        slug: New slug for ``page``; its own slug when None.

    Returns:
        A MovePlan; nothing is written here.
    """
    slug = page.slug if slug is None else slug
    new_path = child_path(destination_parent.path, slug)
    level_delta = destination_parent.level + 1 - page.level
    old_parent = parent_path(page.path)

    changed: dict[str, Page] = {}
    for p in subtree:
        changed[p.id] = replace(
            p,
            path=rebase(p.path, page.path, new_path),
            level=p.level + level_delta,
            trash=destination_parent.trash,
        )
    moved = replace(changed[page.id], slug=slug)

    # Close the gap at the origin.
    if old_parent != destination_parent.path:
        remaining = _by_rank(s for s in origin_siblings if s.id != page.id)
        for rank, sibling in enumerate(remaining):
            if sibling.rank != rank:
                changed[sibling.id] = replace(sibling, rank=rank)

    # Open a slot at the destination.
    ordered = _by_rank(s for s in destination_siblings if s.id != page.id)
    if position is Position.INSIDE:
        index = len(ordered)
    else:
        ids = [s.id for s in ordered]
        if target.id not in ids:
            msg = f"Target {target.id!r} is not a child of {destination_parent.path!r}"
            raise ValueError(msg)
        index = ids.index(target.id) + (1 if position is Position.AFTER else 0)
    ordered.insert(index, moved)

    for rank, sibling in enumerate(ordered):
        if sibling.id == page.id:
            changed[page.id] = replace(moved, rank=rank)
        elif sibling.rank != rank:
            changed[sibling.id] = replace(sibling, rank=rank)

    originals = {p.id: p for p in (*subtree, *origin_siblings, *destination_siblings)}
    updates = tuple(p for pid, p in changed.items() if originals.get(pid) != p)
    return MovePlan(page=changed[page.id], updates=updates)


class Mover:
    """Validate, plan and apply page moves."""

    def __init__(self, store: NodeStore, guard: PermissionGuard) -> None:
        self.store = store
        self.guard = guard

    def _resolve(self, page_id: str, role: str) -> Page:
        page = self.store.get(page_id)
        if page is None:
            msg = f"{role} page {page_id!r} not found"
            raise NotFoundError(msg)
        return page

    def _destination_parent(self, target: Page, position: Position) -> Page:
        if position is Position.INSIDE:
            return target
        parent = parent_path(target.path)
        if parent is None:
            msg = f"Cannot place a page {position.value} the root"
            raise InvalidPositionError(msg)
        destination = self.store.get_by_path(parent)
        if destination is None:
            msg = f"Parent of {target.path!r} not found"
            raise NotFoundError(msg)
        return destination

    def move(
        self,
        context: Any,
        page_id: str,
        target_id: str,
        position: str | Position,
        *,
        dedupe: bool = False,
    ) -> MovePlan:
        """Move ``page_id`` before, after or inside ``target_id``.

        All validation happens before anything is written. Moving a page to
        the position it already holds is validated, then returns a no-op plan.
        With ``dedupe`` a destination slug collision renames the moved page
        (``-1``, ``-2``, ...) instead of raising.

        Raises:
            NotFoundError: page, target or the destination parent is missing.
            CannotMoveParkedError: the page is a parked fixture.
            CyclicMoveError: the target is the page or one of its descendants.
            PermissionDeniedError: no edit capability on page or destination.
            SlugConflictError: the destination has another child with this slug.
            PartialFailureError: the batched write was only partly committed.
        """
        position = Position.parse(position)
        page = self._resolve(page_id, "Moved")
        target = self._resolve(target_id, "Target")

        if page.parked:
            msg = f"Page {page.path!r} is parked and cannot be moved"
            raise CannotMoveParkedError(msg)
        if is_within(target.path, page.path):
            msg = f"Cannot move {page.path!r} {position.value} {target.path!r}: target is inside it"
            raise CyclicMoveError(msg)

        destination = self._destination_parent(target, position)
        for checked in (page, destination):
            if not can_edit(self.guard, context, checked):
                msg = f"Not allowed to move {page.path!r} into {destination.path!r}"
                raise PermissionDeniedError(msg)

        destination_siblings = self.store.children(destination.path)
        taken = {s.slug for s in destination_siblings if s.id != page.id}
        slug = page.slug
        if slug in taken:
            if not dedupe:
                msg = f"A page with slug {slug!r} already exists under {destination.path!r}"
                raise SlugConflictError(msg)
            slug = unique_slug(slug, taken)

        old_parent = parent_path(page.path)
        if old_parent == destination.path:
            origin_siblings = destination_siblings
        elif old_parent is None:
            origin_siblings = [page]
        else:
            origin_siblings = self.store.children(old_parent)

        plan = plan_move(
            page,
            target,
            position,
            destination_parent=destination,
            subtree=self.store.scan_subtree(page.path),
            origin_siblings=origin_siblings,
            destination_siblings=destination_siblings,
            slug=slug,
        )
        if plan.noop:
            logger.debug("Move of {} {} {} is a no-op", page.path, position.value, target.path)
            return plan

        logger.debug("Move plan for {}: {} records", page.path, len(plan.updates))
        try:
            self.store.upsert_many(plan.updates)
        except PartialFailureError as e:
            logger.error(
                "Move of {} to {} partially written: {} ok, {} failed {}",
                page.path, plan.page.path, len(e.written), len(e.failed), sorted(e.failed),
            )
            raise

        logger.info(
            "Moved {} to {} (level {}, rank {})",
            page.path, plan.page.path, plan.page.level, plan.page.rank,
        )
        return plan

    def move_to_trash(self, context: Any, page_id: str) -> MovePlan:
        """Soft-delete a page by moving it, with its subtree, into the trash can.

        The trash collects pages from the whole tree, so a slug already taken
        there is renamed rather than refused.
        """
        cans = self.store.find({"type": TRASH_TYPE, "parked": True})
        if not cans:
            msg = "No parked trash page exists"
            raise NotFoundError(msg)
        return self.move(context, page_id, cans[0].id, Position.INSIDE, dedupe=True)
