"""Single entry point bundling the cursor, inserter and mover."""

from collections.abc import Mapping
from typing import Any

from pagetree.core.tree.cursor import PageCursor
from pagetree.core.tree.inserter import Inserter
from pagetree.core.tree.mover import MovePlan, Mover, Position
from pagetree.models.page import Page, PageDraft
from pagetree.protocols import NodeStore, PermissionGuard


class Pages:
    """The page tree as seen by surrounding code (rendering, APIs, CLI)."""

    def __init__(self, store: NodeStore, guard: PermissionGuard) -> None:
        self.store = store
        self.guard = guard
        self.inserter = Inserter(store, guard)
        self.mover = Mover(store, guard)

    def find(self, context: Any, criteria: Mapping[str, Any] | None = None) -> PageCursor:
        return PageCursor(self.store, self.guard, context, criteria)

    def insert(
        self, context: Any, parent_id: str, draft: PageDraft, *, dedupe: bool = False
    ) -> Page:
        return self.inserter.insert(context, parent_id, draft, dedupe=dedupe)

    def move(
        self,
        context: Any,
        page_id: str,
        target_id: str,
        position: str | Position,
        *,
        dedupe: bool = False,
    ) -> MovePlan:
        return self.mover.move(context, page_id, target_id, position, dedupe=dedupe)

    def move_to_trash(self, context: Any, page_id: str) -> MovePlan:
        return self.mover.move_to_trash(context, page_id)
