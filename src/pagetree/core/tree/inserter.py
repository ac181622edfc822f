"""Create new pages under an existing parent."""

import uuid
from typing import Any

from loguru import logger

from pagetree.core.tree.paths import child_path, validate_slug
from pagetree.errors import (
    DuplicateIdError,
    NotFoundError,
    PermissionDeniedError,
    SlugConflictError,
)
from pagetree.models.page import Page, PageDraft
from pagetree.permissions import can_edit
from pagetree.protocols import NodeStore, PermissionGuard


def unique_slug(base: str, taken: set[str]) -> str:
    """Append numbers to ``base`` until it does not match any slug in ``taken``."""
    slug = base
    count = 0
    while slug in taken:
        count += 1
        slug = f"{base}-{count}"
    return slug


class Inserter:
    """Append new pages as the last child of a parent."""

    def __init__(self, store: NodeStore, guard: PermissionGuard) -> None:
        self.store = store
        self.guard = guard

    def insert(
        self,
        context: Any,
        parent_id: str,
        draft: PageDraft,
        *,
        dedupe: bool = False,
    ) -> Page:
        """Insert ``draft`` as the last child of ``parent_id``.

        Args:
            context: Request context handed to the permission guard.
            parent_id: ID of the parent page; needs edit capability.
            draft: Slug, type and content fields of the new page.
            dedupe: On a sibling slug collision, append ``-1``, ``-2``, ...
                instead of raising SlugConflictError.

        Returns:
            The stored page with path, level and rank filled in.
        """
        validate_slug(draft.slug)

        parent = self.store.get(parent_id)
        if parent is None:
            msg = f"Parent page {parent_id!r} not found"
            raise NotFoundError(msg)
        if not can_edit(self.guard, context, parent):
            msg = f"Not allowed to add pages under {parent.path!r}"
            raise PermissionDeniedError(msg)

        if draft.id is not None and self.store.get(draft.id) is not None:
            msg = f"Page id {draft.id!r} is already in use"
            raise DuplicateIdError(msg)

        siblings = self.store.children(parent.path)
        taken = {s.slug for s in siblings}
        slug = draft.slug
        if slug in taken:
            if not dedupe:
                msg = f"A page with slug {slug!r} already exists under {parent.path!r}"
                raise SlugConflictError(msg)
            slug = unique_slug(slug, taken)

        # Ranks are gapless over all children, the parked trash can included.
        rank = len(siblings)

        page = Page(
            id=draft.id or uuid.uuid4().hex,
            slug=slug,
            path=child_path(parent.path, slug),
            level=parent.level + 1,
            rank=rank,
            type=draft.type,
            title=draft.title,
            published=draft.published,
            trash=parent.trash,
        )
        self.store.upsert_many([page])
        logger.info("Inserted page {} at {} (rank {})", page.id, page.path, page.rank)
        return page
