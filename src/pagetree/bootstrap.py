"""Park the system fixtures: the home page and the trash can."""

import uuid

from loguru import logger

from pagetree.config import ROOT_PATH, ROOT_TYPE, TRASH_SLUG, TRASH_TYPE
from pagetree.core.tree.paths import child_path
from pagetree.models.page import Page
from pagetree.protocols import NodeStore


def park_fixtures(store: NodeStore) -> tuple[Page, Page]:
    """Create the root and trash pages if they are missing.

    Safe to call on every startup. Returns (root, trash).
    """
    root = store.get_by_path(ROOT_PATH)
    if root is None:
        root = Page(
            id=uuid.uuid4().hex,
            slug="",
            path=ROOT_PATH,
            level=0,
            rank=0,
            type=ROOT_TYPE,
            title="Home",
            published=True,
            parked=True,
        )
        store.upsert_many([root])
        logger.info("Parked home page {}", root.id)

    trash_path = child_path(ROOT_PATH, TRASH_SLUG)
    trash = store.get_by_path(trash_path)
    if trash is None:
        trash = Page(
            id=uuid.uuid4().hex,
            slug=TRASH_SLUG,
            path=trash_path,
            level=1,
            rank=len(store.children(ROOT_PATH)),
            type=TRASH_TYPE,
            title="Trash",
            published=False,
            trash=True,
            parked=True,
        )
        store.upsert_many([trash])
        logger.info("Parked trash page {}", trash.id)

    return root, trash
