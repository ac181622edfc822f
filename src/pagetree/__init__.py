"""Materialized-path page tree: queries, inserts and moves."""

from pagetree.core.store.sqlite_store import SqliteNodeStore
from pagetree.core.tree.cursor import ANY, PageCursor
from pagetree.core.tree.mover import MovePlan, Position
from pagetree.core.tree.pages import Pages
from pagetree.models.page import Page, PageDraft, PageView
from pagetree.permissions import RequestContext, RoleGuard
from pagetree.protocols import NodeStore, PermissionGuard

__all__ = [
    "ANY",
    "MovePlan",
    "NodeStore",
    "Page",
    "PageCursor",
    "PageDraft",
    "PageView",
    "Pages",
    "PermissionGuard",
    "Position",
    "RequestContext",
    "RoleGuard",
    "SqliteNodeStore",
]
