"""Request context and permission guards."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from pagetree.models.page import Page
from pagetree.protocols import PermissionGuard

ADMIN = "admin"
EDIT = "edit"
VIEW_DRAFTS = "view-drafts"


@dataclass(frozen=True)
class RequestContext:
    """Identity and capabilities of whoever is asking."""

    user: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def anonymous(cls) -> "RequestContext":
        return cls()

    @classmethod
    def admin(cls, user: str = "admin") -> "RequestContext":
        return cls(user=user, permissions=frozenset({ADMIN}))

    def has(self, permission: str) -> bool:
        return ADMIN in self.permissions or permission in self.permissions


class RoleGuard:
    """Default guard driven by the permission names on a RequestContext.

    Anyone may view published pages outside the trash. Drafts and trashed
    pages need ``view-drafts`` or ``edit``. Changes need ``edit``.
    """

    def can_view(self, context: RequestContext, page: Page) -> bool:
        if page.published and not page.trash:
            return True
        return context.has(VIEW_DRAFTS) or context.has(EDIT)

    def can_edit(self, context: RequestContext, page: Page) -> bool:
        return context.has(EDIT)


def _checked(check: Callable[[Any, Page], bool], context: Any, page: Page) -> bool:
    try:
        return bool(check(context, page))
    except Exception:
        logger.opt(exception=True).warning(
            "Permission check {} raised for page {}; treating as denied",
            getattr(check, "__name__", check), page.id,
        )
        return False


def can_view(guard: PermissionGuard, context: Any, page: Page) -> bool:
    """Ask the guard whether ``context`` may see ``page``; a raising guard denies."""
    return _checked(guard.can_view, context, page)


def can_edit(guard: PermissionGuard, context: Any, page: Page) -> bool:
    """Ask the guard whether ``context`` may edit ``page``; a raising guard denies."""
    return _checked(guard.can_edit, context, page)
