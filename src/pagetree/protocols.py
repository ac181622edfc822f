"""Protocols for the collaborators the tree engine consumes."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from pagetree.models.page import Page


@runtime_checkable
class NodeStore(Protocol):
    """Document collection of pages keyed by id, queryable by path prefix."""

    def get(self, page_id: str) -> Page | None:
        """Return the page with this id, or None."""
        ...

    def get_by_path(self, path: str) -> Page | None:
        """Return the page at this exact path, or None."""
        ...

    def get_by_paths(self, paths: Sequence[str]) -> list[Page]:
        """Return the pages found at any of the given paths, in no particular order."""
        ...

    def find(self, criteria: Mapping[str, Any]) -> list[Page]:
        """Return pages whose fields equal every value in ``criteria``."""
        ...

    def children(self, path: str) -> list[Page]:
        """Return the direct children of the page at ``path``, ordered by rank."""
        ...

    def scan_subtree(self, path: str) -> list[Page]:
        """Return the page at ``path`` and every page below it, in any order."""
        ...

    def upsert_many(self, pages: Iterable[Page]) -> None:
        """Write pages in one batch; raise PartialFailureError if some were rejected."""
        ...


@runtime_checkable
class PermissionGuard(Protocol):
    """Capability checks for a request context. Owns no tree state."""

    def can_view(self, context: Any, page: Page) -> bool:
        """True when the context may see this page."""
        ...

    def can_edit(self, context: Any, page: Page) -> bool:
        """True when the context may modify this page or its children."""
        ...
