"""Domain models for the page tree."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Page:
    """A single page in the tree.

    ``path`` is the materialized path (ancestor slugs plus the page's own
    slug), ``level`` its depth (root = 0) and ``rank`` its zero-based position
    among the siblings sharing the same parent path.
    """

    id: str
    slug: str
    path: str
    level: int
    rank: int
    type: str
    title: str = ""
    published: bool = False
    trash: bool = False
    parked: bool = False


@dataclass(frozen=True)
class PageDraft:
    """The caller-supplied part of a page about to be inserted."""

    slug: str
    type: str
    title: str = ""
    published: bool = False
    id: str | None = None


@dataclass(frozen=True)
class PageView:
    """A page with its attached tree context.

    ``ancestors`` is ordered root first. Each ancestor is itself a view and
    carries its own ``children`` when those were requested.
    """

    page: Page
    ancestors: tuple["PageView", ...] = ()
    children: tuple[Page, ...] = ()
