"""Composable read-only queries over the page store."""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

from pagetree.core.tree.paths import ancestor_paths
from pagetree.errors import InvalidQuery
from pagetree.models.page import Page, PageView
from pagetree.permissions import can_view
from pagetree.protocols import NodeStore, PermissionGuard

_PAGE_FIELDS = frozenset(f.name for f in fields(Page))
_IDENTITY_FIELDS = ("id", "slug", "path")
_STATE_FIELDS = ("published", "trash")


class Match(Enum):
    """Wildcard for boolean state filters."""

    ANY = "any"


ANY = Match.ANY


@dataclass(frozen=True)
class AncestorOptions:
    """Which ancestors to attach to each result.

    ``depth`` limits the chain to the nearest N ancestors (None means all).
    The attached chain is always ordered root first.
    """

    depth: int | None = None
    children: bool = False


@dataclass(frozen=True)
class CursorOptions:
    id: str | None = None
    slug: str | None = None
    path: str | None = None
    criteria: Mapping[str, Any] = field(default_factory=dict)
    published: bool | Match = True
    trash: bool | Match = False
    ancestors: AncestorOptions | None = None
    children: bool = False

    def validate(self) -> None:
        """Raise InvalidQuery for malformed or conflicting settings."""
        unknown = set(self.criteria) - _PAGE_FIELDS
        if unknown:
            msg = f"Unknown page fields in criteria: {sorted(unknown)!r}"
            raise InvalidQuery(msg)

        for name in _STATE_FIELDS:
            if name in self.criteria:
                msg = f"Filter {name!r} through the {name}() option, not criteria"
                raise InvalidQuery(msg)
            value = getattr(self, name)
            if not isinstance(value, bool) and value is not ANY:
                msg = f"{name} must be True, False or ANY, got {value!r}"
                raise InvalidQuery(msg)

        for name in _IDENTITY_FIELDS:
            value = getattr(self, name)
            if value is not None and name in self.criteria and self.criteria[name] != value:
                msg = f"Conflicting {name} filters: {value!r} and {self.criteria[name]!r}"
                raise InvalidQuery(msg)

        page_id = self.id if self.id is not None else self.criteria.get("id")
        path = self.path if self.path is not None else self.criteria.get("path")
        if page_id is not None and path is not None:
            msg = f"Conflicting identity filters: id={page_id!r} and path={path!r}"
            raise InvalidQuery(msg)

        if self.ancestors is not None and self.ancestors.depth is not None:
            depth = self.ancestors.depth
            if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
                msg = f"Ancestor depth must be a positive integer, got {depth!r}"
                raise InvalidQuery(msg)

    def store_criteria(self) -> dict[str, Any]:
        criteria = dict(self.criteria)
        for name in _IDENTITY_FIELDS:
            value = getattr(self, name)
            if value is not None:
                criteria[name] = value
        for name in _STATE_FIELDS:
            value = getattr(self, name)
            if value is not ANY:
                criteria[name] = value
        return criteria


class PageCursor:
    """A query over the page tree for one request context.

    Every option method returns a new cursor, so a cursor can be shared and
    narrowed further::

        cursor = PageCursor(store, guard, ctx, {"slug": "child"}).ancestors(depth=1)
        view = cursor.to_object()

    The published/trash options select results only. Attached ancestor
    chains and child lists are structural and pass through the guard alone,
    so a draft still gets its published ancestors. Pages the guard does not
    let the context view are dropped everywhere.
    """

    def __init__(
        self,
        store: NodeStore,
        guard: PermissionGuard,
        context: Any,
        criteria: Mapping[str, Any] | None = None,
        *,
        options: CursorOptions | None = None,
    ) -> None:
        self.store = store
        self.guard = guard
        self.context = context
        base = options or CursorOptions()
        if criteria:
            base = replace(base, criteria={**base.criteria, **criteria})
        base.validate()
        self.options = base

    def _with(self, **changes: Any) -> "PageCursor":
        return PageCursor(
            self.store, self.guard, self.context, options=replace(self.options, **changes)
        )

    # --- Options ---

    def id(self, page_id: str) -> "PageCursor":
        return self._with(id=page_id)

    def slug(self, slug: str) -> "PageCursor":
        return self._with(slug=slug)

    def path(self, path: str) -> "PageCursor":
        return self._with(path=path)

    def where(self, **criteria: Any) -> "PageCursor":
        return self._with(criteria={**self.options.criteria, **criteria})

    def published(self, value: bool | Match = True) -> "PageCursor":
        return self._with(published=value)

    def trash(self, value: bool | Match = True) -> "PageCursor":
        return self._with(trash=value)

    def ancestors(
        self,
        enabled: bool = True,
        *,
        depth: int | None = None,
        children: bool = False,
    ) -> "PageCursor":
        """Attach ancestor chains; ``depth`` keeps only the nearest N."""
        if not enabled:
            return self._with(ancestors=None)
        return self._with(ancestors=AncestorOptions(depth=depth, children=children))

    def children(self, enabled: bool = True) -> "PageCursor":
        return self._with(children=enabled)

    # --- Terminals ---

    def to_list(self) -> list[PageView]:
        """Return every matching page, ordered by rank then path."""
        return [self._view(page) for page in self._pages()]

    def to_object(self) -> PageView | None:
        """Return the best match, or None when nothing matches."""
        pages = self._pages()
        return self._view(pages[0]) if pages else None

    def count(self) -> int:
        return len(self._pages())

    # --- Internals ---

    def _visible(self, page: Page) -> bool:
        opts = self.options
        if opts.published is not ANY and page.published != opts.published:
            return False
        if opts.trash is not ANY and page.trash != opts.trash:
            return False
        return can_view(self.guard, self.context, page)

    def _pages(self) -> list[Page]:
        pages = self.store.find(self.options.store_criteria())
        visible = [p for p in pages if self._visible(p)]
        return sorted(visible, key=lambda p: (p.rank, p.path))

    def _attachable(self, page: Page) -> bool:
        return can_view(self.guard, self.context, page)

    def _children_of(self, page: Page) -> tuple[Page, ...]:
        kids = [c for c in self.store.children(page.path) if self._attachable(c)]
        return tuple(sorted(kids, key=lambda p: (p.rank, p.path)))

    def _ancestors_of(self, page: Page, opts: AncestorOptions) -> tuple[PageView, ...]:
        paths = ancestor_paths(page.path)
        if opts.depth is not None:
            paths = paths[-opts.depth :]
        found = {p.path: p for p in self.store.get_by_paths(paths)}

        chain: list[PageView] = []
        for path in paths:
            ancestor = found.get(path)
            if ancestor is None or not self._attachable(ancestor):
                continue
            kids = self._children_of(ancestor) if opts.children else ()
            chain.append(PageView(page=ancestor, children=kids))
        return tuple(chain)

    def _view(self, page: Page) -> PageView:
        opts = self.options
        ancestors = self._ancestors_of(page, opts.ancestors) if opts.ancestors else ()
        kids = self._children_of(page) if opts.children else ()
        return PageView(page=page, ancestors=ancestors, children=kids)
