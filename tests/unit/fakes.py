"""Fake implementations of the store and guard collaborators."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict
from typing import Any

from pagetree.core.tree.paths import is_within, level_of
from pagetree.errors import PartialFailureError
from pagetree.models.page import Page


class FakeNodeStore:
    """In-memory page store.

    Records every batch written, and rejects writes for any id listed in
    ``fail_ids`` so partial failures can be provoked.
    """

    def __init__(self, pages: Iterable[Page] = ()) -> None:
        self.pages: dict[str, Page] = {p.id: p for p in pages}
        self.fail_ids: set[str] = set()
        self.batches: list[list[Page]] = []

    def get(self, page_id: str) -> Page | None:
        return self.pages.get(page_id)

    def get_by_path(self, path: str) -> Page | None:
        return next((p for p in self.pages.values() if p.path == path), None)

    def get_by_paths(self, paths: Sequence[str]) -> list[Page]:
        wanted = set(paths)
        return [p for p in self.pages.values() if p.path in wanted]

    def find(self, criteria: Mapping[str, Any]) -> list[Page]:
        hits = [
            p for p in self.pages.values()
            if all(asdict(p)[k] == v for k, v in criteria.items())
        ]
        return sorted(hits, key=lambda p: (p.rank, p.path))

    def children(self, path: str) -> list[Page]:
        level = level_of(path) + 1
        kids = [
            p for p in self.pages.values()
            if p.level == level and p.path != path and is_within(p.path, path)
        ]
        return sorted(kids, key=lambda p: (p.rank, p.path))

    def scan_subtree(self, path: str) -> list[Page]:
        return [p for p in self.pages.values() if is_within(p.path, path)]

    def upsert_many(self, pages: Iterable[Page]) -> None:
        batch = list(pages)
        self.batches.append(batch)
        written: list[str] = []
        failed: dict[str, str] = {}
        for page in batch:
            if page.id in self.fail_ids:
                failed[page.id] = "rejected by fake"
                continue
            self.pages[page.id] = page
            written.append(page.id)
        if failed:
            msg = f"Fake store rejected {len(failed)} pages"
            raise PartialFailureError(msg, written=tuple(written), failed=failed)


class FakeGuard:
    """Guard with fixed answers that records every check."""

    def __init__(self, *, view: bool = True, edit: bool = True) -> None:
        self.view = view
        self.edit = edit
        self.calls: list[tuple[str, str]] = []

    def can_view(self, context: Any, page: Page) -> bool:
        self.calls.append(("view", page.id))
        return self.view

    def can_edit(self, context: Any, page: Page) -> bool:
        self.calls.append(("edit", page.id))
        return self.edit


class RaisingGuard:
    """Guard whose checks always blow up."""

    def can_view(self, context: Any, page: Page) -> bool:
        msg = "guard backend down"
        raise ConnectionError(msg)

    def can_edit(self, context: Any, page: Page) -> bool:
        msg = "guard backend down"
        raise ConnectionError(msg)
