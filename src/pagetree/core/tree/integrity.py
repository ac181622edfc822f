"""Check a set of pages against the tree invariants."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from pagetree.config import ROOT_PATH
from pagetree.core.tree.paths import level_of, parent_path, segments
from pagetree.models.page import Page


@dataclass(frozen=True)
class Violation:
    """One broken invariant, attached to the page (or parent path) it was found on."""

    subject: str
    message: str


def find_violations(pages: Iterable[Page]) -> list[Violation]:
    """Return every path, level, slug and rank inconsistency among ``pages``.

    Used after a PartialFailureError to find which records need repair.
    """
    pages = list(pages)
    by_path: dict[str, Page] = {}
    groups: dict[str, list[Page]] = defaultdict(list)
    problems: list[Violation] = []

    for page in pages:
        if page.path in by_path:
            problems.append(Violation(page.id, f"duplicate path {page.path!r}"))
        by_path[page.path] = page

        expected_level = level_of(page.path)
        if page.level != expected_level:
            problems.append(
                Violation(page.id, f"level {page.level} != {expected_level} for {page.path!r}")
            )

        parts = segments(page.path)
        own = parts[-1] if parts else ""
        if page.slug != own:
            problems.append(Violation(page.id, f"slug {page.slug!r} does not end {page.path!r}"))

        parent = parent_path(page.path)
        if parent is not None:
            groups[parent].append(page)

    for parent, children in groups.items():
        if parent not in by_path:
            problems.append(Violation(parent, f"missing parent for {len(children)} pages"))
        ranks = sorted(c.rank for c in children)
        if ranks != list(range(len(children))):
            problems.append(Violation(parent, f"sibling ranks {ranks} are not 0..{len(children) - 1}"))

    if pages and ROOT_PATH not in by_path:
        problems.append(Violation(ROOT_PATH, "root page is missing"))
    return problems
