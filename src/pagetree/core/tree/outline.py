"""Render page subtrees as markdown outlines."""

import io
from collections import defaultdict

from pagetree.core.tree.paths import parent_path
from pagetree.models.page import Page
from pagetree.protocols import NodeStore


def _label(page: Page) -> str:
    name = page.title or page.slug or page.path
    flags = [
        flag
        for flag, on in (("draft", not page.published), ("trash", page.trash), ("parked", page.parked))
        if on
    ]
    suffix = f" [{', '.join(flags)}]" if flags else ""
    return f"{name} ({page.path}){suffix}"


def render_outline(
    store: NodeStore,
    *,
    path: str,
    max_depth: int | None = None,
) -> str:
    """Render the page at ``path`` and its descendants as an indented bullet list.

    Args:
        store: Page store.
        path: The subtree root.
        max_depth: Max levels below the start page to include (None = unlimited).

    Returns:
        Markdown string with bullet-list hierarchy, or "" if nothing is at ``path``.
    """
    pages = store.scan_subtree(path)
    start = next((p for p in pages if p.path == path), None)
    if start is None:
        return ""

    children: dict[str, list[Page]] = defaultdict(list)
    for page in pages:
        parent = parent_path(page.path)
        if page is not start and parent is not None:
            children[parent].append(page)

    out = io.StringIO()
    stack = [start]
    while stack:
        page = stack.pop()
        depth = page.level - start.level
        out.write(f"{'    ' * depth}- {_label(page)}\n")

        kids = sorted(children.get(page.path, []), key=lambda p: (p.rank, p.path))
        if max_depth is not None and depth >= max_depth:
            if kids:
                noun = "child" if len(kids) == 1 else "children"
                out.write(f"{'    ' * (depth + 1)}- ... ({len(kids)} more {noun})\n")
            continue
        stack.extend(reversed(kids))

    return out.getvalue()
