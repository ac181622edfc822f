"""Materialized path arithmetic.

Paths look like ``/parent/child``; the root page's path is the separator
alone. Every function here is pure string manipulation.
"""

from pagetree.config import PATH_SEPARATOR, ROOT_PATH
from pagetree.errors import InvalidSlugError


def segments(path: str) -> list[str]:
    """Split a path into its slugs (empty for the root)."""
    return [s for s in path.split(PATH_SEPARATOR) if s]


def level_of(path: str) -> int:
    return len(segments(path))


def child_path(parent_path: str, slug: str) -> str:
    """Join a parent path and a slug into the child's path."""
    validate_slug(slug)
    return descendant_prefix(parent_path) + slug


def parent_path(path: str) -> str | None:
    """Return the parent's path, or None for the root."""
    parts = segments(path)
    if not parts:
        return None
    return ROOT_PATH + PATH_SEPARATOR.join(parts[:-1])


def ancestor_paths(path: str) -> list[str]:
    """Return the paths of all ancestors, root first."""
    parts = segments(path)
    return [ROOT_PATH + PATH_SEPARATOR.join(parts[:i]) for i in range(len(parts))]


def descendant_prefix(path: str) -> str:
    """Return the prefix every descendant path starts with."""
    if path == ROOT_PATH:
        return ROOT_PATH
    return path + PATH_SEPARATOR


def subtree_bounds(path: str) -> tuple[str, str]:
    """Return (low, high) so descendants satisfy ``low <= p < high``.

    ``high`` replaces the trailing separator with the next code point, which
    turns the prefix match into an index-friendly range query.
    """
    low = descendant_prefix(path)
    high = low[:-1] + chr(ord(PATH_SEPARATOR) + 1)
    return low, high


def is_within(path: str, ancestor: str) -> bool:
    """True when ``path`` is ``ancestor`` itself or lies below it."""
    return path == ancestor or path.startswith(descendant_prefix(ancestor))


def rebase(path: str, old_prefix: str, new_prefix: str) -> str:
    """Replace the ``old_prefix`` subtree root in ``path`` with ``new_prefix``."""
    if path == old_prefix:
        return new_prefix
    if not path.startswith(descendant_prefix(old_prefix)):
        msg = f"{path!r} is not inside {old_prefix!r}"
        raise ValueError(msg)
    return descendant_prefix(new_prefix) + path[len(descendant_prefix(old_prefix)) :]


def validate_slug(slug: str) -> None:
    if not slug or PATH_SEPARATOR in slug:
        msg = f"Invalid slug {slug!r}: must be non-empty and must not contain {PATH_SEPARATOR!r}"
        raise InvalidSlugError(msg)
