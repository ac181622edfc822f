"""SQLite-backed page store."""

import sqlite3
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import fields
from typing import Any

from loguru import logger

from pagetree.core.tree.paths import level_of, subtree_bounds
from pagetree.errors import PartialFailureError, StoreError
from pagetree.models.page import Page

_COLUMNS = tuple(f.name for f in fields(Page))
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM pages"


def _row_to_page(row: sqlite3.Row | tuple) -> Page:
    return Page(
        id=row[0],
        slug=row[1],
        path=row[2],
        level=row[3],
        rank=row[4],
        type=row[5],
        title=row[6],
        published=bool(row[7]),
        trash=bool(row[8]),
        parked=bool(row[9]),
    )


class SqliteNodeStore:
    """Page collection stored in the ``pages`` table.

    The connection's schema must already exist (see ``migrate_schema``).
    No locking is done here; callers serialize conflicting writes.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def _query(self, sql: str, params: Sequence[Any] = ()) -> list[Page]:
        try:
            rows = self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            msg = f"Page store read failed: {e}"
            raise StoreError(msg) from e
        return [_row_to_page(r) for r in rows]

    def get(self, page_id: str) -> Page | None:
        rows = self._query(f"{_SELECT} WHERE id = ?", (page_id,))
        return rows[0] if rows else None

    def get_by_path(self, path: str) -> Page | None:
        rows = self._query(f"{_SELECT} WHERE path = ?", (path,))
        return rows[0] if rows else None

    def get_by_paths(self, paths: Sequence[str]) -> list[Page]:
        if not paths:
            return []
        placeholders = ",".join("?" * len(paths))
        return self._query(f"{_SELECT} WHERE path IN ({placeholders})", list(paths))

    def find(self, criteria: Mapping[str, Any]) -> list[Page]:
        """Return pages matching every field in ``criteria``, ordered by rank then path."""
        unknown = set(criteria) - set(_COLUMNS)
        if unknown:
            msg = f"Unknown page fields: {sorted(unknown)!r}"
            raise ValueError(msg)

        sql = _SELECT
        params: list[Any] = []
        if criteria:
            sql += " WHERE " + " AND ".join(f"{name} = ?" for name in criteria)
            params.extend(criteria.values())
        sql += " ORDER BY rank, path"
        return self._query(sql, params)

    def children(self, path: str) -> list[Page]:
        low, high = subtree_bounds(path)
        return self._query(
            f"{_SELECT} WHERE path >= ? AND path < ? AND level = ? ORDER BY rank, path",
            (low, high, level_of(path) + 1),
        )

    def scan_subtree(self, path: str) -> list[Page]:
        low, high = subtree_bounds(path)
        return self._query(
            f"{_SELECT} WHERE path = ? OR (path >= ? AND path < ?)",
            (path, low, high),
        )

    def upsert_many(self, pages: Iterable[Page]) -> None:
        """Insert or update pages, committing every record that was accepted.

        Raises:
            PartialFailureError: If any record was rejected. Accepted records
                stay committed; the error lists both sets.
        """
        placeholders = ",".join("?" * len(_COLUMNS))
        updates = ", ".join(f"{c} = excluded.{c}" for c in _COLUMNS[1:])
        sql = (
            f"INSERT INTO pages ({', '.join(_COLUMNS)}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}"
        )

        written: list[str] = []
        failed: dict[str, str] = {}
        for page in pages:
            try:
                self.conn.execute(
                    sql,
                    (
                        page.id, page.slug, page.path, page.level, page.rank,
                        page.type, page.title, page.published, page.trash, page.parked,
                    ),
                )
            except sqlite3.Error as e:
                failed[page.id] = str(e)
            else:
                written.append(page.id)

        try:
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            failed.update({page_id: str(e) for page_id in written})
            written = []

        logger.debug("Upserted {} pages ({} rejected)", len(written), len(failed))
        if failed:
            msg = f"Batch write rejected {len(failed)} of {len(written) + len(failed)} pages"
            raise PartialFailureError(msg, written=tuple(written), failed=failed)
