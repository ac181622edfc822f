"""Tests for the SQLite page store."""

import sqlite3
from dataclasses import replace

import pytest

from pagetree.core.store.sqlite_store import SqliteNodeStore
from pagetree.errors import PartialFailureError, StoreError
from pagetree.models.page import Page
from pagetree.protocols import NodeStore


def test_store_satisfies_protocol(store: SqliteNodeStore) -> None:
    assert isinstance(store, NodeStore)


def test_get_and_get_by_path(store: SqliteNodeStore) -> None:
    page = store.get("4321")
    assert page is not None
    assert page.path == "/parent/sibling"
    assert page.published is True
    assert store.get_by_path("/parent/sibling") == page
    assert store.get("nope") is None
    assert store.get_by_path("/nope") is None


def test_scan_subtree_returns_page_and_all_descendants(store: SqliteNodeStore) -> None:
    paths = {p.path for p in store.scan_subtree("/parent")}
    assert paths == {"/parent", "/parent/child", "/parent/sibling", "/parent/sibling/cousin"}


def test_scan_subtree_matches_prefix_filter_for_every_page(store: SqliteNodeStore) -> None:
    everything = store.scan_subtree("/")
    assert len(everything) == 6
    for p in everything:
        prefix = p.path if p.path == "/" else p.path + "/"
        expected = {q.id for q in everything if q.path == p.path or q.path.startswith(prefix)}
        assert {q.id for q in store.scan_subtree(p.path)} == expected


def test_scan_subtree_ignores_pages_sharing_a_name_prefix(store: SqliteNodeStore) -> None:
    store.upsert_many([
        Page(id="pt", slug="parent-two", path="/parent-two", level=1, rank=2, type="testPage"),
    ])
    assert "pt" not in {p.id for p in store.scan_subtree("/parent")}


def test_children_are_direct_and_ordered_by_rank(store: SqliteNodeStore) -> None:
    assert [p.id for p in store.children("/")] == ["1234", "4333"]
    assert [p.id for p in store.children("/parent")] == ["2341", "4321"]
    assert store.children("/parent/child") == []


def test_find_by_fields(store: SqliteNodeStore) -> None:
    assert [p.id for p in store.find({"slug": "child"})] == ["2341"]
    assert {p.id for p in store.find({"level": 2})} == {"2341", "4321"}
    with pytest.raises(ValueError, match="Unknown page fields"):
        store.find({"colour": "red"})


def test_get_by_paths(store: SqliteNodeStore) -> None:
    found = store.get_by_paths(["/", "/parent", "/missing"])
    assert {p.id for p in found} == {"home", "1234"}
    assert store.get_by_paths([]) == []


def test_upsert_many_updates_existing_records(store: SqliteNodeStore) -> None:
    child = store.get("2341")
    assert child is not None
    store.upsert_many([replace(child, title="Renamed")])
    assert store.get("2341").title == "Renamed"


def test_upsert_many_reports_partial_failure(store: SqliteNodeStore) -> None:
    """A duplicate path is rejected while the rest of the batch commits."""
    ok = Page(id="new1", slug="fresh", path="/fresh", level=1, rank=2, type="testPage")
    clash = Page(id="new2", slug="parent", path="/parent", level=1, rank=3, type="testPage")

    with pytest.raises(PartialFailureError) as exc_info:
        store.upsert_many([ok, clash])

    assert exc_info.value.written == ("new1",)
    assert set(exc_info.value.failed) == {"new2"}
    assert store.get("new1") is not None
    assert store.get("new2") is None


def test_read_failure_raises_store_error() -> None:
    conn = sqlite3.connect(":memory:")  # no schema
    with pytest.raises(StoreError):
        SqliteNodeStore(conn).get("home")
