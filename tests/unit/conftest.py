"""Shared test fixtures."""

import sqlite3

import pytest

from pagetree.core.database.schema import create_schema
from pagetree.core.store.sqlite_store import SqliteNodeStore
from pagetree.core.tree.pages import Pages
from pagetree.models.page import Page
from pagetree.permissions import RequestContext, RoleGuard

# /                       home
# /parent                 level 1, rank 0
# /parent/child           level 2, rank 0
# /parent/sibling         level 2, rank 1
# /parent/sibling/cousin  level 3, rank 0
# /another-parent         level 1, rank 1
TREE = [
    Page(id="home", slug="", path="/", level=0, rank=0, type="home",
         published=True, parked=True),
    Page(id="1234", slug="parent", path="/parent", level=1, rank=0, type="testPage",
         published=True),
    Page(id="2341", slug="child", path="/parent/child", level=2, rank=0, type="testPage",
         published=True),
    Page(id="4321", slug="sibling", path="/parent/sibling", level=2, rank=1, type="testPage",
         published=True),
    Page(id="4312", slug="cousin", path="/parent/sibling/cousin", level=3, rank=0,
         type="testPage", published=True),
    Page(id="4333", slug="another-parent", path="/another-parent", level=1, rank=1,
         type="testPage", published=True),
]


@pytest.fixture
def conn() -> sqlite3.Connection:
    conn = sqlite3.connect(":memory:")
    create_schema(conn)
    return conn


@pytest.fixture
def store(conn: sqlite3.Connection) -> SqliteNodeStore:
    """Return an in-memory store seeded with the test tree."""
    store = SqliteNodeStore(conn)
    store.upsert_many(TREE)
    return store


@pytest.fixture
def pages(store: SqliteNodeStore) -> Pages:
    return Pages(store, RoleGuard())


@pytest.fixture
def admin() -> RequestContext:
    return RequestContext.admin()


@pytest.fixture
def anon() -> RequestContext:
    return RequestContext.anonymous()
