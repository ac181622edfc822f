"""Admin CLI for the page tree (init, insert, move, trash, show, tree, check)."""

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from pagetree.bootstrap import park_fixtures
from pagetree.config import DB_FILENAME, PATH_SEPARATOR, ROOT_PATH, resolve_data_directory
from pagetree.core.database.schema import migrate_schema
from pagetree.core.store.sqlite_store import SqliteNodeStore
from pagetree.core.tree.cursor import ANY
from pagetree.core.tree.integrity import find_violations
from pagetree.core.tree.outline import render_outline
from pagetree.core.tree.pages import Pages
from pagetree.errors import PageTreeError
from pagetree.logging_config import configure_logging
from pagetree.models.page import Page, PageDraft, PageView
from pagetree.permissions import RequestContext, RoleGuard

app = typer.Typer(help="pagetree: maintain a materialized-path page tree.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Page database directory"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Also append tree changes to this file"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose, log_file=log_file)


def _db_path(data_dir: Path | None) -> Path:
    return (data_dir or resolve_data_directory()) / DB_FILENAME


@contextmanager
def _open_pages(data_dir: Path | None) -> Iterator[Pages]:
    """Open the page database, failing if it doesn't exist."""
    db_path = _db_path(data_dir)
    if not db_path.exists():
        logger.error("Page database not found: {}. Run 'init' first.", db_path)
        raise typer.Exit(1)
    conn = sqlite3.connect(str(db_path))
    try:
        yield Pages(SqliteNodeStore(conn), RoleGuard())
    except PageTreeError as e:
        logger.error("{}: {}", type(e).__name__, e)
        raise typer.Exit(1) from e
    finally:
        conn.close()


def _resolve(pages: Pages, ref: str) -> Page:
    """Accept either a page id or a path."""
    store = pages.store
    page = store.get_by_path(ref) if ref.startswith(PATH_SEPARATOR) else store.get(ref)
    if page is None:
        logger.error("Page not found: {}", ref)
        raise typer.Exit(1)
    return page


def _view_to_dict(view: PageView) -> dict:
    return {
        "page": asdict(view.page),
        "ancestors": [_view_to_dict(a) for a in view.ancestors],
        "children": [asdict(c) for c in view.children],
    }


@app.command()
def init(data_dir: DataDirOption = None) -> None:
    """Create the page database and park the home and trash pages."""
    db_path = _db_path(data_dir)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    try:
        migrate_schema(conn)
        root, trash = park_fixtures(SqliteNodeStore(conn))
        typer.echo(f"Ready: {db_path} (home={root.id}, trash={trash.id})")
    finally:
        conn.close()


@app.command()
def insert(
    parent: str = typer.Argument(..., help="Parent page id or path"),
    slug: str = typer.Argument(..., help="Slug of the new page"),
    page_type: str = typer.Option("page", "--type", "-t", help="Page type"),
    title: str = typer.Option("", "--title", help="Page title"),
    published: bool = typer.Option(False, "--published", "-p", help="Publish immediately"),
    dedupe: bool = typer.Option(False, "--dedupe", help="Rename instead of failing on slug conflicts"),
    data_dir: DataDirOption = None,
) -> None:
    """Append a new page as the last child of PARENT."""
    with _open_pages(data_dir) as pages:
        parent_page = _resolve(pages, parent)
        draft = PageDraft(slug=slug, type=page_type, title=title, published=published)
        page = pages.insert(RequestContext.admin(), parent_page.id, draft, dedupe=dedupe)
        typer.echo(f"Inserted {page.path} (id={page.id}, rank={page.rank})")


@app.command()
def move(
    page: str = typer.Argument(..., help="Page id or path to move"),
    target: str = typer.Argument(..., help="Target page id or path"),
    position: str = typer.Argument("inside", help="before, after or inside"),
    data_dir: DataDirOption = None,
) -> None:
    """Move PAGE (with its subtree) before, after or inside TARGET."""
    with _open_pages(data_dir) as pages:
        moved = _resolve(pages, page)
        plan = pages.move(RequestContext.admin(), moved.id, _resolve(pages, target).id, position)
        if plan.noop:
            typer.echo(f"{moved.path} is already there")
        else:
            typer.echo(f"Moved {moved.path} -> {plan.page.path} ({len(plan.updates)} records)")


@app.command()
def trash(
    page: str = typer.Argument(..., help="Page id or path to move into the trash"),
    data_dir: DataDirOption = None,
) -> None:
    """Soft-delete PAGE and its subtree."""
    with _open_pages(data_dir) as pages:
        plan = pages.move_to_trash(RequestContext.admin(), _resolve(pages, page).id)
        typer.echo(f"Trashed {page} -> {plan.page.path}")


@app.command()
def show(
    ref: str = typer.Argument(..., help="Page id or path"),
    ancestors: bool = typer.Option(False, "--ancestors", "-a", help="Attach ancestors"),
    children: bool = typer.Option(False, "--children", "-c", help="Attach children"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
) -> None:
    """Show one page with optional ancestors and children."""
    with _open_pages(data_dir) as pages:
        key = "path" if ref.startswith(PATH_SEPARATOR) else "id"
        cursor = pages.find(RequestContext.admin(), {key: ref}).published(ANY).trash(ANY)
        view = cursor.ancestors(ancestors).children(children).to_object()
        if view is None:
            typer.echo(f"Page '{ref}' not found.")
            raise typer.Exit(1)

        if output_json:
            typer.echo(json.dumps(_view_to_dict(view), indent=2))
            return

        p = view.page
        if view.ancestors:
            typer.echo(" > ".join(a.page.path for a in view.ancestors))
        typer.echo(f"{p.path}  id={p.id}  type={p.type}  level={p.level}  rank={p.rank}")
        typer.echo(f"  published={p.published}  trash={p.trash}  parked={p.parked}")
        for child in view.children:
            typer.echo(f"    {child.rank}: {child.path}")


@app.command()
def tree(
    path: str = typer.Argument(ROOT_PATH, help="Subtree root path"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Print a subtree as a markdown outline."""
    with _open_pages(data_dir) as pages:
        md = render_outline(pages.store, path=path, max_depth=max_depth)
        if not md:
            typer.echo(f"No page at {path}.")
            raise typer.Exit(1)
        typer.echo(md, nl=False)


@app.command()
def check(data_dir: DataDirOption = None) -> None:
    """Verify path, level and rank invariants across the whole tree."""
    with _open_pages(data_dir) as pages:
        problems = find_violations(pages.store.scan_subtree(ROOT_PATH))
        if not problems:
            typer.echo("Tree is consistent.")
            return
        for problem in problems:
            typer.echo(f"  {problem.subject}: {problem.message}")
        raise typer.Exit(1)
