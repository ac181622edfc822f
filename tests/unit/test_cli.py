"""Tests for the admin CLI."""

import json
import sqlite3
from pathlib import Path

from typer.testing import CliRunner

from pagetree.cli import app
from pagetree.config import DB_FILENAME
from pagetree.core.store.sqlite_store import SqliteNodeStore
from pagetree.logging_config import configure_logging

runner = CliRunner()


def _init(tmp_path: Path) -> Path:
    data = tmp_path / "data"
    result = runner.invoke(app, ["init", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    return data


def _store(data: Path) -> SqliteNodeStore:
    return SqliteNodeStore(sqlite3.connect(str(data / DB_FILENAME)))


def test_init_creates_database_with_fixtures(tmp_path: Path) -> None:
    data = _init(tmp_path)
    assert (data / DB_FILENAME).exists()
    store = _store(data)
    assert store.get_by_path("/").parked
    assert store.get_by_path("/trash").trash


def test_insert_and_move_by_path(tmp_path: Path) -> None:
    data = _init(tmp_path)
    for parent, slug in (("/", "docs"), ("/", "blog"), ("/docs", "intro")):
        result = runner.invoke(app, ["insert", parent, slug, "--data-dir", str(data)])
        assert result.exit_code == 0, result.output
        assert "Inserted" in result.output

    result = runner.invoke(app, ["move", "/docs", "/blog", "inside", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    assert "/blog/docs" in result.output
    assert _store(data).get_by_path("/blog/docs/intro") is not None

    result = runner.invoke(app, ["move", "/blog/docs", "/blog", "inside", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    assert "already there" in result.output


def test_errors_exit_nonzero(tmp_path: Path) -> None:
    data = _init(tmp_path)
    runner.invoke(app, ["insert", "/", "docs", "--data-dir", str(data)])

    result = runner.invoke(app, ["insert", "/", "docs", "--data-dir", str(data)])
    assert result.exit_code == 1

    result = runner.invoke(app, ["move", "/", "/docs", "inside", "--data-dir", str(data)])
    assert result.exit_code == 1

    result = runner.invoke(app, ["move", "/missing", "/docs", "--data-dir", str(data)])
    assert result.exit_code == 1


def test_trash_and_show_json(tmp_path: Path) -> None:
    data = _init(tmp_path)
    runner.invoke(app, ["insert", "/", "docs", "--data-dir", str(data)])

    result = runner.invoke(app, ["trash", "/docs", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(
        app, ["show", "/trash/docs", "--ancestors", "--json", "--data-dir", str(data)]
    )
    assert result.exit_code == 0, result.output
    parsed = json.loads(result.output)
    assert parsed["page"]["trash"] is True
    assert [a["page"]["path"] for a in parsed["ancestors"]] == ["/", "/trash"]


def test_tree_and_check(tmp_path: Path) -> None:
    data = _init(tmp_path)
    runner.invoke(app, ["insert", "/", "docs", "--title", "Docs", "--data-dir", str(data)])

    result = runner.invoke(app, ["tree", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    assert "Docs (/docs)" in result.output

    result = runner.invoke(app, ["check", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    assert "consistent" in result.output


def test_commands_need_an_initialized_database(tmp_path: Path) -> None:
    result = runner.invoke(app, ["tree", "--data-dir", str(tmp_path)])
    assert result.exit_code == 1


def test_log_file_records_tree_changes(tmp_path: Path) -> None:
    data = _init(tmp_path)
    log_file = tmp_path / "logs" / "pagetree.log"

    result = runner.invoke(
        app, ["--log-file", str(log_file), "insert", "/", "docs", "--data-dir", str(data)]
    )
    assert result.exit_code == 0, result.output
    configure_logging()

    text = log_file.read_text()
    assert "INFO" in text
    assert "Inserted page" in text
    assert "at /docs (rank 1)" in text
