"""Tests for compat_spine.core.connection, repository and schema."""

from __future__ import annotations

from pathlib import Path

import pytest

from compat_spine.core.connection import SqliteConnection, _parse_url, create_connection
from compat_spine.core.repository import BaseRepository
from compat_spine.core.schema import TABLES, create_tables


class TestParseUrl:
    @pytest.mark.parametrize("value", [None, "", "memory", ":memory:", "sqlite://", "sqlite:///:memory:"])
    def test_memory(self, value):
        assert _parse_url(value) == ("memory", ":memory:")

    def test_sqlite_url(self):
        assert _parse_url("sqlite:///var/data.db") == ("sqlite", "var/data.db")

    def test_plain_path(self):
        assert _parse_url("./data.db") == ("file", "./data.db")


class TestCreateConnection:
    def test_memory_connection(self):
        conn, info = create_connection(None)
        assert isinstance(conn, SqliteConnection)
        assert info.persistent is False
        conn.close()

    def test_file_connection_creates_parent_dirs(self, tmp_path: Path):
        target = tmp_path / "nested" / "data.db"
        conn, info = create_connection(str(target), init_schema=True)
        assert info.persistent is True
        assert info.resolved_path == str(target.resolve())
        assert target.exists()
        conn.close()

    def test_init_schema_creates_table(self):
        conn, _ = create_connection(None, init_schema=True)
        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", (TABLES["features"],)
        ).fetchone()
        assert row is not None
        conn.close()


class TestBaseRepository:
    @pytest.fixture
    def repo(self):
        conn, _ = create_connection(None)
        conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT)")
        conn.commit()
        yield BaseRepository(conn)
        conn.close()

    def test_ph(self):
        assert BaseRepository.ph(3) == "?, ?, ?"

    def test_insert_and_query(self, repo: BaseRepository):
        repo.insert("items", {"id": 1, "label": "a"})
        repo.commit()
        assert repo.query("SELECT id, label FROM items") == [{"id": 1, "label": "a"}]
        assert repo.query_one("SELECT label FROM items WHERE id = ?", (1,)) == {"label": "a"}
        assert repo.query_one("SELECT label FROM items WHERE id = ?", (2,)) is None

    def test_transaction_rolls_back_on_error(self, repo: BaseRepository):
        with pytest.raises(RuntimeError):
            with repo.transaction():
                repo.insert("items", {"id": 1, "label": "a"})
                raise RuntimeError("abort")
        assert repo.query("SELECT * FROM items") == []

    def test_transaction_commits(self, repo: BaseRepository):
        with repo.transaction():
            repo.insert("items", {"id": 2, "label": "b"})
        repo.conn.rollback()
        assert len(repo.query("SELECT * FROM items")) == 1


class TestSchema:
    def test_create_tables_is_idempotent(self):
        conn, _ = create_connection(None)
        create_tables(conn)
        create_tables(conn)
        conn.close()
