"""
Tests for the relational access bridge.

Tests cover:
- Initialization (explicit path, default data directory, pragmas, re-init)
- execute / query / execute_batch behaviour and error mapping
- Serialized concurrent access
"""
import os
import sqlite3
import threading

import pytest

from sidecar_core.conf import SidecarConfig
from sidecar_core.database import Database
from sidecar_core.exceptions import DatabaseError, InvalidStateError


class TestInitialization:
    """Tests for Database.initialize()."""

    def test_not_initialized(self, config):
        database = Database(config)
        assert database.is_initialized is False
        with pytest.raises(InvalidStateError, match="Database not initialized"):
            database.execute("SELECT 1")
        with pytest.raises(InvalidStateError):
            database.query("SELECT 1")
        with pytest.raises(InvalidStateError):
            database.execute_batch("SELECT 1;")

    def test_explicit_path(self, tmp_path, config):
        path = str(tmp_path / "explicit.db")
        database = Database(config)
        database.initialize(path)
        try:
            assert database.is_initialized is True
            assert database.path == path
            assert os.path.exists(path)
        finally:
            database.close()

    def test_default_path_creates_directory(self, tmp_path):
        data_dir = tmp_path / "nested" / "appdata"
        database = Database(SidecarConfig(data_dir=str(data_dir)))
        database.initialize()
        try:
            assert data_dir.is_dir()
            assert database.path == str(data_dir / "sidecar.db")
        finally:
            database.close()

    def test_wal_and_foreign_keys_enabled(self, db):
        assert db.query("PRAGMA journal_mode") == [{"journal_mode": "wal"}]
        assert db.query("PRAGMA foreign_keys") == [{"foreign_keys": 1}]

    def test_empty_path_is_not_default(self, tmp_path):
        data_dir = tmp_path / "appdata"
        database = Database(SidecarConfig(data_dir=str(data_dir)))
        database.initialize("")
        try:
            assert database.is_initialized is True
            assert database.path == ""
            assert not (data_dir / "sidecar.db").exists()
        finally:
            database.close()

    def test_unopenable_path(self, tmp_path, config):
        database = Database(config)
        with pytest.raises(DatabaseError):
            database.initialize(str(tmp_path / "missing" / "dir" / "x.db"))
        assert database.is_initialized is False

    def test_reinitialize_replaces_connection(self, tmp_path, db):
        db.execute("CREATE TABLE first (x)")
        old_conn = db._conn
        db.initialize(str(tmp_path / "second.db"))
        with pytest.raises(sqlite3.ProgrammingError):
            old_conn.execute("SELECT 1")
        tables = db.query("SELECT name FROM sqlite_master WHERE type = 'table'")
        assert tables == []

    def test_failed_reinitialize_keeps_connection(self, tmp_path, db):
        with pytest.raises(DatabaseError):
            db.initialize(str(tmp_path / "missing" / "x.db"))
        assert db.query("SELECT 1 AS one") == [{"one": 1}]

    def test_close(self, db):
        db.close()
        assert db.is_initialized is False
        assert db.path is None
        with pytest.raises(InvalidStateError):
            db.query("SELECT 1")


class TestExecute:
    """Tests for mutating statements."""

    @pytest.fixture
    def people(self, db):
        db.execute(
            "CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT UNIQUE, age INTEGER)"
        )
        return db

    def test_ddl_returns_zero(self, db):
        assert db.execute("CREATE TABLE t (x)") == 0

    def test_insert_returns_affected(self, people):
        assert people.execute(
            "INSERT INTO people (name, age) VALUES (?, ?)", ["ann", 30]
        ) == 1

    def test_update_counts_rows(self, people):
        for name in ("a", "b", "c"):
            people.execute("INSERT INTO people (name, age) VALUES (?, 1)", [name])
        assert people.execute("UPDATE people SET age = age + 1") == 3
        assert people.execute("DELETE FROM people WHERE name = ?", ["zzz"]) == 0

    def test_params_optional(self, people):
        assert people.execute("INSERT INTO people (name) VALUES ('solo')") == 1

    def test_changes_are_committed(self, tmp_path, people):
        people.execute("INSERT INTO people (name) VALUES (?)", ["kept"])
        other = sqlite3.connect(people.path)
        try:
            assert other.execute("SELECT name FROM people").fetchall() == [("kept",)]
        finally:
            other.close()

    def test_syntax_error(self, db):
        with pytest.raises(DatabaseError, match="syntax error"):
            db.execute("SELEC 1 FROM nowhere")

    def test_constraint_violation(self, people):
        people.execute("INSERT INTO people (name) VALUES (?)", ["dup"])
        with pytest.raises(DatabaseError, match="UNIQUE constraint failed"):
            people.execute("INSERT INTO people (name) VALUES (?)", ["dup"])

    def test_foreign_key_enforced(self, db):
        db.execute("CREATE TABLE parent (id INTEGER PRIMARY KEY)")
        db.execute(
            "CREATE TABLE child (id INTEGER PRIMARY KEY, "
            "parent_id INTEGER REFERENCES parent(id))"
        )
        with pytest.raises(DatabaseError, match="FOREIGN KEY constraint failed"):
            db.execute("INSERT INTO child (parent_id) VALUES (?)", [99])

    def test_multiple_statements_rejected(self, db):
        with pytest.raises(DatabaseError):
            db.execute("CREATE TABLE a (x); CREATE TABLE b (x);")

    def test_connection_usable_after_error(self, people):
        with pytest.raises(DatabaseError):
            people.execute("SELEC nonsense")
        assert people.execute("INSERT INTO people (name) VALUES (?)", ["ok"]) == 1

    def test_error_message_is_tagged(self, db):
        with pytest.raises(DatabaseError) as excinfo:
            db.execute("SELECT * FROM missing_table")
        assert str(excinfo.value).startswith("Database error: ")
        assert "no such table" in excinfo.value.message


class TestQuery:
    """Tests for read statements."""

    def test_rows_as_mappings(self, db):
        db.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT, score REAL)")
        db.execute("INSERT INTO notes (body, score) VALUES (?, ?)", ["one", 1.5])
        db.execute("INSERT INTO notes (body, score) VALUES (?, ?)", ["two", None])
        rows = db.query("SELECT id, body, score FROM notes ORDER BY id")
        assert rows == [
            {"id": 1, "body": "one", "score": 1.5},
            {"id": 2, "body": "two", "score": None},
        ]

    def test_params_bound_positionally(self, db):
        rows = db.query("SELECT ? AS a, ? AS b", ["x", 2])
        assert rows == [{"a": "x", "b": 2}]

    def test_empty_result(self, db):
        db.execute("CREATE TABLE empty (x)")
        assert db.query("SELECT x FROM empty") == []

    def test_duplicate_column_names_last_wins(self, db):
        assert db.query("SELECT 1 AS a, 2 AS a") == [{"a": 2}]

    def test_query_error(self, db):
        with pytest.raises(DatabaseError):
            db.query("SELECT * FROM nope")


class TestExecuteBatch:

    def test_runs_script(self, db):
        db.execute_batch(
            """
            CREATE TABLE IF NOT EXISTS schema_version (version INTEGER);
            CREATE TABLE IF NOT EXISTS settings (key TEXT PRIMARY KEY, value TEXT);
            INSERT INTO schema_version (version) VALUES (1);
            """
        )
        assert db.query("SELECT version FROM schema_version") == [{"version": 1}]

    def test_script_error(self, db):
        with pytest.raises(DatabaseError):
            db.execute_batch("CREATE TABLE ok (x); CREATE TABLE (;")


class TestConcurrency:

    def test_concurrent_increments_are_not_lost(self, db):
        db.execute("CREATE TABLE counter (id INTEGER PRIMARY KEY, n INTEGER)")
        db.execute("INSERT INTO counter (id, n) VALUES (1, 0)")
        threads_count, per_thread = 8, 25

        def worker():
            for _ in range(per_thread):
                db.execute("UPDATE counter SET n = n + ? WHERE id = ?", [1, 1])

        threads = [threading.Thread(target=worker) for _ in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert db.query("SELECT n FROM counter") == [{"n": threads_count * per_thread}]
