"""Tests for SQLite engine setup and schema creation."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from peerlink.infrastructure.database.engine import (
    DATA_DIRNAME,
    DEFAULT_DB_FILENAME,
    READ_ONLY_OPTION,
    init_database,
)


class TestInitDatabase:
    def test_creates_data_dir_and_file(self, tmp_path: Path) -> None:
        engine = init_database(tmp_path)
        try:
            assert (tmp_path / DATA_DIRNAME / DEFAULT_DB_FILENAME).is_file()
        finally:
            engine.dispose()

    def test_custom_filename(self, tmp_path: Path) -> None:
        engine = init_database(tmp_path, filename="custom.db")
        try:
            assert (tmp_path / DATA_DIRNAME / "custom.db").is_file()
        finally:
            engine.dispose()

    def test_all_tables_created(self, db_engine: Engine) -> None:
        tables = set(inspect(db_engine).get_table_names())
        assert {
            "connection_requests",
            "connections",
            "pending_pair_index",
            "users",
            "notifications",
            "event_wal",
        } <= tables

    def test_idempotent(self, tmp_path: Path) -> None:
        init_database(tmp_path).dispose()
        engine = init_database(tmp_path)
        try:
            assert "connections" in inspect(engine).get_table_names()
        finally:
            engine.dispose()


class TestPragmas:
    def test_wal_mode(self, db_engine: Engine) -> None:
        with db_engine.connect() as conn:
            mode = conn.execute(text("PRAGMA journal_mode")).scalar_one()
        assert mode.lower() == "wal"

    def test_foreign_keys_enabled(self, db_engine: Engine) -> None:
        with db_engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar_one() == 1


class TestTransactions:
    def test_begin_commits(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO users (id, name, role, created_at) "
                    "VALUES ('alice', 'Alice', 'user', 't0')"
                )
            )
        with db_engine.connect() as conn:
            assert conn.execute(text("SELECT count(*) FROM users")).scalar_one() == 1

    def test_read_only_connection_can_read(self, db_engine: Engine) -> None:
        with db_engine.connect().execution_options(**{READ_ONLY_OPTION: True}) as conn:
            assert conn.execute(text("SELECT count(*) FROM users")).scalar_one() == 0
