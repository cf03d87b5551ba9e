import sqlite3

import pytest

from flushorm.adapters import AdapterConfigurationError, ConnectionConfig, SQLiteAdapter, create_adapter
from flushorm.security import parse_dsn


def make_adapter(url):
    return SQLiteAdapter(ConnectionConfig.from_url(url))


def test_acquire_creates_database(tmp_path):
    adapter = make_adapter(f"sqlite:///{tmp_path / 'connect.db'}")
    connection = adapter.acquire()
    assert isinstance(connection, sqlite3.Connection)
    adapter.release(connection)
    assert (tmp_path / "connect.db").exists()


def test_file_database_hands_out_fresh_connections(tmp_path):
    adapter = make_adapter(f"sqlite:///{tmp_path / 'fresh.db'}")
    first = adapter.acquire()
    second = adapter.acquire()
    assert first is not second
    adapter.release(first)
    adapter.release(second)
    with pytest.raises(sqlite3.ProgrammingError):
        first.execute("SELECT 1")


def test_foreign_keys_are_enforced(tmp_path):
    adapter = make_adapter(f"sqlite:///{tmp_path / 'fk.db'}")
    connection = adapter.acquire()
    assert connection.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    adapter.release(connection)


def test_last_insert_id(tmp_path):
    adapter = make_adapter(f"sqlite:///{tmp_path / 'exec.db'}")
    connection = adapter.acquire()
    connection.execute("CREATE TABLE example (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    cursor = connection.execute("INSERT INTO example (name) VALUES (?)", ("Alice",))
    assert adapter.last_insert_id(cursor, "example", "id") == 1
    adapter.release(connection)


def test_autocommit_toggle_controls_transactions(tmp_path):
    adapter = make_adapter(f"sqlite:///{tmp_path / 'txn.db'}")
    connection = adapter.acquire()
    adapter.set_autocommit(connection, True)
    connection.execute("CREATE TABLE item (id INTEGER PRIMARY KEY, value INTEGER)")

    adapter.set_autocommit(connection, False)
    connection.execute("INSERT INTO item (value) VALUES (?)", (10,))
    connection.commit()
    connection.execute("INSERT INTO item (value) VALUES (?)", (20,))
    connection.rollback()

    assert connection.execute("SELECT COUNT(*) FROM item").fetchone()[0] == 1
    adapter.release(connection)


def test_in_memory_database_outlives_its_connections():
    adapter = make_adapter("sqlite:///:memory:")
    assert adapter.is_memory
    connection = adapter.acquire()
    connection.execute("CREATE TABLE sample (value TEXT)")
    adapter.release(connection)

    again = adapter.acquire()
    assert again is not connection
    again.execute("INSERT INTO sample (value) VALUES (?)", ("hello",))
    assert again.execute("SELECT value FROM sample").fetchone()[0] == "hello"
    adapter.release(again)
    adapter.shutdown()
    adapter.shutdown()


def test_in_memory_databases_are_private_to_their_adapter():
    first = make_adapter("sqlite:///:memory:")
    second = make_adapter("sqlite:///:memory:")
    connection = first.acquire()
    connection.execute("CREATE TABLE sample (value TEXT)")
    other = second.acquire()
    assert other.execute("SELECT name FROM sqlite_master WHERE name = 'sample'").fetchone() is None
    first.release(connection)
    second.release(other)
    first.shutdown()
    second.shutdown()


def test_in_memory_rollback_does_not_touch_other_connections():
    adapter = make_adapter("sqlite:///:memory:")
    setup = adapter.acquire()
    adapter.set_autocommit(setup, True)
    setup.execute("CREATE TABLE item (value INTEGER)")
    adapter.release(setup)

    writer = adapter.acquire()
    writer.execute("INSERT INTO item (value) VALUES (?)", (1,))
    bystander = adapter.acquire()
    bystander.rollback()
    adapter.release(bystander)
    writer.commit()
    adapter.release(writer)

    reader = adapter.acquire()
    assert reader.execute("SELECT COUNT(*) FROM item").fetchone()[0] == 1
    adapter.release(reader)
    adapter.shutdown()


def test_create_adapter_dispatches_on_scheme(tmp_path):
    adapter = create_adapter(ConnectionConfig.from_url(f"sqlite:///{tmp_path / 'x.db'}"), slow_query_ms=7)
    assert isinstance(adapter, SQLiteAdapter)
    assert adapter.slow_query_ms == 7


def test_create_adapter_rejects_unknown_backend():
    with pytest.raises(AdapterConfigurationError):
        create_adapter(ConnectionConfig(dsn=parse_dsn("oracle://user@host/db")))
