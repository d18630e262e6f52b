import sqlite3

import pytest

from keelorm.adapters import AdapterExecutionError, SQLiteAdapter, adapter_class_for
from keelorm.config import DatabaseSettings
from keelorm.errors import ConfigurationError


@pytest.fixture
def adapter(tmp_path):
    adapter = SQLiteAdapter()
    adapter.connect(DatabaseSettings.from_dsn(f"sqlite:///{tmp_path / 'adapter.db'}"))
    yield adapter
    adapter.close()


def test_connect_creates_database(adapter):
    assert isinstance(adapter.raw_connection, sqlite3.Connection)
    assert adapter.autocommit is True
    assert not adapter.closed


def test_execute_and_last_insert_id(adapter):
    adapter.execute("CREATE TABLE example (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    cursor = adapter.execute("INSERT INTO example (name) VALUES (?)", ("Alice",))
    inserted_id = adapter.last_insert_id(cursor, "example", "id")
    assert inserted_id == 1
    rows = adapter.execute("SELECT name FROM example WHERE id = ?", (inserted_id,)).fetchall()
    assert rows[0][0] == "Alice"


def test_manual_transaction_commit_and_rollback(adapter):
    adapter.execute("CREATE TABLE item (id INTEGER PRIMARY KEY, value INTEGER)")

    adapter.set_autocommit(False)
    adapter.execute("INSERT INTO item (value) VALUES (?)", (10,))
    adapter.commit()
    adapter.execute("INSERT INTO item (value) VALUES (?)", (20,))
    adapter.rollback()
    adapter.set_autocommit(True)

    assert adapter.execute("SELECT COUNT(*) FROM item").fetchone()[0] == 1


def test_sql_errors_are_wrapped(adapter):
    with pytest.raises(AdapterExecutionError) as excinfo:
        adapter.execute("SELECT * FROM missing_table")
    assert isinstance(excinfo.value.cause, sqlite3.OperationalError)


def test_closed_after_close(adapter):
    adapter.close()
    assert adapter.closed


def test_adapter_class_for_resolves_aliases():
    assert adapter_class_for("sqlite3") is SQLiteAdapter
    with pytest.raises(ConfigurationError):
        adapter_class_for("db2")
