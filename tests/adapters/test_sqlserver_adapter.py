import pytest

from keelorm.adapters import AdapterExecutionError, SQLServerAdapter
from keelorm.config import DatabaseSettings

from fake_dbapi import FakeDriver, MethodAutocommitConnection


@pytest.fixture
def fake_driver(monkeypatch):
    driver = FakeDriver(MethodAutocommitConnection)
    monkeypatch.setattr("keelorm.adapters.sqlserver._load_driver", lambda: driver)
    return driver


@pytest.fixture
def adapter(fake_driver):
    adapter = SQLServerAdapter()
    adapter.connect(DatabaseSettings.from_dsn("mssql://sa:pw@sqlhost:1433/erp"))
    return adapter


def test_sqlserver_connect_kwargs(adapter, fake_driver):
    assert fake_driver.connections[0].kwargs == {
        "server": "sqlhost",
        "user": "sa",
        "password": "pw",
        "database": "erp",
        "port": "1433",
    }
    assert fake_driver.connections[0].autocommit_value is True


def test_sqlserver_identity_comes_from_same_connection(adapter, fake_driver):
    connection = fake_driver.connections[0]
    cursor = adapter.execute("INSERT INTO [t] ([name]) VALUES (%s)", ["x"])
    connection.rows = [(5,)]
    assert adapter.last_insert_id(cursor, "t", "id") == 5
    assert connection.statements[-1] == ("SELECT @@IDENTITY", None)


def test_sqlserver_missing_identity_raises(adapter, fake_driver):
    cursor = adapter.execute("INSERT INTO [t] DEFAULT VALUES")
    with pytest.raises(AdapterExecutionError):
        adapter.last_insert_id(cursor, "t", "id")
