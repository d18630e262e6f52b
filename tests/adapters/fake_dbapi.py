"""Minimal DB-API 2.0 stand-ins for exercising the driver-backed adapters."""


class Error(Exception):
    pass


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.lastrowid = 11
        self.description = None

    def execute(self, sql, params=None):
        if self.connection.fail_on and self.connection.fail_on in sql:
            raise Error(f"cannot run {sql}")
        self.connection.statements.append((sql, params))

    def fetchone(self):
        return self.connection.rows.pop(0) if self.connection.rows else None

    def fetchall(self):
        rows, self.connection.rows = self.connection.rows, []
        return rows


class FakeConnection:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.statements = []
        self.rows = []
        self.fail_on = None
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.autocommit_value = None

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        if self.fail_on == "COMMIT":
            raise Error("commit failed")
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class MethodAutocommitConnection(FakeConnection):
    """Connection exposing autocommit as a method (PyMySQL, pymssql)."""

    open = True

    def autocommit(self, enabled):
        self.autocommit_value = enabled

    def close(self):
        self.open = False


class FakeDriver:
    Error = Error

    def __init__(self, connection_cls=FakeConnection):
        self.connection_cls = connection_cls
        self.connections = []
        self.refuse = False

    def connect(self, **kwargs):
        if self.refuse:
            raise Error("connection refused")
        connection = self.connection_cls(**kwargs)
        self.connections.append(connection)
        return connection
