import itertools

import pytest

from keelorm.errors import DatabaseError


class FakeCursor:
    def fetchall(self):
        return [(1,)]


class FakeAdapter:
    _ids = itertools.count(1)

    def __init__(self):
        self.number = next(self._ids)
        self.closed = False
        self.autocommit = True
        self.broken = False
        self.statements = []
        self.rollbacks = 0

    def execute(self, sql, params=None):
        if self.broken:
            raise DatabaseError("connection reset by peer")
        self.statements.append(sql)
        return FakeCursor()

    def rollback(self):
        self.rollbacks += 1

    def set_autocommit(self, enabled):
        self.autocommit = enabled

    def close(self):
        self.closed = True


class FakeConnector:
    def __init__(self):
        self.created = []
        self.fail = False

    def __call__(self):
        if self.fail:
            raise DatabaseError("database unavailable")
        adapter = FakeAdapter()
        self.created.append(adapter)
        return adapter


@pytest.fixture
def connector():
    return FakeConnector()
