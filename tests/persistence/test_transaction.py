import logging

import pytest

from keelorm.errors import DatabaseError, TransactionStateError
from keelorm.persistence import Transaction, TransactionOutcome, TransactionStatus

from persistence_models import Author


class RecordingConnection:
    def __init__(self):
        self.autocommit = True
        self.calls = []
        self.fail_commit = False
        self.fail_rollback = False

    def set_autocommit(self, enabled):
        self.calls.append(("autocommit", enabled))
        self.autocommit = enabled

    def commit(self):
        self.calls.append(("commit",))
        if self.fail_commit:
            raise DatabaseError("commit refused")

    def rollback(self):
        self.calls.append(("rollback",))
        if self.fail_rollback:
            raise DatabaseError("rollback refused")


def test_begin_commit_cycle_toggles_autocommit():
    connection = RecordingConnection()
    tx = Transaction(connection)
    assert tx.status is TransactionStatus.INACTIVE

    tx.begin()
    assert tx.is_active()
    assert connection.autocommit is False

    tx.commit()
    assert tx.status is TransactionStatus.INACTIVE
    assert tx.last_outcome is TransactionOutcome.COMMITTED
    assert connection.autocommit is True
    assert connection.calls == [("autocommit", False), ("commit",), ("autocommit", True)]


def test_begin_twice_and_commit_without_begin_raise():
    tx = Transaction(RecordingConnection())
    with pytest.raises(TransactionStateError):
        tx.commit()
    tx.begin()
    with pytest.raises(TransactionStateError):
        tx.begin()


def test_rollback_is_idempotent():
    connection = RecordingConnection()
    tx = Transaction(connection)
    tx.rollback()
    assert connection.calls == []

    tx.begin()
    tx.rollback()
    tx.rollback()
    assert connection.calls.count(("rollback",)) == 1
    assert tx.last_outcome is TransactionOutcome.ROLLED_BACK


def test_rollback_only_refuses_commit():
    connection = RecordingConnection()
    tx = Transaction(connection).begin()
    tx.set_rollback_only()
    assert tx.is_rollback_only()

    with pytest.raises(TransactionStateError):
        tx.commit()
    assert ("commit",) not in connection.calls
    assert ("rollback",) in connection.calls
    assert tx.status is TransactionStatus.INACTIVE
    assert tx.is_rollback_only() is False


def test_set_rollback_only_while_inactive_is_ignored(caplog):
    tx = Transaction(RecordingConnection())
    caplog.set_level(logging.WARNING, logger="keelorm.persistence.transaction")
    tx.set_rollback_only()
    assert tx.is_rollback_only() is False
    assert any("ignored" in record.message for record in caplog.records)


def test_failed_commit_rolls_back_and_reraises():
    connection = RecordingConnection()
    connection.fail_commit = True
    tx = Transaction(connection).begin()

    with pytest.raises(DatabaseError, match="commit refused"):
        tx.commit()
    assert connection.calls[-2:] == [("rollback",), ("autocommit", True)]
    assert tx.status is TransactionStatus.INACTIVE
    assert tx.last_outcome is TransactionOutcome.ROLLED_BACK


def test_failed_rollback_after_failed_commit_keeps_original_error(caplog):
    connection = RecordingConnection()
    connection.fail_commit = True
    connection.fail_rollback = True
    tx = Transaction(connection).begin()

    caplog.set_level(logging.ERROR, logger="keelorm.persistence.transaction")
    with pytest.raises(DatabaseError, match="commit refused"):
        tx.commit()
    assert any("also failed" in record.message for record in caplog.records)


def test_context_manager_commits_or_rolls_back():
    connection = RecordingConnection()
    with Transaction(connection):
        pass
    assert ("commit",) in connection.calls

    connection = RecordingConnection()
    with pytest.raises(RuntimeError):
        with Transaction(connection):
            raise RuntimeError("boom")
    assert ("rollback",) in connection.calls
    assert ("commit",) not in connection.calls


def _count(session):
    return session.execute('SELECT COUNT(*) FROM "authors"').fetchone()[0]


def test_session_transaction_rolls_back_inserts(session):
    with pytest.raises(RuntimeError):
        with session.transaction():
            session.persist(Author(name="Temp"))
            raise RuntimeError("abort")
    assert _count(session) == 0

    with session.transaction():
        session.persist(Author(name="Kept"))
    assert _count(session) == 1


def test_transaction_is_shared_per_session(session):
    tx = session.begin_transaction()
    assert session.get_transaction() is tx
    session.persist(Author(name="Pending"))
    tx.rollback()
    assert _count(session) == 0


def test_closing_session_rolls_back_active_transaction(factory):
    session = factory.open_session()
    session.begin_transaction()
    session.persist(Author(name="Abandoned"))
    session.close()

    with factory.open_session() as other:
        assert _count(other) == 0
