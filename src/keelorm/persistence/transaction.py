"""
Transaction bound to one session's connection.
"""

from __future__ import annotations

import enum
from typing import Callable, Optional

from ..adapters.base import DatabaseAdapter
from ..errors import DatabaseError, TransactionStateError
from ..utils import get_logger


class TransactionStatus(enum.Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class TransactionOutcome(enum.Enum):
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """
    Begin/commit/rollback over the session connection.

    ``begin`` switches the connection out of autocommit; commit and rollback
    switch it back. A transaction marked rollback-only refuses to commit::

        tx = session.begin_transaction()
        try:
            session.persist(item)
            tx.commit()
        except Exception:
            tx.rollback()
            raise
    """

    def __init__(
        self,
        connection: DatabaseAdapter,
        ensure_open: Optional[Callable[[], None]] = None,
    ) -> None:
        self._connection = connection
        self._ensure_open = ensure_open or (lambda: None)
        self._status = TransactionStatus.INACTIVE
        self._rollback_only = False
        self._last_outcome: TransactionOutcome | None = None
        self.logger = get_logger("persistence.transaction")

    # Public API --------------------------------------------------------
    @property
    def status(self) -> TransactionStatus:
        return self._status

    @property
    def last_outcome(self) -> TransactionOutcome | None:
        return self._last_outcome

    def is_active(self) -> bool:
        return self._status is TransactionStatus.ACTIVE

    def is_rollback_only(self) -> bool:
        return self._rollback_only

    def begin(self) -> "Transaction":
        self._ensure_open()
        if self.is_active():
            raise TransactionStateError("Transaction already active.")
        self._connection.set_autocommit(False)
        self._status = TransactionStatus.ACTIVE
        self._rollback_only = False
        self._last_outcome = None
        self.logger.debug("Transaction started")
        return self

    def commit(self) -> None:
        self._ensure_open()
        if not self.is_active():
            raise TransactionStateError("No active transaction to commit.")

        if self._rollback_only:
            self._connection.rollback()
            self._finish(TransactionOutcome.ROLLED_BACK)
            raise TransactionStateError(
                "Transaction is marked rollback-only; it was rolled back instead of committed."
            )

        try:
            self._connection.commit()
        except DatabaseError:
            self.logger.error("Commit failed; rolling back")
            self._rollback_after_failure()
            raise
        self._finish(TransactionOutcome.COMMITTED)

    def rollback(self) -> None:
        """
        Roll back the active transaction. Does nothing when none is active.
        """
        self._ensure_open()
        if not self.is_active():
            return
        self._connection.rollback()
        self._finish(TransactionOutcome.ROLLED_BACK)

    def set_rollback_only(self) -> None:
        if not self.is_active():
            self.logger.warning("set_rollback_only() ignored: no active transaction")
            return
        self._rollback_only = True

    def __enter__(self) -> "Transaction":
        if not self.is_active():
            self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.is_active():
            return
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()

    def __repr__(self) -> str:
        flag = " rollback-only" if self._rollback_only else ""
        return f"<Transaction {self._status.value}{flag}>"

    # Internal helpers --------------------------------------------------
    def _rollback_after_failure(self) -> None:
        try:
            self._connection.rollback()
        except DatabaseError as exc:
            self.logger.error("Rollback after failed commit also failed: %s", exc)
        self._status = TransactionStatus.INACTIVE
        self._rollback_only = False
        self._last_outcome = TransactionOutcome.ROLLED_BACK
        try:
            self._connection.set_autocommit(True)
        except DatabaseError as exc:
            self.logger.error("Could not restore autocommit: %s", exc)

    def _finish(self, outcome: TransactionOutcome) -> None:
        self._status = TransactionStatus.INACTIVE
        self._rollback_only = False
        self._last_outcome = outcome
        self._connection.set_autocommit(True)
        self.logger.debug("Transaction %s", outcome.value)
