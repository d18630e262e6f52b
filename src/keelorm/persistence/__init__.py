"""
Persistence layer: sessions, transactions and identity tracking.
"""

from .factory import SessionFactory
from .identity_map import EntityKey, IdentityMap
from .session import Session
from .transaction import Transaction, TransactionOutcome, TransactionStatus
from .unit_of_work import UnitOfWork

__all__ = [
    "EntityKey",
    "IdentityMap",
    "Session",
    "SessionFactory",
    "Transaction",
    "TransactionOutcome",
    "TransactionStatus",
    "UnitOfWork",
]
