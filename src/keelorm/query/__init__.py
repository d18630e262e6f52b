"""
Query construction APIs for KeelORM.
"""

from .builder import Query
from .compiler import QueryCompiler
from .expressions import Condition, Order, QuerySpec

__all__ = ["Condition", "Order", "Query", "QueryCompiler", "QuerySpec"]
