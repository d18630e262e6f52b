"""
SQL statement generation for mapped entities.
"""

from .generator import SQLGenerator, sql_literal

__all__ = ["SQLGenerator", "sql_literal"]
