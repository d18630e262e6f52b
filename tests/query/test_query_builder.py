import pytest

from keelorm.core import Column, Entity, Id
from keelorm.dialects import SQLiteDialect
from keelorm.errors import QueryError
from keelorm.mapping import build_metadata
from keelorm.query import Order, Query


class Book(Entity):
    id = Id()
    title = Column(str)


BOOK = build_metadata(Book.describe())


class StubSession:
    def __init__(self, rows=None):
        self.dialect = SQLiteDialect()
        self.rows = rows or []
        self.calls = []

    def _load_rows(self, metadata, sql, params, *, track):
        self.calls.append((sql, params, track))
        return list(self.rows)


def test_builder_methods_return_new_queries():
    session = StubSession()
    base = Query(session, BOOK)
    filtered = base.where("title = ?", "Dune")
    assert filtered is not base
    assert base.spec.conditions == ()
    assert len(filtered.spec.conditions) == 1
    assert base.order_by("title").spec.ordering == (("title", Order.ASC),)
    assert base.spec.ordering == ()


def test_get_result_list_tracks_only_full_rows():
    session = StubSession(rows=["a", "b"])
    assert Query(session, BOOK).get_result_list() == ["a", "b"]
    Query(session, BOOK).select("title").get_result_list()
    assert [call[2] for call in session.calls] == [True, False]


def test_get_single_result_requires_exactly_one_row():
    assert Query(StubSession(rows=["only"]), BOOK).get_single_result() == "only"
    with pytest.raises(QueryError, match="No Book"):
        Query(StubSession(rows=[]), BOOK).get_single_result()
    with pytest.raises(QueryError, match="2 rows"):
        Query(StubSession(rows=["a", "b"]), BOOK).get_single_result()


def test_first_applies_limit_when_missing():
    session = StubSession(rows=["a"])
    assert Query(session, BOOK).first() == "a"
    sql, params, _ = session.calls[-1]
    assert sql.endswith("LIMIT ?")
    assert params == [1]
    assert Query(StubSession(), BOOK).first() is None


def test_order_by_accepts_strings():
    query = Query(StubSession(), BOOK).order_by("title", "desc")
    assert query.spec.ordering == (("title", Order.DESC),)
