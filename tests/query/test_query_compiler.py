import pytest

from keelorm.core import Column, Entity, Id
from keelorm.dialects import MySQLDialect, PostgresDialect, SQLiteDialect, SQLServerDialect
from keelorm.errors import QueryError
from keelorm.mapping import build_metadata
from keelorm.query import Order, Query


class Product(Entity):
    id = Id()
    name = Column(str)
    price = Column(float, name="unit_price")
    category = Column(str)


class Gadget(Entity):
    id = Id()
    name = Column(str)

    class Meta:
        inheritance = "single_table"
        discriminator_column = "kind"
        discriminator_value = "G"


PRODUCT = build_metadata(Product.describe())
GADGET = build_metadata(Gadget.describe())


class StubSession:
    def __init__(self, dialect, rows=None):
        self.dialect = dialect
        self.rows = rows or []
        self.calls = []

    def _load_rows(self, metadata, sql, params, *, track):
        self.calls.append((sql, params, track))
        return list(self.rows)


def _query(dialect=None, metadata=PRODUCT, rows=None):
    return Query(StubSession(dialect or SQLiteDialect(), rows), metadata)


def test_plain_query_selects_all_mapped_columns():
    sql, params = _query().to_sql()
    assert sql == 'SELECT "id", "name", "unit_price", "category" FROM "product"'
    assert params == []


def test_clauses_compile_in_fixed_order():
    query = (
        _query()
        .order_by("name", Order.DESC)
        .where("unit_price > ?", 10)
        .limit(5)
        .offset(10)
    )
    sql, params = query.to_sql()
    assert sql == (
        'SELECT "id", "name", "unit_price", "category" FROM "product" '
        'WHERE unit_price > ? ORDER BY "name" DESC LIMIT ? OFFSET ?'
    )
    assert params == [10, 5, 10]


def test_connectives_are_appended_without_regrouping():
    sql, params = (
        _query()
        .where("name = ?", "lamp")
        .or_("category = ?", "lighting")
        .and_("unit_price < ?", 50)
        .to_sql()
    )
    assert sql.endswith("WHERE name = ? OR category = ? AND unit_price < ?")
    assert params == ["lamp", "lighting", 50]


def test_repeated_where_combines_with_and():
    sql, params = _query().where("name = ?", "a").where("category = ?", "b").to_sql()
    assert sql.endswith("WHERE name = ? AND category = ?")
    assert params == ["a", "b"]


def test_group_by_and_having_bind_after_where():
    sql, params = (
        _query(PostgresDialect())
        .select("category", "COUNT(*)")
        .where("unit_price > %s", 1)
        .group_by("category")
        .having("COUNT(*) > %s", 2)
        .order_by("category")
        .limit(3)
        .to_sql()
    )
    assert sql == (
        'SELECT "category", COUNT(*) FROM "product" WHERE unit_price > %s '
        'GROUP BY "category" HAVING COUNT(*) > %s ORDER BY "category" ASC LIMIT %s'
    )
    assert params == [1, 2, 3]


def test_attribute_names_resolve_to_column_names():
    sql, _ = _query().select("price").order_by("price").to_sql()
    assert sql == 'SELECT "unit_price" FROM "product" ORDER BY "unit_price" ASC'


def test_discriminator_is_added_to_where():
    sql, _ = _query(metadata=GADGET).to_sql()
    assert sql.endswith("WHERE \"kind\" = 'G'")

    sql, _ = _query(metadata=GADGET).where("name = ?", "x").or_("name = ?", "y").to_sql()
    assert sql.endswith("WHERE (name = ? OR name = ?) AND \"kind\" = 'G'")


def test_sqlserver_requires_order_by_for_pagination():
    query = _query(SQLServerDialect()).limit(10)
    with pytest.raises(QueryError):
        query.to_sql()

    sql, params = query.order_by("name").to_sql()
    assert sql.endswith("ORDER BY [name] ASC OFFSET %s ROWS FETCH NEXT %s ROWS ONLY")
    assert params == [0, 10]


def test_placeholder_count_must_match_params():
    with pytest.raises(QueryError):
        _query().where("name = ? AND category = ?", "only-one").to_sql()
    with pytest.raises(QueryError):
        _query(MySQLDialect()).where("name LIKE %s", "a", "b").to_sql()
    sql, params = _query(MySQLDialect()).where("name LIKE '100%%' OR name = %s", "x").to_sql()
    assert params == ["x"]


def test_invalid_builder_arguments_raise():
    with pytest.raises(QueryError):
        _query().limit(-1)
    with pytest.raises(QueryError):
        _query().offset(-5)
    with pytest.raises(QueryError):
        _query().where("   ")
    with pytest.raises(QueryError):
        _query().order_by("name", "sideways")


def test_single_or_fragment_is_grouped_before_discriminator():
    sql, params = _query(metadata=GADGET).where("name = ? OR name = ?", "x", "y").to_sql()
    assert sql.endswith("WHERE (name = ? OR name = ?) AND \"kind\" = 'G'")
    assert params == ["x", "y"]

    sql, _ = _query(metadata=GADGET).where("name = ?", "x").to_sql()
    assert sql.endswith("WHERE (name = ?) AND \"kind\" = 'G'")


def test_quoted_question_mark_is_not_a_parameter():
    sql, params = _query().where("name = 'what?'").to_sql()
    assert sql.endswith("WHERE name = 'what?'")
    assert params == []

    _, params = _query().where("name = 'a?' OR name = ?", "b").to_sql()
    assert params == ["b"]
