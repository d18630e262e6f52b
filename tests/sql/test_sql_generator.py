import pytest

from keelorm.core import Column, Entity, Id
from keelorm.dialects import MySQLDialect, PostgresDialect, SQLiteDialect, SQLServerDialect
from keelorm.errors import QueryError
from keelorm.mapping import GenerationType, build_metadata
from keelorm.sql import SQLGenerator, sql_literal


class Customer(Entity):
    id = Id()
    name = Column(str, nullable=False)
    email = Column(str)

    class Meta:
        table = "customers"
        schema = "crm"


class Party(Entity):
    id = Id(generation=GenerationType.SEQUENCE)
    label = Column(str)

    class Meta:
        inheritance = "single_table"
        discriminator_column = "kind"


class Person(Party):
    birth_year = Column(int)

    class Meta:
        discriminator_value = "O'Person"


CUSTOMER = build_metadata(Customer.describe())
PERSON = build_metadata(Person.describe())


def test_insert_with_and_without_id():
    generator = SQLGenerator(SQLiteDialect())
    assert generator.insert(CUSTOMER) == (
        'INSERT INTO "crm"."customers" ("id", "name", "email") VALUES (?, ?, ?)'
    )
    assert generator.insert(CUSTOMER, include_id=False) == (
        'INSERT INTO "crm"."customers" ("name", "email") VALUES (?, ?)'
    )
    assert [column.name for column in generator.insert_columns(CUSTOMER, False)] == [
        "name",
        "email",
    ]


def test_postgres_identity_insert_returns_id():
    generator = SQLGenerator(PostgresDialect())
    assert generator.insert(CUSTOMER, include_id=False) == (
        'INSERT INTO "crm"."customers" ("name", "email") VALUES (%s, %s) RETURNING "id"'
    )


def test_insert_appends_discriminator_literal():
    generator = SQLGenerator(MySQLDialect())
    assert generator.insert(PERSON) == (
        "INSERT INTO `party` (`id`, `label`, `birth_year`, `kind`) "
        "VALUES (%s, %s, %s, 'O''Person')"
    )


def test_select_and_select_by_id():
    generator = SQLGenerator(SQLServerDialect())
    assert generator.select(CUSTOMER) == 'SELECT [id], [name], [email] FROM [crm].[customers]'
    assert generator.select_by_id(PERSON) == (
        "SELECT [id], [label], [birth_year] FROM [party] "
        "WHERE [id] = %s AND [kind] = 'O''Person'"
    )


def test_update_and_partial_update():
    generator = SQLGenerator(SQLiteDialect())
    assert generator.update(CUSTOMER) == (
        'UPDATE "crm"."customers" SET "name" = ?, "email" = ? WHERE "id" = ?'
    )
    email = CUSTOMER.column("email")
    assert generator.partial_update(CUSTOMER, [email]) == (
        'UPDATE "crm"."customers" SET "email" = ? WHERE "id" = ?'
    )
    with pytest.raises(QueryError):
        generator.partial_update(CUSTOMER, [CUSTOMER.id_column])


def test_delete():
    generator = SQLGenerator(PostgresDialect())
    assert generator.delete(CUSTOMER) == 'DELETE FROM "crm"."customers" WHERE "id" = %s'


def test_sql_literal_escapes_quotes():
    assert sql_literal("it's") == "'it''s'"
