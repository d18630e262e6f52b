"""
Inventory example: register entities, persist stock, query, flush and remove.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List

from keelorm import Configuration, Order, Session, SessionFactory

from .models import PerishableItem, StockItem, Supplier

# The schema is hand-written; KeelORM does not generate DDL.
SCHEMA = (
    'CREATE TABLE IF NOT EXISTS "stock_items" ('
    '"id" INTEGER PRIMARY KEY AUTOINCREMENT, '
    '"sku" VARCHAR(32) NOT NULL UNIQUE, '
    '"name" VARCHAR(120) NOT NULL, '
    '"quantity" INTEGER NOT NULL, '
    '"unit_price" REAL, '
    '"expires_on" DATE, '
    '"kind" VARCHAR(31) NOT NULL)',
    'CREATE TABLE IF NOT EXISTS "suppliers" ('
    '"id" CHAR(36) PRIMARY KEY, '
    '"name" VARCHAR(255) NOT NULL, '
    '"email" VARCHAR(255))',
)

LOW_STOCK_THRESHOLD = 5


def build_factory(dsn: str = "sqlite:///:memory:?pool_max=1") -> SessionFactory:
    """
    Build a factory for the example entities and make sure the tables exist.

    An in-memory SQLite database lives in a single connection, so the
    default DSN caps the pool at one.
    """
    factory = (
        Configuration.from_dsn(dsn)
        .register(StockItem, PerishableItem, Supplier)
        .build_session_factory()
    )
    with factory.open_session() as session:
        for statement in SCHEMA:
            session.execute(statement)
    return factory


def seed_inventory(session: Session) -> Dict[str, List[Dict[str, Any]]]:
    items = [
        StockItem(sku="BOLT-M6", name="M6 bolt", quantity=120, unit_price=0.15),
        StockItem(sku="WASH-M6", name="M6 washer", quantity=3, unit_price=0.05),
        PerishableItem(
            sku="GLUE-EPX",
            name="Epoxy glue",
            quantity=2,
            unit_price=7.5,
            expires_on=date(2027, 3, 1),
        ),
    ]
    suppliers = [Supplier(name="Fastenal", email="orders@fastenal.example")]
    with session.transaction():
        for entity in items + suppliers:
            session.persist(entity)
    return {
        "items": [item.to_dict() for item in items],
        "suppliers": [supplier.to_dict() for supplier in suppliers],
    }


def low_stock_report(session: Session) -> List[Dict[str, Any]]:
    items = (
        session.create_query(StockItem)
        .where("quantity < ?", LOW_STOCK_THRESHOLD)
        .order_by("sku", Order.ASC)
        .get_result_list()
    )
    perishables = (
        session.create_query(PerishableItem)
        .where("quantity < ?", LOW_STOCK_THRESHOLD)
        .order_by("sku")
        .get_result_list()
    )
    return [
        {"sku": item.sku, "quantity": item.quantity, "kind": type(item).__name__}
        for item in items + perishables
    ]


def restock(session: Session, sku: str, amount: int) -> StockItem:
    item = session.create_query(StockItem).where("sku = ?", sku).get_single_result()
    item.quantity += amount
    with session.transaction():
        session.flush()
    return item


def run_demo(dsn: str = "sqlite:///:memory:?pool_max=1") -> Dict[str, Any]:
    factory = build_factory(dsn)
    try:
        with factory.open_session() as session:
            seeded = seed_inventory(session)
            before = low_stock_report(session)
            restock(session, "WASH-M6", 50)
            discontinued = session.find(StockItem, seeded["items"][0]["id"])
            if discontinued is not None:
                with session.transaction():
                    session.remove(discontinued)
            after = low_stock_report(session)
            remaining = session.create_query(StockItem).order_by("sku").get_result_list()
        return {
            "low_stock_before": before,
            "low_stock_after": after,
            "remaining_skus": [item.sku for item in remaining],
        }
    finally:
        factory.close()


if __name__ == "__main__":
    report = run_demo("sqlite:///inventory_demo.db")
    for entry in report["low_stock_after"]:
        print(f"{entry['sku']}: {entry['quantity']} left ({entry['kind']})")
