"""
Data models for the KeelORM inventory example.
"""

from __future__ import annotations

from datetime import date

from keelorm import Column, Entity, GenerationType, Id


class StockItem(Entity):
    id = Id()
    sku = Column(str, nullable=False, unique=True, length=32)
    name = Column(str, nullable=False, length=120)
    quantity = Column(int, nullable=False, default=0)
    unit_price = Column(float, default=0.0)

    class Meta:
        table = "stock_items"
        inheritance = "single_table"
        discriminator_column = "kind"
        discriminator_value = "item"


class PerishableItem(StockItem):
    expires_on = Column(date)

    class Meta:
        discriminator_value = "perishable"


class Supplier(Entity):
    id = Id(str, generation=GenerationType.UUID, length=36)
    name = Column(str, nullable=False)
    email = Column(str)

    class Meta:
        table = "suppliers"
