from .demo import (  # noqa: F401
    build_factory,
    low_stock_report,
    restock,
    run_demo,
    seed_inventory,
)

__all__ = [
    "build_factory",
    "seed_inventory",
    "low_stock_report",
    "restock",
    "run_demo",
]
