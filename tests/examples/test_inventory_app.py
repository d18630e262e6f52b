from examples.inventory_app import build_factory, low_stock_report, restock, run_demo, seed_inventory
from examples.inventory_app.models import PerishableItem, StockItem


def test_inventory_seed_and_report(tmp_path):
    factory = build_factory(dsn=f"sqlite:///{tmp_path / 'inventory.db'}")
    try:
        with factory.open_session() as session:
            seeded = seed_inventory(session)
            assert len(seeded["items"]) == 3
            assert all(item["id"] is not None for item in seeded["items"])
            assert len(seeded["suppliers"][0]["id"]) == 36

            report = low_stock_report(session)
            assert [(entry["sku"], entry["kind"]) for entry in report] == [
                ("WASH-M6", "StockItem"),
                ("GLUE-EPX", "PerishableItem"),
            ]
    finally:
        factory.close()


def test_restock_is_visible_to_a_new_session(tmp_path):
    factory = build_factory(dsn=f"sqlite:///{tmp_path / 'restock.db'}")
    try:
        with factory.open_session() as session:
            seed_inventory(session)
            item = restock(session, "WASH-M6", 10)
            assert item.quantity == 13

        with factory.open_session() as session:
            reloaded = session.create_query(StockItem).where("sku = ?", "WASH-M6").get_single_result()
            assert reloaded.quantity == 13
            glue = session.create_query(PerishableItem).get_single_result()
            assert glue.expires_on.year == 2027
    finally:
        factory.close()


def test_run_demo_reports_after_restock():
    report = run_demo()
    assert [entry["sku"] for entry in report["low_stock_before"]] == ["WASH-M6", "GLUE-EPX"]
    assert [entry["sku"] for entry in report["low_stock_after"]] == ["GLUE-EPX"]
    assert report["remaining_skus"] == ["WASH-M6"]
