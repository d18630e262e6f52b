import os
import uuid

import pytest

from keelorm import Column, Configuration, Entity, Id


def _require_mysql_dsn() -> str:
    pytest.importorskip("pymysql")
    dsn = os.getenv("KEELORM_MYSQL_DSN")
    if not dsn:
        pytest.skip("KEELORM_MYSQL_DSN not set; skipping MySQL integration test")
    return dsn


def test_mysql_roundtrip_with_rollback():
    dsn = _require_mysql_dsn()
    table_name = f"keel_mysql_integration_{uuid.uuid4().hex[:8]}"

    class Probe(Entity):
        id = Id()
        name = Column(str, nullable=False)

        class Meta:
            table = table_name

    try:
        factory = Configuration.from_dsn(dsn).register(Probe).build_session_factory()
    except Exception as exc:  # pragma: no cover - environment dependent
        pytest.skip(f"Cannot connect to MySQL for integration test: {exc}")
    try:
        with factory.open_session() as session:
            session.execute(
                f"CREATE TABLE `{table_name}` (id INT AUTO_INCREMENT PRIMARY KEY, "
                "name VARCHAR(255)) ENGINE=InnoDB"
            )
            with session.transaction():
                kept = Probe(name="mysql-ok")
                session.persist(kept)

            with pytest.raises(RuntimeError):
                with session.transaction():
                    session.persist(Probe(name="discarded"))
                    raise RuntimeError("abort")

        with factory.open_session() as session:
            names = [row.name for row in session.create_query(Probe).get_result_list()]
            assert names == ["mysql-ok"]
    finally:
        with factory.open_session() as session:
            session.execute(f"DROP TABLE IF EXISTS `{table_name}`")
        factory.close()
