import os
import uuid

import pytest

from keelorm import Column, Configuration, Entity, Id


def _require_dsn(env_var: str, module: str) -> str:
    pytest.importorskip(module)
    dsn = os.getenv(env_var)
    if not dsn:
        pytest.skip(f"{env_var} not set; skipping integration test")
    return dsn


def _probe_entity(table_name: str) -> type:
    class Probe(Entity):
        id = Id()
        name = Column(str, nullable=False)

        class Meta:
            table = table_name

    return Probe


def test_postgres_roundtrip():
    dsn = _require_dsn("KEELORM_POSTGRES_DSN", "psycopg")
    table_name = f"keel_pg_integration_{uuid.uuid4().hex[:8]}"
    Probe = _probe_entity(table_name)

    try:
        factory = Configuration.from_dsn(dsn).register(Probe).build_session_factory()
    except Exception as exc:  # pragma: no cover - environment dependent
        pytest.skip(f"Cannot connect to Postgres for integration test: {exc}")
    try:
        with factory.open_session() as session:
            session.execute(f'CREATE TABLE "{table_name}" (id SERIAL PRIMARY KEY, name TEXT)')
            with session.transaction():
                probe = Probe(name="pg-ok")
                session.persist(probe)
            assert probe.id is not None

        with factory.open_session() as session:
            loaded = session.find(Probe, probe.id)
            assert loaded is not None and loaded.name == "pg-ok"
            rows = session.create_query(Probe).where("name = %s", "pg-ok").get_result_list()
            assert [row.id for row in rows] == [probe.id]
    finally:
        with factory.open_session() as session:
            session.execute(f'DROP TABLE IF EXISTS "{table_name}"')
        factory.close()
