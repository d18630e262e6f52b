import pytest

from keelorm import Configuration

from persistence_models import (
    SCHEMA,
    Author,
    Magazine,
    Paint,
    Palette,
    Publication,
    Setting,
    Tag,
)


@pytest.fixture
def factory(tmp_path):
    factory = (
        Configuration.from_dsn(f"sqlite:///{tmp_path / 'keel.db'}?pool_max=3")
        .register(Author, Publication, Magazine, Tag, Setting, Paint, Palette)
        .build_session_factory()
    )
    with factory.open_session() as session:
        for statement in SCHEMA:
            session.execute(statement)
    yield factory
    factory.close()


@pytest.fixture
def session(factory):
    session = factory.open_session()
    yield session
    session.close()
