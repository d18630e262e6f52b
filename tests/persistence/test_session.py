import logging

import pytest

from keelorm.errors import EntityNotManagedError, MappingError, SessionClosedError

from persistence_models import Author, Setting, Tag


def _count(session, table):
    return session.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]


def test_persist_assigns_identity_and_tracks(session):
    author = Author(name="Ursula", country="US")
    session.persist(author)

    assert author.id is not None
    assert session.contains(author)
    assert session.find(Author, author.id) is author
    assert _count(session, "authors") == 1


def test_persist_same_instance_twice_is_noop(session):
    author = session.persist(Author(name="Ursula"))
    session.persist(author)
    assert _count(session, "authors") == 1


def test_persist_conflicting_instance_is_rejected(session):
    author = session.persist(Author(name="Ursula"))
    with pytest.raises(MappingError):
        session.persist(Author(id=author.id, name="Impostor"))


def test_uuid_ids_are_generated_before_insert(session):
    tag = session.persist(Tag(label="classic"))
    assert isinstance(tag.id, str) and len(tag.id) == 36
    row = session.execute('SELECT "label" FROM "tags" WHERE "id" = ?', [tag.id]).fetchone()
    assert row[0] == "classic"


def test_unassigned_id_without_generation_is_rejected(session):
    with pytest.raises(MappingError):
        session.persist(Setting(value="x"))
    session.persist(Setting(id="theme", value="dark"))
    assert session.find(Setting, "theme").value == "dark"


def test_find_returns_same_instance_across_calls(factory):
    with factory.open_session() as writer:
        author_id = writer.persist(Author(name="Octavia")).id

    with factory.open_session() as reader:
        first = reader.find(Author, author_id)
        second = reader.find(Author, str(author_id))
        assert first is second
        assert first.name == "Octavia"
        assert reader.find(Author, 9999) is None


def test_query_results_go_through_identity_map(session):
    author = session.persist(Author(name="Iain", country="UK"))
    found = session.create_query(Author).where("country = ?", "UK").get_single_result()
    assert found is author

    names = session.create_query(Author).select("name").get_result_list()
    assert names[0] is not author
    assert names[0].name == "Iain"


def test_flush_updates_only_changed_columns(session, caplog):
    author = session.persist(Author(name="Iain", country="UK", books_written=3))
    author.country = "Scotland"

    caplog.set_level(logging.DEBUG, logger="keelorm.persistence.session")
    assert session.flush() == 1
    updates = [r.message for r in caplog.records if "UPDATE" in r.message]
    assert len(updates) == 1
    assert '"country" = ?' in updates[0]
    assert '"name"' not in updates[0]
    assert '"books_written"' not in updates[0]

    row = session.execute('SELECT "country" FROM "authors" WHERE "id" = ?', [author.id]).fetchone()
    assert row[0] == "Scotland"
    assert session.flush() == 0


def test_remove_deletes_and_untracks(session):
    author = session.persist(Author(name="Gone"))
    session.remove(author)
    assert not session.contains(author)
    assert _count(session, "authors") == 0


def test_remove_of_unmanaged_entity_raises(session):
    with pytest.raises(EntityNotManagedError):
        session.remove(Author(name="Stranger"))
    with pytest.raises(EntityNotManagedError):
        session.remove(Author(id=5, name="Stranger"))


def test_merge_copies_detached_state_onto_managed_instance(factory):
    with factory.open_session() as first:
        detached = first.persist(Author(name="Kim", country="US"))

    with factory.open_session() as second:
        detached.country = "Canada"
        managed = second.merge(detached)
        assert managed is not detached
        assert managed.country == "Canada"
        assert second.flush() == 1

    with factory.open_session() as third:
        assert third.find(Author, detached.id).country == "Canada"


def test_merge_persists_new_entities(session):
    fresh = Author(name="New")
    assert session.merge(fresh) is fresh
    assert fresh.id is not None

    missing = Author(id=424242, name="Ghost")
    assert session.merge(missing) is missing
    assert session.find(Author, 424242) is missing


def test_show_sql_logs_statements_at_info(factory, caplog):
    factory.show_sql = True
    caplog.set_level(logging.INFO, logger="keelorm.persistence.session")
    with factory.open_session() as session:
        session.persist(Author(name="Logged"))
    assert any(
        record.levelno == logging.INFO and record.message.startswith("SQL: INSERT")
        for record in caplog.records
    )


def test_closed_session_rejects_operations(factory):
    session = factory.open_session()
    session.close()
    session.close()
    assert not session.is_open()
    with pytest.raises(SessionClosedError):
        session.find(Author, 1)
    with pytest.raises(SessionClosedError):
        session.persist(Author(name="late"))
    with pytest.raises(SessionClosedError):
        session.get_transaction()


def test_query_literal_containing_question_mark(session):
    session.persist(Author(name="Who?"))
    session.persist(Author(name="Plain"))
    found = session.create_query(Author).where("name = 'Who?'").get_single_result()
    assert found.name == "Who?"
