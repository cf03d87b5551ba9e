import sqlite3

import pytest

from flushorm import (
    Entity,
    IllegalStateError,
    IntegerField,
    NotManagedError,
    PersistenceConfiguration,
    StringField,
    ValidationError,
    create_session_factory,
)
from flushorm.hooks import HookDispatcher
from flushorm.metadata import MetadataRegistry
from flushorm.persistence import DuplicateIdentityError, InvalidStateError, TransactionStatus


class Member(Entity):
    id = IntegerField(primary_key=True)
    name = StringField(max_length=20)
    email = StringField(nullable=True)

    def clean(self):
        if self.email is not None and "@" not in self.email:
            raise ValidationError({"email": ["Enter a valid email address."]})


class Note(Entity):
    body = StringField()


class Contact(Entity):
    id = IntegerField(primary_key=True)
    name = StringField()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "members.db"


@pytest.fixture
def dispatcher():
    return HookDispatcher()


@pytest.fixture
def factory(db_path, dispatcher):
    config = PersistenceConfiguration(
        url=f"sqlite:///{db_path}", entity_classes=[Member, Note, Contact]
    )
    factory = create_session_factory(config, registry=MetadataRegistry(), hooks=dispatcher)
    factory.create_schema()
    yield factory
    factory.close()


def fetch_rows(db_path, sql):
    connection = sqlite3.connect(db_path)
    try:
        return connection.execute(sql).fetchall()
    finally:
        connection.close()


def seed_members(factory):
    session = factory.create_session()
    with session.transaction():
        session.persist(Member(id=1, name="A"))
        session.persist(Member(id=2, name="Z"))
    session.close()


def test_persist_and_commit_writes_rows(factory, db_path):
    seed_members(factory)
    assert fetch_rows(db_path, "SELECT id, name FROM member ORDER BY id") == [(1, "A"), (2, "Z")]


def test_modify_one_member_and_remove_another(factory, db_path):
    seed_members(factory)
    session = factory.create_session()
    tx = session.get_transaction()
    tx.begin()

    first = session.find(Member, 1)
    second = session.find(Member, 2)
    first.name = "B"
    session.remove(second)
    tx.commit()

    assert fetch_rows(db_path, "SELECT id, name FROM member") == [(1, "B")]
    assert session.context.get_entity(Member, 2) is None
    assert tx.status is TransactionStatus.COMMITTED


def update_count(session):
    return sum(
        entry["count"] for entry in session.statements.summary() if entry["sql"].startswith("UPDATE")
    )


def test_insert_update_and_idle_flush_against_sqlite(factory):
    session = factory.create_session()
    tx = session.get_transaction()
    tx.begin()
    connection = tx.coordinator.get_connection()

    contact = Contact(id=1, name="A")
    session.persist(contact)
    session.flush()
    assert connection.execute("SELECT id, name FROM contact").fetchall() == [(1, "A")]

    contact.name = "B"
    session.flush()
    assert update_count(session) == 1
    assert connection.execute("SELECT name FROM contact WHERE id = 1").fetchall() == [("B",)]
    assert session.context.get_entry(contact).snapshot == ("B",)

    session.flush()
    assert update_count(session) == 1
    tx.commit()


def test_interleaved_sessions_on_memory_database_keep_committed_rows():
    config = PersistenceConfiguration(url="sqlite:///:memory:", entity_classes=[Contact])
    with create_session_factory(config, registry=MetadataRegistry(), hooks=HookDispatcher()) as factory:
        factory.create_schema()
        writer = factory.create_session()
        bystander = factory.create_session()

        writer.get_transaction().begin()
        writer.persist(Contact(id=1, name="A"))
        writer.flush()
        bystander.get_transaction().begin()
        bystander.get_transaction().rollback()
        writer.get_transaction().commit()

        reader = factory.create_session()
        with reader.transaction():
            found = reader.find(Contact, 1)
            assert found is not None
            assert found.name == "A"


def test_flush_evicts_removed_entity(factory):
    seed_members(factory)
    session = factory.create_session()
    with session.transaction():
        member = session.find(Member, 2)
        session.remove(member)
        session.flush()
        assert session.context.get_entity(Member, 2) is None
        assert not session.contains(member)


def test_find_returns_same_instance(factory):
    seed_members(factory)
    session = factory.create_session()
    with session.transaction():
        first = session.find(Member, 1)
        assert session.find(Member, 1) is first
        assert session.find(Member, 404) is None


def test_update_sets_only_changed_columns(factory):
    session = factory.create_session()
    with session.transaction():
        session.persist(Member(id=1, name="A", email="a@example.com"))

    with session.transaction():
        session.find(Member, 1).name = "B"

    update_sql = [entry["sql"] for entry in session.statements.summary() if entry["sql"].startswith("UPDATE")]
    assert update_sql == ['UPDATE "member" SET "name" = ? WHERE "id" = ?']


def test_unchanged_entity_issues_no_update(factory):
    seed_members(factory)
    session = factory.create_session()
    with session.transaction():
        session.find(Member, 1)

    assert not any(entry["sql"].startswith("UPDATE") for entry in session.statements.summary())


def test_generated_identifier_is_assigned_on_flush(factory, db_path):
    session = factory.create_session()
    with session.transaction():
        note = Note(body="hello")
        session.persist(note)
        assert note.id is None
        session.flush()
        assert note.id is not None
        assert session.context.get_entity(Note, note.id) is note

    assert fetch_rows(db_path, "SELECT body FROM note") == [("hello",)]


def test_rollback_discards_changes_and_clears_context(factory, db_path):
    session = factory.create_session()
    tx = session.get_transaction()
    tx.begin()
    member = Member(id=7, name="temp")
    session.persist(member)
    session.flush()
    tx.rollback()

    assert fetch_rows(db_path, "SELECT id FROM member") == []
    assert not session.contains(member)
    assert tx.status is TransactionStatus.ROLLED_BACK


def test_exception_in_transaction_block_rolls_back(factory, db_path):
    session = factory.create_session()
    with pytest.raises(RuntimeError):
        with session.transaction():
            session.persist(Member(id=3, name="C"))
            session.flush()
            raise RuntimeError("abort")

    assert fetch_rows(db_path, "SELECT id FROM member") == []
    assert not session.is_transaction_active()


def test_new_transaction_after_commit(factory):
    session = factory.create_session()
    first = session.get_transaction()
    first.begin()
    first.commit()

    second = session.get_transaction()
    assert second is not first
    assert second.status is TransactionStatus.NOT_ACTIVE


def test_persist_requires_active_transaction(factory):
    session = factory.create_session()
    with pytest.raises(IllegalStateError):
        session.persist(Member(id=1, name="A"))


def test_persist_twice_is_rejected(factory):
    session = factory.create_session()
    with session.transaction():
        member = Member(id=1, name="A")
        session.persist(member)
        with pytest.raises(ValueError):
            session.persist(member)


def test_persist_duplicate_identity_is_rejected(factory):
    session = factory.create_session()
    with session.transaction():
        session.persist(Member(id=1, name="A"))
        with pytest.raises(DuplicateIdentityError):
            session.persist(Member(id=1, name="B"))


def test_remove_unmanaged_entity_raises(factory):
    session = factory.create_session()
    with pytest.raises(NotManagedError):
        session.remove(Member(id=1, name="A"))


def test_detached_entity_changes_are_not_written(factory, db_path):
    seed_members(factory)
    session = factory.create_session()
    with session.transaction():
        member = session.find(Member, 1)
        session.detach(member)
        member.name = "ignored"
        assert not session.contains(member)

    assert fetch_rows(db_path, "SELECT name FROM member WHERE id = 1") == [("A",)]


def test_detached_entity_cannot_be_persisted_again(factory):
    seed_members(factory)
    session = factory.create_session()
    with session.transaction():
        member = session.find(Member, 1)
        session.detach(member)
        with pytest.raises(InvalidStateError):
            session.persist(member)


def test_validation_failure_aborts_commit(factory, db_path):
    session = factory.create_session()
    tx = session.get_transaction()
    tx.begin()
    session.persist(Member(id=1, name="A", email="not-an-address"))

    with pytest.raises(ValidationError):
        tx.commit()

    assert tx.status is TransactionStatus.ROLLED_BACK
    assert fetch_rows(db_path, "SELECT id FROM member") == []


def test_hooks_fire_around_writes(factory, dispatcher):
    events = []
    for event in ("before_insert", "after_insert", "before_update", "after_update", "after_commit"):
        dispatcher.register(event, lambda instance, _event=event, **ctx: events.append(_event))

    session = factory.create_session()
    with session.transaction():
        session.persist(Member(id=1, name="A"))
    with session.transaction():
        session.find(Member, 1).name = "B"

    assert events == [
        "before_insert",
        "after_insert",
        "after_commit",
        "before_update",
        "after_update",
        "after_commit",
    ]


def test_hook_failure_rolls_back(factory, dispatcher, db_path):
    def refuse(instance, **context):
        raise PermissionError("read-only")

    dispatcher.register("before_insert", refuse, entity=Member)
    session = factory.create_session()
    with pytest.raises(PermissionError):
        with session.transaction():
            session.persist(Member(id=1, name="A"))

    assert fetch_rows(db_path, "SELECT id FROM member") == []


def test_close_with_active_transaction_is_refused(factory):
    session = factory.create_session()
    session.get_transaction().begin()
    with pytest.raises(IllegalStateError):
        session.close()
    assert session.is_open()
    session.get_transaction().rollback()
    session.close()
    assert not session.is_open()


def test_closed_session_rejects_operations(factory):
    session = factory.create_session()
    session.close()
    with pytest.raises(IllegalStateError):
        session.find(Member, 1)
    with pytest.raises(IllegalStateError):
        session.get_transaction()


def test_context_manager_rolls_back_open_transaction(factory, db_path):
    with factory.create_session() as session:
        session.get_transaction().begin()
        session.persist(Member(id=5, name="E"))
        session.flush()

    assert not session.is_open()
    assert fetch_rows(db_path, "SELECT id FROM member") == []
