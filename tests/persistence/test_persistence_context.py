import pytest

from flushorm.core import Entity, IntegerField, StringField
from flushorm.metadata import MetadataRegistry
from flushorm.persistence import (
    ActionQueue,
    DuplicateIdentityError,
    EntityKeyError,
    EntityStatus,
    InvalidStateError,
    NotManagedError,
    PersistenceContext,
)


class Player(Entity):
    id = IntegerField(primary_key=True)
    name = StringField()


class Ticket(Entity):
    subject = StringField()


class FakeWriter:
    def __init__(self):
        self.calls = []
        self.next_key = 100
        self.fail_on = None

    def insert(self, connection, entity):
        if self.fail_on == "insert":
            raise RuntimeError("insert failed")
        self.calls.append(("insert", entity))
        if getattr(entity, "id", None) is None:
            self.next_key += 1
            entity.id = self.next_key
            return self.next_key
        return None

    def snapshot(self, entity):
        return (entity.name if isinstance(entity, Player) else entity.subject,)

    def update(self, connection, entity, snapshot):
        self.calls.append(("update", entity))
        return self.snapshot(entity)

    def delete(self, connection, entity):
        self.calls.append(("delete", entity))
        return 1


@pytest.fixture
def writer():
    return FakeWriter()


@pytest.fixture
def context(writer):
    queue = ActionQueue(writer, writer, writer)
    return PersistenceContext(queue, MetadataRegistry())


def test_add_entity_tracks_and_queues_insert(context):
    player = Player(id=1, name="A")
    context.add_entity(player)

    assert context.contains(player)
    assert context.get_entity(Player, 1) is player
    assert context.get_entry(player).status is EntityStatus.MANAGED
    assert len(context.action_queue.insertions) == 1


def test_add_same_reference_twice_is_noop(context):
    player = Player(id=1, name="A")
    context.add_entity(player)
    context.add_entity(player)
    assert len(context.action_queue.insertions) == 1


def test_duplicate_identity_is_rejected(context):
    context.add_entity(Player(id=1, name="A"))
    with pytest.raises(DuplicateIdentityError):
        context.add_entity(Player(id=1, name="B"))


def test_missing_assigned_identifier_is_rejected(context):
    with pytest.raises(EntityKeyError):
        context.add_entity(Player(name="nameless"))


def test_generated_identifier_is_bound_after_insert(context, writer):
    ticket = Ticket(subject="help")
    context.add_entity(ticket)
    assert context.contains(ticket)
    assert len(context.identity_map) == 0

    context.flush(connection=None)

    assert ticket.id == 101
    assert context.get_entity(Ticket, 101) is ticket


def test_get_entity_returns_none_when_absent(context):
    assert context.get_entity(Player, 99) is None


def test_flush_queues_update_for_modified_entity(context, writer, monkeypatch):
    queued = []
    add_update = context.action_queue.add_update

    def recording_add_update(entity, entry):
        queued.append(entity)
        add_update(entity, entry)

    monkeypatch.setattr(context.action_queue, "add_update", recording_add_update)
    player = Player(id=1, name="A")
    context.add_entity(player)
    context.flush(None)
    assert writer.calls == [("insert", player)]
    assert queued == []

    player.name = "B"
    context.flush(None)
    assert queued == [player]
    assert writer.calls == [("insert", player), ("update", player)]
    assert context.get_entry(player).snapshot == ("B",)

    writer.calls.clear()
    context.flush(None)
    assert writer.calls == []


def test_changes_before_first_flush_are_part_of_insert(context, writer):
    player = Player(id=1, name="A")
    context.add_entity(player)
    player.name = "B"
    context.flush(None)
    assert writer.calls == [("insert", player)]
    assert context.get_entry(player).snapshot == ("B",)


def test_remove_entity_deletes_and_evicts_on_flush(context, writer):
    player = Player(id=2, name="A")
    context.add_entity(player)
    context.remove_entity(player)
    assert context.get_entity(Player, 2) is player

    context.flush(None)

    assert writer.calls == [("insert", player), ("delete", player)]
    assert context.get_entity(Player, 2) is None
    assert not context.contains(player)


def test_remove_untracked_entity_raises(context):
    with pytest.raises(NotManagedError):
        context.remove_entity(Player(id=5, name="ghost"))


def test_remove_twice_raises(context):
    player = Player(id=3, name="A")
    context.add_entity(player)
    context.remove_entity(player)
    with pytest.raises(InvalidStateError):
        context.remove_entity(player)


def test_failed_flush_keeps_queue_and_entries(context, writer):
    player = Player(id=1, name="A")
    context.add_entity(player)
    writer.fail_on = "insert"

    with pytest.raises(RuntimeError):
        context.flush(None)

    assert len(context.action_queue) == 1
    assert context.contains(player)


def test_register_loaded_tracks_without_insert(context):
    player = Player(id=8, name="loaded")
    context.register_loaded(player)
    assert context.get_entity(Player, 8) is player
    assert context.action_queue.is_empty()


def test_detach_frees_identity_slot(context):
    player = Player(id=4, name="A")
    context.add_entity(player)
    context.detach(player)

    assert not context.contains(player)
    assert context.get_entity(Player, 4) is None
    with pytest.raises(NotManagedError):
        context.detach(player)


def test_detached_entity_cannot_be_persisted_again(context, writer):
    player = Player(id=4, name="A")
    context.add_entity(player)
    context.flush(None)
    context.detach(player)

    with pytest.raises(InvalidStateError):
        context.add_entity(player)
    assert context.action_queue.is_empty()
    context.add_entity(Player(id=4, name="A"))


def test_clear_wipes_everything(context):
    context.add_entity(Player(id=1, name="A"))
    context.clear()
    assert len(context) == 0
    assert context.get_entity(Player, 1) is None
    assert context.action_queue.is_empty()
