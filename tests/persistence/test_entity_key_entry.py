import pytest

from flushorm.core import Entity, StringField
from flushorm.metadata import MetadataRegistry
from flushorm.persistence import EntityEntry, EntityKey, EntityKeyError, EntityStatus, InvalidStateError


class Tag(Entity):
    label = StringField()
    colour = StringField()


@pytest.fixture
def metadata():
    return MetadataRegistry().scan_and_register(Tag)


def test_entity_keys_compare_structurally():
    assert EntityKey(Tag, 1) == EntityKey(Tag, 1)
    assert hash(EntityKey(Tag, 1)) == hash(EntityKey(Tag, 1))
    assert EntityKey(Tag, 1) != EntityKey(Tag, 2)
    assert len({EntityKey(Tag, 1), EntityKey(Tag, 1)}) == 1


def test_entity_key_rejects_missing_parts():
    with pytest.raises(EntityKeyError):
        EntityKey(Tag, None)
    with pytest.raises(EntityKeyError):
        EntityKey(None, 1)
    assert issubclass(EntityKeyError, ValueError)


def test_new_entry_is_managed_and_unmodified(metadata):
    tag = Tag(id=1, label="a", colour="red")
    entry = EntityEntry(tag, metadata.snapshot(tag))
    assert entry.status is EntityStatus.MANAGED
    assert entry.is_modified(metadata) is False


def test_entry_detects_modification(metadata):
    tag = Tag(id=1, label="a", colour=None)
    entry = EntityEntry(tag, metadata.snapshot(tag))
    tag.colour = "blue"
    assert entry.is_modified(metadata) is True

    entry.update_snapshot(metadata.snapshot(tag))
    assert entry.is_modified(metadata) is False


def test_none_values_compare_equal(metadata):
    tag = Tag(id=1)
    entry = EntityEntry(tag, (None, None))
    assert entry.is_modified(metadata) is False


def test_removed_entry_is_never_modified(metadata):
    tag = Tag(id=1, label="a")
    entry = EntityEntry(tag, metadata.snapshot(tag))
    entry.mark_removed()
    tag.label = "b"
    assert entry.is_modified(metadata) is False


def test_mark_removed_only_from_managed(metadata):
    entry = EntityEntry(Tag(id=1), (None, None))
    entry.mark_removed()
    with pytest.raises(InvalidStateError):
        entry.mark_removed()

    detached = EntityEntry(Tag(id=2), (None, None))
    detached.mark_detached()
    with pytest.raises(InvalidStateError):
        detached.mark_removed()


def test_mark_detached_from_removed():
    entry = EntityEntry(Tag(id=1), (None, None))
    entry.mark_removed()
    entry.mark_detached()
    assert entry.is_detached


def test_snapshot_length_must_match():
    entry = EntityEntry(Tag(id=1), ("a", "b"))
    with pytest.raises(ValueError):
        entry.update_snapshot(("a",))
