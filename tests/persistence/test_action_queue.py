import pytest

from flushorm.persistence import ActionQueue, DeleteAction, InsertAction, UpdateAction


class Recorder:
    """Stands in for persister, updater and deleter at once."""

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    def _record(self, kind, entity):
        if self.fail_on == (kind, entity):
            raise RuntimeError(f"{kind} failed")
        self.calls.append((kind, entity))

    def insert(self, connection, entity):
        self._record("insert", entity)
        return None

    def snapshot(self, entity):
        return ()

    def update(self, connection, entity, snapshot):
        self._record("update", entity)
        return snapshot

    def delete(self, connection, entity):
        self._record("delete", entity)
        return 1


class StubEntry:
    snapshot = ()

    def update_snapshot(self, values):
        self.refreshed = tuple(values)


def make_queue(recorder):
    return ActionQueue(recorder, recorder, recorder)


def test_actions_run_inserts_then_updates_then_deletes():
    recorder = Recorder()
    queue = make_queue(recorder)
    queue.add_deletion("d1")
    queue.add_update("u1", StubEntry())
    queue.add_insertion("i1")
    queue.add_deletion("d2")
    queue.add_insertion("i2")

    queue.execute_actions(connection=object())

    assert recorder.calls == [
        ("insert", "i1"),
        ("insert", "i2"),
        ("update", "u1"),
        ("delete", "d1"),
        ("delete", "d2"),
    ]


def test_pending_lists_actions_in_execution_order():
    queue = make_queue(Recorder())
    queue.add_deletion("d")
    queue.add_insertion("i")
    queue.add_update("u", StubEntry())
    kinds = [type(action) for action in queue.pending()]
    assert kinds == [InsertAction, UpdateAction, DeleteAction]
    assert len(queue) == 3


def test_failure_aborts_remaining_actions_and_keeps_queue():
    recorder = Recorder(fail_on=("update", "u1"))
    queue = make_queue(recorder)
    queue.add_insertion("i1")
    queue.add_update("u1", StubEntry())
    queue.add_deletion("d1")

    with pytest.raises(RuntimeError):
        queue.execute_actions(connection=None)

    assert recorder.calls == [("insert", "i1")]
    assert len(queue) == 3
    assert not queue.is_empty()


def test_execute_does_not_clear_queue():
    recorder = Recorder()
    queue = make_queue(recorder)
    queue.add_insertion("i1")
    queue.execute_actions(None)
    assert len(queue) == 1

    queue.clear()
    assert queue.is_empty()
    assert not queue.has_pending_insertion("i1")


def test_insert_action_reports_generated_key_and_refreshes_entry():
    reported = []

    class KeyedRecorder(Recorder):
        def insert(self, connection, entity):
            return 42

        def snapshot(self, entity):
            return ("fresh",)

    entry = StubEntry()
    action = InsertAction("e", KeyedRecorder(), entry, lambda entity, key: reported.append((entity, key)))
    action.execute(None)

    assert reported == [("e", 42)]
    assert entry.refreshed == ("fresh",)


def test_actions_are_immutable():
    action = DeleteAction("e", Recorder())
    with pytest.raises(AttributeError):
        action.entity = "other"
