"""Unit tests for the JSON-exportable checkpointer."""

import json

import pytest
from langgraph.checkpoint.base import empty_checkpoint
from pydantic import ValidationError

from mcp_workflow.core.checkpoints import JsonCheckpointSaver


def make_checkpoint(checkpoint_id, ts, values=None):
    checkpoint = empty_checkpoint()
    checkpoint["id"] = checkpoint_id
    checkpoint["ts"] = ts
    checkpoint["channel_values"] = values or {}
    return checkpoint


def thread_config(thread_id, checkpoint_id=None, checkpoint_ns=""):
    configurable = {"thread_id": thread_id, "checkpoint_ns": checkpoint_ns}
    if checkpoint_id:
        configurable["checkpoint_id"] = checkpoint_id
    return {"configurable": configurable}


def put_history(saver, thread_id, count, prefix="cp"):
    """Store a linear history of checkpoints, each parented on the previous one."""
    config = thread_config(thread_id)
    for i in range(count):
        checkpoint = make_checkpoint(
            f"{prefix}-{i:03d}",
            f"2025-01-01T00:00:{i:02d}+00:00",
            {"step": i, "thread": thread_id},
        )
        config = saver.put(config, checkpoint, {"source": "loop", "step": i}, {})
    return config


@pytest.fixture
def saver():
    return JsonCheckpointSaver()


class TestPutAndGet:
    """Test storing and reading checkpoints."""

    def test_put_returns_config_with_checkpoint_id(self, saver):
        """Test put returns a config pointing at the stored checkpoint."""
        checkpoint = make_checkpoint("cp-1", "2025-01-01T00:00:00+00:00")
        config = saver.put(thread_config("t1"), checkpoint, {"step": 0}, {})

        assert config == {
            "configurable": {"thread_id": "t1", "checkpoint_ns": "", "checkpoint_id": "cp-1"}
        }

    def test_get_tuple_returns_latest(self, saver):
        """Test get_tuple without checkpoint_id returns the newest checkpoint."""
        put_history(saver, "t1", 3)

        result = saver.get_tuple(thread_config("t1"))

        assert result.checkpoint["id"] == "cp-002"
        assert result.checkpoint["channel_values"] == {"step": 2, "thread": "t1"}
        assert result.metadata == {"source": "loop", "step": 2}
        assert result.config["configurable"]["checkpoint_id"] == "cp-002"

    def test_get_tuple_with_checkpoint_id(self, saver):
        """Test get_tuple returns exactly the requested checkpoint."""
        put_history(saver, "t1", 3)

        result = saver.get_tuple(thread_config("t1", "cp-001"))

        assert result.checkpoint["id"] == "cp-001"
        assert result.parent_config["configurable"]["checkpoint_id"] == "cp-000"

    def test_first_checkpoint_has_no_parent(self, saver):
        """Test the root checkpoint has no parent config."""
        put_history(saver, "t1", 1)

        assert saver.get_tuple(thread_config("t1")).parent_config is None

    def test_get_tuple_unknown_thread(self, saver):
        """Test get_tuple returns None for a thread without checkpoints."""
        assert saver.get_tuple(thread_config("missing")) is None
        put_history(saver, "t1", 1)
        assert saver.get_tuple(thread_config("t1", "no-such-id")) is None

    def test_put_same_id_overwrites(self, saver):
        """Test putting the same checkpoint id twice keeps one entry."""
        config = thread_config("t1")
        saver.put(config, make_checkpoint("cp-1", "2025-01-01T00:00:00+00:00", {"v": 1}), {}, {})
        saver.put(config, make_checkpoint("cp-1", "2025-01-01T00:00:00+00:00", {"v": 2}), {}, {})

        entries = list(saver.list(thread_config("t1")))

        assert [e.checkpoint["id"] for e in entries] == ["cp-1"]
        assert entries[0].checkpoint["channel_values"] == {"v": 2}

    def test_overwrite_with_newer_ts_becomes_latest(self, saver):
        """Test re-putting an id with a newer timestamp moves it to the front."""
        config = thread_config("t1")
        saver.put(config, make_checkpoint("c1", "2025-01-01T00:00:00+00:00"), {}, {})
        saver.put(config, make_checkpoint("c2", "2025-01-02T00:00:00+00:00"), {}, {})
        saver.put(config, make_checkpoint("c1", "2025-01-03T00:00:00+00:00"), {}, {})

        ids = [e.checkpoint["id"] for e in saver.list(thread_config("t1"))]

        assert ids == ["c1", "c2"]
        assert saver.get_tuple(thread_config("t1")).checkpoint["id"] == "c1"

    def test_namespaces_are_separate(self, saver):
        """Test checkpoints in different namespaces do not mix."""
        saver.put(thread_config("t1"), make_checkpoint("root", "2025-01-01T00:00:00+00:00"), {}, {})
        saver.put(
            thread_config("t1", checkpoint_ns="child"),
            make_checkpoint("sub", "2025-01-01T00:00:01+00:00"),
            {},
            {},
        )

        assert saver.get_tuple(thread_config("t1")).checkpoint["id"] == "root"
        assert saver.get_tuple(thread_config("t1", checkpoint_ns="child")).checkpoint["id"] == "sub"

    def test_missing_thread_id_raises(self, saver):
        """Test checkpointer calls without a thread_id are rejected."""
        checkpoint = make_checkpoint("cp-1", "2025-01-01T00:00:00+00:00")

        with pytest.raises(ValueError):
            saver.put({"configurable": {}}, checkpoint, {}, {})
        with pytest.raises(ValueError):
            saver.get_tuple({"configurable": {}})


class TestPendingWrites:
    """Test pending writes attached to checkpoints."""

    def test_writes_returned_in_insertion_order(self, saver):
        """Test pending writes come back with the checkpoint, in order."""
        config = put_history(saver, "t1", 1)

        saver.put_writes(config, [("a", 1), ("b", {"nested": [1, 2]})], task_id="task-1")
        saver.put_writes(config, [("c", "x")], task_id="task-2")

        result = saver.get_tuple(thread_config("t1"))

        assert result.pending_writes == [
            ("task-1", "a", 1),
            ("task-1", "b", {"nested": [1, 2]}),
            ("task-2", "c", "x"),
        ]

    def test_later_batch_keeps_other_channels(self, saver):
        """Test a second batch from the same task does not drop its earlier channels."""
        config = put_history(saver, "t1", 1)

        saver.put_writes(config, [("a", 1), ("b", 2)], task_id="task")
        saver.put_writes(config, [("c", 3)], task_id="task")

        result = saver.get_tuple(thread_config("t1"))

        assert result.pending_writes == [("task", "a", 1), ("task", "b", 2), ("task", "c", 3)]

    def test_special_channel_write_replaced(self, saver):
        """Test a repeated error write for a task keeps only the last value."""
        config = put_history(saver, "t1", 1)

        saver.put_writes(config, [("__error__", "first")], task_id="task")
        saver.put_writes(config, [("__error__", "second")], task_id="task")

        result = saver.get_tuple(thread_config("t1"))

        assert result.pending_writes == [("task", "__error__", "second")]

    def test_rewrite_same_task_and_channel_replaces(self, saver):
        """Test a repeated write for the same task and channel keeps the last value."""
        config = put_history(saver, "t1", 1)

        saver.put_writes(config, [("a", 1)], task_id="task-1")
        saver.put_writes(config, [("b", 2)], task_id="task-2")
        saver.put_writes(config, [("a", 3)], task_id="task-1")

        result = saver.get_tuple(thread_config("t1"))

        assert result.pending_writes == [("task-1", "a", 3), ("task-2", "b", 2)]

    def test_writes_belong_to_their_checkpoint(self, saver):
        """Test writes for an older checkpoint are not returned with the latest."""
        first = put_history(saver, "t1", 1)
        saver.put_writes(first, [("a", 1)], task_id="task-1")
        saver.put(first, make_checkpoint("cp-next", "2025-01-02T00:00:00+00:00"), {}, {})

        assert saver.get_tuple(thread_config("t1")).pending_writes == []
        assert saver.get_tuple(thread_config("t1", "cp-000")).pending_writes == [
            ("task-1", "a", 1)
        ]

    def test_put_writes_requires_checkpoint_id(self, saver):
        """Test put_writes without checkpoint_id is rejected."""
        with pytest.raises(ValueError):
            saver.put_writes(thread_config("t1"), [("a", 1)], task_id="task-1")


class TestList:
    """Test listing checkpoints."""

    def test_list_newest_first(self, saver):
        """Test list yields a thread's checkpoints newest first."""
        put_history(saver, "t1", 3)

        ids = [t.checkpoint["id"] for t in saver.list(thread_config("t1"))]

        assert ids == ["cp-002", "cp-001", "cp-000"]

    def test_list_limit(self, saver):
        """Test limit caps the number of results."""
        put_history(saver, "t1", 5)

        assert len(list(saver.list(thread_config("t1"), limit=2))) == 2

    def test_list_before(self, saver):
        """Test before returns only older checkpoints."""
        put_history(saver, "t1", 4)

        ids = [
            t.checkpoint["id"]
            for t in saver.list(thread_config("t1"), before=thread_config("t1", "cp-002"))
        ]

        assert ids == ["cp-001", "cp-000"]

    def test_list_metadata_filter(self, saver):
        """Test metadata filter matches on all keys."""
        put_history(saver, "t1", 3)

        results = list(saver.list(thread_config("t1"), filter={"step": 1}))

        assert [t.checkpoint["id"] for t in results] == ["cp-001"]

    def test_list_all_threads(self, saver):
        """Test list without config covers every thread."""
        put_history(saver, "t1", 2, prefix="a")
        put_history(saver, "t2", 1, prefix="b")

        threads = {t.config["configurable"]["thread_id"] for t in saver.list(None)}

        assert threads == {"t1", "t2"}

    def test_list_is_lazy(self, saver):
        """Test list can be consumed partially."""
        put_history(saver, "t1", 3)

        iterator = saver.list(thread_config("t1"))

        assert next(iterator).checkpoint["id"] == "cp-002"


class TestDeleteThread:
    """Test thread deletion."""

    def test_delete_thread_removes_checkpoints_and_writes(self, saver):
        """Test delete_thread removes only the given thread."""
        config = put_history(saver, "t1", 2)
        saver.put_writes(config, [("a", 1)], task_id="task-1")
        put_history(saver, "t2", 1)

        saver.delete_thread("t1")

        assert saver.get_tuple(thread_config("t1")) is None
        assert saver.get_tuple(thread_config("t2")) is not None
        assert "t1" not in json.loads(saver.export_state())["writes"]


class TestExportImport:
    """Test JSON export and import."""

    def test_round_trip(self, saver):
        """Test import(export()) reproduces checkpoints, order and writes."""
        big = {"items": [{"id": i, "tags": ["x"] * 5, "meta": {"n": i}} for i in range(200)]}
        config = put_history(saver, "t1", 3)
        saver.put(config, make_checkpoint("cp-big", "2025-01-02T00:00:00+00:00", big), {}, {})
        saver.put_writes(thread_config("t1", "cp-big"), [("out", big)], task_id="task-1")

        restored = JsonCheckpointSaver()
        restored.import_state(saver.export_state())

        original = list(saver.list(thread_config("t1")))
        copied = list(restored.list(thread_config("t1")))
        assert [t.checkpoint for t in copied] == [t.checkpoint for t in original]
        assert [t.metadata for t in copied] == [t.metadata for t in original]
        assert [t.parent_config for t in copied] == [t.parent_config for t in original]
        assert copied[0].pending_writes == [("task-1", "out", big)]

    def test_multi_thread_isolation(self, saver):
        """Test re-imported threads stay independent."""
        put_history(saver, "thread-a", 2, prefix="a")
        put_history(saver, "thread-b", 3, prefix="b")

        restored = JsonCheckpointSaver()
        restored.import_state(saver.export_state())

        ids = [t.checkpoint["id"] for t in restored.list(thread_config("thread-a"))]
        assert ids == ["a-001", "a-000"]

    def test_export_is_versioned_json(self, saver):
        """Test the export document shape."""
        put_history(saver, "t1", 1)

        document = json.loads(saver.export_state())

        assert document["version"] == 1
        assert set(document) == {"version", "storage", "writes"}

    def test_import_without_version(self, saver):
        """Test a document without version is accepted."""
        saver.import_state('{"storage": {}, "writes": {}}')

        assert list(saver.list(None)) == []

    def test_import_replaces_existing_state(self, saver):
        """Test import discards what the saver held before."""
        put_history(saver, "t1", 1)

        saver.import_state(JsonCheckpointSaver().export_state())

        assert saver.get_tuple(thread_config("t1")) is None

    def test_import_malformed_json(self, saver):
        """Test malformed JSON raises JSONDecodeError."""
        with pytest.raises(json.JSONDecodeError):
            saver.import_state("not json")

    def test_import_wrong_shape(self, saver):
        """Test JSON of the wrong shape raises a validation error."""
        with pytest.raises(ValidationError):
            saver.import_state('{"storage": [1, 2, 3]}')


class TestAsyncMethods:
    """Test async twins delegate to the sync implementation."""

    @pytest.mark.asyncio
    async def test_async_put_get_list(self, saver):
        """Test aput, aput_writes, aget_tuple and alist."""
        config = await saver.aput(
            thread_config("t1"), make_checkpoint("cp-1", "2025-01-01T00:00:00+00:00"), {}, {}
        )
        await saver.aput_writes(config, [("a", 1)], task_id="task-1")

        result = await saver.aget_tuple(thread_config("t1"))
        listed = [t async for t in saver.alist(thread_config("t1"))]

        assert result.pending_writes == [("task-1", "a", 1)]
        assert [t.checkpoint["id"] for t in listed] == ["cp-1"]

    @pytest.mark.asyncio
    async def test_adelete_thread(self, saver):
        """Test adelete_thread removes the thread."""
        put_history(saver, "t1", 1)

        await saver.adelete_thread("t1")

        assert await saver.aget_tuple(thread_config("t1")) is None
