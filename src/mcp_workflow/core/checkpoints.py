"""JSON-exportable LangGraph checkpointer."""

import base64
import json
import logging
from typing import Any, AsyncIterator, Dict, Iterator, List, Optional, Sequence, Tuple

from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import (
    WRITES_IDX_MAP,
    BaseCheckpointSaver,
    ChannelVersions,
    Checkpoint,
    CheckpointMetadata,
    CheckpointTuple,
    get_checkpoint_id,
)

from ..models.checkpoint_models import (
    SERIALIZED_STATE_VERSION,
    EncodedValue,
    SerializedState,
    StoredCheckpoint,
    StoredWrite,
)

logger = logging.getLogger(__name__)


def _require_thread_id(config: RunnableConfig) -> str:
    thread_id = (config.get("configurable") or {}).get("thread_id")
    if not thread_id:
        raise ValueError(f"Invalid config, missing thread_id: {config.get('configurable')}")
    return str(thread_id)


def _checkpoint_ns(config: RunnableConfig) -> str:
    return (config.get("configurable") or {}).get("checkpoint_ns", "")


def _make_config(thread_id: str, checkpoint_ns: str, checkpoint_id: str) -> RunnableConfig:
    return {
        "configurable": {
            "thread_id": thread_id,
            "checkpoint_ns": checkpoint_ns,
            "checkpoint_id": checkpoint_id,
        }
    }


class JsonCheckpointSaver(BaseCheckpointSaver):
    """
    In-memory checkpointer whose entire contents export to one JSON document.

    Behaves like LangGraph's MemorySaver for the graph runtime, but keeps its
    data in pydantic models so the store can be written to a file or database
    row between MCP tool calls and restored in a fresh process.

    Checkpoints are kept per thread and namespace, newest first, ordered by
    ``(ts, checkpoint_id)``. Pending writes are attached to the checkpoint that
    was current when the task ran.

    Values are encoded with the saver's serde (msgpack by default), so the same
    limits as MemorySaver apply: integers outside the 64-bit range make ``put``
    raise ``TypeError``.
    """

    def __init__(self, *, serde: Optional[Any] = None):
        super().__init__(serde=serde)
        self._state = SerializedState()

    # ----- encoding -----

    def _encode(self, value: Any) -> EncodedValue:
        type_tag, data = self.serde.dumps_typed(value)
        return EncodedValue(type=type_tag, data=base64.b64encode(data).decode("ascii"))

    def _decode(self, encoded: EncodedValue) -> Any:
        return self.serde.loads_typed((encoded.type, base64.b64decode(encoded.data)))

    # ----- lookup helpers -----

    def _history(self, thread_id: str, checkpoint_ns: str) -> List[StoredCheckpoint]:
        return self._state.storage.get(thread_id, {}).get(checkpoint_ns, [])

    def _pending_writes(
        self, thread_id: str, checkpoint_ns: str, checkpoint_id: str
    ) -> List[Tuple[str, str, Any]]:
        stored = (
            self._state.writes.get(thread_id, {}).get(checkpoint_ns, {}).get(checkpoint_id, {})
        )
        return [(w.task_id, w.channel, self._decode(w.value)) for w in stored.values()]

    def _to_tuple(
        self,
        thread_id: str,
        checkpoint_ns: str,
        saved: StoredCheckpoint,
        metadata: Optional[CheckpointMetadata] = None,
    ) -> CheckpointTuple:
        parent_config = None
        if saved.parent_id:
            parent_config = _make_config(thread_id, checkpoint_ns, saved.parent_id)

        return CheckpointTuple(
            config=_make_config(thread_id, checkpoint_ns, saved.checkpoint_id),
            checkpoint=self._decode(saved.checkpoint),
            metadata=metadata if metadata is not None else self._decode(saved.metadata),
            parent_config=parent_config,
            pending_writes=self._pending_writes(thread_id, checkpoint_ns, saved.checkpoint_id),
        )

    # ----- checkpointer protocol -----

    def get_tuple(self, config: RunnableConfig) -> Optional[CheckpointTuple]:
        """
        Get a checkpoint tuple.

        Returns the checkpoint named by ``checkpoint_id`` when the config has one,
        otherwise the latest checkpoint of the thread/namespace.

        Args:
            config: Runnable config with ``configurable.thread_id``

        Returns:
            Checkpoint tuple, or None if nothing matches
        """
        thread_id = _require_thread_id(config)
        checkpoint_ns = _checkpoint_ns(config)
        history = self._history(thread_id, checkpoint_ns)
        checkpoint_id = get_checkpoint_id(config)

        if checkpoint_id:
            saved = next((c for c in history if c.checkpoint_id == checkpoint_id), None)
        else:
            saved = history[0] if history else None

        if saved is None:
            return None
        return self._to_tuple(thread_id, checkpoint_ns, saved)

    def list(
        self,
        config: Optional[RunnableConfig],
        *,
        filter: Optional[Dict[str, Any]] = None,
        before: Optional[RunnableConfig] = None,
        limit: Optional[int] = None,
    ) -> Iterator[CheckpointTuple]:
        """
        List checkpoints, newest first.

        Args:
            config: Restricts to a thread (and namespace / checkpoint_id when given).
                None or a config without thread_id lists every thread.
            filter: Metadata keys that must all be equal
            before: Only checkpoints with an id strictly lower than this one
            limit: Maximum number of tuples to yield

        Yields:
            Matching checkpoint tuples
        """
        configurable = (config or {}).get("configurable") or {}
        if configurable.get("thread_id"):
            thread_ids: Sequence[str] = [str(configurable["thread_id"])]
        else:
            thread_ids = tuple(self._state.storage.keys())

        config_ns = configurable.get("checkpoint_ns")
        config_checkpoint_id = get_checkpoint_id(config) if configurable else None
        before_id = get_checkpoint_id(before) if before else None
        remaining = limit

        for thread_id in thread_ids:
            namespaces = tuple(self._state.storage.get(thread_id, {}).items())
            for checkpoint_ns, history in namespaces:
                if config_ns is not None and checkpoint_ns != config_ns:
                    continue
                for saved in tuple(history):
                    if config_checkpoint_id and saved.checkpoint_id != config_checkpoint_id:
                        continue
                    if before_id and saved.checkpoint_id >= before_id:
                        continue

                    metadata = self._decode(saved.metadata)
                    if filter and not all(metadata.get(k) == v for k, v in filter.items()):
                        continue

                    if remaining is not None:
                        if remaining <= 0:
                            return
                        remaining -= 1

                    yield self._to_tuple(thread_id, checkpoint_ns, saved, metadata=metadata)

    def put(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        """
        Store a checkpoint.

        A checkpoint whose id already exists for the thread replaces the stored
        entry instead of adding a second one.

        Args:
            config: Config of the parent checkpoint (its checkpoint_id becomes the parent)
            checkpoint: Checkpoint to store
            metadata: Checkpoint metadata
            new_versions: Channel versions written by this step (unused)

        Returns:
            Config pointing at the stored checkpoint
        """
        thread_id = _require_thread_id(config)
        checkpoint_ns = _checkpoint_ns(config)
        checkpoint_id = checkpoint["id"]
        parent_id = config["configurable"].get("checkpoint_id")
        if parent_id == checkpoint_id:
            parent_id = None

        history = self._state.storage.setdefault(thread_id, {}).setdefault(checkpoint_ns, [])
        existing_index = next(
            (i for i, c in enumerate(history) if c.checkpoint_id == checkpoint_id), None
        )
        if existing_index is not None and parent_id is None:
            parent_id = history[existing_index].parent_id

        entry = StoredCheckpoint(
            checkpoint_id=checkpoint_id,
            ts=checkpoint.get("ts", ""),
            checkpoint=self._encode(checkpoint),
            metadata=self._encode(metadata),
            parent_id=parent_id,
        )

        if existing_index is not None:
            history[existing_index] = entry
        else:
            history.append(entry)
        history.sort(key=lambda c: (c.ts, c.checkpoint_id), reverse=True)

        return _make_config(thread_id, checkpoint_ns, checkpoint_id)

    def put_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[Tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        """
        Store pending writes against the checkpoint named in ``config``.

        Writes to special channels (errors, interrupts, ...) replace the task's earlier
        write to that channel. Regular writes are keyed by task, channel and batch
        position, so a later batch only replaces the same channel at the same position.

        Args:
            config: Config with thread_id and checkpoint_id
            writes: (channel, value) pairs
            task_id: Task that produced the writes
            task_path: Path of the task in the graph
        """
        thread_id = _require_thread_id(config)
        checkpoint_ns = _checkpoint_ns(config)
        checkpoint_id = config["configurable"].get("checkpoint_id")
        if not checkpoint_id:
            raise ValueError(
                f"Invalid config, missing checkpoint_id: {config.get('configurable')}"
            )

        stored = (
            self._state.writes.setdefault(thread_id, {})
            .setdefault(checkpoint_ns, {})
            .setdefault(checkpoint_id, {})
        )
        for idx, (channel, value) in enumerate(writes):
            if channel in WRITES_IDX_MAP:
                key = f"{task_id}:{WRITES_IDX_MAP[channel]}"
            else:
                key = f"{task_id}:{channel}:{idx}"
            stored[key] = StoredWrite(
                task_id=task_id,
                channel=channel,
                value=self._encode(value),
                task_path=task_path,
            )

    def delete_thread(self, thread_id: str) -> None:
        """Delete all checkpoints and writes of a thread."""
        self._state.storage.pop(thread_id, None)
        self._state.writes.pop(thread_id, None)

    # ----- async twins -----

    async def aget_tuple(self, config: RunnableConfig) -> Optional[CheckpointTuple]:
        return self.get_tuple(config)

    async def alist(
        self,
        config: Optional[RunnableConfig],
        *,
        filter: Optional[Dict[str, Any]] = None,
        before: Optional[RunnableConfig] = None,
        limit: Optional[int] = None,
    ) -> AsyncIterator[CheckpointTuple]:
        for item in self.list(config, filter=filter, before=before, limit=limit):
            yield item

    async def aput(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        return self.put(config, checkpoint, metadata, new_versions)

    async def aput_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[Tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        self.put_writes(config, writes, task_id, task_path)

    async def adelete_thread(self, thread_id: str) -> None:
        self.delete_thread(thread_id)

    # ----- export / import -----

    def export_state(self) -> str:
        """
        Export the whole store as JSON.

        Returns:
            JSON document ``{"version": 1, "storage": {...}, "writes": {...}}``
        """
        return self._state.model_dump_json()

    def import_state(self, serialized: str) -> None:
        """
        Replace the store with a previously exported document.

        Args:
            serialized: Output of export_state(); a missing version is read as 1

        Raises:
            json.JSONDecodeError: If the text is not JSON
            pydantic.ValidationError: If the document has the wrong shape
        """
        parsed = json.loads(serialized)
        if isinstance(parsed, dict) and "version" not in parsed:
            parsed["version"] = SERIALIZED_STATE_VERSION
        self._state = SerializedState.model_validate(parsed)
        logger.debug(f"Imported checkpoint state for {len(self._state.storage)} thread(s)")
