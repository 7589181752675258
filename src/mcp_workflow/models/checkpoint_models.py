"""Serialized checkpoint store layout for state persistence."""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional

SERIALIZED_STATE_VERSION = 1


class EncodedValue(BaseModel):
    """A serde-encoded value: the serde type tag plus base64 payload."""

    type: str
    data: str


class StoredCheckpoint(BaseModel):
    """One checkpoint entry in a thread/namespace history."""

    checkpoint_id: str
    ts: str = ""
    checkpoint: EncodedValue
    metadata: EncodedValue
    parent_id: Optional[str] = None


class StoredWrite(BaseModel):
    """A pending write attached to a checkpoint."""

    task_id: str
    channel: str
    value: EncodedValue
    task_path: str = ""


class SerializedState(BaseModel):
    """Entire checkpoint store, exportable as a single JSON document."""

    version: int = SERIALIZED_STATE_VERSION
    # thread_id -> checkpoint_ns -> checkpoints, newest first
    storage: Dict[str, Dict[str, List[StoredCheckpoint]]] = Field(default_factory=dict)
    # thread_id -> checkpoint_ns -> checkpoint_id -> "task_id:idx" or "task_id:channel:idx" -> write
    writes: Dict[str, Dict[str, Dict[str, Dict[str, StoredWrite]]]] = Field(
        default_factory=dict
    )
