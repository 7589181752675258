"""Workflow services."""

from .checkpoint_service import (
    CheckpointingStrategy,
    DurableCheckpointing,
    EphemeralCheckpointing,
    WorkflowStateManager,
)
from .state_persistence import (
    JsonFileStatePersistence,
    SqliteStatePersistence,
    StatePersistence,
)
from .input_services import AbstractService, GetInputService, InputExtractionService

__all__ = [
    "CheckpointingStrategy",
    "DurableCheckpointing",
    "EphemeralCheckpointing",
    "WorkflowStateManager",
    "StatePersistence",
    "JsonFileStatePersistence",
    "SqliteStatePersistence",
    "AbstractService",
    "GetInputService",
    "InputExtractionService",
]
