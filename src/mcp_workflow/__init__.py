"""MCP workflow engine: LangGraph workflows driven one step per MCP tool call."""

from .config import WorkflowConfig
from .core import JsonCheckpointSaver
from .exceptions import (
    CheckpointerConfigurationError,
    InvalidSerializedStateError,
    MissingInterruptError,
    WorkflowError,
)
from .services import WorkflowStateManager
from .tools import OrchestratorConfig, OrchestratorTool

__version__ = "0.1.0"

__all__ = [
    "WorkflowConfig",
    "JsonCheckpointSaver",
    "WorkflowStateManager",
    "OrchestratorConfig",
    "OrchestratorTool",
    "WorkflowError",
    "InvalidSerializedStateError",
    "CheckpointerConfigurationError",
    "MissingInterruptError",
]
