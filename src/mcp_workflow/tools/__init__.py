"""MCP tools: orchestrator, workflow tool bases and utility tools."""

from .base import AbstractTool, AbstractWorkflowTool
from .executor import LangGraphToolExecutor, ToolExecutor, execute_tool_with_logging
from .utilities import (
    GetInputTool,
    InputExtractionTool,
    create_get_input_metadata,
    create_input_extraction_metadata,
)
from .orchestrator import (
    WORKFLOW_COMPLETE_MESSAGE,
    OrchestratorConfig,
    OrchestratorTool,
    generate_unique_thread_id,
)

__all__ = [
    "AbstractTool",
    "AbstractWorkflowTool",
    "ToolExecutor",
    "LangGraphToolExecutor",
    "execute_tool_with_logging",
    "GetInputTool",
    "InputExtractionTool",
    "create_get_input_metadata",
    "create_input_extraction_metadata",
    "OrchestratorConfig",
    "OrchestratorTool",
    "WORKFLOW_COMPLETE_MESSAGE",
    "generate_unique_thread_id",
]
