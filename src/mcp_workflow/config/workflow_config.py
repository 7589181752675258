"""Workflow engine configuration with environment variable loading."""

import os
from typing import Literal, Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

WorkflowEnvironment = Literal["production", "test"]
StateBackend = Literal["json", "sqlite"]


class WorkflowConfig(BaseModel):
    """Configuration for checkpointing, logging and the MCP server."""

    # Checkpointing Configuration
    environment: WorkflowEnvironment = Field(
        default_factory=lambda: os.getenv("WORKFLOW_ENVIRONMENT", "production"),
        description="'production' persists workflow state, 'test' keeps it in memory",
    )
    project_path: Optional[str] = Field(
        default_factory=lambda: os.getenv("PROJECT_PATH"),
        description="Project root holding the well-known directory (defaults to home)",
    )
    state_backend: StateBackend = Field(
        default_factory=lambda: os.getenv("WORKFLOW_STATE_BACKEND", "json"),
        description="Durable state backend: single JSON file or SQLite row",
    )

    # Logging Configuration
    log_level: str = Field(
        default_factory=lambda: os.getenv("WORKFLOW_LOG_LEVEL", "INFO"),
        description="Root log level for the mcp_workflow logger",
    )
    log_to_file: bool = Field(
        default_factory=lambda: os.getenv("WORKFLOW_LOG_TO_FILE", "true").lower() == "true",
        description="Write rotating logs into the well-known directory",
    )

    # Server Configuration
    orchestrator_tool_id: str = Field(
        default_factory=lambda: os.getenv("ORCHESTRATOR_TOOL_ID", "magen-orchestrator"),
        description="MCP tool id of the orchestrator",
    )
    server_name: str = Field(
        default_factory=lambda: os.getenv("MCP_SERVER_NAME", "mcp-workflow"),
        description="Name the MCP server advertises to clients",
    )
