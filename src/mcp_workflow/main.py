"""MCP server entry point for the workflow engine."""

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .config.workflow_config import WorkflowConfig
from .graphs.project_input_graph import create_project_input_workflow
from .services.checkpoint_service import WorkflowStateManager
from .storage.well_known_directory import WORKFLOW_LOG_FILE, WellKnownDirectoryManager
from .tools.orchestrator import OrchestratorConfig, OrchestratorTool
from .tools.utilities import GetInputTool, InputExtractionTool
from .utils.logging_config import configure_logging

logger = logging.getLogger(__name__)

GET_INPUT_TOOL_ID = "magen-get-input"
INPUT_EXTRACTION_TOOL_ID = "magen-input-extraction"

ORCHESTRATOR_DESCRIPTION = (
    "Orchestrates the project setup workflow. Call it with the user's request to "
    "start, and with each tool's structured results to continue."
)


class WorkflowServer:
    """
    MCP server hosting the orchestrator and its utility tools.

    Wires configuration, state management and the reference workflow, and
    registers every tool on a FastMCP server.
    """

    def __init__(self, config: Optional[WorkflowConfig] = None):
        """
        Initialize workflow server.

        Args:
            config: Workflow configuration (read from the environment if omitted)
        """
        self.config = config or WorkflowConfig()
        self.server = FastMCP(self.config.server_name)

        self.state_manager = WorkflowStateManager(config=self.config)
        self.orchestrator = OrchestratorTool(
            OrchestratorConfig(
                tool_id=self.config.orchestrator_tool_id,
                title="Workflow Orchestrator",
                description=ORCHESTRATOR_DESCRIPTION,
                workflow=create_project_input_workflow(
                    extraction_tool_id=INPUT_EXTRACTION_TOOL_ID,
                    get_input_tool_id=GET_INPUT_TOOL_ID,
                ),
                state_manager=self.state_manager,
            )
        )
        self.get_input_tool = GetInputTool(GET_INPUT_TOOL_ID, self.config.orchestrator_tool_id)
        self.input_extraction_tool = InputExtractionTool(
            INPUT_EXTRACTION_TOOL_ID, self.config.orchestrator_tool_id
        )

    def register_tools(self) -> FastMCP:
        """Register all tools and return the server."""
        self.orchestrator.register(
            self.server,
            ToolAnnotations(
                readOnlyHint=False,
                destructiveHint=False,
                idempotentHint=False,
                openWorldHint=False,
            ),
        )
        prompt_only = ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=False,
        )
        self.get_input_tool.register(self.server, prompt_only)
        self.input_extraction_tool.register(self.server, prompt_only)
        return self.server

    def run(self) -> None:
        """Serve over STDIO until the client disconnects."""
        logger.info(f"Starting MCP server '{self.config.server_name}' over stdio")
        self.server.run(transport="stdio")


def main() -> None:
    """Console entry point."""
    config = WorkflowConfig()

    log_file = None
    if config.log_to_file:
        directory = WellKnownDirectoryManager(project_path=config.project_path)
        log_file = directory.get_well_known_file_path(WORKFLOW_LOG_FILE)
    configure_logging(log_file=log_file, log_level=config.log_level, stderr_output=True)

    server = WorkflowServer(config)
    server.register_tools()
    server.run()


if __name__ == "__main__":
    main()
