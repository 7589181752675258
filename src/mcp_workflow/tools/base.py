"""Base classes for MCP tools exposed by the workflow server."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, Union

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import BaseModel

from ..models.workflow_models import (
    WORKFLOW_PROPERTY_NAMES,
    MCPWorkflowToolOutput,
    ToolMetadata,
    WorkflowStateData,
    WorkflowToolMetadata,
)

logger = logging.getLogger(__name__)


class AbstractTool(ABC):
    """
    Abstract base class for MCP tools.

    Subclasses implement ``handle_request``; its keyword parameters become the
    tool's input schema when registered on a FastMCP server.
    """

    def __init__(self, metadata: ToolMetadata):
        """
        Initialize tool.

        Args:
            metadata: Tool id, title, description and schemas
        """
        self.metadata = metadata
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    @property
    def tool_id(self) -> str:
        return self.metadata.tool_id

    @abstractmethod
    async def handle_request(self, *args, **kwargs) -> Dict[str, Any]:
        """Handle one MCP tool call and return its structured output."""
        pass

    def register(self, server: FastMCP, annotations: Optional[ToolAnnotations] = None) -> None:
        """
        Register the tool on an MCP server.

        Args:
            server: FastMCP server
            annotations: Client hints (read-only, idempotent, ...)
        """
        self.logger.info(f"Registering MCP tool: {self.tool_id}")
        server.add_tool(
            self.handle_request,
            name=self.tool_id,
            title=self.metadata.title,
            description=self.metadata.description,
            annotations=annotations,
        )


class AbstractWorkflowTool(AbstractTool):
    """A tool that participates in an orchestrated workflow."""

    def __init__(self, metadata: WorkflowToolMetadata, orchestrator_tool_id: str):
        """
        Initialize workflow tool.

        Args:
            metadata: Tool metadata including the expected result schema
            orchestrator_tool_id: Tool the LLM must call back once done
        """
        super().__init__(metadata)
        self.orchestrator_tool_id = orchestrator_tool_id

    def finalize_workflow_tool_output(
        self,
        prompt: str,
        workflow_state_data: WorkflowStateData,
        result_schema: Optional[Union[Type[BaseModel], str]] = None,
    ) -> Dict[str, Any]:
        """
        Append instructions that send the LLM back to the orchestrator.

        This does not invoke the orchestrator; it only tells the LLM to.

        Args:
            prompt: Main task prompt
            workflow_state_data: State to round-trip to the orchestrator
            result_schema: Schema of the task result (the tool's own by default)

        Returns:
            MCPWorkflowToolOutput as a camelCase dict
        """
        schema = result_schema if result_schema is not None else self.metadata.result_schema
        if not isinstance(schema, str):
            schema = json.dumps(schema.model_json_schema(by_alias=True))

        state_json = json.dumps(workflow_state_data.model_dump())
        user_input_name = WORKFLOW_PROPERTY_NAMES["user_input"]
        state_name = WORKFLOW_PROPERTY_NAMES["workflow_state_data"]

        post_instructions = f"""

# Post-Tool-Invocation Instructions

## 1. Format the results from the execution of your task

The output of your task should conform to the following JSON schema:

```json
{schema}
```

A string representation of this JSON schema can also be found in the `resultSchema`
field of this tool's output schema.

## 2. Invoke the next tool to continue the workflow

You MUST initiate the following actions to proceed with the in-progress workflow you are
participating in.

### 2.1. Invoke the `{self.orchestrator_tool_id}` tool

Invoke the `{self.orchestrator_tool_id}` tool to continue the workflow.

### 2.2 Provide input values to the tool

Provide the following input values to the `{self.orchestrator_tool_id}` tool:

- `{user_input_name}`: The structured results from the execution of your task, as specified in the first Post-Tool-Invocation step.
- `{state_name}`: {state_json}

This will continue the workflow orchestration process.
"""

        output = MCPWorkflowToolOutput(prompt_for_llm=prompt + post_instructions, result_schema=schema)
        return output.model_dump(by_alias=True)
