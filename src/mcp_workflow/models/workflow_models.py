"""Wire models exchanged between MCP tools, the orchestrator and workflow nodes.

Field names on the wire are camelCase (the MCP clients round-trip them verbatim),
while Python code uses snake_case attributes. Always dump with ``by_alias=True``.
"""

from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

# Single source of truth for workflow property naming on the wire
WORKFLOW_PROPERTY_NAMES = {
    "workflow_state_data": "workflowStateData",
    "user_input": "userInput",
}


class WireModel(BaseModel):
    """Base for models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkflowStateData(BaseModel):
    """Opaque session identity round-tripped by the LLM between tool calls."""

    thread_id: str = Field(..., description="Unique identifier for the workflow session")


class WorkflowToolInput(WireModel):
    """Base input for every workflow-participating tool."""

    workflow_state_data: WorkflowStateData = Field(
        ...,
        description=(
            "Workflow session state for continuation. Required for all workflow-aware "
            "tools, but optional for the orchestrator tool, because it can also start "
            "new workflows."
        ),
    )


class LLMToolMetadata(WireModel):
    """Description of the tool the LLM should invoke next."""

    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict)


class MCPToolInvocationData(WireModel):
    """Interrupt payload asking the LLM to invoke a separate MCP tool (delegate mode)."""

    input: Dict[str, Any] = Field(default_factory=dict)
    llm_metadata: LLMToolMetadata

    @classmethod
    def for_tool(
        cls,
        metadata: "ToolMetadata",
        tool_input: Dict[str, Any],
    ) -> "MCPToolInvocationData":
        """
        Build invocation data for a registered tool.

        The input schema is converted to JSON schema here so the payload stays
        serializable when the graph checkpoints it.

        Args:
            metadata: Metadata of the tool to invoke
            tool_input: Business input values (without workflowStateData)

        Returns:
            Invocation data ready to hand to interrupt()
        """
        return cls(
            input=tool_input,
            llm_metadata=LLMToolMetadata(
                name=metadata.tool_id,
                description=metadata.description,
                input_schema=metadata.input_schema.model_json_schema(by_alias=True),
            ),
        )


class NodeGuidanceData(WireModel):
    """Interrupt payload carrying inline task guidance (direct guidance mode).

    ``return_guidance`` is a ``string.Template`` source; the orchestrator substitutes
    ``$thread_id`` and ``$workflow_state_data`` when rendering it.
    """

    node_id: str
    task_guidance: str
    result_schema: Dict[str, Any]
    example_output: Optional[str] = None
    return_guidance: Optional[str] = None


InterruptData = Union[MCPToolInvocationData, NodeGuidanceData]


def is_node_guidance_data(data: Any) -> bool:
    """Check whether an interrupt payload is direct guidance rather than delegation."""
    if isinstance(data, NodeGuidanceData):
        return True
    if isinstance(data, dict):
        return all(key in data for key in ("taskGuidance", "resultSchema", "nodeId"))
    return False


def parse_interrupt_data(value: Any) -> InterruptData:
    """
    Parse a raw interrupt value into its typed form.

    Args:
        value: Interrupt value as stored by the graph runtime

    Returns:
        NodeGuidanceData or MCPToolInvocationData

    Raises:
        pydantic.ValidationError: If the value matches neither shape
    """
    if isinstance(value, (MCPToolInvocationData, NodeGuidanceData)):
        return value
    if is_node_guidance_data(value):
        return NodeGuidanceData.model_validate(value)
    return MCPToolInvocationData.model_validate(value)


class MCPWorkflowToolOutput(WireModel):
    """Standard output of every workflow MCP tool."""

    prompt_for_llm: str = Field(
        ...,
        alias="promptForLLM",
        description="Complete prompt with instructions and post-processing guidance",
    )
    result_schema: str = Field(
        ...,
        description="The string-serialized JSON schema of the expected result from the LLM's task",
    )


class OrchestratorInput(WireModel):
    """Orchestrator input; workflowStateData is defaulted so new workflows can start."""

    user_input: Optional[Any] = Field(
        default=None,
        description=(
            'User input - for initial calls use { "request": "your request" }, for '
            "resumption calls use the structured output from the previous tool"
        ),
    )
    workflow_state_data: WorkflowStateData = Field(
        default_factory=lambda: WorkflowStateData(thread_id=""),
        description="Opaque workflow state data. Do not populate unless explicitly instructed to do so.",
    )


class OrchestratorOutput(WireModel):
    """Natural language orchestration prompt for the calling LLM."""

    orchestration_instructions_prompt: str = Field(
        ...,
        description="The prompt describing the next workflow action for the LLM to execute.",
    )
    is_complete: bool = Field(default=False, description="True once the workflow has concluded")


class ToolMetadata(BaseModel):
    """Registration metadata shared by all MCP tools."""

    model_config = ConfigDict(frozen=True)

    tool_id: str
    title: str
    description: str
    input_schema: Type[BaseModel]
    output_schema: Type[BaseModel]


class WorkflowToolMetadata(ToolMetadata):
    """Metadata for guidance tools, including the shape of the expected LLM result."""

    result_schema: Type[BaseModel]


class PropertyMetadata(BaseModel):
    """A property the workflow must collect, with the python type used to validate it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    friendly_name: str
    description: str
    value_type: Any = str

    def validate_value(self, value: Any) -> Any:
        """Validate (and coerce) a candidate value against ``value_type``."""
        return TypeAdapter(self.value_type).validate_python(value)

    def json_schema(self) -> Dict[str, Any]:
        """JSON schema for ``value_type``, annotated with the description."""
        schema = TypeAdapter(self.value_type).json_schema()
        schema["description"] = self.description
        return schema


PropertyMetadataCollection = Dict[str, PropertyMetadata]


class PropertyFulfilledResult(BaseModel):
    """Outcome of checking whether a state property has been collected."""

    is_fulfilled: bool
    reason: Optional[str] = None


class GetInputProperty(WireModel):
    """A property still requiring user input."""

    property_name: str
    friendly_name: str
    description: str
    reason: Optional[str] = None
