"""Data models for the workflow engine."""

from .checkpoint_models import (
    EncodedValue,
    StoredCheckpoint,
    StoredWrite,
    SerializedState,
)
from .workflow_models import (
    WORKFLOW_PROPERTY_NAMES,
    WorkflowStateData,
    WorkflowToolInput,
    LLMToolMetadata,
    MCPToolInvocationData,
    NodeGuidanceData,
    InterruptData,
    is_node_guidance_data,
    parse_interrupt_data,
    MCPWorkflowToolOutput,
    OrchestratorInput,
    OrchestratorOutput,
    ToolMetadata,
    WorkflowToolMetadata,
    PropertyMetadata,
    PropertyMetadataCollection,
    PropertyFulfilledResult,
    GetInputProperty,
)

__all__ = [
    "EncodedValue",
    "StoredCheckpoint",
    "StoredWrite",
    "SerializedState",
    "WORKFLOW_PROPERTY_NAMES",
    "WorkflowStateData",
    "WorkflowToolInput",
    "LLMToolMetadata",
    "MCPToolInvocationData",
    "NodeGuidanceData",
    "InterruptData",
    "is_node_guidance_data",
    "parse_interrupt_data",
    "MCPWorkflowToolOutput",
    "OrchestratorInput",
    "OrchestratorOutput",
    "ToolMetadata",
    "WorkflowToolMetadata",
    "PropertyMetadata",
    "PropertyMetadataCollection",
    "PropertyFulfilledResult",
    "GetInputProperty",
]
