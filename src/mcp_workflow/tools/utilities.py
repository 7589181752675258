"""Utility workflow tools for gathering and extracting user input."""

import json
from typing import Any, Dict, List, Optional

from pydantic import Field

from ..models.workflow_models import (
    GetInputProperty,
    MCPWorkflowToolOutput,
    WireModel,
    WorkflowToolInput,
    WorkflowToolMetadata,
)
from .base import AbstractWorkflowTool


# ----- Get input -----


class GetInputWorkflowInput(WorkflowToolInput):
    properties_requiring_input: List[GetInputProperty] = Field(
        ..., description="The metadata for the properties that require input from the user"
    )


class GetInputWorkflowResult(WireModel):
    user_utterance: Any = Field(..., description="The user's response to the question")


def create_get_input_metadata(tool_id: str) -> WorkflowToolMetadata:
    return WorkflowToolMetadata(
        tool_id=tool_id,
        title="Get User Input",
        description="Provides a prompt to the user to elicit their input for a set of properties",
        input_schema=GetInputWorkflowInput,
        output_schema=MCPWorkflowToolOutput,
        result_schema=GetInputWorkflowResult,
    )


class GetInputTool(AbstractWorkflowTool):
    """Asks the user for the properties the workflow could not fill in itself."""

    def __init__(self, tool_id: str, orchestrator_tool_id: str):
        super().__init__(create_get_input_metadata(tool_id), orchestrator_tool_id)

    async def handle_request(
        self,
        workflowStateData: Dict[str, Any],
        propertiesRequiringInput: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Return the prompt asking the user for the listed properties."""
        tool_input = GetInputWorkflowInput.model_validate(
            {
                "workflowStateData": workflowStateData,
                "propertiesRequiringInput": propertiesRequiringInput,
            }
        )
        guidance = generate_get_input_guidance(tool_input.properties_requiring_input)
        return self.finalize_workflow_tool_output(guidance, tool_input.workflow_state_data)


def generate_get_input_guidance(properties: List[GetInputProperty]) -> str:
    """Task guidance asking the user for the given properties."""
    return f"""
# ROLE
You are an input gathering tool, responsible for explicitly requesting and gathering the
user's input for a set of unfulfilled properties.

# TASK
Your job is to provide a prompt to the user that outlines the details for a set of properties
that require the user's input. The prompt should be polite and conversational.

# CONTEXT
Here is the list of properties that require the user's input, along with their describing
metadata:

{describe_properties(properties)}

# INSTRUCTIONS
1. Based on the properties listed in "CONTEXT", generate a prompt that outlines the details
   for each property.
2. Present the prompt to the user and instruct the user to provide their input.
3. **IMPORTANT:** YOU MUST NOW WAIT for the user to provide a follow-up response to your prompt.
    1. You CANNOT PROCEED FROM THIS STEP until the user has provided THEIR OWN INPUT VALUE.
4. Follow the "Post-Tool-Invocation" instructions below, to return the user's
   response to the orchestrator for further processing.
"""


def describe_properties(properties: List[GetInputProperty]) -> str:
    """Prompt-friendly listing of properties awaiting input."""
    blocks = []
    for prop in properties:
        lines = [
            f"- Property Name: {prop.property_name}",
            f"- Friendly Name: {prop.friendly_name}",
            f"- Description: {prop.description}",
        ]
        if prop.reason:
            lines.append(f"- Reason: {prop.reason}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


# ----- Input extraction -----


class PropertyToExtract(WireModel):
    property_name: str = Field(..., description="The name of the property")
    description: str = Field(..., description="The description of the property")


class InputExtractionWorkflowInput(WorkflowToolInput):
    user_utterance: Any = Field(
        ...,
        description="Raw user input - can be text, structured data, or any format describing their request",
    )
    properties_to_extract: List[PropertyToExtract] = Field(
        ..., description="The array of properties to extract from the user input"
    )
    result_schema: str = Field(
        ..., description="The JSON schema defining the extracted properties structure, as a string"
    )


class InputExtractionWorkflowResult(WireModel):
    """Nominal result; the real shape arrives as ``resultSchema`` in the input."""

    result_schema: str = Field(
        ..., description="The JSON schema defining the extracted properties structure, as a string"
    )


def create_input_extraction_metadata(tool_id: str) -> WorkflowToolMetadata:
    return WorkflowToolMetadata(
        tool_id=tool_id,
        title="Input Extraction",
        description="Parses user input and extracts structured project properties",
        input_schema=InputExtractionWorkflowInput,
        output_schema=MCPWorkflowToolOutput,
        result_schema=InputExtractionWorkflowResult,
    )


class InputExtractionTool(AbstractWorkflowTool):
    """Extracts structured property values from a free-form user utterance."""

    def __init__(self, tool_id: str, orchestrator_tool_id: str):
        super().__init__(create_input_extraction_metadata(tool_id), orchestrator_tool_id)

    async def handle_request(
        self,
        workflowStateData: Dict[str, Any],
        propertiesToExtract: List[Dict[str, Any]],
        resultSchema: str,
        userUtterance: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """Return the extraction prompt, using the caller's dynamic result schema."""
        tool_input = InputExtractionWorkflowInput.model_validate(
            {
                "workflowStateData": workflowStateData,
                "userUtterance": userUtterance,
                "propertiesToExtract": propertiesToExtract,
                "resultSchema": resultSchema,
            }
        )
        prompt = self.generate_extraction_prompt(tool_input)
        return self.finalize_workflow_tool_output(
            prompt, tool_input.workflow_state_data, tool_input.result_schema
        )

    def generate_extraction_prompt(self, tool_input: InputExtractionWorkflowInput) -> str:
        properties = "\n".join(
            f"- `{p.property_name}`: {p.description}" for p in tool_input.properties_to_extract
        )
        return f"""
# ROLE
You are an input extraction tool, responsible for correlating a user's request with a set
of known properties.

# TASK
Analyze the user's input below and extract a value for each of the listed properties that
the input clearly provides.

# USER INPUT
```json
{json.dumps(tool_input.user_utterance)}
```

# PROPERTIES TO EXTRACT
{properties}

# INSTRUCTIONS
1. Only extract values that are explicitly stated or unambiguously implied by the user input.
2. Use `null` for any property the user input does not provide. Do NOT invent values.
3. Format the extracted properties according to the "Post-Tool-Invocation" instructions below.
"""
