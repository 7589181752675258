"""Tests for the get-input and input extraction tools."""

import json

import pytest

from mcp_workflow.models.workflow_models import GetInputProperty, WorkflowStateData
from mcp_workflow.tools.utilities import (
    GetInputTool,
    GetInputWorkflowResult,
    InputExtractionTool,
    describe_properties,
    generate_get_input_guidance,
)

STATE = {"thread_id": "mmw-1-abcdef"}


class TestGetInputTool:
    """Test the get-input tool prompt."""

    @pytest.mark.asyncio
    async def test_prompt_lists_properties_and_returns_to_orchestrator(self):
        """Test the output asks for each property and names the orchestrator."""
        tool = GetInputTool("magen-get-input", "magen-orchestrator")

        result = await tool.handle_request(
            workflowStateData=STATE,
            propertiesRequiringInput=[
                {
                    "propertyName": "platform",
                    "friendlyName": "Platform",
                    "description": "Target platform",
                    "reason": "Not provided",
                }
            ],
        )

        prompt = result["promptForLLM"]
        assert "- Property Name: platform" in prompt
        assert "- Reason: Not provided" in prompt
        assert "# Post-Tool-Invocation Instructions" in prompt
        assert "Invoke the `magen-orchestrator` tool" in prompt
        assert '{"thread_id": "mmw-1-abcdef"}' in prompt
        assert json.loads(result["resultSchema"]) == GetInputWorkflowResult.model_json_schema(
            by_alias=True
        )

    @pytest.mark.asyncio
    async def test_missing_state_is_rejected(self):
        """Test workflowStateData without a thread_id fails validation."""
        tool = GetInputTool("magen-get-input", "magen-orchestrator")

        with pytest.raises(ValueError):
            await tool.handle_request(workflowStateData={}, propertiesRequiringInput=[])

    def test_metadata(self):
        """Test the tool id and result schema are exposed on the metadata."""
        tool = GetInputTool("magen-get-input", "magen-orchestrator")

        assert tool.tool_id == "magen-get-input"
        assert tool.metadata.result_schema is GetInputWorkflowResult


class TestGetInputGuidance:
    """Test the shared get-input guidance text."""

    def test_reason_is_optional(self):
        """Test properties without a reason omit the reason line."""
        text = describe_properties(
            [GetInputProperty(property_name="a", friendly_name="A", description="first")]
        )

        assert "Reason" not in text
        assert "- Friendly Name: A" in text

    def test_guidance_waits_for_user(self):
        """Test the guidance tells the LLM to wait for the user's response."""
        guidance = generate_get_input_guidance(
            [GetInputProperty(property_name="a", friendly_name="A", description="first")]
        )

        assert "YOU MUST NOW WAIT" in guidance
        assert "- Property Name: a" in guidance


class TestInputExtractionTool:
    """Test the input extraction tool prompt."""

    @pytest.mark.asyncio
    async def test_uses_caller_result_schema(self):
        """Test the dynamic result schema is passed through unchanged."""
        tool = InputExtractionTool("magen-input-extraction", "magen-orchestrator")
        schema = json.dumps({"type": "object", "properties": {"extractedProperties": {}}})

        result = await tool.handle_request(
            workflowStateData=STATE,
            propertiesToExtract=[{"propertyName": "project_name", "description": "Name"}],
            resultSchema=schema,
            userUtterance="Create an app called Weather",
        )

        assert result["resultSchema"] == schema
        prompt = result["promptForLLM"]
        assert "- `project_name`: Name" in prompt
        assert '"Create an app called Weather"' in prompt
        assert schema in prompt


class TestFinalizeWorkflowToolOutput:
    """Test the shared post-invocation instructions."""

    def test_prompt_is_prefixed(self):
        """Test the task prompt comes first and the instructions follow."""
        tool = GetInputTool("magen-get-input", "orchestrator-x")

        output = tool.finalize_workflow_tool_output(
            "Do the task.", WorkflowStateData(thread_id="t-1")
        )

        assert output["promptForLLM"].startswith("Do the task.")
        assert "`userInput`" in output["promptForLLM"]
        assert "`workflowStateData`: {\"thread_id\": \"t-1\"}" in output["promptForLLM"]
        assert set(output) == {"promptForLLM", "resultSchema"}
