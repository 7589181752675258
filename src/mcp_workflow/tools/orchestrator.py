"""Orchestrator tool driving LangGraph workflows one interrupt at a time."""

import json
import logging
import random
import string
import time
from string import Template
from typing import Any, Dict, Optional, Type

from langgraph.graph import StateGraph
from langgraph.types import Command
from mcp.server.fastmcp import Context
from pydantic import BaseModel, ConfigDict, ValidationError

from ..exceptions import MissingInterruptError
from ..execution.progress_reporter import ProgressReporter, create_progress_reporter
from ..models.workflow_models import (
    WORKFLOW_PROPERTY_NAMES,
    InterruptData,
    MCPToolInvocationData,
    NodeGuidanceData,
    OrchestratorInput,
    OrchestratorOutput,
    ToolMetadata,
    WorkflowStateData,
    parse_interrupt_data,
)
from ..services.checkpoint_service import WorkflowStateManager
from .base import AbstractTool

logger = logging.getLogger(__name__)

WORKFLOW_COMPLETE_MESSAGE = (
    "The workflow has concluded. No further workflow actions are forthcoming."
)

_THREAD_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase


def generate_unique_thread_id() -> str:
    """Thread id of the form ``mmw-<epoch millis>-<6 base36 chars>``."""
    suffix = "".join(random.choices(_THREAD_SUFFIX_ALPHABET, k=6))
    return f"mmw-{int(time.time() * 1000)}-{suffix}"


class OrchestratorConfig(BaseModel):
    """Configuration for an OrchestratorTool."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tool_id: str
    title: str
    description: str
    # Uncompiled graph; compiled per request with the loaded checkpointer
    workflow: StateGraph
    state_manager: Optional[WorkflowStateManager] = None
    input_model: Type[BaseModel] = OrchestratorInput
    # State key receiving userInput when a new thread starts
    user_input_key: str = "user_input"


def create_orchestrator_metadata(config: OrchestratorConfig) -> ToolMetadata:
    return ToolMetadata(
        tool_id=config.tool_id,
        title=config.title,
        description=config.description,
        input_schema=config.input_model,
        output_schema=OrchestratorOutput,
    )


class OrchestratorTool(AbstractTool):
    """
    MCP tool advancing a workflow by one step per call.

    Each call loads the checkpointer, resumes the thread's interrupted task (or
    starts a new thread), runs the graph until its next interrupt and returns a
    prompt telling the LLM which tool to invoke next. The thread id travels in
    ``workflowStateData`` and must be passed back on the following call.

    Interrupt payloads come in two shapes:

    - MCPToolInvocationData: the LLM invokes a separate MCP tool
    - NodeGuidanceData: the LLM performs the task directly from inline guidance
    """

    def __init__(self, config: OrchestratorConfig):
        """
        Initialize orchestrator.

        Args:
            config: Tool identity, workflow graph and optional state manager
        """
        super().__init__(create_orchestrator_metadata(config))
        self.config = config
        self.state_manager = config.state_manager or WorkflowStateManager()

    async def handle_request(
        self,
        userInput: Optional[Any] = None,
        workflowStateData: Optional[Dict[str, Any]] = None,
        ctx: Context = None,
    ) -> Dict[str, Any]:
        """Advance the workflow and return orchestration instructions."""
        raw_input: Dict[str, Any] = {}
        if userInput is not None:
            raw_input[WORKFLOW_PROPERTY_NAMES["user_input"]] = userInput
        if workflowStateData is not None:
            raw_input[WORKFLOW_PROPERTY_NAMES["workflow_state_data"]] = workflowStateData

        self.logger.debug(f"Orchestrator tool called with input: {raw_input}")
        try:
            output = await self.process_request(raw_input, ctx)
        except Exception as e:
            self.logger.error(f"Error in orchestrator tool execution: {e}")
            raise

        result = output.model_dump(by_alias=True)
        self.logger.debug(f"Orchestrator returning result: {result}")
        return result

    async def process_request(
        self, raw_input: Dict[str, Any], ctx: Optional[Context] = None
    ) -> OrchestratorOutput:
        """
        Run the workflow to its next pause point.

        Args:
            raw_input: Wire input (camelCase keys)
            ctx: MCP request context, used for progress reporting

        Returns:
            Orchestration prompt, or the completion message

        Raises:
            MissingInterruptError: If the graph paused without an interrupt payload
        """
        parsed: Optional[BaseModel] = None
        thread_id = ""
        try:
            parsed = self.config.input_model.model_validate(raw_input)
            thread_id = self.extract_workflow_state_data(parsed).thread_id
        except ValidationError as e:
            self.logger.error(f"Error parsing orchestrator input. Starting a new workflow: {e}")

        is_resumption = bool(thread_id)
        if not thread_id:
            thread_id = generate_unique_thread_id()
        workflow_state_data = WorkflowStateData(thread_id=thread_id)

        if parsed is not None:
            user_input = self.extract_user_input(parsed)
        else:
            user_input = raw_input.get(WORKFLOW_PROPERTY_NAMES["user_input"])

        self.logger.info(
            f"Processing orchestrator request: thread_id={thread_id}, "
            f"has_user_input={user_input is not None}, is_resumption={is_resumption}"
        )

        thread_config = self.create_thread_config(thread_id, self.get_progress_reporter(ctx))
        checkpointer = await self.state_manager.create_checkpointer()
        compiled_workflow = self.config.workflow.compile(checkpointer=checkpointer)

        graph_state = await compiled_workflow.aget_state(thread_config)
        interrupted_task = next((task for task in graph_state.tasks if task.interrupts), None)

        if interrupted_task is not None:
            self.logger.info(
                f"Resuming interrupted workflow: task_id={interrupted_task.id}, "
                f"interrupts={len(interrupted_task.interrupts)}"
            )
            result = await compiled_workflow.ainvoke(Command(resume=user_input), thread_config)
        else:
            self.logger.info("Starting new workflow execution")
            result = await compiled_workflow.ainvoke(
                {self.config.user_input_key: user_input}, thread_config
            )

        graph_state = await compiled_workflow.aget_state(thread_config)
        if not graph_state.next:
            self.logger.info(f"Workflow completed: thread_id={thread_id}")
            return OrchestratorOutput(
                orchestration_instructions_prompt=WORKFLOW_COMPLETE_MESSAGE,
                is_complete=True,
            )

        interrupt_value = self.get_interrupt_value(result, graph_state)
        if interrupt_value is None:
            self.logger.error("Workflow paused without the expected interrupt payload")
            raise MissingInterruptError("FATAL: Unexpected workflow state without an interrupt")

        interrupt_data = parse_interrupt_data(interrupt_value)
        prompt = self.create_orchestration_prompt(interrupt_data, workflow_state_data)

        await self.state_manager.save_checkpointer_state(checkpointer)

        return OrchestratorOutput(orchestration_instructions_prompt=prompt)

    # ----- extension points -----

    def extract_user_input(self, parsed: BaseModel) -> Any:
        """User input from a parsed request. Override for custom input models."""
        return getattr(parsed, "user_input", None)

    def extract_workflow_state_data(self, parsed: BaseModel) -> WorkflowStateData:
        """Workflow state from a parsed request. Override for custom input models."""
        state = getattr(parsed, "workflow_state_data", None)
        if state is None:
            return WorkflowStateData(thread_id="")
        return state

    def get_progress_reporter(self, ctx: Optional[Context]) -> ProgressReporter:
        return create_progress_reporter(ctx)

    def create_thread_config(
        self, thread_id: str, progress_reporter: Optional[ProgressReporter] = None
    ) -> Dict[str, Any]:
        """LangGraph config for the thread; nodes read the progress reporter from it."""
        return {
            "configurable": {
                "thread_id": thread_id,
                "progress_reporter": progress_reporter,
            }
        }

    @staticmethod
    def get_interrupt_value(result: Any, graph_state: Any) -> Optional[Any]:
        """First interrupt payload from the run result, else from the paused tasks."""
        if isinstance(result, dict) and result.get("__interrupt__"):
            return result["__interrupt__"][0].value
        for task in graph_state.tasks:
            if task.interrupts:
                return task.interrupts[0].value
        return None

    # ----- prompts -----

    def create_orchestration_prompt(
        self, interrupt_data: InterruptData, workflow_state_data: WorkflowStateData
    ) -> str:
        if isinstance(interrupt_data, NodeGuidanceData):
            return self.create_guidance_prompt(interrupt_data, workflow_state_data)
        return self.create_delegate_prompt(interrupt_data, workflow_state_data)

    def create_delegate_prompt(
        self, invocation: MCPToolInvocationData, workflow_state_data: WorkflowStateData
    ) -> str:
        state_name = WORKFLOW_PROPERTY_NAMES["workflow_state_data"]
        tool = invocation.llm_metadata
        return f"""
# Your Role

You are participating in a workflow orchestration process. The current
(`{self.tool_id}`) MCP server tool is the orchestrator, and is sending
you instructions on what to do next. These instructions describe the next participating
MCP server tool to invoke, along with its input schema and input values.

# Your Task

Invoke the following MCP server tool:

**MCP Server Tool Name**: {tool.name}
**MCP Server Tool Input Schema**:
```json
{json.dumps(tool.input_schema)}
```
**MCP Server Tool Input Values**:
```json
{json.dumps(invocation.input)}
```

## Additional Input: `{state_name}`

`{state_name}` is an additional input parameter that is
specified in the input schema above, and should be passed to the next MCP server tool
invocation, with the following object value:

```json
{json.dumps(workflow_state_data.model_dump())}
```

This represents opaque workflow state data that should be round-tripped back to the
`{self.tool_id}` MCP server tool orchestrator at the completion of the
next MCP server tool invocation, without modification. These instructions will be further
specified by the next MCP server tool invocation.

The MCP server tool you invoke will respond with its output, along with further
instructions for continuing the workflow.
"""

    def create_guidance_prompt(
        self, guidance: NodeGuidanceData, workflow_state_data: WorkflowStateData
    ) -> str:
        state_json = json.dumps(workflow_state_data.model_dump())
        header = f"""
# ROLE

You are participating in a workflow orchestration process. The `{self.tool_id}`
MCP server tool is the orchestrator. Instead of invoking another tool, you will
perform the following task (`{guidance.node_id}`) directly.

# TASK GUIDANCE

{guidance.task_guidance}
"""
        if guidance.return_guidance:
            footer = Template(guidance.return_guidance).safe_substitute(
                thread_id=workflow_state_data.thread_id,
                workflow_state_data=state_json,
            )
            return header + "\n" + footer

        user_input_name = WORKFLOW_PROPERTY_NAMES["user_input"]
        state_name = WORKFLOW_PROPERTY_NAMES["workflow_state_data"]
        example_result = guidance.example_output or "{ ...your task result... }"
        return (
            header
            + f"""
# CRITICAL: REQUIRED NEXT STEP

Once the task above is complete, you MUST invoke the `{self.tool_id}` tool to continue
the workflow. Do not stop, and do not invoke any other tool first.

Provide the following input values to the `{self.tool_id}` tool:

- `{user_input_name}`: The result of your task, formatted as described in "OUTPUT FORMAT".
- `{state_name}`: {state_json}

# OUTPUT FORMAT

The `{user_input_name}` value must conform to the following JSON schema:

```json
{json.dumps(guidance.result_schema)}
```

# EXAMPLE TOOL CALL

```json
{{
  "{user_input_name}": {example_result},
  "{state_name}": {state_json}
}}
```
"""
        )
