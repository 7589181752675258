"""Reference workflow collecting project properties from the user.

Flow: extract properties from the request, check them, ask the user for any
that are missing, and loop until every property is known.
"""

import logging
from typing import Any, Dict, Literal, Optional, TypedDict

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

from ..core.edges import CheckPropertiesFulfilledRouter
from ..core.nodes import create_get_user_input_node, create_user_input_extraction_node
from ..models.workflow_models import PropertyMetadata, PropertyMetadataCollection
from ..tools.executor import ToolExecutor

logger = logging.getLogger(__name__)

EXTRACT_NODE = "extract_project_properties"
GET_INPUT_NODE = "get_user_input"
FINISH_NODE = "finish"


class ProjectInputState(TypedDict, total=False):
    """State schema for the project input workflow."""

    user_input: Any
    project_name: str
    platform: str
    package_name: str
    summary: str


PROJECT_PROPERTIES: PropertyMetadataCollection = {
    "project_name": PropertyMetadata(
        friendly_name="Project Name",
        description="The name of the mobile app project to create",
    ),
    "platform": PropertyMetadata(
        friendly_name="Platform",
        description="The target mobile platform, either iOS or Android",
        value_type=Literal["iOS", "Android"],
    ),
    "package_name": PropertyMetadata(
        friendly_name="Package Name",
        description="The reverse-DNS package identifier, e.g. com.example.myapp",
    ),
}


def finish_node(state: ProjectInputState, config: Optional[RunnableConfig] = None) -> Dict[str, Any]:
    """Summarize the collected properties."""
    reporter = ((config or {}).get("configurable") or {}).get("progress_reporter")
    if reporter is not None:
        reporter.report(100, 100, "Project properties collected")

    summary = ", ".join(f"{name}={state.get(name)}" for name in PROJECT_PROPERTIES)
    logger.info(f"Project input workflow finished: {summary}")
    return {"summary": summary}


def create_project_input_workflow(
    extraction_tool_id: str,
    get_input_tool_id: str,
    tool_executor: Optional[ToolExecutor] = None,
    properties: Optional[PropertyMetadataCollection] = None,
) -> StateGraph:
    """
    Create the (uncompiled) project input workflow.

    Args:
        extraction_tool_id: Input extraction tool the LLM is sent to
        get_input_tool_id: Tool id used as node id for user input guidance
        tool_executor: Executor override for tests
        properties: Properties to collect (PROJECT_PROPERTIES by default)

    Returns:
        StateGraph ready to be compiled with a checkpointer
    """
    properties = properties or PROJECT_PROPERTIES

    extract_node = create_user_input_extraction_node(
        properties, extraction_tool_id, tool_executor=tool_executor
    )
    get_input_node = create_get_user_input_node(
        properties, get_input_tool_id, tool_executor=tool_executor
    )
    router = CheckPropertiesFulfilledRouter(FINISH_NODE, GET_INPUT_NODE, properties)

    graph = StateGraph(ProjectInputState)
    graph.add_node(EXTRACT_NODE, extract_node)
    graph.add_node(GET_INPUT_NODE, get_input_node)
    graph.add_node(FINISH_NODE, finish_node)

    graph.add_edge(START, EXTRACT_NODE)
    graph.add_conditional_edges(
        EXTRACT_NODE, router, {FINISH_NODE: FINISH_NODE, GET_INPUT_NODE: GET_INPUT_NODE}
    )
    graph.add_edge(GET_INPUT_NODE, EXTRACT_NODE)
    graph.add_edge(FINISH_NODE, END)

    return graph
