"""Reusable workflow graph nodes.

Nodes return state update dicts and never mutate the state they receive.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type

from langchain_core.runnables import RunnableConfig
from pydantic import BaseModel

from ..models.workflow_models import (
    GetInputProperty,
    MCPToolInvocationData,
    PropertyFulfilledResult,
    PropertyMetadataCollection,
)
from ..services.input_services import GetInputService, InputExtractionService
from ..tools.executor import LangGraphToolExecutor, ToolExecutor, execute_tool_with_logging

logger = logging.getLogger(__name__)

IsPropertyFulfilled = Callable[[Dict[str, Any], str], PropertyFulfilledResult]


def is_property_present(state: Dict[str, Any], property_name: str) -> PropertyFulfilledResult:
    """Default fulfillment check: the property is set to a truthy value."""
    if state.get(property_name):
        return PropertyFulfilledResult(is_fulfilled=True)
    return PropertyFulfilledResult(
        is_fulfilled=False,
        reason=f"Property '{property_name}' is missing from the workflow state.",
    )


class BaseNode(ABC):
    """
    Base class for graph nodes.

    Instances are callable, so they can be passed straight to
    ``StateGraph.add_node(node.name, node)``.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def execute(
        self, state: Dict[str, Any], config: Optional[RunnableConfig] = None
    ) -> Dict[str, Any]:
        pass

    def __call__(
        self, state: Dict[str, Any], config: Optional[RunnableConfig] = None
    ) -> Dict[str, Any]:
        return self.execute(state, config)


class AbstractToolNode(BaseNode):
    """A node whose work is performed by an MCP tool the LLM invokes."""

    def __init__(self, name: str, tool_executor: Optional[ToolExecutor] = None):
        super().__init__(name)
        self.tool_executor = tool_executor or LangGraphToolExecutor()
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    def execute_tool_with_logging(
        self,
        invocation: MCPToolInvocationData,
        result_model: Type[BaseModel],
        validator: Optional[Callable[[Any, Type[BaseModel]], Any]] = None,
    ) -> Any:
        return execute_tool_with_logging(
            self.tool_executor, invocation, result_model, validator, log=self.logger
        )


class GetUserInputNode(BaseNode):
    """Asks the user for every required property that is not yet fulfilled."""

    def __init__(
        self,
        get_input_service: GetInputService,
        required_properties: PropertyMetadataCollection,
        is_property_fulfilled: IsPropertyFulfilled = is_property_present,
        user_input_property: str = "user_input",
    ):
        super().__init__("getUserInput")
        self.get_input_service = get_input_service
        self.required_properties = required_properties
        self.is_property_fulfilled = is_property_fulfilled
        self.user_input_property = user_input_property

    def execute(
        self, state: Dict[str, Any], config: Optional[RunnableConfig] = None
    ) -> Dict[str, Any]:
        response = self.get_input_service.get_input(self.get_unfulfilled_properties(state))
        return {self.user_input_property: response}

    def get_unfulfilled_properties(self, state: Dict[str, Any]) -> List[GetInputProperty]:
        unfulfilled = []
        for name, meta in self.required_properties.items():
            result = self.is_property_fulfilled(state, name)
            if not result.is_fulfilled:
                unfulfilled.append(
                    GetInputProperty(
                        property_name=name,
                        friendly_name=meta.friendly_name,
                        description=meta.description,
                        reason=result.reason,
                    )
                )
        return unfulfilled


class UserInputExtractionNode(BaseNode):
    """Extracts required properties from the user input held in the state."""

    def __init__(
        self,
        extraction_service: InputExtractionService,
        required_properties: PropertyMetadataCollection,
        user_input_property: str = "user_input",
    ):
        super().__init__("userInputExtraction")
        self.extraction_service = extraction_service
        self.required_properties = required_properties
        self.user_input_property = user_input_property

    def execute(
        self, state: Dict[str, Any], config: Optional[RunnableConfig] = None
    ) -> Dict[str, Any]:
        user_input = state.get(self.user_input_property)
        return self.extraction_service.extract_properties(user_input, self.required_properties)


def create_get_user_input_node(
    required_properties: PropertyMetadataCollection,
    tool_id: str,
    get_input_service: Optional[GetInputService] = None,
    tool_executor: Optional[ToolExecutor] = None,
    is_property_fulfilled: IsPropertyFulfilled = is_property_present,
    user_input_property: str = "user_input",
) -> GetUserInputNode:
    """
    Create a GetUserInputNode.

    Args:
        required_properties: Properties that must be collected
        tool_id: Get-input tool id (used when no service is given)
        get_input_service: Service override, mainly for tests
        tool_executor: Executor for the default service
        is_property_fulfilled: Fulfillment check per property
        user_input_property: State key receiving the user's response

    Returns:
        Configured node
    """
    service = get_input_service or GetInputService(tool_id, tool_executor)
    return GetUserInputNode(service, required_properties, is_property_fulfilled, user_input_property)


def create_user_input_extraction_node(
    required_properties: PropertyMetadataCollection,
    tool_id: str,
    extraction_service: Optional[InputExtractionService] = None,
    tool_executor: Optional[ToolExecutor] = None,
    user_input_property: str = "user_input",
) -> UserInputExtractionNode:
    service = extraction_service or InputExtractionService(tool_id, tool_executor)
    return UserInputExtractionNode(service, required_properties, user_input_property)
