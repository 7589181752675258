"""Services that collect workflow properties from the user through tool interrupts."""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, Field, ValidationError, create_model

from ..models.workflow_models import (
    GetInputProperty,
    InterruptData,
    MCPToolInvocationData,
    NodeGuidanceData,
    PropertyMetadataCollection,
)
from ..tools.executor import LangGraphToolExecutor, ToolExecutor, execute_tool_with_logging
from ..tools.utilities import (
    GetInputWorkflowResult,
    create_get_input_metadata,
    create_input_extraction_metadata,
    generate_get_input_guidance,
)

logger = logging.getLogger(__name__)


class AbstractService:
    """
    Base class for services that invoke tools from inside graph nodes.

    The tool executor is injectable so tests can return canned results instead
    of interrupting a real graph.
    """

    def __init__(self, service_name: str, tool_executor: Optional[ToolExecutor] = None):
        self.service_name = service_name
        self.tool_executor = tool_executor or LangGraphToolExecutor()
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    def execute_tool_with_logging(
        self,
        interrupt_data: InterruptData,
        result_model: Type[BaseModel],
        validator: Optional[Callable[[Any, Type[BaseModel]], Any]] = None,
    ) -> Any:
        return execute_tool_with_logging(
            self.tool_executor, interrupt_data, result_model, validator, log=self.logger
        )


class GetInputService(AbstractService):
    """Asks the LLM to solicit values for unfulfilled properties from the user."""

    def __init__(self, tool_id: str, tool_executor: Optional[ToolExecutor] = None):
        super().__init__("GetInputService", tool_executor)
        self.tool_id = tool_id

    def get_input(self, unfulfilled_properties: List[GetInputProperty]) -> Any:
        """
        Request user input for the given properties.

        Args:
            unfulfilled_properties: Properties still missing from the workflow state

        Returns:
            The user's response (any JSON value)
        """
        self.logger.debug(
            f"Starting input request for: {[p.property_name for p in unfulfilled_properties]}"
        )

        metadata = create_get_input_metadata(self.tool_id)
        guidance = NodeGuidanceData(
            node_id=metadata.tool_id,
            task_guidance=generate_get_input_guidance(unfulfilled_properties),
            result_schema=metadata.result_schema.model_json_schema(by_alias=True),
        )

        result = self.execute_tool_with_logging(guidance, GetInputWorkflowResult)
        return result.user_utterance


class InputExtractionService(AbstractService):
    """Extracts property values from a user utterance through the extraction tool."""

    def __init__(self, tool_id: str, tool_executor: Optional[ToolExecutor] = None):
        super().__init__("InputExtractionService", tool_executor)
        self.tool_id = tool_id

    def extract_properties(
        self, user_input: Any, properties: PropertyMetadataCollection
    ) -> Dict[str, Any]:
        """
        Extract and validate properties from user input.

        Null values, unknown property names and values failing their property's
        type are dropped rather than failing the extraction.

        Args:
            user_input: Raw user input (text, structured data, ...)
            properties: Properties to extract, keyed by name

        Returns:
            Validated values keyed by property name

        Raises:
            pydantic.ValidationError: If the result lacks ``extractedProperties``
        """
        self.logger.debug(f"Starting property extraction for {len(properties)} properties")

        result_model = self.build_result_model(properties)
        metadata = create_input_extraction_metadata(self.tool_id)
        invocation = MCPToolInvocationData.for_tool(
            metadata,
            {
                "userUtterance": user_input,
                "propertiesToExtract": [
                    {"propertyName": name, "description": meta.description}
                    for name, meta in properties.items()
                ],
                "resultSchema": json.dumps(result_model.model_json_schema()),
            },
        )

        extracted = self.execute_tool_with_logging(
            invocation,
            result_model,
            lambda raw, model: self.validate_and_filter_result(raw, properties, model),
        )

        self.logger.info(f"Property extraction completed: {sorted(extracted)}")
        return extracted

    @staticmethod
    def build_result_model(properties: PropertyMetadataCollection) -> Type[BaseModel]:
        """
        Build the ``{"extractedProperties": {...}}`` result model.

        Every property is optional and typed loosely here; per-property type
        checks happen afterwards so one bad value does not reject the rest.
        """
        fields = {
            name: (Optional[Any], Field(default=None, description=meta.description))
            for name, meta in properties.items()
        }
        extracted_model = create_model("ExtractedProperties", **fields)
        return create_model(
            "InputExtractionResult",
            extractedProperties=(extracted_model, ...),
        )

    def validate_and_filter_result(
        self,
        raw_result: Any,
        properties: PropertyMetadataCollection,
        result_model: Type[BaseModel],
    ) -> Dict[str, Any]:
        result_model.model_validate(raw_result)
        extracted = raw_result["extractedProperties"]

        valid: Dict[str, Any] = {}
        invalid: List[str] = []
        for name, value in extracted.items():
            if value is None:
                self.logger.debug(f"Skipping property with null value: {name}")
                continue

            meta = properties.get(name)
            if meta is None:
                self.logger.warning(f"Unknown property in extraction result: {name}")
                continue

            try:
                valid[name] = meta.validate_value(value)
            except ValidationError as e:
                invalid.append(name)
                self.logger.debug(f"Property validation failed for {name}: {e}")

        if invalid:
            self.logger.info(
                f"Some properties failed validation: {invalid} ({len(valid)} valid)"
            )
        return valid
