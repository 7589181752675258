"""Tool execution from inside workflow graph nodes."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Type, TypeVar

from langgraph.types import interrupt
from pydantic import BaseModel

from ..models.workflow_models import InterruptData

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


class ToolExecutor(ABC):
    """Hands an interrupt payload to whoever executes the next tool."""

    @abstractmethod
    def execute(self, interrupt_data: InterruptData) -> Any:
        pass


class LangGraphToolExecutor(ToolExecutor):
    """
    Pauses the graph with ``interrupt()``.

    On the first run this raises LangGraph's interrupt signal; when the
    orchestrator resumes the thread, ``execute`` returns the resume value.
    Payloads are dumped to camelCase dicts so they checkpoint cleanly.
    """

    def execute(self, interrupt_data: InterruptData) -> Any:
        return interrupt(interrupt_data.model_dump(by_alias=True))


def execute_tool_with_logging(
    tool_executor: ToolExecutor,
    interrupt_data: InterruptData,
    result_model: Type[ResultT],
    validator: Optional[Callable[[Any, Type[ResultT]], ResultT]] = None,
    log: Optional[logging.Logger] = None,
) -> ResultT:
    """
    Execute a tool and validate its result.

    Args:
        tool_executor: Executor that runs the tool
        interrupt_data: Invocation payload
        result_model: Pydantic model the result must satisfy
        validator: Custom validation replacing ``result_model.model_validate``
        log: Logger to use (module logger by default)

    Returns:
        Validated result

    Raises:
        pydantic.ValidationError: If the result does not match ``result_model``
    """
    log = log or logger
    log.debug(f"Interrupt data (pre-execution): {interrupt_data!r}")

    result = tool_executor.execute(interrupt_data)
    log.debug(f"Tool execution result (post-execution): {result!r}")

    if validator is not None:
        return validator(result, result_model)

    validated = result_model.model_validate(result)
    log.debug(f"Validated tool result: {validated!r}")
    return validated
