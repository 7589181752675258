"""Exception types raised by the workflow engine."""


class WorkflowError(Exception):
    """Base class for workflow engine errors."""

    pass


class InvalidSerializedStateError(WorkflowError, ValueError):
    """Raised when state handed to persistence is not valid JSON."""

    pass


class CheckpointerConfigurationError(WorkflowError, RuntimeError):
    """Raised when a checkpointer does not match the configured environment."""

    pass


class MissingInterruptError(WorkflowError, RuntimeError):
    """Raised when the graph pauses without telling the orchestrator what to do next."""

    pass
