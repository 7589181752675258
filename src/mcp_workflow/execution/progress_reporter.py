"""Progress reporting from workflow nodes back to the MCP client."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)

PROGRESS_TOTAL = 100


class ProgressReporter(ABC):
    """Reports progress of a long-running operation."""

    @abstractmethod
    def report(
        self, progress: float, total: float = PROGRESS_TOTAL, message: Optional[str] = None
    ) -> None:
        pass


class NoOpProgressReporter(ProgressReporter):
    def report(
        self, progress: float, total: float = PROGRESS_TOTAL, message: Optional[str] = None
    ) -> None:
        pass


class MCPProgressReporter(ProgressReporter):
    """
    Sends progress notifications through a FastMCP request context.

    ``report`` is synchronous and never blocks: the notification is scheduled on
    the server's event loop, and delivery failures are only logged. Graph nodes
    may call it from a worker thread.
    """

    def __init__(self, ctx: Any, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize the reporter.

        Args:
            ctx: FastMCP Context of the current tool call
            loop: Event loop serving the request (the running loop by default)
        """
        self.ctx = ctx
        self.loop = loop or asyncio.get_running_loop()

    @staticmethod
    def to_percentage(progress: float, total: float) -> int:
        if total <= 0:
            return 0
        return round(progress / total * PROGRESS_TOTAL)

    def report(
        self, progress: float, total: float = PROGRESS_TOTAL, message: Optional[str] = None
    ) -> None:
        percentage = self.to_percentage(progress, total)
        text = f"Progress: {percentage}%: {message}" if message else f"Progress: {percentage}%"

        coro = self.ctx.report_progress(percentage, PROGRESS_TOTAL, text)
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self.loop:
            future = self.loop.create_task(coro)
        else:
            future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future: Any) -> None:
        if not future.cancelled() and future.exception() is not None:
            logger.debug(f"Progress notification failed: {future.exception()}")


def create_progress_reporter(ctx: Optional[Any]) -> ProgressReporter:
    """MCPProgressReporter when a request context is available, else a no-op reporter."""
    if ctx is None:
        return NoOpProgressReporter()
    return MCPProgressReporter(ctx)
