"""Logging configuration with log rotation.

Logs go to a rotating file in the well-known directory and, optionally, to
stderr. stdout is never used because it carries the MCP STDIO protocol.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB per file
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ROOT_LOGGER_NAME = "mcp_workflow"


def configure_logging(
    log_file: Optional[Path] = None,
    log_level: Union[int, str] = logging.INFO,
    stderr_output: bool = False,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    log_format: str = DEFAULT_LOG_FORMAT,
) -> logging.Logger:
    """
    Configure the ``mcp_workflow`` logger.

    Args:
        log_file: Rotating log file path (no file logging when None)
        log_level: Level name or number
        stderr_output: Also log to stderr
        max_bytes: Maximum size per log file before rotation
        backup_count: Number of rotated files to keep
        log_format: Log record format

    Returns:
        The configured package logger
    """
    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(log_level)

    # Avoid duplicate handlers on reconfiguration
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if stderr_output:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root_logger.addHandler(stderr_handler)

    root_logger.propagate = False

    root_logger.info(
        f"Logging configured: file={log_file}, level={logging.getLevelName(log_level)}"
    )
    return root_logger
