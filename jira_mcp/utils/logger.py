"""Logging configuration for the Jira MCP server."""

import logging
import sys
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any


def setup_logging(level: str = "INFO", log_dir: Path | None = None) -> None:
    """Configure logging for the server.

    All console output goes to stderr; stdout carries MCP JSON-RPC.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Optional directory for log files.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    console_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)

    handlers: list[logging.Handler] = [console_handler]

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"jira_mcp_{datetime.now():%Y%m%d_%H%M%S}.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if log_dir else log_level,
        handlers=handlers,
        force=True,
    )

    # Suppress noisy loggers; httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("keyring").setLevel(logging.WARNING)


class ToolCallLogger:
    """Logger that tags messages with the tool being handled."""

    def __init__(self, tool_name: str):
        """Initialize logger for a specific tool call.

        Args:
            tool_name: Name of the MCP tool (e.g., jira_get_issue).
        """
        self.tool_name = tool_name
        self.logger = logging.getLogger(f"jira_mcp.tool.{tool_name}")

    def call(self, arguments: Mapping[str, Any]) -> None:
        """Log an incoming call. Only argument names are logged, never values."""
        self.logger.info(f"[{self.tool_name}] called with arguments: {sorted(arguments)}")

    def warning(self, message: str) -> None:
        """Log warning message with tool context."""
        self.logger.warning(f"[{self.tool_name}] {message}")

    def error(self, message: str, exc: Exception | None = None) -> None:
        """Log error message with tool context."""
        self.logger.error(f"[{self.tool_name}] {message}", exc_info=exc)
