"""
Shared response helpers for the MCP tools.

Tools always return JSON text. Failures are rendered as data with a
sanitized message; no traceback or absolute path reaches the caller.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from mbank.core.exceptions import ToolInputError, sanitize_error_message

logger = logging.getLogger(__name__)


def to_json(data: dict[str, Any]) -> str:
    """Render a tool response."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def error_response(
    status: str,
    error: BaseException,
    project_root: Path | str | None = None,
    message: str | None = None,
) -> str:
    """
    Render a failed-operation response.

    Args:
        status: Human readable status, e.g. "Sync conflict resolution failed"
        error: The exception that ended the operation
        project_root: Root whose prefix is stripped from the message
        message: Optional guidance for the caller

    Returns:
        JSON text with ``status`` and a sanitized ``error``
    """
    data: dict[str, Any] = {
        "status": status,
        "error": sanitize_error_message(error, project_root),
    }
    if isinstance(error, ToolInputError):
        data["errors"] = list(error.errors)
    if message:
        data["message"] = message
    return to_json(data)
