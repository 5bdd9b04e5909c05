"""
Tool dispatch - Route a raw tool payload to its handler.

The payload names the tool in its ``tool`` field and is validated against
that tool's input model before any handler runs.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from mbank.core.exceptions import ToolInputError
from mbank.mcp.tools.analyze import execute_analyze_project_structure
from mbank.mcp.tools.common import error_response
from mbank.mcp.tools.generate import execute_generate_memory_bank
from mbank.mcp.tools.inputs import GenerateMemoryBankInput, parse_tool_request
from mbank.mcp.tools.resolve import execute_resolve_sync_conflicts
from mbank.mcp.tools.setup import execute_setup_copilot_instructions
from mbank.mcp.tools.update import execute_update_memory_bank
from mbank.mcp.tools.validate import execute_validate_memory_bank

INVALID_REQUEST_STATUS = "Invalid tool request"

HANDLERS: dict[str, Callable[..., Awaitable[str]]] = {
    "validate_memory_bank": execute_validate_memory_bank,
    "resolve_sync_conflicts": execute_resolve_sync_conflicts,
    "setup_copilot_instructions": execute_setup_copilot_instructions,
    "analyze_project_structure": execute_analyze_project_structure,
    "update_memory_bank": execute_update_memory_bank,
}


async def dispatch_tool_request(payload: dict[str, Any]) -> str:
    """
    Validate a payload and run the tool it names.

    Args:
        payload: Tool arguments plus a ``tool`` name

    Returns:
        The tool's JSON response, or an error response for a bad payload
    """
    try:
        request = parse_tool_request(payload)
    except ToolInputError as e:
        return error_response(INVALID_REQUEST_STATUS, e)

    arguments = request.model_dump(exclude={"tool"})
    if isinstance(request, GenerateMemoryBankInput):
        project_root_path = arguments.pop("project_root_path")
        return await execute_generate_memory_bank(project_root_path, arguments)

    return await HANDLERS[request.tool](**arguments)
