"""
Setup Copilot Instructions Tool - Add the memory bank section.

Appends the managed section to the instructions document unless it is
already present; user-authored text is never modified.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mbank.core.exceptions import MemoryBankError
from mbank.mcp.tools.common import error_response, to_json
from mbank.mcp.tools.inputs import SetupCopilotInstructionsInput, parse_tool_input
from mbank.sync.writer import setup_copilot_instructions

logger = logging.getLogger(__name__)

FAILED_STATUS = "Copilot instructions setup failed"

MESSAGES = {
    "created": "✅ Instructions document created with memory bank integration",
    "appended": "✅ Memory bank section appended; existing content preserved",
    "unchanged": "✅ Instructions document already contains the memory bank section",
}


async def execute_setup_copilot_instructions(project_root_path: str) -> str:
    """
    Create or extend the instructions document.

    Args:
        project_root_path: Project root containing .github/

    Returns:
        JSON report with the action taken
    """
    try:
        params = parse_tool_input(SetupCopilotInstructionsInput, {
            "project_root_path": project_root_path,
        })
    except MemoryBankError as e:
        return error_response(FAILED_STATUS, e)

    root = Path(params.project_root_path)
    try:
        update = setup_copilot_instructions(root)
    except (MemoryBankError, OSError) as e:
        logger.error(f"Instructions setup failed: {e}")
        return error_response(
            FAILED_STATUS,
            e,
            root,
            "Failed to setup Copilot instructions. Please check the project path and permissions.",
        )

    return to_json({
        "status": "Copilot instructions setup completed",
        **update.to_dict(),
        "message": MESSAGES[update.action],
    })
