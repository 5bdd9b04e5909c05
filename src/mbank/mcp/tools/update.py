"""
Update Memory Bank Tool - Plan a refresh of existing memory bank documents.

Re-runs project analysis and returns per-document guidance. The documents
themselves are left for the assistant to edit.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from mbank.core.exceptions import MemoryBankError
from mbank.generator.update import plan_memory_bank_update
from mbank.mcp.tools.common import error_response, to_json
from mbank.mcp.tools.inputs import UpdateMemoryBankInput, parse_tool_input

logger = logging.getLogger(__name__)

FAILED_STATUS = "Memory bank update planning failed"


async def execute_update_memory_bank(project_root_path: str, depth: str = "medium") -> str:
    """
    Plan an update of the memory bank from a fresh project analysis.

    Args:
        project_root_path: Project root containing .github/memory-bank
        depth: Scan depth - shallow, medium or deep

    Returns:
        JSON plan with the analysis, per-document guidance and next steps
    """
    try:
        params = parse_tool_input(UpdateMemoryBankInput, {
            "project_root_path": project_root_path,
            "depth": depth,
        })
    except MemoryBankError as e:
        return error_response(FAILED_STATUS, e)

    root = Path(params.project_root_path)
    try:
        plan = plan_memory_bank_update(root, params.depth)
    except (MemoryBankError, OSError) as e:
        logger.error(f"Update planning failed: {e}")
        return error_response(
            FAILED_STATUS,
            e,
            root,
            "Check the project path and that the memory bank documents are readable.",
        )

    if plan.missing_files:
        message = (
            f"⚠️ {len(plan.missing_files)} core documents are missing. "
            "Generate them before updating."
        )
    elif plan.needs_update:
        message = f"🔄 {len(plan.needs_update)} documents still contain placeholder text."
    else:
        message = "🔄 Review each document against the current project analysis."

    response: dict[str, Any] = {"status": "Memory bank update planned", "message": message}
    response.update(plan.to_dict())
    return to_json(response)
