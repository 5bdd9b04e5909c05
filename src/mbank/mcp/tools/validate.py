"""
Validate Memory Bank Tool - Check completeness and instructions sync.

Reports missing core documents and whether the instructions document
references exactly the files present in the memory bank.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mbank.core.config import MBankConfig
from mbank.core.constants import get_memory_bank_root
from mbank.core.exceptions import MemoryBankError
from mbank.mcp.tools.common import error_response, to_json
from mbank.mcp.tools.inputs import ValidateMemoryBankInput, parse_tool_input
from mbank.sync.validator import summarize_validation, validate_memory_bank

logger = logging.getLogger(__name__)

FAILED_STATUS = "Memory bank validation failed"


async def execute_validate_memory_bank(
    project_root_path: str,
    sync_validation: bool = True,
    detailed: bool = False,
) -> str:
    """
    Validate the memory bank of a project.

    Args:
        project_root_path: Project root containing .github/memory-bank
        sync_validation: Whether to check the instructions document too
        detailed: Include the full validation result under "details"

    Returns:
        JSON summary with status, issues and a human readable summary
    """
    try:
        params = parse_tool_input(ValidateMemoryBankInput, {
            "project_root_path": project_root_path,
            "sync_validation": sync_validation,
            "detailed": detailed,
        })
    except MemoryBankError as e:
        return error_response(FAILED_STATUS, e)

    root = Path(params.project_root_path)
    try:
        config = MBankConfig.load(root)
        result = validate_memory_bank(
            get_memory_bank_root(root),
            sync_validation=params.sync_validation,
            project_root=root,
            policy=config.sync.to_policy(),
        )
    except (MemoryBankError, OSError) as e:
        logger.error(f"Validation failed: {e}")
        return error_response(
            FAILED_STATUS,
            e,
            root,
            "Check that the project path exists and contains .github/memory-bank.",
        )

    response = summarize_validation(result).to_dict()
    if params.detailed:
        response["details"] = result.to_dict()
    return to_json(response)
