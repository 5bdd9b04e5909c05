"""
Resolve Sync Conflicts Tool - Reconcile the instructions with the memory bank.

Validates first, then runs the resolver with the deterministic policy
operator and reports the full conversation log.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mbank.core.config import MBankConfig
from mbank.core.constants import get_memory_bank_root
from mbank.core.exceptions import MemoryBankError
from mbank.mcp.tools.common import error_response, to_json
from mbank.mcp.tools.inputs import ResolveSyncConflictsInput, parse_tool_input
from mbank.models.sync import ResolutionStatus
from mbank.sync.resolver import PolicyOperator, perform_interactive_sync_resolution
from mbank.sync.validator import validate_memory_bank

logger = logging.getLogger(__name__)

FAILED_STATUS = "Sync conflict resolution failed"

STATUS_LABELS = {
    ResolutionStatus.ALREADY_IN_SYNC: "No conflicts to resolve",
    ResolutionStatus.PRECONDITION_MISSING: "Unable to resolve conflicts",
    ResolutionStatus.COMPLETED: "Interactive sync conflict resolution completed",
    ResolutionStatus.CANCELLED: "Sync conflict resolution cancelled",
}


async def execute_resolve_sync_conflicts(
    project_root_path: str,
    auto_resolve: bool = True,
    confirm_all: bool = False,
) -> str:
    """
    Detect and resolve drift between the memory bank and the instructions.

    Args:
        project_root_path: Project root containing .github/
        auto_resolve: Apply low-impact fixes without confirmation
        confirm_all: Also apply fixes that would otherwise be skipped
            because the conflict is high severity

    Returns:
        JSON report with status, actions, conversation log and final state
    """
    try:
        params = parse_tool_input(ResolveSyncConflictsInput, {
            "project_root_path": project_root_path,
            "auto_resolve": auto_resolve,
            "confirm_all": confirm_all,
        })
    except MemoryBankError as e:
        return error_response(FAILED_STATUS, e)

    root = Path(params.project_root_path)
    memory_bank_dir = get_memory_bank_root(root)

    try:
        policy = MBankConfig.load(root).sync.to_policy()
        validation = validate_memory_bank(
            memory_bank_dir,
            sync_validation=True,
            project_root=root,
            interactive_mode=True,
            policy=policy,
        )
        sync = validation.copilot_sync
        result = perform_interactive_sync_resolution(
            memory_bank_dir,
            root,
            sync.conflict_details if sync else None,
            is_in_sync=bool(sync and sync.is_in_sync),
            operator=PolicyOperator(params.auto_resolve, params.confirm_all),
            policy=policy,
        )
    except (MemoryBankError, OSError) as e:
        logger.error(f"Sync resolution failed: {e}")
        return error_response(
            FAILED_STATUS,
            e,
            root,
            "Failed to resolve sync conflicts. Please check the memory bank structure.",
        )

    if result.status == ResolutionStatus.COMPLETED:
        if result.resolved:
            message = (
                f"✅ Sync conflicts resolved. Applied {len(result.actions_performed)} fixes."
            )
        else:
            message = (
                f"⚠️ Partial resolution. Applied {len(result.actions_performed)} fixes, "
                f"{result.final_state.remaining} conflicts remain and need manual follow-up."
            )
    else:
        message = result.message

    response = result.to_dict()
    response["status"] = STATUS_LABELS[result.status]
    response["outcome"] = result.status.value
    response["message"] = message
    return to_json(response)
