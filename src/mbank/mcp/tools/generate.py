"""
Generate Memory Bank Tool - Write the memory bank documents.

Analyzes the project, writes the six core documents plus any requested
additional ones and, by default, sets up the instructions document.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mbank.core.exceptions import MemoryBankError
from mbank.generator.analysis import analyze_project
from mbank.generator.memory_bank import ensure_memory_bank_directory, generate_memory_bank_files
from mbank.mcp.tools.common import error_response, to_json
from mbank.mcp.tools.inputs import GenerateMemoryBankInput, parse_tool_input
from mbank.models.analysis import CustomFolder, MemoryBankOptions
from mbank.sync.writer import setup_copilot_instructions

logger = logging.getLogger(__name__)

FAILED_STATUS = "Memory bank generation failed"


def build_options(params: GenerateMemoryBankInput) -> MemoryBankOptions:
    """Translate validated input into generation options."""
    return MemoryBankOptions(
        structure_type=params.structure_type,
        focus_areas=list(params.focus_areas),
        detail_level=params.detail_level,
        additional_files=list(params.additional_files),
        semantic_organization=params.semantic_organization,
        custom_folders=[
            CustomFolder(f.name, f.description, tuple(f.file_patterns))
            for f in params.custom_folders
        ],
    )


async def execute_generate_memory_bank(
    project_root_path: str,
    options: dict | None = None,
) -> str:
    """
    Generate the memory bank for a project.

    Args:
        project_root_path: Project root where .github/memory-bank is created
        options: Generation options (structure_type, focus_areas,
            detail_level, additional_files, semantic_organization,
            custom_folders, setup_instructions)

    Returns:
        JSON report listing the created files
    """
    try:
        params = parse_tool_input(GenerateMemoryBankInput, {
            "project_root_path": project_root_path,
            **(options or {}),
        })
    except MemoryBankError as e:
        return error_response(FAILED_STATUS, e)

    root = Path(params.project_root_path)
    try:
        analysis = analyze_project(root)
        memory_bank_dir = ensure_memory_bank_directory(root)
        created = generate_memory_bank_files(memory_bank_dir, analysis, build_options(params))
        update = setup_copilot_instructions(root) if params.setup_instructions else None
    except (MemoryBankError, OSError) as e:
        logger.error(f"Generation failed: {e}")
        return error_response(FAILED_STATUS, e, root)

    response = {
        "status": "Memory bank generated",
        "created_files": created,
        "file_count": len(created),
        "project_type": analysis.project_type,
    }
    if update is not None:
        response["instructions"] = update.to_dict()
    return to_json(response)
