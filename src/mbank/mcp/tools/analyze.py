"""
Analyze Project Structure Tool - Describe a project before generation.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mbank.core.exceptions import MemoryBankError
from mbank.generator.analysis import analyze_project
from mbank.mcp.tools.common import error_response, to_json
from mbank.mcp.tools.inputs import AnalyzeProjectStructureInput, parse_tool_input

logger = logging.getLogger(__name__)

FAILED_STATUS = "Project analysis failed"


async def execute_analyze_project_structure(project_root_path: str, depth: str = "medium") -> str:
    """
    Analyze a project's metadata and source tree.

    Args:
        project_root_path: Project root directory
        depth: Scan depth - shallow, medium or deep

    Returns:
        JSON project analysis
    """
    try:
        params = parse_tool_input(AnalyzeProjectStructureInput, {
            "project_root_path": project_root_path,
            "depth": depth,
        })
    except MemoryBankError as e:
        return error_response(FAILED_STATUS, e)

    root = Path(params.project_root_path)
    try:
        analysis = analyze_project(root, params.depth)
    except (MemoryBankError, OSError) as e:
        logger.error(f"Analysis failed: {e}")
        return error_response(FAILED_STATUS, e, root)

    return to_json({"status": "Project analysis completed", "analysis": analysis.to_dict()})
