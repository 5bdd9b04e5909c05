"""
mbank MCP Server - Model Context Protocol server for memory bank sync.

Usage:
    mbank mcp serve              # Start with stdio transport (default)
    mbank mcp serve --transport sse --port 3000
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from mbank.mcp.tools.analyze import execute_analyze_project_structure
from mbank.mcp.tools.generate import execute_generate_memory_bank
from mbank.mcp.tools.resolve import execute_resolve_sync_conflicts
from mbank.mcp.tools.setup import execute_setup_copilot_instructions
from mbank.mcp.tools.update import execute_update_memory_bank
from mbank.mcp.tools.validate import execute_validate_memory_bank

logger = logging.getLogger(__name__)

MBANK_SERVER_NAME = "mbank"
MBANK_SERVER_DESCRIPTION = (
    "Memory bank sync - keeps .github/memory-bank and copilot-instructions.md consistent"
)


def create_server() -> FastMCP:
    """
    Create and configure the mbank MCP server.

    Returns:
        Configured FastMCP server instance with all tools registered
    """
    mcp = FastMCP(
        name=MBANK_SERVER_NAME,
        instructions=MBANK_SERVER_DESCRIPTION,
    )

    _register_tools(mcp)

    logger.info("mbank MCP server created with %s tools", len(_get_tool_names()))

    return mcp


def _register_tools(mcp: FastMCP) -> None:
    """Register all MCP tools."""

    @mcp.tool()
    async def validate_memory_bank(
        project_root_path: str,
        sync_validation: bool = True,
        detailed: bool = False,
    ) -> str:
        """
        Validate memory bank completeness and sync with the instructions document.

        Args:
            project_root_path: Root folder containing .github/memory-bank
            sync_validation: Also compare against copilot-instructions.md (default True)
            detailed: Include the full validation result

        Returns:
            Status, actionable issues and a summary line

        Examples:
            validate_memory_bank("/path/to/project")
        """
        return await execute_validate_memory_bank(project_root_path, sync_validation, detailed)

    @mcp.tool()
    async def resolve_sync_conflicts(
        project_root_path: str,
        auto_resolve: bool = True,
        confirm_all: bool = False,
    ) -> str:
        """
        Resolve drift between the memory bank and copilot-instructions.md.

        Missing references are added and stale ones removed inside the managed
        memory bank section only. Call validate_memory_bank first to see the
        conflict.

        Args:
            project_root_path: Root folder containing .github/
            auto_resolve: Apply low-impact fixes without confirmation (default True)
            confirm_all: Also apply fixes for high-severity conflicts (default False)

        Returns:
            Conversation log, applied actions and the final sync state
        """
        return await execute_resolve_sync_conflicts(project_root_path, auto_resolve, confirm_all)

    @mcp.tool()
    async def setup_copilot_instructions(project_root_path: str) -> str:
        """
        Add the memory bank section to copilot-instructions.md.

        Existing content is preserved; nothing is written when the section
        is already present.

        Args:
            project_root_path: Root folder containing .github/

        Returns:
            The action taken: created, appended or unchanged
        """
        return await execute_setup_copilot_instructions(project_root_path)

    @mcp.tool()
    async def generate_memory_bank(
        project_root_path: str,
        options: dict[str, Any] | None = None,
    ) -> str:
        """
        Generate the memory bank documents for a project.

        Args:
            project_root_path: Root folder where .github/memory-bank is created
            options: structure_type, focus_areas, detail_level,
                additional_files, semantic_organization, custom_folders,
                setup_instructions

        Returns:
            The created files

        Examples:
            generate_memory_bank("/path/to/project")
            generate_memory_bank("/path/to/project", {"additional_files": ["api-endpoints"]})
        """
        return await execute_generate_memory_bank(project_root_path, options)

    @mcp.tool()
    async def analyze_project_structure(project_root_path: str, depth: str = "medium") -> str:
        """
        Analyze a project's metadata, languages and frameworks.

        Args:
            project_root_path: Project root directory
            depth: shallow, medium or deep

        Returns:
            Project analysis used to fill memory bank templates
        """
        return await execute_analyze_project_structure(project_root_path, depth)

    @mcp.tool()
    async def update_memory_bank(project_root_path: str, depth: str = "medium") -> str:
        """
        Plan an update of existing memory bank documents.

        Re-analyzes the project and returns, for each document, what to
        refresh and any placeholder text still present. No file is changed.

        Args:
            project_root_path: Root folder containing .github/memory-bank
            depth: shallow, medium or deep

        Returns:
            Project analysis, per-document guidance and next steps
        """
        return await execute_update_memory_bank(project_root_path, depth)


def _get_tool_names() -> list[str]:
    """Get list of registered tool names."""
    return [
        "validate_memory_bank",
        "resolve_sync_conflicts",
        "setup_copilot_instructions",
        "generate_memory_bank",
        "analyze_project_structure",
        "update_memory_bank",
    ]


def run_server(transport: str = "stdio", port: int = 3000) -> None:
    """
    Run the mbank MCP server.

    Args:
        transport: Transport type - 'stdio' or 'sse'
        port: Port for SSE transport (default 3000)
    """
    mcp = create_server()

    logger.info("Starting mbank MCP server with %s transport", transport)

    if transport == "stdio":
        mcp.run(transport="stdio")
    elif transport == "sse":
        mcp.settings.port = port
        mcp.run(transport="sse")
    else:
        raise ValueError(f"Unknown transport: {transport}. Use 'stdio' or 'sse'.")
