"""
Unit tests for mbank MCP server.

Tests cover:
- Server creation
- Tool registration
"""

from __future__ import annotations

import pytest

from mbank.mcp.server import MBANK_SERVER_NAME, _get_tool_names, create_server, run_server


class TestMCPServer:
    """Tests for MCP server creation and configuration."""

    def test_server_creation(self) -> None:
        """Server should be created successfully."""
        server = create_server()
        assert server is not None

    def test_server_has_correct_metadata(self) -> None:
        """Server should have correct name."""
        server = create_server()
        assert server.name == MBANK_SERVER_NAME

    def test_tool_names_list(self) -> None:
        """Tool names helper should return all tools."""
        tool_names = _get_tool_names()

        assert "validate_memory_bank" in tool_names
        assert "resolve_sync_conflicts" in tool_names
        assert "setup_copilot_instructions" in tool_names
        assert "generate_memory_bank" in tool_names
        assert "analyze_project_structure" in tool_names
        assert "update_memory_bank" in tool_names
        assert len(tool_names) == 6

    @pytest.mark.asyncio
    async def test_registered_tools_match(self) -> None:
        """Every listed tool is registered on the server."""
        server = create_server()
        tools = await server.list_tools()
        assert sorted(tool.name for tool in tools) == sorted(_get_tool_names())

    def test_unknown_transport(self) -> None:
        with pytest.raises(ValueError):
            run_server(transport="carrier-pigeon")
