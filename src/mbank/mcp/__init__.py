"""
mbank MCP Server - Model Context Protocol integration for memory bank sync.

Exposes validation, conflict resolution, instructions setup and generation
as tools an assistant can call.
"""

from mbank.mcp.server import create_server, run_server

__all__ = ["create_server", "run_server"]
