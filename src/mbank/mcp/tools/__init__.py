"""
MCP Tools - Memory bank operations exposed to the assistant.

- validate_memory_bank: Check completeness and instructions sync
- resolve_sync_conflicts: Reconcile the instructions with the memory bank
- setup_copilot_instructions: Add the memory bank section
- generate_memory_bank: Write the memory bank documents
- analyze_project_structure: Describe a project before generation
- update_memory_bank: Plan a refresh of existing documents
"""

from mbank.mcp.tools.analyze import execute_analyze_project_structure
from mbank.mcp.tools.dispatch import dispatch_tool_request
from mbank.mcp.tools.generate import execute_generate_memory_bank
from mbank.mcp.tools.resolve import execute_resolve_sync_conflicts
from mbank.mcp.tools.setup import execute_setup_copilot_instructions
from mbank.mcp.tools.update import execute_update_memory_bank
from mbank.mcp.tools.validate import execute_validate_memory_bank

__all__ = [
    "dispatch_tool_request",
    "execute_analyze_project_structure",
    "execute_generate_memory_bank",
    "execute_resolve_sync_conflicts",
    "execute_setup_copilot_instructions",
    "execute_update_memory_bank",
    "execute_validate_memory_bank",
]
