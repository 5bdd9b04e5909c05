"""
mbank MCP CLI Commands - Command-line interface for the MCP server.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from mbank.core.config import MBankConfig
from mbank.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)
console = Console()
err_console = Console(stderr=True)

mcp_app = typer.Typer(
    name="mcp",
    help="MCP (Model Context Protocol) server for memory bank tools.",
    no_args_is_help=True,
)

VALID_TRANSPORTS = ("stdio", "sse")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@mcp_app.command("serve")
def serve(
    transport: Annotated[
        Optional[str],
        typer.Option(
            "--transport", "-t",
            help="Transport type: 'stdio' or 'sse' (default from config, else stdio)",
        ),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option(
            "--port", "-p",
            help="Port for SSE transport (default from config, else 3000)",
        ),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level", "-l",
            help="Logging level: DEBUG, INFO, WARNING, ERROR",
        ),
    ] = None,
) -> None:
    """
    Start the mbank MCP server.

    Usually launched by the assistant's MCP configuration rather than by
    hand. Logs go to stderr so the stdio transport stays clean. Options not
    given on the command line come from .github/memory-bank.config.json in
    the working directory.

    Examples:
        mbank mcp serve                    # Start with stdio (default)
        mbank mcp serve --transport sse    # Start with HTTP/SSE
        mbank mcp serve -t sse -p 8080     # SSE on custom port
    """
    try:
        server_config = MBankConfig.load(Path.cwd()).server
    except ConfigurationError as e:
        err_console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    transport = transport or server_config.transport
    port = port if port is not None else server_config.port
    log_level = log_level or server_config.log_level

    if transport not in VALID_TRANSPORTS:
        err_console.print(f"[red]Error: Invalid transport '{transport}'[/red]")
        err_console.print(f"Valid transports: {', '.join(VALID_TRANSPORTS)}")
        raise typer.Exit(1)

    log_level_upper = log_level.upper()
    if log_level_upper not in VALID_LOG_LEVELS:
        err_console.print(f"[red]Error: Invalid log level '{log_level}'[/red]")
        err_console.print(f"Valid levels: {', '.join(VALID_LOG_LEVELS)}")
        raise typer.Exit(1)

    logging.basicConfig(
        level=getattr(logging, log_level_upper),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )

    try:
        from mbank.mcp.server import run_server
        run_server(transport=transport, port=port)
    except KeyboardInterrupt:
        logger.info("MCP server stopped by user")
    except Exception as e:
        logger.exception("MCP server error")
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@mcp_app.command("call")
def call(
    tool: Annotated[str, typer.Argument(help="Tool name, e.g. validate_memory_bank")],
    project: Annotated[
        Path, typer.Option("--project", "-p", help="Project root containing .github/")
    ] = Path("."),
    arguments: Annotated[
        Optional[str],
        typer.Option("--args", "-a", help="Additional tool arguments as a JSON object"),
    ] = None,
) -> None:
    """
    Run one tool without starting a server.

    Examples:
        mbank mcp call validate_memory_bank
        mbank mcp call resolve_sync_conflicts --args '{"confirm_all": true}'
    """
    try:
        extra = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError as e:
        err_console.print(f"[red]Error: --args is not valid JSON: {e.msg}[/red]")
        raise typer.Exit(1)
    if not isinstance(extra, dict):
        err_console.print("[red]Error: --args must be a JSON object[/red]")
        raise typer.Exit(1)

    from mbank.mcp.tools.dispatch import dispatch_tool_request

    payload = {**extra, "tool": tool, "project_root_path": str(project)}
    output = asyncio.run(dispatch_tool_request(payload))
    console.print_json(output)

    if "error" in json.loads(output):
        raise typer.Exit(1)
