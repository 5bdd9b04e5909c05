"""Main CLI entrypoint for mbank."""

import logging
import sys
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from mbank import __version__
from mbank.cli.mcp_commands import mcp_app
from mbank.core.config import MBankConfig
from mbank.core.constants import get_memory_bank_root
from mbank.core.exceptions import MemoryBankError, sanitize_error_message
from mbank.generator.analysis import analyze_project
from mbank.generator.memory_bank import ensure_memory_bank_directory, generate_memory_bank_files
from mbank.generator.update import plan_memory_bank_update
from mbank.models.analysis import MemoryBankOptions
from mbank.models.sync import ConflictDetails, ConversationStep, Discrepancy, StepType
from mbank.sync.resolver import (
    Operator,
    PolicyOperator,
    SyncResolver,
    render_conflict_summary,
)
from mbank.sync.validator import summarize_validation, validate_memory_bank
from mbank.sync.writer import setup_copilot_instructions

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="mbank",
    help="Memory bank sync - keep .github/memory-bank and copilot-instructions.md consistent",
    no_args_is_help=True,
)

app.add_typer(mcp_app, name="mcp")

ProjectArg = Annotated[
    Path,
    typer.Argument(help="Project root containing .github/", file_okay=False),
]


@app.callback()
def main_callback(
    log_level: Annotated[
        str, typer.Option("--log-level", "-l", help="Logging level: DEBUG, INFO, WARNING, ERROR")
    ] = "WARNING",
) -> None:
    """Memory bank sync tooling."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(error: BaseException, root: Path | None = None) -> NoReturn:
    err_console.print(f"[red]Error: {sanitize_error_message(error, root)}[/red]")
    raise typer.Exit(1)


class PromptOperator:
    """Asks a person at the terminal."""

    def __init__(self, prompt_console: Console | None = None) -> None:
        self._console = prompt_console or console

    def choose(self, step: ConversationStep, subject: ConflictDetails | Discrepancy) -> str:
        options = step.options or ()
        self._console.print()
        self._console.print(step.content)
        for index, option in enumerate(options, start=1):
            self._console.print(f"  [cyan]{index}[/cyan]. {option}")

        while True:
            answer = typer.prompt("Choose", default=1, type=int)
            if 1 <= answer <= len(options):
                return options[answer - 1]
            err_console.print(f"[yellow]Enter a number from 1 to {len(options)}[/yellow]")


@app.command("validate")
def validate_command(
    project: ProjectArg = Path("."),
    no_sync: Annotated[
        bool, typer.Option("--no-sync", help="Skip the instructions sync check")
    ] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Validate memory bank completeness and instructions sync."""
    try:
        config = MBankConfig.load(project)
        result = validate_memory_bank(
            get_memory_bank_root(project),
            sync_validation=not no_sync,
            project_root=project,
            policy=config.sync.to_policy(),
        )
    except (MemoryBankError, OSError) as e:
        _fail(e, project)

    summary = summarize_validation(result)

    if json_output:
        data = summary.to_dict()
        data["details"] = result.to_dict()
        console.print_json(data=data)
    else:
        console.print(summary.summary)
        if summary.issues:
            table = Table(title="Issues")
            table.add_column("Type", style="cyan")
            table.add_column("File")
            table.add_column("Message")
            for issue in summary.issues:
                table.add_row(issue.type, issue.file, issue.message)
            console.print(table)

        quality = result.quality
        console.print(
            f"Completeness: {quality.completeness}  Consistency: {quality.consistency}  "
            f"Clarity: {quality.clarity}  Organization: {result.structure_compliance.organization.value}"
        )
        sync = result.copilot_sync
        if sync is not None and sync.conflict_details is not None:
            console.print()
            console.print(render_conflict_summary(sync.conflict_details))

    if summary.status != "valid" or (not no_sync and not summary.copilot_integration):
        raise typer.Exit(1)


@app.command("resolve")
def resolve_command(
    project: ProjectArg = Path("."),
    auto: Annotated[
        bool, typer.Option("--auto/--no-auto", help="Apply low-impact fixes without confirmation")
    ] = True,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Do not prompt; apply every suggested fix")
    ] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Resolve drift between the memory bank and the instructions document."""
    memory_bank_dir = get_memory_bank_root(project)
    operator: Operator = PolicyOperator(auto, confirm_all=True) if yes else PromptOperator()

    try:
        policy = MBankConfig.load(project).sync.to_policy()
        validation = validate_memory_bank(
            memory_bank_dir,
            sync_validation=True,
            project_root=project,
            interactive_mode=True,
            policy=policy,
        )
        sync = validation.copilot_sync
        if sync is not None and sync.conflict_details is not None and not json_output:
            console.print(render_conflict_summary(sync.conflict_details))
        result = SyncResolver(operator, policy=policy).resolve(
            memory_bank_dir,
            project,
            sync.conflict_details if sync else None,
            is_in_sync=bool(sync and sync.is_in_sync),
        )
    except (MemoryBankError, OSError) as e:
        _fail(e, project)

    if json_output:
        console.print_json(data=result.to_dict())
    else:
        for step in result.conversation_log:
            if step.type == StepType.INFORMATION and step.step > 1:
                console.print()
                console.print(step.content)
        if result.actions_performed:
            table = Table(title="Applied Actions")
            table.add_column("Action", style="cyan")
            table.add_column("File")
            for action in result.actions_performed:
                table.add_row(action.action_type.value, action.target_file)
            console.print(table)
        color = "green" if result.resolved else "yellow"
        console.print(f"[{color}]{result.message}[/{color}]")

    if not result.resolved:
        raise typer.Exit(1)


@app.command("setup-instructions")
def setup_instructions_command(project: ProjectArg = Path(".")) -> None:
    """Add the memory bank section to copilot-instructions.md."""
    try:
        update = setup_copilot_instructions(project)
    except (MemoryBankError, OSError) as e:
        _fail(e, project)

    if update.written:
        console.print(f"[green]Instructions document {update.action}[/green]")
    else:
        console.print("Instructions document already contains the memory bank section")


@app.command("generate")
def generate_command(
    project: ProjectArg = Path("."),
    additional: Annotated[
        Optional[list[str]],
        typer.Option("--additional-file", "-a", help="Additional document to generate"),
    ] = None,
    focus: Annotated[
        Optional[list[str]], typer.Option("--focus", "-f", help="Focus area")
    ] = None,
    flat: Annotated[
        bool, typer.Option("--flat", help="Keep additional documents at the root")
    ] = False,
    no_instructions: Annotated[
        bool, typer.Option("--no-instructions", help="Do not touch copilot-instructions.md")
    ] = False,
) -> None:
    """Generate the memory bank documents."""
    options = MemoryBankOptions(
        focus_areas=list(focus or []),
        additional_files=list(additional or []),
        semantic_organization=not flat,
    )
    try:
        analysis = analyze_project(project)
        created = generate_memory_bank_files(
            ensure_memory_bank_directory(project), analysis, options
        )
        update = None if no_instructions else setup_copilot_instructions(project)
    except (MemoryBankError, OSError) as e:
        _fail(e, project)

    console.print(f"[green]Generated {len(created)} memory bank files[/green]")
    for name in created:
        console.print(f"  {name}")
    if update is not None:
        console.print(f"Instructions document: {update.action}")


@app.command("analyze")
def analyze_command(
    project: ProjectArg = Path("."),
    depth: Annotated[
        str, typer.Option("--depth", "-d", help="Scan depth: shallow, medium, deep")
    ] = "medium",
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Analyze a project's metadata and source tree."""
    try:
        analysis = analyze_project(project, depth)
    except (MemoryBankError, OSError) as e:
        _fail(e, project)

    if json_output:
        console.print_json(data=analysis.to_dict())
        return

    console.print(f"[bold]{analysis.project_name}[/bold] v{analysis.version}")
    console.print(f"Type:        {analysis.project_type}")
    console.print(f"Complexity:  {analysis.complexity}")
    console.print(f"Frameworks:  {', '.join(analysis.frameworks) or 'none detected'}")

    if analysis.languages:
        table = Table(title="Source Files")
        table.add_column("Language", style="cyan")
        table.add_column("Files", justify="right")
        for language, count in sorted(analysis.languages.items()):
            table.add_row(language, str(count))
        console.print(table)


@app.command("update")
def update_command(
    project: ProjectArg = Path("."),
    depth: Annotated[
        str, typer.Option("--depth", "-d", help="Scan depth: shallow, medium, deep")
    ] = "medium",
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Plan a refresh of the existing memory bank documents."""
    try:
        plan = plan_memory_bank_update(project, depth)
    except (MemoryBankError, OSError) as e:
        _fail(e, project)

    if json_output:
        console.print_json(data=plan.to_dict())
        return

    analysis = plan.analysis
    console.print(
        f"[bold]{analysis.project_name}[/bold] ({analysis.project_type}, "
        f"{analysis.complexity} complexity)"
    )

    table = Table(title="Memory Bank Documents")
    table.add_column("File", style="cyan")
    table.add_column("Status")
    table.add_column("Placeholders")
    for document in plan.documents:
        table.add_row(document.file, document.status, ", ".join(document.placeholders))
    console.print(table)

    console.print("Next steps:")
    for index, step in enumerate(plan.next_steps, start=1):
        console.print(f"  {index}. {step}")


@app.command("version")
def version_command() -> None:
    """Show version."""
    console.print(f"mbank {__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
