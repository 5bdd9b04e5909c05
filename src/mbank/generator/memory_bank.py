"""Memory bank directory creation and document generation."""

import logging
import re
from pathlib import Path

from mbank.core.constants import (
    CORE_FILES,
    MEMORY_FILE_EXTENSION,
    SEMANTIC_FOLDER_DESCRIPTIONS,
    SEMANTIC_FOLDER_PATTERNS,
    get_memory_bank_root,
)
from mbank.core.exceptions import GenerationError
from mbank.models.analysis import CustomFolder, MemoryBankOptions, ProjectAnalysis
from mbank.models.sync import utc_timestamp

logger = logging.getLogger(__name__)


def ensure_memory_bank_directory(project_root: Path | str) -> Path:
    """Create ``.github/memory-bank`` if needed and return it.

    Raises:
        GenerationError: If the directory cannot be created.
    """
    memory_bank_dir = get_memory_bank_root(Path(project_root))
    try:
        memory_bank_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GenerationError(
            f"Failed to create memory bank directory: {e.strerror or e}",
            path=memory_bank_dir,
        ) from e
    return memory_bank_dir


def _bullets(items: list[str], empty: str) -> str:
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


def _languages(analysis: ProjectAnalysis) -> str:
    return _bullets(
        [f"**{name}:** {count} files" for name, count in sorted(analysis.languages.items())],
        "- No source files detected",
    )


def _title(file_name: str) -> str:
    stem = file_name.removesuffix(MEMORY_FILE_EXTENSION).rsplit("/", 1)[-1]
    words = re.sub(r"([a-z])([A-Z])", r"\1 \2", stem).replace("-", " ").replace("_", " ")
    return words[:1].upper() + words[1:]


def _project_brief(analysis: ProjectAnalysis, options: MemoryBankOptions) -> str:
    return f"""# Project Brief

## Project Overview
**{analysis.project_name}** (v{analysis.version})
{analysis.description}

**Project Type:** {analysis.project_type}
**Complexity:** {analysis.complexity}
**Source Files:** {analysis.estimated_files}

## Technology Stack
{_bullets(analysis.frameworks, "- No major frameworks detected")}

## Source Languages
{_languages(analysis)}

## Entry Points
{_bullets(analysis.entry_points, "- No specific entry points detected")}

## Focus Areas
{_bullets(options.focus_areas or analysis.focus_areas, "- architecture")}

See productContext for why the project exists and systemPatterns for how it is built.
"""


def _product_context(analysis: ProjectAnalysis, options: MemoryBankOptions) -> str:
    scripts = [f"`{name}`: {target}" for name, target in analysis.scripts.items()]
    return f"""# Product Context

## Purpose
{analysis.description}

## Project Details
- **Name:** {analysis.project_name}
- **Version:** {analysis.version}
- **Type:** {analysis.project_type}

## Development Workflow
{_bullets(scripts, "Standard development practices apply.")}

## Runtime Dependencies
{_bullets(list(analysis.dependencies)[:10], "No external runtime dependencies detected.")}

Scope is defined in projectbrief; current work is tracked in activeContext.
"""


def _active_context(analysis: ProjectAnalysis, options: MemoryBankOptions) -> str:
    return f"""# Active Context

## Current Project State
Working on **{analysis.project_name}**, a {analysis.project_type} with {analysis.complexity.lower()} complexity.

## Main Directories
{_bullets(analysis.directories[:5], "- Flat project layout")}

## Active Development Areas
{_bullets(options.focus_areas or analysis.focus_areas, "- architecture")}

## Next Steps
1. Review the patterns recorded in systemPatterns.
2. Keep techContext current as dependencies change.
3. Record completed work in progress.

Last updated: {utc_timestamp()}
"""


def _system_patterns(analysis: ProjectAnalysis, options: MemoryBankOptions) -> str:
    return f"""# System Patterns

## Architecture Overview
**{analysis.project_name}** is a {analysis.project_type}.

**Complexity Level:** {analysis.complexity}

## Frameworks & Tools
{_bullets(analysis.frameworks, "No major frameworks detected.")}

## Entry Points & Flow
{_bullets(analysis.entry_points, "Entry points follow standard conventions for the project type.")}

## Configuration Management
{_bullets(analysis.config_files, "Standard configuration practices apply.")}

Technology details live in techContext.
"""


def _tech_context(analysis: ProjectAnalysis, options: MemoryBankOptions) -> str:
    runtime = list(analysis.dependencies)[:8]
    development = list(analysis.dev_dependencies)[:5]
    return f"""# Technical Context

## Languages
{_languages(analysis)}

## Frameworks & Libraries
{_bullets(analysis.frameworks, "No major frameworks detected.")}

## Runtime Dependencies ({len(analysis.dependencies)})
{_bullets(runtime, "No external runtime dependencies detected.")}

## Development Dependencies ({len(analysis.dev_dependencies)})
{_bullets(development, "No development dependencies detected.")}

## Configuration Files
{_bullets(analysis.config_files, "None detected.")}
"""


def _progress(analysis: ProjectAnalysis, options: MemoryBankOptions) -> str:
    return f"""# Progress

## Current Status
**{analysis.project_name}** v{analysis.version}, {analysis.project_type}

### Project Metrics
- **Complexity:** {analysis.complexity}
- **Source Files:** {analysis.estimated_files}
- **Dependencies:** {len(analysis.dependencies) + len(analysis.dev_dependencies)}
- **Frameworks:** {len(analysis.frameworks)}

## What Works
- Memory bank generated with {options.detail_level} detail level

## What's Left
- Fill in known issues and open decisions from activeContext

Last updated: {utc_timestamp()}
"""


CORE_TEMPLATES = {
    "projectbrief.md": _project_brief,
    "productContext.md": _product_context,
    "activeContext.md": _active_context,
    "systemPatterns.md": _system_patterns,
    "techContext.md": _tech_context,
    "progress.md": _progress,
}


def generate_file_content(file_name: str, analysis: ProjectAnalysis, options: MemoryBankOptions) -> str:
    """Render a core document."""
    return CORE_TEMPLATES[file_name](analysis, options)


def generate_additional_file_content(
    file_name: str,
    analysis: ProjectAnalysis,
    folder: str | None = None,
    folder_description: str | None = None,
) -> str:
    """Render an additional document, optionally tagged with its folder."""
    lines = [f"# {_title(file_name)}", ""]
    if folder:
        lines.extend([f"## Category: {folder}", folder_description or "", ""])
    lines.extend([
        "## Project Context",
        f"{analysis.project_name}: {analysis.description}",
        "",
        "## Details",
        f"Documentation specific to {_title(file_name).lower()}.",
        "",
    ])
    return "\n".join(lines)


def semantic_categories(custom_folders: list[CustomFolder] | None = None) -> dict[str, tuple[str, tuple[str, ...]]]:
    """Folder name -> (description, file name patterns), custom folders last."""
    categories = {
        name: (SEMANTIC_FOLDER_DESCRIPTIONS[name], patterns)
        for name, patterns in SEMANTIC_FOLDER_PATTERNS.items()
    }
    for folder in custom_folders or []:
        categories[folder.name] = (folder.description, tuple(folder.file_patterns))
    return categories


def categorize_file(
    file_name: str, categories: dict[str, tuple[str, tuple[str, ...]]]
) -> str | None:
    """First folder whose pattern occurs in the file name, if any."""
    lowered = file_name.lower()
    for folder, (_, patterns) in categories.items():
        if any(pattern.lower() in lowered for pattern in patterns):
            return folder
    return None


def _write(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise GenerationError(
            f"Failed to write memory bank file: {e.strerror or e}", path=path
        ) from e


def generate_memory_bank_files(
    memory_bank_dir: Path | str,
    analysis: ProjectAnalysis,
    options: MemoryBankOptions | None = None,
) -> list[str]:
    """Write the six core documents and any requested additional ones.

    With semantic organization on, additional documents are placed in the
    first matching semantic folder, or at the root when none matches.

    Args:
        memory_bank_dir: Memory bank directory.
        analysis: Project analysis used to fill the templates.
        options: Generation options.

    Returns:
        Created paths relative to the memory bank directory.

    Raises:
        GenerationError: If a document cannot be written.
    """
    root = Path(memory_bank_dir)
    options = options or MemoryBankOptions()
    created: list[str] = []

    for name in CORE_FILES:
        _write(root / name, generate_file_content(name, analysis, options))
        created.append(name)

    categories = semantic_categories(options.custom_folders)
    for requested in options.additional_files:
        file_name = Path(requested).name
        if not file_name.endswith(MEMORY_FILE_EXTENSION):
            file_name += MEMORY_FILE_EXTENSION
        if file_name in CORE_FILES:
            continue

        folder = categorize_file(file_name, categories) if options.semantic_organization else None
        if folder:
            description = categories[folder][0]
            relative = f"{folder}/{file_name}"
            content = generate_additional_file_content(file_name, analysis, folder, description)
        else:
            relative = file_name
            content = generate_additional_file_content(file_name, analysis)

        _write(root / relative, content)
        created.append(relative)

    logger.info(f"Generated {len(created)} memory bank files in {root.name}")
    return created
