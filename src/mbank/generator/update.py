"""Update planning for an existing memory bank.

Re-runs project analysis and reports, document by document, what an
assistant should refresh. Nothing here writes to disk; the documents are
edited by whoever acts on the plan.
"""

import logging
import re
from pathlib import Path

from mbank.core.constants import (
    CORE_FILE_DESCRIPTIONS,
    CORE_FILES,
    DEFAULT_ANALYSIS_DEPTH,
    get_memory_bank_root,
)
from mbank.core.exceptions import MemoryBankFileError
from mbank.generator.analysis import analyze_project
from mbank.models.analysis import DocumentUpdate, MemoryBankUpdatePlan
from mbank.sync.structure import discover_structure

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\[?\bTBD\b\]?|\bTODO\b|\bnot implemented\b|\bnot sure\b", re.IGNORECASE)

UPDATE_GUIDANCE: dict[str, tuple[str, ...]] = {
    "projectbrief.md": (
        "Core purpose and business value of this project",
        "Main features, referencing the modules that implement them",
        "Architecture overview and key design decisions",
    ),
    "productContext.md": (
        "Problems the project solves and for whom",
        "Primary users, stakeholders and the workflows they rely on",
    ),
    "activeContext.md": (
        "Current work focus and recent changes",
        "Next steps and open decisions",
        "Learnings worth keeping across sessions",
    ),
    "systemPatterns.md": (
        "Design patterns and component relationships in use",
        "Code organization and conventions, with file references",
    ),
    "techContext.md": (
        "Languages, frameworks and dependencies as currently declared",
        "Development setup, build and deployment steps",
        "Technical constraints and integration points",
    ),
    "progress.md": (
        "What works and what is left to build",
        "Known issues and current status",
    ),
}

ADDITIONAL_GUIDANCE = ("Check the document still matches the code it describes",)


def find_placeholders(text: str) -> list[str]:
    """Placeholder markers left in a document, e.g. TODO or TBD."""
    found = {match.group(0).strip("[]").upper() for match in _PLACEHOLDER.finditer(text)}
    return sorted(found)


def _read_document(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MemoryBankFileError(
            f"Cannot read memory bank document {path.name}: {getattr(e, 'strerror', None) or e}",
            path=path,
        ) from e


def _analysis_guidance(name: str, plan: MemoryBankUpdatePlan) -> list[str]:
    analysis = plan.analysis
    if name == "techContext.md" and analysis.frameworks:
        return [f"Detected frameworks: {', '.join(analysis.frameworks)}"]
    if name == "projectbrief.md":
        return [f"Project type: {analysis.project_type} ({analysis.complexity} complexity)"]
    return []


def plan_memory_bank_update(
    project_root: Path | str, depth: str = DEFAULT_ANALYSIS_DEPTH
) -> MemoryBankUpdatePlan:
    """Analyze the project again and plan a refresh of the memory bank.

    Core documents that are absent are reported as ``missing``, documents
    that still contain placeholder text as ``needs_update``, and everything
    else as ``review``. Non-core documents are listed for review after the
    six core ones.

    Args:
        project_root: Project root directory.
        depth: Scan depth for the project analysis.

    Returns:
        The update plan.

    Raises:
        MemoryBankFileError: If the project root does not exist or a
            document cannot be read.
    """
    root = Path(project_root)
    plan = MemoryBankUpdatePlan(analysis=analyze_project(root, depth))
    memory_bank_dir = get_memory_bank_root(root)
    structure = discover_structure(memory_bank_dir)

    for name in CORE_FILES:
        guidance = [*UPDATE_GUIDANCE[name], *_analysis_guidance(name, plan)]
        if name not in structure.core_files:
            plan.documents.append(DocumentUpdate(
                file=name, status="missing", purpose=CORE_FILE_DESCRIPTIONS[name], guidance=guidance
            ))
            continue

        placeholders = find_placeholders(_read_document(memory_bank_dir / name))
        plan.documents.append(DocumentUpdate(
            file=name,
            status="needs_update" if placeholders else "review",
            purpose=CORE_FILE_DESCRIPTIONS[name],
            guidance=guidance,
            placeholders=placeholders,
        ))

    extra = list(structure.additional_files)
    for folder in structure.semantic_folders:
        extra.extend(folder.files)
    for name in extra:
        placeholders = find_placeholders(_read_document(memory_bank_dir / name))
        plan.documents.append(DocumentUpdate(
            file=name,
            status="needs_update" if placeholders else "review",
            guidance=list(ADDITIONAL_GUIDANCE),
            placeholders=placeholders,
        ))

    if plan.missing_files:
        plan.next_steps.append(
            "Run generate_memory_bank to create the missing core documents"
        )
    plan.next_steps.extend([
        "Read the existing memory bank documents and the project source",
        "Update each document with current, project-specific information, "
        "replacing any placeholder text",
        "Run setup_copilot_instructions, then validate_memory_bank to confirm "
        "the instructions reference every document",
    ])

    logger.info(
        f"Planned memory bank update: {len(plan.missing_files)} missing, "
        f"{len(plan.needs_update)} with placeholders, {len(plan.documents)} documents"
    )
    return plan
