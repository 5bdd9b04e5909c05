"""Structural validation of the memory bank and its sync state.

Validation is diagnostic: a missing or unreadable memory bank directory and
a missing instructions document are reported in the result, never raised.
Nothing in this module writes to disk.
"""

import logging
import re
from pathlib import Path

from mbank.core.constants import (
    CLARITY_EXCELLENT_HEADINGS,
    CLARITY_EXCELLENT_WORDS,
    CLARITY_FAIR_WORDS,
    CLARITY_GOOD_HEADINGS,
    CLARITY_GOOD_WORDS,
    CONSISTENCY_HIGH_RATIO,
    CONSISTENCY_MEDIUM_RATIO,
    CORE_FILES,
    INSTRUCTIONS_FILE,
    get_instructions_path,
)
from mbank.models.sync import CopilotSyncValidation
from mbank.models.validation import (
    QualityAssessment,
    StructureCompliance,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
)
from mbank.sync.classifier import SyncPolicy, classify
from mbank.sync.differ import diff
from mbank.sync.extractor import (
    ReferenceExtractor,
    extract_instruction_references,
    extract_memory_bank_files,
    read_instructions,
)
from mbank.sync.structure import discover_structure

logger = logging.getLogger(__name__)

_HEADING = re.compile(r"^#+\s", re.MULTILINE)


def validate_copilot_sync(
    memory_bank_dir: Path | str,
    project_root: Path | str,
    *,
    policy: SyncPolicy | None = None,
    extractor: ReferenceExtractor | None = None,
) -> CopilotSyncValidation:
    """Compare the memory bank listing with the instructions references.

    Args:
        memory_bank_dir: Memory bank directory.
        project_root: Project root holding ``.github/``.
        policy: Classifier policy.
        extractor: Reference extractor for the instructions text.

    Returns:
        Sync state, with conflict details whenever the two disagree.

    Raises:
        MemoryBankFileError: If the instructions document exists but cannot
            be read as UTF-8 text.
    """
    memory_bank_files = extract_memory_bank_files(memory_bank_dir)
    text = read_instructions(get_instructions_path(Path(project_root)))

    if text is None:
        reason = f"{INSTRUCTIONS_FILE} does not exist"
        logger.info(f"Sync check: {reason}")
        sync_diff = diff(memory_bank_files, [])
        return CopilotSyncValidation(
            is_in_sync=False,
            memory_bank_files=memory_bank_files,
            copilot_references=[],
            missing_references=sync_diff.missing,
            orphaned_references=[],
            conflict_details=classify(sync_diff, policy),
            instructions_found=False,
            reason=reason,
        )

    references = extract_instruction_references(text, extractor)
    sync_diff = diff(memory_bank_files, references)
    conflict = classify(sync_diff, policy)

    if conflict is not None:
        logger.info(
            f"Sync check: {len(sync_diff.missing)} missing, "
            f"{len(sync_diff.orphaned)} orphaned ({conflict.severity.value})"
        )

    return CopilotSyncValidation(
        is_in_sync=sync_diff.is_empty,
        memory_bank_files=memory_bank_files,
        copilot_references=references,
        missing_references=sync_diff.missing,
        orphaned_references=sync_diff.orphaned,
        conflict_details=conflict,
        reason=None if sync_diff.is_empty else "Memory bank and instructions references differ",
    )


def _read_core_files(memory_bank_dir: Path, present: list[str]) -> dict[str, str] | None:
    contents: dict[str, str] = {}
    try:
        for name in present:
            contents[name] = (memory_bank_dir / name).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read memory bank file for quality assessment: {e}")
        return None
    return contents


def assess_consistency(contents: dict[str, str] | None) -> str:
    """Rate how often core files mention one another by name."""
    if not contents:
        return "Unknown"

    checks = 0
    cross_references = 0
    for name, text in contents.items():
        for other in contents:
            if other == name:
                continue
            checks += 1
            if other.removesuffix(".md") in text:
                cross_references += 1

    ratio = cross_references / checks if checks else 0.0
    if ratio > CONSISTENCY_HIGH_RATIO:
        return "High"
    if ratio > CONSISTENCY_MEDIUM_RATIO:
        return "Medium"
    return "Low"


def assess_clarity(contents: dict[str, str] | None) -> str:
    """Rate core files by average length and heading count."""
    if not contents:
        return "Unknown"

    words = sum(len(text.split()) for text in contents.values())
    headings = sum(len(_HEADING.findall(text)) for text in contents.values())
    avg_words = words / len(contents)
    avg_headings = headings / len(contents)

    if avg_words > CLARITY_EXCELLENT_WORDS and avg_headings > CLARITY_EXCELLENT_HEADINGS:
        return "Excellent"
    if avg_words > CLARITY_GOOD_WORDS and avg_headings > CLARITY_GOOD_HEADINGS:
        return "Good"
    if avg_words > CLARITY_FAIR_WORDS:
        return "Fair"
    return "Poor"


def validate_memory_bank(
    memory_bank_path: Path | str,
    *,
    sync_validation: bool = False,
    project_root: Path | str | None = None,
    interactive_mode: bool = False,
    policy: SyncPolicy | None = None,
) -> ValidationResult:
    """Validate the memory bank and optionally its sync state.

    Args:
        memory_bank_path: Memory bank directory.
        sync_validation: Whether to compare against the instructions document.
        project_root: Project root; required for sync validation.
        interactive_mode: Caller intends to resolve conflicts next.
        policy: Classifier policy for sync validation.

    Returns:
        Validation verdict. A missing directory yields ``is_valid=False``
        with all six core files listed as missing.
    """
    root = Path(memory_bank_path)
    result = ValidationResult()

    try:
        structure = discover_structure(root)
    except OSError as e:
        logger.warning(f"Cannot read memory bank directory: {e}")
        result.missing_files = list(CORE_FILES)
        return result

    present = list(structure.core_files)
    result.core_files_present = present
    result.missing_files = [name for name in CORE_FILES if name not in present]
    result.additional_files = list(structure.additional_files)
    result.is_valid = not result.missing_files

    result.structure_compliance = StructureCompliance(
        organization=structure.organization,
        has_semantic_folders=bool(structure.semantic_folders),
        folder_count=len(structure.semantic_folders),
        total_files=structure.total_files,
    )

    contents = _read_core_files(root, present) if present else None
    result.quality = QualityAssessment(
        completeness=f"{round(len(present) / len(CORE_FILES) * 100)}%",
        consistency=assess_consistency(contents),
        clarity=assess_clarity(contents),
    )

    if sync_validation and project_root is not None:
        if interactive_mode:
            logger.debug("Sync validation requested for interactive resolution")
        result.copilot_sync = validate_copilot_sync(root, project_root, policy=policy)

    return result


def summarize_validation(result: ValidationResult) -> ValidationSummary:
    """Reduce a validation result to the issues a caller should act on."""
    issues = [
        ValidationIssue(
            type="missing_file",
            file=name,
            message=f"Required memory bank file '{name}' is missing",
        )
        for name in result.missing_files
    ]

    sync = result.copilot_sync
    if sync is not None and not sync.is_in_sync:
        issues.append(ValidationIssue(
            type="missing_copilot_integration",
            file=INSTRUCTIONS_FILE,
            message=f"Memory bank is not properly integrated with {INSTRUCTIONS_FILE}",
        ))

    missing = len(result.missing_files)
    if missing == len(CORE_FILES):
        summary = (
            "❌ No memory bank files found. Use generate_memory_bank to create "
            "initial memory bank."
        )
    elif missing:
        summary = f"⚠️ Memory bank incomplete: {missing} of {len(CORE_FILES)} required files missing."
    elif sync is not None and not sync.is_in_sync:
        summary = (
            f"⚠️ Memory bank is complete but not synced with {INSTRUCTIONS_FILE}. "
            "Run setup_copilot_instructions to fix."
        )
    else:
        summary = "✅ Memory bank is complete and properly integrated."

    return ValidationSummary(
        status="valid" if result.is_valid else "invalid",
        issues=issues,
        summary=summary,
        file_count=len(result.core_files_present),
        copilot_integration=bool(sync and sync.is_in_sync),
    )
