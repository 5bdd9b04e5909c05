"""Set difference between memory bank files and instructions references."""

from collections.abc import Iterable

from mbank.models.sync import SyncDiff


def diff(memory_bank_files: Iterable[str], copilot_references: Iterable[str]) -> SyncDiff:
    """Compare the two collections by exact path.

    ``missing`` holds files the assistant will never discover, ``orphaned``
    holds references that point at nothing. There is no fuzzy matching, so a
    renamed file shows up once in each list.

    Args:
        memory_bank_files: Relative paths present in the memory bank.
        copilot_references: Paths mentioned in the instructions document.

    Returns:
        Sorted missing and orphaned lists.
    """
    files = set(memory_bank_files)
    references = set(copilot_references)
    return SyncDiff(
        missing=sorted(files - references),
        orphaned=sorted(references - files),
    )
