"""Memory bank directory discovery."""

import logging
from pathlib import Path

from mbank.core.constants import (
    CORE_FILES,
    MEMORY_FILE_EXTENSION,
    SEMANTIC_FOLDER_DESCRIPTIONS,
)
from mbank.models.validation import MemoryBankStructure, SemanticFolderInfo
from mbank.sync.extractor import extract_memory_bank_files

logger = logging.getLogger(__name__)


def folder_description(folder_name: str) -> str:
    """Purpose text for a semantic folder."""
    return SEMANTIC_FOLDER_DESCRIPTIONS.get(
        folder_name, f"Documentation organized under {folder_name}/"
    )


def discover_structure(memory_bank_dir: Path | str) -> MemoryBankStructure:
    """Group the memory bank listing into core, semantic and additional files.

    Semantic folder files are listed as ``folder/name.md``. Folders without
    markdown files still mark the organization as semantic but are not
    listed. A missing directory yields an empty structure.

    Args:
        memory_bank_dir: Memory bank directory.

    Returns:
        Discovered structure.
    """
    root = Path(memory_bank_dir)
    structure = MemoryBankStructure()

    if not root.is_dir():
        return structure

    all_files = extract_memory_bank_files(root)

    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            structure.has_directories = True
            prefix = f"{entry.name}/"
            files = [f for f in all_files if f.startswith(prefix)]
            if files:
                structure.semantic_folders.append(SemanticFolderInfo(
                    folder_name=entry.name,
                    purpose=folder_description(entry.name),
                    files=files,
                ))
        elif entry.is_file() and entry.name.endswith(MEMORY_FILE_EXTENSION):
            if entry.name in CORE_FILES:
                structure.core_files.append(entry.name)
            else:
                structure.additional_files.append(entry.name)

    structure.core_files.sort(key=CORE_FILES.index)
    logger.debug(
        f"Discovered {structure.total_files} memory bank files "
        f"({structure.organization.value} organization)"
    )
    return structure
