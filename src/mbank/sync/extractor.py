"""Reference extraction for the memory bank and the instructions document.

Turns the memory bank directory and the instructions text into two sets of
file identifiers. Both sides use POSIX-style relative paths so that set
comparison does not depend on the host platform.
"""

import logging
import os
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from mbank.core.constants import INSTRUCTIONS_FILE, MEMORY_FILE_EXTENSION
from mbank.core.exceptions import MemoryBankFileError

logger = logging.getLogger(__name__)


@runtime_checkable
class ReferenceExtractor(Protocol):
    """Pulls memory bank file references out of instructions text."""

    def extract(self, text: str) -> list[str]:
        ...


class BacktickReferenceExtractor:
    """Literal pattern match for backtick-quoted markdown paths.

    Matches tokens such as `` `progress.md` `` or `` `integrations/api.md` ``.
    The document is scanned as plain text, not parsed as markdown.
    """

    REFERENCE_PATTERN = re.compile(r"`((?:[\w.\-]+/)*[\w.\-]+\.md)`")

    def __init__(self, ignored: tuple[str, ...] = (INSTRUCTIONS_FILE,)) -> None:
        """Initialize the extractor.

        Args:
            ignored: File names that are never memory bank references.
        """
        self._ignored = frozenset(ignored)

    def extract(self, text: str) -> list[str]:
        """Extract the set of referenced files.

        Args:
            text: Full instructions document text.

        Returns:
            Sorted, de-duplicated list of referenced paths.
        """
        references: set[str] = set()
        for match in self.REFERENCE_PATTERN.finditer(text):
            reference = match.group(1)
            if reference.rsplit("/", 1)[-1] in self._ignored:
                continue
            references.add(reference)
        return sorted(references)


_default_extractor = BacktickReferenceExtractor()


def extract_memory_bank_files(memory_bank_root: Path | str) -> list[str]:
    """List every markdown file under the memory bank root.

    The walk never leaves the root: symlinked directories that resolve
    outside of it are skipped, and a directory reached more than once through
    links is walked only the first time. A missing or unreadable directory
    yields an empty list.

    Args:
        memory_bank_root: Memory bank directory.

    Returns:
        Sorted relative paths using ``/`` separators.
    """
    root = Path(memory_bank_root)
    if not root.is_dir():
        return []

    try:
        resolved_root = root.resolve()
    except OSError as e:
        logger.warning(f"Cannot resolve memory bank root: {e}")
        return []

    files: list[str] = []
    visited: set[Path] = {resolved_root}

    def _on_error(error: OSError) -> None:
        logger.warning(f"Skipping unreadable memory bank entry: {error}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error, followlinks=True):
        current = Path(dirpath)
        kept = []
        for name in sorted(dirnames, key=lambda n: ((current / n).is_symlink(), n)):
            candidate = (current / name).resolve()
            if resolved_root not in candidate.parents and candidate != resolved_root:
                logger.debug(f"Not following directory outside memory bank: {name}")
                continue
            if candidate in visited:
                logger.debug(f"Not following directory already walked: {name}")
                continue
            visited.add(candidate)
            kept.append(name)
        dirnames[:] = sorted(kept)

        for name in filenames:
            if not name.endswith(MEMORY_FILE_EXTENSION):
                continue
            relative = (current / name).relative_to(root)
            files.append(relative.as_posix())

    return sorted(files)


def extract_instruction_references(
    instructions_text: str,
    extractor: ReferenceExtractor | None = None,
) -> list[str]:
    """Extract memory bank references from instructions text.

    Args:
        instructions_text: Instructions document content.
        extractor: Alternative extractor; defaults to the backtick matcher.

    Returns:
        Sorted, de-duplicated list of referenced paths.
    """
    return (extractor or _default_extractor).extract(instructions_text)


def read_instructions(instructions_path: Path | str) -> str | None:
    """Read the instructions document without newline translation.

    Args:
        instructions_path: Path of the instructions document.

    Returns:
        The document text, or None when it does not exist.

    Raises:
        MemoryBankFileError: If the document cannot be read or is not UTF-8.
    """
    path = Path(instructions_path)
    if not path.is_file():
        return None
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise MemoryBankFileError(
            f"Instructions document is not valid UTF-8 (invalid byte at offset {e.start})",
            path=path,
        ) from e
    except OSError as e:
        raise MemoryBankFileError(
            f"Failed to read instructions document: {e.strerror or e}", path=path
        ) from e


def read_instruction_references(
    instructions_path: Path | str,
    extractor: ReferenceExtractor | None = None,
) -> list[str]:
    """Read the instructions document and extract its references.

    A missing document yields an empty list.
    """
    text = read_instructions(instructions_path)
    if text is None:
        return []
    return extract_instruction_references(text, extractor)
