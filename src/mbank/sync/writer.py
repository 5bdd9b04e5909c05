"""Instructions document writer.

The instructions document is owned by the user. This module only ever
appends a managed ``# Memory Bank`` section after the existing text or edits
lines inside that section; everything outside it is preserved byte for byte.

Every write replaces the whole file through a temporary file and
``os.replace``. There is no locking: two concurrent writers race and the
last one wins.
"""

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from mbank.core.constants import (
    CORE_FILE_DESCRIPTIONS,
    MANAGED_FILES_HEADING,
    MANAGED_SECTION_HEADING,
    SIGNATURE_PARAGRAPH,
    SIGNATURE_PHRASE,
    get_instructions_path,
    get_memory_bank_root,
)
from mbank.core.exceptions import InstructionsWriteError
from mbank.models.validation import MemoryBankStructure
from mbank.sync.extractor import BacktickReferenceExtractor, ReferenceExtractor, read_instructions
from mbank.sync.structure import discover_structure

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^\s*(```|~~~)")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s")

_default_extractor = BacktickReferenceExtractor()


def instructions_path(project_root: Path | str) -> Path:
    """Location of the instructions document for a project."""
    return get_instructions_path(Path(project_root))


def has_signature(text: str) -> bool:
    """Whether the text carries the managed section's signature phrase."""
    return SIGNATURE_PHRASE.lower() in text.lower()


@dataclass(frozen=True)
class ManagedRegion:
    """Character span of the managed section inside the document.

    ``start`` is the offset of the ``# Memory Bank`` heading line and ``end``
    the offset of the next top-level heading, or the document length.
    """

    start: int
    end: int

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


def _is_top_level_heading(line: str) -> bool:
    return line.startswith("# ") or line.rstrip("\r\n") == "#"


def find_managed_region(text: str) -> ManagedRegion | None:
    """Locate the managed section.

    Headings inside fenced code blocks are ignored. When the heading occurs
    more than once, the last occurrence wins since that is the section most
    recently appended.

    Args:
        text: Full instructions document.

    Returns:
        The region, or None when the document has no managed heading.
    """
    headings: list[int] = []
    boundaries: list[int] = []
    in_fence = False
    offset = 0

    for line in text.splitlines(keepends=True):
        if _FENCE.match(line):
            in_fence = not in_fence
        elif not in_fence and _is_top_level_heading(line):
            boundaries.append(offset)
            if line.rstrip() == MANAGED_SECTION_HEADING:
                headings.append(offset)
        offset += len(line)

    if not headings:
        return None

    start = headings[-1]
    end = next((b for b in boundaries if b > start), len(text))
    return ManagedRegion(start=start, end=end)


def _bullet(path: str) -> str:
    description = CORE_FILE_DESCRIPTIONS.get(path)
    if description:
        return f"- `{path}` - {description}"
    return f"- `{path}`"


def render_memory_bank_section(structure: MemoryBankStructure) -> str:
    """Render the managed section for the files that currently exist.

    Only present files are listed, so a freshly rendered section is in sync
    with the directory it was rendered from.

    Args:
        structure: Discovered memory bank layout.

    Returns:
        Section text ending with a newline.
    """
    lines = [
        MANAGED_SECTION_HEADING,
        "",
        "My memory resets completely between sessions. I rely entirely on the "
        "Memory Bank to understand the project and continue work, so I read "
        "every memory bank file listed below at the start of every task.",
        "",
        MANAGED_FILES_HEADING,
        "",
        "All files live under `.github/memory-bank/`.",
        "",
    ]

    if structure.core_files:
        lines.extend(["### Core Files", ""])
        lines.extend(_bullet(name) for name in structure.core_files)
        lines.append("")

    if structure.semantic_folders:
        lines.extend(["### Semantic Organization", ""])
        for folder in structure.semantic_folders:
            lines.extend([f"#### {folder.folder_name}/", "", folder.purpose, ""])
            lines.extend(_bullet(name) for name in folder.files)
            lines.append("")

    if structure.additional_files:
        lines.extend(["### Additional Files", ""])
        lines.extend(_bullet(name) for name in structure.additional_files)
        lines.append("")

    if structure.total_files == 0:
        lines.extend(["No memory bank files have been generated yet.", ""])

    lines.extend([
        "## Core Workflows",
        "",
        "1. Read all memory bank files before starting work.",
        "2. Verify the context is complete; if not, plan and document the gaps.",
        "3. After significant changes, update the active context and progress documents.",
        "",
        SIGNATURE_PARAGRAPH,
        "",
    ])
    return "\n".join(lines)


@dataclass(frozen=True)
class InstructionsUpdate:
    """Outcome of setting up the instructions document."""

    path: Path
    action: str  # "created", "appended" or "unchanged"

    @property
    def written(self) -> bool:
        return self.action != "unchanged"

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {"file": self.path.name, "action": self.action, "written": self.written}


def _write_text(path: Path, content: str, operation: str) -> None:
    """Replace the file in one step via a sibling temporary file."""
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise InstructionsWriteError(
            f"Failed to write instructions document: {e.strerror or e}",
            path=path,
            operation=operation,
        ) from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    logger.debug(f"Wrote {path.name} ({operation})")


def _separator(existing: str) -> str:
    if not existing or existing.endswith("\n\n"):
        return ""
    if existing.endswith("\n"):
        return "\n"
    return "\n\n"


def setup_copilot_instructions(project_root: Path | str) -> InstructionsUpdate:
    """Create or extend the instructions document for a project.

    - Absent or empty document: write a fresh managed section.
    - Signature present: nothing is written, even if the listing is stale.
    - Otherwise: append a fresh section; the existing text stays an
      unmodified prefix.

    Args:
        project_root: Project root directory.

    Returns:
        What was done to the document.

    Raises:
        MemoryBankFileError: If the document cannot be read or written.
    """
    root = Path(project_root)
    path = instructions_path(root)
    existing = read_instructions(path)

    if existing and has_signature(existing):
        logger.info("Instructions document already carries the memory bank section")
        return InstructionsUpdate(path=path, action="unchanged")

    section = render_memory_bank_section(discover_structure(get_memory_bank_root(root)))

    if not existing:
        _write_text(path, section, "create")
        logger.info("Created instructions document with memory bank section")
        return InstructionsUpdate(path=path, action="created")

    _write_text(path, existing + _separator(existing) + section, "append")
    logger.info("Appended memory bank section to existing instructions document")
    return InstructionsUpdate(path=path, action="appended")


def _minimal_section(reference_line: str) -> str:
    return "\n".join([
        MANAGED_SECTION_HEADING,
        "",
        MANAGED_FILES_HEADING,
        "",
        reference_line,
        "",
        SIGNATURE_PARAGRAPH,
        "",
    ])


def _insert_position(lines: list[str], extractor: ReferenceExtractor) -> int:
    last_reference: int | None = None
    files_heading: int | None = None
    in_fence = False
    for index, current in enumerate(lines):
        if _FENCE.match(current):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        if _LIST_ITEM.match(current) and extractor.extract(current):
            last_reference = index + 1
        elif files_heading is None and current.rstrip() == MANAGED_FILES_HEADING:
            files_heading = index + 1

    if last_reference is not None:
        return last_reference

    if files_heading is not None:
        if files_heading < len(lines) and not lines[files_heading].strip():
            return files_heading + 1
        return files_heading

    # end of the region, before its trailing blank lines
    position = len(lines)
    while position > 1 and not lines[position - 1].strip():
        position -= 1
    return position


def _insert_into_region(
    text: str, region: ManagedRegion, line: str, extractor: ReferenceExtractor
) -> str:
    body = region.slice(text)
    lines = body.splitlines(keepends=True)
    newline = "\r\n" if "\r\n" in body else "\n"

    insert_at = _insert_position(lines, extractor)
    if insert_at > 0 and not lines[insert_at - 1].endswith(("\n", "\r")):
        lines[insert_at - 1] += newline
    lines.insert(insert_at, line + newline)
    return text[:region.start] + "".join(lines) + text[region.end:]


def add_reference(
    project_root: Path | str,
    file: str,
    extractor: ReferenceExtractor | None = None,
) -> bool:
    """Reference a memory bank file from the managed section.

    The bullet goes after the last reference bullet of the section, else
    under the ``## Memory Bank Files`` heading, else at the end of the
    section. Without a managed section a minimal one is appended at the end
    of the document.

    Args:
        project_root: Project root directory.
        file: Memory bank relative path, e.g. ``features/auth.md``.
        extractor: Reference extractor deciding what already counts as a
            reference; defaults to the backtick matcher.

    Returns:
        True if the document was changed, False if already referenced.
    """
    extractor = extractor or _default_extractor
    path = instructions_path(project_root)
    text = read_instructions(path) or ""

    if file in extractor.extract(text):
        return False

    region = find_managed_region(text)
    if region is None:
        updated = text + _separator(text) + _minimal_section(_bullet(file))
    else:
        updated = _insert_into_region(text, region, _bullet(file), extractor)

    _write_text(path, updated, "add-reference")
    logger.info(f"Added reference to {file}")
    return True


def _strip_token(line: str, token: str) -> str:
    for pattern in (f"{token}, ", f", {token}", f"{token} ", token):
        if pattern in line:
            return line.replace(pattern, "", 1)
    return line


def remove_reference(
    project_root: Path | str,
    file: str,
    extractor: ReferenceExtractor | None = None,
) -> bool:
    """Drop a stale reference from the managed section.

    List items whose only reference is ``file`` are removed entirely; in any
    other line just the backtick token is removed. Text outside the managed
    section is never edited, so a reference there survives this call.

    Args:
        project_root: Project root directory.
        file: Memory bank relative path that no longer exists.
        extractor: Reference extractor used to tell single-reference list
            items apart; defaults to the backtick matcher.

    Returns:
        True if the managed section was changed.
    """
    extractor = extractor or _default_extractor
    path = instructions_path(project_root)
    text = read_instructions(path)
    if text is None:
        return False

    region = find_managed_region(text)
    if region is None:
        logger.info(f"Reference to {file} is outside any managed section; not editing")
        return False

    token = f"`{file}`"
    changed = False
    kept: list[str] = []
    for line in region.slice(text).splitlines(keepends=True):
        if token not in line:
            kept.append(line)
            continue
        changed = True
        if _LIST_ITEM.match(line) and extractor.extract(line) == [file]:
            continue
        while token in line:
            line = _strip_token(line, token)
        kept.append(line)

    if not changed:
        logger.info(f"Reference to {file} is outside the managed section; not editing")
        return False

    _write_text(path, text[:region.start] + "".join(kept) + text[region.end:], "remove-reference")
    logger.info(f"Removed stale reference to {file}")
    return True
