"""Pytest configuration and fixtures for mbank tests."""

from pathlib import Path
from typing import Callable

import pytest

from mbank.core.constants import (
    CORE_FILES,
    SIGNATURE_PARAGRAPH,
    get_instructions_path,
    get_memory_bank_root,
)

SAMPLE_DOCUMENT = """# {title}

## Overview
Notes for {title}. See projectbrief and activeContext for context.

## Details
Some details about the project.
"""


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create an empty project directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def memory_bank_dir(project_root: Path) -> Path:
    """Create the memory bank directory."""
    path = get_memory_bank_root(project_root)
    path.mkdir(parents=True)
    return path


@pytest.fixture
def instructions_path(project_root: Path) -> Path:
    """Path of the instructions document (not created)."""
    return get_instructions_path(project_root)


@pytest.fixture
def write_memory_files(memory_bank_dir: Path) -> Callable[..., list[str]]:
    """Write memory bank documents given as relative paths."""

    def _write(*names: str) -> list[str]:
        for name in names:
            path = memory_bank_dir / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(SAMPLE_DOCUMENT.format(title=path.stem), encoding="utf-8")
        return sorted(names)

    return _write


@pytest.fixture
def full_memory_bank(write_memory_files: Callable[..., list[str]]) -> list[str]:
    """All six core documents."""
    return write_memory_files(*CORE_FILES)


@pytest.fixture
def write_instructions(instructions_path: Path) -> Callable[[str], Path]:
    """Write the instructions document verbatim."""

    def _write(text: str) -> Path:
        instructions_path.parent.mkdir(parents=True, exist_ok=True)
        instructions_path.write_bytes(text.encode("utf-8"))
        return instructions_path

    return _write


def managed_instructions(*references: str, signed: bool = True, preamble: str = "") -> str:
    """Instructions text with a managed section listing ``references``."""
    lines = [preamble.rstrip("\n"), ""] if preamble else []
    lines.extend(["# Memory Bank", "", "## Memory Bank Files", ""])
    lines.extend(f"- `{name}`" for name in references)
    lines.append("")
    if signed:
        lines.extend([SIGNATURE_PARAGRAPH, ""])
    return "\n".join(lines)


@pytest.fixture
def managed_text() -> Callable[..., str]:
    """Builder for instructions text with a managed section."""
    return managed_instructions
