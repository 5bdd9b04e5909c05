"""Tests for the instructions document writer."""

import re
from pathlib import Path

import pytest

from mbank.core.constants import SIGNATURE_PARAGRAPH
from mbank.core.exceptions import InstructionsWriteError, MemoryBankFileError
from mbank.sync.extractor import extract_instruction_references
from mbank.sync.structure import discover_structure
from mbank.sync.writer import (
    add_reference,
    find_managed_region,
    has_signature,
    remove_reference,
    render_memory_bank_section,
    setup_copilot_instructions,
)


class WikiLinkExtractor:
    """Treats `[[name.md]]` links as references."""

    def extract(self, text: str) -> list[str]:
        return sorted(set(re.findall(r"\[\[([\w.\/-]+\.md)\]\]", text)))


class TestFindManagedRegion:
    """Tests for locating the managed section."""

    def test_no_heading(self) -> None:
        assert find_managed_region("# Project\n\nText\n") is None

    def test_region_runs_to_next_top_level_heading(self) -> None:
        text = "# Intro\n\n# Memory Bank\n- `a.md`\n## Files\n# After\ntext `b.md`\n"

        region = find_managed_region(text)

        assert region.slice(text) == "# Memory Bank\n- `a.md`\n## Files\n"

    def test_region_runs_to_end(self) -> None:
        text = "# Memory Bank\n\n- `a.md`\n"
        region = find_managed_region(text)
        assert (region.start, region.end) == (0, len(text))

    def test_heading_in_fence_is_ignored(self) -> None:
        text = "# Notes\n\n```markdown\n# Memory Bank\n- `a.md`\n```\n"
        assert find_managed_region(text) is None

    def test_last_heading_wins(self) -> None:
        text = "# Memory Bank\nold\n# Other\n# Memory Bank\nnew\n"
        region = find_managed_region(text)
        assert region.start == text.rindex("# Memory Bank")
        assert region.slice(text) == "# Memory Bank\nnew\n"


class TestRenderMemoryBankSection:
    """Tests for the rendered section."""

    def test_lists_exactly_the_present_files(self, memory_bank_dir: Path, write_memory_files) -> None:
        """A freshly rendered section references every file and nothing else."""
        files = write_memory_files(
            "projectbrief.md", "progress.md", "glossary.md", "features/auth.md"
        )

        section = render_memory_bank_section(discover_structure(memory_bank_dir))

        assert extract_instruction_references(section) == files
        assert "### Core Files" in section
        assert "#### features/" in section
        assert "### Additional Files" in section
        assert has_signature(section)
        assert section.endswith("\n")

    def test_empty_bank(self, tmp_path: Path) -> None:
        section = render_memory_bank_section(discover_structure(tmp_path / "none"))

        assert extract_instruction_references(section) == []
        assert "No memory bank files have been generated yet." in section


class TestSetupCopilotInstructions:
    """Tests for creating and appending the managed section."""

    def test_creates_missing_document(self, project_root: Path, instructions_path: Path, full_memory_bank) -> None:
        update = setup_copilot_instructions(project_root)

        assert update.action == "created"
        assert update.written is True
        text = instructions_path.read_text(encoding="utf-8")
        assert text.startswith("# Memory Bank")
        assert extract_instruction_references(text) == sorted(full_memory_bank)

    def test_empty_document_is_created(self, project_root: Path, write_instructions, full_memory_bank) -> None:
        write_instructions("")
        assert setup_copilot_instructions(project_root).action == "created"

    def test_appends_and_preserves_existing_bytes(self, project_root: Path, write_instructions, full_memory_bank) -> None:
        """Existing content, CRLF endings included, stays an exact prefix."""
        original = "# My Project\r\n\r\nUse tabs.\t Not spaces.\r\n"
        path = write_instructions(original)

        update = setup_copilot_instructions(project_root)

        assert update.action == "appended"
        data = path.read_bytes()
        assert data.startswith(original.encode("utf-8"))
        assert SIGNATURE_PARAGRAPH.encode("utf-8") in data

    def test_no_trailing_newline_gets_blank_line(self, project_root: Path, write_instructions, full_memory_bank) -> None:
        path = write_instructions("Custom rules")
        setup_copilot_instructions(project_root)
        assert path.read_text(encoding="utf-8").startswith("Custom rules\n\n# Memory Bank\n")

    def test_signed_document_is_unchanged(self, project_root: Path, write_instructions, full_memory_bank) -> None:
        """A document carrying the signature is never rewritten."""
        path = write_instructions("# Mine\n\nremember: AFTER EVERY MEMORY RESET, I BEGIN COMPLETELY FRESH.\n")
        before = path.read_bytes()

        update = setup_copilot_instructions(project_root)

        assert update.action == "unchanged"
        assert update.written is False
        assert path.read_bytes() == before

    def test_idempotent(self, project_root: Path, instructions_path: Path, full_memory_bank) -> None:
        setup_copilot_instructions(project_root)
        first = instructions_path.read_bytes()

        assert setup_copilot_instructions(project_root).action == "unchanged"
        assert instructions_path.read_bytes() == first

    def test_to_dict(self, project_root: Path) -> None:
        data = setup_copilot_instructions(project_root).to_dict()
        assert data == {"file": "copilot-instructions.md", "action": "created", "written": True}

    def test_write_failure_raises(self, project_root: Path, instructions_path: Path) -> None:
        """A directory in place of the document surfaces a write error."""
        instructions_path.mkdir(parents=True)

        with pytest.raises(InstructionsWriteError) as exc_info:
            setup_copilot_instructions(project_root)

        assert exc_info.value.operation == "create"
        assert list(instructions_path.parent.glob("*.tmp")) == []

    def test_non_utf8_document_is_not_touched(self, project_root: Path, instructions_path: Path) -> None:
        """A document that cannot be decoded is reported, not overwritten."""
        instructions_path.parent.mkdir(parents=True)
        instructions_path.write_bytes(b"caf\xe9\n")

        with pytest.raises(MemoryBankFileError):
            setup_copilot_instructions(project_root)

        assert instructions_path.read_bytes() == b"caf\xe9\n"


class TestAddReference:
    """Tests for adding a reference to the managed section."""

    def test_inserts_after_last_reference(self, project_root: Path, write_instructions, managed_text) -> None:
        path = write_instructions(managed_text("a.md"))

        assert add_reference(project_root, "features/b.md") is True

        text = path.read_text(encoding="utf-8")
        assert "- `a.md`\n- `features/b.md`\n" in text
        assert text.endswith(SIGNATURE_PARAGRAPH + "\n")

    def test_core_file_gets_description(self, project_root: Path, write_instructions, managed_text) -> None:
        path = write_instructions(managed_text("a.md"))
        add_reference(project_root, "progress.md")
        assert "- `progress.md` - What works." in path.read_text(encoding="utf-8")

    def test_already_referenced(self, project_root: Path, write_instructions, managed_text) -> None:
        path = write_instructions(managed_text("a.md"))
        before = path.read_bytes()

        assert add_reference(project_root, "a.md") is False
        assert path.read_bytes() == before

    def test_without_region_appends_minimal_section(self, project_root: Path, write_instructions) -> None:
        original = "# Rules\n\nBe nice.\n"
        path = write_instructions(original)

        assert add_reference(project_root, "progress.md") is True

        text = path.read_text(encoding="utf-8")
        assert text.startswith(original + "\n# Memory Bank\n")
        assert extract_instruction_references(text) == ["progress.md"]
        assert has_signature(text)

    def test_text_after_region_preserved(self, project_root: Path, write_instructions, managed_text) -> None:
        trailer = "# Appendix\n\nSee `other.md` here.\n"
        path = write_instructions(managed_text("a.md") + trailer)

        add_reference(project_root, "b.md")

        text = path.read_text(encoding="utf-8")
        assert text.endswith(trailer)
        assert text.index("`b.md`") < text.index("# Appendix")

    def test_region_without_bullets(self, project_root: Path, write_instructions) -> None:
        path = write_instructions("# Memory Bank\n\nRead these.\n\n")
        add_reference(project_root, "a.md")
        assert path.read_text(encoding="utf-8") == "# Memory Bank\n\nRead these.\n- `a.md`\n\n"

    def test_custom_extractor_decides_what_is_referenced(self, project_root: Path, write_instructions) -> None:
        text = "# Memory Bank\n\n- [[a.md]]\n\nNotes.\n"
        path = write_instructions(text)

        assert add_reference(project_root, "a.md", WikiLinkExtractor()) is False
        assert path.read_text(encoding="utf-8") == text

        assert add_reference(project_root, "b.md", WikiLinkExtractor()) is True
        assert path.read_text(encoding="utf-8") == "# Memory Bank\n\n- [[a.md]]\n- `b.md`\n\nNotes.\n"


class TestRemoveReference:
    """Tests for removing a stale reference."""

    def test_removes_list_item(self, project_root: Path, write_instructions, managed_text) -> None:
        path = write_instructions(managed_text("a.md", "gone.md", "b.md"))

        assert remove_reference(project_root, "gone.md") is True

        text = path.read_text(encoding="utf-8")
        assert "- `a.md`\n- `b.md`\n" in text
        assert extract_instruction_references(text) == ["a.md", "b.md"]

    def test_strips_token_from_prose(self, project_root: Path, write_instructions) -> None:
        path = write_instructions("# Memory Bank\n\nRead `a.md`, `gone.md` and more.\n")

        remove_reference(project_root, "gone.md")

        assert path.read_text(encoding="utf-8") == "# Memory Bank\n\nRead `a.md` and more.\n"

    def test_reference_outside_region_is_left_alone(self, project_root: Path, write_instructions, managed_text) -> None:
        path = write_instructions("# Intro\n\nSee `gone.md`.\n\n" + managed_text("a.md"))
        before = path.read_bytes()

        assert remove_reference(project_root, "gone.md") is False
        assert path.read_bytes() == before

    def test_no_region(self, project_root: Path, write_instructions) -> None:
        write_instructions("See `gone.md`.\n")
        assert remove_reference(project_root, "gone.md") is False

    def test_missing_document(self, project_root: Path) -> None:
        assert remove_reference(project_root, "gone.md") is False

    def test_crlf_preserved(self, project_root: Path, write_instructions) -> None:
        path = write_instructions("# Memory Bank\r\n\r\n- `a.md`\r\n- `gone.md`\r\n")
        remove_reference(project_root, "gone.md")
        assert path.read_bytes() == b"# Memory Bank\r\n\r\n- `a.md`\r\n"


class TestAddReferencePlacement:
    """Tests for where a first reference lands."""

    def test_first_reference_goes_under_files_heading(self, project_root: Path, write_instructions, managed_text) -> None:
        path = write_instructions(managed_text())

        add_reference(project_root, "a.md")

        text = path.read_text(encoding="utf-8")
        assert "## Memory Bank Files\n\n- `a.md`\n" in text
        assert text.endswith(SIGNATURE_PARAGRAPH + "\n")
