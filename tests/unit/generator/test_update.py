"""Tests for memory bank update planning."""

from pathlib import Path

import pytest

from mbank.core.constants import CORE_FILES
from mbank.core.exceptions import MemoryBankFileError
from mbank.generator.update import find_placeholders, plan_memory_bank_update


class TestFindPlaceholders:
    """Tests for placeholder detection."""

    def test_markers_found_once(self) -> None:
        text = "TODO: fill in\n\nOwner: [TBD]\n\nAuth is not implemented. todo later."
        assert find_placeholders(text) == ["NOT IMPLEMENTED", "TBD", "TODO"]

    def test_clean_text(self) -> None:
        assert find_placeholders("# Progress\n\nEverything documented.\n") == []

    def test_words_containing_markers_are_ignored(self) -> None:
        assert find_placeholders("Todoist integration and TBDX codes") == []


class TestPlanMemoryBankUpdate:
    """Tests for the per-document update plan."""

    def test_complete_bank_is_reviewed(self, project_root: Path, full_memory_bank) -> None:
        plan = plan_memory_bank_update(project_root, "shallow")

        assert [d.file for d in plan.documents] == list(CORE_FILES)
        assert {d.status for d in plan.documents} == {"review"}
        assert plan.missing_files == []
        assert "generate_memory_bank" not in plan.next_steps[0]

    def test_missing_core_files(self, project_root: Path, write_memory_files) -> None:
        write_memory_files("projectbrief.md", "progress.md")

        plan = plan_memory_bank_update(project_root)

        assert plan.missing_files == [
            "productContext.md",
            "activeContext.md",
            "systemPatterns.md",
            "techContext.md",
        ]
        assert plan.next_steps[0].startswith("Run generate_memory_bank")

    def test_placeholders_flag_document(self, project_root: Path, full_memory_bank, memory_bank_dir: Path) -> None:
        (memory_bank_dir / "progress.md").write_text("# Progress\n\nStatus: TBD\n", encoding="utf-8")

        plan = plan_memory_bank_update(project_root)

        progress = next(d for d in plan.documents if d.file == "progress.md")
        assert progress.status == "needs_update"
        assert progress.placeholders == ["TBD"]
        assert plan.needs_update == ["progress.md"]

    def test_additional_documents_follow_core(self, project_root: Path, write_memory_files) -> None:
        write_memory_files(*CORE_FILES, "glossary.md", "features/auth.md")

        plan = plan_memory_bank_update(project_root)

        assert [d.file for d in plan.documents][6:] == ["glossary.md", "features/auth.md"]
        assert plan.documents[6].purpose == ""

    def test_frameworks_in_tech_context_guidance(self, project_root: Path, full_memory_bank) -> None:
        (project_root / "package.json").write_text(
            '{"name": "web", "dependencies": {"react": "^18.0.0"}}', encoding="utf-8"
        )

        plan = plan_memory_bank_update(project_root)

        tech = next(d for d in plan.documents if d.file == "techContext.md")
        assert any("React" in line for line in tech.guidance)

    def test_unreadable_document(self, project_root: Path, full_memory_bank, memory_bank_dir: Path) -> None:
        (memory_bank_dir / "techContext.md").write_bytes(b"caf\xe9\n")

        with pytest.raises(MemoryBankFileError):
            plan_memory_bank_update(project_root)

    def test_missing_project_root(self, tmp_path: Path) -> None:
        with pytest.raises(MemoryBankFileError):
            plan_memory_bank_update(tmp_path / "nope")

    def test_to_dict(self, project_root: Path, full_memory_bank) -> None:
        data = plan_memory_bank_update(project_root).to_dict()

        assert set(data) == {"analysis", "documents", "missing_files", "needs_update", "next_steps"}
        assert data["documents"][0]["file"] == "projectbrief.md"
