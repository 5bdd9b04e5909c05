"""Tests for memory bank document generation."""

from pathlib import Path

import pytest

from mbank.core.constants import CORE_FILES
from mbank.core.exceptions import GenerationError
from mbank.generator.memory_bank import (
    categorize_file,
    ensure_memory_bank_directory,
    generate_file_content,
    generate_memory_bank_files,
    semantic_categories,
)
from mbank.models.analysis import CustomFolder, MemoryBankOptions, ProjectAnalysis
from mbank.sync.extractor import extract_memory_bank_files


@pytest.fixture
def analysis() -> ProjectAnalysis:
    return ProjectAnalysis(
        project_name="widgets",
        project_type="Backend API",
        description="Widget service",
        frameworks=["FastAPI"],
        languages={"python": 12},
    )


class TestEnsureMemoryBankDirectory:
    def test_creates_directory(self, project_root: Path) -> None:
        path = ensure_memory_bank_directory(project_root)
        assert path.is_dir()
        assert path == project_root / ".github" / "memory-bank"

    def test_file_in_the_way(self, project_root: Path) -> None:
        (project_root / ".github").write_text("not a directory")
        with pytest.raises(GenerationError):
            ensure_memory_bank_directory(project_root)


class TestCategorize:
    """Tests for semantic folder placement."""

    @pytest.mark.parametrize(
        ("name", "folder"),
        [
            ("auth-flow.md", "security"),
            ("api-endpoints.md", "api"),
            ("deploy-guide.md", "deployment"),
            ("glossary.md", None),
        ],
    )
    def test_builtin_patterns(self, name: str, folder: str | None) -> None:
        assert categorize_file(name, semantic_categories()) == folder

    def test_custom_folder(self) -> None:
        categories = semantic_categories([CustomFolder("runbooks", "Operational runbooks", ("runbook",))])
        assert categorize_file("oncall-runbook.md", categories) == "runbooks"
        assert categories["runbooks"][0] == "Operational runbooks"


class TestGenerateMemoryBankFiles:
    """Tests for writing the documents."""

    def test_core_files(self, project_root: Path, analysis: ProjectAnalysis) -> None:
        memory_bank_dir = ensure_memory_bank_directory(project_root)

        created = generate_memory_bank_files(memory_bank_dir, analysis)

        assert created == list(CORE_FILES)
        brief = (memory_bank_dir / "projectbrief.md").read_text(encoding="utf-8")
        assert brief.startswith("# Project Brief")
        assert "widgets" in brief

    def test_additional_files_are_organized(self, project_root: Path, analysis: ProjectAnalysis) -> None:
        memory_bank_dir = ensure_memory_bank_directory(project_root)
        options = MemoryBankOptions(additional_files=["api-endpoints", "glossary.md", "progress"])

        created = generate_memory_bank_files(memory_bank_dir, analysis, options)

        assert created[6:] == ["api/api-endpoints.md", "glossary.md"]
        assert sorted(created) == extract_memory_bank_files(memory_bank_dir)
        content = (memory_bank_dir / "api" / "api-endpoints.md").read_text(encoding="utf-8")
        assert "## Category: api" in content

    def test_flat_layout(self, project_root: Path, analysis: ProjectAnalysis) -> None:
        memory_bank_dir = ensure_memory_bank_directory(project_root)
        options = MemoryBankOptions(additional_files=["api-endpoints"], semantic_organization=False)

        created = generate_memory_bank_files(memory_bank_dir, analysis, options)

        assert created[-1] == "api-endpoints.md"

    def test_every_core_template_renders(self, analysis: ProjectAnalysis) -> None:
        for name in CORE_FILES:
            assert generate_file_content(name, analysis, MemoryBankOptions()).startswith("# ")
