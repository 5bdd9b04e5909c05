"""Project analysis and generation option models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ProjectAnalysis:
    """Heuristic description of a project used to fill document templates."""

    project_name: str
    project_type: str = "Unknown"
    description: str = "A software project"
    version: str = "0.0.0"
    frameworks: list[str] = field(default_factory=list)
    languages: dict[str, int] = field(default_factory=dict)
    directories: list[str] = field(default_factory=list)
    root_files: list[str] = field(default_factory=list)
    entry_points: list[str] = field(default_factory=list)
    config_files: list[str] = field(default_factory=list)
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)
    estimated_files: int = 0
    complexity: str = "Low"
    focus_areas: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "project_name": self.project_name,
            "project_type": self.project_type,
            "description": self.description,
            "version": self.version,
            "frameworks": list(self.frameworks),
            "languages": dict(self.languages),
            "directories": list(self.directories),
            "root_files": list(self.root_files),
            "entry_points": list(self.entry_points),
            "config_files": list(self.config_files),
            "dependencies": dict(self.dependencies),
            "dev_dependencies": dict(self.dev_dependencies),
            "scripts": dict(self.scripts),
            "estimated_files": self.estimated_files,
            "complexity": self.complexity,
            "focus_areas": list(self.focus_areas),
        }


@dataclass(frozen=True)
class CustomFolder:
    """User-defined semantic folder."""

    name: str
    description: str
    file_patterns: tuple[str, ...] = ()


@dataclass
class MemoryBankOptions:
    """Options controlling memory bank generation."""

    structure_type: str = "standard"  # "standard", "enhanced" or "custom"
    focus_areas: list[str] = field(default_factory=list)
    detail_level: str = "detailed"
    additional_files: list[str] = field(default_factory=list)
    semantic_organization: bool = True
    custom_folders: list[CustomFolder] = field(default_factory=list)


@dataclass
class DocumentUpdate:
    """Refresh guidance for one memory bank document."""

    file: str
    status: str  # "missing", "needs_update" or "review"
    purpose: str = ""
    guidance: list[str] = field(default_factory=list)
    placeholders: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "file": self.file,
            "status": self.status,
            "purpose": self.purpose,
            "guidance": list(self.guidance),
            "placeholders": list(self.placeholders),
        }


@dataclass
class MemoryBankUpdatePlan:
    """What to refresh in an existing memory bank after re-analysis."""

    analysis: ProjectAnalysis
    documents: list[DocumentUpdate] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)

    @property
    def missing_files(self) -> list[str]:
        return [d.file for d in self.documents if d.status == "missing"]

    @property
    def needs_update(self) -> list[str]:
        return [d.file for d in self.documents if d.status == "needs_update"]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "analysis": self.analysis.to_dict(),
            "documents": [d.to_dict() for d in self.documents],
            "missing_files": self.missing_files,
            "needs_update": self.needs_update,
            "next_steps": list(self.next_steps),
        }
