"""Structural validation data models."""

from dataclasses import dataclass, field
from typing import Any

from mbank.core.constants import Organization
from mbank.models.sync import CopilotSyncValidation


@dataclass
class SemanticFolderInfo:
    """A purpose-named subfolder of the memory bank."""

    folder_name: str
    purpose: str
    files: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "folder_name": self.folder_name,
            "purpose": self.purpose,
            "file_count": self.file_count,
            "files": list(self.files),
        }


@dataclass
class MemoryBankStructure:
    """Listing of the memory bank directory grouped by role."""

    core_files: list[str] = field(default_factory=list)
    semantic_folders: list[SemanticFolderInfo] = field(default_factory=list)
    additional_files: list[str] = field(default_factory=list)
    has_directories: bool = False

    @property
    def total_files(self) -> int:
        nested = sum(folder.file_count for folder in self.semantic_folders)
        return len(self.core_files) + len(self.additional_files) + nested

    @property
    def organization(self) -> Organization:
        return Organization.SEMANTIC if self.has_directories else Organization.FLAT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "core_files": list(self.core_files),
            "semantic_folders": [f.to_dict() for f in self.semantic_folders],
            "additional_files": list(self.additional_files),
            "total_files": self.total_files,
            "organization": self.organization.value,
        }


@dataclass
class StructureCompliance:
    """Organization of the memory bank."""

    organization: Organization = Organization.FLAT
    has_semantic_folders: bool = False
    folder_count: int = 0
    total_files: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "organization": self.organization.value,
            "has_semantic_folders": self.has_semantic_folders,
            "folder_count": self.folder_count,
            "total_files": self.total_files,
        }


@dataclass
class QualityAssessment:
    """Coarse quality labels for the present core files."""

    completeness: str = "0%"
    consistency: str = "Unknown"
    clarity: str = "Unknown"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "completeness": self.completeness,
            "consistency": self.consistency,
            "clarity": self.clarity,
        }


@dataclass
class ValidationResult:
    """Aggregate verdict of a memory bank validation."""

    is_valid: bool = False
    core_files_present: list[str] = field(default_factory=list)
    missing_files: list[str] = field(default_factory=list)
    additional_files: list[str] = field(default_factory=list)
    structure_compliance: StructureCompliance = field(default_factory=StructureCompliance)
    quality: QualityAssessment = field(default_factory=QualityAssessment)
    copilot_sync: CopilotSyncValidation | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_valid": self.is_valid,
            "core_files_present": list(self.core_files_present),
            "missing_files": list(self.missing_files),
            "additional_files": list(self.additional_files),
            "structure_compliance": self.structure_compliance.to_dict(),
            "quality": self.quality.to_dict(),
            "copilot_sync": self.copilot_sync.to_dict() if self.copilot_sync else None,
        }


@dataclass(frozen=True)
class ValidationIssue:
    """A single actionable finding reported by the validate tool."""

    type: str  # "missing_file" or "missing_copilot_integration"
    file: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"type": self.type, "file": self.file, "message": self.message}


@dataclass
class ValidationSummary:
    """Simplified, caller-facing view of a ``ValidationResult``."""

    status: str  # "valid" or "invalid"
    issues: list[ValidationIssue] = field(default_factory=list)
    summary: str = ""
    file_count: int = 0
    copilot_integration: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status,
            "issues": [i.to_dict() for i in self.issues],
            "summary": self.summary,
            "file_count": self.file_count,
            "copilot_integration": self.copilot_integration,
        }
