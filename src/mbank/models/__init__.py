"""Memory bank data models."""
from mbank.models.analysis import (
    CustomFolder,
    DocumentUpdate,
    MemoryBankOptions,
    MemoryBankUpdatePlan,
    ProjectAnalysis,
)
from mbank.models.sync import (
    ActionType,
    ConflictDetails,
    ConflictType,
    ConversationStep,
    CopilotSyncValidation,
    Discrepancy,
    DiscrepancyKind,
    FinalState,
    ResolutionAction,
    ResolutionResult,
    ResolutionStatus,
    Severity,
    StepType,
    SyncDiff,
    UserChoice,
)
from mbank.models.validation import (
    MemoryBankStructure,
    QualityAssessment,
    SemanticFolderInfo,
    StructureCompliance,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
)

__all__ = [
    # Analysis models
    "CustomFolder",
    "DocumentUpdate",
    "MemoryBankOptions",
    "MemoryBankUpdatePlan",
    "ProjectAnalysis",
    # Sync models
    "ActionType",
    "ConflictDetails",
    "ConflictType",
    "ConversationStep",
    "CopilotSyncValidation",
    "Discrepancy",
    "DiscrepancyKind",
    "FinalState",
    "ResolutionAction",
    "ResolutionResult",
    "ResolutionStatus",
    "Severity",
    "StepType",
    "SyncDiff",
    "UserChoice",
    # Validation models
    "MemoryBankStructure",
    "QualityAssessment",
    "SemanticFolderInfo",
    "StructureCompliance",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSummary",
]
