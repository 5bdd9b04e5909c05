"""Sync validation and conflict resolution data models.

This module defines the structures shared by the reference extractor,
differ, classifier and interactive resolver. Every instance is built fresh
for a single validation or resolution call and discarded afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


class ConflictType(str, Enum):
    """Shape of a sync conflict."""

    MISSING = "missing"
    ORPHANED = "orphaned"
    BOTH = "both"

    @property
    def label(self) -> str:
        """Upper-case label used in conversation summaries."""
        return {
            ConflictType.MISSING: "MISSING REFERENCES",
            ConflictType.ORPHANED: "ORPHANED REFERENCES",
            ConflictType.BOTH: "BOTH",
        }[self]


class Severity(str, Enum):
    """Severity of a conflict, also used as the impact of one discrepancy."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return ("low", "medium", "high").index(self.value)


class DiscrepancyKind(str, Enum):
    """Direction of a single discrepancy."""

    MISSING_REFERENCE = "missing_reference"
    ORPHANED_REFERENCE = "orphaned_reference"


class ActionType(str, Enum):
    """Edits the resolver can apply to the instructions document."""

    ADD_REFERENCE = "add-reference"
    REMOVE_REFERENCE = "remove-reference"


class StepType(str, Enum):
    """Kinds of conversation steps."""

    INFORMATION = "information"
    QUESTION = "question"
    CONFIRMATION = "confirmation"


class ResolutionStatus(str, Enum):
    """Outcome category of a resolution run."""

    COMPLETED = "completed"
    ALREADY_IN_SYNC = "already_in_sync"
    CANCELLED = "cancelled"
    PRECONDITION_MISSING = "precondition_missing"


@dataclass(frozen=True)
class SyncDiff:
    """Set difference between the memory bank and the instructions references."""

    missing: list[str] = field(default_factory=list)
    orphaned: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.missing and not self.orphaned

    @property
    def total(self) -> int:
        return len(self.missing) + len(self.orphaned)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"missing": list(self.missing), "orphaned": list(self.orphaned)}


@dataclass(frozen=True)
class Discrepancy:
    """A single file-level disagreement between the two artifacts."""

    path: str
    kind: DiscrepancyKind
    impact: Severity
    description: str
    suggested_action: str
    auto_resolvable: bool = False

    @property
    def action_type(self) -> ActionType:
        if self.kind == DiscrepancyKind.MISSING_REFERENCE:
            return ActionType.ADD_REFERENCE
        return ActionType.REMOVE_REFERENCE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "path": self.path,
            "kind": self.kind.value,
            "impact": self.impact.value,
            "description": self.description,
            "suggested_action": self.suggested_action,
            "auto_resolvable": self.auto_resolvable,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Discrepancy":
        """Create from dictionary."""
        return cls(
            path=data["path"],
            kind=DiscrepancyKind(data["kind"]),
            impact=Severity(data["impact"]),
            description=data["description"],
            suggested_action=data["suggested_action"],
            auto_resolvable=data.get("auto_resolvable", False),
        )


@dataclass
class ConflictDetails:
    """Typed, severity-rated record of a sync conflict.

    Only built when at least one list is non-empty; the in-sync state is
    represented by ``CopilotSyncValidation.is_in_sync`` instead.
    """

    conflict_type: ConflictType
    missing_references: list[str]
    orphaned_references: list[str]
    severity: Severity
    auto_resolvable: bool
    suggested_actions: list[str] = field(default_factory=list)
    discrepancies: list[Discrepancy] = field(default_factory=list)

    def __post_init__(self) -> None:
        has_missing = bool(self.missing_references)
        has_orphaned = bool(self.orphaned_references)
        if not has_missing and not has_orphaned:
            raise ValueError("ConflictDetails requires at least one discrepancy")

        expected = (
            ConflictType.BOTH
            if has_missing and has_orphaned
            else ConflictType.MISSING if has_missing else ConflictType.ORPHANED
        )
        if self.conflict_type != expected:
            raise ValueError(
                f"Conflict type {self.conflict_type.value} does not match "
                f"the discrepancy lists (expected {expected.value})"
            )

    @property
    def total(self) -> int:
        return len(self.missing_references) + len(self.orphaned_references)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.conflict_type.value,
            "missing_references": list(self.missing_references),
            "orphaned_references": list(self.orphaned_references),
            "severity": self.severity.value,
            "auto_resolvable": self.auto_resolvable,
            "suggested_actions": list(self.suggested_actions),
            "discrepancies": [d.to_dict() for d in self.discrepancies],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConflictDetails":
        """Create from dictionary."""
        return cls(
            conflict_type=ConflictType(data["type"]),
            missing_references=list(data.get("missing_references", [])),
            orphaned_references=list(data.get("orphaned_references", [])),
            severity=Severity(data["severity"]),
            auto_resolvable=data["auto_resolvable"],
            suggested_actions=list(data.get("suggested_actions", [])),
            discrepancies=[Discrepancy.from_dict(d) for d in data.get("discrepancies", [])],
        )


@dataclass
class CopilotSyncValidation:
    """Synchronization state between the memory bank and the instructions."""

    is_in_sync: bool
    memory_bank_files: list[str] = field(default_factory=list)
    copilot_references: list[str] = field(default_factory=list)
    missing_references: list[str] = field(default_factory=list)
    orphaned_references: list[str] = field(default_factory=list)
    conflict_details: ConflictDetails | None = None
    instructions_found: bool = True
    reason: str | None = None
    last_validated: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_in_sync": self.is_in_sync,
            "memory_bank_files": list(self.memory_bank_files),
            "copilot_references": list(self.copilot_references),
            "missing_references": list(self.missing_references),
            "orphaned_references": list(self.orphaned_references),
            "conflict_details": self.conflict_details.to_dict() if self.conflict_details else None,
            "instructions_found": self.instructions_found,
            "reason": self.reason,
            "last_validated": self.last_validated,
        }


@dataclass(frozen=True)
class ConversationStep:
    """One entry of the append-only conversation log."""

    step: int
    type: StepType
    content: str
    options: tuple[str, ...] | None = None
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "step": self.step,
            "type": self.type.value,
            "content": self.content,
            "timestamp": self.timestamp,
        }
        if self.options is not None:
            data["options"] = list(self.options)
        return data


@dataclass(frozen=True)
class UserChoice:
    """An operator's answer to a question or confirmation step."""

    step: int
    question: str
    answer: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"step": self.step, "question": self.question, "answer": self.answer}


@dataclass(frozen=True)
class ResolutionAction:
    """A concrete edit that was applied to the instructions document."""

    action_type: ActionType
    description: str
    target_file: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "action_type": self.action_type.value,
            "description": self.description,
            "target_file": self.target_file,
        }


@dataclass(frozen=True)
class FinalState:
    """Sync state observed after a resolution run."""

    is_in_sync: bool
    memory_bank_files: list[str] = field(default_factory=list)
    missing_references: list[str] = field(default_factory=list)
    orphaned_references: list[str] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        return len(self.missing_references) + len(self.orphaned_references)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_in_sync": self.is_in_sync,
            "memory_bank_files": list(self.memory_bank_files),
            "missing_references": list(self.missing_references),
            "orphaned_references": list(self.orphaned_references),
        }


@dataclass
class ResolutionResult:
    """Result of an interactive resolution run."""

    status: ResolutionStatus
    final_state: FinalState
    actions_performed: list[ResolutionAction] = field(default_factory=list)
    user_choices: list[UserChoice] = field(default_factory=list)
    conversation_log: list[ConversationStep] = field(default_factory=list)
    message: str = ""

    @property
    def resolved(self) -> bool:
        """True iff the final state has no remaining discrepancies."""
        return self.final_state.is_in_sync and self.final_state.remaining == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value,
            "resolved": self.resolved,
            "actions_performed": [a.to_dict() for a in self.actions_performed],
            "user_choices": [c.to_dict() for c in self.user_choices],
            "conversation_log": [s.to_dict() for s in self.conversation_log],
            "final_state": self.final_state.to_dict(),
            "message": self.message,
        }
