"""Conflict classification for sync discrepancies.

Turns a ``SyncDiff`` into a typed ``ConflictDetails`` record. Severity and
auto-resolvability come from an injectable ``SyncPolicy`` so the thresholds
stay configurable instead of being baked into the classifier.
"""

from dataclasses import dataclass, field

from mbank.core.constants import (
    CORE_FILES,
    LOW_IMPACT_FILES,
    PROTECTED_FILES,
    SEVERITY_HIGH_THRESHOLD,
    SEVERITY_MEDIUM_THRESHOLD,
)
from mbank.models.sync import (
    ConflictDetails,
    ConflictType,
    Discrepancy,
    DiscrepancyKind,
    Severity,
    SyncDiff,
)


@dataclass(frozen=True)
class SyncPolicy:
    """Rules for rating discrepancies.

    Attributes:
        low_impact_files: Core documents that change often enough that a
            missing reference to them is low impact.
        protected_files: Documents that always require confirmation.
        medium_threshold: Total discrepancies above which severity is at
            least medium.
        high_threshold: Total discrepancies above which severity is high.
        semantic_files_low_impact: Whether a missing reference to a file in
            a semantic subfolder is low impact.
        core_files: The mandatory root documents.
    """

    low_impact_files: frozenset[str] = frozenset(LOW_IMPACT_FILES)
    protected_files: frozenset[str] = frozenset(PROTECTED_FILES)
    medium_threshold: int = SEVERITY_MEDIUM_THRESHOLD
    high_threshold: int = SEVERITY_HIGH_THRESHOLD
    semantic_files_low_impact: bool = True
    core_files: frozenset[str] = field(default_factory=lambda: frozenset(CORE_FILES))

    def missing_impact(self, path: str) -> Severity:
        """Impact of a memory bank file the instructions never mention."""
        if path in self.low_impact_files:
            return Severity.LOW
        if path in self.core_files:
            return Severity.HIGH
        if "/" in path and self.semantic_files_low_impact:
            return Severity.LOW
        return Severity.MEDIUM

    def orphaned_impact(self, path: str) -> Severity:
        """Impact of a reference that points at a file that does not exist."""
        if path in self.core_files and path not in self.low_impact_files:
            return Severity.HIGH
        return Severity.MEDIUM

    def severity(self, discrepancies: list[Discrepancy]) -> Severity:
        """Overall severity from the size and composition of a conflict."""
        total = len(discrepancies)
        worst = max((d.impact for d in discrepancies), key=lambda s: s.rank, default=Severity.LOW)

        if worst == Severity.HIGH or total > self.high_threshold:
            return Severity.HIGH
        if worst == Severity.MEDIUM or total > self.medium_threshold:
            return Severity.MEDIUM
        return Severity.LOW


DEFAULT_POLICY = SyncPolicy()


def _describe_missing(path: str, impact: Severity) -> str:
    if impact == Severity.HIGH:
        return "Core memory bank file missing from the instructions - critical for AI understanding"
    if "/" in path:
        return "Additional context file in a semantic folder is not referenced"
    return "Memory bank file not referenced in the instructions"


class ConflictClassifier:
    """Classifies sync diffs into conflict records."""

    def __init__(self, policy: SyncPolicy | None = None) -> None:
        """Initialize the classifier.

        Args:
            policy: Severity policy; defaults to ``DEFAULT_POLICY``.
        """
        self._policy = policy or DEFAULT_POLICY

    @property
    def policy(self) -> SyncPolicy:
        return self._policy

    def classify(self, sync_diff: SyncDiff) -> ConflictDetails | None:
        """Build the conflict record for a diff.

        Args:
            sync_diff: Result of the sync differ.

        Returns:
            Conflict details, or None when the diff is empty.
        """
        if sync_diff.is_empty:
            return None

        discrepancies = self._discrepancies(sync_diff)
        severity = self._policy.severity(discrepancies)

        involves_protected = any(
            d.path in self._policy.protected_files for d in discrepancies
        )
        auto_resolvable = (
            severity == Severity.LOW
            and not sync_diff.orphaned
            and not involves_protected
        )

        return ConflictDetails(
            conflict_type=self._conflict_type(sync_diff),
            missing_references=list(sync_diff.missing),
            orphaned_references=list(sync_diff.orphaned),
            severity=severity,
            auto_resolvable=auto_resolvable,
            suggested_actions=[d.suggested_action for d in discrepancies],
            discrepancies=discrepancies,
        )

    @staticmethod
    def _conflict_type(sync_diff: SyncDiff) -> ConflictType:
        if sync_diff.missing and sync_diff.orphaned:
            return ConflictType.BOTH
        if sync_diff.missing:
            return ConflictType.MISSING
        return ConflictType.ORPHANED

    def _discrepancies(self, sync_diff: SyncDiff) -> list[Discrepancy]:
        discrepancies: list[Discrepancy] = []

        for path in sync_diff.missing:
            impact = self._policy.missing_impact(path)
            discrepancies.append(Discrepancy(
                path=path,
                kind=DiscrepancyKind.MISSING_REFERENCE,
                impact=impact,
                description=_describe_missing(path, impact),
                suggested_action=(
                    f"Add a reference for `{path}` under the appropriate heading "
                    "of the instructions document"
                ),
                auto_resolvable=(
                    impact == Severity.LOW and path not in self._policy.protected_files
                ),
            ))

        for path in sync_diff.orphaned:
            discrepancies.append(Discrepancy(
                path=path,
                kind=DiscrepancyKind.ORPHANED_REFERENCE,
                impact=self._policy.orphaned_impact(path),
                description="Referenced in the instructions but missing from the memory bank",
                suggested_action=f"Remove the stale reference to `{path}`",
                auto_resolvable=False,
            ))

        return discrepancies


def classify(sync_diff: SyncDiff, policy: SyncPolicy | None = None) -> ConflictDetails | None:
    """Classify a diff with the given (or default) policy."""
    return ConflictClassifier(policy).classify(sync_diff)
