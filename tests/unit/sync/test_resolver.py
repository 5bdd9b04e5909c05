"""Tests for the sync conflict resolver."""

from pathlib import Path

import pytest

from mbank.core.exceptions import InvalidChoiceError, ResolutionError, ResolutionStateError
from mbank.models.sync import (
    ActionType,
    ConflictDetails,
    ConflictType,
    ResolutionStatus,
    Severity,
    StepType,
)
from mbank.sync.classifier import SyncPolicy
from mbank.sync.resolver import (
    ALREADY_IN_SYNC_MESSAGE,
    CONFIRM_OPTIONS,
    PRECONDITION_MESSAGE,
    PROCEED,
    SKIP,
    STOP,
    STRATEGY_OPTIONS,
    TRANSITIONS,
    PolicyOperator,
    ResolverState,
    ScriptedOperator,
    Strategy,
    SyncResolver,
    _Run,
    perform_interactive_sync_resolution,
    render_conflict_summary,
)
from mbank.sync.validator import validate_copilot_sync


def _conflict(memory_bank_dir: Path, project_root: Path) -> ConflictDetails | None:
    return validate_copilot_sync(memory_bank_dir, project_root).conflict_details


class TestStateMachine:
    """Tests for the transition table."""

    def test_end_is_terminal(self) -> None:
        assert TRANSITIONS[ResolverState.END] == frozenset()

    def test_every_state_has_an_entry(self) -> None:
        assert set(TRANSITIONS) == set(ResolverState)

    def test_illegal_transition_raises(self) -> None:
        run = _Run()
        with pytest.raises(ResolutionStateError) as exc_info:
            run.move(ResolverState.APPLY)
        assert exc_info.value.source == "start"
        assert exc_info.value.target == "apply"

    def test_steps_are_numbered_from_one(self) -> None:
        run = _Run()
        run.emit(StepType.INFORMATION, "a")
        second = run.emit(StepType.QUESTION, "b", ("x",))
        assert second.step == 2
        assert [s.step for s in run.log] == [1, 2]


class TestRenderConflictSummary:
    """Tests for the conflict overview."""

    def test_summary_lines(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        write_memory_files("progress.md")
        write_instructions(managed_text("features/old.md"))

        summary = render_conflict_summary(_conflict(memory_bank_dir, project_root))

        assert summary.startswith("🔍 Sync Conflict Analysis")
        assert "Conflict Type: BOTH" in summary
        assert "Severity: MEDIUM" in summary
        assert "📄 Unreferenced Files (1):" in summary
        assert "  • progress.md (low impact)" in summary
        assert "🔗 Orphaned References (1):" in summary
        assert "Auto-resolvable: No" in summary
        assert summary.endswith("Suggested actions: 2")


class TestResolveShortCircuits:
    """Tests for the paths that never ask a question."""

    def test_already_in_sync(self, project_root: Path, memory_bank_dir: Path) -> None:
        operator = ScriptedOperator([])

        result = SyncResolver(operator).resolve(memory_bank_dir, project_root, None, is_in_sync=True)

        assert result.status == ResolutionStatus.ALREADY_IN_SYNC
        assert result.message == ALREADY_IN_SYNC_MESSAGE
        assert result.resolved is True
        assert len(result.conversation_log) == 1
        assert operator.asked == []

    def test_missing_conflict_details(self, project_root: Path, memory_bank_dir: Path) -> None:
        result = SyncResolver(ScriptedOperator([])).resolve(memory_bank_dir, project_root, None)

        assert result.status == ResolutionStatus.PRECONDITION_MISSING
        assert result.message == PRECONDITION_MESSAGE
        assert result.resolved is False
        assert result.actions_performed == []


class TestResolve:
    """Tests for full resolution runs."""

    def test_auto_resolution(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        """A low impact conflict is fixed without confirmations."""
        write_memory_files("progress.md")
        write_instructions(managed_text())
        conflict = _conflict(memory_bank_dir, project_root)
        assert conflict.auto_resolvable is True

        result = SyncResolver(PolicyOperator()).resolve(memory_bank_dir, project_root, conflict)

        assert result.status == ResolutionStatus.COMPLETED
        assert result.resolved is True
        assert result.message == "All sync conflicts resolved."
        assert [a.action_type for a in result.actions_performed] == [ActionType.ADD_REFERENCE]
        assert [c.answer for c in result.user_choices] == [Strategy.AUTO.value]
        log = result.conversation_log
        assert [s.step for s in log] == list(range(1, len(log) + 1))
        assert log[1].type == StepType.QUESTION
        assert log[1].options == STRATEGY_OPTIONS
        assert "applying without confirmation" in log[2].content
        assert log[3].content == "✅ Resolution complete. Applied 1 out of 1 suggested fixes."
        assert log[-1].content.startswith("Final sync status: ✅ Fully synchronized")

    def test_abort_changes_nothing(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        write_memory_files("progress.md")
        path = write_instructions(managed_text("gone.md"))
        before = path.read_bytes()

        result = SyncResolver(ScriptedOperator([Strategy.ABORT.value])).resolve(
            memory_bank_dir, project_root, _conflict(memory_bank_dir, project_root)
        )

        assert result.status == ResolutionStatus.CANCELLED
        assert result.actions_performed == []
        assert path.read_bytes() == before
        assert result.final_state.missing_references == ["progress.md"]
        assert "No changes were made" in result.conversation_log[2].content

    def test_interactive_confirmations(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        """Each item is confirmed; skipped items remain."""
        write_memory_files("techContext.md")
        path = write_instructions(managed_text("gone.md"))
        operator = ScriptedOperator([Strategy.INTERACTIVE.value, SKIP, PROCEED])

        result = SyncResolver(operator).resolve(
            memory_bank_dir, project_root, _conflict(memory_bank_dir, project_root)
        )

        assert result.status == ResolutionStatus.COMPLETED
        assert [a.target_file for a in result.actions_performed] == ["gone.md"]
        assert result.final_state.missing_references == ["techContext.md"]
        assert result.final_state.orphaned_references == []
        assert result.resolved is False
        assert result.message.startswith("1 discrepancies remain")
        assert "`gone.md`" not in path.read_text(encoding="utf-8")

        confirmations = [s for s in operator.asked if s.type == StepType.CONFIRMATION]
        assert len(confirmations) == 2
        assert confirmations[0].options == CONFIRM_OPTIONS
        assert confirmations[0].content.startswith("Conflict 1/2: Add a reference for `techContext.md`")
        assert "(high impact)" in confirmations[0].content

    def test_stop_keeps_confirmed_edits(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        write_memory_files("a.md", "b.md", "c.md")
        write_instructions(managed_text())
        operator = ScriptedOperator([Strategy.INTERACTIVE.value, PROCEED, STOP])

        result = SyncResolver(operator).resolve(
            memory_bank_dir, project_root, _conflict(memory_bank_dir, project_root)
        )

        assert result.status == ResolutionStatus.CANCELLED
        assert [a.target_file for a in result.actions_performed] == ["a.md"]
        assert result.final_state.missing_references == ["b.md", "c.md"]
        assert any(s.content.startswith("⏹️ Resolution stopped") for s in result.conversation_log)

    def test_invalid_answer_raises(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        write_memory_files("progress.md")
        write_instructions(managed_text())

        with pytest.raises(InvalidChoiceError) as exc_info:
            SyncResolver(ScriptedOperator(["maybe"])).resolve(
                memory_bank_dir, project_root, _conflict(memory_bank_dir, project_root)
            )
        assert exc_info.value.answer == "maybe"

    def test_scripted_operator_exhausted(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        write_memory_files("progress.md")
        write_instructions(managed_text())

        with pytest.raises(ResolutionError):
            SyncResolver(ScriptedOperator([])).resolve(
                memory_bank_dir, project_root, _conflict(memory_bank_dir, project_root)
            )

    def test_orphan_outside_region_needs_follow_up(self, project_root: Path, memory_bank_dir: Path, write_instructions) -> None:
        """A confirmed removal that cannot be applied is not recorded."""
        write_instructions("# Rules\n\nSee `gone.md`.\n")
        conflict = _conflict(memory_bank_dir, project_root)
        assert conflict.conflict_type == ConflictType.ORPHANED

        result = SyncResolver(PolicyOperator(confirm_all=True)).resolve(
            memory_bank_dir, project_root, conflict
        )

        assert result.status == ResolutionStatus.COMPLETED
        assert result.actions_performed == []
        assert result.final_state.orphaned_references == ["gone.md"]
        assert "manual follow-up" in result.message

    def test_rebuilds_missing_discrepancies(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        """Conflict details without per-item records are still resolvable."""
        write_memory_files("progress.md")
        write_instructions(managed_text())
        conflict = ConflictDetails(
            conflict_type=ConflictType.MISSING,
            missing_references=["progress.md"],
            orphaned_references=[],
            severity=Severity.LOW,
            auto_resolvable=True,
        )

        result = perform_interactive_sync_resolution(memory_bank_dir, project_root, conflict)

        assert result.resolved is True
        assert len(result.actions_performed) == 1

    def test_rebuilt_items_follow_the_given_policy(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        """Rebuilt per-item records are rated with the resolver's policy."""
        write_memory_files("techContext.md")
        write_instructions(managed_text())
        conflict = ConflictDetails(
            conflict_type=ConflictType.MISSING,
            missing_references=["techContext.md"],
            orphaned_references=[],
            severity=Severity.LOW,
            auto_resolvable=True,
        )
        operator = ScriptedOperator([Strategy.AUTO.value])
        policy = SyncPolicy(low_impact_files=frozenset({"techContext.md"}))

        result = SyncResolver(operator, policy=policy).resolve(memory_bank_dir, project_root, conflict)

        assert len(operator.asked) == 1
        assert result.resolved is True
        assert [a.target_file for a in result.actions_performed] == ["techContext.md"]


class TestPolicyOperator:
    """Tests for the non-interactive operator."""

    def test_high_severity_items_skipped_without_confirm_all(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        write_memory_files("techContext.md")
        path = write_instructions(managed_text())
        before = path.read_bytes()

        result = SyncResolver(PolicyOperator()).resolve(
            memory_bank_dir, project_root, _conflict(memory_bank_dir, project_root)
        )

        assert [c.answer for c in result.user_choices] == [Strategy.INTERACTIVE.value, SKIP]
        assert result.actions_performed == []
        assert path.read_bytes() == before

    def test_confirm_all_applies_everything(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        write_memory_files("techContext.md", "features/x.md")
        write_instructions(managed_text("gone.md"))

        result = SyncResolver(PolicyOperator(confirm_all=True)).resolve(
            memory_bank_dir, project_root, _conflict(memory_bank_dir, project_root)
        )

        assert result.resolved is True
        assert len(result.actions_performed) == 3

    def test_auto_disabled_reviews_each_item(self, project_root: Path, memory_bank_dir: Path, write_memory_files, write_instructions, managed_text) -> None:
        write_memory_files("progress.md")
        write_instructions(managed_text())

        result = SyncResolver(PolicyOperator(auto_resolve=False)).resolve(
            memory_bank_dir, project_root, _conflict(memory_bank_dir, project_root)
        )

        assert [c.answer for c in result.user_choices] == [Strategy.INTERACTIVE.value, PROCEED]
        assert result.resolved is True
