"""Interactive sync conflict resolution.

The resolver is an explicit state machine::

    START -> SUMMARIZE -> ASK_STRATEGY -> CONFIRM* -> APPLY -> RECHECK -> END

Every question is put to an ``Operator``. The MCP tool uses the
deterministic ``PolicyOperator``, the CLI prompts a person, and tests use a
``ScriptedOperator``. Confirmed edits are handed to the instructions writer
and the sync state is recomputed from disk afterwards.

Concurrency: edits are whole-file rewrites with no locking. A validation
running at the same time as a resolution may observe the pre-resolution
document; the last writer wins.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Protocol

from mbank.core.constants import get_instructions_path
from mbank.core.exceptions import InvalidChoiceError, ResolutionError, ResolutionStateError
from mbank.models.sync import (
    ActionType,
    ConflictDetails,
    ConversationStep,
    Discrepancy,
    FinalState,
    ResolutionAction,
    ResolutionResult,
    ResolutionStatus,
    Severity,
    StepType,
    SyncDiff,
    UserChoice,
)
from mbank.sync import writer
from mbank.sync.classifier import SyncPolicy, classify
from mbank.sync.differ import diff
from mbank.sync.extractor import (
    ReferenceExtractor,
    extract_memory_bank_files,
    read_instruction_references,
)

logger = logging.getLogger(__name__)


class ResolverState(str, Enum):
    """States of the resolution state machine."""

    START = "start"
    SUMMARIZE = "summarize"
    ASK_STRATEGY = "ask_strategy"
    CONFIRM = "confirm"
    APPLY = "apply"
    RECHECK = "recheck"
    END = "end"


TRANSITIONS: dict[ResolverState, frozenset[ResolverState]] = {
    ResolverState.START: frozenset({ResolverState.SUMMARIZE, ResolverState.END}),
    ResolverState.SUMMARIZE: frozenset({ResolverState.ASK_STRATEGY}),
    ResolverState.ASK_STRATEGY: frozenset({
        ResolverState.CONFIRM,
        ResolverState.APPLY,
        ResolverState.RECHECK,
    }),
    ResolverState.CONFIRM: frozenset({ResolverState.CONFIRM, ResolverState.APPLY}),
    ResolverState.APPLY: frozenset({ResolverState.RECHECK}),
    ResolverState.RECHECK: frozenset({ResolverState.END}),
    ResolverState.END: frozenset(),
}


class Strategy(str, Enum):
    """How the operator wants the conflicts handled."""

    AUTO = "Auto-resolve where possible"
    INTERACTIVE = "Review each conflict individually"
    ABORT = "Cancel - Exit without changes"


STRATEGY_QUESTION = "How would you like to resolve these sync conflicts?"
STRATEGY_OPTIONS: tuple[str, ...] = tuple(s.value for s in Strategy)

PROCEED = "Yes - Apply this fix"
SKIP = "No - Skip this conflict"
STOP = "Stop - Cancel resolution"
CONFIRM_OPTIONS: tuple[str, ...] = (PROCEED, SKIP, STOP)

ALREADY_IN_SYNC_MESSAGE = "✅ Memory bank and instructions are already in sync. No action needed."
PRECONDITION_MESSAGE = "Unable to resolve — run validation first"


class Operator(Protocol):
    """Answers the resolver's questions.

    ``subject`` is the ``ConflictDetails`` for the strategy question and the
    ``Discrepancy`` being confirmed for a confirmation step. The answer must
    be one of ``step.options``.
    """

    def choose(self, step: ConversationStep, subject: ConflictDetails | Discrepancy) -> str:
        ...


class PolicyOperator:
    """Deterministic, non-interactive operator.

    Picks automatic resolution when allowed and the conflict is
    auto-resolvable, otherwise reviews each item. Items that need
    confirmation are skipped when the conflict is high severity, unless
    ``confirm_all`` is set.
    """

    def __init__(self, auto_resolve: bool = True, confirm_all: bool = False) -> None:
        self._auto_resolve = auto_resolve
        self._confirm_all = confirm_all
        self._severity = Severity.LOW

    def choose(self, step: ConversationStep, subject: ConflictDetails | Discrepancy) -> str:
        if isinstance(subject, ConflictDetails):
            self._severity = subject.severity
            if self._auto_resolve and subject.auto_resolvable:
                return Strategy.AUTO.value
            return Strategy.INTERACTIVE.value

        if (
            not self._confirm_all
            and not subject.auto_resolvable
            and self._severity == Severity.HIGH
        ):
            return SKIP
        return PROCEED


class ScriptedOperator:
    """Replays a fixed sequence of answers."""

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self.asked: list[ConversationStep] = []

    def choose(self, step: ConversationStep, subject: ConflictDetails | Discrepancy) -> str:
        self.asked.append(step)
        if not self._answers:
            raise ResolutionError(
                "Scripted operator ran out of answers",
                details={"step": step.step},
            )
        return self._answers.pop(0)


@dataclass
class _Run:
    """Mutable bookkeeping for a single resolution call."""

    state: ResolverState = ResolverState.START
    log: list[ConversationStep] = field(default_factory=list)
    choices: list[UserChoice] = field(default_factory=list)
    confirmed: list[Discrepancy] = field(default_factory=list)
    actions: list[ResolutionAction] = field(default_factory=list)
    stopped: bool = False

    def move(self, target: ResolverState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise ResolutionStateError(
                f"Illegal resolver transition {self.state.value} -> {target.value}",
                source=self.state.value,
                target=target.value,
            )
        logger.debug(f"Resolver: {self.state.value} -> {target.value}")
        self.state = target

    def emit(
        self, step_type: StepType, content: str, options: tuple[str, ...] | None = None
    ) -> ConversationStep:
        step = ConversationStep(
            step=len(self.log) + 1, type=step_type, content=content, options=options
        )
        self.log.append(step)
        return step


def render_conflict_summary(conflict: ConflictDetails) -> str:
    """Structured overview shown as the first conversation step."""
    lines = [
        "🔍 Sync Conflict Analysis",
        "",
        f"Conflict Type: {conflict.conflict_type.label}",
        f"Severity: {conflict.severity.value.upper()}",
        "",
    ]

    missing = [d for d in conflict.discrepancies if d.action_type == ActionType.ADD_REFERENCE]
    orphaned = [d for d in conflict.discrepancies if d.action_type == ActionType.REMOVE_REFERENCE]

    if conflict.missing_references:
        lines.append(f"📄 Unreferenced Files ({len(conflict.missing_references)}):")
        if missing:
            for d in missing:
                lines.append(f"  • {d.path} ({d.impact.value} impact)")
                lines.append(f"    {d.description}")
        else:
            lines.extend(f"  • {path}" for path in conflict.missing_references)
        lines.append("")

    if conflict.orphaned_references:
        lines.append(f"🔗 Orphaned References ({len(conflict.orphaned_references)}):")
        if orphaned:
            for d in orphaned:
                lines.append(f"  • {d.path} ({d.impact.value} impact)")
                lines.append(f"    {d.description}")
        else:
            lines.extend(f"  • {path}" for path in conflict.orphaned_references)
        lines.append("")

    lines.append(f"Auto-resolvable: {'Yes' if conflict.auto_resolvable else 'No'}")
    lines.append(f"Suggested actions: {len(conflict.suggested_actions)}")
    return "\n".join(lines)


def _discrepancies(conflict: ConflictDetails, policy: SyncPolicy | None) -> list[Discrepancy]:
    """Per-file items, rebuilt from the path lists if a caller omitted them."""
    if conflict.discrepancies:
        return list(conflict.discrepancies)

    rebuilt = classify(SyncDiff(
        missing=list(conflict.missing_references),
        orphaned=list(conflict.orphaned_references),
    ), policy)
    return list(rebuilt.discrepancies) if rebuilt else []


class SyncResolver:
    """Drives one conflict through the resolution state machine."""

    def __init__(
        self,
        operator: Operator | None = None,
        extractor: ReferenceExtractor | None = None,
        policy: SyncPolicy | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            operator: Source of answers; defaults to ``PolicyOperator()``.
            extractor: Reference extractor used for edits and the recheck.
            policy: Classifier policy for rebuilding per-file items; should
                match the policy the conflict was classified with.
        """
        self._operator = operator or PolicyOperator()
        self._extractor = extractor
        self._policy = policy

    def resolve(
        self,
        memory_bank_dir: Path | str,
        project_root: Path | str,
        conflict_details: ConflictDetails | None,
        *,
        is_in_sync: bool = False,
    ) -> ResolutionResult:
        """Resolve a sync conflict.

        Args:
            memory_bank_dir: Memory bank directory.
            project_root: Project root holding the instructions document.
            conflict_details: Conflict from a prior sync validation.
            is_in_sync: Sync state from that validation.

        Returns:
            The resolution result, including the full conversation log.

        Raises:
            InvalidChoiceError: If the operator answers outside the options.
            MemoryBankFileError: If the instructions document cannot be
                read or written.
        """
        run = _Run()

        if is_in_sync:
            run.move(ResolverState.END)
            run.emit(StepType.INFORMATION, ALREADY_IN_SYNC_MESSAGE)
            return ResolutionResult(
                status=ResolutionStatus.ALREADY_IN_SYNC,
                final_state=FinalState(
                    is_in_sync=True,
                    memory_bank_files=extract_memory_bank_files(memory_bank_dir),
                ),
                conversation_log=run.log,
                message=ALREADY_IN_SYNC_MESSAGE,
            )

        if conflict_details is None:
            run.move(ResolverState.END)
            run.emit(StepType.INFORMATION, PRECONDITION_MESSAGE)
            return ResolutionResult(
                status=ResolutionStatus.PRECONDITION_MISSING,
                final_state=FinalState(
                    is_in_sync=False,
                    memory_bank_files=extract_memory_bank_files(memory_bank_dir),
                ),
                conversation_log=run.log,
                message=PRECONDITION_MESSAGE,
            )

        run.move(ResolverState.SUMMARIZE)
        run.emit(StepType.INFORMATION, render_conflict_summary(conflict_details))

        run.move(ResolverState.ASK_STRATEGY)
        strategy = Strategy(self._ask(run, StepType.QUESTION, STRATEGY_QUESTION,
                                      STRATEGY_OPTIONS, conflict_details))

        if strategy == Strategy.ABORT:
            run.emit(StepType.INFORMATION, "Resolution cancelled. No changes were made.")
            run.move(ResolverState.RECHECK)
            return self._finish(run, memory_bank_dir, project_root, ResolutionStatus.CANCELLED)

        items = _discrepancies(conflict_details, self._policy)
        self._confirm_items(run, items, strategy)

        run.move(ResolverState.APPLY)
        self._apply(run, project_root)
        run.emit(
            StepType.INFORMATION,
            f"{'⏹️ Resolution stopped' if run.stopped else '✅ Resolution complete'}. "
            f"Applied {len(run.actions)} out of {len(items)} suggested fixes.",
        )

        run.move(ResolverState.RECHECK)
        status = ResolutionStatus.CANCELLED if run.stopped else ResolutionStatus.COMPLETED
        return self._finish(run, memory_bank_dir, project_root, status)

    def _ask(
        self,
        run: _Run,
        step_type: StepType,
        content: str,
        options: tuple[str, ...],
        subject: ConflictDetails | Discrepancy,
    ) -> str:
        step = run.emit(step_type, content, options)
        answer = self._operator.choose(step, subject)
        if answer not in options:
            raise InvalidChoiceError(
                f"Answer {answer!r} is not one of the offered options",
                answer=answer,
                options=list(options),
            )
        run.choices.append(UserChoice(step=step.step, question=content, answer=answer))
        return answer

    def _confirm_items(self, run: _Run, items: list[Discrepancy], strategy: Strategy) -> None:
        total = len(items)
        for index, item in enumerate(items, start=1):
            header = f"Conflict {index}/{total}: {item.suggested_action}"

            if strategy == Strategy.AUTO and item.auto_resolvable:
                run.emit(
                    StepType.INFORMATION,
                    f"{header}\n\nDetails: {item.description}\n\n"
                    "Low impact and auto-resolvable; applying without confirmation.",
                )
                run.confirmed.append(item)
                continue

            run.move(ResolverState.CONFIRM)
            answer = self._ask(
                run,
                StepType.CONFIRMATION,
                f"{header}\n\nDetails: {item.description} ({item.impact.value} impact)\n\n"
                "Would you like to perform this action?",
                CONFIRM_OPTIONS,
                item,
            )
            if answer == PROCEED:
                run.confirmed.append(item)
            elif answer == STOP:
                run.stopped = True
                break

    def _apply(self, run: _Run, project_root: Path | str) -> None:
        for item in run.confirmed:
            if item.action_type == ActionType.ADD_REFERENCE:
                applied = writer.add_reference(project_root, item.path, self._extractor)
            else:
                applied = writer.remove_reference(project_root, item.path, self._extractor)

            if applied:
                run.actions.append(ResolutionAction(
                    action_type=item.action_type,
                    description=item.suggested_action,
                    target_file=item.path,
                ))
            else:
                logger.info(f"No edit applied for {item.path}")

    def _finish(
        self,
        run: _Run,
        memory_bank_dir: Path | str,
        project_root: Path | str,
        status: ResolutionStatus,
    ) -> ResolutionResult:
        final_state = self._observe(memory_bank_dir, project_root)
        run.emit(
            StepType.INFORMATION,
            "Final sync status: "
            f"{'✅ Fully synchronized' if final_state.is_in_sync else '⚠️ Some conflicts remain'}\n\n"
            f"Memory bank files: {len(final_state.memory_bank_files)}\n"
            f"Remaining unreferenced: {len(final_state.missing_references)}\n"
            f"Remaining orphaned: {len(final_state.orphaned_references)}",
        )
        run.move(ResolverState.END)

        if final_state.is_in_sync:
            message = "All sync conflicts resolved."
        else:
            message = (
                f"{final_state.remaining} discrepancies remain; manual follow-up "
                "of the instructions document is required."
            )

        logger.info(f"Sync resolution {status.value}: {len(run.actions)} actions applied")
        return ResolutionResult(
            status=status,
            final_state=final_state,
            actions_performed=run.actions,
            user_choices=run.choices,
            conversation_log=run.log,
            message=message,
        )

    def _observe(self, memory_bank_dir: Path | str, project_root: Path | str) -> FinalState:
        instructions = get_instructions_path(Path(project_root))
        files = extract_memory_bank_files(memory_bank_dir)
        sync_diff = diff(files, read_instruction_references(instructions, self._extractor))
        return FinalState(
            is_in_sync=instructions.is_file() and sync_diff.is_empty,
            memory_bank_files=files,
            missing_references=sync_diff.missing,
            orphaned_references=sync_diff.orphaned,
        )


def perform_interactive_sync_resolution(
    memory_bank_dir: Path | str,
    project_root: Path | str,
    conflict_details: ConflictDetails | None,
    *,
    is_in_sync: bool = False,
    operator: Operator | None = None,
    extractor: ReferenceExtractor | None = None,
    policy: SyncPolicy | None = None,
) -> ResolutionResult:
    """Resolve a conflict with a fresh ``SyncResolver``."""
    return SyncResolver(operator, extractor, policy).resolve(
        memory_bank_dir, project_root, conflict_details, is_in_sync=is_in_sync
    )
