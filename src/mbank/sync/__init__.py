"""Sync validation and conflict resolution between the memory bank and the instructions document."""
from mbank.sync.classifier import DEFAULT_POLICY, ConflictClassifier, SyncPolicy, classify
from mbank.sync.differ import diff
from mbank.sync.extractor import (
    BacktickReferenceExtractor,
    ReferenceExtractor,
    extract_instruction_references,
    extract_memory_bank_files,
    read_instruction_references,
    read_instructions,
)
from mbank.sync.resolver import (
    Operator,
    PolicyOperator,
    ResolverState,
    ScriptedOperator,
    Strategy,
    SyncResolver,
    perform_interactive_sync_resolution,
)
from mbank.sync.structure import discover_structure
from mbank.sync.validator import (
    summarize_validation,
    validate_copilot_sync,
    validate_memory_bank,
)
from mbank.sync.writer import (
    InstructionsUpdate,
    add_reference,
    find_managed_region,
    has_signature,
    remove_reference,
    render_memory_bank_section,
    setup_copilot_instructions,
)

__all__ = [
    "DEFAULT_POLICY",
    "BacktickReferenceExtractor",
    "ConflictClassifier",
    "InstructionsUpdate",
    "Operator",
    "PolicyOperator",
    "ReferenceExtractor",
    "ResolverState",
    "ScriptedOperator",
    "Strategy",
    "SyncPolicy",
    "SyncResolver",
    "add_reference",
    "classify",
    "diff",
    "discover_structure",
    "extract_instruction_references",
    "extract_memory_bank_files",
    "find_managed_region",
    "has_signature",
    "perform_interactive_sync_resolution",
    "read_instruction_references",
    "read_instructions",
    "remove_reference",
    "render_memory_bank_section",
    "setup_copilot_instructions",
    "summarize_validation",
    "validate_copilot_sync",
    "validate_memory_bank",
]
