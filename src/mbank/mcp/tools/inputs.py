"""
Validated tool inputs.

Every tool payload is parsed into one of these models before it reaches the
sync pipeline. ``ToolRequest`` is a union discriminated by the ``tool``
field, so a payload naming one tool can never be read as another's.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from mbank.core.exceptions import ToolInputError


class ToolInput(BaseModel):
    """Common base: unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    project_root_path: str = Field(..., min_length=1, description="Project root containing .github/")


class ValidateMemoryBankInput(ToolInput):
    tool: Literal["validate_memory_bank"] = "validate_memory_bank"
    sync_validation: bool = Field(True, description="Compare against the instructions document")
    detailed: bool = Field(False, description="Return the full validation result")


class ResolveSyncConflictsInput(ToolInput):
    tool: Literal["resolve_sync_conflicts"] = "resolve_sync_conflicts"
    auto_resolve: bool = Field(True, description="Apply low-impact fixes without confirmation")
    confirm_all: bool = Field(False, description="Apply high-severity fixes as well")


class SetupCopilotInstructionsInput(ToolInput):
    tool: Literal["setup_copilot_instructions"] = "setup_copilot_instructions"


class CustomFolderInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, pattern=r"^[\w.-]+$")
    description: str
    file_patterns: list[str] = Field(default_factory=list)


class GenerateMemoryBankInput(ToolInput):
    tool: Literal["generate_memory_bank"] = "generate_memory_bank"
    structure_type: Literal["standard", "enhanced", "custom"] = "standard"
    focus_areas: list[str] = Field(default_factory=list)
    detail_level: Literal["brief", "standard", "detailed", "comprehensive"] = "detailed"
    additional_files: list[str] = Field(default_factory=list)
    semantic_organization: bool = True
    custom_folders: list[CustomFolderInput] = Field(default_factory=list)
    setup_instructions: bool = Field(True, description="Also set up the instructions document")


class AnalyzeProjectStructureInput(ToolInput):
    tool: Literal["analyze_project_structure"] = "analyze_project_structure"
    depth: Literal["shallow", "medium", "deep"] = "medium"


class UpdateMemoryBankInput(ToolInput):
    tool: Literal["update_memory_bank"] = "update_memory_bank"
    depth: Literal["shallow", "medium", "deep"] = "medium"


ToolRequest = Annotated[
    Union[
        ValidateMemoryBankInput,
        ResolveSyncConflictsInput,
        SetupCopilotInstructionsInput,
        GenerateMemoryBankInput,
        AnalyzeProjectStructureInput,
        UpdateMemoryBankInput,
    ],
    Field(discriminator="tool"),
]

_request_adapter: TypeAdapter[ToolRequest] = TypeAdapter(ToolRequest)


def _format_errors(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in e['loc']) or 'payload'}: {e['msg']}"
        for e in error.errors()
    ]


def parse_tool_request(payload: dict[str, Any]) -> ToolRequest:
    """
    Parse a raw payload into the matching tool input.

    Args:
        payload: Raw arguments including a ``tool`` name

    Returns:
        The validated input model

    Raises:
        ToolInputError: If the payload is malformed or names an unknown tool
    """
    try:
        return _request_adapter.validate_python(payload)
    except ValidationError as e:
        raise ToolInputError("Invalid tool input", errors=_format_errors(e)) from e


def parse_tool_input(model: type[ToolInput], payload: dict[str, Any]) -> ToolInput:
    """Validate a payload for a known tool."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ToolInputError("Invalid tool input", errors=_format_errors(e)) from e
