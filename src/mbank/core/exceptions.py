"""Memory bank exception hierarchy."""

import re
from pathlib import Path
from typing import Any


class MemoryBankError(Exception):
    """Base exception for all memory bank errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(MemoryBankError):
    """Raised when configuration is invalid or missing."""

    pass


class MemoryBankFileError(MemoryBankError):
    """Base exception for memory bank file operations."""

    def __init__(
        self, message: str, path: Path | None = None, details: dict[str, Any] | None = None
    ) -> None:
        details = details or {}
        if path:
            details["path"] = str(path)
        super().__init__(message, details)
        self.path = path


class InstructionsWriteError(MemoryBankFileError):
    """Raised when the instructions document cannot be rewritten."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, path, details)
        self.operation = operation


class GenerationError(MemoryBankFileError):
    """Raised when memory bank documents cannot be generated."""

    pass


class ResolutionError(MemoryBankError):
    """Base exception for sync conflict resolution."""

    pass


class ResolutionStateError(ResolutionError):
    """Raised when the resolver attempts an illegal state transition."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        target: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        if target:
            details["target"] = target
        super().__init__(message, details)
        self.source = source
        self.target = target


class InvalidChoiceError(ResolutionError):
    """Raised when an operator answers with a value that was not offered."""

    def __init__(
        self,
        message: str,
        answer: str | None = None,
        options: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if answer is not None:
            details["answer"] = answer
        if options:
            details["options"] = options
        super().__init__(message, details)
        self.answer = answer
        self.options = options or []


class ToolInputError(MemoryBankError):
    """Raised when a tool payload fails validation."""

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if errors:
            details["errors"] = errors
        super().__init__(message, details)
        self.errors = errors or []


_ABSOLUTE_PATH = re.compile(r"(?<![\w.~-])(?:[A-Za-z]:)?[\\/](?:[^\s'\"\\/:]+[\\/])+[^\s'\"\\/:]*")


def sanitize_error_message(error: BaseException, root: Path | str | None = None) -> str:
    """Render an error for callers without stack traces or absolute paths.

    Paths under ``root`` are shown relative to it, any other absolute path
    is reduced to its final component.
    """
    message = error.message if isinstance(error, MemoryBankError) else str(error)
    if not message:
        message = error.__class__.__name__

    if root is not None:
        root_str = str(Path(root))
        if root_str not in ("", "/", "."):
            message = message.replace(root_str.rstrip("/\\") + "/", "")
            message = message.replace(root_str, ".")

    def _shorten(match: re.Match[str]) -> str:
        parts = re.split(r"[\\/]", match.group(0).rstrip("/\\"))
        return parts[-1] if parts and parts[-1] else "<path>"

    return _ABSOLUTE_PATH.sub(_shorten, message)
