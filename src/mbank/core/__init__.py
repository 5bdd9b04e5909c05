"""Core constants, configuration and exceptions."""

from mbank.core.config import MBankConfig, ServerConfig, SyncConfig
from mbank.core.constants import CORE_FILES, Organization
from mbank.core.exceptions import (
    ConfigurationError,
    InstructionsWriteError,
    MemoryBankError,
    ResolutionError,
)

__all__ = [
    "CORE_FILES",
    "Organization",
    "MBankConfig",
    "ServerConfig",
    "SyncConfig",
    "ConfigurationError",
    "InstructionsWriteError",
    "MemoryBankError",
    "ResolutionError",
]
