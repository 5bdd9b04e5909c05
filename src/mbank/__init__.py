"""mbank - Memory bank sync for AI coding assistants.

Keeps a generated directory of markdown memory documents and the assistant's
instructions document consistent: detects drift, classifies it and drives a
conversational resolution that edits only the managed part of the
instructions.
"""

__version__ = "0.1.0"

from mbank.core import (
    CORE_FILES,
    MBankConfig,
    MemoryBankError,
    Organization,
)

__all__ = [
    "__version__",
    "CORE_FILES",
    "Organization",
    # Config
    "MBankConfig",
    # Base exception
    "MemoryBankError",
]
