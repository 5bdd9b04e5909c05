"""Memory bank system constants and default values."""

from enum import Enum
from pathlib import Path
from typing import Final


class Organization(str, Enum):
    """How the memory bank directory is laid out."""

    FLAT = "flat"
    SEMANTIC = "semantic"


# Directory structure
GITHUB_DIR: Final[str] = ".github"
MEMORY_BANK_DIR: Final[str] = "memory-bank"
INSTRUCTIONS_FILE: Final[str] = "copilot-instructions.md"
CONFIG_FILE: Final[str] = "memory-bank.config.json"

# Memory file settings
MEMORY_FILE_EXTENSION: Final[str] = ".md"

# The six documents always expected at the memory bank root
CORE_FILES: Final[tuple[str, ...]] = (
    "projectbrief.md",
    "productContext.md",
    "activeContext.md",
    "systemPatterns.md",
    "techContext.md",
    "progress.md",
)

CORE_FILE_DESCRIPTIONS: Final[dict[str, str]] = {
    "projectbrief.md": (
        "Foundation document that shapes all other files. Defines core "
        "requirements and goals. Source of truth for project scope."
    ),
    "productContext.md": (
        "Why this project exists. Problems it solves. How it should work. "
        "User experience goals."
    ),
    "activeContext.md": (
        "Current work focus. Recent changes. Next steps. Active decisions "
        "and considerations."
    ),
    "systemPatterns.md": (
        "System architecture. Key technical decisions. Design patterns in use. "
        "Component relationships."
    ),
    "techContext.md": (
        "Technologies used. Development setup. Technical constraints. Dependencies."
    ),
    "progress.md": (
        "What works. What's left to build. Current status. Known issues."
    ),
}

# Semantic folders and the purpose text rendered for them
SEMANTIC_FOLDER_DESCRIPTIONS: Final[dict[str, str]] = {
    "features": "Feature-specific documentation and implementation details",
    "integrations": "Third-party integrations, APIs, and external services",
    "deployment": "Deployment guides, infrastructure, and operational procedures",
    "security": "Security considerations, authentication, and compliance",
    "testing": "Testing strategies, frameworks, and quality assurance",
    "api": "API documentation, endpoints, and interface specifications",
    "performance": "Performance optimization, monitoring, and benchmarks",
}

# File name fragments used to place additional documents into folders
SEMANTIC_FOLDER_PATTERNS: Final[dict[str, tuple[str, ...]]] = {
    "features": ("feature", "component", "module", "functionality", "behavior"),
    "integrations": ("integration", "service", "external", "third-party", "webhook"),
    "deployment": ("deploy", "infrastructure", "docker", "kubernetes", "pipeline"),
    "security": ("security", "auth", "authorization", "compliance", "privacy"),
    "testing": ("test", "qa", "quality", "spec", "e2e"),
    "api": ("api", "endpoint", "route", "controller", "graphql", "rest", "openapi"),
    "performance": ("performance", "optimization", "benchmark", "monitoring", "metrics"),
}

# Managed section of the instructions document
MANAGED_SECTION_HEADING: Final[str] = "# Memory Bank"
MANAGED_FILES_HEADING: Final[str] = "## Memory Bank Files"
SIGNATURE_PHRASE: Final[str] = "After every memory reset, I begin completely fresh"
SIGNATURE_PARAGRAPH: Final[str] = (
    "REMEMBER: After every memory reset, I begin completely fresh. The Memory "
    "Bank is my only link to previous work. It must be maintained with precision "
    "and clarity, as my effectiveness depends entirely on its accuracy."
)

# =============================================================================
# Sync classification defaults
# =============================================================================

# Frequently changing documents whose missing reference is low impact
LOW_IMPACT_FILES: Final[tuple[str, ...]] = ("progress.md",)

# Documents that always need an operator's confirmation
PROTECTED_FILES: Final[tuple[str, ...]] = ("projectbrief.md", "activeContext.md")

# Total discrepancy counts above which severity escalates
SEVERITY_MEDIUM_THRESHOLD: Final[int] = 2
SEVERITY_HIGH_THRESHOLD: Final[int] = 5

# =============================================================================
# Quality assessment thresholds
# =============================================================================

CONSISTENCY_HIGH_RATIO: Final[float] = 0.3
CONSISTENCY_MEDIUM_RATIO: Final[float] = 0.1

CLARITY_EXCELLENT_WORDS: Final[int] = 200
CLARITY_EXCELLENT_HEADINGS: Final[int] = 3
CLARITY_GOOD_WORDS: Final[int] = 100
CLARITY_GOOD_HEADINGS: Final[int] = 2
CLARITY_FAIR_WORDS: Final[int] = 50

# Project analysis
DEFAULT_ANALYSIS_DEPTH: Final[str] = "medium"
ANALYSIS_DEPTH_LEVELS: Final[dict[str, int]] = {
    "shallow": 1,
    "medium": 3,
    "deep": 5,
}
IGNORED_DIRECTORIES: Final[tuple[str, ...]] = (
    ".git",
    ".github",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
)


def get_github_root(project_root: Path) -> Path:
    """Get the .github directory path."""
    return Path(project_root) / GITHUB_DIR


def get_memory_bank_root(project_root: Path) -> Path:
    """Get the memory bank directory path."""
    return get_github_root(project_root) / MEMORY_BANK_DIR


def get_instructions_path(project_root: Path) -> Path:
    """Get the instructions document path."""
    return get_github_root(project_root) / INSTRUCTIONS_FILE


def get_config_path(project_root: Path) -> Path:
    """Get the configuration file path."""
    return get_github_root(project_root) / CONFIG_FILE
