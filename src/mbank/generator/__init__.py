"""Project analysis and memory bank document generation."""
from mbank.generator.analysis import analyze_project, detect_frameworks, scan_source_files
from mbank.generator.memory_bank import (
    categorize_file,
    ensure_memory_bank_directory,
    generate_memory_bank_files,
    semantic_categories,
)
from mbank.generator.update import find_placeholders, plan_memory_bank_update

__all__ = [
    "analyze_project",
    "categorize_file",
    "detect_frameworks",
    "ensure_memory_bank_directory",
    "find_placeholders",
    "generate_memory_bank_files",
    "plan_memory_bank_update",
    "scan_source_files",
    "semantic_categories",
]
