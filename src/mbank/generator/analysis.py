"""Heuristic project analysis.

Reads project metadata and scans the source tree to produce the descriptive
``ProjectAnalysis`` used to fill memory bank templates. Read-only.
"""

import json
import logging
import os
import re
import tomllib
from pathlib import Path

from mbank.core.constants import (
    ANALYSIS_DEPTH_LEVELS,
    DEFAULT_ANALYSIS_DEPTH,
    IGNORED_DIRECTORIES,
)
from mbank.core.exceptions import MemoryBankFileError
from mbank.models.analysis import ProjectAnalysis

logger = logging.getLogger(__name__)

LANGUAGE_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "python": (".py", ".pyw"),
    "typescript": (".ts", ".tsx"),
    "javascript": (".js", ".jsx", ".mjs"),
    "go": (".go",),
    "rust": (".rs",),
    "java": (".java",),
    "csharp": (".cs",),
    "ruby": (".rb",),
    "php": (".php",),
    "c/c++": (".c", ".h", ".cpp", ".hpp"),
}

# Dependency name -> framework label
FRAMEWORK_DEPENDENCIES: dict[str, str] = {
    "fastapi": "FastAPI",
    "django": "Django",
    "flask": "Flask",
    "typer": "Typer",
    "click": "Click",
    "pydantic": "Pydantic",
    "pytest": "pytest",
    "mcp": "Model Context Protocol",
    "@modelcontextprotocol/sdk": "Model Context Protocol",
    "react": "React",
    "vue": "Vue.js",
    "@angular/core": "Angular",
    "express": "Express",
    "fastify": "Fastify",
    "next": "Next.js",
    "svelte": "Svelte",
    "typescript": "TypeScript",
    "jest": "Jest",
    "vitest": "Vitest",
    "vite": "Vite",
}

# Root file -> framework label
FRAMEWORK_FILES: dict[str, str] = {
    "manage.py": "Django",
    "tsconfig.json": "TypeScript",
    "next.config.js": "Next.js",
    "angular.json": "Angular",
    "vite.config.ts": "Vite",
    "Dockerfile": "Docker",
}

CONFIG_FILE_NAMES: tuple[str, ...] = (
    "pyproject.toml",
    "setup.cfg",
    "package.json",
    "tsconfig.json",
    "Dockerfile",
    "docker-compose.yml",
    "Makefile",
)

ENTRY_POINT_NAMES: tuple[str, ...] = (
    "main.py",
    "__main__.py",
    "app.py",
    "cli.py",
    "server.py",
    "index.ts",
    "index.js",
    "main.ts",
)

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def _requirement_name(requirement: str) -> str:
    match = _REQUIREMENT_NAME.match(requirement)
    return match.group(1).lower() if match else requirement.lower()


def _read_pyproject(path: Path) -> dict:
    with open(path, "rb") as f:
        data = tomllib.load(f)

    project = data.get("project", {})
    optional = project.get("optional-dependencies", {})
    dev = {
        _requirement_name(req): req
        for group in optional.values()
        for req in group
    }
    return {
        "name": project.get("name"),
        "description": project.get("description"),
        "version": project.get("version"),
        "dependencies": {
            _requirement_name(req): req for req in project.get("dependencies", [])
        },
        "dev_dependencies": dev,
        "scripts": dict(project.get("scripts", {})),
        "type": "Python Project",
    }


def _read_package_json(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return {
        "name": data.get("name"),
        "description": data.get("description"),
        "version": data.get("version"),
        "dependencies": dict(data.get("dependencies", {})),
        "dev_dependencies": dict(data.get("devDependencies", {})),
        "scripts": dict(data.get("scripts", {})),
        "type": "Node.js Project",
    }


def read_project_metadata(project_root: Path) -> dict:
    """Metadata from ``pyproject.toml`` or ``package.json``.

    Unparseable metadata files are logged and skipped.
    """
    readers = (
        ("pyproject.toml", _read_pyproject),
        ("package.json", _read_package_json),
    )
    for name, reader in readers:
        path = project_root / name
        if not path.is_file():
            continue
        try:
            return reader(path)
        except (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unparseable {name}: {e}")
    return {}


def scan_source_files(project_root: Path, depth: str = DEFAULT_ANALYSIS_DEPTH) -> tuple[dict[str, int], list[str]]:
    """Count source files per language.

    Args:
        project_root: Directory to scan.
        depth: ``shallow``, ``medium`` or ``deep``.

    Returns:
        Language counts and the scanned relative directories.
    """
    max_depth = ANALYSIS_DEPTH_LEVELS.get(depth, ANALYSIS_DEPTH_LEVELS[DEFAULT_ANALYSIS_DEPTH])
    languages: dict[str, int] = {}
    directories: list[str] = []

    for dirpath, dirnames, filenames in os.walk(project_root):
        current = Path(dirpath)
        level = len(current.relative_to(project_root).parts)

        dirnames[:] = sorted(
            d for d in dirnames
            if d not in IGNORED_DIRECTORIES and not d.startswith(".")
        )
        if level >= max_depth:
            dirnames[:] = []
        if level > 0:
            directories.append(current.relative_to(project_root).as_posix())

        for name in filenames:
            suffix = Path(name).suffix.lower()
            for language, extensions in LANGUAGE_EXTENSIONS.items():
                if suffix in extensions:
                    languages[language] = languages.get(language, 0) + 1
                    break

    return languages, directories


def detect_frameworks(root_files: list[str], dependency_names: list[str]) -> list[str]:
    """Framework labels from dependency names and marker files."""
    frameworks: list[str] = []
    for name in dependency_names:
        label = FRAMEWORK_DEPENDENCIES.get(name.lower())
        if label and label not in frameworks:
            frameworks.append(label)
    for name in root_files:
        label = FRAMEWORK_FILES.get(name)
        if label and label not in frameworks:
            frameworks.append(label)
    return frameworks


def _focus_areas(project_type: str, frameworks: list[str], directories: list[str]) -> list[str]:
    areas = ["architecture"]
    top_level = {d.split("/", 1)[0] for d in directories}
    if "Model Context Protocol" in frameworks or {"FastAPI", "Flask", "Express"} & set(frameworks):
        areas.append("api")
    if top_level & {"tests", "test", "__tests__"}:
        areas.append("testing")
    if "Docker" in frameworks or "deploy" in top_level:
        areas.append("deployment")
    if project_type == "Frontend Application":
        areas.append("features")
    return areas


def analyze_project(project_root: Path | str, depth: str = DEFAULT_ANALYSIS_DEPTH) -> ProjectAnalysis:
    """Describe a project from its metadata and source tree.

    Args:
        project_root: Project root directory.
        depth: Scan depth, ``shallow``, ``medium`` or ``deep``.

    Returns:
        Project analysis.

    Raises:
        MemoryBankFileError: If the project root does not exist.
    """
    root = Path(project_root)
    if not root.is_dir():
        raise MemoryBankFileError("Project root does not exist", path=root)

    metadata = read_project_metadata(root)
    root_files = sorted(p.name for p in root.iterdir() if p.is_file())
    languages, directories = scan_source_files(root, depth)

    dependencies = metadata.get("dependencies", {})
    dev_dependencies = metadata.get("dev_dependencies", {})
    frameworks = detect_frameworks(root_files, [*dependencies, *dev_dependencies])

    project_type = metadata.get("type") or "Unknown"
    if "Model Context Protocol" in frameworks:
        project_type = "MCP Server"
    elif {"React", "Vue.js", "Angular", "Svelte"} & set(frameworks):
        project_type = "Frontend Application"
    elif {"FastAPI", "Django", "Flask", "Express", "Fastify"} & set(frameworks):
        project_type = "Backend API"
    elif project_type == "Unknown" and languages:
        project_type = f"{max(languages, key=languages.get).capitalize()} Project"

    estimated = sum(languages.values())
    complexity = "High" if estimated > 50 else "Medium" if estimated > 20 else "Low"

    analysis = ProjectAnalysis(
        project_name=metadata.get("name") or root.resolve().name,
        project_type=project_type,
        description=metadata.get("description") or "A software project",
        version=metadata.get("version") or "0.0.0",
        frameworks=frameworks,
        languages=languages,
        directories=directories,
        root_files=root_files,
        entry_points=[name for name in root_files if name in ENTRY_POINT_NAMES],
        config_files=[name for name in root_files if name in CONFIG_FILE_NAMES],
        dependencies=dependencies,
        dev_dependencies=dev_dependencies,
        scripts=metadata.get("scripts", {}),
        estimated_files=estimated,
        complexity=complexity,
        focus_areas=_focus_areas(project_type, frameworks, directories),
    )
    logger.info(f"Analyzed {analysis.project_name}: {project_type}, {estimated} source files")
    return analysis
