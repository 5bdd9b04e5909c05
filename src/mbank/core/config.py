"""Memory bank configuration loading and validation."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

from mbank.core.constants import (
    LOW_IMPACT_FILES,
    PROTECTED_FILES,
    SEVERITY_HIGH_THRESHOLD,
    SEVERITY_MEDIUM_THRESHOLD,
    get_config_path,
)
from mbank.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class SyncConfig:
    """Sync classification configuration."""

    low_impact_files: tuple[str, ...] = LOW_IMPACT_FILES
    protected_files: tuple[str, ...] = PROTECTED_FILES
    medium_threshold: int = SEVERITY_MEDIUM_THRESHOLD
    high_threshold: int = SEVERITY_HIGH_THRESHOLD
    semantic_files_low_impact: bool = True

    def __post_init__(self) -> None:
        if self.medium_threshold < 0 or self.high_threshold < 0:
            raise ValueError("Severity thresholds must be non-negative")
        if self.medium_threshold > self.high_threshold:
            raise ValueError("medium_threshold must not exceed high_threshold")

    def to_policy(self) -> "SyncPolicy":
        """Build the classifier policy described by this configuration."""
        from mbank.sync.classifier import SyncPolicy

        return SyncPolicy(
            low_impact_files=frozenset(self.low_impact_files),
            protected_files=frozenset(self.protected_files),
            medium_threshold=self.medium_threshold,
            high_threshold=self.high_threshold,
            semantic_files_low_impact=self.semantic_files_low_impact,
        )


@dataclass(frozen=True)
class ServerConfig:
    """MCP server configuration."""

    transport: str = "stdio"
    port: int = 3000
    log_level: str = "info"


@dataclass(frozen=True)
class MBankConfig:
    """Complete memory bank configuration."""

    version: str = "1.0"
    sync: SyncConfig = field(default_factory=SyncConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary."""
        sync_data = dict(data.get("sync", {}))
        for key in ("low_impact_files", "protected_files"):
            if key in sync_data:
                sync_data[key] = tuple(sync_data[key])

        return cls(
            version=data.get("version", "1.0"),
            sync=SyncConfig(**sync_data),
            server=ServerConfig(**data.get("server", {})),
        )

    @classmethod
    def load(cls, project_root: Path | None = None) -> Self:
        """Load configuration from file or use defaults."""
        config_path = get_config_path(project_root or Path.cwd())

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Config file must contain a JSON object, not {type(data).__name__}",
                    details={"path": config_path.name},
                )
            return cls.from_dict(data)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {e}",
                details={"path": config_path.name},
            ) from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid configuration values: {e}",
                details={"path": config_path.name},
            ) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "version": self.version,
            "sync": {
                "low_impact_files": list(self.sync.low_impact_files),
                "protected_files": list(self.sync.protected_files),
                "medium_threshold": self.sync.medium_threshold,
                "high_threshold": self.sync.high_threshold,
                "semantic_files_low_impact": self.sync.semantic_files_low_impact,
            },
            "server": {
                "transport": self.server.transport,
                "port": self.server.port,
                "log_level": self.server.log_level,
            },
        }

    def save(self, project_root: Path | None = None) -> None:
        """Save configuration to file."""
        config_path = get_config_path(project_root or Path.cwd())
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
