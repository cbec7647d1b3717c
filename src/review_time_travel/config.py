"""
Configuration loading and validation for Review Time Travel.

This module handles configuration file parsing, validation, and provides
sensible defaults for all configuration options.
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


class VerificationConfig(BaseModel):
    """Configuration for line-mapping verification."""

    search_window: int = Field(
        default=50,
        ge=0,
        description="How many lines above and below the anchor to search for moved text.",
    )


class TimeTravelConfig(BaseModel):
    """Configuration for commit navigation."""

    commit_history_limit: int = Field(
        default=200,
        ge=2,
        description="Maximum number of commits kept in a navigable range.",
    )
    inline_pass_threshold: int = Field(
        default=8,
        ge=0,
        description="Verification passes over at most this many comments run inline.",
    )
    excerpt_context_lines: int = Field(
        default=3,
        ge=0,
        description="Lines shown above and below the mapped line in the time-travel file view.",
    )


class DisplayConfig(BaseModel):
    """Configuration for diff context rendering."""

    width: int = Field(
        default=100,
        ge=0,
        description="Display width in terminal cells (0 disables wrapping).",
    )
    wrap_mode: Literal["wrap", "truncate"] = Field(
        default="wrap",
        description="Whether long diff lines are wrapped or truncated.",
    )


class DiscoveryConfig(BaseModel):
    """Configuration for local repository discovery."""

    remote_name: Optional[str] = Field(
        default=None,
        description="Only consider this remote. By default every remote is inspected.",
    )


class LoggingConfig(BaseModel):
    """Configuration for diagnostic logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level for diagnostic output.",
    )


class Config(BaseModel):
    """Root configuration model for Review Time Travel."""

    verification: VerificationConfig = Field(default_factory=VerificationConfig)
    time_travel: TimeTravelConfig = Field(default_factory=TimeTravelConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    class Config:
        """Pydantic model configuration."""

        extra = "forbid"


CONFIG_FILE_NAMES = [".review-time-travel.yaml", ".review-time-travel.yml"]


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, returns defaults.

    Returns:
        Config object with loaded or default values.

    Raises:
        FileNotFoundError: If the specified config file doesn't exist.
        ValueError: If the config file is invalid.
    """
    if config_path is None:
        return Config()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return Config(**data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file: {e}") from e
    except Exception as e:
        raise ValueError(f"Failed to load configuration: {e}") from e


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Search for a configuration file starting from the given path.

    Searches for `.review-time-travel.yaml` or `.review-time-travel.yml`
    in the start path and parent directories.

    Args:
        start_path: Directory to start searching from.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = start_path.resolve()
    while current != current.parent:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return config_path
        current = current.parent

    return None
