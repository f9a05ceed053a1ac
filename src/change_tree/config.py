"""Configuration management for change-tree."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from . import CONFIG_FILE, CT_DIR
from .errors import ConfigError
from .tree import ChangeTreeBuilder

TRUTHY = ("1", "true", "yes", "on")


class ChangeTreeConfig(BaseModel):
    """Configuration for change-tree."""

    version: int = 1
    separator: str = Field(default="/", min_length=1)  # git always reports "/" paths
    keep_root_changes: bool = False
    include_untracked: bool = True
    validate_tree: bool = False


def get_ct_dir(project_root: Path) -> Path:
    """Get the .change-tree directory path."""
    return project_root / CT_DIR


def get_config_path(project_root: Path) -> Path:
    """Get the config file path."""
    return get_ct_dir(project_root) / CONFIG_FILE


def load_config(project_root: Path) -> ChangeTreeConfig:
    """Load configuration from the project's config file.

    Falls back to defaults if file doesn't exist.
    Environment variables can override config values.
    """
    config_path = get_config_path(project_root)

    if config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)
            config = ChangeTreeConfig.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e
    else:
        config = ChangeTreeConfig()

    return _apply_env_overrides(config)


def save_config(config: ChangeTreeConfig, project_root: Path) -> None:
    """Save configuration to the project's config file."""
    config_path = get_config_path(project_root)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config.model_dump(), f, indent=2)


def builder_from_config(config: ChangeTreeConfig) -> ChangeTreeBuilder:
    """Create a tree builder matching the configuration."""
    return ChangeTreeBuilder(
        separator=config.separator,
        keep_root_changes=config.keep_root_changes,
        validate=config.validate_tree,
    )


def _apply_env_overrides(config: ChangeTreeConfig) -> ChangeTreeConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    # CT_SEPARATOR
    if separator := os.environ.get("CT_SEPARATOR"):
        data["separator"] = separator

    # CT_KEEP_ROOT_CHANGES
    if (keep_root := os.environ.get("CT_KEEP_ROOT_CHANGES")) is not None:
        data["keep_root_changes"] = keep_root.strip().lower() in TRUTHY

    # CT_INCLUDE_UNTRACKED
    if (untracked := os.environ.get("CT_INCLUDE_UNTRACKED")) is not None:
        data["include_untracked"] = untracked.strip().lower() in TRUTHY

    return ChangeTreeConfig.model_validate(data)
