"""Repository configuration.

This module provides the configuration model and I/O functions for a
dbafs repository: where the repository root lives, which subtree is
mirrored into the metadata store, and where the store is persisted.

Configuration is stored in ~/.config/dbafs/config.toml
"""

import tomllib
from pathlib import Path
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dbafs.core.paths import get_config_path, get_metadata_path


class DbafsConfig(BaseModel):
    """Configuration for a dbafs repository.

    Attributes:
        root: Repository root directory. All folder paths are relative to it.
        upload_path: Root-relative folder whose subtree is synchronized.
        sync_exclude: Folder names (relative to upload_path) never synchronized.
        metadata_file: Metadata store file. If None, uses the XDG state dir.
    """

    model_config = ConfigDict(extra="forbid")

    root: Annotated[
        Path,
        Field(description="Repository root directory"),
    ] = Path(".")
    upload_path: Annotated[
        str,
        Field(min_length=1, description="Synchronized folder (root-relative)"),
    ] = "files"
    sync_exclude: Annotated[
        list[str],
        Field(default_factory=list, description="Folders excluded from synchronization"),
    ]
    metadata_file: Annotated[
        Path | None,
        Field(description="Metadata store file (None = XDG state dir)"),
    ] = None

    @field_validator("upload_path")
    @classmethod
    def validate_upload_path(cls, v: str) -> str:
        """Strip slashes and reject the repository root as upload path."""
        path = v.strip().strip("/")
        if not path or path == ".":
            msg = "upload_path cannot be the repository root"
            raise ValueError(msg)
        return path

    @field_validator("sync_exclude")
    @classmethod
    def validate_sync_exclude(cls, v: list[str]) -> list[str]:
        """Normalize excluded folder names and drop empty entries."""
        return [entry.strip().strip("/") for entry in v if entry.strip().strip("/")]

    @property
    def effective_metadata_file(self) -> Path:
        """Get the metadata store file, falling back to the XDG state dir."""
        if self.metadata_file is not None:
            return self.metadata_file
        return get_metadata_path()


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the config content is invalid."""


def load_config(path: Path | None = None) -> DbafsConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated DbafsConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return DbafsConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> DbafsConfig:
    """Load configuration, falling back to defaults when no file exists.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return DbafsConfig()


def save_config(config: DbafsConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The DbafsConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    import os
    from tempfile import NamedTemporaryFile

    config_path = path or get_config_path()

    # Ensure parent directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: DbafsConfig) -> dict[str, object]:
    """Convert DbafsConfig to a dictionary for TOML serialization.

    Only includes non-None values since TOML has no null.
    """
    result: dict[str, object] = {
        "root": str(config.root),
        "upload_path": config.upload_path,
        "sync_exclude": list(config.sync_exclude),
    }

    if config.metadata_file is not None:
        result["metadata_file"] = str(config.metadata_file)

    return result
