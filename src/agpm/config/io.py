"""File I/O for agpm.toml and agpm.lock."""

import logging
from pathlib import Path

import tomli
import tomli_w

from agpm.config.models import AgpmConfig
from agpm.config.validation import validate_config_data, validate_lock_data
from agpm.errors import ConfigValidationError
from agpm.install.targets import DEFAULT_TARGET
from agpm.lock.models import AgpmLock, LockedArtifact
from agpm.paths import (
    CONFIG_FILENAME,
    LEGACY_CONFIG_FILENAME,
    LEGACY_LOCK_FILENAME,
    LOCK_FILENAME,
)

logger = logging.getLogger(__name__)


def _read_toml(path: Path) -> dict[str, object]:
    with open(path, "rb") as f:
        try:
            return tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigValidationError(path, (f"Invalid TOML: {e}",)) from e


def config_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_FILENAME


def lock_path(project_dir: Path) -> Path:
    return project_dir / LOCK_FILENAME


def load_config(project_dir: Path) -> AgpmConfig:
    """Load agpm.toml from project directory.

    Returns the default configuration if the file doesn't exist.

    Raises:
        ConfigValidationError: If the file is not valid TOML or fails validation,
            or only a legacy agpm.json is present
    """
    path = config_path(project_dir)
    if not path.exists():
        legacy = project_dir / LEGACY_CONFIG_FILENAME
        if legacy.exists():
            message = f"{legacy.name} is no longer read; move its settings into {path.name}"
            raise ConfigValidationError(legacy, (message,))
        return create_default_config()

    result = validate_config_data(_read_toml(path))
    if result.config is None:
        raise ConfigValidationError(path, result.errors)
    return result.config


def save_config(project_dir: Path, config: AgpmConfig) -> None:
    """Save agpm.toml to the project directory."""
    sources: list[dict[str, str]] = []
    for source in config.sources:
        entry = {"name": source.name, "url": source.url}
        if source.format is not None:
            entry["format"] = source.format
        if source.subdir is not None:
            entry["subdir"] = source.subdir
        sources.append(entry)

    data: dict[str, object] = {
        "version": config.version,
        "artifacts": list(config.artifacts),
        "collections": list(config.collections),
        "targets": dict(config.targets),
    }
    if sources:
        data["sources"] = sources

    with open(config_path(project_dir), "wb") as f:
        tomli_w.dump(data, f)


def create_default_config() -> AgpmConfig:
    """Create default project configuration."""
    return AgpmConfig(targets={DEFAULT_TARGET: True})


def load_lock(project_dir: Path) -> AgpmLock:
    """Load agpm.lock from project directory.

    Returns an empty lock if the file doesn't exist.

    Raises:
        ConfigValidationError: If the file is not valid TOML or fails validation
    """
    path = lock_path(project_dir)
    if not path.exists():
        if (project_dir / LEGACY_LOCK_FILENAME).exists():
            logger.warning(
                "Ignoring %s; %s will be written on the next install",
                LEGACY_LOCK_FILENAME,
                path.name,
            )
        return AgpmLock()

    result = validate_lock_data(_read_toml(path))
    if result.lock is None:
        raise ConfigValidationError(path, result.errors)
    return result.lock


def _locked_artifact_to_dict(entry: LockedArtifact) -> dict[str, object]:
    data: dict[str, object] = {
        "sha": entry.sha,
        "integrity": entry.integrity,
        "path": entry.path,
    }
    if entry.ref is not None:
        data["ref"] = entry.ref
    # TOML has no null
    data["metadata"] = {k: v for k, v in entry.metadata.items() if v is not None}
    return data


def save_lock(project_dir: Path, lock: AgpmLock) -> None:
    """Save agpm.lock to the project directory, with keys in sorted order."""
    data = {
        "version": lock.version,
        "artifacts": {
            key: _locked_artifact_to_dict(lock.artifacts[key]) for key in sorted(lock.artifacts)
        },
    }
    with open(lock_path(project_dir), "wb") as f:
        tomli_w.dump(data, f)
