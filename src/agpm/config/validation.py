"""Structural validation of agpm.toml and agpm.lock using Pydantic.

Both files are validated as a whole so every problem is reported at once,
rather than failing on the first bad field.
"""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from agpm.config.models import CONFIG_VERSION, AgpmConfig
from agpm.install.targets import BUILT_IN_TARGETS, is_valid_target
from agpm.lock.models import LOCK_VERSION, AgpmLock, LockedArtifact
from agpm.sources.parsing import Source, is_contained_path


class SourceModel(BaseModel):
    """A [[sources]] entry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    url: str
    format: Literal["auto", "claude-marketplace", "claude-plugin", "simple"] | None = None
    subdir: str | None = None

    @field_validator("name", "url")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("subdir")
    @classmethod
    def validate_subdir(cls, v: str | None) -> str | None:
        if v is not None and not is_contained_path(v):
            raise ValueError("must be a relative path inside the repository")
        return v


class ConfigModel(BaseModel):
    """Top-level agpm.toml document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = CONFIG_VERSION
    targets: dict[str, bool | dict[str, object]] = Field(default_factory=dict)
    sources: tuple[SourceModel, ...] = ()
    artifacts: tuple[str, ...] = ()
    collections: tuple[str, ...] = ()

    @field_validator("targets")
    @classmethod
    def validate_targets(cls, v: dict[str, object]) -> dict[str, object]:
        unknown = [name for name in v if not is_valid_target(name)]
        if unknown:
            expected = ", ".join(BUILT_IN_TARGETS)
            raise ValueError(f"unknown target(s) {', '.join(unknown)} (expected one of: {expected})")
        return v

    @field_validator("artifacts", "collections")
    @classmethod
    def validate_references(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for i, item in enumerate(v):
            if not item.strip():
                raise ValueError(f"entry {i} must not be empty")
        return v

    @model_validator(mode="after")
    def validate_unique_sources(self) -> "ConfigModel":
        seen: set[str] = set()
        for source in self.sources:
            if source.name in seen:
                raise ValueError(f"duplicate source name: {source.name}")
            seen.add(source.name)
        return self


class LockedArtifactModel(BaseModel):
    """An [artifacts."<key>"] table in agpm.lock."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sha: str = Field(min_length=1)
    integrity: str = Field(pattern=r"^sha256-[A-Za-z0-9+/]+=*$")
    path: str
    ref: str | None = None
    metadata: dict[str, object] = Field(default_factory=dict)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.strip() or not is_contained_path(v):
            raise ValueError("must be a relative path inside the repository")
        return v


class LockModel(BaseModel):
    """Top-level agpm.lock document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Literal[1] = LOCK_VERSION
    artifacts: dict[str, LockedArtifactModel] = Field(default_factory=dict)


@dataclass(frozen=True)
class ConfigValidationResult:
    """Result of validating agpm.toml data.

    If is_valid is True, config holds the parsed configuration.
    """

    config: AgpmConfig | None
    errors: tuple[str, ...]

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0


@dataclass(frozen=True)
class LockValidationResult:
    """Result of validating agpm.lock data."""

    lock: AgpmLock | None
    errors: tuple[str, ...]

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0


def _extract_pydantic_errors(exc: ValidationError) -> list[str]:
    """Extract human-readable error messages from a Pydantic validation exception."""
    errors: list[str] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        msg = error.get("msg", "validation error")
        field_path = ".".join(str(part) for part in loc)
        if field_path:
            if error.get("type") == "missing":
                errors.append(f"Missing required field: {field_path}")
            else:
                errors.append(f"Field '{field_path}' {msg}")
        else:
            errors.append(msg)
    return errors


def validate_config_data(data: dict[str, object]) -> ConfigValidationResult:
    """Validate raw agpm.toml data and convert it to an AgpmConfig."""
    try:
        model = ConfigModel.model_validate(data)
    except ValidationError as e:
        return ConfigValidationResult(config=None, errors=tuple(_extract_pydantic_errors(e)))

    config = AgpmConfig(
        version=model.version,
        targets=dict(model.targets),
        sources=[
            Source(name=s.name, url=s.url, format=s.format, subdir=s.subdir)
            for s in model.sources
        ],
        artifacts=list(model.artifacts),
        collections=list(model.collections),
    )
    return ConfigValidationResult(config=config, errors=())


def validate_lock_data(data: dict[str, object]) -> LockValidationResult:
    """Validate raw agpm.lock data and convert it to an AgpmLock."""
    try:
        model = LockModel.model_validate(data)
    except ValidationError as e:
        return LockValidationResult(lock=None, errors=tuple(_extract_pydantic_errors(e)))

    artifacts = {
        key: LockedArtifact(
            sha=entry.sha,
            integrity=entry.integrity,
            path=entry.path,
            ref=entry.ref,
            metadata=dict(entry.metadata),
        )
        for key, entry in model.artifacts.items()
    }
    return LockValidationResult(lock=AgpmLock(version=model.version, artifacts=artifacts), errors=())
