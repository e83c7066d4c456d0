"""Tests for structural validation of config and lock data."""

from agpm.config.validation import validate_config_data, validate_lock_data


def test_empty_config_is_valid() -> None:
    result = validate_config_data({})
    assert result.is_valid
    assert result.config is not None
    assert result.config.version == "1"


def test_target_table_enables_target() -> None:
    result = validate_config_data({"targets": {"opencode": {}, "codex": False}})
    assert result.config is not None
    assert result.config.targets == {"opencode": {}, "codex": False}


def test_unknown_source_format_rejected() -> None:
    result = validate_config_data(
        {"sources": [{"name": "o/r", "url": "https://github.com/o/r.git", "format": "zip"}]}
    )
    assert not result.is_valid
    assert result.errors[0].startswith("Field 'sources.0.format'")


def test_source_requires_url() -> None:
    result = validate_config_data({"sources": [{"name": "o/r"}]})
    assert result.errors == ("Missing required field: sources.0.url",)


def test_duplicate_source_names_rejected() -> None:
    source = {"name": "o/r", "url": "https://github.com/o/r.git"}
    result = validate_config_data({"sources": [source, dict(source)]})
    assert not result.is_valid
    assert "duplicate source name: o/r" in result.errors[0]


def test_empty_artifact_reference_rejected() -> None:
    result = validate_config_data({"artifacts": ["o/r/pdf", "  "]})
    assert not result.is_valid


def test_lock_version_must_be_one() -> None:
    result = validate_lock_data({"version": 2, "artifacts": {}})
    assert not result.is_valid


def test_lock_converted_to_models() -> None:
    result = validate_lock_data(
        {
            "version": 1,
            "artifacts": {
                "o/r/pdf": {
                    "sha": "a" * 40,
                    "integrity": "sha256-abc=",
                    "path": "skills/pdf",
                    "metadata": {"name": "pdf"},
                }
            },
        }
    )
    assert result.lock is not None
    entry = result.lock.artifacts["o/r/pdf"]
    assert entry.ref is None
    assert entry.name == "pdf"


def test_source_subdir_outside_repository_rejected() -> None:
    result = validate_config_data(
        {"sources": [{"name": "o/r", "url": "https://github.com/o/r.git", "subdir": "../.."}]}
    )
    assert not result.is_valid
    assert result.errors[0].startswith("Field 'sources.0.subdir'")


def test_lock_path_outside_repository_rejected() -> None:
    result = validate_lock_data(
        {
            "version": 1,
            "artifacts": {
                "o/r/pdf": {
                    "sha": "a" * 40,
                    "integrity": "sha256-abc=",
                    "path": "../../../home/user/.ssh",
                }
            },
        }
    )
    assert not result.is_valid
