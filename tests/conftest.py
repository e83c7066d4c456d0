"""Shared fixtures for agpm tests."""

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def agpm_home(tmp_path: Path) -> Path:
    """Root of the repos/ and cache/ stores for one test."""
    return tmp_path / "agpm-home"


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty project directory commands operate on."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner for testing commands."""
    return CliRunner()
