"""Helpers shared by project commands."""

from agpm.cli.output import error_and_exit
from agpm.config.io import load_config, load_lock
from agpm.config.models import AgpmConfig
from agpm.context import AgpmContext
from agpm.errors import ConfigValidationError
from agpm.lock.models import AgpmLock


def load_project_config(ctx: AgpmContext) -> AgpmConfig:
    """Load agpm.toml, exiting with the validation errors if it's invalid."""
    try:
        return load_config(ctx.cwd)
    except ConfigValidationError as e:
        error_and_exit(str(e))


def load_project_lock(ctx: AgpmContext) -> AgpmLock:
    """Load agpm.lock, exiting with the validation errors if it's invalid."""
    try:
        return load_lock(ctx.cwd)
    except ConfigValidationError as e:
        error_and_exit(str(e))
