"""Init command - create agpm.toml in the current project."""

import click

from agpm.cli.output import error_and_exit, user_output
from agpm.config.io import config_path, create_default_config, save_config
from agpm.context import AgpmContext


@click.command("init")
@click.pass_obj
def init_cmd(ctx: AgpmContext) -> None:
    """Create a default agpm.toml in the current directory."""
    path = config_path(ctx.cwd)
    if path.exists():
        error_and_exit(f"{path.name} already exists")

    save_config(ctx.cwd, create_default_config())
    user_output(f"Created {path.name}")
    user_output("\nAdd a source with: agpm source add <owner/repo>")
