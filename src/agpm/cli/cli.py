import logging

import click

from agpm.cli.commands.add import add_cmd
from agpm.cli.commands.init import init_cmd
from agpm.cli.commands.install import install_cmd
from agpm.cli.commands.list_cmd import list_cmd
from agpm.cli.commands.remove import remove_cmd
from agpm.cli.commands.source import source_group
from agpm.cli.commands.update import update_cmd
from agpm.cli.commands.verify import verify_cmd
from agpm.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="agpm")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Install agent skills from git repositories, pinned in agpm.lock."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


cli.add_command(init_cmd)
cli.add_command(source_group)
cli.add_command(add_cmd)
cli.add_command(remove_cmd)
cli.add_command(install_cmd)
cli.add_command(update_cmd)
cli.add_command(list_cmd)
cli.add_command(verify_cmd)


def main() -> None:
    """CLI entry point used by the `agpm` console script."""
    cli()
