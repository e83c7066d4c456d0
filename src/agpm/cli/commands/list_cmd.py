"""List command - show declared artifacts and their lock state."""

import click
from rich.console import Console
from rich.table import Table

from agpm.cli.commands.common import load_project_config, load_project_lock
from agpm.cli.output import short_sha, user_output
from agpm.context import AgpmContext
from agpm.errors import AgpmError
from agpm.sources.references import parse_artifact_ref


@click.command("list")
@click.pass_obj
def list_cmd(ctx: AgpmContext) -> None:
    """List declared artifacts and collections.

    Shows a table with:
    - Artifact: The lock key (<source>/<artifact>)
    - Ref: Pinned ref, or "-" for the default branch
    - Commit: Locked commit
    - Status: locked/unlocked/invalid
    """
    config = load_project_config(ctx)
    lock = load_project_lock(ctx)

    if not config.artifacts and not config.collections:
        user_output("No artifacts or collections configured.")
        return

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Artifact", style="cyan", no_wrap=True)
    table.add_column("Ref", style="yellow", no_wrap=True)
    table.add_column("Commit", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Description")

    for declared in config.artifacts:
        try:
            ref = parse_artifact_ref(declared)
        except AgpmError:
            table.add_row(declared, "-", "-", "[red]invalid[/red]", "")
            continue
        entry = lock.get(ref.lock_key)
        if entry is None:
            table.add_row(ref.lock_key, ref.ref or "-", "-", "[yellow]unlocked[/yellow]", "")
            continue
        table.add_row(
            ref.lock_key,
            ref.ref or "-",
            short_sha(entry.sha),
            "[green]locked[/green]",
            entry.description or "",
        )

    # Output table to stderr (consistent with user_output convention)
    console = Console(stderr=True, force_terminal=True, width=200)
    if config.artifacts:
        console.print(table)

    if config.collections:
        user_output("\nCollections:")
        for collection in config.collections:
            user_output(f"  {collection}")
