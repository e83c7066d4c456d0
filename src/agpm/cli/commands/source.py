"""Source commands - manage the repositories artifacts come from."""

from dataclasses import replace

import click

from agpm.cli.commands.common import load_project_config
from agpm.cli.output import error_and_exit, user_output
from agpm.config.io import save_config
from agpm.context import AgpmContext
from agpm.discovery.discover import discover_source
from agpm.errors import AgpmError
from agpm.repos.stager import DEFAULT_REF
from agpm.sources.parsing import SOURCE_FORMATS, parse_source_string


@click.group("source")
def source_group() -> None:
    """Manage artifact sources."""


@source_group.command("add")
@click.argument("reference")
@click.option("--name", "name", default=None, help="Override the derived source name")
@click.option(
    "--format",
    "source_format",
    type=click.Choice(SOURCE_FORMATS),
    default=None,
    help="Skip format detection",
)
@click.pass_obj
def add_source(
    ctx: AgpmContext, reference: str, name: str | None, source_format: str | None
) -> None:
    """Add a source repository.

    REFERENCE may be owner/repo, a git URL, a GitHub tree URL or a local
    path, optionally followed by #subdir. The repository is fetched to make
    sure it's reachable.
    """
    config = load_project_config(ctx)

    try:
        source = parse_source_string(reference)
    except AgpmError as e:
        error_and_exit(str(e))
    if name is not None:
        source = replace(source, name=name)
    if source_format is not None:
        source = replace(source, format=source_format)

    if config.find_source(source.name) is not None:
        error_and_exit(f"Source already configured: {source.name}")

    user_output(f"Fetching {source.url}...")
    try:
        info = ctx.stager.ensure(source)
        checkout = ctx.stager.checkout_and_cache(info.path, DEFAULT_REF)
        result = discover_source(checkout.cache_path, source)
    except AgpmError as e:
        error_and_exit(str(e))

    save_config(ctx.cwd, config.with_source(source))
    user_output(click.style("✓ ", fg="green") + f"Added source {source.name}")
    user_output(
        f"  {len(result.artifacts)} artifact(s), {len(result.collections)} collection(s)"
        f" ({result.format})"
    )


@source_group.command("list")
@click.pass_obj
def list_sources(ctx: AgpmContext) -> None:
    """List configured sources."""
    config = load_project_config(ctx)
    if not config.sources:
        user_output("No sources configured.")
        return

    for source in config.sources:
        details = [source.url]
        if source.subdir is not None:
            details.append(f"subdir={source.subdir}")
        if source.format is not None:
            details.append(f"format={source.format}")
        user_output(f"{click.style(source.name, bold=True)}  {'  '.join(details)}")


@source_group.command("remove")
@click.argument("name")
@click.pass_obj
def remove_source(ctx: AgpmContext, name: str) -> None:
    """Remove a configured source.

    Declared artifacts from the source are left in place; they resolve the
    name as a repository reference from then on.
    """
    config = load_project_config(ctx)
    if config.find_source(name) is None:
        error_and_exit(f"Source not configured: {name}")

    save_config(ctx.cwd, config.without_source(name))
    user_output(f"Removed source {name}")

    still_used = [a for a in config.artifacts if a.startswith(f"{name}/")]
    if still_used:
        user_output(f"  {len(still_used)} declared artifact(s) still reference it")
