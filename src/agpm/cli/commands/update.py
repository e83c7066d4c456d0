"""Update command - move declared artifacts to the latest commit of their ref."""

import click

from agpm.cli.commands.common import load_project_config, load_project_lock
from agpm.cli.output import error_and_exit, short_sha, user_output
from agpm.config.io import save_lock
from agpm.context import AgpmContext
from agpm.errors import AgpmError
from agpm.lock.batch import update_all


@click.command("update")
@click.argument("name", required=False)
@click.pass_obj
def update_cmd(ctx: AgpmContext, name: str | None) -> None:
    """Re-resolve declared artifacts and save agpm.lock.

    With NAME (artifact name, "<source>/<artifact>" or full reference) only
    that artifact is updated. Run `agpm install` afterwards to copy the new
    versions into targets.
    """
    config = load_project_config(ctx)
    lock = load_project_lock(ctx)

    resolver = ctx.create_resolver(config.sources)
    try:
        result = update_all(
            resolver,
            lock,
            artifacts=config.artifacts,
            collections=config.collections,
            only=name,
        )
    except AgpmError as e:
        error_and_exit(str(e))

    for warning in result.warnings:
        user_output(click.style("Warning: ", fg="yellow") + warning)

    if name is not None and not result.outcomes and not result.failures:
        error_and_exit(f"Artifact not declared: {name}")

    for outcome in result.outcomes:
        if not outcome.changed:
            user_output(f"{outcome.lock_key} is up to date ({short_sha(outcome.entry.sha)})")
        elif outcome.previous is None:
            user_output(f"{outcome.lock_key}: locked at {short_sha(outcome.entry.sha)}")
        else:
            old, new = short_sha(outcome.previous.sha), short_sha(outcome.entry.sha)
            user_output(click.style("↑ ", fg="green") + f"{outcome.lock_key}: {old} -> {new}")

    if result.lock_changed:
        save_lock(ctx.cwd, result.lock)

    if result.failures:
        for failure in result.failures:
            user_output(click.style("✗ ", fg="red") + f"{failure.reference}: {failure.error}")
        raise SystemExit(1)

    if result.changed:
        user_output("\nRun `agpm install` to install the updated artifacts.")
