"""Install command - resolve declared artifacts and copy them into targets."""

import click

from agpm.cli.commands.common import load_project_config, load_project_lock
from agpm.cli.output import error_and_exit, short_sha, user_output
from agpm.config.io import save_lock
from agpm.context import AgpmContext
from agpm.errors import AgpmError, ResolutionError
from agpm.install.installer import install_artifact
from agpm.lock.batch import ResolutionFailure, install_all


@click.command("install")
@click.option("--force", "-f", is_flag=True, help="Re-resolve artifacts that are already locked")
@click.pass_obj
def install_cmd(ctx: AgpmContext, force: bool) -> None:
    """Install declared artifacts into every enabled target.

    Locked artifacts are installed at their locked commit; others are
    resolved and added to agpm.lock. Failures for individual artifacts are
    reported and the rest still install.
    """
    config = load_project_config(ctx)
    lock = load_project_lock(ctx)

    if not config.artifacts and not config.collections:
        user_output("No artifacts or collections configured.")
        user_output("\nAdd artifacts with: agpm add <source> <name>")
        return

    resolver = ctx.create_resolver(config.sources)
    try:
        result = install_all(
            resolver,
            lock,
            artifacts=config.artifacts,
            collections=config.collections,
            force=force,
        )
    except AgpmError as e:
        error_and_exit(str(e))

    for warning in result.warnings:
        user_output(click.style("Warning: ", fg="yellow") + warning)

    if result.lock_changed:
        save_lock(ctx.cwd, result.lock)

    failures = list(result.failures)
    user_output(f"Installing {len(result.resolved)} artifact(s)...\n")
    for item in result.resolved:
        status = "resolved" if item.was_resolved else "locked"
        user_output(f"{item.ref} ({status} {short_sha(item.entry.sha)})")
        try:
            source_path = resolver.materialize(item.ref.source_name, item.entry)
        except ResolutionError as e:
            failures.append(ResolutionFailure(reference=str(item.ref), error=e))
            continue
        except AgpmError as e:
            error_and_exit(str(e))
        for path in install_artifact(source_path, item.ref.artifact_name, ctx.cwd, config.targets):
            user_output(f"  Installed: {path}")

    if failures:
        user_output()
        for failure in failures:
            user_output(click.style("✗ ", fg="red") + f"{failure.reference}: {failure.error}")
        raise SystemExit(1)

    user_output(click.style("\n✓ ", fg="green") + "Done")
