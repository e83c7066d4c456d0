"""Remove command - drop a declared artifact."""

import click

from agpm.cli.commands.common import load_project_config, load_project_lock
from agpm.cli.output import error_and_exit, user_output
from agpm.config.io import save_config, save_lock
from agpm.context import AgpmContext
from agpm.errors import AgpmError
from agpm.install.installer import uninstall_artifact
from agpm.lock.batch import matches_filter
from agpm.sources.references import ArtifactRef, parse_artifact_ref


def _matching_declarations(
    artifacts: list[str], name: str
) -> list[tuple[str, ArtifactRef | None]]:
    """Declared references selected by name; unparseable ones only match exactly."""
    matches: list[tuple[str, ArtifactRef | None]] = []
    for declared in artifacts:
        try:
            ref = parse_artifact_ref(declared)
        except AgpmError:
            if declared == name:
                matches.append((declared, None))
            continue
        if matches_filter(ref, name):
            matches.append((declared, ref))
    return matches


@click.command("remove")
@click.argument("name")
@click.option("--keep-files", is_flag=True, help="Leave installed copies in target directories")
@click.pass_obj
def remove_cmd(ctx: AgpmContext, name: str, keep_files: bool) -> None:
    """Remove a declared artifact, its lock entry and its installed copies.

    NAME may be the artifact name, "<source>/<artifact>" or the full
    declared reference.
    """
    config = load_project_config(ctx)
    matches = _matching_declarations(config.artifacts, name)
    if not matches:
        error_and_exit(f"Artifact not declared: {name}")
    if len(matches) > 1:
        candidates = ", ".join(declared for declared, _ in matches)
        error_and_exit(f"'{name}' is ambiguous: {candidates}")

    declared, ref = matches[0]
    save_config(ctx.cwd, config.without_artifact(declared))
    user_output(f"Removed {declared}")

    if ref is None:
        return

    lock = load_project_lock(ctx)
    if lock.get(ref.lock_key) is not None:
        save_lock(ctx.cwd, lock.without_artifact(ref.lock_key))

    if keep_files:
        return
    for path in uninstall_artifact(ref.artifact_name, ctx.cwd, config.targets):
        user_output(f"  Deleted: {path}")
