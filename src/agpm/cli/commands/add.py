"""Add command - declare an artifact or collection from a source."""

import click

from agpm.cli.commands.common import load_project_config
from agpm.cli.output import error_and_exit, user_output
from agpm.config.io import save_config
from agpm.config.models import AgpmConfig
from agpm.context import AgpmContext
from agpm.discovery.models import DiscoveredArtifact, DiscoveryResult
from agpm.errors import AgpmError
from agpm.sources.parsing import Source, parse_source_string
from agpm.sources.references import format_artifact_ref, parse_artifact_ref

DESCRIPTION_WIDTH = 60


def _truncate(text: str) -> str:
    if len(text) <= DESCRIPTION_WIDTH:
        return text
    return text[: DESCRIPTION_WIDTH - 3] + "..."


def _find_artifact(result: DiscoveryResult, name: str) -> DiscoveredArtifact | None:
    """Match by artifact name first, then by path or trailing path segment."""
    found = result.find_artifact(name)
    if found is not None:
        return found
    for artifact in result.artifacts:
        if artifact.path == name or artifact.path.endswith(f"/{name}"):
            return artifact
    return None


def _show_available(result: DiscoveryResult) -> None:
    for artifact in result.artifacts:
        user_output(f"  {artifact.name}")
        if artifact.description:
            user_output(click.style(f"    {_truncate(artifact.description)}", dim=True))


def _resolve_source(config: AgpmConfig, reference: str) -> tuple[AgpmConfig, Source]:
    """Configured source named reference, else reference parsed and added to config."""
    configured = config.find_source(reference)
    if configured is not None:
        return config, configured

    try:
        source = parse_source_string(reference)
    except AgpmError as e:
        error_and_exit(str(e))
    existing = config.find_source(source.name)
    if existing is not None:
        return config, existing
    return config.with_source(source), source


def _replace_declared(config: AgpmConfig, reference: str) -> tuple[AgpmConfig, str | None]:
    """Declare reference, dropping any declaration with the same lock key.

    Returns the updated config and the replaced declaration, if any.
    """
    lock_key = parse_artifact_ref(reference).lock_key
    replaced: str | None = None
    for declared in config.artifacts:
        try:
            declared_key = parse_artifact_ref(declared).lock_key
        except AgpmError:
            continue
        if declared_key == lock_key:
            replaced = declared
            config = config.without_artifact(declared)
    return config.with_artifact(reference), replaced


@click.command("add")
@click.argument("source_ref", metavar="SOURCE")
@click.argument("name", required=False)
@click.option("--ref", "ref", default=None, help="Pin to a branch, tag or commit")
@click.option("--collection", is_flag=True, help="Declare a collection instead of an artifact")
@click.pass_obj
def add_cmd(
    ctx: AgpmContext, source_ref: str, name: str | None, ref: str | None, collection: bool
) -> None:
    """Declare an artifact (or collection) from SOURCE.

    NAME may be omitted when the source publishes exactly one artifact.
    """
    config = load_project_config(ctx)
    config, source = _resolve_source(config, source_ref)

    resolver = ctx.create_resolver(config.sources)
    user_output(f"Resolving {source.name}...")
    try:
        result = resolver.discover(source.name, None if collection else ref)
    except AgpmError as e:
        error_and_exit(str(e))

    if collection:
        if name is None:
            error_and_exit("--collection requires a collection NAME")
        found_collection = result.find_collection(name)
        if found_collection is None:
            available = ", ".join(c.name for c in result.collections) or "none"
            error_and_exit(f"Collection not found: {name} (available: {available})")
        if ref is not None:
            user_output(click.style("Warning: ", fg="yellow") + "collections can't be pinned")
        reference = f"{source.name}/{found_collection.name}"
        if reference in config.collections:
            user_output(f"Collection already configured: {reference}")
            return
        save_config(ctx.cwd, config.with_collection(reference))
        user_output(click.style("✓ ", fg="green") + f"Added collection: {reference}")
        user_output(f"  {len(found_collection.artifacts)} artifact(s)")
        user_output("\nRun `agpm install` to install it.")
        return

    if not result.artifacts:
        error_and_exit(f"No artifacts found in {source.name}")

    if name is not None:
        artifact = _find_artifact(result, name)
        if artifact is None:
            user_output(f'Artifact "{name}" not found in source.')
            user_output("\nAvailable artifacts:")
            _show_available(result)
            raise SystemExit(1)
    elif len(result.artifacts) == 1:
        artifact = result.artifacts[0]
    else:
        user_output("Multiple artifacts found. Please specify which one to add:\n")
        _show_available(result)
        user_output(f"\nUsage: agpm add {source_ref} <artifact-name>")
        raise SystemExit(1)

    reference = format_artifact_ref(source.name, artifact.name, ref)
    if reference in config.artifacts:
        user_output(f"Artifact already configured: {reference}")
        return

    config, replaced = _replace_declared(config, reference)
    save_config(ctx.cwd, config)
    if replaced is not None:
        user_output(click.style("✓ ", fg="green") + f"Replaced {replaced} with {reference}")
    else:
        user_output(click.style("✓ ", fg="green") + f"Added: {reference}")
    if artifact.description:
        user_output(f"  {artifact.description}")
    user_output("\nRun `agpm install` to install the artifact.")
