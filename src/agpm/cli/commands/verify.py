"""Verify command - check cached artifacts against agpm.lock fingerprints."""

import click

from agpm.cli.commands.common import load_project_lock
from agpm.cli.output import user_output
from agpm.context import AgpmContext
from agpm.lock.verify import verify_lock


@click.command("verify")
@click.option("--strict", is_flag=True, help="Exit with status 1 on any mismatch")
@click.pass_obj
def verify_cmd(ctx: AgpmContext, strict: bool) -> None:
    """Recompute fingerprints of locked artifacts in the cache.

    Artifacts whose commit isn't cached are reported and skipped.
    """
    lock = load_project_lock(ctx)
    if not lock.artifacts:
        user_output("No locked artifacts.")
        return

    checks = verify_lock(ctx.cache, lock)
    for check in checks:
        if check.status == "ok":
            user_output(click.style("✓ ", fg="green") + check.lock_key)
        elif check.status == "uncached":
            user_output(click.style("- ", dim=True) + f"{check.lock_key} (not cached)")
        else:
            assert check.error is not None
            user_output(click.style("✗ ", fg="red") + f"{check.lock_key}: integrity mismatch")
            user_output(f"    expected {check.error.expected}")
            user_output(f"    actual   {check.error.actual}")

    mismatches = [check for check in checks if check.status == "mismatch"]
    if mismatches:
        user_output(f"\n{len(mismatches)} artifact(s) failed verification")
        if strict:
            raise SystemExit(1)
