"""User-facing output helpers.

Messages for the user go to stderr via click so stdout stays free for
machine-readable output. Diagnostics go through logging instead.
"""

from typing import NoReturn

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Write a message for the user to stderr."""
    click.echo(message, err=True, nl=nl)


def error_and_exit(message: str) -> NoReturn:
    """Report an error and exit with status 1."""
    user_output(click.style("Error: ", fg="red") + message)
    raise SystemExit(1)


def short_sha(sha: str) -> str:
    return sha[:7]
