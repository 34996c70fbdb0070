"""Output helpers for diagnostics that must not mix with report blocks.

Report blocks go to stdout through the report sink; everything addressed to the
operator (errors, warnings, the closing summary) goes to stderr.
"""

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Write a diagnostic message to stderr."""
    click.echo(message, err=True, nl=nl)


def error_output(message: str) -> None:
    """Write an error message to stderr in red."""
    user_output(click.style(message, fg="red"))
