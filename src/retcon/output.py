"""Output helpers separating user-facing messages from machine-readable data."""

import click


def user_output(message: str = "") -> None:
    """Write a human-facing status line to stderr."""
    click.echo(message, err=True)


def machine_output(message: str = "") -> None:
    """Write data meant for pipes and scripts to stdout."""
    click.echo(message)
