"""
Warmap CLI - styled output helpers built on Click.

Diagnostics (errors, warnings, usage) go to stderr so that the report on
stdout stays plain and pipeable. click.echo strips styling on non-tty
streams.
"""

from __future__ import annotations

import click


def error(message: str) -> None:
    """Print error message in red to stderr."""
    click.echo(click.style(message, fg="red"), err=True)


def warning(message: str) -> None:
    """Print warning message in yellow to stderr."""
    click.echo(click.style(message, fg="yellow"), err=True)


def bold(message: str) -> str:
    """Return bold-styled text (does not echo)."""
    return click.style(message, bold=True)


def kv(key: str, value: str, *, key_width: int = 44, indent: int = 2) -> None:
    """
    Print an aligned key-value pair to stderr.

        --show-jsp / --hide-jsp       Display client-accessible JSP files ...
    """
    prefix = " " * indent
    k = click.style(key, fg="green")
    padding = " " * max(1, key_width - len(key))
    click.echo(f"{prefix}{k}{padding}{value}", err=True)
