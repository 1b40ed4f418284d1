"""Warmap CLI - Main Entry Point.

The `warmap` command prints the URL map of a packaged Java web application.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from . import __version__, __cli_name__
from .render import render
from .utils.colors import bold, error, kv, warning
from ..config import DEFAULTS, ConfigLoader
from ..engine import map_routes
from ..faults import Fault


DISPLAY_OPTIONS = [
    ("show_jsp", "--show-jsp / --hide-jsp",
     "Display client-accessible JSP files as destination URLs."),
    ("show_html", "--show-html / --hide-html",
     "Display client-accessible static HTML content as destination URLs."),
    ("show_static", "--show-static / --hide-static",
     "Display client-accessible static content other than HTML (eg, JS and CSS) as destination URLs."),
    ("show_request_params", "--show-request-params / --hide-request-params",
     "For mappings that identify individual request parameters (eg, Spring3) "
     "show those parameters in the mapping output."),
]

OTHER_OPTIONS = [
    ("--config PATH", "Read settings from a YAML file."),
    ("--debug", "Enable debug-level logging to stderr."),
    ("--verbose", "Enable verbose debugging (implies --debug)."),
    ("--version", "Show the version and exit."),
    ("--help", "Show this message and exit."),
]


USAGE = f"Usage: {__cli_name__} [OPTIONS] WARFILE"


def option_rows() -> List[Tuple[str, str]]:
    """Every option with its description and, for display toggles, its default."""
    rows = []
    for key, flags, description in DISPLAY_OPTIONS:
        default = "show" if DEFAULTS["display"][key] else "hide"
        rows.append((flags, f"{description} [default: {default}]"))
    rows.extend(OTHER_OPTIONS)
    return rows


def usage(reason: Optional[str] = None) -> None:
    """Print usage to stderr."""
    if reason:
        error(f"Error: {reason}")
    click.echo(bold(USAGE), err=True)
    click.echo(err=True)
    click.echo("Options:", err=True)
    for flags, description in option_rows():
        kv(flags, description)


# ═══════════════════════════════════════════════════════════════════════════
# Custom Click command
# ═══════════════════════════════════════════════════════════════════════════


class WarmapCommand(click.Command):
    """Click command whose help and usage errors list every flag with its default."""

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write_usage(ctx.command_path, "[OPTIONS] WARFILE")
        formatter.write_paragraph()
        formatter.write_text(self.help or "")
        with formatter.section("Options"):
            formatter.write_dl(option_rows())

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            usage(e.format_message())
            ctx.exit(1)


def configure_logging(debug: bool, verbose: bool) -> None:
    level = logging.DEBUG if debug or verbose else logging.WARNING
    if verbose:
        fmt = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    else:
        fmt = '%(levelname)s - %(name)s - %(message)s'
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)
    logging.getLogger("warmap").setLevel(level)


@click.command(cls=WarmapCommand)
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.argument('warfile', required=False)
@click.option('--show-jsp/--hide-jsp', default=None, help=DISPLAY_OPTIONS[0][2])
@click.option('--show-html/--hide-html', default=None, help=DISPLAY_OPTIONS[1][2])
@click.option('--show-static/--hide-static', default=None, help=DISPLAY_OPTIONS[2][2])
@click.option('--show-request-params/--hide-request-params', default=None, help=DISPLAY_OPTIONS[3][2])
@click.option('--config', 'config_path', type=click.Path(), help=OTHER_OPTIONS[0][1])
@click.option('--debug', is_flag=True, help=OTHER_OPTIONS[1][1])
@click.option('--verbose', is_flag=True, help=OTHER_OPTIONS[2][1])
def cli(
    warfile: Optional[str],
    show_jsp: Optional[bool],
    show_html: Optional[bool],
    show_static: Optional[bool],
    show_request_params: Optional[bool],
    config_path: Optional[str],
    debug: bool,
    verbose: bool,
):
    """Print the URL map of a packaged Java web application (WAR)."""
    configure_logging(debug, verbose)

    if not warfile:
        usage("Missing argument 'WARFILE'.")
        sys.exit(1)
    if not Path(warfile).is_file():
        usage(f"No such file: {warfile}")
        sys.exit(1)

    flags = {
        "show_jsp": show_jsp,
        "show_html": show_html,
        "show_static": show_static,
        "show_request_params": show_request_params,
    }
    overrides = {"display": {k: v for k, v in flags.items() if v is not None}}

    try:
        config = ConfigLoader.load(path=config_path, overrides=overrides).to_config()
        table = map_routes(warfile, config)
    except Fault as e:
        error(f"{e.__class__.__name__}: {e}")
        sys.exit(1)

    lines = render(table, config.display)
    if not lines:
        warning(f"No visible routes in {warfile}")
    for line in lines:
        click.echo(line)


def main():
    """Entry point for `warmap` command."""
    cli()


if __name__ == '__main__':
    main()
