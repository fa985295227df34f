"""CLI entrypoint for zenvalidator."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__


@click.group()
@click.version_option(__version__, prog_name="zenvalidator")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    help="Logging level for engine diagnostics (written to stderr)",
)
def cli(log_level: str) -> None:
    """zenvalidator - server-side form field constraints.

    Validate submitted values against constraint files and inspect the
    hints handed to client-side validation.
    """
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@cli.command()
@click.argument("rules", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("values", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
@click.option(
    "--ignore-unavailable",
    is_flag=True,
    help="Do not fail when a remote validation endpoint is unreachable",
)
def check(rules: Path, values: Path, output_json: bool, ignore_unavailable: bool) -> None:
    """Validate a JSON object of field values against RULES.

    Exits with status 1 when any field fails a constraint.
    """
    from .commands.check import run_check

    try:
        exit_code = run_check(rules, values, output_json, fail_on_unavailable=not ignore_unavailable)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@click.argument("rules", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output hints as JSON",
)
def describe(rules: Path, output_json: bool) -> None:
    """List the client-side hints for every constraint in RULES."""
    from .commands.check import run_describe

    try:
        exit_code = run_describe(rules, output_json)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
