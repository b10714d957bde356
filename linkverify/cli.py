#!/usr/bin/env python3
"""
linkverify - Link verification for document trees

Checks file-system paths and web addresses referenced from markdown
documents, in parallel.

Usage:
    linkverify check docs/
    linkverify -v check README.md --offline
    linkverify check --json

For more information: linkverify --help
"""

import click

from . import __version__
from .commands.check import check
from .core.logging import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="linkverify")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v, -vv, -vvv)")
@click.option("-q", "--quiet", is_flag=True, help="Suppress log output except errors")
@click.option("--json-errors", is_flag=True, help="Output errors as JSON for CI integration")
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: bool, json_errors: bool) -> None:
    """linkverify - Link verification for document trees

    \b
    Verbosity (log output on stderr):
      -v       INFO level (run totals)
      -vv      DEBUG level (every link)
      -vvv     TRACE level (every verifier and request)
      -q       Quiet mode (errors only)

    \b
    Examples:
      linkverify check docs/
      linkverify -vv check README.md --offline
      linkverify --json-errors check --config ci.yaml
    """
    ctx.ensure_object(dict)
    ctx.obj["verbosity"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["json_errors"] = json_errors
    setup_logging(verbose, quiet)


cli.add_command(check)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
