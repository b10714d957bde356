"""
linkverify check - Verify links in a document tree.

Usage:
    linkverify check [ROOT] [--json] [--offline] [--workers N]
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from ..core.cache import MemoryCache
from ..core.config import load_config
from ..core.engine import verify
from ..core.exceptions import ConfigError, ExitCode, format_json_error
from ..core.logging import RunContext, get_logger, set_run_context
from ..core.scanner import scan_links
from ..verifiers import FileVerifier, WebVerifier
from .output import output_outcome

logger = get_logger(__name__)
err_console = Console(stderr=True)


@click.command("check")
@click.argument("root", type=click.Path(exists=True, path_type=Path), default=".")
@click.option("--json", "json_output", is_flag=True, help="JSON output")
@click.option("--verbose", "-v", is_flag=True, help="Show ignored and unsupported links")
@click.option("--offline", is_flag=True, help="Skip web links (reported as unsupported)")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None,
              help="Worker threads (default: from config, else 8)")
@click.option("--timeout", type=float, default=None, help="Seconds per web request")
@click.option("--ignore-domain", "ignored_domains", multiple=True,
              help="Domain to skip (repeatable)")
@click.option("--extensions", "-e", multiple=True, help="File extension to scan (repeatable)")
@click.option("--strict", is_flag=True,
              help="Fail on links no verifier understands")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Path to .linkverify.yaml")
@click.pass_context
def check(
    ctx: click.Context,
    root: Path,
    json_output: bool,
    verbose: bool,
    offline: bool,
    workers: Optional[int],
    timeout: Optional[float],
    ignored_domains: tuple[str, ...],
    extensions: tuple[str, ...],
    strict: bool,
    config_path: Optional[Path],
) -> None:
    """Check that links in markdown documents resolve.

    Scans ROOT (a directory or a single file) for markdown links and
    checks file links against the file system and web links over HTTP.

    \b
    Examples:
      linkverify check                       # Check current directory
      linkverify check docs/ --offline       # File links only
      linkverify check README.md --json      # JSON output for CI
      linkverify check -w 32 --ignore-domain example.com
    """
    obj = ctx.obj or {}
    try:
        config = load_config(config_path)
    except ConfigError as e:
        if obj.get("json_errors"):
            click.echo(format_json_error(e, {"command": "check"}), err=True)
        else:
            err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(ExitCode.CONFIG_ERROR)

    workers = workers or config.check.workers
    strict = strict or config.check.strict
    scan_ext = [e if e.startswith(".") else f".{e}" for e in extensions] or config.check.extensions

    root_dir = root if root.is_dir() else root.parent
    verifiers = [
        FileVerifier(
            root_dir,
            allow_outside_root=config.files.allow_outside_root,
            ignore=config.files.ignore,
        )
    ]

    web = None
    if config.web.enabled and not offline:
        web = WebVerifier(
            timeout=timeout or config.web.timeout,
            ignored_domains=[*config.web.ignored_domains, *ignored_domains],
            user_agent=config.web.user_agent,
        )
        verifiers.append(web)

    cache = MemoryCache(
        valid_ttl=config.cache.valid_ttl,
        invalid_ttl=config.cache.invalid_ttl,
    )

    set_run_context(RunContext(root=str(root), workers=workers))
    try:
        links = scan_links(root, scan_ext, exclude_patterns=config.check.exclude)
        outcome = verify(links, verifiers, cache, workers=workers)
    finally:
        set_run_context(None)
        if web is not None:
            web.close()

    output_outcome(outcome, json_output, verbose, strict)
