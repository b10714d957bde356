"""
Check output helpers.

Kept apart from commands/check.py so the same rendering serves both
the human-readable and the JSON code paths.
"""

import json

from rich.console import Console
from rich.markup import escape

from ..core.exceptions import ExitCode
from ..core.models import Outcome

console = Console()


def output_outcome(
    outcome: Outcome,
    json_output: bool,
    verbose: bool,
    strict: bool = False,
) -> None:
    """Print the outcome in the requested format.

    Note: Raises SystemExit with appropriate code.
    """
    passed = outcome.passed(strict)

    if json_output:
        console.print_json(json.dumps(outcome.to_json(strict)))
    else:
        status = "[green]✓ PASSED[/green]" if passed else "[red]✗ FAILED[/red]"
        console.print(f"{status}: {outcome.summary}")

        for item in outcome.broken:
            console.print(
                f"  [red]BROKEN[/red] {item.location}: {escape(item.link.href)}",
                highlight=False,
            )
            if verbose:
                console.print(f"         [dim]{escape(item.reason)}[/dim]", highlight=False)

        if verbose or strict:
            label = "[red]UNSUPPORTED[/red]" if strict else "[yellow]UNSUPPORTED[/yellow]"
            for item in outcome.unsupported:
                console.print(f"  {label} {item.location}: {escape(item.link.href)}", highlight=False)

        if verbose:
            for item in outcome.ignored:
                console.print(
                    f"  [dim]IGNORED[/dim] {item.location}: {escape(item.link.href)}",
                    highlight=False,
                )

    raise SystemExit(ExitCode.SUCCESS if passed else ExitCode.VERIFY_FAILED)
