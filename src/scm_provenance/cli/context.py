"""Context CLI command -- show the detected CI execution context."""

import json
from dataclasses import asdict

import typer
from rich.table import Table

from ..context import resolve
from . import app
from ._common import console, resolve_config


@app.command()
def context(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show which CI provider was detected and whether this is a change request.

    Providers are probed in order: local (BRANCH), Github, Jenkins, Gitlab.
    The first match wins.

    [bold cyan]Examples:[/bold cyan]

      BRANCH=feature TARGET_BRANCH=main scm-provenance context

      scm-provenance context --json
    """
    obj = ctx.obj or {}
    resolve_config(
        config=obj.get("config"),
        verbose=obj.get("verbose", False),
        quiet=obj.get("quiet", False),
    )

    execution = resolve()

    if json_output:
        if execution is None:
            print(json.dumps(None))
            return
        data = asdict(execution)
        data["provider"] = execution.provider.value
        data["target_branch"] = execution.get_target_branch()
        print(json.dumps(data, indent=2))
        return

    if execution is None:
        console.print("[yellow]No execution context detected.[/yellow]")
        return

    table = Table(title="Execution context", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("provider", execution.provider.value or "(local)")
    table.add_row("branch", execution.branch)
    table.add_row("change request", "yes" if execution.change_request else "no")
    table.add_row("commit", execution.commit or "-")
    table.add_row("target branch", execution.get_target_branch())
    console.print(table)
