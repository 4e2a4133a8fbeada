"""Attributes CLI command -- assemble SCM attributes for the current run."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..assembler import attributes_to_dict, collect_attributes
from . import app
from ._common import console, resolve_config


@app.command()
def attributes(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "--path",
        "-p",
        help="Repository to read (defaults to the working directory)",
        file_okay=False,
        dir_okay=True,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Print the SCM attributes that would be attached to test telemetry.

    Never fails on repository problems: attributes that cannot be computed
    are left out.

    [bold cyan]Examples:[/bold cyan]

      scm-provenance attributes

      scm-provenance attributes --path ../checkout --json
    """
    obj = ctx.obj or {}
    config = resolve_config(
        config=obj.get("config"),
        path=path,
        verbose=obj.get("verbose", False),
        quiet=obj.get("quiet", False),
    )

    result = attributes_to_dict(collect_attributes(config))

    if json_output:
        print(json.dumps(result, indent=2))
        return

    if not result:
        console.print("[yellow]No SCM attributes: no execution context or git repository.[/yellow]")
        return

    table = Table(title=f"SCM attributes for {config.repository}")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in result.items():
        if isinstance(value, list):
            value = ", ".join(value)
        table.add_row(key, str(value))
    console.print(table)
