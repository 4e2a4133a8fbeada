"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ..config import ProvenanceConfig, load_config
from ..exceptions import ConfigurationError
from ..logging_config import setup_logging

console = Console()
err_console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    path: Optional[Path] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> ProvenanceConfig:
    """Build config from CLI options and configure logging from its verbosity.

    Exits with code 2 on configuration errors.
    """
    overrides = {"verbose": verbose, "quiet": quiet}
    if path is not None:
        overrides["repository_path"] = str(path)
    try:
        resolved = load_config(config_file=config, **overrides)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)
    setup_logging(resolved.verbosity)
    return resolved
