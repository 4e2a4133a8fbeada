"""
Logging configuration for SCM provenance.

Logs go to stderr through rich so attribute output on stdout stays machine
readable. The level follows ``ProvenanceConfig.verbosity``; at ``verbose``
every git invocation is logged with its exit status.
"""

import logging
import shlex
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "scm_provenance"

LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the rich stderr handler for a verbosity level.

    Args:
        verbosity: One of ``quiet``, ``normal`` or ``verbose``
        log_file: Optional file path to append plain-text logs to

    Returns:
        The ``scm_provenance`` logger
    """
    try:
        level = LEVELS[verbosity]
    except KeyError:
        raise ValueError(f"Unknown verbosity: {verbosity!r}") from None
    verbose = level == logging.DEBUG

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=verbose,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger namespaced under ``scm_provenance``."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def log_git_command(logger: logging.Logger, argv: Sequence[str], returncode: Optional[int]) -> None:
    """Debug-log one git invocation as a copy-pasteable shell line."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    status = "not started" if returncode is None else f"exit {returncode}"
    logger.debug("$ %s [%s]", shlex.join(argv), status)
