"""Resolve the execution context from environment state."""

import os
from typing import Callable, Mapping, Optional

from ..logging_config import get_logger
from .models import ExecutionContext
from .probes import from_github, from_gitlab, from_jenkins, from_local

logger = get_logger(__name__)

Probe = Callable[[Mapping[str, str]], Optional[ExecutionContext]]

# Evaluated in order; the first applicable probe wins.
PROBES: tuple[tuple[str, Probe], ...] = (
    ("local", from_local),
    ("github", from_github),
    ("jenkins", from_jenkins),
    ("gitlab", from_gitlab),
)


def resolve(environ: Optional[Mapping[str, str]] = None) -> Optional[ExecutionContext]:
    """Return the context of the first matching provider probe, or None.

    Args:
        environ: Environment to inspect. Defaults to ``os.environ``.
    """
    if environ is None:
        environ = os.environ

    for name, probe in PROBES:
        ctx = probe(environ)
        if ctx is not None:
            logger.debug("Execution context detected by %s probe: %s", name, ctx)
            return ctx

    logger.debug("No execution context detected")
    return None


def get_target_branch(ctx: ExecutionContext) -> str:
    return ctx.get_target_branch()
