"""CI execution-context detection."""

from .models import ExecutionContext, Provider
from .probes import from_github, from_gitlab, from_jenkins, from_local
from .resolver import PROBES, get_target_branch, resolve

__all__ = [
    "ExecutionContext",
    "Provider",
    "PROBES",
    "resolve",
    "get_target_branch",
    "from_local",
    "from_github",
    "from_jenkins",
    "from_gitlab",
]
