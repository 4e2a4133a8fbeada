"""Base exception for SCM provenance."""

from typing import Dict, Mapping, Optional


class ScmProvenanceError(Exception):
    """Base exception for all SCM provenance errors.

    ``details`` is always ``Dict[str, str]``: values are stringified on the way
    in and ``None`` entries are dropped, so optional context (an exit code, a
    reason) can be passed unconditionally.
    """

    def __init__(self, message: str, details: Optional[Mapping[str, object]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, str] = {
            key: str(value) for key, value in (details or {}).items() if value is not None
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({rendered})"
