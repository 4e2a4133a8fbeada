"""Data models for the CI execution context."""

from dataclasses import dataclass
from enum import Enum


class Provider(str, Enum):
    """CI system that produced the execution context."""

    NONE = ""
    LOCAL = ""  # alias of NONE: local runs carry no provider
    GITHUB = "Github"
    JENKINS = "Jenkins"
    GITLAB = "Gitlab"


@dataclass(frozen=True)
class ExecutionContext:
    """Immutable description of the build being attributed.

    Attributes:
        branch: Name of the branch being built
        change_request: True for PR/MR builds, decided by the probe that matched
        commit: Head commit hash announced by the CI system (may be empty)
        provider: CI provider, empty for local runs
        target_branch: Branch a change request merges into
    """

    branch: str
    change_request: bool
    commit: str = ""
    provider: Provider = Provider.NONE
    target_branch: str = ""

    def get_target_branch(self) -> str:
        """Branch whose history bounds the change: the target for change requests, else the branch."""
        if self.change_request:
            return self.target_branch
        return self.branch
