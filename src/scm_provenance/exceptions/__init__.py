"""Exception hierarchy for SCM provenance."""

from .base import ScmProvenanceError
from .config import ConfigurationError, InvalidConfigError
from .scm import (
    BranchNotFound,
    CommitLookupError,
    GitCommandError,
    NoCommonAncestor,
    NoRemote,
    NotAGitRepository,
    OpenError,
    RefResolutionError,
    ScmError,
    TreeResolutionError,
)

__all__ = [
    "ScmProvenanceError",
    "ConfigurationError",
    "InvalidConfigError",
    "ScmError",
    "NotAGitRepository",
    "OpenError",
    "GitCommandError",
    "BranchNotFound",
    "RefResolutionError",
    "CommitLookupError",
    "NoCommonAncestor",
    "TreeResolutionError",
    "NoRemote",
]
