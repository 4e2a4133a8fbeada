"""Repository access and change-attribution exceptions.

Everything below ``ScmError`` is recovered inside the attribute assembler:
a failing step drops its own keys and assembly carries on.
"""

from pathlib import Path
from typing import Optional

from .base import ScmProvenanceError


class ScmError(ScmProvenanceError):
    """Base class for source-control errors."""

    pass


class NotAGitRepository(ScmError):
    """Raised when no repository marker exists at the given path."""

    def __init__(self, path: Path):
        super().__init__(f"Not a git repository: {path}", details={"path": str(path)})
        self.path = path


class OpenError(ScmError):
    """Raised when repository storage exists but cannot be read."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot open repository: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class GitCommandError(ScmError):
    """Raised when the git executable is missing, times out or fails unexpectedly."""

    def __init__(self, command: str, reason: str, returncode: Optional[int] = None):
        super().__init__(
            f"git {command} failed",
            details={"command": command, "reason": reason, "returncode": returncode},
        )
        self.command = command
        self.reason = reason
        self.returncode = returncode


class BranchNotFound(ScmError):
    """Raised when a branch has no configuration in the repository."""

    def __init__(self, branch: str):
        super().__init__(f"Branch not found: {branch!r}", details={"branch": branch})
        self.branch = branch


class RefResolutionError(ScmError):
    """Raised when a reference (HEAD, a merge ref) does not resolve to a commit."""

    def __init__(self, ref: str, reason: str):
        super().__init__(
            f"Cannot resolve reference: {ref}", details={"ref": ref, "reason": reason}
        )
        self.ref = ref
        self.reason = reason


class CommitLookupError(ScmError):
    """Raised when a commit object cannot be read."""

    def __init__(self, rev: str, reason: str):
        super().__init__(f"Cannot read commit: {rev}", details={"rev": rev, "reason": reason})
        self.rev = rev
        self.reason = reason


class NoCommonAncestor(ScmError):
    """Raised when two commits share no merge-base (or it is missing from a shallow clone)."""

    def __init__(self, head: str, target: str, reason: str = ""):
        super().__init__(
            "No common ancestor between head and target",
            details={"head": head, "target": target, "reason": reason or None},
        )
        self.head = head
        self.target = target


class TreeResolutionError(ScmError):
    """Raised when a commit's tree cannot be read or two trees cannot be diffed."""

    def __init__(self, rev: str, reason: str):
        super().__init__(f"Cannot resolve tree for {rev}", details={"rev": rev, "reason": reason})
        self.rev = rev
        self.reason = reason


class NoRemote(ScmError):
    """Raised when the named remote is not configured."""

    def __init__(self, name: str):
        super().__init__(f"Remote not found: {name!r}", details={"remote": name})
        self.name = name
