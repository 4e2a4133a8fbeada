"""Data models for repository access and change attribution."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Commit:
    hash: str
    tree: str
    author_email: str
    committer_email: str
    authored_at: datetime  # tz-aware
    committed_at: datetime  # tz-aware


@dataclass(frozen=True)
class Reference:
    name: str  # e.g. "refs/heads/main", or "HEAD" when detached
    hash: str


@dataclass(frozen=True)
class Branch:
    """A branch as described by its ``branch.<name>`` configuration."""

    name: str
    remote: str = ""
    merge: str = ""  # upstream merge reference, e.g. "refs/heads/main"


@dataclass(frozen=True)
class Tree:
    hash: str
    commit: str  # commit the tree was read from


@dataclass(frozen=True)
class FileStat:
    path: str
    additions: int
    deletions: int
    binary: bool = False


@dataclass(frozen=True)
class CloneInfo:
    shallow: bool = False
    depth: int = 0


@dataclass(frozen=True)
class CommitRange:
    head: Commit
    target: Commit
    ancestor: Optional[Commit] = None


@dataclass(frozen=True)
class ContributorSet:
    authors: frozenset[str] = field(default_factory=frozenset)
    committers: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ChangeSizeStats:
    additions: int = 0
    deletions: int = 0
    modified_files: int = 0
