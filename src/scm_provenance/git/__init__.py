"""Git repository access and change attribution."""

from .diff import compute_file_stats
from .miner import ANCESTOR_OFFSET, compute_range, mine_contributors
from .models import (
    Branch,
    ChangeSizeStats,
    CloneInfo,
    Commit,
    CommitRange,
    ContributorSet,
    FileStat,
    Reference,
    Tree,
)
from .repository import CommitLog, GitRepository, Repository, parse_numstat

__all__ = [
    "Repository",
    "GitRepository",
    "CommitLog",
    "parse_numstat",
    "compute_range",
    "mine_contributors",
    "compute_file_stats",
    "ANCESTOR_OFFSET",
    "Branch",
    "ChangeSizeStats",
    "CloneInfo",
    "Commit",
    "CommitRange",
    "ContributorSet",
    "FileStat",
    "Reference",
    "Tree",
]
