"""Change-size statistics between two tree snapshots."""

from ..logging_config import get_logger
from .models import ChangeSizeStats, Commit
from .repository import Repository

logger = get_logger(__name__)


def compute_file_stats(repo: Repository, head: Commit, target: Commit) -> ChangeSizeStats:
    """Added/deleted lines and modified files going from ``target`` into ``head``.

    Raises:
        TreeResolutionError: A tree cannot be read or the trees cannot be diffed
    """
    target_tree = repo.tree_of(target)
    head_tree = repo.tree_of(head)
    patch = repo.diff(target_tree, head_tree)

    additions = sum(stat.additions for stat in patch)
    deletions = sum(stat.deletions for stat in patch)
    modified = len({stat.path for stat in patch})

    logger.debug("Diff %s..%s: +%d -%d in %d file(s)", target.hash, head.hash, additions, deletions, modified)
    return ChangeSizeStats(additions=additions, deletions=deletions, modified_files=modified)
