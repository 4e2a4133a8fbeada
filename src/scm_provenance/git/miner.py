"""Commit-range resolution and contributor mining."""

from datetime import timedelta

from ..context import ExecutionContext
from ..exceptions import RefResolutionError
from ..logging_config import get_logger
from .models import Commit, ContributorSet
from .repository import Repository

logger = get_logger(__name__)

# Added to the merge-base author time so the ancestor itself is not walked.
# Commits dated within this window of the ancestor are excluded too.
ANCESTOR_OFFSET = timedelta(milliseconds=1)


def compute_range(repo: Repository, ctx: ExecutionContext) -> tuple[Commit, Commit]:
    """Resolve the (head, target) commits bounding the change.

    The target is the upstream merge reference of the branch named by
    ``ctx.get_target_branch()``. The head is ``ctx.commit`` when the CI system
    announced one, otherwise whatever HEAD points at.

    Raises:
        BranchNotFound: The target branch has no configuration
        RefResolutionError: The merge reference or HEAD does not resolve
        CommitLookupError: A resolved commit cannot be read
    """
    branch = repo.resolve_branch(ctx.get_target_branch())
    if not branch.merge:
        raise RefResolutionError(f"branch.{branch.name}.merge", "no upstream merge reference")

    target = repo.commit_at(repo.resolve_revision(branch.merge))

    if ctx.commit:
        head = repo.commit_at(ctx.commit)
    else:
        head = repo.commit_at(repo.head_ref().hash)

    logger.debug("Commit range: head=%s target=%s (%s)", head.hash, target.hash, branch.merge)
    return head, target


def mine_contributors(repo: Repository, head: Commit, target: Commit) -> ContributorSet:
    """Distinct author and committer emails of commits made since the merge-base.

    Raises:
        NoCommonAncestor: head and target share no reachable merge-base
    """
    ancestor = repo.merge_base(head, target)
    since = ancestor.authored_at + ANCESTOR_OFFSET

    authors: set[str] = set()
    committers: set[str] = set()
    for commit in repo.log_since(head, since):
        authors.add(commit.author_email)
        committers.add(commit.committer_email)

    logger.debug(
        "Mined %d author(s), %d committer(s) since %s", len(authors), len(committers), ancestor.hash
    )
    return ContributorSet(authors=frozenset(authors), committers=frozenset(committers))
