"""Assemble SCM attributes for test telemetry.

Assembly is best-effort: each contribution step either yields its attributes
or fails with an ``ScmError``, in which case its keys are left out and the
remaining steps still run. Nothing raised by a step escapes ``assemble``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Generic, Mapping, Optional, TypeVar, Union

from . import semconv
from .config import ProvenanceConfig
from .context import ExecutionContext, resolve
from .exceptions import NotAGitRepository, ScmError
from .git import (
    CommitRange,
    GitRepository,
    Repository,
    compute_file_stats,
    compute_range,
    mine_contributors,
)
from .logging_config import get_logger

logger = get_logger(__name__)

AttributeValue = Union[str, int, bool, frozenset]
Attribute = tuple[str, AttributeValue]

T = TypeVar("T")


@dataclass
class StepResult(Generic[T]):
    """Outcome of one contribution step: a value, or the error that stopped it."""

    value: Optional[T] = None
    error: Optional[ScmError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_step(name: str, step: Callable[[], T]) -> StepResult[T]:
    try:
        return StepResult(value=step())
    except ScmError as e:
        logger.info("Not contributing %s attributes: %s", name, e)
        return StepResult(error=e)


class AttributeAssembler:
    """Builds the ordered SCM attribute list for one execution context."""

    def __init__(self, remote_name: str = "origin"):
        self.remote_name = remote_name

    def assemble(self, ctx: ExecutionContext, repo: Repository) -> list[Attribute]:
        attributes: dict[str, AttributeValue] = {semconv.SCM_TYPE: semconv.SCM_TYPE_GIT}

        def fold(result: StepResult[list[Attribute]]) -> None:
            for key, value in result.value or []:
                attributes.setdefault(key, value)

        if ctx.provider.value:
            attributes[semconv.SCM_PROVIDER] = ctx.provider.value

        fold(run_step("clone", lambda: self._clone_info(repo)))
        fold(run_step("repository", lambda: self._repository(repo)))
        fold(run_step("branch", lambda: self._branch(repo)))

        if ctx.change_request:
            base_ref = ctx.get_target_branch()
            if base_ref:
                attributes[semconv.SCM_BASE_REF] = base_ref

            range_result = run_step("commit range", lambda: self._commit_range(repo, ctx))
            if range_result.ok and range_result.value is not None:
                commit_range = range_result.value
                fold(run_step("contributors", lambda: self._contributors(repo, commit_range)))
                fold(run_step("file stats", lambda: self._file_stats(repo, commit_range)))

        return list(attributes.items())

    def _clone_info(self, repo: Repository) -> list[Attribute]:
        info = repo.clone_info()
        return [
            (semconv.GIT_CLONE_SHALLOW, info.shallow),
            (semconv.GIT_CLONE_DEPTH, info.depth),
        ]

    def _repository(self, repo: Repository) -> list[Attribute]:
        return [(semconv.SCM_REPOSITORY, frozenset(repo.remote(self.remote_name)))]

    def _branch(self, repo: Repository) -> list[Attribute]:
        return [(semconv.SCM_BRANCH, repo.head_ref().name)]

    def _commit_range(self, repo: Repository, ctx: ExecutionContext) -> CommitRange:
        head, target = compute_range(repo, ctx)
        return CommitRange(head=head, target=target)

    def _contributors(self, repo: Repository, commit_range: CommitRange) -> list[Attribute]:
        contributors = mine_contributors(repo, commit_range.head, commit_range.target)
        if not contributors.authors and not contributors.committers:
            return []
        return [
            (semconv.SCM_AUTHORS, contributors.authors),
            (semconv.SCM_COMMITTERS, contributors.committers),
        ]

    def _file_stats(self, repo: Repository, commit_range: CommitRange) -> list[Attribute]:
        stats = compute_file_stats(repo, commit_range.head, commit_range.target)
        return [
            (semconv.GIT_ADDITIONS, stats.additions),
            (semconv.GIT_DELETIONS, stats.deletions),
            (semconv.GIT_MODIFIED_FILES, stats.modified_files),
        ]


def detect_scm(
    path: Path | str, git_binary: str = "git", timeout: int = 10
) -> Optional[GitRepository]:
    """Open the git repository at ``path`` if there is one, else None."""
    try:
        return GitRepository.open(path, git_binary=git_binary, timeout=timeout)
    except NotAGitRepository:
        logger.debug("No git repository at %s; skipping SCM attributes", path)
        return None
    except ScmError as e:
        logger.warning("Cannot open git repository at %s: %s", path, e)
        return None


def collect_attributes(
    config: Optional[ProvenanceConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> list[Attribute]:
    """Resolve the execution context, open the repository and assemble attributes.

    Returns an empty list when no context is detected or there is no repository.
    """
    if config is None:
        config = ProvenanceConfig()

    ctx = resolve(environ)
    if ctx is None:
        return []

    repo = detect_scm(config.repository, config.git_binary, config.git_timeout_seconds)
    if repo is None:
        return []

    return AttributeAssembler(remote_name=config.remote_name).assemble(ctx, repo)


def attributes_to_dict(attributes: list[Attribute]) -> dict:
    """JSON-friendly view: string sets become sorted lists."""
    result: dict = {}
    for key, value in attributes:
        if isinstance(value, (set, frozenset)):
            result[key] = sorted(value)
        else:
            result[key] = value
    return result
