"""Read-only repository access.

``Repository`` is the capability surface the rest of the package codes
against; ``GitRepository`` is the git backend, driving the ``git`` CLI via
subprocess.
"""

from __future__ import annotations

import subprocess
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..exceptions import (
    BranchNotFound,
    CommitLookupError,
    GitCommandError,
    NoCommonAncestor,
    NoRemote,
    NotAGitRepository,
    OpenError,
    RefResolutionError,
    TreeResolutionError,
)
from ..logging_config import get_logger, log_git_command
from .models import Branch, CloneInfo, Commit, FileStat, Reference, Tree

logger = get_logger(__name__)


class Repository(ABC):
    """Read-only capabilities over a local version-control checkout."""

    @abstractmethod
    def head_ref(self) -> Reference:
        """Reference HEAD points at. Raises RefResolutionError."""

    @abstractmethod
    def resolve_branch(self, name: str) -> Branch:
        """Branch configuration for ``name``. Raises BranchNotFound."""

    @abstractmethod
    def resolve_revision(self, rev: str) -> str:
        """Commit hash ``rev`` points at. Raises RefResolutionError."""

    @abstractmethod
    def remote(self, name: str = "origin") -> list[str]:
        """URLs of a remote. Raises NoRemote."""

    @abstractmethod
    def shallow_commits(self) -> list[str]:
        """Shallow boundary commits; empty for a full clone or when unreadable."""

    @abstractmethod
    def commit_at(self, rev: str) -> Commit:
        """Raises CommitLookupError."""

    @abstractmethod
    def merge_base(self, a: Commit, b: Commit) -> Commit:
        """Nearest common ancestor. Raises NoCommonAncestor."""

    @abstractmethod
    def log_since(self, from_commit: Commit, since: datetime) -> Iterable[Commit]:
        """Commits reachable from ``from_commit`` committed strictly after ``since``."""

    @abstractmethod
    def tree_of(self, commit: Commit) -> Tree:
        """Raises TreeResolutionError."""

    @abstractmethod
    def diff(self, tree_a: Tree, tree_b: Tree) -> list[FileStat]:
        """Per-file line stats for the change from ``tree_a`` into ``tree_b``."""

    def clone_info(self) -> CloneInfo:
        depth = len(self.shallow_commits())
        return CloneInfo(shallow=depth > 0, depth=depth)


# hash, tree, author email, committer email, author time, committer time
_COMMIT_FORMAT = "%H%x1f%T%x1f%ae%x1f%ce%x1f%at%x1f%ct"


def _is_option_like(rev: str) -> bool:
    # git reads any positional argument starting with "-" as an option
    return rev.startswith("-")


def _parse_commit(line: str) -> Optional[Commit]:
    parts = line.rstrip("\n").split("\x1f")
    if len(parts) != 6:
        return None
    sha, tree, author, committer, authored, committed = parts
    try:
        authored_at = datetime.fromtimestamp(int(authored), tz=timezone.utc)
        committed_at = datetime.fromtimestamp(int(committed), tz=timezone.utc)
    except ValueError:
        return None
    return Commit(
        hash=sha,
        tree=tree,
        author_email=author,
        committer_email=committer,
        authored_at=authored_at,
        committed_at=committed_at,
    )


class CommitLog:
    """Restartable walk over ``git log`` output.

    Each iteration spawns a fresh ``git log`` and streams it, so the sequence
    can be consumed more than once without holding the whole history in memory.
    """

    def __init__(self, repo: "GitRepository", from_commit: Commit, since: datetime):
        self.repo = repo
        self.from_commit = from_commit
        self.since = since

    def __iter__(self) -> Iterator[Commit]:
        if _is_option_like(self.from_commit.hash):
            raise GitCommandError("log", f"option-like revision {self.from_commit.hash!r}")
        cmd = self.repo._command("log", f"--format={_COMMIT_FORMAT}", self.from_commit.hash, "--")

        # stderr goes to a file so it cannot block the stdout stream
        with tempfile.TemporaryFile() as stderr_file:
            try:
                proc = subprocess.Popen(
                    cmd,
                    cwd=self.repo.path,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                )
            except OSError as e:
                log_git_command(logger, cmd, None)
                raise GitCommandError("log", str(e))

            try:
                stdout = proc.stdout
                if stdout is None:
                    return
                for line in stdout:
                    commit = _parse_commit(line)
                    if commit is None:
                        continue
                    if commit.committed_at > self.since:
                        yield commit
                proc.wait(timeout=self.repo.timeout)
                log_git_command(logger, cmd, proc.returncode)
                if proc.returncode != 0:
                    stderr_file.seek(0)
                    stderr = stderr_file.read().decode("utf-8", errors="replace")
                    raise GitCommandError("log", stderr.strip(), proc.returncode)
            except subprocess.TimeoutExpired:
                proc.kill()
                raise GitCommandError("log", f"timed out after {self.repo.timeout}s")
            finally:
                if proc.poll() is None:
                    proc.kill()
                    proc.wait()
                if proc.stdout:
                    proc.stdout.close()


class GitRepository(Repository):
    """Git backend over the ``git`` executable."""

    def __init__(self, path: Path, git_binary: str = "git", timeout: int = 10):
        self.path = path
        self.git_binary = git_binary
        self.timeout = timeout

    @classmethod
    def open(cls, path: Path | str, git_binary: str = "git", timeout: int = 10) -> "GitRepository":
        """Open the repository at ``path``.

        Raises:
            NotAGitRepository: No ``.git`` marker at ``path``
            OpenError: The marker exists but git cannot read the repository
        """
        root = Path(path).resolve()
        if not (root / ".git").exists():
            raise NotAGitRepository(root)

        repo = cls(root, git_binary=git_binary, timeout=timeout)
        try:
            result = repo._run("rev-parse", "--git-dir")
        except GitCommandError as e:
            raise OpenError(root, e.reason)
        if result.returncode != 0:
            raise OpenError(root, result.stderr.strip())
        return repo

    # -- subprocess plumbing ---------------------------------------------

    def _command(self, *args: str) -> list[str]:
        return [self.git_binary, "-C", str(self.path), *args]

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        cmd = self._command(*args)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except OSError as e:
            log_git_command(logger, cmd, None)
            raise GitCommandError(args[0], str(e))
        except subprocess.TimeoutExpired:
            log_git_command(logger, cmd, None)
            raise GitCommandError(args[0], f"timed out after {self.timeout}s")
        log_git_command(logger, cmd, result.returncode)
        return result

    def _config_values(self, key: str) -> list[str]:
        result = self._run("config", "--get-all", key)
        # rc=1: key not set
        if result.returncode == 1:
            return []
        if result.returncode != 0:
            raise GitCommandError("config", result.stderr.strip(), result.returncode)
        return [line for line in result.stdout.splitlines() if line]

    # -- capabilities ----------------------------------------------------

    def head_ref(self) -> Reference:
        try:
            sha = self.resolve_revision("HEAD")
        except (RefResolutionError, GitCommandError) as e:
            raise RefResolutionError("HEAD", str(e))

        result = self._run("symbolic-ref", "-q", "HEAD")
        name = result.stdout.strip() if result.returncode == 0 else "HEAD"
        return Reference(name=name, hash=sha)

    def resolve_branch(self, name: str) -> Branch:
        if not name:
            raise BranchNotFound(name)
        remote = self._config_values(f"branch.{name}.remote")
        merge = self._config_values(f"branch.{name}.merge")
        if not remote and not merge:
            raise BranchNotFound(name)
        return Branch(
            name=name,
            remote=remote[-1] if remote else "",
            merge=merge[-1] if merge else "",
        )

    def resolve_revision(self, rev: str) -> str:
        if not rev:
            raise RefResolutionError(rev, "empty revision")
        if _is_option_like(rev):
            raise RefResolutionError(rev, "revision must not start with '-'")
        result = self._run("rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}")
        if result.returncode != 0 or not result.stdout.strip():
            raise RefResolutionError(rev, result.stderr.strip() or "unknown revision")
        return result.stdout.strip()

    def remote(self, name: str = "origin") -> list[str]:
        urls = self._config_values(f"remote.{name}.url")
        if not urls:
            raise NoRemote(name)
        return urls

    def shallow_commits(self) -> list[str]:
        try:
            result = self._run("rev-parse", "--git-path", "shallow")
        except GitCommandError as e:
            logger.debug("Cannot locate shallow file: %s", e)
            return []
        if result.returncode != 0:
            return []

        shallow_path = Path(result.stdout.strip())
        if not shallow_path.is_absolute():
            shallow_path = self.path / shallow_path
        try:
            content = shallow_path.read_text(encoding="utf-8")
        except OSError:
            return []
        return [line.strip() for line in content.splitlines() if line.strip()]

    def commit_at(self, rev: str) -> Commit:
        if not rev:
            raise CommitLookupError(rev, "empty revision")
        # only a verified hash reaches git log
        try:
            sha = self.resolve_revision(rev)
        except (RefResolutionError, GitCommandError) as e:
            raise CommitLookupError(rev, e.reason)
        try:
            result = self._run(
                "log", "-1", "--no-walk", f"--format={_COMMIT_FORMAT}", sha, "--"
            )
        except GitCommandError as e:
            raise CommitLookupError(rev, e.reason)
        if result.returncode != 0:
            raise CommitLookupError(rev, result.stderr.strip())

        commit = _parse_commit(result.stdout.strip())
        if commit is None:
            raise CommitLookupError(rev, "unexpected git log output")
        return commit

    def merge_base(self, a: Commit, b: Commit) -> Commit:
        if _is_option_like(a.hash) or _is_option_like(b.hash):
            raise NoCommonAncestor(a.hash, b.hash, "option-like commit hash")
        try:
            result = self._run("merge-base", a.hash, b.hash)
        except GitCommandError as e:
            raise NoCommonAncestor(a.hash, b.hash, e.reason)
        # rc=1 with no output: histories are unrelated, or truncated by a shallow clone
        if result.returncode != 0 or not result.stdout.strip():
            raise NoCommonAncestor(a.hash, b.hash, result.stderr.strip())

        ancestor = result.stdout.splitlines()[0].strip()
        try:
            return self.commit_at(ancestor)
        except CommitLookupError as e:
            raise NoCommonAncestor(a.hash, b.hash, str(e))

    def log_since(self, from_commit: Commit, since: datetime) -> CommitLog:
        return CommitLog(self, from_commit, since)

    def tree_of(self, commit: Commit) -> Tree:
        if _is_option_like(commit.hash) or _is_option_like(commit.tree):
            raise TreeResolutionError(commit.hash, "option-like object name")
        tree = commit.tree
        if not tree:
            try:
                result = self._run("rev-parse", "--verify", "--quiet", f"{commit.hash}^{{tree}}")
            except GitCommandError as e:
                raise TreeResolutionError(commit.hash, e.reason)
            if result.returncode != 0:
                raise TreeResolutionError(commit.hash, result.stderr.strip() or "no tree")
            tree = result.stdout.strip()

        try:
            exists = self._run("cat-file", "-e", tree)
        except GitCommandError as e:
            raise TreeResolutionError(commit.hash, e.reason)
        if exists.returncode != 0:
            raise TreeResolutionError(commit.hash, f"tree {tree} is missing")
        return Tree(hash=tree, commit=commit.hash)

    def diff(self, tree_a: Tree, tree_b: Tree) -> list[FileStat]:
        if _is_option_like(tree_a.hash) or _is_option_like(tree_b.hash):
            raise TreeResolutionError(tree_b.commit, "option-like tree hash")
        try:
            result = self._run(
                "diff-tree", "-r", "--numstat", "--no-renames", "-z", tree_a.hash, tree_b.hash
            )
        except GitCommandError as e:
            raise TreeResolutionError(tree_b.commit, e.reason)
        if result.returncode != 0:
            raise TreeResolutionError(tree_b.commit, result.stderr.strip())
        return parse_numstat(result.stdout)


def parse_numstat(raw: str) -> list[FileStat]:
    """Parse ``--numstat -z`` output (renames disabled).

    Each record is ``added<TAB>deleted<TAB>path<NUL>``; binary files report
    ``-`` for both counts.
    """
    stats: list[FileStat] = []
    for record in raw.split("\0"):
        if not record.strip():
            continue
        parts = record.lstrip("\n").split("\t", 2)
        if len(parts) != 3:
            continue
        added, deleted, path = parts
        if added == "-" and deleted == "-":
            stats.append(FileStat(path=path, additions=0, deletions=0, binary=True))
            continue
        try:
            stats.append(FileStat(path=path, additions=int(added), deletions=int(deleted)))
        except ValueError:
            logger.debug("Skipping unparseable numstat record: %r", record)
    return stats
