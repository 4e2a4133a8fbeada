"""Tests for the git repository backend."""

import logging
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from scm_provenance.exceptions import (
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
from scm_provenance.git import FileStat, GitRepository, Tree, parse_numstat


class TestOpen:
    def test_not_a_git_repository(self, tmp_path):
        with pytest.raises(NotAGitRepository):
            GitRepository.open(tmp_path)

    def test_corrupt_marker(self, fake_repo):
        """A .git marker git cannot read is an open error, not a missing repo."""
        tmp_path = fake_repo.path.parent / "broken"
        tmp_path.mkdir()
        (tmp_path / ".git").write_text("gitdir: /nonexistent/path\n")
        with pytest.raises(OpenError):
            GitRepository.open(tmp_path)

    def test_missing_git_binary(self, git_repo):
        with pytest.raises(OpenError):
            GitRepository.open(git_repo.path, git_binary="definitely-not-git-xyz")

    def test_open(self, git_repo):
        repo = GitRepository.open(str(git_repo.path))
        assert repo.path == git_repo.path.resolve()


class TestRefs:
    def test_head_ref_on_branch(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        ref = repo.head_ref()
        assert ref.name == "refs/heads/master"
        assert ref.hash == git_repo.head()

    def test_head_ref_detached(self, git_repo):
        sha = git_repo.head()
        git_repo.git("checkout", "-q", "--detach", sha)
        ref = GitRepository.open(git_repo.path).head_ref()
        assert ref.name == "HEAD"
        assert ref.hash == sha

    def test_head_ref_unborn(self, fake_repo):
        """A repository without commits has no resolvable HEAD."""
        with pytest.raises(RefResolutionError):
            GitRepository.open(fake_repo.path).head_ref()

    def test_resolve_branch(self, git_repo):
        branch = GitRepository.open(git_repo.path).resolve_branch("master")
        assert branch.remote == "origin"
        assert branch.merge == "refs/heads/master"

    def test_resolve_branch_without_config(self, git_repo):
        """Local-only branches have no branch.<name> section."""
        git_repo.checkout("feature", create=True)
        with pytest.raises(BranchNotFound):
            GitRepository.open(git_repo.path).resolve_branch("feature")

    def test_resolve_empty_branch_name(self, git_repo):
        with pytest.raises(BranchNotFound):
            GitRepository.open(git_repo.path).resolve_branch("")

    def test_resolve_revision(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        assert repo.resolve_revision("refs/heads/master") == git_repo.head()

    def test_resolve_unknown_revision(self, git_repo):
        with pytest.raises(RefResolutionError):
            GitRepository.open(git_repo.path).resolve_revision("refs/heads/nope")


class TestRemote:
    def test_origin_urls(self, git_repo):
        assert GitRepository.open(git_repo.path).remote("origin") == [git_repo.origin_url]

    def test_no_remote(self, fake_repo):
        with pytest.raises(NoRemote):
            GitRepository.open(fake_repo.path).remote("origin")


class TestShallow:
    def test_full_clone(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        assert repo.shallow_commits() == []
        info = repo.clone_info()
        assert info.shallow is False
        assert info.depth == 0

    def test_shallow_file(self, git_repo):
        first = git_repo.git("rev-list", "--max-parents=0", "HEAD")
        (git_repo.path / ".git" / "shallow").write_text(f"{first}\n")
        repo = GitRepository.open(git_repo.path)
        assert repo.shallow_commits() == [first]
        info = repo.clone_info()
        assert info.shallow is True
        assert info.depth == 1


class TestCommits:
    def test_commit_at(self, git_repo):
        sha = git_repo.commit("tweak", author="a@test.com", committer="c@test.com")
        commit = GitRepository.open(git_repo.path).commit_at(sha)
        assert commit.hash == sha
        assert commit.author_email == "a@test.com"
        assert commit.committer_email == "c@test.com"
        assert commit.committed_at == datetime.fromtimestamp(git_repo.clock, tz=timezone.utc)
        assert len(commit.tree) == len(sha)

    def test_commit_at_unknown(self, git_repo):
        with pytest.raises(CommitLookupError):
            GitRepository.open(git_repo.path).commit_at("0" * 40)

    def test_commit_at_empty(self, git_repo):
        with pytest.raises(CommitLookupError):
            GitRepository.open(git_repo.path).commit_at("")

    def test_merge_base(self, git_repo):
        base = git_repo.head()
        git_repo.checkout("feature", create=True)
        head_sha = git_repo.write("new.txt", 1).commit("feature work")

        repo = GitRepository.open(git_repo.path)
        ancestor = repo.merge_base(repo.commit_at(head_sha), repo.commit_at("master"))
        assert ancestor.hash == base

    def test_merge_base_unrelated_histories(self, git_repo):
        master = git_repo.head()
        git_repo.git("checkout", "-q", "--orphan", "orphan")
        orphan = git_repo.commit("unrelated root")

        repo = GitRepository.open(git_repo.path)
        with pytest.raises(NoCommonAncestor):
            repo.merge_base(repo.commit_at(orphan), repo.commit_at(master))

    def test_log_since_is_restartable(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        head = repo.commit_at("HEAD")
        log = repo.log_since(head, datetime.fromtimestamp(0, tz=timezone.utc))
        first = [c.hash for c in log]
        second = [c.hash for c in log]
        assert len(first) == 2
        assert first == second
        assert first[0] == head.hash

    def test_log_since_excludes_older(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        head = repo.commit_at("HEAD")
        assert list(repo.log_since(head, head.committed_at)) == []

    def test_log_since_unknown_commit(self, git_repo):
        """git's error text survives into the exception once the walk fails."""
        repo = GitRepository.open(git_repo.path)
        missing = replace(repo.commit_at("HEAD"), hash="0" * 40)
        with pytest.raises(GitCommandError) as excinfo:
            list(repo.log_since(missing, datetime.fromtimestamp(0, tz=timezone.utc)))
        assert excinfo.value.returncode not in (None, 0)
        assert excinfo.value.reason


class TestTrees:
    def test_tree_of(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        commit = repo.commit_at("HEAD")
        tree = repo.tree_of(commit)
        assert tree.hash == git_repo.git("rev-parse", "HEAD^{tree}")
        assert tree.commit == commit.hash

    def test_missing_tree(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        commit = repo.commit_at("HEAD")
        with pytest.raises(TreeResolutionError):
            repo.diff(Tree(hash="f" * 40, commit="x"), repo.tree_of(commit))

    def test_diff_binary_file(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        before = repo.tree_of(repo.commit_at("HEAD"))
        (git_repo.path / "blob.bin").write_bytes(b"\x00\x01\x02\xff")
        git_repo.git("add", "blob.bin")
        git_repo.commit("add binary")
        after = repo.tree_of(repo.commit_at("HEAD"))

        assert repo.diff(before, after) == [
            FileStat(path="blob.bin", additions=0, deletions=0, binary=True)
        ]


class TestOptionLikeRevisions:
    """Values starting with '-' never reach git, where they would parse as options."""

    def test_commit_at_does_not_write_output_file(self, git_repo, tmp_path):
        leak = tmp_path / "leak.txt"
        with pytest.raises(CommitLookupError):
            GitRepository.open(git_repo.path).commit_at(f"--output={leak}")
        assert not leak.exists()

    def test_resolve_revision(self, git_repo):
        with pytest.raises(RefResolutionError):
            GitRepository.open(git_repo.path).resolve_revision("--all")

    def test_merge_base(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        head = repo.commit_at("HEAD")
        with pytest.raises(NoCommonAncestor):
            repo.merge_base(replace(head, hash="--octopus"), head)

    def test_log_since(self, git_repo, tmp_path):
        leak = tmp_path / "leak.txt"
        repo = GitRepository.open(git_repo.path)
        bogus = replace(repo.commit_at("HEAD"), hash=f"--output={leak}")
        with pytest.raises(GitCommandError):
            list(repo.log_since(bogus, datetime.fromtimestamp(0, tz=timezone.utc)))
        assert not leak.exists()

    def test_tree_of_and_diff(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        head = repo.commit_at("HEAD")
        with pytest.raises(TreeResolutionError):
            repo.tree_of(replace(head, tree="--stdin"))
        tree = repo.tree_of(head)
        with pytest.raises(TreeResolutionError):
            repo.diff(Tree(hash="--stat", commit=head.hash), tree)


class TestParseNumstat:
    def test_text_and_binary_records(self):
        raw = "3\t1\tsrc/a.py\x00-\t-\timg.png\x00"
        assert parse_numstat(raw) == [
            FileStat(path="src/a.py", additions=3, deletions=1),
            FileStat(path="img.png", additions=0, deletions=0, binary=True),
        ]

    def test_paths_with_tabs_and_spaces(self):
        assert parse_numstat("1\t0\tdir/my file\twith tab\x00") == [
            FileStat(path="dir/my file\twith tab", additions=1, deletions=0)
        ]

    def test_empty(self):
        assert parse_numstat("") == []


class TestGitCommandError:
    def test_missing_binary_in_commands(self, git_repo):
        repo = GitRepository.open(git_repo.path)
        repo.git_binary = "definitely-not-git-xyz"
        with pytest.raises(GitCommandError):
            repo.resolve_revision("HEAD")
        assert repo.shallow_commits() == []

    def test_commands_logged_at_debug(self, git_repo, caplog):
        caplog.set_level(logging.DEBUG, logger="scm_provenance.git.repository")
        GitRepository.open(git_repo.path).resolve_revision("HEAD")
        messages = [r.getMessage() for r in caplog.records]
        assert any("rev-parse --verify --quiet 'HEAD^{commit}'" in m for m in messages)
        assert any(m.startswith("$ git -C ") and m.endswith("[exit 0]") for m in messages)

    def test_missing_binary_logged_as_not_started(self, git_repo, caplog):
        caplog.set_level(logging.DEBUG, logger="scm_provenance.git.repository")
        repo = GitRepository.open(git_repo.path)
        repo.git_binary = "definitely-not-git-xyz"
        with pytest.raises(GitCommandError):
            repo.resolve_revision("HEAD")
        assert "[not started]" in caplog.records[-1].getMessage()
