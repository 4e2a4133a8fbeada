"""Shared fixtures: real git repositories built with the git CLI."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

GIT = shutil.which("git")

ORIGIN_URL = "https://github.com/octocat/hello-world"


class FakeGitRepo:
    """Small DSL over a temporary git repository.

    Every commit gets a distinct, increasing author/committer date so
    time-bounded walks are deterministic.
    """

    def __init__(self, path: Path, start: int = 1_700_000_000):
        self.path = path
        self.clock = start
        self.origin_url = ""

    def git(self, *args: str, env: dict | None = None) -> str:
        full_env = {
            **os.environ,
            "GIT_CONFIG_NOSYSTEM": "1",
            "GIT_CONFIG_GLOBAL": os.devnull,
            **(env or {}),
        }
        result = subprocess.run(
            ["git", "-C", str(self.path), *args],
            capture_output=True,
            text=True,
            env=full_env,
        )
        if result.returncode != 0:
            raise RuntimeError(f"git {' '.join(args)} failed: {result.stderr}")
        return result.stdout.strip()

    def init(self) -> "FakeGitRepo":
        self.path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/master")
        self.git("config", "user.name", "Repo Owner")
        self.git("config", "user.email", "owner@test.com")
        self.git("config", "commit.gpgsign", "false")
        return self

    def with_origin(self, url: str = ORIGIN_URL) -> "FakeGitRepo":
        self.origin_url = url
        self.git("remote", "add", "origin", url)
        return self

    def tracking(self, branch: str, merge: str | None = None) -> "FakeGitRepo":
        """Configure ``branch.<branch>`` the way a clone does."""
        self.git("config", f"branch.{branch}.remote", "origin")
        self.git("config", f"branch.{branch}.merge", merge or f"refs/heads/{branch}")
        return self

    def write(self, name: str, lines: int) -> "FakeGitRepo":
        content = "".join(f"line {i}\n" for i in range(lines))
        (self.path / name).write_text(content)
        self.git("add", name)
        return self

    def remove(self, name: str) -> "FakeGitRepo":
        self.git("rm", "-q", name)
        return self

    def commit(
        self,
        message: str,
        author: str = "owner@test.com",
        committer: str | None = None,
    ) -> str:
        self.clock += 60
        date = f"@{self.clock} +0000"
        self.git(
            "commit",
            "-q",
            "--allow-empty",
            "-m",
            message,
            env={
                "GIT_AUTHOR_NAME": "Author Test",
                "GIT_AUTHOR_EMAIL": author,
                "GIT_AUTHOR_DATE": date,
                "GIT_COMMITTER_NAME": "Committer Test",
                "GIT_COMMITTER_EMAIL": committer or author,
                "GIT_COMMITTER_DATE": date,
            },
        )
        return self.head()

    def checkout(self, branch: str, create: bool = False) -> "FakeGitRepo":
        if create:
            self.git("checkout", "-q", "-b", branch)
        else:
            self.git("checkout", "-q", branch)
        return self

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")


@pytest.fixture
def fake_repo(tmp_path):
    """Empty initialised repository (no commits, no remote)."""
    if GIT is None:
        pytest.skip("git not found")
    return FakeGitRepo(tmp_path / "repo").init()


@pytest.fixture
def git_repo(fake_repo):
    """Repository with an origin remote and two commits on a tracked master.

    master holds README.md (3 lines) and old.txt (4 lines).
    """
    fake_repo.with_origin().tracking("master")
    fake_repo.write("README.md", 3).commit("initial commit")
    fake_repo.write("old.txt", 4).commit("add old.txt")
    return fake_repo
