from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

# Every variable the resolver reads. Cleared so tests never see the real CI.
CI_VARS = [
    "PERCY_COMMIT",
    "PERCY_BRANCH",
    "PERCY_PULL_REQUEST",
    "PERCY_REPO_SLUG",
    "JENKINS_URL",
    "ghprbPullId",
    "ghprbActualCommit",
    "ghprbTargetBranch",
    "TRAVIS_BUILD_ID",
    "TRAVIS_COMMIT",
    "TRAVIS_BRANCH",
    "TRAVIS_PULL_REQUEST",
    "TRAVIS_REPO_SLUG",
    "CIRCLECI",
    "CIRCLE_SHA1",
    "CIRCLE_BRANCH",
    "CIRCLE_PROJECT_USERNAME",
    "CIRCLE_PROJECT_REPONAME",
    "CI_PULL_REQUESTS",
    "CI_NAME",
    "CI_BRANCH",
    "CI_PULL_REQUEST",
    "CI_COMMIT_ID",
]

LOCAL_SHA = "0123456789abcdef0123456789abcdef01234567"
LOCAL_RECORD = "\x1f".join(
    [
        LOCAL_SHA,
        "Ada Author",
        "ada@example.com",
        "Carl Committer",
        "carl@example.com",
        "2025-01-01 00:00:00 +0000",
        "Fix the widget\n\nLonger description.",
    ]
)


class FakeGit:
    """In-memory stand-in for SubprocessGit with canned output."""

    def __init__(
        self,
        branch: str | None = "local-branch",
        origin_url: str | None = "git@github.com:percy/percy-client.git\n",
        records: dict[str, str] | None = None,
    ) -> None:
        self.branch = branch
        self.url = origin_url
        self.records = {"HEAD": LOCAL_RECORD} if records is None else records
        self.requested_refs: list[str] = []
        self.branch_calls = 0

    def current_branch(self) -> str | None:
        self.branch_calls += 1
        return self.branch

    def origin_url(self) -> str | None:
        return self.url

    def commit_record(self, ref: str = "HEAD") -> str | None:
        self.requested_refs.append(ref)
        return self.records.get(ref)


@pytest.fixture()
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in CI_VARS:
        monkeypatch.delenv(name, raising=False)


def _git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(
        ["git", "-c", "user.name=Test User", "-c", "user.email=test@example.com",
         "-c", "commit.gpgsign=false", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout


@pytest.fixture()
def no_parent_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A directory git will not search above for a repository."""
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    workdir = tmp_path / "work"
    workdir.mkdir()
    return workdir


@pytest.fixture()
def git_repo(no_parent_repo: Path) -> Path:
    """A real git repository with one commit on branch 'feature' and an origin."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    _git(no_parent_repo, "init", "-q")
    _git(no_parent_repo, "symbolic-ref", "HEAD", "refs/heads/feature")
    _git(no_parent_repo, "remote", "add", "origin", "https://github.com/org-name/repo-name.git")
    _git(no_parent_repo, "commit", "-q", "--allow-empty", "-m", "Initial commit")
    return no_parent_repo
