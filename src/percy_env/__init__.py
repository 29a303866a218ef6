from __future__ import annotations

from percy_env._environment import (
    Environment,
    Error,
    RepoNotFoundError,
    branch,
    build_context,
    commit,
    commit_sha,
    current_ci,
    parse_repo_slug,
    pull_request_number,
    repo,
)
from percy_env._git import Git, SubprocessGit
from percy_env._schema import BuildContext, CIProvider, CommitInfo

__all__ = [
    "BuildContext",
    "CIProvider",
    "CommitInfo",
    "Environment",
    "Error",
    "Git",
    "RepoNotFoundError",
    "SubprocessGit",
    "branch",
    "build_context",
    "commit",
    "commit_sha",
    "current_ci",
    "parse_repo_slug",
    "pull_request_number",
    "repo",
]
