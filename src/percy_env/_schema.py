from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class CIProvider(str, Enum):
    NONE = "none"
    JENKINS = "jenkins"
    TRAVIS = "travis"
    CIRCLE = "circle"
    CODESHIP = "codeship"


class CommitInfo(BaseModel):
    """Metadata for a single commit. Any field but ``branch`` may be absent."""

    branch: str
    sha: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    committer_name: str | None = None
    committer_email: str | None = None
    committed_at: str | None = None
    message: str | None = None


class BuildContext(BaseModel):
    """Everything resolved about the current build in one pass."""

    ci: CIProvider
    branch: str
    commit_sha: str | None = None
    pull_request_number: str | None = None
    repo: str
    commit: CommitInfo
