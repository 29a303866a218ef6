from __future__ import annotations

import logging
import os
import re
from typing import Callable, Mapping

from percy_env._git import Git, SubprocessGit, parse_commit_record
from percy_env._schema import BuildContext, CIProvider, CommitInfo

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "master"

_SSH_URL = re.compile(
    r"^[^@/\s]+@[^:/\s]+:(?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$"
)
_HTTPS_URL = re.compile(
    r"^(?:https?|ssh|git)://(?:[^@/\s]+@)?[^/\s]+/(?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$"
)
_TRAILING_NUMBER = re.compile(r"/(\d+)/?$")


class Error(Exception):
    """Base class for errors raised by percy_env."""


class RepoNotFoundError(Error):
    """The owner/repo slug could not be determined by any method."""


def parse_repo_slug(origin_url: str | None) -> str:
    """Extract ``owner/repo`` from a git remote URL.

    Examples:
        "git@github.com:org/repo.git"          -> "org/repo"
        "git@github.com:org/repo-name.org.git" -> "org/repo-name.org"
        "https://github.com/org/repo.git\\n"    -> "org/repo"
    """
    url = (origin_url or "").strip()
    for pattern in (_SSH_URL, _HTTPS_URL):
        match = pattern.match(url)
        if match:
            return match.group("slug")
    raise RepoNotFoundError(
        f"Could not determine repository name from URL: {url!r}\n"
        "You can manually set PERCY_REPO_SLUG to fix this."
    )


# Checked in order. The generic CI_* variables used by Codeship are also
# exported by other providers, so Codeship must stay last.
_DETECTION_RULES: list[tuple[Callable[[Mapping[str, str]], bool], CIProvider]] = [
    (lambda env: bool(env.get("TRAVIS_BUILD_ID")), CIProvider.TRAVIS),
    (lambda env: bool(env.get("JENKINS_URL")), CIProvider.JENKINS),
    (lambda env: bool(env.get("CIRCLECI")), CIProvider.CIRCLE),
    (lambda env: env.get("CI_NAME") == "codeship", CIProvider.CODESHIP),
]

_BRANCH_VARS: dict[CIProvider, str] = {
    CIProvider.JENKINS: "ghprbTargetBranch",
    CIProvider.TRAVIS: "TRAVIS_BRANCH",
    CIProvider.CIRCLE: "CIRCLE_BRANCH",
    CIProvider.CODESHIP: "CI_BRANCH",
}

_COMMIT_VARS: dict[CIProvider, str] = {
    CIProvider.JENKINS: "ghprbActualCommit",
    CIProvider.TRAVIS: "TRAVIS_COMMIT",
    CIProvider.CIRCLE: "CIRCLE_SHA1",
    CIProvider.CODESHIP: "CI_COMMIT_ID",
}


class Environment:
    """Resolve build metadata from CI variables, falling back to local git.

    ``env`` defaults to ``os.environ`` and ``git`` to a SubprocessGit in the
    current directory. Nothing is cached; every call reads live state.
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        git: Git | None = None,
    ) -> None:
        if env is None:
            env = os.environ
        if git is None:
            git = SubprocessGit()
        self.env = env
        self.git = git

    def _get(self, name: str) -> str | None:
        """Return the variable's value, treating empty strings as unset."""
        return self.env.get(name) or None

    def current_ci(self) -> CIProvider:
        for predicate, provider in _DETECTION_RULES:
            if predicate(self.env):
                logger.debug("Detected CI provider: %s", provider.value)
                return provider
        return CIProvider.NONE

    def branch(self) -> str:
        override = self._get("PERCY_BRANCH")
        if override:
            return override

        var = _BRANCH_VARS.get(self.current_ci())
        result = self._get(var) if var else None
        if not result:
            result = self.git.current_branch()
        if not result:
            logger.warning(
                'Not in a git repo, setting PERCY_BRANCH to "%s".', DEFAULT_BRANCH
            )
            result = DEFAULT_BRANCH
        return result

    def _ci_commit_sha(self) -> str | None:
        override = self._get("PERCY_COMMIT")
        if override:
            return override
        var = _COMMIT_VARS.get(self.current_ci())
        return self._get(var) if var else None

    def commit_sha(self) -> str | None:
        sha = self._ci_commit_sha()
        if sha:
            return sha
        return parse_commit_record(self.git.commit_record("HEAD"))["sha"]

    def pull_request_number(self) -> str | None:
        override = self._get("PERCY_PULL_REQUEST")
        if override:
            return override

        ci = self.current_ci()
        if ci is CIProvider.JENKINS:
            # GitHub Pull Request Builder plugin.
            return self._get("ghprbPullId")
        if ci is CIProvider.TRAVIS:
            value = self._get("TRAVIS_PULL_REQUEST")
            if value == "false":
                return None
            return value
        if ci is CIProvider.CIRCLE:
            urls = self._get("CI_PULL_REQUESTS")
            if not urls:
                return None
            match = _TRAILING_NUMBER.search(urls.split(",")[0].strip())
            return match.group(1) if match else None
        # Codeship always reports CI_PULL_REQUEST as "false".
        return None

    def repo(self) -> str:
        override = self._get("PERCY_REPO_SLUG")
        if override:
            return override

        ci = self.current_ci()
        if ci is CIProvider.TRAVIS:
            slug = self._get("TRAVIS_REPO_SLUG")
            if slug:
                return slug
        elif ci is CIProvider.CIRCLE:
            username = self._get("CIRCLE_PROJECT_USERNAME")
            reponame = self._get("CIRCLE_PROJECT_REPONAME")
            if username and reponame:
                return f"{username}/{reponame}"

        return parse_repo_slug(self.git.origin_url())

    def commit(self, branch: str | None = None) -> CommitInfo:
        """Return commit metadata for the build.

        The record of the CI-provided SHA is used when git knows it, else the
        record at HEAD. ``sha`` is always the CI-provided SHA when there is
        one, so it agrees with commit_sha().
        """
        output: str | None = None
        sha = self._ci_commit_sha()
        if sha:
            output = self.git.commit_record(sha)
        if output is None:
            output = self.git.commit_record("HEAD")
        fields = parse_commit_record(output)
        fields["sha"] = sha or fields["sha"]
        return CommitInfo(branch=branch or self.branch(), **fields)

    def build_context(self) -> BuildContext:
        branch = self.branch()
        commit = self.commit(branch=branch)
        return BuildContext(
            ci=self.current_ci(),
            branch=branch,
            commit_sha=commit.sha,
            pull_request_number=self.pull_request_number(),
            repo=self.repo(),
            commit=commit,
        )


def current_ci() -> CIProvider:
    return Environment().current_ci()


def branch() -> str:
    return Environment().branch()


def commit_sha() -> str | None:
    return Environment().commit_sha()


def pull_request_number() -> str | None:
    return Environment().pull_request_number()


def repo() -> str:
    """Return the ``owner/repo`` slug, or raise RepoNotFoundError."""
    return Environment().repo()


def commit() -> CommitInfo:
    return Environment().commit()


def build_context() -> BuildContext:
    return Environment().build_context()
