from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Fields are separated by ASCII unit separators. The message must come last
# since it may span multiple lines.
COMMIT_FIELDS = (
    "sha",
    "author_name",
    "author_email",
    "committer_name",
    "committer_email",
    "committed_at",
    "message",
)
COMMIT_FORMAT = "%x1f".join(["%H", "%an", "%ae", "%cn", "%ce", "%ci", "%B"])
_SEPARATOR = "\x1f"


@runtime_checkable
class Git(Protocol):
    def current_branch(self) -> str | None: ...
    def origin_url(self) -> str | None: ...
    def commit_record(self, ref: str = "HEAD") -> str | None: ...


class SubprocessGit:
    """Production git access by shelling out to the ``git`` executable.

    Every failure (non-zero exit, missing executable) yields None.
    """

    def __init__(self, executable: str = "git", cwd: Path | str | None = None) -> None:
        self.executable = executable
        self.cwd = cwd

    def _run(self, *args: str) -> str | None:
        cmd = [self.executable, *args]
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            logger.debug("Could not run %s: %s", self.executable, exc)
            return None
        if proc.returncode != 0:
            logger.debug(
                "%r exited with %d: %s", " ".join(cmd), proc.returncode, proc.stderr.strip()
            )
            return None
        return proc.stdout

    def current_branch(self) -> str | None:
        output = self._run("rev-parse", "--abbrev-ref", "HEAD")
        return output.strip() if output is not None else None

    def origin_url(self) -> str | None:
        return self._run("config", "--get", "remote.origin.url")

    def commit_record(self, ref: str = "HEAD") -> str | None:
        # Refs come from environment variables and must never reach git as options.
        if ref.startswith("-"):
            logger.debug("Refusing to look up ref that looks like an option: %r", ref)
            return None
        output = self._run("show", "--quiet", f"--format={COMMIT_FORMAT}", ref, "--")
        if output is None:
            return None
        return output.strip() or None


def parse_commit_record(output: str | None) -> dict[str, str | None]:
    """Split a commit record into its named fields.

    Returns a dict with every key of COMMIT_FIELDS; missing or empty parts
    map to None.
    """
    parts: list[str] = []
    if output:
        parts = output.split(_SEPARATOR, len(COMMIT_FIELDS) - 1)
    fields: dict[str, str | None] = {}
    for i, name in enumerate(COMMIT_FIELDS):
        value = parts[i].strip() if i < len(parts) else ""
        fields[name] = value or None
    return fields
