"""Thin wrapper around the git executable."""

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

CLONE_TIMEOUT = 1800
COMMAND_TIMEOUT = 600


class GitError(Exception):
    """A git command failed."""

    def __init__(self, command: list[str], returncode: int | None, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(f"`{' '.join(command)}` failed ({returncode}): {self.stderr}")


@dataclass(frozen=True)
class Commit:
    """A commit as far as activity classification is concerned."""
    hash: str
    authored_at: datetime


def _run(args: list[str], cwd: Path | None = None, timeout: int = COMMAND_TIMEOUT) -> str:
    cmd = ["git", *args]
    logger.debug("Running %s in %s", " ".join(cmd), cwd or ".")
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            # Ref names and commit data are not guaranteed to be UTF-8.
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise GitError(cmd, None, f"timed out after {timeout}s") from e
    except OSError as e:
        raise GitError(cmd, None, str(e)) from e

    if result.returncode != 0:
        raise GitError(cmd, result.returncode, result.stderr)
    return result.stdout


class GitRepo:
    """A non-bare working clone on local disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    @classmethod
    def clone(cls, url: str, dest: Path | str) -> "GitRepo":
        """Clone ``url`` into ``dest`` and return the new repository."""
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        _run(["clone", "--quiet", url, str(dest)], timeout=CLONE_TIMEOUT)
        return cls(dest)

    def fetch_tags(self) -> None:
        """Fetch the default refspec plus every tag from origin."""
        _run(["fetch", "--quiet", "--tags", "--force", "origin"], cwd=self.path)

    def fetch_branch(self, name: str) -> None:
        _run(["fetch", "--quiet", "origin", name], cwd=self.path)

    def checkout(self, ref: str) -> None:
        """Check out any name git can resolve to a commit, detaching HEAD."""
        _run(["checkout", "--quiet", "--force", "--detach", ref], cwd=self.path)

    def tags(self) -> list[str]:
        out = _run(["tag", "--list"], cwd=self.path)
        return [line.strip() for line in out.splitlines() if line.strip()]

    def log(self, ref: str = "HEAD", limit: int = 1) -> list[Commit]:
        """Return up to ``limit`` commits reachable from ``ref``, newest first."""
        out = _run(
            ["log", f"--max-count={limit}", "--format=%H %at", ref, "--"],
            cwd=self.path,
        )
        commits = []
        for line in out.splitlines():
            sha, _, timestamp = line.strip().partition(" ")
            if not sha:
                continue
            commits.append(Commit(
                hash=sha,
                authored_at=datetime.fromtimestamp(int(timestamp), tz=timezone.utc),
            ))
        return commits

    def head(self) -> Commit:
        commits = self.log("HEAD", 1)
        if not commits:
            raise GitError(["git", "log", "HEAD"], None, f"no commits in {self.path}")
        return commits[0]
