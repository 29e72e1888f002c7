"""Local clone cache."""

import logging
import threading
from pathlib import Path

from .git import GitRepo

logger = logging.getLogger(__name__)


class CloneLocks:
    """Hands out one lock per repository ID.

    A clone has a single working tree, so two builds of the same repository
    must never check out refs at the same time.
    """

    def __init__(self):
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def for_id(self, repo_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(repo_id)
            if lock is None:
                lock = self._locks[repo_id] = threading.Lock()
            return lock


class RepoMirror:
    """Manages local repository clones under ``<cache_root>/repos``."""

    def __init__(self, cache_root: Path | str):
        self.cache_root = Path(cache_root)

    def path_for(self, repo_id: str) -> Path:
        """Get local path for a repository."""
        return self.cache_root / "repos" / repo_id

    def ensure(self, repo_id: str, clone_url: str) -> GitRepo:
        """Clone the repository the first time, fetch it every time after.

        The clone directory is never removed or recreated here.
        """
        path = self.path_for(repo_id)

        if not path.exists():
            logger.info("%s does not exist at %s - cloning", repo_id, path)
            return GitRepo.clone(clone_url, path)

        logger.info("%s exists at %s - fetching", repo_id, path)
        repo = GitRepo(path)
        repo.fetch_tags()
        return repo
