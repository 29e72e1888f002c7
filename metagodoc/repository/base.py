"""Platform-neutral repository snapshot builder."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from ..crawler.models import RepoInfo
from ..extractors.go import ExtractorError, GoDocExtractor
from .git import GitError, GitRepo
from .identity import repository_id
from .mirror import CloneLocks, RepoMirror
from .packages import collect_packages
from .readme import find_readme
from .refs import select_version_tags
from .snapshot import About, Ref, RefType, RepositorySnapshot, Tickets
from .status import COMMIT_SAMPLE_SIZE, ActivityStatus, classify_activity

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RepositoryError(Exception):
    """Building the snapshot of one repository failed."""

    def __init__(self, repo_id: str, operation: str, cause: Exception):
        super().__init__(f"{repo_id}: {operation} failed: {cause}")
        self.repo_id = repo_id
        self.operation = operation
        self.cause = cause


class Repository(ABC):
    """A crawl target on one hosting platform.

    The pipeline that turns a remote handle into a snapshot lives here;
    subclasses only supply what has to come from the platform's API.
    """

    # Errors that fail this repository's pass rather than the crawl.
    wrapped_errors: tuple[type[Exception], ...] = (GitError, OSError, ExtractorError)

    def __init__(
        self,
        info: RepoInfo,
        cache_root: Path | str,
        extractor: GoDocExtractor | None = None,
        locks: CloneLocks | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.info = info
        self.id = repository_id(info.html_url)
        self.mirror = RepoMirror(cache_root)
        self.extractor = extractor or GoDocExtractor()
        self.locks = locks or CloneLocks()
        self.clock = clock

    @property
    def is_core(self) -> bool:
        """Whether this is the language's own distribution."""
        return False

    @abstractmethod
    def tickets(self) -> tuple[Tickets, Tickets]:
        """Return (issues, pull requests) counts."""

    @abstractmethod
    def browse_url(self, ref: str) -> str:
        """Web URL of the tree at ``ref``."""

    def build_snapshot(self) -> RepositorySnapshot:
        """Mirror, classify and enumerate the repository from scratch."""
        logger.info("Indexing %s", self.id)

        # The clone has one working tree; everything that touches it runs
        # under the repository's lock.
        with self.locks.for_id(self.id):
            clone = self._step("mirror", self.mirror.ensure, self.id, self.info.clone_url)
            status = self._step("status", self.status, clone)
            refs, about = self._step("refs", self.materialize_refs, clone)

        issues, pull_requests = self._step("tickets", self.tickets)

        return RepositorySnapshot(
            id=self.id,
            name=self.info.name,
            full_name=self.info.full_name,
            description=self.info.description or "",
            owner=self.info.owner,
            primary_url=self.info.html_url,
            stars=self.info.stars,
            forks=self.info.forks,
            is_fork=self.info.is_fork,
            created=self.info.created_at,
            last_updated=self.info.pushed_at,
            last_crawled=self.clock(),
            issues=issues,
            pull_requests=pull_requests,
            status=status,
            about=about,
            refs=refs,
        )

    def status(self, clone: GitRepo) -> ActivityStatus:
        commits = clone.log(f"origin/{self.info.default_branch}", COMMIT_SAMPLE_SIZE)
        status = classify_activity(
            commits,
            is_fork=self.info.is_fork,
            created_at=self.info.created_at,
            pushed_at=self.info.pushed_at,
            now=self.clock(),
        )
        logger.info("  status = %s", status.value)
        return status

    def materialize_refs(self, clone: GitRepo) -> tuple[list[Ref], About | None]:
        """Check out the default branch and the selected tags one at a time.

        The README is read while the default branch is checked out.
        """
        branch = self.info.default_branch
        refs = [self._materialize(clone, branch, RefType.BRANCH)]
        about = find_readme(clone.path)

        for tag in select_version_tags(clone.tags(), self.is_core):
            refs.append(self._materialize(clone, tag, RefType.TAG))

        return refs, about

    def _materialize(self, clone: GitRepo, name: str, ref_type: RefType) -> Ref:
        logger.info("   ref = %s", name)

        if ref_type is RefType.BRANCH:
            # Tags were fetched with the mirror; branches move, so fetch now.
            clone.fetch_branch(name)
            clone.checkout(f"origin/{name}")
        else:
            clone.checkout(f"refs/tags/{name}")

        head = clone.head()
        return Ref(
            name=name,
            ref_type=ref_type,
            is_default_branch=name == self.info.default_branch and ref_type is RefType.BRANCH,
            last_seen_commit=head.hash,
            last_updated=head.authored_at,
            packages=collect_packages(
                clone.path,
                self.id,
                self.browse_url(name),
                self.extractor,
                is_core=self.is_core,
            ),
        )

    def _step(self, operation: str, fn, *args):
        try:
            return fn(*args)
        except self.wrapped_errors as e:
            raise RepositoryError(self.id, operation, e) from e
