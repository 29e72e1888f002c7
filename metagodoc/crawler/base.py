"""The crawl source contract shared by every hosting platform."""

import queue
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from ..repository.snapshot import RepositorySnapshot


class ResultKind(str, Enum):
    SNAPSHOT = "snapshot"
    ERROR = "error"
    SKIP = "skip"
    NOT_SUPPORTED = "not-supported"


@dataclass
class CrawlResult:
    """One outcome pushed by a source. Consumed exactly once."""
    source: "CrawlSource"
    kind: ResultKind
    snapshot: RepositorySnapshot | None = None
    error: Exception | None = None
    # Set on the error result a source sends when it has nothing left to crawl.
    exhausted: bool = False
    repo_id: str | None = None

    @classmethod
    def of_snapshot(cls, source: "CrawlSource", snapshot: RepositorySnapshot) -> "CrawlResult":
        return cls(source, ResultKind.SNAPSHOT, snapshot=snapshot, repo_id=snapshot.id)

    @classmethod
    def of_error(cls, source: "CrawlSource", error: Exception, repo_id: str | None = None) -> "CrawlResult":
        return cls(source, ResultKind.ERROR, error=error, repo_id=repo_id)

    @classmethod
    def of_exhaustion(cls, source: "CrawlSource") -> "CrawlResult":
        return cls(source, ResultKind.ERROR, exhausted=True)

    @classmethod
    def of_skip(cls, source: "CrawlSource", repo_id: str) -> "CrawlResult":
        return cls(source, ResultKind.SKIP, repo_id=repo_id)

    @classmethod
    def of_not_supported(cls, source: "CrawlSource") -> "CrawlResult":
        return cls(source, ResultKind.NOT_SUPPORTED)

    @property
    def is_error(self) -> bool:
        return self.kind is ResultKind.ERROR


class CrawlSource(ABC):
    """A producer of repository snapshots from one hosting platform.

    Sources live for the whole process. The scheduler runs ``crawl_all`` in
    its own thread and parks the source for ``sleep_duration`` whenever it
    reports an error, including the error that signals exhaustion, so every
    run should end with one.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier used in logs and for backoff bookkeeping."""

    @property
    @abstractmethod
    def sleep_duration(self) -> timedelta:
        """How long to back off after exhaustion or an error."""

    @abstractmethod
    def crawl_all(self, results: queue.Queue) -> None:
        """Push CrawlResults onto ``results`` until exhausted, then return."""

    def crawl_one(self, locator: str) -> CrawlResult:
        """Crawl a single named repository out of band."""
        return CrawlResult.of_not_supported(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
