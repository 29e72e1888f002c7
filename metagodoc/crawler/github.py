"""GitHub crawl source."""

import logging
import queue
import re
from datetime import timedelta
from pathlib import Path
from typing import Iterable

from ..extractors.go import GoDocExtractor
from ..repository.base import RepositoryError
from ..repository.github import GitHubRepository
from ..repository.identity import repository_id
from ..repository.mirror import CloneLocks
from .base import CrawlResult, CrawlSource
from .github_client import GitHubAPIError, GitHubClient
from .models import RepoInfo

logger = logging.getLogger(__name__)

LOCATOR = re.compile(r"^(?:https?://)?github\.com/([\w.-]+)/([\w.-]+?)(?:\.git)?/?$")


class GitHubCrawler(CrawlSource):
    """Walks GitHub's repository search for one language, page by page."""

    def __init__(
        self,
        client: GitHubClient,
        cache_root: Path | str,
        skip_list: Iterable[str] = (),
        language: str = "go",
        sleep_duration: timedelta = timedelta(minutes=15),
        extractor: GoDocExtractor | None = None,
        locks: CloneLocks | None = None,
    ):
        if not client.token:
            raise ValueError("Cannot crawl GitHub without an access token")

        self.client = client
        self.cache_root = Path(cache_root)
        self.skip_list = frozenset(skip_list)
        self.language = language
        self._sleep_duration = sleep_duration
        self.extractor = extractor or GoDocExtractor()
        self.locks = locks or CloneLocks()
        # 0 means the search has been exhausted.
        self.next_page = 1

    @property
    def name(self) -> str:
        return "GitHub"

    @property
    def sleep_duration(self) -> timedelta:
        return self._sleep_duration

    def crawl_all(self, results: queue.Queue) -> None:
        while self._crawl_next_page(results):
            pass

    def crawl_one(self, locator: str) -> CrawlResult:
        match = LOCATOR.match(locator.strip())
        if match is None:
            return CrawlResult.of_error(self, ValueError(f"Not a GitHub repository URL: {locator}"))

        full_name = f"{match.group(1)}/{match.group(2)}"
        try:
            info = self.client.get_repository(full_name)
        except GitHubAPIError as e:
            return CrawlResult.of_error(self, e, repo_id=f"github.com/{full_name}")
        return self.crawl_repository(info)

    def crawl_repository(self, info: RepoInfo) -> CrawlResult:
        """Build one candidate, honouring the skip list."""
        repo_id = repository_id(info.html_url)
        if repo_id in self.skip_list:
            logger.info("%s is on the skip list", repo_id)
            return CrawlResult.of_skip(self, repo_id)

        repo = GitHubRepository(
            info,
            self.client,
            self.cache_root,
            extractor=self.extractor,
            locks=self.locks,
        )
        try:
            return CrawlResult.of_snapshot(self, repo.build_snapshot())
        except RepositoryError as e:
            logger.error("Could not index %s: %s", repo_id, e)
            return CrawlResult.of_error(self, e, repo_id=repo_id)

    def _crawl_next_page(self, results: queue.Queue) -> bool:
        if self.next_page == 0:
            results.put(CrawlResult.of_exhaustion(self))
            # The next run, after the backoff, starts a fresh pass.
            self.next_page = 1
            return False

        try:
            page = self.client.search_repositories(self.language, self.next_page)
        except GitHubAPIError as e:
            # This puts the crawler to sleep; the page is retried next run.
            results.put(CrawlResult.of_error(self, e))
            return False

        if not page.repositories:
            logger.info("Did not find any GitHub repositories on page %d", self.next_page)
        self.next_page = page.next_page

        for info in page.repositories:
            result = self.crawl_repository(info)
            # Skipped repositories produce nothing to send.
            if result.is_error or result.snapshot is not None:
                results.put(result)

        return True
