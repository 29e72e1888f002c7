"""GitHub-hosted repositories."""

import logging

from ..crawler.github_client import GitHubAPIError, GitHubClient
from ..crawler.models import RepoInfo
from .base import Repository
from .snapshot import Tickets

logger = logging.getLogger(__name__)

GO_CORE_ID = "github.com/golang/go"


class GitHubRepository(Repository):
    """A repository hosted on GitHub."""

    wrapped_errors = Repository.wrapped_errors + (GitHubAPIError,)

    def __init__(self, info: RepoInfo, client: GitHubClient, cache_root, **kwargs):
        super().__init__(info, cache_root, **kwargs)
        self.client = client

    @property
    def is_core(self) -> bool:
        return self.id == GO_CORE_ID

    def browse_url(self, ref: str) -> str:
        return f"{self.info.html_url}/tree/{ref}"

    def tickets(self) -> tuple[Tickets, Tickets]:
        """Count open and closed issues and pull requests.

        GitHub lists pull requests as issues; an item without a closed
        timestamp is open.
        """
        logger.info("  getting issues")
        issues = Tickets(url=f"{self.info.html_url}/issues")
        pull_requests = Tickets(url=f"{self.info.html_url}/pulls")

        page = 1
        while page:
            result = self.client.list_issues(self.info.owner, self.info.name, page)
            for issue in result.issues:
                tickets = pull_requests if issue.is_pull_request else issues
                if issue.closed_at is None:
                    tickets.open += 1
                else:
                    tickets.closed += 1
            page = result.next_page

        return issues, pull_requests
