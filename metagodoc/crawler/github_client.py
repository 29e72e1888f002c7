"""GitHub API client for repository discovery and issue counts."""

import logging
from datetime import datetime, timezone

from github import Auth, Github, GithubException
from rich.console import Console

from .models import IssueInfo, IssuePage, RepoInfo, SearchPage

console = Console()
logger = logging.getLogger(__name__)

# GitHub's search API never returns more than this many results for a query.
SEARCH_RESULT_LIMIT = 1000


class GitHubAPIError(Exception):
    """A call to the GitHub API failed."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"GitHub {operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


def _utc(value: datetime | None) -> datetime:
    """PyGithub returns naive datetimes on older releases; treat them as UTC."""
    if value is None:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _next_page(page: int, returned: int, per_page: int, total: int) -> int:
    """Work out the page cursor that follows ``page``."""
    if returned < per_page:
        return 0
    if page * per_page >= total:
        return 0
    return page + 1


class GitHubClient:
    """Client for interacting with GitHub API."""

    def __init__(self, token: str, per_page: int = 100):
        self.token = token
        self.per_page = per_page
        self.gh = Github(auth=Auth.Token(token), per_page=per_page) if token else None

    def authenticate(self) -> bool:
        """Verify authentication and connection."""
        if self.gh is None:
            console.print("[red]✗[/red] No GitHub token configured")
            return False
        try:
            user = self.gh.get_user()
            console.print("[green]✓[/green] Connected to GitHub")
            console.print(f"  User: {user.login}")
            return True
        except GithubException as e:
            console.print(f"[red]✗[/red] Authentication failed: {e}")
            return False

    def search_repositories(self, language: str, page: int) -> SearchPage:
        """Fetch one page of a language-scoped repository search.

        Pages are numbered from 1, like the REST API. The returned page's
        ``next_page`` is 0 once the results are exhausted.
        """
        query = f"language:{language}"
        logger.info("Searching for repositories where %s, page %d", query, page)
        try:
            results = self.gh.search_repositories(query=query)
            items = results.get_page(page - 1)
            total = min(results.totalCount, SEARCH_RESULT_LIMIT)
            repos = [self._repo_to_info(r) for r in items]
        except GithubException as e:
            raise GitHubAPIError(f"search page {page}", e) from e

        logger.info("Found %d repositories on page %d", len(repos), page)
        return SearchPage(
            repositories=repos,
            next_page=_next_page(page, len(repos), self.per_page, total),
        )

    def list_issues(self, owner: str, name: str, page: int) -> IssuePage:
        """Fetch one page of all issues (open and closed, PRs included)."""
        full_name = f"{owner}/{name}"
        try:
            repo = self.gh.get_repo(full_name)
            items = repo.get_issues(state="all").get_page(page - 1)
            issues = [
                IssueInfo(
                    is_pull_request=i.pull_request is not None,
                    closed_at=_utc(i.closed_at) if i.closed_at else None,
                )
                for i in items
            ]
        except GithubException as e:
            raise GitHubAPIError(f"issue listing for {full_name}", e) from e

        next_page = page + 1 if len(issues) >= self.per_page else 0
        return IssuePage(issues=issues, next_page=next_page)

    def get_repository(self, full_name: str) -> RepoInfo:
        """Look up a single repository by ``owner/name``."""
        try:
            return self._repo_to_info(self.gh.get_repo(full_name))
        except GithubException as e:
            raise GitHubAPIError(f"lookup of {full_name}", e) from e

    def _repo_to_info(self, repo) -> RepoInfo:
        """Convert a PyGithub repository object to RepoInfo."""
        return RepoInfo(
            name=repo.name,
            full_name=repo.full_name,
            description=repo.description,
            owner=repo.owner.login,
            html_url=repo.html_url,
            clone_url=repo.clone_url,
            stars=repo.stargazers_count,
            forks=repo.forks_count,
            is_fork=repo.fork,
            created_at=_utc(repo.created_at),
            pushed_at=_utc(repo.pushed_at),
            default_branch=repo.default_branch or "master",
        )
