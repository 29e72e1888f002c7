"""Crawl sources."""

from .base import CrawlResult, CrawlSource, ResultKind
from .github_client import GitHubAPIError, GitHubClient
from .models import IssueInfo, IssuePage, RepoInfo, SearchPage

__all__ = [
    "CrawlResult",
    "CrawlSource",
    "ResultKind",
    "GitHubAPIError",
    "GitHubClient",
    "IssueInfo",
    "IssuePage",
    "RepoInfo",
    "SearchPage",
]
