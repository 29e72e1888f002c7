"""Shared data models for crawl sources."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class RepoInfo:
    """Repository metadata as reported by the hosting platform."""
    name: str
    full_name: str
    description: str | None
    owner: str
    html_url: str
    clone_url: str
    stars: int
    forks: int
    is_fork: bool
    created_at: datetime
    pushed_at: datetime
    default_branch: str


@dataclass
class IssueInfo:
    """The two issue attributes the indexer cares about."""
    is_pull_request: bool
    closed_at: datetime | None = None


@dataclass
class SearchPage:
    """One page of repository search results."""
    repositories: list[RepoInfo] = field(default_factory=list)
    # 0 means there are no more pages.
    next_page: int = 0


@dataclass
class IssuePage:
    """One page of an issue listing."""
    issues: list[IssueInfo] = field(default_factory=list)
    next_page: int = 0
