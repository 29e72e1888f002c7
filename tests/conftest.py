"""Shared test fixtures."""

import os
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from metagodoc.crawler.github_client import GitHubAPIError
from metagodoc.crawler.models import IssueInfo, IssuePage, RepoInfo, SearchPage
from metagodoc.repository.snapshot import RepositorySnapshot, Tickets
from metagodoc.repository.status import ActivityStatus

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def git(cwd: Path, *args: str, when: datetime | None = None) -> str:
    """Run git with a fixed identity and, optionally, a fixed date."""
    env = {
        **os.environ,
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@example.com",
        "GIT_CONFIG_NOSYSTEM": "1",
    }
    if when is not None:
        stamp = when.strftime("%Y-%m-%dT%H:%M:%S +0000")
        env["GIT_AUTHOR_DATE"] = stamp
        env["GIT_COMMITTER_DATE"] = stamp
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


class Origin:
    """A local git repository standing in for the remote."""

    def __init__(self, path: Path, branch: str = "main"):
        self.path = path
        self.branch = branch
        path.mkdir(parents=True)
        git(path, "init", "--quiet")
        git(path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")

    def write(self, name: str, content: str) -> None:
        target = self.path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    def commit(self, message: str, when: datetime) -> str:
        git(self.path, "add", "--all")
        git(self.path, "commit", "--quiet", "--allow-empty", "-m", message, when=when)
        return git(self.path, "rev-parse", "HEAD").strip()

    def tag(self, name: str, ref: str = "HEAD") -> None:
        git(self.path, "tag", name, ref)


@pytest.fixture
def make_origin(tmp_path):
    """Factory for origin repositories inside tmp_path."""
    def factory(name: str = "origin", branch: str = "main") -> Origin:
        return Origin(tmp_path / name, branch)
    return factory


def make_repo_info(
    full_name: str = "example/lib",
    clone_url: str = "",
    is_fork: bool = False,
    created_at: datetime | None = None,
    pushed_at: datetime | None = None,
    default_branch: str = "main",
) -> RepoInfo:
    owner, name = full_name.split("/")
    return RepoInfo(
        name=name,
        full_name=full_name,
        description=f"The {name} repository",
        owner=owner,
        html_url=f"https://github.com/{full_name}",
        clone_url=clone_url or f"https://github.com/{full_name}.git",
        stars=42,
        forks=7,
        is_fork=is_fork,
        created_at=created_at or NOW - timedelta(days=365),
        pushed_at=pushed_at or NOW,
        default_branch=default_branch,
    )


def make_snapshot(repo_id: str = "github.com/example/lib") -> RepositorySnapshot:
    name = repo_id.rsplit("/", 1)[-1]
    return RepositorySnapshot(
        id=repo_id,
        name=name,
        full_name=repo_id.removeprefix("github.com/"),
        description="",
        owner="example",
        primary_url=f"https://{repo_id}",
        stars=1,
        forks=0,
        is_fork=False,
        created=NOW - timedelta(days=10),
        last_updated=NOW,
        last_crawled=NOW,
        issues=Tickets(url=f"https://{repo_id}/issues"),
        pull_requests=Tickets(url=f"https://{repo_id}/pulls"),
        status=ActivityStatus.ACTIVE,
    )


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient that records every call."""

    def __init__(
        self,
        pages: dict[int, SearchPage] | None = None,
        issues: dict[int, IssuePage] | None = None,
        repos: dict[str, RepoInfo] | None = None,
        token: str = "secret",
        search_error: Exception | None = None,
    ):
        self.token = token
        self.pages = pages or {}
        self.issues = issues or {}
        self.repos = repos or {}
        self.search_error = search_error
        self.search_calls: list[int] = []
        self.issue_calls: list[tuple[str, str, int]] = []
        self.lookup_calls: list[str] = []

    def authenticate(self) -> bool:
        return True

    def search_repositories(self, language: str, page: int) -> SearchPage:
        self.search_calls.append(page)
        if self.search_error is not None:
            raise self.search_error
        return self.pages.get(page, SearchPage())

    def list_issues(self, owner: str, name: str, page: int) -> IssuePage:
        self.issue_calls.append((owner, name, page))
        return self.issues.get(page, IssuePage())

    def get_repository(self, full_name: str) -> RepoInfo:
        self.lookup_calls.append(full_name)
        if full_name not in self.repos:
            raise GitHubAPIError(f"lookup of {full_name}", Exception("404 Not Found"))
        return self.repos[full_name]


@pytest.fixture
def issue_pages():
    """Two pages of issues: 2 open + 1 closed issues, 1 open + 2 closed PRs."""
    closed = NOW - timedelta(days=3)
    return {
        1: IssuePage(
            issues=[
                IssueInfo(is_pull_request=False),
                IssueInfo(is_pull_request=False, closed_at=closed),
                IssueInfo(is_pull_request=True),
            ],
            next_page=2,
        ),
        2: IssuePage(
            issues=[
                IssueInfo(is_pull_request=False),
                IssueInfo(is_pull_request=True, closed_at=closed),
                IssueInfo(is_pull_request=True, closed_at=closed),
            ],
            next_page=0,
        ),
    }
