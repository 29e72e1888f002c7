"""Tests for the GitHub crawl source."""

import queue
from datetime import timedelta

import pytest
from conftest import FakeGitHubClient, make_repo_info, make_snapshot

from metagodoc.crawler.base import CrawlResult, CrawlSource, ResultKind
from metagodoc.crawler.github import GitHubCrawler
from metagodoc.crawler.github_client import GitHubAPIError
from metagodoc.crawler.models import SearchPage
from metagodoc.repository.identity import repository_id


def drain(results: queue.Queue) -> list[CrawlResult]:
    items = []
    while not results.empty():
        items.append(results.get_nowait())
    return items


@pytest.fixture
def build_snapshots(monkeypatch):
    """Replace the git-backed build with an in-memory snapshot."""
    built = []

    def fake_crawl_repository(self, info):
        repo_id = repository_id(info.html_url)
        if repo_id in self.skip_list:
            return CrawlResult.of_skip(self, repo_id)
        built.append(repo_id)
        return CrawlResult.of_snapshot(self, make_snapshot(repo_id))

    monkeypatch.setattr(GitHubCrawler, "crawl_repository", fake_crawl_repository)
    return built


def test_requires_token(tmp_path):
    with pytest.raises(ValueError, match="access token"):
        GitHubCrawler(FakeGitHubClient(token=""), tmp_path)


def test_identity(tmp_path):
    crawler = GitHubCrawler(FakeGitHubClient(), tmp_path, sleep_duration=timedelta(minutes=5))
    assert crawler.name == "GitHub"
    assert crawler.sleep_duration == timedelta(minutes=5)
    assert crawler.next_page == 1


def test_results_follow_discovery_order(tmp_path, build_snapshots):
    client = FakeGitHubClient(pages={
        1: SearchPage([make_repo_info("a/one"), make_repo_info("b/two")], next_page=2),
        2: SearchPage([make_repo_info("c/three")], next_page=0),
    })
    crawler = GitHubCrawler(client, tmp_path)
    results = queue.Queue()

    crawler.crawl_all(results)

    items = drain(results)
    assert [r.repo_id for r in items[:-1]] == [
        "github.com/a/one",
        "github.com/b/two",
        "github.com/c/three",
    ]
    assert all(r.kind is ResultKind.SNAPSHOT for r in items[:-1])
    assert items[-1].is_error and items[-1].exhausted
    assert client.search_calls == [1, 2]


def test_exhaustion_resets_cursor_for_next_pass(tmp_path, build_snapshots):
    client = FakeGitHubClient(pages={1: SearchPage([make_repo_info("a/one")], next_page=0)})
    crawler = GitHubCrawler(client, tmp_path)

    crawler.crawl_all(queue.Queue())
    assert crawler.next_page == 1

    crawler.crawl_all(queue.Queue())
    assert client.search_calls == [1, 1]
    assert build_snapshots == ["github.com/a/one", "github.com/a/one"]


def test_search_error_keeps_cursor(tmp_path):
    client = FakeGitHubClient(search_error=GitHubAPIError("search", Exception("rate limited")))
    crawler = GitHubCrawler(client, tmp_path)
    crawler.next_page = 4
    results = queue.Queue()

    crawler.crawl_all(results)

    items = drain(results)
    assert len(items) == 1
    assert items[0].is_error
    assert not items[0].exhausted
    assert isinstance(items[0].error, GitHubAPIError)
    assert crawler.next_page == 4


def test_empty_page_ends_pass(tmp_path):
    crawler = GitHubCrawler(FakeGitHubClient(), tmp_path)
    results = queue.Queue()

    crawler.crawl_all(results)

    items = drain(results)
    assert len(items) == 1
    assert items[0].exhausted


def test_skip_listed_repository_is_never_touched(tmp_path):
    client = FakeGitHubClient(pages={
        1: SearchPage([make_repo_info("golang/go")], next_page=0),
    })
    crawler = GitHubCrawler(client, tmp_path, skip_list=["github.com/golang/go"])
    results = queue.Queue()

    crawler.crawl_all(results)

    items = drain(results)
    assert all(r.repo_id != "github.com/golang/go" for r in items)
    assert len(items) == 1 and items[0].exhausted
    assert client.issue_calls == []
    assert not (tmp_path / "repos" / "github.com" / "golang" / "go").exists()


def test_failed_repository_becomes_error_result(tmp_path):
    missing = tmp_path / "does-not-exist"
    client = FakeGitHubClient(pages={
        1: SearchPage([make_repo_info("a/broken", clone_url=str(missing))], next_page=0),
    })
    crawler = GitHubCrawler(client, tmp_path / "cache")
    results = queue.Queue()

    crawler.crawl_all(results)

    items = drain(results)
    assert items[0].is_error
    assert not items[0].exhausted
    assert items[0].repo_id == "github.com/a/broken"
    assert items[-1].exhausted


@pytest.mark.parametrize("locator", [
    "https://github.com/a/one",
    "github.com/a/one",
    "https://github.com/a/one.git",
    "https://github.com/a/one/",
])
def test_crawl_one_accepts_repository_urls(tmp_path, build_snapshots, locator):
    client = FakeGitHubClient(repos={"a/one": make_repo_info("a/one")})
    crawler = GitHubCrawler(client, tmp_path)

    result = crawler.crawl_one(locator)

    assert result.kind is ResultKind.SNAPSHOT
    assert result.repo_id == "github.com/a/one"
    assert client.lookup_calls == ["a/one"]


def test_crawl_one_rejects_other_urls(tmp_path):
    client = FakeGitHubClient()
    result = GitHubCrawler(client, tmp_path).crawl_one("https://gitlab.com/a/one")
    assert result.is_error
    assert client.lookup_calls == []


def test_crawl_one_unknown_repository(tmp_path):
    result = GitHubCrawler(FakeGitHubClient(), tmp_path).crawl_one("github.com/a/missing")
    assert result.is_error
    assert result.repo_id == "github.com/a/missing"


def test_crawl_one_honours_skip_list(tmp_path):
    client = FakeGitHubClient(repos={"golang/go": make_repo_info("golang/go")})
    crawler = GitHubCrawler(client, tmp_path, skip_list=["github.com/golang/go"])

    result = crawler.crawl_one("https://github.com/golang/go")

    assert result.kind is ResultKind.SKIP
    assert client.issue_calls == []


class QuietSource(CrawlSource):
    name = "quiet"
    sleep_duration = timedelta(minutes=1)

    def crawl_all(self, results):
        results.put(CrawlResult.of_exhaustion(self))


def test_targeted_crawl_defaults_to_not_supported():
    result = QuietSource().crawl_one("anything")
    assert result.kind is ResultKind.NOT_SUPPORTED
