"""Main entry point for the metagodoc indexer."""

import argparse
import logging
import os
from datetime import timedelta
from pathlib import Path

from rich.console import Console

from .config import load_config
from .crawler.base import ResultKind
from .crawler.github import GitHubCrawler
from .crawler.github_client import GitHubClient
from .log import setup_logging
from .repository.mirror import CloneLocks
from .scheduler import Scheduler
from .store.index import ElasticsearchIndex, SearchIndexError
from .store.mapping import REPOSITORY_MAPPING
from .store.writer import IndexWriter, IndexWriteError

console = Console()
logger = logging.getLogger(__name__)


def prepare_cache_root(config: dict) -> Path:
    """Make sure the clone cache can be written to."""
    root = Path(config["cache_root"])
    try:
        (root / "repos").mkdir(parents=True, exist_ok=True)
    except OSError as e:
        console.print(f"[red]✗[/red] Cache root {root} is unusable: {e}")
        raise SystemExit(1)
    if not os.access(root / "repos", os.W_OK):
        console.print(f"[red]✗[/red] Cache root {root} is not writable")
        raise SystemExit(1)
    return root


def connect_index(config: dict) -> ElasticsearchIndex:
    es_config = config["elasticsearch"]
    index = ElasticsearchIndex(
        url=es_config["url"],
        index=es_config["index"],
        trace=es_config.get("trace", False),
    )
    try:
        index.ping()
    except SearchIndexError as e:
        console.print(f"[red]✗[/red] Elasticsearch is unreachable: {e}")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] Connected to Elasticsearch at {index.url}")
    return index


def build_github_crawler(config: dict, cache_root: Path, locks: CloneLocks) -> GitHubCrawler:
    """Create the GitHub source. Bad credentials end the process."""
    gh_config = config["github"]
    client = GitHubClient(token=gh_config.get("token", ""))
    try:
        crawler = GitHubCrawler(
            client,
            cache_root,
            skip_list=gh_config.get("skip_list") or [],
            language=gh_config.get("language", "go"),
            sleep_duration=timedelta(minutes=gh_config.get("sleep_minutes", 15)),
            locks=locks,
        )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}. Set METAGODOC_GITHUB_TOKEN.")
        raise SystemExit(1)

    if not client.authenticate():
        raise SystemExit(1)
    return crawler


def run_scheduler(config: dict) -> None:
    """Crawl every source forever."""
    cache_root = prepare_cache_root(config)
    index = connect_index(config)
    locks = CloneLocks()
    sources = [build_github_crawler(config, cache_root, locks)]

    sched_config = config["scheduler"]
    scheduler = Scheduler(
        sources,
        IndexWriter(index),
        queue_size=sched_config.get("queue_size", 100),
        index_workers=sched_config.get("index_workers", 4),
    )
    console.print(f"[bold]Scheduling {len(sources)} crawler(s)[/bold]")
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping[/yellow]")
        scheduler.shutdown(wait=False)


def run_crawl_one(config: dict, locator: str) -> int:
    """Build and index a single repository."""
    cache_root = prepare_cache_root(config)
    index = connect_index(config)
    crawler = build_github_crawler(config, cache_root, CloneLocks())

    result = crawler.crawl_one(locator)
    if result.kind is ResultKind.SKIP:
        console.print(f"[yellow]{result.repo_id} is on the skip list[/yellow]")
        return 0
    if result.kind is not ResultKind.SNAPSHOT:
        console.print(f"[red]✗[/red] {result.error or result.kind.value}")
        return 1

    try:
        IndexWriter(index).upsert(result.snapshot)
    except IndexWriteError as e:
        console.print(f"[red]✗[/red] {e}")
        return 1

    snapshot = result.snapshot
    console.print(
        f"[green]✓[/green] {snapshot.id}: {snapshot.status.value}, "
        f"{len(snapshot.refs)} refs, "
        f"{sum(len(r.packages) for r in snapshot.refs)} packages"
    )
    return 0


def run_init_index(config: dict) -> int:
    index = connect_index(config)
    if index.ensure_index(REPOSITORY_MAPPING):
        console.print(f"[green]✓[/green] Created index {index.index_name}")
    else:
        console.print(f"Index {index.index_name} already exists")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Crawl Go repositories and index their packages",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: config/config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        help="Override the configured log level (DEBUG, INFO, ...)",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("run", help="Run the crawl scheduler until interrupted")
    one = subparsers.add_parser("crawl-one", help="Index one repository by URL")
    one.add_argument("url", help="e.g. https://github.com/stretchr/testify")
    subparsers.add_parser("init-index", help="Create the index with its mapping")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 2

    config = load_config(args.config)
    setup_logging(
        args.log_level or config["logging"]["level"],
        trace_elastic=config["elasticsearch"].get("trace", False),
    )

    if args.command == "run":
        run_scheduler(config)
        return 0
    if args.command == "crawl-one":
        return run_crawl_one(config, args.url)
    return run_init_index(config)


if __name__ == "__main__":
    raise SystemExit(main())
