"""Runs crawl sources forever, backing each one off on its own cadence.

Each available source gets its own daemon thread running ``crawl_all``. All
of them push onto one bounded queue, which a single drain thread empties:
snapshots are handed to a thread pool that writes them to the index, errors
put the source that sent them to sleep.
"""

import logging
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable

from .crawler.base import CrawlResult, CrawlSource, ResultKind
from .store.writer import IndexWriter

logger = logging.getLogger(__name__)

DEFAULT_WAIT = timedelta(minutes=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunFinished:
    """Queued behind the last result of one ``crawl_all`` run."""
    source: CrawlSource


class Scheduler:
    """Owns the crawl sources and their sleep/wake bookkeeping.

    A source is in exactly one of three states: available, in flight (its
    ``crawl_all`` is running or its results are still queued), or sleeping
    until a wake time. A source can report an error while still in flight;
    it is then both in flight and sleeping, and is only woken up once every
    result of its run has been handled.
    """

    def __init__(
        self,
        sources: Iterable[CrawlSource],
        writer: IndexWriter,
        queue_size: int = 100,
        index_workers: int = 4,
        default_wait: timedelta = DEFAULT_WAIT,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.writer = writer
        self.default_wait = default_wait
        self.clock = clock
        self.sleep = sleep
        self.results: queue.Queue = queue.Queue(maxsize=queue_size)

        self._available: list[CrawlSource] = list(sources)
        self._sleeping: dict[CrawlSource, datetime] = {}
        self._in_flight: set[CrawlSource] = set()
        self._lock = threading.Lock()

        self._executor = ThreadPoolExecutor(
            max_workers=index_workers,
            thread_name_prefix="index-writer",
        )
        self._drain_thread: threading.Thread | None = None

    @property
    def available(self) -> list[CrawlSource]:
        with self._lock:
            return list(self._available)

    @property
    def sleeping(self) -> dict[CrawlSource, datetime]:
        with self._lock:
            return dict(self._sleeping)

    @property
    def in_flight(self) -> set[CrawlSource]:
        with self._lock:
            return set(self._in_flight)

    def wake_sources(self, now: datetime) -> list[CrawlSource]:
        """Move every source whose wake time has passed to available."""
        woken = []
        with self._lock:
            for source, wake_at in list(self._sleeping.items()):
                if wake_at <= now and source not in self._in_flight:
                    del self._sleeping[source]
                    self._available.append(source)
                    woken.append(source)
        for source in woken:
            logger.info("%s crawler is awake", source.name)
        return woken

    def next_wait(self, now: datetime) -> timedelta:
        """How long to block before the next sleeping source is due."""
        with self._lock:
            pending = [
                wake_at
                for source, wake_at in self._sleeping.items()
                if source not in self._in_flight
            ]
        if not pending:
            return self.default_wait
        return max(min(pending) - now, timedelta(0))

    def put_to_sleep(self, source: CrawlSource, now: datetime | None = None) -> datetime:
        wake_at = (now or self.clock()) + source.sleep_duration
        with self._lock:
            if source in self._available:
                self._available.remove(source)
            self._sleeping[source] = wake_at
        logger.info("%s crawler is sleeping until %s", source.name, wake_at.isoformat())
        return wake_at

    def run_once(self) -> list[threading.Thread]:
        """One turn of the scheduling loop.

        Returns the threads started for this turn, which is empty when the
        loop blocked instead.
        """
        now = self.clock()
        self.wake_sources(now)

        with self._lock:
            to_run = self._available
            self._available = []
            self._in_flight.update(to_run)

        if not to_run:
            wait = self.next_wait(now)
            logger.debug("No crawlers available, waiting %s", wait)
            self.sleep(wait.total_seconds())
            return []

        threads = []
        for source in to_run:
            logger.info("Starting %s crawler", source.name)
            thread = threading.Thread(
                target=self._run_source,
                args=(source,),
                name=f"crawl-{source.name}",
                daemon=True,
            )
            thread.start()
            threads.append(thread)
        return threads

    def run_forever(self) -> None:
        """Schedule crawls until the process is stopped."""
        self.start_drain()
        while True:
            self.run_once()

    def start_drain(self) -> threading.Thread:
        if self._drain_thread is None or not self._drain_thread.is_alive():
            self._drain_thread = threading.Thread(
                target=self._drain,
                name="crawl-results",
                daemon=True,
            )
            self._drain_thread.start()
        return self._drain_thread

    def handle_result(self, result: CrawlResult | RunFinished) -> Future | None:
        """Act on one result taken off the queue."""
        source = result.source

        if isinstance(result, RunFinished):
            with self._lock:
                self._in_flight.discard(source)
            logger.info("%s crawler run finished", source.name)
            return None

        if result.kind is ResultKind.SNAPSHOT:
            future = self._executor.submit(self.writer.upsert, result.snapshot)
            future.add_done_callback(self._log_write)
            return future

        if result.kind is ResultKind.ERROR:
            if result.exhausted:
                logger.info("%s crawler is exhausted", source.name)
            else:
                logger.error("%s crawler error: %s", source.name, result.error)
            self.put_to_sleep(source)
            return None

        logger.debug("%s crawler: %s %s", source.name, result.kind.value, result.repo_id or "")
        return None

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _run_source(self, source: CrawlSource) -> None:
        try:
            source.crawl_all(self.results)
        except Exception as e:
            # A crashing source is parked like any other failing one.
            logger.exception("%s crawler crashed", source.name)
            self.results.put(CrawlResult.of_error(source, e))
        finally:
            self.results.put(RunFinished(source))

    def _drain(self) -> None:
        while True:
            result = self.results.get()
            try:
                self.handle_result(result)
            except Exception:
                logger.exception("Could not handle result from %s", result.source.name)
            finally:
                self.results.task_done()

    @staticmethod
    def _log_write(future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("%s", error)
