"""Logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "INFO", trace_elastic: bool = False) -> None:
    """Send all log records through rich, with thread names for crawl threads."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    logging.basicConfig(
        level=level.upper(),
        format="[%(threadName)s] %(message)s",
        handlers=[handler],
        force=True,
    )
    logging.getLogger("metagodoc.elastic").setLevel(
        logging.DEBUG if trace_elastic else logging.WARNING
    )
    # PyGithub and httpx log every request at DEBUG/INFO.
    logging.getLogger("github").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
