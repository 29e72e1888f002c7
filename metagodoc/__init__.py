"""Crawls Go repositories and indexes their packages for search."""

__version__ = "0.1.0"
