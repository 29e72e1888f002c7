"""Search index storage."""

from .index import ElasticsearchIndex, SearchIndexError
from .writer import IndexWriteError, IndexWriter

__all__ = ["ElasticsearchIndex", "SearchIndexError", "IndexWriteError", "IndexWriter"]
