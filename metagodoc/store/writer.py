"""Writes repository snapshots to the search index."""

import logging

from ..repository.snapshot import RepositorySnapshot
from .index import ElasticsearchIndex, SearchIndexError

logger = logging.getLogger(__name__)


class IndexWriteError(Exception):
    """A snapshot could not be written to the index."""

    def __init__(self, repo_id: str, cause: Exception):
        super().__init__(f"Could not index {repo_id}: {cause}")
        self.repo_id = repo_id
        self.cause = cause


class IndexWriter:
    """Full-document upserts keyed by repository ID."""

    def __init__(self, index: ElasticsearchIndex):
        self.index = index

    def upsert(self, snapshot: RepositorySnapshot) -> None:
        """Replace the document for ``snapshot.id`` with the snapshot.

        The existence check only feeds the log. It still fails the write when
        it errors, since that usually means the index is unreachable.
        """
        repo_id = snapshot.id
        url = self.index.document_url(repo_id)
        try:
            if self.index.exists(repo_id):
                logger.info("%s already exists at %s?pretty", repo_id, url)
            else:
                logger.info("Did not find any repo where the ID is %s", repo_id)

            self.index.index(repo_id, snapshot.to_document())
        except SearchIndexError as e:
            raise IndexWriteError(repo_id, e) from e

        logger.info("Wrote repository record at %s?pretty", url)
