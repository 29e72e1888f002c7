"""Elasticsearch document store, spoken to over its REST API."""

import logging
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)
trace_logger = logging.getLogger("metagodoc.elastic")


class SearchIndexError(Exception):
    """The search index could not be reached or rejected a request."""


class ElasticsearchIndex:
    """One Elasticsearch index holding one document per repository ID."""

    def __init__(
        self,
        url: str = "http://localhost:9200",
        index: str = "metagodoc-repository",
        trace: bool = False,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        self.url = url.rstrip("/")
        self.index_name = index
        self.trace = trace
        self.client = client or httpx.Client(base_url=self.url, timeout=timeout)

    def _doc_path(self, doc_id: str) -> str:
        # IDs contain slashes ("github.com/owner/name").
        return f"/{self.index_name}/_doc/{quote(doc_id, safe='')}"

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if self.trace:
            trace_logger.debug("%s %s%s", method, self.url, path)
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise SearchIndexError(f"{method} {path}: {e}") from e
        if self.trace:
            trace_logger.debug("-> %d", response.status_code)
        return response

    def _check(self, response: httpx.Response, what: str) -> None:
        if response.is_success:
            return
        raise SearchIndexError(
            f"{what} failed with HTTP {response.status_code}: {response.text[:500]}"
        )

    def ping(self) -> None:
        """Raise SearchIndexError unless the cluster answers."""
        self._check(self._request("GET", "/"), "ping")

    def exists(self, doc_id: str) -> bool:
        response = self._request("HEAD", self._doc_path(doc_id))
        if response.status_code == 404:
            return False
        self._check(response, f"exists({doc_id})")
        return True

    def get(self, doc_id: str) -> dict | None:
        response = self._request("GET", self._doc_path(doc_id))
        if response.status_code == 404:
            return None
        self._check(response, f"get({doc_id})")
        return response.json().get("_source")

    def index(self, doc_id: str, document: dict) -> None:
        """Store ``document`` under ``doc_id``, replacing whatever was there."""
        response = self._request("PUT", self._doc_path(doc_id), json=document)
        self._check(response, f"index({doc_id})")

    def document_url(self, doc_id: str) -> str:
        return f"{self.url}{self._doc_path(doc_id)}"

    def index_exists(self) -> bool:
        response = self._request("HEAD", f"/{self.index_name}")
        if response.status_code == 404:
            return False
        self._check(response, f"index_exists({self.index_name})")
        return True

    def create(self, mapping: dict) -> None:
        """Create the index with an explicit mapping."""
        response = self._request("PUT", f"/{self.index_name}", json={"mappings": mapping})
        self._check(response, f"create({self.index_name})")
        logger.info("Created index %s", self.index_name)

    def ensure_index(self, mapping: dict) -> bool:
        """Create the index unless it exists. Returns True if it was created."""
        if self.index_exists():
            return False
        self.create(mapping)
        return True

    def close(self) -> None:
        self.client.close()
