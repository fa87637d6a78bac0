"""Client for a remote OpenAI-compatible embedding endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from vector_qa.exceptions import EmbeddingError
from vector_qa.retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

EMBEDDINGS_PATH = "/v1/embeddings"


def chunk_list(items: list[str], size: int) -> list[list[str]]:
    """Split *items* into consecutive slices of at most *size* elements."""
    return [items[i : i + size] for i in range(0, len(items), size)]


class HttpEmbeddings:
    """Embeddings served over HTTP by ``POST {origin}/v1/embeddings``.

    Parameters
    ----------
    origin:
        Scheme, host and port of the embedding service.
    batch_size:
        Maximum number of texts sent in a single request.
    strip_new_lines:
        Replace newlines with spaces before embedding.  Most providers
        recommend this; disable it for models trained on raw text.
    max_concurrency:
        Maximum number of requests in flight at once.
    retry_policy:
        Retry settings applied to every request.
    model:
        Optional model name forwarded in the request body.
    timeout:
        Per-request timeout in seconds.  Ignored when *client* is given.
    client:
        Pre-built ``httpx.AsyncClient``.  When omitted one is created and
        owned by this instance; close it with :meth:`aclose`.
    """

    def __init__(
        self,
        origin: str,
        *,
        batch_size: int = 512,
        strip_new_lines: bool = True,
        max_concurrency: int = 2,
        retry_policy: RetryPolicy | None = None,
        model: str | None = None,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if max_concurrency <= 0:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")

        self.url = origin.rstrip("/") + EMBEDDINGS_PATH
        self.batch_size = batch_size
        self.strip_new_lines = strip_new_lines
        self.max_concurrency = max_concurrency
        self.retry_policy = retry_policy or RetryPolicy()
        self.model = model or None
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._semaphore: asyncio.Semaphore | None = None
        self._semaphore_loop: asyncio.AbstractEventLoop | None = None

    # -- Embeddings -----------------------------------------------------------

    async def embed_query(self, text: str) -> list[float]:
        data = await self._embedding_with_retry(self._prepare(text))
        if not data:
            raise EmbeddingError("Embedding service returned no vectors for the query")
        return data[0]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        batches = chunk_list([self._prepare(t) for t in texts], self.batch_size)
        logger.debug("Embedding %d texts in %d batches", len(texts), len(batches))

        responses = await asyncio.gather(
            *(self._embedding_with_retry(batch) for batch in batches)
        )

        embeddings: list[list[float]] = []
        for batch, vectors in zip(batches, responses):
            if len(vectors) != len(batch):
                raise EmbeddingError(
                    f"Embedding service returned {len(vectors)} vectors for a batch of {len(batch)}"
                )
            embeddings.extend(vectors)
        return embeddings

    # -- lifecycle ------------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpEmbeddings:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- internals ------------------------------------------------------------

    def _prepare(self, text: str) -> str:
        return text.replace("\n", " ") if self.strip_new_lines else text

    def _concurrency_limit(self) -> asyncio.Semaphore:
        # A semaphore belongs to the loop it first waits on; rebuild it per loop.
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
            self._semaphore_loop = loop
        return self._semaphore

    async def _embedding_with_retry(self, payload: str | list[str]) -> list[list[float]]:
        async with self._concurrency_limit():
            return await call_with_retry(lambda: self._post(payload), self.retry_policy)

    async def _post(self, payload: str | list[str]) -> list[list[float]]:
        body: dict[str, Any] = {"input": payload}
        if self.model:
            body["model"] = self.model

        response = await self._client.post(self.url, json=body)
        response.raise_for_status()

        try:
            return [item["embedding"] for item in response.json()["data"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise EmbeddingError(f"Malformed embedding response from {self.url}: {exc}") from exc
