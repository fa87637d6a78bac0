"""Pinecone implementation of the vector-index abstraction."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Sequence, TypeVar

from pinecone import Pinecone, ServerlessSpec

from vector_qa.exceptions import VectorIndexError
from vector_qa.retrieval.base import VectorIndexBase
from vector_qa.retrieval.models import QueryMatch, VectorRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PineconeVectorIndex(VectorIndexBase):
    """Pinecone-backed vector index.

    The Pinecone SDK is synchronous, so every call runs in a worker
    thread via :func:`asyncio.to_thread`.

    Parameters
    ----------
    api_key:
        Pinecone API key.
    cloud / region:
        Where new serverless indexes are created.
    client:
        Pre-built ``Pinecone`` client (tests inject a fake here).
    """

    def __init__(
        self,
        api_key: str = "",
        *,
        cloud: str = "aws",
        region: str = "us-east-1",
        client: Any = None,
    ) -> None:
        self._client = client if client is not None else Pinecone(api_key=api_key)
        self._spec = ServerlessSpec(cloud=cloud, region=region)
        self._handles: dict[str, Any] = {}

    # -- VectorIndexBase overrides --------------------------------------------

    async def list_indexes(self) -> list[str]:
        indexes = await self._call("list indexes", self._client.list_indexes)
        return list(indexes.names())

    async def create_index(self, name: str, dimension: int, metric: str = "cosine") -> None:
        await self._call(
            f"create index {name!r}",
            lambda: self._client.create_index(
                name=name, dimension=dimension, metric=metric, spec=self._spec
            ),
        )

    async def upsert(self, name: str, records: Sequence[VectorRecord]) -> None:
        vectors = [r.to_payload() for r in records]
        index = self._index(name)
        await self._call(f"upsert into {name!r}", lambda: index.upsert(vectors=vectors))

    async def query(
        self,
        name: str,
        vector: list[float],
        *,
        top_k: int = 10,
        include_metadata: bool = True,
        include_values: bool = False,
    ) -> list[QueryMatch]:
        index = self._index(name)
        response = await self._call(
            f"query {name!r}",
            lambda: index.query(
                vector=vector,
                top_k=top_k,
                include_metadata=include_metadata,
                include_values=include_values,
            ),
        )
        return [
            QueryMatch(
                id=m.id,
                score=m.score if m.score is not None else 0.0,
                metadata=dict(m.metadata or {}),
                values=list(m.values or []),
            )
            for m in response.matches or []
        ]

    # -- internals ------------------------------------------------------------

    def _index(self, name: str) -> Any:
        if name not in self._handles:
            self._handles[name] = self._client.Index(name)
        return self._handles[name]

    @staticmethod
    async def _call(action: str, func: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(func)
        except Exception as exc:
            logger.error("Pinecone failed to %s: %s", action, exc)
            raise VectorIndexError(f"Pinecone failed to {action}: {exc}") from exc
