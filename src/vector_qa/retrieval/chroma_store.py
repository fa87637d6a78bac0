"""Chroma implementation of the vector-index abstraction."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Sequence, TypeVar

import chromadb

from vector_qa.exceptions import VectorIndexError
from vector_qa.retrieval.base import VectorIndexBase
from vector_qa.retrieval.models import QueryMatch, VectorRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Our metric names → Chroma ``hnsw:space`` values.
_SPACE_MAP = {
    "cosine": "cosine",
    "euclidean": "l2",
    "dotproduct": "ip",
}


def _distance_to_score(distance: float, space: str) -> float:
    """Convert a Chroma distance into a higher-is-better similarity."""
    if space == "cosine":
        return 1.0 - distance
    if space == "ip":
        return -distance
    # L2 distances are unbounded; map to a 0-1 similarity score.
    return 1.0 / (1.0 + distance)


def _flatten_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Chroma metadata values must be flat str/int/float/bool."""
    return {k: v for k, v in metadata.items() if isinstance(v, (str, int, float, bool))}


class ChromaVectorIndex(VectorIndexBase):
    """Chroma-backed vector index; one collection per index.

    The dimension is recorded in the collection metadata, since Chroma
    fixes it on first insert rather than at creation.

    Parameters
    ----------
    host / port:
        Chroma server address.
    client:
        Pre-built Chroma client (e.g. ``chromadb.EphemeralClient()``).
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8000,
        *,
        client: Any = None,
    ) -> None:
        self._client = client if client is not None else chromadb.HttpClient(host=host, port=port)

    # -- VectorIndexBase overrides --------------------------------------------

    async def list_indexes(self) -> list[str]:
        collections = await self._call("list collections", self._client.list_collections)
        # Older clients return Collection objects, newer ones plain names.
        return [getattr(c, "name", c) for c in collections]

    async def create_index(self, name: str, dimension: int, metric: str = "cosine") -> None:
        space = _SPACE_MAP.get(metric)
        if space is None:
            raise VectorIndexError(f"Unsupported metric for Chroma: {metric!r}")
        await self._call(
            f"create collection {name!r}",
            lambda: self._client.create_collection(
                name=name,
                metadata={"hnsw:space": space, "dimension": dimension},
            ),
        )

    async def upsert(self, name: str, records: Sequence[VectorRecord]) -> None:
        if not records:
            return
        collection = await self._collection(name)
        await self._call(
            f"upsert into {name!r}",
            lambda: collection.upsert(
                ids=[r.id for r in records],
                embeddings=[r.values for r in records],
                metadatas=[_flatten_metadata(r.metadata) for r in records],
            ),
        )

    async def query(
        self,
        name: str,
        vector: list[float],
        *,
        top_k: int = 10,
        include_metadata: bool = True,
        include_values: bool = False,
    ) -> list[QueryMatch]:
        collection = await self._collection(name)
        include = ["distances", "metadatas"]
        if include_values:
            include.append("embeddings")

        results = await self._call(
            f"query {name!r}",
            lambda: collection.query(query_embeddings=[vector], n_results=top_k, include=include),
        )

        space = (collection.metadata or {}).get("hnsw:space", "l2")
        ids = results.get("ids", [[]])[0]
        distances = (results.get("distances") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        embeddings = results.get("embeddings")
        values = embeddings[0] if embeddings is not None and include_values else [None] * len(ids)

        matches: list[QueryMatch] = []
        for match_id, dist, meta, vec in zip(ids, distances, metas, values):
            matches.append(
                QueryMatch(
                    id=match_id,
                    score=_distance_to_score(dist, space),
                    metadata=dict(meta or {}) if include_metadata else {},
                    values=[float(v) for v in vec] if vec is not None else [],
                )
            )
        return matches

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(self._client.heartbeat)
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    async def _collection(self, name: str) -> Any:
        return await self._call(f"open collection {name!r}", lambda: self._client.get_collection(name))

    @staticmethod
    async def _call(action: str, func: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(func)
        except Exception as exc:
            logger.error("Chroma failed to %s: %s", action, exc)
            raise VectorIndexError(f"Chroma failed to {action}: {exc}") from exc
