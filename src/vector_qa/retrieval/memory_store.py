"""In-process vector index with brute-force similarity search."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from vector_qa.exceptions import VectorIndexError
from vector_qa.retrieval.base import VectorIndexBase
from vector_qa.retrieval.models import QueryMatch, VectorRecord


def cosine_similarity(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


def dot_product(a: list[float], b: list[float]) -> float:
    return sum(x * y for x, y in zip(a, b))


def negative_euclidean(a: list[float], b: list[float]) -> float:
    return -math.dist(a, b)


_METRICS = {
    "cosine": cosine_similarity,
    "dotproduct": dot_product,
    "euclidean": negative_euclidean,
}


@dataclass
class _Index:
    dimension: int
    metric: str
    records: dict[str, VectorRecord] = field(default_factory=dict)


class InMemoryVectorIndex(VectorIndexBase):
    """Dict-backed index that behaves like a remote one.

    Dimension mismatches are rejected with :class:`VectorIndexError`,
    mirroring how hosted stores refuse vectors of the wrong size.
    """

    def __init__(self) -> None:
        self._indexes: dict[str, _Index] = {}
        self.create_calls = 0
        self.upsert_calls: list[tuple[str, int]] = []

    async def list_indexes(self) -> list[str]:
        return list(self._indexes)

    async def create_index(self, name: str, dimension: int, metric: str = "cosine") -> None:
        self.create_calls += 1
        if name in self._indexes:
            raise VectorIndexError(f"Index {name!r} already exists")
        if metric not in _METRICS:
            raise VectorIndexError(f"Unsupported metric: {metric!r}")
        self._indexes[name] = _Index(dimension=dimension, metric=metric)

    async def upsert(self, name: str, records: Sequence[VectorRecord]) -> None:
        index = self._get(name)
        for record in records:
            self._check_dimension(index, record.values)
        self.upsert_calls.append((name, len(records)))
        for record in records:
            index.records[record.id] = record

    async def query(
        self,
        name: str,
        vector: list[float],
        *,
        top_k: int = 10,
        include_metadata: bool = True,
        include_values: bool = False,
    ) -> list[QueryMatch]:
        index = self._get(name)
        self._check_dimension(index, vector)
        score = _METRICS[index.metric]

        scored = sorted(
            ((score(vector, r.values), r) for r in index.records.values()),
            key=lambda pair: pair[0],
            reverse=True,
        )
        return [
            QueryMatch(
                id=record.id,
                score=value,
                metadata=dict(record.metadata) if include_metadata else {},
                values=list(record.values) if include_values else [],
            )
            for value, record in scored[:top_k]
        ]

    def records(self, name: str) -> dict[str, VectorRecord]:
        """Snapshot of the records stored in *name*, keyed by id."""
        return dict(self._get(name).records)

    def _get(self, name: str) -> _Index:
        try:
            return self._indexes[name]
        except KeyError:
            raise VectorIndexError(f"Index {name!r} does not exist") from None

    @staticmethod
    def _check_dimension(index: _Index, values: list[float]) -> None:
        if len(values) != index.dimension:
            raise VectorIndexError(
                f"Vector dimension {len(values)} does not match index dimension {index.dimension}"
            )
