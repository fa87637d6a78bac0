"""Deterministic embeddings for tests and offline development."""

from __future__ import annotations

import hashlib
import math


class FakeEmbeddings:
    """Hash-based embeddings: equal texts always map to equal vectors.

    Vectors are unit-length so cosine similarity behaves sensibly.  Call
    counters let tests assert how often the provider was consulted.
    """

    def __init__(self, dimension: int = 8) -> None:
        if dimension <= 0:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self.dimension = dimension
        self.query_calls = 0
        self.document_calls = 0

    def vector_for(self, text: str) -> list[float]:
        values: list[float] = []
        counter = 0
        while len(values) < self.dimension:
            digest = hashlib.sha256(f"{counter}:{text}".encode()).digest()
            values.extend((byte - 127.5) / 127.5 for byte in digest)
            counter += 1
        values = values[: self.dimension]
        norm = math.sqrt(sum(v * v for v in values)) or 1.0
        return [v / norm for v in values]

    async def embed_query(self, text: str) -> list[float]:
        self.query_calls += 1
        return self.vector_for(text)

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls += 1
        return [self.vector_for(t) for t in texts]
