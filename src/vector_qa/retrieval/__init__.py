"""
Retrieval — vector-index backends and index provisioning.

This module wraps the vector store behind a clean interface so that the
pipelines never need to know which service is backing the index.

Public surface
--------------
- :class:`VectorIndexBase` — abstract backend (subclass for Weaviate, etc.).
- :class:`PineconeVectorIndex` — default Pinecone backend.
- :class:`ChromaVectorIndex` — Chroma backend.
- :class:`InMemoryVectorIndex` — in-process backend for tests and local runs.
- :class:`VectorRecord`, :class:`QueryMatch` — data models.
- :func:`ensure_index` — create the index when it is missing.
"""

from vector_qa.retrieval.base import VectorIndexBase
from vector_qa.retrieval.memory_store import InMemoryVectorIndex
from vector_qa.retrieval.models import QueryMatch, VectorRecord
from vector_qa.retrieval.provisioner import ensure_index

__all__ = [
    "ChromaVectorIndex",
    "InMemoryVectorIndex",
    "PineconeVectorIndex",
    "QueryMatch",
    "VectorIndexBase",
    "VectorRecord",
    "ensure_index",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import SDK-backed indexes to avoid pulling in their clients at import time."""
    if name == "PineconeVectorIndex":
        from vector_qa.retrieval.pinecone_store import PineconeVectorIndex

        return PineconeVectorIndex
    if name == "ChromaVectorIndex":
        from vector_qa.retrieval.chroma_store import ChromaVectorIndex

        return ChromaVectorIndex
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
