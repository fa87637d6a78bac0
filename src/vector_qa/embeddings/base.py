"""The embedding capability shared by every provider."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Embeddings(Protocol):
    """Anything that can turn text into vectors.

    Providers are selected by injection; nothing needs to subclass this.
    """

    async def embed_query(self, text: str) -> list[float]:
        """Return the embedding for a single query string."""
        ...

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Return one embedding per text, index-aligned with *texts*."""
        ...
