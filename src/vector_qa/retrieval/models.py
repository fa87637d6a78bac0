"""Domain models for vector records and query matches."""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, Field

# Remote stores only accept flat scalar (or string-list) metadata values.
MetadataValue = Union[str, int, float, bool, list[str]]

# Metadata keys written alongside every chunk.
TEXT_KEY = "page_content"
SOURCE_PATH_KEY = "source_path"


class VectorRecord(BaseModel):
    """A single vector written to the index.

    Attributes
    ----------
    id:
        ``"<source>_<chunk index>"``. Stable across re-ingestion, so an
        upsert overwrites the previous version of the chunk.
    values:
        The embedding.
    metadata:
        Chunk metadata plus the raw chunk text and its source path.
    """

    id: str
    values: list[float]
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Return the ``{id, values, metadata}`` dict vector stores accept."""
        return {"id": self.id, "values": self.values, "metadata": dict(self.metadata)}


class QueryMatch(BaseModel):
    """A single nearest-neighbour hit returned by the index."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)
    values: list[float] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """The raw chunk text stored at ingestion time (``""`` if absent)."""
        return str(self.metadata.get(TEXT_KEY) or "")

    @property
    def source(self) -> str:
        return str(self.metadata.get(SOURCE_PATH_KEY) or self.metadata.get("source") or "unknown")
