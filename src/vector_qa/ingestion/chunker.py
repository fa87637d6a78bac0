"""Text chunking strategies."""

from __future__ import annotations

from typing import Any

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

# Paragraph, line, word, then a hard character cut.
DEFAULT_SEPARATORS = ["\n\n", "\n", " ", ""]


def line_range(text: str, start: int, chunk: str) -> dict[str, dict[str, int]]:
    """Return the 1-based inclusive ``{"lines": {"from", "to"}}`` span of *chunk*.

    *start* is the character offset of *chunk* inside *text*.
    """
    first = text.count("\n", 0, start) + 1
    return {"lines": {"from": first, "to": first + chunk.count("\n")}}


class TextChunker:
    """Split text into bounded-size chunks, preferring structural boundaries.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.
    separators:
        Split points tried in order before falling back to a hard cut.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 0,
        separators: list[str] | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap} for size {chunk_size}"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
            separators=separators or DEFAULT_SEPARATORS,
        )

    def split_text(self, text: str) -> list[str]:
        """Return the ordered chunk strings for *text*."""
        return self._splitter.split_text(text)

    def create_documents(self, text: str, metadata: dict[str, Any] | None = None) -> list[Document]:
        """Chunk *text* into Documents carrying *metadata* plus a ``loc`` line span."""
        chunks: list[Document] = []
        cursor = 0
        for piece in self.split_text(text):
            # Chunks come back in order, so searching forward from the
            # previous match locates each one even when text repeats.
            offset = text.find(piece, max(cursor - self.chunk_overlap, 0))
            if offset < 0:
                offset = cursor
            cursor = offset + len(piece)
            chunks.append(
                Document(
                    page_content=piece,
                    metadata={**(metadata or {}), "loc": line_range(text, offset, piece)},
                )
            )
        return chunks

    def split_documents(self, documents: list[Document]) -> list[Document]:
        """Chunk every document, preserving its metadata on each chunk."""
        chunks: list[Document] = []
        for doc in documents:
            chunks.extend(self.create_documents(doc.page_content, doc.metadata))
        return chunks
