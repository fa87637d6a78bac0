"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from typing import Callable

import pytest
from langchain_core.documents import Document

from vector_qa.embeddings.fake import FakeEmbeddings
from vector_qa.retrieval.memory_store import InMemoryVectorIndex

DIMENSION = 8

# Chunk size at which ``make_document(source, n)`` splits into exactly n chunks.
PARAGRAPH_CHUNK_SIZE = 12


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class RecordingQAChain:
    """QA chain fake that remembers every call and returns a canned answer."""

    def __init__(self, answer: str = "canned answer") -> None:
        self.answer = answer
        self.calls: list[tuple[list[Document], str]] = []

    async def arun(self, documents: list[Document], question: str) -> str:
        self.calls.append((documents, question))
        return self.answer


@pytest.fixture()
def make_document() -> Callable[[str, int], Document]:
    """Factory for documents made of ``n`` eight-character paragraphs."""

    def _make(source: str, paragraphs: int) -> Document:
        text = "\n\n".join(f"doc{i:05d}" for i in range(paragraphs))
        return Document(page_content=text, metadata={"source": source})

    return _make


@pytest.fixture()
def fake_embeddings() -> FakeEmbeddings:
    return FakeEmbeddings(DIMENSION)


@pytest.fixture()
def memory_index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex()


@pytest.fixture()
def qa_chain() -> RecordingQAChain:
    return RecordingQAChain()
