"""
Embeddings — text → fixed-dimension vectors.

Public surface
--------------
- :class:`Embeddings` — the capability every provider satisfies.
- :class:`HttpEmbeddings` — client for an OpenAI-compatible ``/v1/embeddings`` endpoint.
- :class:`FakeEmbeddings` — deterministic offline provider.
"""

from vector_qa.embeddings.base import Embeddings
from vector_qa.embeddings.fake import FakeEmbeddings
from vector_qa.embeddings.http import HttpEmbeddings

__all__ = ["Embeddings", "FakeEmbeddings", "HttpEmbeddings"]
