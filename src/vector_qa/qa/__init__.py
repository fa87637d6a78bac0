"""
QA — question answering over the vector index.

Public API
----------
- :class:`QueryPipeline` — embed → retrieve → answer.
- :class:`QueryAnswer` — result of a query.
- :class:`StuffQAChain` — single-call "stuff" completion over LangChain chat models.
- :func:`get_llm` — build the configured chat model.
"""

from vector_qa.qa.chain import QAChain, StuffQAChain
from vector_qa.qa.pipeline import QueryAnswer, QueryPipeline

__all__ = ["QAChain", "QueryAnswer", "QueryPipeline", "StuffQAChain", "get_llm"]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import get_llm to avoid pulling in langchain_openai at import time."""
    if name == "get_llm":
        from vector_qa.qa.llm import get_llm

        return get_llm
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
