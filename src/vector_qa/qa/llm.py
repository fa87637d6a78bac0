"""LLM initialisation — single place to swap providers.

Supports two modes:

1. **OpenAI cloud** (default) — pass the OpenAI API key.
2. **OpenAI-compatible server** — pass ``base_url`` pointing at a local
   server (vLLM, llama.cpp, …) exposing ``/v1/chat/completions``.
"""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

logger = logging.getLogger(__name__)


def get_llm(
    model: str = "gpt-4o-mini",
    *,
    api_key: str = "",
    base_url: str = "",
    temperature: float = 0.0,
) -> ChatOpenAI:
    """Return a chat model for answering questions.

    A dummy API key (``"EMPTY"``) is used for custom servers because
    LangChain requires a non-empty value.
    """
    kwargs: dict = {
        "model": model,
        "temperature": temperature,
    }

    if base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", base_url)
        kwargs["base_url"] = base_url
        kwargs["api_key"] = api_key or "EMPTY"
    else:
        kwargs["api_key"] = api_key

    return ChatOpenAI(**kwargs)
