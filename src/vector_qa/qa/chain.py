"""Question-answering chains: context documents + question → answer text."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from vector_qa.exceptions import LLMError
from vector_qa.qa.prompts import build_qa_prompt

if TYPE_CHECKING:
    from langchain_core.documents import Document
    from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)


class QAChain(Protocol):
    """A completion service answering *question* from *documents*."""

    async def arun(self, documents: list[Document], question: str) -> str: ...


class StuffQAChain:
    """Put all documents into one prompt and ask the chat model once.

    Parameters
    ----------
    llm:
        Any LangChain chat model (``ChatOpenAI`` in production).
    """

    def __init__(self, llm: BaseChatModel) -> None:
        self.llm = llm

    async def arun(self, documents: list[Document], question: str) -> str:
        messages = build_qa_prompt(question, documents)
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as exc:
            raise LLMError(f"Completion request failed: {exc}") from exc

        content = response.content
        if not isinstance(content, str):
            # Multi-part content: keep only the text parts.
            content = "".join(
                part if isinstance(part, str) else str(part.get("text", "")) for part in content
            )
        return content.strip()
