"""Answer a question from the documents stored in the vector index.

Usage::

    pipeline = QueryPipeline(index, embeddings, chain, index_name="docs")
    result = await pipeline.answer("What does the setup script do?")
    if result.answered:
        print(result.answer)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from langchain_core.documents import Document
from pydantic import BaseModel, Field

from vector_qa.retrieval.models import QueryMatch

if TYPE_CHECKING:
    from vector_qa.embeddings.base import Embeddings
    from vector_qa.qa.chain import QAChain
    from vector_qa.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 10


class QueryAnswer(BaseModel):
    """Outcome of :meth:`QueryPipeline.answer`.

    ``answer`` is ``None`` when the index returned no matches, in which
    case the language model was not consulted.
    """

    question: str
    answer: str | None = None
    matches: list[QueryMatch] = Field(default_factory=list)

    @property
    def answered(self) -> bool:
        return self.answer is not None


def concatenate_matches(matches: list[QueryMatch], max_chars: int | None = None) -> str:
    """Space-join the stored text of *matches* in index order.

    When *max_chars* is set the result is cut to at most that many characters.
    """
    context = " ".join(m.text for m in matches)
    if max_chars is not None and len(context) > max_chars:
        logger.warning("Truncating context from %d to %d characters", len(context), max_chars)
        context = context[:max_chars]
    return context


class QueryPipeline:
    """Embed a question, retrieve the nearest chunks and ask the LLM.

    Parameters
    ----------
    index:
        Backend holding the ingested vectors.
    embeddings:
        Provider used to embed the question; must match the one used at
        ingestion time.
    chain:
        Completion service receiving the retrieved context.
    index_name:
        Index to query.
    top_k:
        Number of nearest chunks retrieved.
    max_context_chars:
        Optional cap on the context handed to the chain; ``None`` keeps
        everything.
    question_template:
        Format string applied to the question before it reaches the
        chain; must contain ``{question}``.
    """

    def __init__(
        self,
        index: VectorIndexBase,
        embeddings: Embeddings,
        chain: QAChain,
        *,
        index_name: str,
        top_k: int = DEFAULT_TOP_K,
        max_context_chars: int | None = None,
        question_template: str = "{question}",
    ) -> None:
        if "{question}" not in question_template:
            raise ValueError("question_template must contain '{question}'")
        self.index = index
        self.embeddings = embeddings
        self.chain = chain
        self.index_name = index_name
        self.top_k = top_k
        self.max_context_chars = max_context_chars
        self.question_template = question_template

    async def retrieve(self, question: str) -> list[QueryMatch]:
        """Return the :attr:`top_k` nearest matches for *question*."""
        logger.info("Querying vector index %s...", self.index_name)
        vector = await self.embeddings.embed_query(question)
        matches = await self.index.query(
            self.index_name,
            vector,
            top_k=self.top_k,
            include_metadata=True,
            include_values=True,
        )
        logger.info("Found %d matches", len(matches))
        logger.debug("Matched ids: %s", [m.id for m in matches])
        return matches

    async def answer(self, question: str) -> QueryAnswer:
        """Answer *question*, skipping the LLM entirely when nothing matches."""
        matches = await self.retrieve(question)
        if not matches:
            logger.info("There are no matches, so the language model will not be queried.")
            return QueryAnswer(question=question)

        context = concatenate_matches(matches, self.max_context_chars)
        prompt_question = self.question_template.format(question=question)
        logger.info("Asking question: %s", prompt_question)

        answer = await self.chain.arun([Document(page_content=context)], prompt_question)
        logger.info("Answer: %s", answer)
        return QueryAnswer(question=question, answer=answer, matches=matches)
