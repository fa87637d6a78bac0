"""Unit tests for the query pipeline and the QA chain."""

from __future__ import annotations

from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from langchain_core.documents import Document
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from conftest import RecordingQAChain
from vector_qa.embeddings.fake import FakeEmbeddings
from vector_qa.exceptions import LLMError
from vector_qa.ingestion.chunker import TextChunker
from vector_qa.ingestion.pipeline import IngestionPipeline
from vector_qa.qa.chain import StuffQAChain
from vector_qa.qa.pipeline import QueryAnswer, QueryPipeline, concatenate_matches
from vector_qa.qa.prompts import build_qa_prompt
from vector_qa.retrieval.memory_store import InMemoryVectorIndex
from vector_qa.retrieval.models import QueryMatch

INDEX = "docs"

MakeDocument = Callable[[str, int], Document]


@pytest_asyncio.fixture()
async def index(memory_index: InMemoryVectorIndex, fake_embeddings: FakeEmbeddings) -> InMemoryVectorIndex:
    await memory_index.create_index(INDEX, fake_embeddings.dimension)
    return memory_index


def _pipeline(index, embeddings, chain, **kwargs) -> QueryPipeline:  # noqa: ANN001
    return QueryPipeline(index, embeddings, chain, index_name=INDEX, **kwargs)


def _match(text: str, score: float = 0.5) -> QueryMatch:
    return QueryMatch(id=text, score=score, metadata={"page_content": text})


# ── concatenate_matches ───────────────────────────────────────────────


class TestConcatenateMatches:
    def test_space_joined_in_order(self) -> None:
        assert concatenate_matches([_match("a"), _match("b c"), _match("d")]) == "a b c d"

    def test_truncated_when_limited(self) -> None:
        assert concatenate_matches([_match("abcdef"), _match("ghij")], max_chars=8) == "abcdef g"

    def test_missing_text_is_empty(self) -> None:
        assert concatenate_matches([QueryMatch(id="x", score=0.1), _match("y")]) == " y"


# ── QueryPipeline ─────────────────────────────────────────────────────


class TestQueryPipeline:
    @pytest.mark.asyncio
    async def test_no_matches_skips_language_model(
        self, index: InMemoryVectorIndex, fake_embeddings: FakeEmbeddings, qa_chain: RecordingQAChain
    ) -> None:
        result = await _pipeline(index, fake_embeddings, qa_chain).answer("anything?")

        assert result == QueryAnswer(question="anything?")
        assert result.answered is False
        assert qa_chain.calls == []
        assert fake_embeddings.query_calls == 1

    @pytest.mark.asyncio
    async def test_matches_stuffed_into_single_completion(
        self,
        index: InMemoryVectorIndex,
        fake_embeddings: FakeEmbeddings,
        qa_chain: RecordingQAChain,
        make_document: MakeDocument,
    ) -> None:
        ingestion = IngestionPipeline(index, fake_embeddings, TextChunker(chunk_size=12))
        await ingestion.ingest(INDEX, [make_document("a.txt", 3)])

        result = await _pipeline(index, fake_embeddings, qa_chain).answer("What is in a.txt?")

        assert result.answer == "canned answer"
        assert result.answered is True
        assert len(result.matches) == 3
        assert len(qa_chain.calls) == 1

        documents, question = qa_chain.calls[0]
        assert question == "What is in a.txt?"
        assert len(documents) == 1
        assert documents[0].page_content == " ".join(m.text for m in result.matches)
        for text in ("doc00000", "doc00001", "doc00002"):
            assert text in documents[0].page_content

    @pytest.mark.asyncio
    async def test_top_k_limits_matches_and_requests_values(
        self, fake_embeddings: FakeEmbeddings, qa_chain: RecordingQAChain
    ) -> None:
        index = MagicMock()
        index.query = AsyncMock(return_value=[_match(f"m{i}") for i in range(10)])

        result = await _pipeline(index, fake_embeddings, qa_chain).answer("q")

        index.query.assert_awaited_once()
        args, kwargs = index.query.call_args
        assert args[0] == INDEX
        assert kwargs == {"top_k": 10, "include_metadata": True, "include_values": True}
        assert len(result.matches) == 10
        assert qa_chain.calls[0][0][0].page_content == " ".join(f"m{i}" for i in range(10))

    @pytest.mark.asyncio
    async def test_index_returns_at_most_top_k(
        self,
        index: InMemoryVectorIndex,
        fake_embeddings: FakeEmbeddings,
        qa_chain: RecordingQAChain,
        make_document: MakeDocument,
    ) -> None:
        ingestion = IngestionPipeline(index, fake_embeddings, TextChunker(chunk_size=12))
        await ingestion.ingest(INDEX, [make_document("a.txt", 15)])

        result = await _pipeline(index, fake_embeddings, qa_chain, top_k=10).answer("q")

        assert len(result.matches) == 10

    @pytest.mark.asyncio
    async def test_question_template_applied(
        self, fake_embeddings: FakeEmbeddings, qa_chain: RecordingQAChain
    ) -> None:
        index = MagicMock()
        index.query = AsyncMock(return_value=[_match("ctx")])
        pipeline = _pipeline(index, fake_embeddings, qa_chain, question_template="{question} Answer briefly.")

        result = await pipeline.answer("Why?")

        assert qa_chain.calls[0][1] == "Why? Answer briefly."
        assert result.question == "Why?"

    @pytest.mark.asyncio
    async def test_context_limit_applied(
        self, fake_embeddings: FakeEmbeddings, qa_chain: RecordingQAChain
    ) -> None:
        index = MagicMock()
        index.query = AsyncMock(return_value=[_match("x" * 50), _match("y" * 50)])

        await _pipeline(index, fake_embeddings, qa_chain, max_context_chars=60).answer("q")

        assert len(qa_chain.calls[0][0][0].page_content) == 60

    @pytest.mark.asyncio
    async def test_chain_errors_propagate(self, fake_embeddings: FakeEmbeddings) -> None:
        index = MagicMock()
        index.query = AsyncMock(return_value=[_match("ctx")])
        chain = MagicMock()
        chain.arun = AsyncMock(side_effect=LLMError("down"))

        with pytest.raises(LLMError, match="down"):
            await _pipeline(index, fake_embeddings, chain).answer("q")

    def test_template_requires_placeholder(
        self, fake_embeddings: FakeEmbeddings, qa_chain: RecordingQAChain
    ) -> None:
        with pytest.raises(ValueError, match="question"):
            _pipeline(InMemoryVectorIndex(), fake_embeddings, qa_chain, question_template="no slot")


# ── StuffQAChain & prompts ────────────────────────────────────────────


class TestStuffQAChain:
    def test_prompt_contains_context_and_question(self) -> None:
        messages = build_qa_prompt("Who?", [Document(page_content="Alice"), Document(page_content="Bob")])
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert "Alice\n\nBob" in messages[1].content
        assert "Question: Who?" in messages[1].content

    @pytest.mark.asyncio
    async def test_returns_stripped_model_text(self) -> None:
        chain = StuffQAChain(FakeListChatModel(responses=["  Paris.  "]))
        answer = await chain.arun([Document(page_content="France's capital is Paris.")], "Capital?")
        assert answer == "Paris."

    @pytest.mark.asyncio
    async def test_model_failure_wrapped(self) -> None:
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("rate limited"))
        with pytest.raises(LLMError, match="rate limited"):
            await StuffQAChain(llm).arun([Document(page_content="x")], "q")

    @pytest.mark.asyncio
    async def test_multipart_content_joined(self) -> None:
        llm = MagicMock()
        llm.ainvoke = AsyncMock(
            return_value=MagicMock(content=[{"type": "text", "text": "Hello "}, "world"])
        )
        assert await StuffQAChain(llm).arun([], "q") == "Hello world"
