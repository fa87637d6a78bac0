"""Unit tests for the ingestion pipeline and document loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest
import pytest_asyncio
from langchain_core.documents import Document

from vector_qa.embeddings.fake import FakeEmbeddings
from vector_qa.exceptions import VectorIndexError
from vector_qa.ingestion.chunker import TextChunker
from vector_qa.ingestion.loader import load_directory
from vector_qa.ingestion.pipeline import IngestionPipeline, build_vector_records
from vector_qa.retrieval.memory_store import InMemoryVectorIndex

INDEX = "docs"
CHUNK_SIZE = 12

MakeDocument = Callable[[str, int], Document]


@pytest_asyncio.fixture()
async def index(memory_index: InMemoryVectorIndex, fake_embeddings: FakeEmbeddings) -> InMemoryVectorIndex:
    await memory_index.create_index(INDEX, fake_embeddings.dimension)
    return memory_index


@pytest.fixture()
def pipeline(index: InMemoryVectorIndex, fake_embeddings: FakeEmbeddings) -> IngestionPipeline:
    return IngestionPipeline(index, fake_embeddings, TextChunker(chunk_size=CHUNK_SIZE))


# ── build_vector_records ──────────────────────────────────────────────


class TestBuildVectorRecords:
    def test_ids_metadata_and_values(self) -> None:
        chunks = [
            Document(page_content="first", metadata={"source": "a.txt", "loc": {"lines": {"from": 1, "to": 1}}}),
            Document(page_content="second", metadata={"source": "a.txt", "loc": {"lines": {"from": 3, "to": 4}}}),
        ]
        records = build_vector_records("a.txt", chunks, [[0.1], [0.2]])

        assert [r.id for r in records] == ["a.txt_0", "a.txt_1"]
        assert records[1].values == [0.2]
        meta = records[1].metadata
        assert meta["page_content"] == "second"
        assert meta["source_path"] == "a.txt"
        assert meta["source"] == "a.txt"
        assert json.loads(meta["loc"]) == {"lines": {"from": 3, "to": 4}}

    def test_none_metadata_dropped(self) -> None:
        chunks = [Document(page_content="x", metadata={"author": None})]
        records = build_vector_records("s", chunks, [[1.0]])
        assert "author" not in records[0].metadata

    def test_length_mismatch_rejected(self) -> None:
        with pytest.raises(ValueError, match="1 embeddings for 2 chunks"):
            build_vector_records("s", [Document(page_content="a"), Document(page_content="b")], [[1.0]])


# ── IngestionPipeline ─────────────────────────────────────────────────

class TestIngestionPipeline:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("chunks", "batches"),
        [(1, [1]), (99, [99]), (100, [100]), (101, [100, 1]), (250, [100, 100, 50])],
    )
    async def test_records_upserted_in_batches(
        self,
        pipeline: IngestionPipeline,
        index: InMemoryVectorIndex,
        make_document: MakeDocument,
        chunks: int,
        batches: list[int],
    ) -> None:
        report = await pipeline.ingest(INDEX, [make_document("a.txt", chunks)])

        assert [size for _, size in index.upsert_calls] == batches
        assert set(index.records(INDEX)) == {f"a.txt_{i}" for i in range(chunks)}
        assert report.records == chunks
        assert report.batches == len(batches)

    @pytest.mark.asyncio
    async def test_one_embedding_call_per_document(
        self,
        pipeline: IngestionPipeline,
        fake_embeddings: FakeEmbeddings,
        make_document: MakeDocument,
    ) -> None:
        await pipeline.ingest(INDEX, [make_document("a.txt", 150), make_document("b.txt", 3)])
        assert fake_embeddings.document_calls == 2

    @pytest.mark.asyncio
    async def test_batches_do_not_span_documents(
        self, pipeline: IngestionPipeline, index: InMemoryVectorIndex, make_document: MakeDocument
    ) -> None:
        report = await pipeline.ingest(INDEX, [make_document("a.txt", 150), make_document("b.txt", 30)])

        assert [size for _, size in index.upsert_calls] == [100, 50, 30]
        assert len(index.records(INDEX)) == 180
        assert report.documents == 2

    @pytest.mark.asyncio
    async def test_reingestion_overwrites(
        self, pipeline: IngestionPipeline, index: InMemoryVectorIndex, make_document: MakeDocument
    ) -> None:
        await pipeline.ingest(INDEX, [make_document("a.txt", 12)])
        first = set(index.records(INDEX))
        await pipeline.ingest(INDEX, [make_document("a.txt", 12)])

        assert set(index.records(INDEX)) == first
        assert len(first) == 12

    @pytest.mark.asyncio
    async def test_stored_metadata_carries_text_and_location(
        self, pipeline: IngestionPipeline, index: InMemoryVectorIndex, make_document: MakeDocument
    ) -> None:
        await pipeline.ingest(INDEX, [make_document("a.txt", 3)])

        record = index.records(INDEX)["a.txt_1"]
        assert record.metadata["page_content"] == "doc00001"
        assert record.metadata["source_path"] == "a.txt"
        assert json.loads(record.metadata["loc"]) == {"lines": {"from": 3, "to": 3}}

    @pytest.mark.asyncio
    async def test_empty_document_is_skipped(
        self, pipeline: IngestionPipeline, index: InMemoryVectorIndex
    ) -> None:
        report = await pipeline.ingest(INDEX, [Document(page_content="", metadata={"source": "e.txt"})])

        assert index.upsert_calls == []
        assert report.skipped_documents == 1
        assert report.records == 0

    @pytest.mark.asyncio
    async def test_document_without_source_rejected(
        self, pipeline: IngestionPipeline, index: InMemoryVectorIndex
    ) -> None:
        documents = [Document(page_content="alpha"), Document(page_content="bravo")]

        with pytest.raises(ValueError, match="source"):
            await pipeline.ingest(INDEX, documents)

        assert index.upsert_calls == []
        assert index.records(INDEX) == {}

    @pytest.mark.asyncio
    async def test_failed_upsert_keeps_earlier_batches(
        self, pipeline: IngestionPipeline, index: InMemoryVectorIndex, make_document: MakeDocument
    ) -> None:
        original = index.upsert

        async def upsert_once(name: str, records: list) -> None:
            if index.upsert_calls:
                raise VectorIndexError("rejected")
            await original(name, records)

        index.upsert = upsert_once  # type: ignore[method-assign]

        with pytest.raises(VectorIndexError, match="rejected"):
            await pipeline.ingest(INDEX, [make_document("a.txt", 150)])

        assert len(index.records(INDEX)) == 100

    @pytest.mark.asyncio
    async def test_dimension_mismatch_surfaces_as_index_error(
        self,
        index: InMemoryVectorIndex,
        fake_embeddings: FakeEmbeddings,
        make_document: MakeDocument,
    ) -> None:
        wrong = FakeEmbeddings(fake_embeddings.dimension + 1)
        pipeline = IngestionPipeline(index, wrong, TextChunker(chunk_size=CHUNK_SIZE))
        with pytest.raises(VectorIndexError, match="dimension"):
            await pipeline.ingest(INDEX, [make_document("a.txt", 2)])

    def test_invalid_batch_size(self, fake_embeddings: FakeEmbeddings) -> None:
        with pytest.raises(ValueError):
            IngestionPipeline(InMemoryVectorIndex(), fake_embeddings, batch_size=0)


# ── Loader ────────────────────────────────────────────────────────────


def test_load_directory_reads_text_files(tmp_path: Path) -> None:
    (tmp_path / "b.txt").write_text("Bravo")
    (tmp_path / "a.txt").write_text("Alpha")
    (tmp_path / "skip.md").write_text("# ignored")

    docs = load_directory(tmp_path)

    assert [d.page_content for d in docs] == ["Alpha", "Bravo"]
    assert docs[0].metadata["source"].endswith("a.txt")


def test_load_directory_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_directory(tmp_path / "missing")
