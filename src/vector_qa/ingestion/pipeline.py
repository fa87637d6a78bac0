"""Chunk → embed → upsert, one document at a time."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from vector_qa.ingestion.chunker import TextChunker
from vector_qa.retrieval.models import SOURCE_PATH_KEY, TEXT_KEY, VectorRecord

if TYPE_CHECKING:
    from langchain_core.documents import Document

    from vector_qa.embeddings.base import Embeddings
    from vector_qa.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)

UPSERT_BATCH_SIZE = 100


class IngestionReport(BaseModel):
    """Counts describing one :meth:`IngestionPipeline.ingest` run."""

    documents: int = 0
    skipped_documents: int = 0
    records: int = 0
    batches: int = 0


def _scalar_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Serialize non-scalar metadata values so remote stores accept them."""
    flat: dict[str, Any] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            flat[key] = value
        else:
            flat[key] = json.dumps(value)
    return flat


def build_vector_records(
    source: str,
    chunks: list[Document],
    embeddings: list[list[float]],
) -> list[VectorRecord]:
    """Pair each chunk with its embedding as a :class:`VectorRecord`.

    Ids are ``"<source>_<index>"`` so re-ingesting a document overwrites
    its previous records instead of duplicating them.
    """
    if len(chunks) != len(embeddings):
        raise ValueError(f"Got {len(embeddings)} embeddings for {len(chunks)} chunks of {source}")

    records: list[VectorRecord] = []
    for idx, (chunk, values) in enumerate(zip(chunks, embeddings)):
        metadata = _scalar_metadata(chunk.metadata)
        metadata[TEXT_KEY] = chunk.page_content
        metadata[SOURCE_PATH_KEY] = source
        records.append(VectorRecord(id=f"{source}_{idx}", values=values, metadata=metadata))
    return records


class IngestionPipeline:
    """Write documents into a vector index.

    Parameters
    ----------
    index:
        Backend receiving the upserts.  The target index must already
        exist (see :func:`vector_qa.retrieval.ensure_index`).
    embeddings:
        Provider used to embed chunk texts.
    chunker:
        Splits each document; defaults to 1000-character chunks.
    batch_size:
        Maximum number of records per upsert request.
    """

    def __init__(
        self,
        index: VectorIndexBase,
        embeddings: Embeddings,
        chunker: TextChunker | None = None,
        *,
        batch_size: int = UPSERT_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.index = index
        self.embeddings = embeddings
        self.chunker = chunker or TextChunker()
        self.batch_size = batch_size

    async def ingest(self, index_name: str, documents: list[Document]) -> IngestionReport:
        """Chunk, embed and upsert every document into *index_name*.

        Documents are processed sequentially and their upsert batches never
        mix.  A failed upsert aborts the run; earlier batches stay written.
        """
        logger.info("Ingesting %d documents into %s", len(documents), index_name)
        report = IngestionReport()
        for doc in documents:
            written, batches = await self.ingest_document(index_name, doc)
            if written:
                report.documents += 1
            else:
                report.skipped_documents += 1
            report.records += written
            report.batches += batches
        logger.info(
            "Ingested %d records from %d documents in %d batches",
            report.records,
            report.documents,
            report.batches,
        )
        return report

    async def ingest_document(self, index_name: str, doc: Document) -> tuple[int, int]:
        """Ingest a single document; returns ``(records written, upsert batches)``."""
        if not doc.metadata.get("source"):
            raise ValueError("Document metadata must carry a 'source'; record ids are built from it")
        source = str(doc.metadata["source"])
        logger.info("Processing document: %s", source)

        chunks = self.chunker.create_documents(doc.page_content, {**doc.metadata, "source": source})
        if not chunks:
            logger.info("Document %s produced no chunks; skipping", source)
            return 0, 0
        logger.info("Text split into %d chunks", len(chunks))

        embeddings = await self.embeddings.embed_documents([c.page_content for c in chunks])
        records = build_vector_records(source, chunks, embeddings)

        batches = 0
        batch: list[VectorRecord] = []
        for idx, record in enumerate(records):
            batch.append(record)
            if len(batch) == self.batch_size or idx == len(records) - 1:
                await self.index.upsert(index_name, batch)
                batches += 1
                logger.debug("Upserted batch %d (%d records) for %s", batches, len(batch), source)
                batch = []
        return len(records), batches
