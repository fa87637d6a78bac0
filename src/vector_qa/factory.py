"""Build the pipeline's collaborators from :class:`~vector_qa.config.Settings`.

This is the only place outside the entry points where settings are
read; everything it builds receives explicit arguments.
"""

from __future__ import annotations

import logging

from vector_qa.config import Settings
from vector_qa.embeddings.base import Embeddings
from vector_qa.embeddings.http import HttpEmbeddings
from vector_qa.ingestion.chunker import TextChunker
from vector_qa.ingestion.pipeline import IngestionPipeline
from vector_qa.qa.chain import QAChain, StuffQAChain
from vector_qa.qa.pipeline import QueryPipeline
from vector_qa.retrieval.base import VectorIndexBase
from vector_qa.retrieval.memory_store import InMemoryVectorIndex
from vector_qa.retrieval.provisioner import ensure_index
from vector_qa.retry import RetryPolicy

logger = logging.getLogger(__name__)


def build_vector_index(settings: Settings) -> VectorIndexBase:
    """Return the backend selected by ``settings.index_backend``."""
    backend = settings.index_backend
    logger.info("Using %s vector index backend", backend)
    if backend == "pinecone":
        from vector_qa.retrieval.pinecone_store import PineconeVectorIndex

        return PineconeVectorIndex(
            settings.pinecone_api_key,
            cloud=settings.pinecone_cloud,
            region=settings.pinecone_region,
        )
    if backend == "chroma":
        from vector_qa.retrieval.chroma_store import ChromaVectorIndex

        return ChromaVectorIndex(settings.chroma_host, settings.chroma_port)
    if backend == "memory":
        return InMemoryVectorIndex()
    raise ValueError(f"Unsupported index backend: {backend!r}")


def build_embeddings(settings: Settings) -> HttpEmbeddings:
    return HttpEmbeddings(
        settings.embedding_origin,
        batch_size=settings.embedding_batch_size,
        strip_new_lines=settings.embedding_strip_new_lines,
        max_concurrency=settings.embedding_max_concurrency,
        retry_policy=RetryPolicy(max_attempts=settings.embedding_max_attempts),
        model=settings.embedding_model or None,
        timeout=settings.embedding_timeout,
    )


def build_qa_chain(settings: Settings) -> StuffQAChain:
    from vector_qa.qa.llm import get_llm

    llm = get_llm(
        settings.llm_model_name,
        api_key=settings.openai_api_key,
        base_url=settings.llm_base_url,
        temperature=settings.llm_temperature,
    )
    return StuffQAChain(llm)


class ServiceContainer:
    """Holds the wired-up pipelines for one process.

    Collaborators can be injected (tests pass fakes); missing ones are
    built from *settings*.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        index: VectorIndexBase | None = None,
        embeddings: Embeddings | None = None,
        chain: QAChain | None = None,
    ) -> None:
        self.settings = settings
        self.index = index if index is not None else build_vector_index(settings)
        self.embeddings = embeddings if embeddings is not None else build_embeddings(settings)
        self._chain = chain

    @property
    def chain(self) -> QAChain:
        # Built on first use so ingestion-only runs need no LLM credentials.
        if self._chain is None:
            self._chain = build_qa_chain(self.settings)
        return self._chain

    @property
    def ingestion(self) -> IngestionPipeline:
        return IngestionPipeline(
            self.index,
            self.embeddings,
            TextChunker(chunk_size=self.settings.chunk_size),
            batch_size=self.settings.upsert_batch_size,
        )

    @property
    def query(self) -> QueryPipeline:
        return QueryPipeline(
            self.index,
            self.embeddings,
            self.chain,
            index_name=self.settings.index_name,
            top_k=self.settings.top_k,
            max_context_chars=self.settings.max_context_chars,
            question_template=self.settings.question_template,
        )

    async def provision(self) -> bool:
        """Create the configured index if it does not exist yet."""
        return await ensure_index(
            self.index,
            self.settings.index_name,
            self.settings.index_dimension,
            metric=self.settings.index_metric,
            init_wait=self.settings.index_init_timeout,
        )

    async def shutdown(self) -> None:
        aclose = getattr(self.embeddings, "aclose", None)
        if aclose is not None:
            await aclose()
