"""Shared configuration loaded from environment / ``.env``.

Only the entry points (:mod:`vector_qa.factory`, :mod:`vector_qa.serving`,
:mod:`vector_qa.cli`) read :class:`Settings`.  Core components receive
their configuration as explicit constructor arguments.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings, populated from ``VECTOR_QA_*`` env vars or .env file."""

    # Vector index
    index_name: str = Field(default="vector-qa", description="Name of the remote vector index")
    index_backend: Literal["pinecone", "chroma", "memory"] = "pinecone"
    index_dimension: int = Field(default=1536, description="Must match the embedding model output")
    index_metric: str = "cosine"
    index_init_timeout: float = Field(
        default=80.0,
        description="Seconds to wait after creating an index for it to finish initializing",
    )

    # Pinecone
    pinecone_api_key: str = ""
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"

    # Chroma
    chroma_host: str = "localhost"
    chroma_port: int = 8000

    # Embedding service
    embedding_origin: str = Field(
        default="http://localhost:8080",
        description="Origin of the embedding service; requests go to '{origin}/v1/embeddings'",
    )
    embedding_model: str = ""
    embedding_batch_size: int = 512
    embedding_max_concurrency: int = 2
    embedding_strip_new_lines: bool = True
    embedding_max_attempts: int = 6
    embedding_timeout: float = 60.0

    # Ingestion
    chunk_size: int = 1000
    upsert_batch_size: int = 100
    documents_dir: str = "documents"

    # Query / LLM
    top_k: int = 10
    max_context_chars: int | None = None
    question_template: str = "{question}"
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for local servers)")
    llm_model_name: str = "gpt-4o-mini"
    llm_base_url: str = Field(
        default="",
        description="Base URL of an OpenAI-compatible completion server. Empty means OpenAI cloud.",
    )
    llm_temperature: float = 0.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_QA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Build a fresh :class:`Settings` from the current environment."""
    return Settings()
