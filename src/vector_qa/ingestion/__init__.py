"""
Ingestion — document loading, chunking, and embedding into the vector index.

This module is responsible for the ETL-like pipeline that converts raw
text documents into embedded chunks stored in a vector index.
"""

from vector_qa.ingestion.chunker import TextChunker
from vector_qa.ingestion.pipeline import IngestionPipeline, IngestionReport, build_vector_records

__all__ = ["IngestionPipeline", "IngestionReport", "TextChunker", "build_vector_records"]
