"""PDF ingestion: page extraction, chunking and the ingestion orchestrator."""

from vectordocs.services.ingestion.chunker import TextChunker, chunk_words
from vectordocs.services.ingestion.ingestion_service import IngestionService
from vectordocs.services.ingestion.page_extractor import PageExtractor

__all__ = [
    "IngestionService",
    "PageExtractor",
    "TextChunker",
    "chunk_words",
]
