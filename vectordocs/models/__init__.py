"""Pydantic data models for vectordocs.

- **document** -- uploads, pages, extraction results and chunks
- **ingestion** -- ingestion phases, events, options and results
- **store** -- query results, collection statistics, deletion summaries
"""

from vectordocs.models.document import Chunk, ExtractionResult, Page, UploadedDocument
from vectordocs.models.ingestion import (
    ChunkFailurePolicy,
    ChunkingOptions,
    IngestionEvent,
    IngestionPhase,
    IngestionResult,
)
from vectordocs.models.store import CollectionStats, DeletionSummary, QueryResult

__all__ = [
    "Chunk",
    "ChunkFailurePolicy",
    "ChunkingOptions",
    "CollectionStats",
    "DeletionSummary",
    "ExtractionResult",
    "IngestionEvent",
    "IngestionPhase",
    "IngestionResult",
    "Page",
    "QueryResult",
    "UploadedDocument",
]
