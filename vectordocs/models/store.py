"""Read-side models for vector-store results, statistics and deletions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QueryResult(BaseModel):
    """Raw nearest-neighbour result, one inner list per query embedding.

    The ordering is whatever the store returns (distance ascending); the
    search path never re-ranks or filters it.
    """

    model_config = ConfigDict(frozen=True)

    ids: list[list[str]] = Field(default_factory=list)
    documents: list[list[str | None]] = Field(default_factory=list)
    metadatas: list[list[dict[str, Any] | None]] = Field(default_factory=list)
    distances: list[list[float | None]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(self.ids)


class CollectionStats(BaseModel):
    """Chunk and file counts derived from stored metadata."""

    model_config = ConfigDict(frozen=True)

    total_chunks: int = Field(default=0, ge=0)
    total_files: int = Field(default=0, ge=0)
    files: list[str] = Field(default_factory=list)
    file_chunk_counts: dict[str, int] = Field(default_factory=dict)


class DeletionSummary(BaseModel):
    """Acknowledgement of a delete-by-filename request."""

    model_config = ConfigDict(frozen=True)

    status: str = "deleted"
    filename: str
