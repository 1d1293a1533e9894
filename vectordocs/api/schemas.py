"""Pydantic response schemas for the vectordocs HTTP API.

The upload endpoint streams newline-delimited JSON and has no response
model; every other endpoint returns one of the shapes below.  Field names
are the wire names clients already depend on, so they stay snake_case
except where noted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from vectordocs.models.store import CollectionStats, QueryResult


class HealthResponse(BaseModel):
    """Liveness plus backend reachability.  Always 200 while the process is up."""

    status: str = "ok"
    service: str
    version: str
    providers: dict[str, bool] = Field(default_factory=dict)


class ResetResponse(BaseModel):
    """Acknowledgement of a collection reset."""

    status: str = "reset successful"
    collection: str


class DeleteResponse(BaseModel):
    """Acknowledgement of a delete-by-filename request."""

    status: str = "deleted"
    filename: str


class StatsResponse(BaseModel):
    """Chunk and file counts for the document collection."""

    total_chunks: int = 0
    total_files: int = 0
    files: list[str] = Field(default_factory=list)
    file_chunk_counts: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_stats(cls, stats: CollectionStats) -> StatsResponse:
        return cls(**stats.model_dump())


class SearchResponse(BaseModel):
    """Raw nearest-neighbour result: parallel nested arrays, one row per query."""

    ids: list[list[str]] = Field(default_factory=list)
    documents: list[list[str | None]] = Field(default_factory=list)
    metadatas: list[list[dict[str, Any] | None]] = Field(default_factory=list)
    distances: list[list[float | None]] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: QueryResult) -> SearchResponse:
        return cls(**result.model_dump())


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
