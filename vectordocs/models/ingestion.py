"""Ingestion pipeline state models.

The ingestion of one upload moves through an explicit state machine:

    RECEIVED -> EXTRACTING -> CHUNKING -> EMBEDDING -> COMPLETED
                     \\            \\           \\
                      +------------+-----------+--> FAILED

Every transition produces an :class:`IngestionEvent`; the progress stream
sent to upload clients is simply the sequence of those events.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IngestionPhase(str, Enum):  # noqa: UP042
    """Phases of a single document ingestion."""

    RECEIVED = "RECEIVED"
    EXTRACTING = "EXTRACTING"
    CHUNKING = "CHUNKING"
    EMBEDDING = "EMBEDDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ChunkFailurePolicy(str, Enum):  # noqa: UP042
    """What the embedding loop does when one chunk fails to embed or store.

    ``CONTINUE`` logs the failure, drops the chunk and moves on; the run
    still completes.  ``ABORT`` fails the whole run on the first bad chunk.
    """

    CONTINUE = "continue"
    ABORT = "abort"


class ChunkingOptions(BaseModel):
    """Word-window parameters for one ingestion run."""

    model_config = ConfigDict(frozen=True)

    chunk_size: int = Field(default=100, gt=0, description="Words per chunk.")
    chunk_stride: int = Field(default=80, gt=0, description="Words between chunk starts.")

    @property
    def overlap(self) -> int:
        return max(0, self.chunk_size - self.chunk_stride)


class IngestionEvent(BaseModel):
    """One progress update emitted during ingestion."""

    model_config = ConfigDict(frozen=True)

    phase: IngestionPhase
    message: str

    def to_wire(self) -> dict[str, Any]:
        """Serialize as a progress-stream line body.

        Failures become ``{"error": ...}``; every other phase is a
        ``{"status": ...}`` line.
        """
        if self.phase is IngestionPhase.FAILED:
            return {"error": self.message}
        return {"status": self.message}


class IngestionResult(BaseModel):
    """Summary of a finished ingestion run.

    ``chunks_stored`` is informational only; it is not part of the client
    completion payload, which callers confirm through the stats endpoint.
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    chunk_size: int
    chunk_stride: int
    chunks_total: int = Field(default=0, ge=0)
    chunks_stored: int = Field(default=0, ge=0)
    chunks_failed: int = Field(default=0, ge=0)
    pages_total: int = Field(default=0, ge=0)
    duration: float = Field(default=0.0, ge=0.0, description="Wall-clock seconds.")

    def to_wire(self) -> dict[str, Any]:
        """Serialize as the terminal ``completed`` line of the progress stream."""
        return {
            "status": "completed",
            "filename": self.filename,
            "chunkSize": self.chunk_size,
            "chunkStride": self.chunk_stride,
        }
