"""Document-side data models: uploads, pages, extraction output and chunks.

All models are Pydantic v2 with frozen config.  A :class:`Chunk` is the
unit of embedding and storage; one chunk maps to exactly one record in the
vector store, keyed by a random UUID (``chunk_num`` is only unique within a
single ingestion run of a single filename).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UploadedDocument(BaseModel):
    """A PDF received for ingestion.  Lives only for one ingestion request."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(description="Client-supplied filename; not guaranteed unique.")
    content: bytes = Field(repr=False, description="Raw PDF bytes.")

    @property
    def size(self) -> int:
        return len(self.content)


class Page(BaseModel):
    """Plain text of one PDF page (1-based index).  Text may be empty."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    text: str = ""


class ExtractionResult(BaseModel):
    """Concatenated document text plus page bookkeeping from the extractor."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    total_pages: int = Field(default=0, ge=0)
    pages_extracted: int = Field(default=0, ge=0)
    pages_skipped: int = Field(default=0, ge=0)


class Chunk(BaseModel):
    """A word-window of document text with its sequence metadata."""

    model_config = ConfigDict(frozen=True)

    text: str
    sequence_number: int = Field(ge=1, description="1-based position within the ingestion run.")
    source_filename: str
    ingested_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    def to_metadata(self) -> dict[str, Any]:
        """Return the metadata stored alongside the chunk's embedding."""
        return {
            "source": "pdf",
            "filename": self.source_filename,
            "chunk_num": self.sequence_number,
            "uploaded_at": self.ingested_at.isoformat(timespec="seconds"),
        }
