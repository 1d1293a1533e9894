"""Word-window chunking with configurable size and stride.

Text is split on whitespace into words.  Windows of ``chunk_size`` words
start every ``stride`` words, so consecutive chunks share
``chunk_size - stride`` words when the stride is smaller than the size
(and skip words when it is larger).  The last window is clipped at the
end of the text and chunking stops as soon as a window reaches the end.

Example with 10 words, size 4 and stride 3::

    w1 w2 w3 w4
             w4 w5 w6 w7
                      w7 w8 w9 w10
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from vectordocs.models.document import Chunk
from vectordocs.models.ingestion import ChunkingOptions

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_CHUNK_SIZE = 100
DEFAULT_CHUNK_STRIDE = 80


def chunk_words(text: str, chunk_size: int, stride: int) -> list[str]:
    """Split *text* into word windows joined by single spaces.

    Both *chunk_size* and *stride* must be positive.  Empty or
    whitespace-only text yields an empty list.
    """
    if chunk_size <= 0 or stride <= 0:
        raise ValueError("chunk_size and stride must be positive")

    words = text.split()
    total = len(words)
    windows: list[str] = []
    for start in range(0, total, stride):
        end = min(start + chunk_size, total)
        windows.append(" ".join(words[start:end]))
        if end == total:
            break
    return windows


class TextChunker:
    """Turns extracted document text into :class:`Chunk` objects.

    Non-positive sizes fall back to the defaults (100 words, stride 80).
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        stride: int = DEFAULT_CHUNK_STRIDE,
    ) -> None:
        self._chunk_size = chunk_size if chunk_size > 0 else DEFAULT_CHUNK_SIZE
        self._stride = stride if stride > 0 else DEFAULT_CHUNK_STRIDE

    @classmethod
    def from_options(cls, options: ChunkingOptions) -> TextChunker:
        return cls(chunk_size=options.chunk_size, stride=options.chunk_stride)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def stride(self) -> int:
        return self._stride

    def chunk(self, text: str, source_filename: str) -> list[Chunk]:
        """Split *text* into chunks numbered from 1.

        All chunks of one call share the same ingestion timestamp.
        """
        ingested_at = datetime.now(tz=timezone.utc)  # noqa: UP017
        chunks = [
            Chunk(
                text=window,
                sequence_number=number,
                source_filename=source_filename,
                ingested_at=ingested_at,
            )
            for number, window in enumerate(
                chunk_words(text, self._chunk_size, self._stride), start=1
            )
        ]
        logger.debug(
            "chunking_complete",
            filename=source_filename,
            num_chunks=len(chunks),
            chunk_size=self._chunk_size,
            stride=self._stride,
        )
        return chunks
