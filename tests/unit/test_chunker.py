"""Unit tests for word-window chunking."""

from __future__ import annotations

import pytest

from vectordocs.models.ingestion import ChunkingOptions
from vectordocs.services.ingestion.chunker import TextChunker, chunk_words

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(1, n + 1))


# ---------------------------------------------------------------------------
# chunk_words
# ---------------------------------------------------------------------------


class TestChunkWords:
    def test_ten_words_size_four_stride_three(self) -> None:
        chunks = chunk_words(_words(10), chunk_size=4, stride=3)

        assert chunks == [
            "w1 w2 w3 w4",
            "w4 w5 w6 w7",
            "w7 w8 w9 w10",
        ]

    def test_stride_equal_to_size_has_no_overlap(self) -> None:
        chunks = chunk_words(_words(6), chunk_size=3, stride=3)

        assert chunks == ["w1 w2 w3", "w4 w5 w6"]

    def test_stride_larger_than_size_skips_words(self) -> None:
        chunks = chunk_words(_words(10), chunk_size=2, stride=5)

        assert chunks == ["w1 w2", "w6 w7"]

    def test_text_shorter_than_window_is_one_chunk(self) -> None:
        assert chunk_words("only three words", chunk_size=100, stride=80) == [
            "only three words"
        ]

    def test_stops_once_window_reaches_end(self) -> None:
        # 5 words, size 4, stride 1: the second window already ends at word 5.
        chunks = chunk_words(_words(5), chunk_size=4, stride=1)

        assert chunks == ["w1 w2 w3 w4", "w2 w3 w4 w5"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t \n"])
    def test_blank_text_yields_nothing(self, text: str) -> None:
        assert chunk_words(text, chunk_size=4, stride=3) == []

    def test_whitespace_runs_collapse_to_single_spaces(self) -> None:
        text = "alpha\n\nbeta\tgamma   delta\nepsilon"

        assert chunk_words(text, chunk_size=3, stride=3) == [
            "alpha beta gamma",
            "delta epsilon",
        ]

    def test_deterministic(self) -> None:
        text = _words(57)

        assert chunk_words(text, 7, 5) == chunk_words(text, 7, 5)

    def test_every_word_covered_when_stride_not_larger_than_size(self) -> None:
        text = _words(53)
        chunks = chunk_words(text, chunk_size=8, stride=6)

        covered = {word for chunk in chunks for word in chunk.split()}
        assert covered == set(text.split())

    @pytest.mark.parametrize("size,stride", [(0, 3), (4, 0), (-1, 2)])
    def test_rejects_non_positive_parameters(self, size: int, stride: int) -> None:
        with pytest.raises(ValueError):
            chunk_words("some words here", chunk_size=size, stride=stride)


# ---------------------------------------------------------------------------
# TextChunker
# ---------------------------------------------------------------------------


class TestTextChunker:
    def test_chunks_are_numbered_from_one(self) -> None:
        chunker = TextChunker(chunk_size=4, stride=3)

        chunks = chunker.chunk(_words(10), "report.pdf")

        assert [c.sequence_number for c in chunks] == [1, 2, 3]
        assert all(c.source_filename == "report.pdf" for c in chunks)
        assert chunks[-1].text == "w7 w8 w9 w10"

    def test_chunks_share_one_timestamp(self) -> None:
        chunks = TextChunker(chunk_size=2, stride=2).chunk(_words(6), "a.pdf")

        assert len({c.ingested_at for c in chunks}) == 1

    def test_non_positive_values_fall_back_to_defaults(self) -> None:
        chunker = TextChunker(chunk_size=0, stride=-5)

        assert chunker.chunk_size == 100
        assert chunker.stride == 80

    def test_from_options(self) -> None:
        chunker = TextChunker.from_options(ChunkingOptions(chunk_size=12, chunk_stride=9))

        assert chunker.chunk_size == 12
        assert chunker.stride == 9

    def test_blank_text_produces_no_chunks(self) -> None:
        assert TextChunker().chunk("   ", "empty.pdf") == []
