"""Standalone CLI for managing the vectordocs document collection.

Usage::

    python -m vectordocs.cli pdf --file /path/to/report.pdf --chunk-size 120 --chunk-stride 90

    python -m vectordocs.cli search --query "quarterly revenue"

    python -m vectordocs.cli stats

    python -m vectordocs.cli delete --filename report.pdf

    python -m vectordocs.cli reset --yes

Talks to the same Ollama and Chroma servers as the web service, configured
through the same environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from vectordocs.config.settings import Settings
from vectordocs.models.document import UploadedDocument
from vectordocs.models.ingestion import ChunkingOptions, IngestionEvent, IngestionPhase
from vectordocs.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from vectordocs.providers.vector_store.chroma_http_provider import ChromaHTTPProvider
from vectordocs.services.collection_resolver import CollectionResolver
from vectordocs.services.file_deleter import FileDeleter
from vectordocs.services.ingestion.ingestion_service import IngestionService
from vectordocs.services.ingestion.page_extractor import PageExtractor
from vectordocs.services.search_service import SearchService
from vectordocs.services.stats_aggregator import StatsAggregator
from vectordocs.utils.errors import ConfigurationError, VectorDocsError
from vectordocs.utils.logging import configure_logging


def _load_settings() -> Settings:
    """Read settings from the environment, reporting bad values as one error."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(message=f"invalid settings: {exc}") from exc


def _build_components(app_settings: Settings, http_client: httpx.AsyncClient) -> dict[str, Any]:
    """Construct the providers and services the subcommands need."""
    embedding_provider = OllamaEmbeddingProvider(settings=app_settings, http_client=http_client)
    vector_store = ChromaHTTPProvider(settings=app_settings, http_client=http_client)
    resolver = CollectionResolver(vector_store=vector_store)
    collection = app_settings.collection_name
    return {
        "resolver": resolver,
        "ingestion": IngestionService(
            page_extractor=PageExtractor(page_timeout=app_settings.page_timeout_seconds),
            embedding_provider=embedding_provider,
            vector_store=vector_store,
            resolver=resolver,
            collection_name=collection,
            failure_policy=app_settings.chunk_failure_policy,
        ),
        "search": SearchService(
            embedding_provider=embedding_provider,
            vector_store=vector_store,
            resolver=resolver,
            collection_name=collection,
            top_k=app_settings.search_top_k,
        ),
        "stats": StatsAggregator(
            vector_store=vector_store, resolver=resolver, collection_name=collection
        ),
        "deleter": FileDeleter(
            vector_store=vector_store, resolver=resolver, collection_name=collection
        ),
    }


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


def _print_event(event: IngestionEvent) -> None:
    if event.phase is not IngestionPhase.COMPLETED:
        print(json.dumps(event.to_wire()))


async def _handle_pdf(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest a PDF file, printing one JSON progress object per line."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    document = UploadedDocument(filename=path.name, content=path.read_bytes())
    options = ChunkingOptions(chunk_size=args.chunk_size, chunk_stride=args.chunk_stride)

    try:
        result = await components["ingestion"].ingest(document, options, listener=_print_event)
    except VectorDocsError:
        return 1

    print(json.dumps(result.to_wire()))
    print(
        f"\nStored {result.chunks_stored}/{result.chunks_total} chunks "
        f"from {result.pages_total} pages in {result.duration:.2f}s",
        file=sys.stderr,
    )
    return 0


async def _handle_search(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Print the nearest chunks for a query."""
    result = await components["search"].search(args.query)
    if result.is_empty:
        print("No results.")
        return 0

    rows = zip(
        result.ids[0],
        result.documents[0] if result.documents else [],
        result.metadatas[0] if result.metadatas else [],
        result.distances[0] if result.distances else [],
    )
    for rank, (_id, document, metadata, distance) in enumerate(rows, start=1):
        filename = (metadata or {}).get("filename", "?")
        chunk_num = (metadata or {}).get("chunk_num", "?")
        print(f"{rank}. {filename} #{chunk_num}  (distance {distance})")
        print(f"   {(document or '')[:200]}")
    return 0


async def _handle_stats(components: dict[str, Any]) -> int:
    """Display collection statistics."""
    stats = await components["stats"].collect()

    print("Collection Statistics")
    print("=" * 40)
    print(f"  Total chunks:  {stats.total_chunks}")
    print(f"  Total files:   {stats.total_files}")
    for filename in stats.files:
        print(f"    {filename:<40} {stats.file_chunk_counts.get(filename, 0)}")
    return 0


async def _handle_delete(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Delete every chunk of one file."""
    summary = await components["deleter"].delete(args.filename)
    print(f"{summary.status}: {summary.filename}")
    return 0


async def _handle_reset(
    args: argparse.Namespace, components: dict[str, Any], collection: str
) -> int:
    """Drop the whole collection.  Requires confirmation unless --yes is passed."""
    if not args.yes:
        confirm = input(f"  Drop collection '{collection}' and all its chunks? [y/N] ")
        if confirm.strip().lower() not in ("y", "yes"):
            print("  Aborted.")
            return 0

    await components["resolver"].drop(collection)
    print(f"reset successful: {collection}")
    return 0


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    """Dispatch one subcommand with a shared HTTP client."""
    async with httpx.AsyncClient(timeout=app_settings.http_timeout_seconds) as http_client:
        components = _build_components(app_settings, http_client)
        try:
            if args.command == "pdf":
                return await _handle_pdf(args, components)
            if args.command == "search":
                return await _handle_search(args, components)
            if args.command == "stats":
                return await _handle_stats(components)
            if args.command == "delete":
                return await _handle_delete(args, components)
            if args.command == "reset":
                return await _handle_reset(args, components, app_settings.collection_name)
        except VectorDocsError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    return 1


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the vectordocs CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m vectordocs.cli",
        description="Manage the vectordocs document collection.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- pdf --
    pdf_parser = subparsers.add_parser("pdf", help="Ingest a PDF document")
    pdf_parser.add_argument("--file", required=True, help="Path to the PDF file")
    pdf_parser.add_argument(
        "--chunk-size",
        type=int,
        dest="chunk_size",
        help="Words per chunk (default: DEFAULT_CHUNK_SIZE)",
    )
    pdf_parser.add_argument(
        "--chunk-stride",
        type=int,
        dest="chunk_stride",
        help="Words between chunk starts (default: DEFAULT_CHUNK_STRIDE)",
    )

    # -- search --
    search_parser = subparsers.add_parser("search", help="Semantic search over stored chunks")
    search_parser.add_argument("--query", "-q", required=True, help="Free-text query")

    # -- stats --
    subparsers.add_parser("stats", help="Show collection statistics")

    # -- delete --
    delete_parser = subparsers.add_parser("delete", help="Delete every chunk of one file")
    delete_parser.add_argument("--filename", required=True, help="Stored filename")

    # -- reset --
    reset_parser = subparsers.add_parser("reset", help="Drop the whole collection")
    reset_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _apply_chunk_defaults(args: argparse.Namespace, app_settings: Settings) -> None:
    """Fill window options left unset on the command line from settings."""
    if args.chunk_size is None:
        args.chunk_size = app_settings.default_chunk_size
    if args.chunk_stride is None:
        args.chunk_stride = app_settings.default_chunk_stride


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse arguments, load settings, run the subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        app_settings = _load_settings()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.command == "pdf":
        _apply_chunk_defaults(args, app_settings)
        if args.chunk_size <= 0 or args.chunk_stride <= 0:
            parser.error("--chunk-size and --chunk-stride must be positive")

    configure_logging(log_level=app_settings.log_level)
    sys.exit(asyncio.run(_run(args, app_settings)))


if __name__ == "__main__":
    main()
