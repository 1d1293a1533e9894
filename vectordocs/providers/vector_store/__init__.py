"""Vector store provider implementations."""

from vectordocs.providers.vector_store.chroma_http_provider import ChromaHTTPProvider

__all__ = ["ChromaHTTPProvider"]
