"""vectordocs: PDF ingestion and semantic search over an external vector store."""

__version__ = "1.0.0"
