"""Configuration for vectordocs (environment-driven pydantic settings)."""

from vectordocs.config.settings import Settings

__all__ = ["Settings"]
