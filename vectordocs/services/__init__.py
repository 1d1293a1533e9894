"""Application services orchestrating providers into the document pipeline."""

from vectordocs.services.collection_resolver import CollectionResolver
from vectordocs.services.file_deleter import FileDeleter
from vectordocs.services.search_service import SearchService
from vectordocs.services.stats_aggregator import StatsAggregator

__all__ = [
    "CollectionResolver",
    "FileDeleter",
    "SearchService",
    "StatsAggregator",
]
