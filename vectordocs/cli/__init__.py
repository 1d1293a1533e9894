"""Command-line tools for vectordocs.

- ``python -m vectordocs.cli`` -- ingest PDFs, search, show stats, delete
  files and reset the collection without running the web service.
"""
