"""Allow ``python -m vectordocs.cli`` execution."""

from vectordocs.cli.ingest import main

main()
