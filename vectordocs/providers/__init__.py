"""Concrete provider adapters for external services."""
