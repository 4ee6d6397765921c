# esdump/__init__.py
"""Ordered scroll export of Elasticsearch query results to NDJSON."""

__version__ = "0.1.0"
