# esdump/clients/elasticsearch/__init__.py
from .client import ElasticsearchCursorClient, parse_page

__all__ = ["ElasticsearchCursorClient", "parse_page"]
