"""
Client adapters.

Adapters translate facade-level requests into REST calls through an
opensearch-py client, and translate responses and transport errors back.
"""

from esdata.search.adapters.async_adapter import AsyncClientAdapter
from esdata.search.adapters.sync_adapter import ClientAdapter

__all__ = [
    "AsyncClientAdapter",
    "ClientAdapter",
]
