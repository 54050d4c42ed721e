"""Service classes for document operations."""

from esdata.search.services.base_service import BaseService
from esdata.search.services.document_operations import DocumentOperations
from esdata.search.services.reactive_document_operations import ReactiveDocumentOperations
from esdata.search.services.search_query_builder import SearchQueryBuilder
from esdata.search.services.search_stream import CancellationToken, SearchStream

__all__ = [
    "BaseService",
    "CancellationToken",
    "DocumentOperations",
    "ReactiveDocumentOperations",
    "SearchQueryBuilder",
    "SearchStream",
]
