"""Blocking document operations."""

import dataclasses
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel

from esdata.interfaces import IReporter, SearchQuery
from esdata.logging import get_logger
from esdata.query.queries import PageRequest, Query
from esdata.search.adapters import ClientAdapter
from esdata.search.adapters.base_adapter import create_bulk_body
from esdata.search.coordinates import IndexCoordinates, resolve_coordinates
from esdata.search.results import SearchHit, SearchHits
from esdata.search.services.base_service import BaseService

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 500
DEFAULT_KEEP_ALIVE = "1m"

Coordinates = IndexCoordinates | str | None


class DocumentOperations(BaseService[ClientAdapter]):
    """Index, get, search, count and delete entities, blocking until the service answers.

    Every operation accepts explicit index coordinates; without them the
    coordinates are derived from the entity type's metadata.
    """

    # Writes

    def index(self, entity: BaseModel, *, index: Coordinates = None, refresh: bool | str | None = None) -> str:
        """Index an entity and return its id.

        A service-generated id is written back to the entity unless it is frozen.
        """
        coordinates = resolve_coordinates(index, type(entity))
        doc_id, document = self._document_for(entity)
        new_id = self._adapter.index_document(
            index=coordinates.index_name, document=document, id=doc_id, refresh=refresh
        )
        if doc_id is None:
            self._mapper.set_id(entity, new_id)
        return new_id

    def save_all(
        self,
        entities: Iterable[BaseModel],
        *,
        index: Coordinates = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        refresh: bool | str | None = None,
        reporter: IReporter | None = None,
    ) -> list[str]:
        """Bulk index entities; returns their ids in input order.

        Raises:
            BulkFailureError: If any item of a batch fails
        """
        items = list(entities)
        if not items:
            return []
        coordinates = resolve_coordinates(index, type(items[0]))
        batches = [items[i : i + batch_size] for i in range(0, len(items), batch_size)]

        ids: list[str] = []
        if reporter:
            reporter.start_progress(total=len(batches))
        try:
            for batch_num, batch in enumerate(batches, 1):
                documents = [self._document_for(entity) for entity in batch]
                body = create_bulk_body(index=coordinates.index_name, documents=documents)
                logger.debug(f"Sending batch {batch_num}/{len(batches)} ({len(batch)} entities)")
                batch_ids = self._adapter.bulk(body=body, refresh=refresh)
                for entity, (doc_id, _), new_id in zip(batch, documents, batch_ids, strict=True):
                    if doc_id is None:
                        self._mapper.set_id(entity, new_id)
                ids.extend(batch_ids)
                if reporter:
                    reporter.on_progress(1)
        finally:
            if reporter:
                reporter.stop_progress()
        return ids

    # Reads

    def get(self, id: str, entity_type: type, *, index: Coordinates = None) -> Any | None:  # noqa: A002
        """Get an entity by id, or None if no such document exists."""
        coordinates = resolve_coordinates(index, entity_type)
        document = self._adapter.get_document(index=coordinates.index_name, id=id)
        if document is None:
            return None
        return self._materialize(document, entity_type)

    def multi_get(self, ids: list[str], entity_type: type, *, index: Coordinates = None) -> list[Any]:
        """Get several entities; missing ones are skipped, request order is kept."""
        if not ids:
            return []
        coordinates = resolve_coordinates(index, entity_type)
        documents = self._adapter.multi_get(index=coordinates.index_name, ids=list(ids))
        return [self._materialize(document, entity_type) for document in documents]

    def exists(self, id: str, entity_type: type | None = None, *, index: Coordinates = None) -> bool:  # noqa: A002
        coordinates = resolve_coordinates(index, entity_type)
        return self._adapter.document_exists(index=coordinates.index_name, id=id)

    def search(
        self,
        query: Query,
        entity_type: type,
        *,
        index: Coordinates = None,
        return_type: type | None = None,
    ) -> SearchHits[Any]:
        """Run a search and materialize the hits as return_type (defaults to entity_type)."""
        coordinates = resolve_coordinates(index, entity_type)
        request = self._search_request(query, entity_type, coordinates)
        response = self._adapter.search(request)
        return self._to_search_hits(response, return_type or entity_type)

    def search_one(
        self,
        query: Query,
        entity_type: type,
        *,
        index: Coordinates = None,
        return_type: type | None = None,
    ) -> SearchHit[Any] | None:
        """Return the first hit of a search, or None."""
        first_page = dataclasses.replace(query, pageable=PageRequest(0, 1))
        hits = self.search(first_page, entity_type, index=index, return_type=return_type)
        return hits[0] if hits.has_hits else None

    def stream(
        self,
        query: Query,
        entity_type: type,
        *,
        index: Coordinates = None,
        return_type: type | None = None,
        keep_alive: str = DEFAULT_KEEP_ALIVE,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> Iterator[SearchHit[Any]]:
        """Lazily iterate over all hits of a query.

        Unpaged queries are read through the scroll API in batches of
        batch_size; the scroll context is cleared when the iterator is
        exhausted or closed. Paged queries return their single page.
        """
        coordinates = resolve_coordinates(index, entity_type)
        target_type = return_type or entity_type
        if query.is_paged:
            request = self._search_request(query, entity_type, coordinates)
            return self._single_page(request, target_type)
        request = self._search_request(query, entity_type, coordinates, scroll=keep_alive, batch_size=batch_size)
        return self._scroll(request, target_type, keep_alive)

    def _single_page(self, request: SearchQuery, target_type: type) -> Iterator[SearchHit[Any]]:
        response = self._adapter.search(request)
        for raw in response["hits"]["hits"]:
            yield self._to_hit(raw, target_type)

    def _scroll(self, request: SearchQuery, target_type: type, keep_alive: str) -> Iterator[SearchHit[Any]]:
        scroll_id: str | None = None
        try:
            response = self._adapter.search(request)
            while True:
                scroll_id = response.get("_scroll_id") or scroll_id
                hits = response["hits"]["hits"]
                if not hits or scroll_id is None:
                    yield from (self._to_hit(raw, target_type) for raw in hits)
                    break
                for raw in hits:
                    yield self._to_hit(raw, target_type)
                response = self._adapter.scroll(scroll_id=scroll_id, keep_alive=keep_alive)
        finally:
            if scroll_id is not None:
                logger.debug("Clearing scroll context")
                self._adapter.clear_scroll(scroll_ids=[scroll_id])

    def count(
        self,
        query: Query | None = None,
        entity_type: type | None = None,
        *,
        index: Coordinates = None,
    ) -> int:
        """Count matching documents; without a query every document is counted."""
        coordinates = resolve_coordinates(index, entity_type)
        request = self._count_request(query or Query.match_all(), entity_type, coordinates)
        return self._adapter.count(index=request.index, body=request.body)

    # Deletes

    def delete(
        self,
        id: str,  # noqa: A002
        entity_type: type | None = None,
        *,
        index: Coordinates = None,
        refresh: bool | str | None = None,
    ) -> str:
        """Delete a document by id and return the id (also when it did not exist)."""
        coordinates = resolve_coordinates(index, entity_type)
        deleted = self._adapter.delete_document(index=coordinates.index_name, id=id, refresh=refresh)
        if not deleted:
            logger.debug(f"Document {id} not found in {coordinates.index_name}")
        return id

    def delete_entity(self, entity: BaseModel, *, index: Coordinates = None, refresh: bool | str | None = None) -> str:
        """Delete the document of an entity.

        Raises:
            ValueError: If the entity has no id
        """
        doc_id = self._mapper.get_id(entity)
        if doc_id is None:
            raise ValueError(f"Cannot delete {type(entity).__name__} without id")
        return self.delete(doc_id, type(entity), index=index, refresh=refresh)

    def delete_by_query(
        self,
        query: Query,
        entity_type: type | None = None,
        *,
        index: Coordinates = None,
        refresh: bool | None = None,
    ) -> int:
        """Delete every document matching query; returns the number deleted."""
        coordinates = resolve_coordinates(index, entity_type)
        request = self._count_request(query, entity_type, coordinates)
        return self._adapter.delete_by_query(index=request.index, body=request.body, refresh=refresh)

    def refresh(self, entity_type: type | None = None, *, index: Coordinates = None) -> None:
        """Make recent writes visible to searches."""
        coordinates = resolve_coordinates(index, entity_type)
        self._adapter.refresh(index=coordinates.joined)
