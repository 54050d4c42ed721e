"""Asynchronous document operations.

Single results are coroutines: nothing is sent until they are awaited.
Multi-result searches return a ``SearchStream``, which sends nothing until
iteration starts and can be cancelled at any time.
"""

from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel

from esdata.interfaces import IReporter, SearchQuery
from esdata.logging import get_logger
from esdata.mapping.mapper import EntityMapper
from esdata.query.queries import Query
from esdata.search.adapters import AsyncClientAdapter
from esdata.search.adapters.base_adapter import create_bulk_body
from esdata.search.coordinates import IndexCoordinates, resolve_coordinates
from esdata.search.results import SearchHit, SearchHits
from esdata.search.services.base_service import BaseService
from esdata.search.services.document_operations import DEFAULT_BATCH_SIZE, DEFAULT_KEEP_ALIVE
from esdata.search.services.search_stream import CancellationToken, SearchStream

logger = get_logger(__name__)

Coordinates = IndexCoordinates | str | None


class ReactiveDocumentOperations(BaseService[AsyncClientAdapter]):
    """Asyncio counterpart of DocumentOperations."""

    def __init__(self, *, adapter: AsyncClientAdapter, mapper: EntityMapper | None = None) -> None:
        super().__init__(adapter=adapter, mapper=mapper)

    # Writes

    async def index(self, entity: BaseModel, *, index: Coordinates = None, refresh: bool | str | None = None) -> str:
        coordinates = resolve_coordinates(index, type(entity))
        doc_id, document = self._document_for(entity)
        new_id = await self._adapter.index_document(
            index=coordinates.index_name, document=document, id=doc_id, refresh=refresh
        )
        if doc_id is None:
            self._mapper.set_id(entity, new_id)
        return new_id

    async def save_all(
        self,
        entities: Iterable[BaseModel],
        *,
        index: Coordinates = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        refresh: bool | str | None = None,
        reporter: IReporter | None = None,
    ) -> list[str]:
        """Bulk index entities batch after batch; returns their ids in input order."""
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
                batch_ids = await self._adapter.bulk(body=body, refresh=refresh)
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

    async def get(self, id: str, entity_type: type, *, index: Coordinates = None) -> Any | None:  # noqa: A002
        coordinates = resolve_coordinates(index, entity_type)
        document = await self._adapter.get_document(index=coordinates.index_name, id=id)
        if document is None:
            return None
        return self._materialize(document, entity_type)

    async def multi_get(self, ids: list[str], entity_type: type, *, index: Coordinates = None) -> list[Any]:
        if not ids:
            return []
        coordinates = resolve_coordinates(index, entity_type)
        documents = await self._adapter.multi_get(index=coordinates.index_name, ids=list(ids))
        return [self._materialize(document, entity_type) for document in documents]

    async def exists(self, id: str, entity_type: type | None = None, *, index: Coordinates = None) -> bool:  # noqa: A002
        coordinates = resolve_coordinates(index, entity_type)
        return await self._adapter.document_exists(index=coordinates.index_name, id=id)

    async def count(
        self,
        query: Query | None = None,
        entity_type: type | None = None,
        *,
        index: Coordinates = None,
    ) -> int:
        coordinates = resolve_coordinates(index, entity_type)
        request = self._count_request(query or Query.match_all(), entity_type, coordinates)
        return await self._adapter.count(index=request.index, body=request.body)

    async def search_page(
        self,
        query: Query,
        entity_type: type,
        *,
        index: Coordinates = None,
        return_type: type | None = None,
    ) -> SearchHits[Any]:
        """Run one search request and return its hits with the total count."""
        coordinates = resolve_coordinates(index, entity_type)
        request = self._search_request(query, entity_type, coordinates)
        response = await self._adapter.search(request)
        return self._to_search_hits(response, return_type or entity_type)

    def search(
        self,
        query: Query,
        entity_type: type,
        *,
        index: Coordinates = None,
        return_type: type | None = None,
        keep_alive: str = DEFAULT_KEEP_ALIVE,
        batch_size: int = DEFAULT_BATCH_SIZE,
        cancellation: CancellationToken | None = None,
    ) -> SearchStream[SearchHit[Any]]:
        """Stream the hits of a query.

        Paged queries emit their single page; other queries are read through
        the scroll API in batches of batch_size. Errors building the request
        are raised when iteration starts.
        """
        target_type = return_type or entity_type
        return self._stream(
            query,
            entity_type,
            index=index,
            transform=lambda raw: self._to_hit(raw, target_type),
            keep_alive=keep_alive,
            batch_size=batch_size,
            cancellation=cancellation,
        )

    def find(
        self,
        query: Query,
        entity_type: type,
        return_type: type | None = None,
        *,
        index: Coordinates = None,
        keep_alive: str = DEFAULT_KEEP_ALIVE,
        batch_size: int = DEFAULT_BATCH_SIZE,
        cancellation: CancellationToken | None = None,
    ) -> SearchStream[Any]:
        """Stream the materialized entities of a query."""
        target_type = return_type or entity_type
        return self._stream(
            query,
            entity_type,
            index=index,
            transform=lambda raw: self._materialize(raw, target_type),
            keep_alive=keep_alive,
            batch_size=batch_size,
            cancellation=cancellation,
        )

    def _stream[T](
        self,
        query: Query,
        entity_type: type,
        *,
        index: Coordinates,
        transform: Callable[[dict[str, Any]], T],
        keep_alive: str,
        batch_size: int,
        cancellation: CancellationToken | None,
    ) -> SearchStream[T]:
        scroll = None if query.is_paged else keep_alive

        def prepare() -> SearchQuery:
            coordinates = resolve_coordinates(index, entity_type)
            if scroll is None:
                return self._search_request(query, entity_type, coordinates)
            return self._search_request(query, entity_type, coordinates, scroll=scroll, batch_size=batch_size)

        return SearchStream(
            adapter=self._adapter,
            prepare=prepare,
            transform=transform,
            keep_alive=scroll,
            cancellation=cancellation,
        )

    # Deletes

    async def delete(
        self,
        id: str,  # noqa: A002
        entity_type: type | None = None,
        *,
        index: Coordinates = None,
        refresh: bool | str | None = None,
    ) -> str:
        coordinates = resolve_coordinates(index, entity_type)
        deleted = await self._adapter.delete_document(index=coordinates.index_name, id=id, refresh=refresh)
        if not deleted:
            logger.debug(f"Document {id} not found in {coordinates.index_name}")
        return id

    async def delete_entity(
        self, entity: BaseModel, *, index: Coordinates = None, refresh: bool | str | None = None
    ) -> str:
        doc_id = self._mapper.get_id(entity)
        if doc_id is None:
            raise ValueError(f"Cannot delete {type(entity).__name__} without id")
        return await self.delete(doc_id, type(entity), index=index, refresh=refresh)

    async def delete_by_query(
        self,
        query: Query,
        entity_type: type | None = None,
        *,
        index: Coordinates = None,
        refresh: bool | None = None,
    ) -> int:
        coordinates = resolve_coordinates(index, entity_type)
        request = self._count_request(query, entity_type, coordinates)
        return await self._adapter.delete_by_query(index=request.index, body=request.body, refresh=refresh)

    async def refresh(self, entity_type: type | None = None, *, index: Coordinates = None) -> None:
        coordinates = resolve_coordinates(index, entity_type)
        await self._adapter.refresh(index=coordinates.joined)

    # Indexes

    async def create_index(self, entity_type: type, *, index: Coordinates = None) -> bool:
        """Create the index of an entity type with its settings and mapping.

        Returns:
            False if the index already existed
        """
        coordinates = resolve_coordinates(index, entity_type)
        if await self._adapter.index_exists(index=coordinates.index_name):
            return False
        body = self._mapper.index_body(entity_type)
        logger.debug(f"Creating index {coordinates.index_name}")
        await self._adapter.create_index(index=coordinates.index_name, body=body)
        return True

    async def index_exists(self, entity_type: type | None = None, *, index: Coordinates = None) -> bool:
        coordinates = resolve_coordinates(index, entity_type)
        return await self._adapter.index_exists(index=coordinates.joined)

    async def delete_index(self, entity_type: type | None = None, *, index: Coordinates = None) -> bool:
        """Delete an index; returns False if it did not exist."""
        coordinates = resolve_coordinates(index, entity_type)
        if not await self._adapter.index_exists(index=coordinates.index_name):
            return False
        await self._adapter.delete_index(index=coordinates.index_name)
        return True
