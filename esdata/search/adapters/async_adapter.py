"""Asyncio client adapter over opensearchpy.AsyncOpenSearch."""

from typing import Any

from opensearchpy import AsyncOpenSearch
from opensearchpy.exceptions import NotFoundError

from esdata.exceptions import ClientResponseError
from esdata.interfaces import SearchQuery
from esdata.logging import get_logger
from esdata.search.adapters.base_adapter import (
    is_missing_document,
    parse_bulk_response,
    refresh_params,
    translate_errors,
)

logger = get_logger(__name__)


class AsyncClientAdapter:
    """Issues REST calls through an AsyncOpenSearch client and translates errors.

    Every method is a coroutine; nothing is sent until it is awaited, and
    cancelling the awaiting task aborts the in-flight HTTP request.
    """

    _client: AsyncOpenSearch

    def __init__(self, *, client: AsyncOpenSearch) -> None:
        self._client = client

    @property
    def client(self) -> AsyncOpenSearch:
        return self._client

    async def info(self) -> dict[str, Any]:
        with translate_errors("info"):
            return await self._client.info()

    # Documents

    async def index_document(
        self,
        *,
        index: str,
        document: dict[str, Any],
        id: str | None = None,  # noqa: A002
        refresh: bool | str | None = None,
    ) -> str:
        """Index a document and return its id."""
        logger.debug(f"PUT {index}/_doc/{id or ''}")
        with translate_errors("index"):
            response = await self._client.index(index=index, body=document, id=id, params=refresh_params(refresh))
        return response["_id"]

    async def get_document(self, *, index: str, id: str) -> dict[str, Any] | None:  # noqa: A002
        """Get a document, or None if it does not exist."""
        logger.debug(f"GET {index}/_doc/{id}")
        try:
            with translate_errors("get"):
                response = await self._client.get(index=index, id=id)
        except ClientResponseError as e:
            if isinstance(e.__cause__, NotFoundError) and is_missing_document(e.__cause__):
                return None
            raise
        return response if response.get("found") else None

    async def multi_get(self, *, index: str, ids: list[str]) -> list[dict[str, Any]]:
        """Get several documents; missing ones are left out, order is kept."""
        logger.debug(f"GET {index}/_mget ({len(ids)} ids)")
        with translate_errors("multi_get"):
            response = await self._client.mget(index=index, body={"ids": ids})
        return [doc for doc in response["docs"] if doc.get("found")]

    async def document_exists(self, *, index: str, id: str) -> bool:  # noqa: A002
        logger.debug(f"HEAD {index}/_doc/{id}")
        with translate_errors("exists"):
            return bool(await self._client.exists(index=index, id=id))

    async def delete_document(self, *, index: str, id: str, refresh: bool | str | None = None) -> bool:  # noqa: A002
        """Delete a document; returns False if it did not exist."""
        logger.debug(f"DELETE {index}/_doc/{id}")
        try:
            with translate_errors("delete"):
                response = await self._client.delete(index=index, id=id, params=refresh_params(refresh))
        except ClientResponseError as e:
            if isinstance(e.__cause__, NotFoundError) and is_missing_document(e.__cause__):
                return False
            raise
        return response.get("result") == "deleted"

    async def delete_by_query(self, *, index: str, body: dict[str, Any], refresh: bool | None = None) -> int:
        """Delete all documents matching the body's query; returns the deleted count."""
        logger.debug(f"POST {index}/_delete_by_query {body}")
        params = {"refresh": "true"} if refresh else {}
        with translate_errors("delete_by_query"):
            response = await self._client.delete_by_query(index=index, body=body, params=params)
        return int(response.get("deleted", 0))

    async def bulk(self, *, body: str, refresh: bool | str | None = None) -> list[str]:
        """Send a bulk body; returns the ids of the items in order."""
        with translate_errors("bulk"):
            response = await self._client.bulk(body=body, params=refresh_params(refresh))
        logger.debug(f"Bulk request took {response.get('took')}ms")
        return parse_bulk_response(response)

    # Search

    async def search(self, query: SearchQuery) -> dict[str, Any]:
        logger.debug(f"POST {query.index}/_search {query.body} {query.params}")
        with translate_errors("search"):
            return await self._client.search(index=query.index, body=query.body, params=query.params)

    async def scroll(self, *, scroll_id: str, keep_alive: str) -> dict[str, Any]:
        logger.debug("POST _search/scroll")
        with translate_errors("scroll"):
            return await self._client.scroll(body={"scroll_id": scroll_id, "scroll": keep_alive})

    async def clear_scroll(self, *, scroll_ids: list[str]) -> None:
        if not scroll_ids:
            return
        logger.debug(f"DELETE _search/scroll ({len(scroll_ids)} ids)")
        try:
            with translate_errors("clear_scroll"):
                await self._client.clear_scroll(body={"scroll_id": scroll_ids})
        except ClientResponseError as e:
            # Expired scroll contexts answer 404
            if e.status != 404:
                raise
            logger.debug("Scroll context already gone")

    async def count(self, *, index: str, body: dict[str, Any]) -> int:
        logger.debug(f"POST {index}/_count {body}")
        with translate_errors("count"):
            return int((await self._client.count(index=index, body=body))["count"])

    # Indexes

    async def create_index(self, *, index: str, body: dict[str, Any]) -> dict[str, Any]:
        logger.debug(f"PUT {index} {body}")
        with translate_errors("create_index"):
            return await self._client.indices.create(index=index, body=body)

    async def index_exists(self, *, index: str) -> bool:
        with translate_errors("index_exists"):
            return bool(await self._client.indices.exists(index=index))

    async def delete_index(self, *, index: str) -> dict[str, Any]:
        logger.debug(f"DELETE {index}")
        with translate_errors("delete_index"):
            return await self._client.indices.delete(index=index)

    async def get_index(self, *, index: str) -> dict[str, Any]:
        with translate_errors("get_index"):
            return await self._client.indices.get(index=index)

    async def put_mapping(self, *, index: str, body: dict[str, Any]) -> dict[str, Any]:
        logger.debug(f"PUT {index}/_mapping {body}")
        with translate_errors("put_mapping"):
            return await self._client.indices.put_mapping(index=index, body=body)

    async def refresh(self, *, index: str) -> None:
        logger.debug(f"POST {index}/_refresh")
        with translate_errors("refresh"):
            await self._client.indices.refresh(index=index)

    async def close(self) -> None:
        await self._client.close()
