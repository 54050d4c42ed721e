"""Cancellable asynchronous search result streams."""

import asyncio
from collections import deque
from collections.abc import Callable
from typing import Any, Self

from esdata.exceptions import StreamAlreadyConsumedError
from esdata.interfaces import SearchQuery
from esdata.logging import get_logger
from esdata.search.adapters import AsyncClientAdapter

logger = get_logger(__name__)


class CancellationToken:
    """Explicit cancellation signal shared between a caller and one or more streams."""

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        for callback in list(self._callbacks):
            callback()
        self._callbacks.clear()

    def add_callback(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)


def _current_task_cancelling() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class SearchStream[T]:
    """Single-subscription async iterator over search results.

    Nothing is sent before iteration starts. With a keep-alive the stream
    pages through all results with the scroll API, otherwise it emits a
    single page. ``cancel()`` (or the cancellation token) stops emission
    immediately and cancels the request in flight; the scroll context is
    cleared on completion, cancellation and error. Errors terminate the
    stream and are raised from ``__anext__``.
    """

    def __init__(
        self,
        *,
        adapter: AsyncClientAdapter,
        prepare: Callable[[], SearchQuery],
        transform: Callable[[dict[str, Any]], T],
        keep_alive: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._adapter = adapter
        self._prepare = prepare
        self._transform = transform
        self._keep_alive = keep_alive
        self._cancellation = cancellation

        self._buffer: deque[dict[str, Any]] = deque()
        self._inflight: asyncio.Future[dict[str, Any]] | None = None
        self._scroll_id: str | None = None
        self._subscribed = False
        self._started = False
        self._exhausted = False
        self._cancelled = False
        self._finished = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled or (self._cancellation is not None and self._cancellation.cancelled)

    def cancel(self) -> None:
        """Stop emitting items and abort the request in flight."""
        if self._cancelled:
            return
        logger.debug("Search stream cancelled")
        self._cancelled = True
        self._buffer.clear()
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    def __aiter__(self) -> Self:
        self._subscribe()
        return self

    def _subscribe(self) -> None:
        if self._subscribed:
            raise StreamAlreadyConsumedError("A search stream can only be consumed once")
        self._subscribed = True
        if self._cancellation is not None:
            self._cancellation.add_callback(self.cancel)

    async def __anext__(self) -> T:
        if not self._subscribed:
            self._subscribe()
        while True:
            if self._cancelled or self._finished:
                await self._finish()
                raise StopAsyncIteration
            if self._buffer:
                raw = self._buffer.popleft()
                try:
                    return self._transform(raw)
                except Exception:
                    self._buffer.clear()
                    await self._finish()
                    raise
            if self._exhausted:
                await self._finish()
                raise StopAsyncIteration
            await self._fetch()

    async def _fetch(self) -> None:
        try:
            if not self._started:
                request = self._prepare()
                logger.debug(f"Search stream subscribed on {request.index}")
                self._inflight = asyncio.ensure_future(self._adapter.search(request))
            elif self._scroll_id is not None and self._keep_alive is not None:
                self._inflight = asyncio.ensure_future(
                    self._adapter.scroll(scroll_id=self._scroll_id, keep_alive=self._keep_alive)
                )
            else:
                self._exhausted = True
                return
            response = await self._inflight
        except asyncio.CancelledError:
            if self._cancelled and not _current_task_cancelling():
                await self._finish()
                raise StopAsyncIteration from None
            self._cancelled = True
            await self._finish()
            raise
        except Exception:
            await self._finish()
            raise
        finally:
            self._inflight = None

        self._started = True
        self._scroll_id = response.get("_scroll_id") or self._scroll_id
        hits = response.get("hits", {}).get("hits", [])
        self._buffer.extend(hits)
        if not hits or self._keep_alive is None or self._scroll_id is None:
            self._exhausted = True

    async def _finish(self) -> None:
        if self._finished and self._scroll_id is None:
            return
        self._finished = True
        if self._cancellation is not None:
            self._cancellation.remove_callback(self.cancel)
        scroll_id, self._scroll_id = self._scroll_id, None
        if scroll_id is not None:
            logger.debug("Clearing scroll context")
            await self._adapter.clear_scroll(scroll_ids=[scroll_id])

    async def aclose(self) -> None:
        """Cancel the stream and release its scroll context."""
        self.cancel()
        await self._finish()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    async def collect(self) -> list[T]:
        """Consume the stream into a list."""
        return [item async for item in self]
