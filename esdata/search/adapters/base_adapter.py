"""Shared behaviour of the blocking and asyncio client adapters."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opensearchpy.exceptions import ConnectionError as TransportConnectionError
from opensearchpy.exceptions import SerializationError, TransportError

from esdata.exceptions import (
    BulkFailureError,
    ClientConnectionError,
    ClientResponseError,
    ClientSerializationError,
)
from esdata.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Translate opensearch-py transport errors into ClientError subclasses.

    Works around both blocking calls and awaited coroutines, since the
    exception is raised inside the ``with`` block either way.
    """
    try:
        yield
    except TransportConnectionError as e:
        # Connection errors are TransportErrors too, check them first
        raise ClientConnectionError(
            f"{operation} failed, search service unreachable: {e.error}", operation=operation
        ) from e
    except TransportError as e:
        raise ClientResponseError(
            f"{operation} failed with status {e.status_code}: {e.error}",
            operation=operation,
            status=e.status_code,
            error=e.error,
            info=e.info,
        ) from e
    except SerializationError as e:
        raise ClientSerializationError(f"{operation} failed to (de)serialize: {e}", operation=operation) from e


def is_missing_document(error: TransportError) -> bool:
    """Tell a missing document apart from a missing index in a 404 response."""
    info = error.info if isinstance(error.info, dict) else {}
    return info.get("found") is False or info.get("result") == "not_found"


def refresh_params(refresh: bool | str | None) -> dict[str, Any]:
    """URL parameters for a write's refresh policy (True, False or "wait_for")."""
    if refresh is None:
        return {}
    if isinstance(refresh, bool):
        return {"refresh": "true" if refresh else "false"}
    return {"refresh": refresh}


def create_bulk_body(*, index: str, documents: list[tuple[str | None, dict[str, Any]]]) -> str:
    """Create a newline-delimited bulk body of index actions."""
    bulk_body: list[str] = []
    for doc_id, document in documents:
        action: dict[str, Any] = {"_index": index}
        if doc_id is not None:
            action["_id"] = doc_id
        bulk_body.append(json.dumps({"index": action}))
        bulk_body.append(json.dumps(document))
    return "\n".join(bulk_body) + "\n"


def parse_bulk_response(response: dict[str, Any]) -> list[str]:
    """Return the ids of a bulk response, raising for failed items.

    Raises:
        BulkFailureError: If any item failed, with the failures keyed by id
    """
    ids: list[str] = []
    failed: dict[str, Any] = {}
    for position, item in enumerate(response.get("items", [])):
        result = next(iter(item.values()))
        doc_id = result.get("_id") or f"#{position}"
        if "error" in result:
            failed[doc_id] = result["error"]
            continue
        ids.append(result["_id"])

    if failed or response.get("errors"):
        error_types = sorted({error.get("type", "unknown") for error in failed.values() if isinstance(error, dict)})
        logger.warning(failed)
        raise BulkFailureError(
            f"Bulk request has {len(failed)} failed items ({error_types})",
            failed=failed,
        )
    return ids
