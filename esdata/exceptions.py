"""Error hierarchy for esdata.

Every error raised by the library derives from EsDataError. Nothing is
recovered silently: mapping, query and client failures all surface to the
caller, either raised at the call site or raised from a stream's __anext__.
"""

from typing import Any


class EsDataError(Exception):
    """Base class for all esdata errors."""


class MappingError(EsDataError):
    """An entity could not be converted to or from a document."""


class QueryBuildError(EsDataError):
    """A criteria expression or query object cannot be translated."""


class StreamAlreadyConsumedError(EsDataError):
    """A search stream was subscribed to more than once."""


class ClientError(EsDataError):
    """A request to the search service failed."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class ClientConnectionError(ClientError):
    """The search service could not be reached (refused, timed out, TLS failure)."""


class ClientResponseError(ClientError):
    """The search service answered with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        status: int | str | None = None,
        error: Any = None,
        info: Any = None,
    ) -> None:
        super().__init__(message, operation=operation)
        self.status = status
        self.error = error
        self.info = info


class ClientSerializationError(ClientError):
    """A request or response body could not be (de)serialized by the transport."""


class BulkFailureError(ClientError):
    """One or more items of a bulk request failed.

    Attributes:
        failed: Mapping of document id to the error reported for it
    """

    def __init__(self, message: str, *, failed: dict[str, Any], operation: str | None = "bulk") -> None:
        super().__init__(message, operation=operation)
        self.failed = failed


class ConfigurationError(EsDataError):
    """Connection settings or credentials are missing or invalid."""
