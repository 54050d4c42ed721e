import os
from typing import Any, Self

from botocore.credentials import Credentials
from opensearchpy import AsyncOpenSearch, OpenSearch

from esdata.config import ClientConfig
from esdata.exceptions import ClientResponseError
from esdata.interfaces import IReporter
from esdata.logging import get_logger
from esdata.mapping.conversions import ConversionRegistry
from esdata.mapping.mapper import EntityMapper
from esdata.null_reporter import NullReporter
from esdata.search.adapters import AsyncClientAdapter, ClientAdapter
from esdata.search.repositories import IndexRepository
from esdata.search.services.document_operations import DocumentOperations
from esdata.search.services.reactive_document_operations import ReactiveDocumentOperations

logger = get_logger(__name__)


def _check_info(info: dict[str, Any] | None, error: ClientResponseError | None, reporter: IReporter) -> None:
    if error is None:
        cluster = (info or {}).get("cluster_name", "unknown")
        version = (info or {}).get("version", {}).get("number", "unknown")
        reporter.on_message(f"Connected to cluster: {cluster} (version {version})")
        return
    if error.status != 403:
        raise error
    if "AWS_EXECUTION_ENV" not in os.environ:
        raise ClientResponseError(
            "Authentication successful but access denied (403). "
            "Please check the domain's resource-based access policy. "
            "The user/role needs 'es:ESHttp*' permissions. "
            f"Error details: {error.info or 'Access denied'}",
            operation="info",
            status=error.status,
            error=error.error,
            info=error.info,
        ) from error
    # Lambda roles are commonly denied the root path
    reporter.on_message("Skipping connection test")


class SearchClient:
    """Blocking entry point: index management and document operations on one connection.

    Args:
        config: Connection settings (defaults to localhost)
        reporter: Receives connection messages and bulk progress
        conversions: Custom value conversions used by the mapper
        credentials: AWS credentials used for SigV4 signing when config.aws_region is set
        client: Existing opensearch-py client to use instead of connecting
    """

    def __init__(
        self,
        *,
        config: ClientConfig | None = None,
        reporter: IReporter | None = None,
        conversions: ConversionRegistry | None = None,
        credentials: Credentials | None = None,
        client: OpenSearch | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._reporter = reporter or NullReporter()
        self._credentials = credentials
        self._client = client or OpenSearch(**self._config.connection_kwargs(credentials))
        self._adapter = ClientAdapter(client=self._client)
        try:
            self._connect()
        except BaseException:
            self._adapter.close()
            raise

        self.mapper = EntityMapper(conversions=conversions)

        # Initialize repository classes
        self.indexes = IndexRepository(adapter=self._adapter, mapper=self.mapper)

        # Initialize service classes
        self.operations = DocumentOperations(adapter=self._adapter, mapper=self.mapper)

    def _connect(self) -> None:
        logger.debug(f"Connecting to {self._config.url}")
        try:
            info = self._adapter.info()
        except ClientResponseError as e:
            _check_info(None, e, self._reporter)
        else:
            _check_info(info, None, self._reporter)

    @property
    def adapter(self) -> ClientAdapter:
        return self._adapter

    @property
    def reporter(self) -> IReporter:
        return self._reporter

    def close(self) -> None:
        self._adapter.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()


class AsyncSearchClient:
    """Asyncio entry point exposing the reactive document operations.

    Nothing is sent on construction; ``await open()`` (or ``async with``)
    verifies the connection.
    """

    def __init__(
        self,
        *,
        config: ClientConfig | None = None,
        reporter: IReporter | None = None,
        conversions: ConversionRegistry | None = None,
        credentials: Credentials | None = None,
        client: AsyncOpenSearch | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._reporter = reporter or NullReporter()
        self._client = client or AsyncOpenSearch(**self._config.async_connection_kwargs(credentials))
        self._adapter = AsyncClientAdapter(client=self._client)

        self.mapper = EntityMapper(conversions=conversions)
        self.operations = ReactiveDocumentOperations(adapter=self._adapter, mapper=self.mapper)

    @property
    def adapter(self) -> AsyncClientAdapter:
        return self._adapter

    async def open(self) -> Self:
        logger.debug(f"Connecting to {self._config.url}")
        try:
            info = await self._adapter.info()
        except ClientResponseError as e:
            _check_info(None, e, self._reporter)
        else:
            _check_info(info, None, self._reporter)
        return self

    async def close(self) -> None:
        await self._adapter.close()

    async def __aenter__(self) -> Self:
        try:
            return await self.open()
        except BaseException:
            await self.close()
            raise

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
