"""Pytest fixtures for esdata tests."""

from unittest.mock import MagicMock

import pytest
from botocore.credentials import Credentials

from esdata.mapping.mapper import EntityMapper
from esdata.search.adapters import AsyncClientAdapter, ClientAdapter
from esdata.search.services.document_operations import DocumentOperations
from esdata.search.services.reactive_document_operations import ReactiveDocumentOperations
from tests.esdata.fakes import AsyncFakeOpenSearch, FakeOpenSearch
from tests.esdata.models import make_books


@pytest.fixture
def mock_credentials() -> Credentials:
    """Create mock AWS credentials."""
    return Credentials(
        access_key="test-access-key",
        secret_key="test-secret-key",
        token="test-token",
    )


@pytest.fixture
def mock_opensearch_client() -> MagicMock:
    """Create a mock OpenSearch client answering the connection check."""
    mock_client_instance = MagicMock()
    mock_client_instance.info.return_value = {"cluster_name": "test-cluster", "version": {"number": "2.13.0"}}
    mock_client_instance.indices = MagicMock()
    return mock_client_instance


@pytest.fixture
def fake_client() -> FakeOpenSearch:
    return FakeOpenSearch()


@pytest.fixture
def async_fake_client(fake_client: FakeOpenSearch) -> AsyncFakeOpenSearch:
    return AsyncFakeOpenSearch(fake_client)


@pytest.fixture
def mapper() -> EntityMapper:
    return EntityMapper()


@pytest.fixture
def operations(fake_client: FakeOpenSearch, mapper: EntityMapper) -> DocumentOperations:
    return DocumentOperations(adapter=ClientAdapter(client=fake_client), mapper=mapper)


@pytest.fixture
def reactive_operations(async_fake_client: AsyncFakeOpenSearch, mapper: EntityMapper) -> ReactiveDocumentOperations:
    return ReactiveDocumentOperations(adapter=AsyncClientAdapter(client=async_fake_client), mapper=mapper)  # type: ignore[arg-type]


@pytest.fixture
def seeded_client(fake_client: FakeOpenSearch, mapper: EntityMapper) -> FakeOpenSearch:
    """Fake client with the sample books stored in the 'books' index."""
    fake_client.add_documents("books", {book.id: mapper.to_document(book) for book in make_books()})
    return fake_client
