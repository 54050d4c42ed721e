"""Pytest fixtures for CLI command tests."""

from collections.abc import Callable
from typing import Any

import pytest

from esdata.mapping.mapper import EntityMapper
from esdata.search.client import SearchClient
from tests.esdata.fakes import FakeOpenSearch
from tests.esdata.models import make_books


@pytest.fixture
def fake_client() -> FakeOpenSearch:
    return FakeOpenSearch()


@pytest.fixture
def search_client_factory(fake_client: FakeOpenSearch) -> Callable[..., SearchClient]:
    """Replacement for get_search_client connecting to the in-memory client."""

    def factory(**kwargs: Any) -> SearchClient:
        return SearchClient(client=fake_client, reporter=kwargs["reporter"])  # type: ignore[arg-type]

    return factory


@pytest.fixture
def seeded_books(fake_client: FakeOpenSearch) -> FakeOpenSearch:
    """Fake client with the sample books stored in the 'books' index."""
    mapper = EntityMapper()
    fake_client.add_documents("books", {book.id: mapper.to_document(book) for book in make_books()})
    return fake_client
