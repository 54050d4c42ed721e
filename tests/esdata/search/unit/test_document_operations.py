"""Unit tests for DocumentOperations over the in-memory client."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from esdata.exceptions import BulkFailureError, ClientResponseError
from esdata.interfaces import IReporter
from esdata.query.criteria import where
from esdata.query.queries import CriteriaQuery, NativeQuery, PageRequest, Query, Sort
from esdata.search.coordinates import IndexCoordinates
from esdata.search.services.document_operations import DocumentOperations
from tests.esdata.fakes import FakeOpenSearch
from tests.esdata.models import Book, BookSummary, Event, Film, Genre, Review, make_books


@pytest.mark.unit
class TestDocumentWrites:
    """Tests for index and save_all."""

    def test_index_then_get(self, operations: DocumentOperations, fake_client: FakeOpenSearch) -> None:
        book = make_books()[0]

        doc_id = operations.index(book)
        loaded = operations.get(doc_id, Book)

        assert doc_id == "1"
        assert loaded == book
        assert fake_client.store["books"]["docs"]["1"]["author_name"] == "Ursula K. Le Guin"

    def test_index_writes_generated_id_back(self, operations: DocumentOperations) -> None:
        book = Book(title="Kindred", author="Octavia E. Butler", genre=Genre.FICTION, pages=264)

        doc_id = operations.index(book)

        assert book.id == doc_id
        assert operations.exists(doc_id, Book) is True

    def test_index_keeps_frozen_entities_untouched(
        self, operations: DocumentOperations, fake_client: FakeOpenSearch
    ) -> None:
        event = Event(name="launch", day=date(2024, 5, 1))

        doc_id = operations.index(event)

        assert event.id is None
        assert fake_client.store["events"]["docs"][doc_id] == {"name": "launch", "day": "2024-05-01"}

    def test_numeric_ids_are_written_as_strings(self, operations: DocumentOperations) -> None:
        event = Event(id=7, name="launch", day=date(2024, 5, 1))

        assert operations.index(event) == "7"
        assert operations.get("7", Event) == event

    def test_index_with_refresh(self, operations: DocumentOperations, fake_client: FakeOpenSearch) -> None:
        operations.index(make_books()[0], refresh="wait_for")

        assert fake_client.calls("index")[0]["params"] == {"refresh": "wait_for"}

    def test_index_into_explicit_coordinates(self, operations: DocumentOperations, fake_client: FakeOpenSearch) -> None:
        operations.index(make_books()[0], index=IndexCoordinates.of("books-2024", "books"))

        assert "1" in fake_client.store["books-2024"]["docs"]
        assert "books" not in fake_client.store

    def test_save_all_in_batches(self, operations: DocumentOperations, fake_client: FakeOpenSearch) -> None:
        books = make_books()
        books.append(Book(title="Kindred", author="Octavia E. Butler", genre=Genre.FICTION, pages=264))
        reporter = MagicMock(spec=IReporter)

        ids = operations.save_all(books, batch_size=2, reporter=reporter)

        assert ids[:5] == ["1", "2", "3", "4", "5"]
        assert books[5].id == ids[5]
        assert len(fake_client.calls("bulk")) == 3
        reporter.start_progress.assert_called_once_with(total=3)
        assert reporter.on_progress.call_count == 3
        reporter.stop_progress.assert_called_once()

    def test_search_on_nested_property(self, operations: DocumentOperations, fake_client: FakeOpenSearch) -> None:
        operations.save_all(
            [
                Film(id="1", title="Alien", reviews=[Review(reviewer="Ann", score=5)]),
                Film(id="2", title="Cats", reviews=[Review(reviewer="Bo", score=1)]),
            ]
        )

        hits = operations.search(CriteriaQuery(where("reviews.score").greater_than(3)), Film)

        assert [hit.id for hit in hits] == ["1"]
        assert hits[0].content.reviews == [Review(reviewer="Ann", score=5)]
        assert fake_client.calls("search")[0]["body"]["query"]["nested"]["path"] == "reviews"

    def test_save_all_empty(self, operations: DocumentOperations, fake_client: FakeOpenSearch) -> None:
        assert operations.save_all([]) == []
        assert fake_client.calls("bulk") == []

    def test_save_all_reports_failed_items(self, operations: DocumentOperations, fake_client: FakeOpenSearch) -> None:
        fake_client.reject_ids = {"2"}
        reporter = MagicMock(spec=IReporter)

        with pytest.raises(BulkFailureError) as exc_info:
            operations.save_all(make_books(), reporter=reporter)

        assert list(exc_info.value.failed) == ["2"]
        reporter.stop_progress.assert_called_once()


@pytest.mark.unit
class TestDocumentReads:
    """Tests for get, multi_get, exists, search, stream and count."""

    @pytest.fixture(autouse=True)
    def seed(self, seeded_client: FakeOpenSearch) -> None:
        self.client = seeded_client

    def test_get_missing_document(self, operations: DocumentOperations) -> None:
        assert operations.get("42", Book) is None

    def test_get_from_missing_index_raises(self, operations: DocumentOperations) -> None:
        with pytest.raises(ClientResponseError) as exc_info:
            operations.get("1", Book, index="missing")

        assert exc_info.value.status == 404

    def test_multi_get_keeps_order_and_skips_missing(self, operations: DocumentOperations) -> None:
        books = operations.multi_get(["3", "42", "1"], Book)

        assert [book.id for book in books] == ["3", "1"]

    def test_multi_get_without_ids(self, operations: DocumentOperations) -> None:
        assert operations.multi_get([], Book) == []
        assert self.client.calls("mget") == []

    def test_exists(self, operations: DocumentOperations) -> None:
        assert operations.exists("1", Book) is True
        assert operations.exists("42", index="books") is False

    def test_search_paged_and_sorted(self, operations: DocumentOperations) -> None:
        query = Query.match_all(pageable=PageRequest(0, 2), sort=[Sort.asc("pages")])

        hits = operations.search(query, Book)

        assert hits.total_hits == 5
        assert [hit.id for hit in hits] == ["2", "1"]
        assert hits[0].sort_values == (212,)
        assert isinstance(hits[0].content, Book)

    def test_search_with_criteria(self, operations: DocumentOperations) -> None:
        query = CriteriaQuery(where("author").is_("Ursula K. Le Guin") & where("pages").greater_than(350))

        hits = operations.search(query, Book)

        assert [hit.content.title for hit in hits] == ["The Dispossessed"]

    def test_search_with_projection(self, operations: DocumentOperations) -> None:
        query = Query.match_all(source_includes=["title", "author"], sort=[Sort.desc("pages")])

        hits = operations.search(query, Book, return_type=BookSummary)

        first = hits[0].content
        assert first == BookSummary(id="4", title="SPQR", author="Mary Beard")
        assert self.client.calls("search")[0]["body"]["_source"] == {"includes": ["title", "author_name"]}

    def test_search_native_query(self, operations: DocumentOperations) -> None:
        hits = operations.search(NativeQuery({"match": {"title": "gene"}}), Book)

        assert hits.contents()[0].id == "5"

    def test_search_one(self, operations: DocumentOperations) -> None:
        hit = operations.search_one(Query.match_all(sort=[Sort.desc("pages")]), Book)

        assert hit is not None
        assert hit.id == "4"
        assert operations.search_one(CriteriaQuery(where("pages").greater_than(1000)), Book) is None

    def test_count(self, operations: DocumentOperations) -> None:
        assert operations.count(entity_type=Book) == 5
        assert operations.count(CriteriaQuery(where("genre").is_(Genre.SCIENCE)), Book) == 2

    def test_count_matches_total_hits(self, operations: DocumentOperations) -> None:
        query = CriteriaQuery(where("tags").is_("classic"), pageable=PageRequest(0, 1))

        assert operations.count(query, Book) == operations.search(query, Book).total_hits == 3

    def test_stream_reads_every_hit_and_clears_scroll(self, operations: DocumentOperations) -> None:
        hits = list(operations.stream(Query.match_all(sort=[Sort.asc("pages")]), Book, batch_size=2))

        assert [hit.id for hit in hits] == ["2", "1", "5", "3", "4"]
        assert self.client.calls("search")[0]["params"] == {"scroll": "1m"}
        assert len(self.client.calls("scroll")) == 3
        assert self.client.cleared_scrolls == ["scroll-1"]

    def test_stream_closed_early_clears_scroll(self, operations: DocumentOperations) -> None:
        stream = operations.stream(Query.match_all(), Book, batch_size=2)

        next(stream)
        stream.close()  # type: ignore[attr-defined]

        assert self.client.cleared_scrolls == ["scroll-1"]

    def test_stream_paged_query_sends_single_request(self, operations: DocumentOperations) -> None:
        hits = list(operations.stream(Query.match_all(pageable=PageRequest(1, 2)), Book))

        assert len(hits) == 2
        assert self.client.calls("scroll") == []
        assert self.client.calls("search")[0]["params"] == {}

    def test_stream_is_lazy(self, operations: DocumentOperations) -> None:
        operations.stream(Query.match_all(), Book)

        assert self.client.calls("search") == []


@pytest.mark.unit
class TestDocumentDeletes:
    """Tests for delete, delete_entity and delete_by_query."""

    @pytest.fixture(autouse=True)
    def seed(self, seeded_client: FakeOpenSearch) -> None:
        self.client = seeded_client

    def test_delete(self, operations: DocumentOperations) -> None:
        assert operations.delete("1", Book) == "1"
        assert operations.exists("1", Book) is False

    def test_delete_missing_document_returns_id(self, operations: DocumentOperations) -> None:
        assert operations.delete("42", Book) == "42"

    def test_delete_entity(self, operations: DocumentOperations) -> None:
        book = make_books()[3]

        assert operations.delete_entity(book, refresh=True) == "4"
        assert self.client.calls("delete")[0]["params"] == {"refresh": "true"}

    def test_delete_entity_without_id_raises(self, operations: DocumentOperations) -> None:
        book = Book(title="Kindred", author="Octavia E. Butler", genre=Genre.FICTION, pages=264)

        with pytest.raises(ValueError, match="without id"):
            operations.delete_entity(book)

    def test_delete_by_query(self, operations: DocumentOperations) -> None:
        deleted = operations.delete_by_query(CriteriaQuery(where("genre").is_(Genre.FICTION)), Book)

        assert deleted == 2
        assert operations.count(entity_type=Book) == 3

    def test_operations_need_entity_type_or_index(self, operations: DocumentOperations) -> None:
        with pytest.raises(ValueError, match="entity type or index"):
            operations.delete("1")

    def test_refresh(self, operations: DocumentOperations) -> None:
        operations.refresh(Book)

        assert self.client.calls("indices.refresh") == [{"index": "books"}]
