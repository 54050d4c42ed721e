"""Unit tests for CriteriaTranslator."""

from datetime import date

import pytest

from esdata.exceptions import QueryBuildError
from esdata.mapping.mapper import EntityMapper
from esdata.mapping.metadata import get_metadata
from esdata.query.criteria import Criteria, MatchAll, where
from esdata.query.translator import CriteriaTranslator, escape_wildcard
from tests.esdata.fakes import matches
from tests.esdata.models import Book, Film, Genre, Library, make_books


@pytest.fixture
def translator() -> CriteriaTranslator:
    return CriteriaTranslator(metadata=get_metadata(Book))


@pytest.mark.unit
class TestCriteriaTranslator:
    """Tests for the generated query clauses."""

    def test_match_all(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(MatchAll()) == {"match_all": {}}

    def test_equals_on_text_field_targets_keyword(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("author").is_("Mary Beard")) == {"term": {"author_name.keyword": "Mary Beard"}}

    def test_equals_on_keyword_field(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("isbn").is_("978")) == {"term": {"isbn": "978"}}

    def test_enum_values_are_written(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("genre").is_(Genre.SCIENCE)) == {"term": {"genre": "science"}}

    def test_equals_on_number(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("pages").is_(304)) == {"term": {"pages": 304}}

    def test_in(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("genre").in_([Genre.FICTION, Genre.HISTORY])) == {
            "terms": {"genre": ["fiction", "history"]}
        }

    def test_range_writes_dates(self, translator: CriteriaTranslator) -> None:
        clause = translator.translate(where("published").between(date(1970, 1, 1), date(1980, 1, 1)))

        assert clause == {"range": {"published": {"gte": "1970-01-01", "lte": "1980-01-01"}}}

    def test_range_with_string_bounds_targets_keyword(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("author").between("A", "M")) == {
            "range": {"author_name.keyword": {"gte": "A", "lte": "M"}}
        }
        assert translator.translate(where("isbn").greater_than("978")) == {"range": {"isbn": {"gt": "978"}}}

    def test_range_with_string_bounds_on_text_without_keyword_raises(self, translator: CriteriaTranslator) -> None:
        with pytest.raises(QueryBuildError, match="keyword subfield"):
            translator.translate(where("summary").less_than("m"))

    def test_match(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("title").matches("history")) == {
            "match": {"title": {"query": "history", "operator": "or"}}
        }

    def test_wildcards_escape_metacharacters(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("title").contains("a*b")) == {
            "wildcard": {"title.keyword": {"value": "*a\\*b*"}}
        }
        assert translator.translate(where("isbn").starts_with("978")) == {"wildcard": {"isbn": {"value": "978*"}}}
        assert translator.translate(where("isbn").ends_with("X")) == {"wildcard": {"isbn": {"value": "*X"}}}

    def test_exists_and_null(self, translator: CriteriaTranslator) -> None:
        assert translator.translate(where("price").exists()) == {"exists": {"field": "price"}}
        assert translator.translate(where("price").is_null()) == {
            "bool": {"must_not": [{"exists": {"field": "price"}}]}
        }

    def test_boolean_composition(self, translator: CriteriaTranslator) -> None:
        criteria = (where("genre").is_(Genre.FICTION) | where("pages").greater_than(500)) & ~where("isbn").exists()

        assert translator.translate(criteria) == {
            "bool": {
                "must": [
                    {
                        "bool": {
                            "should": [{"term": {"genre": "fiction"}}, {"range": {"pages": {"gt": 500}}}],
                            "minimum_should_match": 1,
                        }
                    },
                    {"bool": {"must_not": [{"exists": {"field": "isbn"}}]}},
                ]
            }
        }

    def test_nested_paths_are_resolved(self) -> None:
        translator = CriteriaTranslator(metadata=get_metadata(Library))

        assert translator.translate(where("address.zip_code").is_("0150")) == {"term": {"address.zip": "0150"}}
        assert translator.translate(where("address.city").is_("Oslo")) == {"term": {"address.city.keyword": "Oslo"}}

    def test_nested_fields_are_wrapped_in_nested_queries(self) -> None:
        translator = CriteriaTranslator(metadata=get_metadata(Film))

        assert translator.translate(where("reviews.score").greater_than(3)) == {
            "nested": {"path": "reviews", "query": {"range": {"reviews.score": {"gt": 3}}}}
        }
        assert translator.translate(where("reviews.reviewer").is_("Ann") & where("title").matches("alien")) == {
            "bool": {
                "must": [
                    {"nested": {"path": "reviews", "query": {"term": {"reviews.reviewer.keyword": "Ann"}}}},
                    {"match": {"title": {"query": "alien", "operator": "or"}}},
                ]
            }
        }

    def test_exact_match_on_text_without_keyword_raises(self, translator: CriteriaTranslator) -> None:
        with pytest.raises(QueryBuildError, match="keyword subfield"):
            translator.translate(where("summary").is_("short"))

    def test_without_metadata_assumes_dynamic_mapping(self) -> None:
        translator = CriteriaTranslator()

        assert translator.translate(where("name").is_("Ann")) == {"term": {"name.keyword": "Ann"}}
        assert translator.translate(where("age").is_(3)) == {"term": {"age": 3}}

    def test_unserializable_value_raises(self, translator: CriteriaTranslator) -> None:
        with pytest.raises(QueryBuildError):
            translator.translate(where("pages").is_(object()))

    def test_resolve_field_for_sort(self, translator: CriteriaTranslator) -> None:
        assert translator.resolve_field("author", for_sort=True) == "author_name.keyword"
        assert translator.resolve_field("author") == "author_name"
        assert translator.resolve_field("pages", for_sort=True) == "pages"
        assert translator.resolve_field("summary", for_sort=True) == "summary"

    def test_escape_wildcard(self) -> None:
        assert escape_wildcard("a?b*c\\") == "a\\?b\\*c\\\\"


def _ids(criteria: Criteria) -> set[str]:
    """Ids of the sample books a criteria selects, evaluated on the translated clause."""
    mapper = EntityMapper()
    clause = CriteriaTranslator(metadata=get_metadata(Book), mapper=mapper).translate(criteria)
    return {book.id for book in make_books() if matches(clause, mapper.to_document(book))}


def _select(predicate) -> set[str]:  # noqa: ANN001
    return {book.id for book in make_books() if predicate(book)}


@pytest.mark.unit
class TestTranslationSemantics:
    """The translated clause selects exactly the entities the criteria describe."""

    @pytest.mark.parametrize(
        ("criteria", "predicate"),
        [
            (where("author").is_("Ursula K. Le Guin"), lambda b: b.author == "Ursula K. Le Guin"),
            (where("genre").not_equals(Genre.SCIENCE), lambda b: b.genre is not Genre.SCIENCE),
            (where("pages").between(300, 400), lambda b: 300 <= b.pages <= 400),
            (where("author").between("M", "S"), lambda b: "M" <= b.author <= "S"),
            (where("pages").less_than(300) | where("pages").greater_than(600), lambda b: b.pages < 300 or b.pages > 600),
            (where("tags").is_("classic"), lambda b: "classic" in b.tags),
            (where("price").is_null(), lambda b: b.price is None),
            (where("title").starts_with("The "), lambda b: b.title.startswith("The ")),
            (where("title").matches("selfish dispossessed"), lambda b: b.id in {"3", "5"}),
            (where("title").matches_all("brief time"), lambda b: b.id == "2"),
            (
                where("genre").in_([Genre.FICTION, Genre.SCIENCE]) & ~where("tags").is_("classic"),
                lambda b: b.genre in (Genre.FICTION, Genre.SCIENCE) and "classic" not in b.tags,
            ),
            (
                where("published").greater_than_equal(date(1975, 1, 1)) & where("author").ends_with("s"),
                lambda b: b.published >= date(1975, 1, 1) and b.author.endswith("s"),
            ),
        ],
    )
    def test_selects_expected_books(self, criteria: Criteria, predicate) -> None:  # noqa: ANN001
        assert _ids(criteria) == _select(predicate)
