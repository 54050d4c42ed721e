"""Query builder for search requests."""

from typing import Any, Self

from esdata.exceptions import QueryBuildError
from esdata.interfaces import SearchQuery
from esdata.query.queries import CriteriaQuery, Direction, NativeQuery, Query, StringQuery
from esdata.query.translator import CriteriaTranslator
from esdata.search.coordinates import IndexCoordinates


class SearchQueryBuilder:
    """Search request builder."""

    def __init__(self, index: IndexCoordinates | str) -> None:
        """Initialize SearchQueryBuilder with index coordinates or an index name."""
        self._exclude_fields: list[str] = []
        self._filters: list[dict[str, Any]] = []
        self._include_fields: list[str] = []
        self._index = index.joined if isinstance(index, IndexCoordinates) else index
        self._min_score: float | None = None
        self._offset: int | None = None
        self._query: dict[str, Any] = {"match_all": {}}
        self._scroll: str | None = None
        self._size: int | None = None
        self._sort: list[dict[str, Any]] = []
        self._track_total_hits: bool | int | None = None

    @classmethod
    def for_query(
        cls,
        query: Query,
        *,
        index: IndexCoordinates | str,
        translator: CriteriaTranslator | None = None,
    ) -> "SearchQueryBuilder":
        """Create a builder holding the clause and options of a query object."""
        translator = translator or CriteriaTranslator()
        builder = cls(index)
        if isinstance(query, CriteriaQuery):
            builder.with_query(translator.translate(query.criteria))
        elif isinstance(query, StringQuery):
            builder.with_query(query.parsed())
        elif isinstance(query, NativeQuery):
            builder.with_query(query.query)
        else:
            raise QueryBuildError(f"Unsupported query type {type(query).__name__}")

        for sort in query.sort:
            builder.sort_by(translator.resolve_field(sort.field, for_sort=True), sort.direction)
        if query.source_includes:
            builder.include_fields([translator.resolve_field(f) for f in query.source_includes])
        if query.source_excludes:
            builder.exclude_fields([translator.resolve_field(f) for f in query.source_excludes])
        if query.pageable is not None:
            builder.offset(query.pageable.offset).limit_results(query.pageable.size)
        if query.track_total_hits is not None:
            builder.track_total_hits(query.track_total_hits)
        if query.min_score is not None:
            builder.min_score(query.min_score)
        return builder

    def with_query(self, clause: dict[str, Any]) -> Self:
        """Replace the main query clause."""
        if not isinstance(clause, dict) or len(clause) == 0:
            raise QueryBuildError("Query clause must be a non-empty dict")
        self._query = clause
        return self

    def add_filter(self, value: dict[str, Any]) -> Self:
        """Add a single filter to the query."""
        self.add_filters([value])
        return self

    def add_filters(self, values: list[dict[str, Any]]) -> Self:
        """Add multiple filters to the query."""
        self._filters.extend(values)
        return self

    def match(self, *, field: str, value: str) -> Self:
        """Match a field to a query."""
        self._query = {"match": {field: value}}
        return self

    def match_exactly(self, *, field: str, value: str) -> Self:
        """Match a field to a query exactly."""
        self._query = {"term": {f"{field}.keyword": value}}
        return self

    def include_fields(self, fields: list[str]) -> Self:
        """Only return these source fields."""
        self._include_fields.extend(fields)
        return self

    def exclude_fields(self, fields: list[str]) -> Self:
        """Exclude fields from the query."""
        self._exclude_fields.extend(fields)
        return self

    def limit_results(self, size: int) -> Self:
        """Limit the number of results."""
        self._size = size
        return self

    def offset(self, offset: int) -> Self:
        """Skip the first results."""
        self._offset = offset
        return self

    def sort_by(self, field: str, direction: Direction = Direction.ASC) -> Self:
        """Add a sort on a field."""
        self._sort.append({field: {"order": direction.value}})
        return self

    def track_total_hits(self, value: bool | int) -> Self:
        """Control how accurately the total hit count is tracked."""
        self._track_total_hits = value
        return self

    def min_score(self, value: float) -> Self:
        """Drop hits scoring below value."""
        self._min_score = value
        return self

    def scroll(self, keep_alive: str) -> Self:
        """Open a scroll context kept alive for keep_alive (e.g. "1m")."""
        self._scroll = keep_alive
        return self

    def _query_clause(self) -> dict[str, Any]:
        if len(self._filters) > 0:
            return {
                "bool": {
                    "must": [self._query],
                    "filter": self._filters,
                }
            }
        return self._query

    def build(self) -> SearchQuery:
        """Build the query."""
        params: dict[str, Any] = {}
        body: dict[str, Any] = {"query": self._query_clause()}

        if len(self._include_fields) > 0 or len(self._exclude_fields) > 0:
            source: dict[str, Any] = {}
            if len(self._include_fields) > 0:
                source["includes"] = self._include_fields
            if len(self._exclude_fields) > 0:
                source["excludes"] = self._exclude_fields
            body["_source"] = source

        if self._size is not None:
            body["size"] = self._size

        if self._offset is not None:
            body["from"] = self._offset

        if len(self._sort) > 0:
            body["sort"] = self._sort

        if self._track_total_hits is not None:
            body["track_total_hits"] = self._track_total_hits

        if self._min_score is not None:
            body["min_score"] = self._min_score

        if self._scroll is not None:
            if self._offset:
                raise QueryBuildError("Scrolling searches cannot start at an offset")
            params["scroll"] = self._scroll

        return SearchQuery(index=self._index, body=body, params=params)

    def build_count(self) -> SearchQuery:
        """Build a count request: the query clause only."""
        return SearchQuery(index=self._index, body={"query": self._query_clause()})

