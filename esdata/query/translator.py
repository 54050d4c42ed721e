"""Translation of criteria trees into query DSL."""

import re
from typing import Any

from esdata.exceptions import MappingError, QueryBuildError
from esdata.mapping.annotations import FieldType
from esdata.mapping.mapper import EntityMapper
from esdata.mapping.metadata import EntityMetadata, PropertyMetadata
from esdata.query.criteria import (
    And,
    Criteria,
    Equals,
    Exists,
    In,
    Match,
    MatchAll,
    Not,
    Or,
    Range,
    Wildcard,
)

_WILDCARD_SPECIAL = re.compile(r"([\\*?])")


def escape_wildcard(text: str) -> str:
    """Escape the wildcard metacharacters of a user supplied fragment."""
    return _WILDCARD_SPECIAL.sub(r"\\\1", text)


class CriteriaTranslator:
    """Translates criteria into query DSL clauses.

    With entity metadata, attribute names are resolved to document field names
    and exact string comparisons on text fields target their ``keyword``
    subfield. Without metadata, dynamic mapping is assumed: strings are text
    fields with a ``keyword`` subfield.
    """

    def __init__(self, *, metadata: EntityMetadata | None = None, mapper: EntityMapper | None = None) -> None:
        self._metadata = metadata
        self._mapper = mapper or EntityMapper()

    def translate(self, criteria: Criteria) -> dict[str, Any]:
        """Translate a criteria tree to a query clause.

        Clauses on fields below a ``nested`` property are wrapped in a
        ``nested`` query for each nested level, outermost first.
        """
        if isinstance(criteria, MatchAll):
            return {"match_all": {}}
        if isinstance(criteria, And):
            return {"bool": {"must": [self.translate(child) for child in criteria.children]}}
        if isinstance(criteria, Or):
            return {
                "bool": {
                    "should": [self.translate(child) for child in criteria.children],
                    "minimum_should_match": 1,
                }
            }
        if isinstance(criteria, Not):
            return {"bool": {"must_not": [self.translate(criteria.child)]}}
        clause = self._field_clause(criteria)
        for path in reversed(self._nested_paths(criteria.field)):  # type: ignore[attr-defined]
            clause = {"nested": {"path": path, "query": clause}}
        return clause

    def _field_clause(self, criteria: Criteria) -> dict[str, Any]:
        if isinstance(criteria, Equals):
            target, written = self._exact(criteria.field, criteria.value)
            return {"term": {target: written}}
        if isinstance(criteria, In):
            pairs = [self._exact(criteria.field, value) for value in criteria.values]
            return {"terms": {pairs[0][0]: [written for _, written in pairs]}}
        if isinstance(criteria, Range):
            bounds = {name: self._value(value) for name, value in criteria.bounds.items()}
            strings = [value for value in criteria.bounds.values() if isinstance(value, str)]
            # String bounds compare whole values, not analyzed tokens
            target = self._exact_field(criteria.field, strings[0]) if strings else self._resolve(criteria.field)[0]
            return {"range": {target: bounds}}
        if isinstance(criteria, Match):
            target = self._resolve(criteria.field)[0]
            return {"match": {target: {"query": criteria.text, "operator": criteria.operator}}}
        if isinstance(criteria, Wildcard):
            target = self._exact_field(criteria.field, criteria.fragment)
            return {"wildcard": {target: {"value": self._pattern(criteria.fragment, criteria.position)}}}
        if isinstance(criteria, Exists):
            return {"exists": {"field": self._resolve(criteria.field)[0]}}
        raise QueryBuildError(f"Unsupported criteria type {type(criteria).__name__}")

    def resolve_field(self, field: str, *, for_sort: bool = False) -> str:
        """Document field path of an attribute path; text fields sort on their keyword subfield."""
        target, prop = self._resolve(field)
        if (
            for_sort
            and prop is not None
            and prop.keyword_subfield
            and self._mapper.field_type_of(prop) is FieldType.TEXT
        ):
            return f"{target}.keyword"
        return target

    def _resolve(self, field: str) -> tuple[str, PropertyMetadata | None]:
        if self._metadata is None:
            return field, None
        return self._metadata.resolve_field_path(field)

    def _nested_paths(self, field: str) -> list[str]:
        if self._metadata is None:
            return []
        return [
            path
            for path, prop in self._metadata.walk_field_path(field)
            if prop is not None and self._mapper.field_type_of(prop) is FieldType.NESTED
        ]

    def _value(self, value: Any) -> Any:
        try:
            return self._mapper.write_value(value)
        except MappingError as e:
            raise QueryBuildError(f"Cannot use {value!r} in a query: {e}") from e

    def _exact(self, field: str, value: Any) -> tuple[str, Any]:
        written = self._value(value)
        return self._exact_field(field, written), written

    def _exact_field(self, field: str, written: Any) -> str:
        target, prop = self._resolve(field)
        if not isinstance(written, str) or target.endswith(".keyword"):
            return target
        if prop is None:
            # Unknown to the metadata: assume dynamic mapping
            return f"{target}.keyword"
        if self._mapper.field_type_of(prop) is FieldType.TEXT:
            if not prop.keyword_subfield:
                raise QueryBuildError(
                    f"Comparing text field '{field}' to a whole string requires a keyword subfield"
                )
            return f"{target}.keyword"
        return target

    @staticmethod
    def _pattern(fragment: str, position: str) -> str:
        escaped = escape_wildcard(fragment)
        if position == "starts_with":
            return f"{escaped}*"
        if position == "ends_with":
            return f"*{escaped}"
        return f"*{escaped}*"
