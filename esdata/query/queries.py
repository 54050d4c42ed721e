"""Query objects passed to the operations facades."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from esdata.exceptions import QueryBuildError
from esdata.query.criteria import Criteria, MatchAll


class Direction(Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Sort:
    """Sort on a field."""

    field: str
    direction: Direction = Direction.ASC

    @classmethod
    def asc(cls, field_name: str) -> "Sort":
        return cls(field_name, Direction.ASC)

    @classmethod
    def desc(cls, field_name: str) -> "Sort":
        return cls(field_name, Direction.DESC)


@dataclass(frozen=True)
class PageRequest:
    """A zero-based page of results."""

    page: int = 0
    size: int = 10

    def __post_init__(self) -> None:
        if self.page < 0:
            raise QueryBuildError(f"Page index must not be negative, got {self.page}")
        if self.size < 1:
            raise QueryBuildError(f"Page size must be at least 1, got {self.size}")

    @property
    def offset(self) -> int:
        return self.page * self.size

    def next(self) -> "PageRequest":
        return PageRequest(self.page + 1, self.size)


@dataclass(frozen=True, kw_only=True)
class Query:
    """Options shared by all query kinds.

    Without a pageable, searches return the service's default page while
    streams page through every match.
    """

    pageable: PageRequest | None = None
    sort: tuple[Sort, ...] = ()
    source_includes: tuple[str, ...] = ()
    source_excludes: tuple[str, ...] = ()
    track_total_hits: bool | int | None = None
    min_score: float | None = None

    def __post_init__(self) -> None:
        # Accept lists for the sequence options, store tuples
        for name in ("sort", "source_includes", "source_excludes"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def is_paged(self) -> bool:
        return self.pageable is not None

    @staticmethod
    def match_all(**options: Any) -> "CriteriaQuery":
        """A query matching every document."""
        return CriteriaQuery(MatchAll(), **options)


@dataclass(frozen=True)
class CriteriaQuery(Query):
    """Query built from a criteria tree."""

    criteria: Criteria

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.criteria, Criteria):
            raise QueryBuildError(f"CriteriaQuery requires criteria, got {type(self.criteria).__name__}")


@dataclass(frozen=True)
class StringQuery(Query):
    """Query given as a JSON query clause, e.g. ``'{"match": {"name": "ann"}}'``."""

    source: str

    def __post_init__(self) -> None:
        super().__post_init__()
        self.parsed()

    def parsed(self) -> dict[str, Any]:
        """The query clause as a dict."""
        try:
            clause = json.loads(self.source)
        except (TypeError, json.JSONDecodeError) as e:
            raise QueryBuildError(f"String query is not valid JSON: {e}") from e
        if not isinstance(clause, dict):
            raise QueryBuildError("String query must be a JSON object")
        return clause


@dataclass(frozen=True)
class NativeQuery(Query):
    """Query given as a query DSL clause dict."""

    query: dict[str, Any]

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.query, dict):
            raise QueryBuildError(f"NativeQuery requires a dict, got {type(self.query).__name__}")
