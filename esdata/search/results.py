"""Search result types."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SearchHit[T]:
    """A single search hit with its materialized content."""

    id: str | None
    index: str
    score: float | None
    content: T
    sort_values: tuple[Any, ...] = ()
    highlight_fields: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchHits[T]:
    """The hits of one search request."""

    total_hits: int
    total_hits_relation: str
    max_score: float | None
    hits: list[SearchHit[T]]
    scroll_id: str | None = None

    def __iter__(self) -> Iterator[SearchHit[T]]:
        return iter(self.hits)

    def __len__(self) -> int:
        return len(self.hits)

    def __getitem__(self, position: int) -> SearchHit[T]:
        return self.hits[position]

    @property
    def has_hits(self) -> bool:
        return bool(self.hits)

    def contents(self) -> list[T]:
        """The materialized entities, in hit order."""
        return [hit.content for hit in self.hits]
