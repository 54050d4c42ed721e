from typing import Any

from pydantic import BaseModel

from esdata.interfaces import SearchQuery
from esdata.mapping.mapper import EntityMapper
from esdata.mapping.metadata import get_metadata
from esdata.query.queries import Query
from esdata.query.translator import CriteriaTranslator
from esdata.search.coordinates import IndexCoordinates
from esdata.search.results import SearchHit, SearchHits
from esdata.search.services.search_query_builder import SearchQueryBuilder


class BaseService[A]:
    """Base service: holds the client adapter and the entity mapper.

    Request building and response materialization live here so the blocking
    and the reactive operations share them.
    """

    _adapter: A
    _mapper: EntityMapper

    def __init__(self, *, adapter: A, mapper: EntityMapper | None = None) -> None:
        self._adapter = adapter
        self._mapper = mapper or EntityMapper()

    @property
    def mapper(self) -> EntityMapper:
        return self._mapper

    def _translator(self, entity_type: type | None) -> CriteriaTranslator:
        metadata = get_metadata(entity_type) if entity_type is not None else None
        return CriteriaTranslator(metadata=metadata, mapper=self._mapper)

    def _search_request(
        self,
        query: Query,
        entity_type: type | None,
        coordinates: IndexCoordinates,
        *,
        scroll: str | None = None,
        batch_size: int | None = None,
    ) -> SearchQuery:
        builder = SearchQueryBuilder.for_query(query, index=coordinates, translator=self._translator(entity_type))
        if scroll is not None:
            builder.scroll(scroll)
            if batch_size is not None:
                builder.limit_results(batch_size)
        return builder.build()

    def _count_request(self, query: Query, entity_type: type | None, coordinates: IndexCoordinates) -> SearchQuery:
        builder = SearchQueryBuilder.for_query(query, index=coordinates, translator=self._translator(entity_type))
        return builder.build_count()

    def _document_for(self, entity: BaseModel) -> tuple[str | None, dict[str, Any]]:
        return self._mapper.get_id(entity), self._mapper.to_document(entity)

    def _materialize(self, document: dict[str, Any], target_type: type) -> Any:
        return self._mapper.from_document(document.get("_source") or {}, target_type, id=document.get("_id"))

    def _to_hit(self, raw: dict[str, Any], target_type: type) -> SearchHit[Any]:
        return SearchHit(
            id=raw.get("_id"),
            index=raw.get("_index", ""),
            score=raw.get("_score"),
            content=self._materialize(raw, target_type),
            sort_values=tuple(raw.get("sort") or ()),
            highlight_fields=raw.get("highlight") or {},
        )

    def _to_search_hits(self, response: dict[str, Any], target_type: type) -> SearchHits[Any]:
        hits = response.get("hits", {})
        total = hits.get("total", {})
        # rest_total_hits_as_int responses carry a plain number
        if isinstance(total, int):
            total = {"value": total, "relation": "eq"}
        return SearchHits(
            total_hits=int(total.get("value", 0)),
            total_hits_relation=total.get("relation", "eq"),
            max_score=hits.get("max_score"),
            hits=[self._to_hit(raw, target_type) for raw in hits.get("hits", [])],
            scroll_id=response.get("_scroll_id"),
        )
