"""Index repository."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from esdata.exceptions import ClientResponseError
from esdata.logging import get_logger
from esdata.mapping.mapper import EntityMapper
from esdata.mapping.metadata import get_metadata
from esdata.search.coordinates import resolve_coordinates
from esdata.search.entities.index import Index, Mappings, Settings
from esdata.search.repositories.base_repository import BaseRepository

if TYPE_CHECKING:
    from esdata.search.adapters import ClientAdapter

logger = get_logger(__name__)


class IndexRepository(BaseRepository[Index]):
    """Repository for managing Index entities."""

    def __init__(self, *, adapter: ClientAdapter, mapper: EntityMapper | None = None) -> None:
        super().__init__(adapter=adapter)
        self._mapper = mapper or EntityMapper()

    def create(
        self,
        *,
        index: str,
        settings: Settings | None = None,
        mappings: Mappings | None = None,
        **_: Any,
    ) -> Index:
        """Create a new index and return an Index instance.

        Args:
            index: Name of the index
            settings: Index settings (service defaults when omitted)
            mappings: Field mappings (dynamic mapping when omitted)

        Returns:
            An Index domain model instance
        """
        settings = settings or Settings()
        mappings = mappings or Mappings()
        body: dict[str, Any] = {}
        settings_dict = self._serialize_model(settings)
        if settings_dict.get("index"):
            body["settings"] = settings_dict
        mappings_dict = self._serialize_model(mappings)
        if mappings_dict.get("properties"):
            body["mappings"] = mappings_dict

        logger.info(f"Creating index '{index}'")
        self._adapter.create_index(index=index, body=body)

        return Index(name=index, settings=settings, mappings=mappings, _repository=self)

    def create_for(self, entity_type: type, *, index: str | None = None) -> Index:
        """Create the index of an entity class, with the settings and mapping its declarations describe."""
        body = self._mapper.index_body(entity_type)
        return self.create(
            index=resolve_coordinates(index, entity_type).index_name,
            settings=Settings.model_validate(body["settings"]),
            mappings=Mappings.model_validate(body["mappings"]),
        )

    def ensure_index(self, entity_type: type, *, index: str | None = None) -> bool:
        """Create the index of an entity class if it is missing and the entity allows it.

        Returns:
            True if the index was created
        """
        name = resolve_coordinates(index, entity_type).index_name
        if self.exists(index=name):
            return False
        if not get_metadata(entity_type).settings.create_index:
            logger.debug(f"Index '{name}' is missing; automatic creation is disabled for {entity_type.__name__}")
            return False
        self.create_for(entity_type, index=name)
        return True

    def get(self, *, index: str, **_: Any) -> Index | None:
        """Get index information, or None if the index does not exist."""
        try:
            data = self._adapter.get_index(index=index)
        except ClientResponseError as e:
            if e.status == 404:
                return None
            raise
        name, details = next(iter(data.items()))
        return self._to_entity(name, details)

    def list(self) -> list[Index]:
        """List all indexes."""
        response = self._adapter.get_index(index="*")
        return [self._to_entity(name, data) for name, data in response.items()]

    def exists(self, *, index: Index | str) -> bool:
        """Check if an index exists."""
        return self._adapter.index_exists(index=self._name(index))

    def delete(self, *, index: Index | str, **_: Any) -> bool:
        """Delete an index.

        Returns:
            False if the index did not exist
        """
        name = self._name(index)
        if not self._adapter.index_exists(index=name):
            return False
        logger.info(f"Deleting index '{name}'")
        self._adapter.delete_index(index=name)
        return True

    def truncate(self, *, index: Index | str) -> int:
        """Truncate an index (delete all documents but keep the index structure).

        Returns:
            Number of deleted documents
        """
        name = self._name(index)
        logger.info(f"Truncating index '{name}'")
        return self._adapter.delete_by_query(index=name, body={"query": {"match_all": {}}}, refresh=True)

    def refresh(self, *, index: Index | str) -> None:
        self._adapter.refresh(index=self._name(index))

    def put_mapping_for(self, entity_type: type, *, index: str | None = None) -> None:
        """Add the mapping of an entity class to an existing index."""
        name = resolve_coordinates(index, entity_type).index_name
        self._adapter.put_mapping(index=name, body=self._mapper.to_mapping(entity_type))

    @staticmethod
    def _name(index: Index | str) -> str:
        return index.name if isinstance(index, Index) else index

    def _to_entity(self, name: str, data: dict[str, Any]) -> Index:
        """Convert a get-index response entry to an Index entity."""
        return Index(
            name=name,
            settings=Settings.model_validate(data.get("settings") or {}),
            mappings=Mappings.model_validate(data.get("mappings") or {}),
            _repository=self,
        )

    @staticmethod
    def _serialize_model(obj: BaseModel) -> dict[str, Any]:
        """Serialize a pydantic model to a request body, leaving unset values out."""
        return obj.model_dump(mode="json", exclude_none=True)
