"""Entity mapper: converts entities to documents and back."""

import json
import types
from collections.abc import Mapping
from enum import Enum
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from esdata.exceptions import MappingError
from esdata.logging import get_logger
from esdata.mapping.annotations import FieldType
from esdata.mapping.conversions import ConversionRegistry
from esdata.mapping.metadata import (
    EntityMetadata,
    PropertyMetadata,
    get_metadata,
    unwrap_annotation,
)

logger = get_logger(__name__)


class EntityMapper:
    """Converts entities to JSON documents and back using their mapping metadata.

    Field-name overrides come from the entity declarations, custom value types
    are handled by the conversions registry. The mapper holds no state besides
    the registry and is safe to share.
    """

    def __init__(self, *, conversions: ConversionRegistry | None = None) -> None:
        self._conversions = conversions or ConversionRegistry()

    @property
    def conversions(self) -> ConversionRegistry:
        return self._conversions

    # Writing

    def serialize(self, entity: BaseModel) -> str:
        """Serialize an entity to a JSON document string."""
        return json.dumps(self.to_document(entity))

    def to_document(self, entity: BaseModel) -> dict[str, Any]:
        """Convert an entity to a document dict keyed by document field names."""
        metadata = get_metadata(type(entity))
        document: dict[str, Any] = {}
        for prop in metadata.persistent_properties:
            value = getattr(entity, prop.name)
            if value is None:
                continue
            try:
                document[prop.field_name] = self.write_value(value)
            except MappingError as e:
                raise MappingError(
                    f"Cannot write property '{prop.name}' of {metadata.entity_type.__name__}: {e}"
                ) from e
        return document

    def write_value(self, value: Any) -> Any:
        """Convert a single domain value to a JSON-compatible value."""
        if value is None or type(value) in (str, bool, int, float):
            return value
        conversion = self._conversions.find(type(value))
        if conversion is not None:
            try:
                return conversion.writer(value)
            except Exception as e:
                raise MappingError(f"Conversion of {type(value).__name__} failed: {e}") from e
        if isinstance(value, BaseModel):
            return self.to_document(value)
        if isinstance(value, Enum):
            return self.write_value(value.value)
        if isinstance(value, Mapping):
            return {str(k): self.write_value(v) for k, v in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.write_value(item) for item in value]
        try:
            return to_jsonable_python(value)
        except PydanticSerializationError as e:
            raise MappingError(f"Value of type {type(value).__name__} is not serializable: {e}") from e

    # Reading

    def deserialize(self, document: str | bytes | Mapping[str, Any], target_type: type, *, id: str | None = None) -> Any:  # noqa: A002
        """Materialize an entity of target_type from a JSON document.

        Args:
            document: JSON string or already decoded document
            target_type: Entity class to create
            id: Document id, used when the source does not carry the id field

        Raises:
            MappingError: On invalid JSON, unusable target types or validation failures
        """
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except json.JSONDecodeError as e:
                raise MappingError(f"Document is not valid JSON: {e}") from e
        return self.from_document(document, target_type, id=id)  # type: ignore[arg-type]

    def from_document(self, document: Mapping[str, Any], target_type: type, *, id: str | None = None) -> Any:  # noqa: A002
        """Materialize an entity of target_type from a decoded document."""
        if not isinstance(document, Mapping):
            raise MappingError(f"Document must be a JSON object, got {type(document).__name__}")
        metadata = get_metadata(target_type)
        data = self._read_properties(metadata, document)

        id_property = metadata.id_property
        if id is not None and id_property is not None and id_property.name not in data:
            data[id_property.name] = id

        try:
            return metadata.entity_type.model_validate(data)
        except ValidationError as e:
            raise MappingError(
                f"Cannot create {metadata.entity_type.__name__} from document: {e}"
            ) from e

    def _read_properties(self, metadata: EntityMetadata, document: Mapping[str, Any]) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for prop in metadata.persistent_properties:
            if prop.field_name not in document:
                continue
            raw = document[prop.field_name]
            try:
                data[prop.name] = self._read_value(prop.annotation, raw)
            except MappingError as e:
                raise MappingError(
                    f"Cannot read field '{prop.field_name}' into {metadata.entity_type.__name__}.{prop.name}: {e}"
                ) from e
        return data

    def _read_value(self, annotation: Any, raw: Any) -> Any:
        if raw is None:
            return None
        origin = get_origin(annotation)
        if origin in (Union, types.UnionType):
            candidates = [arg for arg in get_args(annotation) if arg is not type(None)]
            if len(candidates) == 1:
                return self._read_value(candidates[0], raw)
            return raw
        if origin in (list, set, frozenset, tuple) and isinstance(raw, list):
            element, _ = unwrap_annotation(annotation)
            return [self._read_value(element, item) for item in raw]
        if origin in (dict, Mapping) and isinstance(raw, Mapping):
            args = get_args(annotation)
            value_type = args[1] if len(args) == 2 else Any
            return {key: self._read_value(value_type, item) for key, item in raw.items()}

        conversion = self._conversions.find(annotation)
        if conversion is not None:
            try:
                return conversion.reader(raw)
            except Exception as e:
                raise MappingError(f"Conversion to {annotation.__name__} failed: {e}") from e
        if isinstance(annotation, type) and issubclass(annotation, BaseModel) and isinstance(raw, Mapping):
            return self._read_properties(get_metadata(annotation), raw)
        return raw

    # Identifiers

    def get_id(self, entity: BaseModel) -> str | None:
        """Return the entity id as a document id string, or None."""
        id_property = get_metadata(type(entity)).id_property
        if id_property is None:
            return None
        value = getattr(entity, id_property.name)
        if value is None:
            return None
        written = self.write_value(value)
        return written if isinstance(written, str) else str(written)

    def set_id(self, entity: BaseModel, id: str) -> bool:  # noqa: A002
        """Write a service-generated id back to the entity.

        Returns:
            True if the id was written, False for frozen models or entities without id property
        """
        id_property = get_metadata(type(entity)).id_property
        if id_property is None or entity.model_config.get("frozen"):
            return False
        value = self._read_value(id_property.annotation, id)
        try:
            setattr(entity, id_property.name, value)
        except (TypeError, ValidationError) as e:
            logger.debug(f"Could not write id {id} back to {type(entity).__name__}: {e}")
            return False
        return True

    # Index mappings

    def to_mapping(self, entity_type: type) -> dict[str, Any]:
        """Build the index mappings body for an entity class."""
        return {"properties": self._properties_mapping(get_metadata(entity_type))}

    def to_settings(self, entity_type: type) -> dict[str, Any]:
        """Build the index settings body from the @document declaration."""
        settings = get_metadata(entity_type).settings
        index_settings: dict[str, Any] = {
            "number_of_shards": settings.shards,
            "number_of_replicas": settings.replicas,
        }
        if settings.refresh_interval is not None:
            index_settings["refresh_interval"] = settings.refresh_interval
        return {"index": index_settings}

    def index_body(self, entity_type: type) -> dict[str, Any]:
        """Settings and mappings used to create the index of an entity class."""
        return {"settings": self.to_settings(entity_type), "mappings": self.to_mapping(entity_type)}

    def _properties_mapping(self, metadata: EntityMetadata) -> dict[str, Any]:
        return {
            prop.field_name: self._property_mapping(prop) for prop in metadata.persistent_properties
        }

    def _property_mapping(self, prop: PropertyMetadata) -> dict[str, Any]:
        field_type = self.field_type_of(prop)
        mapping: dict[str, Any] = {"type": field_type.value}
        if field_type is FieldType.TEXT and prop.keyword_subfield:
            mapping["fields"] = {"keyword": {"type": "keyword", "ignore_above": 256}}
        if field_type is FieldType.DATE and prop.date_format:
            mapping["format"] = prop.date_format
        if field_type in (FieldType.OBJECT, FieldType.NESTED) and prop.nested_type is not None:
            mapping["properties"] = self._properties_mapping(get_metadata(prop.nested_type))
        return mapping

    def field_type_of(self, prop: PropertyMetadata) -> FieldType:
        """Resolve the index field type of a property (explicit, converted, inferred, keyword)."""
        if prop.explicit_field_type is not None:
            return prop.explicit_field_type
        conversion = self._conversions.find(prop.value_type)
        if conversion is not None:
            return conversion.field_type
        return prop.field_type or FieldType.KEYWORD
