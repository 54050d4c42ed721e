"""Mapping metadata resolved from entity classes."""

import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from functools import cache
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel

from esdata.exceptions import MappingError
from esdata.mapping.annotations import (
    DOCUMENT_ATTRIBUTE,
    METADATA_KEY,
    DocumentSettings,
    FieldType,
)

_INVALID_INDEX_CHARACTERS = set('\\/*?"<>| ,#:')
_COLLECTION_ORIGINS = (list, set, frozenset, tuple)


@dataclass(frozen=True)
class PropertyMetadata:
    """Mapping of a single entity attribute to a document field."""

    name: str
    field_name: str
    annotation: Any
    value_type: Any
    is_collection: bool = False
    is_id: bool = False
    transient: bool = False
    explicit_field_type: FieldType | None = None
    keyword_subfield: bool = True
    date_format: str | None = None

    @property
    def nested_type(self) -> type[BaseModel] | None:
        """The model class when this property holds a nested model."""
        if isinstance(self.value_type, type) and issubclass(self.value_type, BaseModel):
            return self.value_type
        return None

    @property
    def field_type(self) -> FieldType | None:
        """Explicit field type, or the one inferred from the annotation (None if unknown)."""
        return self.explicit_field_type or infer_field_type(self.value_type)

    @property
    def has_keyword_subfield(self) -> bool:
        return self.field_type is FieldType.TEXT and self.keyword_subfield


@dataclass(frozen=True)
class EntityMetadata:
    """Mapping metadata of an entity class."""

    entity_type: type[BaseModel]
    index_name: str
    settings: DocumentSettings
    properties: tuple[PropertyMetadata, ...]
    id_property: PropertyMetadata | None = None
    _by_name: dict[str, PropertyMetadata] = field(default_factory=dict, repr=False)
    _by_field_name: dict[str, PropertyMetadata] = field(default_factory=dict, repr=False)

    @property
    def persistent_properties(self) -> tuple[PropertyMetadata, ...]:
        return tuple(prop for prop in self.properties if not prop.transient)

    def get_property(self, name: str) -> PropertyMetadata | None:
        """Find a property by attribute name."""
        return self._by_name.get(name)

    def get_property_by_field_name(self, field_name: str) -> PropertyMetadata | None:
        """Find a persistent property by document field name."""
        return self._by_field_name.get(field_name)

    def resolve_field_path(self, path: str) -> tuple[str, PropertyMetadata | None]:
        """Translate a dotted attribute path to a dotted document field path.

        Unknown segments are passed through unchanged, so document field names
        and paths into dict properties can be used directly.

        Returns:
            The document field path and the metadata of the last resolved property
        """
        target, prop = path, None
        for target, prop in self.walk_field_path(path):
            pass
        return target, prop

    def walk_field_path(self, path: str) -> list[tuple[str, PropertyMetadata | None]]:
        """Document path prefixes of a dotted attribute path with the property at each segment."""
        metadata: EntityMetadata | None = self
        resolved: list[str] = []
        steps: list[tuple[str, PropertyMetadata | None]] = []
        for segment in path.split("."):
            prop = None
            if metadata is not None:
                prop = metadata.get_property(segment) or metadata.get_property_by_field_name(segment)
            resolved.append(prop.field_name if prop is not None else segment)
            steps.append((".".join(resolved), prop))
            metadata = get_metadata(prop.nested_type) if prop is not None and prop.nested_type else None
        return steps


def unwrap_annotation(annotation: Any) -> tuple[Any, bool]:
    """Strip Optional and collection wrappers from an annotation.

    Returns:
        The element type and whether the annotation is a collection
    """
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return unwrap_annotation(args[0])
        return annotation, False
    if origin in _COLLECTION_ORIGINS:
        args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
        element, _ = unwrap_annotation(args[0]) if args else (Any, False)
        return element, True
    return annotation, False


def infer_field_type(value_type: Any) -> FieldType | None:
    """Infer the index field type of a Python type."""
    if get_origin(value_type) in (dict, Mapping):
        return FieldType.OBJECT
    if not isinstance(value_type, type):
        return None
    # bool before int, datetime before date: subclass relationships
    if issubclass(value_type, bool):
        return FieldType.BOOLEAN
    if issubclass(value_type, Enum):
        return FieldType.KEYWORD
    if issubclass(value_type, str):
        return FieldType.TEXT
    if issubclass(value_type, int):
        return FieldType.LONG
    if issubclass(value_type, float):
        return FieldType.DOUBLE
    if issubclass(value_type, (datetime, date)):
        return FieldType.DATE
    if issubclass(value_type, (BaseModel, dict)):
        return FieldType.OBJECT
    return None


def validate_index_name(name: str) -> str:
    """Check an index name against the service's naming rules."""
    if not name or not name.strip():
        raise MappingError("Index name must not be empty")
    if name != name.lower():
        raise MappingError(f"Index name '{name}' must be lowercase")
    if name[0] in "_-+":
        raise MappingError(f"Index name '{name}' must not start with '_', '-' or '+'")
    if _INVALID_INDEX_CHARACTERS & set(name):
        raise MappingError(f"Index name '{name}' contains invalid characters")
    return name


@cache
def get_metadata(entity_type: type) -> EntityMetadata:
    """Resolve (and cache) the mapping metadata of an entity class.

    Raises:
        MappingError: If entity_type is not a pydantic model or its declarations are inconsistent
    """
    if not (isinstance(entity_type, type) and issubclass(entity_type, BaseModel)):
        raise MappingError(f"{entity_type!r} is not a pydantic model and cannot be mapped")

    settings: DocumentSettings = getattr(entity_type, DOCUMENT_ATTRIBUTE, None) or DocumentSettings()
    # Names derived from the class name are validated by coordinates_for
    index_name = validate_index_name(settings.index) if settings.index else entity_type.__name__.lower()

    properties: list[PropertyMetadata] = []
    for name, info in entity_type.model_fields.items():
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        options: dict[str, Any] = extra.get(METADATA_KEY) or {}  # type: ignore[assignment]
        value_type, is_collection = unwrap_annotation(info.annotation)
        field_type = options.get("field_type")
        properties.append(
            PropertyMetadata(
                name=name,
                field_name=options.get("name") or name,
                annotation=info.annotation,
                value_type=value_type,
                is_collection=is_collection,
                is_id=bool(options.get("id")),
                transient=bool(options.get("transient")) or bool(info.exclude),
                explicit_field_type=FieldType(field_type) if field_type else None,
                keyword_subfield=options.get("keyword_subfield", True),
                date_format=options.get("date_format"),
            )
        )

    marked = [prop for prop in properties if prop.is_id]
    if len(marked) > 1:
        raise MappingError(
            f"{entity_type.__name__} declares more than one id property: {[p.name for p in marked]}"
        )
    id_property = marked[0] if marked else next((p for p in properties if p.name == "id"), None)
    if id_property is not None and id_property.transient:
        raise MappingError(f"Id property '{id_property.name}' of {entity_type.__name__} cannot be transient")

    field_names = [prop.field_name for prop in properties if not prop.transient]
    duplicates = {name for name in field_names if field_names.count(name) > 1}
    if duplicates:
        raise MappingError(f"{entity_type.__name__} maps several properties to {sorted(duplicates)}")

    return EntityMetadata(
        entity_type=entity_type,
        index_name=index_name,
        settings=settings,
        properties=tuple(properties),
        id_property=id_property,
        _by_name={prop.name: prop for prop in properties},
        _by_field_name={prop.field_name: prop for prop in properties if not prop.transient},
    )
