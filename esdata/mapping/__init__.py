"""
Object-document mapping.

Declarations for entity classes, their resolved metadata, custom value
conversions and the mapper translating entities to documents and back.
"""

from esdata.mapping.annotations import (
    DocumentSettings,
    FieldType,
    IdField,
    MappedField,
    Transient,
    document,
)
from esdata.mapping.conversions import Conversion, ConversionRegistry
from esdata.mapping.mapper import EntityMapper
from esdata.mapping.metadata import EntityMetadata, PropertyMetadata, get_metadata

__all__ = [
    "Conversion",
    "ConversionRegistry",
    "DocumentSettings",
    "EntityMapper",
    "EntityMetadata",
    "FieldType",
    "IdField",
    "MappedField",
    "PropertyMetadata",
    "Transient",
    "document",
    "get_metadata",
]
