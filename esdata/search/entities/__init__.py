"""
Index domain entities.

Entities are pure domain objects that delegate all persistence
operations to their repository.
"""

from esdata.search.entities.base_entity import BaseEntity
from esdata.search.entities.index import FieldMapping, Index, IndexSettings, Mappings, Settings

__all__ = [
    "BaseEntity",
    "FieldMapping",
    "Index",
    "IndexSettings",
    "Mappings",
    "Settings",
]
