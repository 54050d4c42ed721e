"""
Index repositories.

Repositories handle persistence operations and return domain model instances.
"""

from esdata.search.repositories.base_repository import BaseRepository
from esdata.search.repositories.index import IndexRepository

__all__ = [
    "BaseRepository",
    "IndexRepository",
]
