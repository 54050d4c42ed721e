"""Base repository class for index repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from esdata.search.adapters import ClientAdapter


class BaseRepository[T](ABC):
    """Abstract base class for entity repositories.

    Repositories handle ALL persistence operations for domain entities.
    Entities are pure domain objects that delegate to their repository
    for any persistence operations.

    Type Parameters:
        T: The type of entity this repository manages
    """

    def __init__(self, *, adapter: ClientAdapter) -> None:
        """Initialize the repository with a client adapter."""
        self._adapter = adapter

    @abstractmethod
    def create(self, **_: Any) -> T:
        """Create a new entity and return a domain model instance."""

    @abstractmethod
    def get(self, **_: Any) -> T | None:
        """Get an entity by identifier and return a domain model instance."""

    @abstractmethod
    def delete(self, **_: Any) -> bool:
        """Delete an entity; returns False if it did not exist."""
