"""Base entity class for index domain models."""

from abc import ABC, abstractmethod

from esdata.search.repositories.base_repository import BaseRepository


class BaseEntity[T](ABC):
    """Abstract base class for domain entities managed by a repository.

    Entities hold a reference to their repository and delegate every
    persistence operation to it.
    """

    _repository: BaseRepository[T]

    @abstractmethod
    def delete(self) -> bool:
        """Delete this entity through its repository."""
