"""Index domain entity."""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from esdata.search.entities.base_entity import BaseEntity

if TYPE_CHECKING:
    from esdata.search.repositories.index import IndexRepository


class FieldMapping(BaseModel):
    """A field mapping. Unknown mapping parameters are kept as extra fields."""

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    format: str | None = None
    fields: dict[str, dict[str, Any]] | None = None
    properties: dict[str, "FieldMapping"] | None = None


class IndexSettings(BaseModel):
    """Index-level settings."""

    model_config = ConfigDict(extra="allow")

    number_of_shards: int | None = Field(default=None, gt=0)
    number_of_replicas: int | None = Field(default=None, ge=0)
    refresh_interval: str | None = None

    @field_validator("refresh_interval")
    @classmethod
    def validate_refresh_interval(cls, v: str | None) -> str | None:
        """Validate the refresh interval is not blank."""
        if v is not None and not v.strip():
            raise ValueError("refresh_interval must not be blank")
        return v


class Settings(BaseModel):
    """Index settings container."""

    index: IndexSettings = Field(default_factory=IndexSettings)


class Mappings(BaseModel):
    """Index mappings container."""

    model_config = ConfigDict(extra="allow")

    properties: dict[str, FieldMapping] = Field(default_factory=dict)


class Index(BaseModel, BaseEntity["Index"]):
    """Domain model representing a search index and its mapping."""

    name: str
    settings: Settings = Field(default_factory=Settings)
    mappings: Mappings = Field(default_factory=Mappings)
    _repository: "IndexRepository" = PrivateAttr()  # type: ignore[assignment]

    def __init__(self, **data: Any) -> None:
        """Initialize Index with repository support."""
        repository = data.pop("_repository", None)
        super().__init__(**data)
        if repository is not None:
            object.__setattr__(self, "_repository", repository)

    def delete(self) -> bool:
        """Delete this index.

        Returns:
            False if the index did not exist
        """
        return self._repository.delete(index=self)

    def exists(self) -> bool:
        return self._repository.exists(index=self)

    def truncate(self) -> int:
        """Delete all documents but keep the index and its mapping.

        Returns:
            Number of deleted documents
        """
        return self._repository.truncate(index=self)

    def refresh(self) -> None:
        """Make recent writes to this index visible to searches."""
        self._repository.refresh(index=self)
