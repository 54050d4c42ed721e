"""Index coordinates: the target index (or indexes) of an operation."""

from dataclasses import dataclass

from esdata.mapping.metadata import get_metadata, validate_index_name


@dataclass(frozen=True)
class IndexCoordinates:
    """One or more index names. Writes go to the first one, reads span all of them."""

    names: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.names:
            raise ValueError("IndexCoordinates require at least one index name")
        for name in self.names:
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"Invalid index name {name!r}")

    @classmethod
    def of(cls, *names: str) -> "IndexCoordinates":
        return cls(tuple(names))

    @property
    def index_name(self) -> str:
        """Index used by single-document writes."""
        return self.names[0]

    @property
    def joined(self) -> str:
        """Comma separated names, as used in request paths."""
        return ",".join(self.names)

    def __str__(self) -> str:
        return self.joined


def coordinates_for(entity_type: type) -> IndexCoordinates:
    """Derive the index coordinates of an entity class from its metadata.

    Raises:
        MappingError: If the index name derived from the class name is not a valid index name
    """
    return IndexCoordinates.of(validate_index_name(get_metadata(entity_type).index_name))


def resolve_coordinates(
    index: "IndexCoordinates | str | None",
    entity_type: type | None,
) -> IndexCoordinates:
    """Use the given coordinates, or derive them from the entity type.

    Raises:
        ValueError: If neither is given
    """
    if isinstance(index, IndexCoordinates):
        return index
    if isinstance(index, str):
        return IndexCoordinates.of(*[name.strip() for name in index.split(",")])
    if entity_type is None:
        raise ValueError("Either an entity type or index coordinates are required")
    return coordinates_for(entity_type)
