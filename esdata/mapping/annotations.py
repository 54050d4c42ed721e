"""Declarations used on entity classes.

Entities are plain pydantic models. The helpers in this module only attach
metadata (under the ``esdata`` key of ``json_schema_extra``) that the
metadata resolver reads back; pydantic behaviour is otherwise unchanged.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import Field
from pydantic_core import PydanticUndefined

METADATA_KEY = "esdata"
DOCUMENT_ATTRIBUTE = "__esdata_document__"


class FieldType(Enum):
    """Index field types."""

    TEXT = "text"
    KEYWORD = "keyword"
    LONG = "long"
    INTEGER = "integer"
    DOUBLE = "double"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT = "object"
    NESTED = "nested"


@dataclass(frozen=True)
class DocumentSettings:
    """Settings declared with the @document decorator."""

    index: str | None = None
    shards: int = 1
    replicas: int = 1
    refresh_interval: str | None = None
    create_index: bool = True


def document(
    index: str | None = None,
    *,
    shards: int = 1,
    replicas: int = 1,
    refresh_interval: str | None = None,
    create_index: bool = True,
) -> Callable[[type], type]:
    """Mark a pydantic model as a document stored in a search index.

    Args:
        index: Index name; defaults to the lower-cased class name
        shards: Number of primary shards used when the index is created
        replicas: Number of replicas used when the index is created
        refresh_interval: Optional index refresh interval (e.g. "1s")
        create_index: Whether ensure_index() may create the index
    """

    def decorator(cls: type) -> type:
        setattr(
            cls,
            DOCUMENT_ATTRIBUTE,
            DocumentSettings(
                index=index,
                shards=shards,
                replicas=replicas,
                refresh_interval=refresh_interval,
                create_index=create_index,
            ),
        )
        return cls

    return decorator


def _field(default: Any, *, name: str | None, extra: dict[str, Any], **kwargs: Any) -> Any:
    # Only the serialization alias is set: constructors and model_validate keep using attribute names,
    # the mapper translates between attribute and document names itself.
    options: dict[str, Any] = {"json_schema_extra": {METADATA_KEY: {**extra, "name": name}}, **kwargs}
    if name is not None:
        options["serialization_alias"] = name
    return Field(default, **options)


def MappedField(  # noqa: N802
    default: Any = PydanticUndefined,
    *,
    name: str | None = None,
    field_type: FieldType | None = None,
    keyword_subfield: bool = True,
    date_format: str | None = None,
    **kwargs: Any,
) -> Any:
    """Declare how a property is stored in the document.

    Args:
        default: Default value, as with pydantic.Field
        name: Document field name when it differs from the attribute name
        field_type: Explicit index field type (inferred from the annotation otherwise)
        keyword_subfield: Whether text fields get a ``keyword`` subfield for exact matching
        date_format: Optional date format written to the index mapping
    """
    extra = {
        "field_type": field_type.value if field_type else None,
        "keyword_subfield": keyword_subfield,
        "date_format": date_format,
    }
    return _field(default, name=name, extra=extra, **kwargs)


def IdField(default: Any = None, *, name: str | None = None, **kwargs: Any) -> Any:  # noqa: N802
    """Declare the identifier property of an entity."""
    return _field(default, name=name, extra={"id": True}, **kwargs)


def Transient(default: Any = None, **kwargs: Any) -> Any:  # noqa: N802
    """Declare a property that is never written to the document."""
    if default is PydanticUndefined and "default_factory" not in kwargs:
        raise ValueError("Transient properties must have a default")
    return Field(default, exclude=True, json_schema_extra={METADATA_KEY: {"transient": True}}, **kwargs)
