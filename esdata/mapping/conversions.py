"""Custom value conversions between domain types and JSON values."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from esdata.mapping.annotations import FieldType


@dataclass(frozen=True)
class Conversion:
    """A pair of functions converting one domain type to and from a JSON value."""

    python_type: type
    writer: Callable[[Any], Any]
    reader: Callable[[Any], Any]
    field_type: FieldType = FieldType.KEYWORD


class ConversionRegistry:
    """Registry of custom conversions, looked up along the value's MRO."""

    def __init__(self) -> None:
        self._conversions: dict[type, Conversion] = {}

    def register(
        self,
        python_type: type,
        *,
        writer: Callable[[Any], Any],
        reader: Callable[[Any], Any],
        field_type: FieldType = FieldType.KEYWORD,
    ) -> "ConversionRegistry":
        """Register a conversion for python_type (and its subclasses)."""
        self._conversions[python_type] = Conversion(
            python_type=python_type, writer=writer, reader=reader, field_type=field_type
        )
        return self

    def find(self, python_type: Any) -> Conversion | None:
        """Return the conversion registered for python_type or its nearest base class."""
        if not isinstance(python_type, type):
            return None
        for candidate in python_type.__mro__:
            conversion = self._conversions.get(candidate)
            if conversion is not None:
                return conversion
        return None

    def __contains__(self, python_type: Any) -> bool:
        return self.find(python_type) is not None

    def __len__(self) -> int:
        return len(self._conversions)
