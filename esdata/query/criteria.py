"""Criteria: an immutable, composable expression tree of search conditions.

Conditions are created through ``where(field)`` and combined with ``&``,
``|`` and ``~`` (or ``and_``, ``or_`` and ``negate``)::

    adults_named_ann = where("name").is_("Ann") & where("age").greater_than_equal(18)
    either = where("city").is_("Oslo") | ~where("retired").is_(True)

Python operator precedence applies: ``&`` binds tighter than ``|``.
"""

from abc import ABC
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from esdata.exceptions import QueryBuildError


class Criteria(ABC):  # noqa: B024
    """Base class of all criteria nodes."""

    def __and__(self, other: Any) -> "Criteria":
        return And.of(self, other)

    def __or__(self, other: Any) -> "Criteria":
        return Or.of(self, other)

    def __invert__(self) -> "Criteria":
        return Not(self)

    def and_(self, *others: "Criteria") -> "Criteria":
        return And.of(self, *others)

    def or_(self, *others: "Criteria") -> "Criteria":
        return Or.of(self, *others)

    def negate(self) -> "Criteria":
        return Not(self)


def _check_field(field_name: Any) -> None:
    if not isinstance(field_name, str) or not field_name.strip():
        raise QueryBuildError(f"Field name must be a non-empty string, got {field_name!r}")


def _check_scalar(field_name: str, value: Any) -> None:
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        raise QueryBuildError(f"Cannot compare '{field_name}' with a collection, use in_() instead")


@dataclass(frozen=True)
class MatchAll(Criteria):
    """Matches every document."""


@dataclass(frozen=True)
class Equals(Criteria):
    """Exact value equality."""

    field: str
    value: Any

    def __post_init__(self) -> None:
        _check_field(self.field)
        if self.value is None:
            raise QueryBuildError(f"Cannot compare '{self.field}' with None, use is_null() instead")
        _check_scalar(self.field, self.value)


@dataclass(frozen=True)
class In(Criteria):
    """Value is one of a set of values."""

    field: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        _check_field(self.field)
        if not self.values:
            raise QueryBuildError(f"in_() on '{self.field}' requires at least one value")
        for value in self.values:
            if value is None:
                raise QueryBuildError(f"in_() on '{self.field}' cannot contain None")
            _check_scalar(self.field, value)


@dataclass(frozen=True)
class Range(Criteria):
    """Value lies within the given bounds."""

    field: str
    gt: Any = None
    gte: Any = None
    lt: Any = None
    lte: Any = None

    def __post_init__(self) -> None:
        _check_field(self.field)
        bounds = self.bounds
        if not bounds:
            raise QueryBuildError(f"Range on '{self.field}' needs at least one bound")
        if self.gt is not None and self.gte is not None:
            raise QueryBuildError(f"Range on '{self.field}' cannot have both gt and gte")
        if self.lt is not None and self.lte is not None:
            raise QueryBuildError(f"Range on '{self.field}' cannot have both lt and lte")
        for value in bounds.values():
            if isinstance(value, bool):
                raise QueryBuildError(f"Range on '{self.field}' cannot use a boolean bound")
            _check_scalar(self.field, value)

    @property
    def bounds(self) -> dict[str, Any]:
        candidates = {"gt": self.gt, "gte": self.gte, "lt": self.lt, "lte": self.lte}
        return {name: value for name, value in candidates.items() if value is not None}


@dataclass(frozen=True)
class Match(Criteria):
    """Full-text match against an analyzed field."""

    field: str
    text: str
    operator: str = "or"

    def __post_init__(self) -> None:
        _check_field(self.field)
        if not isinstance(self.text, str):
            raise QueryBuildError(f"Full-text match on '{self.field}' requires a string, got {self.text!r}")
        if self.operator not in ("and", "or"):
            raise QueryBuildError(f"Unsupported match operator '{self.operator}'")


@dataclass(frozen=True)
class Wildcard(Criteria):
    """String value contains, starts with or ends with a fragment."""

    field: str
    fragment: str
    position: str = "contains"

    def __post_init__(self) -> None:
        _check_field(self.field)
        if not isinstance(self.fragment, str):
            raise QueryBuildError(f"'{self.position}' on '{self.field}' requires a string, got {self.fragment!r}")
        if self.position not in ("contains", "starts_with", "ends_with"):
            raise QueryBuildError(f"Unsupported wildcard position '{self.position}'")


@dataclass(frozen=True)
class Exists(Criteria):
    """Field has a non-null value."""

    field: str

    def __post_init__(self) -> None:
        _check_field(self.field)


def _check_children(kind: str, children: tuple[Any, ...]) -> None:
    if not children:
        raise QueryBuildError(f"{kind} requires at least one criteria")
    for child in children:
        if not isinstance(child, Criteria):
            raise QueryBuildError(f"Cannot combine criteria with {type(child).__name__} using {kind}")


@dataclass(frozen=True)
class And(Criteria):
    """All children must match."""

    children: tuple[Criteria, ...] = field(default=())

    def __post_init__(self) -> None:
        _check_children("And", self.children)

    @classmethod
    def of(cls, *criteria: Any) -> "And":
        _check_children("And", criteria)
        flattened: list[Criteria] = []
        for item in criteria:
            flattened.extend(item.children if isinstance(item, And) else (item,))
        return cls(tuple(flattened))


@dataclass(frozen=True)
class Or(Criteria):
    """At least one child must match."""

    children: tuple[Criteria, ...] = field(default=())

    def __post_init__(self) -> None:
        _check_children("Or", self.children)

    @classmethod
    def of(cls, *criteria: Any) -> "Or":
        _check_children("Or", criteria)
        flattened: list[Criteria] = []
        for item in criteria:
            flattened.extend(item.children if isinstance(item, Or) else (item,))
        return cls(tuple(flattened))


@dataclass(frozen=True)
class Not(Criteria):
    """The child must not match."""

    child: Criteria

    def __post_init__(self) -> None:
        if not isinstance(self.child, Criteria):
            raise QueryBuildError(f"Cannot negate {type(self.child).__name__}")


class FieldCriteria:
    """Fluent builder for conditions on a single field."""

    def __init__(self, field_name: str) -> None:
        _check_field(field_name)
        self._field = field_name

    @property
    def field(self) -> str:
        return self._field

    def is_(self, value: Any) -> Criteria:
        return Equals(self._field, value)

    def not_equals(self, value: Any) -> Criteria:
        return Not(Equals(self._field, value))

    def in_(self, values: Iterable[Any]) -> Criteria:
        if isinstance(values, (str, bytes)):
            raise QueryBuildError(f"in_() on '{self._field}' expects a collection of values, got a string")
        return In(self._field, tuple(values))

    def greater_than(self, value: Any) -> Criteria:
        return Range(self._field, gt=value)

    def greater_than_equal(self, value: Any) -> Criteria:
        return Range(self._field, gte=value)

    def less_than(self, value: Any) -> Criteria:
        return Range(self._field, lt=value)

    def less_than_equal(self, value: Any) -> Criteria:
        return Range(self._field, lte=value)

    def between(self, lower: Any, upper: Any) -> Criteria:
        """Inclusive range; either bound may be None for an open end."""
        return Range(self._field, gte=lower, lte=upper)

    def matches(self, text: str) -> Criteria:
        """Full-text match on any of the terms in text."""
        return Match(self._field, text, "or")

    def matches_all(self, text: str) -> Criteria:
        """Full-text match on all of the terms in text."""
        return Match(self._field, text, "and")

    def contains(self, fragment: str) -> Criteria:
        return Wildcard(self._field, fragment, "contains")

    def starts_with(self, fragment: str) -> Criteria:
        return Wildcard(self._field, fragment, "starts_with")

    def ends_with(self, fragment: str) -> Criteria:
        return Wildcard(self._field, fragment, "ends_with")

    def exists(self) -> Criteria:
        return Exists(self._field)

    def is_null(self) -> Criteria:
        return Not(Exists(self._field))


def where(field_name: str) -> FieldCriteria:
    """Start a condition on a field (attribute name, document field name or dotted path)."""
    return FieldCriteria(field_name)
