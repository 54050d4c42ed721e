"""Criteria model, query objects and their translation into query DSL."""

from esdata.query.criteria import (
    And,
    Criteria,
    Equals,
    Exists,
    FieldCriteria,
    In,
    Match,
    MatchAll,
    Not,
    Or,
    Range,
    Wildcard,
    where,
)
from esdata.query.queries import (
    CriteriaQuery,
    Direction,
    NativeQuery,
    PageRequest,
    Query,
    Sort,
    StringQuery,
)
from esdata.query.translator import CriteriaTranslator, escape_wildcard

__all__ = [
    "And",
    "Criteria",
    "CriteriaQuery",
    "CriteriaTranslator",
    "Direction",
    "Equals",
    "Exists",
    "FieldCriteria",
    "In",
    "Match",
    "MatchAll",
    "NativeQuery",
    "Not",
    "Or",
    "PageRequest",
    "Query",
    "Range",
    "Sort",
    "StringQuery",
    "Wildcard",
    "escape_wildcard",
    "where",
]
