"""Unit tests for the criteria expression tree."""

import pytest

from esdata.exceptions import QueryBuildError
from esdata.query.criteria import And, Equals, Exists, In, Match, Not, Or, Range, Wildcard, where


@pytest.mark.unit
class TestCriteria:
    """Tests for building and combining criteria."""

    def test_field_conditions(self) -> None:
        assert where("name").is_("Ann") == Equals("name", "Ann")
        assert where("age").in_([1, 2]) == In("age", (1, 2))
        assert where("age").between(18, 65) == Range("age", gte=18, lte=65)
        assert where("age").greater_than(3) == Range("age", gt=3)
        assert where("bio").matches_all("quick fox") == Match("bio", "quick fox", "and")
        assert where("name").starts_with("An") == Wildcard("name", "An", "starts_with")
        assert where("name").exists() == Exists("name")

    def test_negating_helpers(self) -> None:
        assert where("name").not_equals("Ann") == Not(Equals("name", "Ann"))
        assert where("name").is_null() == Not(Exists("name"))

    def test_and_flattens(self) -> None:
        a, b, c = where("a").is_(1), where("b").is_(2), where("c").is_(3)

        combined = a & b & c

        assert combined == And((a, b, c))

    def test_or_flattens(self) -> None:
        a, b, c = where("a").is_(1), where("b").is_(2), where("c").is_(3)

        assert a.or_(b, c) == (a | b) | c == Or((a, b, c))

    def test_mixed_operators_follow_python_precedence(self) -> None:
        a, b, c = where("a").is_(1), where("b").is_(2), where("c").is_(3)

        assert (a | b & c) == Or((a, And((b, c))))

    def test_invert(self) -> None:
        a = where("a").is_(1)

        assert ~a == a.negate() == Not(a)
        assert ~~a == Not(Not(a))

    def test_criteria_are_immutable_and_hashable(self) -> None:
        a = where("a").is_(1)

        with pytest.raises(AttributeError):
            a.value = 2  # type: ignore[misc]
        assert len({a, where("a").is_(1)}) == 1

    def test_combining_with_non_criteria_raises(self) -> None:
        with pytest.raises(QueryBuildError):
            where("a").is_(1) & "b"  # type: ignore[operator]

    @pytest.mark.parametrize(
        "build",
        [
            lambda: where(""),
            lambda: where("a").is_(None),
            lambda: where("a").is_([1, 2]),
            lambda: where("a").in_([]),
            lambda: where("a").in_("abc"),
            lambda: where("a").in_([1, None]),
            lambda: where("a").between(None, None),
            lambda: where("a").greater_than(True),
            lambda: where("a").matches(42),
            lambda: Range("a", gt=1, gte=2),
            lambda: Match("a", "x", "xor"),
            lambda: And(()),
        ],
    )
    def test_invalid_criteria_raise(self, build) -> None:  # noqa: ANN001
        with pytest.raises(QueryBuildError):
            build()
