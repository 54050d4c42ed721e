"""Unit tests for custom value conversions."""

from decimal import Decimal

import pytest
from pydantic import BaseModel, ConfigDict

from esdata.mapping.annotations import FieldType
from esdata.mapping.conversions import ConversionRegistry
from esdata.mapping.mapper import EntityMapper
from esdata.mapping.metadata import get_metadata
from esdata.query.criteria import where
from esdata.query.translator import CriteriaTranslator
from tests.esdata.models import Book, make_books


class Money(Decimal):
    pass


class Cents(int):
    pass


class Price(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str | None = None
    amount: Cents


@pytest.fixture
def conversions() -> ConversionRegistry:
    return ConversionRegistry().register(Decimal, writer=float, reader=lambda raw: Decimal(str(raw)), field_type=FieldType.DOUBLE)


@pytest.mark.unit
class TestConversionRegistry:
    """Tests for ConversionRegistry."""

    def test_register_returns_registry(self) -> None:
        registry = ConversionRegistry()

        assert registry.register(Decimal, writer=str, reader=Decimal) is registry
        assert len(registry) == 1

    def test_find_walks_the_mro(self, conversions: ConversionRegistry) -> None:
        assert Money in conversions
        assert conversions.find(Money).python_type is Decimal

    def test_find_unknown_type(self, conversions: ConversionRegistry) -> None:
        assert conversions.find(str) is None
        assert conversions.find("not a type") is None


@pytest.mark.unit
class TestMapperWithConversions:
    """Conversions flow through writing, reading, mappings and queries."""

    def test_write_uses_conversion(self, conversions: ConversionRegistry) -> None:
        mapper = EntityMapper(conversions=conversions)

        assert mapper.to_document(make_books()[0])["price"] == 12.5

    def test_read_uses_conversion(self, conversions: ConversionRegistry) -> None:
        mapper = EntityMapper(conversions=conversions)
        document = mapper.to_document(make_books()[0])

        assert mapper.from_document(document, Book).price == Decimal("12.5")

    def test_mapping_uses_conversion_field_type(self, conversions: ConversionRegistry) -> None:
        mapper = EntityMapper(conversions=conversions)

        assert mapper.to_mapping(Book)["properties"]["price"] == {"type": "double"}

    def test_query_values_use_conversion(self, conversions: ConversionRegistry) -> None:
        translator = CriteriaTranslator(metadata=get_metadata(Book), mapper=EntityMapper(conversions=conversions))

        clause = translator.translate(where("price").less_than(Decimal("20")))

        assert clause == {"range": {"price": {"lt": 20.0}}}

    def test_failing_conversion_raises_mapping_error(self) -> None:
        from esdata.exceptions import MappingError

        def explode(_: Decimal) -> float:
            raise ArithmeticError("boom")

        mapper = EntityMapper(conversions=ConversionRegistry().register(Decimal, writer=explode, reader=Decimal))

        with pytest.raises(MappingError, match="price"):
            mapper.to_document(make_books()[0])

    def test_conversion_for_builtin_subclass_is_used(self) -> None:
        registry = ConversionRegistry().register(
            Cents, writer=lambda value: f"{int(value)}c", reader=lambda raw: Cents(int(raw.rstrip("c")))
        )
        mapper = EntityMapper(conversions=registry)
        price = Price(id="1", amount=Cents(250))

        document = mapper.to_document(price)
        restored = mapper.from_document(document, Price)

        assert document == {"id": "1", "amount": "250c"}
        assert restored == price
        assert type(restored.amount) is Cents

    def test_builtin_subclass_without_conversion_keeps_its_value(self) -> None:
        assert EntityMapper().write_value(Cents(3)) == 3
