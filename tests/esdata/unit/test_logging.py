"""Unit tests for logging setup."""

import logging
from collections.abc import Iterator

import pytest

from esdata.logging import LogLevel, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    transport_level = logging.getLogger("opensearch").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("opensearch").setLevel(transport_level)


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_from_string(self) -> None:
        logger = setup_logging(level="debug")

        assert logger.name == "esdata"
        assert logging.getLogger().level == logging.DEBUG

    def test_level_from_enum_quiets_transport(self) -> None:
        setup_logging(level=LogLevel.WARNING)

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("opensearch").level == logging.WARNING

    def test_format_without_timestamp(self) -> None:
        setup_logging(include_timestamp=False)

        formatter = logging.getLogger().handlers[0].formatter
        assert formatter is not None
        assert "asctime" not in formatter._fmt  # type: ignore[operator]

    def test_get_logger(self) -> None:
        assert get_logger("esdata.search").name == "esdata.search"
