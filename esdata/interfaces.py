"""Type definitions and interfaces shared across esdata."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class IReporter(ABC):
    """Reporter interface."""

    @abstractmethod
    def on_message(self, *messages: str) -> None:
        """On message callback."""

    @abstractmethod
    def on_input(self, message: str) -> str:
        """On input callback."""

    @abstractmethod
    def start_progress(self, total: int) -> None:
        """On start progress callback."""

    @abstractmethod
    def stop_progress(self) -> None:
        """On stop progress callback."""

    @abstractmethod
    def on_progress(self, value: int) -> None:
        """On progress callback."""


@dataclass
class SearchQuery:
    """A search request ready to be sent: target index, request body and URL parameters."""

    index: str
    body: dict[str, Any]
    params: dict[str, Any] = field(default_factory=dict)
