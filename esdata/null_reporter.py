"""Reporter used when nobody listens to progress, e.g. in library calls and tests."""

from esdata.interfaces import IReporter


class NullReporter(IReporter):
    """Reporter that ignores every callback."""

    def on_message(self, *messages: str) -> None:
        pass

    def on_input(self, message: str) -> str:  # noqa: ARG002
        """Answer every prompt with an empty string."""
        return ""

    def start_progress(self, total: int) -> None:
        pass

    def stop_progress(self) -> None:
        pass

    def on_progress(self, value: int) -> None:
        pass
