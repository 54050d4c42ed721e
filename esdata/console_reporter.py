"""Console reporter for CLI commands."""

from typing import NoReturn

from tqdm import tqdm

from esdata.interfaces import IReporter


class ConsoleReporter(IReporter):
    """Prints messages to stdout and shows bulk progress as a tqdm bar.

    Args:
        unit: Unit label of the progress bar
        description: Optional prefix shown before the bar
    """

    def __init__(self, *, unit: str = "batch", description: str | None = None) -> None:
        self._unit = unit
        self._description = description
        self._progress_bar: tqdm[NoReturn] | None = None

    def on_message(self, *messages: str) -> None:
        for message in messages:
            # Keep an active bar intact
            if self._progress_bar is not None:
                tqdm.write(message)
            else:
                print(message)

    def on_input(self, message: str) -> str:
        return input(message)

    def start_progress(self, total: int) -> None:
        self.stop_progress()
        self._progress_bar = tqdm(total=total, unit=self._unit, desc=self._description)

    def stop_progress(self) -> None:
        if self._progress_bar is not None:
            self._progress_bar.close()
            self._progress_bar = None

    def on_progress(self, value: int) -> None:
        if self._progress_bar is not None:
            self._progress_bar.update(value)
