"""Space separated column logging with a numbered header line."""

from __future__ import annotations

from typing import TextIO

__all__ = ["CsvWriter"]


class CsvWriter:
    """Write rows of named numeric columns to a text stream.

    Columns are fixed by the first row: once the header is written, values
    for unknown columns are ignored. Columns keep their last value.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._header_written = False
        self._columns: dict[str, float] = {}

    def push(self, column: str, value: float) -> None:
        """Set the value of ``column`` for the next row."""
        if column in self._columns or not self._header_written:
            self._columns[column] = value

    def new_line(self) -> None:
        """Write the current row, preceded by the header the first time."""
        if not self._header_written:
            header = "".join(
                f"#{index}:{name} " for index, name in enumerate(self._columns, start=1)
            )
            self._stream.write(header + "\n")
            self._header_written = True
        row = "".join(f"{value:g} " for value in self._columns.values())
        self._stream.write(row + "\n")
        self._stream.flush()