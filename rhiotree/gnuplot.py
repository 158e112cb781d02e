"""Live plotting of named signals through a gnuplot process."""

from __future__ import annotations

import subprocess
import sys
from collections import deque
from dataclasses import dataclass, field

__all__ = ["GnuPlotSignal", "GnuPlot", "HISTORIES"]

HISTORIES = (15.0, 30.0, 60.0, 3.0)


@dataclass
class GnuPlotSignal:
    """A named series of values."""

    name: str
    values: deque[float] = field(default_factory=deque)


class GnuPlot:
    """Collect signal values against time and draw them with gnuplot.

    In mode 1 every signal is plotted against time. In mode 2 the first
    signal is the X axis, in mode 3 the first two signals are X and Y.
    """

    def __init__(self, mode: int = 1) -> None:
        self.mode_2d = mode == 2
        self.mode_3d = mode == 3
        self.replot = False
        self.history = 0
        self.time_ref: deque[int] = deque()
        self.signals: list[GnuPlotSignal] = []
        self._signals_by_name: dict[str, GnuPlotSignal] = {}
        self._time_offset: int | None = None
        self._process: subprocess.Popen | None = None

    @property
    def history_seconds(self) -> float:
        """Length of the displayed time window, in seconds."""
        return HISTORIES[self.history]

    def set_x(self, x: int) -> None:
        """Append a time point in milliseconds, relative to the first one."""
        if self._time_offset is None:
            self._time_offset = x
        self.time_ref.append(x - self._time_offset)

    def push(self, name: str, value: float) -> None:
        """Append a value to the named signal."""
        signal = self._signals_by_name.get(name)
        if signal is None:
            signal = GnuPlotSignal(name)
            self._signals_by_name[name] = signal
            self.signals.append(signal)
        signal.values.append(value)

    def _trim(self) -> None:
        window = int(self.history_seconds * 1000)
        while self.time_ref and self.time_ref[-1] - self.time_ref[0] > window:
            self.time_ref.popleft()
            for signal in self.signals:
                if signal.values:
                    signal.values.popleft()

    def render(self) -> None:
        """Drop points older than the history window and send the plot."""
        self._trim()
        commands = self.generate_plotting()
        if self._process is None:
            self._create_instance()
        assert self._process is not None and self._process.stdin is not None
        try:
            self._process.stdin.write(commands.encode())
            self._process.stdin.flush()
        except (BrokenPipeError, ValueError, OSError):
            print("GnuPlot::render: failed write", file=sys.stderr)

    def _create_instance(self) -> None:
        try:
            self._process = subprocess.Popen(
                ["gnuplot", "-"],
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            print("RhIOShell: Unable to create gnuplot process", file=sys.stderr)
            print("Have you installed the gnuplot package ?", file=sys.stderr)
            raise RuntimeError("GnuPlot exec fails") from exc

    def generate_plotting(self) -> str:
        """Return the gnuplot commands followed by the inline data."""
        if self.replot:
            commands = "replot "
        elif self.mode_3d:
            commands = "set term qt noraise; splot "
        else:
            commands = "set term qt noraise noenhanced; plot "

        start = 2 if self.mode_3d else 1 if self.mode_2d else 0
        count = len(self.signals)
        data_parts: list[str] = []
        first = True
        for signal in self.signals[start:]:
            if not self.replot:
                if not first:
                    commands += ", "
                first = False
                if self.mode_3d and count == 3:
                    commands += "'-' u 1:2:3:4 palette "
                elif self.mode_3d:
                    commands += "'-' u 1:2:3 "
                elif self.mode_2d and count == 2:
                    commands += "'-' u 1:2:3 palette "
                else:
                    commands += "'-' u 1:2 "
                commands += " w l"
                commands += f" title '{signal.name}' "

            for k, time in enumerate(self.time_ref):
                seconds = f"{time / 1000.0:g}"
                value = f"{signal.values[k]:g}"
                if self.mode_3d:
                    row = f"{self.signals[0].values[k]:g} {self.signals[1].values[k]:g} {value}"
                    if count == 3:
                        row += f" {seconds}"
                elif self.mode_2d:
                    row = f"{self.signals[0].values[k]:g} {value}"
                    if count == 2:
                        row += f" {seconds}"
                else:
                    row = f"{seconds} {value}"
                data_parts.append(row + "\n")
            data_parts.append("e\n")
        commands += ";\n"
        return commands + "".join(data_parts)

    def close_window(self) -> None:
        """Ask gnuplot to quit and close the pipe."""
        stdin = self._process.stdin if self._process is not None else None
        for _ in range(2):
            try:
                if stdin is None:
                    raise OSError("no gnuplot process")
                stdin.write(b"quit\n")
                stdin.flush()
            except (OSError, ValueError):
                print("GnuPlot::closeWindow: failed to quit", file=sys.stderr)
        try:
            if stdin is None:
                raise OSError("no gnuplot process")
            stdin.close()
        except OSError as exc:
            print(f"GnuPlot::closeWindow: failed to close plotFd: {exc}", file=sys.stderr)

    def change_history(self) -> None:
        """Cycle to the next history window length."""
        self.history = (self.history + 1) % len(HISTORIES)
        print(f"History set to {self.history_seconds:g}s")