"""Double-buffered publisher for streamed values, frames and errors.

Producers append values from any thread. ``send_to_client`` swaps the
buffers under the lock and then delivers the former writing buffer
without holding it, so producers are never blocked by delivery.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

__all__ = ["MessageKind", "Message", "Publisher"]

MessageValue = Union[bool, int, float, str, bytes]


class MessageKind(Enum):
    """Kind of a published message."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STR = "str"
    STREAM = "stream"
    FRAME = "frame"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    """One message handed to the transport."""

    kind: MessageKind
    value: MessageValue
    name: str = ""
    timestamp: int = 0


@dataclass
class _Buffer:
    values: dict[MessageKind, list[Message]] = field(
        default_factory=lambda: {
            kind: []
            for kind in (
                MessageKind.BOOL,
                MessageKind.INT,
                MessageKind.FLOAT,
                MessageKind.STR,
                MessageKind.STREAM,
            )
        }
    )
    frames: list[Message] = field(default_factory=list)
    errors: list[Message] = field(default_factory=list)

    def clear(self) -> None:
        for queue in self.values.values():
            queue.clear()
        self.frames.clear()
        self.errors.clear()


class Publisher:
    """Collect published messages and deliver them in batches.

    ``send`` is called with each :class:`Message` to deliver. Within one
    batch only the first value queued under a given name is delivered,
    whatever its kind; only the latest frame is kept; errors are all sent.
    """

    def __init__(self, send: Callable[[Message], object]) -> None:
        self._send = send
        self._lock = threading.Lock()
        self._writing = _Buffer()
        self._outgoing = _Buffer()

    def _queue_value(self, kind: MessageKind, name: str, value: MessageValue, timestamp: int) -> None:
        message = Message(kind, value, name, int(timestamp))
        with self._lock:
            self._writing.values[kind].append(message)

    def publish_bool(self, name: str, value: bool, timestamp: int) -> None:
        """Queue a boolean value."""
        self._queue_value(MessageKind.BOOL, name, bool(value), timestamp)

    def publish_int(self, name: str, value: int, timestamp: int) -> None:
        """Queue an integer value."""
        self._queue_value(MessageKind.INT, name, int(value), timestamp)

    def publish_float(self, name: str, value: float, timestamp: int) -> None:
        """Queue a float value."""
        self._queue_value(MessageKind.FLOAT, name, float(value), timestamp)

    def publish_str(self, name: str, value: str, timestamp: int) -> None:
        """Queue a string value."""
        self._queue_value(MessageKind.STR, name, str(value), timestamp)

    def publish_stream(self, name: str, value: str, timestamp: int) -> None:
        """Queue text written to an output stream."""
        self._queue_value(MessageKind.STREAM, name, str(value), timestamp)

    def publish_frame(self, name: str, data: bytes, timestamp: int) -> None:
        """Queue an encoded frame, replacing any frame not yet delivered."""
        message = Message(MessageKind.FRAME, bytes(data), name, int(timestamp))
        with self._lock:
            self._writing.frames.clear()
            self._writing.frames.append(message)

    def publish_error(self, message: str) -> None:
        """Queue an error message."""
        entry = Message(MessageKind.ERROR, str(message))
        with self._lock:
            self._writing.errors.append(entry)

    def send_to_client(self) -> None:
        """Swap buffers and deliver everything queued since the last call."""
        with self._lock:
            self._writing, self._outgoing = self._outgoing, self._writing
        outgoing = self._outgoing
        try:
            already_sent: set[str] = set()
            for queue in outgoing.values.values():
                for message in queue:
                    if message.name not in already_sent:
                        already_sent.add(message.name)
                        self._send(message)
            for message in outgoing.frames:
                self._send(message)
            for message in outgoing.errors:
                self._send(message)
        finally:
            outgoing.clear()