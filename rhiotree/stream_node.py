"""Tree of named text output streams that publish when watched."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from rhiotree.publisher import Publisher

__all__ = ["StreamBuffer", "StreamNode", "SEPARATOR"]

SEPARATOR = "/"


def _now_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class StreamBuffer:
    """Text sink that publishes its content on flush while watched.

    Usable as the ``file`` argument of :func:`print`.
    """

    def __init__(self, path: str, publisher: Publisher | None = None) -> None:
        self.path = path
        self.watchers = 0
        self._publisher = publisher
        self._parts: list[str] = []
        self._lock = threading.Lock()

    def write(self, text: str) -> int:
        """Append ``text`` to the pending content."""
        with self._lock:
            self._parts.append(text)
        return len(text)

    def flush(self) -> None:
        """Publish the pending content if watched, then discard it."""
        with self._lock:
            content = "".join(self._parts)
            self._parts.clear()
            watched = self.watchers > 0
        if watched and self._publisher is not None:
            self._publisher.publish_stream(self.path, content, _now_ms())


@dataclass
class _Stream:
    comment: str
    buffer: StreamBuffer


class StreamNode:
    """A node holding named streams and child nodes.

    Names may be paths separated by ``/``; they are resolved through the
    child nodes. Unknown names raise KeyError.
    """

    def __init__(self, path: str = "", publisher: Publisher | None = None) -> None:
        self.path = path
        self._publisher = publisher
        self._children: dict[str, StreamNode] = {}
        self._streams: dict[str, _Stream] = {}
        self._lock = threading.RLock()

    def _forward(self, name: str, create: bool) -> tuple[StreamNode, str]:
        """Resolve ``name`` to the node that owns its last component."""
        node = self
        head, sep, rest = name.lstrip(SEPARATOR).partition(SEPARATOR)
        while sep:
            with node._lock:
                child = node._children.get(head)
                if child is None:
                    if not create:
                        raise KeyError(f"RhIO unknown node name: '{head}' in '{node.path}'")
                    child = StreamNode(node.path + SEPARATOR + head, node._publisher)
                    node._children[head] = child
            node = child
            head, sep, rest = rest.partition(SEPARATOR)
        return node, head

    def child(self, name: str) -> StreamNode:
        """Return the existing child node at the relative path ``name``."""
        node, last = self._forward(name, create=False)
        with node._lock:
            try:
                return node._children[last]
            except KeyError:
                raise KeyError(f"RhIO unknown node name: '{last}' in '{node.path}'") from None

    def _lookup(self, name: str) -> _Stream:
        node, last = self._forward(name, create=False)
        with node._lock:
            try:
                return node._streams[last]
            except KeyError:
                raise KeyError(f"RhIO unknown stream name: {last}") from None

    def stream_exist(self, name: str) -> bool:
        """Return True if a stream is registered under ``name``."""
        try:
            self._lookup(name)
        except KeyError:
            return False
        return True

    def stream_description(self, name: str) -> str:
        """Return the comment given when the stream was registered."""
        return self._lookup(name).comment

    def enable_streaming_stream(self, name: str) -> None:
        """Add one watcher to the stream."""
        buffer = self._lookup(name).buffer
        with buffer._lock:
            buffer.watchers += 1

    def disable_streaming_stream(self, name: str) -> None:
        """Remove one watcher from the stream, never going below zero."""
        buffer = self._lookup(name).buffer
        with buffer._lock:
            buffer.watchers = max(0, buffer.watchers - 1)

    def out(self, name: str) -> StreamBuffer:
        """Return the writable buffer of the stream."""
        return self._lookup(name).buffer

    def new_stream(self, name: str, comment: str) -> None:
        """Register a stream, creating intermediate nodes as needed."""
        node, last = self._forward(name, create=True)
        with node._lock:
            if last in node._streams:
                raise ValueError(f"RhIO already register stream name: {last}")
            buffer = StreamBuffer(node.path + SEPARATOR + last, node._publisher)
            node._streams[last] = _Stream(comment, buffer)

    def list_streams(self) -> list[str]:
        """Return the names of this node's streams in sorted order."""
        with self._lock:
            return sorted(self._streams)