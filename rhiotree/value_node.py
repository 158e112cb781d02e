"""Tree of typed, bounded values that publish their updates when watched."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from rhiotree.publisher import Publisher
from rhiotree.stream_node import SEPARATOR

__all__ = ["ValueType", "Value", "ValueNode"]


class ValueType(Enum):
    """Type of a registered value."""

    NO_VALUE = "none"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STR = "str"


_DEFAULTS: dict[ValueType, object] = {
    ValueType.BOOL: False,
    ValueType.INT: 0,
    ValueType.FLOAT: 0.0,
    ValueType.STR: "",
}

_CASTS: dict[ValueType, Callable[[object], object]] = {
    ValueType.BOOL: bool,
    ValueType.INT: int,
    ValueType.FLOAT: float,
    ValueType.STR: str,
}

_TYPE_LABELS: dict[ValueType, str] = {
    ValueType.BOOL: "Bool",
    ValueType.INT: "Int",
    ValueType.FLOAT: "Float",
    ValueType.STR: "Str",
}


def _now_ms() -> int:
    return time.monotonic_ns() // 1_000_000


def _ignore(_value: object) -> None:
    return None


@dataclass
class Value:
    """A named value with its bounds, persistence state and watchers."""

    name: str
    value_type: ValueType
    value: object
    comment: str = ""
    has_min: bool = False
    has_max: bool = False
    min: object = None
    max: object = None
    persisted: bool = False
    value_persisted: object = None
    stream_watchers: int = 0
    timestamp: int = 0
    callback: Callable[[object], object] = field(default=_ignore, repr=False, compare=False)

    @classmethod
    def create(cls, name: str, value_type: ValueType) -> Value:
        """Return a new value holding the default of its type."""
        default = _DEFAULTS[value_type]
        return cls(
            name=name,
            value_type=value_type,
            value=default,
            min=default,
            max=default,
            value_persisted=default,
        )


class ValueNode:
    """A node holding typed values and child nodes.

    Names may be paths separated by ``/``; they are resolved through the
    child nodes. Unknown names raise KeyError, type conflicts ValueError.
    """

    def __init__(self, path: str = "", publisher: Publisher | None = None) -> None:
        self.path = path
        self._publisher = publisher
        self._children: dict[str, ValueNode] = {}
        self._values: dict[ValueType, dict[str, Value]] = {kind: {} for kind in _DEFAULTS}
        self._lock = threading.RLock()

    # Tree navigation

    def _forward(self, name: str, create: bool) -> tuple[ValueNode, str]:
        """Resolve ``name`` to the node that owns its last component."""
        node = self
        head, sep, rest = name.lstrip(SEPARATOR).partition(SEPARATOR)
        while sep:
            with node._lock:
                child = node._children.get(head)
                if child is None:
                    if not create:
                        raise KeyError(f"RhIO unknown node name: '{head}' in '{node.path}'")
                    child = ValueNode(node.path + SEPARATOR + head, node._publisher)
                    node._children[head] = child
            node = child
            head, sep, rest = rest.partition(SEPARATOR)
        return node, head

    def child(self, name: str) -> ValueNode:
        """Return the existing child node at the relative path ``name``."""
        node, last = self._forward(name, create=False)
        with node._lock:
            try:
                return node._children[last]
            except KeyError:
                raise KeyError(f"RhIO unknown node name: '{last}' in '{node.path}'") from None

    def values_of(self, value_type: ValueType) -> dict[str, Value]:
        """Return this node's live mapping of values of ``value_type``."""
        if value_type is ValueType.NO_VALUE:
            raise ValueError("RhIO no values of type NoValue")
        return self._values[value_type]

    # Lookup

    def _find(self, name: str, value_type: ValueType) -> tuple[ValueNode, Value]:
        node, last = self._forward(name, create=False)
        with node._lock:
            try:
                return node, node._values[value_type][last]
            except KeyError:
                label = _TYPE_LABELS[value_type]
                raise KeyError(
                    f"RhIO unknown value {label} name: '{last}' in '{node.path}'"
                ) from None

    def _find_any(self, name: str) -> Value:
        node, last = self._forward(name, create=False)
        with node._lock:
            for values in node._values.values():
                if last in values:
                    return values[last]
        raise KeyError(f"RhIO unknown value name: '{last}' in '{node.path}'")

    def get_value_type(self, name: str) -> ValueType:
        """Return the type of the value ``name``, or NO_VALUE if unknown."""
        try:
            node, last = self._forward(name, create=False)
        except KeyError:
            return ValueType.NO_VALUE
        with node._lock:
            for kind, values in node._values.items():
                if last in values:
                    return kind
        return ValueType.NO_VALUE

    # Getters

    def _get(self, name: str, value_type: ValueType) -> object:
        node, entry = self._find(name, value_type)
        with node._lock:
            return entry.value

    def get_bool(self, name: str) -> bool:
        """Return the current boolean value."""
        return self._get(name, ValueType.BOOL)  # type: ignore[return-value]

    def get_int(self, name: str) -> int:
        """Return the current integer value."""
        return self._get(name, ValueType.INT)  # type: ignore[return-value]

    def get_float(self, name: str) -> float:
        """Return the current float value."""
        return self._get(name, ValueType.FLOAT)  # type: ignore[return-value]

    def get_str(self, name: str) -> str:
        """Return the current string value."""
        return self._get(name, ValueType.STR)  # type: ignore[return-value]

    # Setters

    def _set(
        self,
        name: str,
        value_type: ValueType,
        value: object,
        no_callback: bool,
        timestamp: int | None,
    ) -> None:
        value = _CASTS[value_type](value)
        stamp = _now_ms() if timestamp is None else int(timestamp)
        node, entry = self._find(name, value_type)
        with node._lock:
            stored = value
            if entry.has_min and stored < entry.min:  # type: ignore[operator]
                stored = entry.min
            if entry.has_max and stored > entry.max:  # type: ignore[operator]
                stored = entry.max
            entry.value = stored
            entry.timestamp = stamp
            callback = entry.callback
            watched = entry.stream_watchers > 0
            full_name = node.path + SEPARATOR + entry.name
        if not no_callback:
            callback(stored)
        if watched and node._publisher is not None:
            # Strings are published as given, before bounding.
            published = value if value_type is ValueType.STR else stored
            publish = {
                ValueType.BOOL: node._publisher.publish_bool,
                ValueType.INT: node._publisher.publish_int,
                ValueType.FLOAT: node._publisher.publish_float,
                ValueType.STR: node._publisher.publish_str,
            }[value_type]
            publish(full_name, published, stamp)

    def set_bool(
        self, name: str, value: bool, no_callback: bool = False, timestamp: int | None = None
    ) -> None:
        """Set a boolean value, bounded by its min and max."""
        self._set(name, ValueType.BOOL, value, no_callback, timestamp)

    def set_int(
        self, name: str, value: int, no_callback: bool = False, timestamp: int | None = None
    ) -> None:
        """Set an integer value, bounded by its min and max."""
        self._set(name, ValueType.INT, value, no_callback, timestamp)

    def set_float(
        self, name: str, value: float, no_callback: bool = False, timestamp: int | None = None
    ) -> None:
        """Set a float value, bounded by its min and max."""
        self._set(name, ValueType.FLOAT, value, no_callback, timestamp)

    def set_str(
        self, name: str, value: str, no_callback: bool = False, timestamp: int | None = None
    ) -> None:
        """Set a string value, bounded by its min and max."""
        self._set(name, ValueType.STR, value, no_callback, timestamp)

    # Declaration

    def _new(self, name: str, value_type: ValueType) -> Value:
        node, last = self._forward(name, create=True)
        with node._lock:
            existing = node.get_value_type(last)
            if existing is value_type:
                return node._values[value_type][last]
            if existing is not ValueType.NO_VALUE:
                raise ValueError(
                    f"RhIO value already known with other type: '{last}' in '{node.path}'"
                )
            entry = Value.create(last, value_type)
            node._values[value_type][last] = entry
            return entry

    def new_bool(self, name: str) -> Value:
        """Declare a boolean value, or return the existing one."""
        return self._new(name, ValueType.BOOL)

    def new_int(self, name: str) -> Value:
        """Declare an integer value, or return the existing one."""
        return self._new(name, ValueType.INT)

    def new_float(self, name: str) -> Value:
        """Declare a float value, or return the existing one."""
        return self._new(name, ValueType.FLOAT)

    def new_str(self, name: str) -> Value:
        """Declare a string value, or return the existing one."""
        return self._new(name, ValueType.STR)

    # Callbacks

    def _set_callback(self, name: str, value_type: ValueType, func: Callable) -> None:
        node, entry = self._find(name, value_type)
        with node._lock:
            entry.callback = func

    def set_callback_bool(self, name: str, func: Callable[[bool], object]) -> None:
        """Call ``func`` with the new value whenever the value is set."""
        self._set_callback(name, ValueType.BOOL, func)

    def set_callback_int(self, name: str, func: Callable[[int], object]) -> None:
        """Call ``func`` with the new value whenever the value is set."""
        self._set_callback(name, ValueType.INT, func)

    def set_callback_float(self, name: str, func: Callable[[float], object]) -> None:
        """Call ``func`` with the new value whenever the value is set."""
        self._set_callback(name, ValueType.FLOAT, func)

    def set_callback_str(self, name: str, func: Callable[[str], object]) -> None:
        """Call ``func`` with the new value whenever the value is set."""
        self._set_callback(name, ValueType.STR, func)

    # Value records

    def get_value_bool(self, name: str) -> Value:
        """Return the record of a boolean value."""
        return self._find(name, ValueType.BOOL)[1]

    def get_value_int(self, name: str) -> Value:
        """Return the record of an integer value."""
        return self._find(name, ValueType.INT)[1]

    def get_value_float(self, name: str) -> Value:
        """Return the record of a float value."""
        return self._find(name, ValueType.FLOAT)[1]

    def get_value_str(self, name: str) -> Value:
        """Return the record of a string value."""
        return self._find(name, ValueType.STR)[1]

    # Streaming

    def enable_streaming_value(self, name: str) -> None:
        """Add one watcher to the value."""
        entry = self._find_any(name)
        with self._lock:
            entry.stream_watchers += 1

    def disable_streaming_value(self, name: str) -> None:
        """Remove one watcher from the value, never going below zero."""
        entry = self._find_any(name)
        with self._lock:
            entry.stream_watchers = max(0, entry.stream_watchers - 1)

    # Listing

    def _list(self, value_type: ValueType) -> list[str]:
        with self._lock:
            return sorted(self._values[value_type])

    def list_values_bool(self) -> list[str]:
        """Return the names of this node's boolean values, sorted."""
        return self._list(ValueType.BOOL)

    def list_values_int(self) -> list[str]:
        """Return the names of this node's integer values, sorted."""
        return self._list(ValueType.INT)

    def list_values_float(self) -> list[str]:
        """Return the names of this node's float values, sorted."""
        return self._list(ValueType.FLOAT)

    def list_values_str(self) -> list[str]:
        """Return the names of this node's string values, sorted."""
        return self._list(ValueType.STR)