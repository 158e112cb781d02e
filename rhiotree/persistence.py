"""Save and load a node's persisted values as a ``values.conf`` text file.

Each persisted value is written as two lines::

    [int] speed.value = 42
    [int] speed.comment = Maximum speed

Values are grouped by type (bool, int, float, str) and sorted by name.
"""

from __future__ import annotations

import os
from collections.abc import Callable

from rhiotree.bind import convert_argument
from rhiotree.stream_node import SEPARATOR
from rhiotree.value_node import Value, ValueNode, ValueType

__all__ = ["ValuesFileError", "save_values", "load_values"]

FILE_NAME = "values.conf"

_TAGS: dict[ValueType, str] = {
    ValueType.BOOL: "[bool]",
    ValueType.INT: "[int]",
    ValueType.FLOAT: "[float]",
    ValueType.STR: "[str]",
}
_TYPES_BY_TAG = {tag: kind for kind, tag in _TAGS.items()}


class ValuesFileError(Exception):
    """Raised when a values file cannot be written or is badly formatted."""


def _file_path(path: str | os.PathLike[str]) -> tuple[str, str]:
    text = os.fspath(path)
    if text and not text.endswith(SEPARATOR):
        return text, text + SEPARATOR + FILE_NAME
    return text, text + FILE_NAME


def _format(value_type: ValueType, value: object) -> str:
    if value_type is ValueType.BOOL:
        return "1" if value else "0"
    if value_type is ValueType.FLOAT:
        return f"{value:g}"
    return str(value)


def save_values(node: ValueNode, path: str | os.PathLike[str]) -> None:
    """Write the persisted values of ``node`` into ``path``/values.conf.

    Nothing is written when the node has no persisted value. Each written
    value has its persisted value updated to its current value.
    """
    persisted: list[tuple[ValueType, Value]] = [
        (kind, entry)
        for kind in _TAGS
        for _, entry in sorted(node.values_of(kind).items())
        if entry.persisted
    ]
    if not persisted:
        return

    directory, file_path = _file_path(path)
    try:
        with open(file_path, "w", encoding="utf-8") as handle:
            for kind, entry in persisted:
                tag = _TAGS[kind]
                handle.write(f"{tag} {entry.name}.value = {_format(kind, entry.value)}\n")
                handle.write(f"{tag} {entry.name}.comment = {entry.comment}\n")
                entry.value_persisted = entry.value
    except OSError as exc:
        raise ValuesFileError(f"RhIO unable to write values file: {directory}") from exc


def _parse_line(line: str, fail: Callable[[], ValuesFileError]) -> tuple[str, str, str, str]:
    """Split a line into its type tag, name, field and value."""
    if not line.startswith("["):
        raise fail()
    close = line.find("]")
    if close < 0:
        raise fail()
    tag = line[: close + 1]

    rest = line[close + 2 :]
    stripped = rest.lstrip(" ")
    if not stripped:
        raise fail()
    start = len(line) - len(stripped)

    dot = line.find(".", start)
    if dot < 0 or dot == start:
        raise fail()
    name = line[start:dot]

    field_start = dot + 1
    space = line.find(" ", field_start)
    if space < 0 or space == field_start:
        raise fail()
    field = line[field_start:space]

    equal = line.find("=", space + 1)
    if equal < 0:
        raise fail()
    value = line[equal + 1 :].lstrip(" ")
    return tag, name, field, value


def _convert(value_type: ValueType, text: str, fail: Callable[[], ValuesFileError]) -> object:
    try:
        if value_type is ValueType.BOOL:
            return bool(convert_argument(int, text))
        if value_type is ValueType.INT:
            return convert_argument(int, text)
        if value_type is ValueType.FLOAT:
            return convert_argument(float, text)
    except ValueError as exc:
        raise fail() from exc
    return text


def load_values(node: ValueNode, path: str | os.PathLike[str]) -> None:
    """Load values from ``path``/values.conf into ``node``.

    A missing file is not an error. Unknown values are declared.
    Raises ValuesFileError on a badly formatted line.
    """
    directory, file_path = _file_path(path)
    try:
        handle = open(file_path, encoding="utf-8")
    except OSError:
        return

    with handle:
        for raw in handle:
            line = raw.rstrip("\n")
            if not line:
                continue

            def fail(line: str = line) -> ValuesFileError:
                return ValuesFileError(
                    f"RhIO invalid formated values file: {directory}: {line}"
                )

            tag, name, field, text = _parse_line(line, fail)
            value_type = _TYPES_BY_TAG.get(tag)
            if value_type is None:
                raise fail()
            values = node.values_of(value_type)
            entry = values.get(name)
            if entry is None:
                entry = Value.create(name, value_type)
                values[name] = entry
            if field == "value":
                converted = _convert(value_type, text, fail)
                entry.value = converted
                entry.value_persisted = converted
            elif field == "comment":
                entry.comment = text
            else:
                raise fail()