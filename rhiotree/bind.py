"""Bind plain Python functions to text-argument commands.

A command receives its arguments as strings. They are converted with the
function's parameter annotations. Missing arguments are taken from a list
of textual defaults, where an empty string means that there is no default.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

__all__ = [
    "BindError",
    "convert_argument",
    "type_name",
    "bind_usage",
    "bind_call",
    "make_command",
]

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)

_TYPE_NAMES = {bool: "bool", int: "int", float: "float", str: "string"}

# Annotations written as text (postponed evaluation) are mapped by name.
_NAMED_TYPES: dict[str, object] = {
    "bool": bool,
    "int": int,
    "float": float,
    "str": str,
    "None": None,
}


class _NoAnnotation:
    """Marker for a parameter or return value without annotation."""

    def __repr__(self) -> str:
        return "<no annotation>"


_NO_ANNOTATION = _NoAnnotation()


class BindError(Exception):
    """Raised when a command argument has neither a value nor a default."""


def _parse_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"invalid integer argument: {text!r}")
    return int(match.group())


def _parse_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"invalid float argument: {text!r}")
    return float(match.group())


def _parse_bool(text: str) -> bool:
    return text in ("true", "1")


_CONVERTERS: dict[type, Callable[[str], object]] = {
    bool: _parse_bool,
    int: _parse_int,
    float: _parse_float,
    str: str,
}


def _resolve(annotation: object) -> object:
    """Map a missing or textual annotation to the type it names."""
    if annotation is _NO_ANNOTATION:
        return str
    if isinstance(annotation, str):
        return _NAMED_TYPES.get(annotation.strip(), annotation)
    return annotation


def convert_argument(annotation: object, text: str) -> object:
    """Convert ``text`` to the type named by ``annotation``.

    Integers and floats are read from the leading part of the text, as a
    number prefix; anything other than "true" or "1" is a false boolean.
    """
    annotation = _resolve(annotation)
    try:
        converter = _CONVERTERS[annotation]  # type: ignore[index]
    except (KeyError, TypeError):
        raise TypeError(f"unsupported argument type for binding: {annotation!r}") from None
    return converter(text)


def type_name(annotation: object) -> str:
    """Return the textual name of a bindable type, or "ERROR"."""
    annotation = _resolve(annotation)
    try:
        return _TYPE_NAMES.get(annotation, "ERROR")  # type: ignore[arg-type]
    except TypeError:
        return "ERROR"


def _signature(func: Callable) -> tuple[list[object], object]:
    """Return the positional parameter annotations and the return annotation."""
    target: object = func
    skip = 0
    if hasattr(func, "__func__"):
        target = func.__func__  # type: ignore[attr-defined]
        skip = 1
    code = getattr(target, "__code__", None)
    if code is None:
        call = getattr(type(func), "__call__", None)
        code = getattr(call, "__code__", None)
        if code is None:
            raise TypeError(f"cannot bind object without code: {func!r}")
        target = call
        skip = 1
    names = code.co_varnames[skip : code.co_argcount]
    annotations = getattr(target, "__annotations__", None) or {}
    params = [_resolve(annotations.get(name, _NO_ANNOTATION)) for name in names]
    ret = _resolve(annotations.get("return", _NO_ANNOTATION))
    return params, ret


def _default_for(default_args: Sequence[str], index: int) -> str | None:
    if index < len(default_args) and default_args[index] != "":
        return default_args[index]
    return None


def bind_usage(func: Callable, default_args: Sequence[str] | None) -> str:
    """Describe the arguments and return type of ``func``."""
    defaults = list(default_args or [])
    params, ret = _signature(func)
    parts = []
    for index, annotation in enumerate(params):
        part = type_name(annotation)
        default = _default_for(defaults, index)
        if default is not None:
            part += "|" + default
        parts.append(f"<{part}> ")
    return "".join(parts) + f"--> <{type_name(ret)}>"


def _format_result(result: object) -> str:
    if result is None:
        return ""
    if isinstance(result, bool):
        return "1" if result else "0"
    if isinstance(result, float):
        return f"{result:f}"
    return str(result)


def bind_call(func: Callable, params: Sequence[str], default_args: Sequence[str] | None) -> str:
    """Convert ``params`` and call ``func``, returning its result as text.

    Arguments beyond those ``func`` takes are ignored.
    Raises BindError if an argument is missing and has no default.
    """
    defaults = list(default_args or [])
    annotations, _ = _signature(func)
    args = []
    for index, annotation in enumerate(annotations):
        if index < len(params):
            text = params[index]
        else:
            text = _default_for(defaults, index)
            if text is None:
                raise BindError(f"RhIO bind error at argument {index + 1}")
        args.append(convert_argument(annotation, text))
    return _format_result(func(*args))


def make_command(
    name: str, func: Callable, default_args: Sequence[str] | None = None
) -> Callable[[Sequence[str]], str]:
    """Build a command that calls ``func`` with textual arguments.

    The command never raises: binding errors yield the usage text and
    errors raised by ``func`` are reported as a user exception.
    """
    defaults = list(default_args or [])
    params, _ = _signature(func)
    if defaults and len(defaults) != len(params):
        raise ValueError("RhIO default parameters given with invalid size")

    def command(args: Sequence[str]) -> str:
        try:
            return bind_call(func, args, defaults)
        except BindError as exc:
            return f"{exc}.\nUSAGE: {name} {bind_usage(func, defaults)}"
        except Exception as exc:  # forwarded to the caller as text
            return f"User exception: {exc}"

    return command