"""Helpers for shell completion."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = ["common_prefix", "split"]


def common_prefix(matches: Iterable[str]) -> str:
    """Return the longest prefix shared by all matches.

    Fewer than two matches give an empty string.
    """
    items = list(matches)
    if len(items) < 2:
        return ""
    prefix_chars = []
    for chars in zip(*items):
        first = chars[0]
        if any(c != first for c in chars):
            break
        prefix_chars.append(first)
    return "".join(prefix_chars)


def split(text: str, delim: str) -> list[str]:
    """Split ``text`` on ``delim``.

    An empty text gives no items and a trailing delimiter does not
    produce a trailing empty item.
    """
    if not text:
        return []
    parts = text.split(delim)
    if parts[-1] == "":
        parts.pop()
    return parts