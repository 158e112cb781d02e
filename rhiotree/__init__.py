"""Trees of typed values and text streams, a double-buffered publisher, command binding and shell helpers."""

__version__ = "0.1.0"
__all__ = [
    "bind",
    "completion",
    "csv_log",
    "publisher",
    "stream_node",
    "value_node",
    "persistence",
    "gnuplot",
]