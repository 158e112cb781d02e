# rhiotree

`rhiotree` is a library that keeps a tree of named, typed values (bool, int,
float, str) and named text output streams. Entries are addressed by paths
separated by slashes. When something in the tree is being watched, each change
to it is queued on a double-buffered publisher. The publisher passes the
queued messages to a callable that you supply. The package also includes a
helper that turns plain Python functions into commands taking string
arguments, and a few helpers for a command shell: column logging, completion
helpers and a gnuplot driver.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

### `rhiotree.value_node`

`ValueNode(path="", publisher=None)` holds typed `Value` records and child
nodes.

- Declaring values: `new_bool`, `new_int`, `new_float` and `new_str` declare a
  value and return its `Value` record. Any intermediate nodes are created. If a
  value of the same type already exists under that name, its record is
  returned. If the name is already used by a value of a different type, a
  `ValueError` is raised.
- Bounds, comments and persistence: set these through the record's fields
  (`has_min`, `min`, `has_max`, `max`, `comment`, `persisted`).
- Reading and writing: `get_bool`/`get_int`/`get_float`/`get_str` read a value.
  `set_bool`/`set_int`/`set_float`/`set_str` write one, clamped to its bounds.
  The setters also take `no_callback` and an optional millisecond `timestamp`.
- Errors: an unknown name raises `KeyError`. `get_value_type` returns
  `ValueType.NO_VALUE` for an unknown name instead of raising.
- Callbacks: `set_callback_*` registers a function that is called with the new
  value on every write, unless the write passes `no_callback=True`.
- Streaming: `enable_streaming_value` and `disable_streaming_value` count the
  watchers of a value. The count never goes below zero. While a value has at
  least one watcher, each write is published under its full path.
- Listing and access: `list_values_*` return the sorted names held by one
  node. `child` returns an existing sub-node. `values_of(value_type)` gives
  direct access to a node's mapping of records.

### `rhiotree.persistence`

- `save_values(node, path)` writes the persisted values of one node to
  `path/values.conf`. Each value takes two lines, such as
  `[int] speed.value = 42` followed by `[int] speed.comment = ...`. Saving
  updates each record's `value_persisted`. If the node has no persisted value,
  no file is written.
- `load_values(node, path)` reads that file back. Any value it names that the
  node does not have is declared. A missing file is ignored. A badly formatted
  line, or a file that cannot be written, raises `ValuesFileError`.

### `rhiotree.stream_node`

`StreamNode(path="", publisher=None)` registers named text streams.

- `new_stream(name, comment)` creates a stream. A name that is already taken
  raises `ValueError`.
- `out(name)` returns the stream's `StreamBuffer`. It can be used as the
  `file` argument of `print`. `flush()` publishes the buffered text if the
  stream has watchers, then discards it.
- The other methods are `stream_exist`, `stream_description`,
  `enable_streaming_stream`, `disable_streaming_stream`, `list_streams` and
  `child`.

### `rhiotree.publisher`

`Publisher(send)` queues messages from any thread. The queueing methods are
`publish_bool`, `publish_int`, `publish_float`, `publish_str`,
`publish_stream`, `publish_frame` and `publish_error`.

`send_to_client()` swaps the buffers and calls `send` once per queued
`Message`. Each message has a `kind` (a `MessageKind`), `value`, `name` and
`timestamp`. In each round, only the first value queued under a given name is
sent. Only the latest frame is kept, and every error message is sent.

### `rhiotree.bind`

`make_command(name, func, default_args=None)` returns a function that takes a
list of strings. Each string is converted according to `func`'s parameter
annotations (`bool`, `int`, `float`, `str`; parameters without an annotation
are treated as `str`). The command returns `func`'s result as text.

- `default_args` lists one textual default per parameter. An empty string
  means the parameter has no default.
- If `default_args` is given and its length does not match the number of
  parameters, `make_command` raises `ValueError`.
- The command itself never raises. If an argument is missing, it returns the
  error followed by a usage line built by `bind_usage`. If `func` raises, it
  returns `"User exception: ..."`.

The lower-level helpers are `bind_call`, `convert_argument`, `type_name` and
`BindError`.

### `rhiotree.completion`

- `common_prefix(matches)` returns the longest prefix shared by at least two
  candidates. With fewer than two candidates it returns an empty string.
- `split(text, delim)` splits a line on a delimiter. It drops a trailing empty
  item.

### `rhiotree.csv_log`

`CsvWriter(stream)` writes space-separated rows of named numeric columns.

- `push(column, value)` sets a column's value for the next row.
- `new_line()` writes the row. On the first call it first writes a numbered
  header line (`#1:name #2:other ...`).
- The columns are fixed once the header has been written. Each column keeps
  its last value.

### `rhiotree.gnuplot`

`GnuPlot(mode=1)` collects signals against time. Use `set_x` to add a time
point in milliseconds and `push(name, value)` to add a value to a signal.

- Modes: in mode 1 every signal is plotted against time. In mode 2 the first
  signal is the X axis. In mode 3 the first two signals are X and Y.
- `render()` keeps only the points inside the current history window (15, 30,
  60 or 3 seconds; `change_history()` cycles through them). It then writes the
  output of `generate_plotting()` to a `gnuplot -` process, starting the
  process on the first call. This needs the `gnuplot` program to be installed.
  If it cannot be started, `render()` raises `RuntimeError`.
- `close_window()` asks gnuplot to quit.

## Example

```python
from rhiotree.publisher import Publisher
from rhiotree.value_node import ValueNode

sent = []
publisher = Publisher(sent.append)
root = ValueNode("", publisher)

speed = root.new_float("motor/speed")
speed.has_max = True
speed.max = 2.0

root.enable_streaming_value("motor/speed")
root.set_float("motor/speed", 3.5)   # clamped to 2.0

publisher.send_to_client()
print(sent[0].name, sent[0].value)   # /motor/speed 2.0
```

## What the package does not do

- It has no network transport. `Publisher` hands messages to your `send`
  callable and does not serialise them or open sockets.
- It does not answer remote requests for the tree.
- It does not encode images. `publish_frame` takes bytes that are already
  encoded.
- It has no command-line program or interactive shell. Only the helpers
  described above are included.
- Values and streams live in separate trees. There is no single root object
  that combines values, streams and commands.