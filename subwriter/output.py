# subwriter/output.py
"""
Output writer for subdomain results.

Two line encodings are supported:
- plain: "host,ip,source" (full form) or "host" (host-only forms)
- json:  one compact JSON object per line ({"host", "ip", "source"} or {"host", "source"})

Sinks are any object with a write() method. Text streams (io.TextIOBase) get str,
everything else gets UTF-8 bytes. Records are written in the iteration order of
the mapping passed in.
"""
import enum
import io
import json
import os
from contextlib import suppress
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from .results import HostEntry, Result
from .utils import logger

BUFFER_SIZE = 4096
DIR_MODE = 0o755
FILE_MODE = 0o644

# errors a sink's write() or flush() may raise; TypeError is a sink rejecting bytes
_SINK_ERRORS = (OSError, ValueError, TypeError)


class InvalidArgumentError(ValueError):
    """Raised when a destination is requested with an empty filename."""


class OutputIOError(OSError):
    """Raised when creating, opening or writing an output destination fails."""


def _io_error(message: str, cause: BaseException) -> OutputIOError:
    if isinstance(cause, OSError) and cause.errno is not None:
        return OutputIOError(cause.errno, f"{message}: {cause.strerror or cause}", cause.filename)
    return OutputIOError(f"{message}: {cause}")


class OutputMode(enum.Enum):
    PLAIN = "plain"
    JSON = "json"


def _open_with_mode(path, flags):
    return os.open(path, flags, FILE_MODE)


def _make_dirs(directory: Path):
    """Create directory and every missing ancestor with DIR_MODE."""
    missing = []
    current = directory
    while not current.exists() and current.parent != current:
        missing.append(current)
        current = current.parent
    for path in reversed(missing):
        path.mkdir(mode=DIR_MODE, exist_ok=True)


def _field(record: Any, name: str) -> str:
    # absent or None fields are written as empty strings
    value = getattr(record, name, "")
    return "" if value is None else str(value)


def _dump(data: Dict[str, str]) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":")) + "\n"


def _plain_host_ip(record: Any) -> str:
    return f"{_field(record, 'host')},{_field(record, 'ip')},{_field(record, 'source')}\n"


def _json_host_ip(record: Any) -> str:
    return _dump({
        "host": _field(record, "host"),
        "ip": _field(record, "ip"),
        "source": _field(record, "source"),
    })


def _plain_host(record: Any) -> str:
    return f"{_field(record, 'host')}\n"


def _json_host(record: Any) -> str:
    return _dump({"host": _field(record, "host"), "source": _field(record, "source")})


class _BufferedSink:
    """
    Accumulates whole lines and hands them to the sink in chunks.

    io.TextIOBase sinks get str, any other sink gets UTF-8 bytes. A sink that
    only takes str without subclassing io.TextIOBase fails with OutputIOError.
    """

    def __init__(self, writer, size: int = BUFFER_SIZE):
        self._writer = writer
        self._text = isinstance(writer, io.TextIOBase)
        self._size = size
        self._pending = []
        self._pending_len = 0

    def write_line(self, line: str):
        if self._text:
            data = line
        else:
            try:
                data = line.encode("utf-8")
            except UnicodeEncodeError as e:
                # records already buffered still reach the sink
                self._drain()
                self._flush_best_effort()
                raise _io_error("cannot encode output record", e) from e
        self._pending.append(data)
        self._pending_len += len(data)
        if self._pending_len >= self._size:
            self._drain()

    def _drain(self):
        if not self._pending:
            return
        chunk = ("" if self._text else b"").join(self._pending)
        self._pending = []
        self._pending_len = 0
        try:
            written = self._writer.write(chunk)
            if written is not None and written < len(chunk):
                raise OSError(f"short write ({written} of {len(chunk)})")
        except _SINK_ERRORS as e:
            self._flush_best_effort()
            raise _io_error("write to output failed", e) from e

    def _flush_best_effort(self):
        flush = getattr(self._writer, "flush", None)
        if flush is None:
            return
        # the write error is what the caller gets, not this one
        with suppress(*_SINK_ERRORS):
            flush()

    def flush(self):
        self._drain()
        flush = getattr(self._writer, "flush", None)
        if flush is None:
            return
        try:
            flush()
        except _SINK_ERRORS as e:
            raise _io_error("flush of output failed", e) from e


def _write_lines(results: Mapping[str, Any], writer, encode: Callable[[Any], str]) -> int:
    sink = _BufferedSink(writer)
    count = 0
    for record in results.values():
        sink.write_line(encode(record))
        count += 1
    sink.flush()
    return count


class Outputter:
    """Writes result collections to files or streams in plain or JSON form."""

    def __init__(self, json: bool = False):
        self._mode = OutputMode.JSON if json else OutputMode.PLAIN

    @property
    def mode(self) -> OutputMode:
        return self._mode

    @property
    def json(self) -> bool:
        return self._mode is OutputMode.JSON

    def create_file(self, filename: str, output_directory: str = "", append: bool = False):
        """
        Open the destination file for writing and return the binary file object.

        The output directory (and its parents) is created when missing. With
        append=True the file is opened for appending, otherwise it is truncated.
        The caller owns the returned file and must close it.
        """
        if not filename:
            raise InvalidArgumentError("empty filename")

        path = filename
        if output_directory:
            directory = Path(output_directory)
            if not directory.exists():
                try:
                    _make_dirs(directory)
                except OSError as e:
                    raise _io_error(f"cannot create output directory {output_directory}", e) from e
            # an absolute filename still lands inside the output directory
            path = os.path.join(output_directory, filename.lstrip(os.sep))

        mode = "ab" if append else "wb"
        try:
            fh = open(path, mode, opener=_open_with_mode)
        except OSError as e:
            raise _io_error(f"cannot open output file {path}", e) from e
        logger.debug(f"Opened output file {path} (append={append})")
        return fh

    def write_host_ip(self, results: Mapping[str, Result], writer):
        """Write host, ip and source for every result, one record per line."""
        encode = _json_host_ip if self.json else _plain_host_ip
        count = _write_lines(results, writer, encode)
        logger.debug(f"Wrote {count} host/ip records ({self._mode.value})")

    def write_host_no_wildcard(self, results: Mapping[str, Result], writer):
        """Write the results without their addresses (same output as write_host)."""
        hosts = {
            key: HostEntry(host=_field(result, "host"), source=_field(result, "source"))
            for key, result in results.items()
        }
        self.write_host(hosts, writer)

    def write_host(self, results: Mapping[str, HostEntry], writer):
        """Write host entries: the bare host in plain mode, host and source in JSON mode."""
        encode = _json_host if self.json else _plain_host
        count = _write_lines(results, writer, encode)
        logger.debug(f"Wrote {count} host records ({self._mode.value})")

    def write_for_chaos(self, results: Mapping[str, Any], writer):
        """Write the bare host list used for the Chaos export. Always plain."""
        count = _write_lines(results, writer, _plain_host)
        logger.debug(f"Prepared {count} hosts for export")
