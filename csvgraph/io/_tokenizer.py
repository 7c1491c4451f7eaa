"""Delimited-text tokenizer used by the CSV graph importer.

Splits a text stream into records of string fields. A field is unquoted text,
a double-quoted string (``""`` escapes a quote, newlines allowed) or empty.
Records end at ``\\n`` or ``\\r\\n``; the final newline is optional.

The stream is consumed in chunks, so memory stays bounded by the current
record.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import NamedTuple, TextIO

_CHUNK = 1 << 16

# states
_FIELD_START = 0
_UNQUOTED = 1
_QUOTED = 2
_QUOTE_IN_QUOTED = 3  # closing quote or first half of an escaped ""


class CSVSyntaxError(ValueError):
    """Malformed delimited text. ``line`` is 1-based, ``column`` 0-based."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"line {line}:{column} {message}")
        self.line = line
        self.column = column


class Record(NamedTuple):
    fields: list[str]
    line: int  # line the record starts on


def check_delimiter(delimiter: str) -> str:
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ValueError(f"delimiter must be a single character, got {delimiter!r}")
    if delimiter in '"\r\n':
        raise ValueError(f"delimiter {delimiter!r} is reserved")
    return delimiter


def _chars(stream: TextIO) -> Iterator[str]:
    while True:
        try:
            chunk = stream.read(_CHUNK)
        except UnicodeDecodeError:
            raise
        except ValueError as exc:
            # closed or detached streams
            raise OSError(f"cannot read input: {exc}") from exc
        if not chunk:
            return
        yield from chunk


def iter_records(stream: TextIO, delimiter: str = ";") -> Iterator[Record]:
    """Yield records from ``stream`` in document order.

    Raises
    ------
    CSVSyntaxError
        On a quote inside an unquoted field, text after a closing quote,
        an unterminated quoted field, or a carriage return not followed by
        a line feed.

    """
    sep = check_delimiter(delimiter)

    state = _FIELD_START
    fields: list[str] = []
    buf: list[str] = []
    line, col = 1, 0
    record_line = 1
    quote_pos = (1, 0)
    pending_cr = None  # position of a '\r' awaiting its '\n'

    for ch in _chars(stream):
        if pending_cr is not None:
            if ch != "\n":
                raise CSVSyntaxError("carriage return not followed by line feed", *pending_cr)
            pending_cr = None
            # fall through: '\n' ends the record below

        if state == _QUOTED:
            if ch == '"':
                state = _QUOTE_IN_QUOTED
            else:
                buf.append(ch)
        elif ch == '"':
            if state == _QUOTE_IN_QUOTED:
                buf.append('"')
                state = _QUOTED
            elif state == _FIELD_START:
                quote_pos = (line, col)
                state = _QUOTED
            else:
                raise CSVSyntaxError("unexpected quote in unquoted field", line, col)
        elif ch == sep:
            fields.append("".join(buf))
            buf.clear()
            state = _FIELD_START
        elif ch == "\r":
            pending_cr = (line, col)
        elif ch == "\n":
            fields.append("".join(buf))
            buf.clear()
            yield Record(fields, record_line)
            fields = []
            state = _FIELD_START
        elif state == _QUOTE_IN_QUOTED:
            raise CSVSyntaxError(f"unexpected character {ch!r} after closing quote", line, col)
        else:
            buf.append(ch)
            state = _UNQUOTED

        if ch == "\n":
            line += 1
            col = 0
            if state == _FIELD_START and not fields:
                record_line = line
        else:
            col += 1

    if pending_cr is not None:
        raise CSVSyntaxError("carriage return not followed by line feed", *pending_cr)
    if state == _QUOTED:
        raise CSVSyntaxError("unterminated quoted field", *quote_pos)
    if fields or buf or state != _FIELD_START:
        fields.append("".join(buf))
        yield Record(fields, record_line)
