"""
errors.py

Exception types raised while turning an access log into a clustered table.

Per-line problems (bad field count, bad timestamp, bad request, bad status)
derive from LineParseError and are collected by the parser rather than
aborting the run. Table-level problems (schema violations, nothing left to
cluster, too many bad lines) are fatal and propagate to the caller.
"""

from __future__ import annotations

from typing import Optional


class WeblogError(Exception):
    """Base class for every error raised by this package."""


class LineParseError(WeblogError, ValueError):
    """A single log line could not be turned into a record."""

    def __init__(self, message: str, *, line_no: Optional[int] = None, line: Optional[str] = None):
        super().__init__(message)
        self.line_no = line_no
        self.line = line

    @property
    def reason(self) -> str:
        return type(self).__name__


class MalformedLineError(LineParseError):
    """The line does not split into exactly 5 fields."""


class TimestampParseError(LineParseError):
    """The timestamp field is not a bracketed day:hour:minute:second token."""


class RequestParseError(LineParseError):
    """The request field does not split into method, resource and protocol."""


class StatusParseError(LineParseError):
    """The status field is not a valid 3-digit HTTP status code."""


class MissingValueError(LineParseError):
    """
    A numeric field was absent (e.g. bytes logged as "-").

    Never raised by the parser: the value is stored as missing and an
    instance is kept on the parse result for accounting.
    """


class TooManyFailuresError(WeblogError, ValueError):
    """More lines failed to parse than the caller allowed."""


class SchemaError(WeblogError, ValueError):
    """A record table is missing columns the next stage depends on."""


class ClusteringError(WeblogError, ValueError):
    """Clustering could not run with the requested parameters."""


class EmptyFeatureTableError(ClusteringError):
    """No rows had a complete feature vector."""
