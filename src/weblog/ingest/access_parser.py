"""
access_parser.py

Parses space-delimited web server access logs into typed LogRecord objects.

Expected line format (one request per line):

    ip [day:hour:minute:second] "METHOD /resource PROTOCOL" status bytes

e.g.

    127.0.0.1 [01:02:03:04] "GET /index.html HTTP/1.0" 200 1024

The parser treats this as a strict schema contract:
- exactly 5 fields (the quoted request counts as one)
- a bracketed timestamp with no year or month
- a request that splits into exactly method, resource, protocol
- a 3-digit HTTP status

Lines that break the contract are not silently skipped. Each failure is
kept on the ParseResult together with its line number so the caller can
decide whether the run is still usable. A "-" byte count is not a failure:
the record is kept with bytes = None.

This module performs no I/O beyond read_access_log() and no analysis.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from weblog.ingest.errors import (
    LineParseError,
    MalformedLineError,
    MissingValueError,
    RequestParseError,
    StatusParseError,
    TimestampParseError,
    TooManyFailuresError,
)

logger = logging.getLogger(__name__)

# A field is either a double-quoted run (the request) or a run of non-spaces.
FIELD_RE = re.compile(r'"[^"]*"|[^ ]+')

EXPECTED_FIELDS = 5
TIME_FORMAT = "%d:%H:%M:%S"
MISSING_TOKEN = "-"


@dataclass(frozen=True, order=True)
class LogTimestamp:
    """
    When a request was received, at day-of-month granularity.

    The source format carries no year or month, so two timestamps from
    different months compare by day/hour/minute/second only.
    """

    day: int
    hour: int
    minute: int
    second: int

    def to_timedelta(self) -> timedelta:
        """Offset from the start of the (unknown) month."""
        return timedelta(days=self.day, hours=self.hour, minutes=self.minute, seconds=self.second)

    def format(self) -> str:
        return f"{self.day:02d}:{self.hour:02d}:{self.minute:02d}:{self.second:02d}"


@dataclass(frozen=True)
class LogRecord:
    ip: str
    timestamp: LogTimestamp
    method: str
    resource: str
    protocol: str
    status: int
    bytes: Optional[int]
    line_no: int = field(default=0, compare=False)

    @property
    def url_length(self) -> int:
        return len(self.resource)


@dataclass(frozen=True)
class ParseFailure:
    line_no: int
    line: str
    error: LineParseError

    @property
    def reason(self) -> str:
        return self.error.reason


@dataclass(frozen=True)
class ParseReport:
    input_lines: int
    blank_lines: int
    parsed_records: int
    failed_lines: int
    failure_reasons: Dict[str, int]
    failed_line_numbers: List[int]
    missing_bytes: int


@dataclass
class ParseResult:
    records: List[LogRecord] = field(default_factory=list)
    failures: List[ParseFailure] = field(default_factory=list)
    missing_values: List[MissingValueError] = field(default_factory=list)
    input_lines: int = 0
    blank_lines: int = 0

    @property
    def report(self) -> ParseReport:
        reasons = Counter(f.reason for f in self.failures)
        return ParseReport(
            input_lines=self.input_lines,
            blank_lines=self.blank_lines,
            parsed_records=len(self.records),
            failed_lines=len(self.failures),
            failure_reasons=dict(sorted(reasons.items())),
            failed_line_numbers=[f.line_no for f in self.failures],
            missing_bytes=len(self.missing_values),
        )


def split_fields(line: str) -> List[str]:
    """
    Split a line on single spaces, keeping the quoted request as one field.
    """
    return FIELD_RE.findall(line)


def parse_timestamp(token: str) -> LogTimestamp:
    """
    Parse a bracketed timestamp like: [01:02:03:04]
    """
    if len(token) < 2 or not (token.startswith("[") and token.endswith("]")):
        raise TimestampParseError(f"Timestamp is not bracketed: {token!r}")
    inner = token[1:-1]
    try:
        ts = datetime.strptime(inner, TIME_FORMAT)
    except ValueError as e:
        raise TimestampParseError(
            f"Timestamp does not match day:hour:minute:second: {inner!r}"
        ) from e
    return LogTimestamp(day=ts.day, hour=ts.hour, minute=ts.minute, second=ts.second)


def parse_request(request: str, *, join_resource_spaces: bool = False) -> Tuple[str, str, str]:
    """
    Parse request like: '"GET /index.html HTTP/1.0"'
    Returns (method, resource, protocol).

    A resource containing spaces yields more than 3 tokens. By default that
    is rejected; with join_resource_spaces=True the middle tokens are joined
    back into the resource with single spaces.
    """
    if len(request) >= 2 and request.startswith('"') and request.endswith('"'):
        request = request[1:-1]

    parts = request.split(" ")
    # empty tokens come from doubled spaces, never valid in either mode
    if "" in parts or len(parts) < 3 or (len(parts) > 3 and not join_resource_spaces):
        raise RequestParseError(
            f"Request does not split into method, resource, protocol: {request!r}"
        )
    if len(parts) > 3:
        parts = [parts[0], " ".join(parts[1:-1]), parts[-1]]
    method, resource, protocol = parts
    return method, resource, protocol


def parse_status(token: str) -> int:
    if len(token) != 3 or not token.isdigit():
        raise StatusParseError(f"Status is not a 3-digit code: {token!r}")
    status = int(token)
    if not 100 <= status <= 599:
        raise StatusParseError(f"Status out of HTTP range: {status}")
    return status


def parse_bytes(token: str) -> Optional[int]:
    """Return the byte count, or None when it was not logged ("-" or junk)."""
    # isdecimal() is False for "-" and for negatives, both count as missing
    if token.isascii() and token.isdecimal():
        return int(token)
    return None


def parse_line(line: str, *, line_no: int = 0, join_resource_spaces: bool = False) -> LogRecord:
    """
    Parse one access log line into a LogRecord.

    Raises a LineParseError subclass (with line_no and line attached) when
    the line breaks the format.
    """
    stripped = line.rstrip("\r\n")
    try:
        fields = split_fields(stripped)
        if len(fields) != EXPECTED_FIELDS:
            raise MalformedLineError(
                f"Expected {EXPECTED_FIELDS} fields, found {len(fields)}"
            )
        # any other spacing means an empty field was squeezed out
        if " ".join(fields) != stripped:
            raise MalformedLineError("Fields must be separated by exactly one space")
        ip, time_tok, request, status_tok, bytes_tok = fields
        timestamp = parse_timestamp(time_tok)
        method, resource, protocol = parse_request(
            request, join_resource_spaces=join_resource_spaces
        )
        status = parse_status(status_tok)
    except LineParseError as e:
        e.line_no = line_no
        e.line = stripped
        raise

    return LogRecord(
        ip=ip,
        timestamp=timestamp,
        method=method,
        resource=resource,
        protocol=protocol,
        status=status,
        bytes=parse_bytes(bytes_tok),
        line_no=line_no,
    )


def format_record(record: LogRecord) -> str:
    """Render a record back into the access log line format."""
    size = MISSING_TOKEN if record.bytes is None else str(record.bytes)
    return (
        f"{record.ip} [{record.timestamp.format()}] "
        f'"{record.method} {record.resource} {record.protocol}" '
        f"{record.status} {size}"
    )


# Inputs:
# lines: raw lines, in file order
# max_bad_lines: optional safety valve, raise once more lines than this have failed
def parse_lines(
    lines: Iterable[str],
    *,
    max_bad_lines: Optional[int] = None,
    join_resource_spaces: bool = False,
) -> ParseResult:
    """
    Parse raw lines into records, collecting failures instead of stopping.

    Blank lines are counted but produce neither a record nor a failure.
    Records keep the input order.
    """
    result = ParseResult()

    for line_no, line in enumerate(lines, start=1):
        result.input_lines += 1
        if not line.strip():
            result.blank_lines += 1
            continue

        try:
            record = parse_line(
                line, line_no=line_no, join_resource_spaces=join_resource_spaces
            )
        except LineParseError as e:
            logger.debug("Line %d rejected (%s): %s", line_no, e.reason, e)
            result.failures.append(ParseFailure(line_no=line_no, line=e.line or "", error=e))
            if max_bad_lines is not None and len(result.failures) > max_bad_lines:
                raise TooManyFailuresError(
                    f"Too many malformed lines (> {max_bad_lines}). "
                    f"Last failure at line {line_no}: {line.strip()[:120]}"
                ) from e
            continue

        if record.bytes is None:
            result.missing_values.append(
                MissingValueError("bytes not logged", line_no=line_no, line=line.rstrip("\r\n"))
            )
        result.records.append(record)

    report = result.report
    logger.info(
        "Parsed %d of %d lines (%d failed, %d blank, %d missing bytes)",
        report.parsed_records,
        report.input_lines,
        report.failed_lines,
        report.blank_lines,
        report.missing_bytes,
    )
    return result


def read_access_log(path: Union[str, Path], **kwargs) -> ParseResult:
    """Read an access log file and parse it with parse_lines()."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return parse_lines(f, **kwargs)
