"""
normalize.py

Turns parsed LogRecord objects into the canonical record table.

The table is a pandas DataFrame with one row per well-formed log line, in
file order, with consistent dtypes:

- line_no: source line number
- ip, method, resource, protocol: strings
- timestamp: offset from the start of the month (timedelta64)
- day, hour, minute, second: the timestamp components
- status: int
- bytes: nullable Int64, <NA> when the log had "-"
- url_length: length of the resource string

Missing byte counts stay missing here. Whether a stage can live with them
is that stage's decision (clustering drops them, summaries count them).

This module is intentionally deterministic and does no analysis.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

import pandas as pd

from weblog.ingest.access_parser import LogRecord, ParseReport, parse_lines, read_access_log
from weblog.ingest.errors import SchemaError


TABLE_COLUMNS = [
    "line_no",
    "ip",
    "timestamp",
    "day",
    "hour",
    "minute",
    "second",
    "method",
    "resource",
    "protocol",
    "status",
    "bytes",
    "url_length",
]

REQUIRED_COLUMNS = ["ip", "timestamp", "method", "resource", "protocol", "status", "bytes"]


def ensure_columns(df: pd.DataFrame, required: Sequence[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise SchemaError(f"Missing required columns: {missing}. Found: {list(df.columns)}")


def records_to_frame(records: Iterable[LogRecord]) -> pd.DataFrame:
    """
    Build the record table from parsed records.
    Row order follows the input; the index is a fresh RangeIndex.
    """
    records = list(records)
    rows = [
        {
            "line_no": r.line_no,
            "ip": r.ip,
            "timestamp": r.timestamp.to_timedelta(),
            "day": r.timestamp.day,
            "hour": r.timestamp.hour,
            "minute": r.timestamp.minute,
            "second": r.timestamp.second,
            "method": r.method,
            "resource": r.resource,
            "protocol": r.protocol,
            "status": r.status,
            "bytes": r.bytes,
            "url_length": r.url_length,
        }
        for r in records
    ]

    df = pd.DataFrame(rows, columns=TABLE_COLUMNS)

    # --- Type conversions ---
    df["timestamp"] = pd.to_timedelta(df["timestamp"])
    for c in ["line_no", "day", "hour", "minute", "second", "status", "url_length"]:
        df[c] = df[c].astype(int)
    # None -> <NA>, never 0; taken from the records so no float round trip
    df["bytes"] = pd.array(
        [pd.NA if r.bytes is None else r.bytes for r in records], dtype="Int64"
    )
    for c in ["ip", "method", "resource", "protocol"]:
        df[c] = df[c].astype(str)

    return df.reset_index(drop=True)


def normalize_log(
    source: Union[str, Path, List[str]],
    **parse_kwargs,
) -> Tuple[pd.DataFrame, ParseReport]:
    """
    Parse a log file (path) or a list of raw lines into the record table.

    Returns: (table, report)
    """
    if isinstance(source, (str, Path)):
        result = read_access_log(source, **parse_kwargs)
    else:
        result = parse_lines(source, **parse_kwargs)
    return records_to_frame(result.records), result.report
