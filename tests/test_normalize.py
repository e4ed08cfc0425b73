"""Tests for weblog.ingest.normalize"""

import pandas as pd
import pytest

from weblog.ingest.access_parser import parse_lines
from weblog.ingest.errors import SchemaError
from weblog.ingest.normalize import (
    TABLE_COLUMNS,
    ensure_columns,
    normalize_log,
    records_to_frame,
)


def test_columns_and_order(sample_lines):
    df = records_to_frame(parse_lines(sample_lines).records)
    assert list(df.columns) == TABLE_COLUMNS
    assert len(df) == len(sample_lines)
    assert list(df["line_no"]) == list(range(1, len(sample_lines) + 1))
    assert list(df.index) == list(range(len(sample_lines)))


def test_reference_row(sample_lines):
    df = records_to_frame(parse_lines(sample_lines).records)
    row = df.iloc[0]
    assert row["ip"] == "127.0.0.1"
    assert row["timestamp"] == pd.Timedelta(days=1, hours=2, minutes=3, seconds=4)
    assert (row["day"], row["hour"], row["minute"], row["second"]) == (1, 2, 3, 4)
    assert row["method"] == "GET"
    assert row["resource"] == "/index.html"
    assert row["protocol"] == "HTTP/1.0"
    assert row["status"] == 200
    assert row["bytes"] == 1024
    assert row["url_length"] == 11


def test_dtypes(sample_lines):
    df = records_to_frame(parse_lines(sample_lines).records)
    assert df["status"].dtype.kind in ("i", "u")
    assert df["url_length"].dtype.kind in ("i", "u")
    assert str(df["bytes"].dtype) == "Int64"
    assert pd.api.types.is_timedelta64_dtype(df["timestamp"])


def test_missing_bytes_stay_missing(sample_lines):
    df = records_to_frame(parse_lines(sample_lines).records)
    assert pd.isna(df.loc[1, "bytes"])
    assert df.loc[1, "status"] == 404
    assert int(df["bytes"].isna().sum()) == 2
    # a logged zero is a value, not a gap
    assert df.loc[3, "bytes"] == 0


def test_empty_records():
    df = records_to_frame([])
    assert df.empty
    assert list(df.columns) == TABLE_COLUMNS


def test_ensure_columns_raises():
    with pytest.raises(SchemaError):
        ensure_columns(pd.DataFrame({"ip": ["a"]}), ["ip", "status"])


def test_normalize_log_from_lines(sample_lines):
    df, rep = normalize_log(sample_lines + ["bad line"])
    assert len(df) == len(sample_lines)
    assert rep.failed_lines == 1


def test_normalize_log_from_path(write_log, sample_lines):
    df, rep = normalize_log(write_log(sample_lines))
    assert len(df) == rep.parsed_records == len(sample_lines)


def test_normalize_is_repeatable(sample_lines):
    first, _ = normalize_log(sample_lines)
    second, _ = normalize_log(sample_lines)
    pd.testing.assert_frame_equal(first, second)
