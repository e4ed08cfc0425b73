"""
summary.py

Computes deterministic summary tables from the normalized record table.

These are the counts a reader of the access log wants first: which status
codes and methods dominate, which resources and clients are busiest, how
traffic spreads over days and hours, and how much data was sent. Every
function works on a filtered copy of the table and returns plain Python
values so the whole bundle can be written straight to JSON.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from weblog.tools.clustering import cluster_column, cluster_profile


def _safe_div(n: int, d: int) -> float:
    return float(n) / float(d) if d else 0.0


def _top_n(df: pd.DataFrame, col: str, n: int = 10) -> List[Dict[str, Any]]:
    """Return top N values for a column as [{'value': ..., 'count': ...}, ...]."""
    vc = df[col].value_counts().head(n)
    return [{"value": _plain(idx), "count": int(cnt)} for idx, cnt in vc.items()]


def _plain(value: Any) -> Any:
    # numpy scalars are not JSON serializable
    return value.item() if hasattr(value, "item") else value


def status_counts(df: pd.DataFrame) -> Dict[str, int]:
    counts = df["status"].value_counts().sort_index()
    return {str(int(k)): int(v) for k, v in counts.items()}


def method_counts(df: pd.DataFrame) -> Dict[str, int]:
    counts = df["method"].value_counts()
    return {str(k): int(v) for k, v in counts.items()}


def top_resources(df: pd.DataFrame, n: int = 10) -> List[Dict[str, Any]]:
    return _top_n(df, "resource", n=n)


def top_ips(df: pd.DataFrame, n: int = 10) -> List[Dict[str, Any]]:
    return _top_n(df, "ip", n=n)


def error_resources(df: pd.DataFrame, n: int = 10) -> List[Dict[str, Any]]:
    """Resources that most often answered with a 4xx or 5xx status."""
    sub = df[df["status"] >= 400]
    if sub.empty:
        return []
    return _top_n(sub, "resource", n=n)


def requests_per_day(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    [{'day': 1, 'requests': 123}, ...]
    Days are days of the month; the log format carries no month.
    """
    counts = df.groupby("day").size().sort_index()
    return [{"day": int(idx), "requests": int(val)} for idx, val in counts.items()]


def requests_per_hour(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Request counts by hour of day, across all days:
    [{'hour': 0, 'requests': 12}, ...]
    """
    counts = df.groupby("hour").size().sort_index()
    return [{"hour": int(idx), "requests": int(val)} for idx, val in counts.items()]


def bytes_stats(df: pd.DataFrame) -> Dict[str, Any]:
    """Totals over logged byte counts; rows with "-" are counted as missing."""
    present = df["bytes"].dropna()
    total = int(len(df))
    missing = total - int(len(present))
    return {
        "count": int(len(present)),
        "missing": missing,
        "missing_rate": round(_safe_div(missing, total), 6),
        "sum": int(present.sum()) if len(present) else 0,
        "mean": round(float(present.mean()), 3) if len(present) else None,
        "max": int(present.max()) if len(present) else None,
    }


def compute_summary(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Compute the full summary bundle from a record table.
    Cluster profiles are included for every cluster_k{k} column present.
    The returned dict is JSON-ready.
    """
    if df.empty:
        raise ValueError("compute_summary() received an empty DataFrame")

    clusters: Dict[str, Any] = {}
    for col in df.columns:
        if col.startswith("cluster_k"):
            k = int(col[len("cluster_k"):])
            clusters[cluster_column(k)] = cluster_profile(df, k)

    return {
        "meta": {
            "total_requests": int(len(df)),
            "unique_ips": int(df["ip"].nunique()),
            "unique_resources": int(df["resource"].nunique()),
            "first_timestamp": df["timestamp"].min().isoformat(),
            "last_timestamp": df["timestamp"].max().isoformat(),
        },
        "traffic": {
            "methods": method_counts(df),
            "requests_per_day": requests_per_day(df),
            "requests_per_hour": requests_per_hour(df),
            "top_resources": top_resources(df, n=10),
            "top_ips": top_ips(df, n=10),
        },
        "status": {
            "counts": status_counts(df),
            "error_resources": error_resources(df, n=10),
        },
        "bytes": bytes_stats(df),
        "clusters": clusters,
    }
