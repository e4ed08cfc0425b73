"""
validate_ingest.py

Prints what the parser and normalizer make of the sample access log.

Meant to be run by a developer to eyeball the record table (dtypes, time
range, status mix, missing byte counts) before looking at clusters.

This is not a test suite and does not use assertions.
"""

from weblog.ingest.normalize import normalize_log

df, rep = normalize_log("data/sample_access.log")

print("=== Parse Report ===")
print(rep)

print("\n=== Head ===")
print(df.head())

print("\n=== Dtypes ===")
print(df.dtypes)

print("\n=== Basic Sanity ===")
print("rows:", len(df))
print("time range:", df["timestamp"].min(), "->", df["timestamp"].max())
print("unique IPs:", df["ip"].nunique())
print("status counts:\n", df["status"].value_counts().sort_index())
print("missing bytes:", int(df["bytes"].isna().sum()))
