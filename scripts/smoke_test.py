"""
smoke_test.py

Quick sanity check for the parse -> table -> cluster pipeline.

Runs the sample access log through the full pipeline and asserts a few
basic properties so obvious regressions show up before the test suite is
even opened:
- the sample parses with exactly the expected failures
- missing byte counts stay missing instead of becoming 0
- both cluster columns exist and only rows with bytes are labelled
"""

from weblog.pipeline import run_pipeline

result = run_pipeline("data/sample_access.log")
df, rep = result.table, result.report

assert rep.parsed_records == len(df) == 29
assert rep.failure_reasons == {"MalformedLineError": 1}
assert rep.missing_bytes == int(df["bytes"].isna().sum()) == 4
for col in ["cluster_k3", "cluster_k6"]:
    assert col in df.columns
    assert df[col].notna().sum() == df["bytes"].notna().sum()

print("smoke test passed:", rep)
