"""
features.py

Builds the numeric feature table used for clustering.

Each request is described by three raw numbers: bytes sent, status code and
resource length. Rows with a missing byte count are left out entirely (no
imputation). The feature table keeps the record table's index so cluster
labels can be written back onto the right rows.
"""

from __future__ import annotations

import logging

import pandas as pd

from weblog.ingest.normalize import ensure_columns

logger = logging.getLogger(__name__)

FEATURE_COLUMNS = ("bytes", "status", "url_length")


def extract_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a float feature table of (bytes, status, url_length) for rows
    where all three are present. The input table is not modified.
    """
    ensure_columns(df, list(FEATURE_COLUMNS))

    features = df.loc[:, list(FEATURE_COLUMNS)].dropna()
    features = features.astype(float)

    excluded = len(df) - len(features)
    if excluded:
        logger.info("Excluded %d of %d rows with incomplete features", excluded, len(df))
    return features
