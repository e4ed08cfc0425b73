"""
clustering.py

Partitions requests into k groups with k-means over raw feature vectors.

Distances are Euclidean over the unscaled (bytes, status, url_length)
triple, so bytes dominates. That reproduces the original analysis; scaling
the features would change which requests end up together.

Randomness is controlled only through the explicit seed on ClusterConfig
(or the seed argument), never through global RNG state: two runs with the
same input, k and seed give identical labels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import pandas as pd
from sklearn.cluster import KMeans

from weblog.ingest.errors import ClusteringError, EmptyFeatureTableError
from weblog.tools.features import FEATURE_COLUMNS, extract_features

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterConfig:
    seed: int = 42
    max_iter: int = 300
    n_init: int = 10
    ks: Tuple[int, ...] = (3, 6)


def cluster_column(k: int) -> str:
    return f"cluster_k{k}"


def kmeans_labels(
    features: pd.DataFrame,
    k: int,
    *,
    seed: int,
    max_iter: int = 300,
    n_init: int = 10,
) -> pd.Series:
    """
    Run Lloyd's k-means on a feature table.

    Returns labels 1..k as an Int64 Series sharing the feature table's index.
    """
    if features.empty:
        raise EmptyFeatureTableError("No rows with complete features to cluster")
    if k < 1:
        raise ClusteringError(f"k must be at least 1, got {k}")
    if k > len(features):
        raise ClusteringError(f"k={k} is larger than the number of rows ({len(features)})")

    model = KMeans(
        n_clusters=k,
        init="k-means++",
        n_init=n_init,
        max_iter=max_iter,
        random_state=seed,
        algorithm="lloyd",
    )
    labels = model.fit_predict(features.to_numpy(dtype=float))

    logger.info(
        "k-means k=%d on %d rows converged after %d iterations (inertia %.3f)",
        k,
        len(features),
        model.n_iter_,
        model.inertia_,
    )
    return pd.Series(labels + 1, index=features.index, dtype="Int64", name=cluster_column(k))


def assign_clusters(df: pd.DataFrame, config: ClusterConfig = ClusterConfig()) -> pd.DataFrame:
    """
    Return a copy of the record table with one cluster_k{k} column per
    configured k. Rows left out of the feature table get <NA>.

    A k larger than the number of complete rows cannot be fitted; its
    column is left all <NA> so the other k values still get labels. Only an
    empty feature table is fatal.
    """
    features = extract_features(df)
    out = df.copy()
    for k in config.ks:
        if not features.empty and k > len(features):
            logger.warning(
                "Skipping k=%d: only %d rows have complete features", k, len(features)
            )
            out[cluster_column(k)] = pd.array([pd.NA] * len(out), dtype="Int64")
            continue
        labels = kmeans_labels(
            features, k, seed=config.seed, max_iter=config.max_iter, n_init=config.n_init
        )
        # aligned on index: excluded rows stay <NA>
        out[cluster_column(k)] = labels.reindex(out.index)
    return out


def cluster_profile(df: pd.DataFrame, k: int) -> List[Dict[str, Any]]:
    """
    Size and mean feature values per cluster:
    [{'cluster': 1, 'size': 40, 'mean_bytes': ..., 'mean_status': ..., 'mean_url_length': ...}, ...]
    """
    col = cluster_column(k)
    if col not in df.columns:
        raise ClusteringError(f"Table has no {col} column; run assign_clusters() first")

    labelled = df[df[col].notna()]
    keys = labelled[col].astype(int)
    g = labelled[list(FEATURE_COLUMNS)].astype(float).groupby(keys).mean()
    sizes = keys.value_counts()

    out: List[Dict[str, Any]] = []
    for label, row in g.sort_index().iterrows():
        out.append(
            {
                "cluster": int(label),
                "size": int(sizes[label]),
                "mean_bytes": round(float(row["bytes"]), 3),
                "mean_status": round(float(row["status"]), 3),
                "mean_url_length": round(float(row["url_length"]), 3),
            }
        )
    return out
