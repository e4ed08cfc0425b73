"""
pipeline.py

Runs the whole analysis on one access log file:
parse -> record table -> k-means labels -> summary tables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd

from weblog.ingest.access_parser import ParseReport
from weblog.ingest.normalize import normalize_log
from weblog.tools.clustering import ClusterConfig, assign_clusters
from weblog.tools.summary import compute_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    # None means never abort, however many lines fail
    max_bad_lines: Optional[int] = None
    join_resource_spaces: bool = False
    clustering: ClusterConfig = field(default_factory=ClusterConfig)


@dataclass(frozen=True)
class PipelineResult:
    table: pd.DataFrame
    report: ParseReport
    summary: Dict[str, Any]


def run_pipeline(path: Union[str, Path], config: PipelineConfig = PipelineConfig()) -> PipelineResult:
    logger.info("Reading %s", path)
    table, report = normalize_log(
        path,
        max_bad_lines=config.max_bad_lines,
        join_resource_spaces=config.join_resource_spaces,
    )
    if report.failed_lines:
        logger.warning(
            "%d lines could not be parsed: %s", report.failed_lines, report.failure_reasons
        )

    table = assign_clusters(table, config.clustering)
    summary = compute_summary(table)
    summary["parse"] = {
        "input_lines": report.input_lines,
        "blank_lines": report.blank_lines,
        "parsed_records": report.parsed_records,
        "failed_lines": report.failed_lines,
        "failure_reasons": report.failure_reasons,
        "failed_line_numbers": report.failed_line_numbers,
        "missing_bytes": report.missing_bytes,
    }
    return PipelineResult(table=table, report=report, summary=summary)
