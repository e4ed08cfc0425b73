"""
cli.py

Command-line entry point: cluster the requests in one access log.

Usage:
  weblog-clusters access.log
  weblog-clusters access.log --out artifacts --seed 7
  weblog-clusters access.log --k 3 --k 6 --max-bad-lines 100
  weblog-clusters access.log --join-resource-spaces

With --out, writes records.csv (one row per parsed line, with cluster
labels) and summary.json. Exits non-zero if the pipeline cannot finish.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from weblog.ingest.errors import WeblogError
from weblog.pipeline import PipelineConfig, PipelineResult, run_pipeline
from weblog.tools.clustering import ClusterConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weblog-clusters",
        description="Parse a web server access log and cluster its requests with k-means.",
    )
    parser.add_argument("log", help="Access log file")
    parser.add_argument("--out", type=Path, help="Directory for records.csv and summary.json")
    parser.add_argument("--seed", type=int, default=42, help="k-means random seed (default: 42)")
    parser.add_argument(
        "--k",
        dest="ks",
        type=int,
        action="append",
        help="Number of clusters; repeat for several runs (default: 3 and 6)",
    )
    parser.add_argument("--max-iter", type=int, default=300, help="k-means iteration bound")
    parser.add_argument(
        "--max-bad-lines",
        type=int,
        default=None,
        help="Abort if more than this many lines fail to parse (default: never)",
    )
    parser.add_argument(
        "--join-resource-spaces",
        action="store_true",
        help="Accept resources containing spaces instead of rejecting the line",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        max_bad_lines=args.max_bad_lines,
        join_resource_spaces=args.join_resource_spaces,
        clustering=ClusterConfig(
            seed=args.seed,
            max_iter=args.max_iter,
            ks=tuple(args.ks) if args.ks else (3, 6),
        ),
    )


def write_outputs(result: PipelineResult, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    result.table.to_csv(out_dir / "records.csv", index=False)
    with open(out_dir / "summary.json", "w", encoding="utf-8") as f:
        json.dump(result.summary, f, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    try:
        result = run_pipeline(args.log, config_from_args(args))
    except (OSError, WeblogError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    rep = result.report
    print("=== Parse Report ===")
    print("lines:", rep.input_lines, "records:", rep.parsed_records, "failed:", rep.failed_lines)
    print("blank:", rep.blank_lines, "missing bytes:", rep.missing_bytes)
    if rep.failure_reasons:
        print("failure reasons:", rep.failure_reasons)

    print("\n=== Clusters ===")
    for name, profile in result.summary["clusters"].items():
        print(name)
        for c in profile:
            print(
                f"  {c['cluster']}: size={c['size']} bytes={c['mean_bytes']} "
                f"status={c['mean_status']} url_length={c['mean_url_length']}"
            )

    if args.out:
        write_outputs(result, args.out)
        print(f"\nWrote {args.out / 'records.csv'} and {args.out / 'summary.json'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
