"""Tests for weblog.pipeline and weblog.cli"""

import json

import pandas as pd
import pytest

from weblog.cli import build_parser, config_from_args, main
from weblog.ingest.errors import EmptyFeatureTableError, TooManyFailuresError
from weblog.pipeline import PipelineConfig, run_pipeline
from weblog.tools.clustering import ClusterConfig


class TestRunPipeline:
    def test_end_to_end(self, write_log, sample_lines):
        result = run_pipeline(write_log(sample_lines + ["junk"]))
        assert len(result.table) == len(sample_lines)
        assert result.report.failed_lines == 1
        assert result.summary["parse"]["failed_line_numbers"] == [len(sample_lines) + 1]
        assert set(result.summary["clusters"]) == {"cluster_k3", "cluster_k6"}

    def test_threshold_aborts(self, write_log):
        path = write_log(["junk", "more junk"])
        with pytest.raises(TooManyFailuresError):
            run_pipeline(path, PipelineConfig(max_bad_lines=1))

    def test_fewer_rows_than_k(self, write_log):
        path = write_log(
            [
                'a [01:00:00:00] "GET /a HTTP/1.0" 200 100',
                'b [01:00:00:01] "GET /bb HTTP/1.0" 200 50000',
                'c [01:00:00:02] "GET /ccc HTTP/1.0" 404 900000',
                'd [01:00:00:03] "GET /dddd HTTP/1.0" 404 -',
            ]
        )
        result = run_pipeline(path)
        table = result.table
        assert table["cluster_k3"].notna().sum() == 3
        assert pd.isna(table.loc[3, "cluster_k3"])
        assert table["cluster_k6"].isna().all()
        assert result.summary["clusters"]["cluster_k6"] == []
        assert len(result.summary["clusters"]["cluster_k3"]) == 3

    def test_nothing_to_cluster(self, write_log):
        path = write_log(['h [01:00:00:00] "GET / HTTP/1.0" 404 -'])
        with pytest.raises(EmptyFeatureTableError):
            run_pipeline(path)


class TestArgs:
    def test_defaults(self):
        cfg = config_from_args(build_parser().parse_args(["access.log"]))
        assert cfg == PipelineConfig()

    def test_repeated_k(self):
        args = build_parser().parse_args(["access.log", "--k", "2", "--k", "4", "--seed", "9"])
        assert config_from_args(args).clustering == ClusterConfig(seed=9, ks=(2, 4))

    def test_join_flag(self):
        args = build_parser().parse_args(["access.log", "--join-resource-spaces"])
        assert config_from_args(args).join_resource_spaces is True


class TestMain:
    def test_writes_outputs(self, write_log, sample_lines, tmp_path, capsys):
        out_dir = tmp_path / "out"
        rc = main([str(write_log(sample_lines)), "--out", str(out_dir)])
        assert rc == 0
        assert "Parse Report" in capsys.readouterr().out

        records = pd.read_csv(out_dir / "records.csv")
        assert len(records) == len(sample_lines)
        assert {"cluster_k3", "cluster_k6"} <= set(records.columns)

        summary = json.loads((out_dir / "summary.json").read_text(encoding="utf-8"))
        assert summary["parse"]["parsed_records"] == len(sample_lines)

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.log")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_nothing_to_cluster(self, write_log):
        assert main([str(write_log(["junk"]))]) == 1
