"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest

from repinsight import cli


@pytest.fixture
def reviews_file(tmp_path):
    data = {
        "POSITIVE": [
            {"id": "p1", "createdAt": "2024-01-04T00:00:00Z", "comment": "Shipped the integration ahead of schedule"},
            {"id": "p2", "createdAt": "2024-02-04T00:00:00Z", "comment": "Honest trader, paid back the loan quickly"},
        ],
        "NEGATIVE": [
            {"id": "n1", "createdAt": "2024-02-20T00:00:00Z", "comment": "Slow to answer support tickets"},
        ],
        "NEUTRAL": [],
    }
    path = tmp_path / "reviews.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def no_openai_key(monkeypatch):
    from repinsight.core.config import settings

    monkeypatch.setattr(settings, "openai_api_key", "")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")


def test_aggregate_to_stdout(reviews_file, capsys):
    cli.main(["aggregate", "--in", str(reviews_file), "--userkey", "address:0x1", "--score", "1200"])

    data = json.loads(capsys.readouterr().out)
    assert data["userkey"] == "address:0x1"
    assert data["counts"] == {"positive": 2, "negative": 1, "neutral": 0, "total": 3}
    assert data["timeline"][-1]["score"] == 1200


def test_aggregate_to_file(reviews_file, tmp_path, capsys):
    out = tmp_path / "agg.json"

    cli.main(["aggregate", "--in", str(reviews_file), "--out", str(out)])

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["counts"]["total"] == 3
    assert "export_timestamp" in data["metadata"]
    assert "Reviews: 3 (2 positive, 1 negative, 0 neutral)" in capsys.readouterr().out


def test_summarize_with_fallback(reviews_file, no_openai_key, capsys):
    cli.main(["summarize", "--in", str(reviews_file), "--name", "alice"])

    data = json.loads(capsys.readouterr().out)
    assert data["summary"].startswith("Based on 3 reviews")
    assert data["stats"]["pctPositive"] == 66.7


def test_report_uses_service(tmp_path, capsys):
    with patch("repinsight.cli.ReportService") as mock_service, patch("repinsight.cli.SummaryCache"):
        report = mock_service.return_value.build_report.return_value
        report.to_dict.return_value = {"userkey": "address:0x1", "summary": "All good."}
        report.summary.summary = "All good."
        report.spike_insights = []

        cli.main(["report", "address:0x1", "--refresh"])

    mock_service.return_value.build_report.assert_called_once_with("address:0x1", force_refresh=True)
    assert "All good." in capsys.readouterr().out


def test_export_pretty(tmp_path, capsys):
    path = tmp_path / "result.json"
    path.write_text(json.dumps({"a": 1}), encoding="utf-8")

    cli.main(["export", "--in", str(path), "--pretty"])

    assert json.loads(capsys.readouterr().out) == {"a": 1}


def test_export_default_output_name(tmp_path):
    path = tmp_path / "result.json"
    path.write_text(json.dumps({"a": 1}), encoding="utf-8")

    cli.main(["export", "--in", str(path)])

    assert json.loads((tmp_path / "result_export.json").read_text(encoding="utf-8")) == {"a": 1}


def test_missing_input_exits_with_error(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["aggregate", "--in", str(tmp_path / "missing.json")])
    assert exc_info.value.code == 1


def test_malformed_input_exits_with_error(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([{"id": "a", "score": "POSITIVE", "createdAt": "last week"}]), encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["aggregate", "--in", str(path)])
    assert exc_info.value.code == 1


def test_no_command_prints_help(capsys):
    cli.main([])
    assert "usage" in capsys.readouterr().out.lower()
