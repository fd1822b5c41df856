"""
tests/test_report_export.py
Dashboard report building and the hashed JSON export format.
"""

import json
from datetime import datetime, timezone

from sentiwatch.detectors.alert_detector import AlertContext, evaluate
from sentiwatch.filters import FilterCriteria
from sentiwatch.mock_data import generate_mock_records
from sentiwatch.report import build_report, report_to_dict
from sentiwatch.report_export import (
    EXPORT_FORMAT_VERSION,
    content_hash,
    export_to_dict,
    export_to_json,
    verify_export,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _report(criteria=None):
    records = generate_mock_records(count=30, seed=8, now=NOW)
    ctx = AlertContext()
    evaluate(records, ctx, now=NOW)
    return build_report(records, ctx, criteria, now=NOW)


class TestBuildReport:
    def test_contains_summary_and_coaching(self):
        report = _report()
        assert report.summary.total == 30
        assert len(report.coaching) == len(report.summary.agents)
        assert all(c.tip for c in report.coaching)
        assert report.generated_at == "2026-03-10T12:00:00Z"

    def test_view_follows_criteria(self):
        report = _report(FilterCriteria(sentiment="positive", limit=5))
        assert len(report.view) <= 5
        assert all(r.sentiment > 0.1 for r in report.view)

    def test_to_dict_serializable(self):
        d = report_to_dict(_report())
        text = json.dumps(d)
        assert '"summary"' in text
        assert isinstance(d["view"][0]["timestamp"], str)
        assert isinstance(d["view"][0]["keywords"], list)

    def test_empty_report(self):
        report = build_report([], now=NOW)
        assert report.summary.total == 0
        assert report.coaching == []
        assert report.view == []
        assert report.active_alerts == []


class TestReportExport:
    def test_export_includes_format_version(self):
        d = export_to_dict(_report())
        assert d["export_format_version"] == EXPORT_FORMAT_VERSION

    def test_export_includes_metadata(self):
        d = export_to_dict(_report(), extra_metadata={"source": "demo"})
        meta = d["report_metadata"]
        assert meta["generated_at"] == "2026-03-10T12:00:00Z"
        assert meta["record_count"] == 30
        assert meta["criteria"]["sort_by"] == "timestamp"
        assert meta["extra"] == {"source": "demo"}

    def test_hash_matches_payload(self):
        d = export_to_dict(_report())
        payload = {k: v for k, v in d.items() if k != "content_hash_sha256"}
        assert d["content_hash_sha256"] == content_hash(payload)
        assert len(d["content_hash_sha256"]) == 64

    def test_json_round_trip_verifies(self):
        exported = json.loads(export_to_json(_report()))
        assert verify_export(exported)

    def test_tampering_detected(self):
        exported = json.loads(export_to_json(_report()))
        exported["report"]["summary"]["total"] = 999
        assert not verify_export(exported)

    def test_missing_hash_fails_closed(self):
        exported = export_to_dict(_report())
        del exported["content_hash_sha256"]
        assert not verify_export(exported)
