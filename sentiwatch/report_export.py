"""
sentiwatch/report_export.py
JSON export of a DashboardReport.

Every export includes: format version, report metadata (generated_at,
record count, filter criteria) and a SHA-256 hash of the canonical
payload, so a saved snapshot can be checked for later edits.
"""

import hashlib
import json
from typing import Any, Dict, Optional

from sentiwatch.report import DashboardReport, report_to_dict, to_jsonable


EXPORT_FORMAT_VERSION = "1.0"


def _build_export_payload(
    report: DashboardReport,
    extra_metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build export payload (no hash yet)."""
    report_metadata = {
        "generated_at": report.generated_at,
        "record_count": report.summary.total,
        "criteria": to_jsonable(report.criteria),
        "extra": dict(extra_metadata) if extra_metadata else {},
    }
    return {
        "export_format_version": EXPORT_FORMAT_VERSION,
        "report_metadata": report_metadata,
        "report": report_to_dict(report),
    }


def content_hash(payload: Dict[str, Any]) -> str:
    """SHA-256 of canonical JSON serialization of payload (no hash field)."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def export_to_dict(
    report: DashboardReport,
    extra_metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    payload = _build_export_payload(report, extra_metadata)
    return {**payload, "content_hash_sha256": content_hash(payload)}


def export_to_json(
    report: DashboardReport,
    extra_metadata: Optional[Dict[str, Any]] = None,
    indent: Optional[int] = 2,
) -> str:
    return json.dumps(export_to_dict(report, extra_metadata), indent=indent)


def verify_export(exported: Dict[str, Any]) -> bool:
    """True if the stored hash matches the rest of the export. Fails closed."""
    stored = exported.get("content_hash_sha256")
    if not stored or not isinstance(stored, str):
        return False
    payload = {k: v for k, v in exported.items() if k != "content_hash_sha256"}
    return content_hash(payload) == stored
