"""
sentiwatch/api.py
─────────────────────────────────────────────────────────────────────────────
Sentiment Watchdog — local HTTP API for the browser dashboard

TWO USAGE MODES:
  1. Importable (tests, notebooks, other Python code):
         from sentiwatch.session import DashboardSession
         session = DashboardSession()
         session.load_sample(seed=1)

  2. FastAPI HTTP server (dashboard front end via fetch()):
         python -m sentiwatch.api                  # default: port 8765
         python -m sentiwatch.api --port 9000
         uvicorn sentiwatch.api:app --port 8765

ENDPOINTS:
  GET  /health                       — status + record count
  POST /upload                       — CSV text → records (simulated processing delay)
  POST /sample                       — load generated demo records
  POST /reset                        — drop data and alert state
  GET  /summary                      — AggregateSummary
  GET  /agents                       — per-agent rollups with coaching tips
  GET  /keywords                     — keyword rollups (?issues=true for < -0.3 only)
  GET  /weekly                       — last-7-days digest
  GET  /records                      — filtered/sorted view (criteria as query params)
  GET  /options                      — channel / agent filter options
  GET  /alerts                       — active alerts + history
  POST /alerts/{kind}/acknowledge    — kind: spike / warning
  POST /alerts/{kind}/dismiss
  GET  /narrative                    — conversational summary text
  GET  /export.csv                   — CSV export of all records
  GET  /report                       — full JSON report with content hash

One process = one dashboard session. Binds to 127.0.0.1 by default.
No authentication (single local user assumed).
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from sentiwatch.aggregators.summary_aggregator import per_keyword_rollup
from sentiwatch.aggregators.weekly_aggregator import weekly_summary
from sentiwatch.config import load_config
from sentiwatch.exporters.csv_exporter import EXPORT_FILENAME
from sentiwatch.filters import FilterCriteria
from sentiwatch.parsers.csv_parser import UploadError
from sentiwatch.report import to_jsonable
from sentiwatch.report_export import export_to_dict
from sentiwatch.session import DashboardSession

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# ── REQUEST MODELS ──────────────────────────────────────────────────────────

class UploadRequest(BaseModel):
    csv_text:  str
    filename:  Optional[str]   = None    # checked for a .csv extension when given
    delay_sec: Optional[float] = None    # overrides processing_delay_sec


class SampleRequest(BaseModel):
    seed:  Optional[int] = None
    count: Optional[int] = None


def _build_app(session: Optional[DashboardSession] = None) -> FastAPI:
    """
    Build and return the FastAPI application instance around one session.
    Called once at module level or on demand (tests, custom config).
    """
    _session = session or DashboardSession(config=load_config(Path.cwd()))

    _app = FastAPI(
        title       = "Sentiment Watchdog API",
        description = "Customer-support sentiment dashboard — local API",
        version     = API_VERSION,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            "http://localhost:8765",
            "http://127.0.0.1",
            "http://127.0.0.1:8765",
            "null",   # file:// origin
        ],
        allow_methods     = ["GET", "POST", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    def _require_data() -> None:
        if not _session.has_data:
            detail = _session.last_error or "No data loaded — upload a CSV or load sample data first."
            raise HTTPException(status_code=409, detail=detail)

    def _alerts_payload() -> Dict[str, Any]:
        return {
            "active":  to_jsonable(_session.alerts.active_alerts),
            "history": to_jsonable(_session.alerts.history),
        }

    # ── ENDPOINTS ───────────────────────────────────────────────────────

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":       "ok",
            "session":      _session.status,
            "record_count": len(_session.records),
            "last_error":   _session.last_error,
            "version":      API_VERSION,
        }

    @_app.post("/upload", summary="Upload interaction CSV")
    async def upload(req: UploadRequest):
        """
        Parse CSV text and load it after the simulated processing delay.
        A newer upload while this one is pending wins; this one reports
        superseded=true and changes nothing.
        """
        try:
            committed = await _session.upload_csv(
                req.csv_text, delay=req.delay_sec, filename=req.filename,
            )
        except UploadError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return {
            "status":       _session.status,
            "superseded":   not committed,
            "record_count": len(_session.records),
            "alerts":       _alerts_payload(),
        }

    @_app.post("/sample", summary="Load generated demo records")
    def sample(req: SampleRequest):
        if req.count is not None and req.count < 1:
            raise HTTPException(status_code=400, detail="count must be positive")
        raised = _session.load_sample(seed=req.seed, count=req.count)
        return {
            "status":       _session.status,
            "record_count": len(_session.records),
            "raised":       to_jsonable(raised),
        }

    @_app.post("/reset", summary="Drop all session data")
    def reset():
        _session.reset()
        return {"status": _session.status}

    @_app.get("/summary", summary="Aggregate summary")
    def get_summary():
        _require_data()
        return to_jsonable(_session.summary)

    @_app.get("/agents", summary="Per-agent rollups with coaching tips")
    def get_agents():
        _require_data()
        report = _session.report()
        return {"count": len(report.coaching), "agents": to_jsonable(report.coaching)}

    @_app.get("/keywords", summary="Keyword rollups")
    def get_keywords(
        issues: bool = Query(False, description="Only count records with sentiment < -0.3"),
    ):
        _require_data()
        rollups = per_keyword_rollup(_session.records, restrict_to_negative=issues)
        return {"count": len(rollups), "keywords": to_jsonable(rollups)}

    @_app.get("/weekly", summary="Last 7 days digest")
    def get_weekly():
        _require_data()
        return to_jsonable(weekly_summary(_session.records, now=_session.clock()))

    @_app.get("/records", summary="Filtered and sorted records")
    def get_records(
        sentiment: str = Query("all", description="all, positive, neutral, negative, critical"),
        channel:   str = Query("all"),
        agent:     str = Query("all"),
        sort_by:   str = Query("timestamp", description="timestamp, sentiment_asc, sentiment_desc, confidence"),
        limit:     int = Query(50, ge=1, le=1000),
        search:    str = Query(""),
    ):
        try:
            criteria = FilterCriteria(
                sentiment=sentiment, channel=channel, agent=agent,
                sort_by=sort_by, limit=limit, search=search,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        data = _session.view(criteria)
        return {"count": len(data), "records": to_jsonable(data)}

    @_app.get("/options", summary="Filter options from loaded data")
    def get_options():
        return _session.options()

    @_app.get("/alerts", summary="Active alerts and history")
    def get_alerts():
        return _alerts_payload()

    @_app.post("/alerts/{kind}/acknowledge", summary="Acknowledge the active alert of a kind")
    def acknowledge(kind: str):
        try:
            alert = _session.acknowledge_alert(kind)
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        if alert is None:
            raise HTTPException(status_code=404, detail=f"No active {kind} alert")
        return to_jsonable(alert)

    @_app.post("/alerts/{kind}/dismiss", summary="Dismiss the active alert of a kind")
    def dismiss(kind: str):
        try:
            alert = _session.dismiss_alert(kind)
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        if alert is None:
            raise HTTPException(status_code=404, detail=f"No active {kind} alert")
        return {"status": "dismissed", "id": alert.id}

    @_app.get("/narrative", summary="Conversational summary")
    def get_narrative(seed: Optional[int] = Query(None)):
        _require_data()
        rng = random.Random(seed) if seed is not None else None
        return {"text": _session.build_narrative(rng)}

    @_app.get("/export.csv", summary="CSV export", response_class=PlainTextResponse)
    def export_records():
        _require_data()
        return PlainTextResponse(
            _session.export_csv(),
            media_type = "text/csv",
            headers    = {"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
        )

    @_app.get("/report", summary="Full dashboard report")
    def get_report():
        _require_data()
        return export_to_dict(_session.report())

    return _app


# Module-level app instance — used by uvicorn sentiwatch.api:app
app = _build_app()


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT — python -m sentiwatch.api
# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import argparse

    import uvicorn

    config = load_config(Path.cwd())

    parser = argparse.ArgumentParser(
        prog        = "sentiwatch.api",
        description = "Sentiment Watchdog API server — serves the dashboard on localhost",
    )
    parser.add_argument("--port", type=int, default=int(config["port"]),
                        help=f"Port to bind (default: {config['port']})")
    parser.add_argument("--host", type=str, default=str(config["host"]),
                        help="Host to bind — keep on localhost unless you know why")
    args = parser.parse_args()

    logging.basicConfig(
        level   = logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    uvicorn.run(
        _build_app(DashboardSession(config=config)),
        host      = args.host,
        port      = args.port,
        log_level = "info",
    )
