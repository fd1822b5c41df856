"""
sentiwatch/session.py
One dashboard session: the current record list plus everything derived
from it, and the session's alert state.

USAGE:
    session = DashboardSession()
    session.load_sample(seed=7)               # or load_csv_file(path)
    session.summary.mean_sentiment
    session.view(FilterCriteria(sentiment='negative', limit=10))
    session.acknowledge_alert('spike')

    # async, with simulated processing delay (newest upload wins)
    await session.upload_csv(text)

STATUS:
  empty       no data loaded yet (or after reset)
  processing  an upload is waiting out its simulated delay
  ready       records loaded, aggregates current
  error       last upload failed to parse; see last_error.
              Previously loaded records are kept.

The session owns its record tuple. Core functions are handed that tuple
and return new values, so nothing else holds state between calls.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from sentiwatch.aggregators.summary_aggregator import summarize
from sentiwatch.config import DEFAULT_CONFIG, alert_window_from_config
from sentiwatch.detectors.alert_detector import AlertContext, evaluate
from sentiwatch.exporters.csv_exporter import export_csv
from sentiwatch.filters import FilterCriteria, distinct_values, filter_and_sort
from sentiwatch.mock_data import generate_mock_records
from sentiwatch.models.record import AggregateSummary, Alert, InteractionRecord
from sentiwatch.narrative import build_narrative
from sentiwatch.parsers.csv_parser import (
    ALLOWED_SUFFIXES,
    UploadError,
    parse_csv_bytes,
    parse_csv_file,
    parse_csv_text,
)
from sentiwatch.report import DashboardReport, build_report
from sentiwatch.scheduler import LatestWinsScheduler, reveal_text

logger = logging.getLogger(__name__)

STATUS_EMPTY      = 'empty'
STATUS_PROCESSING = 'processing'
STATUS_READY      = 'ready'
STATUS_ERROR      = 'error'


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DashboardSession:

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        clock:  Callable[[], datetime] = _utcnow,
    ):
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self.clock  = clock
        self.window = alert_window_from_config(self.config)

        self.records:    Tuple[InteractionRecord, ...] = ()
        self.summary:    AggregateSummary = summarize(())
        self.alerts      = AlertContext()
        self.status      = STATUS_EMPTY
        self.last_error: Optional[str] = None
        self.narrative   = ''

        self._processing = LatestWinsScheduler(
            delay=float(self.config['processing_delay_sec'])
        )
        self._reveal = LatestWinsScheduler()

    # ── INTERNAL ──────────────────────────────────────────────────────────

    def _commit(self, records: Sequence[InteractionRecord]) -> List[Alert]:
        self.records    = tuple(records)
        self.summary    = summarize(self.records)
        self.status     = STATUS_READY
        self.last_error = None
        raised = evaluate(self.records, self.alerts, self.window, now=self.clock())
        logger.info(
            f"Session loaded {self.summary.total} records | "
            f"{len(raised)} new alert(s)"
        )
        return raised

    def _fail(self, exc: UploadError) -> None:
        # a rejected upload still supersedes any upload waiting out its delay
        self._processing.begin()
        self.status     = STATUS_ERROR
        self.last_error = str(exc)
        logger.warning(f"Upload rejected: {exc}")

    @property
    def has_data(self) -> bool:
        return bool(self.records)

    # ── LOADING (immediate) ───────────────────────────────────────────────

    def load_records(self, records: Sequence[InteractionRecord]) -> List[Alert]:
        """Replace the record list now. Supersedes any pending upload."""
        self._processing.begin()
        return self._commit(records)

    def load_sample(self, seed: Optional[int] = None, count: Optional[int] = None) -> List[Alert]:
        if count is None:
            count = int(self.config['mock_record_count'])
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")
        return self.load_records(
            generate_mock_records(count=count, seed=seed, now=self.clock())
        )

    def load_csv_text(self, text: str) -> List[Alert]:
        try:
            records = parse_csv_text(text)
        except UploadError as exc:
            self._fail(exc)
            raise
        return self.load_records(records)

    def load_csv_file(self, path: Path) -> List[Alert]:
        try:
            records = parse_csv_file(path)
        except UploadError as exc:
            self._fail(exc)
            raise
        return self.load_records(records)

    # ── LOADING (simulated processing delay) ──────────────────────────────

    async def upload_records(
        self,
        records: Sequence[InteractionRecord],
        delay:   Optional[float] = None,
    ) -> bool:
        """
        Commit records after the processing delay. Returns False if a newer
        upload, load or reset superseded this one before it committed.
        """
        self.status = STATUS_PROCESSING
        snapshot = tuple(records)
        self._processing.submit(lambda: snapshot, self._commit, delay=delay)
        return bool(await self._processing.wait())

    async def upload_csv(
        self,
        data:     Union[str, bytes],
        delay:    Optional[float] = None,
        filename: Optional[str] = None,
    ) -> bool:
        try:
            if filename is not None and Path(filename).suffix.lower() not in ALLOWED_SUFFIXES:
                raise UploadError(f"unsupported file type for {filename}: expected .csv")
            if isinstance(data, bytes):
                records = parse_csv_bytes(data)
            else:
                records = parse_csv_text(data)
        except UploadError as exc:
            self._fail(exc)
            raise
        return await self.upload_records(records, delay=delay)

    # ── VIEWS ─────────────────────────────────────────────────────────────

    def view(self, criteria: Optional[FilterCriteria] = None) -> List[InteractionRecord]:
        return filter_and_sort(self.records, criteria or FilterCriteria(
            limit=int(self.config['default_limit'])
        ))

    def options(self) -> Dict[str, List[str]]:
        """Filter dropdown options, derived from the loaded data."""
        return {
            'channel': distinct_values(self.records, 'channel'),
            'agent':   distinct_values(self.records, 'agent'),
        }

    def report(self, criteria: Optional[FilterCriteria] = None) -> DashboardReport:
        return build_report(self.records, self.alerts, criteria, now=self.clock())

    def export_csv(self) -> str:
        return export_csv(self.records)

    # ── ALERTS ────────────────────────────────────────────────────────────

    def acknowledge_alert(self, kind: str = 'spike') -> Optional[Alert]:
        return self.alerts.acknowledge(kind)

    def dismiss_alert(self, kind: str = 'spike') -> Optional[Alert]:
        return self.alerts.dismiss(kind)

    def reevaluate_alerts(self) -> List[Alert]:
        """Re-run alert rules on current data, e.g. after acknowledging."""
        return evaluate(self.records, self.alerts, self.window, now=self.clock())

    # ── NARRATIVE ─────────────────────────────────────────────────────────

    def build_narrative(self, rng: Optional[random.Random] = None) -> str:
        return build_narrative(self.records, now=self.clock(), rng=rng)

    async def reveal_narrative(
        self,
        rng:        Optional[random.Random] = None,
        on_update:  Optional[Callable[[str], None]] = None,
        char_delay: Optional[float] = None,
    ) -> bool:
        """
        Type out a fresh narrative into self.narrative. A later call
        stops an earlier one mid-reveal.
        """
        text = self.build_narrative(rng)

        def update(prefix: str) -> None:
            self.narrative = prefix
            if on_update is not None:
                on_update(prefix)

        delay = self.config['reveal_char_delay_sec'] if char_delay is None else char_delay
        return await reveal_text(text, update, self._reveal, char_delay=float(delay))

    # ── RESET ─────────────────────────────────────────────────────────────

    def reset(self) -> None:
        """Drop all data and alert state; cancels pending uploads and reveals."""
        self._processing.begin()
        self._reveal.begin()
        self.records    = ()
        self.summary    = summarize(())
        self.alerts     = AlertContext()
        self.status     = STATUS_EMPTY
        self.last_error = None
        self.narrative  = ''
        logger.info("Session reset")
