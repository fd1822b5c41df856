"""
sentiwatch/detectors/alert_detector.py
Threshold alerts over a record list.

TWO INDEPENDENT RULES (separate alert kinds, both may be active):
  spike    negative_rate = count(sentiment < -0.3) / total
           > 0.40 → critical, > 0.20 → high, else nothing.
           Evaluated on the windowed record list (see AlertWindow).
  warning  full-session mean sentiment < -0.3 → high.

STATE MACHINE (one AlertContext per dashboard session):
  Each alert kind has one slot.  Idle → Active on trigger,
  Active → Idle on acknowledge (copy appended to history) or
  dismiss (discarded).  A qualifying condition while the slot is
  Active is suppressed, so one data load cannot raise overlapping
  duplicates.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from sentiwatch.aggregators.weekly_aggregator import records_since
from sentiwatch.models.bands import ISSUE_THRESHOLD, is_issue
from sentiwatch.models.record import Alert, AlertWindow, InteractionRecord

logger = logging.getLogger(__name__)

KIND_SPIKE   = 'spike'
KIND_WARNING = 'warning'
ALERT_KINDS  = (KIND_SPIKE, KIND_WARNING)

SEVERITIES = ('low', 'medium', 'high', 'critical')

CRITICAL_RATE = 0.40
HIGH_RATE     = 0.20

WINDOW_MODES = ('all', 'days', 'recent')

SPIKE_ACTIONS: Tuple[str, ...] = (
    'Alert customer experience team',
    'Review recent tickets for common issues',
    'Consider proactive customer outreach',
    'Schedule team training on empathy',
)


# ── ALERT CONTEXT ────────────────────────────────────────────

class AlertContext:
    """
    Per-session alert state. Mutated only through trigger(),
    acknowledge() and dismiss().
    """

    def __init__(self):
        self._active:  Dict[str, Alert] = {}
        self._history: List[Alert]      = []
        self._ids = itertools.count(1)

    def next_id(self) -> str:
        return f"alert-{next(self._ids)}"

    @property
    def history(self) -> Tuple[Alert, ...]:
        return tuple(self._history)

    @property
    def active_alerts(self) -> List[Alert]:
        return [self._active[k] for k in ALERT_KINDS if k in self._active]

    def active(self, kind: str = KIND_SPIKE) -> Optional[Alert]:
        return self._active.get(kind)

    def is_idle(self, kind: str = KIND_SPIKE) -> bool:
        return kind not in self._active

    def trigger(self, alert: Alert) -> Optional[Alert]:
        """Activate alert. Returns None (suppressed) if its slot is busy."""
        _check_kind(alert.kind)
        if alert.kind in self._active:
            logger.debug(f"Alert suppressed: {alert.kind} already active")
            return None
        self._active[alert.kind] = alert
        logger.info(f"Alert raised: {alert.kind} / {alert.severity}")
        return alert

    def acknowledge(self, kind: str = KIND_SPIKE) -> Optional[Alert]:
        """Move the active alert of `kind` to history. None if idle."""
        _check_kind(kind)
        alert = self._active.pop(kind, None)
        if alert is None:
            return None
        acked = replace(alert, acknowledged=True)
        self._history.append(acked)
        logger.info(f"Alert acknowledged: {acked.id}")
        return acked

    def dismiss(self, kind: str = KIND_SPIKE) -> Optional[Alert]:
        """Discard the active alert of `kind` without recording it."""
        _check_kind(kind)
        alert = self._active.pop(kind, None)
        if alert is not None:
            logger.info(f"Alert dismissed: {alert.id}")
        return alert


def _check_kind(kind: str) -> None:
    if kind not in ALERT_KINDS:
        raise ValueError(f"Unknown alert kind: {kind!r}")


# ── WINDOWING ────────────────────────────────────────────────

def apply_window(
    records: Sequence[InteractionRecord],
    window:  AlertWindow,
    now:     Optional[datetime] = None,
) -> List[InteractionRecord]:
    """
    all    → every record
    days   → records within the last window.size days of now
    recent → the window.size newest records by timestamp
    """
    if window.mode not in WINDOW_MODES:
        raise ValueError(f"Unknown alert window mode: {window.mode!r}")
    if window.mode == 'all':
        return list(records)
    if window.size <= 0:
        raise ValueError(f"Alert window size must be positive, got {window.size}")
    if window.mode == 'days':
        return records_since(records, now or datetime.now(timezone.utc), window.size)
    newest = sorted(records, key=lambda r: r.timestamp, reverse=True)
    return newest[:window.size]


# ── RULES ────────────────────────────────────────────────────

def negative_rate(records: Sequence[InteractionRecord]) -> float:
    """Share of records in the issue band. 0.0 for an empty list."""
    if not records:
        return 0.0
    return sum(1 for r in records if is_issue(r.sentiment)) / len(records)


def spike_severity(rate: float) -> Optional[str]:
    if rate > CRITICAL_RATE:
        return 'critical'
    if rate > HIGH_RATE:
        return 'high'
    return None


def check_spike(
    records: Sequence[InteractionRecord],
    context: AlertContext,
    now:     Optional[datetime] = None,
) -> Optional[Alert]:
    """Build a spike alert if the negative rate crosses a threshold."""
    if not records:
        return None
    rate = negative_rate(records)
    severity = spike_severity(rate)
    if severity is None:
        return None
    return Alert(
        id                = context.next_id(),
        kind              = KIND_SPIKE,
        severity          = severity,
        message           = 'Negative sentiment spike detected',
        details           = f"{rate * 100:.1f}% of recent interactions show negative sentiment",
        timestamp         = now or datetime.now(timezone.utc),
        suggested_actions = SPIKE_ACTIONS,
    )


def check_mean_warning(
    mean_sentiment: float,
    total:          int,
    context:        AlertContext,
    now:            Optional[datetime] = None,
) -> Optional[Alert]:
    """Standing warning when the session mean drops into the issue band."""
    if total == 0 or not is_issue(mean_sentiment):
        return None
    return Alert(
        id        = context.next_id(),
        kind      = KIND_WARNING,
        severity  = 'high',
        message   = 'High negative sentiment detected',
        details   = (
            f"Average sentiment {mean_sentiment:.2f} is below {ISSUE_THRESHOLD:.2f} "
            f"across {total} interactions"
        ),
        timestamp = now or datetime.now(timezone.utc),
    )


def evaluate(
    records: Sequence[InteractionRecord],
    context: AlertContext,
    window:  AlertWindow = AlertWindow(),
    now:     Optional[datetime] = None,
) -> List[Alert]:
    """
    Run both rules and trigger any qualifying alert on the context.
    Only checks a kind whose slot is idle. Returns the alerts that
    became active during this call.
    """
    now = now or datetime.now(timezone.utc)
    raised: List[Alert] = []

    if context.is_idle(KIND_SPIKE):
        spike = check_spike(apply_window(records, window, now), context, now)
        if spike is not None and context.trigger(spike):
            raised.append(spike)

    if context.is_idle(KIND_WARNING) and records:
        mean = sum(r.sentiment for r in records) / len(records)
        warning = check_mean_warning(mean, len(records), context, now)
        if warning is not None and context.trigger(warning):
            raised.append(warning)

    return raised
