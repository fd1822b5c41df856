"""
tests/test_alerts.py
Alert rules, windowing and the per-session alert state machine.
"""

from datetime import datetime, timedelta, timezone

import pytest

from sentiwatch.detectors.alert_detector import (
    SPIKE_ACTIONS,
    AlertContext,
    apply_window,
    check_spike,
    evaluate,
    negative_rate,
    spike_severity,
)
from sentiwatch.models.record import AlertWindow, InteractionRecord

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _rec(sentiment: float, n: int = 1, ts: datetime = NOW) -> InteractionRecord:
    return InteractionRecord(
        id=f"t-{n}", message="msg", sentiment=sentiment, channel="Chat",
        agent="Mike", customer=f"c{n}@example.com", category="General",
        confidence=0.9, timestamp=ts,
    )


def _batch(negatives: int, total: int, negative_value: float = -0.6):
    """total records, the first `negatives` below the issue threshold."""
    return [
        _rec(negative_value if i < negatives else 0.5, n=i)
        for i in range(total)
    ]


# ── RULES ────────────────────────────────────────────────────

class TestSpikeRule:
    def test_critical_above_forty_percent(self):
        ctx = AlertContext()
        raised = evaluate(_batch(9, 20), ctx, now=NOW)       # 45%
        spikes = [a for a in raised if a.kind == "spike"]
        assert len(spikes) == 1
        assert spikes[0].severity == "critical"
        assert spikes[0].suggested_actions == SPIKE_ACTIONS
        assert "45.0%" in spikes[0].details

    def test_high_above_twenty_percent(self):
        ctx = AlertContext()
        evaluate(_batch(5, 20), ctx, now=NOW)                # 25%
        assert ctx.active("spike").severity == "high"

    def test_nothing_at_fifteen_percent(self):
        ctx = AlertContext()
        assert evaluate(_batch(3, 20), ctx, now=NOW) == []   # 15%
        assert ctx.active_alerts == []

    def test_exact_thresholds_do_not_escalate(self):
        assert spike_severity(0.40) == "high"
        assert spike_severity(0.20) is None
        assert spike_severity(0.41) == "critical"

    def test_minus_point_three_is_not_negative_for_rate(self):
        assert negative_rate([_rec(-0.3), _rec(-0.31)]) == pytest.approx(0.5)

    def test_empty_records_raise_nothing(self):
        ctx = AlertContext()
        assert check_spike([], ctx) is None
        assert evaluate([], ctx, now=NOW) == []


class TestMeanWarning:
    def test_warning_when_mean_below_issue_band(self):
        ctx = AlertContext()
        raised = evaluate([_rec(-0.6, n=i) for i in range(4)], ctx, now=NOW)
        assert {a.kind for a in raised} == {"spike", "warning"}
        warning = ctx.active("warning")
        assert warning.severity == "high"
        assert warning.message == "High negative sentiment detected"
        assert warning.suggested_actions == ()

    def test_no_warning_for_mild_mean(self):
        ctx = AlertContext()
        evaluate(_batch(5, 20), ctx, now=NOW)
        assert ctx.active("warning") is None


# ── STATE MACHINE ────────────────────────────────────────────

class TestAlertContext:
    def test_active_alert_suppresses_duplicates(self):
        ctx = AlertContext()
        evaluate(_batch(9, 20), ctx, now=NOW)
        first = ctx.active("spike")
        assert evaluate(_batch(15, 20), ctx, now=NOW) == []
        assert ctx.active("spike") is first
        assert len([a for a in ctx.active_alerts if a.kind == "spike"]) == 1

    def test_acknowledge_moves_copy_to_history(self):
        ctx = AlertContext()
        evaluate(_batch(9, 20), ctx, now=NOW)
        original = ctx.active("spike")
        acked = ctx.acknowledge("spike")
        assert acked.acknowledged is True
        assert acked.id == original.id
        assert original.acknowledged is False
        assert ctx.history == (acked,)
        assert ctx.is_idle("spike")

    def test_dismiss_discards(self):
        ctx = AlertContext()
        evaluate(_batch(9, 20), ctx, now=NOW)
        assert ctx.dismiss("spike") is not None
        assert ctx.history == ()
        assert ctx.is_idle("spike")

    def test_idle_acknowledge_and_dismiss_return_none(self):
        ctx = AlertContext()
        assert ctx.acknowledge("spike") is None
        assert ctx.dismiss("warning") is None

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            AlertContext().acknowledge("surge")

    def test_new_alert_after_acknowledge(self):
        ctx = AlertContext()
        evaluate(_batch(9, 20), ctx, now=NOW)
        ctx.acknowledge("spike")
        raised = evaluate(_batch(9, 20), ctx, now=NOW)
        assert [a.kind for a in raised] == ["spike"]
        assert raised[0].id != ctx.history[0].id

    def test_history_is_append_only_in_order(self):
        ctx = AlertContext()
        ids = []
        for _ in range(3):
            evaluate(_batch(9, 20), ctx, now=NOW)
            ids.append(ctx.acknowledge("spike").id)
        assert [a.id for a in ctx.history] == ids


# ── WINDOWING ────────────────────────────────────────────────

class TestAlertWindow:
    def _mixed(self):
        old = [_rec(-0.9, n=i, ts=NOW - timedelta(days=20)) for i in range(10)]
        new = [_rec(0.5, n=100 + i, ts=NOW - timedelta(hours=i)) for i in range(10)]
        return old + new

    def test_all_mode_sees_old_negatives(self):
        ctx = AlertContext()
        evaluate(self._mixed(), ctx, AlertWindow("all"), now=NOW)
        assert ctx.active("spike") is not None

    def test_days_mode_ignores_old_records(self):
        ctx = AlertContext()
        evaluate(self._mixed(), ctx, AlertWindow("days", 7), now=NOW)
        assert ctx.active("spike") is None

    def test_recent_mode_takes_newest(self):
        window = apply_window(self._mixed(), AlertWindow("recent", 5), now=NOW)
        assert len(window) == 5
        assert all(r.sentiment == 0.5 for r in window)

    def test_days_mode_accepts_naive_timestamps(self):
        naive_now = NOW.replace(tzinfo=None)
        records = [
            _rec(-0.9, n=1, ts=naive_now - timedelta(days=20)),
            _rec(0.5, n=2, ts=naive_now - timedelta(hours=1)),
        ]
        window = apply_window(records, AlertWindow("days", 7), now=NOW)
        assert [r.id for r in window] == ["t-2"]

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            apply_window([], AlertWindow("hours", 3), now=NOW)
        with pytest.raises(ValueError):
            apply_window([], AlertWindow("recent", 0), now=NOW)
