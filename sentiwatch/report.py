"""
sentiwatch/report.py
Structured dashboard report: everything the UI renders for one record
list, in one object.

Input: record list, AlertContext, optional FilterCriteria.
Output: DashboardReport, plus report_to_dict() for JSON export and the API.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sentiwatch.aggregators.summary_aggregator import summarize
from sentiwatch.aggregators.weekly_aggregator import WeeklySummary, weekly_summary
from sentiwatch.detectors.alert_detector import AlertContext
from sentiwatch.exporters.csv_exporter import format_timestamp
from sentiwatch.filters import FilterCriteria, filter_and_sort
from sentiwatch.models.record import AggregateSummary, Alert, InteractionRecord
from sentiwatch.narrative import coaching_tip


@dataclass
class AgentCoaching:
    agent:          str
    count:          int
    mean_sentiment: float
    positive_rate:  float
    negative_rate:  float
    tip:            str


@dataclass
class DashboardReport:
    summary:       AggregateSummary
    weekly:        WeeklySummary
    coaching:      List[AgentCoaching]
    active_alerts: List[Alert]
    alert_history: List[Alert]
    criteria:      FilterCriteria
    view:          List[InteractionRecord] = field(default_factory=list)
    generated_at:  str = ''


def build_report(
    records:  Sequence[InteractionRecord],
    alerts:   Optional[AlertContext] = None,
    criteria: Optional[FilterCriteria] = None,
    now:      Optional[datetime] = None,
) -> DashboardReport:
    """
    Aggregate, coach and filter one record list. Does not evaluate alerts;
    it reports the context's current state as-is.
    """
    now      = now or datetime.now(timezone.utc)
    criteria = criteria or FilterCriteria()
    alerts   = alerts or AlertContext()
    summary  = summarize(records)

    coaching = [
        AgentCoaching(
            agent          = a.agent,
            count          = a.count,
            mean_sentiment = a.mean_sentiment,
            positive_rate  = a.positive_rate,
            negative_rate  = a.negative_rate,
            tip            = coaching_tip(a),
        )
        for a in summary.agents
    ]

    return DashboardReport(
        summary       = summary,
        weekly        = weekly_summary(records, now=now),
        coaching      = coaching,
        active_alerts = alerts.active_alerts,
        alert_history = list(alerts.history),
        criteria      = criteria,
        view          = filter_and_sort(records, criteria),
        generated_at  = now.strftime("%Y-%m-%dT%H:%M:%SZ"),
    )


def to_jsonable(obj: Any) -> Any:
    """Dataclasses, tuples and datetimes → plain JSON-serializable values."""
    if hasattr(obj, "__dataclass_fields__"):
        return {k: to_jsonable(getattr(obj, k)) for k in obj.__dataclass_fields__}
    if isinstance(obj, datetime):
        return format_timestamp(obj)
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(x) for x in obj]
    return obj


def report_to_dict(report: DashboardReport) -> Dict:
    """Convert DashboardReport to a JSON-serializable dict."""
    return to_jsonable(report)
