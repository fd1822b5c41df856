"""
sentiwatch/aggregators/weekly_aggregator.py
Weekly digest: the last N days of records, bucketed per calendar day.

Days are UTC calendar dates. Daily stats run oldest first and always
contain one entry per day, including days with no records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from sentiwatch.models.bands import is_concern, is_issue
from sentiwatch.models.record import InteractionRecord

TOP_ISSUE_COUNT       = 3
HIGH_ISSUE_VOLUME     = 5       # more than this many issue records → insight
POSITIVE_WEEK_MEAN    = 0.2
DOMINANT_CHANNEL      = 'Chat'
DOMINANT_CHANNEL_SHARE = 0.6


@dataclass
class DailyStat:
    day:            str         # YYYY-MM-DD
    weekday:        str         # Mon / Tue / ...
    count:          int   = 0
    mean_sentiment: float = 0.0


@dataclass
class WeeklySummary:
    window_days:    int
    count:          int                     = 0
    mean_sentiment: float                   = 0.0
    issue_count:    int                     = 0
    daily:          List[DailyStat]         = field(default_factory=list)
    top_issues:     List[Tuple[str, int]]   = field(default_factory=list)
    insights:       List[str]               = field(default_factory=list)


def _utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def records_since(
    records: Sequence[InteractionRecord],
    now:     datetime,
    days:    int,
) -> List[InteractionRecord]:
    """Records whose timestamp falls within the last `days` days of `now`."""
    cutoff = _utc(now) - timedelta(days=days)
    return [r for r in records if _utc(r.timestamp) >= cutoff]


def top_issue_keywords(
    records: Sequence[InteractionRecord],
    top:     int = TOP_ISSUE_COUNT,
) -> List[Tuple[str, int]]:
    """
    Keywords ranked by how many concern-band (< -0.2) records mention them.
    Keywords with no concern-band mention are dropped.
    """
    counts: dict = {}
    for rec in records:
        if not is_concern(rec.sentiment):
            continue
        for kw in rec.keywords:
            counts[kw] = counts.get(kw, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:top]


def weekly_summary(
    records: Sequence[InteractionRecord],
    now:     Optional[datetime] = None,
    days:    int = 7,
) -> WeeklySummary:
    now  = _utc(now or datetime.now(timezone.utc))
    week = records_since(records, now, days)

    count = len(week)
    mean  = sum(r.sentiment for r in week) / count if count else 0.0
    issue_count = sum(1 for r in week if is_issue(r.sentiment))

    daily: List[DailyStat] = []
    for offset in range(days - 1, -1, -1):
        date     = (now - timedelta(days=offset)).date()
        day_recs = [r for r in week if _utc(r.timestamp).date() == date]
        day_mean = (
            sum(r.sentiment for r in day_recs) / len(day_recs) if day_recs else 0.0
        )
        daily.append(DailyStat(
            day            = date.isoformat(),
            weekday        = date.strftime('%a'),
            count          = len(day_recs),
            mean_sentiment = day_mean,
        ))

    insights: List[str] = []
    if issue_count > HIGH_ISSUE_VOLUME:
        insights.append('High volume of negative sentiment detected this week')
    if mean > POSITIVE_WEEK_MEAN:
        insights.append('Overall positive sentiment trend this week')
    chat = sum(1 for r in week if r.channel == DOMINANT_CHANNEL)
    if count and chat > count * DOMINANT_CHANNEL_SHARE:
        insights.append('Live chat is the primary support channel')

    return WeeklySummary(
        window_days    = days,
        count          = count,
        mean_sentiment = mean,
        issue_count    = issue_count,
        daily          = daily,
        top_issues     = top_issue_keywords(records),
        insights       = insights,
    )
