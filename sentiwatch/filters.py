"""
sentiwatch/filters.py
Derives a display subset of records from FilterCriteria.

Stages run in a fixed order — search, sentiment band, channel, agent,
stable sort, limit — and never mutate the input list. Same records and
criteria always give the same output sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from sentiwatch.models.bands import CRITICAL, NEGATIVE, NEUTRAL, POSITIVE, matches_band
from sentiwatch.models.record import InteractionRecord

ALL = 'all'

SENTIMENT_OPTIONS = (ALL, POSITIVE, NEUTRAL, NEGATIVE, CRITICAL)
SORT_OPTIONS      = ('timestamp', 'sentiment_asc', 'sentiment_desc', 'confidence')
LIMIT_OPTIONS     = (10, 25, 50, 100)

DEFAULT_LIMIT = 50

DISTINCT_FIELDS = ('channel', 'agent', 'customer', 'category')


@dataclass(frozen=True)
class FilterCriteria:
    sentiment: str = ALL
    channel:   str = ALL
    agent:     str = ALL
    sort_by:   str = 'timestamp'
    limit:     int = DEFAULT_LIMIT
    search:    str = ''

    def __post_init__(self):
        if self.sentiment not in SENTIMENT_OPTIONS:
            raise ValueError(f"Unknown sentiment filter: {self.sentiment!r}")
        if self.sort_by not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort key: {self.sort_by!r}")
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
            raise ValueError(f"limit must be a positive integer, got {self.limit!r}")


def _matches_search(rec: InteractionRecord, term: str) -> bool:
    return term in rec.message.lower() or term in rec.customer.lower()


def _sorted(records: List[InteractionRecord], sort_by: str) -> List[InteractionRecord]:
    # sorted() is stable with reverse=True as well, so ties keep prior order
    if sort_by == 'sentiment_asc':
        return sorted(records, key=lambda r: r.sentiment)
    if sort_by == 'sentiment_desc':
        return sorted(records, key=lambda r: r.sentiment, reverse=True)
    if sort_by == 'confidence':
        return sorted(records, key=lambda r: r.confidence, reverse=True)
    return sorted(records, key=lambda r: r.timestamp, reverse=True)


def filter_and_sort(
    records:  Sequence[InteractionRecord],
    criteria: FilterCriteria = FilterCriteria(),
) -> List[InteractionRecord]:
    result = list(records)

    term = criteria.search.strip().lower()
    if term:
        result = [r for r in result if _matches_search(r, term)]

    if criteria.sentiment != ALL:
        result = [r for r in result if matches_band(r.sentiment, criteria.sentiment)]

    if criteria.channel != ALL:
        result = [r for r in result if r.channel == criteria.channel]

    if criteria.agent != ALL:
        result = [r for r in result if r.agent == criteria.agent]

    result = _sorted(result, criteria.sort_by)
    return result[:criteria.limit]


def distinct_values(records: Sequence[InteractionRecord], field: str) -> List[str]:
    """Distinct values of a categorical field, in first-seen order."""
    if field not in DISTINCT_FIELDS:
        raise ValueError(f"Not a categorical field: {field!r}")
    return list(dict.fromkeys(getattr(r, field) for r in records))
