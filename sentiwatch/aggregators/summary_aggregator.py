"""
sentiwatch/aggregators/summary_aggregator.py
Record-level aggregation.

Reduces a list of InteractionRecord into an AggregateSummary: band
counts, averages, CSAT stats, channel counts, and ranked per-agent and
per-keyword rollups.

NOTE ON EMPTY INPUT:
  Every mean is guarded. An empty record list yields zero counts,
  0.0 averages, no dates and empty rollups — never NaN.

NOTE ON ORDERING:
  Agent rollups sort by mean sentiment descending, keyword rollups by
  mention count descending. Both sorts are stable, so ties keep the
  order in which the agent or keyword was first seen.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from sentiwatch.models.bands import (
    SEVERITY_BANDS,
    classify_sentiment,
    classify_severity_band,
    csat_or_default,
    is_issue,
    is_negative,
    is_positive,
)
from sentiwatch.models.record import (
    AgentRollup,
    AggregateSummary,
    CsatStats,
    InteractionRecord,
    KeywordRollup,
)

logger = logging.getLogger(__name__)

LOW_CSAT_MAX  = 2
HIGH_CSAT_MIN = 4


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def _rate(part: int, total: int) -> float:
    """Percentage, 0.0 when total is zero."""
    return (part / total) * 100.0 if total > 0 else 0.0


# ── ROLLUPS ──────────────────────────────────────────────────

def per_agent_rollup(records: Sequence[InteractionRecord]) -> List[AgentRollup]:
    """
    One AgentRollup per agent: count, mean sentiment, positive rate (%)
    and negative rate (%). Sorted by mean sentiment descending; ties keep
    first-seen order.
    """
    totals:    Dict[str, int]   = {}
    sums:      Dict[str, float] = defaultdict(float)
    positives: Dict[str, int]   = defaultdict(int)
    negatives: Dict[str, int]   = defaultdict(int)

    for rec in records:
        totals[rec.agent] = totals.get(rec.agent, 0) + 1
        sums[rec.agent] += rec.sentiment
        if is_positive(rec.sentiment):
            positives[rec.agent] += 1
        if is_negative(rec.sentiment):
            negatives[rec.agent] += 1

    rollups = [
        AgentRollup(
            agent          = agent,
            count          = total,
            mean_sentiment = sums[agent] / total,
            positive_rate  = _rate(positives[agent], total),
            negative_rate  = _rate(negatives[agent], total),
        )
        for agent, total in totals.items()
    ]
    rollups.sort(key=lambda r: r.mean_sentiment, reverse=True)
    return rollups


def per_keyword_rollup(
    records:              Sequence[InteractionRecord],
    restrict_to_negative: bool = False,
) -> List[KeywordRollup]:
    """
    Explode each record's keywords and accumulate mentions and sentiment.

    restrict_to_negative: only records in the issue band (< -0.3)
                          contribute. Used for "top issues" surfacing.

    Sorted by mention count descending; ties keep first-seen order.
    """
    mentions: Dict[str, int]   = {}
    sums:     Dict[str, float] = defaultdict(float)

    for rec in records:
        if restrict_to_negative and not is_issue(rec.sentiment):
            continue
        for kw in rec.keywords:
            mentions[kw] = mentions.get(kw, 0) + 1
            sums[kw] += rec.sentiment

    rollups = [
        KeywordRollup(
            keyword        = kw,
            mentions       = count,
            sentiment_sum  = sums[kw],
            mean_sentiment = sums[kw] / count,
        )
        for kw, count in mentions.items()
    ]
    rollups.sort(key=lambda r: r.mentions, reverse=True)
    return rollups


# ── DISTRIBUTIONS ────────────────────────────────────────────

def band_distribution(records: Sequence[InteractionRecord]) -> Dict[str, int]:
    """Five-way band counts, every band present (zero if empty)."""
    dist = {band: 0 for band in SEVERITY_BANDS}
    for rec in records:
        dist[classify_severity_band(rec.sentiment)] += 1
    return dist


def channel_counts(records: Sequence[InteractionRecord]) -> Dict[str, int]:
    """Channel → record count, in first-seen order."""
    counts: Dict[str, int] = {}
    for rec in records:
        counts[rec.channel] = counts.get(rec.channel, 0) + 1
    return counts


def csat_stats(records: Sequence[InteractionRecord]) -> CsatStats:
    if not records:
        return CsatStats()
    scores = [csat_or_default(r) for r in records]
    return CsatStats(
        average    = _mean(scores),
        low_count  = sum(1 for s in scores if s <= LOW_CSAT_MAX),
        high_count = sum(1 for s in scores if s >= HIGH_CSAT_MIN),
    )


def _top_channel(counts: Dict[str, int]):
    if not counts:
        return None
    # max() returns the first maximal entry, so ties resolve to first seen
    return max(counts.items(), key=lambda item: item[1])[0]


# ── SUMMARY ──────────────────────────────────────────────────

def summarize(records: Sequence[InteractionRecord]) -> AggregateSummary:
    """
    Reduce a record list into an AggregateSummary.

    Returns the empty summary (zero counts, 0.0 averages) for an empty
    list rather than dividing by zero.
    """
    if not records:
        return AggregateSummary(band_distribution=band_distribution([]))

    bands = [classify_sentiment(r.sentiment) for r in records]
    mean  = _mean(r.sentiment for r in records)
    chans = channel_counts(records)

    summary = AggregateSummary(
        total              = len(records),
        mean_sentiment     = mean,
        mean_band          = classify_sentiment(mean),
        positive           = bands.count('positive'),
        neutral            = bands.count('neutral'),
        negative           = bands.count('negative'),
        average_confidence = _mean(r.confidence for r in records),
        band_distribution  = band_distribution(records),
        csat               = csat_stats(records),
        channel_counts     = chans,
        top_channel        = _top_channel(chans),
        earliest           = min(r.timestamp for r in records),
        latest             = max(r.timestamp for r in records),
        agents             = per_agent_rollup(records),
        keywords           = per_keyword_rollup(records),
        issues             = per_keyword_rollup(records, restrict_to_negative=True),
    )
    logger.debug(
        f"Summary built: {summary.total} records | "
        f"+{summary.positive} ={summary.neutral} -{summary.negative}"
    )
    return summary
