"""
sentiwatch/narrative.py
Canned narrative copy for the dashboard: the conversational summary and
per-agent coaching tips.

This is presentational text chosen by fixed rules and a random pick,
not inference. Pass an explicit random.Random for reproducible output.
"""

import random
from datetime import datetime, timezone
from typing import Optional, Sequence

from sentiwatch.aggregators.summary_aggregator import channel_counts
from sentiwatch.models.bands import is_concern, is_negative, is_positive
from sentiwatch.models.record import AgentRollup, InteractionRecord

HIGH_FRUSTRATION_SHARE = 0.3
ESCALATION_COUNT       = 5

COACHING_NEGATIVE_RATE = 30.0
COACHING_POSITIVE_RATE = 40.0

NO_DATA_SUMMARY = 'No support interactions to summarize yet.'


def coaching_tip(rollup: AgentRollup) -> str:
    if rollup.negative_rate > COACHING_NEGATIVE_RATE:
        return 'Focus on empathy and active listening'
    if rollup.positive_rate < COACHING_POSITIVE_RATE:
        return 'Try to create more positive interactions'
    return 'Maintain current performance level'


def greeting(now: datetime) -> str:
    if now.hour < 12:
        return 'Good morning'
    if now.hour < 18:
        return 'Good afternoon'
    return 'Good evening'


def _trend(mean: float) -> str:
    if mean > 0:
        return 'positive'
    if is_concern(mean):
        return 'concerning'
    return 'neutral'


def narrative_templates(
    records: Sequence[InteractionRecord],
    now:     datetime,
) -> list:
    """All candidate summaries for this record list. Empty list → []."""
    if not records:
        return []

    total    = len(records)
    negative = sum(1 for r in records if is_negative(r.sentiment))
    positive = sum(1 for r in records if is_positive(r.sentiment))
    mean     = sum(r.sentiment for r in records) / total

    counts = channel_counts(records)
    top_channel = max(counts.items(), key=lambda item: item[1])

    overview = (
        f"{greeting(now)}! I've analyzed {total} support interactions today. "
        f"Here's what I found: {negative} customers expressed frustration, "
        f"while {positive} were satisfied. "
        f"The overall sentiment trend is {_trend(mean)}."
    )

    if negative > total * HIGH_FRUSTRATION_SHARE:
        mood = f"High frustration detected - {negative} angry customers need attention."
    else:
        mood = 'Customer satisfaction levels are stable.'
    channels = (
        f"Today's support overview: Most interactions came through "
        f"{top_channel[0]} ({top_channel[1]} tickets). {mood}"
    )

    if negative > ESCALATION_COUNT:
        flagged = f"I've flagged {negative} cases for escalation due to negative sentiment."
    else:
        flagged = 'No critical escalations needed today.'
    if positive > negative:
        team = 'Your team is doing great with customer relations!'
    else:
        team = 'Consider reviewing support processes for improvement opportunities.'
    insight = f"AI Insight: {flagged} {team}"

    return [overview, channels, insight]


def build_narrative(
    records: Sequence[InteractionRecord],
    now:     Optional[datetime] = None,
    rng:     Optional[random.Random] = None,
) -> str:
    templates = narrative_templates(records, now or datetime.now(timezone.utc))
    if not templates:
        return NO_DATA_SUMMARY
    return (rng or random.Random()).choice(templates)
