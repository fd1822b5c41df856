"""
sentiwatch/models/bands.py
Sentiment band thresholds and classifiers.

Every aggregate, alert, filter and narrative in sentiwatch classifies
sentiment through this module. Do not restate these numbers elsewhere.

  positive      sentiment >  0.1
  negative      sentiment < -0.1
  neutral       everything else (including NaN)
  veryPositive  sentiment >  0.5
  veryNegative  sentiment < -0.5   (the 'critical' filter band)
  issue         sentiment < -0.3   (stricter band for alerts and issue rollups)
  concern       sentiment < -0.2   (weekly issue counts and narrative tone)
"""

from sentiwatch.models.record import InteractionRecord

POSITIVE_THRESHOLD      = 0.1
NEGATIVE_THRESHOLD      = -0.1
VERY_POSITIVE_THRESHOLD = 0.5
CRITICAL_THRESHOLD      = -0.5
ISSUE_THRESHOLD         = -0.3
CONCERN_THRESHOLD       = -0.2

DEFAULT_CSAT = 3

POSITIVE = 'positive'
NEUTRAL  = 'neutral'
NEGATIVE = 'negative'
CRITICAL = 'critical'

VERY_POSITIVE = 'veryPositive'
VERY_NEGATIVE = 'veryNegative'

SEVERITY_BANDS = (VERY_POSITIVE, POSITIVE, NEUTRAL, NEGATIVE, VERY_NEGATIVE)


def is_positive(value: float) -> bool:
    return value > POSITIVE_THRESHOLD


def is_negative(value: float) -> bool:
    return value < NEGATIVE_THRESHOLD


def is_neutral(value: float) -> bool:
    return not is_positive(value) and not is_negative(value)


def is_critical(value: float) -> bool:
    return value < CRITICAL_THRESHOLD


def is_issue(value: float) -> bool:
    return value < ISSUE_THRESHOLD


def is_concern(value: float) -> bool:
    return value < CONCERN_THRESHOLD


def classify_sentiment(value: float) -> str:
    """Three-way band: positive / neutral / negative."""
    if is_positive(value):
        return POSITIVE
    if is_negative(value):
        return NEGATIVE
    return NEUTRAL


def classify_severity_band(value: float) -> str:
    """Five-way band used for distribution breakdowns."""
    if value > VERY_POSITIVE_THRESHOLD:
        return VERY_POSITIVE
    if is_positive(value):
        return POSITIVE
    if is_critical(value):
        return VERY_NEGATIVE
    if is_negative(value):
        return NEGATIVE
    return NEUTRAL


def matches_band(value: float, band: str) -> bool:
    """Filter-band predicate. 'all' matches everything."""
    if band == 'all':
        return True
    if band == CRITICAL:
        return is_critical(value)
    return classify_sentiment(value) == band


def csat_or_default(record: InteractionRecord) -> int:
    if record.csat_prediction is None:
        return DEFAULT_CSAT
    return record.csat_prediction
