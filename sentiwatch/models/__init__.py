"""
sentiwatch/models — record schema and sentiment bands.
"""

from sentiwatch.models.bands import (
    classify_sentiment,
    classify_severity_band,
    csat_or_default,
)
from sentiwatch.models.record import Alert, AlertWindow, InteractionRecord

__all__ = [
    "Alert",
    "AlertWindow",
    "InteractionRecord",
    "classify_sentiment",
    "classify_severity_band",
    "csat_or_default",
]
