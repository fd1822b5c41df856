"""
sentiwatch/mock_data.py
Synthetic interaction records for demos and tests.

Cycles a fixed table of ten canned messages, so record i and i+10 always
share message text. Sentiment is the canned base value plus uniform
jitter in ±0.1; every other field is drawn from small fixed lists.
Pass seed (or an explicit random.Random) for reproducible output.
"""

import math
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sentiwatch.models.record import InteractionRecord

DEFAULT_COUNT = 50

CHANNELS   = ['Email', 'Chat', 'Phone', 'Social']
AGENTS     = ['Sarah', 'Mike', 'Emma', 'David', 'Lisa']
CATEGORIES = ['Billing', 'Technical', 'Delivery', 'Product', 'General']
KEYWORDS   = ['service', 'product', 'delivery', 'support']

CANNED_MESSAGES = [
    ("I'm extremely disappointed with the delayed delivery. This is unacceptable!",  -0.8),
    ("Thank you so much for the quick resolution! Excellent service.",                0.9),
    ("The product quality is below expectations. Not happy with this purchase.",    -0.6),
    ("Great customer support! Very helpful and professional.",                        0.8),
    ("Average experience. Nothing special but got the job done.",                     0.1),
    ("Terrible experience! I want a full refund immediately!",                       -0.9),
    ("The team was amazing! Solved my issue in minutes.",                             0.7),
    ("Product works as described. Standard quality.",                                 0.2),
    ("Billing error again! This is the third time this month.",                      -0.7),
    ("Outstanding service! Will definitely recommend to others.",                     0.9),
]

JITTER        = 0.1
WINDOW_DAYS   = 7
MIN_CONFIDENCE = 0.7


def csat_from_sentiment(base: float) -> int:
    """Round-half-up of 3 + base*2, clamped to 1..5."""
    return max(1, min(5, math.floor(3 + base * 2 + 0.5)))


def generate_mock_records(
    count: int = DEFAULT_COUNT,
    seed:  Optional[int] = None,
    rng:   Optional[random.Random] = None,
    now:   Optional[datetime] = None,
) -> List[InteractionRecord]:
    rng = rng or random.Random(seed)
    now = now or datetime.now(timezone.utc)
    window = timedelta(days=WINDOW_DAYS)

    records: List[InteractionRecord] = []
    for i in range(count):
        text, base = CANNED_MESSAGES[i % len(CANNED_MESSAGES)]
        records.append(InteractionRecord(
            id              = f"ticket-{i + 1}",
            message         = text,
            sentiment       = base + (rng.random() - 0.5) * 2 * JITTER,
            channel         = rng.choice(CHANNELS),
            agent           = rng.choice(AGENTS),
            customer        = f"customer-{i + 1}@example.com",
            category        = rng.choice(CATEGORIES),
            confidence      = MIN_CONFIDENCE + rng.random() * (1.0 - MIN_CONFIDENCE),
            timestamp       = now - window * rng.random(),
            keywords        = tuple(KEYWORDS[:rng.randint(1, 3)]),
            csat_prediction = csat_from_sentiment(base),
        ))
    return records
