"""
sentiwatch/models/record.py
Shared dataclass schema. Parsers, aggregators, detectors, filters and
exporters all use these types. Do not add logic here — data only.
Sentiment banding lives in sentiwatch/models/bands.py.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class InteractionRecord:
    """One customer-support interaction, pre-tagged with sentiment."""
    id:              str
    message:         str
    sentiment:       float       # conventionally -1.0 .. 1.0, not enforced
    channel:         str         # Email / Chat / Phone / Social / ...
    agent:           str
    customer:        str
    category:        str
    confidence:      float       # conventionally 0.0 .. 1.0
    timestamp:       datetime    # timezone-aware (UTC)
    keywords:        Tuple[str, ...] = ()
    csat_prediction: Optional[int]   = None    # 1..5, absent → 3 downstream


@dataclass
class Alert:
    """An alert raised by the alert detector. Only acknowledgment changes it."""
    id:                str
    kind:              str         # spike / warning
    severity:          str         # low / medium / high / critical
    message:           str
    details:           str
    timestamp:         datetime
    suggested_actions: Tuple[str, ...] = ()
    acknowledged:      bool            = False


@dataclass(frozen=True)
class AlertWindow:
    """Which records the spike rule looks at."""
    mode: str = 'all'       # all / days / recent
    size: int = 7           # days for 'days', record count for 'recent'


@dataclass(frozen=True)
class AgentRollup:
    agent:          str
    count:          int
    mean_sentiment: float
    positive_rate:  float       # percent
    negative_rate:  float       # percent


@dataclass(frozen=True)
class KeywordRollup:
    keyword:        str
    mentions:       int
    sentiment_sum:  float
    mean_sentiment: float


@dataclass(frozen=True)
class CsatStats:
    average:    float = 0.0
    low_count:  int   = 0       # csat <= 2
    high_count: int   = 0       # csat >= 4


@dataclass
class AggregateSummary:
    """Derived on demand from a record list. Never persisted."""
    total:              int                   = 0
    mean_sentiment:     float                 = 0.0
    mean_band:          str                   = 'neutral'
    positive:           int                   = 0
    neutral:            int                   = 0
    negative:           int                   = 0
    average_confidence: float                 = 0.0
    band_distribution:  dict                  = field(default_factory=dict)
    csat:               CsatStats             = field(default_factory=CsatStats)
    channel_counts:     dict                  = field(default_factory=dict)
    top_channel:        Optional[str]         = None
    earliest:           Optional[datetime]    = None
    latest:             Optional[datetime]    = None
    agents:             list                  = field(default_factory=list)   # List[AgentRollup]
    keywords:           list                  = field(default_factory=list)   # List[KeywordRollup]
    issues:             list                  = field(default_factory=list)   # List[KeywordRollup], < -0.3 only
