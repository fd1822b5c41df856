"""
sentiwatch/exporters/csv_exporter.py
Flat CSV export of a record list.

Columns: ID, Message, Sentiment, Channel, Agent, Timestamp, Customer, Category
- Sentiment is written with 3 decimal places.
- Timestamp is ISO-8601 in UTC with microseconds and a 'Z' suffix, so
  rows sort lexically by time and parse back to the same instant.
- Fields are quoted by the csv module, so commas and quotes in messages
  survive a round trip through sentiwatch.parsers.csv_parser.
"""

import csv
import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from sentiwatch.models.record import InteractionRecord

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ['ID', 'Message', 'Sentiment', 'Channel', 'Agent', 'Timestamp', 'Customer', 'Category']
EXPORT_FILENAME = 'sentiment-analysis-results.csv'


def format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.isoformat(timespec='microseconds').replace('+00:00', 'Z')


def export_csv(records: Sequence[InteractionRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow(EXPORT_COLUMNS)
    for rec in records:
        writer.writerow([
            rec.id,
            rec.message,
            f"{rec.sentiment:.3f}",
            rec.channel,
            rec.agent,
            format_timestamp(rec.timestamp),
            rec.customer,
            rec.category,
        ])
    return buf.getvalue()


def export_csv_file(records: Sequence[InteractionRecord], path: Path) -> Path:
    """Write export_csv() output to path. Returns path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_csv(records), encoding='utf-8')
    logger.info(f"CSV export complete → {path} ({len(records)} records)")
    return path
