"""
sentiwatch/parsers/csv_parser.py
Parses uploaded support-interaction CSV files into InteractionRecord.

Required columns: message, timestamp, customer, channel.
Optional columns: id, sentiment, agent, category, confidence, keywords,
                  csat_prediction (also csatPrediction / csat).
Header matching is case-insensitive and ignores spaces/underscores, so
files written by sentiwatch.exporters.csv_exporter parse back directly.

Timestamps: ISO-8601 (trailing 'Z' allowed) or epoch milliseconds.
Naive timestamps are taken as UTC.

Any malformed input raises UploadError naming the offending row. There
is no fallback to mock data — callers decide what to show.
"""

import csv
import io
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from sentiwatch.models.record import InteractionRecord

logger = logging.getLogger(__name__)

BOM_UTF8 = b'\xef\xbb\xbf'

ALLOWED_SUFFIXES = ('.csv',)

REQUIRED_COLUMNS = ('message', 'timestamp', 'customer', 'channel')

# normalized header → field name
COLUMN_ALIASES = {
    'id':             'id',
    'ticketid':       'id',
    'message':        'message',
    'text':           'message',
    'timestamp':      'timestamp',
    'date':           'timestamp',
    'customer':       'customer',
    'channel':        'channel',
    'sentiment':      'sentiment',
    'agent':          'agent',
    'category':       'category',
    'confidence':     'confidence',
    'keywords':       'keywords',
    'csatprediction': 'csat_prediction',
    'csat':           'csat_prediction',
}

KEYWORD_SEPARATORS = (';', '|')

DEFAULT_AGENT    = 'Unassigned'
DEFAULT_CATEGORY = 'General'


class UploadError(ValueError):
    """Upload could not be turned into records. Recoverable: re-upload."""

    def __init__(self, message: str, row: Optional[int] = None):
        self.row = row
        if row is not None:
            message = f"row {row}: {message}"
        super().__init__(message)


def _normalize_header(name: str) -> str:
    return ''.join(c for c in (name or '').lower() if c.isalnum())


def _map_headers(headers: List[str]) -> Dict[str, str]:
    """Raw header → field name, for recognized headers only."""
    mapped: Dict[str, str] = {}
    for raw in headers:
        field = COLUMN_ALIASES.get(_normalize_header(raw))
        if field and field not in mapped.values():
            mapped[raw] = field
    return mapped


def parse_timestamp(value: str) -> datetime:
    text = (value or '').strip()
    if not text:
        raise ValueError('empty timestamp')
    if text.lstrip('-').isdigit():
        return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _parse_float(value: str, default: float) -> float:
    text = (value or '').strip()
    if not text:
        return default
    number = float(text)
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"not a finite number: {text!r}")
    return number


def _parse_csat(value: str) -> Optional[int]:
    text = (value or '').strip()
    if not text:
        return None
    return int(round(_parse_float(text, 0.0)))


def _parse_keywords(value: str) -> Tuple[str, ...]:
    text = (value or '').strip()
    if not text:
        return ()
    for sep in KEYWORD_SEPARATORS:
        if sep in text:
            return tuple(k.strip() for k in text.split(sep) if k.strip())
    return (text,)


def _row_to_record(row: Dict[str, str], row_num: int) -> InteractionRecord:
    def cell(field: str) -> str:
        return (row.get(field) or '').strip()

    for field in ('message', 'customer', 'channel'):
        if not cell(field):
            raise UploadError(f"missing {field}", row=row_num)

    try:
        timestamp = parse_timestamp(cell('timestamp'))
    except (ValueError, OverflowError, OSError) as e:
        raise UploadError(f"bad timestamp {cell('timestamp')!r}: {e}", row=row_num) from e

    try:
        sentiment  = _parse_float(cell('sentiment'), 0.0)
        confidence = _parse_float(cell('confidence'), 0.0)
        csat       = _parse_csat(cell('csat_prediction'))
    except ValueError as e:
        raise UploadError(f"bad number: {e}", row=row_num) from e

    return InteractionRecord(
        id              = cell('id') or f"ticket-{row_num}",
        message         = cell('message'),
        sentiment       = sentiment,
        channel         = cell('channel'),
        agent           = cell('agent') or DEFAULT_AGENT,
        customer        = cell('customer'),
        category        = cell('category') or DEFAULT_CATEGORY,
        confidence      = confidence,
        timestamp       = timestamp,
        keywords        = _parse_keywords(cell('keywords')),
        csat_prediction = csat,
    )


def parse_csv_text(text: str) -> List[InteractionRecord]:
    """
    Parse CSV text (header row + one record per row).
    Raises UploadError on empty input, missing columns or bad cells.
    """
    if text.startswith('\ufeff'):
        text = text[1:]
    if not text.strip():
        raise UploadError('file is empty')

    try:
        reader  = csv.DictReader(io.StringIO(text))
        headers = reader.fieldnames or []
        mapping = _map_headers(headers)
        missing = [c for c in REQUIRED_COLUMNS if c not in mapping.values()]
        if missing:
            raise UploadError(f"missing required column(s): {', '.join(missing)}")

        records: List[InteractionRecord] = []
        # row 1 is the header
        for row_num, raw in enumerate(reader, start=2):
            if not any((v or '').strip() for v in raw.values() if isinstance(v, str)):
                continue
            row = {mapping[k]: v for k, v in raw.items() if k in mapping}
            records.append(_row_to_record(row, row_num))
    except csv.Error as e:
        raise UploadError(f"CSV parse error: {e}") from e

    if not records:
        raise UploadError('file has a header but no records')

    logger.info(f"Parsed {len(records)} interaction records")
    return records


def parse_csv_bytes(raw: bytes) -> List[InteractionRecord]:
    if raw.startswith(BOM_UTF8):
        raw = raw[len(BOM_UTF8):]
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise UploadError(f"file is not UTF-8 text: {e}") from e
    return parse_csv_text(text)


def parse_csv_file(path: Path) -> List[InteractionRecord]:
    """Parse a .csv file from disk. Wrong extension or unreadable file → UploadError."""
    path = Path(path)
    if path.suffix.lower() not in ALLOWED_SUFFIXES:
        raise UploadError(f"unsupported file type {path.suffix or '(none)'}: expected .csv")
    try:
        raw = path.read_bytes()
    except OSError as e:
        logger.error(f"File read error {path.name}: {e}")
        raise UploadError(f"cannot read {path.name}: {e}") from e
    return parse_csv_bytes(raw)
