"""
sentiwatch/cli.py
Command-line interface for Sentiment Watchdog.

USAGE:
  python -m sentiwatch.cli --input ./tickets.csv
  python -m sentiwatch.cli --sample --seed 42
  python -m sentiwatch.cli --sample --sentiment negative --sort sentiment_asc --limit 10
  python -m sentiwatch.cli --input ./tickets.csv --export-csv out.csv --export-json report.json

EXAMPLES:
  # Demo data, worst interactions first
  python -m sentiwatch.cli --sample --sort sentiment_asc --limit 5

  # Search a real upload for one customer
  python -m sentiwatch.cli --input tickets.csv --search customer-12@example.com
"""

import argparse
import logging
import random
import sys
from pathlib import Path

from sentiwatch.config import load_config
from sentiwatch.exporters.csv_exporter import export_csv_file
from sentiwatch.filters import LIMIT_OPTIONS, SENTIMENT_OPTIONS, SORT_OPTIONS, FilterCriteria
from sentiwatch.models.bands import classify_sentiment
from sentiwatch.parsers.csv_parser import UploadError
from sentiwatch.report_export import export_to_json
from sentiwatch.session import DashboardSession

logger = logging.getLogger(__name__)

# ANSI colors
GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'

BAND_COLORS = {'positive': GREEN, 'neutral': YELLOW, 'negative': RED}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'sentiwatch',
        description = 'Sentiment Watchdog — customer-support sentiment dashboard',
        formatter_class = argparse.RawDescriptionHelpFormatter,
        epilog = """
NOTE:
  Sentiment scores, CSAT predictions and keywords come with the data.
  This tool aggregates, filters and alerts on them; it does not infer them.
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--input', '-i',
        type = Path,
        help = 'CSV file of interaction records',
    )
    source.add_argument(
        '--sample',
        action = 'store_true',
        help   = 'Use generated demo records instead of a file',
    )

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for --sample and the narrative pick')
    parser.add_argument('--count', type=int, default=None,
                        help='Number of demo records for --sample (default: from config)')
    parser.add_argument('--sentiment', choices=SENTIMENT_OPTIONS, default='all',
                        help='Sentiment band filter (default: all)')
    parser.add_argument('--channel', default='all', help='Channel filter (default: all)')
    parser.add_argument('--agent',   default='all', help='Agent filter (default: all)')
    parser.add_argument('--sort', dest='sort_by', choices=SORT_OPTIONS, default='timestamp',
                        help='Sort key (default: timestamp, newest first)')
    parser.add_argument('--limit', type=int, default=None,
                        help=f"Max rows shown (common: {', '.join(map(str, LIMIT_OPTIONS))})")
    parser.add_argument('--search', default='', help='Case-insensitive match on message or customer')
    parser.add_argument('--export-csv', type=Path, default=None,
                        help='Write all records to this CSV file')
    parser.add_argument('--export-json', type=Path, default=None,
                        help='Write the full report (with content hash) to this JSON file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    logging.basicConfig(
        level   = logging.DEBUG if args.verbose else logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    config  = load_config(Path.cwd())
    session = DashboardSession(config=config)

    # ── LOAD ─────────────────────────────────────────────────
    try:
        if args.sample:
            session.load_sample(seed=args.seed, count=args.count)
        else:
            session.load_csv_file(args.input)
    except UploadError as e:
        _print(f"{RED}Upload failed: {e}{RESET}")
        return 1
    except ValueError as e:
        _print(f"{RED}Error: {e}{RESET}")
        return 2

    limit = int(config['default_limit']) if args.limit is None else args.limit
    try:
        criteria = FilterCriteria(
            sentiment = args.sentiment,
            channel   = args.channel,
            agent     = args.agent,
            sort_by   = args.sort_by,
            limit     = limit,
            search    = args.search,
        )
    except ValueError as e:
        _print(f"{RED}Error: {e}{RESET}")
        return 2

    report = session.report(criteria)
    _print_summary(session)
    _print_alerts(session)
    _print_agents(report)
    _print_view(report.view, session)

    rng = random.Random(args.seed) if args.seed is not None else None
    _print(f"\n{BOLD}Summary{RESET}\n  {session.build_narrative(rng)}")

    # ── EXPORT ───────────────────────────────────────────────
    if args.export_csv:
        export_csv_file(session.records, args.export_csv)
        _ok(f"CSV written → {args.export_csv}")
    if args.export_json:
        args.export_json.parent.mkdir(parents=True, exist_ok=True)
        args.export_json.write_text(export_to_json(report), encoding='utf-8')
        _ok(f"Report written → {args.export_json}")
    return 0


# ── PRINT HELPERS ────────────────────────────────────────────

def _print_summary(session: DashboardSession) -> None:
    s = session.summary
    band = classify_sentiment(s.mean_sentiment)
    _print(f"\n{BOLD}{CYAN}Sentiment Watchdog{RESET}")
    _print(f"  Interactions : {s.total:,}")
    _print(f"  Avg sentiment: {BAND_COLORS[band]}{s.mean_sentiment:+.2f} ({band}){RESET}")
    _print(f"  Positive     : {s.positive}")
    _print(f"  Neutral      : {s.neutral}")
    _print(f"  Negative     : {s.negative}")
    _print(f"  Avg CSAT     : {s.csat.average:.1f}  (low {s.csat.low_count} / high {s.csat.high_count})")
    if s.issues:
        top = ', '.join(f"{k.keyword} ({k.mentions})" for k in s.issues[:3])
        _print(f"  Top issues   : {top}")


def _print_alerts(session: DashboardSession) -> None:
    for alert in session.alerts.active_alerts:
        color = RED if alert.severity == 'critical' else YELLOW
        _print(f"\n  {color}⚠ [{alert.severity.upper()}] {alert.message}{RESET}")
        _print(f"    {alert.details}")
        for action in alert.suggested_actions:
            _print(f"    • {action}")


def _print_agents(report) -> None:
    if not report.coaching:
        return
    _print(f"\n{BOLD}Agents{RESET}")
    for a in report.coaching:
        _print(
            f"  {a.agent:<12} {a.mean_sentiment:+.2f}  "
            f"+{a.positive_rate:.1f}% -{a.negative_rate:.1f}%  ({a.count})  {a.tip}"
        )


def _print_view(view, session: DashboardSession) -> None:
    _print(f"\n{BOLD}Interactions ({len(view)} of {len(session.records)}){RESET}")
    for rec in view:
        band = classify_sentiment(rec.sentiment)
        _print(
            f"  {BAND_COLORS[band]}{rec.sentiment:+.2f}{RESET} "
            f"{rec.timestamp:%Y-%m-%d %H:%M} {rec.channel:<7} {rec.agent:<8} "
            f"{rec.message[:60]}"
        )


def _ok(msg):    _print(f"  {GREEN}✓{RESET} {msg}")
def _print(msg): print(msg)


if __name__ == '__main__':
    sys.exit(main())
