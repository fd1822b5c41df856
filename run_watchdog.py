#!/usr/bin/env python3
"""
run_watchdog.py — Sentiment Watchdog launcher
Uses watchdog_config.json if present. Run from project root.

  python run_watchdog.py               # demo report on generated sample data
  python run_watchdog.py --seed 7      # same, reproducible
  python run_watchdog.py --api         # start API server for the dashboard
"""

import argparse
import logging
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Sentiment Watchdog — launcher")
    parser.add_argument("--api", action="store_true", help="Start API server")
    parser.add_argument("--seed", type=int, default=None, help="Seed for sample data")
    args = parser.parse_args()

    root = Path(__file__).parent

    from sentiwatch.config import load_config

    config = load_config(root)

    if args.api:
        import uvicorn
        from sentiwatch.api import _build_app
        from sentiwatch.session import DashboardSession

        logging.basicConfig(
            level   = logging.INFO,
            format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt = '%H:%M:%S',
        )
        app = _build_app(DashboardSession(config=config))
        print(f"Starting API at http://{config['host']}:{config['port']}")
        uvicorn.run(app, host=config["host"], port=int(config["port"]), log_level="info")
        return

    from sentiwatch.cli import main as cli_main

    argv = ["--sample"]
    if args.seed is not None:
        argv += ["--seed", str(args.seed)]
    sys.exit(cli_main(argv))


if __name__ == "__main__":
    main()
