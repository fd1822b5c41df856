"""
sentiwatch/config.py
Dashboard settings. Persists to watchdog_config.json in the project root.
Missing or unreadable files fall back to DEFAULT_CONFIG.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from sentiwatch.models.record import AlertWindow

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "watchdog_config.json"

DEFAULT_CONFIG = {
    "processing_delay_sec": 2.0,
    "reveal_char_delay_sec": 0.03,
    "alert_window_mode": "all",      # all / days / recent
    "alert_window_size": 7,          # days, or record count for 'recent'
    "default_limit": 50,
    "mock_record_count": 50,
    "host": "127.0.0.1",
    "port": 8765,
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from watchdog_config.json. Returns defaults if missing."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value must be an object")
            return {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError, ValueError) as e:
            logger.warning(f"Config load failed: {e}")
    return dict(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to watchdog_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def alert_window_from_config(config: Dict[str, Any]) -> AlertWindow:
    return AlertWindow(
        mode=str(config.get("alert_window_mode", "all")),
        size=int(config.get("alert_window_size", 7)),
    )
