"""
tests/test_config.py
Config file load/save and fallback to defaults.
"""

import json

from sentiwatch.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    alert_window_from_config,
    load_config,
    save_config,
)
from sentiwatch.models.record import AlertWindow


class TestConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_save_then_load(self, tmp_path):
        cfg = {**DEFAULT_CONFIG, "alert_window_mode": "recent", "alert_window_size": 20}
        path = save_config(cfg, tmp_path)
        assert path.name == CONFIG_FILENAME
        assert load_config(tmp_path)["alert_window_size"] == 20

    def test_partial_file_merged_with_defaults(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"port": 9000}), encoding="utf-8")
        cfg = load_config(tmp_path)
        assert cfg["port"] == 9000
        assert cfg["default_limit"] == DEFAULT_CONFIG["default_limit"]

    def test_corrupt_file_falls_back(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_non_object_falls_back(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("[1, 2]", encoding="utf-8")
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_alert_window(self):
        assert alert_window_from_config(DEFAULT_CONFIG) == AlertWindow("all", 7)
        assert alert_window_from_config({"alert_window_mode": "days", "alert_window_size": 3}) == \
            AlertWindow("days", 3)
