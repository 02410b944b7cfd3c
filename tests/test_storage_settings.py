#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import json
import os
import tempfile
import unittest
from pathlib import Path

from ariamark.settings import DEFAULT_ORIGIN, Settings
from ariamark.storage import Storage


class StorageTests(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.addCleanup(self._td.cleanup)
        base = Path(self._td.name) / "data"
        self.storage = Storage(config_file=str(base / "config.json"), runtime_log_file=str(base / "runtime.log"))

    def test_missing_config_loads_empty(self) -> None:
        self.assertEqual(self.storage.load_config(), {})

    def test_config_is_read_from_disk(self) -> None:
        cfg = {"debounce_ms": 250, "origin": "https://aria.example", "note": "привет"}
        os.makedirs(os.path.dirname(self.storage.config_file), exist_ok=True)
        Path(self.storage.config_file).write_text(json.dumps(cfg, ensure_ascii=False), encoding="utf-8")
        self.assertEqual(self.storage.load_config(), cfg)

    def test_corrupt_config_loads_empty(self) -> None:
        os.makedirs(os.path.dirname(self.storage.config_file), exist_ok=True)
        Path(self.storage.config_file).write_text("{not json", encoding="utf-8")
        self.assertEqual(self.storage.load_config(), {})
        Path(self.storage.config_file).write_text("[1, 2]", encoding="utf-8")
        self.assertEqual(self.storage.load_config(), {})

    def test_runtime_log_disabled_by_default(self) -> None:
        self.storage.append_runtime_log("should not appear")
        self.assertFalse(os.path.exists(self.storage.runtime_log_file))

    def test_runtime_log_appends_when_enabled(self) -> None:
        self.storage.set_runtime_log_enabled(True)
        self.storage.append_runtime_log("first")
        self.storage.log("second", "warn")
        lines = Path(self.storage.runtime_log_file).read_text(encoding="utf-8").splitlines()
        self.assertEqual(lines[0], "first")
        self.assertRegex(lines[1], r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} WARN: second$")


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        s = Settings.from_config({})
        self.assertEqual(s, Settings())
        self.assertEqual(s.debounce_seconds, 1.0)
        self.assertEqual(s.compression, "gzip")
        self.assertEqual(s.origin, DEFAULT_ORIGIN)
        self.assertFalse(s.runtime_log)

    def test_values_are_clamped_and_normalized(self) -> None:
        s = Settings.from_config(
            {
                "debounce_ms": "999999",
                "compression": "ZSTD",
                "origin": "https://aria.example/",
                "path": "editor",
                "runtime_log": "yes",
            }
        )
        self.assertEqual(s.debounce_ms, 60000)
        self.assertEqual(s.compression, "zstd")
        self.assertEqual(s.origin, "https://aria.example")
        self.assertEqual(s.path, "/editor")
        self.assertTrue(s.runtime_log)

    def test_invalid_values_fall_back(self) -> None:
        s = Settings.from_config({"debounce_ms": "soon", "compression": "brotli", "runtime_log": "maybe"})
        self.assertEqual(s.debounce_ms, 1000)
        self.assertEqual(s.compression, "gzip")
        self.assertFalse(s.runtime_log)
        self.assertEqual(Settings.from_config({"debounce_ms": -5}).debounce_ms, 0)

    def test_non_dict_config(self) -> None:
        self.assertEqual(Settings.from_config(None), Settings())  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
