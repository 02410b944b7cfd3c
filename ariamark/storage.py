#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import os
import sys
import threading
import time
from typing import Dict


def ts_local() -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())


def out(msg: str) -> None:
    sys.stdout.write(msg + "\n")
    sys.stdout.flush()


def harden_dir(path: str) -> None:
    if not path:
        return
    try:
        os.makedirs(path, exist_ok=True)
    except Exception:
        return
    if sys.platform.startswith("win"):
        return
    try:
        os.chmod(path, 0o700)
    except Exception:
        pass


def harden_file(path: str) -> None:
    if not path:
        return
    if sys.platform.startswith("win"):
        return
    try:
        os.chmod(path, 0o600)
    except Exception:
        pass


class Storage:
    """Local config.json and runtime.log for the ariaMark tooling."""

    def __init__(self, config_file: str, runtime_log_file: str) -> None:
        self.config_file = config_file
        self.runtime_log_file = runtime_log_file
        self.runtime_log_enabled = False
        self._runtime_log_lock = threading.Lock()

    def set_runtime_log_enabled(self, enabled: bool) -> None:
        self.runtime_log_enabled = bool(enabled)

    def log(self, text: str, level: str = "info") -> None:
        """Timestamp `text` and append it to runtime.log."""
        self.append_runtime_log(f"{ts_local()} {level.upper()}: {text}")

    def append_runtime_log(self, line: str) -> None:
        if not line:
            return
        if not self.runtime_log_enabled:
            return
        try:
            harden_dir(os.path.dirname(self.runtime_log_file) or ".")
            with self._runtime_log_lock:
                with open(self.runtime_log_file, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            harden_file(self.runtime_log_file)
        except Exception:
            pass

    def load_config(self) -> Dict[str, object]:
        if not os.path.isfile(self.config_file):
            return {}
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.loads(f.read())
        except Exception:
            return {}
        if not isinstance(data, dict):
            return {}
        return data

