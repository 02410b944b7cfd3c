#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from document_url_codec import COMPRESS_GZIP, COMPRESS_METHODS

DEFAULT_ORIGIN = "http://localhost:5173"
DEFAULT_PATH = "/"
DEFAULT_DEBOUNCE_MS = 1000
MAX_DEBOUNCE_MS = 60000


def _int_cfg(value: object, default: int, min_v: int, max_v: int) -> int:
    try:
        v = int(value)  # type: ignore[arg-type]
    except Exception:
        v = int(default)
    if v < int(min_v):
        return int(min_v)
    if v > int(max_v):
        return int(max_v)
    return int(v)


def _bool_cfg(value: object, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s in ("1", "true", "yes", "on"):
            return True
        if s in ("0", "false", "no", "off"):
            return False
    return bool(default)


@dataclass(frozen=True)
class Settings:
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    compression: str = COMPRESS_GZIP
    origin: str = DEFAULT_ORIGIN
    path: str = DEFAULT_PATH
    runtime_log: bool = False

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @classmethod
    def from_config(cls, cfg: Dict[str, object]) -> "Settings":
        if not isinstance(cfg, dict):
            cfg = {}
        compression = str(cfg.get("compression") or COMPRESS_GZIP).strip().lower()
        if compression not in COMPRESS_METHODS:
            compression = COMPRESS_GZIP
        origin = str(cfg.get("origin") or DEFAULT_ORIGIN).strip().rstrip("/")
        path = str(cfg.get("path") or DEFAULT_PATH).strip()
        if not path.startswith("/"):
            path = "/" + path
        return cls(
            debounce_ms=_int_cfg(cfg.get("debounce_ms"), DEFAULT_DEBOUNCE_MS, 0, MAX_DEBOUNCE_MS),
            compression=compression,
            origin=origin or DEFAULT_ORIGIN,
            path=path,
            runtime_log=_bool_cfg(cfg.get("runtime_log"), False),
        )

