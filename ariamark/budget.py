#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass

# Practical maximum safe URL length across browsers/servers.
URL_CHAR_LIMIT = 16000
FRAGMENT_DELIMITER_LEN = 1  # "#"

BAND_LOW = "low"
BAND_MODERATE = "moderate"
BAND_HIGH = "high"
BAND_EXCEEDED = "exceeded"


class BudgetExceededError(Exception):
    def __init__(self, used_chars: int, ceiling: int) -> None:
        super().__init__(f"URL length {used_chars} exceeds limit {ceiling}")
        self.used_chars = used_chars
        self.ceiling = ceiling


def classify(ratio: float) -> str:
    r = float(ratio)
    if r < 0.5:
        return BAND_LOW
    if r < 0.75:
        return BAND_MODERATE
    if r < 1.0:
        return BAND_HIGH
    return BAND_EXCEEDED


@dataclass(frozen=True)
class BudgetSnapshot:
    used_chars: int
    ceiling: int = URL_CHAR_LIMIT

    @property
    def ratio(self) -> float:
        return self.used_chars / float(self.ceiling)

    @property
    def percent(self) -> float:
        return self.ratio * 100.0

    @property
    def band(self) -> str:
        return classify(self.ratio)

    @property
    def exceeded(self) -> bool:
        return self.band == BAND_EXCEEDED


def prefix_length(origin: str, path: str) -> int:
    return len(origin or "") + len(path or "")


def assess(token: str, fixed_prefix_length: int) -> BudgetSnapshot:
    """Snapshot of URL usage for `origin + path + "#" + token`."""
    used = max(0, int(fixed_prefix_length)) + FRAGMENT_DELIMITER_LEN + len(token or "")
    return BudgetSnapshot(used_chars=used, ceiling=URL_CHAR_LIMIT)


def ensure_within_budget(snapshot: BudgetSnapshot) -> BudgetSnapshot:
    if snapshot.exceeded:
        raise BudgetExceededError(snapshot.used_chars, snapshot.ceiling)
    return snapshot


def format_usage(snapshot: BudgetSnapshot) -> str:
    return f"{snapshot.percent:.2f}%"
