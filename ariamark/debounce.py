#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import threading
from typing import Callable, Optional

DEBOUNCE_SECONDS = 1.0


class Debouncer:
    """Run `callback` once the trigger stream has been quiet for `delay_seconds`.

    Each trigger() supersedes the previous one: the old timer is cancelled and
    a new one is armed. A timer that fires after being superseded (the cancel
    raced with the timer thread) is ignored via the generation counter.
    """

    def __init__(
        self,
        delay_seconds: float,
        callback: Callable[[], None],
        *,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self._lock = threading.Lock()
        self.delay_seconds = max(0.0, float(delay_seconds))
        self._callback = callback
        self._timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            gen = self._generation
            timer = self._timer_factory(self.delay_seconds, self._fire, args=(gen,))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self) -> bool:
        """Drop the pending run, if any. Returns True when something was pending."""
        with self._lock:
            timer = self._timer
            self._timer = None
            self._generation += 1
        if timer is None:
            return False
        timer.cancel()
        return True

    def flush(self) -> bool:
        """Run the pending callback now instead of waiting. Returns True if it ran."""
        if not self.cancel():
            return False
        self._callback()
        return True

    def _fire(self, gen: int) -> None:
        with self._lock:
            if gen != self._generation:
                return
            self._timer = None
        self._callback()
