#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import re
import threading
from typing import Callable, Optional

from document_url_codec import (
    COMPRESS_GZIP,
    EMPTY_TOKEN,
    Document,
    encode,
    next_mode,
    normalize_mode,
    try_decode,
)
from ariamark.budget import BudgetExceededError, BudgetSnapshot, assess, format_usage
from ariamark.debounce import DEBOUNCE_SECONDS, Debouncer
from ariamark.fragment import UrlLocation

DEFAULT_TITLE = "AriaMark"
TITLE_MAX_CHARS = 50
_TITLE_PREFIX_RE = re.compile(r"^#*\s*")


def title_from_content(content: str) -> str:
    first_line = str(content or "").split("\n", 1)[0]
    title = _TITLE_PREFIX_RE.sub("", first_line).strip()
    return title[:TITLE_MAX_CHARS] or DEFAULT_TITLE


def _null_log(text: str, level: str = "info") -> None:
    return None


class EditorSession:
    """Holds the working document and keeps the URL fragment in sync with it.

    Typing goes through a debouncer; mode changes, dictation inserts and
    explicit flushes save immediately. The codec never owns the document.
    """

    def __init__(
        self,
        location: UrlLocation,
        *,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        compression: str = COMPRESS_GZIP,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
        log: Optional[Callable[..., None]] = None,
    ) -> None:
        self._lock = threading.RLock()
        self.location = location
        self.compression = compression
        self._log = log or _null_log
        self._document = Document()
        self._initialized = False
        self.load_status: Optional[str] = None
        self.usage: Optional[BudgetSnapshot] = None
        self.limit_reached = False
        self.title = DEFAULT_TITLE
        self._debouncer = Debouncer(debounce_seconds, self.save, timer_factory=timer_factory)

    @property
    def document(self) -> Document:
        with self._lock:
            return self._document

    @property
    def save_pending(self) -> bool:
        return self._debouncer.pending

    def load(self) -> Document:
        status, doc = try_decode(self.location.read_fragment())
        with self._lock:
            self._document = doc
            self.load_status = status
            self._initialized = True
            self.title = title_from_content(doc.content)
        self._log(f"load: status={status} mode={doc.mode} chars={len(doc.content)}")
        return doc

    def edit(self, content: str) -> None:
        with self._lock:
            self._document = Document(content=str(content or ""), mode=self._document.mode)
        self._debouncer.trigger()

    def set_mode(self, mode: str) -> None:
        with self._lock:
            self._document = Document(content=self._document.content, mode=normalize_mode(mode))
        self.flush()

    def cycle_mode(self) -> str:
        with self._lock:
            mode = next_mode(self._document.mode)
        self.set_mode(mode)
        return mode

    def insert_transcript(self, text: str, position: Optional[int] = None) -> int:
        """Insert dictated `text` at `position` (default: end). Returns the new cursor."""
        with self._lock:
            content = self._document.content
            pos = len(content) if position is None else max(0, min(len(content), int(position)))
            before = content[:pos]
            after = content[pos:]
            space = " " if before and not before.endswith((" ", "\n")) else ""
            self._document = Document(content=f"{before}{space}{text}{after}", mode=self._document.mode)
            cursor = pos + len(space) + len(text)
        self.flush()
        return cursor

    def flush(self) -> Optional[BudgetSnapshot]:
        """Save now, discarding any pending debounced save (e.g. before recording)."""
        self._debouncer.cancel()
        return self.save()

    def close(self) -> None:
        # Pending edits are written out, not dropped.
        self._debouncer.flush()

    def save(self) -> Optional[BudgetSnapshot]:
        with self._lock:
            if not self._initialized:
                return None
            doc = self._document
            token = encode(doc, self.compression)
            snapshot = assess(token, self.location.prefix_length)
            self.usage = snapshot
            self.limit_reached = snapshot.exceeded
            if token == EMPTY_TOKEN and not doc.is_empty:
                # Encode failed; the previous link still loads, an empty one would not.
                self._log("save: URL not updated, document could not be encoded", "warn")
            else:
                try:
                    self.location.publish(token, snapshot)
                except BudgetExceededError as e:
                    self._log(f"save: URL not updated, {e}", "warn")
            self.title = title_from_content(doc.content)
        self._log(f"save: mode={doc.mode} usage={format_usage(snapshot)} band={snapshot.band}")
        return snapshot

