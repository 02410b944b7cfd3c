#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import List
from urllib.parse import unquote, urlsplit

from ariamark.budget import BudgetSnapshot, ensure_within_budget, prefix_length


def token_from_url(value: str) -> str:
    """Return the token from a full URL, a "#token" fragment or a bare token."""
    text = str(value or "").strip()
    if "#" in text:
        text = text.split("#", 1)[1]
    elif "://" in text:
        return ""
    if "%" in text:
        text = unquote(text)
    return text


class UrlLocation:
    """In-memory stand-in for the browser location + history pair.

    The token only ever lives in the fragment, so it is never sent to a server.
    """

    def __init__(self, origin: str, path: str = "/", fragment: str = "") -> None:
        self.origin = str(origin or "").rstrip("/")
        self.path = str(path or "/")
        self.fragment = str(fragment or "")
        self.history: List[str] = []

    @classmethod
    def from_url(cls, url: str) -> "UrlLocation":
        parts = urlsplit(str(url or ""))
        origin = f"{parts.scheme}://{parts.netloc}" if parts.scheme else ""
        return cls(origin=origin, path=parts.path or "/", fragment=parts.fragment)

    @property
    def prefix_length(self) -> int:
        return prefix_length(self.origin, self.path)

    @property
    def href(self) -> str:
        base = self.origin + self.path
        if self.fragment:
            return f"{base}#{self.fragment}"
        return base

    def read_fragment(self) -> str:
        text = self.fragment
        if "%" in text:
            text = unquote(text)
        return text

    def write_fragment(self, token: str) -> None:
        # Empty token: URL falls back to origin + path with no "#".
        self.fragment = str(token or "")
        self.history.append(self.href)

    def publish(self, token: str, snapshot: BudgetSnapshot) -> None:
        """Write `token` unless the budget is exceeded.

        Raises BudgetExceededError and leaves the current (stale) URL in place.
        Tokens are never truncated.
        """
        ensure_within_budget(snapshot)
        self.write_fragment(token)
