#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""Document <-> URL fragment token codec.

Token wire format: base64(gzip(utf8(json {"content": ..., "mode": ...}))).
Older links carry base64(gzip(utf8(plain text))) and still decode, as Edit mode.
"""

from __future__ import annotations

import base64
import gzip
import json
import sys
import threading
import time
import zlib
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import zstandard as _zstd

MODE_EDIT = "edit"
MODE_SPLIT = "live"
MODE_PREVIEW = "view"
MODES = (MODE_EDIT, MODE_SPLIT, MODE_PREVIEW)
MODE_TO_NAME: Dict[str, str] = {
    MODE_EDIT: "Edit",
    MODE_SPLIT: "Split",
    MODE_PREVIEW: "Preview",
}

COMPRESS_GZIP = "gzip"
COMPRESS_ZSTD = "zstd"
COMPRESS_METHODS = (COMPRESS_GZIP, COMPRESS_ZSTD)
GZIP_MAGIC = b"\x1f\x8b"
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
# Links are untrusted input; cap what a single token may inflate to.
MAX_DECODED_BYTES = 4 * 1024 * 1024

EMPTY_TOKEN = ""

STATUS_EMPTY = "empty"
STATUS_OK = "ok"
STATUS_LEGACY = "legacy"
STATUS_MALFORMED = "malformed"


class CodecError(ValueError):
    pass


class TokenEncodeError(CodecError):
    pass


class MalformedTokenError(CodecError):
    pass


class UnrecognizedRecordError(CodecError):
    pass


@dataclass(frozen=True)
class Document:
    content: str = ""
    mode: str = MODE_EDIT

    @property
    def is_empty(self) -> bool:
        return self.content == "" and self.mode == MODE_EDIT


def normalize_mode(value: object) -> str:
    if isinstance(value, str) and value in MODES:
        return value
    return MODE_EDIT


def next_mode(mode: str) -> str:
    idx = MODES.index(normalize_mode(mode))
    return MODES[(idx + 1) % len(MODES)]


def mode_name(mode: str) -> str:
    return MODE_TO_NAME.get(normalize_mode(mode), "Edit")


# ----------------------------
# Failure reporting
# ----------------------------

_FAILURE_HOOK: Optional[Callable[[str], None]] = None
_FAILURE_COUNTS: Dict[str, int] = {}
_FAILURE_LOCK = threading.Lock()


def set_failure_hook(hook: Optional[Callable[[str], None]]) -> None:
    """Route swallowed encode/decode failures to `hook` (one line per failure).

    When unset (default), lines go to stderr.
    """
    global _FAILURE_HOOK
    _FAILURE_HOOK = hook


def failure_stats() -> Dict[str, int]:
    with _FAILURE_LOCK:
        return dict(_FAILURE_COUNTS)


def reset_failure_stats() -> None:
    with _FAILURE_LOCK:
        _FAILURE_COUNTS.clear()


def _report_failure(kind: str, exc: BaseException) -> None:
    with _FAILURE_LOCK:
        _FAILURE_COUNTS[kind] = _FAILURE_COUNTS.get(kind, 0) + 1
    ts = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
    line = f"{ts} CODEC: {kind} failed: {type(exc).__name__}: {exc}"
    hook = _FAILURE_HOOK
    try:
        if hook is not None:
            hook(line)
        else:
            sys.stderr.write(line + "\n")
    except Exception:
        pass


# ----------------------------
# Compression
# ----------------------------


def compress(raw: bytes, method: str = COMPRESS_GZIP) -> bytes:
    if method == COMPRESS_GZIP:
        return gzip.compress(raw, compresslevel=9, mtime=0)
    if method == COMPRESS_ZSTD:
        return _zstd.ZstdCompressor(level=10).compress(raw)
    raise TokenEncodeError(f"unsupported compression method: {method}")


def compression_method_from_blob(blob: bytes) -> Optional[str]:
    if blob.startswith(GZIP_MAGIC):
        return COMPRESS_GZIP
    if blob.startswith(ZSTD_MAGIC):
        return COMPRESS_ZSTD
    return None


def _gunzip_bounded(blob: bytes, max_bytes: int) -> bytes:
    dobj = zlib.decompressobj(16 + zlib.MAX_WBITS)
    raw = dobj.decompress(blob, max_bytes + 1)
    if len(raw) > max_bytes or dobj.unconsumed_tail:
        raise MalformedTokenError(f"decoded payload exceeds {max_bytes} bytes")
    if not dobj.eof or dobj.unused_data:
        raise MalformedTokenError("truncated or trailing gzip data")
    return raw


def decompress(blob: bytes, max_bytes: int = MAX_DECODED_BYTES) -> bytes:
    """Inflate a gzip or zstd container, refusing output larger than `max_bytes`."""
    method = compression_method_from_blob(blob)
    if method is None:
        raise MalformedTokenError("unknown compression container")
    try:
        if method == COMPRESS_GZIP:
            return _gunzip_bounded(blob, max_bytes)
        declared = _zstd.frame_content_size(blob)
        if declared > max_bytes:
            raise MalformedTokenError(f"decoded payload exceeds {max_bytes} bytes")
        # max_output_size only bounds frames without a declared size.
        return _zstd.ZstdDecompressor().decompress(blob, max_output_size=max_bytes)
    except MalformedTokenError:
        raise
    except Exception as e:
        raise MalformedTokenError(f"corrupt {method} stream: {e}") from e


# ----------------------------
# Base64
# ----------------------------


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


def b64d(s: str) -> bytes:
    payload = s.strip()
    missing = (-len(payload)) % 4
    if missing == 3:
        raise MalformedTokenError("invalid base64 length")
    try:
        return base64.b64decode((payload + "=" * missing).encode("ascii"), validate=True)
    except Exception as e:
        raise MalformedTokenError(f"invalid base64: {e}") from e


# ----------------------------
# Record
# ----------------------------


def pack_record(document: Document) -> bytes:
    content = document.content
    if not isinstance(content, str):
        raise TokenEncodeError(f"content must be str, not {type(content).__name__}")
    record = {"content": content, "mode": normalize_mode(document.mode)}
    text = json.dumps(record, ensure_ascii=False, separators=(",", ":"))
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise TokenEncodeError(f"content is not UTF-8 encodable: {e}") from e


def parse_record(text: str) -> Document:
    """Read decompressed text as a {content, mode} record.

    Raises UnrecognizedRecordError when the text is not a JSON object with a
    "content" key, which is how pre-record (plain text) tokens look.
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise UnrecognizedRecordError("not a JSON record") from e
    if not isinstance(data, dict) or "content" not in data:
        raise UnrecognizedRecordError("JSON without a content field")
    content = data.get("content")
    if not isinstance(content, str):
        content = ""
    return Document(content=content, mode=normalize_mode(data.get("mode")))


def unpack_token(token: str) -> str:
    """Reverse base64, decompression and UTF-8; raise MalformedTokenError on any failure."""
    if not isinstance(token, str):
        raise MalformedTokenError("token must be str")
    raw = decompress(b64d(token))
    try:
        return raw.decode("utf-8", errors="strict")
    except UnicodeDecodeError as e:
        raise MalformedTokenError(f"payload is not UTF-8: {e}") from e


# ----------------------------
# Public API
# ----------------------------


def encode(document: Document, method: str = COMPRESS_GZIP) -> str:
    """Encode a document into a URL fragment token.

    The canonical empty document encodes to EMPTY_TOKEN so the default URL
    stays clean. Never raises: failures are reported and yield EMPTY_TOKEN.
    """
    try:
        if document.content == "" and normalize_mode(document.mode) == MODE_EDIT:
            return EMPTY_TOKEN
        return b64e(compress(pack_record(document), method))
    except Exception as e:
        _report_failure("encode", e)
        return EMPTY_TOKEN


def try_decode(token: Optional[str]) -> Tuple[str, Document]:
    if not token:
        return (STATUS_EMPTY, Document())
    try:
        text = unpack_token(token)
    except Exception as e:
        _report_failure("decode", e)
        return (STATUS_MALFORMED, Document())
    try:
        return (STATUS_OK, parse_record(text))
    except UnrecognizedRecordError:
        return (STATUS_LEGACY, Document(content=text, mode=MODE_EDIT))


def decode(token: Optional[str]) -> Document:
    """Decode a token into a document; never raises.

    Empty or malformed tokens give the canonical empty document.
    """
    return try_decode(token)[1]

