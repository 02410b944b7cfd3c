#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""ariaMark command line: turn markdown into a shareable link and back.

The whole document lives in the URL fragment; nothing is uploaded.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

import document_url_codec
from document_url_codec import (
    COMPRESS_ZSTD,
    MODES,
    STATUS_MALFORMED,
    mode_name,
    try_decode,
)
from ariamark import VERSION
from ariamark.budget import format_usage
from ariamark.fragment import UrlLocation, token_from_url
from ariamark.session import EditorSession
from ariamark.settings import Settings
from ariamark.storage import Storage, out

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_BUDGET_EXCEEDED = 3
EXIT_MALFORMED = 4

BASE_DIR = os.path.dirname(os.path.abspath(sys.argv[0]))
CONFIG_FILE = os.path.join(BASE_DIR, "config.json")


def err(msg: str) -> None:
    sys.stderr.write(msg + "\n")
    sys.stderr.flush()


def read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="ariaMark.py",
        description="Encode a markdown document into a URL fragment, or decode one.",
    )
    ap.add_argument("--version", action="store_true", help="print version and exit")
    group = ap.add_mutually_exclusive_group()
    group.add_argument("--encode", metavar="PATH", help="markdown file to encode ('-' for stdin)")
    group.add_argument("--decode", metavar="URL", help="link or bare token to decode")
    ap.add_argument("--mode", choices=MODES, default=None, help="display mode stored with the document (default: edit)")
    ap.add_argument("--config", default=CONFIG_FILE, help=f"config file (default: {CONFIG_FILE})")
    ap.add_argument("--runtime-log", action="store_true", help="append diagnostics to runtime.log")
    ap.add_argument("--zstd", action="store_true", help="compress with zstd instead of gzip (ariaMark tooling only)")
    return ap


def run_encode(args: argparse.Namespace, settings: Settings, storage: Storage) -> int:
    try:
        content = read_text(args.encode)
    except OSError as e:
        err(f"cannot read {args.encode}: {e}")
        return EXIT_USAGE
    compression = COMPRESS_ZSTD if args.zstd else settings.compression
    session = EditorSession(
        UrlLocation(settings.origin, settings.path),
        debounce_seconds=settings.debounce_seconds,
        compression=compression,
        log=storage.log,
    )
    session.load()
    session.edit(content)
    if args.mode:
        session.set_mode(args.mode)
    snapshot = session.flush()
    if snapshot is None:
        return EXIT_USAGE
    if snapshot.exceeded:
        err(f"URL limit reached ({format_usage(snapshot)} of {snapshot.ceiling} chars); link not written")
        return EXIT_BUDGET_EXCEEDED
    out(session.location.href)
    err(f"usage: {format_usage(snapshot)} ({snapshot.band})")
    return EXIT_OK


def run_decode(args: argparse.Namespace) -> int:
    status, doc = try_decode(token_from_url(args.decode))
    if status == STATUS_MALFORMED:
        err("link could not be decoded")
        return EXIT_MALFORMED
    sys.stdout.write(doc.content)
    if doc.content and not doc.content.endswith("\n"):
        sys.stdout.write("\n")
    sys.stdout.flush()
    err(f"mode: {mode_name(doc.mode)} status: {status}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.version:
        out(VERSION)
        return EXIT_OK
    if not args.encode and not args.decode:
        ap.print_usage(sys.stderr)
        return EXIT_USAGE

    storage = Storage(
        config_file=args.config,
        runtime_log_file=os.path.join(os.path.dirname(os.path.abspath(args.config)), "runtime.log"),
    )
    settings = Settings.from_config(storage.load_config())
    storage.set_runtime_log_enabled(settings.runtime_log or args.runtime_log)

    def report_codec_failure(line: str) -> None:
        storage.append_runtime_log(line)
        err(line)

    document_url_codec.set_failure_hook(report_codec_failure)
    try:
        if args.encode:
            return run_encode(args, settings, storage)
        return run_decode(args)
    finally:
        document_url_codec.set_failure_hook(None)


if __name__ == "__main__":
    raise SystemExit(main())
