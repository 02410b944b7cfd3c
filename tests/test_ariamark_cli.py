#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import ariaMark
from document_url_codec import MODE_SPLIT, Document, decode, encode
from ariamark.fragment import token_from_url
from fakes import legacy_token


class AriaMarkCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.addCleanup(self._td.cleanup)
        self.base = Path(self._td.name)
        self.config = self.base / "config.json"
        self.config.write_text(json.dumps({"origin": "https://aria.example", "path": "/"}), encoding="utf-8")

    def _run(self, *argv: str):
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = ariaMark.main(list(argv) + ["--config", str(self.config)])
        return code, stdout.getvalue(), stderr.getvalue()

    def test_encode_prints_link(self) -> None:
        src = self.base / "note.md"
        src.write_text("# Note\nbody 😊", encoding="utf-8")
        code, stdout, stderr = self._run("--encode", str(src), "--mode", MODE_SPLIT)
        self.assertEqual(code, ariaMark.EXIT_OK)
        url = stdout.strip()
        self.assertTrue(url.startswith("https://aria.example/#"))
        self.assertEqual(decode(token_from_url(url)), Document(content="# Note\nbody 😊", mode=MODE_SPLIT))
        self.assertIn("usage:", stderr)

    def test_encode_missing_file(self) -> None:
        code, _stdout, stderr = self._run("--encode", str(self.base / "missing.md"))
        self.assertEqual(code, ariaMark.EXIT_USAGE)
        self.assertIn("cannot read", stderr)

    def test_encode_over_budget(self) -> None:
        import random
        import string

        rng = random.Random(11)
        src = self.base / "big.md"
        src.write_text("".join(rng.choice(string.ascii_letters) for _ in range(30000)), encoding="utf-8")
        code, stdout, stderr = self._run("--encode", str(src))
        self.assertEqual(code, ariaMark.EXIT_BUDGET_EXCEEDED)
        self.assertEqual(stdout, "")
        self.assertIn("URL limit reached", stderr)

    def test_decode_link(self) -> None:
        token = encode(Document(content="hello", mode="view"))
        code, stdout, stderr = self._run("--decode", f"https://aria.example/#{token}")
        self.assertEqual(code, ariaMark.EXIT_OK)
        self.assertEqual(stdout, "hello\n")
        self.assertIn("mode: Preview status: ok", stderr)

    def test_decode_legacy_token(self) -> None:
        code, stdout, stderr = self._run("--decode", legacy_token("# Hello\nWorld"))
        self.assertEqual(code, ariaMark.EXIT_OK)
        self.assertEqual(stdout, "# Hello\nWorld\n")
        self.assertIn("status: legacy", stderr)

    def test_decode_garbage(self) -> None:
        code, stdout, stderr = self._run("--decode", "https://aria.example/#not-a-token")
        self.assertEqual(code, ariaMark.EXIT_MALFORMED)
        self.assertEqual(stdout, "")
        self.assertIn("CODEC: decode failed", stderr)

    def test_runtime_log_captures_codec_failures(self) -> None:
        self._run("--decode", "#@@@@", "--runtime-log")
        log_text = (self.base / "runtime.log").read_text(encoding="utf-8")
        self.assertIn("CODEC: decode failed", log_text)

    def test_no_action_is_usage_error(self) -> None:
        code, _stdout, stderr = self._run()
        self.assertEqual(code, ariaMark.EXIT_USAGE)
        self.assertIn("usage:", stderr)

    def test_version(self) -> None:
        code, stdout, _stderr = self._run("--version")
        self.assertEqual(code, ariaMark.EXIT_OK)
        self.assertEqual(stdout.strip(), ariaMark.VERSION)


if __name__ == "__main__":
    unittest.main()
