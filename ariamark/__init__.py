#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
ariamark package

Internal modules for ariaMark.py: URL budget tracking, fragment I/O, save
debouncing, editor session glue and local settings. The token codec itself
lives in document_url_codec.py.
"""

from __future__ import annotations

VERSION = "0.3.0"
