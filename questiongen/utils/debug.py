"""Tagged stderr logging used across the package.

Mirrors the ``DEBUG``/``dbg`` convention of the document writers: debug lines
are gated by a module flag (seeded from ``QGEN_DEBUG``, off by default),
warnings always print.  Both go to stderr so stdout carries only results.
"""

from __future__ import annotations

import os
import sys

DEBUG = os.getenv("QGEN_DEBUG", "0").lower() not in {"", "0", "false"}


def set_debug(enabled: bool) -> None:
    global DEBUG
    DEBUG = bool(enabled)


def dbg(msg: str) -> None:
    if DEBUG:
        print(f"[DEBUG] {msg}", file=sys.stderr)


def warn(msg: str) -> None:
    print(f"[WARN] {msg}", file=sys.stderr)


__all__ = ["DEBUG", "dbg", "set_debug", "warn"]
