"""Output file names.

Names are derived from a batch timestamp (second resolution) and, for
multi-set batches, the set index.  Two batches started in the same second
collide unless the caller passes a distinct ``suffix``.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

BATCH_FORMAT = "%Y%m%d_%H%M%S"
_SAFE_SUFFIX_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def batch_id(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(BATCH_FORMAT)


def _with_suffix(stem: str, suffix: Optional[str]) -> str:
    if suffix:
        cleaned = _SAFE_SUFFIX_RE.sub("-", suffix).strip("-.")
        if cleaned:
            stem = f"{stem}_{cleaned}"
    return f"{stem}.docx"


def mcq_file_name(batch: str, set_index: int, suffix: Optional[str] = None) -> str:
    return _with_suffix(f"GeneratedQuestions_{batch}_Set{set_index}", suffix)


def saq_file_name(batch: str, set_index: int, set_count: int, suffix: Optional[str] = None) -> str:
    if set_count == 1:
        return _with_suffix(f"SAQ_{batch}", suffix)
    return _with_suffix(f"SAQ_Set{set_index}_{batch}", suffix)


__all__ = ["BATCH_FORMAT", "batch_id", "mcq_file_name", "saq_file_name"]
