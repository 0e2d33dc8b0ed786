"""Parse ``label`` / ``start-end`` lists into ordered label ranges."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..exceptions import ConfigurationError
from ..utils.debug import dbg

_RANGE_RE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


@dataclass(frozen=True)
class LabelRange:
    """Serial numbers ``start..end`` (inclusive, 1-based) carry ``label``."""

    label: str
    start: int
    end: int

    def __contains__(self, serial: int) -> bool:
        return self.start <= serial <= self.end

    @property
    def size(self) -> int:
        return self.end - self.start + 1


def split_list(text: Optional[str]) -> List[str]:
    """Comma-separated values, trimmed, blanks dropped."""
    return [item.strip() for item in (text or "").split(",") if item.strip()]


def parse_range(token: str) -> Tuple[int, int]:
    match = _RANGE_RE.match(token or "")
    if not match:
        raise ConfigurationError(f'Invalid range "{token}"; expected something like 1-25')
    start, end = int(match.group(1)), int(match.group(2))
    if start <= 0 or end < start:
        raise ConfigurationError(f'Invalid range "{token}"; start must be positive and not exceed end')
    return start, end


def parse_ranges(text: Optional[str]) -> List[Tuple[int, int]]:
    tokens = split_list(text)
    if not tokens:
        raise ConfigurationError("At least one range is required")
    return [parse_range(token) for token in tokens]


def build_label_ranges(labels: Optional[str], ranges: Optional[str]) -> List[LabelRange]:
    """Zip a label list with a range list of the same length."""
    names = split_list(labels)
    tokens = split_list(ranges)
    if len(names) != len(tokens):
        raise ConfigurationError(
            f"Label list has {len(names)} item(s) but range list has {len(tokens)}; they must match"
        )
    if not names:
        raise ConfigurationError("At least one label and range are required")
    result = []
    for name, token in zip(names, tokens):
        start, end = parse_range(token)
        result.append(LabelRange(name, start, end))
    return result


def label_for(serial: int, ranges: Sequence[LabelRange]) -> str:
    """Label of the first range containing ``serial``; empty when none does."""
    for label_range in ranges:
        if serial in label_range:
            return label_range.label
    dbg(f"no label range covers {serial}")
    return ""


__all__ = [
    "LabelRange",
    "build_label_ranges",
    "label_for",
    "parse_range",
    "parse_ranges",
    "split_list",
]
