"""Fragment layout contracts.

Every template question is a table of fixed shape; the generators address
cells by position.  The coordinates live here, in one place, so a template
change is a one-line edit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

Cell = Tuple[int, int]


def _option_rows() -> Dict[str, int]:
    return {"a": 2, "b": 3, "c": 4, "d": 5}


@dataclass(frozen=True)
class AnswerKeyLayout:
    """Where the correct option is written and which row each option occupies."""

    source_row: int = 7
    min_rows: int = 6
    option_rows: Dict[str, int] = field(default_factory=_option_rows)
    marker: str = "Answer"


@dataclass(frozen=True)
class McqLayout:
    serial: Cell = (0, 0)
    subject: Cell = (0, 1)
    set_label_row: int = 1
    answer_key: AnswerKeyLayout = field(default_factory=AnswerKeyLayout)


@dataclass(frozen=True)
class SaqLayout:
    native_subject: Cell = (0, 0)
    latin_subject: Cell = (0, 1)
    serial: Cell = (1, 0)
    mark: Cell = (1, 1)
    set_label_row: int = 2


@dataclass(frozen=True)
class UploadLayout:
    """Layout of already generated documents that users upload back."""

    subject: Cell = (0, 1)
    min_rows: int = 8
    answer_key: AnswerKeyLayout = field(default_factory=AnswerKeyLayout)


MCQ_LAYOUT = McqLayout()
SAQ_LAYOUT = SaqLayout()
UPLOAD_LAYOUT = UploadLayout()


def set_label(set_index: int) -> str:
    return f" [Set-{set_index}] "


__all__ = [
    "AnswerKeyLayout",
    "MCQ_LAYOUT",
    "McqLayout",
    "SAQ_LAYOUT",
    "SaqLayout",
    "UPLOAD_LAYOUT",
    "UploadLayout",
    "set_label",
]
