"""Positional cell rewriting inside a fragment table.

Rows and cells are addressed by index among the table's direct ``w:tr`` and
the row's direct ``w:tc`` children.  An index outside the table is a no-op:
a malformed template must not abort a whole batch.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Mapping, Optional

from docx.oxml import OxmlElement
from docx.oxml.ns import qn

from ... import config
from .ns import W_P, W_T, W_TC, W_TR, clark

OPTION_LETTERS = "abcd"
ANSWER_MARKER = "Answer"


class Script(str, Enum):
    """Which font/language metadata a rewritten run carries."""

    DEFAULT = "default"
    RIGHT_TO_LEFT = "rtl"


# ── Addressing ----------------------------------------------------------------


def rows(tbl) -> List:
    return tbl.findall(W_TR)


def cells(tr) -> List:
    return tr.findall(W_TC)


def get_cell(tbl, row: int, col: int):
    table_rows = rows(tbl)
    if row < 0 or row >= len(table_rows):
        return None
    row_cells = cells(table_rows[row])
    if col < 0 or col >= len(row_cells):
        return None
    return row_cells[col]


def element_text(element, sep: str = "") -> str:
    return sep.join(t.text or "" for t in element.iter(W_T))


# ── Run construction ------------------------------------------------------------


def _run_properties(script: Script):
    r_pr = OxmlElement("w:rPr")
    fonts = OxmlElement("w:rFonts")
    lang = OxmlElement("w:lang")
    if script is Script.RIGHT_TO_LEFT:
        for attr in ("w:ascii", "w:hAnsi", "w:eastAsia", "w:cs"):
            fonts.set(qn(attr), config.NATIVE_FONT)
        language = config.NATIVE_LANG
    else:
        for attr in ("w:ascii", "w:hAnsi", "w:eastAsia"):
            fonts.set(qn(attr), config.LATIN_FONT)
        language = config.LATIN_LANG
    r_pr.append(fonts)
    if script is Script.RIGHT_TO_LEFT:
        r_pr.append(OxmlElement("w:rtl"))
    for attr in ("w:val", "w:eastAsia", "w:bidi"):
        lang.set(qn(attr), language)
    r_pr.append(lang)
    return r_pr


def make_run(text: str, script: Optional[Script] = None):
    """One ``w:r`` holding ``text`` literally, optionally with script metadata."""
    run = OxmlElement("w:r")
    if script is not None:
        run.append(_run_properties(script))
    t = OxmlElement("w:t")
    text = text or ""
    if text != text.strip():
        t.set(clark("xml:space"), "preserve")
    t.text = text
    run.append(t)
    return run


def make_paragraph(text: str, script: Optional[Script] = None):
    p = OxmlElement("w:p")
    p.append(make_run(text, script))
    return p


# ── Cell operations -------------------------------------------------------------


def _replace_cell_content(tc, text: str, script: Optional[Script]) -> None:
    for p in tc.findall(W_P):
        tc.remove(p)
    tc.append(make_paragraph(text, script))


def set_cell_text(tbl, row: int, col: int, text: str) -> bool:
    """Replace every paragraph of the cell with one plain run of ``text``."""
    tc = get_cell(tbl, row, col)
    if tc is None:
        return False
    _replace_cell_content(tc, text, None)
    return True


def set_labeled_cell_text(tbl, row: int, col: int, text: str, script: Script = Script.DEFAULT) -> bool:
    """Like ``set_cell_text`` but the run carries font/language for ``script``."""
    tc = get_cell(tbl, row, col)
    if tc is None:
        return False
    _replace_cell_content(tc, text, script)
    return True


def append_label_to_row(tbl, row: int, text: str) -> int:
    """Append a Latin run with ``text`` to the last paragraph of the row's first two cells."""
    table_rows = rows(tbl)
    if row < 0 or row >= len(table_rows):
        return 0
    touched = 0
    for tc in cells(table_rows[row])[:2]:
        paragraphs = list(tc.iter(W_P))
        if paragraphs:
            p = paragraphs[-1]
        else:
            p = OxmlElement("w:p")
            tc.append(p)
        p.append(make_run(text, Script.DEFAULT))
        touched += 1
    return touched


# ── Answer tags -----------------------------------------------------------------


def normalize_answer_token(text: Optional[str]) -> Optional[str]:
    """First option letter found anywhere in ``text`` (case-insensitive)."""
    if not text or not text.strip():
        return None
    for ch in text.strip().lower():
        if ch in OPTION_LETTERS:
            return ch
    return None


def mark_answer_row(tr, marker: str = ANSWER_MARKER, skip_blank: bool = False) -> int:
    """Overwrite the first two cells of ``tr`` with ``marker``."""
    marked = 0
    for tc in cells(tr)[:2]:
        if skip_blank and not element_text(tc).strip():
            continue
        _replace_cell_content(tc, marker, None)
        marked += 1
    return marked


def apply_answer_tag(
    tbl,
    option_rows: Mapping[str, int],
    source_row: int,
    min_rows: int,
    marker: str = ANSWER_MARKER,
) -> Optional[str]:
    """Mark the option row named by the fragment's answer row.

    The answer is read from ``source_row`` (or the last row of a shorter
    table).  Returns the letter applied, or ``None`` when the fragment is
    left unmarked.
    """
    table_rows = rows(tbl)
    if len(table_rows) < min_rows:
        return None
    answer_row = table_rows[source_row] if len(table_rows) > source_row else table_rows[-1]
    letter = normalize_answer_token(element_text(answer_row, sep=" "))
    if letter is None or letter not in option_rows:
        return None
    target = option_rows[letter]
    if target < 0 or target >= len(table_rows):
        return None
    mark_answer_row(table_rows[target], marker)
    return letter


__all__ = [
    "ANSWER_MARKER",
    "OPTION_LETTERS",
    "Script",
    "append_label_to_row",
    "apply_answer_tag",
    "cells",
    "element_text",
    "get_cell",
    "make_paragraph",
    "make_run",
    "mark_answer_row",
    "normalize_answer_token",
    "rows",
    "set_cell_text",
    "set_labeled_cell_text",
]
