"""Post-processing passes over previously generated documents that users upload back."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..documents.docx.cells import cells, element_text, mark_answer_row, rows, set_cell_text
from ..documents.docx.package import Package
from ..utils.debug import dbg
from .contract import UPLOAD_LAYOUT, UploadLayout
from .ranges import build_label_ranges, label_for


def _answer_letter(tbl, layout: UploadLayout) -> Optional[str]:
    table_rows = rows(tbl)
    if len(table_rows) < layout.min_rows:
        return None
    answer_row = table_rows[layout.answer_key.source_row]
    answer_cells = cells(answer_row)
    if not answer_cells:
        return None
    letter = element_text(answer_cells[0]).strip().lower()
    return letter if letter in layout.answer_key.option_rows else None


def annotate_answer_tags(
    path: Path,
    output: Optional[Path] = None,
    layout: UploadLayout = UPLOAD_LAYOUT,
) -> int:
    """Mark the correct option row of every question table; returns tables marked.

    The answer cell must hold exactly one option letter.  Blank cells of the
    option row are left blank.
    """
    package = Package.open(path)
    marked = 0
    for tbl in package.fragments():
        letter = _answer_letter(tbl, layout)
        if letter is None:
            continue
        target = layout.answer_key.option_rows[letter]
        table_rows = rows(tbl)
        if target >= len(table_rows):
            continue
        if mark_answer_row(table_rows[target], layout.answer_key.marker, skip_blank=True):
            marked += 1
    package.save(output or path)
    dbg(f"answer tags applied to {marked} table(s) in {Path(path).name}")
    return marked


def annotate_subject_names(
    path: Path,
    subjects: str,
    sequences: str,
    output: Optional[Path] = None,
    layout: UploadLayout = UPLOAD_LAYOUT,
) -> int:
    """Write the subject of the k-th question table (1-based) into its subject cell."""
    subject_ranges = build_label_ranges(subjects, sequences)
    package = Package.open(path)
    labelled = 0
    for index, tbl in enumerate(package.fragments(), start=1):
        subject = label_for(index, subject_ranges)
        if subject and set_cell_text(tbl, *layout.subject, subject):
            labelled += 1
    package.save(output or path)
    dbg(f"subject names written to {labelled} table(s) in {Path(path).name}")
    return labelled


__all__ = ["annotate_answer_tags", "annotate_subject_names"]
