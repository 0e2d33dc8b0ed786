"""Multiple-choice generation: ``question_count`` numbered questions per set."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .. import config
from ..documents.docx.cells import append_label_to_row, apply_answer_tag, set_cell_text
from ..exceptions import ConfigurationError
from ..storage.naming import batch_id, mcq_file_name
from .assembler import OutputPackage, TemplateSource, effective_set_count, run_batch
from .contract import MCQ_LAYOUT, McqLayout, set_label
from .ranges import build_label_ranges, label_for


def generate_mcq(
    question_count: int,
    subjects: str,
    sequences: str,
    include_answer_tags: bool = False,
    multi_set: bool = False,
    set_count: int = 1,
    output_dir: Optional[Path] = None,
    template: Optional[Path] = None,
    name_suffix: Optional[str] = None,
    now: Optional[datetime] = None,
    layout: McqLayout = MCQ_LAYOUT,
) -> List[str]:
    """Generate one or more MCQ documents and return their file names.

    Question ``q`` (1-based) is cloned from template table ``(q - 1) mod n``
    and labelled with the subject of the first range containing ``q``.
    """
    if question_count <= 0:
        raise ConfigurationError("question_count must be at least 1")
    subject_ranges = build_label_ranges(subjects, sequences)
    source = TemplateSource.open(template or config.template_path("mcq"))

    sets = effective_set_count(multi_set, set_count)
    batch = batch_id(now)
    names = [mcq_file_name(batch, index, name_suffix) for index in range(1, sets + 1)]
    answer_key = layout.answer_key

    def fill(output: OutputPackage, set_index: int) -> None:
        for q in range(1, question_count + 1):
            tbl = output.clone(source, q - 1)
            set_cell_text(tbl, *layout.serial, str(q))
            set_cell_text(tbl, *layout.subject, label_for(q, subject_ranges))
            if include_answer_tags:
                apply_answer_tag(
                    tbl,
                    answer_key.option_rows,
                    answer_key.source_row,
                    answer_key.min_rows,
                    answer_key.marker,
                )
            if sets > 1:
                append_label_to_row(tbl, layout.set_label_row, set_label(set_index))
            output.append(tbl)

    out_dir = config.resolve_dir(Path(output_dir) if output_dir is not None else config.OUTPUT_DIR)
    return run_batch(out_dir, names, fill)


__all__ = ["generate_mcq"]
