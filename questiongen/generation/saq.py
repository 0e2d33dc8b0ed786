"""Short-answer generation over every (subject, sequence range) pair."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from .. import config
from ..documents.docx.cells import Script, append_label_to_row, set_labeled_cell_text
from ..exceptions import ConfigurationError
from ..storage.naming import batch_id, saq_file_name
from .assembler import OutputPackage, TemplateSource, effective_set_count, run_batch
from .contract import SAQ_LAYOUT, SaqLayout, set_label
from .ranges import parse_ranges, split_list


def needed_count(start: int, end: int, cap: Optional[int]) -> int:
    size = end - start + 1
    return size if cap is None else min(size, cap)


def plan_units(
    subjects: Sequence[Tuple[str, str]],
    ranges: Sequence[Tuple[int, int]],
    cap: Optional[int],
) -> Iterator[Tuple[str, str, int]]:
    """Yield ``(native, latin, serial)`` for every unit, subjects outermost.

    Within a range serials run from its start; those past ``cap`` are skipped.
    """
    for native, latin in subjects:
        for start, end in ranges:
            for offset in range(needed_count(start, end, cap)):
                yield native, latin, start + offset


def generate_saq(
    question_mark: int,
    subjects_native: str,
    subjects_latin: str,
    sequences: str,
    cap: Optional[int] = None,
    multi_set: bool = False,
    set_count: int = 1,
    output_dir: Optional[Path] = None,
    template: Optional[Path] = None,
    name_suffix: Optional[str] = None,
    now: Optional[datetime] = None,
    layout: SaqLayout = SAQ_LAYOUT,
) -> List[str]:
    """Generate one or more SAQ documents and return their file names."""
    native = split_list(subjects_native)
    latin = split_list(subjects_latin)
    if len(native) != len(latin):
        raise ConfigurationError(
            f"Native subject list has {len(native)} item(s) but Latin list has {len(latin)}; they must match"
        )
    if not native:
        raise ConfigurationError("At least one subject is required")
    ranges = parse_ranges(sequences)
    if cap is not None and cap <= 0:
        raise ConfigurationError("cap must be at least 1 when given")
    source = TemplateSource.open(template or config.template_path("saq"))

    sets = effective_set_count(multi_set, set_count)
    batch = batch_id(now)
    names = [saq_file_name(batch, index, sets, name_suffix) for index in range(1, sets + 1)]
    subjects = list(zip(native, latin))

    def fill(output: OutputPackage, set_index: int) -> None:
        for subject_native, subject_latin, serial in plan_units(subjects, ranges, cap):
            tbl = output.clone(source, serial - 1)
            set_labeled_cell_text(tbl, *layout.native_subject, subject_native, Script.RIGHT_TO_LEFT)
            set_labeled_cell_text(tbl, *layout.latin_subject, subject_latin)
            set_labeled_cell_text(tbl, *layout.serial, str(serial))
            set_labeled_cell_text(tbl, *layout.mark, str(question_mark))
            if sets > 1:
                append_label_to_row(tbl, layout.set_label_row, set_label(set_index))
            output.append(tbl)

    out_dir = config.resolve_dir(Path(output_dir) if output_dir is not None else config.OUTPUT_DIR)
    return run_batch(out_dir, names, fill)


__all__ = ["generate_saq", "needed_count", "plan_units"]
