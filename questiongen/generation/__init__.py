"""Generation drivers: label ranges, layout contracts, the assembler and both modes."""

from .annotate import annotate_answer_tags, annotate_subject_names
from .mcq import generate_mcq
from .saq import generate_saq

__all__ = [
    "annotate_answer_tags",
    "annotate_subject_names",
    "generate_mcq",
    "generate_saq",
]
