"""Exam-question document assembly.

The most commonly used entry points are re-exported here so callers can
write ``from questiongen import generate_mcq``; the sub-packages hold the
document model (``documents.docx``), the generation drivers
(``generation``) and file housekeeping (``storage``).
"""

from .exceptions import (
    AssemblyStateError,
    ConfigurationError,
    GenerationError,
    PackageError,
    QuestionGenError,
)
from .generation import (
    annotate_answer_tags,
    annotate_subject_names,
    generate_mcq,
    generate_saq,
)
from .storage import sweep_expired_files

__all__ = [
    "AssemblyStateError",
    "ConfigurationError",
    "GenerationError",
    "PackageError",
    "QuestionGenError",
    "annotate_answer_tags",
    "annotate_subject_names",
    "generate_mcq",
    "generate_saq",
    "sweep_expired_files",
]
