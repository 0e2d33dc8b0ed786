"""Exception hierarchy shared by the document assembly pipeline."""

from __future__ import annotations

from typing import List, Optional


class QuestionGenError(Exception):
    """Base class for generation failures."""


class ConfigurationError(QuestionGenError):
    """Raised when request values or the template location are unusable.

    Always raised before any output package is created.
    """


class PackageError(QuestionGenError):
    """Base class for compound-document package failures."""


class PackageNotFoundError(PackageError):
    """Raised when a package path does not exist."""


class MalformedPackageError(PackageError):
    """Raised when a file exists but is not a readable word-processing package."""


class PackageSaveError(PackageError):
    """Raised when writing a package to disk fails."""


class PackageValidationError(PackageError):
    """Raised when a package is structurally unfit to be saved at all."""


class AssemblyStateError(QuestionGenError):
    """Raised on an illegal output-package state transition."""


class GenerationError(QuestionGenError):
    """Raised when one output package of a batch cannot be produced.

    ``completed_files`` lists the packages that were fully written before the
    failure so callers never mistake a partial batch for a complete one.
    """

    def __init__(self, message: str, completed_files: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.completed_files: List[str] = list(completed_files or [])
