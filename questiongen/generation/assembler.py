"""Document assembly: one output package at a time, fragment by fragment.

An ``OutputPackage`` moves through ``EMPTY -> FILLING -> FINALIZING -> SAVED``.
``run_batch`` builds the packages of a batch strictly one after another, so
at most one output package is held in memory at any time.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..documents.docx.cells import make_paragraph
from ..documents.docx.cloner import clone_fragment
from ..documents.docx.finalizer import FinalizeReport, finalize_package
from ..documents.docx.layout import ensure_borders, normalize_anchoring
from ..documents.docx.package import Package
from ..exceptions import (
    AssemblyStateError,
    ConfigurationError,
    GenerationError,
    PackageError,
)
from ..utils.debug import dbg

SEPARATOR_TEXT = " "


class AssemblyState(Enum):
    EMPTY = "empty"
    FILLING = "filling"
    FINALIZING = "finalizing"
    SAVED = "saved"


class TemplateSource:
    """The sample package and its question fragments, opened once per batch."""

    def __init__(self, package: Package) -> None:
        self.package = package
        self.fragments = package.fragments()
        if not self.fragments:
            name = package.path.name if package.path else "template"
            raise ConfigurationError(f"No question tables found in {name}")

    @classmethod
    def open(cls, path: Path) -> "TemplateSource":
        try:
            package = Package.open(path)
        except PackageError as exc:
            raise ConfigurationError(str(exc)) from exc
        source = cls(package)
        dbg(f"template {Path(path).name}: {len(source.fragments)} fragment(s)")
        return source

    def __len__(self) -> int:
        return len(self.fragments)

    def fragment(self, index: int):
        """Fragment for zero-based output position ``index``, cycling through the template."""
        return self.fragments[index % len(self.fragments)]


class OutputPackage:
    """One generated document and the state of its construction."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.package = Package.create_empty(self.path)
        self.state = AssemblyState.EMPTY
        self.fragment_count = 0
        self.report: Optional[FinalizeReport] = None

    @property
    def file_name(self) -> str:
        return self.path.name

    def _advance(self, allowed: Sequence[AssemblyState], new_state: AssemblyState) -> None:
        if self.state not in allowed:
            raise AssemblyStateError(
                f"{self.file_name}: cannot move from {self.state.value} to {new_state.value}"
            )
        self.state = new_state

    def clone(self, template: TemplateSource, index: int):
        """Clone and normalize the template fragment for output position ``index``."""
        if self.state not in (AssemblyState.EMPTY, AssemblyState.FILLING):
            raise AssemblyStateError(f"{self.file_name}: cannot add fragments once {self.state.value}")
        tbl = clone_fragment(template.fragment(index), template.package, self.package)
        normalize_anchoring(tbl)
        ensure_borders(tbl)
        return tbl

    def append(self, tbl) -> None:
        """Append a finished fragment followed by a blank separator paragraph."""
        self._advance((AssemblyState.EMPTY, AssemblyState.FILLING), AssemblyState.FILLING)
        body = self.package.body
        body.append(tbl)
        body.append(make_paragraph(SEPARATOR_TEXT))
        self.fragment_count += 1

    def finalize(self) -> FinalizeReport:
        self._advance((AssemblyState.FILLING,), AssemblyState.FINALIZING)
        self.report = finalize_package(self.package)
        return self.report

    def save(self) -> Path:
        self._advance((AssemblyState.FINALIZING,), AssemblyState.SAVED)
        return self.package.save(self.path)


FillFunction = Callable[[OutputPackage, int], None]


def run_batch(output_dir: Path, file_names: Sequence[str], fill: FillFunction) -> List[str]:
    """Build, finalize and save one package per name; ``fill`` gets the 1-based set index.

    A failure aborts the batch with ``GenerationError`` listing the files
    that were completely written before it.
    """
    output_dir = Path(output_dir)
    completed: List[str] = []
    for set_index, name in enumerate(file_names, start=1):
        try:
            output = OutputPackage(output_dir / name)
            fill(output, set_index)
            output.finalize()
            output.save()
        except (PackageError, OSError) as exc:
            raise GenerationError(f"Failed to generate {name}: {exc}", completed_files=completed) from exc
        dbg(f"{name}: {output.fragment_count} fragment(s)")
        completed.append(name)
    return completed


def effective_set_count(multi_set: bool, set_count: int) -> int:
    return max(1, set_count) if multi_set else 1


__all__ = [
    "AssemblyState",
    "OutputPackage",
    "SEPARATOR_TEXT",
    "TemplateSource",
    "effective_set_count",
    "run_batch",
]
