"""WordprocessingML package model and the fragment transforms built on it."""

from .cloner import clone_fragment
from .finalizer import FinalizeReport, finalize_package
from .layout import ensure_borders, normalize_anchoring
from .package import Package, RelationshipRecord
from .validator import StructuralViolation, validate_package

__all__ = [
    "FinalizeReport",
    "Package",
    "RelationshipRecord",
    "StructuralViolation",
    "clone_fragment",
    "ensure_borders",
    "finalize_package",
    "normalize_anchoring",
    "validate_package",
]
