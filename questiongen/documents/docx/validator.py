"""Structural checks run against a package before it is written.

Each check walks one concern and yields ``StructuralViolation`` records; an
empty report means the package satisfies every output rule.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterator, List, Sequence

from lxml import etree

from .ns import (
    A_BLIP,
    LEGACY_SHAPE_TAGS,
    R_LINK,
    W_BODY,
    W_P,
    W_SECT_PR,
    W_TBL,
    W_TBL_GRID,
    W_TC,
    WP_ANCHOR,
    WP_DOC_PR,
    WP_EXTENT,
    WP_INLINE,
    reference_attributes,
)
from .package import Package


@dataclass(frozen=True)
class StructuralViolation:
    code: str
    part: str
    message: str

    def __str__(self) -> str:
        return f"[{self.code}] {self.part}: {self.message}"


Check = Callable[[Package], Iterator[StructuralViolation]]


def _main_name(package: Package) -> str:
    return str(package.main_part.partname)


def check_floating_drawings(package: Package) -> Iterator[StructuralViolation]:
    for part in package.iter_xml_parts():
        count = sum(1 for _ in part.element.iter(WP_ANCHOR))
        if count:
            yield StructuralViolation("floating-drawing", str(part.partname), f"{count} anchored drawing(s)")


def check_legacy_shapes(package: Package) -> Iterator[StructuralViolation]:
    for part in package.iter_xml_parts():
        count = sum(1 for _ in part.element.iter(*LEGACY_SHAPE_TAGS))
        if count:
            yield StructuralViolation("legacy-shape", str(part.partname), f"{count} VML/legacy element(s)")


def check_dangling_references(package: Package) -> Iterator[StructuralViolation]:
    graph = package.relationship_graph()
    for part in package.iter_xml_parts():
        known = graph.get(str(part.partname), {})
        for el in part.element.iter(etree.Element):
            for attr, rId in reference_attributes(el):
                if rId not in known:
                    yield StructuralViolation(
                        "dangling-reference",
                        str(part.partname),
                        f"{etree.QName(el).localname}/@{etree.QName(attr).localname}={rId} has no relationship",
                    )


def check_linked_images(package: Package) -> Iterator[StructuralViolation]:
    for part in package.iter_xml_parts():
        for blip in part.element.iter(A_BLIP):
            if blip.get(R_LINK):
                yield StructuralViolation("linked-image", str(part.partname), f"blip links {blip.get(R_LINK)}")


def check_section_properties(package: Package) -> Iterator[StructuralViolation]:
    body = package.body
    children = [child for child in body if isinstance(child.tag, str)]
    sections = [child for child in children if child.tag == W_SECT_PR]
    if not sections:
        yield StructuralViolation("section-properties", _main_name(package), "body has no sectPr")
    elif len(sections) > 1 or children[-1].tag != W_SECT_PR:
        yield StructuralViolation("section-properties", _main_name(package), "sectPr is not the last body child")


def check_table_structure(package: Package) -> Iterator[StructuralViolation]:
    name = _main_name(package)
    for tbl in package.body.iter(W_TBL):
        if tbl.find(W_TBL_GRID) is None:
            yield StructuralViolation("table-structure", name, "table without tblGrid")
    for tc in package.body.iter(W_TC):
        if tc.find(W_P) is None:
            yield StructuralViolation("table-structure", name, "table cell without a paragraph")


def check_inline_drawings(package: Package) -> Iterator[StructuralViolation]:
    name = _main_name(package)
    for inline in package.body.iter(WP_INLINE):
        if inline.find(WP_EXTENT) is None or inline.find(WP_DOC_PR) is None:
            yield StructuralViolation("inline-drawing", name, "inline drawing missing extent or docPr")


def check_drawing_ids(package: Package) -> Iterator[StructuralViolation]:
    ids = Counter(el.get("id") for el in package.main_part.element.iter(WP_DOC_PR))
    for value, count in sorted(ids.items(), key=lambda item: str(item[0])):
        if count > 1:
            yield StructuralViolation("duplicate-drawing-id", _main_name(package), f"docPr id {value} used {count} times")


def check_body_present(package: Package) -> Iterator[StructuralViolation]:
    if package.main_part.element.find(W_BODY) is None:
        yield StructuralViolation("missing-body", _main_name(package), "document has no body")


CHECKS: Sequence[Check] = (
    check_body_present,
    check_floating_drawings,
    check_legacy_shapes,
    check_dangling_references,
    check_linked_images,
    check_section_properties,
    check_table_structure,
    check_inline_drawings,
    check_drawing_ids,
)


def validate_package(package: Package, checks: Sequence[Check] = CHECKS) -> List[StructuralViolation]:
    """Run ``checks`` against ``package`` and return every violation found."""
    if package.body is None:
        return list(check_body_present(package))
    violations: List[StructuralViolation] = []
    for check in checks:
        violations.extend(check(package))
    return violations


__all__ = ["CHECKS", "StructuralViolation", "validate_package"]
