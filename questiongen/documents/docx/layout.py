"""Force one layout convention onto cloned fragments.

Pictures end up inline with text and zero spacing, legacy VML markup is
deleted, and every table carries the same single-line border spec.
"""

from __future__ import annotations

from docx.oxml import OxmlElement
from docx.oxml.ns import qn

from .ns import (
    A_GRAPHIC,
    LEGACY_SHAPE_TAGS,
    W_DRAWING,
    W_TBL_BORDERS,
    W_TBL_PR,
    WP_ANCHOR,
    WP_DOC_PR,
    WP_EXTENT,
    WP_INLINE,
    insert_before,
    w,
)

BORDER_STYLE = "single"
BORDER_SIZE = "8"
BORDER_EDGES = ("top", "left", "bottom", "right", "insideH", "insideV")

# Children of w:tblPr that must come after w:tblBorders.
_TBL_BORDERS_SUCCESSORS = tuple(
    w(tag) for tag in ("shd", "tblLayout", "tblCellMar", "tblLook", "tblCaption", "tblDescription", "tblPrChange")
)
_DIST_ATTRS = ("distT", "distB", "distL", "distR")


def strip_legacy_shapes(root) -> int:
    """Delete VML shapes, picture wrappers and embedded objects under ``root``."""
    victims = [
        el
        for el in root.iter(*LEGACY_SHAPE_TAGS)
        if next(el.iterancestors(*LEGACY_SHAPE_TAGS), None) is None
    ]
    for el in victims:
        el.getparent().remove(el)
    return len(victims)


def _zero_effect_extent():
    effect = OxmlElement("wp:effectExtent")
    for side in ("l", "t", "r", "b"):
        effect.set(side, "0")
    return effect


def anchor_to_inline(anchor):
    """Build an inline placement carrying the anchor's size, identity and graphic.

    Returns ``None`` when the anchor has no graphic to carry over.
    """
    graphic = anchor.find(A_GRAPHIC)
    if graphic is None:
        return None
    extent = anchor.find(WP_EXTENT)
    doc_pr = anchor.find(WP_DOC_PR)

    inline = OxmlElement("wp:inline")
    for attr in _DIST_ATTRS:
        inline.set(attr, "0")

    size = OxmlElement("wp:extent")
    size.set("cx", extent.get("cx", "0") if extent is not None else "0")
    size.set("cy", extent.get("cy", "0") if extent is not None else "0")
    inline.append(size)
    inline.append(_zero_effect_extent())

    identity = OxmlElement("wp:docPr")
    identity.set("id", (doc_pr.get("id") if doc_pr is not None else None) or "1")
    identity.set("name", (doc_pr.get("name") if doc_pr is not None else None) or "Picture")
    if doc_pr is not None and doc_pr.get("descr"):
        identity.set("descr", doc_pr.get("descr"))
    inline.append(identity)

    frame = OxmlElement("wp:cNvGraphicFramePr")
    locks = OxmlElement("a:graphicFrameLocks")
    locks.set("noChangeAspect", "1")
    frame.append(locks)
    inline.append(frame)

    inline.append(graphic)
    return inline


def _zero_inline_spacing(inline) -> None:
    for attr in _DIST_ATTRS:
        inline.set(attr, "0")


def normalize_anchoring(root) -> int:
    """Rewrite every floating picture under ``root`` as an inline one.

    Legacy shapes are deleted first.  Existing inline pictures get their
    spacing zeroed.  Returns the number of anchors converted.
    """
    strip_legacy_shapes(root)
    converted = 0
    for anchor in list(root.iter(WP_ANCHOR)):
        parent = anchor.getparent()
        if parent is None:
            continue
        inline = anchor_to_inline(anchor)
        if inline is None:
            drawing = anchor if parent.tag != W_DRAWING else parent
            drawing.getparent().remove(drawing)
            continue
        parent.replace(anchor, inline)
        converted += 1
    for inline in root.iter(WP_INLINE):
        _zero_inline_spacing(inline)
    return converted


def ensure_borders(tbl) -> None:
    """Overwrite the table's border spec with a single line on all six edges."""
    tbl_pr = tbl.find(W_TBL_PR)
    if tbl_pr is None:
        tbl_pr = OxmlElement("w:tblPr")
        tbl.insert(0, tbl_pr)
    existing = tbl_pr.find(W_TBL_BORDERS)
    if existing is not None:
        tbl_pr.remove(existing)

    borders = OxmlElement("w:tblBorders")
    for edge in BORDER_EDGES:
        border = OxmlElement(f"w:{edge}")
        border.set(qn("w:val"), BORDER_STYLE)
        border.set(qn("w:sz"), BORDER_SIZE)
        border.set(qn("w:space"), "0")
        border.set(qn("w:color"), "auto")
        borders.append(border)
    insert_before(tbl_pr, borders, _TBL_BORDERS_SUCCESSORS)


__all__ = [
    "BORDER_EDGES",
    "anchor_to_inline",
    "ensure_borders",
    "normalize_anchoring",
    "strip_legacy_shapes",
]
