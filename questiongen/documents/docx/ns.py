"""Namespace URIs and Clark-notation tag names for WordprocessingML parts.

python-docx's ``qn`` only knows a fixed prefix table (no VML, no markup
compatibility), so the tags the normalizers hunt for are spelled out here.
"""

from __future__ import annotations

from typing import Iterable

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
WP_NS = "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
PIC_NS = "http://schemas.openxmlformats.org/drawingml/2006/picture"
V_NS = "urn:schemas-microsoft-com:vml"
O_NS = "urn:schemas-microsoft-com:office:office"
MC_NS = "http://schemas.openxmlformats.org/markup-compatibility/2006"
M_NS = "http://schemas.openxmlformats.org/officeDocument/2006/math"
SL_NS = "http://schemas.openxmlformats.org/schemaLibrary/2006/main"
XML_NS = "http://www.w3.org/XML/1998/namespace"
EP_NS = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"
VT_NS = "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"

NSMAP = {
    "w": W_NS,
    "r": R_NS,
    "wp": WP_NS,
    "a": A_NS,
    "pic": PIC_NS,
    "v": V_NS,
    "o": O_NS,
    "mc": MC_NS,
    "m": M_NS,
    "sl": SL_NS,
}


def clark(prefixed: str) -> str:
    """``"w:tbl"`` -> ``"{http://...}tbl"`` using the extended prefix table."""
    prefix, local = prefixed.split(":", 1)
    if prefix == "xml":
        return f"{{{XML_NS}}}{local}"
    return f"{{{NSMAP[prefix]}}}{local}"


def w(local: str) -> str:
    return f"{{{W_NS}}}{local}"


# Body structure
W_BODY = w("body")
W_TBL = w("tbl")
W_TBL_PR = w("tblPr")
W_TBL_GRID = w("tblGrid")
W_TBL_BORDERS = w("tblBorders")
W_TR = w("tr")
W_TC = w("tc")
W_P = w("p")
W_R = w("r")
W_T = w("t")
W_RPR = w("rPr")
W_SECT_PR = w("sectPr")
W_HYPERLINK = w("hyperlink")

# Drawings and legacy shapes
W_DRAWING = w("drawing")
W_PICT = w("pict")
W_OBJECT = w("object")
WP_ANCHOR = f"{{{WP_NS}}}anchor"
WP_INLINE = f"{{{WP_NS}}}inline"
WP_EXTENT = f"{{{WP_NS}}}extent"
WP_DOC_PR = f"{{{WP_NS}}}docPr"
A_GRAPHIC = f"{{{A_NS}}}graphic"
A_BLIP = f"{{{A_NS}}}blip"
A_EXT_LST = f"{{{A_NS}}}extLst"
V_SHAPE = f"{{{V_NS}}}shape"
V_IMAGEDATA = f"{{{V_NS}}}imagedata"

R_EMBED = f"{{{R_NS}}}embed"
R_LINK = f"{{{R_NS}}}link"
R_ID = f"{{{R_NS}}}id"

LEGACY_SHAPE_TAGS = (V_SHAPE, V_IMAGEDATA, W_PICT, W_OBJECT)


def insert_before(parent, child, successors: Iterable[str]) -> None:
    """Insert ``child`` ahead of the first existing successor tag, else append.

    ``successors`` are Clark names listed in schema order after ``child``.
    """
    successor_set = set(successors)
    for index, existing in enumerate(parent):
        if existing.tag in successor_set:
            parent.insert(index, child)
            return
    parent.append(child)


def reference_attributes(element):
    """Yield ``(attribute_name, rId)`` pairs naming relationships on ``element``."""
    prefix = f"{{{R_NS}}}"
    for name, value in element.attrib.items():
        if name.startswith(prefix) and value:
            yield name, value
