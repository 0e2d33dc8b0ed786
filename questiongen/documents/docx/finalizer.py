"""Last pass over an assembled package before it is written.

``finalize_package`` makes sure the parts every word processor expects are
present, strips content that no longer renders once detached from its source
package, and runs the structural validator with one repair attempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from xml.sax.saxutils import escape

from docx.opc.constants import CONTENT_TYPE as CT
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.packuri import PackURI
from docx.opc.part import Part
from docx.oxml import OxmlElement, parse_xml
from docx.oxml.ns import qn
from docx.parts.settings import SettingsPart
from docx.parts.styles import StylesPart

from ... import config
from ...utils.debug import dbg, warn
from .layout import normalize_anchoring
from .ns import (
    A_BLIP,
    EP_NS,
    LEGACY_SHAPE_TAGS,
    R_LINK,
    VT_NS,
    W_DRAWING,
    W_NS,
    W_SECT_PR,
    clark,
    insert_before,
    reference_attributes,
    w,
)
from .package import Package
from .validator import StructuralViolation, validate_package

COMPATIBILITY_MODE = 15
WORD_COMPAT_URI = "http://schemas.microsoft.com/office/word"

PAGE_WIDTH = 11906
PAGE_HEIGHT = 16838
PAGE_MARGIN = 720

DEFAULT_FONT_SIZE = 22  # half-points

_STYLES_XML = (
    f'<w:styles xmlns:w="{W_NS}">'
    "<w:docDefaults>"
    "<w:rPrDefault><w:rPr>"
    '<w:rFonts w:ascii="{font}" w:hAnsi="{font}" w:eastAsia="{font}"/>'
    '<w:sz w:val="{size}"/>'
    "</w:rPr></w:rPrDefault>"
    "<w:pPrDefault><w:pPr/></w:pPrDefault>"
    "</w:docDefaults>"
    '<w:style w:type="paragraph" w:default="1" w:styleId="Normal">'
    '<w:name w:val="Normal"/>'
    "</w:style>"
    "</w:styles>"
)

_SETTINGS_XML = f'<w:settings xmlns:w="{W_NS}"><w:compat/></w:settings>'

_APP_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    f'<Properties xmlns="{EP_NS}" xmlns:vt="{VT_NS}">'
    "<Application>{application}</Application>"
    "</Properties>"
)

# Children of w:settings that follow w:compat in schema order.
_COMPAT_SUCCESSORS = (
    w("docVars"),
    w("rsids"),
    clark("m:mathPr"),
    w("attachedSchema"),
    w("themeFontLang"),
    w("clrSchemeMapping"),
    w("doNotIncludeSubdocsInStats"),
    w("doNotAutoCompressPictures"),
    w("forceUpgrade"),
    w("captions"),
    w("readModeInkLockDown"),
    w("smartTagType"),
    clark("sl:schemaLibrary"),
    w("shapeDefaults"),
    w("doNotEmbedSmartTags"),
    w("decimalSymbol"),
    w("listSeparator"),
)


@dataclass
class FinalizeReport:
    """What the validator said before and after the repair pass."""

    violations: List[StructuralViolation] = field(default_factory=list)
    residual: List[StructuralViolation] = field(default_factory=list)
    repaired: bool = False

    @property
    def clean(self) -> bool:
        return not self.residual


# ── Baseline parts ---------------------------------------------------------------


def _ensure_styles_part(package: Package) -> None:
    if package.related_parts(RT.STYLES):
        return
    element = parse_xml(_STYLES_XML.format(font=config.LATIN_FONT, size=DEFAULT_FONT_SIZE))
    part = StylesPart(PackURI("/word/styles.xml"), CT.WML_STYLES, element, package.opc)
    package.main_part.relate_to(part, RT.STYLES)
    dbg("added default styles part")


def _settings_part(package: Package):
    existing = package.related_parts(RT.SETTINGS)
    if existing:
        return existing[0]
    part = SettingsPart(PackURI("/word/settings.xml"), CT.WML_SETTINGS, parse_xml(_SETTINGS_XML), package.opc)
    package.main_part.relate_to(part, RT.SETTINGS)
    dbg("added settings part")
    return part


def _ensure_extended_properties(package: Package) -> None:
    opc = package.opc
    if any(rel.reltype == RT.EXTENDED_PROPERTIES for rel in opc.rels.values()):
        return
    blob = _APP_XML.format(application=escape(config.APPLICATION_NAME)).encode("utf-8")
    part = Part(PackURI("/docProps/app.xml"), CT.OFC_EXTENDED_PROPERTIES, blob, opc)
    opc.relate_to(part, RT.EXTENDED_PROPERTIES)
    dbg("added extended properties part")


def force_compatibility_mode(package: Package, mode: int = COMPATIBILITY_MODE) -> None:
    """Replace any ``compatibilityMode`` compat setting with ``mode``."""
    settings = _settings_part(package).element
    compat = settings.find(w("compat"))
    if compat is None:
        compat = OxmlElement("w:compat")
        insert_before(settings, compat, _COMPAT_SUCCESSORS)
    for setting in compat.findall(w("compatSetting")):
        if setting.get(qn("w:name")) == "compatibilityMode":
            compat.remove(setting)
    setting = OxmlElement("w:compatSetting")
    setting.set(qn("w:name"), "compatibilityMode")
    setting.set(qn("w:uri"), WORD_COMPAT_URI)
    setting.set(qn("w:val"), str(mode))
    compat.append(setting)


def ensure_word_defaults(package: Package) -> None:
    """Add the styles, settings and extended-properties parts when missing."""
    _ensure_styles_part(package)
    force_compatibility_mode(package)
    _ensure_extended_properties(package)
    core = package.document.core_properties
    if core.created is None:
        core.created = datetime.now(timezone.utc)


def _new_section_properties():
    sect_pr = OxmlElement("w:sectPr")
    size = OxmlElement("w:pgSz")
    size.set(qn("w:w"), str(PAGE_WIDTH))
    size.set(qn("w:h"), str(PAGE_HEIGHT))
    sect_pr.append(size)
    margins = OxmlElement("w:pgMar")
    for side in ("top", "right", "bottom", "left", "header", "footer"):
        margins.set(qn(f"w:{side}"), str(PAGE_MARGIN))
    margins.set(qn("w:gutter"), "0")
    sect_pr.append(margins)
    return sect_pr


def ensure_section_properties_last(package: Package) -> None:
    """Leave exactly one body-level ``w:sectPr``, as the body's last child."""
    body = package.body
    sections = body.findall(W_SECT_PR)
    if not sections:
        body.append(_new_section_properties())
        return
    keep = sections[-1]
    for extra in sections[:-1]:
        body.remove(extra)
    if body[-1] is not keep:
        body.remove(keep)
        body.append(keep)


# ── Auxiliary-part cleanup -------------------------------------------------------


def _drop_unreferenced_images(package: Package, part) -> int:
    used = {value for el in part.element.iter() if isinstance(el.tag, str) for _, value in reference_attributes(el)}
    dropped = 0
    for rId, rel in list(part.rels.items()):
        if rel.reltype == RT.IMAGE and rId not in used:
            package.drop_relationship(part, rId)
            dropped += 1
    return dropped


def strip_header_footer_drawings(package: Package) -> int:
    """Remove drawings and legacy shapes from headers and footers."""
    removed = 0
    for part in package.header_footer_parts():
        tags = (W_DRAWING,) + LEGACY_SHAPE_TAGS
        victims = [
            el for el in part.element.iter(*tags) if next(el.iterancestors(*tags), None) is None
        ]
        for el in victims:
            el.getparent().remove(el)
        orphans = _drop_unreferenced_images(package, part)
        if victims or orphans:
            dbg(f"{part.partname}: removed {len(victims)} drawing(s), {orphans} image relationship(s)")
        removed += len(victims)
    return removed


def sanitize_relationships(package: Package) -> int:
    """Delete hyperlink/external relationships of the main part and clear blip links everywhere."""
    main = package.main_part
    dropped = 0
    for rId, rel in list(main.rels.items()):
        if rel.is_external or rel.reltype == RT.HYPERLINK:
            package.drop_relationship(main, rId)
            dropped += 1
    for part in package.iter_xml_parts():
        for blip in part.element.iter(A_BLIP):
            blip.attrib.pop(R_LINK, None)
    if dropped:
        dbg(f"dropped {dropped} hyperlink/external relationship(s)")
    return dropped


# ── Entry point ------------------------------------------------------------------


def finalize_package(package: Package, repair: bool = True) -> FinalizeReport:
    """Bring ``package`` into its output shape, validate, and repair once.

    Residual violations after the repair pass are logged, not raised; the
    caller saves the package either way.
    """
    ensure_word_defaults(package)
    ensure_section_properties_last(package)
    strip_header_footer_drawings(package)
    sanitize_relationships(package)

    report = FinalizeReport(violations=validate_package(package))
    report.residual = list(report.violations)
    if report.violations and repair:
        for violation in report.violations:
            dbg(f"validator: {violation}")
        normalize_anchoring(package.body)
        report.repaired = True
        report.residual = validate_package(package)
    for violation in report.residual:
        warn(f"Unrepaired structural violation: {violation}")
    return report


__all__ = [
    "COMPATIBILITY_MODE",
    "FinalizeReport",
    "ensure_section_properties_last",
    "ensure_word_defaults",
    "finalize_package",
    "force_compatibility_mode",
    "sanitize_relationships",
    "strip_header_footer_drawings",
]
