import io

import docx
from docx.opc.constants import RELATIONSHIP_TYPE as RT

from questiongen.documents.docx.cloner import clone_fragment
from questiongen.documents.docx.finalizer import (
    ensure_section_properties_last,
    ensure_word_defaults,
    finalize_package,
    force_compatibility_mode,
    sanitize_relationships,
    strip_header_footer_drawings,
)
from questiongen.documents.docx.ns import (
    A_BLIP,
    R_LINK,
    W_DRAWING,
    W_HYPERLINK,
    W_SECT_PR,
    WP_ANCHOR,
    WP_DOC_PR,
    w,
)
from questiongen.documents.docx.package import Package
from questiongen.documents.docx.validator import validate_package

from conftest import add_hyperlink, float_picture, image_bytes


def _codes(violations):
    return {v.code for v in violations}


def _package_with_floating_picture():
    pkg = Package(docx.Document())
    table = pkg.document.add_table(rows=1, cols=1)
    run = table.cell(0, 0).paragraphs[0].add_run()
    run.add_picture(io.BytesIO(image_bytes()))
    float_picture(run)
    return pkg


def test_validator_reports_each_violation_kind():
    pkg = _package_with_floating_picture()
    blip = next(pkg.body.iter(A_BLIP))
    blip.set(R_LINK, "rId777")
    for el in pkg.body.iter(WP_DOC_PR):
        el.set("id", "1")
    second = pkg.document.add_table(rows=1, cols=1)
    run = second.cell(0, 0).paragraphs[0].add_run()
    run.add_picture(io.BytesIO(image_bytes()))
    next(second._tbl.iter(WP_DOC_PR)).set("id", "1")
    pkg.body.remove(pkg.body.find(W_SECT_PR))

    codes = _codes(validate_package(pkg))
    assert {
        "floating-drawing",
        "linked-image",
        "dangling-reference",
        "section-properties",
        "duplicate-drawing-id",
    } <= codes


def test_section_properties_created_and_moved_last():
    pkg = Package.create_empty()
    pkg.document.add_paragraph("before")
    ensure_section_properties_last(pkg)
    sect_pr = pkg.body[-1]
    assert sect_pr.tag == W_SECT_PR
    assert sect_pr.find(w("pgSz")).get(w("w")) == "11906"
    assert sect_pr.find(w("pgMar")).get(w("top")) == "720"

    pkg.body.remove(sect_pr)
    pkg.body.insert(0, sect_pr)
    ensure_section_properties_last(pkg)
    assert pkg.body[-1] is sect_pr
    assert len(pkg.body.findall(W_SECT_PR)) == 1


def test_compatibility_mode_forced_once():
    pkg = Package.create_empty()
    force_compatibility_mode(pkg)
    force_compatibility_mode(pkg)
    settings = pkg.related_parts(RT.SETTINGS)[0].element
    modes = [
        el.get(w("val"))
        for el in settings.iter(w("compatSetting"))
        if el.get(w("name")) == "compatibilityMode"
    ]
    assert modes == ["15"]


def test_word_defaults_present():
    pkg = Package.create_empty()
    ensure_word_defaults(pkg)
    assert pkg.related_parts(RT.STYLES)
    assert pkg.related_parts(RT.SETTINGS)
    assert any(rel.reltype == RT.EXTENDED_PROPERTIES for rel in pkg.opc.rels.values())
    assert pkg.document.core_properties.created is not None


def test_header_drawings_and_their_images_removed(make_template):
    pkg = Package.open(make_template([{}], header_picture=True))
    header = pkg.header_footer_parts()[0]
    assert any(rel.reltype == RT.IMAGE for rel in header.rels.values())
    assert strip_header_footer_drawings(pkg) == 1
    assert next(header.element.iter(W_DRAWING), None) is None
    assert not any(rel.reltype == RT.IMAGE for rel in header.rels.values())


def test_sanitize_drops_external_relationships_and_blip_links():
    pkg = Package(docx.Document())
    paragraph = pkg.document.add_paragraph("visit ")
    rId = add_hyperlink(paragraph, "https://example.com", "site")
    paragraph.add_run().add_picture(io.BytesIO(image_bytes()))
    next(pkg.body.iter(A_BLIP)).set(R_LINK, "rId5")

    assert sanitize_relationships(pkg) == 1
    assert rId not in pkg.main_part.rels
    assert next(pkg.body.iter(W_HYPERLINK), None) is None
    assert paragraph.text == "visit site"
    assert next(pkg.body.iter(A_BLIP)).get(R_LINK) is None


def test_finalize_repairs_floating_pictures():
    pkg = _package_with_floating_picture()
    report = finalize_package(pkg)
    assert "floating-drawing" in _codes(report.violations)
    assert report.repaired
    assert next(pkg.body.iter(WP_ANCHOR), None) is None
    assert "floating-drawing" not in _codes(report.residual)


def test_finalized_clone_output_validates_clean(make_template, tmp_path):
    source = Package.open(
        make_template([{"picture": "PNG", "floating": True, "vml": True, "link": True}, {"picture": "GIF"}])
    )
    target = Package.create_empty()
    for tbl in source.fragments():
        target.body.append(clone_fragment(tbl, source, target))
    report = finalize_package(target)
    assert report.clean, [str(v) for v in report.residual]

    path = target.save(tmp_path / "out.docx")
    assert validate_package(Package.open(path)) == []
