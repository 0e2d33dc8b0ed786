import io
from pathlib import Path

import docx
import pytest
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import parse_xml
from dotenv import load_dotenv
from PIL import Image

from questiongen.documents.docx.ns import R_NS, V_NS, W_NS, WP_EXTENT, WP_INLINE, WP_NS
from questiongen.utils import debug

load_dotenv(override=False)

OPTION_TEXT = ["a) first", "b) second", "c) third", "d) fourth"]


@pytest.fixture(autouse=True)
def _quiet_debug(monkeypatch):
    monkeypatch.setattr(debug, "DEBUG", False)


def image_bytes(fmt="PNG", color=(200, 30, 30), size=(4, 4)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def float_picture(run):
    """Turn the inline picture python-docx just added to ``run`` into an anchored one."""
    inline = run._r.find(f".//{WP_INLINE}")
    anchor = parse_xml(
        f'<wp:anchor xmlns:wp="{WP_NS}" distT="0" distB="0" distL="114300" distR="114300" '
        'simplePos="0" relativeHeight="1" behindDoc="0" locked="0" layoutInCell="1" allowOverlap="1">'
        '<wp:simplePos x="0" y="0"/>'
        '<wp:positionH relativeFrom="column"><wp:posOffset>0</wp:posOffset></wp:positionH>'
        '<wp:positionV relativeFrom="paragraph"><wp:posOffset>0</wp:posOffset></wp:positionV>'
        "</wp:anchor>"
    )
    for child in list(inline):
        anchor.append(child)
        if child.tag == WP_EXTENT:
            anchor.append(parse_xml(f'<wp:wrapSquare xmlns:wp="{WP_NS}" wrapText="bothSides"/>'))
    inline.getparent().replace(inline, anchor)
    return anchor


def add_vml_picture(paragraph, blob):
    rId, _ = paragraph.part.get_or_add_image(io.BytesIO(blob))
    run = paragraph.add_run()
    run._r.append(
        parse_xml(
            f'<w:pict xmlns:w="{W_NS}" xmlns:v="{V_NS}" xmlns:r="{R_NS}">'
            '<v:shape id="legacy" style="width:10pt;height:10pt">'
            f'<v:imagedata r:id="{rId}"/>'
            "</v:shape></w:pict>"
        )
    )
    return rId


def add_hyperlink(paragraph, url, text):
    rId = paragraph.part.relate_to(url, RT.HYPERLINK, is_external=True)
    paragraph._p.append(
        parse_xml(
            f'<w:hyperlink xmlns:w="{W_NS}" xmlns:r="{R_NS}" r:id="{rId}">'
            f"<w:r><w:t>{text}</w:t></w:r></w:hyperlink>"
        )
    )
    return rId


def add_question_table(doc, index, answer="b", rows=8, picture=None, floating=False, vml=False, link=False):
    """One question fragment: header row, body row, four option rows, spare row, answer row."""
    table = doc.add_table(rows=rows, cols=2)
    texts = [("#", "subject"), (f"Question {index}", f"Body {index}")]
    texts += [(opt, f"opt {opt[0]}") for opt in OPTION_TEXT]
    texts += [(f"Note {index}", ""), (answer, "")]
    for r, row in enumerate(table.rows):
        left, right = texts[r] if r < len(texts) else ("", "")
        row.cells[0].text = left
        row.cells[1].text = right
    body_para = table.cell(1, 1).paragraphs[0]
    if picture:
        run = body_para.add_run()
        run.add_picture(io.BytesIO(image_bytes(picture, color=(10 * index, 80, 160))))
        if floating:
            float_picture(run)
    if vml:
        add_vml_picture(body_para, image_bytes())
    if link:
        add_hyperlink(body_para, "https://example.com/q", "reference")
    doc.add_paragraph("")
    return table


@pytest.fixture
def make_template(tmp_path):
    """Build a sample package from a list of per-table option dicts."""

    def _make(specs=None, name="McqSample.docx", directory=None, header_picture=False):
        specs = specs if specs is not None else [{}, {}, {}]
        doc = docx.Document()
        for index, spec in enumerate(specs, start=1):
            add_question_table(doc, index, **spec)
        if header_picture:
            header_run = doc.sections[0].header.paragraphs[0].add_run()
            header_run.add_picture(io.BytesIO(image_bytes()))
        target_dir = Path(directory) if directory is not None else tmp_path / "Question"
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        doc.save(str(path))
        return path

    return _make


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "Generated"
