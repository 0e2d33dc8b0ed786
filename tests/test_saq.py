from datetime import datetime

import docx
import pytest
from docx.opc.constants import RELATIONSHIP_TYPE as RT

from questiongen.documents.docx.ns import w
from questiongen.documents.docx.package import Package
from questiongen.exceptions import ConfigurationError
from questiongen.generation.saq import generate_saq, needed_count, plan_units

NOW = datetime(2024, 3, 1, 9, 30, 15)
NATIVE = "পদার্থবিজ্ঞান, রসায়ন"
LATIN = "Phy,Chem"


@pytest.fixture
def saq_template(make_template):
    return make_template(name="SaqSample.docx")


def test_plan_walks_subjects_then_ranges_with_cap():
    units = list(plan_units([("n1", "l1"), ("n2", "l2")], [(1, 3), (4, 5)], cap=2))
    assert [serial for _, _, serial in units] == [1, 2, 4, 5, 1, 2, 4, 5]
    assert units[4][:2] == ("n2", "l2")
    assert needed_count(10, 19, None) == 10
    assert needed_count(10, 19, 3) == 3


def test_single_set_cells_and_name(saq_template, output_dir):
    names = generate_saq(2, NATIVE, LATIN, "1-3,4-5", cap=2, output_dir=output_dir, template=saq_template, now=NOW)
    assert names == ["SAQ_20240301_093015.docx"]
    tables = docx.Document(str(output_dir / names[0])).tables
    assert len(tables) == 8
    assert [t.cell(1, 0).text for t in tables] == ["1", "2", "4", "5"] * 2
    assert {t.cell(1, 1).text for t in tables} == {"2"}
    assert [t.cell(0, 1).text for t in tables] == ["Phy"] * 4 + ["Chem"] * 4
    assert tables[0].cell(0, 0).text == "পদার্থবিজ্ঞান"
    # serial n is cloned from template table (n - 1) % 3
    assert [t.cell(6, 0).text for t in tables[:4]] == ["Note 1", "Note 2", "Note 1", "Note 2"]


def test_native_subject_carries_right_to_left_metadata(saq_template, output_dir):
    names = generate_saq(2, NATIVE, LATIN, "1-1", output_dir=output_dir, template=saq_template, now=NOW)
    tbl = docx.Document(str(output_dir / names[0])).tables[0]
    r_pr = tbl.cell(0, 0)._tc.find(f".//{w('rPr')}")
    assert r_pr.find(w("rtl")) is not None
    assert r_pr.find(w("rFonts")).get(w("cs")) == "SutonnyMJ"
    latin = tbl.cell(0, 1)._tc.find(f".//{w('rPr')}")
    assert latin.find(w("rtl")) is None
    assert latin.find(w("lang")).get(w("val")) == "en-US"


def test_multi_set_names_and_labels(saq_template, output_dir):
    names = generate_saq(
        5, NATIVE, LATIN, "1-2", multi_set=True, set_count=2, output_dir=output_dir, template=saq_template, now=NOW
    )
    assert names == ["SAQ_Set1_20240301_093015.docx", "SAQ_Set2_20240301_093015.docx"]
    for n, name in enumerate(names, start=1):
        tables = docx.Document(str(output_dir / name)).tables
        assert len(tables) == 4
        assert all(t.cell(2, 0).text.endswith(f" [Set-{n}] ") for t in tables)


def test_compatibility_mode_15(saq_template, output_dir):
    names = generate_saq(1, NATIVE, LATIN, "1-1", output_dir=output_dir, template=saq_template, now=NOW)
    pkg = Package.open(output_dir / names[0])
    settings = pkg.related_parts(RT.SETTINGS)[0].element
    modes = [
        el.get(w("val")) for el in settings.iter(w("compatSetting")) if el.get(w("name")) == "compatibilityMode"
    ]
    assert modes == ["15"]


@pytest.mark.parametrize(
    "native,latin,sequences,cap",
    [
        ("a,b", "A", "1-2", None),
        ("a", "A", "3-1", None),
        ("a", "A", "1-2", 0),
        ("", "", "1-2", None),
    ],
)
def test_bad_requests_rejected(saq_template, output_dir, native, latin, sequences, cap):
    with pytest.raises(ConfigurationError):
        generate_saq(1, native, latin, sequences, cap=cap, output_dir=output_dir, template=saq_template)
    assert not output_dir.exists()
