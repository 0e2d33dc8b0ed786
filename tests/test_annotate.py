import docx
import pytest

from questiongen.exceptions import ConfigurationError, PackageNotFoundError
from questiongen.generation.annotate import annotate_answer_tags, annotate_subject_names


def _tables(path):
    return docx.Document(str(path)).tables


def test_answer_tags_follow_exact_letter(make_template):
    upload = make_template([{"answer": "b"}, {"answer": "d) last"}, {"answer": " C "}], name="upload.docx")
    assert annotate_answer_tags(upload) == 2
    tables = _tables(upload)
    assert [c.text for c in tables[0].rows[3].cells] == ["Answer", "Answer"]
    assert [tables[1].cell(r, 0).text for r in range(2, 6)] == ["a) first", "b) second", "c) third", "d) fourth"]
    assert tables[2].cell(4, 0).text == "Answer"


def test_short_tables_are_ignored(make_template):
    upload = make_template([{"answer": "a", "rows": 7}], name="upload.docx")
    assert annotate_answer_tags(upload) == 0
    assert _tables(upload)[0].cell(2, 0).text == "a) first"


def test_blank_option_cells_stay_blank(make_template):
    upload = make_template([{"answer": "a"}], name="upload.docx")
    document = docx.Document(str(upload))
    document.tables[0].cell(2, 1).text = ""
    document.save(str(upload))

    assert annotate_answer_tags(upload) == 1
    row = _tables(upload)[0].rows[2]
    assert [c.text for c in row.cells] == ["Answer", ""]


def test_output_path_leaves_upload_untouched(make_template, tmp_path):
    upload = make_template([{"answer": "d"}], name="upload.docx")
    out = tmp_path / "marked.docx"
    annotate_answer_tags(upload, out)
    assert _tables(upload)[0].cell(5, 0).text == "d) fourth"
    assert _tables(out)[0].cell(5, 0).text == "Answer"


def test_subject_names_by_table_position(make_template):
    upload = make_template([{}, {}, {}, {}], name="upload.docx")
    assert annotate_subject_names(upload, "phy, chem", "1-1,2-3") == 3
    assert [t.cell(0, 1).text for t in _tables(upload)] == ["phy", "chem", "chem", "subject"]


def test_overlapping_ranges_use_first_match(make_template):
    upload = make_template([{}, {}, {}], name="upload.docx")
    annotate_subject_names(upload, "phy,chem", "1-2,2-3")
    assert [t.cell(0, 1).text for t in _tables(upload)] == ["phy", "phy", "chem"]


def test_subject_names_reject_mismatched_lists(make_template):
    upload = make_template([{}], name="upload.docx")
    with pytest.raises(ConfigurationError, match="must match"):
        annotate_subject_names(upload, "phy,chem", "1-2")


def test_missing_upload(tmp_path):
    with pytest.raises(PackageNotFoundError):
        annotate_answer_tags(tmp_path / "nope.docx")
