import importlib
import json
from pathlib import Path

import docx
import pytest

from questiongen import cli, config
from questiongen.utils import debug


def _produced(capsys):
    return json.loads(capsys.readouterr().out)


def test_mcq_command(make_template, output_dir, capsys):
    template = make_template()
    cli.main(
        [
            "--no-debug",
            "mcq",
            "--count",
            "2",
            "--subjects",
            "phy",
            "--sequences",
            "1-2",
            "--sets",
            "2",
            "--template",
            str(template),
            "--output-dir",
            str(output_dir),
        ]
    )
    names = _produced(capsys)
    assert len(names) == 2
    assert all((output_dir / name).is_file() for name in names)
    assert names[1].endswith("_Set2.docx")


def test_saq_command(make_template, output_dir, capsys):
    template = make_template(name="SaqSample.docx")
    cli.main(
        [
            "saq",
            "--marks",
            "3",
            "--subjects-native",
            "পদার্থবিজ্ঞান",
            "--subjects-latin",
            "Phy",
            "--sequences",
            "1-4",
            "--cap",
            "2",
            "--template",
            str(template),
            "--output-dir",
            str(output_dir),
        ]
    )
    names = _produced(capsys)
    assert names[0].startswith("SAQ_")
    assert len(docx.Document(str(output_dir / names[0])).tables) == 2


def test_bad_range_exits_with_error(make_template, output_dir, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            [
                "mcq",
                "--count",
                "2",
                "--subjects",
                "phy",
                "--sequences",
                "5-3",
                "--template",
                str(make_template()),
                "--output-dir",
                str(output_dir),
            ]
        )
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("Error:")
    assert not output_dir.exists()


def test_answer_tags_command_writes_copy(make_template, tmp_path, capsys):
    upload = make_template([{"answer": "c"}], name="upload.docx")
    out = tmp_path / "marked.docx"
    cli.main(["answer-tags", str(upload), "-o", str(out)])
    assert _produced(capsys) == ["marked.docx"]
    assert docx.Document(str(out)).tables[0].cell(4, 0).text == "Answer"


def test_subject_names_command(make_template, capsys):
    upload = make_template([{}, {}], name="upload.docx")
    cli.main(["subject-names", str(upload), "--subjects", "bio", "--sequences", "1-2"])
    assert _produced(capsys) == ["upload.docx"]
    assert [t.cell(0, 1).text for t in docx.Document(str(upload)).tables] == ["bio", "bio"]


def test_cleanup_command(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "OUTPUT_DIR", Path("Generated"))
    monkeypatch.setattr(config, "UPLOAD_DIR", Path("Uploads"))
    (tmp_path / "Generated").mkdir()
    (tmp_path / "Generated" / "x.docx").write_bytes(b"x")
    cli.main(["cleanup", "--max-age-minutes", "-1"])
    assert _produced(capsys) == ["x.docx"]


def test_debug_output_stays_off_stdout(make_template, output_dir, capsys):
    cli.main(
        [
            "--debug",
            "mcq",
            "--count",
            "1",
            "--subjects",
            "phy",
            "--sequences",
            "1-1",
            "--template",
            str(make_template()),
            "--output-dir",
            str(output_dir),
        ]
    )
    captured = capsys.readouterr()
    assert json.loads(captured.out) == [p.name for p in output_dir.iterdir()]
    assert "[DEBUG]" in captured.err


def test_debug_is_off_by_default(monkeypatch):
    monkeypatch.delenv("QGEN_DEBUG", raising=False)
    reloaded = importlib.reload(debug)
    try:
        assert reloaded.DEBUG is False
    finally:
        importlib.reload(debug)
