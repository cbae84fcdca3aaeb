from __future__ import annotations

import io
from pathlib import Path

import pytest

from evalbridge.runner import evaluate_text, main, make_bindings
from evalbridge.types import EvalOk, HostInt, HostString


def test_make_bindings() -> None:
    assert make_bindings() == {}
    assert make_bindings("x", 3) == {"value": HostString("x"), "rowIndex": HostInt(3)}


def test_evaluate_text_honours_prefix_and_lang() -> None:
    assert evaluate_text("python:value * 2", {"value": HostInt(2)}) == EvalOk(HostInt(4))
    assert evaluate_text("value * 3", {"value": HostInt(2)}, lang="python") == EvalOk(HostInt(6))


def test_main_prints_result(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--value", " Foo ", "value.strip().lower()"])

    assert code == 0
    assert capsys.readouterr().out == "foo\n"


def test_main_accepts_equals_form_and_row_index(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--value=a", "--row-index=4", "value * rowIndex"])

    assert code == 0
    assert capsys.readouterr().out == "aaaa\n"


def test_main_reads_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    script = tmp_path / "snippet.py"
    script.write_text("parts = value.split(',')\nreturn len(parts)\n", encoding="utf-8")

    code = main(["--value", "a,b,c", str(script)])

    assert code == 0
    assert capsys.readouterr().out == "3\n"


def test_main_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("[1, 2]"))

    code = main(["-"])

    assert code == 0
    assert capsys.readouterr().out == "[1, 2]\n"


def test_main_reports_eval_error(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["1 / 0"])

    assert code == 1
    assert "ZeroDivisionError" in capsys.readouterr().err


def test_main_reports_parse_error(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["value.("])

    assert code == 1
    assert "Syntax error" in capsys.readouterr().err


def test_main_reports_unknown_language(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--lang", "cobol", "value"])

    assert code == 1
    assert "cobol" in capsys.readouterr().err


def test_main_rejects_stray_arguments() -> None:
    with pytest.raises(SystemExit, match="Unexpected argument"):
        main(["value", "extra"])


def test_main_requires_flag_values() -> None:
    with pytest.raises(SystemExit, match="--value flag requires a value"):
        main(["--value"])
