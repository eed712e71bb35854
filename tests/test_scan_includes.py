import pytest

from gsromtools.common import ToolError
from gsromtools.scan_includes import main, scan_file


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(directory, name, text):
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="latin-1")
    return path


def test_include_and_incbin(workdir):
    _write(workdir, "main.asm", 'INCLUDE "sub.asm"\nINCBIN "gfx/pic.2bpp"\n')
    _write(workdir, "sub.asm", 'SECTION "x", ROM0\n\tinclude "deep.asm"\n')
    _write(workdir, "deep.asm", "\tincbin \"data.bin\"\n")
    assert list(scan_file("main.asm")) == [
        "sub.asm",
        "deep.asm",
        "data.bin",
        "gfx/pic.2bpp",
    ]


def test_comments_are_skipped(workdir):
    _write(workdir, "main.asm", '; INCLUDE "hidden.asm"\nINCBIN "shown.bin"\n')
    assert list(scan_file("main.asm")) == ["shown.bin"]


def test_string_literals_are_skipped(workdir):
    _write(workdir, "main.asm", 'db "x INCLUDE y"\n')
    assert list(scan_file("main.asm")) == []


def test_token_must_stand_alone(workdir):
    _write(workdir, "main.asm", 'xINCLUDE "a.asm"\nINCLUDEx "b.asm"\nLabel:INCBIN "c.bin"\n')
    assert list(scan_file("main.asm")) == ["c.bin"]


def test_missing_include_is_ignored(workdir):
    _write(workdir, "main.asm", 'INCLUDE "absent.asm"\n')
    assert list(scan_file("main.asm")) == ["absent.asm"]


def test_missing_file_not_strict(workdir):
    assert list(scan_file("nothing.asm")) == []


def test_missing_file_strict(workdir):
    with pytest.raises(ToolError, match="Could not open file"):
        list(scan_file("nothing.asm", strict=True))


def test_missing_include_strict(workdir):
    _write(workdir, "main.asm", 'INCLUDE "absent.asm"\n')
    with pytest.raises(ToolError, match="absent.asm"):
        list(scan_file("main.asm", strict=True))


def test_no_path_warns(workdir, capsys):
    _write(workdir, "main.asm", 'INCBIN \nINCLUDE ;"x.asm"\nINCBIN "ok.bin"\n')
    assert list(scan_file("main.asm")) == ["ok.bin"]
    err = capsys.readouterr().err
    assert "main.asm: no file path after INCBIN" in err
    assert "main.asm: no file path after INCLUDE" in err


def test_main_prints_paths(workdir, capsys):
    _write(workdir, "main.asm", 'INCLUDE "a.asm"\nINCBIN "b.bin"\n')
    _write(workdir, "a.asm", "nop\n")
    assert main(["main.asm"]) == 0
    assert capsys.readouterr().out == "a.asm b.bin "


def test_main_strict_error(workdir):
    assert main(["--strict", "missing.asm"]) == 1


def test_main_usage(workdir):
    assert main([]) == 1