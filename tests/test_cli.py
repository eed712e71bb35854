import pytest

from gsromtools.lz.cli import (
    Options,
    compressor_list_text,
    find_compressor,
    get_options,
    main,
    usage_text,
)
from gsromtools.lz.commands import COMPRESSION_METHODS, LZError


def test_defaults_with_input_and_output():
    options = get_options(["in.bin", "out.lz"])
    assert options == Options(input="in.bin", output="out.lz", method=COMPRESSION_METHODS)


@pytest.mark.parametrize(
    "flag, mode",
    [("-t", 1), ("--text", 1), ("-b", 0), ("--binary", 0), ("-u", 2), ("--uncompress", 2), ("-d", 3), ("--dump", 3)],
)
def test_modes(flag, mode):
    assert get_options([flag, "file"]).mode == mode


def test_last_mode_wins():
    assert get_options(["-t", "-u", "x"]).mode == 2


def test_alignment_short_and_long():
    assert get_options(["-a4", "x"]).alignment == 4
    assert get_options(["--align", "4", "x"]).alignment == 4


def test_alignment_out_of_range():
    with pytest.raises(LZError) as info:
        get_options(["-a13", "x"])
    assert info.value.code == 3
    assert "between 0 and 12" in str(info.value)


def test_method_option():
    assert get_options(["-m5", "x"]).method == 5
    assert get_options(["--method", "95", "x"]).method == 95


def test_method_out_of_range():
    with pytest.raises(LZError) as info:
        get_options(["-m96", "x"])
    assert info.value.code == 3


def test_negative_method_rejected():
    with pytest.raises(LZError, match="between 0 and 95"):
        get_options(["-m-1", "x"])


def test_invalid_numeric_argument():
    with pytest.raises(LZError, match="invalid argument to option -a"):
        get_options(["-aX", "x"])


def test_missing_argument():
    with pytest.raises(LZError, match="option --align requires an argument"):
        get_options(["--align"])
    with pytest.raises(LZError, match="option -m requires an argument"):
        get_options(["-m", "x"])


def test_compressor_relative_method():
    assert get_options(["-cnull", "-m1", "x"]).method == 73
    assert get_options(["--compressor", "multipass", "x"]).method == 80
    assert get_options(["-cr", "x"]).method == 74
    assert get_options(["-cs", "x"]).method == 0


def test_compressor_method_out_of_range():
    with pytest.raises(LZError, match="method for the null compressor must be between 0 and 1"):
        get_options(["-cnull", "-m2", "x"])


def test_any_compressor_keeps_default():
    assert get_options(["-c*", "x"]).method == COMPRESSION_METHODS


def test_optimize_resets_method_and_compressor():
    options = get_options(["-cnull", "-m1", "-o", "x"])
    assert options.method == COMPRESSION_METHODS


def test_unknown_compressor():
    with pytest.raises(LZError, match="unknown compressor: xyz"):
        get_options(["-cxyz", "x"])


def test_find_compressor():
    assert find_compressor("mu") == 3
    assert find_compressor("null") == 1
    assert find_compressor("*") is None


def test_double_dash_ends_options():
    assert get_options(["--", "-x"]).input == "-x"


def test_dash_means_standard_streams():
    options = get_options(["-", "out"])
    assert options.input is None
    assert options.output == "out"
    options = get_options(["in", "-"])
    assert options.input == "in"
    assert options.output is None


def test_too_many_arguments():
    with pytest.raises(LZError, match="too many command-line arguments"):
        get_options(["a", "b", "c"])


def test_unknown_option():
    with pytest.raises(LZError) as info:
        get_options(["-z"])
    assert info.value.code == 3
    assert str(info.value) == "unknown option: -z"


def test_usage_text():
    text = usage_text("lzcomp")
    assert text.startswith("Usage: lzcomp [<options>] [<source file> [<output>]]\n")
    assert "Valid method numbers are between 0 and 95." in text


def test_compressor_list_text():
    lines = compressor_list_text().splitlines()
    assert lines[0].split() == ["Compressor", "Offset", "Methods"]
    rows = [line.split() for line in lines[2:6]]
    assert rows == [
        ["singlepass", "0", "72"],
        ["null", "72", "2"],
        ["repetitions", "74", "6"],
        ["multipass", "80", "16"],
    ]


def test_main_without_arguments_prints_usage(capsys):
    assert main([]) == 3
    assert "Usage:" in capsys.readouterr().err


def test_main_help_and_list(capsys):
    assert main(["-?"]) == 3
    assert "Execution mode:" in capsys.readouterr().err
    assert main(["-l"]) == 3
    assert "multipass" in capsys.readouterr().err


def test_main_reports_option_error(capsys):
    assert main(["-q"]) == 3
    assert capsys.readouterr().err == "error: unknown option: -q\n"


@pytest.mark.parametrize("method", [[], ["-m72"], ["-cmulti", "-m3"], ["-crep", "-m5"], ["-m10"]])
def test_compress_then_uncompress_round_trip(tmp_path, method):
    data = b"hello hello hello\x00\x00\x00\x00\xaa\xaa\xaa\xaa" + bytes(range(40))
    source = tmp_path / "in.bin"
    source.write_bytes(data)
    packed = tmp_path / "out.lz"
    restored = tmp_path / "back.bin"
    assert main([*method, str(source), str(packed)]) == 0
    assert packed.read_bytes().find(b"\xff") >= 0
    assert main(["-u", str(packed), str(restored)]) == 0
    assert restored.read_bytes() == data


def test_alignment_pads_binary_output(tmp_path):
    source = tmp_path / "in.bin"
    source.write_bytes(b"abcabcabcabc" * 5)
    packed = tmp_path / "out.lz"
    assert main(["-a3", str(source), str(packed)]) == 0
    assert len(packed.read_bytes()) % 8 == 0


def test_dump_matches_text_output(tmp_path):
    source = tmp_path / "in.bin"
    source.write_bytes(b"\x01\x02\x03\x01\x02\x03\x01\x02\x03" + bytes(20) + b"xyzxyz")
    packed = tmp_path / "out.lz"
    text = tmp_path / "out.asm"
    dump = tmp_path / "dump.asm"
    assert main(["-a2", str(source), str(packed)]) == 0
    assert main(["-t", "-a2", str(source), str(text)]) == 0
    assert main(["-d", str(packed), str(dump)]) == 0
    assert dump.read_text() == text.read_text()
    assert "\tlzend\n" in text.read_text()


def test_text_output_of_null_method(tmp_path):
    source = tmp_path / "in.bin"
    source.write_bytes(b"\x01\x02")
    out = tmp_path / "out.asm"
    assert main(["-t", "-m72", str(source), str(out)]) == 0
    assert out.read_text() == "\tlzdata $01, $02\n\tlzend\n"


def test_invalid_stream(tmp_path, capsys):
    source = tmp_path / "bad.lz"
    source.write_bytes(b"\x00")
    assert main(["-u", str(source), str(tmp_path / "x")]) == 1
    assert capsys.readouterr().err == "error: invalid command stream\n"


def test_file_too_big(tmp_path, capsys):
    source = tmp_path / "big.bin"
    source.write_bytes(bytes(32769))
    assert main([str(source), str(tmp_path / "x")]) == 1
    assert "is too big" in capsys.readouterr().err


def test_missing_input(tmp_path, capsys):
    missing = tmp_path / "missing.bin"
    assert main([str(missing), str(tmp_path / "x")]) == 1
    assert f"could not open file {missing} for reading" in capsys.readouterr().err