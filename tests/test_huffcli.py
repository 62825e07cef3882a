from pathlib import Path

import pytest

import huffcli
from codetable import CodeTableFormatError


def test_compress_then_decompress(tmp_path):
    src = tmp_path / "notes.txt"
    src.write_bytes(b"It was the best of times, it was the worst of times.\n" * 40)

    assert huffcli.main(["compress", str(src)]) == 0
    huf = tmp_path / "notes.txt.huf"
    codes = tmp_path / "notes.txt.codes"
    assert huf.exists() and codes.exists()
    assert huf.stat().st_size < src.stat().st_size

    restored = tmp_path / "restored.txt"
    assert huffcli.main(["decompress", str(huf), "-t", str(codes), "-o", str(restored)]) == 0
    assert restored.read_bytes() == src.read_bytes()


def test_explicit_output_paths(tmp_path):
    src = tmp_path / "in.bin"
    src.write_bytes(bytes(range(256)) * 3)
    out = tmp_path / "out" / "data.huf"
    table = tmp_path / "out" / "data.codes"

    assert huffcli.main(["compress", str(src), "-o", str(out), "-t", str(table)]) == 0
    lines = table.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 256
    assert lines[0].split("\t")[0] == "0"


def test_empty_file(tmp_path):
    src = tmp_path / "empty"
    src.write_bytes(b"")
    assert huffcli.main(["compress", str(src)]) == 0
    assert (tmp_path / "empty.huf").read_bytes() == b""
    assert (tmp_path / "empty.codes").read_text() == ""

    out = tmp_path / "empty.restored"
    assert huffcli.main(["decompress", str(tmp_path / "empty.huf"), "-t", str(tmp_path / "empty.codes"),
                         "-o", str(out)]) == 0
    assert out.read_bytes() == b""


def test_bad_code_table_reports_error(tmp_path, capsys):
    huf = tmp_path / "x.huf"
    huf.write_bytes(b"\x00\x00")
    table = tmp_path / "x.codes"
    table.write_text("65\t0\n65\t1\n", encoding="utf-8")

    assert huffcli.main(["decompress", str(huf), "-t", str(table)]) == 1
    assert "appears twice" in capsys.readouterr().err
    assert not (tmp_path / "x").exists()


def test_corrupt_stream_reports_error(tmp_path, capsys):
    huf = tmp_path / "x.huf"
    huf.write_bytes(b"\x09\x00")
    table = tmp_path / "x.codes"
    table.write_text("65\t0\n", encoding="utf-8")

    assert huffcli.main(["decompress", str(huf), "-t", str(table)]) == 1
    assert "huffcode:" in capsys.readouterr().err


def test_missing_input_reports_error(tmp_path, capsys):
    assert huffcli.main(["compress", str(tmp_path / "nope")]) == 1
    assert "nope" in capsys.readouterr().err


def test_non_utf8_table(tmp_path):
    path = tmp_path / "t.codes"
    path.write_bytes(b"\xff\xfe\x00")
    with pytest.raises(CodeTableFormatError):
        huffcli.load_code_table(huffcli.FileSource(path))


def test_table_file_roundtrip(tmp_path):
    path = tmp_path / "t.codes"
    huffcli.save_code_table(huffcli.FileSink(path), {66: "0", 65: "1"})
    assert path.read_text(encoding="utf-8") == "65\t1\n66\t0\n"
    assert huffcli.load_code_table(huffcli.FileSource(path)) == {65: "1", 66: "0"}


@pytest.mark.parametrize("name, expected", [
    ("a.txt.huf", "a.txt"),
    ("a.huf", "a"),
    ("a.bin", "a.bin.out"),
])
def test_default_decompressed_path(name, expected):
    assert huffcli.default_decompressed_path(Path("d") / name) == Path("d") / expected


def test_command_is_required():
    with pytest.raises(SystemExit):
        huffcli.main([])
