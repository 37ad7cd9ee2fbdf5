import os

import pytest

from sysprog.cmdline import UsageError
from sysprog.fileio import (
    copy_file,
    copy_main,
    parse_seek_op,
    run_seek_io,
    seek_io_main,
    write_bytes,
    write_bytes_main,
)


@pytest.mark.parametrize("buf_size", [1, 3, 1024, 100000])
def test_copy_round_trip(tmp_path, buf_size):
    src = tmp_path / "in"
    data = bytes(range(256)) * 20
    src.write_bytes(data)
    dst = tmp_path / "out"
    assert copy_file(src, dst, buf_size) == len(data)
    assert dst.read_bytes() == data


def test_copy_truncates_existing(tmp_path):
    src = tmp_path / "in"
    src.write_bytes(b"short")
    dst = tmp_path / "out"
    dst.write_bytes(b"a much longer existing content")
    copy_file(src, dst)
    assert dst.read_bytes() == b"short"


def test_copy_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        copy_file(tmp_path / "nope", tmp_path / "out")


def test_copy_main_usage(capsys):
    assert copy_main([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_copy_main_copies(tmp_path):
    src = tmp_path / "a"
    src.write_bytes(b"payload")
    dst = tmp_path / "b"
    assert copy_main([str(src), str(dst)]) == 0
    assert dst.read_bytes() == b"payload"


def test_copy_main_missing(tmp_path, capsys):
    assert copy_main([str(tmp_path / "nope"), str(tmp_path / "b")]) == 1
    assert "ERROR" in capsys.readouterr().err


def test_parse_seek_op_kinds():
    assert parse_seek_op("wxyz") == ("w", "xyz")
    assert parse_seek_op("r2") == ("r", 2)
    assert parse_seek_op("R0x4") == ("R", 4)
    assert parse_seek_op("s12") == ("s", 12)


@pytest.mark.parametrize("arg", ["x1", "", "r", "rabc", "s", "r-3"])
def test_parse_seek_op_errors(arg):
    with pytest.raises(UsageError):
        parse_seek_op(arg)


def test_seek_io_hex(tmp_path):
    path = tmp_path / "f"
    lines = list(run_seek_io(path, ["wab", "s0", "R2"]))
    assert lines[-1] == "R2: 61 62 "


def test_seek_io_end_of_file(tmp_path):
    path = tmp_path / "empty"
    assert list(run_seek_io(path, ["r5"])) == ["r5: end-of-file"]


def test_seek_io_nonprintable(tmp_path):
    path = tmp_path / "bin"
    path.write_bytes(b"a\x01b")
    assert list(run_seek_io(path, ["r3"])) == ["r3: a?b"]


def test_seek_io_bad_op_after_good(tmp_path):
    path = tmp_path / "f"
    gen = run_seek_io(path, ["whi", "q"])
    assert next(gen) == "whi: wrote 2 bytes"
    with pytest.raises(UsageError):
        next(gen)


def test_seek_io_main_prints(tmp_path, capsys):
    path = tmp_path / "f"
    assert seek_io_main([str(path), "wxyz", "s1", "r2"]) == 0
    assert capsys.readouterr().out.splitlines()[-1] == "r2: yz"


def test_seek_io_main_usage(capsys):
    assert seek_io_main(["only-file"]) == 1
    assert "Usage" in capsys.readouterr().err


@pytest.mark.parametrize("sync", [None, "osync", "fsync", "fdatasync"])
def test_write_bytes_size(tmp_path, sync):
    path = tmp_path / "w"
    assert write_bytes(path, 1000, 64, sync) == 1000
    assert path.stat().st_size == 1000
    assert path.read_bytes() == bytes(1000)


def test_write_bytes_does_not_truncate(tmp_path):
    path = tmp_path / "w"
    path.write_bytes(b"z" * 50)
    write_bytes(path, 10, 3)
    content = path.read_bytes()
    assert len(content) == 50
    assert content[:10] == bytes(10)
    assert content[10:] == b"z" * 40


def test_write_bytes_invalid_arguments(tmp_path):
    with pytest.raises(ValueError):
        write_bytes(tmp_path / "w", 10, 0)
    with pytest.raises(ValueError):
        write_bytes(tmp_path / "w", 0, 10)
    with pytest.raises(ValueError):
        write_bytes(tmp_path / "w", 10, 10, "always")


def test_write_bytes_main(tmp_path):
    path = tmp_path / "w"
    assert write_bytes_main(["--fsync", str(path), "300", "7"]) == 0
    assert path.stat().st_size == 300


def test_write_bytes_main_rejects_zero(tmp_path, capsys):
    assert write_bytes_main([str(tmp_path / "w"), "0", "7"]) == 1
    assert "num-bytes" in capsys.readouterr().err
    assert not os.path.exists(tmp_path / "w")