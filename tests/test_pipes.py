import io
import os

import pytest

from sysprog.pipes import (
    change_case,
    pipe_ls_wc,
    pipe_sync,
    pipe_sync_main,
    simple_pipe,
    simple_pipe_main,
)


@pytest.fixture
def out_file(tmp_path):
    with open(tmp_path / "out", "w+b") as f:
        yield f


def _contents(f):
    f.flush()
    f.seek(0)
    return f.read()


def test_simple_pipe_echoes_with_newline(out_file):
    sent = simple_pipe("hello", out_file)
    assert sent == 5
    assert _contents(out_file) == b"hello\n"


def test_simple_pipe_longer_than_buffer(out_file):
    text = "the quick brown fox jumps over the lazy dog" * 3
    simple_pipe(text, out_file)
    assert _contents(out_file) == text.encode() + b"\n"


def test_simple_pipe_empty(out_file):
    assert simple_pipe("", out_file) == 0
    assert _contents(out_file) == b"\n"


def test_simple_pipe_main_usage(capsys):
    assert simple_pipe_main([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_pipe_sync_lines(out_file):
    pids = pipe_sync([0, 0], out_file)
    lines = _contents(out_file).decode().splitlines()
    assert len(pids) == 2
    assert lines[0].endswith("Parent started")
    assert lines[-1].endswith("Parent ready to go")
    child_lines = [line for line in lines if "closing pipe" in line]
    assert len(child_lines) == 2
    for pid in pids:
        assert any(f"(PID={pid})" in line for line in child_lines)


def test_pipe_sync_rejects_negative(out_file):
    with pytest.raises(ValueError):
        pipe_sync([1, -1], out_file)


def test_pipe_sync_rejects_empty(out_file):
    with pytest.raises(ValueError):
        pipe_sync([], out_file)


def test_pipe_sync_main_rejects_negative(capsys):
    assert pipe_sync_main(["-1"]) == 1


def test_pipe_ls_wc_counts_entries(tmp_path, monkeypatch):
    names = ["a.txt", "b.txt", "c.txt"]
    for name in names:
        (tmp_path / name).write_text("x")
    monkeypatch.chdir(tmp_path)
    assert pipe_ls_wc() == len(names)


def test_change_case_upper():
    source = io.BytesIO(b"hello World 123\n")
    target = io.BytesIO()
    written = change_case(source, target)
    assert target.getvalue() == b"HELLO WORLD 123\n"
    assert written == len(b"hello World 123\n")


def test_change_case_large_input_round_trip():
    data = os.urandom(64).hex().encode() * 20
    target = io.BytesIO()
    change_case(io.BytesIO(data), target)
    assert target.getvalue() == data.upper()


def test_change_case_empty():
    target = io.BytesIO()
    assert change_case(io.BytesIO(b""), target) == 0
    assert target.getvalue() == b""