import os
import stat
import threading
import time

import pytest

from sysprog.seqnum import (
    Request,
    Response,
    SeqNumServer,
    client_fifo_name,
    client_main,
    request_sequence,
)


@pytest.fixture
def running_server(tmp_path):
    path = str(tmp_path / "seqnum_sv")
    server = SeqNumServer(path)
    threading.Thread(target=server.serve_forever, daemon=True).start()
    deadline = time.monotonic() + 10
    while not os.path.exists(path):
        if time.monotonic() > deadline:
            raise RuntimeError("server FIFO never appeared")
        time.sleep(0.01)
    return path, server


def test_request_round_trip():
    request = Request(4321, 7)
    assert Request.from_bytes(request.to_bytes()) == request


def test_response_round_trip():
    response = Response(99)
    assert Response.from_bytes(response.to_bytes()) == response


def test_wire_sizes_match_structs():
    assert len(Request(1, 1).to_bytes()) == Request.SIZE == 8
    assert len(Response(0).to_bytes()) == Response.SIZE == 4


def test_request_from_wrong_length_raises():
    with pytest.raises(ValueError):
        Request.from_bytes(b"\x00\x01\x02")


def test_response_from_wrong_length_raises():
    with pytest.raises(ValueError):
        Response.from_bytes(b"")


def test_client_fifo_name():
    assert client_fifo_name(1234) == "/tmp/seqnum_cl.1234"


def test_handle_allocates_consecutive_ranges():
    server = SeqNumServer("/nonexistent/sv")
    first = server.handle(Request(10, 3))
    second = server.handle(Request(11, 5))
    third = server.handle(Request(12, 1))
    assert first.seq_num == 0
    assert second.seq_num == first.seq_num + 3
    assert third.seq_num == second.seq_num + 5
    assert server.seq_num == third.seq_num + 1


def test_handle_respects_start_value():
    server = SeqNumServer("/nonexistent/sv", seq_num=50)
    assert server.handle(Request(1, 2)).seq_num == 50
    assert server.seq_num == 52


def test_request_sequence_end_to_end(running_server):
    path, server = running_server
    first = request_sequence(5, path)
    second = request_sequence(2, path)
    assert first == 0
    assert second == first + 5
    assert server.seq_num == second + 2


def test_server_fifo_has_expected_mode(running_server):
    path, _ = running_server
    mode = os.stat(path).st_mode
    assert stat.S_ISFIFO(mode)
    assert stat.S_IMODE(mode) == stat.S_IRUSR | stat.S_IWUSR | stat.S_IWGRP


def test_client_fifo_removed_after_request(running_server):
    path, _ = running_server
    request_sequence(1, path)
    assert not os.path.exists(client_fifo_name(os.getpid()))


def test_request_sequence_rejects_non_positive_length(tmp_path):
    with pytest.raises(ValueError):
        request_sequence(0, str(tmp_path / "sv"))


def test_request_sequence_missing_server_fifo(tmp_path):
    with pytest.raises(FileNotFoundError):
        request_sequence(1, str(tmp_path / "missing"))


def test_client_main_help():
    assert client_main(["--help"]) == 1


def test_client_main_rejects_bad_length():
    assert client_main(["0"]) == 1