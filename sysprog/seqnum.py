"""A sequence-number service over FIFOs: one well-known server FIFO, one FIFO per client."""

from __future__ import annotations

import os
import signal
import stat
import struct
import sys
from contextlib import suppress
from dataclasses import dataclass
from typing import ClassVar

from sysprog.cmdline import NumFlag, UsageError, parse_number

SERVER_FIFO = "/tmp/seqnum_sv"
CLIENT_FIFO_TEMPLATE = "/tmp/seqnum_cl.{pid}"

_FIFO_MODE = stat.S_IRUSR | stat.S_IWUSR | stat.S_IWGRP
_REQUEST = struct.Struct("=ii")
_RESPONSE = struct.Struct("=i")


@dataclass(frozen=True)
class Request:
    """A client's request: its PID and the length of sequence it wants."""

    pid: int
    seq_len: int

    SIZE: ClassVar[int] = _REQUEST.size

    def to_bytes(self) -> bytes:
        return _REQUEST.pack(self.pid, self.seq_len)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Request":
        if len(data) != _REQUEST.size:
            raise ValueError(f"request must be {_REQUEST.size} bytes, got {len(data)}")
        return cls(*_REQUEST.unpack(data))


@dataclass(frozen=True)
class Response:
    """The server's reply: the first number of the allocated sequence."""

    seq_num: int

    SIZE: ClassVar[int] = _RESPONSE.size

    def to_bytes(self) -> bytes:
        return _RESPONSE.pack(self.seq_num)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Response":
        if len(data) != _RESPONSE.size:
            raise ValueError(f"response must be {_RESPONSE.size} bytes, got {len(data)}")
        return cls(*_RESPONSE.unpack(data))


def client_fifo_name(pid):
    """Return the pathname of the reply FIFO for the client with ``pid``."""
    return CLIENT_FIFO_TEMPLATE.format(pid=int(pid))


def _make_fifo(path: str) -> None:
    try:
        os.mkfifo(path, _FIFO_MODE)
    except FileExistsError:
        return
    os.chmod(path, _FIFO_MODE)


class SeqNumServer:
    """Hands out consecutive, non-overlapping ranges of sequence numbers."""

    def __init__(self, server_fifo=SERVER_FIFO, seq_num=0):
        self.server_fifo = os.fspath(server_fifo)
        self.seq_num = seq_num

    def handle(self, request):
        """Allocate a sequence for ``request``; return the response to send back."""
        response = Response(self.seq_num)
        self.seq_num += request.seq_len
        return response

    def serve_forever(self):
        """Create the server FIFO and answer requests until the process ends."""
        _make_fifo(self.server_fifo)
        server_fd = os.open(self.server_fifo, os.O_RDONLY)
        # An extra write descriptor, so that reads never see end-of-file.
        dummy_fd = os.open(self.server_fifo, os.O_WRONLY)
        try:
            while True:
                data = os.read(server_fd, Request.SIZE)
                if len(data) != Request.SIZE:
                    print("Error reading request; discarding", file=sys.stderr)
                    continue
                request = Request.from_bytes(data)
                client_fifo = client_fifo_name(request.pid)
                try:
                    client_fd = os.open(client_fifo, os.O_WRONLY)
                except OSError as exc:
                    print(f"ERROR [{exc.strerror}] open {client_fifo}", file=sys.stderr)
                    continue
                response = self.handle(request)
                try:
                    if os.write(client_fd, response.to_bytes()) != Response.SIZE:
                        print(f"Error writing to FIFO {client_fifo}", file=sys.stderr)
                except OSError:
                    print(f"Error writing to FIFO {client_fifo}", file=sys.stderr)
                finally:
                    with suppress(OSError):
                        os.close(client_fd)
        finally:
            os.close(dummy_fd)
            os.close(server_fd)


def request_sequence(seq_len=1, server_fifo=SERVER_FIFO):
    """Ask the server for a sequence of ``seq_len`` numbers; return its first number."""
    if seq_len <= 0:
        raise ValueError("seq_len must be > 0")
    fifo = client_fifo_name(os.getpid())
    _make_fifo(fifo)
    try:
        server_fd = os.open(os.fspath(server_fifo), os.O_WRONLY)
        try:
            if os.write(server_fd, Request(os.getpid(), seq_len).to_bytes()) != Request.SIZE:
                raise OSError("Can't write to server")
        finally:
            os.close(server_fd)

        client_fd = os.open(fifo, os.O_RDONLY)
        try:
            data = os.read(client_fd, Response.SIZE)
        finally:
            os.close(client_fd)
        try:
            return Response.from_bytes(data).seq_num
        except ValueError:
            raise OSError("Can't read response from server") from None
    finally:
        with suppress(FileNotFoundError):
            os.unlink(fifo)


def client_main(argv=None):
    """Entry point: ``[seq-len...]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "--help":
        print("Usage: fifo_client [seq-len...]", file=sys.stderr)
        return 1
    try:
        seq_len = parse_number(args[0], NumFlag.GT_0, "seq-len") if args else 1
        print(request_sequence(seq_len))
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        detail = f"[{exc.strerror}] open {exc.filename}" if exc.strerror else f": {exc}"
        print(f"ERROR {detail}", file=sys.stderr)
        return 1
    return 0


def server_main(argv=None):
    """Entry point: run the sequence-number server."""
    signal.signal(signal.SIGPIPE, signal.SIG_IGN)
    try:
        SeqNumServer().serve_forever()
    except OSError as exc:
        print(f"ERROR [{exc.strerror}] {exc.filename or SERVER_FIFO}", file=sys.stderr)
        return 1
    return 0