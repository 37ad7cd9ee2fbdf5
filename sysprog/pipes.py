"""Pipes between related processes: echoing, synchronising, filtering, case changing."""

from __future__ import annotations

import os
import subprocess
import sys
import time

from sysprog.cmdline import NumFlag, UsageError, parse_number

SIMPLE_BUF_SIZE = 10
CASE_BUF_SIZE = 100


def _fork(child):
    """Fork; run ``child`` in the new process and exit it. Return the child's PID."""
    sys.stdout.flush()
    sys.stderr.flush()
    pid = os.fork()
    if pid == 0:
        code = 1
        try:
            child()
            code = 0
        finally:
            os._exit(code)
    return pid


def _write_all(fd, data):
    if os.write(fd, data) != len(data):
        raise OSError("partial/failed write")


def _out_fd(out):
    out = sys.stdout.buffer if out is None else out
    out.flush()
    return out.fileno()


def _now():
    return time.strftime("%H:%M:%S")


def simple_pipe(text, out=None):
    """Send ``text`` through a pipe to a child that echoes it to ``out`` plus a newline.

    ``out`` must be a binary stream with a file descriptor. Returns bytes sent.
    """
    data = os.fsencode(text)
    out_fd = _out_fd(out)
    read_fd, write_fd = os.pipe()

    def child():
        os.close(write_fd)
        while chunk := os.read(read_fd, SIMPLE_BUF_SIZE):
            _write_all(out_fd, chunk)
        os.write(out_fd, b"\n")
        os.close(read_fd)

    pid = _fork(child)
    os.close(read_fd)
    try:
        _write_all(write_fd, data)
    finally:
        os.close(write_fd)
        os.waitpid(pid, 0)
    return len(data)


def pipe_sync(sleep_times, out=None):
    """Start one child per sleep time; wait until all have closed the pipe.

    Progress lines are written to ``out`` (a binary stream with a file
    descriptor). Returns the children's PIDs in creation order.
    """
    sleep_times = list(sleep_times)
    if not sleep_times:
        raise ValueError("at least one sleep time is required")
    if any(t < 0 for t in sleep_times):
        raise ValueError("sleep times must be non-negative")
    out_fd = _out_fd(out)
    os.write(out_fd, f"{_now()}  Parent started\n".encode())

    read_fd, write_fd = os.pipe()
    pids = []
    try:
        for number, seconds in enumerate(sleep_times, start=1):
            def child(number=number, seconds=seconds):
                os.close(read_fd)
                time.sleep(seconds)
                line = f"{_now()}  Child {number} (PID={os.getpid()}) closing pipe\n"
                os.write(out_fd, line.encode())
                os.close(write_fd)

            pids.append(_fork(child))
    finally:
        os.close(write_fd)

    try:
        if os.read(read_fd, 1) != b"":
            raise RuntimeError("parent didn't get EOF")
    finally:
        os.close(read_fd)
        for pid in pids:
            os.waitpid(pid, 0)
    os.write(out_fd, f"{_now()}  Parent ready to go\n".encode())
    return pids


def pipe_ls_wc():
    """Run ``ls | wc -l`` in the current directory and return the count."""
    with subprocess.Popen(["ls"], stdout=subprocess.PIPE) as ls:
        with subprocess.Popen(["wc", "-l"], stdin=ls.stdout, stdout=subprocess.PIPE) as wc:
            ls.stdout.close()
            output, _ = wc.communicate()
    return int(output.decode().strip())


def change_case(stream_in=None, stream_out=None):
    """Copy ``stream_in`` to ``stream_out`` upper-cased by a child over two pipes.

    Returns the number of bytes written to ``stream_out``.
    """
    stream_in = sys.stdin.buffer if stream_in is None else stream_in
    stream_out = sys.stdout.buffer if stream_out is None else stream_out
    read_chunk = getattr(stream_in, "read1", stream_in.read)

    out_read, out_write = os.pipe()
    in_read, in_write = os.pipe()

    def child():
        os.close(out_write)
        os.close(in_read)
        while chunk := os.read(out_read, CASE_BUF_SIZE):
            _write_all(in_write, chunk.upper())

    pid = _fork(child)
    os.close(out_read)
    os.close(in_write)

    total = 0
    try:
        while chunk := read_chunk(CASE_BUF_SIZE):
            _write_all(out_write, chunk)
            reply = os.read(in_read, CASE_BUF_SIZE)
            if reply:
                stream_out.write(reply)
                total += len(reply)
        os.close(out_write)
        out_write = -1
        while reply := os.read(in_read, CASE_BUF_SIZE):
            stream_out.write(reply)
            total += len(reply)
    finally:
        if out_write != -1:
            os.close(out_write)
        os.close(in_read)
        os.waitpid(pid, 0)
    stream_out.flush()
    return total


def _fail(exc, context):
    if isinstance(exc, UsageError):
        print(exc, file=sys.stderr)
    elif isinstance(exc, OSError) and exc.strerror:
        print(f"ERROR [{exc.strerror}] {context}", file=sys.stderr)
    else:
        print(f"ERROR: {exc}", file=sys.stderr)
    return 1


def simple_pipe_main(argv=None):
    """Entry point: ``string``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1 or args[0] == "--help":
        print("Usage: simple_pipe string", file=sys.stderr)
        return 1
    try:
        simple_pipe(args[0])
    except OSError as exc:
        return _fail(exc, "simple_pipe")
    return 0


def pipe_sync_main(argv=None):
    """Entry point: ``sleep-time...``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] == "--help":
        print("Usage: pipe_sync sleep-time...", file=sys.stderr)
        return 1
    try:
        times = [parse_number(arg, NumFlag.NONNEG, "sleep-time") for arg in args]
        pipe_sync(times)
    except (UsageError, OSError, RuntimeError) as exc:
        return _fail(exc, "pipe_sync")
    return 0


def pipe_ls_wc_main(argv=None):
    """Entry point: no arguments."""
    try:
        print(pipe_ls_wc())
    except (OSError, ValueError) as exc:
        return _fail(exc, "pipe_ls_wc")
    return 0


def change_case_main(argv=None):
    """Entry point: filter standard input to standard output."""
    try:
        change_case()
    except OSError as exc:
        return _fail(exc, "change_case")
    return 0