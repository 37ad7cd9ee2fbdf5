"""Monitoring several file descriptors with poll() and select()."""

from __future__ import annotations

import os
import random
import re
import select
import sys
import time

from sysprog.cmdline import NumFlag, UsageError, parse_number

FD_SETSIZE = 1024

_FD_SPEC = re.compile(r"\s*([+-]?\d+)([rw]{1,2})")


def poll_pipes(num_pipes, num_writes=1, rng=None):
    """Create pipes, write one byte to randomly chosen ones, then poll the read ends.

    Returns ``(writes, ready, readable)``: the ``(write_fd, read_fd)`` pair used
    for each write in order, the count poll() reported, and the readable fds.
    """
    if num_pipes <= 0:
        raise ValueError("num_pipes must be > 0")
    if num_writes <= 0:
        raise ValueError("num_writes must be > 0")
    rng = random.Random() if rng is None else rng

    pipes = []
    try:
        for _ in range(num_pipes):
            pipes.append(os.pipe())

        writes = []
        for _ in range(num_writes):
            read_fd, write_fd = pipes[rng.randrange(num_pipes)]
            os.write(write_fd, b"a")
            writes.append((write_fd, read_fd))

        poller = select.poll()
        for read_fd, _ in pipes:
            poller.register(read_fd, select.POLLIN)
        events = poller.poll(-1)
        readable = [fd for fd, mask in events if mask & select.POLLIN]
        order = {read_fd: index for index, (read_fd, _) in enumerate(pipes)}
        readable.sort(key=order.__getitem__)
        return writes, len(events), readable
    finally:
        for read_fd, write_fd in pipes:
            os.close(read_fd)
            os.close(write_fd)


def parse_fd_spec(arg):
    """Parse an ``<fd>[rw]`` argument into ``(fd, want_read, want_write)``."""
    match = _FD_SPEC.match(arg)
    if match is None:
        raise UsageError(f"invalid file descriptor specification: {arg}")
    fd = int(match.group(1))
    if fd < 0:
        raise UsageError(f"invalid file descriptor specification: {arg}")
    if fd >= FD_SETSIZE:
        raise UsageError(f"file descriptor exceeds limit ({FD_SETSIZE})")
    modes = match.group(2)
    return fd, "r" in modes, "w" in modes


def select_fds(timeout, specs):
    """Run select() over ``specs`` of ``(fd, want_read, want_write)``.

    ``timeout`` is seconds, or None to wait forever. Returns
    ``(ready, readable, writable, remaining)`` where ``remaining`` is the
    unused part of the timeout (None when there was no timeout).
    """
    read_fds = sorted({fd for fd, want_read, _ in specs if want_read})
    write_fds = sorted({fd for fd, _, want_write in specs if want_write})
    start = time.monotonic()
    readable, writable, _ = select.select(read_fds, write_fds, [], timeout)
    remaining = None
    if timeout is not None:
        remaining = max(0.0, timeout - (time.monotonic() - start))
    return len(readable) + len(writable), set(readable), set(writable), remaining


def poll_pipes_main(argv=None):
    """Entry point: ``num-pipes [num-writes]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] == "--help":
        print("Usage: poll_pipes num-pipes [num-writes]", file=sys.stderr)
        return 1
    try:
        num_pipes = parse_number(args[0], NumFlag.GT_0, "num-pipes")
        num_writes = parse_number(args[1], NumFlag.GT_0, "num-writes") if len(args) > 1 else 1
        writes, ready, readable = poll_pipes(num_pipes, num_writes)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"ERROR [{exc.strerror}] poll_pipes", file=sys.stderr)
        return 1
    for write_fd, read_fd in writes:
        print(f"Writing to fd: {write_fd:3d} (read fd: {read_fd:3d})")
    print(f"poll() returned: {ready}")
    for fd in readable:
        print(f"Readable: {fd:3d}")
    return 0


def _select_usage():
    print("Usage: t_select {timeout|-} fd-num[rw]...", file=sys.stderr)
    print("    - means infinite timeout; ", file=sys.stderr)
    print("    r = monitor for read", file=sys.stderr)
    print("    w = monitor for write\n", file=sys.stderr)
    print("    e.g.: t_select - 0rw 1w", file=sys.stderr)
    return 1


def select_main(argv=None):
    """Entry point: ``{timeout|-} fd-num[rw]...``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] == "--help":
        return _select_usage()
    try:
        timeout = None if args[0] == "-" else parse_number(args[0], NumFlag.NONE, "timeout")
        specs = [parse_fd_spec(arg) for arg in args[1:]]
    except UsageError as exc:
        if "exceeds limit" in str(exc):
            print(exc, file=sys.stderr)
            return 1
        return _select_usage()
    try:
        ready, readable, writable, remaining = select_fds(timeout, specs)
    except (OSError, ValueError) as exc:
        print(f"ERROR [{getattr(exc, 'strerror', None) or exc}] select", file=sys.stderr)
        return 1

    nfds = max((fd for fd, _, _ in specs), default=-1) + 1
    print(f"ready = {ready}")
    for fd in range(nfds):
        print(f"{fd}: {'r' if fd in readable else ''}{'w' if fd in writable else ''}")
    if remaining is not None:
        seconds = int(remaining)
        millis = int((remaining - seconds) * 1000)
        print(f"timeout after select(): {seconds}.{millis:03d}")
    return 0