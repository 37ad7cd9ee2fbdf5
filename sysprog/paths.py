"""Pathname splitting, symbolic link inspection and unlink-while-open."""

from __future__ import annotations

import errno
import os
import stat
import subprocess
import sys
import time

from sysprog.cmdline import NumFlag, UsageError, parse_number

BLOCK_SIZE = 1024
DEFAULT_NUM_BLOCKS = 100000


class NotASymlinkError(ValueError):
    """Raised when a pathname that should be a symbolic link is not one."""


def _dirname(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    if "/" not in stripped:
        return "."
    head = stripped.rsplit("/", 1)[0].rstrip("/")
    return head or "/"


def _basename(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def dir_base(path):
    """Split ``path`` into its directory and file name parts, POSIX style."""
    path = os.fspath(path)
    return _dirname(path), _basename(path)


def _read_link(path: str) -> str:
    st = os.lstat(path)
    if not stat.S_ISLNK(st.st_mode):
        raise NotASymlinkError(f"{path} is not a symbolic link")
    return os.readlink(path)


def view_symlink(path):
    """Return ``(link contents, fully resolved path)`` for a symbolic link."""
    path = os.fspath(path)
    target = _read_link(path)
    return target, os.path.realpath(path, strict=True)


def _disk_usage(directory: str) -> str:
    try:
        result = subprocess.run(["df", "-k", directory], capture_output=True, text=True)
    except OSError as exc:
        return f"df: {exc.strerror}"
    return (result.stdout + result.stderr).rstrip("\n")


def unlink_demo(path, num_blocks=DEFAULT_NUM_BLOCKS, pause=True):
    """Create ``path``, unlink it while open, fill it, and report disk usage.

    Yields progress lines and ``df`` reports taken before and after the
    descriptor is closed. With ``pause`` it waits as the demonstration does.
    """
    path = os.fspath(path)
    if num_blocks <= 0:
        raise ValueError("num_blocks must be > 0")
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with open(fd, "wb", buffering=0) as f:
        yield "open file ok and wait for 10s to unlink"
        if pause:
            time.sleep(10)
        os.unlink(path)
        yield "unlink and sleep 30s..."
        if pause:
            time.sleep(30)
        block = bytes(BLOCK_SIZE)
        for _ in range(num_blocks):
            if f.write(block) != BLOCK_SIZE:
                raise OSError("partial/failed write")
        directory = _dirname(path)
        yield _disk_usage(directory)
    yield "********** Closed file descriptor"
    yield _disk_usage(directory)


def _error_tag(exc: OSError) -> str:
    name = errno.errorcode.get(exc.errno, "?") if exc.errno else "?"
    return f"ERROR [{name} {exc.strerror}]"


def dirbasename_main(argv=None):
    """Entry point: ``path...``."""
    args = list(sys.argv[1:] if argv is None else argv)
    for arg in args:
        directory, base = dir_base(arg)
        print(f"{arg} ==> {directory} + {base}")
    return 0


def view_symlink_main(argv=None):
    """Entry point: ``pathname``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1 or args[0] == "--help":
        print("Usage: view_symlink pathname", file=sys.stderr)
        return 1
    path = args[0]
    try:
        target = _read_link(path)
    except NotASymlinkError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"{_error_tag(exc)} lstat", file=sys.stderr)
        return 1
    print(f"readlink: {path} --> {target}")
    try:
        resolved = os.path.realpath(path, strict=True)
    except OSError as exc:
        print(f"{_error_tag(exc)} realpath", file=sys.stderr)
        return 1
    print(f"realpath: {path} --> {resolved}")
    return 0


def unlink_main(argv=None):
    """Entry point: ``temp-file [num-1kB-blocks]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] == "--help":
        print("Usage: t_unlink temp-file [num-1kB-blocks]", file=sys.stderr)
        return 1
    try:
        num_blocks = (parse_number(args[1], NumFlag.GT_0, "num-1kB-blocks")
                      if len(args) > 1 else DEFAULT_NUM_BLOCKS)
        for line in unlink_demo(args[0], num_blocks):
            print(line, flush=True)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"{_error_tag(exc)} open", file=sys.stderr)
        return 1
    return 0