"""File copying, offset-driven reads and writes, and write benchmarking."""

from __future__ import annotations

import os
import shutil
import sys

from sysprog.cmdline import NumFlag, UsageError, parse_number

DEFAULT_BUF_SIZE = 1024
_FILE_PERMS = 0o666
_SYNC_MODES = (None, "osync", "fsync", "fdatasync")
_SYNC_OPTIONS = {"--o-sync": "osync", "--fsync": "fsync", "--fdatasync": "fdatasync"}


def _shared_opener(path, flags):
    return os.open(path, flags, _FILE_PERMS)


def copy_file(source, dest, buf_size=DEFAULT_BUF_SIZE):
    """Copy ``source`` to ``dest`` (created rw-rw-rw- less umask); return bytes copied."""
    if buf_size <= 0:
        raise ValueError("buf_size must be > 0")
    with open(source, "rb", buffering=0) as src, open(
        dest, "wb", buffering=0, opener=_shared_opener
    ) as dst:
        shutil.copyfileobj(src, dst, buf_size)
        return dst.tell()


def parse_seek_op(arg):
    """Parse one ``r<len>``, ``R<len>``, ``w<text>`` or ``s<offset>`` argument.

    Returns a ``(command, value)`` pair; value is an int except for ``w``.
    """
    if not arg or arg[0] not in "rRws":
        raise UsageError(f"Argument must start with [rRws]: {arg}")
    command, rest = arg[0], arg[1:]
    if command in "rR":
        return command, parse_number(rest, NumFlag.ANY_BASE | NumFlag.NONNEG, arg)
    if command == "s":
        return command, parse_number(rest, NumFlag.ANY_BASE, arg)
    return command, rest


def _as_text(data: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b < 0x7F else "?" for b in data)


def _as_hex(data: bytes) -> str:
    return "".join(f"{b:02x} " for b in data)


def run_seek_io(path, ops):
    """Open ``path`` read/write and apply each operation, yielding a report line per op."""
    with open(path, "r+b", buffering=0, opener=_rdwr_create_opener) as f:
        for arg in ops:
            command, value = parse_seek_op(arg)
            if command in "rR":
                data = f.read(value)
                if not data:
                    yield f"{arg}: end-of-file"
                else:
                    shown = _as_text(data) if command == "r" else _as_hex(data)
                    yield f"{arg}: {shown}"
            elif command == "w":
                written = f.write(os.fsencode(value))
                yield f"{arg}: wrote {written} bytes"
            else:
                f.seek(value, os.SEEK_SET)
                yield f"{arg}: seek succeeded"


def _rdwr_create_opener(path, _flags):
    return os.open(path, os.O_RDWR | os.O_CREAT, _FILE_PERMS)


def write_bytes(path, num_bytes, buf_size, sync=None):
    """Write ``num_bytes`` bytes to ``path`` in ``buf_size`` chunks; return bytes written.

    ``sync`` is one of None, "osync", "fsync" or "fdatasync".
    """
    if sync not in _SYNC_MODES:
        raise ValueError(f"unknown sync mode: {sync!r}")
    if num_bytes <= 0:
        raise ValueError("num_bytes must be > 0")
    if buf_size <= 0:
        raise ValueError("buf_size must be > 0")

    flags = os.O_CREAT | os.O_WRONLY
    if sync == "osync":
        flags |= getattr(os, "O_SYNC", 0)
    flush = {
        "fsync": os.fsync,
        "fdatasync": getattr(os, "fdatasync", os.fsync),
    }.get(sync)

    buf = bytes(buf_size)
    total = 0
    with open(os.open(path, flags, 0o600), "wb", buffering=0) as f:
        while total < num_bytes:
            this_write = min(buf_size, num_bytes - total)
            if f.write(buf[:this_write]) != this_write:
                raise OSError("partial/failed write")
            if flush is not None:
                flush(f.fileno())
            total += this_write
    return total


def _fail(exc, context=None):
    if isinstance(exc, UsageError):
        print(exc, file=sys.stderr)
    elif isinstance(exc, OSError) and exc.strerror:
        suffix = f" {context}" if context else ""
        print(f"ERROR [{exc.strerror}]{suffix}", file=sys.stderr)
    else:
        print(f"ERROR: {exc}", file=sys.stderr)
    return 1


def copy_main(argv=None):
    """Entry point: ``old-file new-file``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2 or args[0] == "--help":
        print("Usage: copy old-file new-file", file=sys.stderr)
        return 1
    try:
        copy_file(args[0], args[1])
    except OSError as exc:
        return _fail(exc, f"opening file {exc.filename}" if exc.filename else "copy")
    return 0


def seek_io_main(argv=None):
    """Entry point: ``file {r<length>|R<length>|w<string>|s<offset>}...``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2 or args[0] == "--help":
        print("Usage: seek_io file {r<length>|R<length>|w<string>|s<offset>}...",
              file=sys.stderr)
        return 1
    try:
        for line in run_seek_io(args[0], args[1:]):
            print(line)
    except (UsageError, OSError) as exc:
        return _fail(exc, "seek_io")
    return 0


def write_bytes_main(argv=None):
    """Entry point: ``[--o-sync|--fsync|--fdatasync] file num-bytes buf-size``."""
    args = list(sys.argv[1:] if argv is None else argv)
    modes = [_SYNC_OPTIONS[a] for a in args if a in _SYNC_OPTIONS]
    rest = [a for a in args if a not in _SYNC_OPTIONS]
    if len(rest) != 3 or rest[0] == "--help" or len(modes) > 1:
        print("Usage: write_bytes [--o-sync|--fsync|--fdatasync] file num-bytes buf-size",
              file=sys.stderr)
        return 1
    try:
        num_bytes = parse_number(rest[1], NumFlag.GT_0, "num-bytes")
        buf_size = parse_number(rest[2], NumFlag.GT_0, "buf-size")
        write_bytes(rest[0], num_bytes, buf_size, modes[0] if modes else None)
    except (UsageError, OSError) as exc:
        return _fail(exc, "write_bytes")
    return 0