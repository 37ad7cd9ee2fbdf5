"""Memory-mapped file output and a small shared file mapping."""

from __future__ import annotations

import mmap
import os
import sys

from sysprog.cmdline import UsageError

MEM_SIZE = 10


def map_cat(path, out=None):
    """Write the contents of ``path`` to ``out`` through a read-only mapping.

    Returns the number of bytes written.
    """
    out = sys.stdout.buffer if out is None else out
    with open(path, "rb") as f:
        size = os.fstat(f.fileno()).st_size
        if size == 0:
            return 0
        with mmap.mmap(f.fileno(), size, access=mmap.ACCESS_READ) as region:
            written = out.write(region)
    if written is not None and written != size:
        raise OSError("partial/failed write")
    return size


def update_shared(path, new_value=None):
    """Map the first bytes of ``path`` shared; return the string held there.

    If ``new_value`` is given, the region is zeroed and the value copied in
    and synced to the file. The returned string is the content before the update.
    """
    fd = os.open(path, os.O_RDWR)
    try:
        region = mmap.mmap(
            fd, MEM_SIZE, flags=mmap.MAP_SHARED, prot=mmap.PROT_READ | mmap.PROT_WRITE
        )
    finally:
        os.close(fd)

    with region:
        current = region[:MEM_SIZE].split(b"\0", 1)[0].decode(errors="replace")
        if new_value is not None:
            encoded = os.fsencode(new_value)
            if len(encoded) >= MEM_SIZE:
                raise UsageError("'new-value' too large")
            region[:] = bytes(MEM_SIZE)
            region[: len(encoded)] = encoded
            region.flush()
    return current


def _fail(exc):
    if isinstance(exc, OSError) and exc.strerror:
        print(f"ERROR [{exc.strerror}] {exc.filename or ''}".rstrip(), file=sys.stderr)
    else:
        print(exc if isinstance(exc, UsageError) else f"ERROR: {exc}", file=sys.stderr)
    return 1


def mmcat_main(argv=None):
    """Entry point: ``file``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1 or args[0] == "--help":
        print("Usage: mmcat file", file=sys.stderr)
        return 1
    try:
        map_cat(args[0])
        sys.stdout.buffer.flush()
    except (OSError, ValueError) as exc:
        return _fail(exc)
    return 0


def t_mmap_main(argv=None):
    """Entry point: ``file [new-value]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] == "--help":
        print("Usage: t_mmap file [new-value]", file=sys.stderr)
        return 1
    try:
        print(f"Current string={update_shared(args[0])}")
        if len(args) > 1:
            update_shared(args[0], args[1])
            print(f'Copied "{args[1]}" to shared memory')
    except (OSError, ValueError) as exc:
        return _fail(exc)
    return 0