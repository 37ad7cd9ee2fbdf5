"""Directory listing and an indented directory-tree walk."""

from __future__ import annotations

import errno
import getopt
import os
import stat
import sys
from dataclasses import dataclass
from typing import Iterator, Optional

_USAGE = "Usage: nftw_dir_tree [-d] [-m] [-p] [directory-path]"


def list_files(dirpath="."):
    """Return one line per entry of ``dirpath``, skipping ``.`` and ``..``.

    Names are prefixed with ``dirpath/`` unless ``dirpath`` is ``"."``.
    Raises OSError if the directory cannot be opened.
    """
    dirpath = os.fspath(dirpath)
    names = os.listdir(dirpath)
    if dirpath == ".":
        return list(names)
    return [f"{dirpath}/{name}" for name in names]


@dataclass(frozen=True)
class WalkEntry:
    """One file met during a tree walk.

    ``kind`` is one of D, DNR, DP, F, SL, SLN, NS; ``file_type`` is the
    ``ls -l`` style letter; ``inode`` is None when the file could not be stat'ed.
    """

    path: str
    base: str
    level: int
    kind: str
    file_type: str
    inode: Optional[int]


def _type_letter(mode: int) -> str:
    if stat.S_ISREG(mode):
        return "-"
    if stat.S_ISDIR(mode):
        return "d"
    if stat.S_ISCHR(mode):
        return "c"
    if stat.S_ISBLK(mode):
        return "b"
    if stat.S_ISLNK(mode):
        return "l"
    if stat.S_ISFIFO(mode):
        return "p"
    if stat.S_ISSOCK(mode):
        return "s"
    return "?"


def _classify(path: str, physical: bool):
    try:
        st = os.lstat(path) if physical else os.stat(path)
    except OSError:
        if not physical:
            try:
                lst = os.lstat(path)
            except OSError:
                return None, "NS"
            if stat.S_ISLNK(lst.st_mode):
                return lst, "SLN"
        return None, "NS"
    if stat.S_ISLNK(st.st_mode):
        return st, "SL"
    if stat.S_ISDIR(st.st_mode):
        return st, "D"
    return st, "F"


def _base_of(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped:
        return path
    return os.path.basename(stripped)


def _make_entry(path, level, st, kind) -> WalkEntry:
    if st is None:
        return WalkEntry(path, _base_of(path), level, kind, "?", None)
    return WalkEntry(path, _base_of(path), level, kind, _type_letter(st.st_mode), st.st_ino)


def _walk(path, level, st, kind, depth_first, mount, physical, root_dev, visited):
    if kind != "D":
        yield _make_entry(path, level, st, kind)
        return
    key = (st.st_dev, st.st_ino)
    if key in visited:
        return
    visited.add(key)
    try:
        names = os.listdir(path)
    except OSError:
        yield _make_entry(path, level, st, "DNR")
        return
    if not depth_first:
        yield _make_entry(path, level, st, "D")
    for name in names:
        child = os.path.join(path, name)
        child_st, child_kind = _classify(child, physical)
        if mount and child_st is not None and child_st.st_dev != root_dev:
            continue
        yield from _walk(child, level + 1, child_st, child_kind,
                         depth_first, mount, physical, root_dev, visited)
    if depth_first:
        yield _make_entry(path, level, st, "DP")


def walk_tree(root=".", depth_first=False, mount=False, physical=False) -> Iterator[WalkEntry]:
    """Walk the tree under ``root``, yielding a WalkEntry for each file.

    ``depth_first`` reports directories after their contents, ``mount`` stays
    on the root's file system and ``physical`` does not follow symbolic links.
    Raises OSError if ``root`` itself does not exist.
    """
    root = os.fspath(root)
    os.lstat(root)
    st, kind = _classify(root, physical)
    root_dev = st.st_dev if st is not None else None
    yield from _walk(root, 0, st, kind, depth_first, mount, physical, root_dev, set())


def format_entry(entry: WalkEntry) -> str:
    """Render an entry as a type letter, walk kind, i-node and indented name."""
    inode = f"{entry.inode:7d} " if entry.kind != "NS" and entry.inode is not None else " " * 8
    indent = " " * (4 * entry.level)
    return f"{entry.file_type} {entry.kind:<3}  {inode} {indent}{entry.base}"


def _error_tag(exc: OSError) -> str:
    name = errno.errorcode.get(exc.errno, "?") if exc.errno else "?"
    return f"ERROR [{name} {exc.strerror}]"


def list_files_main(argv=None):
    """Entry point: ``[dir-path...]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "--help":
        print("Usage: list_files [dir-path...]", file=sys.stderr)
        return 1
    for dirpath in args or ["."]:
        try:
            lines = list_files(dirpath)
        except OSError as exc:
            print(f"{_error_tag(exc)} opendir failed on '{dirpath}'", file=sys.stderr)
            continue
        for line in lines:
            print(line)
    return 0


def _usage():
    print(_USAGE, file=sys.stderr)
    print("\t-d Use FTW_DEPTH flag", file=sys.stderr)
    print("\t-m Use FTW_MOUNT flag", file=sys.stderr)
    print("\t-p Use FTW_PHYS flag", file=sys.stderr)
    return 1


def tree_main(argv=None):
    """Entry point: ``[-d] [-m] [-p] [directory-path]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        opts, rest = getopt.gnu_getopt(args, "dmp")
    except getopt.GetoptError:
        return _usage()
    if len(rest) > 1:
        return _usage()
    chosen = {opt for opt, _ in opts}
    try:
        for entry in walk_tree(rest[0] if rest else ".",
                               depth_first="-d" in chosen,
                               mount="-m" in chosen,
                               physical="-p" in chosen):
            print(format_entry(entry))
    except OSError as exc:
        print(f"nftw: {exc.strerror}", file=sys.stderr)
        return 1
    return 0