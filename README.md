# sysprog

A collection of small command-line tools and library functions that show how
a POSIX system works underneath: file descriptors and offsets, memory
mappings, directory walks, symbolic links, `select()`/`poll()`, pipes between
forked processes, and a FIFO-based client/server.

Each tool does one thing and prints what happened, so you can watch the
operating system's behaviour directly. The same work is available as plain
Python functions for use in your own code and tests.

It needs a POSIX system (Linux or macOS). Several tools fork child processes
or create FIFOs in `/tmp`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Commands

### Calls and arguments

```
sysprog-syscall-speed [--function] [num-calls]
```

Makes `num-calls` calls to `getppid()` (default 10000000) in a tight loop;
with `--function` it calls a trivial Python function instead. Time it with
`time` to compare the two.

### File I/O

```
sysprog-copy old-file new-file
sysprog-seek-io file {r<length>|R<length>|w<string>|s<offset>}...
sysprog-write-bytes [--o-sync|--fsync|--fdatasync] file num-bytes buf-size
```

`sysprog-seek-io` opens (creating if needed) a file and runs each operation in
turn: `r` reads and shows text (unprintable bytes as `?`), `R` reads and shows
hex, `w` writes a string, `s` sets the offset. Lengths and offsets may be
given in decimal, octal (`0` prefix) or hex (`0x` prefix). For example:

```
sysprog-seek-io myfile wxyz s1 r2
```

`sysprog-write-bytes` writes `num-bytes` bytes using `buf-size` bytes per
write, which is handy for comparing buffer sizes. `--o-sync` opens the file
with `O_SYNC`; `--fsync` and `--fdatasync` flush after every write.

### Memory mappings

```
sysprog-mmcat file
sysprog-t-mmap file [new-value]
```

`sysprog-mmcat` writes a file to standard output through a read-only mapping.
`sysprog-t-mmap` maps the first 10 bytes of a file shared, shows the string
held there, and if given a new value (shorter than 10 bytes) stores it there.

### Directories and links

```
sysprog-list-files [dir-path...]
sysprog-tree [-d] [-m] [-p] [directory-path]
sysprog-dirbasename path...
sysprog-view-symlink pathname
sysprog-unlink temp-file [num-1kB-blocks]
```

`sysprog-tree` prints an indented tree showing, for each entry, its file type
letter (as in `ls -l`), the walk type (`D`, `DNR`, `DP`, `F`, `SL`, `SLN`,
`NS`) and its i-node number. `-d` reports directories after their contents,
`-m` stays on one file system, `-p` does not follow symbolic links.

`sysprog-view-symlink` shows both what a link contains and its fully
resolved path. `sysprog-unlink` creates a file, waits 10 seconds, unlinks it,
waits 30 seconds, fills it through the still-open descriptor and runs `df -k`
before and after closing it, showing that the space is only released on close.

### Multiplexed I/O

```
sysprog-poll-pipes num-pipes [num-writes]
sysprog-select {timeout|-} fd-num[rw]...
```

For example, `sysprog-select - 0rw 1w` waits without a timeout for
descriptor 0 to be readable or writable and for descriptor 1 to be writable.

### Pipes and FIFOs

```
sysprog-simple-pipe string
sysprog-pipe-sync sleep-time...
sysprog-pipe-ls-wc
sysprog-change-case
sysprog-seqnum-server
sysprog-seqnum-client [seq-len]
```

`sysprog-pipe-ls-wc` runs the equivalent of `ls | wc -l`.
`sysprog-change-case` sends standard input through a child process that
upper-cases it. The sequence-number server hands out unique numbers over
the well-known FIFO `/tmp/seqnum_sv`; start it in one terminal and run
clients in another.

## Library use

Every command is backed by ordinary functions. For example:

```python
from sysprog.fileio import copy_file, run_seek_io, write_bytes
from sysprog.seqnum import Request, SeqNumServer, client_fifo_name

copy_file("notes.txt", "notes.bak", 1024)
write_bytes("scratch.bin", 1_000_000, 4096, "fsync")

for line in run_seek_io("scratch.bin", ["wxyz", "s1", "r2"]):
    print(line)

server = SeqNumServer()
print(server.handle(Request(pid=1234, seq_len=3)).seq_num)  # 0
print(client_fifo_name(1234))                                 # /tmp/seqnum_cl.1234
```

Errors are raised as exceptions (for example `UsageError` from
`sysprog.cmdline` for bad arguments, `NotASymlinkError` from
`sysprog.paths`), and each command turns them into a message and a non-zero
exit status.

## What is not included

The package covers file and directory I/O, mappings, multiplexing, pipes and
FIFOs only. It has no helper for turning a process into a daemon and no
long-running logging daemon, no tools that demonstrate `fork()`, `exec()`,
`wait()` and child status reporting or `SIGCHLD` handling, and no tools for
sessions, process groups or `SIGHUP` delivery on terminal disconnect.