[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sysprog"
version = "0.1.0"
description = "Small POSIX system-programming tools: file I/O, memory mappings, directory walks, select/poll, pipes and FIFOs"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "posix",
    "unix",
    "file-io",
    "mmap",
    "pipes",
    "fifo",
    "select",
    "poll",
    "system-programming",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sysprog-syscall-speed = "sysprog.cmdline:main"
sysprog-copy = "sysprog.fileio:copy_main"
sysprog-seek-io = "sysprog.fileio:seek_io_main"
sysprog-write-bytes = "sysprog.fileio:write_bytes_main"
sysprog-mmcat = "sysprog.mapping:mmcat_main"
sysprog-t-mmap = "sysprog.mapping:t_mmap_main"
sysprog-list-files = "sysprog.dirtree:list_files_main"
sysprog-tree = "sysprog.dirtree:tree_main"
sysprog-dirbasename = "sysprog.paths:dirbasename_main"
sysprog-view-symlink = "sysprog.paths:view_symlink_main"
sysprog-unlink = "sysprog.paths:unlink_main"
sysprog-poll-pipes = "sysprog.multiplex:poll_pipes_main"
sysprog-select = "sysprog.multiplex:select_main"
sysprog-simple-pipe = "sysprog.pipes:simple_pipe_main"
sysprog-pipe-sync = "sysprog.pipes:pipe_sync_main"
sysprog-pipe-ls-wc = "sysprog.pipes:pipe_ls_wc_main"
sysprog-change-case = "sysprog.pipes:change_case_main"
sysprog-seqnum-client = "sysprog.seqnum:client_main"
sysprog-seqnum-server = "sysprog.seqnum:server_main"

[tool.hatch.build.targets.wheel]
packages = ["sysprog"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
