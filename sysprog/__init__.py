"""Small POSIX tools for file I/O, mappings, directory walks, multiplexing, pipes and FIFOs."""

__version__ = "0.1.0"