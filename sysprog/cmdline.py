"""Numeric command-line argument parsing and a call-cost demonstration."""

from __future__ import annotations

import enum
import os
import sys

DEFAULT_NUM_CALLS = 10_000_000


class NumFlag(enum.IntFlag):
    """Options that control how :func:`parse_number` reads a value."""

    NONE = 0
    NONNEG = enum.auto()
    GT_0 = enum.auto()
    ANY_BASE = enum.auto()
    BASE_8 = enum.auto()
    BASE_16 = enum.auto()


class UsageError(ValueError):
    """Raised when a command line is malformed."""


def _base_for(flags: NumFlag) -> int:
    if flags & NumFlag.ANY_BASE:
        return 0
    if flags & NumFlag.BASE_8:
        return 8
    if flags & NumFlag.BASE_16:
        return 16
    return 10


def _convert(body: str, base: int) -> int:
    if base == 0:
        lowered = body.lower()
        if lowered.startswith("0x"):
            return int(body[2:], 16)
        if len(body) > 1 and body.startswith("0"):
            return int(body[1:], 8)
        return int(body, 10)
    return int(body, base)


def parse_number(text, flags=NumFlag.NONE, name="argument"):
    """Convert ``text`` to an integer, enforcing the limits in ``flags``."""
    flags = NumFlag(flags)
    label = name or "argument"
    if text is None or not text.strip():
        raise UsageError(f"{label}: null or empty string")

    body = text.strip()
    sign = 1
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if not body or body[0] in "+-" or "_" in body or any(c.isspace() for c in body):
        raise UsageError(f"{label}: invalid integer: {text}")

    try:
        value = sign * _convert(body, _base_for(flags))
    except ValueError:
        raise UsageError(f"{label}: invalid integer: {text}") from None

    if flags & NumFlag.NONNEG and value < 0:
        raise UsageError(f"{label}: negative value not allowed: {text}")
    if flags & NumFlag.GT_0 and value <= 0:
        raise UsageError(f"{label}: value must be > 0: {text}")
    return value


def _one() -> int:
    return 1


def run_calls(num_calls, syscall=True):
    """Call getppid() (or a trivial function) ``num_calls`` times; return the last result."""
    func = os.getppid if syscall else _one
    result = None
    for _ in range(num_calls):
        result = func()
    return result


def main(argv=None):
    """Time-the-calls entry point: ``[--function] [num-calls]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "--help":
        print("Usage: syscall-speed [--function] [num-calls]", file=sys.stderr)
        return 1

    syscall = True
    if args and args[0] == "--function":
        syscall = False
        args.pop(0)

    try:
        num_calls = (
            parse_number(args[0], NumFlag.GT_0, "num-calls") if args else DEFAULT_NUM_CALLS
        )
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1

    print("Calling getppid()" if syscall else "Calling normal function")
    run_calls(num_calls, syscall)
    return 0