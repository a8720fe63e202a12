"""
Process-wide serializer for cycle progress output.

Every multi-line group of ``[Cycle N]`` lines is written while holding
``LOG_LOCK`` so concurrent cycles never interleave inside a group.
"""
import sys
import threading
from typing import Iterable

LOG_LOCK = threading.Lock()


def emit_group(lines: Iterable[str]) -> None:
    """Write *lines* to stdout as one contiguous block."""
    text = "".join(f"{line}\n" for line in lines)
    with LOG_LOCK:
        # Looked up on every call so redirected streams (tests, pipes) are honored.
        sys.stdout.write(text)
        sys.stdout.flush()


def emit(line: str) -> None:
    emit_group((line,))
