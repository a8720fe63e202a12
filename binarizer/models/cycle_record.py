from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class CycleState(Enum):
    NOT_STARTED = "not started"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"


@dataclass(frozen=True)
class StageOutcome:
    """Result of a single stage invocation."""
    succeeded: bool
    elapsed_ms: int


@dataclass
class CycleRecord:
    """
    Bookkeeping of one execution cycle: identity, timestamps and
    per-stage durations (all in milliseconds).
    """
    cycle_id: int
    source: Path
    start_ms: int | None = None
    end_ms: int | None = None
    read_ms: int | None = None
    binarize_ms: int | None = None
    write_ms: int | None = None

    @property
    def stages_ms(self) -> int:
        """Sum of the stage durations recorded so far."""
        return sum(ms for ms in (self.read_ms, self.binarize_ms, self.write_ms) if ms is not None)
