from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from ..exceptions import InvalidConfig
from ..settings import (
    DEFAULT_POOL_SIZE,
    DEFAULT_THRESHOLD,
    POOL_SIZE_MIN,
    POOL_SIZE_MAX,
    THRESHOLD_MIN,
    THRESHOLD_MAX,
)


@dataclass(frozen=True)
class Configuration:
    """
    Validated, read-only input of one batch run.
    Built once by the CLI and shared by every execution cycle.
    """
    input_path: Path
    multithreaded: bool = False
    pool_size: int = DEFAULT_POOL_SIZE # Worker count when multithreaded, [1, 255].
    threshold: int = DEFAULT_THRESHOLD # Gray values strictly above become white, [0, 255].
    force_grayscale: bool = False # Collapse non-gray images to luminosity instead of failing.

    def __post_init__(self):
        object.__setattr__(self, "input_path", Path(self.input_path))
        if not self.input_path.exists():
            raise InvalidConfig(f"The given path doesn't exist: {self.input_path}")
        if not POOL_SIZE_MIN <= self.pool_size <= POOL_SIZE_MAX:
            raise InvalidConfig(
                f"The number of threads must be between {POOL_SIZE_MIN} and {POOL_SIZE_MAX}, got {self.pool_size}"
            )
        if not THRESHOLD_MIN <= self.threshold <= THRESHOLD_MAX:
            raise InvalidConfig(
                f"The static threshold must be between {THRESHOLD_MIN} and {THRESHOLD_MAX}, got {self.threshold}"
            )
