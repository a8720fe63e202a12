"""
Error kinds raised by the binarizer core.

Stage errors never escape a stage: ``PipelineStage.execute`` logs them and
marks the stage failed. Cycle-state errors are programmer errors and are
raised straight to the caller.
"""


class BinarizerError(Exception):
    """Base class for everything raised on purpose by this package."""


# ─── Configuration ─────────────────────────────────────────────────
class InvalidConfig(BinarizerError, ValueError):
    pass


class EmptyDirectory(InvalidConfig):
    pass


# ─── Stage failures ────────────────────────────────────────────────
class StageError(BinarizerError):
    pass


class NotBmpExtension(StageError):
    pass


class NotTwentyFourBit(StageError):
    pass


class FileIoError(StageError):
    pass


class NotGrayscale(StageError):
    pass


class WriteFailed(StageError):
    pass


# ─── Cycle introspection ───────────────────────────────────────────
class CycleStateError(BinarizerError, RuntimeError):
    pass


class StillRunning(CycleStateError):
    pass


class NeverRan(CycleStateError):
    pass


class CycleFailed(CycleStateError):
    pass
