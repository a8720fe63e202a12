from __future__ import annotations
from pathlib import Path
from typing import Union
import itertools
import logging
import threading

from ..exceptions import BinarizerError, StillRunning, NeverRan, CycleFailed
from ..models.configuration import Configuration
from ..models.cycle_record import CycleRecord, CycleState, StageOutcome
from ..services.image_service import ImageService
from ..services.binarization_service import BinarizationService
from .log_serializer import emit
from .stages import PipelineStage, ReadStage, BinarizeStage, WriteStage, now_ms

logger = logging.getLogger(__name__)

_cycle_ids = itertools.count()
_cycle_ids_lock = threading.Lock()


def _next_cycle_id() -> int:
    with _cycle_ids_lock:
        return next(_cycle_ids)


class ExecutionCycle:
    """
    Completely processes a single file: read -> binarize -> write.

    Stops at the first failing stage. Progress goes to stdout through the
    log serializer, one atomic group per message.
    """

    def __init__(
        self,
        source: Union[str, Path],
        config: Configuration,
        image_service: ImageService | None = None,
        binarization_service: BinarizationService | None = None,
    ):
        self.cycle_id = _next_cycle_id()
        self.source = Path(source)
        self.config = config
        self.image_service = image_service or ImageService()
        self.binarization_service = binarization_service or BinarizationService()
        self.record = CycleRecord(cycle_id=self.cycle_id, source=self.source)
        self.state = CycleState.NOT_STARTED
        self.output_path: Path | None = None

    def __repr__(self):
        return f"ExecutionCycle(id={self.cycle_id}, source={str(self.source)!r}, state={self.state.value})"

    # ─── Output ─────────────────────────────────────────────────────
    def _say(self, message: str) -> None:
        emit(f"[Cycle {self.cycle_id}] {message}")

    def print_processing_time(self) -> None:
        self._say(f"Finished. This execution cycle took {self.processing_time()} ms.")

    def _execute_stage(self, stage: PipelineStage) -> StageOutcome:
        outcome = stage.execute()
        if outcome.succeeded:
            self._say(f"This {stage.label} step took {outcome.elapsed_ms} milliseconds.")
        return outcome

    def _fail(self, message: str) -> bool:
        self.state = CycleState.FAILED
        self._say(message)
        return False

    # ─── Public API ────────────────────────────────────────────────
    def run(self) -> bool:
        """
        Run the three stages for this cycle's file.

        Returns:
            True if the output file was written, False if a stage failed.
        """
        if self.state is not CycleState.NOT_STARTED:
            raise BinarizerError(f"Cycle {self.cycle_id} has already run")

        self._say("Started.")
        self.state = CycleState.RUNNING
        self.record.start_ms = now_ms()

        try:
            return self._run_stages()
        except BaseException:
            # Only programming errors get here; leave the cycle in a terminal state.
            self.state = CycleState.FAILED
            raise

    def _run_stages(self) -> bool:
        # 1. Read
        read = ReadStage(self.source, self.image_service)
        outcome = self._execute_stage(read)
        self.record.read_ms = outcome.elapsed_ms
        if not outcome.succeeded:
            return self._fail("Failed in reading image file!")

        # 2. Binarize
        binarize = BinarizeStage(
            read.take_image(),
            threshold=self.config.threshold,
            force_gray=self.config.force_grayscale,
            binarization_service=self.binarization_service,
        )
        outcome = self._execute_stage(binarize)
        self.record.binarize_ms = outcome.elapsed_ms
        if not outcome.succeeded:
            return self._fail("Failed in processing image!")

        # 3. Write next to the source
        self.output_path = self.image_service.output_path_for(self.source)
        write = WriteStage(binarize.take_image(), self.output_path, self.image_service)
        outcome = self._execute_stage(write)
        self.record.write_ms = outcome.elapsed_ms
        if not outcome.succeeded:
            return self._fail("Failed in writing image file!")

        self.record.end_ms = now_ms()
        self.state = CycleState.FINISHED
        self.print_processing_time()
        return True

    def processing_time(self) -> int:
        """Milliseconds between start and end of a finished cycle."""
        if self.state is CycleState.RUNNING:
            raise StillRunning(f"Cycle {self.cycle_id} is still running!")
        if self.state is CycleState.NOT_STARTED:
            raise NeverRan(f"Cycle {self.cycle_id} has never run!")
        if self.state is CycleState.FAILED:
            raise CycleFailed(f"Cycle {self.cycle_id} failed before finishing!")
        return self.record.end_ms - self.record.start_ms

    def processing_time_until_now(self) -> int:
        if self.state is CycleState.RUNNING:
            return now_ms() - self.record.start_ms
        return self.processing_time()
