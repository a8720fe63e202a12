# pipeline/stages.py
from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union
import time
import logging

from ..exceptions import StageError, NotGrayscale
from ..models.cycle_record import StageOutcome
from ..models.pixel_image import PixelImage
from ..services.image_service import ImageService
from ..services.binarization_service import BinarizationService

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Monotonic clock in whole milliseconds."""
    return time.monotonic_ns() // 1_000_000


class PipelineStage(ABC):
    """
    One step of an execution cycle.

    A stage is executed exactly once. Its elapsed time is counted from
    construction, not from the execute() call, and is frozen when execute()
    returns. The image it produces is handed over with take_image() and can
    only be taken after a successful run.
    """
    label = "pipeline"

    def __init__(self):
        self._created_ms = now_ms()
        self._outcome: StageOutcome | None = None
        self._output: PixelImage | None = None

    @abstractmethod
    def _run(self) -> PixelImage | None:
        """Do the work. Raise a StageError to fail the stage."""

    def execute(self) -> StageOutcome:
        if self._outcome is not None:
            raise RuntimeError(f"The {self.label} step has already been executed")

        logger.debug(f"Running {self.label} step")
        try:
            self._output = self._run()
            succeeded = True
        except StageError as err:
            logger.error(str(err))
            succeeded = False

        self._outcome = StageOutcome(succeeded=succeeded, elapsed_ms=now_ms() - self._created_ms)
        return self._outcome

    @property
    def outcome(self) -> StageOutcome | None:
        return self._outcome

    def succeeded(self) -> bool:
        return self._outcome is not None and self._outcome.succeeded

    def elapsed_ms(self) -> int:
        if self._outcome is None:
            return now_ms() - self._created_ms
        return self._outcome.elapsed_ms

    def take_image(self) -> PixelImage:
        """Hand the produced image over to the caller; the stage keeps no reference."""
        if not self.succeeded():
            raise RuntimeError(f"The {self.label} step did not succeed, it has no image to hand over")
        if self._output is None:
            raise RuntimeError(f"The {self.label} step has no image left to hand over")
        image, self._output = self._output, None
        return image


class ReadStage(PipelineStage):
    label = "image file reading"

    def __init__(self, path: Union[str, Path], image_service: ImageService):
        super().__init__()
        self.path = Path(path)
        self.image_service = image_service

    def _run(self) -> PixelImage:
        return self.image_service.load(self.path)


class BinarizeStage(PipelineStage):
    label = "image binarization"

    def __init__(
        self,
        src_img: PixelImage,
        threshold: int,
        force_gray: bool,
        binarization_service: BinarizationService,
    ):
        super().__init__()
        self.src_img = src_img
        self.threshold = threshold
        self.force_gray = force_gray
        self.binarization_service = binarization_service

    def _run(self) -> PixelImage:
        if not self.binarization_service.is_grayscale(self.src_img):
            if not self.force_gray:
                raise NotGrayscale(
                    f"Input image {self.src_img.path} is not grayscale! "
                    "Consider using the force-grayscale option (-F) to also convert it to grayscale."
                )
            self.binarization_service.to_grayscale(self.src_img)

        binary = self.binarization_service.threshold_to_binary(self.src_img, self.threshold)
        self.src_img = None
        return binary


class WriteStage(PipelineStage):
    label = "image file writing"

    def __init__(self, bin_img: PixelImage, out_path: Union[str, Path], image_service: ImageService):
        super().__init__()
        self.bin_img = bin_img
        self.out_path = Path(out_path)
        self.image_service = image_service

    def _run(self) -> None:
        self.image_service.save(self.bin_img, self.out_path)
        return None
