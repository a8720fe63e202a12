from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np

RGB_DEPTH = 24
BINARY_DEPTH = 1

# Values of a 1-bit buffer
WHITE = 0
BLACK = 1


@dataclass
class PixelImage:
    """
    Simple data object: a pixel buffer, its channel depth and the file it came from.
    No Pillow logic outside the image repository.
    """
    pixels: np.ndarray # (H, W, 3) uint8 RGB when depth == 24, (H, W) uint8 of WHITE/BLACK when depth == 1.
    depth: int = RGB_DEPTH # Bits per pixel, 24 or 1.
    path: Path | None = None # Source of the image.

    def __post_init__(self):
        if self.depth == RGB_DEPTH:
            if self.pixels.ndim != 3 or self.pixels.shape[2] != 3:
                raise ValueError(f"24-bit image needs (H, W, 3) pixels, got {self.pixels.shape}")
        elif self.depth == BINARY_DEPTH:
            if self.pixels.ndim != 2:
                raise ValueError(f"1-bit image needs (H, W) pixels, got {self.pixels.shape}")
        else:
            raise ValueError(f"Unsupported channel depth: {self.depth}")

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]
