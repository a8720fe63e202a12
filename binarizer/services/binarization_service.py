from __future__ import annotations
import numpy as np

from ..models.pixel_image import PixelImage, BINARY_DEPTH, WHITE, BLACK

# Rec. 709 luminosity weights
LUMA_RED = 0.2126
LUMA_GREEN = 0.7152
LUMA_BLUE = 0.0722


class BinarizationService:
    """
    Pure pixel kernels over 24-bit RGB images.
    No I/O here and no precondition checks: callers decide when each kernel applies.
    """

    @staticmethod
    def is_grayscale(img: PixelImage) -> bool:
        """True iff every pixel has R == G == B."""
        px = img.pixels
        # Row by row so a colored image is rejected without scanning all of it.
        for row in px:
            if not (np.array_equal(row[:, 0], row[:, 1]) and np.array_equal(row[:, 1], row[:, 2])):
                return False
        return True

    @staticmethod
    def to_grayscale(img: PixelImage) -> None:
        """
        Replace every pixel in place by its luminosity
        L = floor(0.2126 R + 0.7152 G + 0.0722 B), written to all three channels.
        """
        px = img.pixels
        red = px[:, :, 0].astype(np.float64)
        green = px[:, :, 1].astype(np.float64)
        blue = px[:, :, 2].astype(np.float64)
        lum = LUMA_RED * red + LUMA_GREEN * green + LUMA_BLUE * blue
        # Values are non-negative, so the uint8 cast truncates exactly like floor.
        px[:, :, :] = lum.astype(np.uint8)[:, :, np.newaxis]

    @staticmethod
    def threshold_to_binary(img: PixelImage, threshold: int) -> PixelImage:
        """
        Args:
            img (PixelImage): A grayscale 24-bit image.
            threshold (int): Gray values strictly greater than this become white.

        Returns:
            (PixelImage): A new 1-bit image of the same dimensions.
        """
        # Any channel works on a grayscale image; always sample red.
        gray = img.pixels[:, :, 0]
        binary = np.where(gray > threshold, WHITE, BLACK).astype(np.uint8)
        return PixelImage(pixels=binary, depth=BINARY_DEPTH, path=img.path)
