from pathlib import Path
from typing import Union
import numpy as np

from ..models.pixel_image import PixelImage, RGB_DEPTH
from ..repositories.image_repository import ImageRepository, BMP_EXTENSION
from ..settings import OUTPUT_SUFFIX


class ImageService:
    """I/O helpers.  No pixel kernels here."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, depth: int = RGB_DEPTH, path: Union[str, Path] = None) -> PixelImage:
        return self.image_repository.create_image(pixels, depth, path)

    def load(self, path: Union[str, Path]) -> PixelImage:
        """Load a single 24-bit BMP from disk into a PixelImage."""
        return self.image_repository.load(path)

    def save(self, image: PixelImage, path: Union[str, Path]) -> None:
        """
        Business-level method to save the image to a specific path.
        Existing files are overwritten.
        """
        self.image_repository.save(image, path)

    @staticmethod
    def output_path_for(source: Union[str, Path]) -> Path:
        """
        dir/name.bmp -> dir/name_BINARIZED.bmp

        The source is expected to end in ".bmp"; reading already enforces it.
        """
        source = str(source)
        return Path(source[: -len(BMP_EXTENSION)] + OUTPUT_SUFFIX)
