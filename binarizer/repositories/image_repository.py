from __future__ import annotations
from pathlib import Path
from typing import Union
import struct
import logging
import numpy as np
from PIL import Image as PILImage

from ..models.pixel_image import PixelImage, RGB_DEPTH, BINARY_DEPTH, WHITE
from ..exceptions import StageError, NotBmpExtension, NotTwentyFourBit, FileIoError, WriteFailed

logger = logging.getLogger(__name__)

BMP_EXTENSION = ".bmp"
BMP_SIGNATURE = b"BM"
# BITMAPFILEHEADER is 14 bytes; the DIB header starts right after it.
_DIB_OFFSET = 14
_CORE_HEADER_SIZE = 12 # OS/2 BITMAPCOREHEADER stores bpp at +10, every later header at +14.


class ImageRepository:
    """
    Handles BMP file I/O for PixelImage entities.
    Reads 24-bit BMPs only; writes 24-bit or 1-bit BMPs depending on the image depth.
    """

    @staticmethod
    def create_image(pixels: np.ndarray, depth: int = RGB_DEPTH, path: Union[str, Path] = None) -> PixelImage:
        if path is None:
            return PixelImage(pixels, depth)
        return PixelImage(pixels=pixels, depth=depth, path=Path(path))

    @staticmethod
    def bits_per_pixel(header: bytes, path: Path) -> int:
        """
        Args:
            header (bytes): At least the first 30 bytes of a BMP file.
            path (Path): Only used in error messages.

        Returns:
            (int): The bit count declared by the DIB header.
        """
        if len(header) < _DIB_OFFSET + 4 or header[:2] != BMP_SIGNATURE:
            raise FileIoError(f"The file at {path} is not a BMP image!")
        (dib_size,) = struct.unpack_from("<I", header, _DIB_OFFSET)
        offset = _DIB_OFFSET + (10 if dib_size == _CORE_HEADER_SIZE else 14)
        if len(header) < offset + 2:
            raise FileIoError(f"The file at {path} has a truncated BMP header!")
        (bits,) = struct.unpack_from("<H", header, offset)
        return bits

    @classmethod
    def load(cls, path: Union[str, Path]) -> PixelImage:
        path = Path(path)
        # Last "."-separated part of the name, so a file called ".bmp" qualifies too.
        _, dot, extension = path.name.rpartition(".")
        if not dot or "." + extension != BMP_EXTENSION:
            raise NotBmpExtension(f"The file at {path} does not have the extension bmp!")

        try:
            with path.open("rb") as fh:
                header = fh.read(_DIB_OFFSET + 16)
            bits = cls.bits_per_pixel(header, path)
            if bits != RGB_DEPTH:
                raise NotTwentyFourBit(f"The file at {path} is not using a 24 bit channel! ({bits} bit)")

            with PILImage.open(path, formats=["BMP"]) as pil_img:
                pixels = np.array(pil_img.convert("RGB"), dtype=np.uint8)
        except StageError:
            raise
        except (OSError, ValueError, PILImage.DecompressionBombError) as err:
            # Unreadable, truncated, corrupt or absurdly large (decompression bomb) files.
            raise FileIoError(f"Could not read image file {path}: {err}") from err

        logger.debug(f"Loaded {path}: {pixels.shape[1]}x{pixels.shape[0]}")
        return PixelImage(pixels=pixels, depth=RGB_DEPTH, path=path)

    @staticmethod
    def to_pil_image(image: PixelImage) -> PILImage.Image:
        pixels = np.ascontiguousarray(image.pixels)
        if image.depth == BINARY_DEPTH:
            # A boolean array becomes a mode "1" image where True is white.
            return PILImage.fromarray(pixels == WHITE)
        return PILImage.fromarray(pixels)

    @classmethod
    def save(cls, image: PixelImage, path: Union[str, Path]) -> None:
        path = Path(path)
        try:
            cls.to_pil_image(image).save(path, format="BMP")
        except OSError as err:
            raise WriteFailed(f"Could not write image file {path}: {err}") from err
        logger.debug(f"Saved {image.depth}-bit image to {path}")
