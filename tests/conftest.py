from pathlib import Path
import struct

import numpy as np
import pytest
from PIL import Image as PILImage

from binarizer.models.configuration import Configuration


@pytest.fixture
def make_bmp(tmp_path):
    """Write rows of RGB triples as a 24-bit BMP under tmp_path and return its path."""
    def _make(name, rows, folder: Path = None):
        path = (folder or tmp_path) / name
        PILImage.fromarray(np.array(rows, dtype=np.uint8)).save(path, format="BMP")
        return path
    return _make


@pytest.fixture
def make_config(tmp_path):
    def _make(input_path=None, **kwargs):
        return Configuration(input_path=input_path or tmp_path, **kwargs)
    return _make


@pytest.fixture
def read_binary():
    """Decode a written BMP into a boolean array where True is white."""
    def _read(path):
        with PILImage.open(path) as img:
            return np.array(img.convert("L")) == 255
    return _read


GRAY_ROW = [[(0, 0, 0), (100, 100, 100), (200, 200, 200), (255, 255, 255)]]


@pytest.fixture
def make_oversized_bmp(tmp_path):
    """
    Write only the headers of a 24-bit BMP declaring 20000x20000 pixels,
    far more than Pillow agrees to decode.
    """
    def _make(name, folder: Path = None):
        path = (folder or tmp_path) / name
        file_header = struct.pack("<2sIHHI", b"BM", 54, 0, 0, 54)
        info_header = struct.pack("<IiiHHIIiiII", 40, 20000, 20000, 1, 24, 0, 0, 2835, 2835, 0, 0)
        path.write_bytes(file_header + info_header)
        return path
    return _make
