import base64
import io

import numpy as np
import pytest
from PIL import Image


def _png_bytes(array: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(array).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return _png_bytes


@pytest.fixture
def encode_mask():
    def encode(array: np.ndarray) -> str:
        return base64.b64encode(_png_bytes(array)).decode("ascii")

    return encode


@pytest.fixture
def photo_path(tmp_path):
    path = tmp_path / "photo.png"
    path.write_bytes(_png_bytes(np.full((8, 8, 3), 100, dtype=np.uint8)))
    return path
