from __future__ import annotations

import numpy as np
import pytest

from ppmkit.models.image_model import ImageBuffer
from ppmkit.services.codec_service import ImageCodec


@pytest.fixture
def codec() -> ImageCodec:
    return ImageCodec()


@pytest.fixture
def gradient():
    """Фабрика тестовых изображений с различимыми пикселями."""
    def make(width: int, height: int) -> ImageBuffer:
        image = ImageBuffer.allocate(width, height)
        n = width * height
        idx = np.arange(n, dtype=np.int64)
        image.pixels[:, 0] = idx % 256
        image.pixels[:, 1] = (idx * 7 + 3) % 256
        image.pixels[:, 2] = 255 - idx % 256
        return image
    return make
