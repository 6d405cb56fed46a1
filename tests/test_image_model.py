from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from ppmkit.models.errors import AllocationFailedError
from ppmkit.models.image_model import ImageBuffer, Pixel


def test_allocate_is_zero_filled():
    image = ImageBuffer.allocate(4, 3)
    assert (image.width, image.height, image.pixel_count) == (4, 3, 12)
    assert image.pixels.shape == (12, 3)
    assert image.pixels.dtype == np.uint8
    assert not image.pixels.any()


def test_rows_share_memory_with_flat_storage():
    image = ImageBuffer.allocate(3, 2)
    image.rows[1, 2] = (1, 2, 3)
    # index = y * width + x
    assert image.pixels[1 * 3 + 2].tolist() == [1, 2, 3]
    assert np.shares_memory(image.rows, image.pixels)
    assert np.shares_memory(image.row(1), image.pixels)


def test_row_slice_starts_at_y_times_width():
    image = ImageBuffer.allocate(2, 3)
    image.pixels[4] = (9, 9, 9)
    assert image.row(2)[0].tolist() == [9, 9, 9]
    assert len(image.row(0)) == 2


def test_get_and_set_pixel():
    image = ImageBuffer.allocate(2, 2)
    image.set_pixel(1, 0, Pixel(10, 20, 30))
    assert image.get_pixel(1, 0) == Pixel(10, 20, 30)
    assert image.get_pixel(0, 1) == Pixel(0, 0, 0)


@pytest.mark.parametrize("pixel", [(256, 0, 0), (0, -1, 0), (1, 2)])
def test_set_pixel_rejects_bad_components(pixel):
    image = ImageBuffer.allocate(1, 1)
    with pytest.raises(ValueError):
        image.set_pixel(0, 0, pixel)


def test_pixel_access_out_of_bounds():
    image = ImageBuffer.allocate(2, 2)
    with pytest.raises(IndexError):
        image.get_pixel(2, 0)
    with pytest.raises(IndexError):
        image.row(-1)


def test_zero_sized_image():
    image = ImageBuffer.allocate(0, 5)
    assert image.pixel_count == 0
    assert image.rows.shape == (5, 0, 3)


def test_negative_dimensions_rejected():
    with pytest.raises(ValueError):
        ImageBuffer.allocate(-1, 2)


def test_allocation_failure(monkeypatch):
    def boom(*args, **kwargs):
        raise MemoryError

    monkeypatch.setattr(np, "zeros", boom)
    with pytest.raises(AllocationFailedError):
        ImageBuffer.allocate(10, 10)


def test_release_once():
    image = ImageBuffer.allocate(1, 1)
    image.release()
    assert image.released
    with pytest.raises(RuntimeError):
        image.pixels
    with pytest.raises(RuntimeError):
        image.release()


def test_context_manager_releases():
    with ImageBuffer.allocate(1, 1) as image:
        image.set_pixel(0, 0, (1, 1, 1))
    assert image.released


def test_same_pixels(gradient):
    a = gradient(3, 2)
    b = gradient(3, 2)
    assert a.same_pixels(b)
    b.set_pixel(0, 0, (1, 2, 3))
    assert not a.same_pixels(b)
    assert not a.same_pixels(gradient(2, 3))


def test_pil_interop(gradient):
    image = gradient(5, 4)
    pil = image.to_pil()
    assert pil.mode == "RGB"
    assert pil.size == (5, 4)
    assert pil.getpixel((3, 2)) == tuple(image.get_pixel(3, 2))

    back = ImageBuffer.from_pil(pil)
    assert back.same_pixels(image)


def test_from_pil_converts_mode():
    pil = Image.new("L", (2, 2), color=77)
    image = ImageBuffer.from_pil(pil)
    assert image.get_pixel(1, 1) == Pixel(77, 77, 77)
