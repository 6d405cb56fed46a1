"""Модели данных для изображений.

Принципы:
- SRP: только хранение пикселей и доступ к ним, без разбора форматов.
- Один непрерывный буфер `numpy.uint8` формы (width*height, 3); построчный
  вид является view того же буфера, а не отдельная копия.
"""
from __future__ import annotations

from typing import NamedTuple, Optional

import numpy as np
from PIL import Image

from ppmkit.models.errors import AllocationFailedError

MAX_COMPONENT_VALUE = 255


class Pixel(NamedTuple):
    """Пиксель: три компоненты 0..255."""
    red: int
    green: int
    blue: int


class ImageBuffer:
    """Изображение RGB 8 бит на компоненту.

    Fields:
        width: Ширина, px (не меняется после выделения).
        height: Высота, px (не меняется после выделения).
        pixels: Плоский буфер формы (width*height, 3), индекс = y*width + x.
        rows: Вид формы (height, width, 3) над тем же буфером.
    """

    def __init__(self, width: int, height: int, storage: np.ndarray) -> None:
        self._width = width
        self._height = height
        self._storage: Optional[np.ndarray] = storage

    @classmethod
    def allocate(cls, width: int, height: int) -> "ImageBuffer":
        """Выделяет изображение width×height, заполненное нулями.

        Raises:
            ValueError: если размеры отрицательные.
            AllocationFailedError: если не хватило памяти.
        """
        width, height = int(width), int(height)
        if width < 0 or height < 0:
            raise ValueError(f"Недопустимые размеры: {width}x{height}")
        try:
            storage = np.zeros((width * height, 3), dtype=np.uint8)
        except (MemoryError, ValueError) as exc:
            raise AllocationFailedError(
                f"Не удалось выделить память под изображение {width}x{height}"
            ) from exc
        return cls(width, height, storage)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "ImageBuffer":
        """Создаёт буфер из изображения PIL (любой режим приводится к RGB)."""
        arr = np.asarray(image.convert("RGB"), dtype=np.uint8)
        height, width = arr.shape[:2]
        buffer = cls.allocate(width, height)
        buffer.rows[...] = arr
        return buffer

    # ---- Shape ----
    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def pixel_count(self) -> int:
        return self._width * self._height

    # ---- Views ----
    @property
    def pixels(self) -> np.ndarray:
        return self._alive_storage()

    @property
    def rows(self) -> np.ndarray:
        # reshape of a C-contiguous array is always a view
        return self._alive_storage().reshape(self._height, self._width, 3)

    def row(self, y: int) -> np.ndarray:
        """Возвращает строку y как view длиной width."""
        if not 0 <= y < self._height:
            raise IndexError(f"Строка {y} вне диапазона 0..{self._height - 1}")
        start = y * self._width
        return self._alive_storage()[start:start + self._width]

    # ---- Pixel access ----
    def get_pixel(self, x: int, y: int) -> Pixel:
        r, g, b = self.row(y)[self._check_x(x)].tolist()
        return Pixel(r, g, b)

    def set_pixel(self, x: int, y: int, pixel: Pixel | tuple[int, int, int]) -> None:
        values = tuple(int(c) for c in pixel)
        if len(values) != 3:
            raise ValueError(f"Ожидалось три компоненты, получено {len(values)}")
        for c in values:
            if not 0 <= c <= MAX_COMPONENT_VALUE:
                raise ValueError(f"Компонента {c} вне диапазона 0..{MAX_COMPONENT_VALUE}")
        self.row(y)[self._check_x(x)] = values

    def same_pixels(self, other: "ImageBuffer") -> bool:
        """True, если размеры и все пиксели совпадают."""
        return (
            self.width == other.width
            and self.height == other.height
            and bool(np.array_equal(self.pixels, other.pixels))
        )

    # ---- Interop ----
    def to_pil(self) -> Image.Image:
        """Копия изображения как `PIL.Image.Image` в режиме RGB."""
        return Image.fromarray(self.rows.copy())

    # ---- Lifecycle ----
    @property
    def released(self) -> bool:
        return self._storage is None

    def release(self) -> None:
        """Освобождает буфер. Вызывается один раз; повторный вызов считается ошибкой."""
        if self._storage is None:
            raise RuntimeError("Изображение уже освобождено")
        self._storage = None

    def __enter__(self) -> "ImageBuffer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._storage is not None:
            self.release()

    def __repr__(self) -> str:
        state = "released" if self.released else "alive"
        return f"ImageBuffer({self._width}x{self._height}, {state})"

    # ---- Helpers ----
    def _alive_storage(self) -> np.ndarray:
        if self._storage is None:
            raise RuntimeError("Изображение освобождено")
        return self._storage

    def _check_x(self, x: int) -> int:
        if not 0 <= x < self._width:
            raise IndexError(f"Столбец {x} вне диапазона 0..{self._width - 1}")
        return x
