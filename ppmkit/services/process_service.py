from __future__ import annotations

import numpy as np

from ppmkit.models.image_model import ImageBuffer


class ProcessService:
    def darken_quadrant(self, image: ImageBuffer, factor: int = 2) -> ImageBuffer:
        """
        Уменьшает яркость левой верхней четверти изображения (x < w//2, y < h//2):
        каждая компонента делится нацело на `factor`. Изменяет буфер на месте.
        """
        if factor < 1:
            raise ValueError(f"Делитель должен быть >= 1, получено {factor}")
        quadrant = image.rows[: image.height // 2, : image.width // 2]
        # floor division keeps uint8 and never overflows
        np.floor_divide(quadrant, factor, out=quadrant)
        return image
