"""Модель заголовка PPM и варианты кодирования."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FormatVariant(Enum):
    """Вариант кодирования пиксельных данных, значение равно метке формата."""
    BINARY = "P6"
    TEXT = "P3"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["FormatVariant"]:
        """Возвращает вариант по метке ("P3"/"P6") или None для неизвестной метки."""
        for variant in cls:
            if variant.value == tag:
                return variant
        return None


@dataclass(frozen=True)
class Header:
    """Разобранный заголовок; живёт только во время загрузки.

    Fields:
        variant: Вариант кодирования данных.
        width: Ширина, px.
        height: Высота, px.
        maxval: Объявленное максимальное значение компоненты.
        data_offset: Смещение начала пиксельных данных в источнике, байты.
    """
    variant: FormatVariant
    width: int
    height: int
    maxval: int
    data_offset: int

    @property
    def pixel_count(self) -> int:
        return self.width * self.height
