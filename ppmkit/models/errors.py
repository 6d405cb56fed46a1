"""Исключения кодека PPM.

Каждая ошибка описана отдельным классом, чтобы вызывающий код (CLI) мог сообщить
конкретную причину. Классы дополнительно наследуют встроенные исключения
(`ValueError`, `OSError`, `MemoryError`), поэтому их можно ловить и «по-старому».
"""
from __future__ import annotations


class PpmError(Exception):
    """Базовая ошибка чтения/записи PPM."""


class UnsupportedFormatError(PpmError, ValueError):
    """Метка формата не P3 и не P6."""


class MalformedHeaderError(PpmError, ValueError):
    """Строка размеров или максимального значения не разбирается."""


class UnsupportedRangeError(PpmError, ValueError):
    """Максимальное значение компоненты больше 255 (больше одного байта)."""


class AllocationFailedError(PpmError, MemoryError):
    """Не удалось выделить память под пиксели."""


class TruncatedDataError(PpmError, ValueError):
    """Бинарные данные закончились раньше, чем width*height пикселей."""


class MalformedPixelDataError(PpmError, ValueError):
    """В текстовых данных не хватает чисел или встретилось не число."""


class ComponentOutOfRangeError(PpmError, ValueError):
    """Компонента в текстовых данных больше объявленного maxval."""


class SourceUnavailableError(PpmError, OSError):
    """Исходный файл не удалось открыть."""


class DestinationUnavailableError(PpmError, OSError):
    """Файл назначения не удалось создать или заменить."""


class WriteFailedError(PpmError, OSError):
    """Ошибка ввода-вывода во время записи пикселей."""
