"""Разбор текстового заголовка PPM.

Принципы:
- SRP: класс только читает и проверяет заголовок, пиксели не трогает.
- После `parse` курсор источника стоит ровно на первом байте пиксельных данных.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, List

from ppmkit.models.errors import MalformedHeaderError, UnsupportedFormatError, UnsupportedRangeError
from ppmkit.models.header_model import FormatVariant, Header
from ppmkit.models.image_model import MAX_COMPONENT_VALUE

logger = logging.getLogger(__name__)

# width and height beyond this many significant digits are never allocatable
MAX_DIMENSION_DIGITS = 18


class HeaderParser:
    def parse(self, source: BinaryIO) -> Header:
        """Читает заголовок из двоичного потока.

        Args:
            source: Поток, установленный на начало заголовка.

        Returns:
            `Header` с вариантом, размерами, maxval и смещением данных.

        Raises:
            UnsupportedFormatError: если метка не P3/P6.
            MalformedHeaderError: если строка размеров или maxval не разбирается.
            UnsupportedRangeError: если maxval больше 255.
        """
        tag = self._read_line(source)
        variant = FormatVariant.from_tag(tag) if tag is not None else None
        if variant is None:
            raise UnsupportedFormatError(f"Неподдерживаемый формат: {tag!r}")

        dims = self._read_numbers(source, expected=2, what="размеры")
        if any(len(t.lstrip("0")) > MAX_DIMENSION_DIGITS for t in dims):
            raise MalformedHeaderError(f"Слишком большие размеры: {_shorten(dims)}")
        width, height = (_to_int(t) for t in dims)

        (maxval_token,) = self._read_numbers(source, expected=1, what="максимальное значение")
        # more than three significant digits is always above 255
        maxval = MAX_COMPONENT_VALUE + 1 if len(maxval_token.lstrip("0")) > 3 else _to_int(maxval_token)
        if maxval > MAX_COMPONENT_VALUE:
            raise UnsupportedRangeError(
                f"maxval={_shorten([maxval_token])}: поддерживается не более одного байта на компоненту"
            )

        header = Header(
            variant=variant,
            width=width,
            height=height,
            maxval=maxval,
            data_offset=source.tell(),
        )
        logger.debug("header parsed: %s", header)
        return header

    # ---------- Вспомогательные функции ----------
    def _read_numbers(self, source: BinaryIO, expected: int, what: str) -> List[str]:
        line = self._read_line(source)
        if line is None:
            raise MalformedHeaderError(f"Заголовок оборван: нет строки ({what})")
        tokens = line.split()
        if len(tokens) != expected or not all(_is_ascii_digits(t) for t in tokens):
            raise MalformedHeaderError(f"Некорректная строка ({what}): {line[:80]!r}")
        return tokens

    def _read_line(self, source: BinaryIO) -> str | None:
        """
        Возвращает следующую значимую строку без пробелов по краям.
        Пустые строки и комментарии ('#') пропускаются; None означает конец потока.
        Читается ровно одна строка за раз, без ограничения длины.
        """
        while True:
            raw = source.readline()
            if not raw:
                return None
            # latin-1 never fails; non-ascii tokens are rejected by the callers
            line = raw.decode("latin-1").strip()
            if not line:
                continue
            if line.startswith("#"):
                logger.debug("comment skipped: %r", line)
                continue
            return line


def _is_ascii_digits(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _to_int(token: str) -> int:
    # int() refuses very long digit strings, leading zeros included
    return int(token.lstrip("0") or "0")


def _shorten(tokens: List[str]) -> str:
    return " ".join(t if len(t) <= 20 else f"{t[:20]}…" for t in tokens)
