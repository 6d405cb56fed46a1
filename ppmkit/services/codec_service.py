"""Загрузка и сохранение изображений PPM (P3 и P6).

Принципы:
- SRP: класс отвечает только за кодирование/декодирование пикселей; заголовок
  разбирает `HeaderParser`.
- Ресурсы (файлы, буфер) освобождаются на любом пути выхода, включая ошибки.
- Запись атомарна: сначала во временный файл рядом, затем переименование.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

import numpy as np

from ppmkit.models.errors import (
    ComponentOutOfRangeError,
    DestinationUnavailableError,
    MalformedPixelDataError,
    SourceUnavailableError,
    TruncatedDataError,
    WriteFailedError,
)
from ppmkit.models.header_model import FormatVariant, Header
from ppmkit.models.image_model import MAX_COMPONENT_VALUE, ImageBuffer
from ppmkit.services.header_parser import HeaderParser

logger = logging.getLogger(__name__)

TEXT_PIXELS_PER_LINE = 5
# pixels per encoded chunk; a multiple of TEXT_PIXELS_PER_LINE
_CHUNK_PIXELS = TEXT_PIXELS_PER_LINE * 4096


class ImageCodec:
    def __init__(self, header_parser: Optional[HeaderParser] = None) -> None:
        self._header_parser = header_parser or HeaderParser()

    # ---------- Загрузка ----------
    def load(self, file_path: str | Path) -> ImageBuffer:
        """Загружает PPM с диска.

        Args:
            file_path: Путь до файла P3 или P6.

        Returns:
            Полностью декодированный `ImageBuffer`.

        Raises:
            SourceUnavailableError: если файл не существует или не открывается.
            PpmError: любая ошибка разбора заголовка или данных (см. `read`).
        """
        path = Path(file_path)
        if not path.is_file():
            raise SourceUnavailableError(f"Файл не найден: {path}")
        try:
            source = path.open("rb")
        except OSError as exc:
            raise SourceUnavailableError(f"Не удалось открыть файл: {path}") from exc

        with source:
            buffer = self.read(source)
        logger.debug("loaded %s: %dx%d", path, buffer.width, buffer.height)
        return buffer

    def read(self, source: BinaryIO) -> ImageBuffer:
        """Читает PPM из открытого двоичного потока, установленного на начало заголовка."""
        header = self._header_parser.parse(source)
        buffer = ImageBuffer.allocate(header.width, header.height)
        try:
            source.seek(header.data_offset)
            self.decode_pixels(source, header, buffer)
        except Exception:
            buffer.release()
            raise
        return buffer

    def decode_pixels(self, source: BinaryIO, header: Header, buffer: ImageBuffer) -> None:
        """Заполняет `buffer` пикселями из `source` согласно варианту заголовка."""
        if header.variant is FormatVariant.BINARY:
            self._decode_binary(source, header, buffer)
        else:
            self._decode_text(source, header, buffer)

    def _decode_binary(self, source: BinaryIO, header: Header, buffer: ImageBuffer) -> None:
        # raw bytes are always 0..255, no check against header.maxval
        expected = header.pixel_count * 3
        data = _read_exact(source, expected)
        if len(data) < expected:
            raise TruncatedDataError(
                f"Данные оборваны: прочитано {len(data)} из {expected} байт"
            )
        buffer.pixels[...] = np.frombuffer(data, dtype=np.uint8).reshape(-1, 3)

    def _decode_text(self, source: BinaryIO, header: Header, buffer: ImageBuffer) -> None:
        count = header.pixel_count * 3
        tokens = source.read().split(maxsplit=count)[:count]

        # first token that is not a plain decimal number; len(tokens) if all are fine
        malformed_at = next(
            (i for i, tok in enumerate(tokens) if not (tok.isascii() and tok.isdigit())),
            len(tokens),
        )
        limit = header.maxval + 1
        values = np.fromiter(
            (_clamp_component(tok, limit) for tok in tokens[:malformed_at]),
            dtype=np.int64,
            count=malformed_at,
        )

        # errors are reported for the first bad pixel; a bad token beats a bad value
        over = np.flatnonzero(values > header.maxval)
        if over.size and over[0] // 3 < malformed_at // 3:
            index = int(over[0])
            raise ComponentOutOfRangeError(
                f"Пиксель {index // 3}: компонента {tokens[index][:20].decode('ascii')} "
                f"больше maxval={header.maxval}"
            )
        if malformed_at < count:
            pixel = malformed_at // 3
            if malformed_at < len(tokens):
                bad = tokens[malformed_at][:20].decode("latin-1")
                raise MalformedPixelDataError(f"Пиксель {pixel}: не число {bad!r}")
            raise MalformedPixelDataError(
                f"Пиксель {pixel}: данные закончились ({len(tokens)} из {count} чисел)"
            )

        buffer.pixels[...] = values.astype(np.uint8).reshape(-1, 3)

    # ---------- Сохранение ----------
    def store(self, file_path: str | Path, buffer: ImageBuffer, variant: FormatVariant) -> None:
        """Сохраняет изображение в PPM заданного варианта.

        Файл пишется во временный файл в том же каталоге и переименовывается
        поверх `file_path` только после успешной записи.

        Raises:
            DestinationUnavailableError: если файл нельзя создать или заменить.
            WriteFailedError: если запись прервалась ошибкой ввода-вывода.
        """
        # a symlink keeps pointing at the rewritten file instead of being replaced
        path = Path(file_path).resolve()
        if path.is_dir():
            raise DestinationUnavailableError(f"Путь назначения является каталогом: {path}")
        mode = _target_mode(path)

        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        except OSError as exc:
            raise DestinationUnavailableError(f"Не удалось создать файл в {path.parent}") from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as destination:
                self.write(destination, buffer, variant)
                try:
                    destination.flush()
                    os.fsync(destination.fileno())
                except OSError as exc:
                    raise WriteFailedError(f"Ошибка записи: {path}") from exc
            try:
                os.chmod(tmp_path, mode)
                os.replace(tmp_path, path)
            except OSError as exc:
                raise DestinationUnavailableError(f"Не удалось заменить файл: {path}") from exc
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug("stored %s (%s, %dx%d)", path, variant.value, buffer.width, buffer.height)

    def write(self, destination: BinaryIO, buffer: ImageBuffer, variant: FormatVariant) -> None:
        """Пишет заголовок и пиксели в открытый двоичный поток."""
        try:
            destination.write(self.encode_header(buffer, variant))
            for chunk in self.encode_pixels(buffer, variant):
                destination.write(chunk)
        except OSError as exc:
            raise WriteFailedError("Ошибка записи пиксельных данных") from exc

    def encode_header(self, buffer: ImageBuffer, variant: FormatVariant) -> bytes:
        # maxval is always written as 255, the image keeps no per-file maxval
        return f"{variant.value}\n{buffer.width} {buffer.height}\n{MAX_COMPONENT_VALUE}\n".encode("ascii")

    def encode_pixels(self, buffer: ImageBuffer, variant: FormatVariant) -> Iterator[bytes]:
        """
        Кодирует пиксели в порядке хранения (строка за строкой).
        P6: байты r, g, b подряд. P3: "r g b " на пиксель и перевод строки
        после каждого 5-го пикселя общей последовательности.
        """
        pixels = buffer.pixels
        for start in range(0, buffer.pixel_count, _CHUNK_PIXELS):
            block = pixels[start:start + _CHUNK_PIXELS]
            if variant is FormatVariant.BINARY:
                yield block.tobytes()
            else:
                yield _encode_text_block(block.tolist())


def _encode_text_block(block: list) -> bytes:
    parts = []
    for index, (r, g, b) in enumerate(block, start=1):
        parts.append(f"{r} {g} {b} ")
        if index % TEXT_PIXELS_PER_LINE == 0:
            parts.append("\n")
    return "".join(parts).encode("ascii")


def _read_exact(source: BinaryIO, size: int) -> bytes:
    """Читает до `size` байт; меньше только если поток закончился."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _target_mode(path: Path) -> int:
    try:
        return path.stat().st_mode & 0o777
    except OSError:
        # os.umask can only be read by setting it; not safe with concurrent threads
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _clamp_component(token: bytes, limit: int) -> int:
    # more than three significant digits is above 255; int() refuses very long strings
    digits = token.lstrip(b"0")
    if len(digits) > 3:
        return limit
    return min(int(digits or b"0"), limit)
