"""Контроллер командной строки: загрузка → обработка → сохранение.

SOLID:
- SRP: класс связывает сервисы и переводит ошибки кодека в код возврата.
- DIP: сервисы передаются полями и легко подменяются в тестах.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from ppmkit.models.errors import PpmError
from ppmkit.models.header_model import FormatVariant
from ppmkit.services.codec_service import ImageCodec
from ppmkit.services.process_service import ProcessService

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


@dataclass
class AppController:
    """Выполняет демонстрационное преобразование одного файла.

    Ответственности:
    - Загрузка исходного PPM через `ImageCodec`.
    - Затемнение левой верхней четверти через `ProcessService`.
    - Сохранение результата в выбранном варианте и выбор кода возврата.
    """
    codec: ImageCodec = field(default_factory=ImageCodec)
    process_service: ProcessService = field(default_factory=ProcessService)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)

    def run(self, input_path: Path, output_path: Path, variant: FormatVariant) -> int:
        try:
            image = self.codec.load(input_path)
        except PpmError as exc:
            print(f'Failed loading "{input_path}"! {exc}', file=self.stderr)
            return EXIT_FAILURE

        with image:
            self.process_service.darken_quadrant(image)
            try:
                self.codec.store(output_path, image, variant)
            except PpmError as exc:
                print(f'Failed writing "{output_path}"! {exc}', file=self.stderr)
                return EXIT_FAILURE

        logger.info("%s -> %s (%s)", input_path, output_path, variant.value)
        return EXIT_SUCCESS
