"""Точка входа в приложение."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from ppmkit.controllers.app_controller import AppController
from ppmkit.models.header_model import FormatVariant


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="ppmkit",
        description="Reads a PPM image, halves the brightness of its top-left quadrant and writes it back.",
    )
    ap.add_argument("-ascii", "--ascii", action="store_true", help="write a plain text PPM (P3) instead of binary (P6)")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    ap.add_argument("input", type=Path, help="input PPM file (P3 or P6)")
    ap.add_argument("output", type=Path, help="output PPM file")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """Разбирает аргументы, настраивает логирование и запускает контроллер."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    variant = FormatVariant.TEXT if args.ascii else FormatVariant.BINARY
    return AppController().run(args.input, args.output, variant)


if __name__ == "__main__":
    raise SystemExit(main())
