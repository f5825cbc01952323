"""Настройки по умолчанию из окружения (.env поддерживается)."""
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from imgshrink.models.image_model import TargetConstraints

load_dotenv()

MAX_SIZE_KB = float(os.getenv("IMGSHRINK_MAX_SIZE_KB", "200"))
MAX_WIDTH = int(os.getenv("IMGSHRINK_MAX_WIDTH", "1024"))
MAX_HEIGHT = int(os.getenv("IMGSHRINK_MAX_HEIGHT", "1024"))
LOG_LEVEL = os.getenv("IMGSHRINK_LOG_LEVEL", "WARNING")


def default_constraints() -> TargetConstraints:
    return TargetConstraints(max_size_kb=MAX_SIZE_KB, max_width=MAX_WIDTH, max_height=MAX_HEIGHT)


def configure_logging(level: str | None = None) -> None:
    """Настраивает корневой логгер уровнем из аргумента или IMGSHRINK_LOG_LEVEL."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
