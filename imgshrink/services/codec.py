"""Кодек изображений: декодирование, масштабирование и кодирование.

Принципы:
- DIP: компрессор зависит от протокола `ImageCodec`, а не от Pillow напрямую,
  поэтому в тестах подставляется детерминированный двойник.
- SRP: `PillowCodec` только переводит ошибки Pillow в ошибки компрессора.
"""
from __future__ import annotations

import io
import logging
from typing import Any, Dict, Protocol, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from imgshrink.models.errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)

# Нестандартные, но встречающиеся в браузерах MIME-типы
MIME_ALIASES: Dict[str, str] = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/x-png": "image/png",
}

# Форматы без альфа-канала и палитры
_OPAQUE_MODES: Dict[str, Tuple[str, ...]] = {
    "JPEG": ("RGB", "L", "CMYK"),
}


class ImageCodec(Protocol):
    """Возможности декодирования/масштабирования/кодирования, нужные компрессору."""

    def decode(self, data: bytes) -> Any: ...

    def size(self, buffer: Any) -> Tuple[int, int]: ...

    def resize(self, buffer: Any, width: int, height: int) -> Any: ...

    def encode(self, buffer: Any, mime_type: str, quality: float) -> bytes: ...


def _save_formats() -> Dict[str, str]:
    """MIME-тип -> формат Pillow, для которого зарегистрирован кодировщик."""
    Image.init()
    formats: Dict[str, str] = {}
    for fmt, mime in Image.MIME.items():
        if fmt in Image.SAVE:
            formats.setdefault(mime.lower(), fmt)
    return formats


class PillowCodec:
    def __init__(self) -> None:
        self._formats = _save_formats()

    def format_for(self, mime_type: str) -> str:
        """Возвращает формат Pillow для MIME-типа.

        Raises:
            EncodeError: если для типа нет кодировщика.
        """
        mime = mime_type.lower()
        mime = MIME_ALIASES.get(mime, mime)
        fmt = self._formats.get(mime)
        if fmt is None:
            raise EncodeError(f"Нет кодировщика для типа {mime_type}")
        return fmt

    def decode(self, data: bytes) -> Image.Image:
        """Декодирует байты в изображение PIL с учётом EXIF-ориентации.

        Raises:
            DecodeError: если байты не распознаны как изображение.
        """
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
            oriented = ImageOps.exif_transpose(image)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise DecodeError(f"Не удалось декодировать изображение: {exc}") from exc
        logger.debug("Декодировано %s %dx%d, режим %s", image.format, *oriented.size, oriented.mode)
        return oriented

    def size(self, buffer: Image.Image) -> Tuple[int, int]:
        return buffer.size

    def resize(self, buffer: Image.Image, width: int, height: int) -> Image.Image:
        if buffer.size == (width, height):
            return buffer
        return buffer.resize((width, height), Image.Resampling.LANCZOS)

    def encode(self, buffer: Image.Image, mime_type: str, quality: float) -> bytes:
        """Кодирует изображение в формат MIME-типа с качеством в диапазоне [0, 1].

        Форматы без потерь (PNG, GIF) качество игнорируют.

        Raises:
            EncodeError: если формат не поддерживается или сохранение не удалось.
        """
        fmt = self.format_for(mime_type)
        allowed = _OPAQUE_MODES.get(fmt)
        if allowed is not None and buffer.mode not in allowed:
            buffer = buffer.convert("RGB")

        pil_quality = min(100, max(1, int(round(quality * 100))))
        out = io.BytesIO()
        try:
            buffer.save(out, format=fmt, quality=pil_quality)
        except (OSError, ValueError, KeyError) as exc:
            raise EncodeError(f"Не удалось закодировать {fmt} (quality={pil_quality}): {exc}") from exc
        data = out.getvalue()
        if not data:
            raise EncodeError(f"Кодировщик {fmt} вернул пустой буфер")
        return data
