"""Обёртка над файлами: чтение изображений с диска и запись результатов.

Принципы:
- SRP: класс отвечает только за перенос байтов, имени и MIME-типа, без декодирования.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
"""
from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Optional

from imgshrink.models.image_model import EncodedResult, SourceImage

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(filename: str) -> str:
    mime, _ = mimetypes.guess_type(filename)
    return mime or DEFAULT_MIME_TYPE


class ImageService:
    def load_image(self, file_path: str | Path) -> SourceImage:
        """Читает файл с диска и возвращает его как `SourceImage`.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `SourceImage` c байтами файла, MIME-типом по расширению и именем файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        source = SourceImage(data=path.read_bytes(), mime_type=guess_mime_type(path.name), filename=path.name)
        logger.debug("Загружен %s (%s, %d байт)", path, source.mime_type, source.size_bytes)
        return source

    def from_bytes(self, data: bytes, filename: str, mime_type: Optional[str] = None) -> SourceImage:
        """Упаковывает байты в `SourceImage`; без `mime_type` тип определяется по имени файла."""
        return SourceImage(data=bytes(data), mime_type=mime_type or guess_mime_type(filename), filename=filename)

    def save_result(self, result: EncodedResult, directory: str | Path) -> Path:
        """Записывает результат в каталог под исходным именем файла.

        Returns:
            Путь к записанному файлу.
        """
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / Path(result.filename).name
        path.write_bytes(result.data)
        logger.debug("Сохранён %s (%d байт)", path, result.size_bytes)
        return path
