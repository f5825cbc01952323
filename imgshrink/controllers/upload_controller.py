"""Контроллер подготовки загрузок: оркестрация файлового сервиса и компрессора.

SOLID:
- SRP: класс связывает чтение файла, сжатие и упаковку в поле формы (без HTTP).
- DIP: зависит от сервисов как от ролей; конкретные реализации подставляются снаружи.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Tuple

from imgshrink.config import default_constraints
from imgshrink.models.image_model import EncodedResult, TargetConstraints
from imgshrink.services.compress_service import CompressService
from imgshrink.services.image_service import ImageService

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "file"

# (имя поля, (имя файла, байты, MIME-тип)), формат multipart у HTTP-клиентов
UploadPart = Tuple[str, Tuple[str, bytes, str]]


def to_upload_part(result: EncodedResult) -> UploadPart:
    return UPLOAD_FIELD, (result.filename, result.data, result.mime_type)


@dataclass
class UploadController:
    """Готовит изображения товаров к отправке: каждое сжимается под бюджет перед загрузкой.

    Ответственности:
    - Чтение файла через `ImageService`.
    - Сжатие через `CompressService` с ограничениями из настроек.
    - Упаковка результата в поле `file` multipart-формы.
    """
    compress_service: CompressService = field(default_factory=CompressService)
    image_service: ImageService = field(default_factory=ImageService)
    constraints: TargetConstraints = field(default_factory=default_constraints)

    async def prepare_upload(self, file_path: str | Path) -> UploadPart:
        source = await asyncio.to_thread(self.image_service.load_image, file_path)
        result = await self.compress_service.compress_async(source, self.constraints)
        logger.info("Готов к загрузке: %s (%.1f KB)", result.filename, result.size_kb)
        return to_upload_part(result)

    async def prepare_uploads(self, file_paths: Iterable[str | Path]) -> List[UploadPart]:
        sources = await asyncio.gather(
            *(asyncio.to_thread(self.image_service.load_image, p) for p in file_paths)
        )
        results = await self.compress_service.compress_many(sources, self.constraints)
        return [to_upload_part(r) for r in results]
