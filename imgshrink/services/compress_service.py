"""Адаптивное сжатие изображения под бюджет размера.

Алгоритм:
1. Декодировать источник, прочитать ширину и высоту.
2. Уменьшить с сохранением пропорций: ratio = min(max_w / w, max_h / h, 1).
3. Кодировать с качеством 0.90, 0.85, ..., 0.10 до первого результата,
   который укладывается в бюджет. На нижней границе качества результат
   принимается как есть, даже если бюджет не достигнут.

Принципы:
- SRP: сервис управляет только поиском качества, работа с пикселями в кодеке.
- DIP: кодек внедряется через конструктор.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Tuple

from imgshrink.models.errors import InvalidInputError
from imgshrink.models.image_model import BYTES_PER_KB, EncodedResult, SourceImage, TargetConstraints
from imgshrink.services.codec import ImageCodec, PillowCodec

logger = logging.getLogger(__name__)

QUALITY_START = 0.90
QUALITY_STEP = 0.05
QUALITY_FLOOR = 0.10


def quality_schedule() -> Tuple[float, ...]:
    """Фиксированная последовательность качества 0.90 -> 0.10 с шагом 0.05 (17 значений).

    Значения округляются, поэтому накопленная ошибка float не добавит лишнюю попытку.
    """
    steps = int(round((QUALITY_START - QUALITY_FLOOR) / QUALITY_STEP))
    return tuple(round(QUALITY_START - i * QUALITY_STEP, 2) for i in range(steps + 1))


def scale_to_fit(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Размеры после равномерного уменьшения в рамку max_width x max_height.

    ratio = min(max_width / width, max_height / height, 1). Только уменьшение:
    если изображение уже помещается, размеры не меняются. Дробные пиксели
    отбрасываются, но сторона не становится меньше 1.
    """
    if width <= max_width and height <= max_height:
        return width, height
    # целочисленно, чтобы ограничивающая сторона была ровно max_*
    if max_width * height <= max_height * width:
        return max_width, max(1, height * max_width // width)
    return max(1, width * max_height // height), max_height


def ensure_image(source: SourceImage) -> None:
    """Проверяет MIME-тип до любой работы с пикселями.

    Raises:
        InvalidInputError: если MIME-тип источника не image/*.
    """
    if not source.is_image:
        raise InvalidInputError(f"Файл не является изображением: {source.filename} ({source.mime_type})")


class CompressService:
    def __init__(self, codec: Optional[ImageCodec] = None) -> None:
        self._codec: ImageCodec = codec if codec is not None else PillowCodec()

    def compress(self, source: SourceImage, constraints: Optional[TargetConstraints] = None) -> EncodedResult:
        """Сжимает изображение под ограничения.

        Args:
            source: Исходное изображение.
            constraints: Бюджет размера и максимальные размеры; по умолчанию 200 KB, 1024x1024.

        Returns:
            `EncodedResult` с тем же MIME-типом и именем файла. Если размеры не
            менялись, а перекодирование оказалось больше источника, в результате
            остаются исходные байты.

        Raises:
            InvalidInputError: если источник не изображение (до декодирования).
            DecodeError: если байты не декодируются.
            EncodeError: если кодировщик не вернул байты.
        """
        ensure_image(source)
        limits = constraints if constraints is not None else TargetConstraints()

        buffer = self._codec.decode(source.data)
        width, height = self._codec.size(buffer)
        new_width, new_height = scale_to_fit(width, height, limits.max_width, limits.max_height)
        if (new_width, new_height) != (width, height):
            logger.debug("%s: %dx%d -> %dx%d", source.filename, width, height, new_width, new_height)
            buffer = self._codec.resize(buffer, new_width, new_height)

        for quality in quality_schedule():
            data = self._codec.encode(buffer, source.mime_type, quality)
            logger.debug("%s: quality=%.2f size=%.1f KB", source.filename, quality, len(data) / BYTES_PER_KB)
            if len(data) / BYTES_PER_KB <= limits.max_size_kb:
                break
        else:
            logger.warning(
                "%s: бюджет %.1f KB не достигнут, принят результат %.1f KB на качестве %.2f",
                source.filename, limits.max_size_kb, len(data) / BYTES_PER_KB, quality,
            )

        # без масштабирования повторное кодирование не должно увеличивать файл
        if (new_width, new_height) == (width, height) and len(data) > source.size_bytes:
            logger.debug(
                "%s: перекодированный файл больше исходного (%d > %d байт), возвращается исходный",
                source.filename, len(data), source.size_bytes,
            )
            data = source.data

        logger.info(
            "%s: %.1f KB -> %.1f KB, %dx%d",
            source.filename, source.size_bytes / BYTES_PER_KB, len(data) / BYTES_PER_KB, new_width, new_height,
        )
        return EncodedResult(
            data=data,
            mime_type=source.mime_type,
            filename=source.filename,
            width=new_width,
            height=new_height,
        )

    async def compress_async(
        self, source: SourceImage, constraints: Optional[TargetConstraints] = None
    ) -> EncodedResult:
        """Асинхронная обёртка над `compress`: проверка типа сразу, конвейер в рабочем потоке."""
        ensure_image(source)
        return await asyncio.to_thread(self.compress, source, constraints)

    async def compress_many(
        self, sources: Iterable[SourceImage], constraints: Optional[TargetConstraints] = None
    ) -> List[EncodedResult]:
        """Сжимает несколько изображений параллельно. Порядок результатов совпадает с порядком входа.

        Первая ошибка прерывает ожидание и пробрасывается вызывающему коду.
        """
        sources = list(sources)
        for source in sources:
            ensure_image(source)
        results = await asyncio.gather(*(self.compress_async(s, constraints) for s in sources))
        return list(results)


async def compress_image_to_max_size(
    source: SourceImage,
    max_size_kb: float = 200,
    max_width: int = 1024,
    max_height: int = 1024,
    codec: Optional[ImageCodec] = None,
) -> EncodedResult:
    """Сжимает изображение так, чтобы оно уложилось в `max_size_kb` и `max_width` x `max_height`.

    Бюджет размера мягкий: если даже на качестве 0.10 результат больше бюджета,
    возвращается именно он.
    """
    constraints = TargetConstraints(max_size_kb=max_size_kb, max_width=max_width, max_height=max_height)
    return await CompressService(codec).compress_async(source, constraints)
