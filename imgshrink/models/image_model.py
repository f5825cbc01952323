"""Модели данных для сжатия изображений.

Принципы:
- SRP: только структура данных и простая валидация, без логики кодирования.
- Чистый код: неизменяемость (`frozen=True`), объекты живут один вызов и не разделяются.
"""
from __future__ import annotations

from dataclasses import dataclass

BYTES_PER_KB = 1024


@dataclass(frozen=True)
class SourceImage:
    """Исходное изображение: закодированные байты и сведения о файле.

    Fields:
        data: Закодированные байты изображения.
        mime_type: Заявленный MIME-тип, например "image/jpeg".
        filename: Имя файла, переносится в результат без изменений.
    """
    data: bytes
    mime_type: str
    filename: str

    @property
    def is_image(self) -> bool:
        return self.mime_type.lower().startswith("image/")

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class TargetConstraints:
    """Ограничения результата. Все границы включительные потолки, а не цели.

    Fields:
        max_size_kb: Бюджет размера, KiB (мягкая цель).
        max_width: Максимальная ширина, px.
        max_height: Максимальная высота, px.

    Raises:
        ValueError: если ограничение не положительное или размеры не целые.
    """
    max_size_kb: float = 200
    max_width: int = 1024
    max_height: int = 1024

    def __post_init__(self) -> None:
        if self.max_size_kb <= 0:
            raise ValueError(f"max_size_kb должен быть положительным: {self.max_size_kb}")
        for name in ("max_width", "max_height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} должен быть целым числом: {value!r}")
        if self.max_width <= 0 or self.max_height <= 0:
            raise ValueError(
                f"Максимальные размеры должны быть положительными: {self.max_width}x{self.max_height}"
            )

    @property
    def max_bytes(self) -> float:
        return self.max_size_kb * BYTES_PER_KB


@dataclass(frozen=True)
class EncodedResult:
    """Результат сжатия. Вызывающий код полностью владеет объектом.

    Fields:
        data: Перекодированные байты.
        mime_type: MIME-тип, совпадает с исходным.
        filename: Имя файла, совпадает с исходным.
        width: Итоговая ширина, px.
        height: Итоговая высота, px.
    """
    data: bytes
    mime_type: str
    filename: str
    width: int
    height: int

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def size_kb(self) -> float:
        return len(self.data) / BYTES_PER_KB
