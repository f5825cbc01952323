"""Ошибки сжатия изображений.

Все ошибки терминальны для вызова: компрессор не повторяет попытки сам,
решение о повторе с другими ограничениями принимает вызывающий код.
"""
from __future__ import annotations


class CompressionError(Exception):
    """Базовый класс ошибок компрессора."""


class InvalidInputError(CompressionError):
    """MIME-тип источника не является типом изображения. Проверяется до декодирования."""


class DecodeError(CompressionError):
    """Байты не удалось декодировать в пиксельный буфер."""


class EncodeError(CompressionError):
    """Кодировщик не смог получить байты из пиксельного буфера."""
