from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import pytest
from PIL import Image

from imgshrink.models.errors import DecodeError, EncodeError
from imgshrink.models.image_model import SourceImage


@dataclass
class FakeBuffer:
    width: int
    height: int


class FakeCodec:
    """Детерминированный кодек: размер результата задаётся функцией от качества."""

    def __init__(
        self,
        dims: Tuple[int, int] = (500, 500),
        size_bytes: Callable[[float, FakeBuffer], int] = lambda q, buf: 50 * 1024,
        fail_encode: bool = False,
        dims_by_data: Optional[Dict[bytes, Tuple[int, int]]] = None,
    ) -> None:
        self.dims = dims
        self.size_bytes = size_bytes
        self.fail_encode = fail_encode
        self.dims_by_data = dims_by_data or {}
        self.decoded: List[bytes] = []
        self.resized: List[Tuple[int, int]] = []
        self.qualities: List[float] = []

    def decode(self, data: bytes) -> FakeBuffer:
        self.decoded.append(data)
        if data == b"broken":
            raise DecodeError("broken")
        return FakeBuffer(*self.dims_by_data.get(data, self.dims))

    def size(self, buffer: FakeBuffer) -> Tuple[int, int]:
        return buffer.width, buffer.height

    def resize(self, buffer: FakeBuffer, width: int, height: int) -> FakeBuffer:
        self.resized.append((width, height))
        return FakeBuffer(width, height)

    def encode(self, buffer: FakeBuffer, mime_type: str, quality: float) -> bytes:
        self.qualities.append(quality)
        if self.fail_encode:
            raise EncodeError("encoder refused")
        return b"x" * self.size_bytes(quality, buffer)


@pytest.fixture
def fake_codec() -> FakeCodec:
    return FakeCodec()


# больше любого размера, который выдаёт FakeCodec по умолчанию
SOURCE_BYTES = b"p" * 1024 * 1024


def make_source(mime_type: str = "image/jpeg", filename: str = "photo.jpg", data: bytes = SOURCE_BYTES) -> SourceImage:
    return SourceImage(data=data, mime_type=mime_type, filename=filename)


def encode_array(array: np.ndarray, fmt: str, **params) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(array).save(buf, format=fmt, **params)
    return buf.getvalue()


def noise_image(width: int, height: int, channels: int = 3, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, channels), dtype=np.uint8)


def gradient_image(width: int, height: int, noise: int = 40, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    x = np.linspace(0, 255, width, dtype=np.float32)[None, :, None]
    y = np.linspace(0, 255, height, dtype=np.float32)[:, None, None]
    base = np.broadcast_to((x + y) / 2, (height, width, 3))
    jitter = rng.integers(-noise, noise + 1, size=(height, width, 3))
    return np.clip(base + jitter, 0, 255).astype(np.uint8)
