"""Typed renderer models and print-area constants."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from PIL import Image

CUP_WIDTH = 596
CUP_HEIGHT = 832
MAX_UPLOAD_BYTES = 200 * 1024

DEFAULT_THRESHOLD = 170
DEFAULT_SAMPLE_DENSITY = 6

TONE_MODES = ("binary", "sampled", "original")
FIT_MODES = ("contain", "cover")
TARGET_FORMATS = ("png", "auto")

MEDIA_PNG = "image/png"
MEDIA_JPEG = "image/jpeg"


def round_half_up(value: float) -> int:
    # Matches JS Math.round; Python round() is banker's rounding.
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class RenderOptions:
    tone_mode: str = "binary"
    threshold: float = DEFAULT_THRESHOLD
    sample_density: float = DEFAULT_SAMPLE_DENSITY
    fit: str = "contain"
    max_bytes: int = MAX_UPLOAD_BYTES
    target_format: str = "auto"

    def __post_init__(self) -> None:
        if self.tone_mode not in TONE_MODES:
            raise ValueError(f"Unknown tone mode: {self.tone_mode}")
        if self.fit not in FIT_MODES:
            raise ValueError(f"Unknown fit mode: {self.fit}")
        if self.target_format not in TARGET_FORMATS:
            raise ValueError(f"Unknown target format: {self.target_format}")
        if int(self.max_bytes) < 1:
            raise ValueError("max_bytes must be a positive integer")


@dataclass(frozen=True)
class FitResult:
    scale: float
    draw_width: int
    draw_height: int
    offset_x: int
    offset_y: int


@dataclass(frozen=True)
class EncodedArtifact:
    data: bytes
    media_type: str
    quality: float | None = None
    quantize_step: int | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return ".jpg" if self.media_type == MEDIA_JPEG else ".png"


class PixelBuffer:
    """RGBA samples for one canvas, stored as a ``(height, width, 4)`` uint8 array."""

    def __init__(self, width: int, height: int, data: np.ndarray) -> None:
        if data.shape != (height, width, 4) or data.dtype != np.uint8:
            raise ValueError(f"Pixel data must be uint8 of shape ({height}, {width}, 4), got {data.dtype} {data.shape}")
        self.width = width
        self.height = height
        self.data = data

    @classmethod
    def from_bytes(cls, width: int, height: int, raw: bytes) -> PixelBuffer:
        if len(raw) != width * height * 4:
            raise ValueError("RGBA data length must equal width * height * 4")
        arr = np.frombuffer(raw, dtype=np.uint8).reshape((height, width, 4)).copy()
        return cls(width, height, arr)

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelBuffer:
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        width, height = image.size
        return cls(width, height, np.array(image, dtype=np.uint8))

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.data)

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, self.data.copy())

    def __len__(self) -> int:
        return self.data.size
