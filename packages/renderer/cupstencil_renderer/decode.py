"""Uploaded file bytes to an RGBA raster."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeFailure


def decode_image(data: bytes) -> Image.Image:
    if not data:
        raise DecodeFailure("Image file is empty")
    try:
        with Image.open(BytesIO(data)) as opened:
            opened.load()
            # Browsers honour the EXIF orientation tag when decoding; do the same.
            image = ImageOps.exif_transpose(opened)
            return image.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeFailure(f"Image failed to load: {exc}") from exc


def load_image(path: Path) -> Image.Image:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DecodeFailure(f"Could not read image file {path}: {exc}") from exc
    return decode_image(data)
