"""Size-constrained encoding: walk a fidelity ladder until the byte budget fits."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Callable

import numpy as np
from PIL import Image

from .errors import BudgetUnattainable, EncodeExhausted
from .models import MEDIA_JPEG, MEDIA_PNG, EncodedArtifact, PixelBuffer

logger = logging.getLogger("cupstencil.encoder")

EncodeFn = Callable[[Image.Image, str, float | None], bytes | None]

JPEG_QUALITIES = (0.95, 0.9, 0.85, 0.8, 0.75, 0.7, 0.65, 0.6, 0.55, 0.5, 0.45, 0.4, 0.35, 0.3)
QUANTIZE_STEPS = (0, 8, 16, 24, 32, 40, 48, 64, 80, 96, 112, 128, 160, 192)


@dataclass(frozen=True)
class LadderAttempt:
    media_type: str
    quality: float | None = None


LOSSY_LADDER: tuple[LadderAttempt, ...] = (LadderAttempt(MEDIA_PNG),) + tuple(
    LadderAttempt(MEDIA_JPEG, q) for q in JPEG_QUALITIES
)


def _flatten_for_jpeg(image: Image.Image) -> Image.Image:
    # JPEG has no alpha; transparent areas come out black like a canvas export.
    if image.mode == "RGB":
        return image
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, (0, 0, 0))
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def pillow_encode(image: Image.Image, media_type: str, quality: float | None = None) -> bytes | None:
    """Encode with Pillow; ``None`` means this attempt produced no output."""
    buf = BytesIO()
    try:
        if media_type == MEDIA_JPEG:
            q = round((0.92 if quality is None else quality) * 100)
            _flatten_for_jpeg(image).save(buf, format="JPEG", quality=q)
        else:
            image.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        logger.warning(
            f"encode failed type={media_type} quality={quality}: {exc}",
            extra={"event": "encode_failed", "media_type": media_type, "quality": quality},
        )
        return None
    return buf.getvalue()


def quantize_colors(buffer: PixelBuffer, step: int) -> PixelBuffer:
    """Round RGB channels to the nearest multiple of *step*, leaving alpha alone."""
    divisor = 1 if step <= 0 else step
    rgb = buffer.data[..., :3].astype(np.float64)
    rounded = np.floor(rgb / divisor + 0.5) * divisor
    buffer.data[..., :3] = np.minimum(rounded, 255).astype(np.uint8)
    return buffer


class SizeConstrainedEncoder:
    def __init__(self, encode: EncodeFn = pillow_encode) -> None:
        self._encode = encode

    def encode(self, buffer: PixelBuffer, max_bytes: int, target_format: str = "auto") -> EncodedArtifact:
        if target_format == "png":
            return self.encode_png(buffer, max_bytes)
        return self.encode_lossy(buffer, max_bytes)

    def encode_lossy(self, buffer: PixelBuffer, max_bytes: int) -> EncodedArtifact:
        image = buffer.to_image()
        candidate: EncodedArtifact | None = None

        for attempt in LOSSY_LADDER:
            data = self._encode(image, attempt.media_type, attempt.quality)
            if data is None:
                continue
            candidate = EncodedArtifact(data=data, media_type=attempt.media_type, quality=attempt.quality)
            logger.debug(
                f"ladder attempt type={attempt.media_type} quality={attempt.quality} size={len(data)}",
                extra={
                    "event": "ladder_attempt",
                    "media_type": attempt.media_type,
                    "quality": attempt.quality,
                    "size": len(data),
                },
            )
            if candidate.size <= max_bytes:
                logger.info(
                    f"ladder hit type={attempt.media_type} quality={attempt.quality} size={candidate.size}",
                    extra={
                        "event": "ladder_hit",
                        "media_type": attempt.media_type,
                        "quality": attempt.quality,
                        "size": candidate.size,
                        "max_bytes": max_bytes,
                    },
                )
                return candidate

        if candidate is None:
            raise EncodeExhausted("No encoder attempt produced output")

        logger.warning(
            f"budget {max_bytes} not met, returning best effort size={candidate.size}",
            extra={
                "event": "ladder_best_effort",
                "media_type": candidate.media_type,
                "quality": candidate.quality,
                "size": candidate.size,
                "max_bytes": max_bytes,
            },
        )
        return candidate

    def encode_png(self, buffer: PixelBuffer, max_bytes: int) -> EncodedArtifact:
        produced = False

        for step in QUANTIZE_STEPS:
            working = buffer.copy()
            if step > 0:
                quantize_colors(working, step)
            data = self._encode(working.to_image(), MEDIA_PNG, None)
            if data is None:
                continue
            produced = True
            logger.debug(
                f"quantize attempt step={step} size={len(data)}",
                extra={"event": "ladder_attempt", "media_type": MEDIA_PNG, "quantize_step": step, "size": len(data)},
            )
            if len(data) <= max_bytes:
                logger.info(
                    f"quantize hit step={step} size={len(data)}",
                    extra={
                        "event": "ladder_hit",
                        "media_type": MEDIA_PNG,
                        "quantize_step": step,
                        "size": len(data),
                        "max_bytes": max_bytes,
                    },
                )
                return EncodedArtifact(data=data, media_type=MEDIA_PNG, quantize_step=step)

        if not produced:
            raise EncodeExhausted("No PNG encoding attempt produced output")
        logger.warning(
            f"png budget {max_bytes} unattainable",
            extra={"event": "budget_unattainable", "media_type": MEDIA_PNG, "max_bytes": max_bytes},
        )
        raise BudgetUnattainable(max_bytes)
