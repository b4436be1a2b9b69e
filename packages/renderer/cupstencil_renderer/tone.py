"""Tone mapping of canvas pixels into print-friendly black/white output."""

from __future__ import annotations

import numpy as np

from .halftone import HalftonePatternCache
from .models import DEFAULT_SAMPLE_DENSITY, DEFAULT_THRESHOLD, PixelBuffer, RenderOptions, round_half_up

MIN_BLOCK = 2
MAX_BLOCK = 32
BIAS_PIVOT = 170


def threshold_limit(threshold: float) -> int:
    return max(0, min(255, round_half_up(threshold)))


def block_size(density: float) -> int:
    return max(MIN_BLOCK, min(MAX_BLOCK, round_half_up(density)))


def luminance(buffer: PixelBuffer) -> np.ndarray:
    rgb = buffer.data[..., :3].astype(np.float64)
    return rgb[..., 0] * 0.299 + rgb[..., 1] * 0.587 + rgb[..., 2] * 0.114


def apply_binary_threshold(buffer: PixelBuffer, threshold: float = DEFAULT_THRESHOLD) -> PixelBuffer:
    limit = threshold_limit(threshold)
    value = np.where(luminance(buffer) >= limit, 255, 0).astype(np.uint8)
    buffer.data[..., :3] = value[..., None]
    return buffer


def apply_sampled_halftone(
    buffer: PixelBuffer,
    cache: HalftonePatternCache,
    density: float = DEFAULT_SAMPLE_DENSITY,
    threshold: float = DEFAULT_THRESHOLD,
) -> PixelBuffer:
    """Replace each block by a black/white dot of matching mean brightness.

    A threshold above 170 darkens the result, a lower one brightens it.
    """
    size = block_size(density)
    bias = (threshold_limit(threshold) - BIAS_PIVOT) / 255
    gray = luminance(buffer)
    data = buffer.data
    ranks: dict[tuple[int, int], np.ndarray] = {}

    for y in range(0, buffer.height, size):
        block_h = min(size, buffer.height - y)
        for x in range(0, buffer.width, size):
            block_w = min(size, buffer.width - x)
            pixel_count = block_w * block_h
            if not pixel_count:
                continue

            mean = float(gray[y : y + block_h, x : x + block_w].sum()) / pixel_count
            coverage = min(1.0, max(0.0, mean / 255 - bias))
            white_pixels = round_half_up(coverage * pixel_count)

            rank = ranks.get((block_w, block_h))
            if rank is None:
                pattern = cache.get(block_w, block_h)
                rank = np.empty(pixel_count, dtype=np.int32)
                rank[np.asarray(pattern, dtype=np.int32)] = np.arange(pixel_count, dtype=np.int32)
                rank = rank.reshape((block_h, block_w))
                ranks[(block_w, block_h)] = rank

            value = np.where(rank < white_pixels, 255, 0).astype(np.uint8)
            data[y : y + block_h, x : x + block_w, :3] = value[..., None]
    return buffer


class ToneMapper:
    """Applies the configured tone mode; owns the halftone pattern cache."""

    def __init__(self, cache: HalftonePatternCache | None = None) -> None:
        self.cache = cache if cache is not None else HalftonePatternCache()

    def apply(self, buffer: PixelBuffer, options: RenderOptions) -> PixelBuffer:
        if options.tone_mode == "original":
            return buffer
        if options.tone_mode == "sampled":
            return apply_sampled_halftone(buffer, self.cache, options.sample_density, options.threshold)
        return apply_binary_threshold(buffer, options.threshold)
