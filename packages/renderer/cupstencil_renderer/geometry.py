"""Uniform scaling of a source image onto the fixed cup canvas."""

from __future__ import annotations

from PIL import Image

from .errors import DecodeFailure, UnsupportedSurface
from .models import FitResult, round_half_up


def compute_fit(src_width: int, src_height: int, target_width: int, target_height: int, fit: str = "contain") -> FitResult:
    if src_width <= 0 or src_height <= 0:
        raise DecodeFailure(f"Source image has no pixels ({src_width}x{src_height})")

    sx = target_width / src_width
    sy = target_height / src_height
    scale = max(sx, sy) if fit == "cover" else min(sx, sy)

    draw_w = max(1, round_half_up(src_width * scale))
    draw_h = max(1, round_half_up(src_height * scale))
    return FitResult(
        scale=scale,
        draw_width=draw_w,
        draw_height=draw_h,
        offset_x=(target_width - draw_w) // 2,
        offset_y=(target_height - draw_h) // 2,
    )


def visible_region(
    placement: FitResult, src_width: int, src_height: int, target_width: int, target_height: int
) -> tuple[tuple[int, int, int, int], tuple[float, float, float, float]]:
    """Canvas rectangle the drawn image covers, and the source box that maps onto it.

    Cover fits can be far larger than the canvas; only this part is resampled.
    """
    left = max(0, placement.offset_x)
    top = max(0, placement.offset_y)
    right = min(target_width, placement.offset_x + placement.draw_width)
    bottom = min(target_height, placement.offset_y + placement.draw_height)

    kx = src_width / placement.draw_width
    ky = src_height / placement.draw_height
    box = (
        (left - placement.offset_x) * kx,
        (top - placement.offset_y) * ky,
        (right - placement.offset_x) * kx,
        (bottom - placement.offset_y) * ky,
    )
    return (left, top, right, bottom), box


def new_canvas(width: int, height: int) -> Image.Image:
    if width <= 0 or height <= 0:
        raise UnsupportedSurface(f"Canvas size {width}x{height} is not drawable")
    try:
        return Image.new("RGBA", (width, height), (0, 0, 0, 0))
    except (MemoryError, ValueError) as exc:
        raise UnsupportedSurface(f"Could not allocate {width}x{height} canvas: {exc}") from exc


def draw_fitted(image: Image.Image, target_width: int, target_height: int, fit: str = "contain") -> Image.Image:
    """Return a transparent canvas with *image* scaled and centred on it."""
    placement = compute_fit(image.width, image.height, target_width, target_height, fit)
    canvas = new_canvas(target_width, target_height)

    (left, top, right, bottom), box = visible_region(placement, image.width, image.height, target_width, target_height)
    if right <= left or bottom <= top:
        return canvas

    source = image if image.mode == "RGBA" else image.convert("RGBA")
    size = (right - left, bottom - top)
    if size != source.size or box != (0, 0, source.width, source.height):
        source = source.resize(size, Image.Resampling.LANCZOS, box=box)
    # Source-over onto a cleared canvas is a straight copy.
    canvas.paste(source, (left, top))
    return canvas
