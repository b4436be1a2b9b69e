"""Deterministic calibration images for checking tone modes on the printer."""

from __future__ import annotations

import numpy as np
from PIL import Image

SAMPLE_NAMES = (
    "black",
    "white",
    "red",
    "green",
    "blue",
    "quadrants",
    "h-gradient",
    "v-gradient",
    "checkerboard",
)

_SOLIDS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 255, 0),
    "blue": (0, 0, 255),
}


def build_sample_image(name: str, width: int, height: int) -> Image.Image:
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[..., 3] = 255

    if name in _SOLIDS:
        arr[..., :3] = _SOLIDS[name]
    elif name == "quadrants":
        hw, hh = width // 2, height // 2
        arr[:hh, :hw, :3] = (255, 0, 0)
        arr[:hh, hw:, :3] = (0, 255, 0)
        arr[hh:, :hw, :3] = (0, 0, 255)
        arr[hh:, hw:, :3] = (255, 255, 255)
    elif name == "h-gradient":
        ramp = (255 * np.arange(width) / max(width - 1, 1)).astype(np.uint8)
        arr[..., :3] = ramp[None, :, None]
    elif name == "v-gradient":
        ramp = (255 * np.arange(height) / max(height - 1, 1)).astype(np.uint8)
        arr[..., :3] = ramp[:, None, None]
    elif name == "checkerboard":
        ys, xs = np.indices((height, width))
        on = ((xs // 24 + ys // 24) % 2) == 0
        arr[..., :3] = np.where(on, 255, 0).astype(np.uint8)[..., None]
    else:
        raise ValueError(f"Unknown sample image: {name}")

    return Image.fromarray(arr)
