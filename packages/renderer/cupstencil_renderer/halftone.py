"""Growing-dot visitation order for halftone blocks."""

from __future__ import annotations

import math
import threading
from collections import OrderedDict

# Block sides are clamped to 2..32, clipped edge remnants go down to 1.
MAX_CACHED_SHAPES = 31 * 31


def compute_pattern(width: int, height: int) -> tuple[int, ...]:
    """Order the pixels of a ``width x height`` block from the centre outwards.

    Pixels are sorted by squared distance from the block centre, ties by the
    angle of their offset, so the first N entries form a dot of N pixels.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Block dimensions must be positive, got {width}x{height}")

    cx = (width - 1) / 2
    cy = (height - 1) / 2
    entries: list[tuple[float, float, int]] = []
    for y in range(height):
        for x in range(width):
            dx = x - cx
            dy = y - cy
            entries.append((dx * dx + dy * dy, math.atan2(dy, dx), y * width + x))

    entries.sort(key=lambda e: (e[0], e[1]))
    return tuple(e[2] for e in entries)


class HalftonePatternCache:
    """Bounded, thread-safe memo of block patterns keyed by shape."""

    def __init__(self, max_entries: int = MAX_CACHED_SHAPES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._patterns: OrderedDict[str, tuple[int, ...]] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def key(width: int, height: int) -> str:
        return f"{width}x{height}"

    def get(self, width: int, height: int) -> tuple[int, ...]:
        key = self.key(width, height)
        cached = self._patterns.get(key)
        if cached is not None:
            return cached

        # Computed outside the lock; two threads racing on one shape get equal tuples.
        pattern = compute_pattern(width, height)
        with self._lock:
            existing = self._patterns.get(key)
            if existing is not None:
                return existing
            while len(self._patterns) >= self.max_entries:
                self._patterns.popitem(last=False)
            self._patterns[key] = pattern
        return pattern

    def clear(self) -> None:
        with self._lock:
            self._patterns.clear()

    def __contains__(self, shape: object) -> bool:
        if isinstance(shape, tuple) and len(shape) == 2:
            return self.key(*shape) in self._patterns
        return shape in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)
