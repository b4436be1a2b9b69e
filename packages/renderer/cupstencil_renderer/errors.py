"""Failure taxonomy for the stencil pipeline."""

from __future__ import annotations

from .models import round_half_up


class StencilError(Exception):
    """Base class for every failure surfaced by a conversion request."""


class DecodeFailure(StencilError):
    """Source bytes could not be turned into a raster image."""


class UnsupportedSurface(StencilError):
    """The drawing canvas could not be allocated."""


class EncodeExhausted(StencilError):
    """No ladder attempt produced any encoded output."""


class BudgetUnattainable(StencilError):
    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes
        super().__init__(f"PNG still exceeds {round_half_up(max_bytes / 1024)}KB after quantization")
