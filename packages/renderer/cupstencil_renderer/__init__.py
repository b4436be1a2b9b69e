"""Renderer package turning photos into budget-bounded cup stencils."""

from .decode import decode_image, load_image
from .encoder import SizeConstrainedEncoder, pillow_encode, quantize_colors
from .errors import BudgetUnattainable, DecodeFailure, EncodeExhausted, StencilError, UnsupportedSurface
from .geometry import compute_fit, draw_fitted
from .halftone import HalftonePatternCache, compute_pattern
from .models import (
    CUP_HEIGHT,
    CUP_WIDTH,
    MAX_UPLOAD_BYTES,
    EncodedArtifact,
    FitResult,
    PixelBuffer,
    RenderOptions,
)
from .pipeline import StencilPipeline, render_to_cup
from .samples import SAMPLE_NAMES, build_sample_image
from .tone import ToneMapper, apply_binary_threshold, apply_sampled_halftone

__all__ = [
    "BudgetUnattainable",
    "CUP_HEIGHT",
    "CUP_WIDTH",
    "DecodeFailure",
    "EncodeExhausted",
    "EncodedArtifact",
    "FitResult",
    "HalftonePatternCache",
    "MAX_UPLOAD_BYTES",
    "PixelBuffer",
    "RenderOptions",
    "SAMPLE_NAMES",
    "SizeConstrainedEncoder",
    "StencilError",
    "StencilPipeline",
    "ToneMapper",
    "UnsupportedSurface",
    "apply_binary_threshold",
    "apply_sampled_halftone",
    "build_sample_image",
    "compute_fit",
    "compute_pattern",
    "decode_image",
    "draw_fitted",
    "load_image",
    "pillow_encode",
    "quantize_colors",
    "render_to_cup",
]
