"""Photo to cup stencil: fit, tone-map, then encode within the upload budget."""

from __future__ import annotations

import logging
import time

from PIL import Image

from .decode import decode_image
from .encoder import SizeConstrainedEncoder
from .geometry import draw_fitted
from .models import CUP_HEIGHT, CUP_WIDTH, EncodedArtifact, PixelBuffer, RenderOptions
from .tone import ToneMapper

logger = logging.getLogger("cupstencil.pipeline")


class StencilPipeline:
    """Runs one conversion request at a time per call; instances may be shared across threads."""

    def __init__(
        self,
        width: int = CUP_WIDTH,
        height: int = CUP_HEIGHT,
        tone_mapper: ToneMapper | None = None,
        encoder: SizeConstrainedEncoder | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.tone_mapper = tone_mapper or ToneMapper()
        self.encoder = encoder or SizeConstrainedEncoder()

    def compose(self, image: Image.Image, options: RenderOptions) -> PixelBuffer:
        canvas = draw_fitted(image, self.width, self.height, options.fit)
        buffer = PixelBuffer.from_image(canvas)
        if options.tone_mode != "original":
            buffer = self.tone_mapper.apply(buffer, options)
        return buffer

    def render(self, image: Image.Image, options: RenderOptions | None = None) -> EncodedArtifact:
        options = options or RenderOptions()
        start = time.perf_counter()
        buffer = self.compose(image, options)
        artifact = self.encoder.encode(buffer, options.max_bytes, options.target_format)
        elapsed = time.perf_counter() - start
        logger.info(
            f"rendered {image.width}x{image.height} -> {artifact.media_type} {artifact.size}B "
            f"mode={options.tone_mode} fit={options.fit} in {elapsed:.3f}s",
            extra={
                "event": "render_complete",
                "source_size": [image.width, image.height],
                "tone_mode": options.tone_mode,
                "fit": options.fit,
                "media_type": artifact.media_type,
                "quality": artifact.quality,
                "quantize_step": artifact.quantize_step,
                "size": artifact.size,
                "max_bytes": options.max_bytes,
                "elapsed_s": round(elapsed, 4),
            },
        )
        return artifact

    def render_bytes(self, data: bytes, options: RenderOptions | None = None) -> EncodedArtifact:
        return self.render(decode_image(data), options)


_default_pipeline: StencilPipeline | None = None


def render_to_cup(image: Image.Image, options: RenderOptions | None = None) -> EncodedArtifact:
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = StencilPipeline()
    return _default_pipeline.render(image, options)
