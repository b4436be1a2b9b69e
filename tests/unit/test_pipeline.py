import sys
import unittest
from io import BytesIO
from pathlib import Path

import numpy as np
from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from cupstencil_renderer import (
    CUP_HEIGHT,
    CUP_WIDTH,
    BudgetUnattainable,
    DecodeFailure,
    RenderOptions,
    StencilPipeline,
    ToneMapper,
    render_to_cup,
)
from cupstencil_renderer.models import MEDIA_PNG


def png_bytes(image):
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class RecordingToneMapper(ToneMapper):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def apply(self, buffer, options):
        self.calls += 1
        return super().apply(buffer, options)


class PipelineTests(unittest.TestCase):
    def test_red_photo_binary_is_all_black(self):
        image = Image.new("RGBA", (1000, 1000), (255, 0, 0, 255))
        artifact = StencilPipeline().render(image, RenderOptions(tone_mode="binary", threshold=170, fit="contain"))

        self.assertEqual(artifact.media_type, MEDIA_PNG)
        self.assertLessEqual(artifact.size, 200 * 1024)
        decoded = Image.open(BytesIO(artifact.data))
        self.assertEqual(decoded.size, (CUP_WIDTH, CUP_HEIGHT))
        rgb = np.array(decoded.convert("RGBA"))[..., :3]
        self.assertEqual(int(rgb.max()), 0)

    def test_sampled_output_is_black_and_white(self):
        image = Image.linear_gradient("L").resize((300, 200)).convert("RGB")
        pipeline = StencilPipeline(width=60, height=80)
        artifact = pipeline.render(image, RenderOptions(tone_mode="sampled", sample_density=4, fit="cover", target_format="png"))
        rgb = np.array(Image.open(BytesIO(artifact.data)).convert("RGBA"))[..., :3]
        self.assertTrue(set(np.unique(rgb).tolist()) <= {0, 255})
        self.assertEqual(artifact.quantize_step, 0)

    def test_original_mode_skips_tone_mapping(self):
        mapper = RecordingToneMapper()
        pipeline = StencilPipeline(width=20, height=20, tone_mapper=mapper)
        artifact = pipeline.render(
            Image.new("RGB", (10, 10), (0, 255, 0)),
            RenderOptions(tone_mode="original", fit="cover", target_format="png"),
        )
        self.assertEqual(mapper.calls, 0)
        r, g, b, a = Image.open(BytesIO(artifact.data)).convert("RGBA").getpixel((10, 10))
        self.assertLessEqual(r, 2)
        self.assertGreaterEqual(g, 253)
        self.assertEqual(a, 255)

    def test_binary_mode_runs_tone_mapper_once(self):
        mapper = RecordingToneMapper()
        StencilPipeline(width=20, height=20, tone_mapper=mapper).render(Image.new("RGB", (5, 5)), RenderOptions())
        self.assertEqual(mapper.calls, 1)

    def test_png_budget_failure_propagates(self):
        rng = np.random.default_rng(5)
        noisy = Image.fromarray(rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8))
        with self.assertRaises(BudgetUnattainable):
            StencilPipeline(width=64, height=64).render(
                noisy, RenderOptions(tone_mode="original", target_format="png", max_bytes=1)
            )

    def test_render_bytes_decodes_first(self):
        data = png_bytes(Image.new("RGB", (40, 30), (255, 255, 255)))
        artifact = StencilPipeline(width=16, height=16).render_bytes(data, RenderOptions(fit="cover"))
        decoded = np.array(Image.open(BytesIO(artifact.data)).convert("RGBA"))
        self.assertEqual(int(decoded[..., :3].min()), 255)

    def test_render_bytes_rejects_garbage(self):
        with self.assertRaises(DecodeFailure):
            StencilPipeline().render_bytes(b"definitely not an image")

    def test_default_pipeline_helper(self):
        artifact = render_to_cup(Image.new("RGB", (50, 50), (255, 255, 255)))
        self.assertEqual(Image.open(BytesIO(artifact.data)).size, (CUP_WIDTH, CUP_HEIGHT))


class RenderOptionsTests(unittest.TestCase):
    def test_defaults(self):
        options = RenderOptions()
        self.assertEqual(options.tone_mode, "binary")
        self.assertEqual(options.threshold, 170)
        self.assertEqual(options.fit, "contain")
        self.assertEqual(options.max_bytes, 200 * 1024)
        self.assertEqual(options.target_format, "auto")

    def test_rejects_unknown_values(self):
        with self.assertRaises(ValueError):
            RenderOptions(tone_mode="sepia")
        with self.assertRaises(ValueError):
            RenderOptions(fit="stretch")
        with self.assertRaises(ValueError):
            RenderOptions(target_format="gif")
        with self.assertRaises(ValueError):
            RenderOptions(max_bytes=0)


if __name__ == "__main__":
    unittest.main()
