import sys
import unittest
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from pathlib import Path

import numpy as np
from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from cupstencil_renderer import RenderOptions, StencilPipeline, build_sample_image


class ConcurrentRenderTests(unittest.TestCase):
    def test_parallel_requests_share_pattern_cache(self):
        pipeline = StencilPipeline(width=120, height=160)
        options = RenderOptions(tone_mode="sampled", sample_density=7, fit="cover")
        names = ["h-gradient", "v-gradient", "checkerboard", "quadrants"] * 2

        def job(name):
            return pipeline.render(build_sample_image(name, width=300, height=200), options)

        with ThreadPoolExecutor(max_workers=4) as pool:
            artifacts = list(pool.map(job, names))

        serial = [job(name) for name in names]
        self.assertEqual([a.data for a in artifacts], [a.data for a in serial])
        for artifact in artifacts:
            rgb = np.array(Image.open(BytesIO(artifact.data)).convert("RGBA"))[..., :3]
            self.assertTrue(set(np.unique(rgb).tolist()) <= {0, 255})
        self.assertIn((7, 7), pipeline.tone_mapper.cache)


if __name__ == "__main__":
    unittest.main()
