import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from cupstencil_renderer.samples import SAMPLE_NAMES, build_sample_image


class SampleImageTests(unittest.TestCase):
    def test_dimensions_and_mode(self):
        for name in SAMPLE_NAMES:
            img = build_sample_image(name, width=120, height=80)
            self.assertEqual(img.size, (120, 80), name)
            self.assertEqual(img.mode, "RGBA", name)

    def test_quadrants(self):
        img = build_sample_image("quadrants", width=10, height=10)
        self.assertEqual(img.getpixel((0, 0)), (255, 0, 0, 255))
        self.assertEqual(img.getpixel((9, 0)), (0, 255, 0, 255))
        self.assertEqual(img.getpixel((0, 9)), (0, 0, 255, 255))
        self.assertEqual(img.getpixel((9, 9)), (255, 255, 255, 255))

    def test_gradient_ends(self):
        img = build_sample_image("h-gradient", width=256, height=2)
        self.assertEqual(img.getpixel((0, 0))[:3], (0, 0, 0))
        self.assertEqual(img.getpixel((255, 1))[:3], (255, 255, 255))

    def test_unknown_name(self):
        with self.assertRaises(ValueError):
            build_sample_image("plaid", 4, 4)


if __name__ == "__main__":
    unittest.main()
