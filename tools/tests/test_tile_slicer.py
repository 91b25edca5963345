import unittest
from unittest.mock import patch
import os
import sys
from PIL import Image

# Add parent dir to path so we can import tile_slicer
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
import tile_slicer
from tile_slicer import TileRegion
from dzi_errors import InvariantViolation

class TestTileSlicer(unittest.TestCase):

    def test_grid_size(self):
        self.assertEqual(tile_slicer.tile_grid(512, 512, 256), (2, 2))
        self.assertEqual(tile_slicer.tile_grid(1000, 1, 256), (4, 1))
        self.assertEqual(tile_slicer.tile_grid(257, 256, 256), (2, 1))
        self.assertEqual(tile_slicer.tile_grid(1, 1, 256), (1, 1))

    def test_square_level_regions(self):
        # Scenario: 512x512, tile 256, overlap 1
        first = tile_slicer.tile_region(0, 0, 512, 512, 256, 1)
        self.assertEqual(first, TileRegion(0, 0, 0, 0, 257, 257))
        second = tile_slicer.tile_region(1, 0, 512, 512, 256, 1)
        self.assertEqual(second, TileRegion(1, 0, 255, 0, 257, 257))
        self.assertEqual(second.x + second.w, 512)
        inner = tile_slicer.tile_region(1, 1, 512, 512, 256, 1)
        self.assertEqual(inner, TileRegion(1, 1, 255, 255, 257, 257))

    def test_interior_tile_has_overlap_on_both_sides(self):
        region = tile_slicer.tile_region(1, 1, 1000, 1000, 256, 2)
        self.assertEqual(region, TileRegion(1, 1, 254, 254, 260, 260))

    def test_single_pixel_level(self):
        self.assertEqual(list(tile_slicer.tile_regions(1, 1, 256, 1)), [TileRegion(0, 0, 0, 0, 1, 1)])

    def test_thin_strip_clamps_height(self):
        regions = list(tile_slicer.tile_regions(1000, 1, 256, 1))
        self.assertEqual([r.col for r in regions], [0, 1, 2, 3])
        self.assertTrue(all(r.h == 1 and r.y == 0 for r in regions))
        self.assertEqual(regions[-1], TileRegion(3, 0, 767, 0, 233, 1))

    def test_regions_are_column_major(self):
        cells = [(r.col, r.row) for r in tile_slicer.tile_regions(600, 300, 256, 1)]
        self.assertEqual(cells, [(0, 0), (0, 1), (1, 0), (1, 1), (2, 0), (2, 1)])

    def test_regions_stay_inside_level_and_cover_it_once(self):
        for tile_size, overlap in [(1, 0), (3, 1), (7, 2), (8, 0), (16, 3)]:
            for w in (1, 2, 5, 16, 17, 33):
                for h in (1, 4, 9, 31):
                    cols, rows = tile_slicer.tile_grid(w, h, tile_size)
                    coverage = [[0] * w for _ in range(h)]
                    regions = list(tile_slicer.tile_regions(w, h, tile_size, overlap))
                    self.assertEqual(len(regions), cols * rows)
                    for r in regions:
                        self.assertGreaterEqual(r.x, 0)
                        self.assertGreaterEqual(r.y, 0)
                        self.assertGreater(r.w, 0)
                        self.assertGreater(r.h, 0)
                        self.assertLessEqual(r.x + r.w, w)
                        self.assertLessEqual(r.y + r.h, h)
                        # Core cell without the overlap strip
                        x0, y0 = r.col * tile_size, r.row * tile_size
                        x1, y1 = min(x0 + tile_size, w), min(y0 + tile_size, h)
                        self.assertLessEqual(r.x, x0)
                        self.assertLessEqual(r.y, y0)
                        self.assertGreaterEqual(r.x + r.w, x1)
                        self.assertGreaterEqual(r.y + r.h, y1)
                        for yy in range(y0, y1):
                            for xx in range(x0, x1):
                                coverage[yy][xx] += 1
                    self.assertTrue(all(c == 1 for row in coverage for c in row),
                                    f"{w}x{h} tile={tile_size} overlap={overlap}")

    def test_cell_outside_grid_is_invariant_violation(self):
        with self.assertRaises(InvariantViolation):
            tile_slicer.tile_region(5, 0, 512, 512, 256, 1)

    def test_overlap_larger_than_tile_is_invariant_violation(self):
        with self.assertRaises(InvariantViolation):
            tile_slicer.tile_region(1, 0, 100, 100, 4, 10)

    def test_crop_copies_pixels_verbatim(self):
        src = Image.new("L", (20, 10))
        src.putdata([(i * 3) % 256 for i in range(200)])
        region = tile_slicer.tile_region(1, 0, 20, 10, 8, 1)
        tile = tile_slicer.crop_tile(src, region)
        self.assertEqual(tile.size, (region.w, region.h))
        for yy in range(region.h):
            for xx in range(region.w):
                self.assertEqual(tile.getpixel((xx, yy)), src.getpixel((region.x + xx, region.y + yy)))

    def test_iter_tiles_pairs_regions_with_crops(self):
        src = Image.new("RGB", (40, 25), (1, 2, 3))
        tiles = list(tile_slicer.iter_tiles(src, 40, 25, 16, 1))
        self.assertEqual(len(tiles), 3 * 2)
        for region, tile in tiles:
            self.assertEqual(tile.size, (region.w, region.h))

    def test_iter_tiles_is_lazy(self):
        src = Image.new("L", (64, 64))
        with patch("tile_slicer.crop_tile", wraps=tile_slicer.crop_tile) as mock_crop:
            it = tile_slicer.iter_tiles(src, 64, 64, 16, 0)
            next(it)
            self.assertEqual(mock_crop.call_count, 1)

if __name__ == "__main__":
    unittest.main()
