# -*- coding: utf-8 -*-
import math
from collections import namedtuple

from dzi_errors import InvariantViolation

TileRegion = namedtuple("TileRegion", ["col", "row", "x", "y", "w", "h"])


def tile_grid(level_width, level_height, tile_size):
    """Number of tile columns and rows needed to cover a level."""
    return math.ceil(level_width / tile_size), math.ceil(level_height / tile_size)


def tile_region(col, row, level_width, level_height, tile_size, overlap):
    """
    Pixel box of tile (col, row) on a level.
    Each tile reaches `overlap` pixels past every edge it shares with a
    neighbour; tiles on the right and bottom borders are clipped to the level.
    """
    x = col * tile_size - (0 if col == 0 else overlap)
    y = row * tile_size - (0 if row == 0 else overlap)
    w = tile_size + (1 if col == 0 else 2) * overlap
    h = tile_size + (1 if row == 0 else 2) * overlap

    if x + w > level_width:
        w = level_width - x
    if y + h > level_height:
        h = level_height - y

    if w <= 0 or h <= 0 or x < 0 or y < 0:
        raise InvariantViolation(
            f"Empty tile region col={col} row={row} x={x} y={y} w={w} h={h} "
            f"on {level_width}x{level_height} level (tile_size={tile_size}, overlap={overlap})")
    return TileRegion(col, row, x, y, w, h)


def tile_regions(level_width, level_height, tile_size, overlap):
    """Yields every tile region of a level, column by column."""
    cols, rows = tile_grid(level_width, level_height, tile_size)
    for col in range(cols):
        for row in range(rows):
            yield tile_region(col, row, level_width, level_height, tile_size, overlap)


def crop_tile(image, region):
    """Copies the region's pixels out of the level image unchanged."""
    return image.crop((region.x, region.y, region.x + region.w, region.y + region.h))


def iter_tiles(image, level_width, level_height, tile_size, overlap):
    """Yields (TileRegion, cropped image) for every tile of a level."""
    for region in tile_regions(level_width, level_height, tile_size, overlap):
        yield region, crop_tile(image, region)
