# -*- coding: utf-8 -*-
from collections import namedtuple

# index 0 is the coarsest level, the highest index is the original resolution
PyramidLevel = namedtuple("PyramidLevel", ["index", "width", "height"])


def level_count(max_dimension):
    """Returns N = ceil(log2(max_dimension)); a 1px image has N = 0."""
    if max_dimension < 1:
        raise ValueError(f"Image dimension must be at least 1 (got {max_dimension})")
    # Integer form of ceil(log2(n)), exact for every n >= 1
    return (int(max_dimension) - 1).bit_length()


def halve(width, height):
    """Dimensions of the next coarser level."""
    return (width + 1) // 2, (height + 1) // 2


def plan_levels(width, height):
    """
    Lists every pyramid level for a width x height image, finest first.
    Level N carries the original size, each following level is half the
    previous one rounded up, ending at level 0.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image size must be at least 1x1 (got {width}x{height})")

    top = level_count(max(width, height))
    levels = []
    for index in range(top, -1, -1):
        levels.append(PyramidLevel(index, width, height))
        width, height = halve(width, height)
    return levels
