# -*- coding: utf-8 -*-
from PIL import Image

# --- CONFIGURATION ---
RESAMPLE_FILTER = Image.BICUBIC
# Targets at or below this size on either axis are resized in a single step
STAGING_THRESHOLD = 10
# Intermediate sizes, as multiples of the target, used to avoid aliasing
STAGE_FACTORS = (1.66, 1.33)


def resize_stages(target_width, target_height):
    """Returns the (w, h) sizes resample() passes through, final size last."""
    stages = []
    if target_width > STAGING_THRESHOLD and target_height > STAGING_THRESHOLD:
        for factor in STAGE_FACTORS:
            stages.append((int(target_width * factor), int(target_height * factor)))
    stages.append((int(target_width), int(target_height)))
    return stages


def resample(image, target_width, target_height):
    """
    Shrinks an image to the target size with a bicubic kernel.
    Large reductions go through two intermediate sizes first so that the
    result does not alias. The input is left untouched and a new image is
    always returned.
    """
    if target_width < 1 or target_height < 1:
        raise ValueError(f"Target size must be at least 1x1 (got {target_width}x{target_height})")

    result = image
    for w, h in resize_stages(target_width, target_height):
        result = result.resize((w, h), RESAMPLE_FILTER)
    return result
