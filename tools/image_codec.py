# -*- coding: utf-8 -*-
from pathlib import Path

from PIL import Image

from dzi_config import SUPPORTED_FORMATS, DEFAULT_QUALITY
from dzi_errors import DecodeError, EncodeError

# Source images are expected to be huge; lift Pillow's decompression bomb guard
Image.MAX_IMAGE_PIXELS = None

# Modes the pyramid works in directly
NATIVE_MODES = ("RGB", "RGBA", "L")
# 16-bit greyscale, as Pillow opens it from PNG and TIFF
WIDE_GREY_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")
# Encoders that cannot store an alpha channel
OPAQUE_FORMATS = ("JPEG", "BMP")


def normalize_mode(img):
    """Converts palette and bitonal images to RGB/RGBA and 16-bit greyscale to 8-bit L."""
    if img.mode in NATIVE_MODES:
        return img
    if img.mode in WIDE_GREY_MODES:
        # Plain convert("L") clips every value above 255 to white
        return img.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    if img.mode in ("LA", "PA", "RGBa", "La") or "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def flatten_alpha(img, background=(255, 255, 255)):
    """Composites an alpha image onto a solid background."""
    if img.mode == "RGBA":
        flat = Image.new("RGB", img.size, background)
        flat.paste(img, mask=img.split()[3])
        return flat
    if img.mode not in ("RGB", "L"):
        return img.convert("RGB")
    return img


class PillowCodec:
    """Reads source rasters and writes tile images through Pillow."""

    def __init__(self, quality=DEFAULT_QUALITY):
        self.quality = quality

    def decode(self, path):
        path = Path(path)
        try:
            with Image.open(path) as img:
                img.load()
                result = normalize_mode(img)
                # normalize_mode may hand back the opened file itself
                if result is img:
                    result = img.copy()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Cannot read image file ({e})", path) from e
        return result

    def encode(self, img, tile_format, path):
        path = Path(path)
        encoder = SUPPORTED_FORMATS.get(tile_format.lower())
        if encoder is None:
            raise EncodeError(f"No encoder for tile format '{tile_format}'", path)

        params = {}
        if encoder in ("JPEG", "WEBP"):
            params["quality"] = self.quality
        if encoder in OPAQUE_FORMATS:
            img = flatten_alpha(img)

        try:
            img.save(path, encoder, **params)
        except (OSError, ValueError) as e:
            raise EncodeError(f"Unable to save image file ({e})", path) from e
