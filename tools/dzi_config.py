# -*- coding: utf-8 -*-
from dataclasses import dataclass
from pathlib import Path

from dzi_errors import ConfigurationError

# --- CONFIGURATION ---
DEFAULT_TILE_SIZE = 256
DEFAULT_OVERLAP = 1
DEFAULT_FORMAT = "jpg"
DEFAULT_QUALITY = 90
DEFAULT_WORKERS = 1

# Tile format -> Pillow encoder name
SUPPORTED_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "bmp": "BMP",
    "tif": "TIFF",
    "tiff": "TIFF",
}


@dataclass(frozen=True)
class ConverterConfig:
    """Settings for one converter run. Built once and passed to every call."""
    tile_size: int = DEFAULT_TILE_SIZE
    overlap: int = DEFAULT_OVERLAP
    output_dir: Path = Path(".")
    tile_format: str = DEFAULT_FORMAT
    overwrite: bool = True
    quality: int = DEFAULT_QUALITY
    workers: int = DEFAULT_WORKERS
    verbose: bool = False
    debug: bool = False

    def validate(self):
        """Raises ConfigurationError on the first setting the tiler cannot honour."""
        if self.tile_size < 1:
            raise ConfigurationError(f"Tile size must be at least 1 (got {self.tile_size})")
        if self.overlap < 0:
            raise ConfigurationError(f"Overlap must not be negative (got {self.overlap})")
        # Overlap reaching tile_size would push interior tiles off the raster.
        if self.overlap >= self.tile_size:
            raise ConfigurationError(
                f"Overlap ({self.overlap}) must be smaller than the tile size ({self.tile_size})")
        if self.tile_format.lower() not in SUPPORTED_FORMATS:
            raise ConfigurationError(
                f"Unsupported tile format '{self.tile_format}' "
                f"(choose from {', '.join(sorted(SUPPORTED_FORMATS))})")
        if not 1 <= self.quality <= 100:
            raise ConfigurationError(f"Quality must be between 1 and 100 (got {self.quality})")
        if self.workers < 1:
            raise ConfigurationError(f"Workers must be at least 1 (got {self.workers})")
        return self

    @classmethod
    def from_args(cls, args):
        return cls(
            tile_size=args.tilesize,
            overlap=args.overlap,
            output_dir=Path(args.outputdir),
            tile_format=args.format.lower(),
            overwrite=not args.no_overwrite,
            quality=args.quality,
            workers=args.workers,
            verbose=args.verbose or args.debug,
            debug=args.debug,
        )
