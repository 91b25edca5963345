#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Deep Zoom Converter.
Turns large images into Deep Zoom tile pyramids:

    <output>/<name>.xml                       descriptor
    <output>/<name>/<level>/<col>_<row>.<fmt>  tiles
"""
import argparse
import sys
import threading
from contextlib import nullcontext
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.markup import escape

import downsampler
import pyramid_planner
import tile_slicer
from dzi_config import (
    ConverterConfig, DEFAULT_TILE_SIZE, DEFAULT_OVERLAP, DEFAULT_FORMAT,
    DEFAULT_QUALITY, DEFAULT_WORKERS,
)
from dzi_descriptor import descriptor_for, write_descriptor
from dzi_errors import (
    DeepZoomError, ConfigurationError, InputNotFoundError, OutputConflictError,
    DirectoryError, ConversionCancelled,
)
from dzi_report import Reporter, print_report
from image_codec import PillowCodec
from output_fs import LocalFilesystem


@dataclass
class ImageResult:
    source: Path
    status: str
    levels: int = 0
    tiles: int = 0
    descriptor: Path = None
    error_kind: str = None
    message: str = None

    @property
    def ok(self):
        return self.status == "ok"


@dataclass
class BatchReport:
    results: list = field(default_factory=list)

    def _count(self, status):
        return sum(1 for r in self.results if r.status == status)

    @property
    def succeeded(self):
        return self._count("ok")

    @property
    def failed(self):
        return self._count("failed")

    @property
    def cancelled(self):
        return self._count("cancelled")

    @property
    def ok(self):
        return all(r.ok for r in self.results)


def output_paths(source, output_dir):
    """Descriptor file and tile directory for one source image."""
    name = Path(source).stem
    output_dir = Path(output_dir)
    return output_dir / f"{name}.xml", output_dir / name


def check_conflicts(descriptor_path, image_dir, config, fs):
    """Raises OutputConflictError when strict mode finds an earlier pyramid."""
    if config.overwrite: return
    if fs.exists(descriptor_path):
        raise OutputConflictError("File already exists in output dir", descriptor_path)
    if fs.exists(image_dir):
        raise OutputConflictError("Image directory already exists in output dir", image_dir)


def discard_output(descriptor_path, image_dir, fs, reporter):
    """Removes a previous or partial pyramid. Returns False if anything is left behind."""
    try:
        if fs.exists(descriptor_path):
            fs.delete_file(descriptor_path)
        if fs.exists(image_dir):
            reporter.debug(f"Deleting directory: {image_dir}")
            fs.delete_directory_recursive(image_dir)
    except DeepZoomError as e:
        reporter.error(f"Cleanup failed, partial output left behind: {e}")
        return False
    return True


def check_cancelled(cancel_event, source):
    if cancel_event is not None and cancel_event.is_set():
        raise ConversionCancelled("Conversion cancelled", source)


def tile_pool(config):
    if config.workers > 1:
        return ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="dzi-tile")
    return nullcontext()


def write_level(img, level, level_dir, config, codec, reporter, pool=None):
    """Writes every tile of one level and returns how many were written."""
    ext = config.tile_format

    if pool is None:
        count = 0
        for region, tile in tile_slicer.iter_tiles(img, level.width, level.height,
                                                   config.tile_size, config.overlap):
            reporter.debug(f"getTile: row={region.row}, col={region.col}, x={region.x}, "
                           f"y={region.y}, w={region.w}, h={region.h}")
            codec.encode(tile, ext, level_dir / f"{region.col}_{region.row}.{ext}")
            count += 1
        return count

    # All regions are computed up front so a geometry error surfaces before any work is queued
    regions = list(tile_slicer.tile_regions(level.width, level.height,
                                            config.tile_size, config.overlap))

    def save(region):
        tile = tile_slicer.crop_tile(img, region)
        codec.encode(tile, ext, level_dir / f"{region.col}_{region.row}.{ext}")

    futures = [pool.submit(save, r) for r in regions]
    try:
        for f in futures:
            f.result()
    except BaseException:
        for f in futures:
            f.cancel()
        # Running tiles still read the level image; let them finish first
        wait(futures)
        raise
    return len(futures)


def convert_image(source, config, codec=None, fs=None, reporter=None, cancel_event=None):
    """
    Builds the Deep Zoom pyramid for one image.
    Per-image failures come back as a failed ImageResult after the image's
    partial output has been removed; they never propagate.
    """
    config.validate()
    source = Path(source)
    codec = codec or PillowCodec(config.quality)
    fs = fs or LocalFilesystem()
    reporter = reporter or Reporter.for_config(config)

    descriptor_path, image_dir = output_paths(source, config.output_dir)
    reporter.info(f"🖼️  Processing image file: {escape(str(source))}")

    writing = False
    levels = tiles = 0
    try:
        # 1. Nothing is touched when strict mode finds an earlier pyramid
        check_conflicts(descriptor_path, image_dir, config, fs)
        check_cancelled(cancel_event, source)

        img = codec.decode(source)
        width, height = img.size
        plan = pyramid_planner.plan_levels(width, height)
        levels = len(plan)
        reporter.debug(f"nLevels={plan[0].index} size={width}x{height} mode={img.mode}")

        # 2. Replace any earlier output once the source is known to be readable
        writing = True
        if not discard_output(descriptor_path, image_dir, fs, reporter):
            raise DirectoryError("Unable to remove existing output", image_dir)
        fs.create_directory(image_dir)

        # 3. Finest level first; each level is tiled before the next is derived from it
        with tile_pool(config) as pool:
            for i, level in enumerate(plan):
                check_cancelled(cancel_event, source)
                cols, rows = tile_slicer.tile_grid(level.width, level.height, config.tile_size)
                reporter.verbose(f"  └─ Level {level.index}: {level.width}x{level.height} "
                                 f"({cols}x{rows} tiles)")

                level_dir = fs.create_directory(image_dir / str(level.index))
                tiles += write_level(img, level, level_dir, config, codec, reporter, pool)

                if level.index > 0:
                    nxt = plan[i + 1]
                    img = downsampler.resample(img, nxt.width, nxt.height)

        # 4. Descriptor last, so its presence marks a complete pyramid
        write_descriptor(descriptor_for(width, height, config), descriptor_path)
    except DeepZoomError as e:
        status = "cancelled" if isinstance(e, ConversionCancelled) else "failed"
        message = str(e)
        if writing and not discard_output(descriptor_path, image_dir, fs, reporter):
            message += f" (partial output left in {image_dir})"
        if status == "cancelled":
            reporter.info(f"  ⚠️  Cancelled: {escape(source.name)}")
        else:
            reporter.error(f"{source.name}: {message}")
        return ImageResult(source, status, levels=levels, error_kind=e.kind, message=message)
    except BaseException:
        # Interrupts and fatal errors still propagate, without a half-written pyramid
        if writing:
            discard_output(descriptor_path, image_dir, fs, reporter)
        raise

    reporter.info(f"  ✅ {levels} levels, {tiles} tiles -> {escape(str(descriptor_path))}")
    return ImageResult(source, "ok", levels=levels, tiles=tiles, descriptor=descriptor_path)


def validate_inputs(inputs):
    if not inputs:
        raise ConfigurationError("No input files given")
    sources = []
    for item in inputs:
        path = Path(item)
        if not path.is_file():
            raise InputNotFoundError("Missing input file", path)
        sources.append(path)
    return sources


def check_output_dir(output_dir):
    output_dir = Path(output_dir)
    if not output_dir.exists():
        raise ConfigurationError("Output directory does not exist", output_dir)
    if not output_dir.is_dir():
        raise ConfigurationError("Output directory is not a directory", output_dir)


def convert_batch(inputs, config, codec=None, fs=None, reporter=None, cancel_event=None):
    """
    Converts every input in order and collects one ImageResult per input.
    Only configuration problems raise; everything else lands in the report.
    """
    config.validate()
    sources = validate_inputs(inputs)
    check_output_dir(config.output_dir)

    codec = codec or PillowCodec(config.quality)
    fs = fs or LocalFilesystem()
    reporter = reporter or Reporter.for_config(config)
    cancel_event = cancel_event or threading.Event()

    report = BatchReport()
    for source in sources:
        if cancel_event.is_set():
            report.results.append(ImageResult(source, "cancelled", error_kind="cancelled",
                                              message="Not started"))
            continue
        try:
            result = convert_image(source, config, codec=codec, fs=fs, reporter=reporter,
                                   cancel_event=cancel_event)
        except KeyboardInterrupt:
            cancel_event.set()
            result = ImageResult(source, "cancelled", error_kind="cancelled",
                                 message="Interrupted")
        report.results.append(result)
    return report


def build_parser():
    parser = argparse.ArgumentParser(
        prog="deepzoom-convert",
        description="Deep Zoom Converter: slices large images into Deep Zoom tile pyramids")
    parser.add_argument("inputs", nargs="*", metavar="INPUT", help="Image files to convert")
    parser.add_argument("-o", "--outputdir", default=".", help="Existing output directory (default: .)")
    parser.add_argument("--tilesize", type=int, default=DEFAULT_TILE_SIZE,
                        help=f"Tile edge in pixels (default: {DEFAULT_TILE_SIZE})")
    parser.add_argument("--overlap", type=int, default=DEFAULT_OVERLAP,
                        help=f"Pixels shared between neighbouring tiles (default: {DEFAULT_OVERLAP})")
    parser.add_argument("--format", default=DEFAULT_FORMAT,
                        help=f"Tile image format (default: {DEFAULT_FORMAT})")
    parser.add_argument("--quality", type=int, default=DEFAULT_QUALITY,
                        help=f"JPEG/WebP quality 1-100 (default: {DEFAULT_QUALITY})")
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS,
                        help="Threads used to encode the tiles of a level (default: 1)")
    parser.add_argument("--no-overwrite", action="store_true",
                        help="Fail an image instead of replacing its existing pyramid")
    parser.add_argument("-v", "--verbose", action="store_true", help="Report each level")
    parser.add_argument("--debug", action="store_true", help="Report tile geometry (implies -v)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    console = Console(highlight=False)
    config = ConverterConfig.from_args(args)
    reporter = Reporter.for_config(config, console)
    reporter.debug(f"tileSize={config.tile_size} tileOverlap={config.overlap} "
                   f"outputDir={config.output_dir} workers={config.workers}")

    try:
        report = convert_batch(args.inputs, config, reporter=reporter)
    except (ConfigurationError, InputNotFoundError) as e:
        reporter.error(f"Invalid command line: {e}")
        return 2

    print_report(report, console)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
