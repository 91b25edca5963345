# -*- coding: utf-8 -*-
from dataclasses import dataclass
from pathlib import Path

from dzi_errors import EncodeError

XML_HEADER = '<?xml version="1.0" encoding="utf-8"?>'
SCHEMA_NAME = "http://schemas.microsoft.com/deepzoom/2009"
SERVER_FORMAT = "Default"


@dataclass(frozen=True)
class PyramidDescriptor:
    width: int
    height: int
    tile_size: int
    overlap: int
    tile_format: str

    def to_xml(self):
        lines = [
            XML_HEADER,
            f'<Image TileSize="{self.tile_size}" Overlap="{self.overlap}" '
            f'Format="{self.tile_format}" ServerFormat="{SERVER_FORMAT}" xmlns="{SCHEMA_NAME}">',
            f'<Size Width="{self.width}" Height="{self.height}" />',
            "</Image>",
        ]
        return "\n".join(lines) + "\n"


def descriptor_for(width, height, config):
    return PyramidDescriptor(width, height, config.tile_size, config.overlap, config.tile_format)


def write_descriptor(descriptor, path):
    """Writes the descriptor XML as UTF-8 text."""
    path = Path(path)
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(descriptor.to_xml())
    except OSError as e:
        raise EncodeError(f"Unable to write descriptor file ({e.strerror or e})", path) from e
    return path
