# -*- coding: utf-8 -*-
"""Error types raised by the Deep Zoom converter."""


class DeepZoomError(Exception):
    """Base class for every user-facing converter failure."""
    kind = "error"

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path

    def __str__(self):
        msg = super().__str__()
        if self.path is not None and str(self.path) not in msg:
            return f"{msg}: {self.path}"
        return msg


class ConfigurationError(DeepZoomError):
    kind = "configuration"


class InputNotFoundError(DeepZoomError):
    kind = "input-not-found"


class OutputConflictError(DeepZoomError):
    kind = "output-conflict"


class DecodeError(DeepZoomError):
    kind = "decode"


class EncodeError(DeepZoomError):
    kind = "encode"


class DirectoryError(DeepZoomError):
    kind = "directory"


class ConversionCancelled(DeepZoomError):
    kind = "cancelled"


class InvariantViolation(RuntimeError):
    """
    A computed tile region is empty or leaves the level raster.
    Only reachable through a bad tile size/overlap pair, so it is never
    reported as a per-image failure.
    """
