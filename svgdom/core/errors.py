"""
svgdom Errors

Exception hierarchy raised by the document model, the parser and the
persistence helpers. Callers only need to catch SvgError.
"""

from typing import Optional


class SvgError(Exception):
    """Base class for every failure raised by svgdom."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class SvgIOError(SvgError):
    """Reading or writing a file failed."""

    def __init__(self, message: str, path: Optional[str] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.path = path


class SvgParseError(SvgError):
    """Input could not be interpreted as SVG, JSON, transform or path data."""


class GeometryError(SvgError):
    """Bounding box computation or matrix application failed."""


class RasterError(SvgError):
    """External raster conversion failed.

    The intermediate SVG file is left in place and its path is kept
    on the exception.
    """

    def __init__(self, message: str, svg_path: Optional[str] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.svg_path = svg_path
