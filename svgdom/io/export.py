"""
Document export for svgdom

Writes documents to SVG files and renders them to raster images.
Default output paths come from ExportSettings instead of being hard-wired,
so tests can inject a clock and a directory.
"""

import asyncio
import io
import logging
import os
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, TYPE_CHECKING

from PIL import Image

from ..core.errors import RasterError, SvgIOError

if TYPE_CHECKING:
    from ..core.document import Svg

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class DefaultPathFactory:
    """
    Builds default output paths from export settings.

    Timestamps are strictly increasing per factory, so two calls never
    produce the same path even within one clock tick.
    """

    def __init__(self, settings: 'ExportSettings'):
        self.settings = settings
        self._last_stamp: Optional[int] = None

    def next_path(self, suffix: str) -> str:
        stamp = int(self.settings.clock())
        if self._last_stamp is not None and stamp <= self._last_stamp:
            stamp = self._last_stamp + 1
        self._last_stamp = stamp

        name = self.settings.filename_template.format(timestamp=stamp, suffix=suffix)
        return os.path.join(self.settings.temp_dir, name)


@dataclass
class ExportSettings:
    """
    Settings for saving and rendering documents.

    Attributes:
        temp_dir: Directory for default output paths
        filename_template: Default file name, formatted with
            {timestamp} (epoch milliseconds) and {suffix}
        clock: Callable returning the current time in epoch milliseconds
        raster_scale: Scale factor applied when rasterizing
        raster_background: Background color for raster output (None = transparent)
    """
    temp_dir: str = field(default_factory=tempfile.gettempdir)
    filename_template: str = "export_{timestamp}{suffix}"
    clock: Callable[[], float] = _epoch_millis
    raster_scale: float = 1.0
    raster_background: Optional[str] = None

    def __post_init__(self):
        self._path_factory = DefaultPathFactory(self)

    def default_path(self, suffix: str) -> str:
        return self._path_factory.next_path(suffix)


# Process-wide defaults used when no settings are passed. Its path factory
# is shared, so default paths stay unique across the whole process.
DEFAULT_SETTINGS = ExportSettings()


def _write_text(path: str, content: str) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)


async def save_svg(svg: 'Svg', output: Optional[str] = None,
                   settings: Optional[ExportSettings] = None,
                   omit_transform: bool = False) -> str:
    """
    Save a document as an SVG file.

    Args:
        svg: Document to save
        output: Output path; a timestamped temporary path when omitted
        settings: Export settings (module defaults when omitted)
        omit_transform: Leave transform attributes out

    Returns:
        Path of the written file

    Raises:
        SvgIOError: if the file cannot be written
    """
    settings = settings or DEFAULT_SETTINGS
    output = str(output) if output else settings.default_path('.svg')

    content = XML_DECLARATION + svg.to_string(True, omit_transform)
    try:
        await asyncio.to_thread(_write_text, output, content)
    except OSError as e:
        raise SvgIOError(f"Cannot write {output}", path=output, cause=e) from e

    logger.info(f"Saved SVG to {output}")
    return output


def _render_png_bytes(svg_path: str, settings: ExportSettings) -> bytes:
    """Rasterize an SVG file to PNG bytes with cairosvg."""
    import cairosvg

    return cairosvg.svg2png(
        url=svg_path,
        scale=settings.raster_scale,
        background_color=settings.raster_background,
    )


def _write_raster(svg_path: str, output: str, settings: ExportSettings) -> None:
    png_data = _render_png_bytes(svg_path, settings)

    output_path = Path(output)
    if output_path.suffix.lower() == '.png':
        output_path.write_bytes(png_data)
        return

    # Re-encode for other formats, dropping alpha where the format has none
    image = Image.open(io.BytesIO(png_data))
    if output_path.suffix.lower() in ('.jpg', '.jpeg', '.bmp') and image.mode != 'RGB':
        image = image.convert('RGB')
    image.save(output_path)


async def save_raster(svg: 'Svg', output: Optional[str] = None,
                      settings: Optional[ExportSettings] = None) -> str:
    """
    Save a document as a raster image (PNG unless `output` says otherwise).

    The document is first written to a temporary SVG, which is then
    rasterized. The temporary SVG is kept when rasterizing fails.

    Returns:
        Path of the written image

    Raises:
        SvgIOError: if the intermediate SVG cannot be written
        RasterError: if rasterizing or writing the image fails
    """
    settings = settings or DEFAULT_SETTINGS
    output = str(output) if output else settings.default_path('.png')

    svg_path = await save_svg(svg, None, settings)
    try:
        await asyncio.to_thread(_write_raster, svg_path, output, settings)
    except Exception as e:
        raise RasterError(f"Cannot render {svg_path} to {output}",
                          svg_path=svg_path, cause=e) from e

    logger.info(f"Saved raster image to {output}")
    return output
