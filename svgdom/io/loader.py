"""
Document loading for svgdom

Async factories building Svg documents from files, strings and parsed
JSON values.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Union

from ..core.document import Svg
from ..core.errors import SvgIOError, SvgParseError
from .svg_parser import SVGParser

logger = logging.getLogger(__name__)


async def _read(path: Union[str, Path], binary: bool = False) -> Union[str, bytes]:
    path = Path(path)
    try:
        if binary:
            return await asyncio.to_thread(path.read_bytes)
        return await asyncio.to_thread(path.read_text, encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise SvgIOError(f"Cannot read {path}", path=str(path), cause=e) from e


async def from_svg_document(path: Union[str, Path]) -> Svg:
    """
    Create an Svg from an SVG file.

    The raw bytes go to the XML parser, which honours the encoding named
    in the file's XML declaration.
    """
    svg = await from_xml_string(await _read(path, binary=True))
    logger.info(f"Loaded {len(svg)} elements from {path}")
    return svg


async def from_xml_string(string: Union[str, bytes]) -> Svg:
    """Create an Svg from SVG markup."""
    elements = await SVGParser().convert_xml(string)
    return Svg(elements)


async def from_json_file(path: Union[str, Path]) -> Svg:
    """Create an Svg from a JSON file."""
    svg = await from_json_string(await _read(path))
    logger.info(f"Loaded {len(svg)} elements from {path}")
    return svg


async def from_json_string(string: str) -> Svg:
    """Create an Svg from a JSON string."""
    try:
        data = json.loads(string)
    except json.JSONDecodeError as e:
        raise SvgParseError("Invalid JSON", e) from e
    return await from_json(data)


async def from_json(data: Any) -> Svg:
    """Create an Svg from an already parsed JSON value."""
    elements = await SVGParser().convert_json(data)
    return Svg(elements)
