"""
svgdom I/O Module

Handles document loading, parsing and export.
"""

from .svg_parser import SVGParser
from .loader import (
    from_svg_document, from_xml_string,
    from_json_file, from_json_string, from_json
)
from .export import ExportSettings, DefaultPathFactory, save_svg, save_raster

__all__ = [
    'SVGParser',
    'from_svg_document', 'from_xml_string',
    'from_json_file', 'from_json_string', 'from_json',
    'ExportSettings', 'DefaultPathFactory', 'save_svg', 'save_raster',
]
