"""
svgdom - SVG document object model

Parses SVG markup and its JSON form into a tree of typed elements, lets
callers query and restructure the tree, and bakes affine transforms into
element coordinates before writing SVG, JSON or raster output.
"""

__version__ = "0.1.0"

from .core import (
    Svg, Matrix, Point, BoundingBox, SvgElement,
    Rect, Circle, Ellipse, Line, Polyline, Polygon, Path, Group,
    ELEMENT_TYPES,
    SvgError, SvgIOError, SvgParseError, GeometryError, RasterError,
)
from .io import (
    SVGParser, ExportSettings,
    from_svg_document, from_xml_string,
    from_json_file, from_json_string, from_json,
)

__all__ = [
    'Svg', 'Matrix', 'Point', 'BoundingBox', 'SvgElement',
    'Rect', 'Circle', 'Ellipse', 'Line', 'Polyline', 'Polygon', 'Path', 'Group',
    'ELEMENT_TYPES',
    'SvgError', 'SvgIOError', 'SvgParseError', 'GeometryError', 'RasterError',
    'SVGParser', 'ExportSettings',
    'from_svg_document', 'from_xml_string',
    'from_json_file', 'from_json_string', 'from_json',
]
