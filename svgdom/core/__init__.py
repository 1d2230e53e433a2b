"""
svgdom Core Module

Contains the core data structures:
- Svg: Root document container
- Shapes: Rect, Circle, Ellipse, Line, Polyline, Polygon, Path, Group
- Matrix: Immutable affine transforms
- Errors: SvgError and its subclasses
"""

# Import order matters - matrix first, then shapes, then document
from .errors import SvgError, SvgIOError, SvgParseError, GeometryError, RasterError
from .matrix import Matrix
from .path_data import PathCommand, parse_path_data, format_path_data
from .shapes import (
    Point, BoundingBox, SvgElement,
    Rect, Circle, Ellipse, Line, Polyline, Polygon, Path, Group,
    ELEMENT_TYPES
)
from .document import Svg

__all__ = [
    'SvgError', 'SvgIOError', 'SvgParseError', 'GeometryError', 'RasterError',
    'Matrix',
    'PathCommand', 'parse_path_data', 'format_path_data',
    'Point', 'BoundingBox', 'SvgElement',
    'Rect', 'Circle', 'Ellipse', 'Line', 'Polyline', 'Polygon', 'Path', 'Group',
    'ELEMENT_TYPES',
    'Svg',
]
