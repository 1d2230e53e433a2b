"""
svgdom Core Shapes Module

Defines Point, BoundingBox and the closed set of SVG element classes:
rect, circle, ellipse, line, polyline, polygon, path and g (group).

Every element implements the same contract:
- get_bbox(): axis-aligned bounds of the untransformed geometry
- apply_matrix(): a NEW element with a matrix baked into its coordinates
- to_json() / to_xml(): serialization
- clone(): deep copy
"""

import math
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from .errors import GeometryError, SvgParseError
from .matrix import Matrix
from .path_data import (
    PathCommand, format_path_data, parse_path_data, path_points, transform_path
)
from .pipeline import apply_matrix_to_elements
from .units import format_number, format_points, parse_length, parse_points


@dataclass(frozen=True)
class Point:
    """A 2D point."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.sqrt((self.x - other.x)**2 + (self.y - other.y)**2)

    def to_json(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point(
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2
        )

    def contains(self, point: Point) -> bool:
        """Check if point is inside bounding box."""
        return (self.min_x <= point.x <= self.max_x and
                self.min_y <= point.y <= self.max_y)

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(
            min_x=min(self.min_x, other.min_x),
            min_y=min(self.min_y, other.min_y),
            max_x=max(self.max_x, other.max_x),
            max_y=max(self.max_y, other.max_y)
        )

    @classmethod
    def from_points(cls, points: Iterable[Tuple[float, float]]) -> 'BoundingBox':
        """
        Bounds of a set of (x, y) pairs.

        An empty set gives the degenerate box (0, 0, 0, 0).

        Raises:
            GeometryError: if any coordinate is NaN or infinite
        """
        xs, ys = [], []
        for x, y in points:
            if not (math.isfinite(x) and math.isfinite(y)):
                raise GeometryError(f"Non-finite coordinate ({x}, {y})")
            xs.append(x)
            ys.append(y)
        if not xs:
            return cls(0.0, 0.0, 0.0, 0.0)
        return cls(min_x=min(xs), min_y=min(ys), max_x=max(xs), max_y=max(ys))


def _to_points(pairs: Iterable[Tuple[float, float]]) -> List[Point]:
    return [Point(x, y) for x, y in pairs]


class SvgElement(ABC):
    """
    Abstract base class for all SVG elements.

    Attributes:
        id: Optional element identifier
        transform: Pending transform, None when the element has none
        transform_origin: Raw transform-origin value, if any
        attributes: Presentation attributes carried through untouched
    """
    type: ClassVar[str] = ''
    GEOMETRY_KEYS: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, id: Optional[str] = None,
                 transform: Optional[Matrix] = None,
                 transform_origin: Optional[str] = None,
                 attributes: Optional[Dict[str, Any]] = None):
        self.id = id
        self.transform = transform
        self.transform_origin = transform_origin
        self.attributes: Dict[str, Any] = dict(attributes or {})

    @classmethod
    @abstractmethod
    def from_geometry(cls, data: Mapping[str, Any]) -> 'SvgElement':
        """Build an element from XML attributes or a JSON object."""

    @abstractmethod
    def geometry(self) -> Dict[str, Any]:
        """Geometry values as they appear in JSON."""

    @abstractmethod
    def geometry_attributes(self) -> Dict[str, str]:
        """Geometry values as XML attribute strings."""

    @abstractmethod
    def points(self) -> List[Tuple[float, float]]:
        """Points whose hull bounds the untransformed geometry."""

    @abstractmethod
    async def apply_matrix(self, matrix: Matrix) -> 'SvgElement':
        """Return a new element with `matrix` applied to its coordinates."""

    @abstractmethod
    def clone(self) -> 'SvgElement':
        """Create a deep copy of this element."""

    async def get_bbox(self) -> BoundingBox:
        """Return the bounding box of the untransformed geometry."""
        return BoundingBox.from_points(self.points())

    def _carry_over(self, element: 'SvgElement') -> 'SvgElement':
        """Copy id and presentation attributes onto a derived element."""
        element.id = self.id
        element.attributes = dict(self.attributes)
        return element

    def _copy_common(self, element: 'SvgElement') -> 'SvgElement':
        self._carry_over(element)
        element.transform = self.transform
        element.transform_origin = self.transform_origin
        return element

    def to_json(self, omit_transform: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {'type': self.type}
        if self.id is not None:
            data['id'] = self.id
        data.update(self.geometry())
        data.update(self.attributes)
        if not omit_transform:
            if self.transform is not None:
                data['transform'] = self.transform.to_string()
            if self.transform_origin:
                data['transform-origin'] = self.transform_origin
        return data

    def to_xml(self, omit_transform: bool = False) -> ET.Element:
        element = ET.Element(self.type)
        if self.id is not None:
            element.set('id', self.id)
        for key, value in self.geometry_attributes().items():
            element.set(key, value)
        for key, value in self.attributes.items():
            element.set(key, str(value))
        if not omit_transform:
            if self.transform is not None:
                element.set('transform', self.transform.to_string())
            if self.transform_origin:
                element.set('transform-origin', self.transform_origin)
        return element

    def to_string(self, omit_transform: bool = False) -> str:
        return ET.tostring(self.to_xml(omit_transform), encoding='unicode')


def _require_non_negative(cls: Type[SvgElement], name: str, value: float) -> float:
    if value < 0:
        raise SvgParseError(f"Negative {name} on <{cls.type}>: {value}")
    return value


class Rect(SvgElement):
    """A rectangle. Applying any matrix turns it into a polygon."""
    type = 'rect'
    GEOMETRY_KEYS = ('x', 'y', 'width', 'height', 'rx', 'ry')

    def __init__(self, x: float, y: float, width: float, height: float,
                 rx: float = 0.0, ry: float = 0.0, **kwargs):
        super().__init__(**kwargs)
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.rx = rx
        self.ry = ry

    @classmethod
    def from_geometry(cls, data: Mapping[str, Any]) -> 'Rect':
        return cls(
            parse_length(data.get('x'), 'x'),
            parse_length(data.get('y'), 'y'),
            _require_non_negative(cls, 'width', parse_length(data.get('width'), 'width')),
            _require_non_negative(cls, 'height', parse_length(data.get('height'), 'height')),
            rx=_require_non_negative(cls, 'rx', parse_length(data.get('rx'), 'rx')),
            ry=_require_non_negative(cls, 'ry', parse_length(data.get('ry'), 'ry')),
        )

    def corners(self) -> List[Tuple[float, float]]:
        return [
            (self.x, self.y),
            (self.x + self.width, self.y),
            (self.x + self.width, self.y + self.height),
            (self.x, self.y + self.height),
        ]

    def points(self) -> List[Tuple[float, float]]:
        return self.corners()

    def geometry(self) -> Dict[str, Any]:
        data = {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}
        if self.rx:
            data['rx'] = self.rx
        if self.ry:
            data['ry'] = self.ry
        return data

    def geometry_attributes(self) -> Dict[str, str]:
        return {key: format_number(value) for key, value in self.geometry().items()}

    async def apply_matrix(self, matrix: Matrix) -> 'Polygon':
        # Corner radii do not survive the conversion
        polygon = Polygon(_to_points(matrix.apply_to_points(self.corners())))
        return self._carry_over(polygon)

    def clone(self) -> 'Rect':
        return self._copy_common(Rect(self.x, self.y, self.width, self.height,
                                      rx=self.rx, ry=self.ry))


class Circle(SvgElement):
    """A circle."""
    type = 'circle'
    GEOMETRY_KEYS = ('cx', 'cy', 'r')

    def __init__(self, cx: float, cy: float, r: float, **kwargs):
        super().__init__(**kwargs)
        self.cx = cx
        self.cy = cy
        self.r = r

    @classmethod
    def from_geometry(cls, data: Mapping[str, Any]) -> 'Circle':
        return cls(
            parse_length(data.get('cx'), 'cx'),
            parse_length(data.get('cy'), 'cy'),
            _require_non_negative(cls, 'r', parse_length(data.get('r'), 'r')),
        )

    @property
    def radius_x(self) -> float:
        return self.r

    @property
    def radius_y(self) -> float:
        return self.r

    def points(self) -> List[Tuple[float, float]]:
        return [(self.cx - self.r, self.cy - self.r), (self.cx + self.r, self.cy + self.r)]

    def geometry(self) -> Dict[str, Any]:
        return {'cx': self.cx, 'cy': self.cy, 'r': self.r}

    def geometry_attributes(self) -> Dict[str, str]:
        return {key: format_number(value) for key, value in self.geometry().items()}

    async def apply_matrix(self, matrix: Matrix) -> SvgElement:
        return self._carry_over(_transform_conic(self, matrix))

    def clone(self) -> 'Circle':
        return self._copy_common(Circle(self.cx, self.cy, self.r))


class Ellipse(SvgElement):
    """An ellipse."""
    type = 'ellipse'
    GEOMETRY_KEYS = ('cx', 'cy', 'rx', 'ry')

    def __init__(self, cx: float, cy: float, rx: float, ry: float, **kwargs):
        super().__init__(**kwargs)
        self.cx = cx
        self.cy = cy
        self.rx = rx
        self.ry = ry

    @classmethod
    def from_geometry(cls, data: Mapping[str, Any]) -> 'Ellipse':
        return cls(
            parse_length(data.get('cx'), 'cx'),
            parse_length(data.get('cy'), 'cy'),
            _require_non_negative(cls, 'rx', parse_length(data.get('rx'), 'rx')),
            _require_non_negative(cls, 'ry', parse_length(data.get('ry'), 'ry')),
        )

    @property
    def radius_x(self) -> float:
        return self.rx

    @property
    def radius_y(self) -> float:
        return self.ry

    def points(self) -> List[Tuple[float, float]]:
        return [(self.cx - self.rx, self.cy - self.ry), (self.cx + self.rx, self.cy + self.ry)]

    def geometry(self) -> Dict[str, Any]:
        return {'cx': self.cx, 'cy': self.cy, 'rx': self.rx, 'ry': self.ry}

    def geometry_attributes(self) -> Dict[str, str]:
        return {key: format_number(value) for key, value in self.geometry().items()}

    async def apply_matrix(self, matrix: Matrix) -> SvgElement:
        return self._carry_over(_transform_conic(self, matrix))

    def clone(self) -> 'Ellipse':
        return self._copy_common(Ellipse(self.cx, self.cy, self.rx, self.ry))


MIN_OUTLINE_SEGMENTS = 32
MAX_OUTLINE_SEGMENTS = 1024


def outline_segments(rx: float, ry: float) -> int:
    """Vertex count for a sampled ellipse: two per unit of radius, clamped."""
    return min(MAX_OUTLINE_SEGMENTS, max(MIN_OUTLINE_SEGMENTS, int(max(rx, ry) * 2)))


def ellipse_outline(cx: float, cy: float, rx: float, ry: float) -> List[Tuple[float, float]]:
    """Sample an ellipse outline as polygon vertices."""
    segments = outline_segments(rx, ry)
    return [
        (cx + rx * math.cos(2 * math.pi * i / segments),
         cy + ry * math.sin(2 * math.pi * i / segments))
        for i in range(segments)
    ]


def _transform_conic(shape, matrix: Matrix) -> SvgElement:
    """
    Apply a matrix to a circle or ellipse.

    Scale and translation keep the conic; rotation or skew turn it into a
    sampled polygon.
    """
    if not matrix.is_axis_aligned():
        outline = ellipse_outline(shape.cx, shape.cy, shape.radius_x, shape.radius_y)
        return Polygon(_to_points(matrix.apply_to_points(outline)))

    cx, cy = matrix.apply_to_point(shape.cx, shape.cy)
    rx = shape.radius_x * abs(matrix.a)
    ry = shape.radius_y * abs(matrix.d)
    if isinstance(shape, Circle) and math.isclose(abs(matrix.a), abs(matrix.d)):
        return Circle(cx, cy, rx)
    return Ellipse(cx, cy, rx, ry)


class Line(SvgElement):
    """A straight line segment."""
    type = 'line'
    GEOMETRY_KEYS = ('x1', 'y1', 'x2', 'y2')

    def __init__(self, x1: float, y1: float, x2: float, y2: float, **kwargs):
        super().__init__(**kwargs)
        self.x1 = x1
        self.y1 = y1
        self.x2 = x2
        self.y2 = y2

    @classmethod
    def from_geometry(cls, data: Mapping[str, Any]) -> 'Line':
        return cls(*(parse_length(data.get(key), key) for key in cls.GEOMETRY_KEYS))

    def points(self) -> List[Tuple[float, float]]:
        return [(self.x1, self.y1), (self.x2, self.y2)]

    def geometry(self) -> Dict[str, Any]:
        return {'x1': self.x1, 'y1': self.y1, 'x2': self.x2, 'y2': self.y2}

    def geometry_attributes(self) -> Dict[str, str]:
        return {key: format_number(value) for key, value in self.geometry().items()}

    async def apply_matrix(self, matrix: Matrix) -> 'Line':
        (x1, y1), (x2, y2) = matrix.apply_to_points(self.points())
        return self._carry_over(Line(x1, y1, x2, y2))

    def clone(self) -> 'Line':
        return self._copy_common(Line(self.x1, self.y1, self.x2, self.y2))


class Polyline(SvgElement):
    """An open sequence of connected points."""
    type = 'polyline'
    GEOMETRY_KEYS = ('points',)

    def __init__(self, points: Optional[List[Point]] = None, **kwargs):
        super().__init__(**kwargs)
        self.vertices: List[Point] = list(points or [])

    @classmethod
    def from_geometry(cls, data: Mapping[str, Any]) -> 'Polyline':
        return cls(_to_points(parse_points(data.get('points'), 'points')))

    def points(self) -> List[Tuple[float, float]]:
        return [(p.x, p.y) for p in self.vertices]

    def geometry(self) -> Dict[str, Any]:
        return {'points': [p.to_json() for p in self.vertices]}

    def geometry_attributes(self) -> Dict[str, str]:
        return {'points': format_points(self.vertices)}

    async def apply_matrix(self, matrix: Matrix) -> 'Polyline':
        transformed = type(self)(_to_points(matrix.apply_to_points(self.points())))
        return self._carry_over(transformed)

    def clone(self) -> 'Polyline':
        return self._copy_common(type(self)(list(self.vertices)))


class Polygon(Polyline):
    """A closed polygon."""
    type = 'polygon'


class Path(SvgElement):
    """
    A path element.

    The `d` attribute is kept as normalized absolute commands so that
    applying a matrix only has to map points.
    """
    type = 'path'
    GEOMETRY_KEYS = ('d',)

    def __init__(self, commands: Optional[List[PathCommand]] = None, **kwargs):
        super().__init__(**kwargs)
        self.commands: List[PathCommand] = list(commands or [])

    @classmethod
    def from_geometry(cls, data: Mapping[str, Any]) -> 'Path':
        d = data.get('d')
        if d is not None and not isinstance(d, str):
            raise SvgParseError(f"Path data must be a string, got {d!r}")
        return cls(parse_path_data(d))

    @property
    def d(self) -> str:
        return format_path_data(self.commands)

    def points(self) -> List[Tuple[float, float]]:
        return path_points(self.commands)

    def geometry(self) -> Dict[str, Any]:
        return {'d': self.d}

    def geometry_attributes(self) -> Dict[str, str]:
        return {'d': self.d}

    async def apply_matrix(self, matrix: Matrix) -> 'Path':
        return self._carry_over(Path(transform_path(self.commands, matrix)))

    def clone(self) -> 'Path':
        return self._copy_common(Path([cmd.clone() for cmd in self.commands]))


class Group(SvgElement):
    """A <g> element owning an ordered list of child elements."""
    type = 'g'
    GEOMETRY_KEYS = ('childs', 'elements')

    def __init__(self, childs: Optional[List[SvgElement]] = None, **kwargs):
        super().__init__(**kwargs)
        self.childs: List[SvgElement] = list(childs or [])

    @classmethod
    def from_geometry(cls, data: Mapping[str, Any]) -> 'Group':
        # Children are materialized by the parser
        return cls()

    def add_child(self, element: SvgElement) -> None:
        self.childs.append(element)

    def points(self) -> List[Tuple[float, float]]:
        return [point for child in self.childs for point in child.points()]

    async def get_bbox(self) -> BoundingBox:
        """Union of the children's bounding boxes."""
        bbox = None
        for child in self.childs:
            child_bbox = await child.get_bbox()
            bbox = child_bbox if bbox is None else bbox.union(child_bbox)
        return bbox if bbox is not None else BoundingBox(0.0, 0.0, 0.0, 0.0)

    def geometry(self) -> Dict[str, Any]:
        return {}

    def geometry_attributes(self) -> Dict[str, str]:
        return {}

    def to_json(self, omit_transform: bool = False) -> Dict[str, Any]:
        data = super().to_json(omit_transform)
        data['childs'] = [child.to_json(omit_transform) for child in self.childs]
        return data

    def to_xml(self, omit_transform: bool = False) -> ET.Element:
        element = super().to_xml(omit_transform)
        for child in self.childs:
            element.append(child.to_xml(omit_transform))
        return element

    async def apply_matrix(self, matrix: Matrix) -> 'Group':
        """Push `matrix` down to every child; the group itself ends up untransformed."""
        childs = await apply_matrix_to_elements(self.childs, matrix)
        return self._carry_over(Group(childs))

    def find_by_type(self, type: str, recursive: bool = False) -> List[SvgElement]:
        return find_elements_by_type(self.childs, type, recursive)

    def find_by_id(self, id: str) -> Optional[SvgElement]:
        return find_element_by_id(self.childs, id)

    def clone(self) -> 'Group':
        return self._copy_common(Group([child.clone() for child in self.childs]))


ELEMENT_TYPES: Dict[str, Type[SvgElement]] = {
    cls.type: cls
    for cls in (Rect, Circle, Ellipse, Line, Polyline, Polygon, Path, Group)
}


def find_elements_by_type(elements: List[SvgElement], type: str,
                          recursive: bool = False) -> List[SvgElement]:
    """
    Collect elements whose type matches.

    Matches at the scanned level come first, in order; with `recursive`
    each group's own matches follow, in group order.
    """
    found = [element for element in elements if element.type == type]
    if recursive:
        for element in elements:
            if isinstance(element, Group):
                found.extend(element.find_by_type(type, recursive))
    return found


def find_element_by_id(elements: List[SvgElement], id: str) -> Optional[SvgElement]:
    """Depth-first search returning the first element with a matching id."""
    for element in elements:
        if element.id == id:
            return element
        if isinstance(element, Group):
            found = element.find_by_id(id)
            if found is not None:
                return found
    return None
