"""
svgdom Affine Matrix

2D affine transforms in SVG order. A Matrix(a, b, c, d, e, f) stands for

    | a  c  e |
    | b  d  f |
    | 0  0  1 |

and maps (x, y) to (a*x + c*y + e, b*x + d*y + f).

Matrices are immutable values: every operation returns a new Matrix.
"""

import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from .errors import GeometryError, SvgParseError
from .units import NUMBER_RE, format_number, parse_length, split_values

if TYPE_CHECKING:
    from .shapes import BoundingBox, SvgElement


_TRANSFORM_RE = re.compile(r'\s*([A-Za-z]+)\s*\(([^)]*)\)\s*,?')

# Number of arguments each transform function accepts
_TRANSFORM_ARITY = {
    'matrix': (6,),
    'translate': (1, 2),
    'scale': (1, 2),
    'rotate': (1, 3),
    'skewX': (1,),
    'skewY': (1,),
}

_ORIGIN_KEYWORDS = {
    'left': ('x', 0.0),
    'right': ('x', 1.0),
    'top': ('y', 0.0),
    'bottom': ('y', 1.0),
    'center': (None, 0.5),
}


@dataclass(frozen=True)
class Matrix:
    """An immutable 2D affine transform."""
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    # Construction

    @classmethod
    def identity(cls) -> 'Matrix':
        return cls()

    @classmethod
    def translate(cls, tx: float, ty: float = 0.0) -> 'Matrix':
        return cls(1.0, 0.0, 0.0, 1.0, float(tx), float(ty))

    @classmethod
    def scale(cls, sx: float, sy: Optional[float] = None) -> 'Matrix':
        if sy is None:
            sy = sx
        return cls(float(sx), 0.0, 0.0, float(sy), 0.0, 0.0)

    @classmethod
    def rotate(cls, angle: float, cx: float = 0.0, cy: float = 0.0) -> 'Matrix':
        """Rotation by angle degrees, optionally about (cx, cy)."""
        rad = math.radians(angle)
        cos_a = math.cos(rad)
        sin_a = math.sin(rad)
        rotation = cls(cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0)
        if cx == 0 and cy == 0:
            return rotation
        return cls.compose([cls.translate(cx, cy), rotation, cls.translate(-cx, -cy)])

    @classmethod
    def skew_x(cls, angle: float) -> 'Matrix':
        return cls(1.0, 0.0, math.tan(math.radians(angle)), 1.0, 0.0, 0.0)

    @classmethod
    def skew_y(cls, angle: float) -> 'Matrix':
        return cls(1.0, math.tan(math.radians(angle)), 0.0, 1.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, array) -> 'Matrix':
        """Build a Matrix from a 3x3 (or 2x3) array."""
        arr = np.asarray(array, dtype=float)
        if arr.shape not in ((3, 3), (2, 3)):
            raise GeometryError(f"Expected a 3x3 affine matrix, got shape {arr.shape}")
        return cls(float(arr[0, 0]), float(arr[1, 0]),
                   float(arr[0, 1]), float(arr[1, 1]),
                   float(arr[0, 2]), float(arr[1, 2]))

    @classmethod
    def compose(cls, matrices: Iterable['Matrix']) -> 'Matrix':
        """Left-to-right product of a sequence of matrices."""
        result = cls.identity()
        for matrix in matrices:
            result = result.add(matrix)
        return result

    @classmethod
    def parse(cls, transform: Optional[str]) -> 'Matrix':
        """
        Parse an SVG transform list such as "translate(10, 20) rotate(45)".

        The functions compose left to right, so the right-most one is
        applied to the geometry first.

        Raises:
            SvgParseError: on unknown functions, bad argument lists or
                arguments that overflow to infinity
        """
        if transform is None or not transform.strip():
            return cls.identity()

        matrices: List[Matrix] = []
        pos = 0
        while pos < len(transform):
            match = _TRANSFORM_RE.match(transform, pos)
            if not match:
                if transform[pos:].strip():
                    raise SvgParseError(f"Invalid transform: {transform!r}")
                break
            pos = match.end()

            func, raw_args = match.group(1), match.group(2)
            if func not in _TRANSFORM_ARITY:
                raise SvgParseError(f"Unknown transform function {func!r} in {transform!r}")

            args = [float(v) for v in NUMBER_RE.findall(raw_args)]
            leftover = NUMBER_RE.sub('', raw_args).replace(',', '').strip()
            if leftover or len(args) not in _TRANSFORM_ARITY[func]:
                raise SvgParseError(f"Invalid arguments for {func}(): {raw_args!r}")
            if not all(math.isfinite(v) for v in args):
                raise SvgParseError(f"Non-finite argument for {func}(): {raw_args!r}")

            if func == 'matrix':
                matrices.append(cls(*args))
            elif func == 'translate':
                matrices.append(cls.translate(args[0], args[1] if len(args) > 1 else 0.0))
            elif func == 'scale':
                matrices.append(cls.scale(args[0], args[1] if len(args) > 1 else None))
            elif func == 'rotate':
                if len(args) == 3:
                    matrices.append(cls.rotate(args[0], args[1], args[2]))
                else:
                    matrices.append(cls.rotate(args[0]))
            elif func == 'skewX':
                matrices.append(cls.skew_x(args[0]))
            elif func == 'skewY':
                matrices.append(cls.skew_y(args[0]))

        return cls.compose(matrices)

    @classmethod
    def from_element(cls, bbox: 'BoundingBox', element: 'SvgElement') -> 'Matrix':
        """
        Derive the matrix an element contributes on top of a base matrix.

        This is the element's pending transform, taken about its
        transform-origin. Percentages and keywords in transform-origin are
        resolved against the element's bounding box; plain lengths are user
        space coordinates. Without a pending transform the identity is
        returned.
        """
        transform = element.transform
        if transform is None:
            return cls.identity()

        origin = element.transform_origin
        if not origin:
            return transform

        ox, oy = resolve_transform_origin(origin, bbox)
        if ox == 0 and oy == 0:
            return transform
        return cls.compose([cls.translate(ox, oy), transform, cls.translate(-ox, -oy)])

    # Operations

    def to_array(self) -> np.ndarray:
        return np.array([
            [self.a, self.c, self.e],
            [self.b, self.d, self.f],
            [0.0, 0.0, 1.0],
        ])

    def add(self, other: 'Matrix') -> 'Matrix':
        """Return self x other: `other` is applied first, then `self`."""
        return Matrix.from_array(self.to_array() @ other.to_array())

    def clone(self) -> 'Matrix':
        return Matrix(self.a, self.b, self.c, self.d, self.e, self.f)

    def inverse(self) -> 'Matrix':
        det = self.determinant
        if abs(det) < 1e-12:
            raise GeometryError(f"Matrix is singular and cannot be inverted: {self.to_string()}")
        return Matrix.from_array(np.linalg.inv(self.to_array()))

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    def apply_to_point(self, x: float, y: float) -> Tuple[float, float]:
        return (self.a * x + self.c * y + self.e,
                self.b * x + self.d * y + self.f)

    def apply_to_points(self, points: Sequence[Sequence[float]]) -> List[Tuple[float, float]]:
        """Transform a sequence of (x, y) pairs."""
        if len(points) == 0:
            return []
        arr = np.asarray(points, dtype=float).reshape(-1, 2)
        linear = np.array([[self.a, self.c], [self.b, self.d]])
        result = arr @ linear.T + np.array([self.e, self.f])
        return [(float(x), float(y)) for x, y in result]

    def is_identity(self, tol: float = 1e-12) -> bool:
        return self.almost_equals(Matrix.identity(), tol)

    def is_axis_aligned(self, tol: float = 1e-12) -> bool:
        """True when the matrix has no rotation or skew component."""
        return abs(self.b) <= tol and abs(self.c) <= tol

    def almost_equals(self, other: 'Matrix', tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.values, other.values, rtol=0.0, atol=tol))

    @property
    def values(self) -> Tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    def to_string(self) -> str:
        return 'matrix(' + ','.join(format_number(v) for v in self.values) + ')'

    def __str__(self) -> str:
        return self.to_string()


def resolve_transform_origin(origin: str, bbox: 'BoundingBox') -> Tuple[float, float]:
    """
    Resolve a transform-origin value ("center", "50% 0", "10 20", "top left")
    to user space coordinates.
    """
    parts = split_values(origin)[:2]
    if not parts:
        raise SvgParseError(f"Invalid transform-origin: {origin!r}")

    # A single value leaves the other axis centered
    if len(parts) == 1:
        keyword = _ORIGIN_KEYWORDS.get(parts[0])
        if keyword is not None and keyword[0] == 'y':
            parts = ['center', parts[0]]
        else:
            parts = [parts[0], 'center']

    x_part, y_part = parts
    # "top left" style pairs name the vertical axis first
    if (_ORIGIN_KEYWORDS.get(x_part, ('',))[0] == 'y'
            or _ORIGIN_KEYWORDS.get(y_part, ('',))[0] == 'x'):
        x_part, y_part = y_part, x_part

    return (_resolve_origin_part(x_part, 'x', bbox.min_x, bbox.width, origin),
            _resolve_origin_part(y_part, 'y', bbox.min_y, bbox.height, origin))


def _resolve_origin_part(part: str, axis: str, start: float, size: float,
                         origin: str) -> float:
    keyword = _ORIGIN_KEYWORDS.get(part)
    if keyword is not None:
        if keyword[0] not in (None, axis):
            raise SvgParseError(f"Invalid transform-origin: {origin!r}")
        return start + size * keyword[1]
    if part.endswith('%'):
        try:
            return start + size * float(part[:-1]) / 100.0
        except ValueError as e:
            raise SvgParseError(f"Invalid transform-origin: {origin!r}", e) from e
    return parse_length(part, 'transform-origin')
