"""
Number and length helpers shared by the parser and the serializers.
"""

import re
from typing import List, Optional, Tuple

from .errors import SvgParseError

NUMBER_PATTERN = r'[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?'
NUMBER_RE = re.compile(NUMBER_PATTERN)

# User units (CSS px) per unit: 96 px per inch, em against a 16px font
LENGTH_UNITS = {
    'px': 1.0,
    'pt': 96.0 / 72.0,
    'pc': 16.0,
    'mm': 96.0 / 25.4,
    'cm': 96.0 / 2.54,
    'in': 96.0,
    'em': 16.0,
}


def parse_number(value, name: str = "value") -> float:
    """Parse a plain number, raising SvgParseError on garbage."""
    if isinstance(value, bool):
        raise SvgParseError(f"Invalid number for {name}: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError as e:
        raise SvgParseError(f"Invalid number for {name}: {value!r}", e) from e


def parse_length(value, name: str = "length", default: float = 0.0) -> float:
    """
    Parse an SVG length into user units.

    Absolute units are converted to px ("1in" -> 96). Percentages need
    a viewport, which elements do not carry, so they raise SvgParseError.
    """
    if value is None:
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    text = str(value).strip()
    if not text:
        return default

    factor = 1.0
    for unit, unit_factor in LENGTH_UNITS.items():
        if text.endswith(unit):
            text = text[:-len(unit)].strip()
            factor = unit_factor
            break

    if text.endswith('%'):
        raise SvgParseError(f"Percentage lengths are not supported for {name}: {value!r}")

    return parse_number(text, name) * factor


def parse_points(value, name: str = "points") -> List[Tuple[float, float]]:
    """Parse a points attribute ("x1,y1 x2,y2 ...") or a JSON list of pairs."""
    if value is None:
        return []

    if isinstance(value, (list, tuple)):
        points = []
        for item in value:
            if isinstance(item, dict):
                points.append((parse_number(item.get('x'), name),
                               parse_number(item.get('y'), name)))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                points.append((parse_number(item[0], name),
                               parse_number(item[1], name)))
            else:
                raise SvgParseError(f"Invalid point in {name}: {item!r}")
        return points

    text = str(value)
    numbers = NUMBER_RE.findall(text)
    leftover = NUMBER_RE.sub('', text).replace(',', '').strip()
    if leftover:
        raise SvgParseError(f"Invalid {name} data: {value!r}")
    if len(numbers) % 2:
        raise SvgParseError(f"Odd number of coordinates in {name}: {value!r}")

    return [(float(numbers[i]), float(numbers[i + 1]))
            for i in range(0, len(numbers), 2)]


def format_number(value: float, precision: int = 10) -> str:
    """Compact float formatting for attributes ("10" rather than "10.0")."""
    text = f"{value:.{precision}g}"
    if text in ('-0', '-0.0'):
        return '0'
    return text


def format_points(points) -> str:
    return ' '.join(f"{format_number(p.x)},{format_number(p.y)}" for p in points)


def split_values(value: Optional[str]) -> List[str]:
    """Split a comma and/or whitespace separated attribute value."""
    if not value:
        return []
    return [v for v in re.split(r'[\s,]+', value.strip()) if v]
