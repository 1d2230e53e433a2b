"""
svgdom Path Data

Parses the `d` attribute of <path> elements into a normalized list of
absolute commands:

- M x,y        move to
- L x,y        line to (H, V and relative forms are folded in)
- C c1 c2 p    cubic bezier (S is expanded by reflecting the control point,
               A is converted to cubic segments)
- Q c p        quadratic bezier (T is expanded like S)
- Z            close path

Only control points are handled here; nothing evaluates the curves.
"""

import math
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .errors import SvgParseError
from .matrix import Matrix
from .units import NUMBER_RE, format_number

Coord = Tuple[float, float]

_SEPARATOR_RE = re.compile(r'[\s,]*')

_ARITY = {
    'M': 2, 'L': 2, 'H': 1, 'V': 1,
    'C': 6, 'S': 4, 'Q': 4, 'T': 2,
    'A': 7, 'Z': 0,
}

# Argument slots of an arc holding the single-character large-arc and sweep flags
_ARC_FLAG_SLOTS = (3, 4)


@dataclass
class PathCommand:
    """One normalized, absolute path command."""
    command: str
    points: List[Coord] = field(default_factory=list)

    def clone(self) -> 'PathCommand':
        return PathCommand(self.command, list(self.points))


def _tokenize(d: str) -> List[Union[str, float]]:
    """
    Split path data into command letters and numbers.

    Arc flags are read as single characters, so compact data such as
    "A5 5 0 0110 0" yields the flags 0 and 1 followed by 10 and 0.
    """
    tokens: List[Union[str, float]] = []
    command = None
    arg_index = 0
    pos = _SEPARATOR_RE.match(d).end()

    while pos < len(d):
        char = d[pos]
        if char.isalpha():
            if char.upper() not in _ARITY:
                raise SvgParseError(f"Unknown path command {char!r} in {d!r}")
            tokens.append(char)
            command = char.upper()
            arg_index = 0
            pos += 1
        elif command == 'A' and arg_index % 7 in _ARC_FLAG_SLOTS:
            if char not in '01':
                raise SvgParseError(f"Invalid arc flag {char!r} in path data {d!r}")
            tokens.append(float(char))
            arg_index += 1
            pos += 1
        else:
            match = NUMBER_RE.match(d, pos)
            if match is None:
                raise SvgParseError(f"Unexpected character {char!r} in path data {d!r}")
            value = float(match.group())
            if not math.isfinite(value):
                raise SvgParseError(f"Non-finite number {match.group()!r} in path data {d!r}")
            tokens.append(value)
            arg_index += 1
            pos = match.end()

        pos = _SEPARATOR_RE.match(d, pos).end()
    return tokens


def parse_path_data(d: Optional[str]) -> List[PathCommand]:
    """
    Parse SVG path data into absolute M/L/C/Q/Z commands.

    Raises:
        SvgParseError: if the data is malformed
    """
    if d is None or not d.strip():
        return []

    tokens = _tokenize(d)
    if not tokens:
        return []
    if not isinstance(tokens[0], str) or tokens[0].upper() != 'M':
        raise SvgParseError(f"Path data must start with a moveto: {d!r}")

    commands: List[PathCommand] = []
    current_x, current_y = 0.0, 0.0
    start_x, start_y = 0.0, 0.0
    last_command: Optional[str] = None
    last_control: Optional[Coord] = None
    i = 0

    while i < len(tokens):
        token = tokens[i]
        if isinstance(token, str):
            command = token
            i += 1
        else:
            # Implicit repetition of the previous command
            if last_command is None or last_command.upper() == 'Z':
                raise SvgParseError(f"Coordinates without a command in path data {d!r}")
            command = last_command
            if command == 'M':
                command = 'L'
            elif command == 'm':
                command = 'l'

        cmd_upper = command.upper()
        is_relative = command.islower()
        arity = _ARITY[cmd_upper]
        args = tokens[i:i + arity]
        if len(args) < arity or any(isinstance(a, str) for a in args):
            raise SvgParseError(f"Missing arguments for {command!r} in path data {d!r}")
        i += arity

        previous = last_command.upper() if last_command else None
        last_command = command

        if cmd_upper == 'Z':
            commands.append(PathCommand('Z'))
            current_x, current_y = start_x, start_y
            last_control = None
            continue

        dx, dy = (current_x, current_y) if is_relative else (0.0, 0.0)

        if cmd_upper == 'M':
            x, y = args[0] + dx, args[1] + dy
            commands.append(PathCommand('M', [(x, y)]))
            start_x, start_y = x, y
            current_x, current_y = x, y
            last_control = None

        elif cmd_upper in ('L', 'H', 'V'):
            if cmd_upper == 'L':
                x, y = args[0] + dx, args[1] + dy
            elif cmd_upper == 'H':
                x, y = args[0] + dx, current_y
            else:
                x, y = current_x, args[0] + dy
            commands.append(PathCommand('L', [(x, y)]))
            current_x, current_y = x, y
            last_control = None

        elif cmd_upper == 'C':
            c1 = (args[0] + dx, args[1] + dy)
            c2 = (args[2] + dx, args[3] + dy)
            end = (args[4] + dx, args[5] + dy)
            commands.append(PathCommand('C', [c1, c2, end]))
            current_x, current_y = end
            last_control = c2

        elif cmd_upper == 'S':
            if last_control is not None and previous in ('C', 'S'):
                c1 = (2 * current_x - last_control[0], 2 * current_y - last_control[1])
            else:
                c1 = (current_x, current_y)
            c2 = (args[0] + dx, args[1] + dy)
            end = (args[2] + dx, args[3] + dy)
            commands.append(PathCommand('C', [c1, c2, end]))
            current_x, current_y = end
            last_control = c2

        elif cmd_upper == 'Q':
            control = (args[0] + dx, args[1] + dy)
            end = (args[2] + dx, args[3] + dy)
            commands.append(PathCommand('Q', [control, end]))
            current_x, current_y = end
            last_control = control

        elif cmd_upper == 'T':
            if last_control is not None and previous in ('Q', 'T'):
                control = (2 * current_x - last_control[0], 2 * current_y - last_control[1])
            else:
                control = (current_x, current_y)
            end = (args[0] + dx, args[1] + dy)
            commands.append(PathCommand('Q', [control, end]))
            current_x, current_y = end
            last_control = control

        elif cmd_upper == 'A':
            rx, ry, phi, large_arc, sweep = args[0], args[1], args[2], args[3], args[4]
            x, y = args[5] + dx, args[6] + dy
            last_control = None
            if abs(x - current_x) < 1e-12 and abs(y - current_y) < 1e-12:
                continue
            if rx == 0 or ry == 0:
                commands.append(PathCommand('L', [(x, y)]))
            else:
                for c1, c2, end in arc_to_bezier(current_x, current_y, abs(rx), abs(ry), phi,
                                                 int(large_arc != 0), int(sweep != 0), x, y):
                    commands.append(PathCommand('C', [c1, c2, end]))
            current_x, current_y = x, y

    return commands


def arc_to_bezier(x1: float, y1: float, rx: float, ry: float,
                  phi: float, large_arc: int, sweep: int,
                  x2: float, y2: float) -> List[Tuple[Coord, Coord, Coord]]:
    """Convert an SVG elliptical arc to cubic bezier segments (W3C endpoint form)."""
    phi_rad = math.radians(phi)
    cos_phi = math.cos(phi_rad)
    sin_phi = math.sin(phi_rad)

    # Step 1: compute (x1', y1')
    dx = (x1 - x2) / 2
    dy = (y1 - y2) / 2
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    # Scale radii up when they cannot span the endpoints
    lambda_ = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lambda_ > 1:
        rx *= math.sqrt(lambda_)
        ry *= math.sqrt(lambda_)

    # Step 2: compute (cx', cy')
    denominator = (rx * rx * y1p * y1p) + (ry * ry * x1p * x1p)
    sq = 0.0
    if denominator:
        sq = max(0.0, ((rx * rx * ry * ry) - (rx * rx * y1p * y1p) - (ry * ry * x1p * x1p))
                 / denominator)
    coef = math.sqrt(sq)
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    # Step 3: compute (cx, cy)
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    # Step 4: compute theta1 and dtheta
    def angle(ux, uy, vx, vy):
        n = math.sqrt(ux * ux + uy * uy) * math.sqrt(vx * vx + vy * vy)
        if n == 0:
            return 0.0
        c = (ux * vx + uy * vy) / n
        s = ux * vy - uy * vx
        return math.atan2(s, max(-1.0, min(1.0, c)))

    theta1 = angle(1, 0, (x1p - cxp) / rx, (y1p - cyp) / ry)
    dtheta = angle((x1p - cxp) / rx, (y1p - cyp) / ry,
                   (-x1p - cxp) / rx, (-y1p - cyp) / ry)

    if sweep == 0 and dtheta > 0:
        dtheta -= 2 * math.pi
    elif sweep == 1 and dtheta < 0:
        dtheta += 2 * math.pi

    # Split into segments of at most 90 degrees
    segments = max(1, int(math.ceil(abs(dtheta) / (math.pi / 2) - 1e-9)))
    delta = dtheta / segments
    alpha = math.sin(delta) * (math.sqrt(4 + 3 * math.tan(delta / 2) ** 2) - 1) / 3

    def to_user(px: float, py: float) -> Coord:
        x = px * rx
        y = py * ry
        return (cos_phi * x - sin_phi * y + cx,
                sin_phi * x + cos_phi * y + cy)

    curves = []
    for i in range(segments):
        t1 = theta1 + i * delta
        t2 = theta1 + (i + 1) * delta
        cos1, sin1 = math.cos(t1), math.sin(t1)
        cos2, sin2 = math.cos(t2), math.sin(t2)
        c1 = to_user(cos1 - alpha * sin1, sin1 + alpha * cos1)
        c2 = to_user(cos2 + alpha * sin2, sin2 - alpha * cos2)
        end = to_user(cos2, sin2)
        curves.append((c1, c2, end))

    # Land exactly on the requested endpoint
    if curves:
        c1, c2, _ = curves[-1]
        curves[-1] = (c1, c2, (x2, y2))
    return curves


def transform_path(commands: List[PathCommand], matrix: Matrix) -> List[PathCommand]:
    """Return new commands with every point mapped through `matrix`."""
    return [PathCommand(cmd.command, matrix.apply_to_points(cmd.points))
            for cmd in commands]


def path_points(commands: List[PathCommand]) -> List[Coord]:
    """All end and control points of the commands, in order."""
    return [point for cmd in commands for point in cmd.points]


def format_path_data(commands: List[PathCommand]) -> str:
    parts = []
    for cmd in commands:
        if not cmd.points:
            parts.append(cmd.command)
            continue
        coords = ' '.join(f"{format_number(x)},{format_number(y)}" for x, y in cmd.points)
        parts.append(f"{cmd.command} {coords}")
    return ' '.join(parts)
