"""
Tests for path data parsing and normalization.
"""

import unittest

from svgdom.core.errors import SvgParseError
from svgdom.core.matrix import Matrix
from svgdom.core.path_data import (
    format_path_data, parse_path_data, path_points, transform_path
)


class TestParsePathData(unittest.TestCase):
    """Test normalization of path commands."""

    def test_empty(self):
        """Test missing or blank data gives no commands."""
        self.assertEqual(parse_path_data(None), [])
        self.assertEqual(parse_path_data("   "), [])

    def test_absolute_lines(self):
        """Test absolute moveto and lineto."""
        commands = parse_path_data("M10 10 L20 20")
        self.assertEqual([c.command for c in commands], ['M', 'L'])
        self.assertEqual(commands[1].points, [(20.0, 20.0)])

    def test_relative_and_shorthand_lines(self):
        """Test h, v and relative commands become absolute L."""
        commands = parse_path_data("m10,10 l5,0 h5 v5 z")
        self.assertEqual([c.command for c in commands], ['M', 'L', 'L', 'L', 'Z'])
        self.assertEqual(path_points(commands),
                         [(10.0, 10.0), (15.0, 10.0), (20.0, 10.0), (20.0, 15.0)])

    def test_implicit_lineto_after_moveto(self):
        """Test extra moveto pairs are treated as lineto."""
        commands = parse_path_data("M0 0 10 0 10 10")
        self.assertEqual([c.command for c in commands], ['M', 'L', 'L'])

    def test_relative_after_close_starts_at_subpath_start(self):
        """Test a relative command after Z starts from the subpath start."""
        commands = parse_path_data("M5 5 L10 5 Z l1 1")
        self.assertEqual(commands[-1].points, [(6.0, 6.0)])

    def test_smooth_cubic_reflects_control_point(self):
        """Test S reflects the previous cubic control point."""
        commands = parse_path_data("M0 0 C0 10 10 10 10 0 S20 -10 20 0")
        self.assertEqual([c.command for c in commands], ['M', 'C', 'C'])
        self.assertEqual(commands[2].points[0], (10.0, -10.0))

    def test_smooth_quadratic_reflects_control_point(self):
        """Test T reflects the previous quadratic control point."""
        commands = parse_path_data("M0 0 Q5 10 10 0 T20 0")
        self.assertEqual([c.command for c in commands], ['M', 'Q', 'Q'])
        self.assertEqual(commands[2].points[0], (15.0, -10.0))

    def test_smooth_cubic_without_previous_curve(self):
        """Test S after a line uses the current point as first control."""
        commands = parse_path_data("M0 0 L5 5 S10 10 20 0")
        self.assertEqual(commands[2].points[0], (5.0, 5.0))

    def test_arc_becomes_cubics(self):
        """Test a half circle arc becomes two cubics ending on the target."""
        commands = parse_path_data("M0 0 A5 5 0 0 1 10 0")
        self.assertEqual([c.command for c in commands], ['M', 'C', 'C'])
        self.assertEqual(commands[-1].points[-1], (10.0, 0.0))

    def test_arc_with_zero_radius_is_line(self):
        """Test a zero radius arc degrades to a line."""
        commands = parse_path_data("M0 0 A0 5 0 0 1 10 0")
        self.assertEqual([c.command for c in commands], ['M', 'L'])

    def test_compact_arc_flags(self):
        """Test arc flags packed against the following number."""
        compact = parse_path_data("M0 0 A5 5 0 0110 0")
        spaced = parse_path_data("M0 0 A5 5 0 0 1 10 0")
        self.assertEqual(format_path_data(compact), format_path_data(spaced))

        commands = parse_path_data("M0 0 a1 1 0 00.5.5")
        self.assertEqual(commands[-1].command, 'C')
        self.assertEqual(commands[-1].points[-1], (0.5, 0.5))

    def test_compact_arc_flags_repeated(self):
        """Test implicit arc repetition keeps reading flags as single digits."""
        commands = parse_path_data("M0 0 A5 5 0 0110 0 5 5 0 0120 0")
        self.assertEqual(commands[-1].points[-1], (20.0, 0.0))

    def test_invalid_arc_flag(self):
        """Test an arc flag other than 0 or 1 is rejected."""
        with self.assertRaises(SvgParseError):
            parse_path_data("M0 0 A5 5 0 2 1 10 0")

    def test_non_finite_number(self):
        """Test numbers overflowing to infinity are rejected."""
        with self.assertRaises(SvgParseError):
            parse_path_data("M0 0 L1e999 0")
        with self.assertRaises(SvgParseError):
            parse_path_data("M0 0 A1e400 5 0 0 1 10 0")

    def test_must_start_with_moveto(self):
        """Test data not starting with M is rejected."""
        with self.assertRaises(SvgParseError):
            parse_path_data("L10 10")
        with self.assertRaises(SvgParseError):
            parse_path_data("10 10")

    def test_unknown_command(self):
        """Test an unknown command letter is rejected."""
        with self.assertRaises(SvgParseError):
            parse_path_data("M0 0 X5 5")

    def test_missing_arguments(self):
        """Test commands with too few numbers are rejected."""
        with self.assertRaises(SvgParseError):
            parse_path_data("M0")
        with self.assertRaises(SvgParseError):
            parse_path_data("M0 0 C1 1 2 2")

    def test_unexpected_character(self):
        """Test stray punctuation is rejected."""
        with self.assertRaises(SvgParseError):
            parse_path_data("M0 0 L1;1")


class TestPathTransformAndFormat(unittest.TestCase):
    """Test transforming and formatting commands."""

    def test_transform_path(self):
        """Test every point is mapped and the source is left alone."""
        commands = parse_path_data("M0 0 Q5 10 10 0 Z")
        moved = transform_path(commands, Matrix.translate(1, 2))
        self.assertEqual(path_points(moved), [(1.0, 2.0), (6.0, 12.0), (11.0, 2.0)])
        self.assertEqual(path_points(commands), [(0.0, 0.0), (5.0, 10.0), (10.0, 0.0)])

    def test_format(self):
        """Test formatting normalized commands."""
        commands = parse_path_data("m0 0 l10 0 v5 z")
        self.assertEqual(format_path_data(commands), "M 0,0 L 10,0 L 10,5 Z")

    def test_format_reparses(self):
        """Test formatted data parses back to the same text."""
        commands = parse_path_data("M0 0 C1 2 3 4 5 6 Q7 8 9 10 Z")
        text = format_path_data(commands)
        self.assertEqual(format_path_data(parse_path_data(text)), text)


if __name__ == '__main__':
    unittest.main()
