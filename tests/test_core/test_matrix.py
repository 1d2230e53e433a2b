"""
Tests for affine matrix construction, composition and parsing.
"""

import math
import unittest

import numpy as np

from svgdom.core.errors import GeometryError, SvgParseError
from svgdom.core.matrix import Matrix, resolve_transform_origin
from svgdom.core.shapes import BoundingBox, Rect


def assert_point(test, actual, expected, places=7):
    test.assertAlmostEqual(actual[0], expected[0], places=places)
    test.assertAlmostEqual(actual[1], expected[1], places=places)


class TestMatrixConstruction(unittest.TestCase):
    """Test the Matrix factories."""

    def test_identity(self):
        """Test identity leaves points untouched."""
        m = Matrix.identity()
        self.assertTrue(m.is_identity())
        assert_point(self, m.apply_to_point(3, 4), (3, 4))

    def test_translate(self):
        """Test translation values and mapping."""
        m = Matrix.translate(10, 20)
        self.assertEqual(m.values, (1.0, 0.0, 0.0, 1.0, 10.0, 20.0))
        assert_point(self, m.apply_to_point(1, 1), (11, 21))

    def test_scale_uniform_default(self):
        """Test scale(sx) scales both axes."""
        m = Matrix.scale(3)
        assert_point(self, m.apply_to_point(1, 2), (3, 6))

    def test_rotate_about_center(self):
        """Test rotation about (5, 5) keeps the center fixed."""
        m = Matrix.rotate(90, 5, 5)
        assert_point(self, m.apply_to_point(5, 5), (5, 5))
        assert_point(self, m.apply_to_point(10, 5), (5, 10))

    def test_skew(self):
        """Test skewX and skewY by 45 degrees."""
        m = Matrix.skew_x(45)
        assert_point(self, m.apply_to_point(0, 10), (10, 10))
        m = Matrix.skew_y(45)
        assert_point(self, m.apply_to_point(10, 0), (10, 10))

    def test_from_array_roundtrip(self):
        """Test converting to a numpy array and back."""
        m = Matrix(1, 2, 3, 4, 5, 6)
        self.assertEqual(Matrix.from_array(m.to_array()), m)

    def test_from_array_bad_shape(self):
        """Test a 2x2 array is rejected."""
        with self.assertRaises(GeometryError):
            Matrix.from_array(np.zeros((2, 2)))

    def test_matrices_are_immutable(self):
        """Test fields cannot be assigned."""
        m = Matrix.translate(1, 2)
        with self.assertRaises(AttributeError):
            m.e = 5


class TestMatrixComposition(unittest.TestCase):
    """Test add(), compose() and inverse()."""

    def test_add_applies_argument_first(self):
        """Test a.add(b) applies b first, then a."""
        rotate = Matrix.rotate(90)
        translate = Matrix.translate(10, 0)

        assert_point(self, rotate.add(translate).apply_to_point(0, 0), (0, 10))
        assert_point(self, translate.add(rotate).apply_to_point(0, 0), (10, 0))

    def test_add_is_not_commutative(self):
        """Test swapping rotation and translation changes the result."""
        rotate = Matrix.rotate(30)
        translate = Matrix.translate(5, 7)
        self.assertFalse(rotate.add(translate).almost_equals(translate.add(rotate)))

    def test_add_returns_new_value(self):
        """Test add() leaves both operands unchanged."""
        base = Matrix.translate(1, 1)
        composed = base.add(Matrix.scale(2))
        self.assertEqual(base, Matrix.translate(1, 1))
        self.assertIsNot(base, composed)

    def test_compose_empty_is_identity(self):
        """Test composing nothing gives the identity."""
        self.assertTrue(Matrix.compose([]).is_identity())

    def test_compose_left_to_right(self):
        """Test compose([m1, m2]) equals m1.add(m2)."""
        m1 = Matrix.rotate(45)
        m2 = Matrix.translate(3, 4)
        self.assertTrue(Matrix.compose([m1, m2]).almost_equals(m1.add(m2)))

    def test_clone_equal(self):
        """Test clone() returns an equal matrix."""
        m = Matrix(1, 2, 3, 4, 5, 6)
        self.assertEqual(m.clone(), m)

    def test_inverse(self):
        """Test a matrix times its inverse is the identity."""
        m = Matrix.compose([Matrix.translate(4, -2), Matrix.rotate(33), Matrix.scale(2, 3)])
        self.assertTrue(m.add(m.inverse()).is_identity(1e-9))

    def test_inverse_singular(self):
        """Test inverting a singular matrix fails."""
        with self.assertRaises(GeometryError):
            Matrix.scale(0, 1).inverse()

    def test_apply_to_points(self):
        """Test vectorized point mapping."""
        m = Matrix.translate(1, 2)
        self.assertEqual(m.apply_to_points([(0, 0), (1, 1)]), [(1.0, 2.0), (2.0, 3.0)])
        self.assertEqual(m.apply_to_points([]), [])

    def test_axis_aligned(self):
        """Test scale is axis aligned while rotation and skew are not."""
        self.assertTrue(Matrix.scale(2, -3).is_axis_aligned())
        self.assertFalse(Matrix.rotate(10).is_axis_aligned())
        self.assertFalse(Matrix.skew_x(10).is_axis_aligned())


class TestMatrixParse(unittest.TestCase):
    """Test parsing SVG transform lists."""

    def test_empty(self):
        """Test empty transforms parse to the identity."""
        self.assertTrue(Matrix.parse(None).is_identity())
        self.assertTrue(Matrix.parse("  ").is_identity())

    def test_single_functions(self):
        """Test each transform function on its own."""
        self.assertEqual(Matrix.parse("translate(10, 20)"), Matrix.translate(10, 20))
        self.assertEqual(Matrix.parse("translate(10)"), Matrix.translate(10, 0))
        self.assertEqual(Matrix.parse("scale(2 3)"), Matrix.scale(2, 3))
        self.assertEqual(Matrix.parse("matrix(1,2,3,4,5,6)"), Matrix(1, 2, 3, 4, 5, 6))
        self.assertTrue(Matrix.parse("rotate(90, 5, 5)").almost_equals(Matrix.rotate(90, 5, 5)))

    def test_list_composes_left_to_right(self):
        """Test the right-most transform is applied first."""
        m = Matrix.parse("translate(10,0) scale(2)")
        assert_point(self, m.apply_to_point(1, 1), (12, 2))

    def test_comma_separated_list_and_exponent(self):
        """Test comma separators and scientific notation."""
        m = Matrix.parse("translate(1e1, -2.5E0), scale(.5)")
        assert_point(self, m.apply_to_point(2, 2), (11, -1.5))

    def test_unknown_function(self):
        """Test an unknown function name is rejected."""
        with self.assertRaises(SvgParseError):
            Matrix.parse("spin(45)")

    def test_bad_arguments(self):
        """Test non-numeric and wrong-arity arguments are rejected."""
        with self.assertRaises(SvgParseError):
            Matrix.parse("translate(a, b)")
        with self.assertRaises(SvgParseError):
            Matrix.parse("rotate(1, 2)")
        with self.assertRaises(SvgParseError):
            Matrix.parse("matrix(1, 2, 3)")

    def test_non_finite_arguments(self):
        """Test arguments overflowing to infinity are rejected."""
        with self.assertRaises(SvgParseError):
            Matrix.parse("rotate(1e999)")
        with self.assertRaises(SvgParseError):
            Matrix.parse("translate(10, -1e400)")
        with self.assertRaises(SvgParseError):
            Matrix.parse("matrix(1, 0, 0, 1e999, 0, 0)")

    def test_trailing_garbage(self):
        """Test text after the last function is rejected."""
        with self.assertRaises(SvgParseError):
            Matrix.parse("translate(1) junk")

    def test_to_string_roundtrip(self):
        """Test to_string() output parses back to the same matrix."""
        m = Matrix.compose([Matrix.rotate(30), Matrix.translate(2.5, -1)])
        self.assertTrue(Matrix.parse(m.to_string()).almost_equals(m))

    def test_to_string_compact(self):
        """Test compact number formatting without negative zero."""
        self.assertEqual(Matrix.translate(10, 20).to_string(), "matrix(1,0,0,1,10,20)")
        self.assertEqual(str(Matrix.scale(-0.0, 1)), "matrix(0,0,0,1,0,0)")


class TestFromElement(unittest.TestCase):
    """Test deriving the element matrix from its bounding box."""

    def test_no_transform_is_identity(self):
        """Test an element without a transform contributes the identity."""
        rect = Rect(0, 0, 10, 10)
        self.assertTrue(Matrix.from_element(BoundingBox(0, 0, 10, 10), rect).is_identity())

    def test_plain_transform(self):
        """Test a transform without origin is used as is."""
        rect = Rect(0, 0, 10, 10, transform=Matrix.rotate(90))
        m = Matrix.from_element(BoundingBox(0, 0, 10, 10), rect)
        self.assertTrue(m.almost_equals(Matrix.rotate(90)))

    def test_center_origin_uses_bbox(self):
        """Test rotate(90) about the bbox center maps (0, 0) to (10, 0)."""
        rect = Rect(0, 0, 10, 10, transform=Matrix.rotate(90), transform_origin='center')
        m = Matrix.from_element(BoundingBox(0, 0, 10, 10), rect)
        assert_point(self, m.apply_to_point(0, 0), (10, 0))
        assert_point(self, m.apply_to_point(5, 5), (5, 5))

    def test_resolve_transform_origin(self):
        """Test keywords, percentages and lengths resolve against the bbox."""
        bbox = BoundingBox(10, 20, 30, 60)
        self.assertEqual(resolve_transform_origin('top left', bbox), (10, 20))
        self.assertEqual(resolve_transform_origin('left top', bbox), (10, 20))
        self.assertEqual(resolve_transform_origin('50% 100%', bbox), (20, 60))
        self.assertEqual(resolve_transform_origin('right', bbox), (30, 40))
        self.assertEqual(resolve_transform_origin('bottom', bbox), (20, 60))
        self.assertEqual(resolve_transform_origin('5px 7', bbox), (5, 7))

    def test_resolve_transform_origin_invalid(self):
        """Test malformed origins are rejected."""
        bbox = BoundingBox(0, 0, 1, 1)
        with self.assertRaises(SvgParseError):
            resolve_transform_origin('', bbox)
        with self.assertRaises(SvgParseError):
            resolve_transform_origin('left right', bbox)
        with self.assertRaises(SvgParseError):
            resolve_transform_origin('abc%', bbox)

    def test_rotation_angle_math(self):
        """Test rotate() stores cos and sin of the angle."""
        m = Matrix.rotate(30)
        self.assertAlmostEqual(m.a, math.cos(math.radians(30)))
        self.assertAlmostEqual(m.b, math.sin(math.radians(30)))


if __name__ == '__main__':
    unittest.main()
