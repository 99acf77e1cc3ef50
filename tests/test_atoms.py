"""Tests for the atom library (numpy implementations and GLSL sources).

Tests verify:
- Correct sign (negative inside, positive outside, zero on surface)
- Exact or near-exact distance at analytically known points
- Array shape / broadcasting consistency
"""

import re

import numpy as np
import numpy.testing as npt
import pytest

from scene2glsl import _common
from scene2glsl import atoms


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _p(*xy) -> np.ndarray:
    """Single 2-D point as shape ``(1, 2)``."""
    return np.array([list(xy)], dtype=float)


def _grid(n: int = 8) -> np.ndarray:
    """Uniform ``n²`` grid of 2-D points in ``[-1, 1]²`` (shape ``(n, n, 2)``)."""
    lin = np.linspace(-1.0, 1.0, n)
    Y, X = np.meshgrid(lin, lin, indexing="ij")
    return np.stack([X, Y], axis=-1)


# ===========================================================================
# Shared helpers
# ===========================================================================

class TestVecHelpers:
    def test_vec2_shape(self):
        v = _common.vec2(np.array([1.0, 2.0]), np.array([3.0, 4.0]))
        assert v.shape == (2, 2)

    def test_vec2_broadcasts_scalar(self):
        v = _common.vec2(np.zeros(3), 1.0)
        npt.assert_allclose(v[:, 1], [1.0, 1.0, 1.0])

    def test_length_single(self):
        npt.assert_allclose(_common.length(np.array([[3.0, 4.0]])), [5.0])

    def test_dot2_is_length_squared(self):
        npt.assert_allclose(_common.dot2(np.array([[3.0, 4.0]])), [25.0])

    def test_clamp(self):
        x = np.array([-2.0, 0.5, 3.0])
        npt.assert_allclose(_common.clamp(x, 0.0, 1.0), [0.0, 0.5, 1.0])

    def test_safe_div_no_nan(self):
        result = _common.safe_div(np.array([1.0]), np.array([0.0]))
        assert np.isfinite(result).all()


# ===========================================================================
# Atoms
# ===========================================================================

class TestCircle:
    R = 0.3

    def test_inside_at_origin(self):
        npt.assert_allclose(atoms.circle(_p(0.0, 0.0), self.R), [-self.R], atol=1e-10)

    def test_on_surface(self):
        npt.assert_allclose(atoms.circle(_p(0.0, self.R), self.R), [0.0], atol=1e-10)

    def test_outside(self):
        npt.assert_allclose(atoms.circle(_p(0.5, 0.0), self.R), [0.2], atol=1e-10)


class TestBoxes:
    B = np.array([0.5, 0.2])

    def test_plain_box_inside(self):
        npt.assert_allclose(atoms.plainBox(_p(0.0, 0.0), self.B), [-0.2], atol=1e-10)

    def test_plain_box_face(self):
        npt.assert_allclose(atoms.plainBox(_p(1.0, 0.0), self.B), [0.5], atol=1e-10)

    def test_plain_box_corner(self):
        # outside the corner the distance is to the hairline-rounded corner
        npt.assert_allclose(atoms.plainBox(_p(0.8, 0.6), self.B), [0.504], atol=1e-3)

    def test_box_atom_surface_at_face(self):
        r = np.full(4, 0.1)
        npt.assert_allclose(atoms.boxAtom(_p(0.5, 0.0), np.array([0.5, 0.5]), r), [0.0], atol=1e-10)

    def test_box_atom_radius_per_quadrant(self):
        b = np.array([0.5, 0.5])
        r = np.array([0.2, 0.05, 0.05, 0.05])
        top_right = atoms.boxAtom(_p(0.6, 0.6), b, r)[0]
        bottom_left = atoms.boxAtom(_p(-0.6, -0.6), b, r)[0]
        assert top_right > bottom_left


class TestCurvedAtoms:
    def test_heart_sign(self):
        assert atoms.heart(_p(0.0, 0.5))[0] < 0
        assert atoms.heart(_p(0.0, 2.0))[0] > 0

    def test_heart_symmetric(self):
        npt.assert_allclose(atoms.heart(_p(0.3, 0.4)), atoms.heart(_p(-0.3, 0.4)), atol=1e-12)

    def test_moon_inside_and_cut_out(self):
        npt.assert_allclose(atoms.moon(_p(-0.4, 0.0), 0.3, 0.5, 0.4), [-0.1], atol=1e-10)
        npt.assert_allclose(atoms.moon(_p(0.3, 0.0), 0.3, 0.5, 0.4), [0.4], atol=1e-10)

    def test_ellipse_centre(self):
        npt.assert_allclose(atoms.ellipse(_p(0.0, 0.0), np.array([0.5, 0.3])), [-0.3], atol=1e-10)

    def test_ellipse_on_major_axis(self):
        npt.assert_allclose(atoms.ellipse(_p(1.0, 0.0), np.array([0.5, 0.3])), [0.5], atol=1e-10)

    def test_cool_s_centre(self):
        npt.assert_allclose(atoms.coolS(_p(0.0, 0.0)), [-np.sqrt(0.02)], atol=1e-10)


class TestPolygonalAtoms:
    def test_star_centre(self):
        npt.assert_allclose(atoms.star(_p(0.0, 0.0), 0.5, 0.4), [-0.2], atol=1e-6)

    def test_star_above_tip(self):
        npt.assert_allclose(atoms.star(_p(0.0, 2.0), 0.5, 0.4), [1.5], atol=1e-10)

    def test_triangle_centre(self):
        npt.assert_allclose(atoms.triangle(_p(0.0, 0.0), 0.6), [-0.6 / np.sqrt(3.0)], atol=1e-10)

    def test_triangle_outside(self):
        assert atoms.triangle(_p(0.0, 2.0), 0.6)[0] > 0


class TestShapes:
    @pytest.mark.parametrize("name, args", [
        ("circle", (0.5,)),
        ("plainBox", (np.array([0.5, 0.2]),)),
        ("boxAtom", (np.array([0.5, 0.2]), np.full(4, 0.05))),
        ("heart", ()),
        ("moon", (0.3, 0.5, 0.4)),
        ("star", (0.5, 0.4)),
        ("triangle", (0.5,)),
        ("coolS", ()),
        ("ellipse", (np.array([0.5, 0.3]),)),
    ])
    def test_grid_shape_and_finite(self, name, args):
        d = atoms.ATOMS[name](_grid(), *args)
        assert d.shape == (8, 8)
        assert np.isfinite(d).all()


# ===========================================================================
# Registry and GLSL library
# ===========================================================================

class TestRegistry:
    def test_editor_atoms_registered(self):
        for name in ("circle", "boxAtom", "plainBox", "heart", "moon", "star",
                     "triangle", "coolS", "ellipse"):
            assert name in atoms.ATOMS

    @pytest.mark.parametrize("name", sorted(atoms.ATOMS))
    def test_every_atom_has_glsl(self, name):
        assert re.search(rf"float {name}\s*\(", atoms.ATOMS_GLSL)

    @pytest.mark.parametrize("name", [
        "unite", "subtraction", "intersection",
        "smoothUnion", "smoothSubtraction", "smoothIntersection",
    ])
    def test_boolean_helpers_in_glsl(self, name):
        assert re.search(rf"float {name}\s*\(", atoms.BINOPS_GLSL)

    def test_glsl_has_no_comments(self):
        assert "//" not in atoms.ATOMS_GLSL
