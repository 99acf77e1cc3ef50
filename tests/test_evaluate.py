"""Tests for parsing and numeric evaluation of shader expressions."""

import numpy as np
import numpy.testing as npt
import pytest

from scene2glsl import EvaluationError, UnknownOperator, compile_scene
from scene2glsl.evaluate import evaluate, parse_expression
from scene2glsl.expr import BinOp, Call, Name, Neg, Number, Pending, Swizzle


def _p(*xy) -> np.ndarray:
    """Single 2-D point as shape ``(1, 2)``."""
    return np.array([list(xy)], dtype=float)


# ===========================================================================
# Parsing
# ===========================================================================

class TestParse:
    def test_precedence(self):
        assert parse_expression("a + b * c") == BinOp("+", Name("a"), BinOp("*", Name("b"), Name("c")))

    def test_left_associative(self):
        assert parse_expression("a - b - c") == BinOp("-", BinOp("-", Name("a"), Name("b")), Name("c"))

    def test_unary_minus_binds_tighter_than_product(self):
        assert parse_expression("-a * b") == BinOp("*", Neg(Name("a")), Name("b"))

    def test_call_and_swizzle(self):
        expected = Call("sin", (BinOp("*", Number("3.000"), Swizzle(Name("p"), "x")),))
        assert parse_expression("sin(3.000 * p.x)") == expected

    def test_call_without_args(self):
        assert parse_expression("heart()") == Call("heart", ())

    def test_parenthesized_swizzle(self):
        assert parse_expression("(a + b).y") == Swizzle(BinOp("+", Name("a"), Name("b")), "y")

    @pytest.mark.parametrize("text", [
        "circle(p, 1.0)",
        "2.000 * circle((p - d) / 2.000, 1.0)",
        "max(-(abs(circle(p, 1.0)) - 0.100), heart(p))",
        "circle(mat2(cos(20.000), -sin(20.000), sin(20.000), cos(20.000)) * p, 1.0)",
    ])
    def test_render_reproduces_text(self, text):
        assert parse_expression(text).render() == text

    def test_compiled_output_parses(self):
        scene = {
            "op": "SMUSECT",
            "args": [
                {"op": "BEND", "args": [0.5, {"op": "heart", "args": []}]},
                {"op": "DISPLACE", "args": [2, {"op": "circle", "args": ["0.4"]}]},
                0.1,
            ],
        }
        text = compile_scene(scene)("center")
        assert parse_expression(text).render() == text

    @pytest.mark.parametrize("text", ["", "a +", "f(,)", "1.0 2.0", "a $ b"])
    def test_parse_errors(self, text):
        with pytest.raises(EvaluationError):
            parse_expression(text)


# ===========================================================================
# Evaluation
# ===========================================================================

class TestEvaluate:
    def test_scalar_arithmetic(self):
        npt.assert_allclose(evaluate("1.0 + 2.0 * 3.0 - 4.0 / 2.0"), 5.0)

    def test_vector_constructor_and_swizzle(self):
        npt.assert_allclose(evaluate("vec2(3.0, 4.0).y"), 4.0)
        npt.assert_allclose(evaluate("vec4(vec2(1.0, 2.0), 3.0, 4.0).zw"), [3.0, 4.0])

    def test_vec_from_single_float(self):
        npt.assert_allclose(evaluate("vec3(2.0)"), [2.0, 2.0, 2.0])

    def test_length_and_dot(self):
        npt.assert_allclose(evaluate("length(vec2(3.0, 4.0))"), 5.0)
        npt.assert_allclose(evaluate("dot(vec2(1.0, 2.0), vec2(3.0, 4.0))"), 11.0)
        npt.assert_allclose(evaluate("dot2(vec2(1.0, 2.0))"), 5.0)

    def test_scalar_broadcasts_over_vector(self):
        npt.assert_allclose(evaluate("vec2(1.0, 2.0) * 2.0 - 1.0"), [1.0, 3.0])

    def test_mat2_is_column_major(self):
        # first column is (1, 2), second column is (3, 4)
        npt.assert_allclose(evaluate("mat2(1.0, 2.0, 3.0, 4.0) * vec2(1.0, 0.0)"), [1.0, 2.0])
        npt.assert_allclose(evaluate("mat2(1.0, 2.0, 3.0, 4.0) * vec2(0.0, 1.0)"), [3.0, 4.0])

    def test_row_vector_times_matrix(self):
        npt.assert_allclose(evaluate("vec2(1.0, 0.0) * mat2(1.0, 2.0, 3.0, 4.0)"), [1.0, 3.0])

    def test_inverse_rotation_forms_agree(self):
        direct = evaluate("mat2(cos(0.3), -sin(0.3), sin(0.3), cos(0.3)) * p", {"p": _p(0.2, 0.7)})
        inverted = evaluate(
            "inverse(mat2(cos(0.3), sin(0.3), -sin(0.3), cos(0.3))) * p", {"p": _p(0.2, 0.7)}
        )
        npt.assert_allclose(direct, inverted, atol=1e-12)

    def test_rotation_matrix_rotates_backwards(self):
        q = evaluate("mat2(cos(a), -sin(a), sin(a), cos(a)) * p", {"a": np.pi / 2, "p": _p(1.0, 0.0)})
        npt.assert_allclose(q, [[0.0, -1.0]], atol=1e-12)

    def test_componentwise_builtins(self):
        npt.assert_allclose(evaluate("abs(vec2(-1.0, 2.0))"), [1.0, 2.0])
        npt.assert_allclose(evaluate("max(vec2(-1.0, 2.0), 0.0)"), [0.0, 2.0])
        npt.assert_allclose(evaluate("clamp(1.5, 0.0, 1.0)"), 1.0)
        npt.assert_allclose(evaluate("mix(0.0, 4.0, 0.25)"), 1.0)
        npt.assert_allclose(evaluate("smoothstep(0.0, 1.0, 0.5)"), 0.5)
        npt.assert_allclose(evaluate("round(-2.5)"), -3.0)
        npt.assert_allclose(evaluate("pow(2.0, 3.0)"), 8.0)

    def test_point_bindings(self):
        pts = np.array([[0.0, 0.0], [2.0, 0.0], [0.0, 3.0]])
        npt.assert_allclose(evaluate("circle(p, 1.0)", {"p": pts}), [-1.0, 1.0, 2.0])

    def test_per_point_parameters(self):
        pts = np.array([[1.0, 0.0], [3.0, 0.0]])
        npt.assert_allclose(evaluate("circle(p, p.x)", {"p": pts}), [0.0, 0.0])

    def test_grid_shape_preserved(self):
        grid = np.zeros((4, 5, 2))
        assert evaluate("heart(p)", {"p": grid}).shape == (4, 5)

    def test_accepts_expr_tree(self):
        expr = BinOp("+", Name("x"), Number("1.0"))
        npt.assert_allclose(evaluate(expr, {"x": 2.0}), 3.0)


class TestEvaluateErrors:
    def test_unbound_name(self):
        with pytest.raises(EvaluationError, match="unbound"):
            evaluate("q + 1.0")

    def test_unknown_function(self):
        with pytest.raises(EvaluationError, match="unknown function"):
            evaluate("wobble(1.0)")

    def test_mismatched_vectors(self):
        with pytest.raises(EvaluationError):
            evaluate("vec2(1.0, 2.0) + vec3(1.0)")

    def test_wrong_component_count(self):
        with pytest.raises(EvaluationError):
            evaluate("vec2(1.0, 2.0, 3.0)")

    def test_wrong_builtin_arity(self):
        with pytest.raises(EvaluationError):
            evaluate("min(1.0, 2.0, 3.0)")

    def test_invalid_swizzle(self):
        with pytest.raises(EvaluationError):
            evaluate("vec2(1.0, 2.0).z")
        with pytest.raises(EvaluationError):
            evaluate("(1.0).x")

    def test_bad_binding(self):
        with pytest.raises(EvaluationError):
            evaluate("p", {"p": np.zeros((3, 7))})

    def test_pending_operator(self):
        with pytest.raises(UnknownOperator):
            evaluate(Pending("FOOBAR"))
