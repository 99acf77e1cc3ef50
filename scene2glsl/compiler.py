"""Scene-expression compiler: scene AST → scalar GLSL distance expression.

:func:`compile_scene` maps every node to a :class:`CompiledExpression`, a
*deferred coordinate transformer*.  It holds an :class:`~scene2glsl.expr.Expr`
tree over a query-point placeholder and becomes shader text once applied to
the caller's coordinate expression::

    >>> from scene2glsl import compile_scene
    >>> scene = {"op": "SCALE", "args": [0.5, {"op": "circle", "args": ["1.0"]}]}
    >>> compile_scene(scene)("p")
    '0.500 * circle(p / 0.500, 1.0)'

Transforms never evaluate anything.  They substitute a new coordinate
expression into the tree of their child, so nested transforms see the
coordinate their parent already rewrote.  Distance-preserving rules:

* ``TRANSLATE`` / ``ROTATE`` are isometries: only the point changes, and
  rotations apply the *inverse* matrix to the point.
* ``SCALE`` divides the point and multiplies the returned distance back.
* ``HOLLOW`` / ``MELT`` change the metric in a controlled way (shell, dilation).
* ``BEND`` / ``DISPLACE`` are deliberate approximations (visual deformations).

Formulas for the smooth booleans follow Inigo Quilez's polynomial smooth-min:
https://iquilezles.org/articles/smin/
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import numpy as np

from . import config
from .errors import MalformedNode, UnknownOperator, format_path
from .evaluate import evaluate
from .expr import COORD, Expr, Lit, Name, Pending, as_expr, call
from .formatting import format_scalar
from .nodes import (
    AtomCall,
    BooleanKind,
    BooleanOp,
    Constant,
    SceneNode,
    Transform,
    TransformKind,
    Unknown,
    from_record,
)

logger = logging.getLogger(__name__)

__all__ = ["CompiledExpression", "UnresolvedOperator", "compile_scene", "compile"]

_Path = Tuple[int, ...]


# ===========================================================================
# Compiled artifacts
# ===========================================================================

class CompiledExpression:
    """Distance expression waiting for its query-point coordinate.

    Call it with coordinate text to obtain the final scalar expression, or
    use :meth:`evaluate` to compute the distances numerically.
    """

    def __init__(self, expr: Expr) -> None:
        self.expr = expr

    def __call__(self, coordinate: str) -> str:
        return self.expr.substitute(as_expr(coordinate)).render()

    def evaluate(self, points: np.ndarray, coordinate: str = "p") -> np.ndarray:
        """Evaluate the distance at *points* (shape ``(..., 2)``)."""
        return evaluate(self.expr.substitute(Name(coordinate)), {coordinate: points})

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.expr!r})"


class UnresolvedOperator(CompiledExpression):
    """Result of compiling an operator the compiler does not implement.

    Keeps the operator name in :attr:`op` and the compiled operands in
    :attr:`args`.  Applying it (or any expression containing it) to a
    coordinate raises :class:`~scene2glsl.errors.UnknownOperator`.
    """

    def __init__(self, op: str, args: Tuple[CompiledExpression, ...]) -> None:
        super().__init__(Pending(op))
        self.op = op
        self.args = tuple(args)

    @property
    def name(self) -> str:
        return self.op

    def __repr__(self) -> str:
        return f"UnresolvedOperator(op={self.op!r}, args={self.args!r})"


# ===========================================================================
# Transform semantics
# ===========================================================================

def _inverse_rotation(angle: Expr) -> Expr:
    """Column-major ``mat2`` rotating by ``-angle``, i.e. ``R(angle)⁻¹``."""
    c, s = call("cos", angle), call("sin", angle)
    return call("mat2", c, -s, s, c)


def _noop(param: Any, child: Expr) -> Expr:
    return child


def _translate(offset: Any, child: Expr) -> Expr:
    return child.substitute(COORD - Lit(offset))


def _rotate(angle: Any, child: Expr) -> Expr:
    return child.substitute(_inverse_rotation(Lit(format_scalar(angle))) * COORD)


def _scale(factor: Any, child: Expr) -> Expr:
    s = Lit(format_scalar(factor))
    return s * child.substitute(COORD / s)


def _hollow(radius: Any, child: Expr) -> Expr:
    return call("abs", child) - format_scalar(radius)


def _melt(radius: Any, child: Expr) -> Expr:
    return child - format_scalar(radius)


def _bend(k: Any, child: Expr) -> Expr:
    # Rotation angle grows with x; not an isometry.
    angle = Lit(format_scalar(k)) * COORD.swizzle("x")
    return child.substitute(_inverse_rotation(angle) * COORD)


def _displace(k: Any, child: Expr) -> Expr:
    kf = Lit(format_scalar(k))
    ripple = call("sin", kf * COORD.swizzle("x")) * call("sin", kf * COORD.swizzle("y"))
    return child + ripple


_TRANSFORMS: Dict[TransformKind, Callable[[Any, Expr], Expr]] = {
    TransformKind.NOOP: _noop,
    TransformKind.TRANSLATE: _translate,
    TransformKind.ROTATE: _rotate,
    TransformKind.SCALE: _scale,
    TransformKind.HOLLOW: _hollow,
    TransformKind.MELT: _melt,
    TransformKind.BEND: _bend,
    TransformKind.DISPLACE: _displace,
}


# ===========================================================================
# Boolean semantics
# ===========================================================================

def _blend_correction(k: Expr, gap: Expr) -> Expr:
    """``h*h*0.25/k`` with ``h = max(k - abs(gap), 0.0)``."""
    h = call("max", k - call("abs", gap), "0.0")
    return h * h * "0.25" / k


def _unite(a: Expr, b: Expr, k: Optional[Expr]) -> Expr:
    return call("min", a, b)


def _subtract(a: Expr, b: Expr, k: Optional[Expr]) -> Expr:
    return call("max", -a, b)


def _intersect(a: Expr, b: Expr, k: Optional[Expr]) -> Expr:
    return call("max", a, b)


def _smooth_unite(a: Expr, b: Expr, k: Expr) -> Expr:
    return call("min", a, b) - _blend_correction(k, a - b)


def _smooth_subtract(a: Expr, b: Expr, k: Expr) -> Expr:
    return -call("min", a, -b) - _blend_correction(k, a + b)


def _smooth_intersect(a: Expr, b: Expr, k: Expr) -> Expr:
    return -call("min", -a, -b) - _blend_correction(k, -a + b)


_BOOLEANS: Dict[BooleanKind, Callable[[Expr, Expr, Optional[Expr]], Expr]] = {
    BooleanKind.UNITE: _unite,
    BooleanKind.SUBTRACT: _subtract,
    BooleanKind.INTERSECT: _intersect,
    BooleanKind.SMUNITE: _smooth_unite,
    BooleanKind.SMUTRACT: _smooth_subtract,
    BooleanKind.SMUSECT: _smooth_intersect,
}


# ===========================================================================
# Tree walk
# ===========================================================================

def _compile(node: SceneNode, path: _Path, policy: str) -> CompiledExpression:
    if isinstance(node, AtomCall):
        return CompiledExpression(call(node.name, COORD, *node.args))

    if isinstance(node, Constant):
        return CompiledExpression(Lit(node.text))

    if isinstance(node, Transform):
        child = _compile(node.child, path + (1,), policy)
        try:
            expr = _TRANSFORMS[node.kind](node.param, child.expr)
        except ValueError as exc:
            raise MalformedNode(path + (0,), str(exc)) from exc
        logger.debug("%s at %s", node.kind.value, format_path(path))
        return CompiledExpression(expr)

    if isinstance(node, BooleanOp):
        a = _compile(node.left, path + (0,), policy).expr
        b = _compile(node.right, path + (1,), policy).expr
        k = None
        if node.blend is not None:
            k = _compile(node.blend, path + (2,), policy).expr
        logger.debug("%s at %s", node.kind.value, format_path(path))
        return CompiledExpression(_BOOLEANS[node.kind](a, b, k))

    if isinstance(node, Unknown):
        if policy == "raise":
            raise UnknownOperator(node.name)
        logger.warning("unknown operator %r at %s; output is not renderable", node.name, format_path(path))
        args = tuple(_compile(a, path + (i,), policy) for i, a in enumerate(node.args))
        return UnresolvedOperator(node.name, args)

    raise MalformedNode(path, f"not a scene node: {node!r}")


def compile_scene(
    node: Union[SceneNode, Mapping[str, Any]],
    *,
    unknown_operators: Optional[str] = None,
) -> CompiledExpression:
    """Compile a scene tree (node or plain record) into a deferred expression.

    Parameters
    ----------
    node:
        A :data:`~scene2glsl.nodes.SceneNode` or a ``{"op", "args"}`` record.
    unknown_operators:
        ``"defer"`` returns an :class:`UnresolvedOperator` for unrecognized
        operators and raises only when the result is rendered; ``"raise"``
        fails immediately.  Defaults to :data:`scene2glsl.config.UNKNOWN_OPERATORS`.

    Raises
    ------
    MalformedNode
        The tree is structurally invalid.
    UnknownOperator
        An unrecognized operator under the ``"raise"`` policy.
    """
    policy = unknown_operators or config.UNKNOWN_OPERATORS
    if policy not in config.UNKNOWN_OPERATOR_POLICIES:
        raise ValueError(
            f"unknown_operators must be one of {config.UNKNOWN_OPERATOR_POLICIES}, got {policy!r}"
        )
    return _compile(from_record(node), (), policy)


compile = compile_scene
