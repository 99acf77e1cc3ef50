"""Numeric evaluation of generated distance expressions.

The compiler only produces text.  To check that text (and to sample scenes
on a grid) this module parses the GLSL expression subset the compiler emits
and evaluates it with numpy:

* literals, names, calls, unary minus, ``+ - * /``, swizzles, parentheses;
* GLSL value kinds ``float``, ``vec2``..``vec4`` and column-major ``mat2``
  with matrix-vector products and float/vector broadcasting;
* the builtins listed in :data:`BUILTINS` plus every atom in
  :data:`scene2glsl.atoms.ATOMS`.

Example::

    >>> import numpy as np
    >>> evaluate("circle(p - vec2(1.0, 0.0), 0.5)", {"p": np.array([[1.0, 0.0]])})
    array([-0.5])
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

import numpy as np
from lark import Lark, Token, Tree
from lark.exceptions import LarkError

from ._common import _F, clamp
from .atoms import ATOMS
from .errors import EvaluationError, UnknownOperator
from .expr import BinOp, Call, Coord, Expr, Lit, Name, Neg, Number, Pending, Swizzle

__all__ = ["EXPRESSION_GRAMMAR", "BUILTINS", "parse_expression", "evaluate"]


EXPRESSION_GRAMMAR = r"""
    ?start: sum

    ?sum: product
        | sum "+" product       -> add
        | sum "-" product       -> sub

    ?product: unary
            | product "*" unary -> mul
            | product "/" unary -> div

    ?unary: postfix
          | "-" unary           -> neg
          | "+" unary

    ?postfix: primary
            | postfix "." CNAME -> swizzle

    ?primary: NUMBER                          -> number
            | CNAME                           -> name
            | CNAME "(" ")"                   -> call
            | CNAME "(" sum ("," sum)* ")"    -> call
            | "(" sum ")"

    %import common.CNAME
    %import common.NUMBER
    %import common.WS
    %ignore WS
"""

_BINARY = {"add": "+", "sub": "-", "mul": "*", "div": "/"}


# ===========================================================================
# Parsing
# ===========================================================================

@lru_cache(maxsize=None)
def _parser() -> Lark:
    return Lark(EXPRESSION_GRAMMAR, parser="lalr")


def _build(node: Union[Tree, Token]) -> Expr:
    """Turn a parse tree into an :class:`~scene2glsl.expr.Expr`."""
    if isinstance(node, Token):
        raise EvaluationError(f"unexpected token {node!r}")
    data = node.data
    children = node.children
    if data == "number":
        return Number(str(children[0]))
    if data == "name":
        return Name(str(children[0]))
    if data == "call":
        return Call(str(children[0]), tuple(_build(c) for c in children[1:]))
    if data in _BINARY:
        return BinOp(_BINARY[data], _build(children[0]), _build(children[1]))
    if data == "neg":
        return Neg(_build(children[0]))
    if data == "swizzle":
        return Swizzle(_build(children[0]), str(children[1]))
    raise EvaluationError(f"unexpected parse node {data!r}")


@lru_cache(maxsize=1024)
def parse_expression(text: str) -> Expr:
    """Parse GLSL expression *text* into an expression tree."""
    try:
        tree = _parser().parse(text)
    except LarkError as exc:
        raise EvaluationError(f"cannot parse expression {text!r}: {exc}") from exc
    if isinstance(tree, Token):
        raise EvaluationError(f"cannot parse expression {text!r}")
    return _build(tree)


# ===========================================================================
# Typed values
# ===========================================================================

class _Value(NamedTuple):
    kind: str   # "float", "vec2", "vec3", "vec4" or "mat2"
    data: _F


def _float(data: Any) -> _Value:
    return _Value("float", np.asarray(data, dtype=float))


def _vec(data: _F) -> _Value:
    return _Value(f"vec{data.shape[-1]}", data)


def _size(v: _Value) -> int:
    return int(v.kind[3]) if v.kind.startswith("vec") else 0


def _binding(name: str, value: Any) -> _Value:
    if isinstance(value, _Value):
        return value
    arr = np.asarray(value, dtype=float)
    if arr.ndim == 0:
        return _Value("float", arr)
    if arr.shape[-1] in (2, 3, 4):
        return _vec(arr)
    raise EvaluationError(f"binding {name!r} must be a float or a (..., 2..4) vector array")


def _unify(*values: _Value):
    """Common kind of componentwise operands; floats broadcast over vectors."""
    if any(v.kind == "mat2" for v in values):
        raise EvaluationError("componentwise operation on mat2")
    sizes = {_size(v) for v in values if v.kind != "float"}
    if len(sizes) > 1:
        raise EvaluationError(f"mismatched vector sizes {sorted(sizes)}")
    if not sizes:
        return "float", [v.data for v in values]
    n = sizes.pop()
    return f"vec{n}", [v.data[..., None] if v.kind == "float" else v.data for v in values]


_ARITH: Dict[str, Callable[[_F, _F], _F]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
}


def _arith(op: str, a: _Value, b: _Value) -> _Value:
    if op == "*":
        if a.kind == "mat2" and b.kind == "vec2":
            return _Value("vec2", np.matmul(a.data, b.data[..., None])[..., 0])
        if a.kind == "vec2" and b.kind == "mat2":
            return _Value("vec2", np.matmul(np.swapaxes(b.data, -1, -2), a.data[..., None])[..., 0])
        if a.kind == "mat2" and b.kind == "mat2":
            return _Value("mat2", np.matmul(a.data, b.data))
        if a.kind == "mat2" and b.kind == "float":
            return _Value("mat2", a.data * b.data[..., None, None])
        if a.kind == "float" and b.kind == "mat2":
            return _Value("mat2", a.data[..., None, None] * b.data)
    kind, (x, y) = _unify(a, b)
    with np.errstate(divide="ignore", invalid="ignore"):
        return _Value(kind, _ARITH[op](x, y))


# ===========================================================================
# Builtins
# ===========================================================================

def _glsl_round(x: _F) -> _F:
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def _mix(a: _F, b: _F, t: _F) -> _F:
    return a * (1.0 - t) + b * t


def _smoothstep(e0: _F, e1: _F, x: _F) -> _F:
    t = clamp((x - e0) / (e1 - e0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


_COMPONENTWISE: Dict[str, Tuple[int, Callable[..., _F]]] = {
    "abs": (1, np.abs),
    "sign": (1, np.sign),
    "sin": (1, np.sin),
    "cos": (1, np.cos),
    "sqrt": (1, np.sqrt),
    "floor": (1, np.floor),
    "round": (1, _glsl_round),
    "acos": (1, np.arccos),
    "min": (2, np.minimum),
    "max": (2, np.maximum),
    "pow": (2, np.power),
    "clamp": (3, clamp),
    "mix": (3, _mix),
    "smoothstep": (3, _smoothstep),
}


def _length(args: List[_Value]) -> _Value:
    (v,) = args
    if v.kind == "float":
        return _float(np.abs(v.data))
    return _float(np.linalg.norm(v.data, axis=-1))


def _dot(args: List[_Value]) -> _Value:
    a, b = args
    if a.kind != b.kind or a.kind == "mat2":
        raise EvaluationError(f"dot({a.kind}, {b.kind})")
    if a.kind == "float":
        return _float(a.data * b.data)
    return _float(np.sum(a.data * b.data, axis=-1))


def _dot2(args: List[_Value]) -> _Value:
    (v,) = args
    return _dot([v, v])


def _constructor(n: int) -> Callable[[List[_Value]], _Value]:
    def build(args: List[_Value]) -> _Value:
        if len(args) == 1 and args[0].kind == "float":
            args = args * n
        parts: List[_F] = []
        for a in args:
            if a.kind == "float":
                parts.append(a.data)
            elif a.kind.startswith("vec"):
                parts.extend(a.data[..., i] for i in range(_size(a)))
            else:
                raise EvaluationError(f"vec{n}() does not accept {a.kind}")
        if len(parts) != n:
            raise EvaluationError(f"vec{n}() needs {n} components, got {len(parts)}")
        return _vec(np.stack(np.broadcast_arrays(*parts), axis=-1))
    return build


def _mat2(args: List[_Value]) -> _Value:
    # Column-major: mat2(a, b, c, d) has columns (a, b) and (c, d).
    cols = _constructor(4)(args).data
    a, b, c, d = (cols[..., i] for i in range(4))
    rows = np.stack([np.stack([a, c], axis=-1), np.stack([b, d], axis=-1)], axis=-2)
    return _Value("mat2", rows)


def _inverse(args: List[_Value]) -> _Value:
    (m,) = args
    if m.kind != "mat2":
        raise EvaluationError(f"inverse({m.kind})")
    return _Value("mat2", np.linalg.inv(m.data))


BUILTINS: Dict[str, Callable[[List[_Value]], _Value]] = {
    "length": _length,
    "dot": _dot,
    "dot2": _dot2,
    "vec2": _constructor(2),
    "vec3": _constructor(3),
    "vec4": _constructor(4),
    "mat2": _mat2,
    "inverse": _inverse,
}


def _call(name: str, args: List[_Value]) -> _Value:
    if name in _COMPONENTWISE:
        arity, fn = _COMPONENTWISE[name]
        if len(args) != arity:
            raise EvaluationError(f"{name}() takes {arity} arguments, got {len(args)}")
        kind, data = _unify(*args)
        with np.errstate(invalid="ignore", divide="ignore"):
            return _Value(kind, fn(*data))
    if name in BUILTINS:
        try:
            return BUILTINS[name](args)
        except ValueError as exc:
            # wrong number of arguments when unpacking
            raise EvaluationError(f"{name}: {exc}") from exc
    if name in ATOMS:
        with np.errstate(invalid="ignore", divide="ignore"):
            try:
                return _float(ATOMS[name](*(a.data for a in args)))
            except TypeError as exc:
                raise EvaluationError(f"{name}: {exc}") from exc
    raise EvaluationError(f"unknown function {name!r}")


# ===========================================================================
# Evaluation
# ===========================================================================

_SWIZZLE = {c: i for i, c in enumerate("xyzw")}
_SWIZZLE.update({c: i for i, c in enumerate("rgba")})


def _swizzle(v: _Value, fields: str) -> _Value:
    n = _size(v)
    try:
        idx = [_SWIZZLE[c] for c in fields]
    except KeyError:
        raise EvaluationError(f"invalid swizzle .{fields}") from None
    if not n or max(idx) >= n or len(idx) > 4:
        raise EvaluationError(f"cannot swizzle {v.kind} with .{fields}")
    if len(idx) == 1:
        return _float(v.data[..., idx[0]])
    return _vec(v.data[..., idx])


def _eval(expr: Expr, env: Mapping[str, _Value]) -> _Value:
    if isinstance(expr, Number):
        return _float(float(expr.text))
    if isinstance(expr, Name):
        if expr.ident not in env:
            raise EvaluationError(f"unbound name {expr.ident!r}")
        return env[expr.ident]
    if isinstance(expr, Lit):
        return _eval(parse_expression(expr.text), env)
    if isinstance(expr, Call):
        return _call(expr.name, [_eval(a, env) for a in expr.args])
    if isinstance(expr, BinOp):
        return _arith(expr.op, _eval(expr.lhs, env), _eval(expr.rhs, env))
    if isinstance(expr, Neg):
        v = _eval(expr.operand, env)
        return _Value(v.kind, -v.data)
    if isinstance(expr, Swizzle):
        return _swizzle(_eval(expr.operand, env), expr.fields)
    if isinstance(expr, Pending):
        raise UnknownOperator(expr.name)
    if isinstance(expr, Coord):
        raise EvaluationError("expression still contains an unbound coordinate")
    raise EvaluationError(f"cannot evaluate {expr!r}")


def evaluate(expression: Union[Expr, str], bindings: Optional[Mapping[str, Any]] = None) -> _F:
    """Evaluate *expression* with numpy.

    Parameters
    ----------
    expression:
        GLSL expression text or an :class:`~scene2glsl.expr.Expr` tree.
    bindings:
        Maps names to values.  Python floats and 0-d arrays are ``float``;
        arrays whose last axis has length 2, 3 or 4 are vectors.

    Returns
    -------
    numpy.ndarray
        The value's data; for a scalar expression over ``(..., 2)`` points
        the shape is ``(...,)``.

    Raises
    ------
    EvaluationError
        Unparsable text, unbound names, unknown functions or type mismatches.
    UnknownOperator
        The expression contains an unresolved operator.
    """
    expr = parse_expression(expression) if isinstance(expression, str) else expression
    env = {name: _binding(name, value) for name, value in (bindings or {}).items()}
    return _eval(expr, env).data
