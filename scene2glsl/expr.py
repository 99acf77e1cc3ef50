"""Expression trees for generated shader code.

A compiled scene is an :class:`Expr` tree containing one or more
:class:`Coord` placeholders for the query point.  Transforms substitute a new
coordinate expression for the placeholder of their child; the final text is
produced by substituting the caller's coordinate and calling
:meth:`Expr.render`.

Rendering is precedence-aware, so operands are only parenthesized where GLSL
needs it:

* ``BinOp``: ``+ -`` (additive) and ``* /`` (multiplicative), left-assoc.
* ``Neg``: unary minus; ``-(-x)`` never collapses into ``--x``.
* ``Swizzle``: ``.x`` / ``.xy`` postfix selection.
* ``Lit``: verbatim text.  Single tokens, calls and fully parenthesized
  text count as atoms; anything else is wrapped when used as an operand.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from .errors import UnknownOperator

__all__ = [
    "Expr", "Coord", "Lit", "Name", "Number", "Call", "BinOp", "Neg", "Swizzle", "Pending",
    "COORD", "as_expr", "call", "is_atomic",
    "LOWEST", "ADDITIVE", "MULTIPLICATIVE", "UNARY", "POSTFIX", "ATOM",
]

# ---------------------------------------------------------------------------
# Precedence levels (higher binds tighter)
# ---------------------------------------------------------------------------
LOWEST = 0
ADDITIVE = 10
MULTIPLICATIVE = 20
UNARY = 30
POSTFIX = 40
ATOM = 50

_TOKEN_RE = re.compile(
    r"(?:[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*"      # identifier, optional swizzles
    r"|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)$"  # unsigned number
)
_CALL_HEAD_RE = re.compile(r"[A-Za-z_]\w*\(")


def _matching_paren(text: str, start: int) -> int:
    """Index of the ``)`` closing the ``(`` at *start*, or ``-1``."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def is_atomic(text: str) -> bool:
    """True if *text* can be used as an operand without parentheses."""
    text = text.strip()
    if not text:
        return False
    if _TOKEN_RE.match(text):
        return True
    head = _CALL_HEAD_RE.match(text)
    if head:
        return _matching_paren(text, head.end() - 1) == len(text) - 1
    if text[0] == "(":
        return _matching_paren(text, 0) == len(text) - 1
    return False


# ===========================================================================
# Base class
# ===========================================================================

class Expr:
    """Base class for shader expression nodes."""

    precedence: int = ATOM

    def render(self) -> str:
        raise NotImplementedError

    def substitute(self, coord: "Expr") -> "Expr":
        """Return a copy with every :class:`Coord` replaced by *coord*."""
        return self

    def children(self) -> Tuple["Expr", ...]:
        return ()

    def walk(self) -> Iterator["Expr"]:
        """Pre-order iteration over this node and its descendants."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __str__(self) -> str:
        return self.render()

    # Builder sugar so the compiler reads like the math it emits.

    def __add__(self, other: "ExprLike") -> "BinOp":
        return BinOp("+", self, as_expr(other))

    def __sub__(self, other: "ExprLike") -> "BinOp":
        return BinOp("-", self, as_expr(other))

    def __mul__(self, other: "ExprLike") -> "BinOp":
        return BinOp("*", self, as_expr(other))

    def __truediv__(self, other: "ExprLike") -> "BinOp":
        return BinOp("/", self, as_expr(other))

    def __rmul__(self, other: "ExprLike") -> "BinOp":
        return BinOp("*", as_expr(other), self)

    def __rsub__(self, other: "ExprLike") -> "BinOp":
        return BinOp("-", as_expr(other), self)

    def __neg__(self) -> "Neg":
        return Neg(self)

    def swizzle(self, fields: str) -> "Swizzle":
        return Swizzle(self, fields)


ExprLike = Union[Expr, str]


def _operand(expr: Expr, minimum: int) -> str:
    text = expr.render()
    return f"({text})" if expr.precedence < minimum else text


# ===========================================================================
# Leaves
# ===========================================================================

@dataclass(frozen=True)
class Coord(Expr):
    """Placeholder for the query point; renders as *label* for inspection."""

    label: str = "x"

    def render(self) -> str:
        return self.label

    def substitute(self, coord: Expr) -> Expr:
        return coord


COORD = Coord()


@dataclass(frozen=True)
class Lit(Expr):
    """Verbatim shader text (atom arguments, formatted numbers, coordinates)."""

    text: str

    @property
    def precedence(self) -> int:  # type: ignore[override]
        return ATOM if is_atomic(self.text) else LOWEST

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class Name(Expr):
    """A variable reference produced by the expression parser."""

    ident: str

    def render(self) -> str:
        return self.ident


@dataclass(frozen=True)
class Number(Expr):
    """An unsigned numeric literal produced by the expression parser."""

    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class Pending(Expr):
    """Stand-in for an operator the compiler could not translate.

    Rendering raises :class:`~scene2glsl.errors.UnknownOperator`, so an
    unknown operator never leaks into shader text.
    """

    name: str

    def render(self) -> str:
        raise UnknownOperator(self.name)


# ===========================================================================
# Interior nodes
# ===========================================================================

@dataclass(frozen=True)
class Call(Expr):
    """Function application ``name(arg, ...)``."""

    name: str
    args: Tuple[Expr, ...] = ()

    def render(self) -> str:
        return f"{self.name}({', '.join(a.render() for a in self.args)})"

    def substitute(self, coord: Expr) -> Expr:
        return Call(self.name, tuple(a.substitute(coord) for a in self.args))

    def children(self) -> Tuple[Expr, ...]:
        return self.args


@dataclass(frozen=True)
class BinOp(Expr):
    """Left-associative arithmetic ``lhs op rhs``."""

    op: str
    lhs: Expr
    rhs: Expr

    @property
    def precedence(self) -> int:  # type: ignore[override]
        return MULTIPLICATIVE if self.op in ("*", "/") else ADDITIVE

    def render(self) -> str:
        prec = self.precedence
        return f"{_operand(self.lhs, prec)} {self.op} {_operand(self.rhs, prec + 1)}"

    def substitute(self, coord: Expr) -> Expr:
        return BinOp(self.op, self.lhs.substitute(coord), self.rhs.substitute(coord))

    def children(self) -> Tuple[Expr, ...]:
        return (self.lhs, self.rhs)


@dataclass(frozen=True)
class Neg(Expr):
    """Unary minus."""

    operand: Expr
    precedence = UNARY

    def render(self) -> str:
        return "-" + _operand(self.operand, UNARY + 1)

    def substitute(self, coord: Expr) -> Expr:
        return Neg(self.operand.substitute(coord))

    def children(self) -> Tuple[Expr, ...]:
        return (self.operand,)


@dataclass(frozen=True)
class Swizzle(Expr):
    """Component selection ``operand.fields``."""

    operand: Expr
    fields: str
    precedence = POSTFIX

    def render(self) -> str:
        return f"{_operand(self.operand, POSTFIX)}.{self.fields}"

    def substitute(self, coord: Expr) -> Expr:
        return Swizzle(self.operand.substitute(coord), self.fields)

    def children(self) -> Tuple[Expr, ...]:
        return (self.operand,)


# ===========================================================================
# Helpers
# ===========================================================================

def as_expr(value: ExprLike) -> Expr:
    """Wrap plain text as :class:`Lit`; pass expressions through."""
    if isinstance(value, Expr):
        return value
    if isinstance(value, str):
        return Lit(value)
    raise TypeError(f"cannot use {value!r} as a shader expression")


def call(name: str, *args: ExprLike) -> Call:
    """Shorthand for ``Call(name, (as_expr(a), ...))``."""
    return Call(name, tuple(as_expr(a) for a in args))
