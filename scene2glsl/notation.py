"""Plain GLSL notation for generic ``{op, args}`` trees.

Unlike :mod:`scene2glsl.compiler` this serializer knows nothing about
coordinates or scene semantics: it prints a record tree as infix arithmetic
and function calls, e.g. for showing an editor value in a tooltip::

    >>> to_glsl({"op": "+", "args": [1, {"op": "vec2", "args": ["a", 2.5]}]})
    '(1.00 + vec2(a, 2.50))'
"""

from __future__ import annotations

from typing import Any

from .config import NOTATION_DECIMALS
from .errors import ArityError
from .formatting import format_fixed

__all__ = ["INFIX_OPERATORS", "to_glsl"]

INFIX_OPERATORS = frozenset(
    ["+", "-", "*", "/", "==", "!=", "<", ">", "<=", ">=", "&&", "||"]
)


def _call(op: str, args: Any) -> str:
    return f"{op}({', '.join(to_glsl(a) for a in args)})"


def to_glsl(node: Any) -> str:
    """Serialize *node* to GLSL text.

    Strings are emitted verbatim, numbers with two decimals, ``None`` as
    ``null`` and booleans as ``true``/``false``.  Records with an infix
    operator render as ``(a op b)``; every other record, vector
    constructors included, is a function call.

    Raises
    ------
    ArityError
        An infix operator does not have exactly two operands.
    """
    if isinstance(node, str):
        return node
    if isinstance(node, bool):
        return "true" if node else "false"
    if isinstance(node, (int, float)):
        return format_fixed(node, NOTATION_DECIMALS)
    if node is None:
        return "null"
    if not isinstance(node, dict) or "op" not in node:
        return str(node)

    op = node["op"]
    args = list(node.get("args", ()))
    if op in INFIX_OPERATORS:
        if len(args) != 2:
            raise ArityError(op, 2, len(args))
        return f"({to_glsl(args[0])} {op} {to_glsl(args[1])})"

    return _call(op, args)
